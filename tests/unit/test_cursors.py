# Copyright DataStax, Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
# http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

from __future__ import annotations

from typing import Any, Dict, List

import pytest
from pytest_httpserver import HTTPServer

from dataapi.cursors import CursorState
from dataapi.cursors.distinct import (
    DistinctCollector,
    _reduce_distinct_key_to_safe,
    _reduce_distinct_key_to_shallow_safe,
)
from dataapi.exceptions import CursorException, UnexpectedDataAPIResponseException
from dataapi.utils.ejson import preprocess_collection_payload_value
from dataapi.utils.request_tools import HttpMethod

from ..conftest import (
    DefaultAsyncCollection,
    DefaultAsyncTable,
    DefaultCollection,
    DefaultTable,
    json_handler,
)

COLLECTION_PATH = "/v1/keyspace/collection"
TABLE_PATH = "/v1/keyspace/table"
PAGE_SIZE = 20


def _paged_find_responder(
    documents: List[Dict[str, Any]],
    payloads: List[Dict[str, Any]],
    sort_vector: List[float] | None = None,
) -> Any:
    """Serve `documents` in pages of PAGE_SIZE, the page state being an offset."""

    def _responder(payload: Dict[str, Any]) -> Dict[str, Any]:
        payloads.append(payload)
        page_state = payload["find"].get("options", {}).get("pageState")
        start = int(page_state) if page_state else 0
        end = start + PAGE_SIZE
        response: Dict[str, Any] = {
            "data": {
                "documents": documents[start:end],
                "nextPageState": str(end) if end < len(documents) else None,
            }
        }
        if sort_vector is not None:
            response["status"] = {"sortVector": sort_vector}
        return response

    return _responder


def _make_documents(n: int) -> List[Dict[str, Any]]:
    return [{"_id": f"d{i}", "seq": i} for i in range(n)]


class TestCollectionCursorSync:
    @pytest.mark.describe("test of cursor paging over two pages, sync")
    def test_cursor_two_pages_sync(
        self,
        httpserver: HTTPServer,
        mock_collection: DefaultCollection,
    ) -> None:
        payloads: List[Dict[str, Any]] = []
        httpserver.expect_request(
            COLLECTION_PATH,
            method=HttpMethod.POST,
        ).respond_with_handler(
            json_handler(_paged_find_responder(_make_documents(25), payloads))
        )

        cursor = mock_collection.find({"seq": {"$gte": 0}})
        documents = cursor.to_list()
        assert [doc["seq"] for doc in documents] == list(range(25))
        assert cursor.pages_retrieved == 2
        assert cursor.consumed == 25
        assert cursor.state == CursorState.CLOSED
        assert payloads == [
            {"find": {"filter": {"seq": {"$gte": 0}}}},
            {"find": {"filter": {"seq": {"$gte": 0}}, "options": {"pageState": "20"}}},
        ]

    @pytest.mark.describe("test of cursor laziness, sync")
    def test_cursor_laziness_sync(
        self,
        httpserver: HTTPServer,
        mock_collection: DefaultCollection,
    ) -> None:
        payloads: List[Dict[str, Any]] = []
        httpserver.expect_request(
            COLLECTION_PATH,
            method=HttpMethod.POST,
        ).respond_with_handler(
            json_handler(_paged_find_responder(_make_documents(3), payloads))
        )

        cursor = mock_collection.find()
        assert len(httpserver.log) == 0
        assert cursor.state == CursorState.IDLE

        assert cursor.has_next()
        # has_next fetches, but does not start, the cursor
        assert cursor.state == CursorState.IDLE
        assert cursor.pages_retrieved == 1
        assert cursor.buffered_count == 3

        first = next(cursor)
        assert first["seq"] == 0
        assert cursor.state == CursorState.STARTED
        assert cursor.buffered_count == 2
        assert [doc["seq"] for doc in cursor.to_list()] == [1, 2]
        assert cursor.consumed == 3
        assert len(payloads) == 1
        assert payloads[0] == {"find": {}}
        assert not cursor.has_next()

    @pytest.mark.describe("test of cursor state transitions, sync")
    def test_cursor_state_transitions_sync(
        self,
        httpserver: HTTPServer,
        mock_collection: DefaultCollection,
    ) -> None:
        payloads: List[Dict[str, Any]] = []
        httpserver.expect_request(
            COLLECTION_PATH,
            method=HttpMethod.POST,
        ).respond_with_handler(
            json_handler(_paged_find_responder(_make_documents(5), payloads))
        )

        cursor = mock_collection.find({})
        builder_cursor = cursor.filter({"a": 1}).project({"a": True}).sort(
            {"a": 1}
        ).limit(3).skip(1).include_similarity().include_sort_vector()
        assert builder_cursor.state == CursorState.IDLE
        assert len(httpserver.log) == 0

        next(cursor)
        with pytest.raises(CursorException) as exc:
            cursor.filter({"b": 2})
        assert exc.value.cursor_state == "started"
        with pytest.raises(CursorException):
            cursor.map(lambda doc: doc)

        cloned = cursor.clone()
        assert cloned.state == CursorState.IDLE
        assert cloned.consumed == 0

        cursor.close()
        assert cursor.state == CursorState.CLOSED
        assert cursor.buffered_count == 0
        assert not cursor.has_next()
        with pytest.raises(CursorException):
            cursor.to_list()
        with pytest.raises(CursorException):
            iter(cursor)

        cursor.rewind()
        assert cursor.state == CursorState.IDLE
        assert cursor.consumed == 0
        assert len(cursor.to_list()) == 5

    @pytest.mark.describe("test of cursor builder payload, sync")
    def test_cursor_builder_payload_sync(
        self,
        httpserver: HTTPServer,
        mock_collection: DefaultCollection,
    ) -> None:
        payloads: List[Dict[str, Any]] = []
        httpserver.expect_request(
            COLLECTION_PATH,
            method=HttpMethod.POST,
        ).respond_with_handler(
            json_handler(_paged_find_responder(_make_documents(2), payloads))
        )

        mock_collection.find().filter({"a": 1}).project(["a", "b"]).sort(
            {"a": 1}
        ).limit(10).skip(2).include_similarity().to_list()
        assert payloads == [
            {
                "find": {
                    "filter": {"a": 1},
                    "projection": {"a": True, "b": True},
                    "sort": {"a": 1},
                    "options": {"limit": 10, "skip": 2, "includeSimilarity": True},
                }
            }
        ]

    @pytest.mark.describe("test of cursor map, for_each and consume_buffer, sync")
    def test_cursor_map_for_each_sync(
        self,
        httpserver: HTTPServer,
        mock_collection: DefaultCollection,
    ) -> None:
        payloads: List[Dict[str, Any]] = []
        httpserver.expect_request(
            COLLECTION_PATH,
            method=HttpMethod.POST,
        ).respond_with_handler(
            json_handler(_paged_find_responder(_make_documents(6), payloads))
        )

        mapped = mock_collection.find().map(lambda doc: doc["seq"]).map(
            lambda seq: seq * 10
        )
        assert mapped.to_list() == [0, 10, 20, 30, 40, 50]

        seen: List[int] = []

        def _stop_at_two(doc: Dict[str, Any]) -> bool:
            seen.append(doc["seq"])
            return doc["seq"] < 2

        cursor = mock_collection.find()
        cursor.for_each(_stop_at_two)
        assert seen == [0, 1, 2]
        assert cursor.consumed == 3
        assert cursor.state == CursorState.STARTED

        raw_items = cursor.consume_buffer(2)
        assert [doc["seq"] for doc in raw_items] == [3, 4]
        assert cursor.consumed == 5
        assert [doc["seq"] for doc in cursor] == [5]
        assert cursor.consume_buffer() == []
        with pytest.raises(ValueError):
            cursor.consume_buffer(-1)

    @pytest.mark.describe("test of cursor sort vector, sync")
    def test_cursor_sort_vector_sync(
        self,
        httpserver: HTTPServer,
        mock_collection: DefaultCollection,
    ) -> None:
        payloads: List[Dict[str, Any]] = []
        httpserver.expect_request(
            COLLECTION_PATH,
            method=HttpMethod.POST,
        ).respond_with_handler(
            json_handler(
                _paged_find_responder(_make_documents(2), payloads, sort_vector=[1, 2])
            )
        )
        cursor = mock_collection.find(
            sort={"$vector": [0.1, 0.2]}, include_sort_vector=True
        )
        assert cursor.get_sort_vector() == [1.0, 2.0]
        assert payloads[0]["find"]["options"] == {"includeSortVector": True}

    @pytest.mark.describe("test of cursor with a faulty response, sync")
    def test_cursor_faulty_response_sync(
        self,
        httpserver: HTTPServer,
        mock_collection: DefaultCollection,
    ) -> None:
        httpserver.expect_oneshot_request(
            COLLECTION_PATH,
            method=HttpMethod.POST,
        ).respond_with_json({"data": {}})
        with pytest.raises(UnexpectedDataAPIResponseException):
            mock_collection.find().to_list()

    @pytest.mark.describe("test of find_page, sync")
    def test_find_page_sync(
        self,
        httpserver: HTTPServer,
        mock_collection: DefaultCollection,
    ) -> None:
        payloads: List[Dict[str, Any]] = []
        httpserver.expect_request(
            COLLECTION_PATH,
            method=HttpMethod.POST,
        ).respond_with_handler(
            json_handler(_paged_find_responder(_make_documents(45), payloads))
        )
        page1 = mock_collection.find_page({"x": 1})
        assert len(page1.results) == 20
        assert page1.next_page_state == "20"
        page3 = mock_collection.find_page({"x": 1}, initial_page_state="40")
        assert [doc["seq"] for doc in page3.results] == [40, 41, 42, 43, 44]
        assert page3.next_page_state is None
        assert payloads[1] == {
            "find": {"filter": {"x": 1}, "options": {"pageState": "40"}}
        }

    @pytest.mark.describe("test of cursor resumed from a page state, sync")
    def test_cursor_initial_page_state_sync(
        self,
        httpserver: HTTPServer,
        mock_collection: DefaultCollection,
    ) -> None:
        payloads: List[Dict[str, Any]] = []
        httpserver.expect_request(
            COLLECTION_PATH,
            method=HttpMethod.POST,
        ).respond_with_handler(
            json_handler(_paged_find_responder(_make_documents(25), payloads))
        )
        cursor = mock_collection.find(initial_page_state="20")
        assert [doc["seq"] for doc in cursor] == [20, 21, 22, 23, 24]
        assert len(payloads) == 1


class TestDistinct:
    @pytest.mark.describe("test of distinct key reduction")
    def test_distinct_key_reduction(self) -> None:
        assert _reduce_distinct_key_to_safe("a.b.c") == "a.b.c"
        assert _reduce_distinct_key_to_safe("a.0.b") == "a"
        assert _reduce_distinct_key_to_safe("a.00.b") == "a.00.b"
        assert _reduce_distinct_key_to_shallow_safe("a.b.c") == "a"
        with pytest.raises(ValueError):
            _reduce_distinct_key_to_safe("0.a")
        with pytest.raises(ValueError):
            _reduce_distinct_key_to_safe("")

    @pytest.mark.describe("test of distinct value collection")
    def test_distinct_collector(self) -> None:
        collector = DistinctCollector("a.b", preprocess_collection_payload_value)
        for document in [
            {"a": {"b": 1}},
            {"a": [{"b": 2}, {"b": 1}]},
            {"a": {"b": [3, 1]}},
            {"a": {"b": {"x": [1]}}},
            {"a": {"b": {"x": [1]}}},
            {"a": {"c": 9}},
            {"z": 0},
        ]:
            collector.feed(document)
        assert collector.values == [1, 2, 3, {"x": [1]}]

        indexed = DistinctCollector("a.1", preprocess_collection_payload_value)
        indexed.feed({"a": [10, 20, 30]})
        indexed.feed({"a": [10]})
        assert indexed.values == [20]

        with pytest.raises(ValueError):
            DistinctCollector("a..b", preprocess_collection_payload_value)

    @pytest.mark.describe("test of collection distinct, sync")
    def test_collection_distinct_sync(
        self,
        httpserver: HTTPServer,
        mock_collection: DefaultCollection,
    ) -> None:
        payloads: List[Dict[str, Any]] = []
        documents = [{"tag": ["x", "y"]}, {"tag": "y"}, {"tag": "z"}, {}]
        httpserver.expect_request(
            COLLECTION_PATH,
            method=HttpMethod.POST,
        ).respond_with_handler(json_handler(_paged_find_responder(documents, payloads)))
        assert mock_collection.distinct("tag", filter={"k": 1}) == ["x", "y", "z"]
        assert payloads[0] == {
            "find": {"filter": {"k": 1}, "projection": {"tag": True}}
        }

    @pytest.mark.describe("test of collection distinct, async")
    async def test_collection_distinct_async(
        self,
        httpserver: HTTPServer,
        mock_acollection: DefaultAsyncCollection,
    ) -> None:
        payloads: List[Dict[str, Any]] = []
        documents = [{"a": [{"b": 1}, {"b": 2}]}, {"a": [{"b": 3}]}]
        httpserver.expect_request(
            COLLECTION_PATH,
            method=HttpMethod.POST,
        ).respond_with_handler(json_handler(_paged_find_responder(documents, payloads)))
        assert await mock_acollection.distinct("a.0.b") == [1, 3]
        assert payloads[0] == {"find": {"projection": {"a": True}}}


class TestCursorAsync:
    @pytest.mark.describe("test of cursor paging over two pages, async")
    async def test_cursor_two_pages_async(
        self,
        httpserver: HTTPServer,
        mock_acollection: DefaultAsyncCollection,
    ) -> None:
        payloads: List[Dict[str, Any]] = []
        httpserver.expect_request(
            COLLECTION_PATH,
            method=HttpMethod.POST,
        ).respond_with_handler(
            json_handler(_paged_find_responder(_make_documents(25), payloads))
        )

        cursor = mock_acollection.find()
        assert len(httpserver.log) == 0
        seqs = [doc["seq"] async for doc in cursor]
        assert seqs == list(range(25))
        assert cursor.pages_retrieved == 2
        assert cursor.state == CursorState.CLOSED
        assert not await cursor.has_next()

    @pytest.mark.describe("test of cursor for_each with coroutines, async")
    async def test_cursor_for_each_async(
        self,
        httpserver: HTTPServer,
        mock_acollection: DefaultAsyncCollection,
    ) -> None:
        payloads: List[Dict[str, Any]] = []
        httpserver.expect_request(
            COLLECTION_PATH,
            method=HttpMethod.POST,
        ).respond_with_handler(
            json_handler(_paged_find_responder(_make_documents(4), payloads))
        )
        seen: List[int] = []

        async def _collect(doc: Dict[str, Any]) -> None:
            seen.append(doc["seq"])

        cursor = mock_acollection.find()
        await cursor.for_each(_collect)
        assert seen == [0, 1, 2, 3]
        assert cursor.state == CursorState.CLOSED

        mapped = mock_acollection.find().map(lambda doc: doc["_id"])
        assert await mapped.to_list() == ["d0", "d1", "d2", "d3"]

    @pytest.mark.describe("test of table cursor and find_page, async")
    async def test_table_cursor_async(
        self,
        httpserver: HTTPServer,
        mock_atable: DefaultAsyncTable,
    ) -> None:
        payloads: List[Dict[str, Any]] = []
        httpserver.expect_request(
            TABLE_PATH,
            method=HttpMethod.POST,
        ).respond_with_handler(
            json_handler(_paged_find_responder(_make_documents(21), payloads))
        )
        rows = await mock_atable.find({"p": "x"}).to_list()
        assert len(rows) == 21
        page = await mock_atable.find_page({"p": "x"})
        assert page.next_page_state == "20"
        assert len(payloads) == 3


class TestTableCursorSync:
    @pytest.mark.describe("test of table cursor and distinct, sync")
    def test_table_cursor_sync(
        self,
        httpserver: HTTPServer,
        mock_table: DefaultTable,
    ) -> None:
        payloads: List[Dict[str, Any]] = []
        rows = [{"p": "x", "c": i, "m": {"k": i % 2}} for i in range(22)]
        httpserver.expect_request(
            TABLE_PATH,
            method=HttpMethod.POST,
        ).respond_with_handler(json_handler(_paged_find_responder(rows, payloads)))

        cursor = mock_table.find({"p": "x"}, projection={"c": True})
        assert len(cursor.to_list()) == 22
        assert cursor.pages_retrieved == 2

        assert mock_table.distinct("m.k") == [0, 1]
        assert payloads[-1]["find"]["projection"] == {"m": True}
