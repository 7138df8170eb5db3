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

from typing import Any, Dict

import pytest
from pytest_httpserver import HTTPServer

from dataapi.constants import TableIndexType, VectorMetric
from dataapi.exceptions import (
    DataAPIResponseException,
    TableInsertManyException,
    UnexpectedDataAPIResponseException,
)
from dataapi.utils.request_tools import HttpMethod

from ..conftest import DefaultAsyncTable, DefaultTable, json_handler

TABLE_PATH = "/v1/keyspace/table"
KEYSPACE_PATH = "/v1/keyspace"

PK_SCHEMA = {"p": {"type": "text"}, "c": {"type": "int"}}
TABLE_DEFINITION = {
    "columns": {
        "p": {"type": "text"},
        "c": {"type": "int"},
        "w": {"type": "text"},
    },
    "primaryKey": {"partitionBy": ["p"], "partitionSort": {"c": 1}},
}


def _insert_many_responder(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Rows marked with "bad" are rejected, the others are acknowledged."""
    rows = payload["insertMany"]["documents"]
    good_rows = [row for row in rows if not row.get("bad")]
    response: Dict[str, Any] = {
        "status": {
            "primaryKeySchema": PK_SCHEMA,
            "insertedIds": [[row["p"], row["c"]] for row in good_rows],
        }
    }
    if len(good_rows) < len(rows):
        response["errors"] = [{"message": "Bad row.", "errorCode": "BAD_ROW"}]
    return response


class TestTableDML:
    @pytest.mark.describe("test of table insert_one, sync")
    def test_table_insert_one_sync(
        self,
        httpserver: HTTPServer,
        mock_table: DefaultTable,
    ) -> None:
        httpserver.expect_oneshot_request(
            TABLE_PATH,
            method=HttpMethod.POST,
            json={"insertOne": {"document": {"p": "a", "c": 1, "w": "x"}}},
        ).respond_with_json(
            {"status": {"primaryKeySchema": PK_SCHEMA, "insertedIds": [["a", 1]]}}
        )
        result = mock_table.insert_one({"p": "a", "c": 1, "w": "x"})
        assert result.inserted_id == {"p": "a", "c": 1}
        assert result.inserted_id_tuple == ("a", 1)
        assert len(result.raw_results) == 1

    @pytest.mark.describe("test of table insert_one faulty responses, sync")
    def test_table_insert_one_faulty_sync(
        self,
        httpserver: HTTPServer,
        mock_table: DefaultTable,
    ) -> None:
        httpserver.expect_oneshot_request(
            TABLE_PATH,
            method=HttpMethod.POST,
        ).respond_with_json({"status": {"insertedIds": [["a", 1]]}})
        with pytest.raises(UnexpectedDataAPIResponseException):
            mock_table.insert_one({"p": "a", "c": 1})

        httpserver.expect_oneshot_request(
            TABLE_PATH,
            method=HttpMethod.POST,
        ).respond_with_json(
            {"status": {"primaryKeySchema": PK_SCHEMA, "insertedIds": [["a"]]}}
        )
        with pytest.raises(UnexpectedDataAPIResponseException):
            mock_table.insert_one({"p": "a", "c": 1})

        httpserver.expect_oneshot_request(
            TABLE_PATH,
            method=HttpMethod.POST,
        ).respond_with_json({"status": {"primaryKeySchema": PK_SCHEMA}})
        with pytest.raises(UnexpectedDataAPIResponseException):
            mock_table.insert_one({"p": "a", "c": 1})

    @pytest.mark.describe("test of table insert_many chunking, sync")
    def test_table_insert_many_sync(
        self,
        httpserver: HTTPServer,
        mock_table: DefaultTable,
    ) -> None:
        httpserver.expect_request(
            TABLE_PATH,
            method=HttpMethod.POST,
        ).respond_with_handler(json_handler(_insert_many_responder))
        rows = [{"p": "a", "c": i} for i in range(5)]
        result = mock_table.insert_many(rows, chunk_size=2, concurrency=1)
        assert len(httpserver.log) == 3
        assert result.inserted_ids == [{"p": "a", "c": i} for i in range(5)]
        assert result.inserted_id_tuples == [("a", i) for i in range(5)]
        assert len(result.raw_results) == 3

    @pytest.mark.describe("test of table insert_many with document responses, sync")
    def test_table_insert_many_document_responses_sync(
        self,
        httpserver: HTTPServer,
        mock_table: DefaultTable,
    ) -> None:
        httpserver.expect_oneshot_request(
            TABLE_PATH,
            method=HttpMethod.POST,
            json={
                "insertMany": {
                    "documents": [{"p": "a", "c": 0}, {"p": "a", "c": 1}],
                    "options": {"ordered": False},
                },
            },
        ).respond_with_json(
            {
                "status": {
                    "primaryKeySchema": PK_SCHEMA,
                    "documentResponses": [
                        {"_id": ["a", 0], "status": "OK"},
                        {"_id": ["a", 1], "status": "SKIPPED"},
                    ],
                },
            }
        )
        result = mock_table.insert_many([{"p": "a", "c": 0}, {"p": "a", "c": 1}])
        assert result.inserted_ids == [{"p": "a", "c": 0}]
        assert result.inserted_id_tuples == [("a", 0)]

    @pytest.mark.describe("test of table insert_many ordered failure, sync")
    def test_table_insert_many_failure_sync(
        self,
        httpserver: HTTPServer,
        mock_table: DefaultTable,
    ) -> None:
        httpserver.expect_request(
            TABLE_PATH,
            method=HttpMethod.POST,
        ).respond_with_handler(json_handler(_insert_many_responder))
        rows: list[dict[str, Any]] = [{"p": "a", "c": i} for i in range(5)]
        rows[3]["bad"] = True
        with pytest.raises(TableInsertManyException) as exc:
            mock_table.insert_many(rows, ordered=True, chunk_size=2)
        assert len(httpserver.log) == 2
        assert exc.value.inserted_ids == [{"p": "a", "c": i} for i in range(3)]
        assert exc.value.inserted_id_tuples == [("a", i) for i in range(3)]
        assert len(exc.value.exceptions) == 1
        assert isinstance(exc.value.exceptions[0], DataAPIResponseException)
        assert "BAD_ROW" in str(exc.value.exceptions[0])

    @pytest.mark.describe("test of table insert_many with faulty response, sync")
    def test_table_insert_many_faulty_sync(
        self,
        httpserver: HTTPServer,
        mock_table: DefaultTable,
    ) -> None:
        httpserver.expect_oneshot_request(
            TABLE_PATH,
            method=HttpMethod.POST,
        ).respond_with_json({"status": {}})
        with pytest.raises(TableInsertManyException) as exc:
            mock_table.insert_many([{"a": 1}, {"a": 2}])
        assert exc.value.inserted_ids == []
        assert exc.value.inserted_id_tuples == []
        assert len(exc.value.exceptions) == 1
        assert isinstance(
            exc.value.exceptions[0], UnexpectedDataAPIResponseException
        )
        assert exc.value.exceptions[0].raw_response == {"status": {}}

    @pytest.mark.describe("test of table insert_many parameter validation")
    def test_table_insert_many_parameters(
        self,
        httpserver: HTTPServer,
        mock_table: DefaultTable,
    ) -> None:
        rows = [{"p": "a", "c": 0}]
        with pytest.raises(ValueError):
            mock_table.insert_many(rows, chunk_size=0)
        with pytest.raises(ValueError):
            mock_table.insert_many(rows, concurrency=0)
        with pytest.raises(ValueError):
            mock_table.insert_many(rows, ordered=True, concurrency=2)
        assert len(httpserver.log) == 0

    @pytest.mark.describe("test of table update_one and deletions, sync")
    def test_table_update_delete_sync(
        self,
        httpserver: HTTPServer,
        mock_table: DefaultTable,
    ) -> None:
        httpserver.expect_oneshot_request(
            TABLE_PATH,
            method=HttpMethod.POST,
            json={
                "updateOne": {
                    "filter": {"p": "a", "c": 1},
                    "update": {"$set": {"w": "y"}},
                },
            },
        ).respond_with_json({"status": {"matchedCount": 1, "modifiedCount": 1}})
        mock_table.update_one({"p": "a", "c": 1}, {"$set": {"w": "y"}})

        httpserver.expect_oneshot_request(
            TABLE_PATH,
            method=HttpMethod.POST,
            json={"deleteOne": {"filter": {"p": "a", "c": 1}}},
        ).respond_with_json({"status": {"deletedCount": -1}})
        mock_table.delete_one({"p": "a", "c": 1})

        httpserver.expect_oneshot_request(
            TABLE_PATH,
            method=HttpMethod.POST,
            json={"deleteMany": {"filter": {}}},
        ).respond_with_json({"status": {"deletedCount": -1}})
        mock_table.delete_many({})
        assert len(httpserver.log) == 3

    @pytest.mark.describe("test of table update_one and deletions, faulty responses")
    def test_table_update_delete_faulty(
        self,
        httpserver: HTTPServer,
        mock_table: DefaultTable,
    ) -> None:
        httpserver.expect_oneshot_request(
            TABLE_PATH,
            method=HttpMethod.POST,
        ).respond_with_json({})
        with pytest.raises(UnexpectedDataAPIResponseException):
            mock_table.update_one({"p": "a", "c": 1}, {"$set": {"w": "y"}})

        httpserver.expect_oneshot_request(
            TABLE_PATH,
            method=HttpMethod.POST,
        ).respond_with_json({"status": {"deletedCount": 1}})
        with pytest.raises(UnexpectedDataAPIResponseException):
            mock_table.delete_one({"p": "a", "c": 1})

        httpserver.expect_oneshot_request(
            TABLE_PATH,
            method=HttpMethod.POST,
        ).respond_with_json({"status": {}})
        with pytest.raises(UnexpectedDataAPIResponseException):
            mock_table.delete_many({"p": "a"})

    @pytest.mark.describe("test of table info")
    def test_table_info(
        self,
        httpserver: HTTPServer,
        mock_table: DefaultTable,
    ) -> None:
        info = mock_table.info()
        assert info.name == "table"
        assert info.keyspace == "keyspace"
        assert info.full_name == "keyspace.table"
        assert info.api_endpoint == httpserver.url_for("/").strip("/")
        assert len(httpserver.log) == 0


class TestTableSchema:
    @pytest.mark.describe("test of table index creation, sync")
    def test_table_create_indexes_sync(
        self,
        httpserver: HTTPServer,
        mock_table: DefaultTable,
    ) -> None:
        httpserver.expect_oneshot_request(
            TABLE_PATH,
            method=HttpMethod.POST,
            json={
                "createIndex": {
                    "name": "w_index",
                    "definition": {
                        "column": "w",
                        "options": {"caseSensitive": False},
                    },
                    "options": {"ifNotExists": True},
                },
            },
        ).respond_with_json({"status": {"ok": 1}})
        mock_table.create_index(
            "w_index",
            column="w",
            options={"caseSensitive": False},
            if_not_exists=True,
        )

        httpserver.expect_oneshot_request(
            TABLE_PATH,
            method=HttpMethod.POST,
            json={
                "createVectorIndex": {
                    "name": "v_index",
                    "definition": {
                        "column": "v",
                        "options": {
                            "metric": "cosine",
                            "sourceModel": "openai-v3-small",
                        },
                    },
                },
            },
        ).respond_with_json({"status": {"ok": 1}})
        mock_table.create_vector_index(
            "v_index",
            column="v",
            metric=VectorMetric.COSINE,
            source_model="openai-v3-small",
        )

        httpserver.expect_oneshot_request(
            TABLE_PATH,
            method=HttpMethod.POST,
            json={"createVectorIndex": {"name": "v2_index", "definition": {"column": "v2"}}},
        ).respond_with_json({"status": {"ok": 1}})
        mock_table.create_vector_index("v2_index", column="v2")
        assert len(httpserver.log) == 3

    @pytest.mark.describe("test of table index creation, errors")
    def test_table_create_indexes_errors(
        self,
        httpserver: HTTPServer,
        mock_table: DefaultTable,
    ) -> None:
        with pytest.raises(ValueError):
            mock_table.create_vector_index("v_index", column="v", metric="manhattan")
        assert len(httpserver.log) == 0

        httpserver.expect_oneshot_request(
            TABLE_PATH,
            method=HttpMethod.POST,
        ).respond_with_json({"status": {}})
        with pytest.raises(UnexpectedDataAPIResponseException):
            mock_table.create_index("w_index", column="w")

    @pytest.mark.describe("test of table index listing, sync")
    def test_table_list_indexes_sync(
        self,
        httpserver: HTTPServer,
        mock_table: DefaultTable,
    ) -> None:
        httpserver.expect_oneshot_request(
            TABLE_PATH,
            method=HttpMethod.POST,
            json={"listIndexes": {}},
        ).respond_with_json({"status": {"indexes": ["w_index", "v_index"]}})
        assert mock_table.list_index_names() == ["w_index", "v_index"]

        httpserver.expect_oneshot_request(
            TABLE_PATH,
            method=HttpMethod.POST,
            json={"listIndexes": {"options": {"explain": True}}},
        ).respond_with_json(
            {
                "status": {
                    "indexes": [
                        {
                            "name": "w_index",
                            "definition": {"column": "w", "options": {}},
                            "indexType": "regular",
                        },
                        {
                            "name": "v_index",
                            "definition": {"column": "v", "options": {"metric": "cosine"}},
                            "indexType": "vector",
                        },
                        {
                            "name": "x_index",
                            "definition": {"column": "x"},
                            "indexType": "some_future_kind",
                        },
                    ],
                },
            }
        )
        indexes = mock_table.list_indexes()
        assert [ind.name for ind in indexes] == ["w_index", "v_index", "x_index"]
        assert [ind.index_type for ind in indexes] == [
            TableIndexType.REGULAR,
            TableIndexType.VECTOR,
            TableIndexType.UNKNOWN,
        ]
        assert indexes[1].column == "v"

        httpserver.expect_oneshot_request(
            TABLE_PATH,
            method=HttpMethod.POST,
        ).respond_with_json({"status": {}})
        with pytest.raises(UnexpectedDataAPIResponseException):
            mock_table.list_index_names()

    @pytest.mark.describe("test of table alter, sync")
    def test_table_alter_sync(
        self,
        httpserver: HTTPServer,
        mock_table: DefaultTable,
    ) -> None:
        httpserver.expect_oneshot_request(
            TABLE_PATH,
            method=HttpMethod.POST,
            json={"alterTable": {"operation": {"drop": {"columns": ["w"]}}}},
        ).respond_with_json({"status": {"ok": 1}})
        mock_table.alter({"drop": {"columns": ["w"]}})

        httpserver.expect_oneshot_request(
            TABLE_PATH,
            method=HttpMethod.POST,
        ).respond_with_json({"status": {"ok": 0}})
        with pytest.raises(UnexpectedDataAPIResponseException):
            mock_table.alter({"drop": {"columns": ["w"]}})

    @pytest.mark.describe("test of table definition and drop, sync")
    def test_table_definition_drop_sync(
        self,
        httpserver: HTTPServer,
        mock_table: DefaultTable,
    ) -> None:
        list_tables_response = {
            "status": {
                "tables": [
                    {"name": "other_table", "definition": {}},
                    {"name": "table", "definition": TABLE_DEFINITION},
                ],
            },
        }
        httpserver.expect_oneshot_request(
            KEYSPACE_PATH,
            method=HttpMethod.POST,
            json={"listTables": {"options": {"explain": True}}},
        ).respond_with_json(list_tables_response)
        assert mock_table.definition() == TABLE_DEFINITION

        httpserver.expect_oneshot_request(
            KEYSPACE_PATH,
            method=HttpMethod.POST,
        ).respond_with_json({"status": {"tables": []}})
        with pytest.raises(ValueError):
            mock_table.definition()

        httpserver.expect_oneshot_request(
            KEYSPACE_PATH,
            method=HttpMethod.POST,
            json={"dropTable": {"name": "table", "options": {"ifExists": True}}},
        ).respond_with_json({"status": {"ok": 1}})
        mock_table.drop(if_exists=True)
        assert len(httpserver.log) == 3


class TestTableAsync:
    @pytest.mark.describe("test of table insert_one and insert_many, async")
    async def test_table_inserts_async(
        self,
        httpserver: HTTPServer,
        mock_atable: DefaultAsyncTable,
    ) -> None:
        httpserver.expect_oneshot_request(
            TABLE_PATH,
            method=HttpMethod.POST,
            json={"insertOne": {"document": {"p": "a", "c": 1}}},
        ).respond_with_json(
            {"status": {"primaryKeySchema": PK_SCHEMA, "insertedIds": [["a", 1]]}}
        )
        result = await mock_atable.insert_one({"p": "a", "c": 1})
        assert result.inserted_id_tuple == ("a", 1)

        httpserver.expect_request(
            TABLE_PATH,
            method=HttpMethod.POST,
        ).respond_with_handler(json_handler(_insert_many_responder))
        rows: list[dict[str, Any]] = [{"p": "b", "c": i} for i in range(6)]
        im_result = await mock_atable.insert_many(rows, chunk_size=4)
        assert im_result.inserted_id_tuples == [("b", i) for i in range(6)]

        rows[1]["bad"] = True
        with pytest.raises(TableInsertManyException) as exc:
            await mock_atable.insert_many(rows, ordered=True, chunk_size=4)
        assert exc.value.inserted_id_tuples == [("b", 0), ("b", 2), ("b", 3)]
        assert len(exc.value.exceptions) == 1

    @pytest.mark.describe("test of table insert_many with faulty response, async")
    async def test_table_insert_many_faulty_async(
        self,
        httpserver: HTTPServer,
        mock_atable: DefaultAsyncTable,
    ) -> None:
        httpserver.expect_oneshot_request(
            TABLE_PATH,
            method=HttpMethod.POST,
        ).respond_with_json({"status": {"primaryKeySchema": PK_SCHEMA}})
        with pytest.raises(TableInsertManyException) as exc:
            await mock_atable.insert_many([{"p": "a", "c": 0}, {"p": "a", "c": 1}])
        assert exc.value.inserted_id_tuples == []
        assert len(exc.value.exceptions) == 1
        assert isinstance(
            exc.value.exceptions[0], UnexpectedDataAPIResponseException
        )

    @pytest.mark.describe("test of table schema methods, async")
    async def test_table_schema_async(
        self,
        httpserver: HTTPServer,
        mock_atable: DefaultAsyncTable,
    ) -> None:
        httpserver.expect_oneshot_request(
            TABLE_PATH,
            method=HttpMethod.POST,
            json={
                "createIndex": {
                    "name": "w_index",
                    "definition": {"column": "w"},
                },
            },
        ).respond_with_json({"status": {"ok": 1}})
        await mock_atable.create_index("w_index", column="w")

        httpserver.expect_oneshot_request(
            TABLE_PATH,
            method=HttpMethod.POST,
            json={"listIndexes": {"options": {"explain": True}}},
        ).respond_with_json(
            {
                "status": {
                    "indexes": [
                        {
                            "name": "w_index",
                            "definition": {"column": "w"},
                            "indexType": "regular",
                        },
                    ],
                },
            }
        )
        indexes = await mock_atable.list_indexes()
        assert indexes[0].index_type == TableIndexType.REGULAR

        httpserver.expect_oneshot_request(
            KEYSPACE_PATH,
            method=HttpMethod.POST,
            json={"listTables": {"options": {"explain": True}}},
        ).respond_with_json(
            {"status": {"tables": [{"name": "table", "definition": TABLE_DEFINITION}]}}
        )
        assert await mock_atable.definition() == TABLE_DEFINITION

        httpserver.expect_oneshot_request(
            TABLE_PATH,
            method=HttpMethod.POST,
            json={"deleteMany": {"filter": {"p": "a"}}},
        ).respond_with_json({"status": {"deletedCount": -1}})
        await mock_atable.delete_many({"p": "a"})

        httpserver.expect_oneshot_request(
            KEYSPACE_PATH,
            method=HttpMethod.POST,
            json={"dropTable": {"name": "table"}},
        ).respond_with_json({"status": {"ok": 1}})
        await mock_atable.drop()
        assert len(httpserver.log) == 5
