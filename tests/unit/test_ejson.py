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

import datetime

import pytest
from pytest_httpserver import HTTPServer

from dataapi.ids import UUID, ObjectId, uuid4, uuid6, uuid7
from dataapi.utils.ejson import (
    postprocess_collection_response_value,
    postprocess_table_response_value,
    preprocess_collection_payload_value,
    preprocess_table_payload_value,
)
from dataapi.utils.request_tools import HttpMethod

from ..conftest import DefaultAsyncTable, DefaultCollection, DefaultTable

COLLECTION_PATH = "/v1/keyspace/collection"
TABLE_PATH = "/v1/keyspace/table"

# 1700000000 seconds since the epoch
A_DATETIME = datetime.datetime(2023, 11, 14, 22, 13, 20, tzinfo=datetime.timezone.utc)
A_UUID = UUID("0192a8d4-53b2-7c63-8b8e-5c1f2f8a9e10")
AN_OBJECTID = ObjectId("6553b2c0a7d4f1a2b3c4d5e6")


class TestCollectionConversions:
    @pytest.mark.describe("test of collection payload conversion to extended json")
    def test_collection_preprocess(self) -> None:
        document = {
            "_id": A_UUID,
            "when": A_DATETIME,
            "day": datetime.date(2024, 1, 1),
            "oid": AN_OBJECTID,
            "blob": b"\x00\x01",
            "nested": [{"when": A_DATETIME}, ("a", 1)],
            "plain": {"x": 1.5, "y": None, "z": True},
        }
        assert preprocess_collection_payload_value(document) == {
            "_id": {"$uuid": "0192a8d4-53b2-7c63-8b8e-5c1f2f8a9e10"},
            "when": {"$date": 1700000000000},
            "day": {"$date": 1704067200000},
            "oid": {"$objectId": "6553b2c0a7d4f1a2b3c4d5e6"},
            "blob": {"$binary": "AAE="},
            "nested": [{"when": {"$date": 1700000000000}}, ["a", 1]],
            "plain": {"x": 1.5, "y": None, "z": True},
        }

    @pytest.mark.describe("test of naive datetimes being rejected")
    def test_collection_preprocess_naive_datetime(self) -> None:
        with pytest.raises(ValueError):
            preprocess_collection_payload_value(
                {"when": datetime.datetime(2024, 1, 1, 12, 0, 0)}
            )
        with pytest.raises(ValueError):
            preprocess_table_payload_value(
                {"when": datetime.datetime(2024, 1, 1, 12, 0, 0)}
            )

    @pytest.mark.describe("test of collection response conversion from extended json")
    def test_collection_postprocess(self) -> None:
        response = {
            "data": {
                "document": {
                    "_id": {"$objectId": "6553b2c0a7d4f1a2b3c4d5e6"},
                    "when": {"$date": 1700000000000},
                    "ref": {"$uuid": "0192a8d4-53b2-7c63-8b8e-5c1f2f8a9e10"},
                    "blob": {"$binary": "AAE="},
                    "not_a_date": {"$date": 1, "other": 2},
                }
            }
        }
        document = postprocess_collection_response_value(response)["data"]["document"]
        assert document["_id"] == AN_OBJECTID
        assert document["when"] == A_DATETIME
        assert document["when"].tzinfo is not None
        assert document["ref"] == A_UUID
        assert document["blob"] == b"\x00\x01"
        assert document["not_a_date"] == {"$date": 1, "other": 2}


class TestTableConversions:
    @pytest.mark.describe("test of table payload conversion")
    def test_table_preprocess(self) -> None:
        row = {
            "p_ascii": "abc",
            "p_uuid": A_UUID,
            "p_timestamp": A_DATETIME,
            "p_date": datetime.date(2024, 1, 1),
            "p_time": datetime.time(12, 30, 0),
            "p_set": {7},
            "p_blob": b"\x00\x01",
            "p_vector": [0.1, 0.2],
        }
        assert preprocess_table_payload_value(row) == {
            "p_ascii": "abc",
            "p_uuid": "0192a8d4-53b2-7c63-8b8e-5c1f2f8a9e10",
            "p_timestamp": "2023-11-14T22:13:20+00:00",
            "p_date": "2024-01-01",
            "p_time": "12:30:00",
            "p_set": [7],
            "p_blob": {"$binary": "AAE="},
            "p_vector": [0.1, 0.2],
        }

    @pytest.mark.describe("test of table response conversion")
    def test_table_postprocess(self) -> None:
        response = {
            "data": {
                "documents": [
                    {"p_blob": {"$binary": "AAE="}, "p_date": "2024-01-01"},
                ]
            }
        }
        assert postprocess_table_response_value(response) == {
            "data": {"documents": [{"p_blob": b"\x00\x01", "p_date": "2024-01-01"}]}
        }


class TestIds:
    @pytest.mark.describe("test of id generation utilities")
    def test_ids(self) -> None:
        assert uuid4().version == 4
        assert uuid6().version == 6
        assert uuid7().version == 7
        assert isinstance(uuid7(), UUID)
        assert len(str(ObjectId())) == 24
        assert uuid7() != uuid7()


class TestConversionsOnTheWire:
    @pytest.mark.describe("test of extended json in collection requests, sync")
    def test_collection_wire_conversions_sync(
        self,
        httpserver: HTTPServer,
        mock_collection: DefaultCollection,
    ) -> None:
        httpserver.expect_oneshot_request(
            COLLECTION_PATH,
            method=HttpMethod.POST,
            json={
                "insertOne": {
                    "document": {
                        "_id": {"$uuid": str(A_UUID)},
                        "when": {"$date": 1700000000000},
                    }
                }
            },
        ).respond_with_json({"status": {"insertedIds": [{"$uuid": str(A_UUID)}]}})
        result = mock_collection.insert_one({"_id": A_UUID, "when": A_DATETIME})
        assert result.inserted_id == A_UUID

        httpserver.expect_oneshot_request(
            COLLECTION_PATH,
            method=HttpMethod.POST,
            json={"findOne": {"filter": {"when": {"$lt": {"$date": 1700000000000}}}}},
        ).respond_with_json(
            {
                "data": {
                    "document": {
                        "_id": {"$objectId": str(AN_OBJECTID)},
                        "when": {"$date": 1600000000000},
                    }
                }
            }
        )
        document = mock_collection.find_one({"when": {"$lt": A_DATETIME}})
        assert document is not None
        assert document["_id"] == AN_OBJECTID
        assert document["when"] == datetime.datetime(
            2020, 9, 13, 12, 26, 40, tzinfo=datetime.timezone.utc
        )

    @pytest.mark.describe("test of plain json in table requests, sync")
    def test_table_wire_conversions_sync(
        self,
        httpserver: HTTPServer,
        mock_table: DefaultTable,
    ) -> None:
        httpserver.expect_oneshot_request(
            TABLE_PATH,
            method=HttpMethod.POST,
            json={
                "insertOne": {
                    "document": {
                        "p": "a",
                        "c": 1,
                        "ts": "2023-11-14T22:13:20+00:00",
                        "tags": ["x"],
                    }
                }
            },
        ).respond_with_json(
            {
                "status": {
                    "primaryKeySchema": {"p": {"type": "text"}, "c": {"type": "int"}},
                    "insertedIds": [["a", 1]],
                }
            }
        )
        result = mock_table.insert_one(
            {"p": "a", "c": 1, "ts": A_DATETIME, "tags": {"x"}}
        )
        assert result.inserted_id == {"p": "a", "c": 1}
        assert result.inserted_id_tuple == ("a", 1)

    @pytest.mark.describe("test of plain json in table requests, async")
    async def test_table_wire_conversions_async(
        self,
        httpserver: HTTPServer,
        mock_atable: DefaultAsyncTable,
    ) -> None:
        httpserver.expect_oneshot_request(
            TABLE_PATH,
            method=HttpMethod.POST,
            json={"findOne": {"filter": {"p": "a", "d": "2024-01-01"}}},
        ).respond_with_json(
            {"data": {"document": {"p": "a", "blob": {"$binary": "AAE="}}}}
        )
        row = await mock_atable.find_one({"p": "a", "d": datetime.date(2024, 1, 1)})
        assert row == {"p": "a", "blob": b"\x00\x01"}
