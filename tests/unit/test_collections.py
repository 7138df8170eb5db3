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

import pytest
from pytest_httpserver import HTTPServer

from dataapi import AsyncCollection, Collection
from dataapi.commands import Command
from dataapi.exceptions import UnexpectedDataAPIResponseException
from dataapi.info import CollectionDefaultIDOptions, CollectionDefinition
from dataapi.utils.request_tools import HttpMethod

from ..conftest import DefaultAsyncCollection, DefaultCollection

COLLECTION_PATH = "/v1/keyspace/collection"
KEYSPACE_PATH = "/v1/keyspace"

FIND_COLLECTIONS_RESPONSE = {
    "status": {
        "collections": [
            {"name": "another", "options": {}},
            {
                "name": "collection",
                "options": {
                    "indexing": {"deny": ["blob"]},
                    "defaultId": {"type": "objectId"},
                },
            },
        ],
    },
}


class TestCollectionSync:
    @pytest.mark.describe("test of collection insert_one, sync")
    def test_collection_insert_one_sync(
        self,
        httpserver: HTTPServer,
        mock_collection: DefaultCollection,
    ) -> None:
        httpserver.expect_oneshot_request(
            COLLECTION_PATH,
            method=HttpMethod.POST,
            json={"insertOne": {"document": {"_id": "d0", "x": 1}}},
        ).respond_with_json({"status": {"insertedIds": ["d0"]}})
        result = mock_collection.insert_one({"_id": "d0", "x": 1})
        assert result.inserted_id == "d0"
        assert result.raw_results == [{"status": {"insertedIds": ["d0"]}}]

        httpserver.expect_oneshot_request(
            COLLECTION_PATH,
            method=HttpMethod.POST,
        ).respond_with_json({"status": {}})
        with pytest.raises(UnexpectedDataAPIResponseException):
            mock_collection.insert_one({"x": 1})

    @pytest.mark.describe("test of collection find_one and variants, sync")
    def test_collection_find_one_sync(
        self,
        httpserver: HTTPServer,
        mock_collection: DefaultCollection,
    ) -> None:
        httpserver.expect_oneshot_request(
            COLLECTION_PATH,
            method=HttpMethod.POST,
            json={
                "findOne": {
                    "filter": {"x": {"$gt": 1}},
                    "projection": {"a": True},
                    "sort": {"x": -1},
                },
            },
        ).respond_with_json({"data": {"document": {"_id": "d0", "a": 10}}})
        document = mock_collection.find_one(
            {"x": {"$gt": 1}}, projection=["a"], sort={"x": -1}
        )
        assert document == {"_id": "d0", "a": 10}

        httpserver.expect_oneshot_request(
            COLLECTION_PATH,
            method=HttpMethod.POST,
            json={"findOne": {"filter": {"_id": "d9"}}},
        ).respond_with_json({"data": {"document": None}})
        assert mock_collection.find_by_id("d9") is None

        httpserver.expect_oneshot_request(
            COLLECTION_PATH,
            method=HttpMethod.POST,
            json={"findOne": {"filter": {"a": 10}, "projection": {"_id": True}}},
        ).respond_with_json({"data": {"document": {"_id": "d0"}}})
        assert mock_collection.exists({"a": 10}) is True

        httpserver.expect_oneshot_request(
            COLLECTION_PATH,
            method=HttpMethod.POST,
            json={"findOne": {"filter": {"a": 11}, "projection": {"_id": True}}},
        ).respond_with_json({"data": {"document": None}})
        assert mock_collection.exists({"a": 11}) is False

        httpserver.expect_oneshot_request(
            COLLECTION_PATH,
            method=HttpMethod.POST,
        ).respond_with_json({"data": {}})
        with pytest.raises(UnexpectedDataAPIResponseException):
            mock_collection.find_one({})

    @pytest.mark.describe("test of collection replace_one, sync")
    def test_collection_replace_one_sync(
        self,
        httpserver: HTTPServer,
        mock_collection: DefaultCollection,
    ) -> None:
        httpserver.expect_oneshot_request(
            COLLECTION_PATH,
            method=HttpMethod.POST,
            json={
                "findOneAndReplace": {
                    "filter": {"_id": "d1"},
                    "replacement": {"a": 2},
                    "options": {"upsert": True},
                },
            },
        ).respond_with_json(
            {
                "data": {"document": None},
                "status": {"matchedCount": 0, "modifiedCount": 0, "upsertedId": "d1"},
            }
        )
        result = mock_collection.replace_one({"_id": "d1"}, {"a": 2}, upsert=True)
        assert result.upserted_id == "d1"
        assert result.update_info == {
            "n": 1,
            "updatedExisting": False,
            "nModified": 0,
            "upserted": "d1",
        }

        httpserver.expect_oneshot_request(
            COLLECTION_PATH,
            method=HttpMethod.POST,
            json={
                "findOneAndReplace": {
                    "filter": {"_id": "d0"},
                    "replacement": {"a": 3},
                    "options": {"upsert": False},
                },
            },
        ).respond_with_json(
            {
                "data": {"document": {"_id": "d0", "a": 2}},
                "status": {"matchedCount": 1, "modifiedCount": 1},
            }
        )
        result2 = mock_collection.replace_one({"_id": "d0"}, {"a": 3})
        assert result2.upserted_id is None
        assert result2.update_info == {
            "n": 1,
            "updatedExisting": True,
            "nModified": 1,
        }

    @pytest.mark.describe("test of collection options, info and drop, sync")
    def test_collection_admin_sync(
        self,
        httpserver: HTTPServer,
        mock_collection: DefaultCollection,
    ) -> None:
        info = mock_collection.info()
        assert info.name == "collection"
        assert info.full_name == "keyspace.collection"
        assert len(httpserver.log) == 0

        httpserver.expect_oneshot_request(
            KEYSPACE_PATH,
            method=HttpMethod.POST,
            json={"findCollections": {"options": {"explain": True}}},
        ).respond_with_json(FIND_COLLECTIONS_RESPONSE)
        assert mock_collection.options() == CollectionDefinition(
            indexing={"deny": ["blob"]},
            default_id=CollectionDefaultIDOptions("objectId"),
        )

        httpserver.expect_oneshot_request(
            KEYSPACE_PATH,
            method=HttpMethod.POST,
        ).respond_with_json({"status": {"collections": []}})
        with pytest.raises(ValueError):
            mock_collection.options()

        httpserver.expect_oneshot_request(
            KEYSPACE_PATH,
            method=HttpMethod.POST,
            json={"deleteCollection": {"name": "collection"}},
        ).respond_with_json({"status": {"ok": 1}})
        mock_collection.drop()
        assert len(httpserver.log) == 3

    @pytest.mark.describe("test of collection raw command, sync")
    def test_collection_command_sync(
        self,
        httpserver: HTTPServer,
        mock_collection: DefaultCollection,
    ) -> None:
        httpserver.expect_oneshot_request(
            COLLECTION_PATH,
            method=HttpMethod.POST,
            json={"countDocuments": {"filter": {"a": 1}}},
        ).respond_with_json({"status": {"count": 2}})
        response = mock_collection.command(Command("countDocuments").with_filter({"a": 1}))
        assert response == {"status": {"count": 2}}

        httpserver.expect_oneshot_request(
            COLLECTION_PATH,
            method=HttpMethod.POST,
            json={"unknownCommand": {}},
        ).respond_with_json({"errors": [{"message": "No such command."}]})
        e_response = mock_collection.command(
            {"unknownCommand": {}}, raise_api_errors=False
        )
        assert e_response["errors"][0]["message"] == "No such command."

    @pytest.mark.describe("test of collection copies and embedding header")
    def test_collection_copies(
        self,
        httpserver: HTTPServer,
        mock_collection: DefaultCollection,
    ) -> None:
        assert mock_collection == mock_collection.with_options()
        a_collection = mock_collection.to_async()
        assert isinstance(a_collection, AsyncCollection)
        assert a_collection.to_sync() == mock_collection

        keyed_collection = mock_collection.with_options(embedding_api_key="eak")
        assert isinstance(keyed_collection, Collection)
        assert keyed_collection != mock_collection
        httpserver.expect_oneshot_request(
            COLLECTION_PATH,
            method=HttpMethod.POST,
            headers={"X-Embedding-Api-Key": "eak"},
        ).respond_with_json({"data": {"document": None}})
        assert keyed_collection.find_one({"$vectorize": "text"}) is None
        assert len(httpserver.log) == 1


class TestCollectionAsync:
    @pytest.mark.describe("test of collection single-document methods, async")
    async def test_collection_single_document_async(
        self,
        httpserver: HTTPServer,
        mock_acollection: DefaultAsyncCollection,
    ) -> None:
        httpserver.expect_oneshot_request(
            COLLECTION_PATH,
            method=HttpMethod.POST,
            json={"insertOne": {"document": {"_id": "d0"}}},
        ).respond_with_json({"status": {"insertedIds": ["d0"]}})
        assert (await mock_acollection.insert_one({"_id": "d0"})).inserted_id == "d0"

        httpserver.expect_oneshot_request(
            COLLECTION_PATH,
            method=HttpMethod.POST,
            json={"findOne": {"filter": {"_id": "d0"}}},
        ).respond_with_json({"data": {"document": {"_id": "d0"}}})
        assert await mock_acollection.find_by_id("d0") == {"_id": "d0"}

        httpserver.expect_oneshot_request(
            COLLECTION_PATH,
            method=HttpMethod.POST,
            json={"findOne": {"filter": {"_id": "d1"}, "projection": {"_id": True}}},
        ).respond_with_json({"data": {"document": None}})
        assert await mock_acollection.exists({"_id": "d1"}) is False

        httpserver.expect_oneshot_request(
            COLLECTION_PATH,
            method=HttpMethod.POST,
        ).respond_with_json(
            {
                "data": {"document": {"_id": "d0"}},
                "status": {"matchedCount": 1, "modifiedCount": 0},
            }
        )
        result = await mock_acollection.replace_one({"_id": "d0"}, {"_id": "d0"})
        assert result.update_info["updatedExisting"] is False
        assert len(httpserver.log) == 4

    @pytest.mark.describe("test of collection options and drop, async")
    async def test_collection_admin_async(
        self,
        httpserver: HTTPServer,
        mock_acollection: DefaultAsyncCollection,
    ) -> None:
        httpserver.expect_oneshot_request(
            KEYSPACE_PATH,
            method=HttpMethod.POST,
            json={"findCollections": {"options": {"explain": True}}},
        ).respond_with_json(FIND_COLLECTIONS_RESPONSE)
        options = await mock_acollection.options()
        assert options.indexing == {"deny": ["blob"]}
        assert options.default_id is not None
        assert options.default_id.default_id_type == "objectId"

        httpserver.expect_oneshot_request(
            KEYSPACE_PATH,
            method=HttpMethod.POST,
            json={"deleteCollection": {"name": "collection"}},
        ).respond_with_json({"status": {"ok": 1}})
        await mock_acollection.drop()
        assert len(httpserver.log) == 2
