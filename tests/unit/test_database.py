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

from dataapi import AsyncDatabase, Collection, Database, Table
from dataapi.admin import DataAPIDatabaseAdmin
from dataapi.commands import Command
from dataapi.constants import DefaultIdType, VectorMetric
from dataapi.exceptions import (
    DataAPIResponseException,
    UnexpectedDataAPIResponseException,
)
from dataapi.info import CollectionDefinition, CollectionVectorOptions
from dataapi.utils.api_options import defaultAPIOptions
from dataapi.utils.request_tools import HttpMethod

KEYSPACE_PATH = "/v1/keyspace"
OTHER_KEYSPACE_PATH = "/v1/other_keyspace"
ROOT_PATH = "/v1"

TABLE_DEFINITION = {
    "columns": {"p": {"type": "text"}, "w": {"type": "int"}},
    "primaryKey": "p",
}


class TestDatabaseCollections:
    @pytest.mark.describe("test of create_collection payloads, sync")
    def test_create_collection_sync(
        self,
        httpserver: HTTPServer,
        mock_database: Database,
    ) -> None:
        httpserver.expect_oneshot_request(
            KEYSPACE_PATH,
            method=HttpMethod.POST,
            json={"createCollection": {"name": "plain"}},
        ).respond_with_json({"status": {"ok": 1}})
        plain = mock_database.create_collection("plain")
        assert isinstance(plain, Collection)
        assert plain.name == "plain"
        assert plain.keyspace == "keyspace"

        httpserver.expect_oneshot_request(
            KEYSPACE_PATH,
            method=HttpMethod.POST,
            json={
                "createCollection": {
                    "name": "vectors",
                    "options": {
                        "vector": {"dimension": 3, "metric": "cosine"},
                        "indexing": {"deny": ["blob"]},
                        "defaultId": {"type": "uuidv7"},
                    },
                },
            },
        ).respond_with_json({"status": {"ok": 1}})
        mock_database.create_collection(
            "vectors",
            dimension=3,
            metric=VectorMetric.COSINE,
            indexing={"deny": ["blob"]},
            default_id_type=DefaultIdType.UUIDV7,
        )

        httpserver.expect_oneshot_request(
            KEYSPACE_PATH,
            method=HttpMethod.POST,
            json={
                "createCollection": {
                    "name": "from_definition",
                    "options": {"vector": {"dimension": 2, "metric": "dot_product"}},
                },
            },
        ).respond_with_json({"status": {"ok": 1}})
        mock_database.create_collection(
            "from_definition",
            definition={"vector": {"dimension": 2}},
            metric=VectorMetric.DOT_PRODUCT,
        )
        assert len(httpserver.log) == 3

    @pytest.mark.describe("test of create_collection errors, sync")
    def test_create_collection_errors_sync(
        self,
        httpserver: HTTPServer,
        mock_database: Database,
    ) -> None:
        with pytest.raises(ValueError):
            mock_database.create_collection("c", indexing={"allow": [], "deny": []})
        with pytest.raises(ValueError):
            mock_database.create_collection("c", indexing={"ignore": ["a"]})
        assert len(httpserver.log) == 0

        httpserver.expect_oneshot_request(
            KEYSPACE_PATH,
            method=HttpMethod.POST,
        ).respond_with_json({"status": {}})
        with pytest.raises(UnexpectedDataAPIResponseException):
            mock_database.create_collection("c")

        httpserver.expect_oneshot_request(
            KEYSPACE_PATH,
            method=HttpMethod.POST,
        ).respond_with_json(
            {"errors": [{"message": "Too many.", "errorCode": "TOO_MANY_COLLECTIONS"}]}
        )
        with pytest.raises(DataAPIResponseException) as exc:
            mock_database.create_collection("c")
        assert exc.value.error_descriptors[0].error_code == "TOO_MANY_COLLECTIONS"

    @pytest.mark.describe("test of collection listing and dropping, sync")
    def test_list_drop_collections_sync(
        self,
        httpserver: HTTPServer,
        mock_database: Database,
    ) -> None:
        httpserver.expect_oneshot_request(
            KEYSPACE_PATH,
            method=HttpMethod.POST,
            json={"findCollections": {"options": {"explain": True}}},
        ).respond_with_json(
            {
                "status": {
                    "collections": [
                        {
                            "name": "vectors",
                            "options": {"vector": {"dimension": 3, "metric": "cosine"}},
                        },
                        {"name": "plain", "options": {}},
                    ],
                },
            }
        )
        descriptors = mock_database.list_collections()
        assert [desc.name for desc in descriptors] == ["vectors", "plain"]
        assert descriptors[0].definition == CollectionDefinition(
            vector=CollectionVectorOptions(dimension=3, metric="cosine"),
        )
        assert descriptors[1].definition.vector is None

        httpserver.expect_oneshot_request(
            KEYSPACE_PATH,
            method=HttpMethod.POST,
            json={"findCollections": {}},
        ).respond_with_json({"status": {"collections": ["vectors", "plain"]}})
        assert mock_database.list_collection_names() == ["vectors", "plain"]

        httpserver.expect_oneshot_request(
            OTHER_KEYSPACE_PATH,
            method=HttpMethod.POST,
            json={"findCollections": {}},
        ).respond_with_json({"status": {"collections": []}})
        assert mock_database.list_collection_names(keyspace="other_keyspace") == []

        httpserver.expect_oneshot_request(
            KEYSPACE_PATH,
            method=HttpMethod.POST,
            json={"deleteCollection": {"name": "plain"}},
        ).respond_with_json({"status": {"ok": 1}})
        mock_database.drop_collection("plain")
        assert len(httpserver.log) == 4

        httpserver.expect_oneshot_request(
            KEYSPACE_PATH,
            method=HttpMethod.POST,
        ).respond_with_json({"status": {}})
        with pytest.raises(UnexpectedDataAPIResponseException):
            mock_database.list_collection_names()

    @pytest.mark.describe("test of collection spawning without requests")
    def test_get_collection(
        self,
        httpserver: HTTPServer,
        mock_database: Database,
    ) -> None:
        coll = mock_database.get_collection("coll")
        assert coll == mock_database["coll"]
        assert coll.full_name == "keyspace.coll"
        other_coll = mock_database.get_collection("coll", keyspace="other_keyspace")
        assert other_coll.keyspace == "other_keyspace"
        assert other_coll != coll
        assert len(httpserver.log) == 0


class TestDatabaseTables:
    @pytest.mark.describe("test of create_table, sync")
    def test_create_table_sync(
        self,
        httpserver: HTTPServer,
        mock_database: Database,
    ) -> None:
        with pytest.raises(ValueError):
            mock_database.create_table("t", definition={"columns": {}})
        assert len(httpserver.log) == 0

        httpserver.expect_oneshot_request(
            KEYSPACE_PATH,
            method=HttpMethod.POST,
            json={
                "createTable": {
                    "name": "t",
                    "definition": TABLE_DEFINITION,
                    "options": {"ifNotExists": True},
                },
            },
        ).respond_with_json({"status": {"ok": 1}})
        table = mock_database.create_table(
            "t", definition=TABLE_DEFINITION, if_not_exists=True
        )
        assert isinstance(table, Table)
        assert table.full_name == "keyspace.t"

    @pytest.mark.describe("test of table and index dropping, sync")
    def test_drop_table_sync(
        self,
        httpserver: HTTPServer,
        mock_database: Database,
    ) -> None:
        httpserver.expect_oneshot_request(
            KEYSPACE_PATH,
            method=HttpMethod.POST,
            json={"dropTable": {"name": "t"}},
        ).respond_with_json({"status": {"ok": 1}})
        mock_database.drop_table("t")

        httpserver.expect_oneshot_request(
            KEYSPACE_PATH,
            method=HttpMethod.POST,
            json={"dropIndex": {"name": "t_idx", "options": {"ifExists": True}}},
        ).respond_with_json({"status": {"ok": 1}})
        mock_database.drop_table_index("t_idx", if_exists=True)

        httpserver.expect_oneshot_request(
            OTHER_KEYSPACE_PATH,
            method=HttpMethod.POST,
            json={"dropTable": {"name": "t", "options": {"ifExists": False}}},
        ).respond_with_json({"status": {"ok": 1}})
        mock_database.drop_table("t", keyspace="other_keyspace", if_exists=False)
        assert len(httpserver.log) == 3

    @pytest.mark.describe("test of table listing, sync")
    def test_list_tables_sync(
        self,
        httpserver: HTTPServer,
        mock_database: Database,
    ) -> None:
        httpserver.expect_oneshot_request(
            KEYSPACE_PATH,
            method=HttpMethod.POST,
            json={"listTables": {"options": {"explain": True}}},
        ).respond_with_json(
            {"status": {"tables": [{"name": "t", "definition": TABLE_DEFINITION}]}}
        )
        descriptors = mock_database.list_tables()
        assert len(descriptors) == 1
        assert descriptors[0].name == "t"
        assert descriptors[0].primary_key == "p"
        assert set(descriptors[0].columns.keys()) == {"p", "w"}

        httpserver.expect_oneshot_request(
            KEYSPACE_PATH,
            method=HttpMethod.POST,
            json={"listTables": {}},
        ).respond_with_json({"status": {"tables": ["t"]}})
        assert mock_database.list_table_names() == ["t"]


class TestDatabaseCommand:
    @pytest.mark.describe("test of database command targets, sync")
    def test_database_command_sync(
        self,
        httpserver: HTTPServer,
        mock_database: Database,
    ) -> None:
        httpserver.expect_oneshot_request(
            KEYSPACE_PATH,
            method=HttpMethod.POST,
            json={"findCollections": {}},
        ).respond_with_json({"status": {"collections": []}})
        assert mock_database.command({"findCollections": {}}) == {
            "status": {"collections": []}
        }

        httpserver.expect_oneshot_request(
            ROOT_PATH,
            method=HttpMethod.POST,
            json={"findKeyspaces": {}},
        ).respond_with_json({"status": {"keyspaces": ["keyspace"]}})
        ks_response = mock_database.command(Command("findKeyspaces"), keyspace=None)
        assert ks_response["status"]["keyspaces"] == ["keyspace"]

        httpserver.expect_oneshot_request(
            KEYSPACE_PATH + "/coll",
            method=HttpMethod.POST,
            json={"countDocuments": {}},
        ).respond_with_json({"status": {"count": 3}})
        c_response = mock_database.command(
            {"countDocuments": {}}, collection_or_table_name="coll"
        )
        assert c_response["status"]["count"] == 3

        httpserver.expect_oneshot_request(
            OTHER_KEYSPACE_PATH + "/coll",
            method=HttpMethod.POST,
        ).respond_with_json({"errors": [{"message": "Nope."}]})
        e_response = mock_database.command(
            {"countDocuments": {}},
            keyspace="other_keyspace",
            collection_or_table_name="coll",
            raise_api_errors=False,
        )
        assert e_response["errors"][0]["message"] == "Nope."
        assert len(httpserver.log) == 4

        with pytest.raises(ValueError):
            mock_database.command(
                {"countDocuments": {}},
                keyspace=None,
                collection_or_table_name="coll",
            )

    @pytest.mark.describe("test of database keyspace switching")
    def test_database_use_keyspace(
        self,
        httpserver: HTTPServer,
        mock_database: Database,
    ) -> None:
        assert mock_database.keyspace == "keyspace"
        with pytest.warns(DeprecationWarning):
            assert mock_database.namespace == "keyspace"

        mock_database.use_keyspace("other_keyspace")
        assert mock_database.keyspace == "other_keyspace"
        httpserver.expect_oneshot_request(
            OTHER_KEYSPACE_PATH,
            method=HttpMethod.POST,
            json={"findCollections": {}},
        ).respond_with_json({"status": {"collections": ["c"]}})
        assert mock_database.list_collection_names() == ["c"]
        assert mock_database.get_collection("c").keyspace == "other_keyspace"


class TestDatabaseConversions:
    @pytest.mark.describe("test of database copies and conversions")
    def test_database_conversions(
        self,
        httpserver: HTTPServer,
        mock_database: Database,
    ) -> None:
        assert mock_database == mock_database.with_options()
        other_db = mock_database.with_options(keyspace="other_keyspace")
        assert other_db.keyspace == "other_keyspace"
        assert mock_database.keyspace == "keyspace"
        assert other_db != mock_database

        token_db = mock_database.with_options(token="another_token")
        assert token_db.api_options.token.get_token() == "another_token"
        assert token_db != mock_database

        a_database = mock_database.to_async()
        assert isinstance(a_database, AsyncDatabase)
        assert a_database.keyspace == "keyspace"
        assert a_database.to_sync() == mock_database

        db_admin = mock_database.get_database_admin()
        assert isinstance(db_admin, DataAPIDatabaseAdmin)
        assert db_admin.spawner_database is mock_database
        assert db_admin.api_endpoint == mock_database.api_endpoint
        assert len(httpserver.log) == 0

    @pytest.mark.describe("test of database defaults")
    def test_database_default_keyspace(self, httpserver: HTTPServer) -> None:
        database = Database(
            api_endpoint=httpserver.url_for("/"),
            keyspace=None,
            api_options=defaultAPIOptions(environment="other"),
        )
        assert database.keyspace == "default_keyspace"
        httpserver.expect_oneshot_request(
            "/v1/default_keyspace",
            method=HttpMethod.POST,
            json={"listTables": {}},
        ).respond_with_json({"status": {"tables": []}})
        assert database.list_table_names() == []


class TestDatabaseAsync:
    @pytest.mark.describe("test of database collection methods, async")
    async def test_database_collections_async(
        self,
        httpserver: HTTPServer,
        mock_database: Database,
    ) -> None:
        a_database = mock_database.to_async()
        httpserver.expect_oneshot_request(
            KEYSPACE_PATH,
            method=HttpMethod.POST,
            json={
                "createCollection": {
                    "name": "vectors",
                    "options": {"vector": {"dimension": 4}},
                },
            },
        ).respond_with_json({"status": {"ok": 1}})
        a_coll = await a_database.create_collection("vectors", dimension=4)
        assert a_coll.name == "vectors"

        httpserver.expect_oneshot_request(
            KEYSPACE_PATH,
            method=HttpMethod.POST,
            json={"findCollections": {"options": {"explain": True}}},
        ).respond_with_json(
            {
                "status": {
                    "collections": [
                        {"name": "vectors", "options": {"vector": {"dimension": 4}}},
                    ],
                },
            }
        )
        descriptors = await a_database.list_collections()
        assert descriptors[0].definition.vector is not None
        assert descriptors[0].definition.vector.dimension == 4

        httpserver.expect_oneshot_request(
            KEYSPACE_PATH,
            method=HttpMethod.POST,
            json={"deleteCollection": {"name": "vectors"}},
        ).respond_with_json({"status": {"ok": 1}})
        await a_database.drop_collection("vectors")
        assert len(httpserver.log) == 3

    @pytest.mark.describe("test of database table methods and command, async")
    async def test_database_tables_async(
        self,
        httpserver: HTTPServer,
        mock_database: Database,
    ) -> None:
        a_database = mock_database.to_async()
        httpserver.expect_oneshot_request(
            KEYSPACE_PATH,
            method=HttpMethod.POST,
            json={"createTable": {"name": "t", "definition": TABLE_DEFINITION}},
        ).respond_with_json({"status": {"ok": 1}})
        a_table = await a_database.create_table("t", definition=TABLE_DEFINITION)
        assert a_table.name == "t"

        httpserver.expect_oneshot_request(
            KEYSPACE_PATH,
            method=HttpMethod.POST,
            json={"listTables": {}},
        ).respond_with_json({"status": {"tables": ["t"]}})
        assert await a_database.list_table_names() == ["t"]

        httpserver.expect_oneshot_request(
            ROOT_PATH,
            method=HttpMethod.POST,
            json={"findKeyspaces": {}},
        ).respond_with_json({"status": {"keyspaces": ["keyspace"]}})
        ks_response = await a_database.command({"findKeyspaces": {}}, keyspace=None)
        assert ks_response["status"]["keyspaces"] == ["keyspace"]

        httpserver.expect_oneshot_request(
            KEYSPACE_PATH,
            method=HttpMethod.POST,
            json={"dropTable": {"name": "t"}},
        ).respond_with_json({"status": {"ok": 1}})
        await a_database.drop_table("t")
        assert len(httpserver.log) == 4
