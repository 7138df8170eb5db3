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

from dataapi import AsyncDatabase, Database
from dataapi.admin import DataAPIDatabaseAdmin
from dataapi.api_options import APIOptions
from dataapi.exceptions import UnexpectedDataAPIResponseException
from dataapi.utils.request_tools import HttpMethod

ROOT_PATH = "/v1"
REPLICATION = {"class": "SimpleStrategy", "replication_factor": 1}


class TestDatabaseAdmin:
    @pytest.mark.describe("test of keyspace management, sync")
    def test_keyspace_management_sync(
        self,
        httpserver: HTTPServer,
        mock_database: Database,
    ) -> None:
        db_admin = mock_database.get_database_admin()

        httpserver.expect_oneshot_request(
            ROOT_PATH,
            method=HttpMethod.POST,
            json={"findKeyspaces": {}},
        ).respond_with_json({"status": {"keyspaces": ["keyspace", "ks2"]}})
        assert db_admin.list_keyspaces() == ["keyspace", "ks2"]

        httpserver.expect_oneshot_request(
            ROOT_PATH,
            method=HttpMethod.POST,
            json={"createKeyspace": {"name": "ks3"}},
        ).respond_with_json({"status": {"ok": 1}})
        db_admin.create_keyspace("ks3")
        assert mock_database.keyspace == "keyspace"

        httpserver.expect_oneshot_request(
            ROOT_PATH,
            method=HttpMethod.POST,
            json={
                "createKeyspace": {
                    "name": "ks4",
                    "options": {"replication": REPLICATION},
                },
            },
        ).respond_with_json({"status": {"ok": 1}})
        db_admin.create_keyspace(
            "ks4",
            replication_options=REPLICATION,
            update_db_keyspace=True,
        )
        assert mock_database.keyspace == "ks4"

        httpserver.expect_oneshot_request(
            ROOT_PATH,
            method=HttpMethod.POST,
            json={"dropKeyspace": {"name": "ks3"}},
        ).respond_with_json({"status": {"ok": 1}})
        db_admin.drop_keyspace("ks3")
        assert len(httpserver.log) == 4

    @pytest.mark.describe("test of keyspace management, faulty responses")
    def test_keyspace_management_faulty(
        self,
        httpserver: HTTPServer,
        mock_database: Database,
    ) -> None:
        db_admin = mock_database.get_database_admin()
        httpserver.expect_oneshot_request(
            ROOT_PATH,
            method=HttpMethod.POST,
        ).respond_with_json({"status": {}})
        with pytest.raises(UnexpectedDataAPIResponseException):
            db_admin.list_keyspaces()

        httpserver.expect_oneshot_request(
            ROOT_PATH,
            method=HttpMethod.POST,
        ).respond_with_json({"status": {"ok": 0}})
        with pytest.raises(UnexpectedDataAPIResponseException):
            db_admin.drop_keyspace("ks")

    @pytest.mark.describe("test of admin additional headers")
    def test_admin_headers(
        self,
        httpserver: HTTPServer,
        mock_database: Database,
    ) -> None:
        db_admin = mock_database.get_database_admin(
            token="admin_token",
            spawn_api_options=APIOptions(
                admin_additional_headers={"X-Admin-Header": "yes"},
            ),
        )
        httpserver.expect_oneshot_request(
            ROOT_PATH,
            method=HttpMethod.POST,
            headers={"Token": "admin_token", "X-Admin-Header": "yes"},
        ).respond_with_json({"status": {"keyspaces": []}})
        assert db_admin.list_keyspaces() == []
        assert len(httpserver.log) == 1

    @pytest.mark.describe("test of database spawning from the admin")
    def test_admin_get_database(
        self,
        httpserver: HTTPServer,
        mock_database: Database,
    ) -> None:
        db_admin = DataAPIDatabaseAdmin(
            api_endpoint=mock_database.api_endpoint,
            api_options=mock_database.api_options,
        )
        assert isinstance(db_admin.spawner_database, Database)
        assert db_admin == mock_database.get_database_admin()

        database = db_admin.get_database(keyspace="keyspace")
        assert database == mock_database
        assert db_admin.get_database().keyspace == "default_keyspace"

        a_database = db_admin.get_async_database(keyspace="ks2", token="t2")
        assert isinstance(a_database, AsyncDatabase)
        assert a_database.keyspace == "ks2"
        assert a_database.api_options.token.get_token() == "t2"

        other_admin = db_admin.with_options(token="t3")
        assert other_admin != db_admin
        assert other_admin.api_options.token.get_token() == "t3"
        assert len(httpserver.log) == 0

    @pytest.mark.describe("test of keyspace management, async")
    async def test_keyspace_management_async(
        self,
        httpserver: HTTPServer,
        mock_database: Database,
    ) -> None:
        a_database = mock_database.to_async()
        db_admin = a_database.get_database_admin()

        httpserver.expect_oneshot_request(
            ROOT_PATH,
            method=HttpMethod.POST,
            json={"findKeyspaces": {}},
        ).respond_with_json({"status": {"keyspaces": ["keyspace"]}})
        assert await db_admin.async_list_keyspaces() == ["keyspace"]

        httpserver.expect_oneshot_request(
            ROOT_PATH,
            method=HttpMethod.POST,
            json={
                "createKeyspace": {
                    "name": "ks2",
                    "options": {"replication": REPLICATION},
                },
            },
        ).respond_with_json({"status": {"ok": 1}})
        await db_admin.async_create_keyspace(
            "ks2",
            replication_options=REPLICATION,
            update_db_keyspace=True,
        )
        assert a_database.keyspace == "ks2"

        httpserver.expect_oneshot_request(
            ROOT_PATH,
            method=HttpMethod.POST,
            json={"dropKeyspace": {"name": "ks2"}},
        ).respond_with_json({"status": {"ok": 1}})
        await db_admin.async_drop_keyspace("ks2")
        assert len(httpserver.log) == 3
