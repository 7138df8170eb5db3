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

"""
Main conftest for shared fixtures: mock Data API destinations served by
pytest-httpserver and the objects pointed at them.
"""

from __future__ import annotations

import json
from collections.abc import Iterator
from typing import Any, Callable, Dict

import pytest
from blockbuster import BlockBuster, blockbuster_ctx
from pytest_httpserver import HTTPServer
from werkzeug import Request, Response

from dataapi import (
    AsyncCollection,
    AsyncTable,
    Collection,
    Database,
    Table,
)
from dataapi.utils.api_options import defaultAPIOptions

DefaultCollection = Collection[Dict[str, Any]]
DefaultAsyncCollection = AsyncCollection[Dict[str, Any]]
DefaultTable = Table[Dict[str, Any]]
DefaultAsyncTable = AsyncTable[Dict[str, Any]]

TEST_KEYSPACE = "keyspace"
TEST_COLLECTION_NAME = "collection"
TEST_TABLE_NAME = "table"


@pytest.fixture(autouse=True)
def blockbuster() -> Iterator[BlockBuster]:
    with blockbuster_ctx("dataapi") as bb:
        # TODO: follow discussion in https://github.com/encode/httpx/discussions/3456
        bb.functions["os.stat"].can_block_in("httpx/_client.py", "_init_transport")
        yield bb


def json_handler(
    responder: Callable[[Dict[str, Any]], Dict[str, Any]],
) -> Callable[[Request], Response]:
    """
    Turn a function from payload to response (both as dicts) into a
    request handler for HTTPServer.respond_with_handler.
    """

    def _handler(request: Request) -> Response:
        payload = json.loads(request.get_data(as_text=True))
        return Response(
            json.dumps(responder(payload)),
            status=200,
            content_type="application/json",
        )

    return _handler


@pytest.fixture
def mock_database(httpserver: HTTPServer) -> Database:
    return Database(
        api_endpoint=httpserver.url_for("/"),
        keyspace=TEST_KEYSPACE,
        api_options=defaultAPIOptions(environment="other"),
    )


@pytest.fixture
def mock_collection(mock_database: Database) -> DefaultCollection:
    return mock_database.get_collection(TEST_COLLECTION_NAME)


@pytest.fixture
def mock_acollection(mock_collection: DefaultCollection) -> DefaultAsyncCollection:
    return mock_collection.to_async()


@pytest.fixture
def mock_table(mock_database: Database) -> DefaultTable:
    return mock_database.get_table(TEST_TABLE_NAME)


@pytest.fixture
def mock_atable(mock_table: DefaultTable) -> DefaultAsyncTable:
    return mock_table.to_async()
