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

from importlib import metadata


def get_version() -> str:
    try:
        return metadata.version("dataapi-client")
    except metadata.PackageNotFoundError:
        return "unknown"


__version__: str = get_version()


import dataapi.ids as ids  # noqa: E402
from dataapi.admin import DataAPIDatabaseAdmin  # noqa: E402
from dataapi.client import DataAPIClient  # noqa: E402
from dataapi.collection import AsyncCollection, Collection  # noqa: E402
from dataapi.commands import Command  # noqa: E402
from dataapi.cursors import (  # noqa: E402
    AsyncCollectionFindAndRerankCursor,
    AsyncCollectionFindCursor,
    AsyncTableFindCursor,
    CollectionFindAndRerankCursor,
    CollectionFindCursor,
    RerankedResult,
    TableFindCursor,
)
from dataapi.database import AsyncDatabase, Database  # noqa: E402
from dataapi.table import AsyncTable, Table  # noqa: E402

__all__ = [
    "AsyncCollection",
    "AsyncCollectionFindAndRerankCursor",
    "AsyncCollectionFindCursor",
    "AsyncDatabase",
    "AsyncTable",
    "AsyncTableFindCursor",
    "Collection",
    "CollectionFindAndRerankCursor",
    "CollectionFindCursor",
    "Command",
    "DataAPIClient",
    "DataAPIDatabaseAdmin",
    "Database",
    "RerankedResult",
    "Table",
    "TableFindCursor",
    "__version__",
]


__pdoc__ = {
    "ids": False,
    "settings": False,
}
