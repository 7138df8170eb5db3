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

import logging
from dataclasses import dataclass
from typing import Any

from dataapi.constants import TableIndexType

INDEXING_ALLOWED_MODES = {"allow", "deny"}

logger = logging.getLogger(__name__)


def _warn_residual_keys(
    klass: type, raw_dict: dict[str, Any], known_keys: set[str]
) -> None:
    residual_keys = raw_dict.keys() - known_keys
    if residual_keys:
        logger.warning(
            "Unexpected key(s) encountered parsing a dictionary into "
            f"a `{klass.__name__}`: '{','.join(sorted(residual_keys))}'"
        )


@dataclass
class CollectionInfo:
    """
    The identifying information of a collection.

    Attributes:
        api_endpoint: the endpoint of the database holding the collection.
        keyspace: the keyspace where the collection is located.
        name: the collection name, unique within the keyspace.
        full_name: "keyspace.collection_name".
    """

    api_endpoint: str
    keyspace: str
    name: str
    full_name: str


@dataclass
class TableInfo:
    """
    The identifying information of a table.

    Attributes:
        api_endpoint: the endpoint of the database holding the table.
        keyspace: the keyspace where the table is located.
        name: the table name, unique within the keyspace.
        full_name: "keyspace.table_name".
    """

    api_endpoint: str
    keyspace: str
    name: str
    full_name: str


@dataclass
class CollectionDefaultIDOptions:
    """
    The "defaultId" component of the collection options.

    Attributes:
        default_id_type: the kind of `_id` the Data API generates for documents
            inserted without one, a value of `DefaultIdType`.
    """

    default_id_type: str

    def as_dict(self) -> dict[str, Any]:
        return {"type": self.default_id_type}

    @staticmethod
    def _from_dict(
        raw_dict: dict[str, Any] | None,
    ) -> CollectionDefaultIDOptions | None:
        if raw_dict is not None:
            return CollectionDefaultIDOptions(default_id_type=raw_dict["type"])
        return None


@dataclass
class CollectionVectorOptions:
    """
    The "vector" component of the collection options.

    Attributes:
        dimension: the number of components of the vectors.
        metric: the similarity metric, a value of `VectorMetric`.
        source_model: the embedding model the index is tuned for.
        service: the vectorize service configuration, as a plain dictionary.
    """

    dimension: int | None = None
    metric: str | None = None
    source_model: str | None = None
    service: dict[str, Any] | None = None

    def as_dict(self) -> dict[str, Any]:
        return {
            k: v
            for k, v in {
                "dimension": self.dimension,
                "metric": self.metric,
                "service": self.service,
                "sourceModel": self.source_model,
            }.items()
            if v is not None
        }

    @staticmethod
    def _from_dict(raw_dict: dict[str, Any] | None) -> CollectionVectorOptions | None:
        if raw_dict is not None:
            return CollectionVectorOptions(
                dimension=raw_dict.get("dimension"),
                metric=raw_dict.get("metric"),
                source_model=raw_dict.get("sourceModel"),
                service=raw_dict.get("service"),
            )
        return None


@dataclass
class CollectionDefinition:
    """
    The settings of a collection, as used to create it and as read back from
    the Data API (where they are called "options").

    Attributes:
        vector: the vector settings, if the collection is vector-enabled.
        indexing: the indexing policy, e.g. `{"deny": ["blob"]}`.
        default_id: the default `_id` generation settings.
    """

    vector: CollectionVectorOptions | None = None
    indexing: dict[str, Any] | None = None
    default_id: CollectionDefaultIDOptions | None = None

    def __repr__(self) -> str:
        not_null_pieces = [
            pc
            for pc in [
                None if self.vector is None else f"vector={self.vector.__repr__()}",
                None if self.indexing is None else f"indexing={self.indexing}",
                None
                if self.default_id is None
                else f"default_id={self.default_id.__repr__()}",
            ]
            if pc is not None
        ]
        return f"{self.__class__.__name__}({', '.join(not_null_pieces)})"

    def as_dict(self) -> dict[str, Any]:
        """Recast this object into a dictionary, leaving out unset parts."""
        return {
            k: v
            for k, v in {
                "vector": None if self.vector is None else self.vector.as_dict(),
                "indexing": self.indexing,
                "defaultId": None
                if self.default_id is None
                else self.default_id.as_dict(),
            }.items()
            if v
        }

    @classmethod
    def _from_dict(cls, raw_dict: dict[str, Any]) -> CollectionDefinition:
        _warn_residual_keys(cls, raw_dict, {"vector", "indexing", "defaultId"})
        return CollectionDefinition(
            vector=CollectionVectorOptions._from_dict(raw_dict.get("vector")),
            indexing=raw_dict.get("indexing"),
            default_id=CollectionDefaultIDOptions._from_dict(raw_dict.get("defaultId")),
        )

    @classmethod
    def coerce(
        cls, raw_input: CollectionDefinition | dict[str, Any] | None
    ) -> CollectionDefinition:
        """Normalize an object, a plain dictionary or None into a definition."""
        if isinstance(raw_input, CollectionDefinition):
            return raw_input
        return cls._from_dict(raw_input or {})

    def with_settings(
        self,
        *,
        dimension: int | None = None,
        metric: str | None = None,
        indexing: dict[str, Any] | None = None,
        default_id_type: str | None = None,
    ) -> CollectionDefinition:
        """
        A copy of this definition where the provided (non-None) settings
        replace the existing ones.
        """
        if indexing is not None:
            if len(indexing) != 1 or next(iter(indexing)) not in INDEXING_ALLOWED_MODES:
                raise ValueError(
                    "Indexing must have exactly one key among "
                    f"{', '.join(sorted(INDEXING_ALLOWED_MODES))}."
                )
        vector = self.vector
        if dimension is not None or metric is not None:
            vector = CollectionVectorOptions(
                dimension=dimension if dimension is not None else (
                    self.vector.dimension if self.vector else None
                ),
                metric=metric if metric is not None else (
                    self.vector.metric if self.vector else None
                ),
                source_model=self.vector.source_model if self.vector else None,
                service=self.vector.service if self.vector else None,
            )
        return CollectionDefinition(
            vector=vector,
            indexing=indexing if indexing is not None else self.indexing,
            default_id=CollectionDefaultIDOptions(default_id_type)
            if default_id_type is not None
            else self.default_id,
        )


@dataclass
class CollectionDescriptor:
    """
    The description of a collection as returned by `findCollections`:
    its name and its definition.

    Attributes:
        name: the name of the collection.
        definition: a CollectionDefinition.
        raw_descriptor: the descriptor as received from the Data API.
    """

    name: str
    definition: CollectionDefinition
    raw_descriptor: dict[str, Any] | None

    def __repr__(self) -> str:
        not_null_pieces = [
            pc
            for pc in [
                f"name={self.name.__repr__()}",
                f"definition={self.definition.__repr__()}",
                None if self.raw_descriptor is None else "raw_descriptor=...",
            ]
            if pc is not None
        ]
        return f"{self.__class__.__name__}({', '.join(not_null_pieces)})"

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, CollectionDescriptor):
            return self.name == other.name and self.definition == other.definition
        return False

    def as_dict(self) -> dict[str, Any]:
        return {
            k: v
            for k, v in {
                "name": self.name,
                "options": self.definition.as_dict(),
            }.items()
            if v
        }

    @classmethod
    def _from_dict(cls, raw_dict: dict[str, Any]) -> CollectionDescriptor:
        _warn_residual_keys(cls, raw_dict, {"name", "options"})
        return CollectionDescriptor(
            name=raw_dict["name"],
            definition=CollectionDefinition._from_dict(raw_dict.get("options") or {}),
            raw_descriptor=raw_dict,
        )

    @classmethod
    def coerce(
        cls, raw_input: CollectionDescriptor | dict[str, Any]
    ) -> CollectionDescriptor:
        if isinstance(raw_input, CollectionDescriptor):
            return raw_input
        return cls._from_dict(raw_input)


@dataclass
class TableDescriptor:
    """
    The description of a table as returned by `listTables`.

    The definition is kept in the API format: a dictionary with "columns"
    (column name to type specification) and "primaryKey".

    Attributes:
        name: the name of the table.
        definition: the table definition.
        raw_descriptor: the descriptor as received from the Data API.
    """

    name: str
    definition: dict[str, Any]
    raw_descriptor: dict[str, Any] | None

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(name={self.name.__repr__()}, "
            f"columns=<{len(self.columns)}>, primary_key={self.primary_key})"
        )

    @property
    def columns(self) -> dict[str, Any]:
        return self.definition.get("columns") or {}

    @property
    def primary_key(self) -> Any:
        return self.definition.get("primaryKey")

    def as_dict(self) -> dict[str, Any]:
        return {"name": self.name, "definition": self.definition}

    @classmethod
    def _from_dict(cls, raw_dict: dict[str, Any]) -> TableDescriptor:
        _warn_residual_keys(cls, raw_dict, {"name", "definition"})
        return TableDescriptor(
            name=raw_dict["name"],
            definition=raw_dict.get("definition") or {},
            raw_descriptor=raw_dict,
        )

    @classmethod
    def coerce(cls, raw_input: TableDescriptor | dict[str, Any]) -> TableDescriptor:
        if isinstance(raw_input, TableDescriptor):
            return raw_input
        return cls._from_dict(raw_input)


@dataclass
class TableIndexDescriptor:
    """
    The description of an index on a table, as returned by `listIndexes`.

    Attributes:
        name: the name of the index.
        definition: the index definition in the API format, e.g.
            `{"column": "age", "options": {...}}`.
        index_type: a `TableIndexType`. Index kinds unknown to this client
            are reported as `TableIndexType.UNKNOWN`.
    """

    name: str
    definition: dict[str, Any]
    index_type: TableIndexType

    @property
    def column(self) -> Any:
        return self.definition.get("column")

    def as_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "definition": self.definition,
            "indexType": self.index_type.value,
        }

    @classmethod
    def _from_dict(cls, raw_dict: dict[str, Any]) -> TableIndexDescriptor:
        _warn_residual_keys(cls, raw_dict, {"name", "definition", "indexType"})
        raw_index_type = raw_dict.get("indexType")
        index_type = (
            TableIndexType.coerce(raw_index_type)
            if raw_index_type in TableIndexType
            else TableIndexType.UNKNOWN
        )
        return TableIndexDescriptor(
            name=raw_dict["name"],
            definition=raw_dict.get("definition") or {},
            index_type=index_type,
        )

    @classmethod
    def coerce(
        cls, raw_input: TableIndexDescriptor | dict[str, Any]
    ) -> TableIndexDescriptor:
        if isinstance(raw_input, TableIndexDescriptor):
            return raw_input
        return cls._from_dict(raw_input)


__all__ = [
    "CollectionDefaultIDOptions",
    "CollectionDefinition",
    "CollectionDescriptor",
    "CollectionInfo",
    "CollectionVectorOptions",
    "TableDescriptor",
    "TableIndexDescriptor",
    "TableInfo",
]
