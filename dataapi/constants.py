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

from typing import Any, Dict, Iterable, Optional, Tuple, TypeVar, Union

from dataapi.settings.defaults import (
    DATA_API_ENVIRONMENT_CASSANDRA,
    DATA_API_ENVIRONMENT_DEV,
    DATA_API_ENVIRONMENT_DSE,
    DATA_API_ENVIRONMENT_HCD,
    DATA_API_ENVIRONMENT_OTHER,
    DATA_API_ENVIRONMENT_PROD,
    DATA_API_ENVIRONMENT_TEST,
)
from dataapi.utils.str_enum import StrEnum

DefaultDocumentType = Dict[str, Any]
DefaultRowType = Dict[str, Any]
ProjectionType = Union[Iterable[str], Dict[str, Any]]
SortType = Dict[str, Any]
HybridSortType = Dict[str, Any]
FilterType = Dict[str, Any]
CallerType = Tuple[Optional[str], Optional[str]]


DOC = TypeVar("DOC")
ROW = TypeVar("ROW")


def normalize_optional_projection(
    projection: ProjectionType | None,
) -> dict[str, Any] | None:
    """An iterable of field names becomes an allow-list dictionary."""
    if projection:
        if isinstance(projection, dict):
            return projection
        return {field: True for field in projection}
    return None


class ReturnDocument:
    """
    Admitted values for the `return_document` parameter of the
    `find_one_and_replace` and `find_one_and_update` methods.
    """

    def __init__(self) -> None:
        raise NotImplementedError

    BEFORE = "before"
    AFTER = "after"


class SortMode:
    """
    Admitted values for sorting on a field, e.g. `sort={"age": SortMode.DESCENDING}`.
    """

    def __init__(self) -> None:
        raise NotImplementedError

    ASCENDING = 1
    DESCENDING = -1


class VectorMetric:
    """Similarity metrics for vector-enabled collections and vector indexes."""

    def __init__(self) -> None:
        raise NotImplementedError

    DOT_PRODUCT = "dot_product"
    EUCLIDEAN = "euclidean"
    COSINE = "cosine"


class DefaultIdType:
    """
    Admitted values for the `default_id_type` of a collection, i.e. the kind
    of `_id` the Data API generates for documents inserted without one.
    """

    def __init__(self) -> None:
        raise NotImplementedError

    UUID = "uuid"
    OBJECTID = "objectId"
    UUIDV6 = "uuidv6"
    UUIDV7 = "uuidv7"
    DEFAULT = "uuid"


class Environment:
    """
    Admitted values for the `environment` setting, i.e. the kind of
    deployment the client talks to. The first three are hosted Astra DB
    destinations, the others are self-deployed ("local") Data API instances.
    """

    def __init__(self) -> None:
        raise NotImplementedError

    PROD = DATA_API_ENVIRONMENT_PROD
    DEV = DATA_API_ENVIRONMENT_DEV
    TEST = DATA_API_ENVIRONMENT_TEST
    DSE = DATA_API_ENVIRONMENT_DSE
    HCD = DATA_API_ENVIRONMENT_HCD
    CASSANDRA = DATA_API_ENVIRONMENT_CASSANDRA
    OTHER = DATA_API_ENVIRONMENT_OTHER

    values = {PROD, DEV, TEST, DSE, HCD, CASSANDRA, OTHER}
    astra_db_values = {PROD, DEV, TEST}


class TableIndexType(StrEnum):
    """The kinds of index a table column can carry."""

    REGULAR = "regular"
    VECTOR = "vector"
    TEXT = "text"
    UNKNOWN = "UNKNOWN"


__all__ = [
    "DefaultIdType",
    "Environment",
    "ReturnDocument",
    "SortMode",
    "TableIndexType",
    "VectorMetric",
]
