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

from abc import ABC
from dataclasses import dataclass
from typing import Any


def _ellipsize(items: list[Any], max_shown: int = 5) -> str:
    if len(items) > max_shown:
        shown = ", ".join(str(item) for item in items[:max_shown])
        return f"[{shown} ... ({len(items)} total)]"
    return str(items)


@dataclass
class OperationResult(ABC):
    """
    The result of a write operation.

    Attributes:
        raw_results: the responses from the Data API, one per request issued.
    """

    raw_results: list[dict[str, Any]]

    def _piecewise_repr(self, pieces: list[str | None]) -> str:
        return f"{self.__class__.__name__}({', '.join(pc for pc in pieces if pc)})"


@dataclass
class CollectionInsertOneResult(OperationResult):
    """
    The result of `insert_one` on a collection.

    Attributes:
        raw_results: a one-item list with the response.
        inserted_id: the `_id` of the inserted document.
    """

    inserted_id: Any

    def __repr__(self) -> str:
        return self._piecewise_repr(
            [f"inserted_id={self.inserted_id}", "raw_results=..."]
        )


@dataclass
class CollectionInsertManyResult(OperationResult):
    """
    The result of `insert_many` on a collection.

    Attributes:
        raw_results: the responses, one per chunk, in chunk order.
        inserted_ids: the `_id` of the inserted documents, in input order.
    """

    inserted_ids: list[Any]

    def __repr__(self) -> str:
        return self._piecewise_repr(
            [f"inserted_ids={_ellipsize(self.inserted_ids)}", "raw_results=..."]
        )


@dataclass
class CollectionUpdateResult(OperationResult):
    """
    The result of an update (or replace) on a collection, possibly summed
    over several requests.

    Attributes:
        raw_results: the responses.
        matched_count: how many documents matched the filter.
        modified_count: how many documents were actually changed.
        upserted_id: the `_id` of the document inserted by an upsert, if any.
    """

    matched_count: int
    modified_count: int
    upserted_id: Any = None

    @property
    def update_info(self) -> dict[str, Any]:
        """A summary in the form {"n", "updatedExisting", "nModified"[, "upserted"]}."""
        info: dict[str, Any] = {
            "n": self.matched_count + (1 if self.upserted_id is not None else 0),
            "updatedExisting": self.modified_count > 0,
            "nModified": self.modified_count,
        }
        if self.upserted_id is not None:
            info["upserted"] = self.upserted_id
        return info

    def __repr__(self) -> str:
        return self._piecewise_repr(
            [
                f"matched_count={self.matched_count}",
                f"modified_count={self.modified_count}",
                f"upserted_id={self.upserted_id}"
                if self.upserted_id is not None
                else None,
                "raw_results=...",
            ]
        )


@dataclass
class CollectionDeleteResult(OperationResult):
    """
    The result of a delete on a collection, possibly summed over several
    requests.

    Attributes:
        raw_results: the responses.
        deleted_count: the number of deleted documents. This is -1 for
            `delete_all`, where the server does not report a count.
    """

    deleted_count: int

    def __repr__(self) -> str:
        return self._piecewise_repr(
            [f"deleted_count={self.deleted_count}", "raw_results=..."]
        )


@dataclass
class CollectionBulkWriteResult:
    """
    The result of `bulk_write` on a collection.

    Attributes:
        responses: one entry per submitted command, in submission order: the
            raw response of the command, or None for a failed command.
    """

    responses: list[dict[str, Any] | None]

    @property
    def succeeded_count(self) -> int:
        return sum(1 for response in self.responses if response is not None)

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(responses=<{len(self.responses)} entries, "
            f"{self.succeeded_count} succeeded>)"
        )


@dataclass
class TableInsertOneResult(OperationResult):
    """
    The result of `insert_one` on a table.

    Attributes:
        raw_results: a one-item list with the response.
        inserted_id: the primary key of the inserted row, as a dictionary.
        inserted_id_tuple: the same primary key as a tuple, in key order.
    """

    inserted_id: Any
    inserted_id_tuple: tuple[Any, ...]

    def __repr__(self) -> str:
        return self._piecewise_repr(
            [
                f"inserted_id={self.inserted_id}",
                f"inserted_id_tuple={self.inserted_id_tuple}",
                "raw_results=...",
            ]
        )


@dataclass
class TableInsertManyResult(OperationResult):
    """
    The result of `insert_many` on a table.

    Attributes:
        raw_results: the responses, one per chunk, in chunk order.
        inserted_ids: the primary keys of the inserted rows, as dictionaries.
        inserted_id_tuples: the same primary keys as tuples.
    """

    inserted_ids: list[Any]
    inserted_id_tuples: list[tuple[Any, ...]]

    def __repr__(self) -> str:
        return self._piecewise_repr(
            [
                f"inserted_ids={_ellipsize(self.inserted_ids)}",
                f"inserted_id_tuples={_ellipsize(self.inserted_id_tuples)}",
                "raw_results=...",
            ]
        )
