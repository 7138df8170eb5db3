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

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Sequence

from dataapi.exceptions.data_api_exceptions import DataAPIException

if TYPE_CHECKING:
    from dataapi.results import (
        CollectionBulkWriteResult,
        CollectionDeleteResult,
        CollectionUpdateResult,
    )


def _describe_exceptions(exceptions: Sequence[Exception], max_shown: int = 8) -> str:
    shown = ", ".join(str(exc) for exc in exceptions[:max_shown])
    if len(exceptions) > max_shown:
        return f"{shown} ... (more exceptions)"
    return shown


@dataclass
class TooManyDocumentsToCountException(DataAPIException):
    """
    A `count_documents()` found more documents than allowed, either by the
    upper bound passed by the caller or by the hard limit of the Data API.

    Attributes:
        text: a text message about the exception.
        server_max_count_exceeded: True if the server stopped counting at its
            own limit. In that case raising the upper bound does not help.
    """

    text: str
    server_max_count_exceeded: bool

    def __init__(self, text: str, *, server_max_count_exceeded: bool) -> None:
        super().__init__(text)
        self.text = text
        self.server_max_count_exceeded = server_max_count_exceeded


@dataclass
class CollectionInsertManyException(DataAPIException):
    """
    An insert_many failed in one or more of its chunks.

    The documents of the successful chunks (and the accepted documents of
    partially-failed chunks) are inserted nevertheless: their IDs are listed
    here in the order the chunks were submitted.

    Attributes:
        inserted_ids: the IDs of the documents actually inserted.
        exceptions: the root causes. More than one is possible for
            unordered (concurrent) insertions.
    """

    inserted_ids: list[Any]
    exceptions: Sequence[Exception]

    def __str__(self) -> str:
        if not self.exceptions:
            return f"{self.__class__.__name__}()"
        return (
            f"{self.__class__.__name__}({_describe_exceptions(self.exceptions)} "
            f"[with {len(self.inserted_ids)} inserted ids])"
        )


@dataclass
class CollectionDeleteManyException(DataAPIException):
    """
    A delete_many failed on one of its pages. The pages processed before
    the failure stay deleted, as described by the partial result.

    Attributes:
        partial_result: a CollectionDeleteResult for the completed pages.
        cause: the error that stopped the operation.
    """

    partial_result: CollectionDeleteResult
    cause: Exception

    def __str__(self) -> str:
        return f"{self.__class__.__name__}({self.cause})"


@dataclass
class CollectionUpdateManyException(DataAPIException):
    """
    An update_many failed on one of its pages. The pages processed before
    the failure stay updated, as described by the partial result.

    Attributes:
        partial_result: a CollectionUpdateResult for the completed pages.
        cause: the error that stopped the operation.
    """

    partial_result: CollectionUpdateResult
    cause: Exception

    def __str__(self) -> str:
        return f"{self.__class__.__name__}({self.cause})"


@dataclass
class CollectionBulkWriteException(DataAPIException):
    """
    One or more commands of a bulk_write failed.

    Attributes:
        partial_result: a CollectionBulkWriteResult with the responses of the
            commands, in submission order (None for failed ones).
        exceptions: the root causes, in submission order.
    """

    partial_result: CollectionBulkWriteResult
    exceptions: Sequence[Exception]

    def __str__(self) -> str:
        return (
            f"{self.__class__.__name__}({_describe_exceptions(self.exceptions)} "
            f"[with {self.partial_result.succeeded_count} successful commands])"
        )
