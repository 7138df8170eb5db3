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
from typing import Any, Sequence

from dataapi.exceptions.collection_exceptions import _describe_exceptions
from dataapi.exceptions.data_api_exceptions import DataAPIException


@dataclass
class TooManyRowsToCountException(DataAPIException):
    """
    A `count_documents()` on a table exceeded either the caller's upper bound
    or the counting limit of the Data API.

    Attributes:
        text: a text message about the exception.
        server_max_count_exceeded: True if the server stopped counting at its
            own limit.
    """

    text: str
    server_max_count_exceeded: bool

    def __init__(self, text: str, *, server_max_count_exceeded: bool) -> None:
        super().__init__(text)
        self.text = text
        self.server_max_count_exceeded = server_max_count_exceeded


@dataclass
class TableInsertManyException(DataAPIException):
    """
    An insert_many on a table failed in one or more of its chunks.

    Attributes:
        inserted_ids: primary keys (as dicts) of the rows actually inserted.
        inserted_id_tuples: the same primary keys, as tuples.
        exceptions: the root causes.
    """

    inserted_ids: list[Any]
    inserted_id_tuples: list[tuple[Any, ...]]
    exceptions: Sequence[Exception]

    def __str__(self) -> str:
        return (
            f"{self.__class__.__name__}({_describe_exceptions(self.exceptions)} "
            f"[with {len(self.inserted_ids)} inserted ids])"
        )
