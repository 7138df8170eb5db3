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
from typing import (
    TYPE_CHECKING,
    AsyncIterator,
    Awaitable,
    Callable,
    Generic,
    Iterator,
    TypeVar,
)

if TYPE_CHECKING:
    from dataapi.commands import Command
    from dataapi.runner import DataAPIResponse

T = TypeVar("T")


@dataclass(frozen=True)
class PageContinuation:
    """
    Whether, and how, a paginated operation goes on after a response.

    The Data API signals continuation in two ways: reads return a
    `nextPageState` token (in "data", or in "status" for some commands),
    while multi-document writes such as deleteMany and updateMany set
    `status.moreData` and expect the very same command to be sent again.
    This object normalizes both.

    Attributes:
        page_state: the token to send back as `options.pageState`, if any.
        more_data: whether the server reported more data to process.
    """

    page_state: str | None = None
    more_data: bool = False

    @property
    def has_more(self) -> bool:
        return self.page_state is not None or self.more_data

    @staticmethod
    def from_response(response: DataAPIResponse) -> PageContinuation:
        page_state = response.data.get("nextPageState")
        if page_state is None:
            page_state = response.status.get("nextPageState")
        return PageContinuation(
            page_state=page_state,
            more_data=bool(response.status.get("moreData")),
        )

    def apply(self, command: Command) -> Command:
        """
        The command to send for the next page: with `options.pageState` set
        if there is a token, else the command unchanged.
        """
        if self.page_state is not None:
            return command.with_option("pageState", self.page_state)
        return command


@dataclass
class FindPage(Generic[T]):
    """
    A whole page of results from a find operation, as returned by the
    `find_page` methods.

    Attributes:
        results: the documents (or rows) of the page.
        next_page_state: the token to request the following page with, or
            None if this was the last page.
        sort_vector: the query vector used for a vector search, if the
            command asked for it with `includeSortVector`.
    """

    results: list[T]
    next_page_state: str | None
    sort_vector: list[float] | None = None

    def __repr__(self) -> str:
        pieces = [
            pc
            for pc in (
                f"results=<{len(self.results)} entries>",
                "next_page_state=..." if self.next_page_state else None,
                "sort_vector=..." if self.sort_vector else None,
            )
            if pc is not None
        ]
        return f"{self.__class__.__name__}({', '.join(pieces)})"


def paginate(
    command: Command,
    execute: Callable[[Command], DataAPIResponse],
) -> Iterator[DataAPIResponse]:
    """
    Run a command, then keep re-running it for as long as the server signals
    continuation, yielding each response as soon as it arrives.
    Errors propagate to the consumer, who keeps whatever it has accumulated.
    """
    next_command: Command | None = command
    while next_command is not None:
        response = execute(next_command)
        yield response
        continuation = PageContinuation.from_response(response)
        next_command = continuation.apply(command) if continuation.has_more else None


async def async_paginate(
    command: Command,
    execute: Callable[[Command], Awaitable[DataAPIResponse]],
) -> AsyncIterator[DataAPIResponse]:
    """The asynchronous counterpart of `paginate`."""
    next_command: Command | None = command
    while next_command is not None:
        response = await execute(next_command)
        yield response
        continuation = PageContinuation.from_response(response)
        next_command = continuation.apply(command) if continuation.has_more else None
