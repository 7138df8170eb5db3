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
from abc import ABC
from enum import Enum
from typing import Any, Generic, TypeVar

from dataapi.exceptions import CursorException

# A cursor reads TRAW from the API and, if a mapper is set, yields T.
# A new cursor returned by .map will yield TNEW
TRAW = TypeVar("TRAW")
T = TypeVar("T")
TNEW = TypeVar("TNEW")


logger = logging.getLogger(__name__)


def _revise_timeouts_for_cursor_copy(
    *,
    new_general_method_timeout_ms: int | None,
    new_timeout_ms: int | None,
    old_request_timeout_ms: int | None,
) -> tuple[int | None, int | None]:
    """
    The (request_timeout_ms, overall_timeout_ms) pair for the working copy of
    a cursor made by to_list or for_each.

    The overall timeout comes from the method call (`timeout_ms` wins over
    `general_method_timeout_ms`). The per-request timeout of the cursor is
    kept, unless the overall one is shorter.
    """
    _general_method_timeout_ms = (
        new_timeout_ms if new_timeout_ms is not None else new_general_method_timeout_ms
    )
    _new_request_timeout_ms: int | None
    if _general_method_timeout_ms is not None:
        if old_request_timeout_ms is not None:
            _new_request_timeout_ms = min(
                _general_method_timeout_ms,
                old_request_timeout_ms,
            )
        else:
            _new_request_timeout_ms = _general_method_timeout_ms
    else:
        _new_request_timeout_ms = old_request_timeout_ms
    return (_new_request_timeout_ms, _general_method_timeout_ms)


def _ensure_vector(fvector: list[Any] | None) -> list[float] | None:
    if fvector is None:
        return None
    return [float(x) for x in fvector]


class CursorState(Enum):
    """
    The possible states of a cursor.

    Values:
        IDLE: iteration has not started yet.
        STARTED: iteration has started, more items may follow.
        CLOSED: exhausted or explicitly closed. No more items will be returned.
    """

    IDLE = "idle"
    STARTED = "started"
    CLOSED = "closed"


class AbstractCursor(ABC, Generic[TRAW]):
    """
    The state-keeping part common to all find cursors.

    A cursor holds a local buffer with (the unconsumed part of) the last page
    fetched from the Data API. A new page is requested only when the buffer
    is empty and more items are needed, so results are fetched lazily.
    This class is not meant to be instantiated directly.
    """

    _state: CursorState
    _buffer: list[TRAW]
    _pages_retrieved: int
    _consumed: int
    _next_page_state: str | None
    _last_response_status: dict[str, Any] | None

    def __init__(self) -> None:
        self.rewind()

    def _imprint_internal_state(self, other: AbstractCursor[TRAW]) -> None:
        """Mutably copy the internal state of this cursor onto another one."""
        other._state = self._state
        other._buffer = self._buffer
        other._pages_retrieved = self._pages_retrieved
        other._consumed = self._consumed
        other._next_page_state = self._next_page_state
        other._last_response_status = self._last_response_status

    def _ensure_alive(self) -> None:
        if self._state == CursorState.CLOSED:
            raise CursorException(
                text="Cursor is closed.",
                cursor_state=self._state.value,
            )

    def _ensure_idle(self) -> None:
        if self._state != CursorState.IDLE:
            raise CursorException(
                text="Cursor is not idle anymore.",
                cursor_state=self._state.value,
            )

    def _needs_page(self) -> bool:
        # a page is due if the buffer is empty and the server may have more
        if self._state == CursorState.CLOSED or self._buffer:
            return False
        return self._pages_retrieved == 0 or self._next_page_state is not None

    def _store_page(
        self,
        page: tuple[list[TRAW], str | None, dict[str, Any] | None],
    ) -> None:
        new_buffer, next_page_state, resp_status = page
        self._buffer = new_buffer
        self._next_page_state = next_page_state
        self._last_response_status = resp_status
        self._pages_retrieved += 1

    def _pop_one(self) -> TRAW:
        self._state = CursorState.STARTED
        traw0, self._buffer = self._buffer[0], self._buffer[1:]
        self._consumed += 1
        return traw0

    @property
    def state(self) -> CursorState:
        """The current state of this cursor, a value of `CursorState`."""
        return self._state

    @property
    def consumed(self) -> int:
        """The number of items the cursor has yielded so far."""
        return self._consumed

    @property
    def pages_retrieved(self) -> int:
        """The number of pages fetched from the Data API so far."""
        return self._pages_retrieved

    @property
    def buffered_count(self) -> int:
        """
        The number of items currently in the local buffer. Reading this
        property never triggers an API call.
        """
        return len(self._buffer)

    def close(self) -> None:
        """
        Close the cursor, discarding any item left in the buffer. This is an
        in-place modification of the cursor.
        """
        self._state = CursorState.CLOSED
        self._buffer = []

    def rewind(self) -> None:
        """
        Bring the cursor back to its pristine IDLE state, with nothing fetched
        and nothing consumed. All settings (filter, mapper...) are retained.
        This is an in-place modification of the cursor.
        """
        self._state = CursorState.IDLE
        self._buffer = []
        self._pages_retrieved = 0
        self._consumed = 0
        self._next_page_state = None
        self._last_response_status = None

    def consume_buffer(self, n: int | None = None) -> list[TRAW]:
        """
        Take up to `n` items (default: all) from the local buffer, marking them
        as consumed. This never triggers an API call and never raises because
        of the cursor state: an empty buffer gives an empty list.

        Args:
            n: how many items to take at most.

        Returns:
            a list of raw items, not passed through the mapper.
        """
        _n = n if n is not None else len(self._buffer)
        if _n < 0:
            raise ValueError("A negative amount of items was requested.")
        returned, remaining = self._buffer[:_n], self._buffer[_n:]
        self._buffer = remaining
        self._consumed += len(returned)
        return returned
