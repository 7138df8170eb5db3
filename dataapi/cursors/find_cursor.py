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

import inspect
from copy import deepcopy
from typing import TYPE_CHECKING, Any, Callable, Generic, cast

from dataapi.commands import Command, find_command
from dataapi.constants import FilterType, ProjectionType
from dataapi.cursors.cursor import (
    TNEW,
    TRAW,
    AbstractCursor,
    CursorState,
    T,
    _ensure_vector,
    _revise_timeouts_for_cursor_copy,
)
from dataapi.cursors.query_engine import _FindQueryEngine
from dataapi.exceptions import MultiCallTimeoutManager
from dataapi.utils.unset import UnsetType

if TYPE_CHECKING:
    from dataapi.collection import AsyncCollection, Collection
    from dataapi.table import AsyncTable, Table


class _QueryCursorBase(Generic[TRAW, T], AbstractCursor[TRAW]):
    """
    Settings and builder methods shared by all query cursors. Builder methods
    (filter, project, sort, ...) return a new cursor and require the
    cursor to be IDLE; the original cursor is unchanged.

    Subclasses provide the command with `_query_command` and may set their
    own settings before calling `_QueryCursorBase.__init__`.
    """

    _query_engine_class: type[_FindQueryEngine[Any]] = _FindQueryEngine
    _data_source: Any
    _query_engine: _FindQueryEngine[TRAW]
    _request_timeout_ms: int | None
    _overall_timeout_ms: int | None
    _request_timeout_label: str | None
    _overall_timeout_label: str | None
    _timeout_manager: MultiCallTimeoutManager
    _filter: FilterType | None
    _projection: ProjectionType | None
    _sort: dict[str, Any] | None
    _limit: int | None
    _include_sort_vector: bool | None
    _mapper: Callable[[TRAW], T] | None

    def __init__(
        self,
        *,
        data_source: Any,
        request_timeout_ms: int | None,
        overall_timeout_ms: int | None,
        request_timeout_label: str | None = None,
        overall_timeout_label: str | None = None,
        filter: FilterType | None = None,
        projection: ProjectionType | None = None,
        sort: dict[str, Any] | None = None,
        limit: int | None = None,
        include_sort_vector: bool | None = None,
        mapper: Callable[[TRAW], T] | None = None,
    ) -> None:
        self._data_source = data_source
        self._filter = deepcopy(filter)
        self._projection = projection
        self._sort = deepcopy(sort)
        self._limit = limit
        self._include_sort_vector = include_sort_vector
        self._mapper = mapper
        self._request_timeout_ms = request_timeout_ms
        self._overall_timeout_ms = overall_timeout_ms
        self._request_timeout_label = request_timeout_label
        self._overall_timeout_label = overall_timeout_label
        self._query_engine = self._query_engine_class(
            runner=data_source._runner,
            source_name=data_source.name,
            command=self._query_command(),
        )
        AbstractCursor.__init__(self)
        self._timeout_manager = MultiCallTimeoutManager(
            overall_timeout_ms=self._overall_timeout_ms,
            timeout_label=self._overall_timeout_label,
        )

    def _query_command(self) -> Command:
        raise NotImplementedError

    def _settings(self) -> dict[str, Any]:
        """The constructor arguments reproducing this cursor."""
        return {
            "data_source": self._data_source,
            "request_timeout_ms": self._request_timeout_ms,
            "overall_timeout_ms": self._overall_timeout_ms,
            "request_timeout_label": self._request_timeout_label,
            "overall_timeout_label": self._overall_timeout_label,
            "filter": self._filter,
            "projection": self._projection,
            "sort": self._sort,
            "limit": self._limit,
            "include_sort_vector": self._include_sort_vector,
            "mapper": self._mapper,
        }

    def _copy(self, **kwargs: Any) -> Any:
        settings = self._settings()
        settings.update(
            {k: v for k, v in kwargs.items() if not isinstance(v, UnsetType)}
        )
        return self.__class__(**settings)

    def __repr__(self) -> str:
        return (
            f'{self.__class__.__name__}("{self._data_source.name}", '
            f"{self._state.value}, "
            f"consumed so far: {self.consumed})"
        )

    def clone(self) -> Any:
        """
        A copy of this cursor with the same settings (filter, projection,
        timeouts, mapper...), in the pristine IDLE state.
        """
        return self._copy()

    def filter(self, filter: FilterType | None) -> Any:
        """A copy of this IDLE cursor with a new filter."""
        self._ensure_idle()
        return self._copy(filter=filter)

    def project(self, projection: ProjectionType | None) -> Any:
        """A copy of this IDLE cursor with a new projection."""
        self._ensure_idle()
        return self._copy(projection=projection)

    def sort(self, sort: dict[str, Any] | None) -> Any:
        """A copy of this IDLE cursor with a new sort."""
        self._ensure_idle()
        return self._copy(sort=sort)

    def limit(self, limit: int | None) -> Any:
        """A copy of this IDLE cursor with a new limit (None or 0: no limit)."""
        self._ensure_idle()
        return self._copy(limit=limit)

    def include_sort_vector(self, include_sort_vector: bool | None = True) -> Any:
        """
        A copy of this IDLE cursor that asks for the query vector of a
        vector search, see `get_sort_vector`.
        """
        self._ensure_idle()
        return self._copy(include_sort_vector=include_sort_vector)

    def map(self, mapper: Callable[[T], TNEW]) -> Any:
        """
        A copy of this IDLE cursor whose items pass through `mapper`. On a
        cursor that already has a mapper, the two functions are composed.

        Example:
            >>> cursor = collection.find({}, projection={"seq": True}, limit=2)
            >>> cursor.map(lambda doc: doc["seq"]).to_list()
            [1, 4]
        """
        self._ensure_idle()
        composite_mapper: Callable[[TRAW], TNEW]
        if self._mapper is not None:
            inner_mapper = self._mapper

            def _composite(document: TRAW) -> TNEW:
                return mapper(inner_mapper(document))

            composite_mapper = _composite
        else:
            composite_mapper = cast(Callable[[TRAW], TNEW], mapper)
        return self._copy(mapper=composite_mapper)

    def _map_item(self, traw: TRAW) -> T:
        return cast(T, self._mapper(traw) if self._mapper is not None else traw)

    def _sort_vector_from_status(self) -> list[float] | None:
        if self._last_response_status:
            return _ensure_vector(self._last_response_status.get("sortVector"))
        return None


class _FindCursorBase(_QueryCursorBase[TRAW, T]):
    """The settings specific to the cursors of `find` commands."""

    _include_similarity: bool | None
    _skip: int | None
    _initial_page_state: str | None

    def __init__(
        self,
        *,
        include_similarity: bool | None = None,
        skip: int | None = None,
        initial_page_state: str | None = None,
        **kwargs: Any,
    ) -> None:
        self._include_similarity = include_similarity
        self._skip = skip
        self._initial_page_state = initial_page_state
        _QueryCursorBase.__init__(self, **kwargs)

    def _query_command(self) -> Command:
        return find_command(
            filter=self._filter,
            projection=self._projection,
            sort=self._sort,
            options={
                "limit": self._limit or None,
                "skip": self._skip,
                "includeSimilarity": self._include_similarity,
                "includeSortVector": self._include_sort_vector,
            },
        )

    def _settings(self) -> dict[str, Any]:
        return {
            **_QueryCursorBase._settings(self),
            "include_similarity": self._include_similarity,
            "skip": self._skip,
            "initial_page_state": self._initial_page_state,
        }

    def rewind(self) -> None:
        AbstractCursor.rewind(self)
        # a cursor resumed from a page state starts from that page
        self._next_page_state = self._initial_page_state

    def skip(self, skip: int | None) -> Any:
        """A copy of this IDLE cursor with a new skip. Requires a sort."""
        self._ensure_idle()
        return self._copy(skip=skip)

    def include_similarity(self, include_similarity: bool | None = True) -> Any:
        """
        A copy of this IDLE cursor that asks for the similarity score
        (the `$similarity` field) in vector searches.
        """
        self._ensure_idle()
        return self._copy(include_similarity=include_similarity)


class _SyncQueryCursor(_QueryCursorBase[TRAW, T]):
    def _try_ensure_fill_buffer(self) -> None:
        """
        Fetch pages until the buffer has items or the server has no more.
        Never changes the cursor state.
        """
        while self._needs_page():
            self._store_page(
                self._query_engine._fetch_page(
                    page_state=self._next_page_state,
                    timeout_context=self._timeout_manager.remaining_timeout(
                        cap_time_ms=self._request_timeout_ms,
                        cap_timeout_label=self._request_timeout_label,
                    ),
                )
            )

    def __iter__(self) -> Any:
        self._ensure_alive()
        return self

    def __next__(self) -> T:
        if self._state == CursorState.CLOSED:
            raise StopIteration
        self._try_ensure_fill_buffer()
        if not self._buffer:
            self._state = CursorState.CLOSED
            raise StopIteration
        return self._map_item(self._pop_one())

    def has_next(self) -> bool:
        """
        Whether the cursor has at least one more item to yield. This may fetch
        a new page if the buffer is empty; an IDLE cursor stays IDLE.
        Always False on a CLOSED cursor.
        """
        if self._state == CursorState.CLOSED:
            return False
        self._try_ensure_fill_buffer()
        return len(self._buffer) > 0

    def for_each(
        self,
        function: Callable[[T], bool | None],
        *,
        general_method_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> None:
        """
        Consume the remaining items, calling `function` on each. If the
        function returns False (exactly), stop early, leaving the cursor
        partially consumed.

        Args:
            function: the callback receiving each item.
            general_method_timeout_ms: a timeout, in milliseconds, for the
                whole method. The per-request timeout of the cursor still applies.
            timeout_ms: an alias for `general_method_timeout_ms`.
        """
        self._ensure_alive()
        copy_req_ms, copy_ovr_ms = _revise_timeouts_for_cursor_copy(
            new_general_method_timeout_ms=general_method_timeout_ms,
            new_timeout_ms=timeout_ms,
            old_request_timeout_ms=self._request_timeout_ms,
        )
        _cursor = self._copy(
            request_timeout_ms=copy_req_ms,
            overall_timeout_ms=copy_ovr_ms,
        )
        self._imprint_internal_state(_cursor)
        for item in _cursor:
            if function(item) is False:
                break
        _cursor._imprint_internal_state(self)

    def to_list(
        self,
        *,
        general_method_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> list[T]:
        """
        All the items left in the cursor, as a list. This exhausts the cursor.

        Args:
            general_method_timeout_ms: a timeout, in milliseconds, for the
                whole method. The per-request timeout of the cursor still applies.
            timeout_ms: an alias for `general_method_timeout_ms`.
        """
        self._ensure_alive()
        copy_req_ms, copy_ovr_ms = _revise_timeouts_for_cursor_copy(
            new_general_method_timeout_ms=general_method_timeout_ms,
            new_timeout_ms=timeout_ms,
            old_request_timeout_ms=self._request_timeout_ms,
        )
        _cursor = self._copy(
            request_timeout_ms=copy_req_ms,
            overall_timeout_ms=copy_ovr_ms,
        )
        self._imprint_internal_state(_cursor)
        items = [item for item in _cursor]
        _cursor._imprint_internal_state(self)
        return items

    def get_sort_vector(self) -> list[float] | None:
        """
        The query vector of the vector search behind this cursor, if the
        cursor was built with `include_sort_vector`; None otherwise.
        This may trigger the fetch of the first page.
        """
        self._try_ensure_fill_buffer()
        return self._sort_vector_from_status()


class _AsyncQueryCursor(_QueryCursorBase[TRAW, T]):
    async def _try_ensure_fill_buffer(self) -> None:
        while self._needs_page():
            self._store_page(
                await self._query_engine._async_fetch_page(
                    page_state=self._next_page_state,
                    timeout_context=self._timeout_manager.remaining_timeout(
                        cap_time_ms=self._request_timeout_ms,
                        cap_timeout_label=self._request_timeout_label,
                    ),
                )
            )

    def __aiter__(self) -> Any:
        self._ensure_alive()
        return self

    async def __anext__(self) -> T:
        if self._state == CursorState.CLOSED:
            raise StopAsyncIteration
        await self._try_ensure_fill_buffer()
        if not self._buffer:
            self._state = CursorState.CLOSED
            raise StopAsyncIteration
        return self._map_item(self._pop_one())

    async def has_next(self) -> bool:
        """The async counterpart of the sync cursor `has_next`."""
        if self._state == CursorState.CLOSED:
            return False
        await self._try_ensure_fill_buffer()
        return len(self._buffer) > 0

    async def for_each(
        self,
        function: Callable[[T], Any],
        *,
        general_method_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> None:
        """
        Consume the remaining items, calling `function` on each. The function
        can be a coroutine function. If it returns False (exactly), stop early.
        """
        self._ensure_alive()
        copy_req_ms, copy_ovr_ms = _revise_timeouts_for_cursor_copy(
            new_general_method_timeout_ms=general_method_timeout_ms,
            new_timeout_ms=timeout_ms,
            old_request_timeout_ms=self._request_timeout_ms,
        )
        _cursor = self._copy(
            request_timeout_ms=copy_req_ms,
            overall_timeout_ms=copy_ovr_ms,
        )
        self._imprint_internal_state(_cursor)
        async for item in _cursor:
            res = function(item)
            if inspect.isawaitable(res):
                res = await res
            if res is False:
                break
        _cursor._imprint_internal_state(self)

    async def to_list(
        self,
        *,
        general_method_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> list[T]:
        """All the items left in the cursor, as a list. This exhausts the cursor."""
        self._ensure_alive()
        copy_req_ms, copy_ovr_ms = _revise_timeouts_for_cursor_copy(
            new_general_method_timeout_ms=general_method_timeout_ms,
            new_timeout_ms=timeout_ms,
            old_request_timeout_ms=self._request_timeout_ms,
        )
        _cursor = self._copy(
            request_timeout_ms=copy_req_ms,
            overall_timeout_ms=copy_ovr_ms,
        )
        self._imprint_internal_state(_cursor)
        items = [item async for item in _cursor]
        _cursor._imprint_internal_state(self)
        return items

    async def get_sort_vector(self) -> list[float] | None:
        """The async counterpart of the sync cursor `get_sort_vector`."""
        await self._try_ensure_fill_buffer()
        return self._sort_vector_from_status()


class CollectionFindCursor(_FindCursorBase[TRAW, T], _SyncQueryCursor[TRAW, T]):
    """
    A synchronous cursor over the documents found by `Collection.find`.

    The cursor is lazy: no request is made until an item is needed, and a
    new page is fetched only once the previous one is consumed. It can be
    iterated over, materialized with `to_list`, or consumed with `for_each`.

    A cursor has two type parameters: TRAW, the documents as returned by the
    Data API, and T, the items after the optional `map` function.

    Example:
        >>> cursor = collection.find({}, projection={"seq": True, "_id": False})
        >>> for document in cursor.limit(3):
        ...     print(document)
        ...
        {'seq': 1}
        {'seq': 4}
        {'seq': 15}
    """

    @property
    def data_source(self) -> Collection[TRAW]:
        """The Collection this cursor reads from."""
        return cast("Collection[TRAW]", self._data_source)


class AsyncCollectionFindCursor(
    _FindCursorBase[TRAW, T], _AsyncQueryCursor[TRAW, T]
):
    """
    The asynchronous counterpart of CollectionFindCursor, returned by
    `AsyncCollection.find`. Iterate over it with `async for`.
    """

    @property
    def data_source(self) -> AsyncCollection[TRAW]:
        """The AsyncCollection this cursor reads from."""
        return cast("AsyncCollection[TRAW]", self._data_source)


class TableFindCursor(_FindCursorBase[TRAW, T], _SyncQueryCursor[TRAW, T]):
    """
    A synchronous cursor over the rows found by `Table.find`. It behaves
    like CollectionFindCursor.
    """

    @property
    def data_source(self) -> Table[TRAW]:
        """The Table this cursor reads from."""
        return cast("Table[TRAW]", self._data_source)


class AsyncTableFindCursor(
    _FindCursorBase[TRAW, T], _AsyncQueryCursor[TRAW, T]
):
    """The asynchronous counterpart of TableFindCursor."""

    @property
    def data_source(self) -> AsyncTable[TRAW]:
        """The AsyncTable this cursor reads from."""
        return cast("AsyncTable[TRAW]", self._data_source)
