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

from copy import deepcopy
from typing import TYPE_CHECKING, Any, cast

from dataapi.commands import Command, find_and_rerank_command
from dataapi.cursors.cursor import TRAW, T
from dataapi.cursors.find_cursor import (
    _AsyncQueryCursor,
    _QueryCursorBase,
    _SyncQueryCursor,
)
from dataapi.cursors.query_engine import _FindAndRerankQueryEngine
from dataapi.cursors.reranked_result import RerankedResult

if TYPE_CHECKING:
    from dataapi.collection import AsyncCollection, Collection


class _FindAndRerankCursorBase(_QueryCursorBase[RerankedResult[TRAW], T]):
    """
    The settings specific to the cursors of `findAndRerank` commands: the
    limits of the retrievals combined by the reranker, the reranking
    parameters and whether to return scores.
    """

    _query_engine_class = _FindAndRerankQueryEngine
    _hybrid_limits: int | dict[str, int] | None
    _include_scores: bool | None
    _rerank_on: str | None
    _rerank_query: str | None

    def __init__(
        self,
        *,
        hybrid_limits: int | dict[str, int] | None = None,
        include_scores: bool | None = None,
        rerank_on: str | None = None,
        rerank_query: str | None = None,
        **kwargs: Any,
    ) -> None:
        self._hybrid_limits = deepcopy(hybrid_limits)
        self._include_scores = include_scores
        self._rerank_on = rerank_on
        self._rerank_query = rerank_query
        _QueryCursorBase.__init__(self, **kwargs)

    def _query_command(self) -> Command:
        return find_and_rerank_command(
            filter=self._filter,
            projection=self._projection,
            sort=self._sort,
            options={
                "limit": self._limit or None,
                "hybridLimits": self._hybrid_limits or None,
                "includeScores": self._include_scores,
                "includeSortVector": self._include_sort_vector,
                "rerankOn": self._rerank_on,
                "rerankQuery": self._rerank_query,
            },
        )

    def _settings(self) -> dict[str, Any]:
        return {
            **_QueryCursorBase._settings(self),
            "hybrid_limits": self._hybrid_limits,
            "include_scores": self._include_scores,
            "rerank_on": self._rerank_on,
            "rerank_query": self._rerank_query,
        }

    def hybrid_limits(self, hybrid_limits: int | dict[str, int] | None) -> Any:
        """
        A copy of this IDLE cursor with new limits for the retrievals that
        feed the reranker: a number, or a dictionary such as
        `{"$vector": 20, "$lexical": 10}`.
        """
        self._ensure_idle()
        return self._copy(hybrid_limits=hybrid_limits)

    def include_scores(self, include_scores: bool | None = True) -> Any:
        """A copy of this IDLE cursor that asks for the scores of each result."""
        self._ensure_idle()
        return self._copy(include_scores=include_scores)

    def rerank_on(self, rerank_on: str | None) -> Any:
        """A copy of this IDLE cursor with a new field to rerank on."""
        self._ensure_idle()
        return self._copy(rerank_on=rerank_on)

    def rerank_query(self, rerank_query: str | None) -> Any:
        """A copy of this IDLE cursor with a new query text for the reranker."""
        self._ensure_idle()
        return self._copy(rerank_query=rerank_query)


class CollectionFindAndRerankCursor(
    _FindAndRerankCursorBase[TRAW, T], _SyncQueryCursor[RerankedResult[TRAW], T]
):
    """
    A synchronous cursor over the results of `Collection.find_and_rerank`.

    Each raw item is a RerankedResult, pairing a document with its scores;
    a `map` function, if set, receives RerankedResult objects. Otherwise the
    cursor behaves like CollectionFindCursor: it is lazy, can be iterated
    over, materialized with `to_list` or consumed with `for_each`.

    Example:
        >>> cursor = collection.find_and_rerank(
        ...     sort={"$hybrid": "Weekdays?"},
        ...     projection={"wkd": True},
        ...     limit=3,
        ...     include_scores=True,
        ... )
        >>> for r_result in cursor:
        ...     print(f"{r_result.document['wkd']}: {r_result.scores['$rerank']}")
        ...
        Wed: -9.1015625
        Mon: -10.2421875
        Tue: -10.2421875
    """

    @property
    def data_source(self) -> Collection[TRAW]:
        """The Collection this cursor reads from."""
        return cast("Collection[TRAW]", self._data_source)


class AsyncCollectionFindAndRerankCursor(
    _FindAndRerankCursorBase[TRAW, T], _AsyncQueryCursor[RerankedResult[TRAW], T]
):
    """
    The asynchronous counterpart of CollectionFindAndRerankCursor, returned
    by `AsyncCollection.find_and_rerank`. Iterate over it with `async for`.
    """

    @property
    def data_source(self) -> AsyncCollection[TRAW]:
        """The AsyncCollection this cursor reads from."""
        return cast("AsyncCollection[TRAW]", self._data_source)
