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
from typing import TYPE_CHECKING, Any, Generic, Iterable

from dataapi.base import _DataResource
from dataapi.batching import async_run_batch, check_batch_parameters, chunk_items, run_batch
from dataapi.commands import (
    Command,
    delete_many_command,
    delete_one_command,
    find_command,
    insert_many_command,
    insert_one_command,
)
from dataapi.constants import ROW, FilterType, ProjectionType, SortType, VectorMetric
from dataapi.counting import check_upper_bound, evaluate_count
from dataapi.cursors import AsyncTableFindCursor, TableFindCursor
from dataapi.cursors.distinct import (
    DistinctCollector,
    _reduce_distinct_key_to_shallow_safe,
)
from dataapi.exceptions import (
    DataAPIResponseException,
    TableInsertManyException,
    TooManyRowsToCountException,
    UnexpectedDataAPIResponseException,
    _TimeoutContext,
)
from dataapi.info import TableDescriptor, TableIndexDescriptor, TableInfo
from dataapi.paging import FindPage
from dataapi.results import TableInsertManyResult, TableInsertOneResult
from dataapi.runner import DataAPIResponse
from dataapi.settings.defaults import (
    DEFAULT_INSERT_MANY_CHUNK_SIZE,
    DEFAULT_INSERT_MANY_CONCURRENCY,
)
from dataapi.utils.api_options import APIOptions, FullAPIOptions
from dataapi.utils.ejson import preprocess_table_payload_value
from dataapi.utils.unset import _UNSET, UnsetType

if TYPE_CHECKING:
    from dataapi.authentication import EmbeddingHeadersProvider
    from dataapi.database import AsyncDatabase, Database


logger = logging.getLogger(__name__)

_VECTOR_METRICS = {
    VectorMetric.COSINE,
    VectorMetric.DOT_PRODUCT,
    VectorMetric.EUCLIDEAN,
}


def _primary_key_from_list(
    key_values: list[Any], primary_key_schema: dict[str, Any]
) -> tuple[tuple[Any, ...], dict[str, Any]]:
    """
    Pair the values of an inserted id with the columns of the primary key
    schema, which the Data API lists in key order.
    """
    if len(key_values) != len(primary_key_schema):
        raise UnexpectedDataAPIResponseException(
            text=(
                f"Inserted id {key_values} does not match the primary key "
                f"schema {list(primary_key_schema.keys())}."
            ),
            raw_response=None,
        )
    key_tuple = tuple(key_values)
    return key_tuple, dict(zip(primary_key_schema.keys(), key_tuple))


def _prepare_keys_from_status(
    status: dict[str, Any] | None,
) -> tuple[list[dict[str, Any]], list[tuple[Any, ...]]]:
    if not status:
        return [], []
    if "documentResponses" in status:
        raw_inserted_ids = [
            row_resp["_id"]
            for row_resp in status["documentResponses"]
            if row_resp.get("status") == "OK"
        ]
    else:
        raw_inserted_ids = list(status.get("insertedIds") or [])
    if not raw_inserted_ids:
        return [], []
    if "primaryKeySchema" not in status:
        raise UnexpectedDataAPIResponseException(
            text=(
                "received a 'status' without 'primaryKeySchema' "
                f"in API response (received: {status})"
            ),
            raw_response=None,
        )
    id_tuples_and_ids = [
        _primary_key_from_list(raw_id, status["primaryKeySchema"])
        for raw_id in raw_inserted_ids
    ]
    return (
        [pk_dict for _, pk_dict in id_tuples_and_ids],
        [pk_tuple for pk_tuple, _ in id_tuples_and_ids],
    )


def _ensure_inserted_keys(response: DataAPIResponse) -> None:
    if (
        "insertedIds" not in response.status
        and "documentResponses" not in response.status
    ):
        raise UnexpectedDataAPIResponseException(
            text="Faulty response from insertMany API command.",
            raw_response=response.raw_response,
        )


def _insert_one_result(io_response: DataAPIResponse) -> TableInsertOneResult:
    status = io_response.status
    if not status.get("insertedIds"):
        raise UnexpectedDataAPIResponseException(
            text="Response from insertOne API command missing 'insertedIds'.",
            raw_response=io_response.raw_response,
        )
    if not status.get("primaryKeySchema"):
        raise UnexpectedDataAPIResponseException(
            text="Response from insertOne API command has empty 'primaryKeySchema'.",
            raw_response=io_response.raw_response,
        )
    inserted_id_tuple, inserted_id = _primary_key_from_list(
        status["insertedIds"][0], status["primaryKeySchema"]
    )
    return TableInsertOneResult(
        raw_results=[io_response.raw_response],
        inserted_id=inserted_id,
        inserted_id_tuple=inserted_id_tuple,
    )


def _collect_inserted_keys(
    responses: list[DataAPIResponse | None],
    errors: list[Exception | None],
) -> tuple[list[dict[str, Any]], list[tuple[Any, ...]]]:
    inserted_ids: list[dict[str, Any]] = []
    inserted_id_tuples: list[tuple[Any, ...]] = []
    for response, error in zip(responses, errors):
        status: dict[str, Any] | None = None
        if response is not None:
            status = response.status
        elif isinstance(error, DataAPIResponseException):
            status = error.raw_response.get("status")
        chunk_ids, chunk_id_tuples = _prepare_keys_from_status(status)
        inserted_ids += chunk_ids
        inserted_id_tuples += chunk_id_tuples
    return inserted_ids, inserted_id_tuples


def _find_page_from_response(response: DataAPIResponse) -> FindPage[Any]:
    if "documents" not in response.data:
        raise UnexpectedDataAPIResponseException(
            text="Faulty response from find API command (no 'documents').",
            raw_response=response.raw_response,
        )
    return FindPage(
        results=response.documents,
        next_page_state=response.continuation.page_state,
        sort_vector=response.status.get("sortVector"),
    )


def _create_index_command(
    name: str,
    *,
    column: str,
    options: dict[str, Any] | None,
    if_not_exists: bool | None,
) -> Command:
    return (
        Command("createIndex")
        .with_field("name", name)
        .with_field(
            "definition",
            {k: v for k, v in {"column": column, "options": options}.items() if v},
        )
        .with_options({"ifNotExists": if_not_exists})
    )


def _create_vector_index_command(
    name: str,
    *,
    column: str,
    metric: str | None,
    source_model: str | None,
    if_not_exists: bool | None,
) -> Command:
    if metric is not None and metric not in _VECTOR_METRICS:
        raise ValueError(f"Unsupported vector metric: '{metric}'.")
    index_options = {
        k: v
        for k, v in {"metric": metric, "sourceModel": source_model}.items()
        if v is not None
    }
    return (
        Command("createVectorIndex")
        .with_field("name", name)
        .with_field(
            "definition",
            {"column": column, **({"options": index_options} if index_options else {})},
        )
        .with_options({"ifNotExists": if_not_exists})
    )


def _index_names_from_response(response: DataAPIResponse) -> list[str]:
    if "indexes" not in response.status:
        raise UnexpectedDataAPIResponseException(
            text="Faulty response from listIndexes API command.",
            raw_response=response.raw_response,
        )
    return list(response.status["indexes"])


def _index_descriptors_from_response(
    response: DataAPIResponse,
) -> list[TableIndexDescriptor]:
    if "indexes" not in response.status:
        raise UnexpectedDataAPIResponseException(
            text="Faulty response from listIndexes API command.",
            raw_response=response.raw_response,
        )
    return [
        TableIndexDescriptor.coerce(index_object)
        for index_object in response.status["indexes"]
    ]


class Table(_DataResource, Generic[ROW]):
    """
    A Data API table, holding rows with a fixed schema and a primary key.
    This class has a synchronous interface.

    This class is not meant for direct instantiation by the user, rather
    it is obtained by invoking methods such as `get_table` or `create_table`
    of Database, wherefrom the Table inherits its API options.

    Args:
        database: the Database this table belongs to.
        name: the table name. It should match an existing table.
        keyspace: the keyspace of the table. If not given, the working
            keyspace of the database is used.
        api_options: the complete API options for this instance.

    Example:
        >>> my_table = database.get_table("games")
        >>> my_table.insert_one({"match_id": "mtch_0", "round": 1, "winner": "Ada"})
        TableInsertOneResult(inserted_id={'match_id': 'mtch_0', 'round': 1}, ...
    """

    _is_table = True

    def __init__(
        self,
        *,
        database: Database,
        name: str,
        keyspace: str | None,
        api_options: FullAPIOptions,
    ) -> None:
        _DataResource.__init__(
            self,
            database=database,
            name=name,
            keyspace=keyspace,
            api_options=api_options,
        )

    def _copy(
        self: Table[ROW],
        *,
        embedding_api_key: str | EmbeddingHeadersProvider | UnsetType = _UNSET,
        api_options: APIOptions | UnsetType = _UNSET,
    ) -> Table[ROW]:
        arg_api_options = APIOptions(embedding_api_key=embedding_api_key)
        final_api_options = self.api_options.with_override(api_options).with_override(
            arg_api_options
        )
        return Table(
            database=self.database,
            name=self.name,
            keyspace=self.keyspace,
            api_options=final_api_options,
        )

    def with_options(
        self: Table[ROW],
        *,
        embedding_api_key: str | EmbeddingHeadersProvider | UnsetType = _UNSET,
        api_options: APIOptions | UnsetType = _UNSET,
    ) -> Table[ROW]:
        """
        Create a clone of this table with some changed attributes.

        Args:
            embedding_api_key: an API key for the embedding service used by
                the vector columns of the table, if any.
            api_options: any additional options to set for the clone.

        Returns:
            a new Table instance.
        """
        return self._copy(
            embedding_api_key=embedding_api_key,
            api_options=api_options,
        )

    def to_async(
        self: Table[ROW],
        *,
        embedding_api_key: str | EmbeddingHeadersProvider | UnsetType = _UNSET,
        api_options: APIOptions | UnsetType = _UNSET,
    ) -> AsyncTable[ROW]:
        """
        Create an AsyncTable from this one. Save for the arguments explicitly
        provided as overrides, everything else is kept identical.
        """
        arg_api_options = APIOptions(embedding_api_key=embedding_api_key)
        final_api_options = self.api_options.with_override(api_options).with_override(
            arg_api_options
        )
        return AsyncTable(
            database=self.database.to_async(),
            name=self.name,
            keyspace=self.keyspace,
            api_options=final_api_options,
        )

    @property
    def database(self) -> Database:
        """The Database this table belongs to."""
        return self._database  # type: ignore[no-any-return]

    def definition(
        self,
        *,
        table_admin_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> dict[str, Any]:
        """
        Query the Data API and return the table definition (columns and
        primary key) as found in the `listTables` explain output.

        Raises:
            ValueError: if the table is not found in its keyspace.
        """

        logger.info(f"getting tables in search of '{self.name}'")
        self_descriptors = [
            table_desc
            for table_desc in self.database.list_tables(
                keyspace=self.keyspace,
                table_admin_timeout_ms=table_admin_timeout_ms,
                request_timeout_ms=request_timeout_ms,
                timeout_ms=timeout_ms,
            )
            if table_desc.name == self.name
        ]
        logger.info(f"finished getting tables in search of '{self.name}'")
        if self_descriptors:
            return self_descriptors[0].definition
        raise ValueError(f"Table {self.keyspace}.{self.name} not found.")

    def info(self) -> TableInfo:
        """
        Information on the table (name, keyspace, endpoint). This method
        makes no API request.
        """
        return TableInfo(
            api_endpoint=self.database.api_endpoint,
            keyspace=self.keyspace,
            name=self.name,
            full_name=self.full_name,
        )

    def _admin_timeout_context(
        self,
        table_admin_timeout_ms: int | None,
        request_timeout_ms: int | None,
        timeout_ms: int | None,
    ) -> _TimeoutContext:
        return self._single_request_timeout(
            method_timeout_ms=table_admin_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
            method_timeout_label="table_admin_timeout_ms",
        )

    def create_index(
        self,
        name: str,
        *,
        column: str,
        options: dict[str, Any] | None = None,
        if_not_exists: bool | None = None,
        table_admin_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> None:
        """
        Create an index on a non-vector column of the table.

        Args:
            name: the name of the index, unique within the keyspace.
            column: the column to index.
            options: index options, e.g. `{"caseSensitive": False}`.
            if_not_exists: if True, creating an existing index is a no-op.
                Otherwise it is an error.
            table_admin_timeout_ms: a timeout, in milliseconds, for the request.
            request_timeout_ms: an alias for `table_admin_timeout_ms`.
            timeout_ms: an alias for `table_admin_timeout_ms`.

        Example:
            >>> my_table.create_index("score_index", column="score")
        """

        ci_command = _create_index_command(
            name, column=column, options=options, if_not_exists=if_not_exists
        )
        logger.info(f"createIndex('{name}') on '{self.name}'")
        ci_response = self._runner.execute(
            ci_command,
            timeout_context=self._admin_timeout_context(
                table_admin_timeout_ms, request_timeout_ms, timeout_ms
            ),
        )
        if ci_response.status != {"ok": 1}:
            raise UnexpectedDataAPIResponseException(
                text="Faulty response from createIndex API command.",
                raw_response=ci_response.raw_response,
            )
        logger.info(f"finished createIndex('{name}') on '{self.name}'")

    def create_vector_index(
        self,
        name: str,
        *,
        column: str,
        metric: str | None = None,
        source_model: str | None = None,
        if_not_exists: bool | None = None,
        table_admin_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> None:
        """
        Create a vector index on a vector column of the table, enabling
        vector similarity search on it.

        Args:
            name: the name of the index, unique within the keyspace.
            column: the vector column to index.
            metric: the similarity metric, a value of `VectorMetric`.
            source_model: the embedding model the index should be tuned for.
            if_not_exists: if True, creating an existing index is a no-op.

        Example:
            >>> my_table.create_vector_index(
            ...     "m_vector_index", column="m_vector", metric=VectorMetric.DOT_PRODUCT
            ... )
        """

        ci_command = _create_vector_index_command(
            name,
            column=column,
            metric=metric,
            source_model=source_model,
            if_not_exists=if_not_exists,
        )
        logger.info(f"createVectorIndex('{name}') on '{self.name}'")
        ci_response = self._runner.execute(
            ci_command,
            timeout_context=self._admin_timeout_context(
                table_admin_timeout_ms, request_timeout_ms, timeout_ms
            ),
        )
        if ci_response.status != {"ok": 1}:
            raise UnexpectedDataAPIResponseException(
                text="Faulty response from createVectorIndex API command.",
                raw_response=ci_response.raw_response,
            )
        logger.info(f"finished createVectorIndex('{name}') on '{self.name}'")

    def list_index_names(
        self,
        *,
        table_admin_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> list[str]:
        """The names of all the indexes on this table."""

        logger.info(f"listIndexes on '{self.name}'")
        li_response = self._runner.execute(
            Command("listIndexes"),
            timeout_context=self._admin_timeout_context(
                table_admin_timeout_ms, request_timeout_ms, timeout_ms
            ),
        )
        logger.info(f"finished listIndexes on '{self.name}'")
        return _index_names_from_response(li_response)

    def list_indexes(
        self,
        *,
        table_admin_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> list[TableIndexDescriptor]:
        """
        The full descriptors of all the indexes on this table.

        Returns:
            a list of TableIndexDescriptor objects.
        """

        logger.info(f"listIndexes on '{self.name}'")
        li_response = self._runner.execute(
            Command("listIndexes").with_options({"explain": True}),
            timeout_context=self._admin_timeout_context(
                table_admin_timeout_ms, request_timeout_ms, timeout_ms
            ),
        )
        logger.info(f"finished listIndexes on '{self.name}'")
        return _index_descriptors_from_response(li_response)

    def alter(
        self,
        operation: dict[str, Any],
        *,
        table_admin_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> None:
        """
        Alter the schema of the table, e.g. add or drop columns.

        Args:
            operation: the alteration in the API format, e.g.
                `{"add": {"columns": {"tags": {"type": "set", "valueType": "text"}}}}`
                or `{"drop": {"columns": ["tags"]}}`.

        Example:
            >>> my_table.alter({"drop": {"columns": ["fighters"]}})
        """

        at_command = Command("alterTable").with_field("operation", operation)
        logger.info(f"alterTable on '{self.name}'")
        at_response = self._runner.execute(
            at_command,
            timeout_context=self._admin_timeout_context(
                table_admin_timeout_ms, request_timeout_ms, timeout_ms
            ),
        )
        if at_response.status != {"ok": 1}:
            raise UnexpectedDataAPIResponseException(
                text="Faulty response from alterTable API command.",
                raw_response=at_response.raw_response,
            )
        logger.info(f"finished alterTable on '{self.name}'")

    def insert_one(
        self,
        row: ROW,
        *,
        general_method_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> TableInsertOneResult:
        """
        Insert a single row in the table, with implied overwrite in case of
        primary key collision.

        Returns:
            a TableInsertOneResult with the primary key of the row, both
            as a dictionary and as a tuple.
        """

        timeout_context = self._single_request_timeout(
            method_timeout_ms=general_method_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        logger.info(f"insertOne on '{self.name}'")
        io_response = self._runner.execute(
            insert_one_command(row),  # type: ignore[arg-type]
            timeout_context=timeout_context,
        )
        logger.info(f"finished insertOne on '{self.name}'")
        return _insert_one_result(io_response)

    def insert_many(
        self,
        rows: Iterable[ROW],
        *,
        ordered: bool = False,
        chunk_size: int | None = None,
        concurrency: int | None = None,
        general_method_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> TableInsertManyResult:
        """
        Insert a number of rows into the table, in chunks, with implied
        overwrite in case of primary key collision.

        Args:
            rows: an iterable of dictionaries, each a row to insert.
            ordered: if False (default), chunks may run concurrently. If True,
                they run one after the other, stopping at the first error.
            chunk_size: how many rows to include in each request.
            concurrency: maximum number of concurrent requests (unordered only).
            general_method_timeout_ms: a timeout, in milliseconds, for the
                whole method, possibly spanning several requests.
            request_timeout_ms: a timeout, in milliseconds, for each request.
            timeout_ms: an alias for `general_method_timeout_ms`.

        Returns:
            a TableInsertManyResult.

        Raises:
            ValueError: for invalid chunk_size/concurrency/ordered values.
            TableInsertManyException: if some chunk failed, with the keys of
                the rows inserted nevertheless and all root causes.
        """

        _concurrency = (
            concurrency
            if concurrency is not None
            else (1 if ordered else DEFAULT_INSERT_MANY_CONCURRENCY)
        )
        _chunk_size = (
            chunk_size if chunk_size is not None else DEFAULT_INSERT_MANY_CHUNK_SIZE
        )
        check_batch_parameters(
            ordered=ordered,
            concurrency=_concurrency,
            chunk_size=_chunk_size,
            max_chunk_size=self.api_options.limit_options.max_chunk_size,
        )
        next_timeout = self._multi_request_timeouts(
            general_method_timeout_ms=general_method_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        _rows = list(rows)
        logger.info(f"inserting {len(_rows)} rows in '{self.name}'")

        def _chunk_insertor(row_chunk: list[ROW]) -> DataAPIResponse:
            im_command = insert_many_command(
                row_chunk,  # type: ignore[arg-type]
                ordered=ordered,
            )
            logger.info(f"insertMany(chunk) on '{self.name}'")
            im_response = self._runner.execute(
                im_command,
                raise_api_errors=False,
                timeout_context=next_timeout(),
            )
            logger.info(f"finished insertMany(chunk) on '{self.name}'")
            if im_response.errors:
                raise DataAPIResponseException.from_response(
                    command=im_command.to_payload(),
                    raw_response=im_response.raw_response,
                )
            _ensure_inserted_keys(im_response)
            return im_response

        outcome = run_batch(
            chunk_items(_rows, _chunk_size),
            _chunk_insertor,
            ordered=ordered,
            concurrency=_concurrency,
        )
        inserted_ids, inserted_id_tuples = _collect_inserted_keys(
            outcome.results, outcome.errors
        )
        if outcome.exceptions:
            raise TableInsertManyException(
                inserted_ids=inserted_ids,
                inserted_id_tuples=inserted_id_tuples,
                exceptions=outcome.exceptions,
            )
        logger.info(f"finished inserting {len(_rows)} rows in '{self.name}'")
        return TableInsertManyResult(
            raw_results=[response.raw_response for response in outcome.succeeded],
            inserted_ids=inserted_ids,
            inserted_id_tuples=inserted_id_tuples,
        )

    def find(
        self,
        filter: FilterType | None = None,
        *,
        projection: ProjectionType | None = None,
        skip: int | None = None,
        limit: int | None = None,
        include_similarity: bool | None = None,
        include_sort_vector: bool | None = None,
        sort: SortType | None = None,
        initial_page_state: str | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> TableFindCursor[ROW, ROW]:
        """
        Find rows in the table matching a filter, returning a cursor.
        No request is made until the cursor is consumed.

        Example:
            >>> my_table.find({"winner": "Ada"}, projection={"round": True}).to_list()
            [{'round': 1}, {'round': 3}]
        """

        _request_timeout_ms, _rt_label = self._request_timeout(
            request_timeout_ms if request_timeout_ms is not None else timeout_ms
        )
        return TableFindCursor(
            data_source=self,
            request_timeout_ms=_request_timeout_ms,
            overall_timeout_ms=None,
            request_timeout_label=_rt_label,
            filter=filter,
            projection=projection,
            sort=sort,
            limit=limit,
            include_similarity=include_similarity,
            include_sort_vector=include_sort_vector,
            skip=skip,
            initial_page_state=initial_page_state,
        )

    def find_page(
        self,
        filter: FilterType | None = None,
        *,
        projection: ProjectionType | None = None,
        skip: int | None = None,
        limit: int | None = None,
        include_similarity: bool | None = None,
        include_sort_vector: bool | None = None,
        sort: SortType | None = None,
        initial_page_state: str | None = None,
        general_method_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> FindPage[ROW]:
        """One page of a find, along with the state for the following page."""

        timeout_context = self._single_request_timeout(
            method_timeout_ms=general_method_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        f_command = find_command(
            filter=filter,
            projection=projection,
            sort=sort,
            options={
                "skip": skip,
                "limit": limit or None,
                "includeSimilarity": include_similarity,
                "includeSortVector": include_sort_vector,
                "pageState": initial_page_state,
            },
        )
        logger.info(f"find (page) on '{self.name}'")
        f_response = self._runner.execute(f_command, timeout_context=timeout_context)
        logger.info(f"finished find (page) on '{self.name}'")
        return _find_page_from_response(f_response)

    def find_one(
        self,
        filter: FilterType | None = None,
        *,
        projection: ProjectionType | None = None,
        include_similarity: bool | None = None,
        sort: SortType | None = None,
        general_method_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> ROW | None:
        """
        Run a search, returning the first row found or None.

        Example:
            >>> my_table.find_one({"match_id": "mtch_0", "round": 1})
            {'match_id': 'mtch_0', 'round': 1, 'winner': 'Ada'}
        """

        timeout_context = self._single_request_timeout(
            method_timeout_ms=general_method_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        fo_command = (
            Command("findOne")
            .with_filter(filter)
            .with_projection(projection)
            .with_sort(sort)
            .with_options({"includeSimilarity": include_similarity})
        )
        logger.info(f"findOne on '{self.name}'")
        fo_response = self._runner.execute(fo_command, timeout_context=timeout_context)
        logger.info(f"finished findOne on '{self.name}'")
        if "document" not in fo_response.data:
            raise UnexpectedDataAPIResponseException(
                text="Response from findOne API command missing 'document'.",
                raw_response=fo_response.raw_response,
            )
        return fo_response.document  # type: ignore[return-value]

    def distinct(
        self,
        key: str,
        *,
        filter: FilterType | None = None,
        general_method_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> list[Any]:
        """
        Return a list of the unique values of `key` across the rows matching
        the filter. This is a client-side operation reading all matching rows.

        Args:
            key: the column name, possibly followed by dot-notation segments
                reaching into map columns.
            filter: a predicate in the Data API filter syntax.
        """

        _general_method_timeout_ms = (
            timeout_ms if timeout_ms is not None else general_method_timeout_ms
        )
        f_cursor = self.find(
            filter,
            projection={_reduce_distinct_key_to_shallow_safe(key): True},
            request_timeout_ms=request_timeout_ms,
        )
        if _general_method_timeout_ms is not None:
            f_cursor = f_cursor._copy(
                overall_timeout_ms=_general_method_timeout_ms,
                overall_timeout_label="general_method_timeout_ms",
            )
        collector = DistinctCollector(key, preprocess_table_payload_value)
        logger.info(f"running distinct() on '{self.name}'")
        while f_cursor.has_next():
            collector.feed(next(f_cursor))  # type: ignore[arg-type]
        logger.info(f"finished running distinct() on '{self.name}'")
        return collector.values

    def count_documents(
        self,
        filter: FilterType,
        *,
        upper_bound: int,
        general_method_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> int:
        """
        Count the rows in the table matching the specified filter.

        Raises:
            ValueError: for an invalid upper bound (before any request).
            TooManyRowsToCountException: if the count exceeds the upper
                bound or the server limit.
        """

        check_upper_bound(upper_bound, self.api_options.limit_options.max_count)
        timeout_context = self._single_request_timeout(
            method_timeout_ms=general_method_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        logger.info(f"countDocuments on '{self.name}'")
        cd_response = self._runner.execute(
            Command("countDocuments").with_filter(filter),
            timeout_context=timeout_context,
        )
        logger.info(f"finished countDocuments on '{self.name}'")
        return evaluate_count(
            cd_response,
            upper_bound=upper_bound,
            exception_class=TooManyRowsToCountException,
            items_name="Row",
        )

    def estimated_document_count(
        self,
        *,
        general_method_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> int:
        """An estimate of the number of rows in the table."""

        timeout_context = self._single_request_timeout(
            method_timeout_ms=general_method_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        logger.info(f"estimatedDocumentCount on '{self.name}'")
        ed_response = self._runner.execute(
            Command("estimatedDocumentCount"), timeout_context=timeout_context
        )
        logger.info(f"finished estimatedDocumentCount on '{self.name}'")
        if "count" not in ed_response.status:
            raise UnexpectedDataAPIResponseException(
                text="Faulty response from estimatedDocumentCount API command.",
                raw_response=ed_response.raw_response,
            )
        count: int = ed_response.status["count"]
        return count

    def update_one(
        self,
        filter: FilterType,
        update: dict[str, Any],
        *,
        general_method_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> None:
        """
        Update a single row, identified by its full primary key in the
        filter. A missing row is created (upsert is implied for tables).

        Args:
            filter: the full primary key, e.g. `{"match_id": "x", "round": 1}`.
            update: `$set` and/or `$unset` prescriptions.

        Example:
            >>> my_table.update_one(
            ...     {"match_id": "mtch_0", "round": 1}, {"$set": {"winner": "Bo"}}
            ... )
        """

        timeout_context = self._single_request_timeout(
            method_timeout_ms=general_method_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        uo_command = Command("updateOne").with_filter(filter).with_update(update)
        logger.info(f"updateOne on '{self.name}'")
        uo_response = self._runner.execute(uo_command, timeout_context=timeout_context)
        logger.info(f"finished updateOne on '{self.name}'")
        if "status" not in uo_response.raw_response:
            raise UnexpectedDataAPIResponseException(
                text="Faulty response from updateOne API command.",
                raw_response=uo_response.raw_response,
            )

    def delete_one(
        self,
        filter: FilterType,
        *,
        general_method_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> None:
        """Delete the row matching the filter (a full primary key), if any."""

        timeout_context = self._single_request_timeout(
            method_timeout_ms=general_method_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        logger.info(f"deleteOne on '{self.name}'")
        do_response = self._runner.execute(
            delete_one_command(filter), timeout_context=timeout_context
        )
        logger.info(f"finished deleteOne on '{self.name}'")
        if do_response.status.get("deletedCount") != -1:
            raise UnexpectedDataAPIResponseException(
                text="Faulty response from deleteOne API command.",
                raw_response=do_response.raw_response,
            )

    def delete_many(
        self,
        filter: FilterType,
        *,
        general_method_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> None:
        """
        Delete all rows matching the filter. On tables this is a single
        request: the filter must select whole partitions (or rows by their
        full primary key), and `{}` truncates the table.
        """

        timeout_context = self._single_request_timeout(
            method_timeout_ms=general_method_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        logger.info(f"deleteMany on '{self.name}'")
        dm_response = self._runner.execute(
            delete_many_command(filter), timeout_context=timeout_context
        )
        logger.info(f"finished deleteMany on '{self.name}'")
        if dm_response.status.get("deletedCount") != -1:
            raise UnexpectedDataAPIResponseException(
                text="Faulty response from deleteMany API command.",
                raw_response=dm_response.raw_response,
            )

    def drop(
        self,
        *,
        if_exists: bool | None = None,
        table_admin_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> None:
        """
        Drop the table, i.e. delete it from the database along with
        all the rows it contains.
        """
        logger.info(f"dropping table '{self.name}' (self)")
        self.database.drop_table(
            self.name,
            keyspace=self.keyspace,
            if_exists=if_exists,
            table_admin_timeout_ms=table_admin_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        logger.info(f"finished dropping table '{self.name}' (self)")

    def command(
        self,
        body: Command | dict[str, Any],
        *,
        raise_api_errors: bool = True,
        general_method_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> dict[str, Any]:
        """
        Send a raw command to the Data API for this table, returning the
        raw response. No conversion is applied to the values.
        """
        timeout_context = self._single_request_timeout(
            method_timeout_ms=general_method_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        _payload = body.to_payload() if isinstance(body, Command) else body
        _cmd_desc = ",".join(sorted(_payload.keys()))
        logger.info(f"command={_cmd_desc} on '{self.name}'")
        command_result = self._api_commander.request(
            payload=_payload,
            raise_api_errors=raise_api_errors,
            timeout_context=timeout_context,
        )
        logger.info(f"finished command={_cmd_desc} on '{self.name}'")
        return command_result


class AsyncTable(_DataResource, Generic[ROW]):
    """
    A Data API table, holding rows with a fixed schema and a primary key.
    This class has an asynchronous interface for use with asyncio.

    This class is not meant for direct instantiation by the user, rather
    it is obtained by invoking methods such as `get_table` of AsyncDatabase.
    The methods mirror those of Table (see there for full documentation).
    """

    _is_table = True

    def __init__(
        self,
        *,
        database: AsyncDatabase,
        name: str,
        keyspace: str | None,
        api_options: FullAPIOptions,
    ) -> None:
        _DataResource.__init__(
            self,
            database=database,
            name=name,
            keyspace=keyspace,
            api_options=api_options,
        )

    async def __aenter__(self: AsyncTable[ROW]) -> AsyncTable[ROW]:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self._api_commander.__aexit__(*exc_info)

    def _copy(
        self: AsyncTable[ROW],
        *,
        embedding_api_key: str | EmbeddingHeadersProvider | UnsetType = _UNSET,
        api_options: APIOptions | UnsetType = _UNSET,
    ) -> AsyncTable[ROW]:
        arg_api_options = APIOptions(embedding_api_key=embedding_api_key)
        final_api_options = self.api_options.with_override(api_options).with_override(
            arg_api_options
        )
        return AsyncTable(
            database=self.database,
            name=self.name,
            keyspace=self.keyspace,
            api_options=final_api_options,
        )

    def with_options(
        self: AsyncTable[ROW],
        *,
        embedding_api_key: str | EmbeddingHeadersProvider | UnsetType = _UNSET,
        api_options: APIOptions | UnsetType = _UNSET,
    ) -> AsyncTable[ROW]:
        return self._copy(
            embedding_api_key=embedding_api_key,
            api_options=api_options,
        )

    def to_sync(
        self: AsyncTable[ROW],
        *,
        embedding_api_key: str | EmbeddingHeadersProvider | UnsetType = _UNSET,
        api_options: APIOptions | UnsetType = _UNSET,
    ) -> Table[ROW]:
        """
        Create a Table from this one. Save for the arguments explicitly
        provided as overrides, everything else is kept identical.
        """
        arg_api_options = APIOptions(embedding_api_key=embedding_api_key)
        final_api_options = self.api_options.with_override(api_options).with_override(
            arg_api_options
        )
        return Table(
            database=self.database.to_sync(),
            name=self.name,
            keyspace=self.keyspace,
            api_options=final_api_options,
        )

    @property
    def database(self) -> AsyncDatabase:
        """The AsyncDatabase this table belongs to."""
        return self._database  # type: ignore[no-any-return]

    async def definition(
        self,
        *,
        table_admin_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> dict[str, Any]:
        logger.info(f"getting tables in search of '{self.name}'")
        self_descriptors = [
            table_desc
            for table_desc in await self.database.list_tables(
                keyspace=self.keyspace,
                table_admin_timeout_ms=table_admin_timeout_ms,
                request_timeout_ms=request_timeout_ms,
                timeout_ms=timeout_ms,
            )
            if table_desc.name == self.name
        ]
        logger.info(f"finished getting tables in search of '{self.name}'")
        if self_descriptors:
            return self_descriptors[0].definition
        raise ValueError(f"Table {self.keyspace}.{self.name} not found.")

    def info(self) -> TableInfo:
        return TableInfo(
            api_endpoint=self.database.api_endpoint,
            keyspace=self.keyspace,
            name=self.name,
            full_name=self.full_name,
        )

    def _admin_timeout_context(
        self,
        table_admin_timeout_ms: int | None,
        request_timeout_ms: int | None,
        timeout_ms: int | None,
    ) -> _TimeoutContext:
        return self._single_request_timeout(
            method_timeout_ms=table_admin_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
            method_timeout_label="table_admin_timeout_ms",
        )

    async def create_index(
        self,
        name: str,
        *,
        column: str,
        options: dict[str, Any] | None = None,
        if_not_exists: bool | None = None,
        table_admin_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> None:
        ci_command = _create_index_command(
            name, column=column, options=options, if_not_exists=if_not_exists
        )
        logger.info(f"createIndex('{name}') on '{self.name}'")
        ci_response = await self._runner.async_execute(
            ci_command,
            timeout_context=self._admin_timeout_context(
                table_admin_timeout_ms, request_timeout_ms, timeout_ms
            ),
        )
        if ci_response.status != {"ok": 1}:
            raise UnexpectedDataAPIResponseException(
                text="Faulty response from createIndex API command.",
                raw_response=ci_response.raw_response,
            )
        logger.info(f"finished createIndex('{name}') on '{self.name}'")

    async def create_vector_index(
        self,
        name: str,
        *,
        column: str,
        metric: str | None = None,
        source_model: str | None = None,
        if_not_exists: bool | None = None,
        table_admin_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> None:
        ci_command = _create_vector_index_command(
            name,
            column=column,
            metric=metric,
            source_model=source_model,
            if_not_exists=if_not_exists,
        )
        logger.info(f"createVectorIndex('{name}') on '{self.name}'")
        ci_response = await self._runner.async_execute(
            ci_command,
            timeout_context=self._admin_timeout_context(
                table_admin_timeout_ms, request_timeout_ms, timeout_ms
            ),
        )
        if ci_response.status != {"ok": 1}:
            raise UnexpectedDataAPIResponseException(
                text="Faulty response from createVectorIndex API command.",
                raw_response=ci_response.raw_response,
            )
        logger.info(f"finished createVectorIndex('{name}') on '{self.name}'")

    async def list_index_names(
        self,
        *,
        table_admin_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> list[str]:
        logger.info(f"listIndexes on '{self.name}'")
        li_response = await self._runner.async_execute(
            Command("listIndexes"),
            timeout_context=self._admin_timeout_context(
                table_admin_timeout_ms, request_timeout_ms, timeout_ms
            ),
        )
        logger.info(f"finished listIndexes on '{self.name}'")
        return _index_names_from_response(li_response)

    async def list_indexes(
        self,
        *,
        table_admin_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> list[TableIndexDescriptor]:
        logger.info(f"listIndexes on '{self.name}'")
        li_response = await self._runner.async_execute(
            Command("listIndexes").with_options({"explain": True}),
            timeout_context=self._admin_timeout_context(
                table_admin_timeout_ms, request_timeout_ms, timeout_ms
            ),
        )
        logger.info(f"finished listIndexes on '{self.name}'")
        return _index_descriptors_from_response(li_response)

    async def alter(
        self,
        operation: dict[str, Any],
        *,
        table_admin_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> None:
        at_command = Command("alterTable").with_field("operation", operation)
        logger.info(f"alterTable on '{self.name}'")
        at_response = await self._runner.async_execute(
            at_command,
            timeout_context=self._admin_timeout_context(
                table_admin_timeout_ms, request_timeout_ms, timeout_ms
            ),
        )
        if at_response.status != {"ok": 1}:
            raise UnexpectedDataAPIResponseException(
                text="Faulty response from alterTable API command.",
                raw_response=at_response.raw_response,
            )
        logger.info(f"finished alterTable on '{self.name}'")

    async def insert_one(
        self,
        row: ROW,
        *,
        general_method_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> TableInsertOneResult:
        timeout_context = self._single_request_timeout(
            method_timeout_ms=general_method_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        logger.info(f"insertOne on '{self.name}'")
        io_response = await self._runner.async_execute(
            insert_one_command(row),  # type: ignore[arg-type]
            timeout_context=timeout_context,
        )
        logger.info(f"finished insertOne on '{self.name}'")
        return _insert_one_result(io_response)

    async def insert_many(
        self,
        rows: Iterable[ROW],
        *,
        ordered: bool = False,
        chunk_size: int | None = None,
        concurrency: int | None = None,
        general_method_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> TableInsertManyResult:
        """
        Insert a number of rows into the table, in chunks run as concurrent
        tasks if unordered. See `Table.insert_many`.
        """

        _concurrency = (
            concurrency
            if concurrency is not None
            else (1 if ordered else DEFAULT_INSERT_MANY_CONCURRENCY)
        )
        _chunk_size = (
            chunk_size if chunk_size is not None else DEFAULT_INSERT_MANY_CHUNK_SIZE
        )
        check_batch_parameters(
            ordered=ordered,
            concurrency=_concurrency,
            chunk_size=_chunk_size,
            max_chunk_size=self.api_options.limit_options.max_chunk_size,
        )
        next_timeout = self._multi_request_timeouts(
            general_method_timeout_ms=general_method_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        _rows = list(rows)
        logger.info(f"inserting {len(_rows)} rows in '{self.name}'")

        async def _chunk_insertor(row_chunk: list[ROW]) -> DataAPIResponse:
            im_command = insert_many_command(
                row_chunk,  # type: ignore[arg-type]
                ordered=ordered,
            )
            logger.info(f"insertMany(chunk) on '{self.name}'")
            im_response = await self._runner.async_execute(
                im_command,
                raise_api_errors=False,
                timeout_context=next_timeout(),
            )
            logger.info(f"finished insertMany(chunk) on '{self.name}'")
            if im_response.errors:
                raise DataAPIResponseException.from_response(
                    command=im_command.to_payload(),
                    raw_response=im_response.raw_response,
                )
            _ensure_inserted_keys(im_response)
            return im_response

        outcome = await async_run_batch(
            chunk_items(_rows, _chunk_size),
            _chunk_insertor,
            ordered=ordered,
            concurrency=_concurrency,
        )
        inserted_ids, inserted_id_tuples = _collect_inserted_keys(
            outcome.results, outcome.errors
        )
        if outcome.exceptions:
            raise TableInsertManyException(
                inserted_ids=inserted_ids,
                inserted_id_tuples=inserted_id_tuples,
                exceptions=outcome.exceptions,
            )
        logger.info(f"finished inserting {len(_rows)} rows in '{self.name}'")
        return TableInsertManyResult(
            raw_results=[response.raw_response for response in outcome.succeeded],
            inserted_ids=inserted_ids,
            inserted_id_tuples=inserted_id_tuples,
        )

    def find(
        self,
        filter: FilterType | None = None,
        *,
        projection: ProjectionType | None = None,
        skip: int | None = None,
        limit: int | None = None,
        include_similarity: bool | None = None,
        include_sort_vector: bool | None = None,
        sort: SortType | None = None,
        initial_page_state: str | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> AsyncTableFindCursor[ROW, ROW]:
        _request_timeout_ms, _rt_label = self._request_timeout(
            request_timeout_ms if request_timeout_ms is not None else timeout_ms
        )
        return AsyncTableFindCursor(
            data_source=self,
            request_timeout_ms=_request_timeout_ms,
            overall_timeout_ms=None,
            request_timeout_label=_rt_label,
            filter=filter,
            projection=projection,
            sort=sort,
            limit=limit,
            include_similarity=include_similarity,
            include_sort_vector=include_sort_vector,
            skip=skip,
            initial_page_state=initial_page_state,
        )

    async def find_page(
        self,
        filter: FilterType | None = None,
        *,
        projection: ProjectionType | None = None,
        skip: int | None = None,
        limit: int | None = None,
        include_similarity: bool | None = None,
        include_sort_vector: bool | None = None,
        sort: SortType | None = None,
        initial_page_state: str | None = None,
        general_method_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> FindPage[ROW]:
        timeout_context = self._single_request_timeout(
            method_timeout_ms=general_method_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        f_command = find_command(
            filter=filter,
            projection=projection,
            sort=sort,
            options={
                "skip": skip,
                "limit": limit or None,
                "includeSimilarity": include_similarity,
                "includeSortVector": include_sort_vector,
                "pageState": initial_page_state,
            },
        )
        logger.info(f"find (page) on '{self.name}'")
        f_response = await self._runner.async_execute(
            f_command, timeout_context=timeout_context
        )
        logger.info(f"finished find (page) on '{self.name}'")
        return _find_page_from_response(f_response)

    async def find_one(
        self,
        filter: FilterType | None = None,
        *,
        projection: ProjectionType | None = None,
        include_similarity: bool | None = None,
        sort: SortType | None = None,
        general_method_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> ROW | None:
        timeout_context = self._single_request_timeout(
            method_timeout_ms=general_method_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        fo_command = (
            Command("findOne")
            .with_filter(filter)
            .with_projection(projection)
            .with_sort(sort)
            .with_options({"includeSimilarity": include_similarity})
        )
        logger.info(f"findOne on '{self.name}'")
        fo_response = await self._runner.async_execute(
            fo_command, timeout_context=timeout_context
        )
        logger.info(f"finished findOne on '{self.name}'")
        if "document" not in fo_response.data:
            raise UnexpectedDataAPIResponseException(
                text="Response from findOne API command missing 'document'.",
                raw_response=fo_response.raw_response,
            )
        return fo_response.document  # type: ignore[return-value]

    async def distinct(
        self,
        key: str,
        *,
        filter: FilterType | None = None,
        general_method_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> list[Any]:
        _general_method_timeout_ms = (
            timeout_ms if timeout_ms is not None else general_method_timeout_ms
        )
        f_cursor = self.find(
            filter,
            projection={_reduce_distinct_key_to_shallow_safe(key): True},
            request_timeout_ms=request_timeout_ms,
        )
        if _general_method_timeout_ms is not None:
            f_cursor = f_cursor._copy(
                overall_timeout_ms=_general_method_timeout_ms,
                overall_timeout_label="general_method_timeout_ms",
            )
        collector = DistinctCollector(key, preprocess_table_payload_value)
        logger.info(f"running distinct() on '{self.name}'")
        while await f_cursor.has_next():
            collector.feed(await f_cursor.__anext__())  # type: ignore[arg-type]
        logger.info(f"finished running distinct() on '{self.name}'")
        return collector.values

    async def count_documents(
        self,
        filter: FilterType,
        *,
        upper_bound: int,
        general_method_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> int:
        check_upper_bound(upper_bound, self.api_options.limit_options.max_count)
        timeout_context = self._single_request_timeout(
            method_timeout_ms=general_method_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        logger.info(f"countDocuments on '{self.name}'")
        cd_response = await self._runner.async_execute(
            Command("countDocuments").with_filter(filter),
            timeout_context=timeout_context,
        )
        logger.info(f"finished countDocuments on '{self.name}'")
        return evaluate_count(
            cd_response,
            upper_bound=upper_bound,
            exception_class=TooManyRowsToCountException,
            items_name="Row",
        )

    async def estimated_document_count(
        self,
        *,
        general_method_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> int:
        timeout_context = self._single_request_timeout(
            method_timeout_ms=general_method_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        logger.info(f"estimatedDocumentCount on '{self.name}'")
        ed_response = await self._runner.async_execute(
            Command("estimatedDocumentCount"), timeout_context=timeout_context
        )
        logger.info(f"finished estimatedDocumentCount on '{self.name}'")
        if "count" not in ed_response.status:
            raise UnexpectedDataAPIResponseException(
                text="Faulty response from estimatedDocumentCount API command.",
                raw_response=ed_response.raw_response,
            )
        count: int = ed_response.status["count"]
        return count

    async def update_one(
        self,
        filter: FilterType,
        update: dict[str, Any],
        *,
        general_method_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> None:
        timeout_context = self._single_request_timeout(
            method_timeout_ms=general_method_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        uo_command = Command("updateOne").with_filter(filter).with_update(update)
        logger.info(f"updateOne on '{self.name}'")
        uo_response = await self._runner.async_execute(
            uo_command, timeout_context=timeout_context
        )
        logger.info(f"finished updateOne on '{self.name}'")
        if "status" not in uo_response.raw_response:
            raise UnexpectedDataAPIResponseException(
                text="Faulty response from updateOne API command.",
                raw_response=uo_response.raw_response,
            )

    async def delete_one(
        self,
        filter: FilterType,
        *,
        general_method_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> None:
        timeout_context = self._single_request_timeout(
            method_timeout_ms=general_method_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        logger.info(f"deleteOne on '{self.name}'")
        do_response = await self._runner.async_execute(
            delete_one_command(filter), timeout_context=timeout_context
        )
        logger.info(f"finished deleteOne on '{self.name}'")
        if do_response.status.get("deletedCount") != -1:
            raise UnexpectedDataAPIResponseException(
                text="Faulty response from deleteOne API command.",
                raw_response=do_response.raw_response,
            )

    async def delete_many(
        self,
        filter: FilterType,
        *,
        general_method_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> None:
        timeout_context = self._single_request_timeout(
            method_timeout_ms=general_method_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        logger.info(f"deleteMany on '{self.name}'")
        dm_response = await self._runner.async_execute(
            delete_many_command(filter), timeout_context=timeout_context
        )
        logger.info(f"finished deleteMany on '{self.name}'")
        if dm_response.status.get("deletedCount") != -1:
            raise UnexpectedDataAPIResponseException(
                text="Faulty response from deleteMany API command.",
                raw_response=dm_response.raw_response,
            )

    async def drop(
        self,
        *,
        if_exists: bool | None = None,
        table_admin_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> None:
        logger.info(f"dropping table '{self.name}' (self)")
        await self.database.drop_table(
            self.name,
            keyspace=self.keyspace,
            if_exists=if_exists,
            table_admin_timeout_ms=table_admin_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        logger.info(f"finished dropping table '{self.name}' (self)")

    async def command(
        self,
        body: Command | dict[str, Any],
        *,
        raise_api_errors: bool = True,
        general_method_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> dict[str, Any]:
        timeout_context = self._single_request_timeout(
            method_timeout_ms=general_method_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        _payload = body.to_payload() if isinstance(body, Command) else body
        _cmd_desc = ",".join(sorted(_payload.keys()))
        logger.info(f"command={_cmd_desc} on '{self.name}'")
        command_result = await self._api_commander.async_request(
            payload=_payload,
            raise_api_errors=raise_api_errors,
            timeout_context=timeout_context,
        )
        logger.info(f"finished command={_cmd_desc} on '{self.name}'")
        return command_result
