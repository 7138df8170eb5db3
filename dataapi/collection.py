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
    replace_one_command,
    update_many_command,
    update_one_command,
)
from dataapi.constants import (
    DOC,
    FilterType,
    HybridSortType,
    ProjectionType,
    ReturnDocument,
    SortType,
)
from dataapi.counting import check_upper_bound, evaluate_count
from dataapi.cursors import (
    AsyncCollectionFindAndRerankCursor,
    AsyncCollectionFindCursor,
    CollectionFindAndRerankCursor,
    CollectionFindCursor,
    RerankedResult,
)
from dataapi.cursors.distinct import DistinctCollector, _reduce_distinct_key_to_safe
from dataapi.exceptions import (
    CollectionBulkWriteException,
    CollectionDeleteManyException,
    CollectionInsertManyException,
    CollectionUpdateManyException,
    DataAPIException,
    DataAPIResponseException,
    TooManyDocumentsToCountException,
    UnexpectedDataAPIResponseException,
)
from dataapi.info import CollectionDefinition, CollectionInfo
from dataapi.paging import FindPage, async_paginate, paginate
from dataapi.results import (
    CollectionBulkWriteResult,
    CollectionDeleteResult,
    CollectionInsertManyResult,
    CollectionInsertOneResult,
    CollectionUpdateResult,
)
from dataapi.runner import DataAPIResponse
from dataapi.settings.defaults import (
    DEFAULT_BULK_WRITE_CONCURRENCY,
    DEFAULT_INSERT_MANY_CHUNK_SIZE,
    DEFAULT_INSERT_MANY_CONCURRENCY,
)
from dataapi.utils.api_options import APIOptions, FullAPIOptions
from dataapi.utils.ejson import preprocess_collection_payload_value
from dataapi.utils.unset import _UNSET, UnsetType

if TYPE_CHECKING:
    from dataapi.authentication import EmbeddingHeadersProvider
    from dataapi.database import AsyncDatabase, Database


logger = logging.getLogger(__name__)


def _prepare_update_result(responses: list[DataAPIResponse]) -> CollectionUpdateResult:
    statuses = [response.status for response in responses]
    upserted_ids = [status["upsertedId"] for status in statuses if "upsertedId" in status]
    return CollectionUpdateResult(
        raw_results=[response.raw_response for response in responses],
        matched_count=sum(status.get("matchedCount", 0) for status in statuses),
        modified_count=sum(status.get("modifiedCount", 0) for status in statuses),
        upserted_id=upserted_ids[0] if upserted_ids else None,
    )


def _inserted_ids_from_status(status: dict[str, Any] | None) -> list[Any]:
    return list((status or {}).get("insertedIds") or [])


def _ensure_inserted_ids(response: DataAPIResponse) -> None:
    if "insertedIds" not in response.status:
        raise UnexpectedDataAPIResponseException(
            text="Faulty response from insertMany API command.",
            raw_response=response.raw_response,
        )


def _collect_inserted_ids(
    responses: list[DataAPIResponse | None],
    errors: list[Exception | None],
) -> list[Any]:
    """
    The inserted ids of all chunks in submission order, including those of
    chunks that failed after inserting part of their documents.
    """
    inserted_ids: list[Any] = []
    for response, error in zip(responses, errors):
        if response is not None:
            inserted_ids += _inserted_ids_from_status(response.status)
        elif isinstance(error, DataAPIResponseException):
            inserted_ids += _inserted_ids_from_status(
                error.raw_response.get("status")
            )
    return inserted_ids


def _find_one_and_command(
    command_name: str,
    *,
    filter: FilterType,
    projection: ProjectionType | None,
    sort: SortType | None,
    upsert: bool | None = None,
    return_document: str | None = None,
) -> Command:
    if return_document is not None and return_document not in {
        ReturnDocument.BEFORE,
        ReturnDocument.AFTER,
    }:
        raise ValueError(f"Invalid value for return_document: '{return_document}'.")
    return (
        Command(command_name)
        .with_filter(filter)
        .with_projection(projection)
        .with_sort(sort)
        .with_options({"upsert": upsert, "returnDocument": return_document})
    )


def _document_from_response(
    response: DataAPIResponse, command_name: str
) -> dict[str, Any] | None:
    if "document" not in response.data:
        raise UnexpectedDataAPIResponseException(
            text=f"Faulty response from {command_name} API command.",
            raw_response=response.raw_response,
        )
    return response.document


def _deleted_count_from_response(response: DataAPIResponse, command_name: str) -> int:
    if "deletedCount" not in response.status:
        raise UnexpectedDataAPIResponseException(
            text=f"Faulty response from {command_name} API command.",
            raw_response=response.raw_response,
        )
    deleted_count: int = response.status["deletedCount"]
    return deleted_count


def _find_page_command(
    *,
    filter: FilterType | None,
    projection: ProjectionType | None,
    sort: SortType | None,
    skip: int | None,
    limit: int | None,
    include_similarity: bool | None,
    include_sort_vector: bool | None,
    initial_page_state: str | None,
) -> Command:
    return find_command(
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


class Collection(_DataResource, Generic[DOC]):
    """
    A Data API collection, holding schemaless JSON documents.
    This class has a synchronous interface.

    This class is not meant for direct instantiation by the user, rather
    it is obtained by invoking methods such as `get_collection` of Database,
    wherefrom the Collection inherits its API options such as authentication
    token and API endpoint.

    Args:
        database: the Database this collection belongs to.
        name: the collection name. It should match an existing collection.
        keyspace: the keyspace of the collection. If not given, the working
            keyspace of the database is used.
        api_options: the complete API options for this instance.

    Example:
        >>> from dataapi import DataAPIClient
        >>> client = DataAPIClient(environment="other")
        >>> database = client.get_database(
        ...     "http://localhost:8181", token="Cassandra:...", keyspace="ks"
        ... )
        >>> my_collection = database.get_collection("my_events")

    Note:
        creating an instance of Collection does not trigger actual creation
        of the collection on the database. The latter should have been created
        beforehand, e.g. through the `create_collection` method of a Database.
    """

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
        self: Collection[DOC],
        *,
        embedding_api_key: str | EmbeddingHeadersProvider | UnsetType = _UNSET,
        api_options: APIOptions | UnsetType = _UNSET,
    ) -> Collection[DOC]:
        arg_api_options = APIOptions(embedding_api_key=embedding_api_key)
        final_api_options = self.api_options.with_override(api_options).with_override(
            arg_api_options
        )
        return Collection(
            database=self.database,
            name=self.name,
            keyspace=self.keyspace,
            api_options=final_api_options,
        )

    def with_options(
        self: Collection[DOC],
        *,
        embedding_api_key: str | EmbeddingHeadersProvider | UnsetType = _UNSET,
        api_options: APIOptions | UnsetType = _UNSET,
    ) -> Collection[DOC]:
        """
        Create a clone of this collection with some changed attributes.

        Args:
            embedding_api_key: an API key for the embedding service of the
                collection, if any. A string becomes an
                `EmbeddingAPIKeyHeaderProvider`.
            api_options: any additional options to set for the clone. Named
                parameters take precedence over the same setting in here.

        Returns:
            a new Collection instance.

        Example:
            >>> collection_with_api_key_configured = my_collection.with_options(
            ...     embedding_api_key="secret-key-0123abcd...",
            ... )
        """
        return self._copy(
            embedding_api_key=embedding_api_key,
            api_options=api_options,
        )

    def to_async(
        self: Collection[DOC],
        *,
        embedding_api_key: str | EmbeddingHeadersProvider | UnsetType = _UNSET,
        api_options: APIOptions | UnsetType = _UNSET,
    ) -> AsyncCollection[DOC]:
        """
        Create an AsyncCollection from this one. Save for the arguments
        explicitly provided as overrides, everything else is kept identical
        (the database is converted into an async object).

        Returns:
            the new copy, an AsyncCollection instance.

        Example:
            >>> asyncio.run(my_coll.to_async().count_documents({}, upper_bound=100))
            77
        """
        arg_api_options = APIOptions(embedding_api_key=embedding_api_key)
        final_api_options = self.api_options.with_override(api_options).with_override(
            arg_api_options
        )
        return AsyncCollection(
            database=self.database.to_async(),
            name=self.name,
            keyspace=self.keyspace,
            api_options=final_api_options,
        )

    @property
    def database(self) -> Database:
        """The Database this collection belongs to."""
        return self._database  # type: ignore[no-any-return]

    def options(
        self,
        *,
        collection_admin_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> CollectionDefinition:
        """
        Get the collection settings (vector, indexing, default id) from the
        Data API.

        Returns:
            a CollectionDefinition.

        Raises:
            ValueError: if the collection is not found in its keyspace.
        """

        logger.info(f"getting collections in search of '{self.name}'")
        self_descriptors = [
            coll_desc
            for coll_desc in self.database.list_collections(
                keyspace=self.keyspace,
                collection_admin_timeout_ms=collection_admin_timeout_ms,
                request_timeout_ms=request_timeout_ms,
                timeout_ms=timeout_ms,
            )
            if coll_desc.name == self.name
        ]
        logger.info(f"finished getting collections in search of '{self.name}'")
        if self_descriptors:
            return self_descriptors[0].definition
        raise ValueError(f"Collection {self.keyspace}.{self.name} not found.")

    def info(self) -> CollectionInfo:
        """
        Information on the collection (name, keyspace, endpoint). This
        method makes no API request.
        """
        return CollectionInfo(
            api_endpoint=self.database.api_endpoint,
            keyspace=self.keyspace,
            name=self.name,
            full_name=self.full_name,
        )

    def insert_one(
        self,
        document: DOC,
        *,
        general_method_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> CollectionInsertOneResult:
        """
        Insert a single document in the collection in an atomic operation.

        Args:
            document: the dictionary expressing the document to insert.
                The `_id` field, if missing, is generated by the Data API.
            general_method_timeout_ms: a timeout, in milliseconds, for the
                request. If not provided, this object's defaults apply.
            request_timeout_ms: an alias for `general_method_timeout_ms`.
            timeout_ms: an alias for `general_method_timeout_ms`.

        Returns:
            a CollectionInsertOneResult.

        Example:
            >>> my_coll.insert_one({"name": "Ada"}).inserted_id
            'a0d8...'
        """

        timeout_context = self._single_request_timeout(
            method_timeout_ms=general_method_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        logger.info(f"insertOne on '{self.name}'")
        io_response = self._runner.execute(
            insert_one_command(document),  # type: ignore[arg-type]
            timeout_context=timeout_context,
        )
        logger.info(f"finished insertOne on '{self.name}'")
        inserted_ids = io_response.status.get("insertedIds")
        if not inserted_ids:
            raise UnexpectedDataAPIResponseException(
                text="Faulty response from insertOne API command.",
                raw_response=io_response.raw_response,
            )
        return CollectionInsertOneResult(
            raw_results=[io_response.raw_response],
            inserted_id=inserted_ids[0],
        )

    def insert_many(
        self,
        documents: Iterable[DOC],
        *,
        ordered: bool = False,
        chunk_size: int | None = None,
        concurrency: int | None = None,
        general_method_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> CollectionInsertManyResult:
        """
        Insert a list of documents into the collection.
        This is not an atomic operation.

        The documents are split in chunks, each sent with an `insertMany`
        command. Unordered insertions run the chunks concurrently; ordered
        insertions run them one after the other and stop at the first error.

        Args:
            documents: an iterable of dictionaries, each a document to insert.
            ordered: if False (default), the insertions can occur in arbitrary
                order and possibly concurrently. If True, they are processed
                sequentially, stopping at the first failure.
            chunk_size: how many documents to include in each request.
                It cannot exceed the `max_chunk_size` of the limit options.
            concurrency: maximum number of concurrent requests. Defaults to
                20 for unordered insertions and to 1 for ordered ones, which
                accept no other value.
            general_method_timeout_ms: a timeout, in milliseconds, for the
                whole method, possibly spanning several requests.
            request_timeout_ms: a timeout, in milliseconds, for each request.
            timeout_ms: an alias for `general_method_timeout_ms`.

        Returns:
            a CollectionInsertManyResult, with the ids in input order.

        Raises:
            ValueError: for invalid chunk_size/concurrency/ordered values.
                No request is made in that case.
            CollectionInsertManyException: if some chunk failed. The ids of
                the documents that were inserted nevertheless, and every
                root cause, are attached to the exception.

        Example:
            >>> my_coll.insert_many([{"a": 10}, {"a": 5}, {"b": [True]}])
            CollectionInsertManyResult(inserted_ids=['1c79...', '4a39...', ...])
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
        _documents = list(documents)
        logger.info(f"inserting {len(_documents)} documents in '{self.name}'")

        def _chunk_insertor(document_chunk: list[DOC]) -> DataAPIResponse:
            im_command = insert_many_command(
                document_chunk,  # type: ignore[arg-type]
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
            _ensure_inserted_ids(im_response)
            return im_response

        outcome = run_batch(
            chunk_items(_documents, _chunk_size),
            _chunk_insertor,
            ordered=ordered,
            concurrency=_concurrency,
        )
        inserted_ids = _collect_inserted_ids(outcome.results, outcome.errors)
        if outcome.exceptions:
            raise CollectionInsertManyException(
                inserted_ids=inserted_ids,
                exceptions=outcome.exceptions,
            )
        logger.info(f"finished inserting {len(_documents)} documents in '{self.name}'")
        return CollectionInsertManyResult(
            raw_results=[response.raw_response for response in outcome.succeeded],
            inserted_ids=inserted_ids,
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
    ) -> CollectionFindCursor[DOC, DOC]:
        """
        Find documents in the collection matching a filter, returning a cursor.

        No request is made by this method: the cursor fetches the pages
        lazily, as its items are consumed.

        Args:
            filter: a predicate in the Data API filter syntax, e.g.
                `{"price": {"$lt": 100}}`. An empty or missing filter
                matches every document.
            projection: which fields to return, either as an iterable of
                field names or a dictionary such as `{"a": True, "b": False}`.
            skip: how many documents to skip. Requires a `sort`.
            limit: the maximum number of documents to return (None or 0: no limit).
            include_similarity: ask for a `$similarity` field in each document
                returned by a vector search.
            include_sort_vector: ask for the query vector of a vector search,
                see the cursor `get_sort_vector` method.
            sort: a sort criterion, e.g. `{"price": SortMode.ASCENDING}`
                or `{"$vector": [0.1, 0.2]}`.
            initial_page_state: resume a previous find from this page state,
                as returned by `find_page`.
            request_timeout_ms: a timeout, in milliseconds, for each page request.
            timeout_ms: an alias for `request_timeout_ms`.

        Returns:
            a CollectionFindCursor.

        Example:
            >>> cursor = my_coll.find({"seq": {"$gte": 10}}, limit=3)
            >>> [doc["seq"] for doc in cursor]
            [10, 11, 12]
        """

        _request_timeout_ms, _rt_label = self._request_timeout(
            request_timeout_ms if request_timeout_ms is not None else timeout_ms
        )
        return CollectionFindCursor(
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

    def find_and_rerank(
        self,
        filter: FilterType | None = None,
        *,
        sort: HybridSortType,
        projection: ProjectionType | None = None,
        limit: int | None = None,
        hybrid_limits: int | dict[str, int] | None = None,
        include_scores: bool | None = None,
        include_sort_vector: bool | None = None,
        rerank_on: str | None = None,
        rerank_query: str | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> CollectionFindAndRerankCursor[DOC, RerankedResult[DOC]]:
        """
        Find relevant documents by combining a vector and a lexical search,
        then reranking the merged candidates. Returns a cursor yielding
        RerankedResult items, each a document paired with its scores.

        The collection must have been created with the hybrid capabilities
        (lexical and reranking enabled). No request is made by this method.

        Args:
            filter: a predicate in the Data API filter syntax, applied to
                both retrievals.
            sort: the hybrid search clause, e.g. `{"$hybrid": "some text"}`
                (with vectorize), or `{"$hybrid": {"$vector": [...],
                "$lexical": "some text"}}`.
            projection: which fields to return for each document.
            limit: the maximum number of results after reranking.
            hybrid_limits: how many candidates each retrieval feeds to the
                reranker: a number, or a dictionary such as
                `{"$vector": 20, "$lexical": 10}`.
            include_scores: whether to return the scores of each result, to
                be read in the `scores` attribute of RerankedResult.
            include_sort_vector: whether to return the query vector of the
                vector retrieval, see the cursor `get_sort_vector` method.
            rerank_on: the document field the reranker reads, for
                collections without vectorize.
            rerank_query: the query text for the reranker, for collections
                without vectorize.
            request_timeout_ms: a timeout, in milliseconds, for each request
                the cursor makes. Defaults to the collection setting.
            timeout_ms: an alias for `request_timeout_ms`.

        Returns:
            a CollectionFindAndRerankCursor.

        Example:
            >>> cursor = my_coll.find_and_rerank(
            ...     sort={"$hybrid": "Weekdays?"},
            ...     limit=2,
            ...     include_scores=True,
            ... )
            >>> [(r.document["wkd"], r.scores["$rerank"]) for r in cursor]
            [('Wed', -9.1015625), ('Mon', -10.2421875)]
        """

        _request_timeout_ms, _rt_label = self._request_timeout(
            request_timeout_ms if request_timeout_ms is not None else timeout_ms
        )
        return CollectionFindAndRerankCursor(
            data_source=self,
            request_timeout_ms=_request_timeout_ms,
            overall_timeout_ms=None,
            request_timeout_label=_rt_label,
            filter=filter,
            projection=projection,
            sort=sort,
            limit=limit,
            hybrid_limits=hybrid_limits,
            include_scores=include_scores,
            include_sort_vector=include_sort_vector,
            rerank_on=rerank_on,
            rerank_query=rerank_query,
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
    ) -> FindPage[DOC]:
        """
        Run a find and return exactly one page of results, along with the
        page state to request the following page with.

        Args:
            initial_page_state: the page state of the page to fetch, None for
                the first page. The other parameters are as for `find`, and
                must be the same across the pages of a single find.

        Returns:
            a FindPage.

        Example:
            >>> page = my_coll.find_page({})
            >>> while page.next_page_state:
            ...     page = my_coll.find_page({}, initial_page_state=page.next_page_state)
        """

        timeout_context = self._single_request_timeout(
            method_timeout_ms=general_method_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        f_command = _find_page_command(
            filter=filter,
            projection=projection,
            sort=sort,
            skip=skip,
            limit=limit,
            include_similarity=include_similarity,
            include_sort_vector=include_sort_vector,
            initial_page_state=initial_page_state,
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
    ) -> DOC | None:
        """
        Run a search, returning the first document found or None.

        Args:
            filter: a predicate in the Data API filter syntax.
            projection: which fields to return, see `find`.
            include_similarity: ask for a `$similarity` field (vector searches).
            sort: a sort criterion, see `find`.
            general_method_timeout_ms: a timeout, in milliseconds, for the request.
            request_timeout_ms: an alias for `general_method_timeout_ms`.
            timeout_ms: an alias for `general_method_timeout_ms`.

        Returns:
            a dictionary expressing the document, or None.

        Example:
            >>> my_coll.find_one({"name": "Ada"})
            {'_id': '...', 'name': 'Ada'}
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
                text="Faulty response from findOne API command.",
                raw_response=fo_response.raw_response,
            )
        return fo_response.document  # type: ignore[return-value]

    def find_by_id(
        self,
        document_id: Any,
        *,
        projection: ProjectionType | None = None,
        general_method_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> DOC | None:
        """The document with the given `_id`, or None. See `find_one`."""
        return self.find_one(
            {"_id": document_id},
            projection=projection,
            general_method_timeout_ms=general_method_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )

    def exists(
        self,
        filter: FilterType | None = None,
        *,
        general_method_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> bool:
        """Whether at least one document matches the filter."""
        return (
            self.find_one(
                filter,
                projection={"_id": True},
                general_method_timeout_ms=general_method_timeout_ms,
                request_timeout_ms=request_timeout_ms,
                timeout_ms=timeout_ms,
            )
            is not None
        )

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
        Return a list of the unique values of `key` across the documents
        in the collection that match the provided filter.

        Args:
            key: the name of the field whose value is inspected across
                documents. Dot-notation ("a.b.c") reaches into subdocuments,
                and numeric segments ("a.0") address list items. Lists found
                at the key are unrolled into their items.
            filter: a predicate in the Data API filter syntax.
            general_method_timeout_ms: a timeout, in milliseconds, for the
                whole method, possibly spanning several requests.
            request_timeout_ms: a timeout, in milliseconds, for each request.
            timeout_ms: an alias for `general_method_timeout_ms`.

        Returns:
            a list of the distinct values, in order of first appearance.

        Note:
            this is a client-side operation: all matching documents are read
            (with a projection on the key), so it can be slow on large sets.
        """

        _general_method_timeout_ms = (
            timeout_ms if timeout_ms is not None else general_method_timeout_ms
        )
        f_cursor = self.find(
            filter,
            projection={_reduce_distinct_key_to_safe(key): True},
            request_timeout_ms=request_timeout_ms,
        )
        if _general_method_timeout_ms is not None:
            f_cursor = f_cursor._copy(
                overall_timeout_ms=_general_method_timeout_ms,
                overall_timeout_label="general_method_timeout_ms",
            )
        collector = DistinctCollector(key, preprocess_collection_payload_value)
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
        Count the documents in the collection matching the specified filter.

        Args:
            filter: a predicate in the Data API filter syntax.
            upper_bound: a required ceiling on the result of the count.
                If the count exceeds it, an exception is raised. It must be
                positive and at most the `max_count` of the limit options.
            general_method_timeout_ms: a timeout, in milliseconds, for the request.
            request_timeout_ms: an alias for `general_method_timeout_ms`.
            timeout_ms: an alias for `general_method_timeout_ms`.

        Returns:
            the exact count of matching documents.

        Raises:
            ValueError: for an invalid upper bound (before any request).
            TooManyDocumentsToCountException: if the count exceeds the upper
                bound, or the server stopped counting at its own limit.

        Example:
            >>> my_coll.count_documents({"seq": {"$gt": 15}}, upper_bound=50)
            4
        """

        check_upper_bound(upper_bound, self.api_options.limit_options.max_count)
        timeout_context = self._single_request_timeout(
            method_timeout_ms=general_method_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        cd_command = Command("countDocuments").with_filter(filter)
        logger.info(f"countDocuments on '{self.name}'")
        cd_response = self._runner.execute(cd_command, timeout_context=timeout_context)
        logger.info(f"finished countDocuments on '{self.name}'")
        return evaluate_count(
            cd_response,
            upper_bound=upper_bound,
            exception_class=TooManyDocumentsToCountException,
        )

    def estimated_document_count(
        self,
        *,
        general_method_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> int:
        """
        An estimate of the number of documents in the collection, from the
        server statistics. Contrary to `count_documents` there is no filter.
        """

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

    def find_one_and_replace(
        self,
        filter: FilterType,
        replacement: DOC,
        *,
        projection: ProjectionType | None = None,
        sort: SortType | None = None,
        upsert: bool = False,
        return_document: str = ReturnDocument.BEFORE,
        general_method_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> DOC | None:
        """
        Find a document and replace it entirely with a new one, optionally
        inserting the replacement if nothing matches.

        Args:
            filter: a predicate in the Data API filter syntax.
            replacement: the new document to write.
            projection: which fields of the returned document to include.
            sort: which document to pick if several match.
            upsert: insert `replacement` if no document matches.
            return_document: `ReturnDocument.BEFORE` (default) to return the
                document as it was, `ReturnDocument.AFTER` for the new one.
            general_method_timeout_ms: a timeout, in milliseconds, for the request.
            request_timeout_ms: an alias for `general_method_timeout_ms`.
            timeout_ms: an alias for `general_method_timeout_ms`.

        Returns:
            the document (before or after), or None if nothing was found
            (or, with ReturnDocument.BEFORE, if an upsert took place).
        """

        timeout_context = self._single_request_timeout(
            method_timeout_ms=general_method_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        fo_command = _find_one_and_command(
            "findOneAndReplace",
            filter=filter,
            projection=projection,
            sort=sort,
            upsert=upsert,
            return_document=return_document,
        ).with_replacement(replacement)  # type: ignore[arg-type]
        logger.info(f"findOneAndReplace on '{self.name}'")
        fo_response = self._runner.execute(fo_command, timeout_context=timeout_context)
        logger.info(f"finished findOneAndReplace on '{self.name}'")
        return _document_from_response(fo_response, "findOneAndReplace")  # type: ignore[return-value]

    def replace_one(
        self,
        filter: FilterType,
        replacement: DOC,
        *,
        sort: SortType | None = None,
        upsert: bool = False,
        general_method_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> CollectionUpdateResult:
        """
        Replace a single document with a new one, optionally inserting it
        if nothing matches.

        Returns:
            a CollectionUpdateResult.
        """

        timeout_context = self._single_request_timeout(
            method_timeout_ms=general_method_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        ro_command = replace_one_command(
            filter,
            replacement,  # type: ignore[arg-type]
            upsert=upsert,
            sort=sort,
        )
        logger.info(f"findOneAndReplace on '{self.name}'")
        ro_response = self._runner.execute(ro_command, timeout_context=timeout_context)
        logger.info(f"finished findOneAndReplace on '{self.name}'")
        _document_from_response(ro_response, "findOneAndReplace")
        return _prepare_update_result([ro_response])

    def find_one_and_update(
        self,
        filter: FilterType,
        update: dict[str, Any],
        *,
        projection: ProjectionType | None = None,
        sort: SortType | None = None,
        upsert: bool = False,
        return_document: str = ReturnDocument.BEFORE,
        general_method_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> DOC | None:
        """
        Find a document and update it as requested, optionally inserting a
        new one if nothing matches.

        Args:
            filter: a predicate in the Data API filter syntax.
            update: the update prescription, e.g. `{"$set": {"status": "ok"}}`.
            projection: which fields of the returned document to include.
            sort: which document to pick if several match.
            upsert: create a document (from the filter and the update) if
                no document matches.
            return_document: `ReturnDocument.BEFORE` (default) or `AFTER`.

        Returns:
            the document (before or after), or None.
        """

        timeout_context = self._single_request_timeout(
            method_timeout_ms=general_method_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        fo_command = _find_one_and_command(
            "findOneAndUpdate",
            filter=filter,
            projection=projection,
            sort=sort,
            upsert=upsert,
            return_document=return_document,
        ).with_update(update)
        logger.info(f"findOneAndUpdate on '{self.name}'")
        fo_response = self._runner.execute(fo_command, timeout_context=timeout_context)
        logger.info(f"finished findOneAndUpdate on '{self.name}'")
        return _document_from_response(fo_response, "findOneAndUpdate")  # type: ignore[return-value]

    def update_one(
        self,
        filter: FilterType,
        update: dict[str, Any],
        *,
        sort: SortType | None = None,
        upsert: bool = False,
        general_method_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> CollectionUpdateResult:
        """
        Update a single document, optionally inserting one if nothing matches.

        Returns:
            a CollectionUpdateResult.

        Example:
            >>> my_coll.update_one({"Marco": {"$exists": True}}, {"$inc": {"rank": 3}})
            CollectionUpdateResult(matched_count=1, modified_count=1, raw_results=...)
        """

        timeout_context = self._single_request_timeout(
            method_timeout_ms=general_method_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        uo_command = update_one_command(filter, update, upsert=upsert, sort=sort)
        logger.info(f"updateOne on '{self.name}'")
        uo_response = self._runner.execute(uo_command, timeout_context=timeout_context)
        logger.info(f"finished updateOne on '{self.name}'")
        if "matchedCount" not in uo_response.status:
            raise UnexpectedDataAPIResponseException(
                text="Faulty response from updateOne API command.",
                raw_response=uo_response.raw_response,
            )
        return _prepare_update_result([uo_response])

    def update_many(
        self,
        filter: FilterType,
        update: dict[str, Any],
        *,
        upsert: bool = False,
        general_method_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> CollectionUpdateResult:
        """
        Apply an update to all documents matching a filter.

        The Data API updates a limited number of documents per request: this
        method keeps sending the command for as long as the server reports
        more matches, and sums the counts.

        Args:
            filter: a predicate in the Data API filter syntax.
            update: the update prescription.
            upsert: insert a document if nothing matches.
            general_method_timeout_ms: a timeout, in milliseconds, for the
                whole method, possibly spanning several requests.
            request_timeout_ms: a timeout, in milliseconds, for each request.
            timeout_ms: an alias for `general_method_timeout_ms`.

        Returns:
            a CollectionUpdateResult summing all requests.

        Raises:
            CollectionUpdateManyException: if a request fails. The updates of
                the previous requests are not undone: they are described by
                the partial result attached to the exception.
        """

        next_timeout = self._multi_request_timeouts(
            general_method_timeout_ms=general_method_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        um_responses: list[DataAPIResponse] = []

        def _execute(command: Command) -> DataAPIResponse:
            logger.info(f"updateMany on '{self.name}'")
            um_response = self._runner.execute(command, timeout_context=next_timeout())
            logger.info(f"finished updateMany on '{self.name}'")
            return um_response

        logger.info(f"starting update_many on '{self.name}'")
        try:
            for um_response in paginate(
                update_many_command(filter, update, upsert=upsert), _execute
            ):
                um_responses.append(um_response)
        except DataAPIException as exc:
            raise CollectionUpdateManyException(
                partial_result=_prepare_update_result(um_responses),
                cause=exc,
            ) from exc
        logger.info(f"finished update_many on '{self.name}'")
        return _prepare_update_result(um_responses)

    def find_one_and_delete(
        self,
        filter: FilterType,
        *,
        projection: ProjectionType | None = None,
        sort: SortType | None = None,
        general_method_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> DOC | None:
        """
        Find a document and delete it, returning it (as it was before deletion).

        Returns:
            the deleted document, or None if nothing matched.
        """

        timeout_context = self._single_request_timeout(
            method_timeout_ms=general_method_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        fo_command = _find_one_and_command(
            "findOneAndDelete",
            filter=filter,
            projection=projection,
            sort=sort,
        )
        logger.info(f"findOneAndDelete on '{self.name}'")
        fo_response = self._runner.execute(fo_command, timeout_context=timeout_context)
        logger.info(f"finished findOneAndDelete on '{self.name}'")
        if "document" not in fo_response.data:
            if fo_response.status.get("deletedCount") == 0:
                return None
            raise UnexpectedDataAPIResponseException(
                text="Faulty response from findOneAndDelete API command.",
                raw_response=fo_response.raw_response,
            )
        return fo_response.document  # type: ignore[return-value]

    def delete_one(
        self,
        filter: FilterType,
        *,
        sort: SortType | None = None,
        general_method_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> CollectionDeleteResult:
        """
        Delete one document matching the filter.

        Returns:
            a CollectionDeleteResult, with a `deleted_count` of 0 or 1.
        """

        timeout_context = self._single_request_timeout(
            method_timeout_ms=general_method_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        logger.info(f"deleteOne on '{self.name}'")
        do_response = self._runner.execute(
            delete_one_command(filter, sort=sort), timeout_context=timeout_context
        )
        logger.info(f"finished deleteOne on '{self.name}'")
        return CollectionDeleteResult(
            raw_results=[do_response.raw_response],
            deleted_count=_deleted_count_from_response(do_response, "deleteOne"),
        )

    def delete_many(
        self,
        filter: FilterType,
        *,
        general_method_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> CollectionDeleteResult:
        """
        Delete all documents matching a filter.

        The Data API deletes a limited number of documents per request: this
        method keeps sending the command for as long as the server reports
        more matches, and sums the deleted counts.

        Args:
            filter: a predicate in the Data API filter syntax. The empty filter
                `{}` deletes everything in a single request, in which case
                the server reports a count of -1.
            general_method_timeout_ms: a timeout, in milliseconds, for the
                whole method, possibly spanning several requests.
            request_timeout_ms: a timeout, in milliseconds, for each request.
            timeout_ms: an alias for `general_method_timeout_ms`.

        Returns:
            a CollectionDeleteResult summing all requests.

        Raises:
            CollectionDeleteManyException: if a request fails. The documents
                deleted by the previous requests stay deleted, as described
                by the partial result attached to the exception.

        Example:
            >>> my_coll.delete_many({"seq": {"$lte": 1}})
            CollectionDeleteResult(deleted_count=2, raw_results=...)
        """

        next_timeout = self._multi_request_timeouts(
            general_method_timeout_ms=general_method_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        dm_responses: list[DataAPIResponse] = []
        deleted_count = 0

        def _execute(command: Command) -> DataAPIResponse:
            logger.info(f"deleteMany on '{self.name}'")
            dm_response = self._runner.execute(command, timeout_context=next_timeout())
            logger.info(f"finished deleteMany on '{self.name}'")
            return dm_response

        logger.info(f"starting delete_many on '{self.name}'")
        try:
            for dm_response in paginate(delete_many_command(filter), _execute):
                this_dc = _deleted_count_from_response(dm_response, "deleteMany")
                dm_responses.append(dm_response)
                deleted_count += this_dc
        except DataAPIException as exc:
            raise CollectionDeleteManyException(
                partial_result=CollectionDeleteResult(
                    raw_results=[response.raw_response for response in dm_responses],
                    deleted_count=deleted_count,
                ),
                cause=exc,
            ) from exc
        logger.info(f"finished delete_many on '{self.name}'")
        return CollectionDeleteResult(
            raw_results=[response.raw_response for response in dm_responses],
            deleted_count=deleted_count,
        )

    def delete_all(
        self,
        *,
        general_method_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> CollectionDeleteResult:
        """
        Delete all documents in the collection. The server reports a
        `deleted_count` of -1 for this operation.
        """
        logger.info(f"delete_all on '{self.name}'")
        result = self.delete_many(
            {},
            general_method_timeout_ms=general_method_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        logger.info(f"finished delete_all on '{self.name}'")
        return result

    def bulk_write(
        self,
        commands: Iterable[Command],
        *,
        ordered: bool = True,
        concurrency: int | None = None,
        general_method_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> CollectionBulkWriteResult:
        """
        Run a sequence of write commands on the collection.

        Args:
            commands: the Command objects to run, e.g. built with
                `dataapi.commands.insert_one_command` and the like.
            ordered: if True (default), run the commands one after the other,
                stopping at the first failure. If False, run them all,
                possibly concurrently.
            concurrency: the maximum number of commands in flight (default 1).
                Must be 1 for ordered bulk writes.
            general_method_timeout_ms: a timeout, in milliseconds, for the
                whole method.
            request_timeout_ms: a timeout, in milliseconds, for each request.
            timeout_ms: an alias for `general_method_timeout_ms`.

        Returns:
            a CollectionBulkWriteResult with the responses in submission order.

        Raises:
            CollectionBulkWriteException: if any command failed, with the
                responses of the other commands as partial result.
        """

        _commands = list(commands)
        _concurrency = (
            concurrency if concurrency is not None else DEFAULT_BULK_WRITE_CONCURRENCY
        )
        check_batch_parameters(ordered=ordered, concurrency=_concurrency)
        next_timeout = self._multi_request_timeouts(
            general_method_timeout_ms=general_method_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )

        def _command_runner(command: Command) -> DataAPIResponse:
            logger.info(f"{command.name} (bulk_write) on '{self.name}'")
            bw_response = self._runner.execute(command, timeout_context=next_timeout())
            logger.info(f"finished {command.name} (bulk_write) on '{self.name}'")
            return bw_response

        logger.info(f"starting bulk_write of {len(_commands)} commands on '{self.name}'")
        outcome = run_batch(
            _commands,
            _command_runner,
            ordered=ordered,
            concurrency=_concurrency,
        )
        result = CollectionBulkWriteResult(
            responses=[
                response.raw_response if response is not None else None
                for response in outcome.results
            ]
        )
        if outcome.exceptions:
            raise CollectionBulkWriteException(
                partial_result=result,
                exceptions=outcome.exceptions,
            )
        logger.info(f"finished bulk_write on '{self.name}'")
        return result

    def drop(
        self,
        *,
        collection_admin_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> None:
        """
        Drop the collection, i.e. delete it from the database along with
        all the documents it contains.

        Note:
            methods can still be invoked on this object afterwards, but they
            will fail as the collection does not exist anymore.
        """
        logger.info(f"dropping collection '{self.name}' (self)")
        self.database.drop_collection(
            self.name,
            keyspace=self.keyspace,
            collection_admin_timeout_ms=collection_admin_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        logger.info(f"finished dropping collection '{self.name}' (self)")

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
        Send a raw command to the Data API for this collection, returning
        the raw response. No conversion is applied to the values.

        Args:
            body: a Command, or the JSON payload as a dictionary.
            raise_api_errors: if True, an "errors" response raises
                DataAPIResponseException. Otherwise it is returned.

        Example:
            >>> my_coll.command({"countDocuments": {}})
            {'status': {'count': 123}}
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


class AsyncCollection(_DataResource, Generic[DOC]):
    """
    A Data API collection, holding schemaless JSON documents.
    This class has an asynchronous interface for use with asyncio.

    This class is not meant for direct instantiation by the user, rather
    it is obtained by invoking methods such as `get_collection` of AsyncDatabase.
    The methods mirror those of Collection (see there for full documentation)
    and must be awaited, except `find` which returns an async cursor.

    Example:
        >>> my_async_coll = async_database.get_collection("my_events")
        >>> await my_async_coll.insert_one({"name": "Ada"})
        CollectionInsertOneResult(inserted_id='...', raw_results=...)
    """

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

    async def __aenter__(self: AsyncCollection[DOC]) -> AsyncCollection[DOC]:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self._api_commander.__aexit__(*exc_info)

    def _copy(
        self: AsyncCollection[DOC],
        *,
        embedding_api_key: str | EmbeddingHeadersProvider | UnsetType = _UNSET,
        api_options: APIOptions | UnsetType = _UNSET,
    ) -> AsyncCollection[DOC]:
        arg_api_options = APIOptions(embedding_api_key=embedding_api_key)
        final_api_options = self.api_options.with_override(api_options).with_override(
            arg_api_options
        )
        return AsyncCollection(
            database=self.database,
            name=self.name,
            keyspace=self.keyspace,
            api_options=final_api_options,
        )

    def with_options(
        self: AsyncCollection[DOC],
        *,
        embedding_api_key: str | EmbeddingHeadersProvider | UnsetType = _UNSET,
        api_options: APIOptions | UnsetType = _UNSET,
    ) -> AsyncCollection[DOC]:
        """Create a clone of this collection with some changed attributes."""
        return self._copy(
            embedding_api_key=embedding_api_key,
            api_options=api_options,
        )

    def to_sync(
        self: AsyncCollection[DOC],
        *,
        embedding_api_key: str | EmbeddingHeadersProvider | UnsetType = _UNSET,
        api_options: APIOptions | UnsetType = _UNSET,
    ) -> Collection[DOC]:
        """
        Create a Collection from this one. Save for the arguments explicitly
        provided as overrides, everything else is kept identical.

        Example:
            >>> my_async_coll.to_sync().count_documents({}, upper_bound=100)
            77
        """
        arg_api_options = APIOptions(embedding_api_key=embedding_api_key)
        final_api_options = self.api_options.with_override(api_options).with_override(
            arg_api_options
        )
        return Collection(
            database=self.database.to_sync(),
            name=self.name,
            keyspace=self.keyspace,
            api_options=final_api_options,
        )

    @property
    def database(self) -> AsyncDatabase:
        """The AsyncDatabase this collection belongs to."""
        return self._database  # type: ignore[no-any-return]

    async def options(
        self,
        *,
        collection_admin_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> CollectionDefinition:
        logger.info(f"getting collections in search of '{self.name}'")
        self_descriptors = [
            coll_desc
            for coll_desc in await self.database.list_collections(
                keyspace=self.keyspace,
                collection_admin_timeout_ms=collection_admin_timeout_ms,
                request_timeout_ms=request_timeout_ms,
                timeout_ms=timeout_ms,
            )
            if coll_desc.name == self.name
        ]
        logger.info(f"finished getting collections in search of '{self.name}'")
        if self_descriptors:
            return self_descriptors[0].definition
        raise ValueError(f"Collection {self.keyspace}.{self.name} not found.")

    def info(self) -> CollectionInfo:
        return CollectionInfo(
            api_endpoint=self.database.api_endpoint,
            keyspace=self.keyspace,
            name=self.name,
            full_name=self.full_name,
        )

    async def insert_one(
        self,
        document: DOC,
        *,
        general_method_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> CollectionInsertOneResult:
        timeout_context = self._single_request_timeout(
            method_timeout_ms=general_method_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        logger.info(f"insertOne on '{self.name}'")
        io_response = await self._runner.async_execute(
            insert_one_command(document),  # type: ignore[arg-type]
            timeout_context=timeout_context,
        )
        logger.info(f"finished insertOne on '{self.name}'")
        inserted_ids = io_response.status.get("insertedIds")
        if not inserted_ids:
            raise UnexpectedDataAPIResponseException(
                text="Faulty response from insertOne API command.",
                raw_response=io_response.raw_response,
            )
        return CollectionInsertOneResult(
            raw_results=[io_response.raw_response],
            inserted_id=inserted_ids[0],
        )

    async def insert_many(
        self,
        documents: Iterable[DOC],
        *,
        ordered: bool = False,
        chunk_size: int | None = None,
        concurrency: int | None = None,
        general_method_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> CollectionInsertManyResult:
        """
        Insert a list of documents into the collection, in chunks.
        Unordered insertions run the chunks as concurrent tasks.
        See `Collection.insert_many` for the parameters and exceptions.
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
        _documents = list(documents)
        logger.info(f"inserting {len(_documents)} documents in '{self.name}'")

        async def _chunk_insertor(document_chunk: list[DOC]) -> DataAPIResponse:
            im_command = insert_many_command(
                document_chunk,  # type: ignore[arg-type]
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
            _ensure_inserted_ids(im_response)
            return im_response

        outcome = await async_run_batch(
            chunk_items(_documents, _chunk_size),
            _chunk_insertor,
            ordered=ordered,
            concurrency=_concurrency,
        )
        inserted_ids = _collect_inserted_ids(outcome.results, outcome.errors)
        if outcome.exceptions:
            raise CollectionInsertManyException(
                inserted_ids=inserted_ids,
                exceptions=outcome.exceptions,
            )
        logger.info(f"finished inserting {len(_documents)} documents in '{self.name}'")
        return CollectionInsertManyResult(
            raw_results=[response.raw_response for response in outcome.succeeded],
            inserted_ids=inserted_ids,
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
    ) -> AsyncCollectionFindCursor[DOC, DOC]:
        """
        Find documents in the collection matching a filter, returning an
        async cursor (to be consumed with `async for`). No request is made
        by this method.
        """

        _request_timeout_ms, _rt_label = self._request_timeout(
            request_timeout_ms if request_timeout_ms is not None else timeout_ms
        )
        return AsyncCollectionFindCursor(
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

    def find_and_rerank(
        self,
        filter: FilterType | None = None,
        *,
        sort: HybridSortType,
        projection: ProjectionType | None = None,
        limit: int | None = None,
        hybrid_limits: int | dict[str, int] | None = None,
        include_scores: bool | None = None,
        include_sort_vector: bool | None = None,
        rerank_on: str | None = None,
        rerank_query: str | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> AsyncCollectionFindAndRerankCursor[DOC, RerankedResult[DOC]]:
        """
        Find relevant documents with a hybrid search and reranking, returning
        an async cursor (to be consumed with `async for`). The parameters
        are as for the sync `Collection.find_and_rerank`. No request is made
        by this method.
        """

        _request_timeout_ms, _rt_label = self._request_timeout(
            request_timeout_ms if request_timeout_ms is not None else timeout_ms
        )
        return AsyncCollectionFindAndRerankCursor(
            data_source=self,
            request_timeout_ms=_request_timeout_ms,
            overall_timeout_ms=None,
            request_timeout_label=_rt_label,
            filter=filter,
            projection=projection,
            sort=sort,
            limit=limit,
            hybrid_limits=hybrid_limits,
            include_scores=include_scores,
            include_sort_vector=include_sort_vector,
            rerank_on=rerank_on,
            rerank_query=rerank_query,
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
    ) -> FindPage[DOC]:
        timeout_context = self._single_request_timeout(
            method_timeout_ms=general_method_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        f_command = _find_page_command(
            filter=filter,
            projection=projection,
            sort=sort,
            skip=skip,
            limit=limit,
            include_similarity=include_similarity,
            include_sort_vector=include_sort_vector,
            initial_page_state=initial_page_state,
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
    ) -> DOC | None:
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
                text="Faulty response from findOne API command.",
                raw_response=fo_response.raw_response,
            )
        return fo_response.document  # type: ignore[return-value]

    async def find_by_id(
        self,
        document_id: Any,
        *,
        projection: ProjectionType | None = None,
        general_method_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> DOC | None:
        return await self.find_one(
            {"_id": document_id},
            projection=projection,
            general_method_timeout_ms=general_method_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )

    async def exists(
        self,
        filter: FilterType | None = None,
        *,
        general_method_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> bool:
        found = await self.find_one(
            filter,
            projection={"_id": True},
            general_method_timeout_ms=general_method_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        return found is not None

    async def distinct(
        self,
        key: str,
        *,
        filter: FilterType | None = None,
        general_method_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> list[Any]:
        """
        Return a list of the unique values of `key` across the documents
        matching the filter. This is a client-side operation, see
        `Collection.distinct`.
        """

        _general_method_timeout_ms = (
            timeout_ms if timeout_ms is not None else general_method_timeout_ms
        )
        f_cursor = self.find(
            filter,
            projection={_reduce_distinct_key_to_safe(key): True},
            request_timeout_ms=request_timeout_ms,
        )
        if _general_method_timeout_ms is not None:
            f_cursor = f_cursor._copy(
                overall_timeout_ms=_general_method_timeout_ms,
                overall_timeout_label="general_method_timeout_ms",
            )
        collector = DistinctCollector(key, preprocess_collection_payload_value)
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
        cd_command = Command("countDocuments").with_filter(filter)
        logger.info(f"countDocuments on '{self.name}'")
        cd_response = await self._runner.async_execute(
            cd_command, timeout_context=timeout_context
        )
        logger.info(f"finished countDocuments on '{self.name}'")
        return evaluate_count(
            cd_response,
            upper_bound=upper_bound,
            exception_class=TooManyDocumentsToCountException,
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

    async def find_one_and_replace(
        self,
        filter: FilterType,
        replacement: DOC,
        *,
        projection: ProjectionType | None = None,
        sort: SortType | None = None,
        upsert: bool = False,
        return_document: str = ReturnDocument.BEFORE,
        general_method_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> DOC | None:
        timeout_context = self._single_request_timeout(
            method_timeout_ms=general_method_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        fo_command = _find_one_and_command(
            "findOneAndReplace",
            filter=filter,
            projection=projection,
            sort=sort,
            upsert=upsert,
            return_document=return_document,
        ).with_replacement(replacement)  # type: ignore[arg-type]
        logger.info(f"findOneAndReplace on '{self.name}'")
        fo_response = await self._runner.async_execute(
            fo_command, timeout_context=timeout_context
        )
        logger.info(f"finished findOneAndReplace on '{self.name}'")
        return _document_from_response(fo_response, "findOneAndReplace")  # type: ignore[return-value]

    async def replace_one(
        self,
        filter: FilterType,
        replacement: DOC,
        *,
        sort: SortType | None = None,
        upsert: bool = False,
        general_method_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> CollectionUpdateResult:
        timeout_context = self._single_request_timeout(
            method_timeout_ms=general_method_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        ro_command = replace_one_command(
            filter,
            replacement,  # type: ignore[arg-type]
            upsert=upsert,
            sort=sort,
        )
        logger.info(f"findOneAndReplace on '{self.name}'")
        ro_response = await self._runner.async_execute(
            ro_command, timeout_context=timeout_context
        )
        logger.info(f"finished findOneAndReplace on '{self.name}'")
        _document_from_response(ro_response, "findOneAndReplace")
        return _prepare_update_result([ro_response])

    async def find_one_and_update(
        self,
        filter: FilterType,
        update: dict[str, Any],
        *,
        projection: ProjectionType | None = None,
        sort: SortType | None = None,
        upsert: bool = False,
        return_document: str = ReturnDocument.BEFORE,
        general_method_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> DOC | None:
        timeout_context = self._single_request_timeout(
            method_timeout_ms=general_method_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        fo_command = _find_one_and_command(
            "findOneAndUpdate",
            filter=filter,
            projection=projection,
            sort=sort,
            upsert=upsert,
            return_document=return_document,
        ).with_update(update)
        logger.info(f"findOneAndUpdate on '{self.name}'")
        fo_response = await self._runner.async_execute(
            fo_command, timeout_context=timeout_context
        )
        logger.info(f"finished findOneAndUpdate on '{self.name}'")
        return _document_from_response(fo_response, "findOneAndUpdate")  # type: ignore[return-value]

    async def update_one(
        self,
        filter: FilterType,
        update: dict[str, Any],
        *,
        sort: SortType | None = None,
        upsert: bool = False,
        general_method_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> CollectionUpdateResult:
        timeout_context = self._single_request_timeout(
            method_timeout_ms=general_method_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        uo_command = update_one_command(filter, update, upsert=upsert, sort=sort)
        logger.info(f"updateOne on '{self.name}'")
        uo_response = await self._runner.async_execute(
            uo_command, timeout_context=timeout_context
        )
        logger.info(f"finished updateOne on '{self.name}'")
        if "matchedCount" not in uo_response.status:
            raise UnexpectedDataAPIResponseException(
                text="Faulty response from updateOne API command.",
                raw_response=uo_response.raw_response,
            )
        return _prepare_update_result([uo_response])

    async def update_many(
        self,
        filter: FilterType,
        update: dict[str, Any],
        *,
        upsert: bool = False,
        general_method_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> CollectionUpdateResult:
        """
        Apply an update to all documents matching a filter, following the
        server continuation. See `Collection.update_many`.
        """

        next_timeout = self._multi_request_timeouts(
            general_method_timeout_ms=general_method_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        um_responses: list[DataAPIResponse] = []

        async def _execute(command: Command) -> DataAPIResponse:
            logger.info(f"updateMany on '{self.name}'")
            um_response = await self._runner.async_execute(
                command, timeout_context=next_timeout()
            )
            logger.info(f"finished updateMany on '{self.name}'")
            return um_response

        logger.info(f"starting update_many on '{self.name}'")
        try:
            async for um_response in async_paginate(
                update_many_command(filter, update, upsert=upsert), _execute
            ):
                um_responses.append(um_response)
        except DataAPIException as exc:
            raise CollectionUpdateManyException(
                partial_result=_prepare_update_result(um_responses),
                cause=exc,
            ) from exc
        logger.info(f"finished update_many on '{self.name}'")
        return _prepare_update_result(um_responses)

    async def find_one_and_delete(
        self,
        filter: FilterType,
        *,
        projection: ProjectionType | None = None,
        sort: SortType | None = None,
        general_method_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> DOC | None:
        timeout_context = self._single_request_timeout(
            method_timeout_ms=general_method_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        fo_command = _find_one_and_command(
            "findOneAndDelete",
            filter=filter,
            projection=projection,
            sort=sort,
        )
        logger.info(f"findOneAndDelete on '{self.name}'")
        fo_response = await self._runner.async_execute(
            fo_command, timeout_context=timeout_context
        )
        logger.info(f"finished findOneAndDelete on '{self.name}'")
        if "document" not in fo_response.data:
            if fo_response.status.get("deletedCount") == 0:
                return None
            raise UnexpectedDataAPIResponseException(
                text="Faulty response from findOneAndDelete API command.",
                raw_response=fo_response.raw_response,
            )
        return fo_response.document  # type: ignore[return-value]

    async def delete_one(
        self,
        filter: FilterType,
        *,
        sort: SortType | None = None,
        general_method_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> CollectionDeleteResult:
        timeout_context = self._single_request_timeout(
            method_timeout_ms=general_method_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        logger.info(f"deleteOne on '{self.name}'")
        do_response = await self._runner.async_execute(
            delete_one_command(filter, sort=sort), timeout_context=timeout_context
        )
        logger.info(f"finished deleteOne on '{self.name}'")
        return CollectionDeleteResult(
            raw_results=[do_response.raw_response],
            deleted_count=_deleted_count_from_response(do_response, "deleteOne"),
        )

    async def delete_many(
        self,
        filter: FilterType,
        *,
        general_method_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> CollectionDeleteResult:
        """
        Delete all documents matching a filter, following the server
        continuation. See `Collection.delete_many`.
        """

        next_timeout = self._multi_request_timeouts(
            general_method_timeout_ms=general_method_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        dm_responses: list[DataAPIResponse] = []
        deleted_count = 0

        async def _execute(command: Command) -> DataAPIResponse:
            logger.info(f"deleteMany on '{self.name}'")
            dm_response = await self._runner.async_execute(
                command, timeout_context=next_timeout()
            )
            logger.info(f"finished deleteMany on '{self.name}'")
            return dm_response

        logger.info(f"starting delete_many on '{self.name}'")
        try:
            async for dm_response in async_paginate(
                delete_many_command(filter), _execute
            ):
                this_dc = _deleted_count_from_response(dm_response, "deleteMany")
                dm_responses.append(dm_response)
                deleted_count += this_dc
        except DataAPIException as exc:
            raise CollectionDeleteManyException(
                partial_result=CollectionDeleteResult(
                    raw_results=[response.raw_response for response in dm_responses],
                    deleted_count=deleted_count,
                ),
                cause=exc,
            ) from exc
        logger.info(f"finished delete_many on '{self.name}'")
        return CollectionDeleteResult(
            raw_results=[response.raw_response for response in dm_responses],
            deleted_count=deleted_count,
        )

    async def delete_all(
        self,
        *,
        general_method_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> CollectionDeleteResult:
        logger.info(f"delete_all on '{self.name}'")
        result = await self.delete_many(
            {},
            general_method_timeout_ms=general_method_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        logger.info(f"finished delete_all on '{self.name}'")
        return result

    async def bulk_write(
        self,
        commands: Iterable[Command],
        *,
        ordered: bool = True,
        concurrency: int | None = None,
        general_method_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> CollectionBulkWriteResult:
        """
        Run a sequence of write commands on the collection, as concurrent
        tasks if unordered. See `Collection.bulk_write`.
        """

        _commands = list(commands)
        _concurrency = (
            concurrency if concurrency is not None else DEFAULT_BULK_WRITE_CONCURRENCY
        )
        check_batch_parameters(ordered=ordered, concurrency=_concurrency)
        next_timeout = self._multi_request_timeouts(
            general_method_timeout_ms=general_method_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )

        async def _command_runner(command: Command) -> DataAPIResponse:
            logger.info(f"{command.name} (bulk_write) on '{self.name}'")
            bw_response = await self._runner.async_execute(
                command, timeout_context=next_timeout()
            )
            logger.info(f"finished {command.name} (bulk_write) on '{self.name}'")
            return bw_response

        logger.info(f"starting bulk_write of {len(_commands)} commands on '{self.name}'")
        outcome = await async_run_batch(
            _commands,
            _command_runner,
            ordered=ordered,
            concurrency=_concurrency,
        )
        result = CollectionBulkWriteResult(
            responses=[
                response.raw_response if response is not None else None
                for response in outcome.results
            ]
        )
        if outcome.exceptions:
            raise CollectionBulkWriteException(
                partial_result=result,
                exceptions=outcome.exceptions,
            )
        logger.info(f"finished bulk_write on '{self.name}'")
        return result

    async def drop(
        self,
        *,
        collection_admin_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> None:
        logger.info(f"dropping collection '{self.name}' (self)")
        await self.database.drop_collection(
            self.name,
            keyspace=self.keyspace,
            collection_admin_timeout_ms=collection_admin_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        logger.info(f"finished dropping collection '{self.name}' (self)")

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
