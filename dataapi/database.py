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
from typing import TYPE_CHECKING, Any

import deprecation

from dataapi.base import _compose_base_path
from dataapi.collection import AsyncCollection, Collection
from dataapi.commands import Command
from dataapi.constants import DefaultDocumentType, DefaultRowType
from dataapi.exceptions import (
    UnexpectedDataAPIResponseException,
    _select_singlereq_timeout,
    _TimeoutContext,
)
from dataapi.info import CollectionDefinition, CollectionDescriptor, TableDescriptor
from dataapi.runner import CommandRunner, DataAPIResponse
from dataapi.settings.defaults import DEFAULT_DATA_API_AUTH_HEADER, DEFAULT_KEYSPACE_NAME
from dataapi.table import AsyncTable, Table
from dataapi.utils.api_commander import APICommander
from dataapi.utils.api_options import APIOptions, FullAPIOptions
from dataapi.utils.meta import (
    KEYSPACE_DEPRECATED_IN,
    KEYSPACE_REMOVED_IN,
    NAMESPACE_DEPRECATION_NOTICE,
)
from dataapi.utils.unset import _UNSET, UnsetType

if TYPE_CHECKING:
    from dataapi.admin import DataAPIDatabaseAdmin
    from dataapi.authentication import EmbeddingHeadersProvider, TokenProvider


logger = logging.getLogger(__name__)


def _create_collection_command(
    name: str,
    *,
    definition: CollectionDefinition | dict[str, Any] | None,
    default_id_type: str | None,
    indexing: dict[str, Any] | None,
    dimension: int | None,
    metric: str | None,
) -> Command:
    cc_definition = CollectionDefinition.coerce(definition).with_settings(
        dimension=dimension,
        metric=metric,
        indexing=indexing,
        default_id_type=default_id_type,
    )
    return (
        Command("createCollection")
        .with_field("name", name)
        .with_options(cc_definition.as_dict())
    )


def _create_table_command(
    name: str,
    *,
    definition: dict[str, Any],
    if_not_exists: bool | None,
) -> Command:
    if "columns" not in definition or "primaryKey" not in definition:
        raise ValueError(
            "A table definition requires both 'columns' and 'primaryKey'."
        )
    return (
        Command("createTable")
        .with_field("name", name)
        .with_field("definition", definition)
        .with_options({"ifNotExists": if_not_exists})
    )


def _drop_command(command_name: str, name: str, if_exists: bool | None) -> Command:
    return (
        Command(command_name)
        .with_field("name", name)
        .with_options({"ifExists": if_exists})
    )


def _ensure_ok(response: DataAPIResponse, command_name: str) -> None:
    if response.status.get("ok") != 1:
        raise UnexpectedDataAPIResponseException(
            text=f"Faulty response from {command_name} API command.",
            raw_response=response.raw_response,
        )


def _status_list(response: DataAPIResponse, key: str, command_name: str) -> list[Any]:
    if key not in response.status:
        raise UnexpectedDataAPIResponseException(
            text=f"Faulty response from {command_name} API command.",
            raw_response=response.raw_response,
        )
    return list(response.status[key])


class _DatabaseBase:
    """
    The state shared by Database and AsyncDatabase: an endpoint, a working
    keyspace and the API options, plus a command runner bound to the
    keyspace URL.
    """

    def __init__(
        self,
        *,
        api_endpoint: str,
        keyspace: str | None,
        api_options: FullAPIOptions,
    ) -> None:
        self.api_options = api_options
        self.api_endpoint = api_endpoint.strip("/")
        self._using_keyspace = keyspace if keyspace is not None else DEFAULT_KEYSPACE_NAME
        self._commander_headers = {
            DEFAULT_DATA_API_AUTH_HEADER: self.api_options.token.get_token(),
            **self.api_options.database_additional_headers,
        }
        self._api_commander = self._get_api_commander(keyspace=self._using_keyspace)

    def __repr__(self) -> str:
        parts = [
            f'api_endpoint="{self.api_endpoint}"',
            f'keyspace="{self._using_keyspace}"',
            f"api_options={self.api_options}",
        ]
        return f"{self.__class__.__name__}({', '.join(parts)})"

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, self.__class__):
            return all(
                [
                    self.api_endpoint == other.api_endpoint,
                    self.keyspace == other.keyspace,
                    self.api_options == other.api_options,
                ]
            )
        return False

    def _get_api_commander(
        self, *, keyspace: str | None, resource_name: str | None = None
    ) -> APICommander:
        """
        Instantiate a new APICommander for a keyspace (the database as a
        whole if None) or for a collection/table therein.
        """
        base_path = _compose_base_path(
            self.api_options.data_api_url_options.api_path,
            self.api_options.data_api_url_options.api_version,
            keyspace,
            resource_name,
        )
        return APICommander(
            api_endpoint=self.api_endpoint,
            path=base_path,
            headers=self._commander_headers,
            callers=self.api_options.callers,
            redacted_header_names=self.api_options.redacted_header_names,
        )

    def _get_runner(self, keyspace: str | None) -> CommandRunner:
        if keyspace is None or keyspace == self._using_keyspace:
            return CommandRunner(self._api_commander)
        return CommandRunner(self._get_api_commander(keyspace=keyspace))

    def _timeout_context(
        self,
        *,
        method_timeout_label: str,
        method_timeout_ms: int | None,
        request_timeout_ms: int | None,
        timeout_ms: int | None,
    ) -> _TimeoutContext:
        _timeout_ms, _label = _select_singlereq_timeout(
            timeout_options=self.api_options.timeout_options,
            method_timeout_label=method_timeout_label,
            method_timeout_ms=method_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        return _TimeoutContext(request_ms=_timeout_ms, label=_label)

    def _command_commander(
        self,
        keyspace: str | None | UnsetType,
        collection_or_table_name: str | None,
    ) -> APICommander:
        _keyspace: str | None
        if keyspace is None:
            if collection_or_table_name is not None:
                raise ValueError(
                    "Cannot pass collection_or_table_name to database "
                    "`command` on a no-keyspace command"
                )
            _keyspace = None
        elif isinstance(keyspace, UnsetType):
            _keyspace = self.keyspace
        else:
            _keyspace = keyspace
        return self._get_api_commander(
            keyspace=_keyspace, resource_name=collection_or_table_name
        )

    def _spawn_api_options(
        self,
        *,
        embedding_api_key: str | EmbeddingHeadersProvider | UnsetType,
        spawn_api_options: APIOptions | UnsetType,
    ) -> FullAPIOptions:
        arg_api_options = APIOptions(embedding_api_key=embedding_api_key)
        return self.api_options.with_override(spawn_api_options).with_override(
            arg_api_options
        )

    def use_keyspace(self, keyspace: str) -> None:
        """
        Switch to a new working keyspace for this database.
        This method changes (mutates) the instance.

        Note that this method does not create the keyspace, which should exist
        already (created for instance with a `create_keyspace` call of the
        database admin).

        Example:
            >>> my_db.use_keyspace("an_empty_keyspace")
            >>> my_db.list_collection_names()
            []
        """
        logger.info(f"switching to keyspace '{keyspace}'")
        self._using_keyspace = keyspace
        self._api_commander = self._get_api_commander(keyspace=keyspace)

    @property
    def keyspace(self) -> str:
        """
        The keyspace this database uses as target for all commands when
        no method-call-specific keyspace is specified.

        Example:
            >>> my_db.keyspace
            'the_keyspace'
        """
        return self._using_keyspace

    @property
    @deprecation.deprecated(  # type: ignore[misc]
        deprecated_in=KEYSPACE_DEPRECATED_IN,
        removed_in=KEYSPACE_REMOVED_IN,
        details=NAMESPACE_DEPRECATION_NOTICE,
    )
    def namespace(self) -> str:
        """A deprecated alias for the `keyspace` property."""
        return self.keyspace


class Database(_DatabaseBase):
    """
    A Data API database. This is the object for doing database-level
    DML, such as creating/deleting collections and tables, and for obtaining
    Collection and Table objects themselves. This class has a synchronous
    interface.

    This class is not meant for direct instantiation by the user, rather
    it is obtained by invoking methods such as `get_database` of DataAPIClient.

    A Database is always set with a "working keyspace" on which all
    data operations are done (unless otherwise specified).

    Args:
        api_endpoint: the full "API Endpoint" string used to reach the Data API.
            Example: "http://localhost:8181".
        keyspace: the keyspace all method calls will target, unless one is
            explicitly specified in the call. Defaults to "default_keyspace".
        api_options: a complete specification of the API Options for this instance.

    Example:
        >>> from dataapi import DataAPIClient
        >>> my_client = DataAPIClient(environment="other")
        >>> my_db = my_client.get_database(
        ...     "http://localhost:8181",
        ...     token="Cassandra:...",
        ... )

    Note:
        creating an instance of Database does not trigger actual creation
        of the database itself, which should exist beforehand.
    """

    def __getitem__(self, collection_name: str) -> Collection[DefaultDocumentType]:
        return self.get_collection(collection_name)

    def _copy(
        self,
        *,
        keyspace: str | None = None,
        token: str | TokenProvider | UnsetType = _UNSET,
        api_options: APIOptions | UnsetType = _UNSET,
    ) -> Database:
        arg_api_options = APIOptions(token=token)
        final_api_options = self.api_options.with_override(api_options).with_override(
            arg_api_options
        )
        return Database(
            api_endpoint=self.api_endpoint,
            keyspace=keyspace or self.keyspace,
            api_options=final_api_options,
        )

    def with_options(
        self,
        *,
        keyspace: str | None = None,
        token: str | TokenProvider | UnsetType = _UNSET,
        api_options: APIOptions | UnsetType = _UNSET,
    ) -> Database:
        """
        Create a clone of this database with some changed attributes.

        Args:
            keyspace: the working keyspace of the clone.
            token: an access token to the database, either a literal string
                or a `dataapi.authentication.TokenProvider`.
            api_options: any additional options to set for the clone, in the
                form of an APIOptions instance. Named parameters take
                precedence over the same setting in here.

        Returns:
            a new `Database` instance.

        Example:
            >>> my_db_2 = my_db.with_options(keyspace="the_other_keyspace")
        """
        return self._copy(
            keyspace=keyspace,
            token=token,
            api_options=api_options,
        )

    def to_async(
        self,
        *,
        keyspace: str | None = None,
        token: str | TokenProvider | UnsetType = _UNSET,
        api_options: APIOptions | UnsetType = _UNSET,
    ) -> AsyncDatabase:
        """
        Create an AsyncDatabase from this one. Save for the arguments
        explicitly provided as overrides, everything else is kept identical.

        Example:
            >>> async_database = my_db.to_async()
            >>> asyncio.run(async_database.list_collection_names())
        """
        arg_api_options = APIOptions(token=token)
        final_api_options = self.api_options.with_override(api_options).with_override(
            arg_api_options
        )
        return AsyncDatabase(
            api_endpoint=self.api_endpoint,
            keyspace=keyspace or self.keyspace,
            api_options=final_api_options,
        )

    def get_collection(
        self,
        name: str,
        *,
        keyspace: str | None = None,
        embedding_api_key: str | EmbeddingHeadersProvider | UnsetType = _UNSET,
        spawn_api_options: APIOptions | UnsetType = _UNSET,
    ) -> Collection[DefaultDocumentType]:
        """
        Spawn a Collection object instance representing a collection
        on this database. No request is made: the collection should exist.

        Args:
            name: the name of the collection.
            keyspace: the keyspace of the collection, if different from the
                working keyspace of the database.
            embedding_api_key: an API key for the embedding service of the
                collection, if any.
            spawn_api_options: any API options to override for the collection.

        Example:
            >>> my_col = my_db.get_collection("my_collection")
            >>> my_col.count_documents({}, upper_bound=100)
            41
        """
        return Collection(
            database=self,
            name=name,
            keyspace=keyspace,
            api_options=self._spawn_api_options(
                embedding_api_key=embedding_api_key,
                spawn_api_options=spawn_api_options,
            ),
        )

    def create_collection(
        self,
        name: str,
        *,
        definition: CollectionDefinition | dict[str, Any] | None = None,
        default_id_type: str | None = None,
        indexing: dict[str, Any] | None = None,
        dimension: int | None = None,
        metric: str | None = None,
        keyspace: str | None = None,
        collection_admin_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
        embedding_api_key: str | EmbeddingHeadersProvider | UnsetType = _UNSET,
        spawn_api_options: APIOptions | UnsetType = _UNSET,
    ) -> Collection[DefaultDocumentType]:
        """
        Creates a collection on the database and return the Collection
        instance that represents it.

        This is a blocking operation: the method returns when the collection
        is ready to be used. Creating a collection that exists already with
        the same settings is a no-op.

        Args:
            name: the name of the collection.
            definition: the collection settings, as a CollectionDefinition or
                as a plain dictionary in the API format.
            default_id_type: the kind of `_id` the server generates for
                documents inserted without one, a value of `DefaultIdType`.
            indexing: the indexing policy, `{"allow": [...]}` or `{"deny": [...]}`.
            dimension: the dimension of vectors, for a vector collection.
            metric: the similarity metric, a value of `VectorMetric`.
            keyspace: the keyspace where the collection is created.
            collection_admin_timeout_ms: a timeout, in milliseconds, for the
                request. If not provided, this object's defaults apply.
            request_timeout_ms: an alias for `collection_admin_timeout_ms`.
            timeout_ms: an alias for `collection_admin_timeout_ms`.
            embedding_api_key: passed to the returned Collection.
            spawn_api_options: passed to the returned Collection.

        Returns:
            a Collection instance.

        Raises:
            ValueError: for an invalid indexing policy (no request is made).

        Example:
            >>> new_col = my_db.create_collection(
            ...     "my_v_col", dimension=3, metric=VectorMetric.COSINE
            ... )
        """

        cc_command = _create_collection_command(
            name,
            definition=definition,
            default_id_type=default_id_type,
            indexing=indexing,
            dimension=dimension,
            metric=metric,
        )
        logger.info(f"createCollection('{name}')")
        cc_response = self._get_runner(keyspace).execute(
            cc_command,
            timeout_context=self._timeout_context(
                method_timeout_label="collection_admin_timeout_ms",
                method_timeout_ms=collection_admin_timeout_ms,
                request_timeout_ms=request_timeout_ms,
                timeout_ms=timeout_ms,
            ),
        )
        _ensure_ok(cc_response, "createCollection")
        logger.info(f"finished createCollection('{name}')")
        return self.get_collection(
            name,
            keyspace=keyspace,
            embedding_api_key=embedding_api_key,
            spawn_api_options=spawn_api_options,
        )

    def drop_collection(
        self,
        name: str,
        *,
        keyspace: str | None = None,
        collection_admin_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> None:
        """
        Drop a collection from the database, along with all documents therein.

        Args:
            name: the name of the collection to drop.
            keyspace: the keyspace where the collection resides.
            collection_admin_timeout_ms: a timeout, in milliseconds, for the request.
            request_timeout_ms: an alias for `collection_admin_timeout_ms`.
            timeout_ms: an alias for `collection_admin_timeout_ms`.

        Example:
            >>> my_db.drop_collection("my_v_col")
        """

        logger.info(f"deleteCollection('{name}')")
        dc_response = self._get_runner(keyspace).execute(
            Command("deleteCollection").with_field("name", name),
            timeout_context=self._timeout_context(
                method_timeout_label="collection_admin_timeout_ms",
                method_timeout_ms=collection_admin_timeout_ms,
                request_timeout_ms=request_timeout_ms,
                timeout_ms=timeout_ms,
            ),
        )
        _ensure_ok(dc_response, "deleteCollection")
        logger.info(f"finished deleteCollection('{name}')")

    def list_collections(
        self,
        *,
        keyspace: str | None = None,
        collection_admin_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> list[CollectionDescriptor]:
        """
        List all collections in a given keyspace for this database.

        Returns:
            a list of CollectionDescriptor instances, one for each collection.

        Example:
            >>> my_db.list_collections()
            [CollectionDescriptor(name='my_v_col', definition=CollectionDefinition())]
        """

        logger.info("findCollections")
        fc_response = self._get_runner(keyspace).execute(
            Command("findCollections").with_options({"explain": True}),
            timeout_context=self._timeout_context(
                method_timeout_label="collection_admin_timeout_ms",
                method_timeout_ms=collection_admin_timeout_ms,
                request_timeout_ms=request_timeout_ms,
                timeout_ms=timeout_ms,
            ),
        )
        logger.info("finished findCollections")
        return [
            CollectionDescriptor._from_dict(col_dict)
            for col_dict in _status_list(fc_response, "collections", "findCollections")
        ]

    def list_collection_names(
        self,
        *,
        keyspace: str | None = None,
        collection_admin_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> list[str]:
        """
        List the names of all collections in a given keyspace of this database.

        Example:
            >>> my_db.list_collection_names()
            ['a_collection', 'another_col']
        """

        logger.info("findCollections")
        fc_response = self._get_runner(keyspace).execute(
            Command("findCollections"),
            timeout_context=self._timeout_context(
                method_timeout_label="collection_admin_timeout_ms",
                method_timeout_ms=collection_admin_timeout_ms,
                request_timeout_ms=request_timeout_ms,
                timeout_ms=timeout_ms,
            ),
        )
        logger.info("finished findCollections")
        return _status_list(fc_response, "collections", "findCollections")

    def get_table(
        self,
        name: str,
        *,
        keyspace: str | None = None,
        embedding_api_key: str | EmbeddingHeadersProvider | UnsetType = _UNSET,
        spawn_api_options: APIOptions | UnsetType = _UNSET,
    ) -> Table[DefaultRowType]:
        """
        Spawn a Table object instance representing a table on this database.
        No request is made: the table should exist.

        Example:
            >>> my_table = my_db.get_table("games")
        """
        return Table(
            database=self,
            name=name,
            keyspace=keyspace,
            api_options=self._spawn_api_options(
                embedding_api_key=embedding_api_key,
                spawn_api_options=spawn_api_options,
            ),
        )

    def create_table(
        self,
        name: str,
        *,
        definition: dict[str, Any],
        keyspace: str | None = None,
        if_not_exists: bool | None = None,
        table_admin_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
        embedding_api_key: str | EmbeddingHeadersProvider | UnsetType = _UNSET,
        spawn_api_options: APIOptions | UnsetType = _UNSET,
    ) -> Table[DefaultRowType]:
        """
        Creates a table on the database and return the Table instance that
        represents it.

        Args:
            name: the name of the table.
            definition: the table definition in the API format, with the
                `columns` and `primaryKey` entries, e.g.
                `{"columns": {"id": {"type": "text"}}, "primaryKey": "id"}`.
            keyspace: the keyspace where the table is created.
            if_not_exists: if True, creating an existing table is a no-op.
                Otherwise it is an error.
            table_admin_timeout_ms: a timeout, in milliseconds, for the request.
            request_timeout_ms: an alias for `table_admin_timeout_ms`.
            timeout_ms: an alias for `table_admin_timeout_ms`.
            embedding_api_key: passed to the returned Table.
            spawn_api_options: passed to the returned Table.

        Returns:
            a Table instance.

        Raises:
            ValueError: if the definition lacks columns or primary key.
        """

        ct_command = _create_table_command(
            name, definition=definition, if_not_exists=if_not_exists
        )
        logger.info(f"createTable('{name}')")
        ct_response = self._get_runner(keyspace).execute(
            ct_command,
            timeout_context=self._timeout_context(
                method_timeout_label="table_admin_timeout_ms",
                method_timeout_ms=table_admin_timeout_ms,
                request_timeout_ms=request_timeout_ms,
                timeout_ms=timeout_ms,
            ),
        )
        _ensure_ok(ct_response, "createTable")
        logger.info(f"finished createTable('{name}')")
        return self.get_table(
            name,
            keyspace=keyspace,
            embedding_api_key=embedding_api_key,
            spawn_api_options=spawn_api_options,
        )

    def drop_table_index(
        self,
        name: str,
        *,
        keyspace: str | None = None,
        if_exists: bool | None = None,
        table_admin_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> None:
        """
        Drops (deletes) an index (of any kind) from the table it is associated to.

        Note:
            Although associated to a table, index names are unique across a
            keyspace. For this reason, no table name is required in this call.
        """

        logger.info(f"dropIndex('{name}')")
        di_response = self._get_runner(keyspace).execute(
            _drop_command("dropIndex", name, if_exists),
            timeout_context=self._timeout_context(
                method_timeout_label="table_admin_timeout_ms",
                method_timeout_ms=table_admin_timeout_ms,
                request_timeout_ms=request_timeout_ms,
                timeout_ms=timeout_ms,
            ),
        )
        _ensure_ok(di_response, "dropIndex")
        logger.info(f"finished dropIndex('{name}')")

    def drop_table(
        self,
        name: str,
        *,
        keyspace: str | None = None,
        if_exists: bool | None = None,
        table_admin_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> None:
        """
        Drop a table from the database, along with all rows therein and
        related indexes.

        Args:
            name: the name of the table to drop.
            keyspace: the keyspace where the table resides.
            if_exists: if True, dropping a non-existing table is a no-op.
        """

        logger.info(f"dropTable('{name}')")
        dt_response = self._get_runner(keyspace).execute(
            _drop_command("dropTable", name, if_exists),
            timeout_context=self._timeout_context(
                method_timeout_label="table_admin_timeout_ms",
                method_timeout_ms=table_admin_timeout_ms,
                request_timeout_ms=request_timeout_ms,
                timeout_ms=timeout_ms,
            ),
        )
        _ensure_ok(dt_response, "dropTable")
        logger.info(f"finished dropTable('{name}')")

    def list_tables(
        self,
        *,
        keyspace: str | None = None,
        table_admin_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> list[TableDescriptor]:
        """
        List all tables in a given keyspace for this database.

        Returns:
            a list of TableDescriptor instances, one for each table.
        """

        logger.info("listTables")
        lt_response = self._get_runner(keyspace).execute(
            Command("listTables").with_options({"explain": True}),
            timeout_context=self._timeout_context(
                method_timeout_label="table_admin_timeout_ms",
                method_timeout_ms=table_admin_timeout_ms,
                request_timeout_ms=request_timeout_ms,
                timeout_ms=timeout_ms,
            ),
        )
        logger.info("finished listTables")
        return [
            TableDescriptor.coerce(tab_dict)
            for tab_dict in _status_list(lt_response, "tables", "listTables")
        ]

    def list_table_names(
        self,
        *,
        keyspace: str | None = None,
        table_admin_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> list[str]:
        """List the names of all tables in a given keyspace of this database."""

        logger.info("listTables")
        lt_response = self._get_runner(keyspace).execute(
            Command("listTables"),
            timeout_context=self._timeout_context(
                method_timeout_label="table_admin_timeout_ms",
                method_timeout_ms=table_admin_timeout_ms,
                request_timeout_ms=request_timeout_ms,
                timeout_ms=timeout_ms,
            ),
        )
        logger.info("finished listTables")
        return _status_list(lt_response, "tables", "listTables")

    def command(
        self,
        body: Command | dict[str, Any],
        *,
        keyspace: str | None | UnsetType = _UNSET,
        collection_or_table_name: str | None = None,
        raise_api_errors: bool = True,
        general_method_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> dict[str, Any]:
        """
        Send a POST request to the Data API for this database with
        an arbitrary, caller-provided payload.

        Args:
            body: a Command, or a JSON-serializable dictionary with the payload.
            keyspace: the keyspace to use. Pass an explicit None to target the
                database as a whole (no keyspace in the URL). If unspecified,
                the working keyspace is used.
            collection_or_table_name: if provided, the name is appended to the
                URL, targeting a collection or a table.
            raise_api_errors: if True, responses with a nonempty 'errors' field
                raise a DataAPIResponseException.

        Returns:
            a dictionary with the response of the HTTP request.

        Example:
            >>> my_db.command({"findCollections": {}})
            {'status': {'collections': ['my_coll']}}
        """

        command_commander = self._command_commander(keyspace, collection_or_table_name)
        _payload = body.to_payload() if isinstance(body, Command) else body
        _cmd_desc = ",".join(sorted(_payload.keys()))
        logger.info(f"command={_cmd_desc} on {self.__class__.__name__}")
        req_response = command_commander.request(
            payload=_payload,
            raise_api_errors=raise_api_errors,
            timeout_context=self._timeout_context(
                method_timeout_label="general_method_timeout_ms",
                method_timeout_ms=general_method_timeout_ms,
                request_timeout_ms=request_timeout_ms,
                timeout_ms=timeout_ms,
            ),
        )
        logger.info(f"finished command={_cmd_desc} on {self.__class__.__name__}")
        return req_response

    def get_database_admin(
        self,
        *,
        token: str | TokenProvider | UnsetType = _UNSET,
        spawn_api_options: APIOptions | UnsetType = _UNSET,
    ) -> DataAPIDatabaseAdmin:
        """
        Return a DataAPIDatabaseAdmin object corresponding to this database,
        for use in admin tasks such as managing keyspaces.

        Args:
            token: an access token with enough permission on the database.
                If omitted, the token of this Database is used.
            spawn_api_options: any API options to override for the admin.

        Example:
            >>> my_db.get_database_admin().list_keyspaces()
            ['default_keyspace', 'new_keyspace']
        """

        # lazy importing here to avoid circular dependency
        from dataapi.admin import DataAPIDatabaseAdmin

        arg_api_options = APIOptions(token=token)
        api_options = self.api_options.with_override(spawn_api_options).with_override(
            arg_api_options
        )
        return DataAPIDatabaseAdmin(
            api_endpoint=self.api_endpoint,
            api_options=api_options,
            spawner_database=self,
        )


class AsyncDatabase(_DatabaseBase):
    """
    A Data API database. This is the object for doing database-level
    DML, such as creating/deleting collections and tables, and for obtaining
    AsyncCollection and AsyncTable objects. This class has an asynchronous
    interface: its methods mirror those of Database and must be awaited
    (except for the `get_*` ones, which make no request).

    Example:
        >>> my_async_db = my_client.get_async_database("http://localhost:8181")
        >>> await my_async_db.list_collection_names()
        ['a_collection']
    """

    def __getitem__(self, collection_name: str) -> AsyncCollection[DefaultDocumentType]:
        return self.get_collection(collection_name)

    async def __aenter__(self) -> AsyncDatabase:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self._api_commander.__aexit__(*exc_info)

    def _copy(
        self,
        *,
        keyspace: str | None = None,
        token: str | TokenProvider | UnsetType = _UNSET,
        api_options: APIOptions | UnsetType = _UNSET,
    ) -> AsyncDatabase:
        arg_api_options = APIOptions(token=token)
        final_api_options = self.api_options.with_override(api_options).with_override(
            arg_api_options
        )
        return AsyncDatabase(
            api_endpoint=self.api_endpoint,
            keyspace=keyspace or self.keyspace,
            api_options=final_api_options,
        )

    def with_options(
        self,
        *,
        keyspace: str | None = None,
        token: str | TokenProvider | UnsetType = _UNSET,
        api_options: APIOptions | UnsetType = _UNSET,
    ) -> AsyncDatabase:
        """Create a clone of this database with some changed attributes."""
        return self._copy(
            keyspace=keyspace,
            token=token,
            api_options=api_options,
        )

    def to_sync(
        self,
        *,
        keyspace: str | None = None,
        token: str | TokenProvider | UnsetType = _UNSET,
        api_options: APIOptions | UnsetType = _UNSET,
    ) -> Database:
        """
        Create a Database from this one. Save for the arguments explicitly
        provided as overrides, everything else is kept identical.
        """
        arg_api_options = APIOptions(token=token)
        final_api_options = self.api_options.with_override(api_options).with_override(
            arg_api_options
        )
        return Database(
            api_endpoint=self.api_endpoint,
            keyspace=keyspace or self.keyspace,
            api_options=final_api_options,
        )

    def get_collection(
        self,
        name: str,
        *,
        keyspace: str | None = None,
        embedding_api_key: str | EmbeddingHeadersProvider | UnsetType = _UNSET,
        spawn_api_options: APIOptions | UnsetType = _UNSET,
    ) -> AsyncCollection[DefaultDocumentType]:
        return AsyncCollection(
            database=self,
            name=name,
            keyspace=keyspace,
            api_options=self._spawn_api_options(
                embedding_api_key=embedding_api_key,
                spawn_api_options=spawn_api_options,
            ),
        )

    async def create_collection(
        self,
        name: str,
        *,
        definition: CollectionDefinition | dict[str, Any] | None = None,
        default_id_type: str | None = None,
        indexing: dict[str, Any] | None = None,
        dimension: int | None = None,
        metric: str | None = None,
        keyspace: str | None = None,
        collection_admin_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
        embedding_api_key: str | EmbeddingHeadersProvider | UnsetType = _UNSET,
        spawn_api_options: APIOptions | UnsetType = _UNSET,
    ) -> AsyncCollection[DefaultDocumentType]:
        cc_command = _create_collection_command(
            name,
            definition=definition,
            default_id_type=default_id_type,
            indexing=indexing,
            dimension=dimension,
            metric=metric,
        )
        logger.info(f"createCollection('{name}')")
        cc_response = await self._get_runner(keyspace).async_execute(
            cc_command,
            timeout_context=self._timeout_context(
                method_timeout_label="collection_admin_timeout_ms",
                method_timeout_ms=collection_admin_timeout_ms,
                request_timeout_ms=request_timeout_ms,
                timeout_ms=timeout_ms,
            ),
        )
        _ensure_ok(cc_response, "createCollection")
        logger.info(f"finished createCollection('{name}')")
        return self.get_collection(
            name,
            keyspace=keyspace,
            embedding_api_key=embedding_api_key,
            spawn_api_options=spawn_api_options,
        )

    async def drop_collection(
        self,
        name: str,
        *,
        keyspace: str | None = None,
        collection_admin_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> None:
        logger.info(f"deleteCollection('{name}')")
        dc_response = await self._get_runner(keyspace).async_execute(
            Command("deleteCollection").with_field("name", name),
            timeout_context=self._timeout_context(
                method_timeout_label="collection_admin_timeout_ms",
                method_timeout_ms=collection_admin_timeout_ms,
                request_timeout_ms=request_timeout_ms,
                timeout_ms=timeout_ms,
            ),
        )
        _ensure_ok(dc_response, "deleteCollection")
        logger.info(f"finished deleteCollection('{name}')")

    async def list_collections(
        self,
        *,
        keyspace: str | None = None,
        collection_admin_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> list[CollectionDescriptor]:
        logger.info("findCollections")
        fc_response = await self._get_runner(keyspace).async_execute(
            Command("findCollections").with_options({"explain": True}),
            timeout_context=self._timeout_context(
                method_timeout_label="collection_admin_timeout_ms",
                method_timeout_ms=collection_admin_timeout_ms,
                request_timeout_ms=request_timeout_ms,
                timeout_ms=timeout_ms,
            ),
        )
        logger.info("finished findCollections")
        return [
            CollectionDescriptor._from_dict(col_dict)
            for col_dict in _status_list(fc_response, "collections", "findCollections")
        ]

    async def list_collection_names(
        self,
        *,
        keyspace: str | None = None,
        collection_admin_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> list[str]:
        logger.info("findCollections")
        fc_response = await self._get_runner(keyspace).async_execute(
            Command("findCollections"),
            timeout_context=self._timeout_context(
                method_timeout_label="collection_admin_timeout_ms",
                method_timeout_ms=collection_admin_timeout_ms,
                request_timeout_ms=request_timeout_ms,
                timeout_ms=timeout_ms,
            ),
        )
        logger.info("finished findCollections")
        return _status_list(fc_response, "collections", "findCollections")

    def get_table(
        self,
        name: str,
        *,
        keyspace: str | None = None,
        embedding_api_key: str | EmbeddingHeadersProvider | UnsetType = _UNSET,
        spawn_api_options: APIOptions | UnsetType = _UNSET,
    ) -> AsyncTable[DefaultRowType]:
        return AsyncTable(
            database=self,
            name=name,
            keyspace=keyspace,
            api_options=self._spawn_api_options(
                embedding_api_key=embedding_api_key,
                spawn_api_options=spawn_api_options,
            ),
        )

    async def create_table(
        self,
        name: str,
        *,
        definition: dict[str, Any],
        keyspace: str | None = None,
        if_not_exists: bool | None = None,
        table_admin_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
        embedding_api_key: str | EmbeddingHeadersProvider | UnsetType = _UNSET,
        spawn_api_options: APIOptions | UnsetType = _UNSET,
    ) -> AsyncTable[DefaultRowType]:
        ct_command = _create_table_command(
            name, definition=definition, if_not_exists=if_not_exists
        )
        logger.info(f"createTable('{name}')")
        ct_response = await self._get_runner(keyspace).async_execute(
            ct_command,
            timeout_context=self._timeout_context(
                method_timeout_label="table_admin_timeout_ms",
                method_timeout_ms=table_admin_timeout_ms,
                request_timeout_ms=request_timeout_ms,
                timeout_ms=timeout_ms,
            ),
        )
        _ensure_ok(ct_response, "createTable")
        logger.info(f"finished createTable('{name}')")
        return self.get_table(
            name,
            keyspace=keyspace,
            embedding_api_key=embedding_api_key,
            spawn_api_options=spawn_api_options,
        )

    async def drop_table_index(
        self,
        name: str,
        *,
        keyspace: str | None = None,
        if_exists: bool | None = None,
        table_admin_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> None:
        logger.info(f"dropIndex('{name}')")
        di_response = await self._get_runner(keyspace).async_execute(
            _drop_command("dropIndex", name, if_exists),
            timeout_context=self._timeout_context(
                method_timeout_label="table_admin_timeout_ms",
                method_timeout_ms=table_admin_timeout_ms,
                request_timeout_ms=request_timeout_ms,
                timeout_ms=timeout_ms,
            ),
        )
        _ensure_ok(di_response, "dropIndex")
        logger.info(f"finished dropIndex('{name}')")

    async def drop_table(
        self,
        name: str,
        *,
        keyspace: str | None = None,
        if_exists: bool | None = None,
        table_admin_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> None:
        logger.info(f"dropTable('{name}')")
        dt_response = await self._get_runner(keyspace).async_execute(
            _drop_command("dropTable", name, if_exists),
            timeout_context=self._timeout_context(
                method_timeout_label="table_admin_timeout_ms",
                method_timeout_ms=table_admin_timeout_ms,
                request_timeout_ms=request_timeout_ms,
                timeout_ms=timeout_ms,
            ),
        )
        _ensure_ok(dt_response, "dropTable")
        logger.info(f"finished dropTable('{name}')")

    async def list_tables(
        self,
        *,
        keyspace: str | None = None,
        table_admin_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> list[TableDescriptor]:
        logger.info("listTables")
        lt_response = await self._get_runner(keyspace).async_execute(
            Command("listTables").with_options({"explain": True}),
            timeout_context=self._timeout_context(
                method_timeout_label="table_admin_timeout_ms",
                method_timeout_ms=table_admin_timeout_ms,
                request_timeout_ms=request_timeout_ms,
                timeout_ms=timeout_ms,
            ),
        )
        logger.info("finished listTables")
        return [
            TableDescriptor.coerce(tab_dict)
            for tab_dict in _status_list(lt_response, "tables", "listTables")
        ]

    async def list_table_names(
        self,
        *,
        keyspace: str | None = None,
        table_admin_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> list[str]:
        logger.info("listTables")
        lt_response = await self._get_runner(keyspace).async_execute(
            Command("listTables"),
            timeout_context=self._timeout_context(
                method_timeout_label="table_admin_timeout_ms",
                method_timeout_ms=table_admin_timeout_ms,
                request_timeout_ms=request_timeout_ms,
                timeout_ms=timeout_ms,
            ),
        )
        logger.info("finished listTables")
        return _status_list(lt_response, "tables", "listTables")

    async def command(
        self,
        body: Command | dict[str, Any],
        *,
        keyspace: str | None | UnsetType = _UNSET,
        collection_or_table_name: str | None = None,
        raise_api_errors: bool = True,
        general_method_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> dict[str, Any]:
        command_commander = self._command_commander(keyspace, collection_or_table_name)
        _payload = body.to_payload() if isinstance(body, Command) else body
        _cmd_desc = ",".join(sorted(_payload.keys()))
        logger.info(f"command={_cmd_desc} on {self.__class__.__name__}")
        req_response = await command_commander.async_request(
            payload=_payload,
            raise_api_errors=raise_api_errors,
            timeout_context=self._timeout_context(
                method_timeout_label="general_method_timeout_ms",
                method_timeout_ms=general_method_timeout_ms,
                request_timeout_ms=request_timeout_ms,
                timeout_ms=timeout_ms,
            ),
        )
        logger.info(f"finished command={_cmd_desc} on {self.__class__.__name__}")
        return req_response

    def get_database_admin(
        self,
        *,
        token: str | TokenProvider | UnsetType = _UNSET,
        spawn_api_options: APIOptions | UnsetType = _UNSET,
    ) -> DataAPIDatabaseAdmin:
        """
        Return a DataAPIDatabaseAdmin object corresponding to this database.
        Its `async_*` methods are the ones to use in an asyncio context.
        """

        # lazy importing here to avoid circular dependency
        from dataapi.admin import DataAPIDatabaseAdmin

        arg_api_options = APIOptions(token=token)
        api_options = self.api_options.with_override(spawn_api_options).with_override(
            arg_api_options
        )
        return DataAPIDatabaseAdmin(
            api_endpoint=self.api_endpoint,
            api_options=api_options,
            spawner_database=self,
        )
