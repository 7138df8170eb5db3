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

from dataapi.base import _compose_base_path
from dataapi.commands import Command
from dataapi.database import AsyncDatabase, Database
from dataapi.exceptions import (
    UnexpectedDataAPIResponseException,
    _select_singlereq_timeout,
    _TimeoutContext,
)
from dataapi.runner import CommandRunner, DataAPIResponse
from dataapi.settings.defaults import DEFAULT_DATA_API_AUTH_HEADER
from dataapi.utils.api_commander import APICommander
from dataapi.utils.api_options import APIOptions, FullAPIOptions
from dataapi.utils.unset import _UNSET, UnsetType

if TYPE_CHECKING:
    from dataapi.authentication import TokenProvider


logger = logging.getLogger(__name__)


def _create_keyspace_command(
    name: str, replication_options: dict[str, Any] | None
) -> Command:
    return (
        Command("createKeyspace")
        .with_field("name", name)
        .with_options(
            {"replication": replication_options} if replication_options else None
        )
    )


def _keyspaces_from_response(response: DataAPIResponse) -> list[str]:
    if "keyspaces" not in response.status:
        raise UnexpectedDataAPIResponseException(
            text="Faulty response from findKeyspaces API command.",
            raw_response=response.raw_response,
        )
    return list(response.status["keyspaces"])


def _ensure_ok(response: DataAPIResponse, command_name: str) -> None:
    if response.status.get("ok") != 1:
        raise UnexpectedDataAPIResponseException(
            text=f"Faulty response from {command_name} API command.",
            raw_response=response.raw_response,
        )


class DataAPIDatabaseAdmin:
    """
    An "admin" object to perform administrative tasks at the keyspace level,
    such as creating, listing or dropping keyspaces, within one database.

    A `DataAPIDatabaseAdmin` is generally created by invoking the
    `get_database_admin` method of the corresponding Database (or
    AsyncDatabase) object. Each method has an `async_*` counterpart for
    use in an asyncio context.

    Args:
        api_endpoint: the full URI to access the Data API,
            e.g. "http://localhost:8181".
        api_options: a complete specification of the API Options for this instance.
        spawner_database: either a Database or an AsyncDatabase instance. This
            is the database which spawned this admin object, so that a keyspace
            creation can retroactively "use" the new keyspace in the spawner.

    Example:
        >>> from dataapi import DataAPIClient
        >>> from dataapi.authentication import UsernamePasswordTokenProvider
        >>>
        >>> client = DataAPIClient(
        ...     token=UsernamePasswordTokenProvider("username", "password"),
        ...     environment="other",
        ... )
        >>> database = client.get_database("http://localhost:8181")
        >>> admin_for_my_db = database.get_database_admin()
        >>> admin_for_my_db.list_keyspaces()
        ['keyspace1', 'keyspace2']

    Note:
        a more powerful token may be required than the one sufficient for working
        in the Database, Collection and Table classes.
    """

    def __init__(
        self,
        *,
        api_endpoint: str,
        api_options: FullAPIOptions,
        spawner_database: Database | AsyncDatabase | None = None,
    ) -> None:
        self.api_options = api_options
        self.api_endpoint = api_endpoint.strip("/")

        self.spawner_database: Database | AsyncDatabase
        if spawner_database is not None:
            self.spawner_database = spawner_database
        else:
            self.spawner_database = Database(
                api_endpoint=self.api_endpoint,
                keyspace=None,
                api_options=self.api_options,
            )

        # admin requests carry the admin additional headers
        self._commander_headers = {
            DEFAULT_DATA_API_AUTH_HEADER: self.api_options.token.get_token(),
            **self.api_options.admin_additional_headers,
        }
        self._api_commander = self._get_api_commander()
        self._runner = CommandRunner(self._api_commander)

    def __repr__(self) -> str:
        parts = [
            f'api_endpoint="{self.api_endpoint}"',
            f"api_options={self.api_options}",
        ]
        return f"{self.__class__.__name__}({', '.join(parts)})"

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, DataAPIDatabaseAdmin):
            return all(
                [
                    self.api_endpoint == other.api_endpoint,
                    self.api_options == other.api_options,
                ]
            )
        return False

    def _get_api_commander(self) -> APICommander:
        base_path = _compose_base_path(
            self.api_options.data_api_url_options.api_path,
            self.api_options.data_api_url_options.api_version,
        )
        return APICommander(
            api_endpoint=self.api_endpoint,
            path=base_path,
            headers=self._commander_headers,
            callers=self.api_options.callers,
            redacted_header_names=self.api_options.redacted_header_names,
        )

    def _timeout_context(
        self,
        keyspace_admin_timeout_ms: int | None,
        request_timeout_ms: int | None,
        timeout_ms: int | None,
    ) -> _TimeoutContext:
        _timeout_ms, _label = _select_singlereq_timeout(
            timeout_options=self.api_options.timeout_options,
            method_timeout_label="keyspace_admin_timeout_ms",
            method_timeout_ms=keyspace_admin_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        return _TimeoutContext(request_ms=_timeout_ms, label=_label)

    def _copy(
        self,
        *,
        token: str | TokenProvider | UnsetType = _UNSET,
        api_options: APIOptions | UnsetType = _UNSET,
    ) -> DataAPIDatabaseAdmin:
        arg_api_options = APIOptions(token=token)
        final_api_options = self.api_options.with_override(api_options).with_override(
            arg_api_options
        )
        return DataAPIDatabaseAdmin(
            api_endpoint=self.api_endpoint,
            api_options=final_api_options,
            spawner_database=self.spawner_database,
        )

    def with_options(
        self,
        *,
        token: str | TokenProvider | UnsetType = _UNSET,
        api_options: APIOptions | UnsetType = _UNSET,
    ) -> DataAPIDatabaseAdmin:
        """
        Create a clone of this DataAPIDatabaseAdmin with some changed attributes.

        Args:
            token: an access token with enough permission to perform admin tasks.
            api_options: any additional options to set for the clone. Named
                parameters take precedence over the same setting in here.

        Returns:
            a new DataAPIDatabaseAdmin instance.
        """
        return self._copy(token=token, api_options=api_options)

    def list_keyspaces(
        self,
        *,
        keyspace_admin_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> list[str]:
        """
        Query the API for a list of the keyspaces in the database.

        Args:
            keyspace_admin_timeout_ms: a timeout, in milliseconds, for the
                request. If not provided, this object's defaults apply.
            request_timeout_ms: an alias for `keyspace_admin_timeout_ms`.
            timeout_ms: an alias for `keyspace_admin_timeout_ms`.

        Returns:
            A list of the keyspaces, each a string, in no particular order.

        Example:
            >>> admin_for_my_db.list_keyspaces()
            ['default_keyspace', 'staging_keyspace']
        """

        logger.info("getting list of keyspaces")
        fk_response = self._runner.execute(
            Command("findKeyspaces"),
            timeout_context=self._timeout_context(
                keyspace_admin_timeout_ms, request_timeout_ms, timeout_ms
            ),
        )
        logger.info("finished getting list of keyspaces")
        return _keyspaces_from_response(fk_response)

    def create_keyspace(
        self,
        name: str,
        *,
        replication_options: dict[str, Any] | None = None,
        update_db_keyspace: bool | None = None,
        keyspace_admin_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> None:
        """
        Create a keyspace in the database.

        Args:
            name: the keyspace name. If supplying a keyspace that exists
                already, the method call proceeds as usual, no errors are
                raised, and the whole invocation is a no-op.
            replication_options: the replication settings of the keyspace,
                e.g. `{"class": "SimpleStrategy", "replication_factor": 1}`.
            update_db_keyspace: if True, the Database or AsyncDatabase that
                spawned this admin, if any, is switched to the new keyspace
                when this method returns.
            keyspace_admin_timeout_ms: a timeout, in milliseconds, for the request.
            request_timeout_ms: an alias for `keyspace_admin_timeout_ms`.
            timeout_ms: an alias for `keyspace_admin_timeout_ms`.

        Note: a timeout event is no guarantee at all that the
        creation request has not reached the API server and is not going
        to be, in fact, honored.

        Example:
            >>> admin_for_my_db.create_keyspace("that_other_one")
            >>> admin_for_my_db.list_keyspaces()
            ['default_keyspace', 'that_other_one']
        """

        logger.info("creating keyspace")
        ck_response = self._runner.execute(
            _create_keyspace_command(name, replication_options),
            timeout_context=self._timeout_context(
                keyspace_admin_timeout_ms, request_timeout_ms, timeout_ms
            ),
        )
        _ensure_ok(ck_response, "createKeyspace")
        logger.info("finished creating keyspace")
        if update_db_keyspace:
            self.spawner_database.use_keyspace(name)

    def drop_keyspace(
        self,
        name: str,
        *,
        keyspace_admin_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> None:
        """
        Drop (delete) a keyspace from the database.

        Args:
            name: the keyspace to delete. If it does not exist in this database,
                an error is raised.
            keyspace_admin_timeout_ms: a timeout, in milliseconds, for the request.
            request_timeout_ms: an alias for `keyspace_admin_timeout_ms`.
            timeout_ms: an alias for `keyspace_admin_timeout_ms`.
        """

        logger.info("dropping keyspace")
        dk_response = self._runner.execute(
            Command("dropKeyspace").with_field("name", name),
            timeout_context=self._timeout_context(
                keyspace_admin_timeout_ms, request_timeout_ms, timeout_ms
            ),
        )
        _ensure_ok(dk_response, "dropKeyspace")
        logger.info("finished dropping keyspace")

    async def async_list_keyspaces(
        self,
        *,
        keyspace_admin_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> list[str]:
        """
        Query the API for a list of the keyspaces in the database.
        Async version of the method, for use in an asyncio context.
        """

        logger.info("getting list of keyspaces, async")
        fk_response = await self._runner.async_execute(
            Command("findKeyspaces"),
            timeout_context=self._timeout_context(
                keyspace_admin_timeout_ms, request_timeout_ms, timeout_ms
            ),
        )
        logger.info("finished getting list of keyspaces, async")
        return _keyspaces_from_response(fk_response)

    async def async_create_keyspace(
        self,
        name: str,
        *,
        replication_options: dict[str, Any] | None = None,
        update_db_keyspace: bool | None = None,
        keyspace_admin_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> None:
        """
        Create a keyspace in the database.
        Async version of the method, for use in an asyncio context.
        """

        logger.info("creating keyspace, async")
        ck_response = await self._runner.async_execute(
            _create_keyspace_command(name, replication_options),
            timeout_context=self._timeout_context(
                keyspace_admin_timeout_ms, request_timeout_ms, timeout_ms
            ),
        )
        _ensure_ok(ck_response, "createKeyspace")
        logger.info("finished creating keyspace, async")
        if update_db_keyspace:
            self.spawner_database.use_keyspace(name)

    async def async_drop_keyspace(
        self,
        name: str,
        *,
        keyspace_admin_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        timeout_ms: int | None = None,
    ) -> None:
        """
        Drop (delete) a keyspace from the database.
        Async version of the method, for use in an asyncio context.
        """

        logger.info("dropping keyspace, async")
        dk_response = await self._runner.async_execute(
            Command("dropKeyspace").with_field("name", name),
            timeout_context=self._timeout_context(
                keyspace_admin_timeout_ms, request_timeout_ms, timeout_ms
            ),
        )
        _ensure_ok(dk_response, "dropKeyspace")
        logger.info("finished dropping keyspace, async")

    def get_database(
        self,
        *,
        keyspace: str | None = None,
        token: str | TokenProvider | UnsetType = _UNSET,
        spawn_api_options: APIOptions | UnsetType = _UNSET,
    ) -> Database:
        """
        Create a Database instance for a specific database, to be used
        when doing data-level work (such as creating/managing collections).

        Args:
            keyspace: an optional keyspace to set in the resulting Database.
                If not set, the keyspace "default_keyspace" is used.
            token: if supplied, is passed to the Database instead of
                the one set for this object.
            spawn_api_options: any API options to override for the Database.

        Example:
            >>> my_db = admin_for_my_db.get_database()
            >>> my_db.list_collection_names()
            ['movies', 'another_collection']
        """

        arg_api_options = APIOptions(token=token)
        api_options = self.api_options.with_override(spawn_api_options).with_override(
            arg_api_options
        )
        return Database(
            api_endpoint=self.api_endpoint,
            keyspace=keyspace,
            api_options=api_options,
        )

    def get_async_database(
        self,
        *,
        keyspace: str | None = None,
        token: str | TokenProvider | UnsetType = _UNSET,
        spawn_api_options: APIOptions | UnsetType = _UNSET,
    ) -> AsyncDatabase:
        """
        Create an AsyncDatabase instance for a specific database.
        See `get_database` for the parameters.
        """
        return self.get_database(
            keyspace=keyspace,
            token=token,
            spawn_api_options=spawn_api_options,
        ).to_async()
