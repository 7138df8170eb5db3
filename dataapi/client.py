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
import re
from typing import TYPE_CHECKING, Any, Sequence

from dataapi.constants import CallerType, Environment
from dataapi.utils.api_options import APIOptions, defaultAPIOptions
from dataapi.utils.meta import check_deprecated_alias
from dataapi.utils.unset import _UNSET, UnsetType

if TYPE_CHECKING:
    from dataapi import AsyncDatabase, Database
    from dataapi.authentication import TokenProvider


logger = logging.getLogger(__name__)

generic_api_url_matcher = re.compile(r"^https?:\/\/[a-zA-Z0-9\-.]+(\:[0-9]{1,6}){0,1}$")
generic_api_url_descriptor = "http[s]://<domain name or IP>[:port]"


def parse_generic_api_url(api_endpoint: str) -> str | None:
    """
    Validate an API Endpoint string, such as `http://10.1.1.1:123`
    or `https://my.domain`.

    Returns:
        a normalized (stripped) version of the endpoint if valid, else None.
    """
    _api_endpoint = api_endpoint.rstrip("/")
    match = generic_api_url_matcher.match(_api_endpoint)
    if match:
        return match[0]
    return None


class DataAPIClient:
    """
    A client for using the Data API. This is the entry point, sitting
    at the top of the conceptual "client -> database -> collection/table"
    hierarchy.

    Args:
        token: an access token, either a literal string or a subclass of
            `dataapi.authentication.TokenProvider`. For self-deployed Data API
            instances a `UsernamePasswordTokenProvider` builds the
            "Cassandra:<user>:<password>" token from the credentials.
            The token can also be passed later, when spawning databases.
        environment: a string representing the target Data API environment.
            It defaults to `Environment.PROD`; the self-deployed values are
            `Environment.DSE`, `Environment.HCD`, `Environment.CASSANDRA`
            and `Environment.OTHER`.
        callers: a list of caller identities, i.e. applications, or frameworks,
            on behalf of which Data API calls are performed. These end up in
            the request user-agent. Each caller identity is a
            ("caller_name", "caller_version") pair.
        api_options: a specification - complete or partial - of the API Options
            to override the system defaults. Named parameters take precedence
            over the same settings in here.

    Example:
        >>> from dataapi import DataAPIClient
        >>> from dataapi.authentication import UsernamePasswordTokenProvider
        >>> my_client = DataAPIClient(
        ...     token=UsernamePasswordTokenProvider("cassandra", "cassandra"),
        ...     environment="hcd",
        ... )
        >>> my_db = my_client.get_database("http://localhost:8181")
        >>> my_coll = my_db.create_collection("movies", dimension=2)
        >>> my_coll.insert_one({"title": "The Title", "$vector": [0.1, 0.3]})
    """

    def __init__(
        self,
        token: str | TokenProvider | UnsetType = _UNSET,
        *,
        environment: str | UnsetType = _UNSET,
        callers: Sequence[CallerType] | UnsetType = _UNSET,
        api_options: APIOptions | UnsetType = _UNSET,
    ) -> None:
        # this parameter bootstraps the defaults, has a special treatment:
        _environment: str
        if isinstance(environment, UnsetType):
            _environment = Environment.PROD
        else:
            _environment = environment.lower()
        if _environment not in Environment.values:
            raise ValueError(f"Unsupported `environment` value: '{_environment}'.")
        arg_api_options = APIOptions(
            callers=callers,
            token=token,
        )
        self.api_options = (
            defaultAPIOptions(_environment)
            .with_override(api_options)
            .with_override(arg_api_options)
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.api_options})"

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, DataAPIClient):
            return all(
                [
                    self.api_options.token == other.api_options.token,
                    self.api_options.environment == other.api_options.environment,
                    self.api_options.callers == other.api_options.callers,
                ]
            )
        return False

    def __getitem__(self, api_endpoint: str) -> Database:
        return self.get_database(api_endpoint)

    def _copy(
        self,
        *,
        token: str | TokenProvider | UnsetType = _UNSET,
        api_options: APIOptions | UnsetType = _UNSET,
    ) -> DataAPIClient:
        arg_api_options = APIOptions(token=token)
        final_api_options = self.api_options.with_override(api_options).with_override(
            arg_api_options
        )
        new_client = DataAPIClient(environment=final_api_options.environment)
        new_client.api_options = final_api_options
        return new_client

    def with_options(
        self,
        *,
        token: str | TokenProvider | UnsetType = _UNSET,
        api_options: APIOptions | UnsetType = _UNSET,
    ) -> DataAPIClient:
        """
        Create a clone of this DataAPIClient with some changed attributes.

        Args:
            token: an access token, as a string or a TokenProvider.
            api_options: any additional options to set for the clone. Named
                parameters take precedence over the same setting in here.

        Returns:
            a new DataAPIClient instance.

        Example:
            >>> other_client = my_client.with_options(
            ...     api_options=APIOptions(callers=[("my_framework", "1.0")]),
            ... )
        """
        return self._copy(token=token, api_options=api_options)

    def get_database(
        self,
        api_endpoint: str,
        *,
        token: str | TokenProvider | UnsetType = _UNSET,
        keyspace: str | None = None,
        namespace: str | None = None,
        spawn_api_options: APIOptions | UnsetType = _UNSET,
    ) -> Database:
        """
        Get a Database object from this client, for doing data-related work.
        No request is made: the database must exist already.

        Args:
            api_endpoint: the API Endpoint of the target database, such as
                `http://localhost:8181`.
            token: if supplied, is passed to the Database instead of the
                client token.
            keyspace: the working keyspace of the Database. If not provided,
                "default_keyspace" is used.
            namespace: an alias for `keyspace`. *DEPRECATED*.
            spawn_api_options: a specification - complete or partial - of the
                API Options to override for the Database.

        Returns:
            a Database object with which to work on collections and tables.

        Raises:
            ValueError: if the API endpoint is not a valid URL.

        Example:
            >>> my_db = my_client.get_database(
            ...     "http://localhost:8181",
            ...     token="Cassandra:Y2Fzc2FuZHJh:Y2Fzc2FuZHJh",
            ...     keyspace="my_keyspace",
            ... )
        """

        # lazy importing here to avoid circular dependency
        from dataapi import Database

        _keyspace = check_deprecated_alias(keyspace, namespace)
        arg_api_options = APIOptions(token=token)
        resulting_api_options = self.api_options.with_override(
            spawn_api_options
        ).with_override(arg_api_options)

        parsed_api_endpoint = parse_generic_api_url(api_endpoint)
        if parsed_api_endpoint is None:
            raise ValueError(
                f"Cannot parse the supplied API endpoint ({api_endpoint}). The "
                f'endpoint must be in the following form: "{generic_api_url_descriptor}".'
            )
        logger.info(f"spawning database for '{parsed_api_endpoint}'")
        return Database(
            api_endpoint=parsed_api_endpoint,
            keyspace=_keyspace,
            api_options=resulting_api_options,
        )

    def get_async_database(
        self,
        api_endpoint: str,
        *,
        token: str | TokenProvider | UnsetType = _UNSET,
        keyspace: str | None = None,
        namespace: str | None = None,
        spawn_api_options: APIOptions | UnsetType = _UNSET,
    ) -> AsyncDatabase:
        """
        Get an AsyncDatabase object from this client, for doing data-related
        work in an asyncio context. See `get_database` for the parameters.

        Example:
            >>> my_async_db = my_client.get_async_database("http://localhost:8181")
            >>> asyncio.run(my_async_db.list_collection_names())
            ['movies', 'another_collection']
        """

        _keyspace = check_deprecated_alias(keyspace, namespace)
        return self.get_database(
            api_endpoint,
            token=token,
            keyspace=_keyspace,
            spawn_api_options=spawn_api_options,
        ).to_async()
