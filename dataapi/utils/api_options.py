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

from dataclasses import dataclass, field
from typing import Any, Sequence

from dataapi.authentication import (
    EmbeddingAPIKeyHeaderProvider,
    EmbeddingHeadersProvider,
    StaticTokenProvider,
    TokenProvider,
    coerce_possible_embedding_headers_provider,
    coerce_possible_token_provider,
)
from dataapi.constants import CallerType, Environment
from dataapi.settings.defaults import (
    API_PATH_ENV_MAP,
    API_VERSION_ENV_MAP,
    DEFAULT_COLLECTION_ADMIN_TIMEOUT_MS,
    DEFAULT_GENERAL_METHOD_TIMEOUT_MS,
    DEFAULT_KEYSPACE_ADMIN_TIMEOUT_MS,
    DEFAULT_MAX_CHUNK_SIZE,
    DEFAULT_MAX_COUNT,
    DEFAULT_MAX_PAGE_SIZE,
    DEFAULT_REQUEST_TIMEOUT_MS,
    DEFAULT_TABLE_ADMIN_TIMEOUT_MS,
)
from dataapi.utils.unset import _UNSET, UnsetType


def _pick(override: Any, inherited: Any) -> Any:
    return inherited if isinstance(override, UnsetType) else override


@dataclass(frozen=True)
class TimeoutOptions:
    """
    Timeout settings to override, in milliseconds. Zero means no timeout.
    Unspecified settings keep the value inherited from the spawning object.

    Attributes:
        request_timeout_ms: the limit on any single HTTP request.
        general_method_timeout_ms: the limit on the whole duration of a
            data method, possibly spanning several requests (insert_many,
            delete_many, cursor consumption in to_list...).
        collection_admin_timeout_ms: the limit on collection schema operations
            (create, drop, list).
        table_admin_timeout_ms: the limit on table schema operations (create,
            alter, drop, list, index management).
        keyspace_admin_timeout_ms: the limit on keyspace operations.
    """

    request_timeout_ms: int | UnsetType = _UNSET
    general_method_timeout_ms: int | UnsetType = _UNSET
    collection_admin_timeout_ms: int | UnsetType = _UNSET
    table_admin_timeout_ms: int | UnsetType = _UNSET
    keyspace_admin_timeout_ms: int | UnsetType = _UNSET


@dataclass(frozen=True)
class FullTimeoutOptions:
    """
    The timeout settings in effect for an object, all of them defined.
    See `TimeoutOptions` for the meaning of each.
    """

    request_timeout_ms: int
    general_method_timeout_ms: int
    collection_admin_timeout_ms: int
    table_admin_timeout_ms: int
    keyspace_admin_timeout_ms: int

    def with_override(self, other: TimeoutOptions) -> FullTimeoutOptions:
        """A new object where the defined settings of `other` take precedence."""

        return FullTimeoutOptions(
            request_timeout_ms=_pick(other.request_timeout_ms, self.request_timeout_ms),
            general_method_timeout_ms=_pick(
                other.general_method_timeout_ms, self.general_method_timeout_ms
            ),
            collection_admin_timeout_ms=_pick(
                other.collection_admin_timeout_ms, self.collection_admin_timeout_ms
            ),
            table_admin_timeout_ms=_pick(
                other.table_admin_timeout_ms, self.table_admin_timeout_ms
            ),
            keyspace_admin_timeout_ms=_pick(
                other.keyspace_admin_timeout_ms, self.keyspace_admin_timeout_ms
            ),
        )


@dataclass(frozen=True)
class LimitOptions:
    """
    Limits advertised by the Data API, to override if the target server is
    configured differently.

    Attributes:
        max_count: the highest number of documents `countDocuments` will count.
            The `upper_bound` of count_documents cannot exceed it.
        max_chunk_size: the largest number of documents/rows accepted by one
            `insertMany` command. The `chunk_size` of insert_many cannot exceed it.
        max_page_size: the number of documents returned by one page of `find`.
    """

    max_count: int | UnsetType = _UNSET
    max_chunk_size: int | UnsetType = _UNSET
    max_page_size: int | UnsetType = _UNSET


@dataclass(frozen=True)
class FullLimitOptions:
    """The server limits in effect for an object. See `LimitOptions`."""

    max_count: int
    max_chunk_size: int
    max_page_size: int

    def with_override(self, other: LimitOptions) -> FullLimitOptions:
        """A new object where the defined settings of `other` take precedence."""

        return FullLimitOptions(
            max_count=_pick(other.max_count, self.max_count),
            max_chunk_size=_pick(other.max_chunk_size, self.max_chunk_size),
            max_page_size=_pick(other.max_page_size, self.max_page_size),
        )


@dataclass(frozen=True)
class DataAPIURLOptions:
    """
    How the Data API URL is composed from the API endpoint. Rarely changed.

    Attributes:
        api_path: path appended to the endpoint ("/api/json" on Astra DB,
            empty for self-deployed instances).
        api_version: version segment following the path ("v1").
    """

    api_path: str | None | UnsetType = _UNSET
    api_version: str | None | UnsetType = _UNSET


@dataclass(frozen=True)
class FullDataAPIURLOptions:
    """The URL composition settings in effect. See `DataAPIURLOptions`."""

    api_path: str | None
    api_version: str | None

    def with_override(self, other: DataAPIURLOptions) -> FullDataAPIURLOptions:
        """A new object where the defined settings of `other` take precedence."""

        return FullDataAPIURLOptions(
            api_path=_pick(other.api_path, self.api_path),
            api_version=_pick(other.api_version, self.api_version),
        )


@dataclass(frozen=True)
class APIOptions:
    """
    A set of settings to override on an object of the hierarchy
    (DataAPIClient, Database, Collection, Table, admin). Every object carries
    a `FullAPIOptions`; passing an `APIOptions` when spawning or copying
    an object yields a new one where the defined settings replace the
    inherited ones. Additional headers and redacted header names are merged
    rather than replaced.

    Instances are immutable: there is no global default that can be changed
    after the fact, only new objects built with different options.

    Attributes:
        callers: (name, version) pairs identifying the caller in the User-Agent.
        database_additional_headers: extra headers for Database, Collection and
            Table requests. A None value suppresses a header.
        admin_additional_headers: extra headers for admin requests.
        redacted_header_names: header names whose values are masked in logs.
        token: a TokenProvider (a string or None is converted automatically).
        embedding_api_key: an EmbeddingHeadersProvider (likewise converted).
        timeout_options: a `TimeoutOptions` override.
        limit_options: a `LimitOptions` override.
        data_api_url_options: a `DataAPIURLOptions` override.

    Example:
        >>> from dataapi import DataAPIClient
        >>> from dataapi.api_options import APIOptions, TimeoutOptions
        >>> client = DataAPIClient(
        ...     api_options=APIOptions(
        ...         timeout_options=TimeoutOptions(request_timeout_ms=20000),
        ...     ),
        ... )
    """

    callers: Sequence[CallerType] | UnsetType = _UNSET
    database_additional_headers: dict[str, str | None] | UnsetType = _UNSET
    admin_additional_headers: dict[str, str | None] | UnsetType = _UNSET
    redacted_header_names: set[str] | UnsetType = _UNSET
    token: TokenProvider | UnsetType = _UNSET
    embedding_api_key: EmbeddingHeadersProvider | UnsetType = _UNSET
    timeout_options: TimeoutOptions | UnsetType = _UNSET
    limit_options: LimitOptions | UnsetType = _UNSET
    data_api_url_options: DataAPIURLOptions | UnsetType = _UNSET

    def __post_init__(self) -> None:
        # str/None are accepted for the providers, and any iterable for the names
        object.__setattr__(self, "token", coerce_possible_token_provider(self.token))
        object.__setattr__(
            self,
            "embedding_api_key",
            coerce_possible_embedding_headers_provider(self.embedding_api_key),
        )
        if not isinstance(self.redacted_header_names, UnsetType):
            object.__setattr__(
                self, "redacted_header_names", set(self.redacted_header_names)
            )

    def __repr__(self) -> str:
        pieces = [
            f"{attr}={value}"
            for attr, value in (
                ("callers", self.callers),
                ("database_additional_headers", self.database_additional_headers),
                ("admin_additional_headers", self.admin_additional_headers),
                ("redacted_header_names", self.redacted_header_names),
                ("token", self.token),
                ("embedding_api_key", self.embedding_api_key),
                ("timeout_options", self.timeout_options),
                ("limit_options", self.limit_options),
                ("data_api_url_options", self.data_api_url_options),
            )
            if not isinstance(value, UnsetType)
        ]
        return f"{self.__class__.__name__}({', '.join(pieces)})"


@dataclass(frozen=True)
class FullAPIOptions:
    """
    The complete set of settings in effect for an object of the hierarchy.
    See `APIOptions` for the meaning of the attributes; in addition:

    Attributes:
        environment: the kind of deployment targeted (see
            `dataapi.constants.Environment`). Set once, on DataAPIClient.
    """

    environment: str
    callers: Sequence[CallerType]
    database_additional_headers: dict[str, str | None]
    admin_additional_headers: dict[str, str | None]
    redacted_header_names: set[str]
    token: TokenProvider
    embedding_api_key: EmbeddingHeadersProvider
    timeout_options: FullTimeoutOptions
    limit_options: FullLimitOptions
    data_api_url_options: FullDataAPIURLOptions = field(repr=False)

    def __repr__(self) -> str:
        pieces = [
            pc
            for pc in (
                None
                if self.environment == Environment.PROD
                else f"environment={self.environment}",
                f"token={self.token}" if self.token else None,
                f"embedding_api_key={self.embedding_api_key}"
                if self.embedding_api_key
                else None,
                "...",
            )
            if pc is not None
        ]
        return f"{self.__class__.__name__}({', '.join(pieces)})"

    def with_override(self, other: APIOptions | None | UnsetType) -> FullAPIOptions:
        """
        A new object where the defined settings of `other` take precedence.
        Nested option groups are overridden setting by setting; headers and
        redacted header names are merged.
        """

        if other is None or isinstance(other, UnsetType):
            return self

        database_additional_headers = (
            self.database_additional_headers
            if isinstance(other.database_additional_headers, UnsetType)
            else {
                **self.database_additional_headers,
                **other.database_additional_headers,
            }
        )
        admin_additional_headers = (
            self.admin_additional_headers
            if isinstance(other.admin_additional_headers, UnsetType)
            else {**self.admin_additional_headers, **other.admin_additional_headers}
        )
        redacted_header_names = (
            self.redacted_header_names
            if isinstance(other.redacted_header_names, UnsetType)
            else self.redacted_header_names | other.redacted_header_names
        )
        timeout_options = (
            self.timeout_options.with_override(other.timeout_options)
            if isinstance(other.timeout_options, TimeoutOptions)
            else self.timeout_options
        )
        limit_options = (
            self.limit_options.with_override(other.limit_options)
            if isinstance(other.limit_options, LimitOptions)
            else self.limit_options
        )
        data_api_url_options = (
            self.data_api_url_options.with_override(other.data_api_url_options)
            if isinstance(other.data_api_url_options, DataAPIURLOptions)
            else self.data_api_url_options
        )
        return FullAPIOptions(
            environment=self.environment,
            callers=_pick(other.callers, self.callers),
            database_additional_headers=database_additional_headers,
            admin_additional_headers=admin_additional_headers,
            redacted_header_names=redacted_header_names,
            token=_pick(other.token, self.token),
            embedding_api_key=_pick(other.embedding_api_key, self.embedding_api_key),
            timeout_options=timeout_options,
            limit_options=limit_options,
            data_api_url_options=data_api_url_options,
        )


defaultTimeoutOptions = FullTimeoutOptions(
    request_timeout_ms=DEFAULT_REQUEST_TIMEOUT_MS,
    general_method_timeout_ms=DEFAULT_GENERAL_METHOD_TIMEOUT_MS,
    collection_admin_timeout_ms=DEFAULT_COLLECTION_ADMIN_TIMEOUT_MS,
    table_admin_timeout_ms=DEFAULT_TABLE_ADMIN_TIMEOUT_MS,
    keyspace_admin_timeout_ms=DEFAULT_KEYSPACE_ADMIN_TIMEOUT_MS,
)
defaultLimitOptions = FullLimitOptions(
    max_count=DEFAULT_MAX_COUNT,
    max_chunk_size=DEFAULT_MAX_CHUNK_SIZE,
    max_page_size=DEFAULT_MAX_PAGE_SIZE,
)


def defaultAPIOptions(environment: str) -> FullAPIOptions:
    """
    The grand-default options for an environment, the starting point
    of every DataAPIClient.
    """

    if environment not in Environment.values:
        raise ValueError(f"Unsupported environment: '{environment}'.")
    return FullAPIOptions(
        environment=environment,
        callers=[],
        database_additional_headers={},
        admin_additional_headers={},
        redacted_header_names=set(),
        token=StaticTokenProvider(None),
        embedding_api_key=EmbeddingAPIKeyHeaderProvider(None),
        timeout_options=defaultTimeoutOptions,
        limit_options=defaultLimitOptions,
        data_api_url_options=FullDataAPIURLOptions(
            api_path=API_PATH_ENV_MAP[environment],
            api_version=API_VERSION_ENV_MAP[environment],
        ),
    )
