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

import base64
from abc import ABC, abstractmethod
from typing import Any

from typing_extensions import override

from dataapi.settings.defaults import (
    EMBEDDING_HEADER_API_KEY,
    FIXED_SECRET_PLACEHOLDER,
    SECRETS_REDACT_CHAR,
    SECRETS_REDACT_ENDING,
    SECRETS_REDACT_ENDING_LENGTH,
)
from dataapi.utils.unset import _UNSET, UnsetType


def coerce_token_provider(token: str | TokenProvider | None) -> TokenProvider:
    if isinstance(token, TokenProvider):
        return token
    return StaticTokenProvider(token)


def coerce_possible_token_provider(
    token: str | TokenProvider | None | UnsetType,
) -> TokenProvider | UnsetType:
    if isinstance(token, UnsetType):
        return _UNSET
    return coerce_token_provider(token)


def coerce_embedding_headers_provider(
    embedding_api_key: str | EmbeddingHeadersProvider | None,
) -> EmbeddingHeadersProvider:
    if isinstance(embedding_api_key, EmbeddingHeadersProvider):
        return embedding_api_key
    return EmbeddingAPIKeyHeaderProvider(embedding_api_key)


def coerce_possible_embedding_headers_provider(
    embedding_api_key: str | EmbeddingHeadersProvider | None | UnsetType,
) -> EmbeddingHeadersProvider | UnsetType:
    if isinstance(embedding_api_key, UnsetType):
        return _UNSET
    return coerce_embedding_headers_provider(embedding_api_key)


def _redact_secret(secret: str, max_length: int, hide_if_short: bool = True) -> str:
    """
    Shorten a secret to at most `max_length` characters, ellipsis included.
    Secrets that are already short are masked entirely (or returned as they
    are if `hide_if_short` is False).
    """
    if len(secret) + SECRETS_REDACT_ENDING_LENGTH > max_length:
        return (
            secret[: max_length - SECRETS_REDACT_ENDING_LENGTH] + SECRETS_REDACT_ENDING
        )
    if hide_if_short:
        return SECRETS_REDACT_CHAR * len(secret)
    return secret


class TokenProvider(ABC):
    """
    Source of the token sent in the "Token" header of every Data API request.

    Never use str/repr to obtain the token: they are redacted. Use `get_token`.
    Two providers are equal if they produce the same token.
    """

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, TokenProvider):
            return self.get_token() == other.get_token()
        return False

    def __hash__(self) -> int:
        return hash(self.get_token())

    @abstractmethod
    def __repr__(self) -> str: ...

    def __or__(self, other: TokenProvider) -> TokenProvider:
        """`provider_a | provider_b`: the first one yielding an actual token."""
        if self.get_token() is not None:
            return self
        return other

    def __bool__(self) -> bool:
        return self.get_token() is not None

    @abstractmethod
    def get_token(self) -> str | None:
        """The token for the next request, or None to send no token."""
        ...


class StaticTokenProvider(TokenProvider):
    """
    Wraps a literal token, e.g. an "AstraCS:..." application token.

    Args:
        token: the token string, or None for no authentication.
    """

    def __init__(self, token: str | None) -> None:
        self.token = token

    @override
    def __repr__(self) -> str:
        if self.token is None:
            return "(none)"
        return f"{self.__class__.__name__}({_redact_secret(self.token, 15)})"

    @override
    def get_token(self) -> str | None:
        return self.token


class UsernamePasswordTokenProvider(TokenProvider):
    """
    Username/password authentication for self-deployed Data API instances.
    The token has the form "Cassandra:<base64 username>:<base64 password>".

    Args:
        username: the database username.
        password: the corresponding password.

    Example:
        >>> from dataapi import DataAPIClient
        >>> from dataapi.authentication import UsernamePasswordTokenProvider
        >>> from dataapi.constants import Environment
        >>> client = DataAPIClient(environment=Environment.HCD)
        >>> database = client.get_database(
        ...     "http://localhost:8181",
        ...     token=UsernamePasswordTokenProvider("cassandra", "cassandra"),
        ...     keyspace="my_keyspace",
        ... )
    """

    PREFIX = "Cassandra"

    def __init__(self, username: str, password: str) -> None:
        self.username = username
        self.password = password
        self.token = f"{self.PREFIX}:{self._b64(username)}:{self._b64(password)}"

    @override
    def __repr__(self) -> str:
        return (
            f'{self.__class__.__name__}("username={_redact_secret(self.username, 6)}, '
            f'password={FIXED_SECRET_PLACEHOLDER}")'
        )

    @staticmethod
    def _b64(cleartext: str) -> str:
        return base64.b64encode(cleartext.encode()).decode()

    @override
    def get_token(self) -> str:
        return self.token


class EmbeddingHeadersProvider(ABC):
    """
    Source of the headers authenticating server-side embedding computation
    ("vectorize") for collections and tables that use it.
    """

    @abstractmethod
    def __repr__(self) -> str: ...

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, EmbeddingHeadersProvider):
            return self.get_headers() == other.get_headers()
        return False

    def __hash__(self) -> int:
        return hash(tuple(sorted(self.get_headers().items())))

    def __bool__(self) -> bool:
        return self.get_headers() != {}

    @abstractmethod
    def get_headers(self) -> dict[str, str]:
        """The headers to add to each request."""
        ...


class EmbeddingAPIKeyHeaderProvider(EmbeddingHeadersProvider):
    """
    The single "X-Embedding-Api-Key" header scheme.

    Args:
        embedding_api_key: the header value, or None for no header at all.
    """

    def __init__(self, embedding_api_key: str | None) -> None:
        self.embedding_api_key = embedding_api_key

    @override
    def __repr__(self) -> str:
        if self.embedding_api_key is None:
            return f"{self.__class__.__name__}(empty)"
        return (
            f"{self.__class__.__name__}"
            f'("{_redact_secret(self.embedding_api_key, 8)}")'
        )

    @override
    def get_headers(self) -> dict[str, str]:
        if self.embedding_api_key is not None:
            return {EMBEDDING_HEADER_API_KEY: self.embedding_api_key}
        return {}


__all__ = [
    "EmbeddingAPIKeyHeaderProvider",
    "EmbeddingHeadersProvider",
    "StaticTokenProvider",
    "TokenProvider",
    "UsernamePasswordTokenProvider",
]
