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
from typing import Any, Callable

from dataapi.exceptions import (
    MultiCallTimeoutManager,
    _first_valid_timeout,
    _select_singlereq_timeout,
    _TimeoutContext,
)
from dataapi.runner import CommandRunner
from dataapi.settings.defaults import DEFAULT_DATA_API_AUTH_HEADER
from dataapi.utils.api_commander import APICommander
from dataapi.utils.api_options import FullAPIOptions

logger = logging.getLogger(__name__)


def _compose_base_path(*components: str | None) -> str:
    base_path_components = [
        comp
        for comp in (ncomp.strip("/") for ncomp in components if ncomp is not None)
        if comp != ""
    ]
    return f"/{'/'.join(base_path_components)}"


class _DataResource:
    """
    What collections and tables, sync and async, have in common: a name, a
    keyspace, a parent database, the API options and a CommandRunner bound
    to the resource URL.
    """

    _is_table: bool = False

    def __init__(
        self,
        *,
        database: Any,
        name: str,
        keyspace: str | None,
        api_options: FullAPIOptions,
    ) -> None:
        self.api_options = api_options
        self._name = name
        _keyspace = keyspace if keyspace is not None else database.keyspace

        if _keyspace is None:
            raise ValueError(
                f"Attempted to create {self.__class__.__name__} with 'keyspace' unset."
            )

        self._database = database.__class__(
            api_endpoint=database.api_endpoint,
            keyspace=_keyspace,
            api_options=self.api_options,
        )
        self._commander_headers = {
            **{DEFAULT_DATA_API_AUTH_HEADER: self.api_options.token.get_token()},
            **self.api_options.embedding_api_key.get_headers(),
            **self.api_options.database_additional_headers,
        }
        self._api_commander = self._get_api_commander()
        self._runner = (
            CommandRunner.for_table(self._api_commander)
            if self._is_table
            else CommandRunner.for_collection(self._api_commander)
        )

    def __repr__(self) -> str:
        _db_desc = f'database.api_endpoint="{self._database.api_endpoint}"'
        return (
            f'{self.__class__.__name__}(name="{self.name}", '
            f'keyspace="{self.keyspace}", {_db_desc}, '
            f"api_options={self.api_options})"
        )

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, self.__class__):
            return all(
                [
                    self._name == other._name,
                    self._database == other._database,
                    self.api_options == other.api_options,
                ]
            )
        return False

    def _get_api_commander(self) -> APICommander:
        """Instantiate a new APICommander for the URL of this resource."""
        base_path = _compose_base_path(
            self.api_options.data_api_url_options.api_path,
            self.api_options.data_api_url_options.api_version,
            self._database.keyspace,
            self._name,
        )
        return APICommander(
            api_endpoint=self._database.api_endpoint,
            path=base_path,
            headers=self._commander_headers,
            callers=self.api_options.callers,
            redacted_header_names=self.api_options.redacted_header_names,
        )

    def _single_request_timeout(
        self,
        *,
        method_timeout_ms: int | None,
        request_timeout_ms: int | None,
        timeout_ms: int | None,
        method_timeout_label: str = "general_method_timeout_ms",
    ) -> _TimeoutContext:
        _timeout_ms, _label = _select_singlereq_timeout(
            timeout_options=self.api_options.timeout_options,
            method_timeout_label=method_timeout_label,
            method_timeout_ms=method_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            timeout_ms=timeout_ms,
        )
        return _TimeoutContext(request_ms=_timeout_ms, label=_label)

    def _request_timeout(self, request_timeout_ms: int | None) -> tuple[int, str | None]:
        return _first_valid_timeout(
            (request_timeout_ms, "request_timeout_ms"),
            (self.api_options.timeout_options.request_timeout_ms, "request_timeout_ms"),
        )

    def _multi_request_timeouts(
        self,
        *,
        general_method_timeout_ms: int | None,
        request_timeout_ms: int | None,
        timeout_ms: int | None,
    ) -> Callable[[], _TimeoutContext]:
        """
        A function giving the timeout context of each next request of a
        method that spends a single overall budget over several requests.
        """
        _general_method_timeout_ms, _gmt_label = _first_valid_timeout(
            (general_method_timeout_ms, "general_method_timeout_ms"),
            (timeout_ms, "timeout_ms"),
            (
                self.api_options.timeout_options.general_method_timeout_ms,
                "general_method_timeout_ms",
            ),
        )
        _request_timeout_ms, _rt_label = self._request_timeout(request_timeout_ms)
        timeout_manager = MultiCallTimeoutManager(
            overall_timeout_ms=_general_method_timeout_ms,
            timeout_label=_gmt_label,
        )

        def _next_timeout() -> _TimeoutContext:
            return timeout_manager.remaining_timeout(
                cap_time_ms=_request_timeout_ms,
                cap_timeout_label=_rt_label,
            )

        return _next_timeout

    @property
    def name(self) -> str:
        """The name of this resource."""
        return self._name

    @property
    def keyspace(self) -> str:
        """The keyspace this resource is in."""
        _keyspace = self._database.keyspace
        if _keyspace is None:
            raise ValueError("The database has no keyspace set.")
        return _keyspace

    @property
    def full_name(self) -> str:
        """The fully-qualified name, in the form "keyspace.name"."""
        return f"{self.keyspace}.{self.name}"
