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
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable

from dataapi.exceptions import (
    DataAPIErrorDescriptor,
    DataAPIWarningDescriptor,
    _TimeoutContext,
)
from dataapi.paging import PageContinuation
from dataapi.utils.api_commander import APICommander
from dataapi.utils.ejson import (
    postprocess_collection_response_value,
    postprocess_table_response_value,
    preprocess_collection_payload_value,
    preprocess_table_payload_value,
)

if TYPE_CHECKING:
    from dataapi.commands import Command


logger = logging.getLogger(__name__)


def _identity(value: Any) -> Any:
    return value


@dataclass
class DataAPIResponse:
    """
    The envelope of a Data API response. A response can carry data and
    errors at the same time (e.g. a partially failed insertMany).

    Attributes:
        status: the "status" part of the response (counts, inserted ids...).
        data: the "data" part of the response (documents, nextPageState...).
        errors: the errors in the response, as descriptors.
        warnings: the warnings found in the status, as descriptors.
        raw_response: the whole response as received, after value conversion.
    """

    status: dict[str, Any]
    data: dict[str, Any]
    errors: list[DataAPIErrorDescriptor] = field(default_factory=list)
    warnings: list[DataAPIWarningDescriptor] = field(default_factory=list)
    raw_response: dict[str, Any] = field(default_factory=dict, repr=False)

    @staticmethod
    def from_json(response_json: dict[str, Any]) -> DataAPIResponse:
        status = response_json.get("status") or {}
        return DataAPIResponse(
            status=status,
            data=response_json.get("data") or {},
            errors=[
                DataAPIErrorDescriptor(err_dict)
                for err_dict in response_json.get("errors") or []
            ],
            warnings=[
                DataAPIWarningDescriptor(warn_dict)
                for warn_dict in status.get("warnings") or []
            ],
            raw_response=response_json,
        )

    @property
    def documents(self) -> list[dict[str, Any]]:
        """The documents (or rows) of a find page, empty if none."""
        return self.data.get("documents") or []

    @property
    def document(self) -> dict[str, Any] | None:
        return self.data.get("document")

    @property
    def continuation(self) -> PageContinuation:
        return PageContinuation.from_response(self)


class CommandRunner:
    """
    The single point through which facades (collections, tables, databases,
    admins) send their commands. It converts the payload values, hands the
    payload to the APICommander and wraps the result in a DataAPIResponse.

    Args:
        api_commander: the HTTP transport bound to the target URL.
        payload_converter: applied to the whole payload before sending.
        response_converter: applied to the whole response after receiving.
    """

    def __init__(
        self,
        api_commander: APICommander,
        *,
        payload_converter: Callable[[Any], Any] = _identity,
        response_converter: Callable[[Any], Any] = _identity,
    ) -> None:
        self.api_commander = api_commander
        self.payload_converter = payload_converter
        self.response_converter = response_converter

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.api_commander})"

    @staticmethod
    def for_collection(api_commander: APICommander) -> CommandRunner:
        return CommandRunner(
            api_commander,
            payload_converter=preprocess_collection_payload_value,
            response_converter=postprocess_collection_response_value,
        )

    @staticmethod
    def for_table(api_commander: APICommander) -> CommandRunner:
        return CommandRunner(
            api_commander,
            payload_converter=preprocess_table_payload_value,
            response_converter=postprocess_table_response_value,
        )

    def execute(
        self,
        command: Command,
        *,
        timeout_context: _TimeoutContext | None = None,
        raise_api_errors: bool = True,
    ) -> DataAPIResponse:
        """
        Send a command and return its response.

        Args:
            command: the Command to run.
            timeout_context: the timeout for the request.
            raise_api_errors: if True (default), a response with "errors"
                raises DataAPIResponseException. Otherwise the errors are
                returned in the response for the caller to inspect.

        Returns:
            a DataAPIResponse.
        """
        raw_response = self.api_commander.request(
            payload=self.payload_converter(command.to_payload()),
            raise_api_errors=raise_api_errors,
            timeout_context=timeout_context,
        )
        return DataAPIResponse.from_json(self.response_converter(raw_response))

    async def async_execute(
        self,
        command: Command,
        *,
        timeout_context: _TimeoutContext | None = None,
        raise_api_errors: bool = True,
    ) -> DataAPIResponse:
        """The coroutine counterpart of `execute`."""
        raw_response = await self.api_commander.async_request(
            payload=self.payload_converter(command.to_payload()),
            raise_api_errors=raise_api_errors,
            timeout_context=timeout_context,
        )
        return DataAPIResponse.from_json(self.response_converter(raw_response))
