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

from dataclasses import dataclass
from typing import Any

import httpx

from dataapi.exceptions.error_descriptors import (
    DataAPIErrorDescriptor,
    DataAPIWarningDescriptor,
)


class DataAPIException(Exception):
    """
    Root of all errors specific to talking with the Data API, for instance
    a response reporting errors, a timeout, or a malformed response.
    Plain network failures surface as the underlying httpx errors instead.
    """

    pass


@dataclass
class DataAPIResponseException(DataAPIException):
    """
    The Data API answered with HTTP 200 but the response lists errors,
    possibly next to partial results.

    Attributes:
        text: a summary of the errors.
        command: the payload that was sent and led to this response.
        raw_response: the full JSON response.
        error_descriptors: one DataAPIErrorDescriptor per item in "errors".
        warning_descriptors: one DataAPIWarningDescriptor per returned warning.
    """

    text: str | None
    command: dict[str, Any] | None
    raw_response: dict[str, Any]
    error_descriptors: list[DataAPIErrorDescriptor]
    warning_descriptors: list[DataAPIWarningDescriptor]

    def __init__(
        self,
        text: str | None,
        *,
        command: dict[str, Any] | None,
        raw_response: dict[str, Any],
        error_descriptors: list[DataAPIErrorDescriptor],
        warning_descriptors: list[DataAPIWarningDescriptor],
    ) -> None:
        super().__init__(text)
        self.text = text
        self.command = command
        self.raw_response = raw_response
        self.error_descriptors = error_descriptors
        self.warning_descriptors = warning_descriptors

    def __str__(self) -> str:
        return self.text or ""

    @staticmethod
    def from_response(
        *,
        command: dict[str, Any] | None,
        raw_response: dict[str, Any],
    ) -> DataAPIResponseException:
        """Build the exception out of a raw response containing errors."""

        error_descriptors = [
            DataAPIErrorDescriptor(error_dict)
            for error_dict in (raw_response or {}).get("errors") or []
        ]
        warning_descriptors = [
            DataAPIWarningDescriptor(warning_dict)
            for warning_dict in ((raw_response or {}).get("status") or {}).get(
                "warnings"
            )
            or []
        ]
        summaries = [e_d.summary() for e_d in error_descriptors]
        if len(summaries) == 1:
            text = summaries[0]
        elif summaries:
            joined = "; ".join(
                f"[{summ_i + 1}] {summ_s}" for summ_i, summ_s in enumerate(summaries)
            )
            text = f"[{len(summaries)} errors collected] {joined}"
        else:
            text = ""
        return DataAPIResponseException(
            text,
            command=command,
            raw_response=raw_response,
            error_descriptors=error_descriptors,
            warning_descriptors=warning_descriptors,
        )


@dataclass
class DataAPIHttpException(DataAPIException, httpx.HTTPStatusError):
    """
    The Data API answered with an HTTP 4xx or 5xx status.

    This is still an `httpx.HTTPStatusError`; in addition any error
    descriptors found in the body are exposed.

    Attributes:
        text: a text message about the exception.
        error_descriptors: the DataAPIErrorDescriptor objects found in the body.
    """

    text: str | None
    error_descriptors: list[DataAPIErrorDescriptor]

    def __init__(
        self,
        text: str | None,
        *,
        httpx_error: httpx.HTTPStatusError,
        error_descriptors: list[DataAPIErrorDescriptor],
    ) -> None:
        DataAPIException.__init__(self, text)
        httpx.HTTPStatusError.__init__(
            self,
            message=str(httpx_error),
            request=httpx_error.request,
            response=httpx_error.response,
        )
        self.text = text
        self.httpx_error = httpx_error
        self.error_descriptors = error_descriptors

    def __str__(self) -> str:
        return self.text or str(self.httpx_error)

    @classmethod
    def from_httpx_error(
        cls,
        httpx_error: httpx.HTTPStatusError,
    ) -> DataAPIHttpException:
        """Wrap an httpx status error, parsing the body for error descriptors."""

        raw_response: dict[str, Any]
        try:
            raw_response = httpx_error.response.json() or {}
        except ValueError:
            raw_response = {}
        if not isinstance(raw_response, dict):
            raw_response = {}
        error_descriptors = [
            DataAPIErrorDescriptor(error_dict)
            for error_dict in raw_response.get("errors") or []
        ]
        if error_descriptors:
            text = f"{error_descriptors[0].summary()}. {httpx_error}"
        else:
            text = str(httpx_error)
        return cls(
            text=text,
            httpx_error=httpx_error,
            error_descriptors=error_descriptors,
        )


@dataclass
class DataAPITimeoutException(DataAPIException):
    """
    A Data API operation ran out of time. This can be a single HTTP request
    or the overall budget of a method spanning several requests (such as
    a paginated delete_many or a chunked insert_many).

    Attributes:
        text: a textual description of the error.
        timeout_type: "connect", "read", "write" or "pool" for an HTTP request,
            "generic" when no single request is responsible.
        endpoint: the URL of the timed-out request, if any.
        raw_payload: the payload of the timed-out request, if any.
    """

    text: str
    timeout_type: str
    endpoint: str | None
    raw_payload: str | None

    def __init__(
        self,
        text: str,
        *,
        timeout_type: str,
        endpoint: str | None,
        raw_payload: str | None,
    ) -> None:
        super().__init__(text)
        self.text = text
        self.timeout_type = timeout_type
        self.endpoint = endpoint
        self.raw_payload = raw_payload


@dataclass
class CursorException(DataAPIException):
    """
    A cursor operation is not allowed in the current cursor state, e.g.
    changing the filter of a cursor that is already being consumed.

    Attributes:
        text: a text message about the exception.
        cursor_state: the state of the cursor when this happened.
    """

    text: str
    cursor_state: str

    def __init__(self, text: str, *, cursor_state: str) -> None:
        super().__init__(text)
        self.text = text
        self.cursor_state = cursor_state


@dataclass
class UnexpectedDataAPIResponseException(DataAPIException):
    """
    The response does not have the shape the command requires, for instance
    an insertOne response without "insertedIds" or a find without "data".

    Attributes:
        text: a text message about the exception.
        raw_response: the response, as a dict, if one could be parsed.
    """

    text: str
    raw_response: dict[str, Any] | None

    def __init__(self, text: str, raw_response: dict[str, Any] | None) -> None:
        super().__init__(text)
        self.text = text
        self.raw_response = raw_response
