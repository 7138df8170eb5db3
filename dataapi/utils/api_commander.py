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

import json
import logging
from types import TracebackType
from typing import Any, Dict, Iterable, Sequence, cast

import httpx

from dataapi.constants import CallerType
from dataapi.exceptions import (
    DataAPIHttpException,
    DataAPIResponseException,
    UnexpectedDataAPIResponseException,
    _TimeoutContext,
    to_dataapi_timeout_exception,
)
from dataapi.settings.defaults import (
    DEFAULT_REDACTED_HEADER_NAMES,
    FIXED_SECRET_PLACEHOLDER,
)
from dataapi.utils.request_tools import (
    HttpMethod,
    log_httpx_request,
    log_httpx_response,
    to_httpx_timeout,
)
from dataapi.utils.user_agents import (
    compose_full_user_agent,
    detect_dataapi_user_agent,
)

user_agent_dataapi = detect_dataapi_user_agent()

logger = logging.getLogger(__name__)


class APICommander:
    """
    The HTTP layer: sends JSON payloads to one Data API URL and returns the
    parsed JSON response, translating timeouts, HTTP error statuses and API
    errors into the corresponding exceptions.

    The synchronous httpx client is shared by all instances (it is
    thread-safe); each instance has its own asynchronous client.
    """

    client = httpx.Client()

    def __init__(
        self,
        *,
        api_endpoint: str,
        path: str,
        headers: dict[str, str | None] = {},
        callers: Sequence[CallerType] = [],
        redacted_header_names: Iterable[str] | None = None,
    ) -> None:
        self.async_client = httpx.AsyncClient()
        self.api_endpoint = api_endpoint.rstrip("/")
        self.path = path.lstrip("/")
        self.headers = headers
        self.callers = callers
        self.redacted_header_names = set(redacted_header_names or [])
        self.upper_full_redacted_header_names = {
            header_name.upper()
            for header_name in (
                self.redacted_header_names | DEFAULT_REDACTED_HEADER_NAMES
            )
        }

        full_user_agent_string = compose_full_user_agent(
            list(self.callers) + [user_agent_dataapi]
        )
        self.caller_header: dict[str, str] = (
            {"User-Agent": full_user_agent_string} if full_user_agent_string else {}
        )
        self.full_headers: dict[str, str] = {
            k: v
            for k, v in {
                "Content-Type": "application/json",
                "Accept": "application/json",
                **self.caller_header,
                **self.headers,
            }.items()
            if v is not None
        }
        self._loggable_headers = {
            k: (
                FIXED_SECRET_PLACEHOLDER
                if k.upper() in self.upper_full_redacted_header_names
                else v
            )
            for k, v in self.full_headers.items()
        }
        self.full_path = "/".join([self.api_endpoint, self.path]).rstrip("/")

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(api_endpoint={self.api_endpoint}, "
            f"path={self.path}, callers={self.callers})"
        )

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, APICommander):
            return all(
                [
                    self.api_endpoint == other.api_endpoint,
                    self.path == other.path,
                    self.headers == other.headers,
                    self.callers == other.callers,
                    self.redacted_header_names == other.redacted_header_names,
                ]
            )
        return False

    async def __aenter__(self) -> APICommander:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None = None,
        exc_value: BaseException | None = None,
        traceback: TracebackType | None = None,
    ) -> None:
        await self.async_client.aclose()

    def _compose_request_url(self, additional_path: str | None) -> str:
        if additional_path:
            return "/".join([self.full_path, additional_path.lstrip("/")])
        return self.full_path

    @staticmethod
    def _encode_payload(payload: dict[str, Any] | None) -> str | None:
        if payload is None:
            return None
        return json.dumps(
            payload,
            allow_nan=False,
            separators=(",", ":"),
            ensure_ascii=False,
        )

    def _raw_response_to_json(
        self,
        raw_response: httpx.Response,
        raise_api_errors: bool,
        payload: dict[str, Any] | None,
    ) -> dict[str, Any]:
        try:
            raw_response_json = cast(Dict[str, Any], json.loads(raw_response.text))
        except ValueError:
            command_desc = "/".join(sorted(payload.keys())) if payload else "(none)"
            raise UnexpectedDataAPIResponseException(
                text=f"Unparseable response from API '{command_desc}' command.",
                raw_response={"raw_response": raw_response.text},
            )
        if not isinstance(raw_response_json, dict):
            raise UnexpectedDataAPIResponseException(
                text="Response from the Data API is not a JSON object.",
                raw_response={"raw_response": raw_response.text},
            )

        if raise_api_errors and raw_response_json.get("errors"):
            logger.warning(
                f"APICommander about to raise from: {raw_response_json['errors']}"
            )
            raise DataAPIResponseException.from_response(
                command=payload,
                raw_response=raw_response_json,
            )

        warnings = (raw_response_json.get("status") or {}).get("warnings") or []
        for warning in warnings:
            logger.warning(f"The Data API returned a warning: {warning}")

        return raw_response_json

    def _prepare_request(
        self,
        *,
        http_method: str,
        payload: dict[str, Any] | None,
        additional_path: str | None,
        request_params: dict[str, Any],
        timeout_context: _TimeoutContext | None,
    ) -> tuple[str, str | None, _TimeoutContext]:
        request_url = self._compose_request_url(additional_path)
        _timeout_context = timeout_context or _TimeoutContext(request_ms=None)
        encoded_payload = self._encode_payload(payload)
        log_httpx_request(
            http_method=http_method,
            full_url=request_url,
            request_params=request_params,
            redacted_request_headers=self._loggable_headers,
            encoded_payload=encoded_payload,
            timeout_context=_timeout_context,
        )
        return request_url, encoded_payload, _timeout_context

    def raw_request(
        self,
        *,
        http_method: str = HttpMethod.POST,
        payload: dict[str, Any] | None = None,
        additional_path: str | None = None,
        request_params: dict[str, Any] = {},
        timeout_context: _TimeoutContext | None = None,
    ) -> httpx.Response:
        request_url, encoded_payload, _timeout_context = self._prepare_request(
            http_method=http_method,
            payload=payload,
            additional_path=additional_path,
            request_params=request_params,
            timeout_context=timeout_context,
        )
        try:
            raw_response = self.client.request(
                method=http_method,
                url=request_url,
                content=(
                    encoded_payload.encode() if encoded_payload is not None else None
                ),
                params=request_params,
                timeout=to_httpx_timeout(_timeout_context),
                headers=self.full_headers,
            )
        except httpx.TimeoutException as timeout_exc:
            raise to_dataapi_timeout_exception(
                timeout_exc, timeout_context=_timeout_context
            )
        try:
            raw_response.raise_for_status()
        except httpx.HTTPStatusError as http_exc:
            raise DataAPIHttpException.from_httpx_error(http_exc)
        log_httpx_response(response=raw_response)
        return raw_response

    async def async_raw_request(
        self,
        *,
        http_method: str = HttpMethod.POST,
        payload: dict[str, Any] | None = None,
        additional_path: str | None = None,
        request_params: dict[str, Any] = {},
        timeout_context: _TimeoutContext | None = None,
    ) -> httpx.Response:
        request_url, encoded_payload, _timeout_context = self._prepare_request(
            http_method=http_method,
            payload=payload,
            additional_path=additional_path,
            request_params=request_params,
            timeout_context=timeout_context,
        )
        try:
            raw_response = await self.async_client.request(
                method=http_method,
                url=request_url,
                content=(
                    encoded_payload.encode() if encoded_payload is not None else None
                ),
                params=request_params,
                timeout=to_httpx_timeout(_timeout_context),
                headers=self.full_headers,
            )
        except httpx.TimeoutException as timeout_exc:
            raise to_dataapi_timeout_exception(
                timeout_exc, timeout_context=_timeout_context
            )
        try:
            raw_response.raise_for_status()
        except httpx.HTTPStatusError as http_exc:
            raise DataAPIHttpException.from_httpx_error(http_exc)
        log_httpx_response(response=raw_response)
        return raw_response

    def request(
        self,
        *,
        http_method: str = HttpMethod.POST,
        payload: dict[str, Any] | None = None,
        additional_path: str | None = None,
        request_params: dict[str, Any] = {},
        raise_api_errors: bool = True,
        timeout_context: _TimeoutContext | None = None,
    ) -> dict[str, Any]:
        raw_response = self.raw_request(
            http_method=http_method,
            payload=payload,
            additional_path=additional_path,
            request_params=request_params,
            timeout_context=timeout_context,
        )
        return self._raw_response_to_json(
            raw_response, raise_api_errors=raise_api_errors, payload=payload
        )

    async def async_request(
        self,
        *,
        http_method: str = HttpMethod.POST,
        payload: dict[str, Any] | None = None,
        additional_path: str | None = None,
        request_params: dict[str, Any] = {},
        raise_api_errors: bool = True,
        timeout_context: _TimeoutContext | None = None,
    ) -> dict[str, Any]:
        raw_response = await self.async_raw_request(
            http_method=http_method,
            payload=payload,
            additional_path=additional_path,
            request_params=request_params,
            timeout_context=timeout_context,
        )
        return self._raw_response_to_json(
            raw_response, raise_api_errors=raise_api_errors, payload=payload
        )
