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

import time
from dataclasses import dataclass

import httpx

from dataapi.exceptions.collection_exceptions import (
    CollectionBulkWriteException,
    CollectionDeleteManyException,
    CollectionInsertManyException,
    CollectionUpdateManyException,
    TooManyDocumentsToCountException,
)
from dataapi.exceptions.data_api_exceptions import (
    CursorException,
    DataAPIException,
    DataAPIHttpException,
    DataAPIResponseException,
    DataAPITimeoutException,
    UnexpectedDataAPIResponseException,
)
from dataapi.exceptions.error_descriptors import (
    DataAPIErrorDescriptor,
    DataAPIWarningDescriptor,
)
from dataapi.exceptions.table_exceptions import (
    TableInsertManyException,
    TooManyRowsToCountException,
)
from dataapi.utils.api_options import FullTimeoutOptions

# the timeout setting each kind of single-request method competes with
_METHOD_TIMEOUT_LABELS = {
    "general_method_timeout_ms",
    "collection_admin_timeout_ms",
    "table_admin_timeout_ms",
    "keyspace_admin_timeout_ms",
}


def _min_labeled_timeout(
    *timeouts: tuple[int | None, str | None],
) -> tuple[int, str | None]:
    non_null = [(to, lb) for to, lb in timeouts if to is not None]
    if non_null:
        min_to, min_lb = min(non_null, key=lambda pair: pair[0])
        return (min_to, min_lb)
    return (0, None)


def _select_singlereq_timeout(
    *,
    timeout_options: FullTimeoutOptions,
    method_timeout_label: str,
    method_timeout_ms: int | None,
    request_timeout_ms: int | None = None,
    timeout_ms: int | None = None,
) -> tuple[int, str | None]:
    """
    Determine (and label) the timeout for a method issuing a single request.

    With no explicit arguments the least of the configured request timeout
    and the configured method timeout is used. Otherwise the least of the
    explicitly passed values wins and the configured options are ignored.

    Args:
        timeout_options: the configured timeouts of the calling object.
        method_timeout_label: which method timeout applies, e.g.
            "general_method_timeout_ms" or "table_admin_timeout_ms".
        method_timeout_ms: the per-call override of that method timeout.
        request_timeout_ms: the per-call override of the request timeout.
        timeout_ms: the per-call alias, competing with the other two.

    Returns:
        a (milliseconds, label) pair. Zero milliseconds means no timeout.
    """
    if method_timeout_label not in _METHOD_TIMEOUT_LABELS:
        raise ValueError(f"Unknown method timeout: '{method_timeout_label}'.")
    if all(
        iarg is None for iarg in (method_timeout_ms, request_timeout_ms, timeout_ms)
    ):
        ao_r = timeout_options.request_timeout_ms
        ao_m: int = getattr(timeout_options, method_timeout_label)
        if ao_r < ao_m:
            return (ao_r, "request_timeout_ms")
        return (ao_m, method_timeout_label)
    return _min_labeled_timeout(
        (method_timeout_ms, method_timeout_label),
        (request_timeout_ms, "request_timeout_ms"),
        (timeout_ms, "timeout_ms"),
    )


def _first_valid_timeout(
    *items: tuple[int | None, str | None],
) -> tuple[int, str | None]:
    # items are (milliseconds, label); zero later stands for 'no timeout'
    for item in items:
        if item[0] is not None:
            return item  # type: ignore[return-value]
    return 0, None


def to_dataapi_timeout_exception(
    httpx_timeout: httpx.TimeoutException,
    timeout_context: _TimeoutContext,
) -> DataAPITimeoutException:
    """Translate an httpx timeout into the corresponding Data API exception."""
    text = str(httpx_timeout) or "timed out"
    timeout_ms = timeout_context.nominal_ms or timeout_context.request_ms
    if timeout_ms:
        if timeout_context.label:
            text = (
                f"{text} (timeout honoured: {timeout_context.label} = {timeout_ms} ms)"
            )
        else:
            text = f"{text} (timeout honoured: {timeout_ms} ms)"
    if isinstance(httpx_timeout, httpx.ConnectTimeout):
        timeout_type = "connect"
    elif isinstance(httpx_timeout, httpx.ReadTimeout):
        timeout_type = "read"
    elif isinstance(httpx_timeout, httpx.WriteTimeout):
        timeout_type = "write"
    elif isinstance(httpx_timeout, httpx.PoolTimeout):
        timeout_type = "pool"
    else:
        timeout_type = "generic"
    endpoint: str | None = None
    raw_payload: str | None = None
    try:
        request = httpx_timeout.request
    except RuntimeError:
        # httpx raises if the exception was built without a request
        request = None
    if request is not None:
        endpoint = str(request.url)
        if isinstance(request.content, bytes):
            raw_payload = request.content.decode()
    return DataAPITimeoutException(
        text=text,
        timeout_type=timeout_type,
        endpoint=endpoint,
        raw_payload=raw_payload,
    )


@dataclass
class _TimeoutContext:
    """
    A timeout to obey, plus what is needed to explain it if it fires.

    Args:
        request_ms: how long the next HTTP request may last. This is smaller
            than `nominal_ms` when part of an overall budget is already spent.
        nominal_ms: the timeout as set by the user.
        label: the name of the setting the user knows the timeout by.
    """

    nominal_ms: int | None
    request_ms: int | None
    label: str | None

    def __init__(
        self,
        *,
        request_ms: int | None,
        nominal_ms: int | None = None,
        label: str | None = None,
    ) -> None:
        self.nominal_ms = nominal_ms
        self.request_ms = request_ms
        self.label = label

    def __bool__(self) -> bool:
        return self.nominal_ms is not None or self.request_ms is not None


class MultiCallTimeoutManager:
    """
    Spend one overall time budget across the several requests of a method
    (chunks of insert_many, pages of delete_many, and so on).

    Args:
        overall_timeout_ms: the budget in milliseconds. Zero or None: no limit.
        timeout_label: the name of the setting the budget comes from.

    Attributes:
        started_ms: when the manager was created (epoch milliseconds).
        deadline_ms: when the budget runs out, or None.
    """

    overall_timeout_ms: int | None
    started_ms: int = -1
    deadline_ms: int | None
    timeout_label: str | None

    def __init__(
        self,
        overall_timeout_ms: int | None,
        timeout_label: str | None = None,
    ) -> None:
        self.started_ms = int(time.time() * 1000)
        self.timeout_label = timeout_label
        self.overall_timeout_ms = overall_timeout_ms or None
        if self.overall_timeout_ms is not None:
            self.deadline_ms = self.started_ms + self.overall_timeout_ms
        else:
            self.deadline_ms = None

    def remaining_timeout(
        self, cap_time_ms: int | None = None, cap_timeout_label: str | None = None
    ) -> _TimeoutContext:
        """
        The timeout context for the next request of the method.

        Args:
            cap_time_ms: an upper limit for the result, typically the
                per-request timeout. Zero or None: no cap.
            cap_timeout_label: the name of the setting behind the cap.

        Returns:
            a _TimeoutContext for the next request.

        Raises:
            DataAPITimeoutException: if the deadline has already passed.
        """

        _cap_time_ms = cap_time_ms or None
        if self.deadline_ms is None:
            if _cap_time_ms is None:
                return _TimeoutContext(
                    nominal_ms=self.overall_timeout_ms,
                    request_ms=None,
                    label=self.timeout_label,
                )
            return _TimeoutContext(
                nominal_ms=_cap_time_ms,
                request_ms=_cap_time_ms,
                label=cap_timeout_label,
            )

        now_ms = int(time.time() * 1000)
        if now_ms >= self.deadline_ms:
            if self.timeout_label:
                err_msg = (
                    f"Operation timed out (timeout honoured: {self.timeout_label} "
                    f"= {self.overall_timeout_ms} ms)."
                )
            else:
                err_msg = (
                    "Operation timed out (timeout honoured: "
                    f"{self.overall_timeout_ms} ms)."
                )
            raise DataAPITimeoutException(
                text=err_msg,
                timeout_type="generic",
                endpoint=None,
                raw_payload=None,
            )
        remaining = self.deadline_ms - now_ms
        if _cap_time_ms is not None and remaining > _cap_time_ms:
            return _TimeoutContext(
                nominal_ms=_cap_time_ms,
                request_ms=_cap_time_ms,
                label=cap_timeout_label,
            )
        return _TimeoutContext(
            nominal_ms=self.overall_timeout_ms,
            request_ms=remaining,
            label=self.timeout_label,
        )


__all__ = [
    "CollectionBulkWriteException",
    "CollectionDeleteManyException",
    "CollectionInsertManyException",
    "CollectionUpdateManyException",
    "CursorException",
    "DataAPIErrorDescriptor",
    "DataAPIException",
    "DataAPIHttpException",
    "DataAPIResponseException",
    "DataAPITimeoutException",
    "DataAPIWarningDescriptor",
    "MultiCallTimeoutManager",
    "TableInsertManyException",
    "TooManyDocumentsToCountException",
    "TooManyRowsToCountException",
    "UnexpectedDataAPIResponseException",
]
