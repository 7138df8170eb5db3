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

from typing import Callable

from dataapi.exceptions import UnexpectedDataAPIResponseException
from dataapi.runner import DataAPIResponse


def check_upper_bound(upper_bound: int, max_count: int) -> None:
    """
    Reject an upper bound the server could never honour, before any request.

    Raises:
        ValueError: if the bound is not positive or exceeds `max_count`.
    """
    if upper_bound <= 0:
        raise ValueError(f"The upper bound must be positive (got {upper_bound}).")
    if upper_bound > max_count:
        raise ValueError(
            f"The upper bound cannot exceed {max_count}, the maximum count "
            f"supported by the server (got {upper_bound})."
        )


def evaluate_count(
    response: DataAPIResponse,
    *,
    upper_bound: int,
    exception_class: Callable[..., Exception],
    items_name: str = "Document",
) -> int:
    """
    Read the count from a `countDocuments` response, enforcing the bound.

    Raises:
        UnexpectedDataAPIResponseException: if the response has no count.
        exception_class: with `server_max_count_exceeded=True` if the server
            stopped counting, or False if the count exceeds `upper_bound`.
    """
    if "count" not in response.status:
        raise UnexpectedDataAPIResponseException(
            text="Faulty response from countDocuments API command.",
            raw_response=response.raw_response,
        )
    count: int = response.status["count"]
    if response.status.get("moreData", False):
        raise exception_class(
            text=f"{items_name} count exceeds {count}, the maximum allowed by the server",
            server_max_count_exceeded=True,
        )
    if count > upper_bound:
        raise exception_class(
            text=f"{items_name} count exceeds required upper bound",
            server_max_count_exceeded=False,
        )
    return count
