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

from typing import Sequence

from dataapi import __version__
from dataapi.constants import CallerType


def detect_dataapi_user_agent() -> CallerType:
    package_name = __name__.split(".")[0]
    return (package_name, __version__)


def compose_user_agent_string(
    caller_name: str | None, caller_version: str | None
) -> str | None:
    if not caller_name:
        return None
    if caller_version:
        return f"{caller_name}/{caller_version}"
    return caller_name


def compose_full_user_agent(callers: Sequence[CallerType]) -> str | None:
    """Join the callers into a User-Agent, e.g. "my-app/1.0 dataapi/0.1.0"."""
    ua_strings = [
        ua_string
        for ua_string in (
            compose_user_agent_string(caller_name, caller_version)
            for caller_name, caller_version in callers
        )
        if ua_string
    ]
    return " ".join(ua_strings) if ua_strings else None
