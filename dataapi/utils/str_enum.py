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

from enum import Enum, EnumMeta
from typing import TypeVar

T = TypeVar("T", bound="StrEnum")


class StrEnumMeta(EnumMeta):
    def _name_lookup(cls, value: str) -> str | None:
        """Find the member name matching a string, by name or by value, or None."""
        members = {k: v.value for k, v in cls._member_map_.items()}
        if value in members:
            return value
        u_value = value.upper()
        for name, member_value in members.items():
            if name.upper() == u_value or str(member_value).upper() == u_value:
                return name
        return None

    def __contains__(cls, value: object) -> bool:
        if isinstance(value, str):
            return cls._name_lookup(value) is not None
        return False


class StrEnum(Enum, metaclass=StrEnumMeta):
    @classmethod
    def coerce(cls: type[T], value: str | T) -> T:
        """
        Return the enum member for a member or a (case-insensitive) string.

        Raises:
            ValueError: if nothing in the enum matches the provided value.
        """

        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            name = cls._name_lookup(value)
            if name is not None:
                return cls[name]
        raise ValueError(
            f"Invalid value '{value}' for {cls.__name__}. "
            f"Allowed values are: {[e.value for e in cls]}"
        )
