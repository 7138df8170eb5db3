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


@dataclass
class DataAPIErrorDescriptor:
    """
    A single entry of the "errors" list in a Data API response.

    Responses with HTTP status 200 may still carry errors, possibly next
    to partial results (e.g. an insertMany where a few documents are rejected).

    Attributes:
        title: the "title" field of the error, if any.
        error_code: the "errorCode" field of the error.
        message: the "message" field of the error.
        family: the "family" field of the error.
        scope: the "scope" field of the error.
        id: the "id" field of the error.
        attributes: any other key-value pair found in the error.
    """

    title: str | None
    error_code: str | None
    message: str | None
    family: str | None
    scope: str | None
    id: str | None
    attributes: dict[str, Any]

    _known_dict_fields = {"title", "errorCode", "message", "family", "scope", "id"}

    def __init__(self, error_dict: dict[str, Any] | str) -> None:
        if isinstance(error_dict, str):
            error_dict = {"message": error_dict}
        self.title = error_dict.get("title")
        self.error_code = error_dict.get("errorCode")
        self.message = error_dict.get("message")
        self.family = error_dict.get("family")
        self.scope = error_dict.get("scope")
        self.id = error_dict.get("id")
        self.attributes = {
            k: v for k, v in error_dict.items() if k not in self._known_dict_fields
        }

    def __repr__(self) -> str:
        pieces = [
            f"{self.title!r}" if self.title else None,
            f"error_code={self.error_code!r}" if self.error_code else None,
            f"message={self.message!r}" if self.message else None,
            f"family={self.family!r}" if self.family else None,
            f"scope={self.scope!r}" if self.scope else None,
            f"id={self.id!r}" if self.id else None,
            f"attributes={self.attributes!r}" if self.attributes else None,
        ]
        return f"{self.__class__.__name__}({', '.join(pc for pc in pieces if pc)})"

    def __str__(self) -> str:
        return self.summary()

    def summary(self) -> str:
        """A one-line description, e.g. "Title: message (ERROR_CODE)"."""
        text_parts = [part for part in (self.title, self.message) if part]
        text = ": ".join(text_parts)
        if self.error_code:
            return f"{text} ({self.error_code})" if text else self.error_code
        return text


@dataclass
class DataAPIWarningDescriptor(DataAPIErrorDescriptor):
    """
    A single warning returned by the Data API alongside a successful response.
    Same structure as `DataAPIErrorDescriptor`.
    """

    def __init__(self, warning_dict: dict[str, Any] | str) -> None:
        DataAPIErrorDescriptor.__init__(self, warning_dict)
