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

import copy
from typing import Any, Iterable

from dataapi.constants import (
    FilterType,
    HybridSortType,
    ProjectionType,
    SortType,
    normalize_optional_projection,
)

COMMAND_BODY_KEYS = (
    "filter",
    "sort",
    "projection",
    "document",
    "documents",
    "update",
    "replacement",
    "options",
)


class Command:
    """
    One named Data API command, e.g. `{"findOne": {"filter": {...}}}`.

    Commands are immutable: every `with_*` method returns a new Command and
    leaves the original untouched. All values are deep-copied on the way in
    and on the way out, so no two commands ever share mutable state.
    Keys whose value is None are left out of the payload, as are empty options.

    Args:
        name: the command name, e.g. "insertMany".
        body: the initial content of the command, if any.

    Example:
        >>> cmd = Command("find").with_filter({"a": 1}).with_option("limit", 3)
        >>> cmd.to_payload()
        {'find': {'filter': {'a': 1}, 'options': {'limit': 3}}}
    """

    def __init__(self, name: str, body: dict[str, Any] | None = None) -> None:
        if not name:
            raise ValueError("A command must have a non-empty name.")
        self._name = name
        self._body: dict[str, Any] = copy.deepcopy(body) if body else {}

    def __repr__(self) -> str:
        return f'{self.__class__.__name__}("{self._name}", {self._body})'

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, Command):
            return self._name == other._name and self._body == other._body
        return False

    @property
    def name(self) -> str:
        return self._name

    @property
    def body(self) -> dict[str, Any]:
        """A copy of the body of the command."""
        return copy.deepcopy(self._body)

    @property
    def options(self) -> dict[str, Any]:
        """A copy of the options of the command (empty if none)."""
        return copy.deepcopy(self._body.get("options") or {})

    def _with_key(self, key: str, value: Any) -> Command:
        new_body = copy.deepcopy(self._body)
        if value is None:
            new_body.pop(key, None)
        else:
            new_body[key] = copy.deepcopy(value)
        return Command(self._name, new_body)

    def with_field(self, key: str, value: Any) -> Command:
        """Set any top-level field of the body (e.g. "name", "definition")."""
        return self._with_key(key, value)

    def with_filter(self, filter: FilterType | None) -> Command:
        return self._with_key("filter", filter)

    def with_sort(self, sort: SortType | None) -> Command:
        return self._with_key("sort", sort or None)

    def with_projection(self, projection: ProjectionType | None) -> Command:
        return self._with_key("projection", normalize_optional_projection(projection))

    def with_document(self, document: dict[str, Any] | None) -> Command:
        return self._with_key("document", document)

    def with_documents(self, documents: Iterable[dict[str, Any]] | None) -> Command:
        return self._with_key(
            "documents", list(documents) if documents is not None else None
        )

    def with_update(self, update: dict[str, Any] | None) -> Command:
        return self._with_key("update", update)

    def with_replacement(self, replacement: dict[str, Any] | None) -> Command:
        return self._with_key("replacement", replacement)

    def with_options(self, options: dict[str, Any] | None) -> Command:
        """
        Merge the provided options into the existing ones. Options whose
        value is None are removed.
        """
        merged = {**(self._body.get("options") or {}), **(options or {})}
        return self._with_key(
            "options",
            {k: v for k, v in merged.items() if v is not None},
        )

    def with_option(self, key: str, value: Any) -> Command:
        return self.with_options({key: value})

    def to_payload(self) -> dict[str, Any]:
        """The JSON-ready payload of the command, as sent to the Data API."""
        payload_body = {
            k: copy.deepcopy(v)
            for k, v in self._body.items()
            if v is not None and not (k == "options" and not v)
        }
        return {self._name: payload_body}


def find_command(
    *,
    filter: FilterType | None = None,
    projection: ProjectionType | None = None,
    sort: SortType | None = None,
    options: dict[str, Any] | None = None,
) -> Command:
    return (
        Command("find")
        .with_filter(filter)
        .with_projection(projection)
        .with_sort(sort)
        .with_options(options)
    )


def find_and_rerank_command(
    *,
    filter: FilterType | None = None,
    projection: ProjectionType | None = None,
    sort: HybridSortType | None = None,
    options: dict[str, Any] | None = None,
) -> Command:
    return (
        Command("findAndRerank")
        .with_filter(filter)
        .with_projection(projection)
        .with_sort(sort)
        .with_options(options)
    )


def insert_one_command(document: dict[str, Any]) -> Command:
    return Command("insertOne").with_document(document)


def insert_many_command(
    documents: Iterable[dict[str, Any]], *, ordered: bool
) -> Command:
    return (
        Command("insertMany")
        .with_documents(documents)
        .with_options({"ordered": ordered})
    )


def update_one_command(
    filter: FilterType,
    update: dict[str, Any],
    *,
    upsert: bool = False,
    sort: SortType | None = None,
) -> Command:
    return (
        Command("updateOne")
        .with_filter(filter)
        .with_update(update)
        .with_sort(sort)
        .with_options({"upsert": upsert})
    )


def update_many_command(
    filter: FilterType, update: dict[str, Any], *, upsert: bool = False
) -> Command:
    return (
        Command("updateMany")
        .with_filter(filter)
        .with_update(update)
        .with_options({"upsert": upsert})
    )


def replace_one_command(
    filter: FilterType,
    replacement: dict[str, Any],
    *,
    upsert: bool = False,
    sort: SortType | None = None,
) -> Command:
    return (
        Command("findOneAndReplace")
        .with_filter(filter)
        .with_replacement(replacement)
        .with_sort(sort)
        .with_options({"upsert": upsert})
    )


def delete_one_command(filter: FilterType, *, sort: SortType | None = None) -> Command:
    return Command("deleteOne").with_filter(filter).with_sort(sort)


def delete_many_command(filter: FilterType) -> Command:
    return Command("deleteMany").with_filter(filter)


__all__ = [
    "Command",
    "delete_many_command",
    "delete_one_command",
    "find_command",
    "insert_many_command",
    "insert_one_command",
    "replace_one_command",
    "update_many_command",
    "update_one_command",
]
