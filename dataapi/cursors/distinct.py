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

import hashlib
import json
from typing import Any, Callable, Iterable

ERROR_NO_EMPTY_SAFE_KEYSTART = (
    "The 'key' parameter for distinct cannot be empty or start with a list index."
)
ERROR_NO_EMPTY_KEYPATH = "Field path specification cannot be empty or have empty segments"


def _maybe_valid_list_index(key_block: str) -> int | None:
    # '0', '1' is good. '00', '01', '-30' are not.
    try:
        kb_index = int(key_block)
    except ValueError:
        return None
    if kb_index >= 0 and key_block == str(kb_index):
        return kb_index
    return None


def _create_document_key_extractor(
    key: str,
) -> Callable[[dict[str, Any]], Iterable[Any]]:
    """
    A function extracting the values found at a dotted `key` in a document.
    Lists met along the way are unrolled, and numeric segments also address
    list items, so "a.0.b" reads `b` from the first item of list `a`.
    """
    key_blocks0 = [(kb_str, _maybe_valid_list_index(kb_str)) for kb_str in key.split(".")]
    if any(kb_str == "" for kb_str, _ in key_blocks0):
        raise ValueError(ERROR_NO_EMPTY_KEYPATH)

    def _extract_with_key_blocks(
        key_blocks: list[tuple[str, int | None]], value: Any
    ) -> Iterable[Any]:
        if key_blocks == []:
            if isinstance(value, list):
                yield from value
            else:
                yield value
            return
        rest_key_blocks = key_blocks[1:]
        k_str, k_int = key_blocks[0]
        if isinstance(value, dict):
            if k_str in value:
                yield from _extract_with_key_blocks(rest_key_blocks, value[k_str])
        elif isinstance(value, list):
            if k_int is not None:
                if len(value) > k_int:
                    yield from _extract_with_key_blocks(rest_key_blocks, value[k_int])
            else:
                for item in value:
                    yield from _extract_with_key_blocks(key_blocks, item)

    def _item_extractor(document: dict[str, Any]) -> Iterable[Any]:
        return _extract_with_key_blocks(key_blocks0, document)

    return _item_extractor


def _reduce_distinct_key_to_safe(key: str) -> str:
    """
    The part of the key usable as projection: up to the first list index.
    Projecting on "x.0" would be read as a field named "0" by the API.
    """
    valid_portion: list[str] = []
    for block in key.split("."):
        if _maybe_valid_list_index(block) is not None:
            break
        valid_portion.append(block)
    if valid_portion == []:
        raise ValueError(ERROR_NO_EMPTY_SAFE_KEYSTART)
    if valid_portion[0] == "":
        raise ValueError(ERROR_NO_EMPTY_KEYPATH)
    return ".".join(valid_portion)


def _reduce_distinct_key_to_shallow_safe(key: str) -> str:
    """For tables the projection stops at the column: the first segment."""
    return _reduce_distinct_key_to_safe(key).split(".")[0]


class DistinctCollector:
    """
    Accumulates the distinct values found at a key over a stream of
    documents, keeping the order of first appearance.

    Values are compared through an MD5 hash of their normalized JSON form,
    so that unhashable values (dicts, lists) can be de-duplicated too.

    Args:
        key: the dotted path of the values to collect.
        normalizer: makes values JSON-serializable (dates, UUIDs, ...).
    """

    def __init__(self, key: str, normalizer: Callable[[Any], Any]) -> None:
        self._extractor = _create_document_key_extractor(key)
        self._normalizer = normalizer
        self._item_hashes: set[str] = set()
        self.values: list[Any] = []

    def _hash(self, item: Any) -> str:
        _normalized_json = json.dumps(
            self._normalizer(item), sort_keys=True, separators=(",", ":")
        )
        return hashlib.md5(_normalized_json.encode()).hexdigest()

    def feed(self, document: dict[str, Any]) -> None:
        for item in self._extractor(document):
            item_hash = self._hash(item)
            if item_hash not in self._item_hashes:
                self._item_hashes.add(item_hash)
                self.values.append(item)
