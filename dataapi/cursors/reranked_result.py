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

from dataclasses import dataclass, field
from typing import Any, Generic

from dataapi.cursors.cursor import TRAW


@dataclass
class RerankedResult(Generic[TRAW]):
    """
    One item returned by a find-and-rerank cursor: a document paired with
    the scores that led to its ranking.

    Attributes:
        document: the document, as returned by the Data API (after projection).
        scores: a dictionary of score names to values, e.g. `{"$rerank": -9.1,
            "$vector": 0.83, "$lexical": 0.5}`. It is empty unless the
            search asked for scores with `include_scores`.
    """

    document: TRAW
    scores: dict[str, Any] = field(default_factory=dict)
