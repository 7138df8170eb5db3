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

"""
Conversions between Python values and the extended-JSON forms used by the
Data API for collections, e.g. `{"$date": 1700000000000}` or `{"$uuid": "..."}`.
"""

from __future__ import annotations

import base64
import datetime
from typing import Any

from dataapi.ids import UUID, ObjectId

NAIVE_DATETIME_ERROR_MESSAGE = (
    "Cannot encode a datetime without timezone information: "
    "use e.g. `datetime.datetime.now(datetime.timezone.utc)`."
)


def _encode_datetime(value: datetime.date) -> int:
    if isinstance(value, datetime.datetime):
        if value.utcoffset() is None:
            raise ValueError(NAIVE_DATETIME_ERROR_MESSAGE)
        return int(value.timestamp() * 1000)
    midnight = datetime.datetime(
        value.year, value.month, value.day, tzinfo=datetime.timezone.utc
    )
    return int(midnight.timestamp() * 1000)


def preprocess_collection_payload_value(value: Any) -> Any:
    """Recursively replace dates, UUIDs, ObjectIds and bytes with their EJSON forms."""
    if isinstance(value, dict):
        return {k: preprocess_collection_payload_value(v) for k, v in value.items()}
    elif isinstance(value, (list, tuple)):
        return [preprocess_collection_payload_value(item) for item in value]
    elif isinstance(value, datetime.date):
        return {"$date": _encode_datetime(value)}
    elif isinstance(value, UUID):
        return {"$uuid": str(value)}
    elif isinstance(value, ObjectId):
        return {"$objectId": str(value)}
    elif isinstance(value, bytes):
        return {"$binary": base64.b64encode(value).decode()}
    return value


def postprocess_collection_response_value(value: Any) -> Any:
    """Recursively restore the Python values behind EJSON forms in a response."""
    if isinstance(value, dict):
        keys = set(value.keys())
        if keys == {"$date"}:
            return datetime.datetime.fromtimestamp(
                value["$date"] / 1000.0, tz=datetime.timezone.utc
            )
        elif keys == {"$uuid"}:
            return UUID(value["$uuid"])
        elif keys == {"$objectId"}:
            return ObjectId(value["$objectId"])
        elif keys == {"$binary"}:
            return base64.b64decode(value["$binary"])
        return {k: postprocess_collection_response_value(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [postprocess_collection_response_value(item) for item in value]
    return value


def preprocess_table_payload_value(value: Any) -> Any:
    """
    Tables take plain JSON values: dates and datetimes as ISO strings, UUIDs
    as strings, sets as lists. Binary blobs keep the `$binary` form.
    """
    if isinstance(value, dict):
        return {k: preprocess_table_payload_value(v) for k, v in value.items()}
    elif isinstance(value, (list, tuple, set, frozenset)):
        return [preprocess_table_payload_value(item) for item in value]
    elif isinstance(value, datetime.datetime):
        if value.utcoffset() is None:
            raise ValueError(NAIVE_DATETIME_ERROR_MESSAGE)
        return value.isoformat()
    elif isinstance(value, (datetime.date, datetime.time)):
        return value.isoformat()
    elif isinstance(value, UUID):
        return str(value)
    elif isinstance(value, bytes):
        return {"$binary": base64.b64encode(value).decode()}
    return value


def postprocess_table_response_value(value: Any) -> Any:
    """Table responses are plain JSON except for `$binary` blobs."""
    if isinstance(value, dict):
        if set(value.keys()) == {"$binary"}:
            return base64.b64decode(value["$binary"])
        return {k: postprocess_table_response_value(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [postprocess_table_response_value(item) for item in value]
    return value
