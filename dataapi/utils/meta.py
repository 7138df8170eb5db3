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

import warnings

from deprecation import DeprecatedWarning

KEYSPACE_DEPRECATED_IN = "0.1.0"
KEYSPACE_REMOVED_IN = "1.0.0"
NAMESPACE_DEPRECATION_NOTICE = (
    "The term 'namespace' is being replaced by 'keyspace' throughout the Data "
    "API and this client. Please use 'keyspace' instead."
)


def check_deprecated_alias(
    new_value: str | None,
    deprecated_value: str | None,
    *,
    new_name: str = "keyspace",
    deprecated_name: str = "namespace",
) -> str | None:
    """Normalize a parameter passed under a deprecated alias.

    A DeprecatedWarning is issued whenever the alias is used, and passing both
    is an error. The returned value is the final one for the parameter.
    """

    if deprecated_value is None:
        return new_value

    the_warning = DeprecatedWarning(
        f"Parameter '{deprecated_name}'",
        deprecated_in=KEYSPACE_DEPRECATED_IN,
        removed_in=KEYSPACE_REMOVED_IN,
        details=f"Please use '{new_name}' instead.",
    )
    warnings.warn(
        the_warning,
        stacklevel=3,
    )

    if new_value is None:
        return deprecated_value
    msg = (
        f"Parameters `{new_name}` and `{deprecated_name}` "
        "(a deprecated alias for the former) cannot be passed at the same time."
    )
    raise ValueError(msg)
