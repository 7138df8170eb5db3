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

# Destinations: hosted ("astra") environments and self-deployed ("local") ones
DATA_API_ENVIRONMENT_PROD = "prod"
DATA_API_ENVIRONMENT_DEV = "dev"
DATA_API_ENVIRONMENT_TEST = "test"
DATA_API_ENVIRONMENT_DSE = "dse"
DATA_API_ENVIRONMENT_HCD = "hcd"
DATA_API_ENVIRONMENT_CASSANDRA = "cassandra"
DATA_API_ENVIRONMENT_OTHER = "other"

# Keyspace and URL composition
DEFAULT_KEYSPACE_NAME = "default_keyspace"
DEFAULT_LOCAL_API_ENDPOINT = "http://localhost:8181"
API_PATH_ENV_MAP = {
    DATA_API_ENVIRONMENT_PROD: "/api/json",
    DATA_API_ENVIRONMENT_DEV: "/api/json",
    DATA_API_ENVIRONMENT_TEST: "/api/json",
    #
    DATA_API_ENVIRONMENT_DSE: "",
    DATA_API_ENVIRONMENT_HCD: "",
    DATA_API_ENVIRONMENT_CASSANDRA: "",
    DATA_API_ENVIRONMENT_OTHER: "",
}
API_VERSION_ENV_MAP = {
    DATA_API_ENVIRONMENT_PROD: "v1",
    DATA_API_ENVIRONMENT_DEV: "v1",
    DATA_API_ENVIRONMENT_TEST: "v1",
    #
    DATA_API_ENVIRONMENT_DSE: "v1",
    DATA_API_ENVIRONMENT_HCD: "v1",
    DATA_API_ENVIRONMENT_CASSANDRA: "v1",
    DATA_API_ENVIRONMENT_OTHER: "v1",
}

# Limits advertised by the Data API
DEFAULT_MAX_COUNT = 1000
DEFAULT_MAX_CHUNK_SIZE = 100
DEFAULT_MAX_PAGE_SIZE = 20

# Batch dispatch defaults
DEFAULT_INSERT_MANY_CHUNK_SIZE = 50
DEFAULT_INSERT_MANY_CONCURRENCY = 20
DEFAULT_BULK_WRITE_CONCURRENCY = 1

# Timeouts (milliseconds; zero means no timeout)
DEFAULT_REQUEST_TIMEOUT_MS = 10000
DEFAULT_GENERAL_METHOD_TIMEOUT_MS = 30000
DEFAULT_COLLECTION_ADMIN_TIMEOUT_MS = 60000
DEFAULT_TABLE_ADMIN_TIMEOUT_MS = 30000
DEFAULT_KEYSPACE_ADMIN_TIMEOUT_MS = 30000

# Headers
DEFAULT_DATA_API_AUTH_HEADER = "Token"
EMBEDDING_HEADER_API_KEY = "X-Embedding-Api-Key"

# Redaction of secrets in string representations and logs
SECRETS_REDACT_ENDING = "..."
SECRETS_REDACT_CHAR = "*"
SECRETS_REDACT_ENDING_LENGTH = 3
FIXED_SECRET_PLACEHOLDER = "***"
DEFAULT_REDACTED_HEADER_NAMES = {
    DEFAULT_DATA_API_AUTH_HEADER,
    EMBEDDING_HEADER_API_KEY,
}
