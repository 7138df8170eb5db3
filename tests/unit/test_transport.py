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

import time

import httpx
import pytest
from pytest_httpserver import HTTPServer
from werkzeug import Request, Response

from dataapi.exceptions import (
    DataAPIHttpException,
    DataAPIResponseException,
    DataAPITimeoutException,
    UnexpectedDataAPIResponseException,
    _TimeoutContext,
)
from dataapi.settings.defaults import FIXED_SECRET_PLACEHOLDER
from dataapi.utils.api_commander import APICommander
from dataapi.utils.request_tools import HttpMethod

BASE_PATH = "/v1/ks"


def _make_commander(httpserver: HTTPServer, **kwargs: object) -> APICommander:
    return APICommander(
        api_endpoint=httpserver.url_for("/"),
        path=BASE_PATH,
        **kwargs,  # type: ignore[arg-type]
    )


@pytest.fixture
def commander(httpserver: HTTPServer) -> APICommander:
    return _make_commander(
        httpserver,
        headers={"Token": "AstraCS:secret", "X-Unused": None},
        callers=[("my-app", "1.2")],
    )


class TestAPICommander:
    @pytest.mark.describe("test of APICommander url and headers")
    def test_commander_url_and_headers(self, httpserver: HTTPServer) -> None:
        cmd = _make_commander(
            httpserver,
            headers={"Token": "AstraCS:secret", "X-Unused": None},
            callers=[("my-app", "1.2"), ("no-version", None)],
            redacted_header_names=["x-custom-secret"],
        )
        assert cmd.full_path == httpserver.url_for("/v1/ks")
        assert "X-Unused" not in cmd.full_headers
        assert cmd.full_headers["Content-Type"] == "application/json"
        user_agent = cmd.full_headers["User-Agent"]
        assert user_agent.startswith("my-app/1.2 no-version dataapi/")
        assert cmd._loggable_headers["Token"] == FIXED_SECRET_PLACEHOLDER
        assert cmd == _make_commander(
            httpserver,
            headers={"Token": "AstraCS:secret", "X-Unused": None},
            callers=[("my-app", "1.2"), ("no-version", None)],
            redacted_header_names=["x-custom-secret"],
        )
        assert cmd != _make_commander(httpserver)

    @pytest.mark.describe("test of APICommander successful request, sync")
    def test_commander_request_sync(
        self,
        httpserver: HTTPServer,
        commander: APICommander,
    ) -> None:
        httpserver.expect_oneshot_request(
            BASE_PATH,
            method=HttpMethod.POST,
            headers={"Token": "AstraCS:secret"},
            json={"findCollections": {}},
        ).respond_with_json({"status": {"collections": ["a", "b"]}})
        response = commander.request(payload={"findCollections": {}})
        assert response == {"status": {"collections": ["a", "b"]}}
        sent_request, _ = httpserver.log[0]
        assert sent_request.headers["User-Agent"].startswith("my-app/1.2 dataapi/")

    @pytest.mark.describe("test of APICommander API errors, sync")
    def test_commander_api_errors_sync(
        self,
        httpserver: HTTPServer,
        commander: APICommander,
    ) -> None:
        error_response = {
            "status": {"insertedIds": ["a"]},
            "errors": [
                {
                    "errorCode": "DOCUMENT_ALREADY_EXISTS",
                    "message": "Document already exists",
                    "family": "REQUEST",
                    "extra": 123,
                }
            ],
        }
        httpserver.expect_request(
            BASE_PATH,
            method=HttpMethod.POST,
        ).respond_with_json(error_response)

        with pytest.raises(DataAPIResponseException) as exc:
            commander.request(payload={"insertMany": {"documents": []}})
        assert str(exc.value) == "Document already exists (DOCUMENT_ALREADY_EXISTS)"
        assert exc.value.command == {"insertMany": {"documents": []}}
        assert exc.value.raw_response == error_response
        descriptor = exc.value.error_descriptors[0]
        assert descriptor.error_code == "DOCUMENT_ALREADY_EXISTS"
        assert descriptor.family == "REQUEST"
        assert descriptor.attributes == {"extra": 123}

        # with raise_api_errors=False the errors come back in the response
        response = commander.request(
            payload={"insertMany": {"documents": []}},
            raise_api_errors=False,
        )
        assert response == error_response

    @pytest.mark.describe("test of APICommander multiple errors text")
    def test_commander_multiple_errors(
        self,
        httpserver: HTTPServer,
        commander: APICommander,
    ) -> None:
        httpserver.expect_oneshot_request(
            BASE_PATH,
            method=HttpMethod.POST,
        ).respond_with_json(
            {
                "errors": [
                    {"errorCode": "E1", "message": "first"},
                    {"message": "second"},
                ]
            }
        )
        with pytest.raises(DataAPIResponseException) as exc:
            commander.request(payload={"find": {}})
        assert str(exc.value) == "[2 errors collected] [1] first (E1); [2] second"
        assert len(exc.value.error_descriptors) == 2

    @pytest.mark.describe("test of APICommander HTTP error statuses, sync")
    def test_commander_http_errors_sync(
        self,
        httpserver: HTTPServer,
        commander: APICommander,
    ) -> None:
        httpserver.expect_oneshot_request(
            BASE_PATH,
            method=HttpMethod.POST,
        ).respond_with_json(
            {"errors": [{"errorCode": "UNAUTHENTICATED", "message": "bad token"}]},
            status=401,
        )
        with pytest.raises(DataAPIHttpException) as exc:
            commander.request(payload={"findCollections": {}})
        assert isinstance(exc.value, httpx.HTTPStatusError)
        assert exc.value.response.status_code == 401
        assert exc.value.error_descriptors[0].error_code == "UNAUTHENTICATED"
        assert str(exc.value).startswith("bad token (UNAUTHENTICATED). ")

        httpserver.expect_oneshot_request(
            BASE_PATH,
            method=HttpMethod.POST,
        ).respond_with_data("Internal Server Error", status=500)
        with pytest.raises(DataAPIHttpException) as exc2:
            commander.request(payload={"findCollections": {}})
        assert exc2.value.response.status_code == 500
        assert exc2.value.error_descriptors == []

    @pytest.mark.describe("test of APICommander unparseable responses, sync")
    def test_commander_unexpected_responses_sync(
        self,
        httpserver: HTTPServer,
        commander: APICommander,
    ) -> None:
        httpserver.expect_oneshot_request(
            BASE_PATH,
            method=HttpMethod.POST,
        ).respond_with_data("<html>not json</html>")
        with pytest.raises(UnexpectedDataAPIResponseException) as exc:
            commander.request(payload={"findCollections": {}})
        assert exc.value.raw_response == {"raw_response": "<html>not json</html>"}

        httpserver.expect_oneshot_request(
            BASE_PATH,
            method=HttpMethod.POST,
        ).respond_with_json([1, 2, 3])
        with pytest.raises(UnexpectedDataAPIResponseException):
            commander.request(payload={"findCollections": {}})

    @pytest.mark.describe("test of APICommander request timeouts, sync")
    def test_commander_timeout_sync(
        self,
        httpserver: HTTPServer,
        commander: APICommander,
    ) -> None:
        def _slow_handler(request: Request) -> Response:
            time.sleep(0.5)
            return Response('{"status": {}}', content_type="application/json")

        httpserver.expect_oneshot_request(
            BASE_PATH,
            method=HttpMethod.POST,
        ).respond_with_handler(_slow_handler)
        with pytest.raises(DataAPITimeoutException) as exc:
            commander.request(
                payload={"countDocuments": {}},
                timeout_context=_TimeoutContext(
                    request_ms=50,
                    nominal_ms=50,
                    label="request_timeout_ms",
                ),
            )
        assert exc.value.timeout_type == "read"
        assert exc.value.endpoint == httpserver.url_for(BASE_PATH)
        assert exc.value.raw_payload == '{"countDocuments":{}}'
        assert "request_timeout_ms = 50 ms" in exc.value.text

    @pytest.mark.describe("test of APICommander successful request, async")
    async def test_commander_request_async(
        self,
        httpserver: HTTPServer,
        commander: APICommander,
    ) -> None:
        httpserver.expect_oneshot_request(
            BASE_PATH,
            method=HttpMethod.POST,
            headers={"Token": "AstraCS:secret"},
        ).respond_with_json({"status": {"ok": 1}})
        response = await commander.async_request(payload={"dropTable": {}})
        assert response == {"status": {"ok": 1}}

    @pytest.mark.describe("test of APICommander errors, async")
    async def test_commander_errors_async(
        self,
        httpserver: HTTPServer,
        commander: APICommander,
    ) -> None:
        httpserver.expect_oneshot_request(
            BASE_PATH,
            method=HttpMethod.POST,
        ).respond_with_json({"errors": [{"errorCode": "E", "message": "m"}]})
        with pytest.raises(DataAPIResponseException) as exc:
            await commander.async_request(payload={"find": {}})
        assert str(exc.value) == "m (E)"

        httpserver.expect_oneshot_request(
            BASE_PATH,
            method=HttpMethod.POST,
        ).respond_with_data("oops", status=503)
        with pytest.raises(DataAPIHttpException):
            await commander.async_request(payload={"find": {}})

        httpserver.expect_oneshot_request(
            BASE_PATH,
            method=HttpMethod.POST,
        ).respond_with_data("not-json")
        with pytest.raises(UnexpectedDataAPIResponseException):
            await commander.async_request(payload={"find": {}})
