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

from typing import Any, Generic

from dataapi.commands import Command
from dataapi.cursors.cursor import TRAW, logger
from dataapi.cursors.reranked_result import RerankedResult
from dataapi.exceptions import (
    UnexpectedDataAPIResponseException,
    _TimeoutContext,
)
from dataapi.runner import CommandRunner, DataAPIResponse


class _FindQueryEngine(Generic[TRAW]):
    """
    Runs the pages of one find command. Collections and tables share the
    command format; the runner carries their value conversions.
    """

    def __init__(
        self,
        *,
        runner: CommandRunner,
        source_name: str,
        command: Command,
    ) -> None:
        self.runner = runner
        self.source_name = source_name
        self.command = command

    def _page_command(self, page_state: str | None) -> Command:
        if page_state:
            return self.command.with_option("pageState", page_state)
        return self.command

    def _unpack_page(
        self, response: DataAPIResponse
    ) -> tuple[list[TRAW], str | None, dict[str, Any] | None]:
        if "documents" not in response.data:
            raise UnexpectedDataAPIResponseException(
                text="Faulty response from find API command (no 'documents').",
                raw_response=response.raw_response,
            )
        return (
            response.documents,
            response.continuation.page_state,
            response.status or None,
        )

    def _fetch_page(
        self,
        *,
        page_state: str | None,
        timeout_context: _TimeoutContext,
    ) -> tuple[list[TRAW], str | None, dict[str, Any] | None]:
        """Run one page; return (entries, next-page-state, response status)."""
        _page_str = page_state if page_state else "(empty page state)"
        logger.info(f"cursor fetching a page: {_page_str} from {self.source_name}")
        response = self.runner.execute(
            self._page_command(page_state),
            timeout_context=timeout_context,
        )
        logger.info(
            f"cursor finished fetching a page: {_page_str} from {self.source_name}"
        )
        return self._unpack_page(response)

    async def _async_fetch_page(
        self,
        *,
        page_state: str | None,
        timeout_context: _TimeoutContext,
    ) -> tuple[list[TRAW], str | None, dict[str, Any] | None]:
        """Run one page; return (entries, next-page-state, response status)."""
        _page_str = page_state if page_state else "(empty page state)"
        logger.info(
            f"cursor fetching a page: {_page_str} from {self.source_name}, async"
        )
        response = await self.runner.async_execute(
            self._page_command(page_state),
            timeout_context=timeout_context,
        )
        logger.info(
            f"cursor finished fetching a page: {_page_str} from "
            f"{self.source_name}, async"
        )
        return self._unpack_page(response)


class _FindAndRerankQueryEngine(_FindQueryEngine[RerankedResult[TRAW]]):
    """
    Runs the pages of a findAndRerank command, pairing each document with
    its scores from `status.documentResponses`.
    """

    def _unpack_page(
        self, response: DataAPIResponse
    ) -> tuple[list[RerankedResult[TRAW]], str | None, dict[str, Any] | None]:
        if "documents" not in response.data:
            raise UnexpectedDataAPIResponseException(
                text="Faulty response from findAndRerank API command (no 'documents').",
                raw_response=response.raw_response,
            )
        documents: list[TRAW] = response.documents
        # "documentResponses" is there only if some option flags ask for it
        document_responses: list[dict[str, Any]] = response.status.get(
            "documentResponses"
        ) or [{}] * len(documents)
        results = [
            RerankedResult(document=document, scores=doc_response.get("scores") or {})
            for document, doc_response in zip(documents, document_responses)
        ]
        return (
            results,
            response.continuation.page_state,
            response.status or None,
        )
