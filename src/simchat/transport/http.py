"""HTTP transports for hosted chat-completion functions.

Both endpoints accept a JSON POST and answer with
``{"content": str, "usage"?: object}`` on success or
``{"error": str}`` with a non-2xx status on failure.
"""

import logging
from abc import abstractmethod
from typing import Any

import httpx
from pydantic import ValidationError

from ..chat.models import (
    AgentProfile,
    ChatTurn,
    CompletionError,
    CompletionOk,
    CompletionResponse,
    CompletionResult,
    ErrorKind,
)
from ..config import DEFAULT_MAX_RESULTS, DEFAULT_MIN_SIMILARITY
from .base import ChatTransport

logger = logging.getLogger(__name__)


class HttpChatTransport(ChatTransport):
    """Base for transports that POST one JSON body per turn.

    Hidden design decisions:
    - HTTP client lifecycle and headers
    - Error body parsing
    - Status code to ErrorKind mapping
    """

    def __init__(
        self,
        url: str,
        api_key: str | None = None,
        timeout: float | None = None,
        headers: dict[str, str] | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        """Initialize the transport.

        Args:
            url: Endpoint URL
            api_key: Optional key, sent as bearer token and ``apikey`` header
            timeout: Seconds to wait for one completion (None waits indefinitely)
            headers: Extra request headers
            client: Pre-built client (tests inject one backed by MockTransport)
        """
        super().__init__(timeout=timeout)
        self._url = url
        request_headers = {"Content-Type": "application/json"}
        if api_key:
            request_headers["Authorization"] = f"Bearer {api_key}"
            request_headers["apikey"] = api_key
        request_headers.update(headers or {})

        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=httpx.Timeout(timeout))
        self._headers = request_headers

    @property
    def url(self) -> str:
        return self._url

    @abstractmethod
    def build_payload(
        self,
        history: list[ChatTurn],
        agent: AgentProfile,
        **kwargs: Any
    ) -> dict[str, Any]:
        """Build the JSON request body for one turn."""

    async def _complete(
        self,
        history: list[ChatTurn],
        agent: AgentProfile,
        **kwargs: Any
    ) -> CompletionResult:
        payload = self.build_payload(history, agent, **kwargs)
        logger.debug("POST %s (%d messages)", self._url, len(payload.get("messages", [])))

        try:
            response = await self._client.post(self._url, json=payload, headers=self._headers)
        except httpx.TimeoutException as e:
            return CompletionError(kind=ErrorKind.TIMEOUT, detail=str(e) or "Request timed out")
        except httpx.HTTPError as e:
            logger.error("Chat endpoint unreachable: %s", e)
            return CompletionError(kind=ErrorKind.NETWORK, detail=str(e))

        return self._parse_response(response)

    def _parse_response(self, response: httpx.Response) -> CompletionResult:
        try:
            body = response.json()
        except ValueError:
            body = None

        if response.is_error:
            detail = body.get("error") if isinstance(body, dict) else None
            logger.error("Chat endpoint returned %s: %s", response.status_code, detail)
            return CompletionError(
                kind=ErrorKind.HTTP_STATUS,
                detail=str(detail or response.reason_phrase),
                status_code=response.status_code,
            )

        if not isinstance(body, dict):
            return CompletionError(kind=ErrorKind.INVALID_RESPONSE, detail="Response is not a JSON object")

        if not body.get("content"):
            return CompletionError(kind=ErrorKind.EMPTY_RESPONSE, detail="No content in response")

        try:
            parsed = CompletionResponse.model_validate(body)
        except ValidationError as e:
            return CompletionError(kind=ErrorKind.INVALID_RESPONSE, detail=str(e))

        if parsed.image:
            logger.info("Image received in response")
        return CompletionOk(content=parsed.content, usage=parsed.usage)

    async def close(self) -> None:
        """Close the HTTP client if this transport created it."""
        if self._owns_client:
            await self._client.aclose()


class EdgeFunctionTransport(HttpChatTransport):
    """Persona chat endpoint taking the agent definition inline.

    Body: ``{"messages": [{role, content}], "agent": {name, prompt, ...}}``
    """

    def build_payload(
        self,
        history: list[ChatTurn],
        agent: AgentProfile,
        user_id: str | None = None,
        **kwargs: Any
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "messages": [turn.to_wire() for turn in history],
            "agent": agent.to_wire(),
        }
        if user_id:
            payload["userId"] = user_id
        return payload


class AdvisorTransport(HttpChatTransport):
    """Knowledge-backed endpoint that resolves the persona by id.

    Body: ``{"messages", "advisorId", "isOwner", "conversationId",
    "saveToDatabase", "searchFilters"}``
    """

    requires_agent_id = True

    def __init__(
        self,
        url: str,
        api_key: str | None = None,
        timeout: float | None = None,
        save_to_database: bool = True,
        min_similarity: float = DEFAULT_MIN_SIMILARITY,
        max_results: int = DEFAULT_MAX_RESULTS,
        **kwargs: Any
    ):
        super().__init__(url, api_key=api_key, timeout=timeout, **kwargs)
        self._save_to_database = save_to_database
        self._search_filters = {"minSimilarity": min_similarity, "maxResults": max_results}

    def build_payload(
        self,
        history: list[ChatTurn],
        agent: AgentProfile,
        is_owner: bool = False,
        conversation_id: str | None = None,
        **kwargs: Any
    ) -> dict[str, Any]:
        return {
            "messages": [turn.to_wire() for turn in history],
            "advisorId": agent.id,
            "isOwner": is_owner,
            "conversationId": conversation_id,
            "saveToDatabase": self._save_to_database,
            "searchFilters": dict(self._search_filters),
        }
