import logging
from typing import Any

from openai import APIConnectionError, APIStatusError, APITimeoutError, AsyncOpenAI

from ..chat.models import (
    AgentProfile,
    ChatTurn,
    CompletionError,
    CompletionOk,
    CompletionResult,
    ErrorKind,
)
from ..config import DEFAULT_MAX_TOKENS, DEFAULT_OPENAI_MODEL, DEFAULT_TEMPERATURE
from ..prompts import build_persona_prompt
from .base import ChatTransport

logger = logging.getLogger(__name__)


class OpenAITransport(ChatTransport):
    """Calls OpenAI chat completions directly, without a hosted function.

    Hidden design decisions:
    - Persona system prompt construction
    - OpenAI client initialization and authentication
    - Mapping SDK exceptions onto ErrorKind values
    """

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_OPENAI_MODEL,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        temperature: float = DEFAULT_TEMPERATURE,
        timeout: float | None = None,
        base_url: str | None = None,
        client: AsyncOpenAI | None = None,
        **client_kwargs: Any
    ):
        """Initialize OpenAI transport.

        Args:
            api_key: OpenAI API key
            model: Chat model
            max_tokens: Reply length cap
            temperature: Sampling temperature
            timeout: Seconds to wait for one completion (None waits indefinitely)
            base_url: Optional custom API base URL
            client: Pre-built client
            **client_kwargs: Additional kwargs for AsyncOpenAI client
        """
        super().__init__(timeout=timeout)
        self._model = model
        self._max_tokens = max_tokens
        self._temperature = temperature
        # SDK retries are disabled: one attempt per turn
        self._client = client or AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout,
            max_retries=0,
            **client_kwargs
        )

    @property
    def model(self) -> str:
        return self._model

    def build_messages(self, history: list[ChatTurn], agent: AgentProfile) -> list[dict[str, str]]:
        return [
            {"role": "system", "content": build_persona_prompt(agent)},
            *(turn.to_wire() for turn in history),
        ]

    async def _complete(
        self,
        history: list[ChatTurn],
        agent: AgentProfile,
        is_owner: bool = False,
        conversation_id: str | None = None,
        user_id: str | None = None,
        **kwargs: Any
    ) -> CompletionResult:
        # Session context (owner flag, conversation id) has no meaning for the
        # OpenAI API and is not forwarded
        request_params: dict[str, Any] = {
            "model": self._model,
            "messages": self.build_messages(history, agent),
            "max_tokens": self._max_tokens,
            "temperature": self._temperature,
            **kwargs
        }

        try:
            completion = await self._client.chat.completions.create(**request_params)
        except APITimeoutError as e:
            return CompletionError(kind=ErrorKind.TIMEOUT, detail=str(e))
        except APIConnectionError as e:
            logger.error("OpenAI API unreachable: %s", e)
            return CompletionError(kind=ErrorKind.NETWORK, detail=str(e))
        except APIStatusError as e:
            logger.error("OpenAI API error %s: %s", e.status_code, e.message)
            return CompletionError(
                kind=ErrorKind.HTTP_STATUS,
                detail=e.message,
                status_code=e.status_code,
            )

        content = completion.choices[0].message.content if completion.choices else None
        if not content:
            return CompletionError(kind=ErrorKind.EMPTY_RESPONSE, detail="No content in response")

        usage = None
        if completion.usage:
            usage = {
                "prompt_tokens": completion.usage.prompt_tokens,
                "completion_tokens": completion.usage.completion_tokens,
                "total_tokens": completion.usage.total_tokens
            }
        return CompletionOk(content=content, usage=usage)

    async def close(self) -> None:
        await self._client.close()
