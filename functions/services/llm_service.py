"""LLM service for Costeo AI.

Provides the LangChain/OpenAI integration the estimation pipeline uses as
its text-generation oracle. This is the only place that sees provider
exceptions: the upstream status is read once here and mapped to the
oracle error taxonomy.
"""

import asyncio
from typing import Dict, Any, Optional, List

import openai
import structlog
from langchain_openai import ChatOpenAI
from langchain_core.messages import BaseMessage, HumanMessage, SystemMessage

from config.settings import settings
from config.errors import (
    OracleCallFailed,
    OracleError,
    OracleRateLimited,
    OracleUnauthorized,
    OracleUnavailable,
)

logger = structlog.get_logger()


def _upstream_status(error: Exception) -> Optional[int]:
    """HTTP status carried by a provider exception, if any."""
    status = getattr(error, "status_code", None)
    if status is None:
        response = getattr(error, "response", None)
        status = getattr(response, "status_code", None)
    return status if isinstance(status, int) else None


def map_oracle_error(error: Exception) -> OracleError:
    """Translate a provider exception into the oracle error taxonomy.

    Args:
        error: Exception raised by the client call.

    Returns:
        OracleUnauthorized (401), OracleRateLimited (429) or OracleCallFailed.
    """
    if isinstance(error, OracleError):
        return error

    detail = {"original_error": str(error)[:500], "error_type": type(error).__name__}

    if isinstance(error, (asyncio.TimeoutError, openai.APITimeoutError)):
        return OracleCallFailed("Oracle call timed out", details=detail)

    status = _upstream_status(error)
    if status == 401:
        return OracleUnauthorized(details=detail)
    if status == 429:
        return OracleRateLimited(details=detail)
    return OracleCallFailed(
        f"Oracle call failed: {type(error).__name__}",
        upstream_status=status,
        details=detail
    )


class LLMService:
    """Service for LLM operations using LangChain.

    Provides a wrapper around ChatOpenAI with token tracking, a per-call
    timeout and error mapping.
    """

    def __init__(
        self,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        api_key: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        max_tokens: Optional[int] = None
    ):
        """Initialize LLMService.

        Args:
            model: Model name (default from settings).
            temperature: Temperature (default from settings).
            api_key: OpenAI API key (default from settings).
            timeout_seconds: Per-call timeout (default from settings).
            max_tokens: Response token cap (default from settings).
        """
        self.model = model or settings.llm_model
        self.temperature = temperature if temperature is not None else settings.llm_temperature
        self.api_key = api_key or settings.openai_api_key
        self.timeout_seconds = timeout_seconds or settings.llm_timeout_seconds
        self.max_tokens = max_tokens if max_tokens is not None else settings.llm_max_tokens

        self._client: Optional[ChatOpenAI] = None
        self._total_tokens_used = 0

    @property
    def configured(self) -> bool:
        """Whether a credential is available."""
        return bool(self.api_key)

    @property
    def client(self) -> ChatOpenAI:
        """Get LangChain ChatOpenAI client (lazy initialization)."""
        if self._client is None:
            if not self.configured:
                raise OracleUnavailable()
            self._client = ChatOpenAI(
                model=self.model,
                temperature=self.temperature,
                api_key=self.api_key,
                max_retries=0
            )
        return self._client

    @property
    def total_tokens_used(self) -> int:
        """Get total tokens used across all calls."""
        return self._total_tokens_used

    async def generate(
        self,
        messages: List[BaseMessage],
        max_tokens: Optional[int] = None,
        response_format: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """Generate a response from the LLM.

        Args:
            messages: List of LangChain messages.
            max_tokens: Optional max tokens for response.
            response_format: Optional OpenAI response_format payload.

        Returns:
            Dict with content and token usage.

        Raises:
            OracleError: If the LLM call fails or times out.
        """
        kwargs: Dict[str, Any] = {}
        max_tokens = max_tokens or self.max_tokens
        if max_tokens:
            kwargs["max_tokens"] = max_tokens
        if response_format:
            kwargs["response_format"] = response_format

        try:
            response = await asyncio.wait_for(
                self.client.ainvoke(messages, **kwargs),
                timeout=self.timeout_seconds
            )
        except Exception as e:
            mapped = map_oracle_error(e)
            logger.error(
                "llm_call_failed",
                model=self.model,
                code=mapped.code,
                upstream_status=mapped.upstream_status,
                error=str(e)[:300]
            )
            raise mapped from e

        # Track token usage if available
        tokens_used = 0
        metadata = getattr(response, "response_metadata", None)
        if isinstance(metadata, dict):
            usage = metadata.get("token_usage") or {}
            tokens_used = usage.get("total_tokens", 0) or 0
            self._total_tokens_used += tokens_used

        content = response.content if isinstance(response.content, str) else str(response.content)

        logger.info(
            "llm_generated",
            model=self.model,
            tokens_used=tokens_used,
            content_length=len(content),
            structured=bool(response_format)
        )

        return {
            "content": content,
            "tokens_used": tokens_used
        }

    async def generate_with_system_prompt(
        self,
        system_prompt: str,
        user_message: str,
        max_tokens: Optional[int] = None,
        response_format: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """Generate a response with system prompt.

        Args:
            system_prompt: System prompt for context.
            user_message: User message/query.
            max_tokens: Optional max tokens for response.
            response_format: Optional OpenAI response_format payload.

        Returns:
            Dict with content and token usage.
        """
        messages = [
            SystemMessage(content=system_prompt),
            HumanMessage(content=user_message)
        ]
        return await self.generate(messages, max_tokens, response_format)

    async def generate_structured(
        self,
        system_prompt: str,
        user_message: str,
        schema: Dict[str, Any],
        schema_name: str = "cost_plan",
        max_tokens: Optional[int] = None
    ) -> Dict[str, Any]:
        """Generate output constrained to a JSON schema.

        The raw text is returned undecoded: the provider does not guarantee
        the schema is honored, so decoding belongs to the caller.

        Args:
            system_prompt: System prompt for context.
            user_message: User message/query.
            schema: JSON schema the output must follow.
            schema_name: Name reported to the provider.
            max_tokens: Optional max tokens for response.

        Returns:
            Dict with raw text content and token usage.
        """
        response_format = {
            "type": "json_schema",
            "json_schema": {"name": schema_name, "schema": schema}
        }
        return await self.generate_with_system_prompt(
            system_prompt,
            user_message,
            max_tokens,
            response_format
        )
