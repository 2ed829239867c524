# services/conversation_engine.py
import logging
from typing import Any, Dict, List

from openai import AsyncOpenAI

from services.errors import GenerationError

logger = logging.getLogger(__name__)


class ConversationEngine:
    """
    Text-generation provider. Turns one system + user instruction pair into
    a reply. Failures are raised as GenerationError and never retried.
    """

    def __init__(self, async_client: AsyncOpenAI, model: str = "gpt-4o-mini"):
        self.async_client = async_client
        self.model = model

    async def generate(
        self,
        system_instruction: str,
        user_instruction: str,
        max_tokens: int = 500,
        temperature: float = 0.7,
    ) -> str:
        messages: List[Dict[str, Any]] = [
            {"role": "system", "content": system_instruction},
            {"role": "user", "content": user_instruction},
        ]
        logger.info(
            "Calling %s (temperature=%.2f, max_tokens=%d)", self.model, temperature, max_tokens
        )
        try:
            stream = await self.async_client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=temperature,
                stream=True,
                max_tokens=max_tokens,
            )

            full_reply: List[str] = []
            async for chunk in stream:
                if not chunk.choices:
                    continue
                token = getattr(chunk.choices[0].delta, "content", None)
                if token:
                    full_reply.append(token)
        except Exception as e:
            logger.exception("Error calling OpenAI API")
            raise GenerationError(f"Text generation failed: {e}") from e

        reply = "".join(full_reply).strip()
        if not reply:
            logger.error("OpenAI returned an empty completion")
            raise GenerationError("Text generation returned an empty reply")
        logger.info("OpenAI response received, length: %d", len(reply))
        return reply
