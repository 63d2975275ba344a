"""
Perplexity chat completions.

Perplexity speaks the OpenAI chat completions protocol, so the OpenAI SDK
is used with a different base URL. Failures never propagate: the caller
always gets text it can send back to the chat.
"""

import httpx
import openai
from openai import AsyncOpenAI
from typing import Optional

from relaybot.logging_config import bot_logger as logger

SYSTEM_PROMPT = "You are a helpful Telegram assistant."

UPSTREAM_ERROR_REPLY = "Sorry, I had an issue talking to the AI. Try again later."
UNEXPECTED_ERROR_REPLY = "Sorry, something went wrong while contacting the AI."
EMPTY_ANSWER_REPLY = "I couldn't generate a response."


class CompletionClient:
    """Single-turn question answering against the completion API."""

    def __init__(
        self,
        api_key: str,
        model: str = "sonar",
        base_url: str = "https://api.perplexity.ai",
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.model = model
        # No retries: a failed answer becomes an apology, not a delay
        self.client = AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            max_retries=0,
            http_client=http_client,
        )

    async def ask(self, prompt: str) -> str:
        """
        Ask the model a question.

        Args:
            prompt: User message text

        Returns:
            The trimmed answer, or a fixed apology/fallback string
        """
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
            )
        except openai.APIStatusError as e:
            logger.error(f"Perplexity API error: {e.status_code} {e.response.text}")
            return UPSTREAM_ERROR_REPLY
        except (openai.OpenAIError, ValueError) as e:
            logger.error(f"Error calling Perplexity: {e}")
            return UNEXPECTED_ERROR_REPLY

        if not response.choices:
            return EMPTY_ANSWER_REPLY

        content = (response.choices[0].message.content or "").strip()
        return content or EMPTY_ANSWER_REPLY
