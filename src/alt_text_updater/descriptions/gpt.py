"""OpenAI alt text generator.

Sends the image URL and a brand-aware instruction to a vision-capable chat
model, asking for a reply that matches the alt text JSON schema. Replies that
break the rules, refusals and API failures fall back to a templated text
built from the image title.
"""

import asyncio
import random

import openai
from loguru import logger
from openai import AsyncOpenAI
from pydantic import ValidationError

from .base import DescriptionGenerator, GeneratedDescription
from .rules import ALT_TEXT_SCHEMA, FALLBACK_SUFFIX, AltTextPayload, build_fallback_alt_text

DEFAULT_MODEL = "gpt-4o-2024-08-06"

SYSTEM_PROMPT = "You are a helpful assistant for Beans.ie."

PROMPT_TEMPLATE = """\
You are Beans.ie Image Alt Tag Assistant, an expert in the business's products, philosophy, events, equipment, collaborations, and brand tone.
{business_context}
Analyze the image at the provided URL and use the image title "{image_title}" as context.
Generate an SEO-optimized alt tag for the Beans.ie website.
Requirements:
- Be descriptive and specific to the visual content, incorporating relevant details from the title.
- Include keywords like "specialty coffee," "coffee beans," or "coffee brewing."
- Reflect Beans.ie's clear, informative, and approachable tone.
- Align with the mission to make the world's finest specialty coffee accessible.
- Avoid identifying individuals' names (e.g., use "Dak founders" instead).
- If image analysis fails (e.g., unsupported format or unclear content), generate a generic coffee-related alt tag using the title and context.
- Ensure the output is a single line, free of newlines, colons, or error messages like "unable to."
- Avoid keyword stuffing or generic terms like "image of."
- Optimize for screen readers (clear, concise, no redundancy).
Examples:
- "Brazil smallholder coffee farmers picking coffee beans from trees"
- "NBA Blend from People Possession Coffee Roastery, available on Beans.ie"
- "Founders of Dak Coffee Roasters in their new cafe"
If the image cannot be analyzed, return a generic tag like:
- "{generic_tag}"
"""


def exponential_backoff(attempt: int, base_delay: float = 1.0) -> float:
    """Return the wait before retry number `attempt`, with up to 100ms of jitter."""
    return base_delay * 2**attempt + random.uniform(0, 0.1)


def _is_rate_limit(error: Exception) -> bool:
    return isinstance(error, openai.RateLimitError) or "rate limit" in str(error).lower()


class OpenAIDescriptionGenerator(DescriptionGenerator):
    """Alt text generator backed by OpenAI structured outputs."""

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        max_attempts: int = 3,
        retry_delay: float = 1.0,
        max_tokens: int = 150,
        temperature: float = 0.6,
    ):
        """Initialize the OpenAI client.

        The SDK's own retries are disabled so that `max_attempts` is the
        single bound on requests per image.

        Args:
            api_key: OpenAI API key
            model: Vision-capable model with structured output support
            max_attempts: Attempts per image when rate limited
            retry_delay: Base delay in seconds for exponential backoff
            max_tokens: Completion token cap
            temperature: Sampling temperature

        Raises:
            ValueError: If api_key is empty or None

        """
        if not api_key:
            raise ValueError("OpenAI API key is required")

        self.client = AsyncOpenAI(api_key=api_key, max_retries=0)
        self.model = model
        self.max_attempts = max_attempts
        self.retry_delay = retry_delay
        self.max_tokens = max_tokens
        self.temperature = temperature
        logger.info("Initialized OpenAI generator: model={}, max_attempts={}", model, max_attempts)

    @property
    def model_name(self) -> str:
        return self.model

    def build_prompt(self, image_title: str, business_context: str) -> str:
        """Return the user instruction for one image."""
        generic_tag = f"{image_title.split('-')[0].replace('_', ' ')} {FALLBACK_SUFFIX}"
        return PROMPT_TEMPLATE.format(
            business_context=business_context.strip(),
            image_title=image_title,
            generic_tag=generic_tag,
        )

    def build_messages(self, image_url: str, image_title: str, business_context: str) -> list[dict]:
        """Return the chat messages: a system turn and a text plus image user turn."""
        return [
            {"role": "system", "content": SYSTEM_PROMPT},
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": self.build_prompt(image_title, business_context)},
                    {"type": "image_url", "image_url": {"url": image_url}},
                ],
            },
        ]

    async def generate(
        self,
        image_url: str,
        image_title: str,
        business_context: str,
    ) -> GeneratedDescription:
        """Generate alt text, falling back to the title template.

        Args:
            image_url: Public URL of the image
            image_title: Title used as context and for the fallback text
            business_context: Brand description embedded in the prompt

        Returns:
            Model text, fallback text, or an empty description

        """
        try:
            text = await self._generate_from_model(image_url, image_title, business_context)
            if text:
                return GeneratedDescription(text=text, source="model")

            fallback = build_fallback_alt_text(image_title)
            if fallback:
                logger.info("Using fallback alt text for {}: {}", image_title, fallback)
                return GeneratedDescription(text=fallback, source="fallback")

            logger.warning("No valid alt text generated for {}", image_title)
            return GeneratedDescription.empty()
        except Exception as e:
            logger.error("Unexpected error in alt text generation for {}: {}", image_title, e)
            return GeneratedDescription.empty()

    async def _generate_from_model(
        self,
        image_url: str,
        image_title: str,
        business_context: str,
    ) -> str | None:
        """Ask the model for alt text. Returns None when the reply is unusable."""
        messages = self.build_messages(image_url, image_title, business_context)

        for attempt in range(1, self.max_attempts + 1):
            try:
                response = await self.client.chat.completions.create(
                    model=self.model,
                    messages=messages,
                    response_format={
                        "type": "json_schema",
                        "json_schema": {
                            "name": "alt_tag_response",
                            "strict": True,
                            "schema": ALT_TEXT_SCHEMA,
                        },
                    },
                    max_tokens=self.max_tokens,
                    temperature=self.temperature,
                )
            except openai.OpenAIError as e:
                if _is_rate_limit(e) and attempt < self.max_attempts:
                    delay = exponential_backoff(attempt, self.retry_delay)
                    logger.info(
                        "OpenAI rate limit hit, retrying ({}/{}) after {:.0f}ms",
                        attempt,
                        self.max_attempts,
                        delay * 1000,
                    )
                    await asyncio.sleep(delay)
                    continue
                logger.error("Error generating alt text for {}: {}", image_title, e)
                return None

            message = response.choices[0].message
            if message.refusal:
                logger.warning("Model refused to process image {}: {}", image_title, message.refusal)
                return None

            try:
                payload = AltTextPayload.model_validate_json(message.content or "")
            except ValidationError as e:
                logger.warning(
                    "Accessibility issue in alt text for {}: {} ({})",
                    image_title,
                    message.content,
                    e.errors()[0]["msg"],
                )
                return None

            logger.info("Generated alt text for {}: {}", image_title, payload.alt_text)
            return payload.alt_text

        return None
