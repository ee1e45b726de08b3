"""Alt text generators package.

Provides a factory function to create the configured generator.
"""

from .base import DescriptionGenerator, GeneratedDescription
from .gpt import OpenAIDescriptionGenerator
from .rules import build_fallback_alt_text, is_valid_alt_text


def create_description_generator(
    provider_type: str = "openai",
    api_key: str = "",
    model: str | None = None,
    **kwargs,
) -> DescriptionGenerator:
    """Create an alt text generator instance.

    Args:
        provider_type: Type of provider ("openai")
        api_key: API key for the provider
        model: Optional model override
        **kwargs: Additional provider-specific arguments (retry settings)

    Returns:
        Configured DescriptionGenerator instance

    Raises:
        ValueError: If provider_type is not recognized or api_key is empty

    """
    if provider_type == "openai":
        if model:
            kwargs["model"] = model
        return OpenAIDescriptionGenerator(api_key=api_key, **kwargs)
    else:
        raise ValueError(f"Unknown description provider: {provider_type}")


__all__ = [
    "DescriptionGenerator",
    "GeneratedDescription",
    "OpenAIDescriptionGenerator",
    "build_fallback_alt_text",
    "create_description_generator",
    "is_valid_alt_text",
]
