"""Abstract base class for alt text generators.

Keeps the run orchestration independent of the completion provider.
"""

from abc import ABC, abstractmethod
from typing import Literal

from pydantic import BaseModel, Field, model_validator

DescriptionSource = Literal["model", "fallback", "none"]


class GeneratedDescription(BaseModel):
    """Alt text produced for one image, and where it came from."""

    text: str | None = Field(default=None, description="Accepted alt text, None if nothing usable")
    source: DescriptionSource = Field(default="none", description="model, fallback or none")

    @model_validator(mode="after")
    def check_source(self) -> "GeneratedDescription":
        if (self.text is None) != (self.source == "none"):
            raise ValueError("source must be 'none' exactly when text is None")
        return self

    @classmethod
    def empty(cls) -> "GeneratedDescription":
        """Return the result for an image that gets no alt text."""
        return cls(text=None, source="none")


class DescriptionGenerator(ABC):
    """Abstract interface for alt text generators."""

    @abstractmethod
    async def generate(
        self,
        image_url: str,
        image_title: str,
        business_context: str,
    ) -> GeneratedDescription:
        """Generate alt text for one image.

        Implementations never raise; any failure yields an empty description.

        Args:
            image_url: Public URL of the image
            image_title: Title used as context and for the fallback text
            business_context: Brand description embedded in the prompt

        Returns:
            The generated description

        """
        pass

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Return the model identifier."""
        pass
