"""
Alt text rules.

The structured-output schema sent to the model, the parser for its reply and
the fallback template all check text against the constants defined here.
"""

import re

from pydantic import BaseModel, ConfigDict, Field, field_validator

MIN_LENGTH = 60
MAX_LENGTH = 125
REQUIRED_KEYWORD = "coffee"
FORBIDDEN_PHRASES = ("image of", "picture of")
DISALLOWED_CHARACTERS = re.compile(r"[^a-zA-Z0-9\s,.&-]")

FALLBACK_SUFFIX = "specialty coffee on Beans.ie"
FALLBACK_EXTENSION = "from global roasters"

ALT_TEXT_SCHEMA = {
    "type": "object",
    "properties": {
        "altText": {
            "type": "string",
            "description": "SEO-optimized alt tag for Beans.ie image",
            "minLength": MIN_LENGTH,
            "maxLength": MAX_LENGTH,
            "pattern": f"(?i){REQUIRED_KEYWORD}",
        }
    },
    "required": ["altText"],
    "additionalProperties": False,
}


def alt_text_violations(text: str) -> list[str]:
    """
    List every rule the text breaks.

    Args:
        text: Candidate alt text, already trimmed

    Returns:
        Human-readable violations; empty when the text is acceptable
    """
    violations = []
    if not MIN_LENGTH <= len(text) <= MAX_LENGTH:
        violations.append(f"length {len(text)} outside {MIN_LENGTH}-{MAX_LENGTH}")

    lowered = text.lower()
    if REQUIRED_KEYWORD not in lowered:
        violations.append(f'missing keyword "{REQUIRED_KEYWORD}"')
    for phrase in FORBIDDEN_PHRASES:
        if phrase in lowered:
            violations.append(f'contains "{phrase}"')

    bad_chars = sorted(set(DISALLOWED_CHARACTERS.findall(text)))
    if bad_chars:
        violations.append(f"disallowed characters {''.join(bad_chars)!r}")
    return violations


def is_valid_alt_text(text: str | None) -> bool:
    """Return True if the text satisfies every alt text rule."""
    return text is not None and not alt_text_violations(text)


class AltTextPayload(BaseModel):
    """Structured reply from the model, validated against the alt text rules."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    alt_text: str = Field(alias="altText")

    @field_validator("alt_text")
    @classmethod
    def check_rules(cls, value: str) -> str:
        value = value.strip()
        violations = alt_text_violations(value)
        if violations:
            raise ValueError("; ".join(violations))
        return value


def build_fallback_alt_text(title: str) -> str | None:
    """
    Build a templated alt text from an image title.

    Takes the part of the title before the first hyphen, turns underscores
    into spaces and appends the brand suffix, padding or truncating to fit
    the length bounds.

    Args:
        title: Image title, usually the filename

    Returns:
        The fallback text, or None if it still breaks a rule
    """
    text = f"{title.split('-')[0].replace('_', ' ')} {FALLBACK_SUFFIX}"
    if len(text) < MIN_LENGTH:
        text = f"{text} {FALLBACK_EXTENSION}"
    if len(text) > MAX_LENGTH:
        text = text[:MAX_LENGTH]

    return text if is_valid_alt_text(text) else None
