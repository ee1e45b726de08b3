"""
Tests for alt text rules.

Tests the shared validator, the structured-output schema, reply parsing and
the fallback template.
"""

import pytest
from pydantic import ValidationError

from alt_text_updater.descriptions.rules import (
    ALT_TEXT_SCHEMA,
    MAX_LENGTH,
    MIN_LENGTH,
    AltTextPayload,
    alt_text_violations,
    build_fallback_alt_text,
    is_valid_alt_text,
)

from conftest import VALID_ALT_TEXT


class TestAltTextViolations:
    """Test alt_text_violations and is_valid_alt_text."""

    def test_valid_text(self):
        """Test a well-formed description passes."""
        assert alt_text_violations(VALID_ALT_TEXT) == []
        assert is_valid_alt_text(VALID_ALT_TEXT) is True

    def test_none_is_invalid(self):
        """Test None is never valid."""
        assert is_valid_alt_text(None) is False

    def test_too_short(self):
        """Test text under the minimum length fails."""
        violations = alt_text_violations("Specialty coffee beans")

        assert any("length" in v for v in violations)

    def test_too_long(self):
        """Test text over the maximum length fails."""
        assert not is_valid_alt_text("coffee " * 20)

    def test_length_bounds_inclusive(self):
        """Test both bounds are accepted."""
        shortest = "coffee" + "a" * (MIN_LENGTH - 6)
        longest = "coffee" + "a" * (MAX_LENGTH - 6)

        assert is_valid_alt_text(shortest)
        assert is_valid_alt_text(longest)
        assert not is_valid_alt_text(shortest[:-1])
        assert not is_valid_alt_text(longest + "a")

    def test_keyword_case_insensitive(self):
        """Test the keyword may appear in any case."""
        assert is_valid_alt_text("Barista pouring a flat white at the COFFEE bar in Dublin city")

    def test_missing_keyword(self):
        """Test text without the keyword fails."""
        violations = alt_text_violations("Barista pouring a flat white at the espresso bar in Dublin city centre")

        assert violations == ['missing keyword "coffee"']

    @pytest.mark.parametrize("phrase", ["Image of", "PICTURE OF"])
    def test_forbidden_phrases(self, phrase):
        """Test redundant screen reader phrases fail."""
        text = f"{phrase} specialty coffee beans roasted in small batches for Beans.ie"

        assert not is_valid_alt_text(text)

    @pytest.mark.parametrize("char", [":", "!", "'", '"', "(", "é", "/"])
    def test_disallowed_characters(self, char):
        """Test characters outside the allowed set fail."""
        text = f"Specialty coffee beans{char} roasted in small batches for Beans.ie customers"

        violations = alt_text_violations(text)

        assert any("disallowed characters" in v for v in violations)

    def test_allowed_punctuation(self):
        """Test commas, periods, ampersands and hyphens are allowed."""
        assert is_valid_alt_text("Single-origin coffee, roasted & packed in Dublin. Available on Beans.ie")


class TestAltTextSchema:
    """Test the structured-output schema sent to the model."""

    def test_schema_uses_rule_constants(self):
        """Test the schema mirrors the local rules."""
        field = ALT_TEXT_SCHEMA["properties"]["altText"]

        assert field["minLength"] == MIN_LENGTH
        assert field["maxLength"] == MAX_LENGTH
        assert field["pattern"] == "(?i)coffee"
        assert ALT_TEXT_SCHEMA["required"] == ["altText"]
        assert ALT_TEXT_SCHEMA["additionalProperties"] is False


class TestAltTextPayload:
    """Test parsing model replies."""

    def test_parses_valid_reply(self):
        """Test a valid reply is parsed and trimmed."""
        payload = AltTextPayload.model_validate_json(f'{{"altText": "  {VALID_ALT_TEXT}  "}}')

        assert payload.alt_text == VALID_ALT_TEXT

    def test_rejects_rule_violation(self):
        """Test a reply that breaks a rule is rejected."""
        with pytest.raises(ValidationError, match="image of"):
            AltTextPayload.model_validate_json(
                '{"altText": "Image of specialty coffee beans roasted in small batches in Dublin"}'
            )

    def test_rejects_extra_fields(self):
        """Test unknown fields are rejected."""
        with pytest.raises(ValidationError):
            AltTextPayload.model_validate_json(
                f'{{"altText": "{VALID_ALT_TEXT}", "confidence": 0.9}}'
            )

    def test_rejects_invalid_json(self):
        """Test non-JSON content is rejected."""
        with pytest.raises(ValidationError):
            AltTextPayload.model_validate_json("I am unable to describe this image")


class TestFallbackAltText:
    """Test build_fallback_alt_text."""

    def test_pads_short_titles(self):
        """Test short titles get the extra suffix."""
        text = build_fallback_alt_text("ethiopia_yirgacheffe-250g.jpg")

        assert text == "ethiopia yirgacheffe specialty coffee on Beans.ie from global roasters"
        assert is_valid_alt_text(text)

    def test_long_title_without_padding(self):
        """Test titles long enough skip the extra suffix."""
        text = build_fallback_alt_text("colombia_la_esperanza_pink_bourbon_washed_lot.jpg")

        assert text == "colombia la esperanza pink bourbon washed lot.jpg specialty coffee on Beans.ie"

    def test_default_title(self):
        """Test the generic title yields a valid text."""
        assert build_fallback_alt_text("Coffee product image") == (
            "Coffee product image specialty coffee on Beans.ie from global roasters"
        )

    def test_truncates_to_max_length(self):
        """Test overlong text is cut to the maximum length."""
        text = build_fallback_alt_text("coffee_" + "a" * 110)

        assert text is not None
        assert len(text) == MAX_LENGTH

    def test_truncation_that_drops_keyword_yields_none(self):
        """Test a truncated text without the keyword is rejected."""
        assert build_fallback_alt_text("a" * 130) is None

    def test_invalid_characters_yield_none(self):
        """Test titles with disallowed characters are rejected."""
        assert build_fallback_alt_text("Latte(1).png") is None

    def test_short_result_yields_none(self):
        """Test a title that cannot reach the minimum length is rejected."""
        assert build_fallback_alt_text("-leading-hyphen.jpg") is None

    def test_deterministic(self):
        """Test the same title always gives the same text."""
        title = "kenya_aa_peaberry-1kg.jpg"

        assert build_fallback_alt_text(title) == build_fallback_alt_text(title)
