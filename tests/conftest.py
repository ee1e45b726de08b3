"""Pytest fixtures and configuration for alt-text-updater tests.

This module provides shared fixtures for testing the Shopify media client,
the alt text generator and the run pipeline.
"""

import tempfile
from collections.abc import Generator
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from alt_text_updater.config import Settings
from alt_text_updater.descriptions.base import DescriptionGenerator, GeneratedDescription
from alt_text_updater.media.base import MediaAsset
from alt_text_updater.media.client import ShopifyMediaClient

SHOP_NAME = "test-shop.myshopify.com"
GRAPHQL_URL = f"https://{SHOP_NAME}/admin/api/2025-04/graphql.json"

VALID_ALT_TEXT = "Freshly roasted specialty coffee beans in a Beans.ie retail bag"


# --- Temporary Directory Fixtures ---


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmp:
        yield Path(tmp)


@pytest.fixture
def output_dir(temp_dir: Path) -> Path:
    """Directory for run reports."""
    return temp_dir / "output"


# --- Settings Fixtures ---


@pytest.fixture
def test_settings(output_dir: Path) -> Settings:
    """Settings with test credentials and no waiting."""
    return Settings(
        _env_file=None,
        shopify_shop_name=SHOP_NAME,
        shopify_access_token="shpat_test",
        openai_api_key="sk-test",
        retry_delay=0,
        tpm_pause_seconds=0,
        output_dir=str(output_dir),
    )


# --- Sample Data Fixtures ---


def make_node(
    index: int,
    alt: str | None = None,
    url: str | None = "default",
) -> dict:
    """Build a `files` edge node as returned by the GraphQL listing."""
    node = {
        "id": f"gid://shopify/MediaImage/{index}",
        "alt": alt,
        "mediaContentType": "IMAGE",
    }
    if url == "default":
        url = f"https://cdn.shopify.com/s/files/1/0001/files/coffee_{index}.jpg?v=1700000000"
    node["image"] = {"url": url} if url is not None else None
    return node


def make_asset(index: int, alt: str | None = None, url: str | None = "default") -> MediaAsset:
    """Build a MediaAsset as the client would list it."""
    return MediaAsset.from_node(make_node(index, alt=alt, url=url))


def files_page(nodes: list[dict], has_next_page: bool = False, end_cursor: str | None = None) -> dict:
    """Build a GraphQL response body for one page of the files listing."""
    return {
        "data": {
            "files": {
                "edges": [{"node": node, "cursor": f"cursor-{i}"} for i, node in enumerate(nodes)],
                "pageInfo": {"hasNextPage": has_next_page, "endCursor": end_cursor},
            }
        }
    }


@pytest.fixture
def sample_assets() -> list[MediaAsset]:
    """Three images: two without alt text, one already described."""
    return [
        make_asset(1),
        make_asset(2, alt="   "),
        make_asset(3, alt="Existing coffee alt text"),
    ]


# --- Mock Client Fixtures ---


@pytest.fixture
def mock_media_client() -> ShopifyMediaClient:
    """Create a mock Shopify client with all scopes granted and no images."""
    client = MagicMock(spec=ShopifyMediaClient)
    client.missing_scopes = AsyncMock(return_value=[])
    client.verify_scopes = AsyncMock(return_value=True)
    client.list_all_media = AsyncMock(return_value=[])
    client.set_alt_text = AsyncMock(return_value=None)
    client.aclose = AsyncMock(return_value=None)
    return client


@pytest.fixture
def mock_generator() -> DescriptionGenerator:
    """Create a mock generator that always returns valid model text."""
    generator = MagicMock(spec=DescriptionGenerator)
    generator.model_name = "mock-model"

    async def mock_generate(
        image_url: str, image_title: str, business_context: str
    ) -> GeneratedDescription:
        """Return the same valid alt text for every image."""
        return GeneratedDescription(text=VALID_ALT_TEXT, source="model")

    generator.generate = AsyncMock(side_effect=mock_generate)
    return generator


# --- HTTP Mock Fixtures ---


def chat_completion(content: str | None = None, refusal: str | None = None) -> dict:
    """Build an OpenAI chat completion response body."""
    return {
        "id": "chatcmpl-test",
        "object": "chat.completion",
        "created": 1700000000,
        "model": "gpt-4o-2024-08-06",
        "choices": [
            {
                "index": 0,
                "finish_reason": "stop",
                "logprobs": None,
                "message": {"role": "assistant", "content": content, "refusal": refusal},
            }
        ],
        "usage": {"prompt_tokens": 900, "completion_tokens": 30, "total_tokens": 930},
    }
