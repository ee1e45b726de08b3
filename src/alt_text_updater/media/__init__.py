"""
Storefront media package.

Provides the image model and the Shopify GraphQL client that lists images
and writes their alt text.
"""

from .base import MediaAsset, derive_filename
from .client import ShopifyMediaClient

__all__ = [
    "MediaAsset",
    "ShopifyMediaClient",
    "derive_filename",
]
