"""
Alt Text Updater.

Finds storefront images without alt text, generates SEO-friendly
descriptions with a vision model and writes them back to Shopify.

Usage:
    # Generate and write alt text
    alt-text-updater

    # Generate and report only
    alt-text-updater --dry-run
"""

__version__ = "0.1.0"

from .config import Settings
from .pipeline import run_alt_text_update

__all__ = [
    "Settings",
    "run_alt_text_update",
]
