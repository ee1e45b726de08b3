"""
Data models for storefront media.

Provides the Pydantic model for a listed image and the helpers that derive
its filename and decide whether it needs alt text.
"""

from pydantic import BaseModel, ConfigDict, Field

UNSUPPORTED_EXTENSIONS = (".svg",)


def derive_filename(image_id: str, url: str | None) -> str:
    """
    Derive a human-readable filename for an image.

    Uses the final path segment of the image URL with any query string
    removed. Falls back to the trailing segment of the identifier when there
    is no URL or the segment is empty.

    Args:
        image_id: Opaque remote identifier (e.g. gid://shopify/MediaImage/1)
        url: Image URL, if the asset has one

    Returns:
        Filename string
    """
    filename = image_id.split("/")[-1]
    if url:
        filename = url.split("/")[-1].split("?")[0] or filename
    return filename


class MediaAsset(BaseModel):
    """An image on the storefront, as listed at the start of a run."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Opaque remote identifier")
    alt_text: str | None = Field(default=None, description="Current alternative text")
    filename: str = Field(description="Filename derived from the URL or identifier")
    url: str = Field(default="", description="Image URL, empty when the API returned none")

    @classmethod
    def from_node(cls, node: dict) -> "MediaAsset":
        """Build an asset from a `files` edge node of the GraphQL listing."""
        url = (node.get("image") or {}).get("url") or ""
        return cls(
            id=node["id"],
            alt_text=node.get("alt"),
            filename=derive_filename(node["id"], url),
            url=url,
        )

    @property
    def is_missing_alt(self) -> bool:
        """True when the asset has no alt text or only whitespace."""
        return not self.alt_text or not self.alt_text.strip()

    @property
    def is_supported_format(self) -> bool:
        """True unless the URL points at a format the vision model cannot read."""
        return not self.url.lower().endswith(UNSUPPORTED_EXTENSIONS)
