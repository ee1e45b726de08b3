"""
Alt text update run.

Checks the store app's scopes, lists every image, picks the ones without alt
text, and generates and writes alt text for them in small concurrent batches
while staying under the completion API's token budget. The run report is
written once at the end, whether or not the run succeeded.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import TYPE_CHECKING, TypeVar

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field
from rich.console import Console
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn

from ..descriptions import DescriptionGenerator, GeneratedDescription, create_description_generator
from ..errors import MissingScopesError
from ..media import MediaAsset, ShopifyMediaClient
from .report import BatchUpdate, RunReport, write_report

if TYPE_CHECKING:
    from ..config import Settings

console = Console()

DEFAULT_IMAGE_TITLE = "Coffee product image"

T = TypeVar("T")


class ItemSuccess(BaseModel):
    """An image that was processed without error."""

    model_config = ConfigDict(frozen=True)

    image: MediaAsset
    description: GeneratedDescription
    written: bool = Field(default=False, description="True if alt text was written to the store")

    def to_update(self) -> BatchUpdate:
        return BatchUpdate(
            image_id=self.image.id,
            alt_tag=self.description.text,
            image_url=self.image.url,
        )


class ItemFailure(BaseModel):
    """An image whose generation or write raised."""

    model_config = ConfigDict(frozen=True)

    image: MediaAsset
    error: str

    def to_update(self) -> BatchUpdate:
        return BatchUpdate(
            image_id=self.image.id,
            alt_tag=None,
            image_url=self.image.url,
            error=self.error,
        )


ItemOutcome = ItemSuccess | ItemFailure


class RunResult(BaseModel):
    """What the caller gets back from a run."""

    report: RunReport
    report_path: Path | None = None
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


class TokenBudget:
    """
    Estimated token-per-minute budget for the completion API.

    Usage is estimated from a fixed per-request figure, not read from API
    responses, so this only approximates the real rate limit.
    """

    def __init__(
        self,
        limit: int = 30000,
        per_item: int = 1000,
        threshold: float = 0.9,
        pause_seconds: float = 60.0,
    ):
        self.limit = limit
        self.per_item = per_item
        self.threshold = threshold
        self.pause_seconds = pause_seconds
        self.used = 0
        self.pauses = 0

    def would_exceed(self, batch_size: int) -> bool:
        """True if a batch of this size would cross the threshold."""
        return self.used + batch_size * self.per_item > self.limit * self.threshold

    async def wait_for_capacity(self, batch_size: int) -> None:
        """Pause and reset the estimate if the next batch would cross the threshold."""
        if not self.would_exceed(batch_size):
            return
        logger.warning(
            "Approaching OpenAI TPM limit (used={}, limit={}), pausing {}s",
            self.used,
            self.limit,
            self.pause_seconds,
        )
        await asyncio.sleep(self.pause_seconds)
        self.used = 0
        self.pauses += 1

    def record(self, count: int) -> None:
        """Add the estimated usage of `count` generations."""
        self.used += count * self.per_item


def select_candidates(images: list[MediaAsset]) -> list[MediaAsset]:
    """
    Pick the images that need alt text.

    An image is a candidate when its alt text is empty or whitespace and its
    format is supported. Unsupported images missing alt text are logged.
    """
    candidates = []
    for image in images:
        if not image.is_missing_alt:
            continue
        if not image.is_supported_format:
            logger.warning("Skipping unsupported image format (SVG): {}", image.url)
            continue
        candidates.append(image)
    return candidates


def chunked(items: list[T], size: int) -> list[list[T]]:
    """Split items into consecutive chunks of at most `size`."""
    if size < 1:
        raise ValueError("Batch size must be at least 1")
    return [items[i : i + size] for i in range(0, len(items), size)]


async def process_image(
    image: MediaAsset,
    media_client: ShopifyMediaClient,
    generator: DescriptionGenerator,
    business_context: str,
    dry_run: bool = False,
) -> ItemOutcome:
    """
    Generate alt text for one image and, in live mode, write it back.

    Never raises: any error becomes an ItemFailure.
    """
    try:
        description = await generator.generate(
            image_url=image.url,
            image_title=image.filename or DEFAULT_IMAGE_TITLE,
            business_context=business_context,
        )
        if dry_run:
            return ItemSuccess(image=image, description=description)

        if description.text is None:
            logger.warning("Skipping update for {}: no valid alt text generated", image.id)
            return ItemSuccess(image=image, description=description)

        await media_client.set_alt_text(image.id, description.text)
        logger.info("Updated alt text for {}: {}", image.id, description.text)
        return ItemSuccess(image=image, description=description, written=True)

    except Exception as e:
        logger.error("Failed to process image {} ({}): {}", image.id, image.url, e)
        return ItemFailure(image=image, error=str(e))


async def process_batch(
    batch: list[MediaAsset],
    media_client: ShopifyMediaClient,
    generator: DescriptionGenerator,
    business_context: str,
    dry_run: bool = False,
) -> list[ItemOutcome]:
    """Process every image of a batch concurrently, returning outcomes in input order."""
    return await asyncio.gather(
        *(
            process_image(image, media_client, generator, business_context, dry_run)
            for image in batch
        )
    )


async def update_alt_text(
    media_client: ShopifyMediaClient,
    generator: DescriptionGenerator,
    report: RunReport,
    *,
    required_scopes: list[str],
    business_context: str,
    batch_size: int = 5,
    token_budget: TokenBudget | None = None,
) -> RunReport:
    """
    Run scope check, discovery and the batch loop, filling in `report`.

    Args:
        media_client: Storefront client
        generator: Alt text generator
        report: Report to append batches to; its dry_run flag controls writes
        required_scopes: Scopes the store app must hold
        business_context: Brand description for prompts
        batch_size: Images processed concurrently per batch
        token_budget: Completion API budget; defaults to TokenBudget()

    Returns:
        The same report, with one batch entry per processed batch

    Raises:
        MissingScopesError: If required scopes are not granted
        MediaAPIError: If listing images fails
    """
    token_budget = token_budget or TokenBudget()

    missing = await media_client.missing_scopes(required_scopes)
    if missing:
        raise MissingScopesError(missing)

    logger.info("Fetching images from Shopify")
    images = await media_client.list_all_media()
    logger.info("Images retrieved: {}", len(images))

    candidates = select_candidates(images)
    logger.info("Images missing alt text: {}", len(candidates))
    if not candidates:
        logger.info("No images need alt text updates")
        return report

    batches = chunked(candidates, batch_size)

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        console=console,
    ) as progress:
        task = progress.add_task("Generating alt text...", total=len(candidates))

        for batch_num, batch in enumerate(batches, 1):
            logger.info("Processing batch {} of {}", batch_num, len(batches))
            await token_budget.wait_for_capacity(len(batch))

            outcomes = await process_batch(
                batch, media_client, generator, business_context, report.dry_run
            )
            token_budget.record(len(batch))

            batch_report = report.add_batch([outcome.to_update() for outcome in outcomes])
            if report.dry_run:
                logger.info(
                    "Batch {} updates: {}",
                    batch_num,
                    [u.model_dump(by_alias=True) for u in batch_report.updates],
                )
            progress.advance(task, len(batch))

    return report


async def run_alt_text_update(
    settings: Settings,
    dry_run: bool = False,
    media_client: ShopifyMediaClient | None = None,
    generator: DescriptionGenerator | None = None,
) -> RunResult:
    """
    Run the whole job once and persist its report.

    Clients are built from `settings` unless given. Setup failures end the
    run and are returned in the result rather than raised; the report is
    written in every case.

    Args:
        settings: Application settings
        dry_run: Generate and report only, never write alt text
        media_client: Optional pre-built storefront client (caller closes it)
        generator: Optional pre-built alt text generator

    Returns:
        RunResult with the report, its path and any setup error
    """
    report = RunReport(dry_run=dry_run)
    result = RunResult(report=report)
    owns_client = media_client is None

    logger.info("Starting alt text update (dry_run={})", dry_run)
    try:
        if media_client is None:
            media_client = ShopifyMediaClient(
                shop_name=settings.shopify_shop_name,
                access_token=settings.shopify_access_token,
                api_version=settings.shopify_api_version,
                page_size=settings.page_size,
                max_attempts=settings.max_attempts,
                retry_delay=settings.retry_delay,
                timeout=settings.request_timeout,
            )
        if generator is None:
            generator = create_description_generator(
                provider_type="openai",
                api_key=settings.openai_api_key,
                model=settings.openai_model,
                max_attempts=settings.max_attempts,
                retry_delay=settings.retry_delay,
            )

        await update_alt_text(
            media_client,
            generator,
            report,
            required_scopes=settings.required_scopes,
            business_context=settings.business_context,
            batch_size=settings.batch_size,
            token_budget=TokenBudget(
                limit=settings.tpm_limit,
                per_item=settings.tokens_per_request,
                threshold=settings.tpm_threshold,
                pause_seconds=settings.tpm_pause_seconds,
            ),
        )
        logger.info("Alt text update completed: {} images processed", len(report.updates))

    except Exception as e:
        logger.exception("Error in alt text update: {}", e)
        result.error = str(e)

    finally:
        if owns_client and media_client is not None:
            await media_client.aclose()
        try:
            result.report_path = write_report(report, settings.output_path)
            logger.info("Report saved to {}", result.report_path)
        except OSError as e:
            logger.error("Failed to write report: {}", e)

    return result
