"""
Run report models.

The report is the only durable output of a run: one JSON file listing every
image that was processed, batch by batch, with the alt text it received or
the error that stopped it.
"""

from datetime import datetime, timezone
from pathlib import Path

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, model_serializer


class BatchUpdate(BaseModel):
    """Outcome for one image, as recorded in the report."""

    model_config = ConfigDict(populate_by_name=True)

    image_id: str = Field(alias="imageId")
    alt_tag: str | None = Field(default=None, alias="altTag")
    image_url: str = Field(alias="imageUrl")
    error: str | None = Field(default=None, description="Set only when processing failed")

    @model_serializer(mode="wrap")
    def _omit_missing_error(self, handler):
        data = handler(self)
        if data.get("error") is None:
            data.pop("error", None)
        return data


class BatchReport(BaseModel):
    """Updates made in one batch."""

    batch: int = Field(description="1-based batch number")
    updates: list[BatchUpdate] = Field(default_factory=list)


class RunReport(BaseModel):
    """Everything a run decided, in processing order."""

    model_config = ConfigDict(populate_by_name=True)

    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    dry_run: bool = Field(default=False, alias="dryRun")
    batches: list[BatchReport] = Field(default_factory=list)

    def add_batch(self, updates: list[BatchUpdate]) -> BatchReport:
        """Append the next batch and return it."""
        batch = BatchReport(batch=len(self.batches) + 1, updates=updates)
        self.batches.append(batch)
        return batch

    @property
    def updates(self) -> list[BatchUpdate]:
        """All updates across batches."""
        return [update for batch in self.batches for update in batch.updates]


def report_filename(timestamp: datetime) -> str:
    """Return the report file name for a run started at `timestamp`."""
    return f"output_{timestamp.astimezone(timezone.utc):%Y%m%d%H%M%S}.json"


def write_report(report: RunReport, output_dir: Path | str) -> Path:
    """
    Write the report as JSON.

    Args:
        report: Report to persist
        output_dir: Directory for report files, created if missing

    Returns:
        Path of the written file
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    output_file = output_dir / report_filename(report.timestamp)
    output_file.write_text(report.model_dump_json(by_alias=True, indent=2))
    logger.debug("Wrote report with {} batches to {}", len(report.batches), output_file)
    return output_file
