"""
Alt text update pipeline package.
"""

from .report import BatchReport, BatchUpdate, RunReport, write_report
from .runner import (
    ItemFailure,
    ItemSuccess,
    RunResult,
    TokenBudget,
    run_alt_text_update,
    select_candidates,
    update_alt_text,
)

__all__ = [
    "BatchReport",
    "BatchUpdate",
    "ItemFailure",
    "ItemSuccess",
    "RunReport",
    "RunResult",
    "TokenBudget",
    "run_alt_text_update",
    "select_candidates",
    "update_alt_text",
    "write_report",
]
