"""Filing summary generation module."""

from docketwatch.processing.filing_summaries.summary_generator import (
    NO_DOCUMENT_SUMMARY,
    SUMMARY_UNAVAILABLE,
    SummaryGenerator,
)

__all__ = ["SummaryGenerator", "NO_DOCUMENT_SUMMARY", "SUMMARY_UNAVAILABLE"]
