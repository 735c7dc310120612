"""Job posting retrieval."""

from gap_tailor.scraping.adapters import (
    ExtractedFields,
    GenericAdapter,
    SiteAdapter,
    adapter_for,
    register_adapter,
)
from gap_tailor.scraping.scraper import JobScraper, classify_list_items, extract_job

__all__ = [
    "ExtractedFields",
    "GenericAdapter",
    "JobScraper",
    "SiteAdapter",
    "adapter_for",
    "classify_list_items",
    "extract_job",
    "register_adapter",
]
