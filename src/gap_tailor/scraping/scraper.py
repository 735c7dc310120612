"""Job posting retrieval: fetch a page, then extract title, company and text."""

from __future__ import annotations

import asyncio
import logging
import re
from urllib.parse import urlparse

import httpx
from bs4 import BeautifulSoup

from gap_tailor.config import DEFAULT_USER_AGENT, ScraperConfig
from gap_tailor.errors import FetchError, TimeoutExceeded
from gap_tailor.models.job import DEFAULT_COMPANY, DEFAULT_TITLE, JobPosting
from gap_tailor.scraping.adapters import adapter_for
from gap_tailor.utils.deadline import CancelToken, Deadline, guarded
from gap_tailor.utils.url_validator import validate_url

logger = logging.getLogger(__name__)

NOISE_TAGS = ["script", "style", "nav", "footer", "header"]

REQUIREMENT_KEYWORDS = ("require", "must have", "qualification", "experience with")
RESPONSIBILITY_KEYWORDS = ("responsib", "will ", "you will", "duties")

MAX_RAW_CHARS = 10_000
MAX_LIST_ITEMS = 20


def classify_list_items(
    soup: BeautifulSoup, limit: int = MAX_LIST_ITEMS
) -> tuple[list[str], list[str]]:
    """Split ``<li>`` texts into (requirements, responsibilities).

    Requirement keywords take precedence. Items of 10 characters or fewer,
    or 500 or more, are ignored.
    """
    requirements: list[str] = []
    responsibilities: list[str] = []
    for item in soup.find_all("li"):
        text = item.get_text(" ", strip=True)
        if not 10 < len(text) < 500:
            continue
        lower = text.lower()
        if any(k in lower for k in REQUIREMENT_KEYWORDS):
            requirements.append(text)
        elif any(k in lower for k in RESPONSIBILITY_KEYWORDS):
            responsibilities.append(text)
    return requirements[:limit], responsibilities[:limit]


def extract_job(
    html: str,
    url: str | None = None,
    *,
    max_raw_chars: int = MAX_RAW_CHARS,
    max_list_items: int = MAX_LIST_ITEMS,
) -> JobPosting:
    """Extract a JobPosting from page HTML. Never fails on odd markup."""
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(NOISE_TAGS):
        tag.decompose()

    host = (urlparse(url).hostname or "") if url else ""
    adapter = adapter_for(host)
    fields = adapter.extract(soup)
    logger.debug("Extracting %s with %s adapter", host or "<no host>", adapter.name)

    requirements, responsibilities = classify_list_items(soup, max_list_items)

    body = soup.body or soup
    raw_text = re.sub(r"\s+", " ", body.get_text(" ")).strip()[:max_raw_chars]

    return JobPosting(
        title=fields.title.strip() or DEFAULT_TITLE,
        company=fields.company.strip() or DEFAULT_COMPANY,
        description=fields.description.strip() or raw_text,
        raw_text=raw_text,
        url=url,
        requirements=requirements,
        responsibilities=responsibilities,
    )


class JobScraper:
    """Fetches job posting pages over HTTP.

    Pass ``client`` to reuse a connection pool (or a mock transport in
    tests); otherwise a client is opened per fetch.
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        *,
        user_agent: str = DEFAULT_USER_AGENT,
        timeout: float = 20.0,
        max_raw_chars: int = MAX_RAW_CHARS,
        max_list_items: int = MAX_LIST_ITEMS,
        check_host: bool = True,
    ):
        self._client = client
        self.timeout = timeout
        self.max_raw_chars = max_raw_chars
        self.max_list_items = max_list_items
        self.check_host = check_host
        self.headers = {
            "User-Agent": user_agent,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
            "Accept-Language": "en-US,en;q=0.5",
        }

    @classmethod
    def from_config(
        cls, config: ScraperConfig, client: httpx.AsyncClient | None = None
    ) -> JobScraper:
        return cls(
            client,
            user_agent=config.user_agent,
            timeout=config.timeout,
            max_raw_chars=config.max_raw_chars,
            max_list_items=config.max_list_items,
        )

    async def fetch_job(
        self,
        url: str,
        *,
        deadline: Deadline | None = None,
        cancel: CancelToken | None = None,
    ) -> JobPosting:
        """Fetch and extract a posting.

        Raises InvalidUrl, FetchError, TimeoutExceeded or Cancelled.
        """
        url = validate_url(url, resolve=False)
        if self.check_host:
            await asyncio.to_thread(validate_url, url)

        logger.info("Fetching job posting: %s", url)
        html = await guarded(
            self._fetch(url),
            operation="Job posting fetch",
            deadline=deadline,
            cancel=cancel,
        )
        job = extract_job(
            html,
            url,
            max_raw_chars=self.max_raw_chars,
            max_list_items=self.max_list_items,
        )
        logger.info("Extracted job posting: %s at %s", job.title, job.company)
        return job

    async def _fetch(self, url: str) -> str:
        if self._client is not None:
            return await self._get(self._client, url)
        async with httpx.AsyncClient() as client:
            return await self._get(client, url)

    async def _get(self, client: httpx.AsyncClient, url: str) -> str:
        try:
            response = await client.get(
                url,
                headers=self.headers,
                follow_redirects=True,
                timeout=self.timeout,
            )
        except httpx.TimeoutException as exc:
            raise TimeoutExceeded("Job posting fetch", self.timeout) from exc
        except httpx.HTTPError as exc:
            raise FetchError(f"Failed to fetch URL: {exc}") from exc

        if not response.is_success:
            raise FetchError(
                f"Failed to fetch URL: {response.status_code}",
                status=response.status_code,
            )
        return response.text
