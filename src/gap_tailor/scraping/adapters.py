"""Host-specific extraction rules for job posting pages.

Each adapter lists ordered CSS selector candidates per field; the first
candidate yielding non-empty text wins. Adapters are matched by substring
on the URL host, in registration order, with GenericAdapter as the default.
"""

from __future__ import annotations

from dataclasses import dataclass

from bs4 import BeautifulSoup


@dataclass(frozen=True)
class ExtractedFields:
    title: str = ""
    company: str = ""
    description: str = ""


def first_text(soup: BeautifulSoup, selectors: tuple[str, ...], separator: str = " ") -> str:
    """Text of the first selector match that is non-empty after trimming."""
    for selector in selectors:
        element = soup.select_one(selector)
        if element is None:
            continue
        text = element.get_text(separator, strip=True)
        if text:
            return text
    return ""


class SiteAdapter:
    """Selector-based extraction for one job board."""

    name: str = "site"
    hosts: tuple[str, ...] = ()
    title_selectors: tuple[str, ...] = ()
    company_selectors: tuple[str, ...] = ()
    description_selectors: tuple[str, ...] = ()

    def matches(self, host: str) -> bool:
        host = host.lower()
        return any(h in host for h in self.hosts)

    def extract(self, soup: BeautifulSoup) -> ExtractedFields:
        return ExtractedFields(
            title=first_text(soup, self.title_selectors),
            company=first_text(soup, self.company_selectors),
            description=first_text(soup, self.description_selectors, separator="\n"),
        )


_REGISTRY: list[SiteAdapter] = []


def register_adapter(cls: type[SiteAdapter]) -> type[SiteAdapter]:
    """Class decorator adding an adapter to the host registry."""
    _REGISTRY.append(cls())
    return cls


def adapter_for(host: str) -> SiteAdapter:
    for adapter in _REGISTRY:
        if adapter.matches(host):
            return adapter
    return GenericAdapter()


@register_adapter
class LinkedInAdapter(SiteAdapter):
    name = "linkedin"
    hosts = ("linkedin.com",)
    title_selectors = (
        ".job-details-jobs-unified-top-card__job-title",
        "h1.t-24",
        "h1",
    )
    company_selectors = (
        ".job-details-jobs-unified-top-card__company-name",
        ".topcard__org-name-link",
    )
    description_selectors = (".jobs-description__content", ".description__text")


@register_adapter
class IndeedAdapter(SiteAdapter):
    name = "indeed"
    hosts = ("indeed.com",)
    title_selectors = (
        "h1.jobsearch-JobInfoHeader-title",
        '[data-testid="jobsearch-JobInfoHeader-title"]',
    )
    company_selectors = (
        '[data-testid="inlineHeader-companyName"]',
        ".jobsearch-InlineCompanyRating-companyHeader",
    )
    description_selectors = ("#jobDescriptionText",)


@register_adapter
class GreenhouseAdapter(SiteAdapter):
    name = "greenhouse"
    hosts = ("greenhouse.io",)
    title_selectors = ("h1.app-title", ".job-title")
    company_selectors = (".company-name",)
    description_selectors = ("#content",)


@register_adapter
class LeverAdapter(SiteAdapter):
    name = "lever"
    hosts = ("lever.co",)
    title_selectors = ("h2.posting-headline", ".posting-headline h2")
    company_selectors = ('[data-qa="company-name"]',)
    description_selectors = ('[data-qa="job-description"]', ".posting-page")


class GenericAdapter(SiteAdapter):
    """Fallback for unknown hosts."""

    name = "generic"
    title_selectors = ("h1", '[class*="title"]')
    company_selectors = ('[class*="company"]',)

    def matches(self, host: str) -> bool:
        return True

    def extract(self, soup: BeautifulSoup) -> ExtractedFields:
        main = soup.select_one('main, article, [role="main"], .content, #content')
        if main is not None:
            description = main.get_text("\n", strip=True)
        else:
            body = soup.body or soup
            description = body.get_text("\n", strip=True)
        return ExtractedFields(
            title=first_text(soup, self.title_selectors),
            company=first_text(soup, self.company_selectors),
            description=description,
        )
