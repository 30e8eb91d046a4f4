import re
from dataclasses import dataclass
from typing import Iterable, Optional, Protocol

import httpx
from bs4 import BeautifulSoup

MIN_CONTENT_LENGTH = 100

JOB_BOARD_PATTERNS = {
    "linkedin": re.compile(r"linkedin\.com/jobs", re.IGNORECASE),
    "greenhouse": re.compile(r"greenhouse\.io", re.IGNORECASE),
    "lever": re.compile(r"lever\.co", re.IGNORECASE),
    "workday": re.compile(r"workday\.com|myworkdayjobs\.com", re.IGNORECASE),
    "indeed": re.compile(r"indeed\.com", re.IGNORECASE),
    "glassdoor": re.compile(r"glassdoor\.com", re.IGNORECASE),
}

# (title, company, location, content) selectors per board, most specific first
BOARD_SELECTORS = {
    "linkedin": ("h1.job-title, h1.top-card-layout__title", "a.company-name, a.topcard__org-name-link",
                 "span.job-location, span.topcard__flavor--bullet", "div.description, div.show-more-less-html__markup"),
    "greenhouse": ("h1.app-title, h1", "span.company-name", "div.location", "div#content"),
    "lever": ("div.posting-headline h2, h2.posting-headline", "div.company-name",
              "div.posting-categories .location", "div.section"),
}

GENERIC_SELECTORS = (
    "h1, [class*=job-title], title",
    "[class*=company], [class*=employer]",
    "[class*=location]",
    "main, article, div#job-description, [class*=job-description], [class*=content]",
)

CHROME_TAGS = ["script", "style", "nav", "header", "footer", "noscript", "svg"]

DEFAULT_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/120.0.0.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
}


@dataclass(frozen=True)
class ScrapeResult:
    success: bool
    text: str = ""
    title: Optional[str] = None
    company: Optional[str] = None
    location: Optional[str] = None
    source: str = "unknown"
    error: Optional[str] = None


class JobPostFetcher(Protocol):
    def scrape(self, url: str) -> ScrapeResult: ...


def detect_job_board(url: str) -> str:
    for name, pattern in JOB_BOARD_PATTERNS.items():
        if pattern.search(url):
            return name
    return "generic"


def _first_text(soup: BeautifulSoup, selectors: str) -> Optional[str]:
    node = soup.select_one(selectors)
    if node is None:
        return None
    text = node.get_text(" ", strip=True)
    return text or None


def _joined_text(nodes: Iterable) -> str:
    return "\n\n".join(node.get_text("\n", strip=True) for node in nodes)


def normalise_whitespace(text: str) -> str:
    text = re.sub(r"[ \t\xa0]+", " ", text)
    text = re.sub(r" *\n *", "\n", text)
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()


def extract_job_posting(html: str, source: str = "generic") -> ScrapeResult:
    """Pull title, company, location and description text out of a job page."""
    soup = BeautifulSoup(html, "html.parser")
    title_sel, company_sel, location_sel, content_sel = BOARD_SELECTORS.get(source, GENERIC_SELECTORS)

    title = _first_text(soup, title_sel) or _first_text(soup, GENERIC_SELECTORS[0])
    company = _first_text(soup, company_sel)
    if company is None:
        site_name = soup.find("meta", attrs={"property": "og:site_name"})
        company = site_name.get("content") if site_name else None
    location = _first_text(soup, location_sel)

    for tag in soup(CHROME_TAGS):
        tag.decompose()

    text = normalise_whitespace(_joined_text(soup.select(content_sel)))
    if len(text) < MIN_CONTENT_LENGTH:
        body = soup.body or soup
        text = normalise_whitespace(body.get_text("\n", strip=True))

    success = len(text) >= MIN_CONTENT_LENGTH
    return ScrapeResult(
        success=success,
        text=text,
        title=title,
        company=company,
        location=location,
        source=source,
        error=None if success else "Could not extract job description",
    )


class JobPostScraper:
    """Fetch a job posting over HTTP. Never raises: failures come back as ScrapeResult(success=False)."""

    def __init__(self, timeout: float = 15.0, client: httpx.Client | None = None):
        self.timeout = timeout
        self.client = client

    def _get(self, url: str) -> httpx.Response:
        if self.client is not None:
            return self.client.get(url, headers=DEFAULT_HEADERS)
        with httpx.Client(timeout=self.timeout, follow_redirects=True, headers=DEFAULT_HEADERS) as client:
            return client.get(url)

    def scrape(self, url: str) -> ScrapeResult:
        source = detect_job_board(url)
        try:
            response = self._get(url)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            return ScrapeResult(success=False, source=source, error=f"HTTP {e.response.status_code}")
        except httpx.HTTPError as e:
            return ScrapeResult(success=False, source=source, error=str(e) or type(e).__name__)

        return extract_job_posting(response.text, source)
