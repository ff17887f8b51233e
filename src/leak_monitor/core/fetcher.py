"""
Fetches candidate posts from the monitored social sources.

Every source is queried once per domain through its URL template. Search-style
pages yield one post per subsection link, listing-style pages one post per
content block. A failure for one domain never stops the remaining domains.
"""

import logging
from typing import List, Optional, Sequence
from urllib.parse import quote, urljoin, urlparse

import httpx
from bs4 import BeautifulSoup
from rich.markup import escape

from .http_client import get_async_http_client
from .schemas import Post, Source, SourceFetchResult, SourceKind
from .utils import console

logger = logging.getLogger(__name__)

TITLE_LENGTH = 100

SOCIAL_SOURCES: Sequence[Source] = (
    Source(
        name="Reddit",
        url="https://www.reddit.com/search/?q={domain}&sort=new",
        kind=SourceKind.SEARCH,
        link_marker="/r/",
    ),
    Source(
        name="Twitter Search (Nitter)",
        url="https://nitter.net/search?f=tweets&q={domain}",
        kind=SourceKind.HTML,
        block_selector=".tweet",
    ),
)


def build_source_url(source: Source, domain: str) -> str:
    """Substitutes the URL-encoded *domain* into the source's template."""
    return source.url.replace("{domain}", quote(domain, safe=""))


def _origin(url: str) -> str:
    parsed = urlparse(url)
    return f"{parsed.scheme}://{parsed.netloc}"


def parse_search_posts(html: str, source: Source, domain: str) -> List[Post]:
    """Extracts every anchor whose link points into a subsection of the source."""
    soup = BeautifulSoup(html, "html.parser")
    origin = _origin(source.url)
    posts = []
    for anchor in soup.find_all("a", href=True):
        href = anchor["href"]
        if source.link_marker not in href:
            continue
        title = anchor.get_text(separator=" ", strip=True)
        if not title:
            continue
        posts.append(Post(title=title, url=urljoin(origin, href), domain=domain))
    return posts


def parse_html_posts(html: str, page_url: str, source: Source, domain: str) -> List[Post]:
    """Extracts every content block, keeping the start of its text and its first link."""
    soup = BeautifulSoup(html, "html.parser")
    posts = []
    for block in soup.select(source.block_selector):
        content = block.get_text(separator=" ", strip=True)
        if not content:
            continue
        link = block.find("a", href=True)
        url = urljoin(page_url, link["href"]) if link else page_url
        posts.append(Post(title=content[:TITLE_LENGTH], url=url, domain=domain))
    return posts


async def _fetch_domain(
    client: httpx.AsyncClient, source: Source, domain: str
) -> List[Post]:
    url = build_source_url(source, domain)
    response = await client.get(url)
    response.raise_for_status()

    if source.kind == SourceKind.SEARCH:
        return parse_search_posts(response.text, source, domain)
    return parse_html_posts(response.text, url, source, domain)


async def fetch_source(
    source: Source,
    domains: Sequence[str],
    client: Optional[httpx.AsyncClient] = None,
    verbose: bool = False,
) -> SourceFetchResult:
    """
    Fetches posts from *source* for every domain.

    Per-domain failures are recorded in ``errors`` (and printed when *verbose*)
    instead of being raised, so partial results are always returned.
    """
    if client is None:
        async with get_async_http_client() as own_client:
            return await fetch_source(source, domains, own_client, verbose)

    result = SourceFetchResult(source=source.name)
    for domain in domains:
        try:
            posts = await _fetch_domain(client, source, domain)
            result.posts.extend(posts)
            logger.debug("%s returned %d post(s) for %s", source.name, len(posts), domain)
        except Exception as e:
            result.errors[domain] = str(e) or type(e).__name__
            logger.debug("Error fetching %s from %s: %s", domain, source.name, e)
            if verbose:
                console.print(f"    [red]Error fetching {domain}:[/red] {escape(str(e))}")
    return result


async def fetch_posts(
    source: Source,
    domains: Sequence[str],
    client: Optional[httpx.AsyncClient] = None,
    verbose: bool = False,
) -> List[Post]:
    """Returns only the posts gathered by :func:`fetch_source`."""
    result = await fetch_source(source, domains, client=client, verbose=verbose)
    return result.posts
