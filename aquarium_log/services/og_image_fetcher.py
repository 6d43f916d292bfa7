"""
Aquarium Log Backend: Open Graph Image Fetcher
================================================

What:  Finds the og:image of an aquarium's website for the detail page.
How:   GET the page with httpx, scan the HTML for
       <meta property="og:image" content="...">, resolve the content
       against the page URL (relative paths are common).
Who:   GET /aquariums/{id}/og_image.

Contract:
    Never raises. Network errors, timeouts, non-2xx responses, invalid
    URLs and pages without the tag all return None and are logged at
    WARNING (or DEBUG for a missing tag). No retries.
"""

import logging
from html.parser import HTMLParser
from typing import Optional
from urllib.parse import urljoin, urlparse

import httpx

from aquarium_log.config import settings

logger = logging.getLogger(__name__)

# httpx's own default timeout, stated explicitly
FETCH_TIMEOUT_SECONDS = 5.0


class _OgImageParser(HTMLParser):
    """Stops at the first <meta property="og:image"> with content."""

    def __init__(self):
        super().__init__(convert_charrefs=True)
        self.og_image: Optional[str] = None

    def handle_starttag(self, tag, attrs):
        if self.og_image is not None or tag != "meta":
            return
        values = {name.lower(): (value or "") for name, value in attrs}
        if values.get("property", "").strip().lower() == "og:image":
            content = values.get("content", "").strip()
            if content:
                self.og_image = content


def extract_og_image(html: str, page_url: str) -> Optional[str]:
    """
    og:image URL of `html`, absolute against `page_url`, or None.

    Example:
        extract_og_image('<meta property="og:image" content="/img/top.jpg">',
                         "https://aqua.example.jp/about/")
        → "https://aqua.example.jp/img/top.jpg"
    """
    parser = _OgImageParser()
    parser.feed(html)
    parser.close()
    if not parser.og_image:
        return None
    return urljoin(page_url, parser.og_image)


class OgImageFetcher:

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        """
        Args:
            transport: Replacement transport (tests use httpx.MockTransport).
        """
        self.transport = transport

    async def fetch(self, url: Optional[str]) -> Optional[str]:
        if not url or not url.strip():
            return None
        url = url.strip()
        if urlparse(url).scheme not in ("http", "https"):
            logger.warning("og:image fetch skipped, unsupported URL: %s", url)
            return None

        try:
            async with httpx.AsyncClient(
                transport=self.transport,
                timeout=FETCH_TIMEOUT_SECONDS,
                follow_redirects=True,
                headers={"User-Agent": settings.og_fetch_user_agent},
            ) as client:
                response = await client.get(url)
            if not response.is_success:
                logger.warning("og:image fetch got HTTP %d from %s", response.status_code, url)
                return None
            og_image = extract_og_image(response.text, str(response.url))
        except httpx.HTTPError as e:
            logger.warning("og:image fetch failed for %s: %s: %s", url, type(e).__name__, str(e))
            return None
        except Exception:
            # Decoding and parsing problems
            logger.warning("og:image extraction failed for %s", url, exc_info=True)
            return None

        if og_image is None:
            logger.debug("No og:image on %s", url)
        return og_image


# ── Singleton Instance ────────────────────────────────────────────────────
og_image_fetcher = OgImageFetcher()
