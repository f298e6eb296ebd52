"""
Direct page fetch with structural text extraction.

This module provides the DirectFetcher class, which requests a page with
browser-like headers, strips non-content elements with BeautifulSoup and
extracts text from the first matching content container.
"""

import ipaddress
import logging
from typing import List, Optional
from urllib.parse import urlparse

import requests
from bs4 import BeautifulSoup
from daily_feed.content.base import ContentFetcher
from daily_feed.errors import TransientProviderError

logger = logging.getLogger(__name__)


BROWSER_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    ),
    "Accept": (
        "text/html,application/xhtml+xml,application/xml;q=0.9,"
        "image/avif,image/webp,image/apng,*/*;q=0.8"
    ),
    "Accept-Language": "en-US,en;q=0.9",
    "Accept-Encoding": "gzip, deflate",
    "Cache-Control": "no-cache",
    "Pragma": "no-cache",
    "Upgrade-Insecure-Requests": "1",
    "Sec-Fetch-Dest": "document",
    "Sec-Fetch-Mode": "navigate",
    "Sec-Fetch-Site": "none",
    "Sec-Fetch-User": "?1",
    "Sec-Ch-Ua": '"Not_A Brand";v="8", "Chromium";v="120", "Google Chrome";v="120"',
    "Sec-Ch-Ua-Mobile": "?0",
    "Sec-Ch-Ua-Platform": '"Windows"',
}

NOISE_SELECTOR = "script, style, nav, footer, header, aside, .sidebar, .advertisement, .ads"

CONTENT_SELECTORS = [
    "article",
    "[role='main']",
    "main",
    ".post-content",
    ".article-content",
    ".entry-content",
    ".content",
]


def validate_fetch_url(url: str) -> Optional[str]:
    """Returns a reason string if the URL must not be fetched, else None."""
    parsed = urlparse(url or "")
    if parsed.scheme not in ("http", "https"):
        return "bad_scheme"
    host = (parsed.hostname or "").strip().lower()
    if not host:
        return "missing_host"
    if host in ("localhost", "localhost.localdomain"):
        return "blocked_host"
    try:
        ip = ipaddress.ip_address(host)
    except ValueError:
        return None
    if ip.is_private or ip.is_loopback or ip.is_link_local or ip.is_unspecified:
        return "blocked_private_ip"
    return None


def extract_text(html: str) -> str:
    """Extracts readable text from an HTML document."""
    soup = BeautifulSoup(html, "html.parser")

    for element in soup.select(NOISE_SELECTOR):
        element.decompose()

    parts: List[str] = []
    for selector in CONTENT_SELECTORS:
        container = soup.select(selector)
        if not container:
            continue
        logger.debug("Found content with selector: %s", selector)
        for node in container:
            for block in node.select("p, h1, h2, h3, li"):
                text = block.get_text(" ", strip=True)
                if len(text) > 20:
                    parts.append(text)
        break

    # Fallback: every paragraph on the page
    if not parts:
        for block in soup.select("body p"):
            text = block.get_text(" ", strip=True)
            if len(text) > 30:
                parts.append(text)

    return "\n\n".join(parts).strip()


class DirectFetcher(ContentFetcher):
    """Fetches the page itself and extracts its article text."""

    def __init__(self, timeout: float = 60):
        self.timeout = timeout

    def name(self) -> str:
        return "direct"

    def fetch(self, url: str) -> str:
        reason = validate_fetch_url(url)
        if reason:
            raise TransientProviderError(self.name(), f"refusing {url}: {reason}")

        try:
            resp = requests.get(url, headers=BROWSER_HEADERS, timeout=self.timeout)
        except requests.RequestException as req_err:
            raise TransientProviderError(self.name(), str(req_err)) from req_err

        logger.info("Direct fetch %s -> %d", url, resp.status_code)
        if resp.status_code != 200:
            raise TransientProviderError(self.name(), f"status code {resp.status_code}")

        return extract_text(resp.text)
