"""
Link extraction and scope classification.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional
from urllib.parse import urldefrag, urljoin, urlparse

from bs4 import BeautifulSoup


@dataclass(frozen=True, slots=True)
class ScopeFilter:
    """Predicate: does a URL contain the scope anchor (usually the seed URL)?"""
    anchor: str

    def __call__(self, url: str) -> bool:
        return self.anchor in url


def is_absolute_url(url: str) -> bool:
    """Check that a URL parses with both a scheme and a network location."""
    try:
        parsed = urlparse(url)
        # Accessing .port validates the netloc (raises on junk like "host:abc")
        parsed.port
    except ValueError:
        return False
    return bool(parsed.scheme) and bool(parsed.netloc)


def absolutize(url: Optional[str], base: str) -> Optional[str]:
    """
    Resolve an attribute value against the document URL.

    Returns None when the value is missing or cannot be resolved. The fragment
    is dropped since it never reaches the server.
    """
    if url is None:
        return None
    try:
        joined, _ = urldefrag(urljoin(base, url.strip()))
    except ValueError:
        return None
    return joined or None


def resolve_links(document: BeautifulSoup, base_url: str) -> List[str]:
    """Return absolute href targets of every <a> element, in document order."""
    targets = []
    for a in document.find_all("a", href=True):
        target = absolutize(a["href"], base_url)
        if target:
            targets.append(target)
    return targets


def resolve_images(document: BeautifulSoup, base_url: str) -> List[str]:
    """Return absolute src values of every <img> element, in document order."""
    sources = []
    for img in document.find_all("img", src=True):
        src = absolutize(img["src"], base_url)
        if src and is_absolute_url(src):
            sources.append(src)
    return sources


def classify_links(targets: Iterable[str], scope: ScopeFilter) -> List[str]:
    """
    Select the link targets eligible for the frontier.

    Malformed URLs and URLs outside the scope are dropped silently. Order is
    preserved and repeats within the same page are collapsed. Whether a target
    was already visited is not decided here.
    """
    eligible: List[str] = []
    seen = set()
    for target in targets:
        if target in seen:
            continue
        seen.add(target)
        if is_absolute_url(target) and scope(target):
            eligible.append(target)
    return eligible
