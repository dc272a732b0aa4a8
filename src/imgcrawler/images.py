"""
Image selection: destination file names and format allow-list.
"""
from __future__ import annotations

from typing import AbstractSet, Optional
from urllib.parse import urlsplit

DEFAULT_STEM = "image"


def file_stem(url: str) -> str:
    """
    Derive the file name stem from an image URL.

    Takes the last path segment (query and fragment removed) and cuts it at
    the last dot, so ``.../pic.old?v=2`` gives ``pic``.
    """
    path = urlsplit(url).path
    name = path[path.rfind("/") + 1:]
    dot = name.rfind(".")
    if dot != -1:
        name = name[:dot]
    return name or DEFAULT_STEM


def extension_from_content_type(content_type: Optional[str]) -> Optional[str]:
    """
    Derive a file extension from a Content-Type header value.

    ``image/png`` -> ``png``, ``image/svg+xml`` -> ``svg``,
    ``image/jpeg; charset=binary`` -> ``jpeg``. Returns None when the header
    is missing or yields nothing.
    """
    if not content_type:
        return None
    mime = content_type.split(";", 1)[0].strip()
    subtype = mime[mime.rfind("/") + 1:]
    plus = subtype.rfind("+")
    if plus != -1:
        subtype = subtype[:plus]
    subtype = subtype.strip().lower()
    return subtype or None


def select_image(
    url: str,
    content_type: Optional[str],
    formats: AbstractSet[str] = frozenset(),
) -> Optional[str]:
    """
    Decide whether to keep an image and under which name.

    Args:
        url: Absolute image URL.
        content_type: Content-Type header of the image response, if any.
        formats: Allowed extensions, matched case-insensitively. Empty means
            accept all.

    Returns:
        The destination file name, or None to skip the image.
    """
    extension = extension_from_content_type(content_type)
    if formats:
        allowed = {f.lower() for f in formats}
        if extension is None or extension not in allowed:
            return None

    stem = file_stem(url)
    if extension is None:
        return stem
    return f"{stem}.{extension}"
