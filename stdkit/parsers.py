"""Strict parsing helpers that raise on invalid input."""

from __future__ import annotations

import re
from urllib.parse import SplitResult, urlsplit


def _scheme_of(raw: str) -> str:
    """Return the URL scheme, or an empty string if there is none."""
    for index, ch in enumerate(raw):
        if ch.isascii() and ch.isalpha():
            continue
        if ch.isascii() and (ch.isdigit() or ch in "+-."):
            if index == 0:
                return ""
            continue
        if ch == ":":
            if index == 0:
                raise ValueError("missing protocol scheme")
            return raw[:index]
        return ""
    return ""


def must_parse_url(url_string: str) -> SplitResult:
    """Parse a URL, raising ValueError if it is invalid."""
    if any(ord(ch) < 0x20 or ord(ch) == 0x7F for ch in url_string):
        raise ValueError(f"invalid control character in URL {url_string!r}")

    scheme = _scheme_of(url_string)
    rest = url_string[len(scheme) + 1:] if scheme else url_string
    path_part = rest.split("#", 1)[0].split("?", 1)[0]
    if not scheme and path_part and not path_part.startswith("/"):
        if ":" in path_part.split("/", 1)[0]:
            raise ValueError(
                f"parse {url_string!r}: first path segment in URL cannot contain colon"
            )

    parsed = urlsplit(url_string)
    try:
        parsed.port
    except ValueError as exc:
        raise ValueError(f"invalid port in URL {url_string!r}") from exc
    return parsed


def must_compile_regexp(pattern: str) -> re.Pattern:
    """Compile a regular expression; raises re.error if it is invalid."""
    return re.compile(pattern)