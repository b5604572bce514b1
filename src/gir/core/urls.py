"""URL parsing and path joining.

Paths are joined and cleaned lexically: redundant separators are collapsed
and ``.``/``..`` segments resolved without touching the filesystem.
"""

import re
from urllib.parse import quote

from yarl import URL

from gir.core.errors import RequestResolutionError

_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2}).{0,2}", re.DOTALL)
_AUTHORITY = re.compile(r"^(?:[A-Za-z][A-Za-z0-9+.-]*:)?//([^/?#]*)")
_INVALID_HOST_CHARS = frozenset(" <>\"{}|\\^`")
# RFC 3986 path characters; existing escapes are validated before quoting.
_PATH_SAFE = "/%:@!$&'()*+,;=-._~"


def parse_url(raw: str) -> URL:
    """Parse and validate a URL string.

    Any scheme is accepted, as are scheme-less references.

    Args:
        raw: URL string to parse

    Returns:
        Parsed URL

    Raises:
        ValueError: If the string is not a syntactically valid URL
    """
    reason = _syntax_error(raw)
    if reason is not None:
        raise ValueError(reason)
    if raw.startswith(":"):
        raise ValueError("missing protocol scheme")

    try:
        url = URL(raw)
        if url.explicit_port is not None and url.explicit_port > 65535:
            raise ValueError(f"invalid port {url.explicit_port}")
    except (TypeError, ValueError) as e:
        raise ValueError(str(e)) from e

    authority = _AUTHORITY.match(raw)
    host = authority.group(1).rpartition("@")[2] if authority else ""
    for char in host:
        if char in _INVALID_HOST_CHARS:
            raise ValueError(f'invalid character "{char}" in host name')
    return url


def join_path(*elements: str) -> str:
    """Join path elements with slashes and clean the result.

    Empty elements are ignored. Joining nothing but empty elements yields an
    empty string.
    """
    joined = "/".join(element for element in elements if element)
    if not joined:
        return ""
    return _clean(joined)


def resolve_reference(base: URL, reference: str) -> URL:
    """Resolve a path reference against a base URL.

    The result keeps the scheme, user info and host of ``base``. Its path is
    the reference made absolute against the base path and percent-encoded,
    with query and fragment cleared.

    Args:
        base: URL to resolve against
        reference: Escaped path, absolute or relative

    Returns:
        Resolved URL

    Raises:
        RequestResolutionError: If the reference is not a valid path reference
    """
    reason = _syntax_error(reference)
    if reason is None and ("?" in reference or "#" in reference):
        reason = "invalid character in path"
    if reason is None and not reference.startswith("/"):
        if ":" in reference.split("/", 1)[0]:
            reason = "first path segment in URL cannot contain colon"
    if reason is not None:
        raise RequestResolutionError(reference, reason)

    try:
        merged = base.join(URL(reference, encoded=True)).raw_path
        path = quote(_clean("/" + merged.lstrip("/")), safe=_PATH_SAFE)
        return base.with_path(path, encoded=True)
    except (TypeError, ValueError) as e:
        raise RequestResolutionError(reference, str(e)) from e


def strip_port(host: str) -> str:
    """Drop a trailing ``:port`` from a host.

    Bracketed IPv6 literals keep their brackets: ``[::1]:8080`` -> ``[::1]``.
    """
    if host.startswith("["):
        end = host.find("]")
        return host[: end + 1] if end != -1 else host
    sep = host.find(":")
    return host[:sep] if sep > 0 else host


def _syntax_error(raw: str) -> str | None:
    for char in raw:
        if ord(char) < 0x20 or ord(char) == 0x7F:
            return "invalid control character in URL"
    match = _BAD_ESCAPE.search(raw)
    if match is not None:
        return f'invalid URL escape "{match.group(0)}"'
    return None


def _clean(path: str) -> str:
    rooted = path.startswith("/")
    segments: list[str] = []
    for segment in path.split("/"):
        if segment in ("", "."):
            continue
        if segment == "..":
            if segments and segments[-1] != "..":
                segments.pop()
            elif not rooted:
                segments.append("..")
            continue
        segments.append(segment)

    cleaned = "/".join(segments)
    if rooted:
        return "/" + cleaned
    return cleaned or "."
