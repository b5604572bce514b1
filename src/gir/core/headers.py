"""HTTP header name helpers."""

import string

_TOKEN_CHARS = frozenset(string.ascii_letters + string.digits + "!#$%&'*+-.^_`|~")


def canonical_header_key(name: str) -> str:
    """Return the canonical form of a header name.

    The first letter and any letter following a hyphen are upper-cased, the
    rest are lower-cased, so ``x-forwarded-host`` becomes ``X-Forwarded-Host``.
    Names containing characters that are not valid in a header token are
    returned unchanged.

    Args:
        name: Header name as supplied by the operator

    Returns:
        Canonical header name
    """
    if not name or any(char not in _TOKEN_CHARS for char in name):
        return name

    chars = []
    upper = True
    for char in name:
        chars.append(char.upper() if upper else char.lower())
        upper = char == "-"
    return "".join(chars)
