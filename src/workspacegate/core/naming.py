"""Naming conventions shared with the workspace provisioners.

Provisioners label bindings with a sanitized form of the username so that
bindings can be selected server-side. The rule here must stay byte-for-byte
identical to theirs or labeled bindings stop matching.
"""

import re

_LABEL_UNSAFE = re.compile(r"[^0-9a-z.]+")

LABEL_TOKEN_SEPARATOR = "___"


def username_label_token(username: str) -> str:
    """Convert a username to the value used in the username label.

    Every maximal run of characters outside ``[0-9a-z.]`` becomes ``___``.
    Uppercase letters are not lowered, so they are replaced too.

    The mapping is lossy: ``john-smith`` and ``john_smith`` both map to
    ``john___smith``.

    Args:
        username: Username exactly as the identity provider reports it

    Returns:
        Label-safe token
    """
    return _LABEL_UNSAFE.sub(LABEL_TOKEN_SEPARATOR, username)


def label_equals(key: str, value: str) -> str:
    """Selector matching resources whose label ``key`` equals ``value``."""
    return f"{key}={value}"


def label_absent(key: str) -> str:
    """Selector matching resources without label ``key``."""
    return f"!{key}"
