"""Opaque token generation for confirmation and approval links."""

from __future__ import annotations

import secrets

# visually ambiguous characters swapped out of generated tokens
_AMBIGUOUS = str.maketrans({"l": "s", "I": "x", "O": "y", "0": "z"})


def generate_friendly_token(nbytes: int = 15) -> str:
    """Return a URL-safe random token free of easily misread characters.

    Parameters
    ----------
    nbytes:
        Bytes of entropy drawn from :mod:`secrets`; 15 bytes yields a
        20-character token.

    Returns
    -------
    str
        Token suitable for embedding in a URL query string.
    """

    return secrets.token_urlsafe(nbytes).translate(_AMBIGUOUS)
