from __future__ import annotations

import re

from account_gate.security.tokens import generate_friendly_token


def test_friendly_token_is_url_safe_and_unambiguous():
    tokens = {generate_friendly_token() for _ in range(200)}

    assert len(tokens) == 200
    for token in tokens:
        assert len(token) == 20
        assert re.fullmatch(r"[A-Za-z0-9_-]+", token)
        assert not set(token) & set("lIO0")
