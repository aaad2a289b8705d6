"""
FreePaste — Identifier Generation Unit Tests
===============================================

What:  Tests for paste id and owner token generation.
How:   Pure functions, no fixtures needed.

What we test:
    ✅ Ids are 10 chars drawn from [a-zA-Z0-9]
    ✅ Tokens are 64 lowercase hex chars
    ✅ is_valid_id accepts exactly the id shape (no trailing newline)
"""

import re

import pytest

from freepaste.services.id_generator import (
    ID_ALPHABET,
    generate_id,
    generate_token,
    is_valid_id,
)


class TestGenerateId:
    """Tests for generate_id()."""

    def test_default_length(self):
        """Ids should be 10 characters by default."""
        assert len(generate_id()) == 10

    def test_alphabet(self):
        """Every character should come from the id alphabet."""
        for _ in range(200):
            assert all(ch in ID_ALPHABET for ch in generate_id())

    def test_alphabet_is_62_alphanumerics(self):
        """The alphabet is exactly ASCII letters and digits."""
        assert len(ID_ALPHABET) == 62
        assert set(ID_ALPHABET) == set(
            "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"
        )

    def test_custom_length(self):
        assert len(generate_id(16)) == 16

    def test_ids_vary(self):
        """1000 draws from 62^10 values should not repeat."""
        ids = {generate_id() for _ in range(1000)}
        assert len(ids) == 1000


class TestGenerateToken:
    """Tests for generate_token()."""

    def test_shape(self):
        """Tokens should be 64 lowercase hex characters."""
        token = generate_token()
        assert re.fullmatch(r"[0-9a-f]{64}", token)

    def test_odd_length_is_trimmed(self):
        """Odd lengths are honored even though token_hex yields pairs."""
        assert len(generate_token(33)) == 33

    def test_tokens_vary(self):
        assert generate_token() != generate_token()


class TestIsValidId:
    """Tests for the view-page id format check."""

    @pytest.mark.parametrize("value", ["aZ3kP0qLm9", "0000000000", "ABCDEFGHIJ"])
    def test_accepts_well_formed(self, value):
        """Exactly 10 alphanumerics should pass."""
        assert is_valid_id(value)

    @pytest.mark.parametrize(
        "value",
        [
            "",
            "short",
            "aZ3kP0qLm9x",
            "aZ3kP0qLm!",
            "aZ3kP0qL-9",
            "favicon.ico",
            "aZ3kP0qLm9\n",
            "\naZ3kP0qLm9",
            None,
        ],
    )
    def test_rejects_malformed(self, value):
        """Wrong length, symbols, and surrounding newlines should fail."""
        assert not is_valid_id(value)

    def test_generated_ids_are_valid(self):
        """Every minted id should be accepted by the view page."""
        assert is_valid_id(generate_id())
