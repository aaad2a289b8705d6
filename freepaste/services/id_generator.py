"""
FreePaste — Identifier and Token Generation
=============================================

What:  Produces public paste ids and owner tokens.

    generate_id()     10 chars from [a-zA-Z0-9]; 62^10 possible values.
                      Collisions are possible and are handled by the insert
                      retry in PasteService, not prevented here.
    generate_token()  64 lowercase hex chars from `secrets` (32 random bytes).
                      The token is a bearer credential, so it must come from
                      the OS CSPRNG.
"""

import re
import secrets
import string

ID_ALPHABET = string.ascii_letters + string.digits
ID_LENGTH = 10
TOKEN_LENGTH = 64

_ID_PATTERN = re.compile(r"[a-zA-Z0-9]{%d}" % ID_LENGTH)


def generate_id(length: int = ID_LENGTH) -> str:
    return "".join(secrets.choice(ID_ALPHABET) for _ in range(length))


def generate_token(length: int = TOKEN_LENGTH) -> str:
    # token_hex(n) yields 2n chars; round up then trim odd lengths
    return secrets.token_hex((length + 1) // 2)[:length]


def is_valid_id(value: str) -> bool:
    """True when `value` has the exact shape of a paste id."""
    # fullmatch, not match: `$` also matches before a trailing newline
    return bool(_ID_PATTERN.fullmatch(value or ""))
