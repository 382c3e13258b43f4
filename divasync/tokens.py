"""Random record tokens and capture-date stamps."""

from __future__ import annotations

import random
from datetime import datetime

HEX_DIGITS = "0123456789abcdef"
TOKEN_LENGTH = 16

_DEFAULT_RNG = random.Random()


def generate_token(rng: random.Random | None = None) -> str:
    """Return a token of sixteen lowercase hexadecimal digits."""
    source = rng if rng is not None else _DEFAULT_RNG
    return "".join(source.choice(HEX_DIGITS) for _ in range(TOKEN_LENGTH))


def date_stamp(now: datetime | None = None) -> str:
    """Return the capture date as year, unpadded month and two-digit day."""
    moment = now if now is not None else datetime.now()
    return f"{moment.year}{moment.month}{moment.day:02d}"