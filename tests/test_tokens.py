import random
import string
from datetime import datetime

from divasync.tokens import date_stamp, generate_token


def test_token_is_sixteen_hex_digits():
    token = generate_token(random.Random(1))
    assert len(token) == 16
    assert set(token) <= set("0123456789abcdef")


def test_token_default_rng_gives_hex():
    token = generate_token()
    assert len(token) == 16
    assert all(ch in string.hexdigits.lower() for ch in token)


def test_same_seed_same_tokens():
    first = random.Random(42)
    second = random.Random(42)
    assert [generate_token(first) for _ in range(3)] == [
        generate_token(second) for _ in range(3)
    ]


def test_successive_tokens_differ():
    rng = random.Random(7)
    tokens = {generate_token(rng) for _ in range(50)}
    assert len(tokens) == 50


def test_date_stamp_two_digit_fields():
    assert date_stamp(datetime(2021, 11, 25)) == "20211125"


def test_date_stamp_default_is_today():
    stamp = date_stamp()
    assert stamp.startswith(str(datetime.now().year))
    assert stamp.endswith(f"{datetime.now().day:02d}")