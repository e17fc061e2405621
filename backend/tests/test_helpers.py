"""
Unit tests for service helpers: slugs, pagination clamps, id parsing, link checks, password hashing,
JWT decoding and the error-kind status map.
"""
import sys
import uuid

import pytest
from jose import jwt

from tracker.config import settings
from tracker.database import engine
from tracker.services.auth import (
    TokenError,
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)
from tracker.services.pagination import page_params, pagination_meta
from tracker.services.result import ErrorKind, Ok, conflict, forbidden, invalid, not_found, unauthorized
from tracker.services.slugs import slugify
from tracker.services.validation import csv_values, like_pattern, parse_id, validate_link


@pytest.mark.parametrize(
    "name,expected",
    [
        ("Graph Theory", "graph-theory"),
        ("  Dynamic   Programming  ", "dynamic-programming"),
        ("C++ & Pointers!", "c-pointers"),
        ("Árboles Binarios", "arboles-binarios"),
        ("---", ""),
        ("", ""),
    ],
)
def test_slugify(name, expected):
    assert slugify(name) == expected


def test_page_params_clamps():
    assert page_params(None, None) == page_params(1, 10)
    p = page_params("0", "1000")
    assert (p.page, p.limit) == (1, 100)
    p = page_params("-4", "0")
    assert (p.page, p.limit) == (1, 1)
    p = page_params("x", "y")
    assert (p.page, p.limit) == (1, 10)
    p = page_params("3", "20")
    assert (p.page, p.limit, p.offset) == (3, 20, 40)


def test_pagination_meta_total_pages():
    assert pagination_meta(page_params(1, 10), 0)["totalPages"] == 0
    assert pagination_meta(page_params(1, 10), 10)["totalPages"] == 1
    assert pagination_meta(page_params(1, 10), 11)["totalPages"] == 2


def test_parse_id():
    u = uuid.uuid4()
    assert parse_id(str(u)) == u
    assert parse_id(f"  {u}  ") == u
    assert parse_id(u) is u
    assert parse_id("nope") is None
    assert parse_id("") is None
    assert parse_id(None) is None
    assert parse_id(42) is None


def test_like_pattern_escapes_wildcards():
    assert like_pattern("50%_off") == "%50\\%\\_off%"
    assert like_pattern("a\\b") == "%a\\\\b%"


def test_csv_values():
    assert csv_values("easy, tough,,") == ["easy", "tough"]
    assert csv_values(None) == []


def test_validate_link():
    assert validate_link("https://www.youtube.com/watch?v=abc") == "https://www.youtube.com/watch?v=abc"
    assert validate_link("  ") is None
    assert validate_link(None) is None
    with pytest.raises(ValueError):
        validate_link("youtube.com/watch")
    with pytest.raises(ValueError):
        validate_link("javascript:alert(1)")


def test_password_hash_roundtrip():
    hashed = hash_password("s3cret!")
    assert hashed != "s3cret!"
    assert verify_password("s3cret!", hashed)
    assert not verify_password("wrong", hashed)
    assert not verify_password("s3cret!", "not-a-bcrypt-hash")


def test_access_token_payload():
    uid = uuid.uuid4()
    payload = decode_access_token(create_access_token(uid, "admin"))
    assert payload["sub"] == str(uid)
    assert payload["role"] == "admin"
    assert payload["exp"] > payload["iat"]


def test_tokens_are_unique_per_issue():
    uid = uuid.uuid4()
    assert create_access_token(uid, "user") != create_access_token(uid, "user")


def test_decode_rejects_foreign_signature():
    forged = jwt.encode({"sub": str(uuid.uuid4()), "role": "admin"}, "someone-elses-key", algorithm="HS256")
    with pytest.raises(TokenError, match="Invalid token"):
        decode_access_token(forged)


def test_decode_rejects_token_without_subject():
    token = jwt.encode({"role": "user"}, settings.secret_key, algorithm=settings.jwt_algorithm)
    with pytest.raises(TokenError):
        decode_access_token(token)


def test_error_kinds_map_to_statuses():
    assert invalid("x").status == 400
    assert conflict("x").status == 400
    assert unauthorized("x").status == 401
    assert forbidden("x").status == 403
    assert not_found("x").status == 404
    assert not_found("x").kind is ErrorKind.NOT_FOUND
    assert Ok().ok and not invalid("x").ok


def test_page_params_caps_huge_page():
    """A page far past any table still yields an offset that fits a 64-bit integer."""
    p = page_params("99999999999999999999999", "100")
    assert p.page == sys.maxsize // 100
    assert p.offset <= sys.maxsize


def test_engine_echo_follows_debug_setting():
    assert engine.echo is settings.debug
