from __future__ import annotations

import hashlib

from typedproof.core.hashing import digest, hash_bytes, hash_text, to_hex


def test_hash_text_is_sha256_hex_of_utf8() -> None:
    assert hash_text("abc") == (
        "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"
    )
    assert hash_text("é") == hashlib.sha256("é".encode("utf-8")).hexdigest()


def test_hash_text_output_is_lowercase_64_chars() -> None:
    value = hash_text("")
    assert len(value) == 64
    assert value == value.lower()


def test_digest_and_hex_agree() -> None:
    raw = digest(b"payload")
    assert len(raw) == 32
    assert to_hex(raw) == hash_bytes(b"payload")
