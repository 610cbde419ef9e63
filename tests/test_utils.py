"""Tests for string utilities."""

from vaultgraph.core.utils import is_block_identifier, percent_decode, percent_encode


def test_percent_decode():
    assert percent_decode("Note%201") == "Note 1"
    assert percent_decode("caf%C3%A9") == "café"
    assert percent_decode("plain") == "plain"


def test_percent_decode_invalid_utf8_is_replaced():
    assert percent_decode("bad%FF") == "bad�"


def test_percent_encode_keeps_hash_and_slash():
    assert percent_encode("dir/Note 1#Heading") == "dir/Note%201#Heading"
    assert percent_encode("café") == "caf%C3%A9"


def test_is_block_identifier():
    assert is_block_identifier("my-id")
    assert is_block_identifier("ABC123")
    assert not is_block_identifier("")
    assert not is_block_identifier("has space")
    assert not is_block_identifier("under_score")
