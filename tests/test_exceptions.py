"""Tests for snsq exceptions."""

from __future__ import annotations

from snsq.exceptions import (
    DecodeError,
    EncodeError,
    EnvelopeError,
    HandlerError,
    ResolutionError,
    SnsqError,
    TransportError,
)


def test_all_errors_share_root() -> None:
    for cls in (ResolutionError, TransportError, EnvelopeError, HandlerError):
        assert issubclass(cls, SnsqError)


def test_codec_errors_are_envelope_errors() -> None:
    assert issubclass(EncodeError, EnvelopeError)
    assert issubclass(DecodeError, EnvelopeError)


def test_decode_and_handler_errors_have_message_id() -> None:
    e = DecodeError("bad", message_id="mid-1")
    assert e.message_id == "mid-1"
    assert "bad" in str(e)

    h = HandlerError("failed", message_id="mid-2")
    assert h.message_id == "mid-2"
    assert HandlerError("failed").message_id is None
