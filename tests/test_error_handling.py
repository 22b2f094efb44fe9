"""Tests for decodelab.error_handling module."""

import logging

import pytest

from decodelab.error_handling import (
    DecodeFailure,
    DecodeLabError,
    EncodeFailure,
    ErrorLevel,
    ValidationError,
    WriteFailure,
    error_context,
    handle_error,
    log_warning_with_context,
)


class TestDecodeLabError:
    """Tests for the error taxonomy."""

    @pytest.mark.fast
    def test_message_includes_cause(self):
        error = DecodeFailure("decode failed", cause=ValueError("bad marker"))

        assert str(error) == "decode failed (caused by: bad marker)"
        assert error.context == {}

    @pytest.mark.fast
    def test_subclasses_share_base(self):
        for cls in (ValidationError, DecodeFailure, EncodeFailure, WriteFailure):
            assert issubclass(cls, DecodeLabError)


class TestHandleError:
    """Tests for handle_error."""

    @pytest.mark.fast
    def test_transforms_and_reraises(self):
        original = OSError("disk full")

        with pytest.raises(WriteFailure) as exc_info:
            handle_error(original, "write output", WriteFailure, context={"path": "a.png"})

        error = exc_info.value
        assert error.cause is original
        assert error.context["path"] == "a.png"
        assert error.context["original_error_type"] == "OSError"
        assert "Failed to write output" in str(error)

    @pytest.mark.fast
    def test_debug_level_keeps_failure_out_of_warnings(self, caplog):
        with caplog.at_level(logging.DEBUG):
            with pytest.raises(DecodeFailure):
                handle_error(KeyError("x"), "look up", level=ErrorLevel.DEBUG)

        records = [r for r in caplog.records if "Look up failed" in r.getMessage()]
        assert [r.levelno for r in records] == [logging.DEBUG]


class TestErrorContext:
    """Tests for error_context."""

    @pytest.mark.fast
    def test_wraps_foreign_exceptions(self):
        with pytest.raises(EncodeFailure):
            with error_context("encode", EncodeFailure):
                raise ValueError("nope")

    @pytest.mark.fast
    def test_passes_decodelab_errors_through(self):
        with pytest.raises(ValidationError):
            with error_context("encode", EncodeFailure):
                raise ValidationError("invalid")

    @pytest.mark.fast
    def test_no_error(self):
        with error_context("noop"):
            value = 1

        assert value == 1


@pytest.mark.fast
def test_log_warning_with_context(caplog):
    with caplog.at_level(logging.WARNING):
        log_warning_with_context("careful", {"path": "x"})

    assert "careful (context: path=x)" in caplog.text
