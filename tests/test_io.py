"""Tests for decodelab.io module."""

import logging
from pathlib import Path
from unittest.mock import patch

import pytest

from decodelab.error_handling import DecodeLabError, WriteFailure
from decodelab.io import (
    atomic_write,
    read_input,
    setup_logging,
    write_optional_output,
    write_output,
)


class TestAtomicWrite:
    """Tests for atomic_write."""

    @pytest.mark.fast
    def test_writes_and_creates_parents(self, tmp_path):
        target = tmp_path / "nested" / "out.bin"

        with atomic_write(target) as f:
            f.write(b"data")

        assert target.read_bytes() == b"data"
        assert [p.name for p in target.parent.iterdir()] == ["out.bin"]

    @pytest.mark.fast
    def test_failure_leaves_no_file(self, tmp_path):
        target = tmp_path / "out.bin"

        with pytest.raises(RuntimeError):
            with atomic_write(target) as f:
                f.write(b"partial")
                raise RuntimeError("boom")

        assert list(tmp_path.iterdir()) == []


class TestReadWrite:
    """Tests for read_input / write_output."""

    @pytest.mark.fast
    def test_round_trip_file(self, tmp_path):
        path = str(tmp_path / "a.bin")

        write_output(path, b"\x00\x01")

        assert read_input(path) == b"\x00\x01"

    @pytest.mark.fast
    def test_read_missing_file(self, tmp_path):
        with pytest.raises(DecodeLabError, match="couldn't load"):
            read_input(str(tmp_path / "missing.jxl"))

    @pytest.mark.fast
    def test_write_failure(self, tmp_path):
        with patch("decodelab.io.atomic_write", side_effect=PermissionError("denied")):
            with pytest.raises(WriteFailure) as exc_info:
                write_output(str(tmp_path / "out.png"), b"x")

        assert isinstance(exc_info.value.cause, PermissionError)

    @pytest.mark.fast
    def test_optional_output_skipped_without_path_or_bytes(self, tmp_path):
        path = str(tmp_path / "icc.bin")

        assert write_optional_output(None, b"data") is False
        assert write_optional_output(path, b"") is False
        assert not Path(path).exists()
        assert write_optional_output(path, b"data") is True
        assert Path(path).read_bytes() == b"data"


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_levels_and_log_file(self, tmp_path):
        log_file = tmp_path / "logs" / "decodelab.log"

        logger = setup_logging("DEBUG", log_file)
        logger.debug("hello from test")

        assert logging.getLogger().level == logging.DEBUG
        assert logger.name == "decodelab"
        for handler in logging.getLogger().handlers:
            handler.flush()
        assert "hello from test" in log_file.read_text()

        setup_logging("WARNING")
        assert logging.getLogger().level == logging.WARNING
