"""I/O utilities: input/output bytes, atomic writes and logging setup.

``-`` denotes standard input when reading and standard output when writing.
"""

import logging
import sys
import tempfile
from contextlib import contextmanager
from pathlib import Path
from shutil import move

from .error_handling import DecodeLabError, WriteFailure
from .naming import STDOUT_SENTINEL

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
CONSOLE_FORMAT = "%(message)s"


def setup_logging(log_level: str = "INFO", log_file: Path | None = None) -> logging.Logger:
    """Set up logging configuration for decodelab.

    Console output goes to stderr so that ``-`` (stdout) stays a clean byte
    stream. An optional log file receives timestamped records.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional file receiving a copy of every record

    Returns:
        Configured package logger
    """
    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    handlers: list[logging.Handler] = [console]

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handlers.append(file_handler)

    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        handlers=handlers,
        force=True,
    )

    return logging.getLogger("decodelab")


@contextmanager
def atomic_write(target_path: Path, mode: str = "wb"):
    """Context manager for atomic file writes using temporary files.

    Args:
        target_path: Final path where file should be written
        mode: File open mode

    Yields:
        File handle for writing
    """
    target_path.parent.mkdir(parents=True, exist_ok=True)

    with tempfile.NamedTemporaryFile(
        mode=mode,
        dir=target_path.parent,
        delete=False,
        suffix=f".tmp_{target_path.name}",
    ) as temp_file:
        try:
            yield temp_file
            temp_file.flush()
        except Exception:
            Path(temp_file.name).unlink(missing_ok=True)
            raise
    # Atomic move on POSIX systems
    move(temp_file.name, target_path)


def read_input(path: str) -> bytes:
    """Read the compressed input, ``-`` meaning standard input."""
    try:
        if path == STDOUT_SENTINEL:
            return sys.stdin.buffer.read()
        return Path(path).read_bytes()
    except OSError as e:
        raise DecodeLabError(f"couldn't load {path}", cause=e, context={"path": path}) from e


def write_output(path: str, data: bytes) -> None:
    """Write *data* to *path* (``-`` meaning standard output).

    Raises:
        WriteFailure: If the bytes could not be stored.
    """
    try:
        if path == STDOUT_SENTINEL:
            sys.stdout.buffer.write(data)
            sys.stdout.buffer.flush()
        else:
            with atomic_write(Path(path)) as f:
                f.write(data)
    except OSError as e:
        raise WriteFailure(
            f"Failed to write {path}", cause=e, context={"path": path}
        ) from e
    logger.debug(f"Wrote {len(data)} bytes to {path}")


def write_optional_output(path: str | None, data: bytes) -> bool:
    """Write an auxiliary artifact only when both a path and bytes exist.

    Returns:
        True if something was written
    """
    if not path or not data:
        return False
    write_output(path, data)
    return True
