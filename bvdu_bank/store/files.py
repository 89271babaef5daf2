"""Plain-text table files: full-load, atomic rewrite and append-only logs."""

import logging
import os
import tempfile
from pathlib import Path
from typing import Iterable, TypeVar

from bvdu_bank.exceptions import PersistenceError, RecordFormatError
from bvdu_bank.store.codec import RecordCodec

logger = logging.getLogger(__name__)

T = TypeVar("T")


def load_table(path: str | Path, codec: RecordCodec[T], skip_invalid: bool = False) -> list[T]:
    """Parse a table file into records, in file order.

    By default loading stops at the first line that does not decode; that
    line and everything after it are dropped. With ``skip_invalid`` only the
    bad line is dropped and reading continues. A missing file is an empty
    table.

    Parameters
    ----------
    path : str | Path
        Table file.
    codec : RecordCodec[T]
        Codec of the entity stored in the file.
    skip_invalid : bool
        Drop undecodable lines one by one instead of truncating there.

    Returns
    -------
    list[T]
        Decoded records.

    Raises
    ------
    PersistenceError
        If the file exists but cannot be read.
    """
    path = Path(path)
    records: list[T] = []
    try:
        with open(path, encoding="utf-8", newline="") as f:
            for line_number, line in enumerate(f, start=1):
                try:
                    records.append(codec.decode(line))
                except RecordFormatError as exc:
                    if skip_invalid:
                        logger.warning("Skipped line %d of %s: %s", line_number, path, exc)
                        continue
                    logger.warning(
                        "Stopped loading %s at line %d, trailing data dropped: %s",
                        path,
                        line_number,
                        exc,
                    )
                    break
    except FileNotFoundError:
        return []
    except (OSError, UnicodeDecodeError) as exc:
        raise PersistenceError(f"Cannot read {path}: {exc}") from exc

    logger.debug("Loaded %d %s records from %s", len(records), codec.name, path)
    return records


def save_table(path: str | Path, codec: RecordCodec[T], records: Iterable[T]) -> None:
    """Atomically replace a table file with ``records``.

    Lines go to a temporary file in the same directory, which is synced
    and then renamed over the target, so readers see either the old
    table or the new one.

    Raises
    ------
    RecordFormatError
        If a record cannot be encoded; the target file is untouched.
    PersistenceError
        If the file cannot be written.
    """
    path = Path(path)
    lines = [codec.encode(record) + "\n" for record in records]

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    except OSError as exc:
        raise PersistenceError(f"Cannot write {path}: {exc}") from exc

    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            f.writelines(lines)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, path)
    except OSError as exc:
        _discard(tmp_name)
        raise PersistenceError(f"Cannot write {path}: {exc}") from exc

    logger.debug("Saved %d %s records to %s", len(lines), codec.name, path)


def append_record(path: str | Path, codec: RecordCodec[T], record: T) -> None:
    """Append one record to a log file, creating it if needed.

    Raises
    ------
    PersistenceError
        If the file cannot be opened or written.
    """
    path = Path(path)
    line = codec.encode(record) + "\n"
    try:
        with open(path, "a", encoding="utf-8", newline="") as f:
            f.write(line)
    except OSError as exc:
        raise PersistenceError(f"Cannot append to {path}: {exc}") from exc


def touch(path: str | Path) -> None:
    """Create an empty file if it does not exist yet."""
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.touch(exist_ok=True)
    except OSError as exc:
        raise PersistenceError(f"Cannot create {path}: {exc}") from exc


def _discard(tmp_name: str) -> None:
    try:
        os.unlink(tmp_name)
    except FileNotFoundError:
        pass
    except OSError:
        logger.warning("Could not remove temporary file %s", tmp_name)
