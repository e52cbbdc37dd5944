"""
Durable JSON I/O with atomic writes and cooperative file locking.
"""

import contextlib
import errno
import json
import os
import tempfile
import time
from pathlib import Path
from typing import Any, Callable, Iterator

try:
    import fcntl  # type: ignore
except ImportError:  # pragma: no cover - not POSIX
    fcntl = None  # type: ignore


DEFAULT_LOCK_TIMEOUT = 8.0  # seconds
LOCK_RETRY_DELAY = 0.05  # seconds


def _lock_path_for(target: Path) -> Path:
    """``prefs.json`` is guarded by ``prefs.json.lock`` in the same directory."""
    return target.with_name(target.name + ".lock")


def _try_flock(handle, mode: int) -> bool:
    try:
        fcntl.flock(handle.fileno(), mode | fcntl.LOCK_NB)
    except OSError as exc:
        if exc.errno in (errno.EACCES, errno.EAGAIN):
            return False
        raise
    return True


@contextlib.contextmanager
def _file_lock(target: Path, exclusive: bool, timeout: float = DEFAULT_LOCK_TIMEOUT) -> Iterator[None]:
    """Hold an advisory lock on ``target`` for the duration of the block.

    Readers share the lock; writers hold it alone. Without fcntl the block
    runs unlocked.
    """
    if fcntl is None:
        yield
        return

    lock_path = _lock_path_for(target)
    lock_path.parent.mkdir(parents=True, exist_ok=True)
    mode = fcntl.LOCK_EX if exclusive else fcntl.LOCK_SH

    with open(lock_path, "a") as handle:
        if timeout is None:
            fcntl.flock(handle.fileno(), mode)
        else:
            give_up_at = time.monotonic() + timeout
            while not _try_flock(handle, mode):
                if time.monotonic() >= give_up_at:
                    raise TimeoutError(f"Could not lock {target} within {timeout}s")
                time.sleep(LOCK_RETRY_DELAY)
        try:
            yield
        finally:
            fcntl.flock(handle.fileno(), fcntl.LOCK_UN)


def _read_unlocked(path_obj: Path) -> Any:
    with path_obj.open('r', encoding='utf-8') as handle:
        return json.load(handle)


def _write_unlocked(path_obj: Path, data: Any, indent: int) -> None:
    tmp_path = None
    try:
        with tempfile.NamedTemporaryFile(
            mode='w',
            dir=str(path_obj.parent),
            prefix='.tmp_',
            suffix='.json',
            delete=False,
            encoding='utf-8'
        ) as tmp_file:
            tmp_path = Path(tmp_file.name)
            json.dump(data, tmp_file, indent=indent, ensure_ascii=False, sort_keys=True)
            tmp_file.flush()
            os.fsync(tmp_file.fileno())

        os.replace(str(tmp_path), str(path_obj))
        tmp_path = None
    finally:
        if tmp_path and tmp_path.exists():
            try:
                tmp_path.unlink()
            except OSError:
                pass


def read_json(file_path: str, *, lock_timeout: float = DEFAULT_LOCK_TIMEOUT) -> Any:
    """
    Read JSON from file under a shared lock.

    Args:
        file_path: Path to JSON file

    Returns:
        Parsed JSON data

    Raises:
        FileNotFoundError: if the file does not exist
        OSError, TimeoutError, json.JSONDecodeError: on unreadable content
    """
    path_obj = Path(os.path.expanduser(file_path))
    if not path_obj.exists():
        raise FileNotFoundError(str(path_obj))

    with _file_lock(path_obj, exclusive=False, timeout=lock_timeout):
        return _read_unlocked(path_obj)


def write_json(file_path: str, data: Any, indent: int = 2, *, lock_timeout: float = DEFAULT_LOCK_TIMEOUT) -> None:
    """
    Durably write JSON to file.

    The content is written to a temporary file in the same directory,
    flushed and fsynced, then moved over the target with ``os.replace``.
    When this returns the new content survives a crash.

    Args:
        file_path: Path to write to
        data: Data to write
        indent: JSON indentation level

    Raises:
        OSError, TimeoutError, TypeError: if the write could not complete
    """
    path_obj = Path(os.path.expanduser(file_path))
    path_obj.parent.mkdir(parents=True, exist_ok=True)

    with _file_lock(path_obj, exclusive=True, timeout=lock_timeout):
        _write_unlocked(path_obj, data, indent)


def update_json(file_path: str, mutate: Callable[[Any], Any], default: Any = None,
                indent: int = 2, *, lock_timeout: float = DEFAULT_LOCK_TIMEOUT) -> Any:
    """
    Read, modify and durably rewrite a JSON file under one exclusive lock.

    ``mutate`` receives the current content (``default`` when the file does
    not exist) and returns the content to store. The stored content is
    returned.
    """
    path_obj = Path(os.path.expanduser(file_path))
    path_obj.parent.mkdir(parents=True, exist_ok=True)

    with _file_lock(path_obj, exclusive=True, timeout=lock_timeout):
        current = _read_unlocked(path_obj) if path_obj.exists() else default
        updated = mutate(current)
        _write_unlocked(path_obj, updated, indent)
        return updated
