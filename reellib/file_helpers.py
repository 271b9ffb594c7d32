#!/usr/bin/env python3
"""
Path and file system helpers

Thin wrappers over pathlib/shutil that fail with a file system ReelError
carrying the offending path and the operation name. Existence checks never
raise; they answer False instead.
"""

import json
import logging
import re
import shutil
from pathlib import Path
from typing import Any, List, Union

from reellib.constants import (
    INVALID_FILENAME_CHARS, MAX_DIRECTORY_NAME_LENGTH, MAX_FILENAME_BYTES,
)
from reellib.errors import ReelError

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

_INVALID_CHARS_RE = re.compile('[' + re.escape(INVALID_FILENAME_CHARS) + ']')


def ensure_directory(dir_path: PathLike, mode: int = 0o755) -> Path:
    """Create dir_path (and parents) if needed; return it as a Path"""
    path = Path(dir_path)
    try:
        path.mkdir(parents=True, exist_ok=True, mode=mode)
    except OSError as e:
        raise ReelError.filesystem(f"Failed to create directory: {e}", path, 'create') from e
    return path


def is_writable(dir_path: PathLike) -> bool:
    """Check write permission by creating and removing a probe file"""
    probe = Path(dir_path) / '.write-test'
    try:
        probe.write_text('test')
        probe.unlink()
        return True
    except OSError:
        return False


def truncate_utf8(name: str, max_bytes: int = MAX_FILENAME_BYTES) -> str:
    """Cut name so its UTF-8 encoding fits in max_bytes, never splitting a character"""
    encoded = name.encode('utf-8')
    if len(encoded) <= max_bytes:
        return name
    return encoded[:max_bytes].decode('utf-8', errors='ignore')


def sanitize_filename(filename: str, max_length: int = MAX_DIRECTORY_NAME_LENGTH,
                      max_bytes: int = MAX_FILENAME_BYTES) -> str:
    """
    Make a string safe to use as a file or directory name

    Steps:
    1. Replace characters that are illegal on common file systems with '-'
    2. Replace runs of whitespace with '-'
    3. Collapse repeated hyphens
    4. Trim leading/trailing hyphens
    5. Cap the length, in characters and in UTF-8 bytes

    Examples:
        'The Matrix'            -> 'The-Matrix'
        'Alien: Resurrection'   -> 'Alien-Resurrection'
        'What/If?'              -> 'What-If'
    """
    name = _INVALID_CHARS_RE.sub('-', filename or '')
    name = re.sub(r'\s+', '-', name)
    name = re.sub(r'-+', '-', name)
    name = name.strip('-')
    # Re-strip after truncation so the cap never leaves a dangling hyphen
    return truncate_utf8(name[:max_length], max_bytes).rstrip('-')


def create_film_directory_name(film_id: int, film_title: str) -> str:
    """Directory name for a saved film: '{id}-{sanitized title}'"""
    sanitized = sanitize_filename(film_title) or 'Untitled'
    prefix = f"{film_id}-"
    return prefix + truncate_utf8(sanitized, MAX_FILENAME_BYTES - len(prefix)).rstrip('-')


def write_json_file(file_path: PathLike, data: Any) -> None:
    """Write data as pretty-printed UTF-8 JSON, creating parent directories"""
    path = Path(file_path)
    ensure_directory(path.parent)
    try:
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
    except (OSError, TypeError, ValueError) as e:
        raise ReelError.filesystem(f"Failed to write JSON file: {e}", path, 'write') from e


def read_json_file(file_path: PathLike) -> Any:
    path = Path(file_path)
    try:
        with open(path, 'r', encoding='utf-8') as f:
            return json.load(f)
    except (OSError, ValueError) as e:
        raise ReelError.filesystem(f"Failed to read JSON file: {e}", path, 'read') from e


def write_text_file(file_path: PathLike, content: str) -> None:
    path = Path(file_path)
    ensure_directory(path.parent)
    try:
        path.write_text(content, encoding='utf-8')
    except OSError as e:
        raise ReelError.filesystem(
            f"Failed to write text file: {e}", path, 'write', content_length=len(content)
        ) from e


def file_exists(file_path: PathLike) -> bool:
    try:
        return Path(file_path).is_file()
    except OSError:
        return False


def directory_exists(dir_path: PathLike) -> bool:
    try:
        return Path(dir_path).is_dir()
    except OSError:
        return False


def get_file_size(file_path: PathLike) -> int:
    path = Path(file_path)
    try:
        return path.stat().st_size
    except OSError as e:
        raise ReelError.filesystem(f"Failed to get file size: {e}", path, 'stat') from e


def get_directory_contents(dir_path: PathLike) -> List[str]:
    """Entry names of dir_path in file system order; [] if it does not exist"""
    path = Path(dir_path)
    if not directory_exists(path):
        return []
    try:
        return [entry.name for entry in path.iterdir()]
    except OSError as e:
        raise ReelError.filesystem(f"Failed to read directory: {e}", path, 'readdir') from e


def remove_file(file_path: PathLike) -> None:
    path = Path(file_path)
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        raise ReelError.filesystem(f"Failed to remove file: {e}", path, 'remove') from e


def remove_directory(dir_path: PathLike) -> None:
    """Recursively remove dir_path; a missing directory is a no-op"""
    path = Path(dir_path)
    if not directory_exists(path):
        return
    try:
        shutil.rmtree(path)
    except OSError as e:
        raise ReelError.filesystem(f"Failed to remove directory: {e}", path, 'remove') from e


def copy_file(source_path: PathLike, dest_path: PathLike) -> None:
    source, dest = Path(source_path), Path(dest_path)
    ensure_directory(dest.parent)
    try:
        shutil.copy2(str(source), str(dest))
    except OSError as e:
        raise ReelError.filesystem(
            f"Failed to copy file: {e}", dest, 'copy', source_path=str(source)
        ) from e


def format_bytes(size: float) -> str:
    """Human-readable byte count: 0 -> '0 B', 1536 -> '1.5 KB'"""
    if size <= 0:
        return '0 B'
    units = ['B', 'KB', 'MB', 'GB']
    value = float(size)
    for unit in units:
        if value < 1024 or unit == units[-1]:
            return f"{round(value, 2):g} {unit}"
        value /= 1024
    return f"{size} B"
