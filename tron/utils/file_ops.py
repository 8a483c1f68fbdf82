"""
File Operation Utilities

Provides the low-level file operations used by the sync engine:
content hashing, size lookup, directory creation and byte copies.

Author: Tron Project
License: MIT
"""

import os
import shutil
import hashlib
from pathlib import Path
from typing import Union

from .logger import get_logger

logger = get_logger(__name__)

PathLike = Union[str, Path]


def calculate_file_hash(file_path: PathLike, algorithm: str = "sha256", chunk_size: int = 65536) -> str:
    """
    Calculate hash of a file.

    Args:
        file_path: Path to the file
        algorithm: Hash algorithm (md5, sha1, sha256, etc.)
        chunk_size: Size of chunks to read (bytes)

    Returns:
        Hexadecimal hash string

    Raises:
        FileNotFoundError: If file doesn't exist
        ValueError: If algorithm is unsupported
    """
    if not os.path.exists(file_path):
        raise FileNotFoundError(f"File not found: {file_path}")

    try:
        hash_func = hashlib.new(algorithm)
    except ValueError:
        raise ValueError(f"Unsupported hash algorithm: {algorithm}")

    with open(file_path, 'rb') as f:
        while chunk := f.read(chunk_size):
            hash_func.update(chunk)

    return hash_func.hexdigest()


def copy_file(source: PathLike, destination: PathLike) -> Path:
    """
    Copy a file over its destination, creating missing parent directories.

    Permission bits are copied along with the content. The destination
    gets a fresh modification time. A directory at the destination is
    an error; the file is never placed inside it.

    Args:
        source: Source file path
        destination: Destination file path (overwritten if present)

    Returns:
        Destination path

    Raises:
        FileNotFoundError: If the source doesn't exist
        IsADirectoryError: If the destination is a directory
        OSError: If the directory can't be created or the copy fails
    """
    source_path = Path(source)
    dest_path = Path(destination)

    if not source_path.is_file():
        raise FileNotFoundError(f"Source file not found: {source}")

    if dest_path.is_dir():
        raise IsADirectoryError(f"Destination is a directory: {destination}")

    dest_path.parent.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(str(source_path), str(dest_path))
    shutil.copymode(str(source_path), str(dest_path))
    logger.debug(f"Copied: {source_path} -> {dest_path}")

    return dest_path


def get_file_size(file_path: PathLike) -> int:
    """Get file size in bytes."""
    return os.path.getsize(file_path)
