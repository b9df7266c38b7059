# src/cache/fingerprint.py - v4
"""Content fingerprinting and cache key derivation.

Files below the hash threshold get a SHA-256 of their bytes. Larger files
and directories get a cheap (mtime, size) signature: large files are
assumed to change rarely enough for signature-based invalidation.
"""

from __future__ import annotations

import hashlib
import os
import stat

DEFAULT_HASH_MAX_BYTES = 1024 * 1024


def compute_fingerprint(path: str, hash_max_bytes: int = DEFAULT_HASH_MAX_BYTES) -> str:
    """Compute the content identity of a filesystem entry.

    Args:
        path: File or directory path.
        hash_max_bytes: Files strictly smaller than this are content-hashed.

    Returns:
        Fingerprint string. Prefixes keep the three kinds from colliding.

    Raises:
        OSError: If the entry does not exist or cannot be read.
    """
    st = os.stat(path)
    if stat.S_ISDIR(st.st_mode):
        return f"dir_{st.st_mtime_ns}_{st.st_size}"
    if st.st_size < hash_max_bytes:
        with open(path, "rb") as fh:
            return hashlib.sha256(fh.read()).hexdigest()
    return f"file_{st.st_mtime_ns}_{st.st_size}"


def normalize_target(target: str) -> str:
    """Normalize a path so separator and casing variants compare equal."""
    normalized = os.path.normpath(target).replace("\\", "/")
    return normalized.lower()


def target_identity(target: str) -> str:
    """Identity of the entry a path names on this platform.

    Unlike ``normalize_target`` this keeps case where the filesystem is
    case-sensitive, so ``Readme.py`` and ``readme.py`` stay distinct on POSIX.
    """
    return os.path.normcase(os.path.normpath(target)).replace("\\", "/")


def cache_key(target: str) -> str:
    """Deterministic storage key for a target path."""
    return hashlib.sha256(normalize_target(target).encode("utf-8")).hexdigest()
