#!/usr/bin/env python3
"""
# Storyimport
# Copyright (c) 2026 Dale Chapman
# Licensed under the MIT License. See LICENSE in the project root.

archive.py

Archive loading for Storyline-style packages.

A package is a ZIP container holding an XML "story" manifest at one of a
handful of well-known paths. This module:
- Sniffs whether an upload is worth opening as an archive at all
- Opens the container in memory, enforcing zip-bomb limits
- Locates the manifest and returns its decoded text

A missing manifest is not an error here; callers get None and carry on with
an empty content model.

Usage:
    from storyimport.archive import load_archive

    contents = load_archive(data)
    if contents.manifest_text is not None:
        ...
"""

from __future__ import annotations

import io
import zipfile
import zlib
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from storyimport.config import (
    ARCHIVE_EXTENSIONS,
    ARCHIVE_MIME_MARKERS,
    MANIFEST_CANDIDATES,
    MAX_COMPRESSION_RATIO,
    MAX_FILE_SIZE,
    MAX_FILES,
    MAX_TOTAL_SIZE,
)
from storyimport.errors import InvalidArchive
from storyimport.icons import WARNING


@dataclass
class ArchiveContents:
    """Entry listing plus the manifest found (if any)."""
    files: List[str] = field(default_factory=list)
    manifest_path: Optional[str] = None
    manifest_text: Optional[str] = None


# ============================================================================
# Format Sniffing
# ============================================================================

def is_storyline_file(file_name: str, mime_type: Optional[str] = None) -> bool:
    """
    Decide whether an upload should be treated as a candidate archive.

    Deliberately permissive: any .story/.zip name, or any declared type
    mentioning zip or octet-stream, qualifies. The real format check happens
    when the archive is opened.
    """
    name = (file_name or "").lower()
    declared = (mime_type or "").lower()

    if any(name.endswith(ext) for ext in ARCHIVE_EXTENSIONS):
        return True

    return any(marker in declared for marker in ARCHIVE_MIME_MARKERS)


def is_safe_member_name(member: str) -> bool:
    """
    Validate zip member name for path traversal attempts.

    Blocks:
        - Absolute paths (/, C:, etc.)
        - Parent directory references (..)
        - Dangerous characters (\\0, <, >, etc.)
    """
    if not member:
        return False

    # Reject absolute paths
    if member.startswith('/') or member.startswith('\\'):
        return False

    # Reject drive letters (Windows: C:, D:, etc.)
    if len(member) >= 2 and member[1] == ':':
        return False

    # Reject parent directory references in path components
    parts = member.replace('\\', '/').split('/')
    if '..' in parts:
        return False

    dangerous_chars = ['\0', '<', '>', '|', '?', '*']
    if any(char in member for char in dangerous_chars):
        return False

    return True


# ============================================================================
# Archive Access
# ============================================================================

def open_archive(data: bytes) -> zipfile.ZipFile:
    """
    Open raw bytes as a ZIP container.

    Raises:
        InvalidArchive: Not a ZIP, corrupt, or over the size/count limits
    """
    try:
        zf = zipfile.ZipFile(io.BytesIO(data), 'r')
    except (zipfile.BadZipFile, zlib.error, EOFError, ValueError) as e:
        raise InvalidArchive(
            "Could not open archive",
            suggestion="Check that the upload is a complete .story or .zip package",
            context={"size": len(data)},
            cause=e,
        )

    infos = zf.infolist()
    if len(infos) > MAX_FILES:
        zf.close()
        raise InvalidArchive(
            f"Archive contains too many files: {len(infos)}",
            context={"max_files": MAX_FILES},
        )

    total_size = sum(info.file_size for info in infos)
    if total_size > MAX_TOTAL_SIZE:
        zf.close()
        raise InvalidArchive(
            f"Archive too large: {total_size / (1024*1024):.1f} MB "
            f"(max {MAX_TOTAL_SIZE / (1024*1024):.0f} MB)",
        )

    return zf


def _entry_within_limits(info: zipfile.ZipInfo) -> bool:
    if info.file_size > MAX_FILE_SIZE:
        print(f"[storyimport:warn] {WARNING} Skipping large entry: {info.filename} "
              f"({info.file_size / (1024*1024):.1f} MB)")
        return False

    # Zip bomb detection
    if info.file_size > 0 and info.compress_size > 0:
        ratio = info.file_size / info.compress_size
        if ratio > MAX_COMPRESSION_RATIO:
            print(f"[storyimport:warn] {WARNING} Suspicious compression: {info.filename} ({ratio:.0f}x)")
            return False

    return True


def _decode(raw: bytes) -> str:
    # utf-8-sig drops the BOM that authoring tools like to prepend
    return raw.decode("utf-8-sig", errors="replace")


def find_manifest(
    zf: zipfile.ZipFile,
    candidates: Sequence[str] = MANIFEST_CANDIDATES,
) -> Optional[str]:
    """Return the first candidate path present in the archive, or None."""
    names = set(zf.namelist())
    for candidate in candidates:
        if candidate in names:
            return candidate
    return None


def read_manifest(zf: zipfile.ZipFile, manifest_path: str) -> Optional[str]:
    """
    Read and decode one manifest entry.

    Returns None when the entry is skipped for exceeding the safety limits.

    Raises:
        InvalidArchive: Entry data is corrupt or cannot be decompressed
    """
    info = zf.getinfo(manifest_path)
    if not _entry_within_limits(info):
        return None

    try:
        raw = zf.read(info)
    except (zipfile.BadZipFile, zlib.error, EOFError, RuntimeError, NotImplementedError) as e:
        raise InvalidArchive(
            f"Could not read {manifest_path} from archive",
            context={"entry": manifest_path},
            cause=e,
        )

    return _decode(raw)


def load_archive(
    data: bytes,
    candidates: Sequence[str] = MANIFEST_CANDIDATES,
) -> ArchiveContents:
    """
    Open an archive and pull out its manifest text.

    Args:
        data: Raw archive bytes
        candidates: Manifest paths to try, in priority order

    Returns:
        ArchiveContents; manifest_text is None when no candidate exists

    Raises:
        InvalidArchive: Container cannot be opened or read
    """
    with open_archive(data) as zf:
        files = []
        for name in zf.namelist():
            if is_safe_member_name(name):
                files.append(name)
            else:
                print(f"[storyimport:warn] {WARNING} Ignoring unsafe member name: {name}")

        manifest_path = find_manifest(zf, candidates)
        if manifest_path is None:
            return ArchiveContents(files=files)

        return ArchiveContents(
            files=files,
            manifest_path=manifest_path,
            manifest_text=read_manifest(zf, manifest_path),
        )
