# src/core/naming.py — v1
"""Stable identifiers and slugs for discovered sources."""

from __future__ import annotations

import hashlib
import re
from pathlib import PurePath

_NON_SLUG = re.compile(r"[^a-z0-9]+")


def slugify_file_path(file_path: str) -> str:
    """Lowercase basename without extension, non-alphanumerics collapsed to '-'.

    Falls back to "note" when nothing usable remains.
    """
    name = PurePath(file_path.replace("\\", "/")).name
    stem = name.rsplit(".", 1)[0] if "." in name else name
    slug = _NON_SLUG.sub("-", stem.lower()).strip("-")
    return slug or "note"


def create_stable_id(file_path: str, scope: str = "") -> str:
    """Return ``<slug>-<8 hex chars>`` derived from the path and owning scope.

    The scope (a source configuration id) keeps the same physical file
    watched by two configurations under two distinct identities.
    """
    hash_input = f"{scope}:{file_path}" if scope else file_path
    digest = hashlib.sha1(hash_input.encode("utf-8")).hexdigest()[:8]  # noqa: S324
    return f"{slugify_file_path(file_path)}-{digest}"


def relative_folder(root_dir: str, file_path: str) -> str:
    """Parent folder of ``file_path`` relative to ``root_dir`` in posix form.

    Returns "" when the file sits directly under the root or outside it.
    """
    parent = PurePath(file_path).parent
    try:
        rel = parent.relative_to(PurePath(root_dir))
    except ValueError:
        return ""
    parts = [p for p in rel.parts if p not in ("", ".")]
    return "/".join(parts)
