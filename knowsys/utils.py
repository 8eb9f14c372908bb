from __future__ import annotations

import os
import re
import tempfile
from datetime import date, datetime, timezone
from pathlib import Path


_slug_re = re.compile(r"[^a-z0-9\s_-]")
_space_re = re.compile(r"[\s-]+")
_date_re = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def slugify(text: str) -> str:
    normalized = text.strip().lower()
    normalized = _slug_re.sub("", normalized)
    normalized = _space_re.sub("_", normalized)
    normalized = normalized.strip("_")
    return normalized or "untitled"


def today_iso() -> str:
    return date.today().isoformat()


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


def mtime_iso(mtime: float) -> str:
    return datetime.fromtimestamp(mtime, tz=timezone.utc).isoformat(timespec="seconds")


def is_iso_date(value: str) -> bool:
    """Check for a real calendar date in YYYY-MM-DD form."""
    if not isinstance(value, str) or not _date_re.match(value):
        return False
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True


def date_part(value: str | None) -> str:
    """Leading YYYY-MM-DD of a date or ISO timestamp string ('' if absent)."""
    if not value:
        return ""
    return str(value)[:10]


def atomic_write_text(path: Path, text: str) -> None:
    """Write text through a temp file in the same directory, then swap it in.

    Readers see either the old or the new content. The file mode of an
    existing target is kept.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    mode = path.stat().st_mode if path.exists() else None
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as tmp:
            tmp.write(text)
            tmp.flush()
            os.fsync(tmp.fileno())
        if mode is not None:
            os.chmod(tmp_name, mode)
        os.replace(tmp_name, path)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise
