"""Pure staleness check: compare a scan against the last rebuild."""

from __future__ import annotations

from typing import TYPE_CHECKING

from knowsys.domain.document import ScanResult
from knowsys.log import get_logger

if TYPE_CHECKING:
    from knowsys.storage.index_store import IndexSnapshot

logger = get_logger(__name__)


def newest_mtime(scan: ScanResult) -> float:
    """Newest modification time across all scanned files (0.0 when empty)."""
    return max((info.mtime for info in scan.files()), default=0.0)


def is_stale(snapshot: "IndexSnapshot | None", scan: ScanResult) -> bool:
    """Decide whether the snapshot no longer describes the scanned files.

    Stale when there is no snapshot, when any file is newer than the
    snapshot watermark, or when files were added or removed.
    """
    if snapshot is None:
        logger.debug("Index stale: no snapshot")
        return True

    newest = newest_mtime(scan)
    if newest > snapshot.watermark:
        logger.debug("Index stale: newest mtime %.6f > watermark %.6f", newest, snapshot.watermark)
        return True

    scanned = {info.relative_path for info in scan.files()}
    if scanned != set(snapshot.files):
        logger.debug(
            "Index stale: %d added, %d removed",
            len(scanned - set(snapshot.files)),
            len(set(snapshot.files) - scanned),
        )
        return True

    return False
