"""File scanner: discover and classify markdown files under a knowledge root.

Layout conventions (relative to the root):

    sessions/*.md          session
    PLAN_*.md              plan
    plans/*.md             pointer (active-<author>.md)
    learned/**/*.md        learned pattern, any depth

A single unreadable file never aborts the scan; it becomes an error string
naming the file.
"""

from __future__ import annotations

from pathlib import Path

from knowsys.config import ScanConfig
from knowsys.domain.document import DocumentKind, FileInfo, ScanResult
from knowsys.log import get_logger

logger = get_logger(__name__)


def read_probe(path: Path) -> None:
    """Open a file for reading and close it again.

    Raises:
        OSError: If the file cannot be opened (e.g. permission denied)
    """
    with open(path, "rb") as handle:
        handle.read(0)


class FileScanner:
    """Classify knowledge-root files by path and filename convention."""

    def __init__(self, config: ScanConfig | None = None):
        self._config = config or ScanConfig()

    def scan(self, root: str | Path) -> ScanResult:
        """Scan a knowledge root.

        Args:
            root: Knowledge root directory

        Returns:
            ScanResult with sessions, plans (plans and pointers), learned
            and the per-file errors met along the way
        """
        root = Path(root)
        result = ScanResult()

        if not root.is_dir():
            return result

        cfg = self._config
        result.sessions = self._scan_dir(
            root, root / cfg.sessions_dir, DocumentKind.SESSION, result.errors
        )
        result.plans = self._scan_dir(
            root,
            root,
            DocumentKind.PLAN,
            result.errors,
            name_filter=lambda name: name.startswith(cfg.plan_prefix),
        )
        result.plans += self._scan_dir(
            root, root / cfg.plans_dir, DocumentKind.POINTER, result.errors
        )
        result.learned = self._scan_dir(
            root, root / cfg.learned_dir, DocumentKind.LEARNED, result.errors, recursive=True
        )
        result.learned.sort(key=lambda info: info.relative_path)

        for error in result.errors:
            logger.warning("Scan: %s", error)
        return result

    def _is_candidate(self, name: str) -> bool:
        if name in self._config.ignored_names:
            return False
        return any(name.endswith(ext) for ext in self._config.extensions)

    def _scan_dir(
        self,
        root: Path,
        directory: Path,
        kind: DocumentKind,
        errors: list[str],
        recursive: bool = False,
        name_filter=None,
    ) -> list[FileInfo]:
        if not directory.is_dir():
            return []

        try:
            entries = sorted(directory.iterdir(), key=lambda p: p.name)
        except OSError as exc:
            errors.append(f"Error reading directory {directory.name}: {exc.strerror or exc}")
            return []

        found: list[FileInfo] = []
        for path in entries:
            if path.is_dir():
                if recursive:
                    found.extend(self._scan_dir(root, path, kind, errors, recursive=True))
                continue
            if not self._is_candidate(path.name):
                continue
            if name_filter is not None and not name_filter(path.name):
                continue

            try:
                stat = path.stat()
                read_probe(path)
            except OSError as exc:
                errors.append(f"Error reading {path.name}: {exc.strerror or exc}")
                continue

            found.append(
                FileInfo(
                    filename=path.name,
                    path=str(path.resolve()),
                    relative_path=path.relative_to(root).as_posix(),
                    size=stat.st_size,
                    mtime=stat.st_mtime,
                    kind=kind,
                )
            )
        return found


def scan(root: str | Path, config: ScanConfig | None = None) -> ScanResult:
    """Scan a knowledge root with the given (or default) scan settings."""
    return FileScanner(config).scan(root)
