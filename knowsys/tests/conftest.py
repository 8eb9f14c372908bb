"""Pytest configuration for knowsys tests."""

from __future__ import annotations

import os
from pathlib import Path

import pytest


SESSION_ONE = """---
date: 2026-01-01
topics:
  - auth
status: in-progress
---

# Session: Auth rework (Jan 01, 2026)

## Goal
Replace the login flow.

## Changes
Moved token checks into middleware.
"""

SESSION_TWO = """---
date: 2026-01-02
topics: [search]
plan: PLAN_x
status: complete
---

# Session: Search tuning (Jan 02, 2026)

## Changes
Added a validation strategy for query parsing.
"""

PLAN_X = """---
title: Plan X
status: ACTIVE
author: alice
topics: [x]
created: 2026-01-01
updated: 2026-01-02
---

# Plan X

## Progress
"""

LEARNED = """---
title: Retry pattern
category: resilience
keywords: [retry, backoff]
---

# Retry pattern

Wrap flaky network calls with exponential backoff.
"""


def _write(root: Path, relative: str, text: str) -> Path:
    """Write a file under a knowledge root, creating parent directories."""
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def _bump_mtime(path: Path, seconds: float = 10.0) -> None:
    """Move a file's mtime forward so staleness checks see it as modified."""
    stat = path.stat()
    os.utime(path, (stat.st_atime + seconds, stat.st_mtime + seconds))


@pytest.fixture
def make_file(tmp_path):
    """Writer bound to an empty knowledge root at tmp_path/.aiknowsys."""
    root = tmp_path / ".aiknowsys"
    root.mkdir()

    def _make(relative: str, text: str) -> Path:
        return _write(root, relative, text)

    _make.root = root
    return _make


@pytest.fixture
def knowledge_root(tmp_path) -> Path:
    """Knowledge root with two sessions, one plan and one learned pattern."""
    root = tmp_path / ".aiknowsys"
    _write(root, "sessions/2026-01-01-session.md", SESSION_ONE)
    _write(root, "sessions/2026-01-02-session.md", SESSION_TWO)
    _write(root, "PLAN_x.md", PLAN_X)
    _write(root, "learned/pattern.md", LEARNED)
    return root


@pytest.fixture
def write():
    """Writer taking an explicit root: ``write(root, relative, text)``."""
    return _write


@pytest.fixture
def bump_mtime():
    """Move a file's mtime forward: ``bump_mtime(path, seconds=10.0)``."""
    return _bump_mtime
