"""
Project context — the LoopBack project this process generates into.

main.py resolves the root from ``--project`` (or by walking up from the
cwd) and registers it here once.  get_project_root() is None until then.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional


_project_root: Optional[Path] = None


def resolve_project_root(explicit: str | Path | None = None) -> Path:
    """Explicit directory, else the enclosing LoopBack project, else the cwd."""
    if explicit:
        return Path(explicit).resolve()

    from soapgen.core.config.loader import find_project_root

    return find_project_root() or Path.cwd()


def set_project_root(root: Path) -> None:
    global _project_root
    _project_root = root


def get_project_root() -> Optional[Path]:
    return _project_root
