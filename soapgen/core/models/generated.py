"""
Generated script model — one remote-method file for a container model.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel


class GeneratedScript(BaseModel):
    """JavaScript source bound to the container model it belongs to.

    ``path`` is the container model's script path, next to its JSON
    definition.
    """

    path: str
    content: str
    model_name: str
    binding_name: str

    @property
    def file(self) -> Path:
        return Path(self.path)
