"""Process-wide death template table, installed once at startup."""

import threading
from typing import Iterable, Optional

from .death import DeathTemplate


class DeathTemplateTable:
    """Write-once holder for the compiled death templates.

    Readers see either nothing or the complete table; after installation the
    table is an immutable tuple shared by every parse without locking.
    """

    def __init__(self) -> None:
        self._templates: Optional[tuple[DeathTemplate, ...]] = None
        self._lock = threading.Lock()

    @property
    def installed(self) -> bool:
        return self._templates is not None

    def install(self, templates: Iterable[DeathTemplate]) -> tuple[DeathTemplate, ...]:
        """Freeze and publish the table.

        Raises:
            RuntimeError: If a table was already installed
        """
        frozen = tuple(templates)
        with self._lock:
            if self._templates is not None:
                raise RuntimeError("Death template table is already installed")
            self._templates = frozen
        return frozen

    def get(self) -> Optional[tuple[DeathTemplate, ...]]:
        return self._templates

    def __len__(self) -> int:
        return len(self._templates) if self._templates is not None else 0


# Global table used by the default line parser
death_templates = DeathTemplateTable()
