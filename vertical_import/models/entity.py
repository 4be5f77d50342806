from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

"""Collaborator contract for the target model layer.

The importer never talks to storage directly. It needs a model class that can
be instantiated without arguments and that answers the questions below. The
PostgreSQL-backed ``vertical_import.db.table_model.TableModel`` is one
implementation; tests use in-memory fakes.
"""

__all__ = [
    "ImportableModel",
]


@runtime_checkable
class ImportableModel(Protocol):
    @classmethod
    def settable(cls, name: str) -> bool:
        """True when ``name`` is an attribute that may be assigned."""
        ...

    @classmethod
    def find_by(cls, attribute: str, value: Any) -> ImportableModel | None:
        """Return an existing stored instance whose ``attribute`` equals ``value``."""
        ...

    def validate(self) -> list[str]:
        """Human-readable error messages; an empty list means valid."""
        ...

    def dump(self) -> str:
        """Full-state textual representation for diagnostics."""
        ...

    def attributes(self) -> dict[str, Any]:
        """Attribute name -> current value (None for unset attributes)."""
        ...

    def save(self) -> None:
        """Insert this instance into the store."""
        ...

    def update_attributes(self, values: dict[str, Any]) -> None:
        """Apply ``values`` to this stored instance and persist them."""
        ...
