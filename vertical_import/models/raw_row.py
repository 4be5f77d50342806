from __future__ import annotations

from dataclasses import dataclass, field

"""RawRow model: one row block of a vertical dump.

A RawRow holds the field name -> accumulated value pairs collected between two
row markers. Field names are already stripped of the configured prefix and
appear in first-seen order.
"""

__all__ = [
    "RawRow",
]


@dataclass(frozen=True)
class RawRow:
    """Logical representation of one ``*** N. row ***`` block.

    ``row_number`` is the number printed in the marker; it is informative only
    and is neither required to be sequential nor unique.
    """
    fields: dict[str, str] = field(default_factory=dict)
    row_number: int | None = None  # number shown in the marker line
    line_number: int = -1  # 1-based source line of the marker

    def __len__(self) -> int:
        return len(self.fields)

    def get(self, name: str, default: str | None = None) -> str | None:
        return self.fields.get(name, default)
