from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""ErrorRecord model for the per-run error log.

One record per rejected row (validation failure), per unmapped field and per
value a transform could not convert. The
``row`` value is the source line number of the row marker; ``-1`` is used for
file-level problems where no row applies.
"""

__all__ = [
    "ErrorRecord",
    "ERROR_TYPES",
]

ERROR_TYPES = (
    "VALIDATION_ERROR",
    "UNMAPPED_FIELD",
    "UNRECOGNIZED_MAPPING",
    "TRANSFORM_ERROR",
)


@dataclass(frozen=True)
class ErrorRecord:
    """Structured error record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        file: dump file being processed
        row: source line of the row marker, -1 when unknown
        entity: target entity type name
        error_type: classification in UPPER_SNAKE_CASE
        message: human-readable detail
    """
    timestamp: str
    file: str
    row: int
    entity: str
    error_type: str
    message: str

    @staticmethod
    def create(file: str, row: int, entity: str, error_type: str, message: str) -> ErrorRecord:
        """Create a new ErrorRecord stamped with the current UTC time."""
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorRecord(
            timestamp=ts,
            file=file,
            row=row,
            entity=entity,
            error_type=error_type,
            message=message,
        )

    def to_json_line(self) -> str:
        """Serialize to a single JSON line with exactly the dataclass keys."""
        return json.dumps(asdict(self), ensure_ascii=False)
