from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class OrderBy:
    """Sort key for a document query; 'timestamp' is the server-assigned write time."""

    field: str = "timestamp"
    descending: bool = True


@dataclass
class DocumentRecord:
    """Represents a row from the documents table."""

    id: str
    collection: str
    timestamp: datetime
    data: dict[str, Any] = field(default_factory=dict)
