"""Base entity class for aggregates and operation results."""

from dataclasses import asdict, dataclass
from typing import Any


@dataclass
class BaseEntity:
    """Base class for plain data entities."""

    def to_dict(self) -> dict[str, Any]:
        """Convert entity to a JSON-friendly dictionary."""
        return asdict(self)
