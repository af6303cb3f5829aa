"""
Operation result types.
"""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class OperationResult:
    """
    Outcome of one Operation.execute call.

    items_processed counts records that were handled successfully;
    items_attempted counts every record the operation dispatched.
    """

    items_processed: int = 0
    items_attempted: int = 0
    total_duration: float = 0.0
    errors: list[Exception] = field(default_factory=list)
    data: dict[str, Any] = field(default_factory=dict)

    @property
    def error_count(self) -> int:
        return len(self.errors)

    @property
    def partial_failure(self) -> bool:
        return bool(self.errors) and self.items_processed > 0
