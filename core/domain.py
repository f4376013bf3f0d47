"""
Domain Layer Base Classes.

The domain layer contains pure business logic with no external dependencies.
This makes scheduling rules:
- Easy to test (no mocking needed)
- Reusable from the HTTP API, the assistant tools and scripts
- Clear and self-documenting

Example Usage:
    class DoubleBookingPolicy(PolicyEngine):
        def evaluate(self, context) -> PolicyDecision:
            # Pure business logic here
            ...
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from datetime import datetime, timezone, tzinfo
from enum import Enum


class PolicyResult(Enum):
    """Result of a policy evaluation."""
    APPROVED = "approved"
    REQUIRES_REVIEW = "requires_review"


@dataclass
class PolicyDecision:
    """
    The outcome of a policy evaluation.

    Attributes:
        result: The policy decision result
        reason: Human-readable explanation
        metadata: Additional context for the decision
    """
    result: PolicyResult
    reason: str
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_approved(self) -> bool:
        return self.result == PolicyResult.APPROVED

    @property
    def requires_review(self) -> bool:
        return self.result == PolicyResult.REQUIRES_REVIEW

    def to_dict(self) -> Dict[str, Any]:
        return {
            "result": self.result.value,
            "reason": self.reason,
            "metadata": self.metadata,
        }


@dataclass
class DomainEvent:
    """
    Base class for domain events.

    Domain events represent something that happened in the schedule.
    They are logged as an audit trail and returned with mutation results.
    """
    event_type: str
    occurred_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    data: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event_type": self.event_type,
            "occurred_at": self.occurred_at.isoformat(),
            "data": self.data,
        }


class PolicyEngine(ABC):
    """
    Abstract base class for policy engines.

    A PolicyEngine encapsulates a set of business rules that can be
    evaluated against a context to produce a decision.
    """

    @abstractmethod
    def evaluate(self, context: Any) -> PolicyDecision:
        """
        Evaluate the policy against the given context.

        Args:
            context: All data needed for evaluation

        Returns:
            PolicyDecision with the result and explanation
        """
        pass


class DomainService(ABC):
    """
    Abstract base class for domain services.

    Domain services contain business logic that doesn't belong to a single entity.

    Key principles:
    - No I/O operations (database, network, file)
    - All dependencies passed as parameters
    - Return domain objects, not DTOs
    """

    @abstractmethod
    def execute(self, *args, **kwargs) -> Any:
        """
        Execute the domain service operation.

        Implementation should contain pure business logic only.
        """
        pass


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================

def to_epoch_millis(moment: datetime, default_tz: tzinfo = timezone.utc) -> int:
    """
    Convert a datetime to epoch milliseconds.

    Naive datetimes are interpreted in ``default_tz``.
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=default_tz)
    return int(moment.timestamp() * 1000)


def parse_epoch_millis(value: Any) -> Optional[int]:
    """Epoch milliseconds from an int or numeric string, or None if unparsable."""
    try:
        return int(float(value))
    except (TypeError, ValueError, OverflowError):
        return None


def from_epoch_millis(value: Any, tz: tzinfo = timezone.utc) -> Optional[datetime]:
    """Convert epoch milliseconds (int or numeric string) to an aware datetime."""
    millis = parse_epoch_millis(value)
    if millis is None:
        return None
    try:
        return datetime.fromtimestamp(millis / 1000, tz=tz)
    except (OverflowError, OSError, ValueError):
        return None


def now_millis() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(datetime.now(timezone.utc).timestamp() * 1000)


def overlaps(start_a: int, end_a: int, start_b: int, end_b: int) -> bool:
    """Half-open interval overlap check on epoch values."""
    return start_a < end_b and end_a > start_b


def collect_reasons(decisions: List[PolicyDecision]) -> List[str]:
    """Reasons of every decision that is not a plain approval."""
    return [d.reason for d in decisions if not d.is_approved]
