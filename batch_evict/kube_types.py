"""
Type definitions for Kubernetes objects and eviction results.
"""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, Optional, Tuple

from batch_evict.errors import BatchEvictionError, EvictionError, EvictorError


@dataclass(frozen=True)
class Namespace:
    """Kubernetes Namespace representation."""
    name: str
    labels: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class Pod:
    """Kubernetes Pod representation."""
    name: str
    namespace: str
    status: str = "Unknown"
    labels: Dict[str, str] = field(default_factory=dict)
    creation_timestamp: Optional[datetime] = None

    @property
    def ref(self) -> str:
        return f"{self.namespace}/{self.name}"


@dataclass(frozen=True)
class EvictionRequest:
    """One eviction to submit for a pod."""
    pod: Pod
    dry_run: bool = False
    grace_period_seconds: Optional[int] = None


@dataclass(frozen=True)
class EvictionOutcome:
    """Result of one eviction attempt."""
    pod: Pod
    success: bool
    error: Optional[EvictionError] = None


class FailureScope(str, Enum):
    NAMESPACE = "namespace"
    POD = "pod"


@dataclass(frozen=True)
class Failure:
    """A recovered failure recorded during a batch."""
    scope: FailureScope
    namespace: str
    cause: EvictorError
    pod: Optional[str] = None

    @property
    def target(self) -> str:
        return f"{self.namespace}/{self.pod}" if self.pod else self.namespace


@dataclass(frozen=True)
class BatchResult:
    """Every outcome and failure of one run, in processing order."""
    namespaces: Tuple[str, ...] = ()
    outcomes: Tuple[EvictionOutcome, ...] = ()
    failures: Tuple[Failure, ...] = ()
    dry_run: bool = False

    @property
    def success(self) -> bool:
        return not self.failures and all(o.success for o in self.outcomes)

    @property
    def evicted(self) -> Tuple[EvictionOutcome, ...]:
        return tuple(o for o in self.outcomes if o.success)

    def error(self) -> Optional[BatchEvictionError]:
        """Combined error carrying every recorded cause, or None on success."""
        if self.success:
            return None
        return BatchEvictionError([f.cause for f in self.failures])
