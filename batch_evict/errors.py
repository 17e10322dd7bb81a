"""
Error taxonomy for batch evictions.

Fatal errors (``SelectorSyntaxError``, ``ResolutionError``) abort a run.
Scoped errors (``ListError``, ``EvictionError``) are recorded on the
``BatchResult`` and the run carries on.
"""
from typing import Optional, Sequence


class EvictorError(Exception):
    """Base class for every error raised by batch_evict."""


class SelectorSyntaxError(EvictorError):
    """A label selector string could not be parsed."""

    def __init__(self, selector: str, reason: str):
        self.selector = selector
        self.reason = reason
        super().__init__(f"invalid label selector {selector!r}: {reason}")


class ResolutionError(EvictorError):
    """Listing namespaces for a namespace selector failed."""

    def __init__(self, selector: str, cause: BaseException):
        self.selector = selector
        self.cause = cause
        super().__init__(f"failed to resolve namespaces for selector {selector!r}: {cause}")


class ListError(EvictorError):
    """Listing pods in one namespace failed."""

    def __init__(self, namespace: str, cause: BaseException):
        self.namespace = namespace
        self.cause = cause
        super().__init__(f"failed to list pods in namespace {namespace}: {cause}")


class EvictionError(EvictorError):
    """An eviction request for one pod was rejected or never reached the API."""

    def __init__(self, pod_ref: str, cause: BaseException, status: Optional[int] = None):
        self.pod_ref = pod_ref
        self.cause = cause
        self.status = status
        super().__init__(f"failed to evict pod {pod_ref}: {_describe(cause, status)}")

    @property
    def is_disruption_budget(self) -> bool:
        # The eviction subresource answers 429 when a PodDisruptionBudget blocks it
        return self.status == 429

    @property
    def is_not_found(self) -> bool:
        return self.status == 404


class BatchEvictionError(EvictorError):
    """Combined failure of a batch, carrying every individual cause in order."""

    def __init__(self, causes: Sequence[EvictorError]):
        self.causes = list(causes)
        lines = [f"{len(self.causes)} eviction failure(s):"]
        lines.extend(f"  - {cause}" for cause in self.causes)
        super().__init__("\n".join(lines))


def _describe(cause: BaseException, status: Optional[int]) -> str:
    reason = getattr(cause, "reason", None)
    if status is not None and reason:
        return f"({status}) {reason}"
    return str(cause) or cause.__class__.__name__
