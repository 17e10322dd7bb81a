"""
Batch eviction pipeline.

Resolves target namespaces, lists matching pods in each and evicts them one
by one. Pod and namespace failures are recorded on the BatchResult and never
stop the rest of the batch; only namespace resolution is fatal.

The pipeline does not print. ``BatchEvictor.events`` yields progress events
in processing order and presentation code decides what to do with them.
"""
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, Iterator, List, Optional, Union

from batch_evict.errors import EvictionError, ListError, ResolutionError
from batch_evict.kube_client import CONTROL_PLANE_ERRORS
from batch_evict.kube_types import (
    BatchResult,
    EvictionOutcome,
    EvictionRequest,
    Failure,
    FailureScope,
    Pod,
)
from batch_evict.label_selectors import LabelSelector

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NamespaceStarted:
    namespace: str
    pod_count: int
    dry_run: bool = False


@dataclass(frozen=True)
class PodEvicted:
    outcome: EvictionOutcome
    dry_run: bool = False


@dataclass(frozen=True)
class NamespaceFailed:
    failure: Failure


@dataclass(frozen=True)
class BatchFinished:
    result: BatchResult


BatchEvent = Union[NamespaceStarted, PodEvicted, NamespaceFailed, BatchFinished]


def resolve_namespaces(client, namespace: str, namespace_selector: LabelSelector) -> List[str]:
    """
    Work out which namespaces a run covers.

    A non-empty namespace selector wins over the explicit namespace and the
    API server's ordering is kept. Otherwise the explicit namespace is used
    as-is, without checking that it exists.

    Raises:
        ResolutionError: when listing namespaces fails
    """
    if namespace_selector.empty:
        return [namespace]

    try:
        namespaces = client.list_namespaces(namespace_selector)
    except CONTROL_PLANE_ERRORS as e:
        raise ResolutionError(str(namespace_selector), e) from e

    names = [ns.name for ns in namespaces]
    logger.info(f"Selector {namespace_selector} matched {len(names)} namespaces")
    return names


def select_pods(client, namespace: str, pod_selector: LabelSelector) -> List[Pod]:
    """
    List pods in one namespace matching ``pod_selector``.

    Raises:
        ListError: when the listing fails
    """
    try:
        return list(client.list_pods(namespace, pod_selector))
    except CONTROL_PLANE_ERRORS as e:
        raise ListError(namespace, e) from e


def evict_pod(client, pod: Pod, dry_run: bool = False, grace_period_seconds: Optional[int] = None) -> EvictionOutcome:
    """Submit a single eviction. Always returns exactly one outcome."""
    request = EvictionRequest(pod=pod, dry_run=dry_run, grace_period_seconds=grace_period_seconds)
    try:
        client.create_eviction(request)
    except CONTROL_PLANE_ERRORS as e:
        error = EvictionError(pod.ref, e, status=getattr(e, "status", None))
        logger.warning(str(error))
        return EvictionOutcome(pod=pod, success=False, error=error)
    return EvictionOutcome(pod=pod, success=True)


class BatchEvictor:
    """Drives resolution, listing and eviction across every target namespace."""

    def __init__(
        self,
        client,
        *,
        namespace: str = "default",
        namespace_selector: Optional[LabelSelector] = None,
        pod_selector: Optional[LabelSelector] = None,
        dry_run: bool = False,
        grace_period_seconds: Optional[int] = None,
        workers: int = 1,
    ):
        if workers < 1:
            raise ValueError("workers must be at least 1")
        self.client = client
        self.namespace = namespace
        self.namespace_selector = namespace_selector or LabelSelector.everything()
        self.pod_selector = pod_selector or LabelSelector.everything()
        self.dry_run = dry_run
        self.grace_period_seconds = grace_period_seconds
        self.workers = workers

    def events(self) -> Iterator[BatchEvent]:
        """
        Run the batch lazily, yielding one event per step.

        Raises:
            ResolutionError: before any event when namespaces cannot be resolved
        """
        namespaces = resolve_namespaces(self.client, self.namespace, self.namespace_selector)
        outcomes: List[EvictionOutcome] = []
        failures: List[Failure] = []

        for namespace in namespaces:
            try:
                pods = select_pods(self.client, namespace, self.pod_selector)
            except ListError as e:
                logger.warning(str(e))
                failure = Failure(scope=FailureScope.NAMESPACE, namespace=namespace, cause=e)
                failures.append(failure)
                yield NamespaceFailed(failure)
                continue

            yield NamespaceStarted(namespace, len(pods), self.dry_run)
            for outcome in self._evict_all(pods):
                outcomes.append(outcome)
                if not outcome.success:
                    failures.append(Failure(
                        scope=FailureScope.POD,
                        namespace=namespace,
                        pod=outcome.pod.name,
                        cause=outcome.error,
                    ))
                yield PodEvicted(outcome, self.dry_run)

        result = BatchResult(
            namespaces=tuple(namespaces),
            outcomes=tuple(outcomes),
            failures=tuple(failures),
            dry_run=self.dry_run,
        )
        logger.info(
            f"Batch finished: {len(result.evicted)}/{len(outcomes)} pods evicted "
            f"across {len(namespaces)} namespaces, {len(failures)} failures"
        )
        yield BatchFinished(result)

    def run(self, on_event: Optional[Callable[[BatchEvent], None]] = None) -> BatchResult:
        """Run the whole batch and return its result."""
        result = None
        for event in self.events():
            if on_event is not None:
                on_event(event)
            if isinstance(event, BatchFinished):
                result = event.result
        return result

    def _evict_all(self, pods: List[Pod]) -> Iterator[EvictionOutcome]:
        if self.workers == 1 or len(pods) < 2:
            for pod in pods:
                yield self._evict(pod)
            return

        # map() hands results back in submission order
        with ThreadPoolExecutor(max_workers=min(self.workers, len(pods))) as pool:
            yield from pool.map(self._evict, pods)

    def _evict(self, pod: Pod) -> EvictionOutcome:
        return evict_pod(self.client, pod, self.dry_run, self.grace_period_seconds)
