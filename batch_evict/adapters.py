"""
Adapters between eviction results and JSON payloads.
"""
from typing import Any, Dict, List

from batch_evict.kube_types import BatchResult, EvictionOutcome, Failure, Pod


def pod_to_dict(pod: Pod) -> Dict[str, Any]:
    created = "-"
    if pod.creation_timestamp:
        # Keep UTC timezone info by adding 'Z' suffix
        created = pod.creation_timestamp.strftime("%Y-%m-%dT%H:%M:%SZ")
    return {
        "name": pod.name,
        "namespace": pod.namespace,
        "status": pod.status,
        "labels": dict(pod.labels),
        "created": created,
    }


def outcome_to_dict(outcome: EvictionOutcome) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "pod": outcome.pod.name,
        "namespace": outcome.pod.namespace,
        "success": outcome.success,
    }
    if outcome.error is not None:
        data["error"] = str(outcome.error)
        data["status"] = outcome.error.status
    return data


def failure_to_dict(failure: Failure) -> Dict[str, Any]:
    return {
        "scope": failure.scope.value,
        "namespace": failure.namespace,
        "pod": failure.pod,
        "error": str(failure.cause),
    }


def batch_result_to_dict(result: BatchResult) -> Dict[str, Any]:
    """Serialize a BatchResult for the HTTP API."""
    outcomes: List[Dict[str, Any]] = [outcome_to_dict(o) for o in result.outcomes]
    return {
        "success": result.success,
        "dryRun": result.dry_run,
        "namespaces": list(result.namespaces),
        "evicted": len(result.evicted),
        "total": len(result.outcomes),
        "outcomes": outcomes,
        "failures": [failure_to_dict(f) for f in result.failures],
    }
