"""
Shared pytest fixtures for batch_evict tests.

FakeControlPlane stands in for KubeClient: it keeps namespaces and pods in
memory, evaluates selectors locally, records every call and can be told to
fail specific calls.
"""

import os
import sys
from typing import Dict, List, Optional

import pytest
from kubernetes.client.rest import ApiException

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from batch_evict.kube_types import EvictionRequest, Namespace, Pod  # noqa: E402
from batch_evict.label_selectors import LabelSelector  # noqa: E402


class FakeControlPlane:
    """In-memory cluster with the KubeClient interface."""

    def __init__(self):
        self.namespaces: List[Namespace] = []
        self.pods: Dict[str, List[Pod]] = {}
        self.calls: List[tuple] = []
        self.evictions: List[EvictionRequest] = []
        self.namespace_error: Optional[Exception] = None
        self.list_errors: Dict[str, Exception] = {}
        self.eviction_errors: Dict[str, Exception] = {}

    def add_namespace(self, name: str, labels: Optional[Dict[str, str]] = None, pods=()) -> None:
        self.namespaces.append(Namespace(name=name, labels=labels or {}))
        for pod in pods:
            self.add_pod(name, pod)

    def add_pod(self, namespace: str, name: str, labels: Optional[Dict[str, str]] = None) -> Pod:
        pod = Pod(name=name, namespace=namespace, status="Running", labels=labels or {})
        self.pods.setdefault(namespace, []).append(pod)
        return pod

    def list_namespaces(self, selector: LabelSelector) -> List[Namespace]:
        self.calls.append(("list_namespaces", str(selector)))
        if self.namespace_error is not None:
            raise self.namespace_error
        return [ns for ns in self.namespaces if selector.matches(ns.labels)]

    def list_pods(self, namespace: str, selector: LabelSelector) -> List[Pod]:
        self.calls.append(("list_pods", namespace, str(selector)))
        if namespace in self.list_errors:
            raise self.list_errors[namespace]
        return [pod for pod in self.pods.get(namespace, []) if selector.matches(pod.labels)]

    def create_eviction(self, request: EvictionRequest) -> None:
        self.calls.append(("create_eviction", request.pod.ref, request.dry_run))
        self.evictions.append(request)
        if request.pod.ref in self.eviction_errors:
            raise self.eviction_errors[request.pod.ref]
        if not request.dry_run:
            self.pods[request.pod.namespace].remove(request.pod)

    def evicted_refs(self) -> List[str]:
        return [r.pod.ref for r in self.evictions]


def disruption_budget_error() -> ApiException:
    return ApiException(status=429, reason="Too Many Requests")


@pytest.fixture
def cluster():
    """Empty fake control plane."""
    return FakeControlPlane()


@pytest.fixture
def default_cluster(cluster):
    """Namespace ``default`` with pods a, b and c."""
    cluster.add_namespace("default", pods=["a", "b", "c"])
    return cluster


@pytest.fixture
def team_cluster(cluster):
    """ns1 (2 pods) and ns2 (0 pods) labelled team=x, plus other (1 pod) labelled team=y."""
    cluster.add_namespace("ns1", {"team": "x"}, pods=["p1", "p2"])
    cluster.add_namespace("ns2", {"team": "x"})
    cluster.add_namespace("other", {"team": "y"}, pods=["o1"])
    return cluster
