"""
Batch pod eviction for Kubernetes.
"""
from batch_evict.errors import (
    BatchEvictionError,
    EvictionError,
    EvictorError,
    ListError,
    ResolutionError,
    SelectorSyntaxError,
)
from batch_evict.eviction import BatchEvictor, evict_pod, resolve_namespaces, select_pods
from batch_evict.kube_types import BatchResult, EvictionOutcome, Namespace, Pod
from batch_evict.label_selectors import LabelSelector, parse_selector

__version__ = "1.0.0"

__all__ = [
    "BatchEvictionError",
    "BatchEvictor",
    "BatchResult",
    "EvictionError",
    "EvictionOutcome",
    "EvictorError",
    "LabelSelector",
    "ListError",
    "Namespace",
    "Pod",
    "ResolutionError",
    "SelectorSyntaxError",
    "evict_pod",
    "parse_selector",
    "resolve_namespaces",
    "select_pods",
]
