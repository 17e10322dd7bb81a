"""
Kubernetes client for eviction operations.
"""
import logging
from dataclasses import dataclass
from typing import List, Optional

from kubernetes import client, config
from kubernetes.client.exceptions import OpenApiException
from kubernetes.client.rest import ApiException
from kubernetes.config.config_exception import ConfigException
from urllib3.exceptions import HTTPError

from batch_evict.config import Settings
from batch_evict.kube_types import EvictionRequest, Namespace, Pod
from batch_evict.label_selectors import LabelSelector

logger = logging.getLogger(__name__)

# Errors a control-plane call may raise. OpenApiException covers ApiException and
# client-side validation; ConfigException comes from exec plugin or OIDC refresh.
CONTROL_PLANE_ERRORS = (OpenApiException, ConfigException, HTTPError, OSError)

DRY_RUN_ALL = "All"


@dataclass(frozen=True)
class KubernetesClientSet:
    """API objects sharing one configured ApiClient."""
    api_client: client.ApiClient
    core: client.CoreV1Api


def load_clients(
    *,
    in_cluster: bool = False,
    kubeconfig: Optional[str] = None,
    context: Optional[str] = None,
    impersonate_user: Optional[str] = None,
) -> KubernetesClientSet:
    """
    Create Kubernetes API clients.

    Configuration is loaded into a dedicated ``client.Configuration`` rather
    than the library-wide default, so several client sets can coexist.

    Args:
        in_cluster: Use the pod service account instead of a kubeconfig
        kubeconfig: Path to a kubeconfig file (optional)
        context: Kubernetes context name (optional)
        impersonate_user: Send requests as this user (optional)

    Returns:
        KubernetesClientSet
    """
    configuration = client.Configuration()
    try:
        if in_cluster:
            config.load_incluster_config(client_configuration=configuration)
        else:
            config.load_kube_config(
                config_file=kubeconfig,
                context=context,
                client_configuration=configuration,
            )
    except Exception as e:
        logger.error(f"❌ Failed to load Kubernetes configuration: {e}")
        raise

    api_client = client.ApiClient(configuration)
    if impersonate_user:
        api_client.set_default_header("Impersonate-User", impersonate_user)
        logger.info(f"Impersonating user {impersonate_user}")

    return KubernetesClientSet(api_client=api_client, core=client.CoreV1Api(api_client))


class KubeClient:
    """Kubernetes client for the three calls a batch eviction needs."""

    def __init__(self, clients: KubernetesClientSet):
        self.clients = clients
        logger.info("✅ Kubernetes client initialized")

    def list_namespaces(self, selector: LabelSelector) -> List[Namespace]:
        """
        Get namespaces matching a label selector.

        Args:
            selector: Namespace label selector, evaluated by the API server

        Returns:
            List of Namespace objects in API order
        """
        try:
            namespaces = self.clients.core.list_namespace(label_selector=str(selector) or None)
        except ApiException as e:
            logger.error(f"Failed to list namespaces: {e.status} {e.reason}")
            raise

        return [
            Namespace(name=ns.metadata.name, labels=ns.metadata.labels or {})
            for ns in namespaces.items
        ]

    def list_pods(self, namespace: str, selector: LabelSelector) -> List[Pod]:
        """
        Get pods in a namespace.

        Args:
            namespace: Namespace to list
            selector: Pod label selector, evaluated by the API server

        Returns:
            List of Pod objects in API order
        """
        try:
            pods = self.clients.core.list_namespaced_pod(
                namespace=namespace,
                label_selector=str(selector) or None,
            )
        except ApiException as e:
            logger.error(f"Failed to get pods in {namespace}: {e.status} {e.reason}")
            raise

        pod_list = []
        for pod in pods.items:
            pod_list.append(Pod(
                name=pod.metadata.name,
                namespace=pod.metadata.namespace or namespace,
                status=(pod.status.phase if pod.status else None) or "Unknown",
                labels=pod.metadata.labels or {},
                creation_timestamp=pod.metadata.creation_timestamp,
            ))

        logger.debug(f"Retrieved {len(pod_list)} pods from namespace {namespace}")
        return pod_list

    def create_eviction(self, request: EvictionRequest) -> None:
        """
        Submit an eviction for one pod.

        Dry-run requests carry ``dryRun=All``: the API server runs admission
        and disruption budget checks but leaves the pod in place.

        Args:
            request: The eviction to submit
        """
        pod = request.pod
        kwargs = {"dry_run": DRY_RUN_ALL} if request.dry_run else {}
        self.clients.core.create_namespaced_pod_eviction(
            name=pod.name,
            namespace=pod.namespace,
            body=build_eviction_body(request),
            **kwargs,
        )


def build_eviction_body(request: EvictionRequest) -> client.V1Eviction:
    delete_options = None
    if request.grace_period_seconds is not None or request.dry_run:
        delete_options = client.V1DeleteOptions(
            grace_period_seconds=request.grace_period_seconds,
            dry_run=[DRY_RUN_ALL] if request.dry_run else None,
        )
    return client.V1Eviction(
        metadata=client.V1ObjectMeta(
            name=request.pod.name,
            namespace=request.pod.namespace,
        ),
        delete_options=delete_options,
    )


def client_from_settings(settings: Settings) -> KubeClient:
    """Build a KubeClient from the Kubernetes section of the settings."""
    clients = load_clients(
        in_cluster=settings.K8S_IN_CLUSTER,
        kubeconfig=settings.K8S_KUBECONFIG,
        context=settings.K8S_CONTEXT,
        impersonate_user=settings.K8S_IMPERSONATE_USER,
    )
    return KubeClient(clients)
