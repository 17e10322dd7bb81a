# fastapi_app.py
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional

from fastapi import FastAPI, HTTPException, Query
from pydantic import BaseModel, Field

from batch_evict.adapters import batch_result_to_dict, pod_to_dict
from batch_evict.config import get_settings
from batch_evict.errors import ListError, ResolutionError, SelectorSyntaxError
from batch_evict.eviction import BatchEvictor, resolve_namespaces, select_pods
from batch_evict.kube_client import KubeClient, client_from_settings
from batch_evict.label_selectors import parse_selector

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Models
# -----------------------------------------------------------------------------
class EvictionPlan(BaseModel):
    namespace: str = Field(default="default", description="Namespace used when no namespace selector is given")
    namespaceSelector: str = Field(default="", description="Namespace label selector, overrides namespace")
    podSelector: str = Field(default="", description="Pod label selector")
    dryRun: bool = Field(default=False)
    gracePeriodSeconds: Optional[int] = Field(default=None, ge=0)


# -----------------------------------------------------------------------------
# App factory
# -----------------------------------------------------------------------------
def create_app(client_factory: Optional[Callable[[], KubeClient]] = None) -> FastAPI:
    """
    Build the HTTP API.

    Args:
        client_factory: Returns the control-plane client. Called on first use;
            defaults to a KubeClient built from settings.
    """
    settings = get_settings()
    factory = client_factory or (lambda: client_from_settings(settings))
    clients: Dict[str, Any] = {}

    def kube():
        if "kube" not in clients:
            try:
                clients["kube"] = factory()
            except Exception as e:
                logger.error(f"❌ Kubernetes client initialization failed: {e}")
                raise HTTPException(503, f"Kubernetes client unavailable: {e}")
        return clients["kube"]

    def compile_selector(text: str):
        try:
            return parse_selector(text)
        except SelectorSyntaxError as e:
            raise HTTPException(400, str(e))

    app = FastAPI(title=settings.APP_NAME, version="1.0.0")

    # -------------------------------------------------------------------------
    # Routes
    # -------------------------------------------------------------------------
    @app.get("/health")
    async def health():
        return {"status": "healthy"}

    @app.get("/api/namespaces")
    def api_namespaces(namespace: str = Query("default"), selector: str = Query("")) -> List[str]:
        """Namespaces a run with these parameters would cover."""
        ns_selector = compile_selector(selector)
        try:
            return resolve_namespaces(kube(), namespace, ns_selector)
        except ResolutionError as e:
            raise HTTPException(502, str(e))

    @app.get("/api/pods")
    def api_pods(ns: str = Query("default"), selector: str = Query("")) -> List[Dict[str, Any]]:
        """Pods a run would evict from one namespace."""
        pod_selector = compile_selector(selector)
        try:
            pods = select_pods(kube(), ns, pod_selector)
        except ListError as e:
            raise HTTPException(502, str(e))
        logger.info(f"✅ Retrieved {len(pods)} pods from namespace {ns}")
        return [pod_to_dict(pod) for pod in pods]

    @app.post("/api/evictions")
    def api_evictions(plan: EvictionPlan) -> Dict[str, Any]:
        """Run a batch eviction and report every outcome."""
        ns_selector = compile_selector(plan.namespaceSelector)
        pod_selector = compile_selector(plan.podSelector)
        evictor = BatchEvictor(
            kube(),
            namespace=plan.namespace,
            namespace_selector=ns_selector,
            pod_selector=pod_selector,
            dry_run=plan.dryRun,
            grace_period_seconds=plan.gracePeriodSeconds,
            workers=settings.EVICT_WORKERS,
        )
        logger.info(f"🚀 Starting eviction: namespace={plan.namespace} namespaceSelector={ns_selector} "
                    f"podSelector={pod_selector} dryRun={plan.dryRun}")
        try:
            result = evictor.run()
        except ResolutionError as e:
            logger.error(f"❌ {e}")
            raise HTTPException(502, str(e))
        return batch_result_to_dict(result)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    from batch_evict.logging_config import configure_logging

    configure_logging(get_settings().LOG_LEVEL)
    uvicorn.run(app, host="0.0.0.0", port=get_settings().HTTP_PORT, log_config=None)
