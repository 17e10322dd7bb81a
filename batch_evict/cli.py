"""
Command line entry point: ``batch-evict``.
"""
import logging
import sys
from typing import Optional

import click
from pydantic import ValidationError

from batch_evict.config import get_settings
from batch_evict.errors import ResolutionError, SelectorSyntaxError
from batch_evict.eviction import BatchEvictor
from batch_evict.kube_client import client_from_settings
from batch_evict.logging_config import configure_logging
from batch_evict.report import ConsoleReporter
from batch_evict.label_selectors import parse_selector

logger = logging.getLogger(__name__)


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("-n", "--namespace", default=None, help="Namespace to evict pods from.")
@click.option("--namespace-selector", default=None,
              help="Evict from every namespace matching this label selector. Overrides --namespace.")
@click.option("-l", "--selector", "pod_selector", default=None, help="Only evict pods matching this label selector.")
@click.option("--dry-run/--no-dry-run", default=None, help="Validate evictions without removing any pod.")
@click.option("--as", "impersonate_user", default=None, help="Impersonate this user.")
@click.option("--context", default=None, help="Kubeconfig context to use.")
@click.option("--kubeconfig", default=None, type=click.Path(dir_okay=False), help="Path to a kubeconfig file.")
@click.option("--in-cluster/--no-in-cluster", default=None, help="Use the in-cluster service account.")
@click.option("--grace-period", type=click.IntRange(min=0), default=None,
              help="Termination grace period in seconds for evicted pods.")
@click.option("--workers", type=click.IntRange(min=1), default=None, help="Parallel evictions per namespace.")
@click.option("--log-level", default=None, type=click.Choice(["debug", "info", "warning", "error"], case_sensitive=False))
def main(
    namespace: Optional[str],
    namespace_selector: Optional[str],
    pod_selector: Optional[str],
    dry_run: Optional[bool],
    impersonate_user: Optional[str],
    context: Optional[str],
    kubeconfig: Optional[str],
    in_cluster: Optional[bool],
    grace_period: Optional[int],
    workers: Optional[int],
    log_level: Optional[str],
) -> None:
    """Evict pods in one namespace, or in every namespace matching a selector."""
    overrides = {
        "EVICT_NAMESPACE": namespace,
        "EVICT_NAMESPACE_SELECTOR": namespace_selector,
        "EVICT_POD_SELECTOR": pod_selector,
        "EVICT_DRY_RUN": dry_run,
        "EVICT_GRACE_PERIOD_SECONDS": grace_period,
        "EVICT_WORKERS": workers,
        "K8S_IMPERSONATE_USER": impersonate_user,
        "K8S_CONTEXT": context,
        "K8S_KUBECONFIG": kubeconfig,
        "K8S_IN_CLUSTER": in_cluster,
        "LOG_LEVEL": log_level,
    }
    try:
        settings = get_settings()
    except ValidationError as e:
        details = "; ".join(f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors())
        raise click.UsageError(f"invalid settings: {details}")
    settings = settings.model_copy(update={k: v for k, v in overrides.items() if v is not None})
    configure_logging(settings.LOG_LEVEL)

    # Selectors are validated before any client exists
    try:
        ns_selector = parse_selector(settings.EVICT_NAMESPACE_SELECTOR)
        selector = parse_selector(settings.EVICT_POD_SELECTOR)
    except SelectorSyntaxError as e:
        raise click.UsageError(str(e))

    try:
        kube = client_from_settings(settings)
    except Exception as e:
        logger.error(f"❌ Failed to create Kubernetes client: {e}")
        click.echo("failed to create client", err=True)
        sys.exit(1)

    evictor = BatchEvictor(
        kube,
        namespace=settings.EVICT_NAMESPACE,
        namespace_selector=ns_selector,
        pod_selector=selector,
        dry_run=settings.EVICT_DRY_RUN,
        grace_period_seconds=settings.EVICT_GRACE_PERIOD_SECONDS,
        workers=settings.EVICT_WORKERS,
    )
    try:
        result = evictor.run(on_event=ConsoleReporter())
    except ResolutionError as e:
        click.echo(str(e), err=True)
        sys.exit(1)

    sys.exit(0 if result.success else 1)


if __name__ == "__main__":
    main()
