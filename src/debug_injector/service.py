"""Debug container injection.

Resolves the environment, reads the pod, probes the cluster version and
hands the pod to the patch applier matching that version.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from .appliers import applier_for
from .clients import API_ERRORS, ClientProvider, ClusterClients, KubeconfigClientProvider
from .config import DebugInjectorConfig
from .container import build_debug_container
from .context import OperationContext
from .errors import PodFetchError, error_reason
from .models import ClusterVersion, PatchResult
from .registry import EnvironmentRegistry, SqlEnvironmentRegistry
from .version import probe_cluster_version, select_strategy

logger = logging.getLogger(__name__)


def fetch_pod_snapshot(
    clients: ClusterClients,
    name: str,
    namespace: str,
    ctx: OperationContext,
) -> Dict[str, Any]:
    """Current pod manifest, in API (camelCase) form."""

    try:
        pod = clients.core.read_namespaced_pod(
            name=name,
            namespace=namespace,
            **ctx.request_kwargs(f"get pod {namespace}/{name}"),
        )
    except API_ERRORS as exc:
        raise PodFetchError(name, namespace, error_reason(exc)) from exc
    return clients.api.sanitize_for_serialization(pod)


class DebugContainerService:
    def __init__(self, registry: EnvironmentRegistry, client_provider: ClientProvider) -> None:
        self._registry = registry
        self._client_provider = client_provider

    def cluster_version(self, project: str, env: str, ctx: Optional[OperationContext] = None) -> ClusterVersion:
        ctx = ctx or OperationContext()
        location = self._registry.lookup(project, env)
        clients = self._client_provider.get_clients(location.cluster_id)
        return probe_cluster_version(clients.version, ctx)

    def patch_debug_container(
        self,
        project: str,
        env: str,
        pod_name: str,
        debug_image: str,
        ctx: Optional[OperationContext] = None,
    ) -> PatchResult:
        """Inject the debug container into `pod_name` of the given environment.

        Raises:
            DebugInjectorError: The first failing step's error; nothing is
                retried and no partial result is returned
        """

        ctx = ctx or OperationContext()
        location = self._registry.lookup(project, env)
        clients = self._client_provider.get_clients(location.cluster_id)

        pod = fetch_pod_snapshot(clients, pod_name, location.namespace, ctx)
        version = probe_cluster_version(clients.version, ctx)
        strategy = select_strategy(version)
        logger.info(
            f"Injecting debug container into {location.namespace}/{pod_name} "
            f"(cluster {location.cluster_id or 'local'}, {version.git_version}, {strategy.value} patch)"
        )

        result = applier_for(strategy).apply(clients, pod, build_debug_container(debug_image), ctx)
        logger.info(f"Added ephemeral container {result.container_name} to {location.namespace}/{pod_name}")
        return result


def build_service(cfg: DebugInjectorConfig) -> DebugContainerService:
    return DebugContainerService(
        registry=SqlEnvironmentRegistry(cfg.database_url),
        client_provider=KubeconfigClientProvider(kubeconfig=cfg.kubeconfig, contexts=cfg.cluster_contexts),
    )
