from __future__ import annotations

import logging
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Optional

from kubernetes import client, config
from kubernetes.client import ApiException, ApiTypeError
from urllib3.exceptions import HTTPError

from .errors import ClientProvisionError, OperationCancelledError

logger = logging.getLogger(__name__)

# Failures of a single API round-trip: server rejection, transport error,
# a request or response the client cannot (de)serialize, or the caller's
# context ending before the request was sent. ValueError covers
# ApiValueError and model validation of the response.
API_ERRORS = (ApiException, ApiTypeError, ValueError, HTTPError, OperationCancelledError)

LOCAL_CLUSTER_IDS = frozenset({"", "local"})


@dataclass(frozen=True)
class ClusterClients:
    """API handles for one cluster.

    - `api`: raw request client and object codec (typed model <-> manifest)
    - `core`: typed core/v1 client for pod reads
    - `version`: server version discovery
    """

    api: client.ApiClient
    core: client.CoreV1Api
    version: client.VersionApi

    @classmethod
    def from_api_client(cls, api_client: client.ApiClient) -> "ClusterClients":
        return cls(
            api=api_client,
            core=client.CoreV1Api(api_client),
            version=client.VersionApi(api_client),
        )


class ClientProvider(ABC):
    """Turns a cluster id into authenticated `ClusterClients`."""

    @abstractmethod
    def get_clients(self, cluster_id: str) -> ClusterClients:
        """Build clients for `cluster_id`.

        Raises:
            ClientProvisionError: If credentials cannot be loaded
        """
        ...


class KubeconfigClientProvider(ClientProvider):
    """Clients built from kubeconfig contexts, or in-cluster credentials.

    Cluster ids map to kubeconfig contexts through `contexts`; an unmapped
    id is used as the context name itself. The local cluster (empty id or
    `local`) uses the pod's service account when running inside a cluster
    and the current kubeconfig context otherwise.
    """

    def __init__(
        self,
        kubeconfig: Optional[str] = None,
        contexts: Optional[Dict[str, str]] = None,
        in_cluster: Optional[bool] = None,
    ) -> None:
        self._kubeconfig = kubeconfig
        self._contexts = dict(contexts or {})
        if in_cluster is None:
            in_cluster = bool(os.environ.get("KUBERNETES_SERVICE_HOST"))
        self._in_cluster = in_cluster

    def context_for(self, cluster_id: str) -> Optional[str]:
        if cluster_id in self._contexts:
            return self._contexts[cluster_id]
        if cluster_id in LOCAL_CLUSTER_IDS:
            return None
        return cluster_id

    def _load_configuration(self, cluster_id: str) -> client.Configuration:
        configuration = client.Configuration()
        context = self.context_for(cluster_id)

        if context is None and self._in_cluster:
            config.load_incluster_config(client_configuration=configuration)
            return configuration

        if self._kubeconfig:
            config.load_kube_config(
                config_file=self._kubeconfig,
                context=context,
                client_configuration=configuration,
                persist_config=False,
            )
        else:
            config.load_kube_config(
                context=context,
                client_configuration=configuration,
                persist_config=False,
            )
        return configuration

    def get_clients(self, cluster_id: str) -> ClusterClients:
        try:
            configuration = self._load_configuration(cluster_id)
        except (config.ConfigException, OSError, ValueError) as exc:
            raise ClientProvisionError(cluster_id, str(exc)) from exc

        # Retry policy belongs to the caller.
        configuration.retries = False
        logger.debug(f"Loaded client configuration for cluster {cluster_id!r} ({configuration.host})")
        return ClusterClients.from_api_client(client.ApiClient(configuration=configuration))
