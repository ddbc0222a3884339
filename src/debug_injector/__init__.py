"""Debug container injection for running pods.

Adds an idle ephemeral container to a pod, picking the patch protocol
the target cluster understands:
- before 1.23: JSON patch on the old `ephemeralcontainers` subresource
- from 1.23: strategic merge patch computed against the current pod
"""

from .appliers import LegacyPatchApplier, ModernPatchApplier, PatchApplier, applier_for
from .clients import ClientProvider, ClusterClients, KubeconfigClientProvider
from .container import build_debug_container
from .context import OperationContext
from .errors import (
    ClientProvisionError,
    ContainerPatchError,
    DebugInjectorError,
    EnvironmentLookupError,
    MergePatchError,
    OperationCancelledError,
    PatchRejectedError,
    PatchSerializationError,
    PodFetchError,
    PostPatchReadError,
    VersionProbeError,
)
from .models import (
    DEBUG_CONTAINER_NAME,
    EPHEMERAL_CONTAINER_THRESHOLD,
    ClusterVersion,
    DebugContainerSpec,
    EnvironmentLocation,
    PatchResult,
    PatchStrategy,
)
from .registry import EnvironmentRegistry, SqlEnvironmentRegistry
from .service import DebugContainerService, build_service
from .version import normalize_version, probe_cluster_version, select_strategy

__all__ = [
    "DEBUG_CONTAINER_NAME",
    "EPHEMERAL_CONTAINER_THRESHOLD",
    "ClientProvider",
    "ClientProvisionError",
    "ClusterClients",
    "ClusterVersion",
    "ContainerPatchError",
    "DebugContainerService",
    "DebugContainerSpec",
    "DebugInjectorError",
    "EnvironmentLocation",
    "EnvironmentLookupError",
    "EnvironmentRegistry",
    "KubeconfigClientProvider",
    "LegacyPatchApplier",
    "MergePatchError",
    "ModernPatchApplier",
    "OperationCancelledError",
    "OperationContext",
    "PatchApplier",
    "PatchRejectedError",
    "PatchResult",
    "PatchSerializationError",
    "PatchStrategy",
    "PodFetchError",
    "PostPatchReadError",
    "SqlEnvironmentRegistry",
    "VersionProbeError",
    "applier_for",
    "build_debug_container",
    "build_service",
    "normalize_version",
    "probe_cluster_version",
    "select_strategy",
]
