"""Patch appliers: the two ways of adding an ephemeral container.

Both target the pod's `ephemeralcontainers` subresource; they differ in
the patch format the server accepts there. The client picks the content
type from the body: a list goes out as a JSON patch, a dict as a
strategic merge patch.
"""

from __future__ import annotations

import copy
import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Tuple, Union

from kubernetes.client import ApiException

from .clients import API_ERRORS, ClusterClients
from .context import OperationContext
from .errors import (
    ContainerPatchError,
    MergePatchError,
    PatchRejectedError,
    PatchSerializationError,
    PostPatchReadError,
    error_reason,
)
from .merge import POD_PATCH_META, PatchComputationError, PatchMeta, create_two_way_merge_patch
from .models import DebugContainerSpec, PatchResult, PatchStrategy

logger = logging.getLogger(__name__)


def pod_identity(pod: Dict[str, Any]) -> Tuple[str, str]:
    metadata = pod.get("metadata") or {}
    return metadata.get("name") or "", metadata.get("namespace") or ""


def patch_ephemeral_containers(
    clients: ClusterClients,
    name: str,
    namespace: str,
    body: Union[List[Dict[str, Any]], Dict[str, Any]],
    ctx: OperationContext,
) -> Any:
    """PATCH the pod's ephemeralcontainers subresource."""

    return clients.core.patch_namespaced_pod_ephemeralcontainers(
        name=name,
        namespace=namespace,
        body=body,
        **ctx.request_kwargs(f"patch pod {namespace}/{name}"),
    )


def _patch_failure(name: str, namespace: str, exc: BaseException) -> ContainerPatchError:
    if isinstance(exc, ApiException):
        return PatchRejectedError(name, namespace, error_reason(exc), status=exc.status)
    return ContainerPatchError(f"failed to patch: {error_reason(exc)}", name, namespace)


class PatchApplier(ABC):
    """Adds a debug container to a pod snapshot and returns the new pod."""

    strategy: PatchStrategy

    @abstractmethod
    def apply(
        self,
        clients: ClusterClients,
        pod: Dict[str, Any],
        container: DebugContainerSpec,
        ctx: OperationContext,
    ) -> PatchResult:
        """Submit the patch for `container` against `pod`.

        Raises:
            ContainerPatchError: If the patch cannot be built or is rejected
            PostPatchReadError: If the updated pod cannot be read back
        """
        ...


class LegacyPatchApplier(PatchApplier):
    """Clusters before 1.23: JSON patch appending to the subresource list.

    The subresource answers with an EphemeralContainers object rather than
    a pod, so the pod is read back separately.
    """

    strategy = PatchStrategy.LEGACY

    @staticmethod
    def build_patch(container: DebugContainerSpec) -> List[Dict[str, Any]]:
        return [{"op": "add", "path": "/ephemeralContainers/-", "value": container.to_manifest()}]

    def apply(
        self,
        clients: ClusterClients,
        pod: Dict[str, Any],
        container: DebugContainerSpec,
        ctx: OperationContext,
    ) -> PatchResult:
        name, namespace = pod_identity(pod)

        body = self.build_patch(container)
        logger.debug(f"JSON patch for {namespace}/{name}: {body}")

        # The response body is not a pod on these clusters; it is discarded.
        try:
            patch_ephemeral_containers(clients, name, namespace, body, ctx)
        except API_ERRORS as exc:
            raise _patch_failure(name, namespace, exc) from exc

        try:
            updated = clients.core.read_namespaced_pod(
                name=name,
                namespace=namespace,
                **ctx.request_kwargs(f"get pod {namespace}/{name}"),
            )
        except API_ERRORS as exc:
            raise PostPatchReadError(name, namespace, error_reason(exc)) from exc

        return PatchResult(
            pod=clients.api.sanitize_for_serialization(updated),
            container_name=container.name,
            strategy=self.strategy,
        )


class ModernPatchApplier(PatchApplier):
    """Clusters from 1.23: strategic merge patch of the whole pod."""

    strategy = PatchStrategy.MODERN

    def __init__(self, patch_meta: PatchMeta = POD_PATCH_META) -> None:
        self._patch_meta = patch_meta

    def build_patch(self, pod: Dict[str, Any], container: DebugContainerSpec) -> bytes:
        name, namespace = pod_identity(pod)

        try:
            original = json.dumps(pod).encode("utf-8")
        except (TypeError, ValueError) as exc:
            raise PatchSerializationError(name, namespace, "pod", str(exc)) from exc

        debug_pod = copy.deepcopy(pod)
        spec = debug_pod.setdefault("spec", {})
        spec["ephemeralContainers"] = list(spec.get("ephemeralContainers") or []) + [container.to_manifest()]
        try:
            modified = json.dumps(debug_pod).encode("utf-8")
        except (TypeError, ValueError) as exc:
            raise PatchSerializationError(name, namespace, "debug container", str(exc)) from exc

        try:
            return create_two_way_merge_patch(original, modified, self._patch_meta)
        except PatchComputationError as exc:
            raise MergePatchError(name, namespace, str(exc)) from exc

    def apply(
        self,
        clients: ClusterClients,
        pod: Dict[str, Any],
        container: DebugContainerSpec,
        ctx: OperationContext,
    ) -> PatchResult:
        name, namespace = pod_identity(pod)
        patch = self.build_patch(pod, container)
        logger.debug(f"Strategic merge patch for {namespace}/{name}: {patch.decode('utf-8')}")

        try:
            updated = patch_ephemeral_containers(clients, name, namespace, json.loads(patch), ctx)
        except API_ERRORS as exc:
            raise _patch_failure(name, namespace, exc) from exc

        return PatchResult(
            pod=clients.api.sanitize_for_serialization(updated),
            container_name=container.name,
            strategy=self.strategy,
        )


_APPLIERS: Dict[PatchStrategy, PatchApplier] = {
    PatchStrategy.LEGACY: LegacyPatchApplier(),
    PatchStrategy.MODERN: ModernPatchApplier(),
}


def applier_for(strategy: PatchStrategy) -> PatchApplier:
    return _APPLIERS[strategy]
