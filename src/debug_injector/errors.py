"""Error hierarchy for debug container injection.

Every failure surfaces as a single terminal `DebugInjectorError` subclass
whose message names the operation and the resources involved. Nothing in
this package recovers from or retries these errors.
"""

from __future__ import annotations

import json
from typing import Any, Dict, Optional


def quote(value: Any) -> str:
    """Double-quote a value for error messages."""

    return json.dumps("" if value is None else str(value))


def error_reason(exc: BaseException) -> str:
    """Short, user-legible description of an underlying client failure."""

    status = getattr(exc, "status", None)
    if status is None:
        return str(exc) or exc.__class__.__name__

    reason = getattr(exc, "reason", None) or ""
    body = getattr(exc, "body", None)
    message = None
    if body:
        try:
            message = json.loads(body).get("message")
        except (TypeError, ValueError, AttributeError):
            message = None
    text = f"({status}) {reason}".strip()
    return f"{text}: {message}" if message else text


class DebugInjectorError(Exception):
    """Base exception for debug container injection."""

    def __init__(
        self,
        message: str,
        code: str = "DEBUG_INJECTOR_ERROR",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        return {"ok": False, "error": self.message, "code": self.code, "details": self.details}


class OperationCancelledError(DebugInjectorError):
    """The caller's context was cancelled or its deadline passed."""

    def __init__(self, operation: str, reason: str):
        super().__init__(
            f"{operation}: {reason}",
            code="OPERATION_CANCELLED",
            details={"operation": operation},
        )


class EnvironmentLookupError(DebugInjectorError):
    """Project/env could not be resolved to a cluster and namespace."""

    def __init__(self, project: str, env: str, reason: str):
        super().__init__(
            f"failed to query env {quote(env)} in project {quote(project)}: {reason}",
            code="ENVIRONMENT_LOOKUP_FAILED",
            details={"project": project, "env": env},
        )


class ClientProvisionError(DebugInjectorError):
    """Authenticated cluster clients could not be built."""

    def __init__(self, cluster_id: str, reason: str):
        super().__init__(
            f"failed to get kube client for cluster {quote(cluster_id)}: {reason}",
            code="CLIENT_PROVISION_FAILED",
            details={"cluster_id": cluster_id},
        )


class PodFetchError(DebugInjectorError):
    def __init__(self, pod: str, namespace: str, reason: str):
        super().__init__(
            f"failed to get pod {quote(pod)} in ns {quote(namespace)}: {reason}",
            code="POD_FETCH_FAILED",
            details={"pod": pod, "namespace": namespace},
        )


class VersionProbeError(DebugInjectorError):
    """Server version could not be queried or parsed."""

    def __init__(self, reason: str, git_version: Optional[str] = None):
        details: Dict[str, Any] = {"operation": "probe cluster version"}
        if git_version is not None:
            details["git_version"] = git_version
        super().__init__(
            f"failed to check K8s version: {reason}",
            code="VERSION_PROBE_FAILED",
            details=details,
        )


class ContainerPatchError(DebugInjectorError):
    """Adding the debug container to the pod failed."""

    def __init__(
        self,
        message: str,
        pod: str,
        namespace: str,
        code: str = "CONTAINER_PATCH_FAILED",
        details: Optional[Dict[str, Any]] = None,
    ):
        merged = {"pod": pod, "namespace": namespace}
        merged.update(details or {})
        super().__init__(message, code=code, details=merged)
        self.pod = pod
        self.namespace = namespace


class PatchSerializationError(ContainerPatchError):
    """A patch input could not be encoded as JSON (local failure)."""

    def __init__(self, pod: str, namespace: str, subject: str, reason: str):
        super().__init__(
            f"error creating JSON for {subject}: {reason}",
            pod,
            namespace,
            code="PATCH_SERIALIZATION_FAILED",
            details={"subject": subject},
        )


class MergePatchError(ContainerPatchError):
    """The strategic merge diff could not be computed (local failure)."""

    def __init__(self, pod: str, namespace: str, reason: str):
        super().__init__(
            f"error creating patch to add debug container: {reason}",
            pod,
            namespace,
            code="MERGE_PATCH_FAILED",
        )


class PatchRejectedError(ContainerPatchError):
    """The API server refused the patch or could not be reached (remote failure)."""

    def __init__(self, pod: str, namespace: str, reason: str, status: Optional[int] = None):
        super().__init__(
            f"failed to patch: {reason}",
            pod,
            namespace,
            code="PATCH_REJECTED",
            details={"status": status},
        )
        self.status = status


class PostPatchReadError(DebugInjectorError):
    """Legacy path only: the pod could not be re-read after patching."""

    def __init__(self, pod: str, namespace: str, reason: str):
        super().__init__(
            f"failed to get pod {quote(pod)} in ns {quote(namespace)} after patch: {reason}",
            code="POST_PATCH_READ_FAILED",
            details={"pod": pod, "namespace": namespace},
        )
