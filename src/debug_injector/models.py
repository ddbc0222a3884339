from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Tuple

DEBUG_CONTAINER_NAME = "zadig-debug"

# Clusters below this minor version only accept ephemeral containers via
# JSON patch against the old EphemeralContainers subresource object.
EPHEMERAL_CONTAINER_THRESHOLD = "1.23"

DEBUG_CONTAINER_COMMAND: Tuple[str, ...] = ("tail", "-f", "/dev/null")
PULL_ALWAYS = "Always"
TERMINATION_MESSAGE_FALLBACK_TO_LOGS_ON_ERROR = "FallbackToLogsOnError"


class PatchStrategy(str, Enum):
    LEGACY = "legacy"
    MODERN = "modern"


@dataclass(frozen=True)
class ClusterVersion:
    """Server version reduced to `<major>.<minor>`."""

    value: str
    git_version: str

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class EnvironmentLocation:
    cluster_id: str
    namespace: str


@dataclass(frozen=True)
class DebugContainerSpec:
    name: str
    image: str
    command: Tuple[str, ...]
    image_pull_policy: str
    termination_message_policy: str

    def to_manifest(self) -> Dict[str, Any]:
        """Ephemeral container object as the API server expects it."""

        return {
            "name": self.name,
            "image": self.image,
            "command": list(self.command),
            "imagePullPolicy": self.image_pull_policy,
            "terminationMessagePolicy": self.termination_message_policy,
        }


@dataclass(frozen=True)
class PatchResult:
    pod: Dict[str, Any]
    container_name: str
    strategy: PatchStrategy

    @property
    def pod_name(self) -> str:
        return (self.pod.get("metadata") or {}).get("name", "")

    @property
    def namespace(self) -> str:
        return (self.pod.get("metadata") or {}).get("namespace", "")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ok": True,
            "pod": self.pod_name,
            "namespace": self.namespace,
            "container": self.container_name,
            "strategy": self.strategy.value,
        }
