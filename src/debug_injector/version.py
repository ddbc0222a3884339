"""Server version probing and patch strategy selection."""

from __future__ import annotations

import logging
import re
from typing import Any, Tuple, Union

from .clients import API_ERRORS
from .context import OperationContext
from .errors import VersionProbeError, error_reason, quote
from .models import EPHEMERAL_CONTAINER_THRESHOLD, ClusterVersion, PatchStrategy

logger = logging.getLogger(__name__)

_LEADING_DIGITS = re.compile(r"^(\d+)")


def normalize_version(git_version: str) -> str:
    """Reduce a reported version to `<major>.<minor>`.

    Examples: v1.23.3 -> 1.23, v1.20.6-tke.16 -> 1.20
    """

    items = (git_version or "").strip().split(".")
    if len(items) < 2:
        raise VersionProbeError(f"invalid server version format {quote(git_version)}", git_version=git_version)

    major = items[0][1:] if items[0].startswith("v") else items[0]
    return f"{major}.{items[1]}"


def parse_cluster_version(git_version: str) -> ClusterVersion:
    return ClusterVersion(value=normalize_version(git_version), git_version=git_version)


def probe_cluster_version(version_api: Any, ctx: OperationContext) -> ClusterVersion:
    """Ask the API server for its version; any failure is fatal."""

    try:
        info = version_api.get_code(**ctx.request_kwargs("probe cluster version"))
    except API_ERRORS as exc:
        raise VersionProbeError(error_reason(exc)) from exc

    git_version = getattr(info, "git_version", None) or ""
    version = parse_cluster_version(git_version)
    logger.debug(f"Cluster reports {git_version}, normalized to {version.value}")
    return version


def version_key(version: str) -> Tuple[int, ...]:
    """Numeric sort key for a dotted version (`1.9` < `1.10`).

    Vendor suffixes inside a segment are ignored (`23+` -> 23).
    """

    text = (version or "").strip()
    if text.startswith(("v", "V")):
        text = text[1:]

    key = []
    for segment in text.split("."):
        match = _LEADING_DIGITS.match(segment)
        if match is None:
            raise VersionProbeError(f"invalid server version format {quote(version)}", git_version=version)
        key.append(int(match.group(1)))
    return tuple(key)


def compare_versions(left: str, right: str) -> int:
    """Return -1, 0 or 1 comparing two dotted versions numerically."""

    a, b = version_key(left), version_key(right)
    width = max(len(a), len(b))
    a = a + (0,) * (width - len(a))
    b = b + (0,) * (width - len(b))
    return (a > b) - (a < b)


def select_strategy(
    cluster_version: Union[ClusterVersion, str],
    threshold: str = EPHEMERAL_CONTAINER_THRESHOLD,
) -> PatchStrategy:
    """Legacy strictly below `threshold`, Modern at or above it."""

    if compare_versions(str(cluster_version), threshold) < 0:
        return PatchStrategy.LEGACY
    return PatchStrategy.MODERN
