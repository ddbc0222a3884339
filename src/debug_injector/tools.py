from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from .config import DebugInjectorConfig
from .context import OperationContext
from .errors import DebugInjectorError
from .service import DebugContainerService
from .version import select_strategy

logger = logging.getLogger(__name__)


def _context(cfg: DebugInjectorConfig) -> OperationContext:
    if cfg.request_timeout > 0:
        return OperationContext.with_timeout(cfg.request_timeout)
    return OperationContext()


def _required(**values: str) -> Optional[Dict[str, Any]]:
    missing = [name for name, value in values.items() if not (value or "").strip()]
    if missing:
        return {"ok": False, "error": f"missing required argument(s): {', '.join(missing)}", "code": "INVALID_ARGUMENT"}
    return None


def patch_debug_container(
    service: DebugContainerService,
    cfg: DebugInjectorConfig,
    project: str,
    env: str,
    pod: str,
    image: Optional[str] = None,
) -> Dict[str, Any]:
    err = _required(project=project, env=env, pod=pod)
    if err:
        return err

    debug_image = (image or "").strip() or cfg.default_image
    try:
        result = service.patch_debug_container(project.strip(), env.strip(), pod.strip(), debug_image, ctx=_context(cfg))
    except DebugInjectorError as exc:
        logger.warning(f"Debug container injection failed: {exc.message}")
        return exc.to_dict()

    out = result.to_dict()
    out["image"] = debug_image
    return out


def cluster_version(
    service: DebugContainerService,
    cfg: DebugInjectorConfig,
    project: str,
    env: str,
) -> Dict[str, Any]:
    err = _required(project=project, env=env)
    if err:
        return err

    try:
        version = service.cluster_version(project.strip(), env.strip(), ctx=_context(cfg))
        strategy = select_strategy(version)
    except DebugInjectorError as exc:
        return exc.to_dict()

    return {"ok": True, "version": version.value, "gitVersion": version.git_version, "strategy": strategy.value}
