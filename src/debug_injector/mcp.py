from __future__ import annotations

from typing import Any, Dict, Optional

from fastmcp import FastMCP

from .config import DebugInjectorConfig
from .logging_config import configure_logging
from .service import build_service
from .tools import cluster_version as cluster_version_impl
from .tools import patch_debug_container as patch_debug_container_impl

mcp = FastMCP("debug-injector-mcp")


@mcp.tool
def patch_debug_container(project: str, env: str, pod: str, image: Optional[str] = None) -> Dict[str, Any]:
    """Add the `zadig-debug` ephemeral container to a running pod.

    The container idles (`tail -f /dev/null`) so a shell can be attached
    afterwards. Ephemeral containers cannot be removed from the pod.
    """

    cfg = DebugInjectorConfig.from_env()
    return patch_debug_container_impl(build_service(cfg), cfg, project=project, env=env, pod=pod, image=image)


@mcp.tool
def cluster_version(project: str, env: str) -> Dict[str, Any]:
    """Report the environment's cluster version and the patch strategy it needs."""

    cfg = DebugInjectorConfig.from_env()
    return cluster_version_impl(build_service(cfg), cfg, project=project, env=env)


def run() -> None:
    cfg = DebugInjectorConfig.from_env()
    configure_logging(cfg.log_level)
    mcp.run(transport="http", host=cfg.mcp_host, port=cfg.mcp_port)


if __name__ == "__main__":
    run()
