from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional

from .config_utils import env_first, env_float, env_int, env_mapping, env_str


@dataclass(frozen=True)
class DebugInjectorConfig:
    """Runtime configuration for debug container injection.

    Env vars:
    - DEBUG_INJECTOR_KUBECONFIG (or K8S_KUBECONFIG): kubeconfig path
    - DEBUG_INJECTOR_CLUSTER_CONTEXTS: `cluster_id=context,...`; unmapped
      cluster ids are used as context names
    - DEBUG_INJECTOR_DATABASE_URL, then PLATFORM_DATABASE_URL: environment
      registry database; defaults to SQLite at data/environments.db
    - DEBUG_INJECTOR_DEFAULT_IMAGE: image used when a caller gives none
    - DEBUG_INJECTOR_REQUEST_TIMEOUT: per-call deadline in seconds for the
      MCP tools (0 disables it)
    - DEBUG_INJECTOR_LOG_LEVEL

    MCP server:
    - DEBUG_INJECTOR_MCP_HOST
    - DEBUG_INJECTOR_MCP_PORT
    """

    database_url: str
    kubeconfig: Optional[str] = None
    cluster_contexts: Dict[str, str] = field(default_factory=dict)
    default_image: str = "busybox:latest"
    request_timeout: float = 0.0
    log_level: str = "INFO"
    mcp_host: str = "0.0.0.0"
    mcp_port: int = 8020

    DEFAULT_IMAGE = "busybox:latest"
    DEFAULT_MCP_HOST = "0.0.0.0"
    DEFAULT_MCP_PORT = 8020

    @classmethod
    def from_env(cls) -> "DebugInjectorConfig":
        database_url = env_first("DEBUG_INJECTOR_DATABASE_URL", "PLATFORM_DATABASE_URL")
        if not database_url:
            data_dir = Path.cwd() / "data"
            data_dir.mkdir(parents=True, exist_ok=True)
            database_url = f"sqlite:///{(data_dir / 'environments.db').as_posix()}"

        return cls(
            database_url=database_url,
            kubeconfig=env_first("DEBUG_INJECTOR_KUBECONFIG", "K8S_KUBECONFIG"),
            cluster_contexts=env_mapping("DEBUG_INJECTOR_CLUSTER_CONTEXTS"),
            default_image=env_str("DEBUG_INJECTOR_DEFAULT_IMAGE", cls.DEFAULT_IMAGE) or cls.DEFAULT_IMAGE,
            request_timeout=max(0.0, env_float("DEBUG_INJECTOR_REQUEST_TIMEOUT", 0.0)),
            log_level=env_str("DEBUG_INJECTOR_LOG_LEVEL", "INFO").upper(),
            mcp_host=env_str("DEBUG_INJECTOR_MCP_HOST", cls.DEFAULT_MCP_HOST),
            mcp_port=env_int("DEBUG_INJECTOR_MCP_PORT", cls.DEFAULT_MCP_PORT),
        )
