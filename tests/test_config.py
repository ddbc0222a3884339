from debug_injector.config import DebugInjectorConfig

_VARS = (
    "DEBUG_INJECTOR_DATABASE_URL",
    "PLATFORM_DATABASE_URL",
    "DEBUG_INJECTOR_KUBECONFIG",
    "K8S_KUBECONFIG",
    "DEBUG_INJECTOR_CLUSTER_CONTEXTS",
    "DEBUG_INJECTOR_DEFAULT_IMAGE",
    "DEBUG_INJECTOR_REQUEST_TIMEOUT",
    "DEBUG_INJECTOR_LOG_LEVEL",
    "DEBUG_INJECTOR_MCP_HOST",
    "DEBUG_INJECTOR_MCP_PORT",
)


def _clear(monkeypatch):
    for name in _VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults(monkeypatch, tmp_path):
    _clear(monkeypatch)
    monkeypatch.chdir(tmp_path)

    cfg = DebugInjectorConfig.from_env()

    assert cfg.database_url == f"sqlite:///{(tmp_path / 'data' / 'environments.db').as_posix()}"
    assert cfg.kubeconfig is None
    assert cfg.cluster_contexts == {}
    assert cfg.default_image == "busybox:latest"
    assert cfg.request_timeout == 0.0
    assert cfg.log_level == "INFO"
    assert cfg.mcp_port == 8020


def test_env_overrides(monkeypatch):
    _clear(monkeypatch)
    monkeypatch.setenv("PLATFORM_DATABASE_URL", "postgresql+psycopg2://u:p@db/platform")
    monkeypatch.setenv("DEBUG_INJECTOR_DATABASE_URL", "sqlite:////tmp/envs.db")
    monkeypatch.setenv("K8S_KUBECONFIG", "/etc/kube/config")
    monkeypatch.setenv("DEBUG_INJECTOR_CLUSTER_CONTEXTS", "c-1=prod, c-2=staging,broken,=x")
    monkeypatch.setenv("DEBUG_INJECTOR_DEFAULT_IMAGE", "nicolaka/netshoot")
    monkeypatch.setenv("DEBUG_INJECTOR_REQUEST_TIMEOUT", "12.5")
    monkeypatch.setenv("DEBUG_INJECTOR_LOG_LEVEL", "debug")
    monkeypatch.setenv("DEBUG_INJECTOR_MCP_PORT", "not-a-port")

    cfg = DebugInjectorConfig.from_env()

    assert cfg.database_url == "sqlite:////tmp/envs.db"
    assert cfg.kubeconfig == "/etc/kube/config"
    assert cfg.cluster_contexts == {"c-1": "prod", "c-2": "staging"}
    assert cfg.default_image == "nicolaka/netshoot"
    assert cfg.request_timeout == 12.5
    assert cfg.log_level == "DEBUG"
    assert cfg.mcp_port == 8020


def test_negative_timeout_disables_deadline(monkeypatch):
    _clear(monkeypatch)
    monkeypatch.setenv("DEBUG_INJECTOR_DATABASE_URL", "sqlite://")
    monkeypatch.setenv("DEBUG_INJECTOR_REQUEST_TIMEOUT", "-3")

    assert DebugInjectorConfig.from_env().request_timeout == 0.0


def test_logging_config_levels():
    from debug_injector.logging_config import get_logging_config

    cfg = get_logging_config("DEBUG")

    assert cfg["loggers"]["debug_injector"]["level"] == "DEBUG"
    assert cfg["loggers"]["urllib3"]["level"] == "WARNING"
    assert cfg["root"]["level"] == "WARNING"
