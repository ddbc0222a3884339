from conftest import StaticClientProvider
from debug_injector import tools
from debug_injector.config import DebugInjectorConfig
from debug_injector.service import DebugContainerService


def _setup(registry, cluster, **cfg_overrides):
    service = DebugContainerService(registry=registry, client_provider=StaticClientProvider(cluster.clients))
    cfg = DebugInjectorConfig(database_url="sqlite://", **cfg_overrides)
    return service, cfg


def test_patch_debug_container_tool(registry, modern_cluster):
    service, cfg = _setup(registry, modern_cluster)

    out = tools.patch_debug_container(service, cfg, project="demo", env="dev", pod=" web-0 ", image="alpine")

    assert out == {
        "ok": True,
        "pod": "web-0",
        "namespace": "ns1",
        "container": "zadig-debug",
        "strategy": "modern",
        "image": "alpine",
    }


def test_patch_debug_container_tool_default_image(registry, legacy_cluster):
    service, cfg = _setup(registry, legacy_cluster, default_image="nicolaka/netshoot")

    out = tools.patch_debug_container(service, cfg, project="demo", env="dev", pod="web-0")

    assert out["ok"] is True
    assert out["image"] == "nicolaka/netshoot"
    assert legacy_cluster.pod["spec"]["ephemeralContainers"][0]["image"] == "nicolaka/netshoot"


def test_patch_debug_container_tool_reports_errors(registry, modern_cluster):
    service, cfg = _setup(registry, modern_cluster)

    out = tools.patch_debug_container(service, cfg, project="demo", env="prod", pod="web-0")

    assert out["ok"] is False
    assert out["code"] == "ENVIRONMENT_LOOKUP_FAILED"
    assert out["details"] == {"project": "demo", "env": "prod"}


def test_patch_debug_container_tool_requires_arguments(registry, modern_cluster):
    service, cfg = _setup(registry, modern_cluster)

    out = tools.patch_debug_container(service, cfg, project="demo", env="", pod="  ")

    assert out["ok"] is False
    assert out["error"] == "missing required argument(s): env, pod"
    assert modern_cluster.calls == []


def test_cluster_version_tool(registry, legacy_cluster):
    service, cfg = _setup(registry, legacy_cluster, request_timeout=10)

    out = tools.cluster_version(service, cfg, project="demo", env="dev")

    assert out == {"ok": True, "version": "1.20", "gitVersion": "v1.20.6-tke.16", "strategy": "legacy"}
    assert "_request_timeout" in legacy_cluster.version.get_code.call_args.kwargs
