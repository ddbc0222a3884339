import copy
import json
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from debug_injector.clients import ClientProvider, ClusterClients
from debug_injector.models import EnvironmentLocation
from debug_injector.registry import EnvironmentRegistry


def make_pod(name="web-0", namespace="ns1", ephemeral=None):
    pod = {
        "apiVersion": "v1",
        "kind": "Pod",
        "metadata": {
            "name": name,
            "namespace": namespace,
            "labels": {"app": "acme-financial-office"},
            "resourceVersion": "4711",
        },
        "spec": {
            "initContainers": [
                {
                    "name": "init-skywalking-agent",
                    "image": "skywalking-agent:8.8.0",
                    "command": ["sh", "-c", "mkdir -p /vmskywalking/agent"],
                    "volumeMounts": [{"mountPath": "/vmskywalking/agent", "name": "skywalking-agent"}],
                }
            ],
            "containers": [
                {
                    "name": "acme-financial-office",
                    "image": "acme-financial-office:1.0",
                    "env": [
                        {"name": "JAVA_OPTS", "value": "-javaagent:/opt/skywalking/agent/skywalking-agent.jar"},
                        {"name": "SW_AGENT_NAME", "value": "acme-financial-office"},
                    ],
                    "ports": [{"containerPort": 8080, "protocol": "TCP"}],
                    "resources": {"limits": {"cpu": "100m", "memory": "256Mi"}},
                }
            ],
            "volumes": [{"name": "skywalking-agent", "emptyDir": {}}],
            "tolerations": [{"key": "node.kubernetes.io/not-ready", "operator": "Exists"}],
            "restartPolicy": "Always",
        },
        "status": {"phase": "Running", "podIP": "10.0.0.12"},
    }
    if ephemeral is not None:
        pod["spec"]["ephemeralContainers"] = ephemeral
    return pod


class FakeCluster:
    """In-memory API server for one pod, recording every call."""

    def __init__(self, git_version, pod):
        self.git_version = git_version
        self.pod = pod
        self.calls = []

        self.api = MagicMock(name="api")
        self.api.sanitize_for_serialization.side_effect = lambda obj: copy.deepcopy(obj)

        self.core = MagicMock(name="core")
        self.core.read_namespaced_pod.side_effect = self._read_pod
        self.core.patch_namespaced_pod_ephemeralcontainers.side_effect = self._patch_ephemeral

        self.version = MagicMock(name="version")
        self.version.get_code.side_effect = self._get_code

        self.clients = ClusterClients(api=self.api, core=self.core, version=self.version)

    def _get_code(self, **kwargs):
        self.calls.append("version")
        return SimpleNamespace(git_version=self.git_version)

    def _read_pod(self, name, namespace, **kwargs):
        self.calls.append("get")
        return copy.deepcopy(self.pod)

    def _patch_ephemeral(self, name, namespace, body, **kwargs):
        self.calls.append("patch")
        spec = self.pod["spec"]
        current = spec.setdefault("ephemeralContainers", [])

        if isinstance(body, list):
            for op in body:
                assert op["op"] == "add" and op["path"] == "/ephemeralContainers/-"
                current.append(op["value"])
            # Old clusters answer with an EphemeralContainers object.
            return None

        json.dumps(body)
        by_name = {c["name"]: c for c in current}
        for item in body.get("spec", {}).get("ephemeralContainers", []):
            by_name.setdefault(item["name"], {}).update(item)
        order = body["spec"].get("$setElementOrder/ephemeralContainers")
        names = [o["name"] for o in order] if order else list(by_name)
        spec["ephemeralContainers"] = [by_name[n] for n in names]
        return copy.deepcopy(self.pod)


class StaticRegistry(EnvironmentRegistry):
    def __init__(self, locations):
        self.locations = locations

    def lookup(self, project, env):
        from debug_injector.errors import EnvironmentLookupError

        try:
            return self.locations[(project, env)]
        except KeyError:
            raise EnvironmentLookupError(project, env, "not found")


class StaticClientProvider(ClientProvider):
    def __init__(self, clients):
        self.clients = clients
        self.requested = []

    def get_clients(self, cluster_id):
        self.requested.append(cluster_id)
        return self.clients


@pytest.fixture
def legacy_cluster():
    return FakeCluster("v1.20.6-tke.16", make_pod(ephemeral=[]))


@pytest.fixture
def modern_cluster():
    return FakeCluster("v1.25.0", make_pod())


@pytest.fixture
def registry():
    return StaticRegistry({("demo", "dev"): EnvironmentLocation(cluster_id="c-1", namespace="ns1")})
