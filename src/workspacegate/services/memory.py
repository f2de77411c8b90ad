"""In-memory implementation of ResourceClient for testing.

This provides a thread-safe store that mimics the label selector and
JSON-Patch behaviour of the custom objects API, plus hooks for injecting
transport failures.
"""

from __future__ import annotations

import copy
import threading
from typing import Any

from ..errors import ResourceNotFoundError, TransportError
from .resource_client import ResourceKind


def _matches(labels: dict[str, str], label_selector: str) -> bool:
    """Evaluate a comma separated selector of ``k=v`` / ``!k`` terms."""
    for term in filter(None, (t.strip() for t in label_selector.split(","))):
        if term.startswith("!"):
            if term[1:] in labels:
                return False
        elif "=" in term:
            key, value = term.split("=", 1)
            if labels.get(key) != value:
                return False
        elif term not in labels:
            return False
    return True


def _apply_replace(obj: dict, path: str, value: Any) -> None:
    parts = [p for p in path.split("/") if p]
    if not parts:
        raise ValueError("JSON-Patch path must not be empty")
    target = obj
    for part in parts[:-1]:
        if part not in target:
            raise ValueError(f"JSON-Patch path {path} does not exist")
        target = target[part]
    target[parts[-1]] = value


class InMemoryResourceStore:
    """In-memory workspace resources for testing.

    When ``reconcile_on_patch`` is set, a patch to ``/spec/replicas`` is
    immediately reflected in ``status.replicas``, as if the controller had
    caught up.
    """

    def __init__(self, label_key: str = "xlscsde.nhs.uk/username", reconcile_on_patch: bool = True):
        """Initialize empty store with thread safety."""
        self.label_key = label_key
        self.reconcile_on_patch = reconcile_on_patch
        self._objects: dict[ResourceKind, dict[tuple[str, str], dict]] = {
            kind: {} for kind in ResourceKind
        }
        self._failures: dict[tuple[str, str], int] = {}
        self._list_failures = 0
        self._lock = threading.Lock()
        self.patch_log: list[tuple[str, str, Any]] = []

    def add_workspace(self, name: str, namespace: str = "default", display_name: str | None = None) -> dict:
        obj = {"metadata": {"name": name, "namespace": namespace}, "spec": {}}
        if display_name is not None:
            obj["spec"]["displayName"] = display_name
        with self._lock:
            self._objects[ResourceKind.WORKSPACE][(namespace, name)] = obj
        return obj

    def add_binding(
        self,
        name: str,
        workspace: str,
        namespace: str = "default",
        username: str | None = None,
        label: str | None = None,
        replicas: int = 0,
        status_replicas: int | None = None,
    ) -> dict:
        """Add a binding, labeled when ``label`` is given."""
        metadata: dict[str, Any] = {"name": name, "namespace": namespace}
        if label is not None:
            metadata["labels"] = {self.label_key: label}
        obj: dict[str, Any] = {
            "metadata": metadata,
            "spec": {"workspace": workspace, "replicas": replicas},
        }
        if username is not None:
            obj["spec"]["username"] = username
        if status_replicas is not None:
            obj["status"] = {"replicas": status_replicas}
        with self._lock:
            self._objects[ResourceKind.WORKSPACE_BINDING][(namespace, name)] = obj
        return obj

    def delete(self, kind: ResourceKind, namespace: str, name: str) -> bool:
        with self._lock:
            return self._objects[kind].pop((namespace, name), None) is not None

    def fail_patches(self, namespace: str, name: str, times: int) -> None:
        """Make the next ``times`` patches of one object raise TransportError."""
        with self._lock:
            self._failures[(namespace, name)] = times

    def fail_lists(self, times: int) -> None:
        """Make the next ``times`` list calls raise TransportError."""
        with self._lock:
            self._list_failures = times

    def replicas(self, namespace: str, name: str) -> int:
        """Desired replicas of a binding (test helper)."""
        with self._lock:
            return self._objects[ResourceKind.WORKSPACE_BINDING][(namespace, name)]["spec"]["replicas"]

    def list(self, kind: ResourceKind, label_selector: str) -> list[dict]:
        with self._lock:
            if self._list_failures > 0:
                self._list_failures -= 1
                raise TransportError(f"{kind.value} request failed: 503 Service Unavailable", status=503)
            return [
                copy.deepcopy(obj)
                for obj in self._objects[kind].values()
                if _matches(obj["metadata"].get("labels") or {}, label_selector)
            ]

    def get(self, kind: ResourceKind, namespace: str, name: str) -> dict:
        with self._lock:
            obj = self._objects[kind].get((namespace, name))
            if obj is None:
                raise ResourceNotFoundError(kind.value, namespace, name)
            return copy.deepcopy(obj)

    def patch(self, kind: ResourceKind, namespace: str, name: str, ops: list[dict[str, Any]]) -> dict:
        with self._lock:
            remaining = self._failures.get((namespace, name), 0)
            if remaining > 0:
                self._failures[(namespace, name)] = remaining - 1
                raise TransportError(f"{kind.value} request failed: 503 Service Unavailable", status=503)

            obj = self._objects[kind].get((namespace, name))
            if obj is None:
                raise ResourceNotFoundError(kind.value, namespace, name)

            for op in ops:
                if op.get("op") != "replace":
                    raise ValueError(f"Unsupported JSON-Patch op: {op.get('op')}")
                _apply_replace(obj, op["path"], op["value"])
                self.patch_log.append((namespace, name, op["value"]))
                if self.reconcile_on_patch and op["path"] == "/spec/replicas":
                    obj.setdefault("status", {})["replicas"] = op["value"]

            return copy.deepcopy(obj)
