"""Narrow client for the workspace custom resources.

Only the calls the gate needs are exposed: list by label selector, get by
name and JSON-Patch. Objects are passed around as the plain dicts the
custom objects API returns; ``models`` turns them into typed records.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from enum import Enum
from typing import Any, Protocol

from kubernetes import client as k8s_client
from kubernetes import config as k8s_config
from kubernetes.client.rest import ApiException
from urllib3.exceptions import HTTPError

from ..core.config import GateConfig
from ..errors import ResourceNotFoundError, TransportError

logger = logging.getLogger(__name__)


class ResourceKind(str, Enum):
    """Custom resource kinds the gate reads."""

    WORKSPACE = "Workspace"
    WORKSPACE_BINDING = "WorkspaceBinding"


def replicas_patch(value: int) -> list[dict[str, Any]]:
    """JSON-Patch replacing the desired replica count."""
    return [{"op": "replace", "path": "/spec/replicas", "value": value}]


class ResourceClient(Protocol):
    """Synchronous access to workspace resources.

    Every call is independent: there is no batching and no transaction
    across calls.
    """

    def list(self, kind: ResourceKind, label_selector: str) -> list[dict]:
        """List objects of ``kind`` matching a label selector.

        Args:
            kind: Resource kind
            label_selector: ``key=value`` or ``!key``

        Returns:
            Objects in the order the API returned them

        Raises:
            TransportError: If the call failed
        """
        ...

    def get(self, kind: ResourceKind, namespace: str, name: str) -> dict:
        """Read one object.

        Raises:
            ResourceNotFoundError: If the object does not exist
            TransportError: If the call failed
        """
        ...

    def patch(self, kind: ResourceKind, namespace: str, name: str, ops: list[dict[str, Any]]) -> dict:
        """Apply a JSON-Patch and return the updated object.

        Raises:
            ResourceNotFoundError: If the object does not exist
            TransportError: If the call failed
        """
        ...


class KubernetesResourceClient:
    """ResourceClient backed by the Kubernetes custom objects API."""

    def __init__(self, api: k8s_client.CustomObjectsApi, config: GateConfig):
        """Initialize with an already configured API.

        Args:
            api: CustomObjectsApi bound to an ApiClient
            config: Group, version, plurals, namespace and timeout
        """
        self.api = api
        self.config = config
        self._plurals = {
            ResourceKind.WORKSPACE: config.workspace_plural,
            ResourceKind.WORKSPACE_BINDING: config.binding_plural,
        }

    @classmethod
    def from_config(cls, config: GateConfig) -> "KubernetesResourceClient":
        """Build a client from in-cluster credentials or a kubeconfig.

        In-cluster service account credentials are tried first, then the
        kubeconfig named in the config (or the default kubeconfig).

        Raises:
            TransportError: If no usable configuration could be loaded
        """
        try:
            configuration = k8s_client.Configuration()
            k8s_config.load_incluster_config(client_configuration=configuration)
            api_client = k8s_client.ApiClient(configuration)
            logger.info("Loaded in-cluster Kubernetes configuration")
        except k8s_config.ConfigException:
            try:
                api_client = k8s_config.new_client_from_config(config_file=config.kubeconfig)
            except (k8s_config.ConfigException, OSError) as e:
                raise TransportError(f"Could not load Kubernetes configuration: {e}") from e
            logger.info("Loaded local Kubernetes configuration")

        return cls(k8s_client.CustomObjectsApi(api_client), config)

    @contextmanager
    def _translate_errors(self, kind: ResourceKind, namespace: str = "", name: str = ""):
        try:
            yield
        except ApiException as e:
            if e.status == 404 and name:
                raise ResourceNotFoundError(kind.value, namespace, name) from e
            raise TransportError(
                f"{kind.value} request failed: {e.status} {e.reason}", status=e.status
            ) from e
        except HTTPError as e:
            raise TransportError(f"{kind.value} request failed: {e}") from e

    def list(self, kind: ResourceKind, label_selector: str) -> list[dict]:
        group, version, plural = self.config.api_group, self.config.api_version, self._plurals[kind]
        with self._translate_errors(kind):
            if self.config.namespace:
                result = self.api.list_namespaced_custom_object(
                    group,
                    version,
                    self.config.namespace,
                    plural,
                    label_selector=label_selector,
                    _request_timeout=self.config.request_timeout,
                )
            else:
                result = self.api.list_cluster_custom_object(
                    group,
                    version,
                    plural,
                    label_selector=label_selector,
                    _request_timeout=self.config.request_timeout,
                )
        return list(result.get("items") or [])

    def get(self, kind: ResourceKind, namespace: str, name: str) -> dict:
        with self._translate_errors(kind, namespace, name):
            return self.api.get_namespaced_custom_object(
                self.config.api_group,
                self.config.api_version,
                namespace,
                self._plurals[kind],
                name,
                _request_timeout=self.config.request_timeout,
            )

    def patch(self, kind: ResourceKind, namespace: str, name: str, ops: list[dict[str, Any]]) -> dict:
        # A list body makes the client send application/json-patch+json
        with self._translate_errors(kind, namespace, name):
            return self.api.patch_namespaced_custom_object(
                self.config.api_group,
                self.config.api_version,
                namespace,
                self._plurals[kind],
                name,
                ops,
                _request_timeout=self.config.request_timeout,
            )
