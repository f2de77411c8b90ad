"""Pairs discovered bindings with the workspaces they reference."""

import logging

from ..errors import ResourceNotFoundError
from ..models import BoundWorkspace, Workspace, WorkspaceBinding
from .resource_client import ResourceClient, ResourceKind

logger = logging.getLogger(__name__)


class WorkspaceResolver:
    """Maps bindings to one selectable entry per distinct workspace."""

    def __init__(self, client: ResourceClient):
        self.client = client

    def resolve_workspaces(self, bindings: list[WorkspaceBinding]) -> list[BoundWorkspace]:
        """Fetch the workspace behind each binding.

        The first binding (in the given order) that references a workspace
        is the one paired with it; later bindings to the same workspace are
        dropped. A workspace that no longer exists drops its binding without
        claiming the workspace name.

        Args:
            bindings: Bindings in discovery order

        Returns:
            BoundWorkspace entries with distinct workspace names

        Raises:
            TransportError: If fetching a workspace failed
        """
        bound: dict[str, BoundWorkspace] = {}
        for binding in bindings:
            workspace_name = binding.workspace
            if workspace_name in bound:
                continue

            try:
                data = self.client.get(ResourceKind.WORKSPACE, binding.namespace, workspace_name)
            except ResourceNotFoundError:
                logger.warning(
                    f"Workspace '{workspace_name}' referenced by binding "
                    f"{binding.namespace}/{binding.name} not found, skipping"
                )
                continue

            logger.info(f"Found workspace '{workspace_name}' for binding '{binding.name}'")
            bound[workspace_name] = BoundWorkspace(Workspace.from_dict(data), binding)

        return list(bound.values())


def available_workspaces(bound: list[BoundWorkspace]) -> dict[str, str]:
    """Selection form options: ``workspace:binding`` -> display name."""
    return {entry.selection_key: entry.display_name for entry in bound}
