"""Tests for WorkspaceResolver."""

import pytest

from workspacegate.errors import TransportError
from workspacegate.models import WorkspaceBinding
from workspacegate.services.resolver import WorkspaceResolver, available_workspaces


class TestWorkspaceResolver:
    """Test pairing bindings with workspaces."""

    def test_pairs_each_binding(self, populated_store, discovery):
        bound = WorkspaceResolver(populated_store).resolve_workspaces(
            discovery.find_all_bindings_for_user("alice")
        )

        assert [(b.workspace.name, b.binding.name) for b in bound] == [
            ("ws-alpha", "alpha-alice"),
            ("ws-beta", "beta-alice"),
        ]
        assert bound[0].workspace.display_name == "Alpha Workspace"

    def test_first_binding_wins_per_workspace(self, store):
        """Test later bindings to the same workspace are dropped."""
        store.add_workspace("ws-alpha")
        bindings = [
            WorkspaceBinding("first", "default", "ws-alpha"),
            WorkspaceBinding("second", "default", "ws-alpha"),
        ]

        bound = WorkspaceResolver(store).resolve_workspaces(bindings)

        assert len(bound) == 1
        assert bound[0].binding.name == "first"

    def test_never_returns_duplicate_workspaces(self, store):
        for name in ("ws-a", "ws-b"):
            store.add_workspace(name)
        bindings = [WorkspaceBinding(f"b{i}", "default", f"ws-{'ab'[i % 2]}") for i in range(6)]

        bound = WorkspaceResolver(store).resolve_workspaces(bindings)

        names = [b.workspace.name for b in bound]
        assert len(names) == len(set(names)) == 2

    def test_missing_workspace_dropped(self, store):
        store.add_workspace("ws-alpha")
        bindings = [
            WorkspaceBinding("gone", "default", "ws-deleted"),
            WorkspaceBinding("kept", "default", "ws-alpha"),
        ]

        bound = WorkspaceResolver(store).resolve_workspaces(bindings)

        assert [b.binding.name for b in bound] == ["kept"]

    def test_workspace_read_from_binding_namespace(self, store):
        """Test a missing workspace does not claim the name for later bindings."""
        store.add_workspace("shared", namespace="team-b", display_name="Team B")
        bindings = [
            WorkspaceBinding("in-a", "team-a", "shared"),
            WorkspaceBinding("in-b", "team-b", "shared"),
        ]

        bound = WorkspaceResolver(store).resolve_workspaces(bindings)

        assert [b.binding.name for b in bound] == ["in-b"]
        assert bound[0].workspace.namespace == "team-b"

    def test_transport_error_propagates(self):
        class FailingClient:
            def get(self, kind, namespace, name):
                raise TransportError("boom", status=500)

        with pytest.raises(TransportError):
            WorkspaceResolver(FailingClient()).resolve_workspaces(
                [WorkspaceBinding("b", "default", "ws")]
            )

    def test_available_workspaces(self, populated_store, discovery):
        bound = WorkspaceResolver(populated_store).resolve_workspaces(
            discovery.find_all_bindings_for_user("alice")
        )

        assert available_workspaces(bound) == {
            "ws-alpha:alpha-alice": "Alpha Workspace",
            "ws-beta:beta-alice": "Beta Workspace",
        }
