"""Data structures for workspaces, bindings and per-user workspace state.

Workspaces and bindings are owned by the cluster. They are parsed from the
plain dicts returned by the custom objects API and are never written back
except through a replicas patch.
"""

from dataclasses import dataclass, field
from typing import Any, Callable

# Persisted user attribute keys
WORKSPACE_BINDING = "workspace_binding"
WORKSPACE_NAME = "workspace_name"
WORKSPACE_ID = "workspace_id"
WORKSPACE_ID_FORMATTED = "workspace_id_formatted"
WORKSPACE_ASSIGNED_SESSION = "workspace_assigned_session"

STATE_ATTRIBUTES = (
    WORKSPACE_ASSIGNED_SESSION,
    WORKSPACE_NAME,
    WORKSPACE_ID,
    WORKSPACE_ID_FORMATTED,
    WORKSPACE_BINDING,
)


@dataclass(frozen=True)
class Workspace:
    """An analytics workspace a user can be bound to."""

    name: str
    namespace: str
    display_name: str | None = None
    spec: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict) -> "Workspace":
        """Create from a custom object dict."""
        metadata = data.get("metadata") or {}
        spec = data.get("spec") or {}
        return cls(
            name=metadata["name"],
            namespace=metadata.get("namespace", ""),
            display_name=spec.get("displayName"),
            spec=dict(spec),
        )


@dataclass(frozen=True)
class WorkspaceBinding:
    """Links one user to one workspace with a desired replica count."""

    name: str
    namespace: str
    workspace: str
    username: str | None = None  # spec.username
    username_label: str | None = None  # metadata.labels[<username label>]
    replicas: int = 0  # spec.replicas
    status_replicas: int | None = None  # status.replicas

    @property
    def identity(self) -> tuple[str, str]:
        return (self.namespace, self.name)

    @property
    def is_ready(self) -> bool:
        """True once the observed replica count matches the desired one."""
        return (self.status_replicas or 0) == self.replicas

    @classmethod
    def from_dict(cls, data: dict, label_key: str) -> "WorkspaceBinding":
        """Create from a custom object dict.

        Args:
            data: Object as returned by the custom objects API
            label_key: Label carrying the sanitized username
        """
        metadata = data.get("metadata") or {}
        spec = data.get("spec") or {}
        status = data.get("status") or {}
        labels = metadata.get("labels") or {}
        return cls(
            name=metadata["name"],
            namespace=metadata.get("namespace", ""),
            workspace=spec.get("workspace", ""),
            username=spec.get("username"),
            username_label=labels.get(label_key),
            replicas=int(spec.get("replicas") or 0),
            status_replicas=status.get("replicas"),
        )


@dataclass(frozen=True)
class BoundWorkspace:
    """A workspace paired with the binding that grants access to it."""

    workspace: Workspace
    binding: WorkspaceBinding

    @property
    def selection_key(self) -> str:
        """Value submitted by the selection form: ``workspace:binding``."""
        return f"{self.workspace.name}:{self.binding.name}"

    @property
    def display_name(self) -> str:
        return self.workspace.display_name or self.workspace.name


def workspace_id(workspace_name: str, username: str) -> str:
    """Domain-style identity, e.g. ``myworkspace\\alice``."""
    return f"{workspace_name}\\{username}"


def workspace_id_formatted(workspace_name: str, username: str) -> str:
    """Display identity, e.g. ``myworkspace@alice``."""
    return f"{workspace_name}@{username}"


@dataclass
class UserWorkspaceState:
    """Workspace assignment stored in the user's attributes."""

    binding: str | None = None
    workspace_name: str | None = None
    workspace_id: str | None = None
    workspace_id_formatted: str | None = None
    assigned_session: str | None = None

    @classmethod
    def from_attributes(cls, get_attribute: Callable[[str], str | None]) -> "UserWorkspaceState":
        """Read a snapshot using an attribute getter such as
        ``UserModel.get_first_attribute``."""
        return cls(
            binding=get_attribute(WORKSPACE_BINDING),
            workspace_name=get_attribute(WORKSPACE_NAME),
            workspace_id=get_attribute(WORKSPACE_ID),
            workspace_id_formatted=get_attribute(WORKSPACE_ID_FORMATTED),
            assigned_session=get_attribute(WORKSPACE_ASSIGNED_SESSION),
        )

    @classmethod
    def assign(cls, workspace_name: str, binding: str, username: str, session_id: str) -> "UserWorkspaceState":
        """Build the state recorded when a user selects a workspace."""
        return cls(
            binding=binding,
            workspace_name=workspace_name,
            workspace_id=workspace_id(workspace_name, username),
            workspace_id_formatted=workspace_id_formatted(workspace_name, username),
            assigned_session=session_id,
        )

    def to_attributes(self) -> dict[str, str | None]:
        return {
            WORKSPACE_BINDING: self.binding,
            WORKSPACE_NAME: self.workspace_name,
            WORKSPACE_ID: self.workspace_id,
            WORKSPACE_ID_FORMATTED: self.workspace_id_formatted,
            WORKSPACE_ASSIGNED_SESSION: self.assigned_session,
        }

    @property
    def is_complete(self) -> bool:
        """All five attributes are present."""
        return all(value is not None for value in self.to_attributes().values())
