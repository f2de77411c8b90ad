"""Error types for workspacegate."""


class WorkspaceGateError(Exception):
    """Base exception for workspacegate errors."""
    pass


class ConfigError(WorkspaceGateError):
    """Configuration error."""
    pass


class TransportError(WorkspaceGateError):
    """A call to the resource API failed.

    Carries the HTTP status when the API returned one.
    """

    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.status = status


class ResourceNotFoundError(WorkspaceGateError):
    """Referenced workspace or binding does not exist."""

    def __init__(self, kind: str, namespace: str, name: str):
        super().__init__(f"{kind} {namespace}/{name} not found")
        self.kind = kind
        self.namespace = namespace
        self.name = name


class EnforcementError(TransportError):
    """One or more binding patches failed after all retry attempts.

    Patches that succeeded before and after the failures stay committed.
    """

    def __init__(self, username: str, failed: list[str]):
        super().__init__(
            f"Failed to patch bindings {', '.join(failed)} for user '{username}'"
        )
        self.username = username
        self.failed = failed


class ConsistencyFault(WorkspaceGateError):
    """Stored binding is no longer among the user's discovered bindings."""

    def __init__(self, username: str, binding_name: str):
        super().__init__(
            f"Binding '{binding_name}' is not bound to user '{username}'"
        )
        self.username = username
        self.binding_name = binding_name


class SelectionValidationError(WorkspaceGateError):
    """Submitted workspace selection is malformed.

    ``message`` is a message key for the selection form, never raw error text.
    """

    def __init__(self, field: str, message: str):
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message
