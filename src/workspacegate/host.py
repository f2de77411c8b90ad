"""Interfaces of the host authentication flow.

The host engine owns users, authentication sessions and form rendering.
The gate only needs the handful of calls described here.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol


class UserModel(Protocol):
    """A user record with single-valued string attributes."""

    @property
    def username(self) -> str:
        ...

    def get_first_attribute(self, name: str) -> str | None:
        ...

    def set_single_attribute(self, name: str, value: str) -> None:
        ...

    def add_required_action(self, action: str) -> None:
        ...

    def remove_required_action(self, action: str) -> None:
        ...


@dataclass
class FormError:
    """A message key attached to one form field."""

    field: str
    message: str


@dataclass
class SelectionForm:
    """Everything the host needs to render the workspace selection page."""

    template: str
    attributes: dict[str, Any] = field(default_factory=dict)
    errors: list[FormError] = field(default_factory=list)

    def add_error(self, field_name: str, message: str) -> "SelectionForm":
        self.errors.append(FormError(field_name, message))
        return self


class RequiredActionContext(Protocol):
    """One invocation of a required action by the host flow."""

    @property
    def user(self) -> UserModel:
        ...

    @property
    def client_name(self) -> str:
        """Name of the client the user is logging in to."""
        ...

    @property
    def parent_session_id(self) -> str:
        """Id of the top-level authentication session."""
        ...

    @property
    def form_parameters(self) -> Mapping[str, str]:
        """Decoded form fields of the current request."""
        ...

    def event_detail(self, key: str, value: str) -> None:
        ...

    def remove_session_required_action(self, action: str) -> None:
        """Clear the action on the in-flight authentication session."""
        ...

    def challenge(self, form: SelectionForm) -> None:
        ...

    def success(self) -> None:
        ...
