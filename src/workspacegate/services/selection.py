"""Processing of a submitted workspace selection."""

import logging
from contextlib import contextmanager
from dataclasses import dataclass

from ..errors import ConsistencyFault, SelectionValidationError, TransportError
from ..host import UserModel
from ..models import WORKSPACE_NAME, UserWorkspaceState
from .enforcer import ActiveBindingEnforcer

logger = logging.getLogger(__name__)

MIN_WORKSPACE_NAME_LENGTH = 5

WORKSPACE_NAME_INVALID = "workspaceNameInvalid"
WORKSPACE_BINDING_UNKNOWN = "workspaceBindingUnknown"


@dataclass(frozen=True)
class Selection:
    workspace_name: str
    binding_name: str


@dataclass
class SelectionResult:
    """A selection that has been stored and enforced."""

    workspace_name: str
    binding_name: str
    workspace_id: str
    workspace_id_formatted: str
    ready: bool  # Binding reported ready before the settle timeout


def parse_selection(raw_selection: str | None) -> Selection:
    """Split ``workspace:binding`` on the first colon and validate it.

    Raises:
        SelectionValidationError: Workspace name blank or shorter than five
            characters, or no binding name given
    """
    workspace_name, sep, binding_name = (raw_selection or "").partition(":")
    if not workspace_name.strip() or len(workspace_name) < MIN_WORKSPACE_NAME_LENGTH:
        raise SelectionValidationError(WORKSPACE_NAME, WORKSPACE_NAME_INVALID)
    if not sep or not binding_name.strip():
        raise SelectionValidationError(WORKSPACE_NAME, WORKSPACE_NAME_INVALID)
    return Selection(workspace_name, binding_name)


class SelectionProcessor:
    """Stores a user's workspace choice and activates its binding."""

    def __init__(
        self,
        enforcer: ActiveBindingEnforcer,
        provider_id: str,
        settle_timeout: float = 3.0,
        settle_interval: float = 0.5,
    ):
        self.enforcer = enforcer
        self.provider_id = provider_id
        self.settle_timeout = settle_timeout
        self.settle_interval = settle_interval

    @contextmanager
    def _keep_pending(self, user: UserModel):
        """Leave the required action on the user if the block fails."""
        try:
            yield
        except ConsistencyFault as e:
            logger.warning(str(e))
            user.add_required_action(self.provider_id)
            raise SelectionValidationError(WORKSPACE_NAME, WORKSPACE_BINDING_UNKNOWN) from e
        except TransportError:
            user.add_required_action(self.provider_id)
            raise

    def submit(self, raw_selection: str | None, user: UserModel, auth_session_id: str) -> SelectionResult:
        """Validate, persist and enforce a selection.

        The binding must belong to the user and point at the submitted
        workspace; otherwise nothing is written and the user's previous
        assignment stays intact. On success the five workspace attributes
        are written, the required action is removed from the user and the
        chosen binding is made the only active one. The call then waits, up
        to the settle timeout, for the binding to report ready.

        Args:
            raw_selection: Submitted ``workspace:binding`` value
            user: User making the selection
            auth_session_id: Current top-level authentication session id

        Returns:
            SelectionResult

        Raises:
            SelectionValidationError: Malformed selection, a binding that
                does not belong to the user, or a binding for another
                workspace
            TransportError: Discovery or enforcement failed; the required
                action is left pending on the user
        """
        selection = parse_selection(raw_selection)
        username = user.username

        with self._keep_pending(user):
            target = self.enforcer.find_target(selection.binding_name, username)
        if target.workspace != selection.workspace_name:
            logger.warning(
                f"User '{username}' submitted workspace '{selection.workspace_name}' but binding "
                f"'{target.name}' belongs to workspace '{target.workspace}'"
            )
            user.add_required_action(self.provider_id)
            raise SelectionValidationError(WORKSPACE_NAME, WORKSPACE_BINDING_UNKNOWN)

        state = UserWorkspaceState.assign(
            selection.workspace_name, selection.binding_name, username, auth_session_id
        )
        for name, value in state.to_attributes().items():
            user.set_single_attribute(name, value)
        user.remove_required_action(self.provider_id)
        logger.info(
            f"User '{username}' selected workspace '{selection.workspace_name}' "
            f"with binding '{selection.binding_name}'"
        )

        with self._keep_pending(user):
            result = self.enforcer.set_active(selection.binding_name, username)

        ready = self.enforcer.wait_until_ready(result.active, self.settle_timeout, self.settle_interval)

        return SelectionResult(
            workspace_name=selection.workspace_name,
            binding_name=selection.binding_name,
            workspace_id=state.workspace_id,
            workspace_id_formatted=state.workspace_id_formatted,
            ready=ready,
        )
