"""Trigger states for the workspace required action.

The state is recomputed from the user's attributes on every authentication
pass; nothing besides the attributes is persisted.
"""

from dataclasses import dataclass
from enum import Enum

from ..models import UserWorkspaceState


class TriggerState(str, Enum):
    """Where the user stands with respect to workspace selection."""

    UNASSIGNED = "unassigned"  # At least one attribute missing
    SESSION_STALE = "session_stale"  # Interactive client, different session
    CONSISTENT = "consistent"


class TriggerOutcome(str, Enum):
    """What the current pass does."""

    CHALLENGE_REQUIRED = "challenge_required"
    REASSERT_ACTIVE = "reassert_active"


TRANSITIONS: dict[TriggerState, TriggerOutcome] = {
    TriggerState.UNASSIGNED: TriggerOutcome.CHALLENGE_REQUIRED,
    TriggerState.SESSION_STALE: TriggerOutcome.CHALLENGE_REQUIRED,
    TriggerState.CONSISTENT: TriggerOutcome.REASSERT_ACTIVE,
}


def classify(
    state: UserWorkspaceState,
    client_name: str,
    parent_session_id: str,
    interactive_client_name: str,
) -> TriggerState:
    """Compute the trigger state for one pass.

    Args:
        state: Attribute snapshot
        client_name: Client the user is logging in to
        parent_session_id: Current top-level authentication session id
        interactive_client_name: Client that must log in from the session the
            workspace was chosen in

    Returns:
        TriggerState
    """
    if not state.is_complete:
        return TriggerState.UNASSIGNED
    if client_name == interactive_client_name and state.assigned_session != parent_session_id:
        return TriggerState.SESSION_STALE
    return TriggerState.CONSISTENT


@dataclass
class TriggerDecision:
    """Result of evaluating the triggers for one pass."""

    state: TriggerState
    outcome: TriggerOutcome
    aborted: bool = False  # Reassertion failed on a transport error

    @classmethod
    def for_state(cls, state: TriggerState) -> "TriggerDecision":
        return cls(state=state, outcome=TRANSITIONS[state])

    @property
    def challenge_required(self) -> bool:
        return self.outcome == TriggerOutcome.CHALLENGE_REQUIRED
