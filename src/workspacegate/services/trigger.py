"""Per-pass evaluation of the workspace required action triggers."""

import logging

from ..errors import ConsistencyFault, TransportError
from ..host import UserModel
from ..models import UserWorkspaceState
from .enforcer import ActiveBindingEnforcer
from .trigger_state import TriggerDecision, TriggerOutcome, TriggerState, classify

logger = logging.getLogger(__name__)


class TriggerEvaluator:
    """Decides whether the user must (re)select a workspace.

    A consistent user is passed through after the stored binding has been
    re-asserted as the only active one.
    """

    def __init__(self, enforcer: ActiveBindingEnforcer, provider_id: str, interactive_client_name: str):
        self.enforcer = enforcer
        self.provider_id = provider_id
        self.interactive_client_name = interactive_client_name

    def evaluate(self, user: UserModel, client_name: str, parent_session_id: str) -> TriggerDecision:
        """Run one pass of the state machine.

        Side effects: adds the required action to the user when a challenge
        is needed, otherwise patches the user's bindings.

        Args:
            user: User being authenticated
            client_name: Client the user is logging in to
            parent_session_id: Current top-level authentication session id

        Returns:
            TriggerDecision
        """
        state = UserWorkspaceState.from_attributes(user.get_first_attribute)
        trigger_state = classify(state, client_name, parent_session_id, self.interactive_client_name)
        decision = TriggerDecision.for_state(trigger_state)

        if decision.outcome == TriggerOutcome.REASSERT_ACTIVE:
            decision = self._reassert(user, state)

        if decision.challenge_required:
            logger.info(f"Workspace selection required for '{user.username}' ({decision.state.value})")
            user.add_required_action(self.provider_id)

        return decision

    def _reassert(self, user: UserModel, state: UserWorkspaceState) -> TriggerDecision:
        try:
            self.enforcer.set_active(state.binding, user.username)
        except ConsistencyFault as e:
            logger.warning(f"{e}; treating user as unassigned")
            return TriggerDecision.for_state(TriggerState.UNASSIGNED)
        except TransportError as e:
            logger.error(f"Could not re-assert workspace binding for '{user.username}': {e}")
            return TriggerDecision(
                state=TriggerState.CONSISTENT,
                outcome=TriggerOutcome.CHALLENGE_REQUIRED,
                aborted=True,
            )
        return TriggerDecision.for_state(TriggerState.CONSISTENT)
