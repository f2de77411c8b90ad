"""Tests for the trigger state machine."""

import pytest

from workspacegate.models import STATE_ATTRIBUTES, UserWorkspaceState
from workspacegate.services.trigger import TriggerEvaluator
from workspacegate.services.trigger_state import (
    TRANSITIONS,
    TriggerOutcome,
    TriggerState,
    classify,
)

GUACAMOLE = "guacamole"


def _assigned(binding="alpha-alice", session="session-1"):
    return UserWorkspaceState.assign("ws-alpha", binding, "alice", session)


@pytest.fixture
def evaluator(enforcer):
    return TriggerEvaluator(enforcer, "workspace", GUACAMOLE)


class TestClassify:
    """Test state classification."""

    @pytest.mark.parametrize("missing", STATE_ATTRIBUTES)
    def test_any_missing_attribute_is_unassigned(self, missing):
        attributes = _assigned().to_attributes()
        attributes.pop(missing)
        state = UserWorkspaceState.from_attributes(attributes.get)

        assert classify(state, GUACAMOLE, "session-1", GUACAMOLE) == TriggerState.UNASSIGNED

    def test_matching_session_is_consistent(self):
        assert classify(_assigned(), GUACAMOLE, "session-1", GUACAMOLE) == TriggerState.CONSISTENT

    def test_interactive_client_with_new_session_is_stale(self):
        """Test a resumed interactive login in another session must reselect."""
        assert classify(_assigned(), GUACAMOLE, "session-2", GUACAMOLE) == TriggerState.SESSION_STALE

    def test_other_client_ignores_session(self):
        assert classify(_assigned(), "account-console", "session-2", GUACAMOLE) == TriggerState.CONSISTENT

    def test_transitions(self):
        assert TRANSITIONS[TriggerState.UNASSIGNED] == TriggerOutcome.CHALLENGE_REQUIRED
        assert TRANSITIONS[TriggerState.SESSION_STALE] == TriggerOutcome.CHALLENGE_REQUIRED
        assert TRANSITIONS[TriggerState.CONSISTENT] == TriggerOutcome.REASSERT_ACTIVE


class TestTriggerEvaluator:
    """Test the side effects of each pass."""

    def test_unassigned_requires_action(self, evaluator, populated_store, alice):
        decision = evaluator.evaluate(alice, "account-console", "session-1")

        assert decision.state == TriggerState.UNASSIGNED
        assert decision.challenge_required
        assert "workspace" in alice.required_actions
        assert populated_store.patch_log == []

    def test_stale_session_requires_action(self, evaluator, populated_store, make_user):
        user = make_user("alice", _assigned().to_attributes())

        decision = evaluator.evaluate(user, GUACAMOLE, "session-2")

        assert decision.state == TriggerState.SESSION_STALE
        assert "workspace" in user.required_actions
        assert populated_store.patch_log == []

    def test_consistent_reasserts_binding(self, evaluator, populated_store, make_user):
        """Test a consistent user passes through with the binding re-asserted."""
        user = make_user("alice", _assigned().to_attributes())

        decision = evaluator.evaluate(user, GUACAMOLE, "session-1")

        assert decision.state == TriggerState.CONSISTENT
        assert decision.outcome == TriggerOutcome.REASSERT_ACTIVE
        assert not decision.challenge_required
        assert user.required_actions == set()
        assert populated_store.replicas("default", "alpha-alice") == 1
        assert populated_store.replicas("default", "beta-alice") == 0

    def test_deleted_binding_forces_unassigned(self, evaluator, populated_store, make_user):
        """Test a stored binding missing from discovery is not re-asserted."""
        user = make_user("alice", _assigned(binding="deleted-binding").to_attributes())

        decision = evaluator.evaluate(user, "account-console", "session-1")

        assert decision.state == TriggerState.UNASSIGNED
        assert decision.challenge_required
        assert "workspace" in user.required_actions
        assert populated_store.patch_log == []
        assert populated_store.replicas("default", "beta-alice") == 1

    def test_transport_error_aborts_pass(self, evaluator, populated_store, make_user):
        """Test a failed reassertion leaves the action pending."""
        user = make_user("alice", _assigned().to_attributes())
        populated_store.fail_lists(1)

        decision = evaluator.evaluate(user, "account-console", "session-1")

        assert decision.aborted
        assert decision.challenge_required
        assert "workspace" in user.required_actions
