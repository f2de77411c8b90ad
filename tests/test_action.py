"""End-to-end tests for the workspace required action."""

import json

import pytest

from workspacegate.action import (
    DISPLAY_TEXT,
    FORM_TEMPLATE,
    PROVIDER_ID,
    SERVICE_UNAVAILABLE,
    WorkspaceRequiredAction,
)
from workspacegate.models import WORKSPACE_BINDING, WORKSPACE_ID, WORKSPACE_NAME
from workspacegate.services.trigger_state import TriggerState


@pytest.fixture
def action(populated_store, gate_config):
    return WorkspaceRequiredAction(populated_store, gate_config)


def _active(store, names):
    return [name for name in names if store.replicas("default", name) == 1]


class TestWorkspaceRequiredAction:
    """Test the full select-and-login flow."""

    def test_identity(self, action):
        assert action.provider_id == PROVIDER_ID == "workspace"
        assert action.display_text == DISPLAY_TEXT

    def test_first_login_selects_workspace(self, action, populated_store, alice, make_context):
        """Test a user without attributes is challenged, selects, and succeeds."""
        context = make_context(alice, parent_session_id="session-1")

        decision = action.evaluate_triggers(context)
        assert decision.state == TriggerState.UNASSIGNED
        assert PROVIDER_ID in alice.required_actions

        action.required_action_challenge(context)
        form = context.challenges[-1]
        assert form.template == FORM_TEMPLATE
        assert form.errors == []
        assert form.attributes["username"] == "alice"
        assert form.attributes[WORKSPACE_NAME] is None
        assert json.loads(form.attributes["available_workspaces"]) == {
            "ws-alpha:alpha-alice": "Alpha Workspace",
            "ws-beta:beta-alice": "Beta Workspace",
        }

        submit = make_context(alice, parent_session_id="session-1", form={WORKSPACE_NAME: "ws-alpha:alpha-alice"})
        action.process_action(submit)

        assert submit.succeeded
        assert submit.challenges == []
        assert PROVIDER_ID not in submit.session_required_actions
        assert PROVIDER_ID not in alice.required_actions
        assert submit.events == {
            WORKSPACE_ID: "ws-alpha\\alice",
            WORKSPACE_NAME: "ws-alpha",
            WORKSPACE_BINDING: "alpha-alice",
        }
        assert alice.attributes[WORKSPACE_BINDING] == "alpha-alice"
        assert _active(populated_store, ["alpha-alice", "beta-alice"]) == ["alpha-alice"]

    def test_next_login_passes_through(self, action, populated_store, alice, make_context):
        action.process_action(make_context(alice, form={WORKSPACE_NAME: "ws-beta:beta-alice"}))

        decision = action.evaluate_triggers(make_context(alice, client_name="guacamole"))

        assert decision.state == TriggerState.CONSISTENT
        assert alice.required_actions == set()
        assert _active(populated_store, ["alpha-alice", "beta-alice"]) == ["beta-alice"]

    def test_new_interactive_session_reselects(self, action, alice, make_context):
        action.process_action(make_context(alice, form={WORKSPACE_NAME: "ws-beta:beta-alice"}))

        decision = action.evaluate_triggers(
            make_context(alice, client_name="guacamole", parent_session_id="session-2")
        )

        assert decision.state == TriggerState.SESSION_STALE
        assert PROVIDER_ID in alice.required_actions

    def test_invalid_selection_rechallenges(self, action, populated_store, alice, make_context):
        context = make_context(alice, form={WORKSPACE_NAME: "ab:alpha-alice"})

        action.process_action(context)

        assert not context.succeeded
        assert len(context.challenges) == 1
        errors = context.challenges[0].errors
        assert [(e.field, e.message) for e in errors] == [(WORKSPACE_NAME, "workspaceNameInvalid")]
        assert populated_store.patch_log == []

    def test_missing_form_field_rechallenges(self, action, alice, make_context):
        context = make_context(alice, form={})

        action.process_action(context)

        assert not context.succeeded
        assert context.challenges[0].errors[0].message == "workspaceNameInvalid"

    def test_listing_failure_hides_error(self, action, populated_store, alice, make_context):
        """Test the form shows a generic message instead of the API error."""
        populated_store.fail_lists(1)
        context = make_context(alice)

        action.required_action_challenge(context)

        form = context.challenges[0]
        assert json.loads(form.attributes["available_workspaces"]) == {}
        assert [e.message for e in form.errors] == [SERVICE_UNAVAILABLE]
        assert "503" not in repr(form)

    def test_enforcement_failure_rechallenges(self, action, populated_store, alice, make_context):
        populated_store.fail_lists(1)
        context = make_context(alice, form={WORKSPACE_NAME: "ws-alpha:alpha-alice"})

        action.process_action(context)

        assert not context.succeeded
        assert PROVIDER_ID in context.session_required_actions
        assert PROVIDER_ID in alice.required_actions
        assert [e.message for e in context.challenges[0].errors] == [SERVICE_UNAVAILABLE]

    def test_from_config_uses_kubernetes_client(self, monkeypatch, gate_config, populated_store):
        from workspacegate import action as action_module

        monkeypatch.setattr(
            action_module.KubernetesResourceClient, "from_config", classmethod(lambda cls, config: populated_store)
        )

        built = WorkspaceRequiredAction.from_config(gate_config)

        assert built.client is populated_store
        assert built.config is gate_config
