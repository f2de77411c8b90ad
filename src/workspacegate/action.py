"""Workspace selection required action.

Wires binding discovery, enforcement and the trigger state machine to the
host authentication flow. The host calls ``evaluate_triggers`` on every
authentication pass, ``required_action_challenge`` when the action is
pending, and ``process_action`` when the selection form is submitted.
"""

import json
import logging

from .core.config import GateConfig
from .errors import SelectionValidationError, TransportError
from .host import RequiredActionContext, SelectionForm
from .models import WORKSPACE_BINDING, WORKSPACE_ID, WORKSPACE_NAME
from .services.discovery import BindingDiscovery
from .services.enforcer import ActiveBindingEnforcer
from .services.resolver import WorkspaceResolver, available_workspaces
from .services.resource_client import KubernetesResourceClient, ResourceClient
from .services.selection import SelectionProcessor
from .services.trigger import TriggerEvaluator
from .services.trigger_state import TriggerDecision

logger = logging.getLogger(__name__)

PROVIDER_ID = "workspace"
DISPLAY_TEXT = "Select workspace"
FORM_TEMPLATE = "update-workspace.ftl"

# Shown instead of any API error text
SERVICE_UNAVAILABLE = "workspaceServiceUnavailable"


class WorkspaceRequiredAction:
    """Requires users to pick exactly one active workspace binding."""

    provider_id = PROVIDER_ID
    display_text = DISPLAY_TEXT

    def __init__(self, client: ResourceClient, config: GateConfig | None = None):
        """Build all components around one resource client.

        Args:
            client: ResourceClient shared by every component
            config: Settings, defaults when omitted
        """
        self.config = config or GateConfig()
        self.client = client
        self.discovery = BindingDiscovery(client, self.config.username_label)
        self.resolver = WorkspaceResolver(client)
        self.enforcer = ActiveBindingEnforcer(
            client,
            self.discovery,
            max_attempts=self.config.patch_max_attempts,
            initial_delay=self.config.patch_initial_delay,
        )
        self.evaluator = TriggerEvaluator(
            self.enforcer, PROVIDER_ID, self.config.interactive_client_name
        )
        self.processor = SelectionProcessor(
            self.enforcer,
            PROVIDER_ID,
            settle_timeout=self.config.settle_timeout,
            settle_interval=self.config.settle_interval,
        )

    @classmethod
    def from_config(cls, config: GateConfig | None = None) -> "WorkspaceRequiredAction":
        """Create the action with a Kubernetes backed client.

        Raises:
            ConfigError: Configuration is invalid
            TransportError: Kubernetes credentials could not be loaded
        """
        config = config or GateConfig.load()
        return cls(KubernetesResourceClient.from_config(config), config)

    def evaluate_triggers(self, context: RequiredActionContext) -> TriggerDecision:
        return self.evaluator.evaluate(context.user, context.client_name, context.parent_session_id)

    def required_action_challenge(self, context: RequiredActionContext) -> None:
        context.challenge(self.create_form(context))

    def process_action(self, context: RequiredActionContext) -> None:
        """Handle a submitted selection form."""
        user = context.user
        raw_selection = context.form_parameters.get(WORKSPACE_NAME)

        try:
            result = self.processor.submit(raw_selection, user, context.parent_session_id)
        except SelectionValidationError as e:
            context.challenge(self.create_form(context).add_error(e.field, e.message))
            return
        except TransportError as e:
            logger.error(f"Workspace selection for '{user.username}' failed: {e}")
            context.challenge(self._unavailable_form(context))
            return

        context.event_detail(WORKSPACE_ID, result.workspace_id)
        context.event_detail(WORKSPACE_NAME, result.workspace_name)
        context.event_detail(WORKSPACE_BINDING, result.binding_name)
        context.remove_session_required_action(PROVIDER_ID)
        context.success()

    def _unavailable_form(self, context: RequiredActionContext) -> SelectionForm:
        form = self.create_form(context)
        if not any(e.message == SERVICE_UNAVAILABLE for e in form.errors):
            form.add_error(WORKSPACE_NAME, SERVICE_UNAVAILABLE)
        return form

    def create_form(self, context: RequiredActionContext) -> SelectionForm:
        """Build the selection form listing the user's workspaces.

        The ``available_workspaces`` attribute is a JSON object mapping
        ``workspace:binding`` to the workspace display name.
        """
        user = context.user
        username = user.username
        form = SelectionForm(template=FORM_TEMPLATE)

        try:
            bindings = self.discovery.find_all_bindings_for_user(username)
            options = available_workspaces(self.resolver.resolve_workspaces(bindings))
        except TransportError as e:
            logger.error(f"Could not list workspaces for '{username}': {e}")
            options = {}
            form.add_error(WORKSPACE_NAME, SERVICE_UNAVAILABLE)

        form.attributes.update(
            {
                "username": username,
                "available_workspaces": json.dumps(options),
                WORKSPACE_NAME: user.get_first_attribute(WORKSPACE_NAME),
            }
        )
        return form
