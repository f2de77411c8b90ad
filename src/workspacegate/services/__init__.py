"""Binding discovery, enforcement and the required action state machine."""

from .discovery import BindingDiscovery
from .enforcer import ActiveBindingEnforcer, EnforcementResult
from .memory import InMemoryResourceStore
from .resolver import WorkspaceResolver, available_workspaces
from .resource_client import KubernetesResourceClient, ResourceClient, ResourceKind
from .selection import SelectionProcessor, SelectionResult, parse_selection
from .trigger import TriggerEvaluator
from .trigger_state import TriggerDecision, TriggerOutcome, TriggerState

__all__ = [
    "ActiveBindingEnforcer",
    "BindingDiscovery",
    "EnforcementResult",
    "InMemoryResourceStore",
    "KubernetesResourceClient",
    "ResourceClient",
    "ResourceKind",
    "SelectionProcessor",
    "SelectionResult",
    "TriggerDecision",
    "TriggerEvaluator",
    "TriggerOutcome",
    "TriggerState",
    "WorkspaceResolver",
    "available_workspaces",
    "parse_selection",
]
