"""Test configuration and shared fixtures for workspacegate tests."""

import pytest

from workspacegate.action import PROVIDER_ID
from workspacegate.core.config import GateConfig
from workspacegate.services.discovery import BindingDiscovery
from workspacegate.services.enforcer import ActiveBindingEnforcer
from workspacegate.services.memory import InMemoryResourceStore


class FakeUser:
    """UserModel keeping attributes and required actions in memory."""

    def __init__(self, username: str, attributes: dict | None = None):
        self._username = username
        self.attributes = dict(attributes or {})
        self.required_actions: set[str] = set()

    @property
    def username(self) -> str:
        return self._username

    def get_first_attribute(self, name):
        return self.attributes.get(name)

    def set_single_attribute(self, name, value):
        self.attributes[name] = value

    def add_required_action(self, action):
        self.required_actions.add(action)

    def remove_required_action(self, action):
        self.required_actions.discard(action)


class FakeContext:
    """RequiredActionContext recording everything the action does."""

    def __init__(self, user, client_name="account-console", parent_session_id="session-1", form=None):
        self._user = user
        self._client_name = client_name
        self._parent_session_id = parent_session_id
        self._form = dict(form or {})
        self.session_required_actions = {PROVIDER_ID}
        self.events: dict[str, str] = {}
        self.challenges = []
        self.succeeded = False

    @property
    def user(self):
        return self._user

    @property
    def client_name(self):
        return self._client_name

    @property
    def parent_session_id(self):
        return self._parent_session_id

    @property
    def form_parameters(self):
        return self._form

    def event_detail(self, key, value):
        self.events[key] = value

    def remove_session_required_action(self, action):
        self.session_required_actions.discard(action)

    def challenge(self, form):
        self.challenges.append(form)

    def success(self):
        self.succeeded = True


@pytest.fixture
def store():
    """Provide a clean in-memory resource store for each test."""
    return InMemoryResourceStore()


@pytest.fixture
def populated_store(store):
    """Store with bindings for alice and a few other users.

    alice has one labeled binding (alpha-alice) and one unlabeled binding
    (beta-alice, currently active).
    """
    store.add_workspace("ws-alpha", display_name="Alpha Workspace")
    store.add_workspace("ws-beta", display_name="Beta Workspace")
    store.add_binding("alpha-alice", "ws-alpha", label="alice", replicas=0, status_replicas=0)
    store.add_binding("beta-alice", "ws-beta", username="alice", replicas=1, status_replicas=1)
    store.add_binding("alpha-bob", "ws-alpha", label="bob", replicas=1, status_replicas=1)
    store.add_binding("beta-carol", "ws-beta", username="carol", replicas=1, status_replicas=1)
    return store


@pytest.fixture
def gate_config():
    """Configuration without retry or settle delays."""
    return GateConfig(patch_initial_delay=0, settle_timeout=0, settle_interval=0.01)


@pytest.fixture
def discovery(populated_store, gate_config):
    return BindingDiscovery(populated_store, gate_config.username_label)


@pytest.fixture
def enforcer(populated_store, discovery):
    return ActiveBindingEnforcer(populated_store, discovery, max_attempts=3, initial_delay=0)


@pytest.fixture
def alice():
    return FakeUser("alice")


@pytest.fixture
def make_user():
    """Factory for users with preset attributes."""
    return FakeUser


@pytest.fixture
def make_context():
    """Factory for required action contexts."""
    return FakeContext
