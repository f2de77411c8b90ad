"""Keeps exactly one binding active per user.

Enforcement is a reconciliation pass: every discovered binding is patched to
its desired replica count (1 for the target, 0 for the rest). Patches are
independent API calls, so a failure part way through leaves the earlier
patches in place. Running the pass again converges.
"""

import logging
import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass, field

from ..errors import ConsistencyFault, EnforcementError, ResourceNotFoundError, TransportError
from ..models import WorkspaceBinding
from .discovery import BindingDiscovery
from .resource_client import ResourceClient, ResourceKind, replicas_patch
from .retry import patch_with_retry

logger = logging.getLogger(__name__)


@dataclass
class EnforcementResult:
    """Outcome of a successful enforcement pass."""

    username: str
    active: WorkspaceBinding
    patched: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)  # Deleted during the pass


@dataclass
class _UserLock:
    lock: threading.Lock = field(default_factory=threading.Lock)
    holders: int = 0  # Passes holding or waiting on the lock


class ActiveBindingEnforcer:
    """Drives a user's bindings so that only the target has replicas 1.

    Passes for the same username are serialized within this process.
    Passes running in other processes are not coordinated and the last
    patch to land wins.
    """

    def __init__(
        self,
        client: ResourceClient,
        discovery: BindingDiscovery,
        max_attempts: int = 3,
        initial_delay: float = 0.2,
    ):
        """
        Args:
            client: ResourceClient implementation
            discovery: Used to rediscover bindings on every pass
            max_attempts: Attempts per binding patch
            initial_delay: First retry delay in seconds
        """
        self.client = client
        self.discovery = discovery
        self.max_attempts = max_attempts
        self.initial_delay = initial_delay
        self._locks: dict[str, _UserLock] = {}
        self._locks_guard = threading.Lock()

    @contextmanager
    def _user_lock(self, username: str):
        """Serialize passes for one username.

        An entry is dropped once no pass holds or waits on it, so the table
        only holds users with a pass in flight.
        """
        with self._locks_guard:
            entry = self._locks.get(username)
            if entry is None:
                entry = self._locks[username] = _UserLock()
            entry.holders += 1
        try:
            with entry.lock:
                yield
        finally:
            with self._locks_guard:
                entry.holders -= 1
                if entry.holders == 0:
                    del self._locks[username]

    def _select_target(
        self, bindings: list[WorkspaceBinding], target_binding_name: str, username: str
    ) -> WorkspaceBinding:
        targets = [b for b in bindings if b.name == target_binding_name]
        if not targets:
            raise ConsistencyFault(username, target_binding_name)
        if len(targets) > 1:
            others = ", ".join(f"{b.namespace}/{b.name}" for b in targets[1:])
            logger.warning(
                f"User '{username}' has {len(targets)} bindings named '{target_binding_name}'; "
                f"activating {targets[0].namespace}/{targets[0].name}, deactivating {others}"
            )
        return targets[0]

    def find_target(self, target_binding_name: str, username: str) -> WorkspaceBinding:
        """Look up the binding ``set_active`` would activate, without patching.

        Raises:
            ConsistencyFault: Target is not among the user's bindings
            TransportError: Discovery failed
        """
        bindings = self.discovery.find_all_bindings_for_user(username)
        return self._select_target(bindings, target_binding_name, username)

    def set_active(self, target_binding_name: str, username: str) -> EnforcementResult:
        """Activate one binding and deactivate all its siblings.

        Every binding is patched on every call, so repeating a call with the
        same target re-asserts the same end state. Bindings are matched by
        name; when several of the user's bindings share the name (in
        different namespaces) the first one discovered is activated and the
        rest are scaled to 0 like any other sibling.

        Args:
            target_binding_name: Binding to scale to 1
            username: Owner of the bindings

        Returns:
            EnforcementResult describing the pass

        Raises:
            ConsistencyFault: Target is not among the user's bindings; nothing
                is patched
            EnforcementError: Some patches failed after retries; the rest of
                the sequence was still applied
            TransportError: Discovery failed
        """
        with self._user_lock(username):
            bindings = self.discovery.find_all_bindings_for_user(username)
            target = self._select_target(bindings, target_binding_name, username)

            result = EnforcementResult(username=username, active=target)
            failed = []
            for binding in bindings:
                replicas = 1 if binding.identity == target.identity else 0
                logger.info(
                    f"Setting replicas={replicas} on binding '{binding.name}' for user '{username}'"
                )
                try:
                    patch_with_retry(
                        self.client,
                        ResourceKind.WORKSPACE_BINDING,
                        binding.namespace,
                        binding.name,
                        replicas_patch(replicas),
                        max_attempts=self.max_attempts,
                        initial_delay=self.initial_delay,
                    )
                except ResourceNotFoundError:
                    logger.warning(f"Binding {binding.namespace}/{binding.name} disappeared, skipping")
                    result.skipped.append(binding.name)
                    continue
                except TransportError:
                    failed.append(binding.name)
                    continue
                result.patched.append(binding.name)

            if failed:
                raise EnforcementError(username, failed)

            return result

    def wait_until_ready(self, binding: WorkspaceBinding, timeout: float, interval: float = 0.5) -> bool:
        """Poll a binding until its status replicas match the desired count.

        Args:
            binding: Binding to watch (re-read on every poll)
            timeout: Maximum seconds to wait
            interval: Seconds between polls

        Returns:
            True if the binding became ready, False on timeout or if it
            disappeared
        """
        deadline = time.monotonic() + timeout
        while True:
            try:
                data = self.client.get(ResourceKind.WORKSPACE_BINDING, binding.namespace, binding.name)
            except ResourceNotFoundError:
                logger.warning(f"Binding {binding.namespace}/{binding.name} disappeared while waiting")
                return False
            except TransportError as e:
                logger.warning(f"Polling binding {binding.namespace}/{binding.name} failed: {e}")
            else:
                current = WorkspaceBinding.from_dict(data, self.discovery.label_key)
                if current.is_ready:
                    return True

            remaining = deadline - time.monotonic()
            if remaining <= 0:
                logger.warning(
                    f"Binding {binding.namespace}/{binding.name} not ready after {timeout:.1f}s"
                )
                return False
            time.sleep(min(interval, remaining))
