"""Discovery of the workspace bindings that belong to a user.

Bindings reach a user in one of two ways. Provisioners that maintain the
username label are found with a server-side label query. Bindings created
without the label are scanned and filtered on ``spec.username``.
"""

import logging

from ..core.naming import label_absent, label_equals, username_label_token
from ..models import WorkspaceBinding
from .resource_client import ResourceClient, ResourceKind

logger = logging.getLogger(__name__)


class BindingDiscovery:
    """Finds all bindings for a user with fresh queries on every call."""

    def __init__(self, client: ResourceClient, label_key: str):
        """
        Args:
            client: ResourceClient implementation
            label_key: Label holding the sanitized username
        """
        self.client = client
        self.label_key = label_key

    def _parse(self, items: list[dict]) -> list[WorkspaceBinding]:
        return [WorkspaceBinding.from_dict(item, self.label_key) for item in items]

    def labeled_bindings(self, username: str) -> list[WorkspaceBinding]:
        """Bindings whose username label equals the user's label token."""
        token = username_label_token(username)
        logger.info(f"Fetching workspace bindings with username label '{token}'")
        items = self.client.list(ResourceKind.WORKSPACE_BINDING, label_equals(self.label_key, token))
        return self._parse(items)

    def unlabeled_bindings(self) -> list[WorkspaceBinding]:
        """Bindings that carry no username label at all."""
        logger.info("Fetching workspace bindings without username label")
        items = self.client.list(ResourceKind.WORKSPACE_BINDING, label_absent(self.label_key))
        return self._parse(items)

    def find_all_bindings_for_user(self, username: str) -> list[WorkspaceBinding]:
        """All bindings for ``username``, deduplicated by (namespace, name).

        Labeled bindings come first, then unlabeled bindings whose
        ``spec.username`` equals ``username`` exactly. Order within each
        query is kept and the first occurrence of an identity wins.

        Raises:
            TransportError: If either query failed
        """
        logger.info(f"Fetching all workspace bindings for '{username}'")
        candidates = self.labeled_bindings(username)
        candidates += [b for b in self.unlabeled_bindings() if b.username == username]

        seen: set[tuple[str, str]] = set()
        bindings = []
        for binding in candidates:
            if binding.identity in seen:
                continue
            seen.add(binding.identity)
            bindings.append(binding)

        logger.debug(f"Found {len(bindings)} workspace bindings for '{username}'")
        return bindings
