"""Retry logic for resource patches with exponential backoff.

Patches are idempotent replace operations, so a failed attempt can be
repeated safely.
"""

import logging
import random
import time
from typing import Any

from ..errors import TransportError
from .resource_client import ResourceClient, ResourceKind

logger = logging.getLogger(__name__)


def patch_with_retry(
    client: ResourceClient,
    kind: ResourceKind,
    namespace: str,
    name: str,
    ops: list[dict[str, Any]],
    max_attempts: int = 3,
    initial_delay: float = 0.2,
) -> dict:
    """Apply a JSON-Patch, retrying transport failures.

    Args:
        client: ResourceClient implementation
        kind: Resource kind
        namespace: Object namespace
        name: Object name
        ops: JSON-Patch operations
        max_attempts: Maximum attempts before giving up
        initial_delay: Initial retry delay in seconds (doubles each attempt)

    Returns:
        The patched object

    Raises:
        ResourceNotFoundError: Immediately, the object is gone
        TransportError: The last failure once all attempts are used
    """
    for attempt in range(max_attempts):
        try:
            result = client.patch(kind, namespace, name, ops)
            if attempt > 0:
                logger.debug(f"Patched {namespace}/{name} on attempt {attempt + 1}")
            return result
        except TransportError as e:
            if attempt >= max_attempts - 1:
                logger.warning(f"Patch of {namespace}/{name} failed, no more retries: {e}")
                raise

            delay = (2**attempt) * initial_delay
            jitter = random.uniform(0, initial_delay)
            total_delay = delay + jitter

            logger.warning(
                f"Patch of {namespace}/{name} failed, attempt {attempt + 1}/{max_attempts}, "
                f"retrying in {total_delay:.3f}s: {e}"
            )
            time.sleep(total_delay)

    raise ValueError("max_attempts must be at least 1")
