"""workspacegate - workspace selection gate for user authentication."""

__version__ = "0.1.0"

from .action import PROVIDER_ID, WorkspaceRequiredAction
from .core.config import GateConfig

__all__ = ["GateConfig", "PROVIDER_ID", "WorkspaceRequiredAction", "__version__"]
