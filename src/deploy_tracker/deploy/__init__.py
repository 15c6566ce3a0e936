"""Deploy records and the per-channel tracker."""

from .models import Deploy, DeployState, DeployStateError, User
from .tracker import ChannelDeploys, ChannelLocks

__all__ = [
    "ChannelDeploys",
    "ChannelLocks",
    "Deploy",
    "DeployState",
    "DeployStateError",
    "User",
]
