"""
Host collaborators: the supervised server, the player count source and
the host application itself.
"""

from .interfaces import HostControl, PlayerSource, SupervisedProcess
from .standalone import StandaloneHostControl, StandaloneProcess

__all__ = [
    "HostControl",
    "PlayerSource",
    "SupervisedProcess",
    "StandaloneHostControl",
    "StandaloneProcess",
]
