"""Room domain services: the registry and resource-vector validation.

Transport code (REST blueprints, Socket.IO handlers) calls into these and
never touches Room records directly.
"""

from .registry import RoomRegistry
from .validation import validate_resources

__all__ = ['RoomRegistry', 'validate_resources']
