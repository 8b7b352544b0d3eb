from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Dict, List, Optional
import secrets

ROOM_CAPACITY = 2
RESOURCE_SLOTS = 5
RESOURCE_MIN = 0
RESOURCE_MAX = 50


def empty_resources() -> List[int]:
    return [0] * RESOURCE_SLOTS


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RoomIdExhausted(RuntimeError):
    """No free room id could be generated within the allowed attempts."""


def generate_room_id(is_taken: Callable[[str], bool], length: int = 4, max_attempts: int = 32) -> str:
    """Generate a short upper-case hex room id that is not already in use."""
    for _ in range(max_attempts):
        code = secrets.token_hex((length + 1) // 2)[:length].upper()
        if not is_taken(code):
            return code
    raise RoomIdExhausted(f'no free room id of length {length} after {max_attempts} attempts')


class JoinOutcome(Enum):
    JOINED = 'joined'
    STARTED = 'started'
    ALREADY_MEMBER = 'already_member'
    NOT_FOUND = 'room_not_found'
    FULL = 'room_full'
    IN_OTHER_ROOM = 'in_other_room'

    @property
    def ok(self) -> bool:
        return self in (JoinOutcome.JOINED, JoinOutcome.STARTED, JoinOutcome.ALREADY_MEMBER)

    def __bool__(self) -> bool:
        return self.ok


class Room:
    """A pairing context for up to two players and their resource vectors.

    Only the registry mutates a Room; callers get copies through its
    projections and ``to_dict``.
    """

    def __init__(self, room_id: str):
        self.id = room_id
        self.players: List[str] = []
        self.created_at: datetime = _utcnow()
        self.started: bool = False
        self.started_at: Optional[datetime] = None
        self.resources: Dict[str, List[int]] = {}

    @property
    def player_count(self) -> int:
        return len(self.players)

    @property
    def is_full(self) -> bool:
        return len(self.players) >= ROOM_CAPACITY

    @property
    def is_empty(self) -> bool:
        return not self.players

    def has_player(self, player: str) -> bool:
        return player in self.players

    def opponent_of(self, player: str) -> Optional[str]:
        return next((p for p in self.players if p != player), None)

    def add_player(self, player: str) -> bool:
        """Append a player; return True if this join started the room."""
        self.players.append(player)
        self.resources[player] = empty_resources()
        if len(self.players) == ROOM_CAPACITY and not self.started:
            self.started = True
            self.started_at = _utcnow()
            return True
        return False

    def remove_player(self, player: str) -> None:
        if player in self.players:
            self.players.remove(player)
        self.resources.pop(player, None)

    def summary(self) -> dict:
        return {
            'id': self.id,
            'playerCount': self.player_count,
            'createdAt': self.created_at.isoformat(),
        }

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'players': list(self.players),
            'playerCount': self.player_count,
            'capacity': ROOM_CAPACITY,
            'createdAt': self.created_at.isoformat(),
            'started': self.started,
            'startedAt': self.started_at.isoformat() if self.started_at else None,
        }
