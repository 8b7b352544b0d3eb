import copy
import logging
import threading
from typing import Dict, List, Optional

from relay.models import JoinOutcome, Room, empty_resources, generate_room_id
from .validation import validate_resources

logger = logging.getLogger(__name__)


class RoomRegistry:
    """In-memory store of live rooms and the only code that mutates them.

    Every public method runs under one re-entrant lock so joins, leaves and
    resource updates look atomic to Socket.IO handlers running on separate
    threads. Failures come back as ``JoinOutcome``/``False``/``None``.
    """

    def __init__(self, id_length: int = 4, max_id_attempts: int = 32):
        self._rooms: Dict[str, Room] = {}
        self._player_rooms: Dict[str, str] = {}  # player handle -> room id
        self._lock = threading.RLock()
        self.id_length = id_length
        self.max_id_attempts = max_id_attempts

    @staticmethod
    def normalize_id(room_id) -> Optional[str]:
        if not isinstance(room_id, str) or not room_id.strip():
            return None
        return room_id.strip().upper()

    def _get(self, room_id) -> Optional[Room]:
        key = self.normalize_id(room_id)
        return self._rooms.get(key) if key else None

    # -------------------- Lifecycle -------------------- #

    def create_room(self) -> Room:
        with self._lock:
            room_id = generate_room_id(lambda code: code in self._rooms, self.id_length, self.max_id_attempts)
            room = Room(room_id)
            self._rooms[room_id] = room
            logger.info(f"[room-created] room={room_id}")
            return copy.deepcopy(room)

    def get_room(self, room_id) -> Optional[Room]:
        """Return a snapshot of the room, or None if it does not exist."""
        with self._lock:
            room = self._get(room_id)
            return copy.deepcopy(room) if room else None

    def list_rooms(self) -> List[dict]:
        with self._lock:
            return [room.summary() for room in self._rooms.values()]

    def is_room_full(self, room_id) -> bool:
        with self._lock:
            room = self._get(room_id)
            return bool(room and room.is_full)

    def room_of(self, player: str) -> Optional[str]:
        with self._lock:
            return self._player_rooms.get(player)

    def __len__(self) -> int:
        with self._lock:
            return len(self._rooms)

    # -------------------- Membership -------------------- #

    def join_room(self, room_id, player: str) -> JoinOutcome:
        with self._lock:
            room = self._get(room_id)
            if room is None:
                return JoinOutcome.NOT_FOUND
            if room.has_player(player):
                return JoinOutcome.ALREADY_MEMBER
            current = self._player_rooms.get(player)
            if current is not None and current != room.id:
                logger.info(f"[join-rejected] room={room.id} player={player} reason=in_other_room other={current}")
                return JoinOutcome.IN_OTHER_ROOM
            if room.is_full:
                logger.info(f"[join-rejected] room={room.id} player={player} reason=full")
                return JoinOutcome.FULL

            started_now = room.add_player(player)
            self._player_rooms[player] = room.id
            logger.info(f"[join] room={room.id} player={player} players={room.player_count} started={room.started}")
            return JoinOutcome.STARTED if started_now else JoinOutcome.JOINED

    def leave_room(self, room_id, player: str) -> bool:
        with self._lock:
            room = self._get(room_id)
            if room is None:
                return False
            if not room.has_player(player):
                return True
            room.remove_player(player)
            if self._player_rooms.get(player) == room.id:
                del self._player_rooms[player]
            logger.info(f"[leave] room={room.id} player={player} players={room.player_count}")
            if room.is_empty:
                del self._rooms[room.id]
                logger.info(f"[room-removed] room={room.id} reason=empty")
            return True

    def leave_all_rooms(self, player: str) -> List[str]:
        """Remove ``player`` from every room it belongs to and return their ids."""
        with self._lock:
            left = [room.id for room in self._rooms.values() if room.has_player(player)]
            for room_id in left:
                self.leave_room(room_id, player)
            self._player_rooms.pop(player, None)
            return left

    # -------------------- Resources -------------------- #

    def update_resources(self, room_id, player: str, vector) -> bool:
        with self._lock:
            room = self._get(room_id)
            if room is None or not room.has_player(player):
                return False
            normalized, error = validate_resources(vector)
            if error:
                logger.warning(f"[resources-rejected] room={room.id} player={player} error={error}")
                return False
            room.resources[player] = normalized
            return True

    def get_resources(self, room_id, player: str) -> Optional[List[int]]:
        with self._lock:
            room = self._get(room_id)
            if room is None or player not in room.resources:
                return None
            return list(room.resources[player])

    # -------------------- Projections -------------------- #

    def room_state(self, room_id) -> Optional[dict]:
        with self._lock:
            room = self._get(room_id)
            if room is None:
                return None
            return {
                'players': list(room.players),
                'resources': {p: list(v) for p, v in room.resources.items()},
            }

    def state_for_player(self, room_id, player: str) -> Optional[dict]:
        """Viewer-scoped state: only the opponent's vector, never the viewer's own."""
        with self._lock:
            room = self._get(room_id)
            if room is None or not room.has_player(player):
                return None
            opponent = room.opponent_of(player)
            opponent_resources = room.resources.get(opponent) if opponent else None
            return {
                'players': list(room.players),
                'opponentResources': list(opponent_resources) if opponent_resources else empty_resources(),
                'roomId': room.id,
            }
