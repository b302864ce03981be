# highlights.py

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar, Dict, Optional, Tuple, Type
import logging

logger = logging.getLogger(__name__)

UserId = int


class HighlightKind(Enum):
    """Highlight variants, valued by their tag in the analysis output"""
    KILL = "Kill"
    CHAT_MESSAGE = "ChatMessage"
    AIRSHOT = "Airshot"
    CROSSBOW_AIRSHOT = "CrossbowAirshot"
    POINT_CAPTURED = "PointCaptured"
    KILL_STREAK = "KillStreak"
    KILL_STREAK_ENDED = "KillStreakEnded"
    ROUND_START = "RoundStart"
    ROUND_WIN = "RoundWin"
    ROUND_STALEMATE = "RoundStalemate"
    PLAYER_CONNECTED = "PlayerConnected"
    PLAYER_DISCONNECTED = "PlayerDisconnected"
    PAUSE = "Pause"
    UNPAUSE = "Unpause"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class PlayerSnapshot:
    """A player as they were when the highlight happened"""
    user_id: UserId
    name: str = ""
    team: str = ""

    @classmethod
    def from_value(cls, value: Any) -> PlayerSnapshot:
        """Accept either a full snapshot object or a bare user id"""
        if isinstance(value, dict):
            return cls(
                user_id=int(value['user_id']),
                name=str(value.get('name', "")),
                team=str(value.get('team', "")),
            )
        return cls(user_id=int(value))

    def to_dict(self) -> Dict[str, Any]:
        return {'user_id': self.user_id, 'name': self.name, 'team': self.team}


class Highlight:
    """Base of all highlight variants"""
    KIND: ClassVar[HighlightKind]

    @property
    def kind(self) -> HighlightKind:
        return self.KIND

    def player_ids(self) -> Tuple[UserId, ...]:
        """User ids of every player this highlight involves"""
        return ()

    @classmethod
    def from_content(cls, content: Dict[str, Any]) -> Highlight:
        return cls()

    def content(self) -> Optional[Dict[str, Any]]:
        return None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {'t': self.KIND.value}
        content = self.content()
        if content is not None:
            data['c'] = content
        return data


@dataclass(frozen=True)
class Kill(Highlight):
    KIND: ClassVar[HighlightKind] = HighlightKind.KILL

    killer: PlayerSnapshot
    assister: Optional[PlayerSnapshot]
    victim: PlayerSnapshot
    weapon: str = ""
    kill_icon: str = ""
    streak: int = 0
    drop: bool = False
    airshot: bool = False

    def player_ids(self) -> Tuple[UserId, ...]:
        ids = [self.killer.user_id, self.victim.user_id]
        if self.assister is not None:
            ids.insert(1, self.assister.user_id)
        return tuple(ids)

    @classmethod
    def from_content(cls, content: Dict[str, Any]) -> Kill:
        assister = content.get('assister')
        return cls(
            killer=PlayerSnapshot.from_value(content['killer']),
            assister=PlayerSnapshot.from_value(assister) if assister is not None else None,
            victim=PlayerSnapshot.from_value(content['victim']),
            weapon=content.get('weapon', ""),
            kill_icon=content.get('kill_icon', ""),
            streak=int(content.get('streak', 0)),
            drop=bool(content.get('drop', False)),
            airshot=bool(content.get('airshot', False)),
        )

    def content(self) -> Dict[str, Any]:
        return {
            'killer': self.killer.to_dict(),
            'assister': self.assister.to_dict() if self.assister else None,
            'victim': self.victim.to_dict(),
            'weapon': self.weapon,
            'kill_icon': self.kill_icon,
            'streak': self.streak,
            'drop': self.drop,
            'airshot': self.airshot,
        }


@dataclass(frozen=True)
class ChatMessage(Highlight):
    KIND: ClassVar[HighlightKind] = HighlightKind.CHAT_MESSAGE

    sender: PlayerSnapshot
    text: str

    def player_ids(self) -> Tuple[UserId, ...]:
        return (self.sender.user_id,)

    @classmethod
    def from_content(cls, content: Dict[str, Any]) -> ChatMessage:
        return cls(sender=PlayerSnapshot.from_value(content['sender']), text=str(content['text']))

    def content(self) -> Dict[str, Any]:
        return {'sender': self.sender.to_dict(), 'text': self.text}


@dataclass(frozen=True)
class Airshot(Highlight):
    KIND: ClassVar[HighlightKind] = HighlightKind.AIRSHOT

    attacker: PlayerSnapshot
    victim: PlayerSnapshot

    def player_ids(self) -> Tuple[UserId, ...]:
        return (self.attacker.user_id, self.victim.user_id)

    @classmethod
    def from_content(cls, content: Dict[str, Any]) -> Airshot:
        return cls(
            attacker=PlayerSnapshot.from_value(content['attacker']),
            victim=PlayerSnapshot.from_value(content['victim']),
        )

    def content(self) -> Dict[str, Any]:
        return {'attacker': self.attacker.to_dict(), 'victim': self.victim.to_dict()}


@dataclass(frozen=True)
class CrossbowAirshot(Highlight):
    """A medic's crossbow bolt healing a teammate in mid-air"""
    KIND: ClassVar[HighlightKind] = HighlightKind.CROSSBOW_AIRSHOT

    healer: PlayerSnapshot
    target: PlayerSnapshot

    def player_ids(self) -> Tuple[UserId, ...]:
        return (self.healer.user_id, self.target.user_id)

    @classmethod
    def from_content(cls, content: Dict[str, Any]) -> CrossbowAirshot:
        return cls(
            healer=PlayerSnapshot.from_value(content['healer']),
            target=PlayerSnapshot.from_value(content['target']),
        )

    def content(self) -> Dict[str, Any]:
        return {'healer': self.healer.to_dict(), 'target': self.target.to_dict()}


@dataclass(frozen=True)
class PointCaptured(Highlight):
    KIND: ClassVar[HighlightKind] = HighlightKind.POINT_CAPTURED

    point_name: str
    capturing_team: int
    cappers: Tuple[UserId, ...] = ()

    def player_ids(self) -> Tuple[UserId, ...]:
        return tuple(self.cappers)

    @classmethod
    def from_content(cls, content: Dict[str, Any]) -> PointCaptured:
        return cls(
            point_name=str(content.get('point_name', "")),
            capturing_team=int(content.get('capturing_team', 0)),
            cappers=tuple(int(capper) for capper in content.get('cappers', [])),
        )

    def content(self) -> Dict[str, Any]:
        return {
            'point_name': self.point_name,
            'capturing_team': self.capturing_team,
            'cappers': list(self.cappers),
        }


@dataclass(frozen=True)
class KillStreak(Highlight):
    KIND: ClassVar[HighlightKind] = HighlightKind.KILL_STREAK

    player: PlayerSnapshot
    streak: int

    def player_ids(self) -> Tuple[UserId, ...]:
        return (self.player.user_id,)

    @classmethod
    def from_content(cls, content: Dict[str, Any]) -> KillStreak:
        return cls(player=PlayerSnapshot.from_value(content['player']), streak=int(content['streak']))

    def content(self) -> Dict[str, Any]:
        return {'player': self.player.to_dict(), 'streak': self.streak}


@dataclass(frozen=True)
class KillStreakEnded(Highlight):
    KIND: ClassVar[HighlightKind] = HighlightKind.KILL_STREAK_ENDED

    killer: PlayerSnapshot
    victim: PlayerSnapshot
    streak: int

    def player_ids(self) -> Tuple[UserId, ...]:
        return (self.killer.user_id, self.victim.user_id)

    @classmethod
    def from_content(cls, content: Dict[str, Any]) -> KillStreakEnded:
        return cls(
            killer=PlayerSnapshot.from_value(content['killer']),
            victim=PlayerSnapshot.from_value(content['victim']),
            streak=int(content['streak']),
        )

    def content(self) -> Dict[str, Any]:
        return {'killer': self.killer.to_dict(), 'victim': self.victim.to_dict(), 'streak': self.streak}


@dataclass(frozen=True)
class RoundStart(Highlight):
    KIND: ClassVar[HighlightKind] = HighlightKind.ROUND_START


@dataclass(frozen=True)
class RoundWin(Highlight):
    KIND: ClassVar[HighlightKind] = HighlightKind.ROUND_WIN

    winner: int

    @classmethod
    def from_content(cls, content: Dict[str, Any]) -> RoundWin:
        return cls(winner=int(content['winner']))

    def content(self) -> Dict[str, Any]:
        return {'winner': self.winner}


@dataclass(frozen=True)
class RoundStalemate(Highlight):
    KIND: ClassVar[HighlightKind] = HighlightKind.ROUND_STALEMATE


@dataclass(frozen=True)
class PlayerConnected(Highlight):
    KIND: ClassVar[HighlightKind] = HighlightKind.PLAYER_CONNECTED

    user_id: UserId

    def player_ids(self) -> Tuple[UserId, ...]:
        return (self.user_id,)

    @classmethod
    def from_content(cls, content: Dict[str, Any]) -> PlayerConnected:
        return cls(user_id=int(content['user_id']))

    def content(self) -> Dict[str, Any]:
        return {'user_id': self.user_id}


@dataclass(frozen=True)
class PlayerDisconnected(Highlight):
    KIND: ClassVar[HighlightKind] = HighlightKind.PLAYER_DISCONNECTED

    user_id: UserId
    reason: str = ""

    def player_ids(self) -> Tuple[UserId, ...]:
        return (self.user_id,)

    @classmethod
    def from_content(cls, content: Dict[str, Any]) -> PlayerDisconnected:
        return cls(user_id=int(content['user_id']), reason=str(content.get('reason', "")))

    def content(self) -> Dict[str, Any]:
        return {'user_id': self.user_id, 'reason': self.reason}


@dataclass(frozen=True)
class Pause(Highlight):
    KIND: ClassVar[HighlightKind] = HighlightKind.PAUSE


@dataclass(frozen=True)
class Unpause(Highlight):
    KIND: ClassVar[HighlightKind] = HighlightKind.UNPAUSE


VARIANTS: Dict[HighlightKind, Type[Highlight]] = {
    variant.KIND: variant
    for variant in (
        Kill, ChatMessage, Airshot, CrossbowAirshot, PointCaptured,
        KillStreak, KillStreakEnded, RoundStart, RoundWin, RoundStalemate,
        PlayerConnected, PlayerDisconnected, Pause, Unpause,
    )
}

_missing_variants = set(HighlightKind) - set(VARIANTS)
if _missing_variants:
    raise RuntimeError(f"Highlight kinds without a variant class: {sorted(map(str, _missing_variants))}")


@dataclass(frozen=True)
class HighlightEvent:
    """One timeline entry: a highlight and the tick it happened on"""
    tick: int
    event: Highlight

    def to_dict(self) -> Dict[str, Any]:
        return {'tick': self.tick, 'event': self.event.to_dict()}


def parse_highlight(data: Dict[str, Any]) -> Highlight:
    """Build a highlight from its tagged form, {"t": kind, "c": content}"""
    if not isinstance(data, dict):
        raise ValueError(f"Highlight must be an object, got {data!r}")
    try:
        kind = HighlightKind(data['t'])
    except ValueError:
        logger.warning(f"Unknown highlight kind {data['t']!r}")
        raise ValueError(f"Unknown highlight kind: {data['t']!r}")

    content = data.get('c') or {}
    if not isinstance(content, dict):
        raise ValueError(f"{kind.value} content must be an object, got {content!r}")
    return VARIANTS[kind].from_content(content)


def parse_highlight_event(data: Dict[str, Any]) -> HighlightEvent:
    return HighlightEvent(tick=int(data['tick']), event=parse_highlight(data['event']))
