# summary.py

from __future__ import annotations
from dataclasses import dataclass, field, fields, asdict
from typing import Any, Dict, List, Tuple

from demo_library.highlights import HighlightEvent, UserId, parse_highlight_event

RED_TEAM = "red"
BLUE_TEAM = "blue"


@dataclass(frozen=True)
class Scoreboard:
    points: int = 0
    kills: int = 0
    assists: int = 0
    deaths: int = 0
    buildings_destroyed: int = 0
    captures: int = 0
    defenses: int = 0
    dominations: int = 0
    revenges: int = 0
    ubercharges: int = 0
    headshots: int = 0
    teleports: int = 0
    healing: int = 0
    backstabs: int = 0
    bonus_points: int = 0
    support: int = 0
    damage_dealt: int = 0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Scoreboard:
        """Unknown keys are ignored, missing ones count as zero"""
        known = {f.name for f in fields(cls)}
        return cls(**{key: int(value) for key, value in data.items() if key in known})


@dataclass(frozen=True)
class PlayerSummary:
    name: str
    steam_id: str
    user_id: UserId
    team: str
    # Class ids ordered by time played, most played first
    classes: Tuple[int, ...] = ()
    scoreboard: Scoreboard = field(default_factory=Scoreboard)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> PlayerSummary:
        return cls(
            name=str(data.get('name', "")),
            steam_id=str(data.get('steam_id', "")),
            user_id=int(data['user_id']),
            team=str(data.get('team', "")).lower(),
            classes=tuple(int(c) for c in data.get('classes', [])),
            scoreboard=Scoreboard.from_dict(data.get('scoreboard') or {}),
        )

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['classes'] = list(self.classes)
        return data


@dataclass
class GameSummary:
    """Output of the match analysis stage, consumed read-only"""
    local_user_id: UserId = 0
    highlights: List[HighlightEvent] = field(default_factory=list)
    red_team_score: int = 0
    blue_team_score: int = 0
    interval_per_tick: float = 0.0
    players: List[PlayerSummary] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> GameSummary:
        return cls(
            local_user_id=int(data.get('local_user_id', 0)),
            highlights=[parse_highlight_event(h) for h in data.get('highlights', [])],
            red_team_score=int(data.get('red_team_score', 0)),
            blue_team_score=int(data.get('blue_team_score', 0)),
            interval_per_tick=float(data.get('interval_per_tick', 0.0)),
            players=[PlayerSummary.from_dict(p) for p in data.get('players', [])],
        )

    def players_by_team(self) -> Tuple[List[PlayerSummary], List[PlayerSummary], List[PlayerSummary]]:
        """Split the roster into (red, blue, everyone else)"""
        red, blue, others = [], [], []
        for player in self.players:
            if player.team == RED_TEAM:
                red.append(player)
            elif player.team == BLUE_TEAM:
                blue.append(player)
            else:
                others.append(player)
        return red, blue, others

    def player_choices(self) -> List[PlayerSummary]:
        """Players as the player filter lists them, by name ignoring case"""
        return sorted(self.players, key=lambda player: player.name.lower())

    def tick_to_seconds(self, tick: int) -> float:
        return tick * self.interval_per_tick
