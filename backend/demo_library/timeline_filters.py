# timeline_filters.py

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Callable, Dict, FrozenSet, Iterable, List, Optional
import logging
import re

from demo_library.highlights import ChatMessage, HighlightEvent, HighlightKind, UserId

logger = logging.getLogger(__name__)


class Category(Enum):
    """Groups of highlight kinds that share a visibility toggle"""
    KILLFEED = auto()
    CAPTURES = auto()
    CHAT = auto()
    CONNECTION_MESSAGES = auto()
    KILLSTREAKS = auto()
    ROUNDS = auto()
    AIRSHOTS = auto()
    UNTOGGLED = auto()


CATEGORY_BY_KIND: Dict[HighlightKind, Category] = {
    HighlightKind.KILL: Category.KILLFEED,
    HighlightKind.POINT_CAPTURED: Category.CAPTURES,
    HighlightKind.CHAT_MESSAGE: Category.CHAT,
    HighlightKind.PLAYER_CONNECTED: Category.CONNECTION_MESSAGES,
    HighlightKind.PLAYER_DISCONNECTED: Category.CONNECTION_MESSAGES,
    HighlightKind.KILL_STREAK: Category.KILLSTREAKS,
    HighlightKind.KILL_STREAK_ENDED: Category.KILLSTREAKS,
    HighlightKind.ROUND_START: Category.ROUNDS,
    HighlightKind.ROUND_WIN: Category.ROUNDS,
    HighlightKind.ROUND_STALEMATE: Category.ROUNDS,
    HighlightKind.AIRSHOT: Category.AIRSHOTS,
    HighlightKind.CROSSBOW_AIRSHOT: Category.AIRSHOTS,
    HighlightKind.PAUSE: Category.UNTOGGLED,
    HighlightKind.UNPAUSE: Category.UNTOGGLED,
}

_unmapped_kinds = set(HighlightKind) - set(CATEGORY_BY_KIND)
if _unmapped_kinds:
    raise RuntimeError(f"Highlight kinds without a filter category: {sorted(map(str, _unmapped_kinds))}")


@dataclass
class Filters:
    """Timeline filter state; the defaults show everything"""
    player_ids: FrozenSet[UserId] = field(default_factory=frozenset)
    chat_search: str = ""
    visible_killfeed: bool = True
    visible_captures: bool = True
    visible_chat: bool = True
    visible_connection_messages: bool = True
    visible_killstreaks: bool = True
    visible_rounds: bool = True
    visible_airshots: bool = True

    def __post_init__(self):
        self.player_ids = frozenset(int(player_id) for player_id in self.player_ids)

    def visible_categories(self) -> FrozenSet[Category]:
        toggles = {
            Category.KILLFEED: self.visible_killfeed,
            Category.CAPTURES: self.visible_captures,
            Category.CHAT: self.visible_chat,
            Category.CONNECTION_MESSAGES: self.visible_connection_messages,
            Category.KILLSTREAKS: self.visible_killstreaks,
            Category.ROUNDS: self.visible_rounds,
            Category.AIRSHOTS: self.visible_airshots,
            Category.UNTOGGLED: True,
        }
        return frozenset(category for category, visible in toggles.items() if visible)


def compile_chat_search(text: str) -> Optional[re.Pattern[str]]:
    """Case-insensitive regex for the chat search box; invalid patterns match literally"""
    if text == "":
        return None
    try:
        return re.compile(text, re.IGNORECASE)
    except re.error as e:
        logger.debug(f"Chat search {text!r} is not a valid pattern ({e}), matching literally")
        return re.compile(re.escape(text), re.IGNORECASE)


def involves_any_player(highlight: HighlightEvent, player_ids: FrozenSet[UserId]) -> bool:
    return any(player_id in player_ids for player_id in highlight.event.player_ids())


def matches_chat_search(highlight: HighlightEvent, pattern: re.Pattern[str]) -> bool:
    """Only chat messages are searched, everything else passes"""
    event = highlight.event
    if not isinstance(event, ChatMessage):
        return True
    return bool(pattern.search(event.sender.name) or pattern.search(event.text))


def build_predicates(filters: Filters) -> List[Callable[[HighlightEvent], bool]]:
    """One predicate per active filter; a highlight must pass all of them"""
    predicates: List[Callable[[HighlightEvent], bool]] = []

    if filters.player_ids:
        player_ids = filters.player_ids
        predicates.append(lambda h: involves_any_player(h, player_ids))

    pattern = compile_chat_search(filters.chat_search)
    if pattern is not None:
        predicates.append(lambda h: matches_chat_search(h, pattern))

    visible = filters.visible_categories()
    if visible != frozenset(Category):
        predicates.append(lambda h: CATEGORY_BY_KIND[h.event.kind] in visible)

    return predicates


def filter_highlights(highlights: Iterable[HighlightEvent], filters: Filters) -> List[HighlightEvent]:
    """Subset of highlights passing every active filter, in input order"""
    predicates = build_predicates(filters)
    return [h for h in highlights if all(predicate(h) for predicate in predicates)]
