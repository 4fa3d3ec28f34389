"""In-memory game data model.

Nothing here is persisted: a ``GameState`` lives for as long as the
process (or until the next reset) and is owned by a single ``GameService``.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional


class Team(str, Enum):
    TEAM_A = 'teamA'
    TEAM_B = 'teamB'

    @property
    def enemy(self) -> 'Team':
        return Team.TEAM_B if self is Team.TEAM_A else Team.TEAM_A

    @classmethod
    def parse(cls, value) -> Optional['Team']:
        try:
            return cls(value)
        except ValueError:
            return None


TEAMS = (Team.TEAM_A, Team.TEAM_B)


class Phase(str, Enum):
    WAITING = 'waiting'
    WARMUP = 'warmup'
    ACTIVE = 'active'
    ENDED = 'ended'


@dataclass
class PurchasedItem:
    item_id: str
    purchased_at: float

    def to_dict(self):
        return {'itemId': self.item_id, 'purchasedAt': self.purchased_at}


@dataclass
class TeamUpgrade:
    item_id: str
    purchased_at: float
    purchased_by: str

    def to_dict(self):
        return {
            'itemId': self.item_id,
            'purchasedAt': self.purchased_at,
            'purchasedBy': self.purchased_by,
        }


@dataclass
class Player:
    id: str
    name: str
    team: Team
    joined_at: float
    last_seen: float
    clicks: int = 0
    coins: float = 0.0
    purchased_items: List[PurchasedItem] = field(default_factory=list)
    # One-shot purchases (sabotage, heists); only consulted for prerequisites
    instant_history: List[PurchasedItem] = field(default_factory=list)
    selected_build_path: Optional[str] = None

    def owns(self, item_id: str) -> bool:
        return any(p.item_id == item_id for p in self.purchased_items)

    def owned_item_ids(self) -> List[str]:
        return [p.item_id for p in self.purchased_items] + [p.item_id for p in self.instant_history]

    def to_dict(self):
        return {'name': self.name, 'clicks': self.clicks}


def _team_map(factory):
    return {team: factory() for team in TEAMS}


@dataclass
class GameState:
    players: Dict[str, Player] = field(default_factory=dict)
    scores: Dict[Team, float] = field(default_factory=lambda: _team_map(float))
    phase: Phase = Phase.WAITING
    winner: Optional[Team] = None
    warmup_start_time: Optional[float] = None
    warmup_duration: int = 30000
    win_threshold: Optional[float] = None
    team_upgrades: Dict[Team, List[TeamUpgrade]] = field(default_factory=lambda: _team_map(list))
    last_passive_income_update: Optional[float] = None
    team_empty_since: Dict[Team, Optional[float]] = field(default_factory=lambda: _team_map(lambda: None))
    started_at: Optional[float] = None
    ended_at: Optional[float] = None

    def team_players(self, team: Team) -> List[Player]:
        return [p for p in self.players.values() if p.team == team]

    def team_size(self, team: Team) -> int:
        return len(self.team_players(team))

    def team_owns(self, team: Team, item_id: str) -> bool:
        return any(u.item_id == item_id for u in self.team_upgrades[team])
