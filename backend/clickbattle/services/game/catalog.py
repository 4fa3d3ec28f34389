"""Static shop catalog and build paths.

Every item carries exactly one effect variant; the engine dispatches
purchases on the variant type and the stat aggregator reads the ones that
change multipliers or income.
"""
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple, Union

from .models import GameState, Phase, Player


@dataclass(frozen=True)
class StatBoost:
    click_multiplier: Optional[float] = None
    coin_multiplier: Optional[float] = None


@dataclass(frozen=True)
class PassiveIncome:
    rate: float


@dataclass(frozen=True)
class TeamAura:
    team_click_bonus: float = 0.0
    team_coin_bonus: float = 0.0
    buyer_bonus_multiplier: float = 1.0


@dataclass(frozen=True)
class InstantDamage:
    fraction: float


@dataclass(frozen=True)
class InstantSteal:
    amount: float


@dataclass(frozen=True)
class Synergy:
    factor: float = 1.20


@dataclass(frozen=True)
class CompoundGrowth:
    rate: float = 1.5


Effect = Union[StatBoost, PassiveIncome, TeamAura, InstantDamage, InstantSteal, Synergy, CompoundGrowth]

INSTANT_EFFECTS = (InstantDamage, InstantSteal)

LOSING = 'losing'
WINNING = 'winning'


@dataclass(frozen=True)
class Condition:
    kind: str  # LOSING or WINNING
    threshold: float


@dataclass(frozen=True)
class ShopItem:
    id: str
    name: str
    description: str
    icon: str
    category: str
    cost: float
    effect: Effect
    purchase_type: str = 'individual'
    condition: Optional[Condition] = None
    recommend_after: Tuple[str, ...] = ()
    build_path: Optional[str] = None
    tier: Optional[int] = None

    @property
    def is_team(self) -> bool:
        return self.purchase_type == 'team'

    @property
    def is_instant(self) -> bool:
        return isinstance(self.effect, INSTANT_EFFECTS)

    def to_dict(self):
        data = {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'icon': self.icon,
            'category': self.category,
            'purchaseType': self.purchase_type,
            'cost': self.cost,
            'tier': self.tier,
            'buildPath': self.build_path,
            'recommendAfter': list(self.recommend_after),
        }
        effect = self.effect
        if isinstance(effect, StatBoost):
            if effect.click_multiplier is not None:
                data['clickMultiplier'] = effect.click_multiplier
            if effect.coin_multiplier is not None:
                data['coinMultiplier'] = effect.coin_multiplier
        elif isinstance(effect, PassiveIncome):
            data['passiveIncome'] = effect.rate
        elif isinstance(effect, TeamAura):
            if effect.team_click_bonus:
                data['teamClickBonus'] = effect.team_click_bonus
            if effect.team_coin_bonus:
                data['teamCoinBonus'] = effect.team_coin_bonus
            data['buyerBonusMultiplier'] = effect.buyer_bonus_multiplier
        elif isinstance(effect, InstantDamage):
            data['instantScoreDamage'] = effect.fraction
        elif isinstance(effect, InstantSteal):
            data['instantCoinSteal'] = effect.amount
        if self.condition is not None:
            if self.condition.kind == LOSING:
                data['onlyWhenLosing'] = True
                data['losingThreshold'] = self.condition.threshold
            else:
                data['onlyWhenWinning'] = True
                data['winningThreshold'] = self.condition.threshold
        return data


@dataclass(frozen=True)
class BuildPath:
    id: str
    name: str
    description: str
    strategy: str
    icon: str
    color: str
    item_sequence: Tuple[str, ...] = field(default_factory=tuple)
    timeline: str = ''

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'strategy': self.strategy,
            'icon': self.icon,
            'color': self.color,
            'itemSequence': list(self.item_sequence),
            'timeline': self.timeline,
        }


SHOP_CATALOG: List[ShopItem] = [
    # Power tree
    ShopItem('starter-boost', 'Starter Boost', 'Permanently multiply your clicks by 1.2x', '⚡', 'power',
             100, StatBoost(click_multiplier=1.2), build_path='power-rush', tier=1),
    ShopItem('power-surge', 'Power Surge', 'Permanently multiply your clicks by 1.5x', '⚡⚡', 'power',
             300, StatBoost(click_multiplier=1.5), recommend_after=('starter-boost',),
             build_path='power-rush', tier=2),
    ShopItem('mega-force', 'Mega Force', 'Permanently multiply your clicks by 2x', '⚡⚡⚡', 'power',
             800, StatBoost(click_multiplier=2.0), recommend_after=('power-surge',),
             build_path='power-rush', tier=3),
    ShopItem('ultra-power', 'Ultra Power', 'Permanently multiply your clicks by 3x', '⚡⚡⚡⚡', 'power',
             2000, StatBoost(click_multiplier=3.0), recommend_after=('mega-force',),
             build_path='power-rush', tier=4),
    ShopItem('god-mode', 'God Mode', 'Permanently multiply your clicks by 5x', '⚡⚡⚡⚡⚡', 'power',
             5000, StatBoost(click_multiplier=5.0), recommend_after=('ultra-power',),
             build_path='power-rush', tier=5),
    ShopItem('transcendent', 'Transcendent', 'Permanently multiply your clicks by 10x', '💫', 'power',
             12000, StatBoost(click_multiplier=10.0), recommend_after=('god-mode',),
             build_path='power-rush', tier=5),

    # Economy tree
    ShopItem('penny-saver', 'Penny Saver', 'Permanently multiply coins earned by 1.5x', '💰', 'economy',
             150, StatBoost(coin_multiplier=1.5), build_path='economist', tier=1),
    ShopItem('money-maker', 'Money Maker', 'Permanently multiply coins earned by 2x', '💰💰', 'economy',
             400, StatBoost(coin_multiplier=2.0), recommend_after=('penny-saver',),
             build_path='economist', tier=2),
    ShopItem('tycoon', 'Tycoon', 'Permanently multiply coins earned by 3x', '💰💰💰', 'economy',
             1000, StatBoost(coin_multiplier=3.0), recommend_after=('money-maker',),
             build_path='economist', tier=3),

    # Passive income
    ShopItem('interest-i', 'Interest I', 'Earn +1 coin per second passively', '🏦', 'passive',
             300, PassiveIncome(1), build_path='economist', tier=2),
    ShopItem('interest-ii', 'Interest II', 'Earn +3 coins per second passively', '🏦🏦', 'passive',
             800, PassiveIncome(3), recommend_after=('interest-i',), build_path='economist', tier=3),
    ShopItem('interest-iii', 'Interest III', 'Earn +10 coins per second passively', '🏦🏦🏦', 'passive',
             2500, PassiveIncome(10), recommend_after=('interest-ii',), build_path='economist', tier=4),

    # Synergy
    ShopItem('synergy-boost', 'Synergy Boost', 'All your multipliers gain +20% effectiveness', '✨', 'synergy',
             1000, Synergy(1.20), build_path='balanced', tier=3),
    ShopItem('compound-growth', 'Compound Growth', 'Passive income increases by 50% every minute', '📈',
             'synergy', 2000, CompoundGrowth(1.5), recommend_after=('interest-i',),
             build_path='economist', tier=4),

    # Team auras
    ShopItem('rally-cry', 'Rally Cry', 'Team gets +10% clicks (you get +12.5%)', '📣', 'team-aura',
             1200, TeamAura(team_click_bonus=0.10, buyer_bonus_multiplier=1.25), purchase_type='team',
             build_path='team-player', tier=2),
    ShopItem('war-drums', 'War Drums', 'Team gets +20% clicks (you get +25%)', '🥁', 'team-aura',
             3000, TeamAura(team_click_bonus=0.20, buyer_bonus_multiplier=1.25), purchase_type='team',
             recommend_after=('rally-cry',), build_path='team-player', tier=4),
    ShopItem('battle-hymn', 'Battle Hymn', 'Team gets +40% clicks (you get +50%)', '🎺', 'team-aura',
             7000, TeamAura(team_click_bonus=0.40, buyer_bonus_multiplier=1.25), purchase_type='team',
             recommend_after=('war-drums',), build_path='team-player', tier=5),

    # Team economy
    ShopItem('team-treasury', 'Team Treasury', 'Team gets +15% coins (you get +18.75%)', '💎', 'team-economy',
             1500, TeamAura(team_coin_bonus=0.15, buyer_bonus_multiplier=1.25), purchase_type='team',
             build_path='team-player', tier=2),
    ShopItem('empire-fund', 'Empire Fund', 'Team gets +30% coins (you get +37.5%)', '💎💎', 'team-economy',
             4000, TeamAura(team_coin_bonus=0.30, buyer_bonus_multiplier=1.25), purchase_type='team',
             recommend_after=('team-treasury',), build_path='team-player', tier=4),

    # Sabotage
    ShopItem('minor-sabotage', 'Minor Sabotage', 'Reduce enemy score by 5% immediately', '💣', 'offensive',
             500, InstantDamage(0.05), build_path='aggressor', tier=2),
    ShopItem('major-sabotage', 'Major Sabotage', 'Reduce enemy score by 12% immediately', '💣💣', 'offensive',
             2000, InstantDamage(0.12), recommend_after=('minor-sabotage',), build_path='aggressor', tier=4),
    ShopItem('devastate', 'Devastate', 'Reduce enemy score by 20% immediately', '💣💣💣', 'offensive',
             5000, InstantDamage(0.20), recommend_after=('major-sabotage',), build_path='aggressor', tier=5),

    # Disruption
    ShopItem('coin-heist', 'Coin Heist', 'Steal 500 coins from richest enemy player', '🎭', 'offensive',
             700, InstantSteal(500), build_path='aggressor', tier=2),
    ShopItem('grand-heist', 'Grand Heist', 'Steal 2000 coins from richest enemy player', '🎭🎭', 'offensive',
             3000, InstantSteal(2000), recommend_after=('coin-heist',), build_path='aggressor', tier=4),

    # Comeback
    ShopItem('underdog-bonus', 'Underdog Bonus', '2x personal multiplier while losing by 15%+', '🐶', 'special',
             800, StatBoost(click_multiplier=2.0), condition=Condition(LOSING, 0.15), tier=3),
    ShopItem('desperation', 'Desperation', '3x personal multiplier (only when losing by 30%+)', '🔥', 'special',
             2500, StatBoost(click_multiplier=3.0), condition=Condition(LOSING, 0.30), tier=4),
]

_ITEMS_BY_ID: Dict[str, ShopItem] = {item.id: item for item in SHOP_CATALOG}


BUILD_PATHS: List[BuildPath] = [
    BuildPath(
        id='power-rush',
        name='Power Rush',
        description='Maximize personal click power early',
        strategy=('Buy cheap multipliers immediately to get ahead. Focus on Starter, Power Surge, then Mega '
                  'Force. Ignore economy, just click fast and scale your points.'),
        icon='⚡',
        color='yellow',
        item_sequence=('starter-boost', 'power-surge', 'mega-force', 'ultra-power', 'god-mode'),
        timeline='Min 1: Starter (1.2x), Min 2: Power Surge (1.5x), Min 4: Mega Force (2x), Min 6: Ultra Power (3x)',
    ),
    BuildPath(
        id='economist',
        name='Economist',
        description='Invest in coin generation for late-game power',
        strategy=('Sacrifice early power for a massive late game. Buy Penny Saver, Money Maker and Interest '
                  'items to generate coins, then cash out with big multipliers around minute 4-5.'),
        icon='💰',
        color='green',
        item_sequence=('penny-saver', 'interest-i', 'money-maker', 'interest-ii', 'tycoon', 'ultra-power'),
        timeline='Min 1-3: economy setup, Min 4-6: cash out with high-tier power items',
    ),
    BuildPath(
        id='team-player',
        name='Team Player',
        description='Sacrifice personal power to buff entire team',
        strategy=('Coordinate with teammates. Buy one or two team auras (Rally Cry, War Drums) to give '
                  'everyone a +10-20% boost. Works best with 5+ teammates.'),
        icon='👥',
        color='purple',
        item_sequence=('penny-saver', 'rally-cry', 'starter-boost', 'war-drums', 'power-surge'),
        timeline='Min 2-3: Rally Cry (team +10%), Min 5: War Drums (team +20%), rest: personal boosts',
    ),
    BuildPath(
        id='balanced',
        name='Balanced',
        description='Mix of economy and power for flexibility',
        strategy=('The safe pick. Buy cheap economy early (Penny Saver), then layer in power items '
                  '(Starter, Power Surge, Mega Force). Adapts well to game state.'),
        icon='⚖️',
        color='cyan',
        item_sequence=('starter-boost', 'penny-saver', 'power-surge', 'money-maker', 'mega-force', 'ultra-power'),
        timeline='Mix throughout: always have economy and power scaling together.',
    ),
    BuildPath(
        id='aggressor',
        name='Aggressor',
        description='Attack enemy team with sabotage and disruption',
        strategy=('Get basic economy, then spend on offensive items (Minor Sabotage, Heist, Major Sabotage). '
                  'Reduce enemy score and steal their coins. High risk, high reward.'),
        icon='⚔️',
        color='red',
        item_sequence=('penny-saver', 'starter-boost', 'minor-sabotage', 'coin-heist', 'major-sabotage', 'devastate'),
        timeline='Min 1-2: setup economy, Min 3: Minor Sabotage (enemy -5%), Min 5: Major Sabotage (enemy -12%)',
    ),
]

_PATHS_BY_ID: Dict[str, BuildPath] = {path.id: path for path in BUILD_PATHS}


def get_shop_item(item_id) -> Optional[ShopItem]:
    return _ITEMS_BY_ID.get(item_id)


def get_build_path(path_id) -> Optional[BuildPath]:
    return _PATHS_BY_ID.get(path_id)


def score_margins(mine: float, enemy: float) -> Tuple[float, float]:
    """Return ``(losing_by, winning_by)`` as fractions of the combined score.

    Both are 0 when nobody has scored yet; at most one of them is non-zero.
    """
    total = mine + enemy
    if total <= 0:
        return 0.0, 0.0
    if enemy > mine:
        return (enemy - mine) / total, 0.0
    if mine > enemy:
        return 0.0, (mine - enemy) / total
    return 0.0, 0.0


def get_available_items(player: Player, state: GameState) -> List[ShopItem]:
    """Items the player may see in the shop right now.

    - nothing outside warmup/active (warmup is look-but-don't-buy)
    - team items the player's team already owns are hidden
    - conditional items need the losing/winning margin to reach their threshold
    - items with prerequisites need at least one of them owned (personally or by the team)
    """
    if state.phase not in (Phase.WARMUP, Phase.ACTIVE):
        return []

    team = player.team
    losing_by, winning_by = score_margins(state.scores[team], state.scores[team.enemy])
    team_item_ids = {u.item_id for u in state.team_upgrades[team]}
    owned = set(player.owned_item_ids()) | team_item_ids

    available = []
    for item in SHOP_CATALOG:
        if item.is_team and item.id in team_item_ids:
            continue
        cond = item.condition
        if cond is not None:
            margin = losing_by if cond.kind == LOSING else winning_by
            if margin < cond.threshold:
                continue
        if item.recommend_after and not any(pid in owned for pid in item.recommend_after):
            continue
        available.append(item)
    return available
