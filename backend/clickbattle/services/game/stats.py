import logging
import math
from dataclasses import dataclass, field
from typing import Dict, Iterable, List

from .catalog import (
    LOSING,
    CompoundGrowth,
    PassiveIncome,
    StatBoost,
    Synergy,
    TeamAura,
    get_shop_item,
    score_margins,
)
from .models import Player, Team, TeamUpgrade

logger = logging.getLogger(__name__)

MS_PER_MINUTE = 60000


@dataclass
class PlayerStats:
    click_multiplier: float = 1.0
    coin_multiplier: float = 1.0
    passive_income_rate: float = 0.0
    individual_click_multiplier: float = 1.0
    team_click_multiplier: float = 1.0
    individual_coin_multiplier: float = 1.0
    team_coin_multiplier: float = 1.0
    synergy_active: bool = False
    compound_growth_stacks: int = 0
    losing_margin: float = 0.0
    active_conditional_items: List[str] = field(default_factory=list)

    def to_dict(self):
        return {
            'totalClickMultiplier': self.click_multiplier,
            'totalCoinMultiplier': self.coin_multiplier,
            'passiveIncomeRate': self.passive_income_rate,
            'individualClickMultiplier': self.individual_click_multiplier,
            'teamClickMultiplier': self.team_click_multiplier,
            'individualCoinMultiplier': self.individual_coin_multiplier,
            'teamCoinMultiplier': self.team_coin_multiplier,
            'synergyActive': self.synergy_active,
            'compoundGrowthStacks': self.compound_growth_stacks,
            'losingMargin': self.losing_margin,
            'activeConditionalItems': list(self.active_conditional_items),
        }


def compute_stats(
    player: Player,
    team_upgrades: Iterable[TeamUpgrade],
    scores: Dict[Team, float],
    now: float,
) -> PlayerStats:
    """Compute a player's effective multipliers and passive income.

    Individual multipliers do not stack: the single highest click (and,
    separately, coin) multiplier among owned items applies. Passive income
    does stack. Team auras add to a base of 1.0 for everyone on the team,
    with an extra slice for whoever bought them. The two halves combine
    multiplicatively.
    """
    stats = PlayerStats()
    losing_by, _ = score_margins(scores[player.team], scores[player.team.enemy])
    stats.losing_margin = losing_by

    highest_click = 1.0
    highest_coin = 1.0
    passive = 0.0
    synergy = 1.0
    growth_rate = 1.0

    for purchase in player.purchased_items:
        item = get_shop_item(purchase.item_id)
        if item is None:
            logger.debug(f"[stats] player={player.id} unknown item={purchase.item_id}")
            continue

        cond = item.condition
        if cond is not None:
            # Winning-side conditions are never applied to stats
            if cond.kind != LOSING or losing_by < cond.threshold:
                continue
            stats.active_conditional_items.append(item.id)

        effect = item.effect
        if isinstance(effect, StatBoost):
            if effect.click_multiplier and effect.click_multiplier > highest_click:
                highest_click = effect.click_multiplier
            if effect.coin_multiplier and effect.coin_multiplier > highest_coin:
                highest_coin = effect.coin_multiplier
        elif isinstance(effect, PassiveIncome):
            passive += effect.rate
        elif isinstance(effect, Synergy):
            synergy = effect.factor
            stats.synergy_active = True
        elif isinstance(effect, CompoundGrowth):
            growth_rate = effect.rate
            stats.compound_growth_stacks = max(0, int(math.floor((now - purchase.purchased_at) / MS_PER_MINUTE)))

    stats.individual_click_multiplier = 1 + (highest_click - 1) * synergy
    stats.individual_coin_multiplier = 1 + (highest_coin - 1) * synergy

    if stats.compound_growth_stacks > 0:
        passive *= growth_rate ** stats.compound_growth_stacks
    stats.passive_income_rate = passive

    team_click = 0.0
    team_coin = 0.0
    for upgrade in team_upgrades:
        item = get_shop_item(upgrade.item_id)
        if item is None or not isinstance(item.effect, TeamAura):
            continue
        aura = item.effect
        is_buyer = upgrade.purchased_by == player.id
        if aura.team_click_bonus:
            team_click += aura.team_click_bonus
            if is_buyer:
                team_click += aura.team_click_bonus * aura.buyer_bonus_multiplier - aura.team_click_bonus
        if aura.team_coin_bonus:
            team_coin += aura.team_coin_bonus
            if is_buyer:
                team_coin += aura.team_coin_bonus * aura.buyer_bonus_multiplier - aura.team_coin_bonus

    stats.team_click_multiplier = 1 + team_click
    stats.team_coin_multiplier = 1 + team_coin

    stats.click_multiplier = stats.individual_click_multiplier * stats.team_click_multiplier
    stats.coin_multiplier = stats.individual_coin_multiplier * stats.team_coin_multiplier

    logger.debug(
        f"[stats] player={player.id} click={stats.click_multiplier:.3f} coin={stats.coin_multiplier:.3f} "
        f"passive={stats.passive_income_rate:.3f}"
    )
    return stats
