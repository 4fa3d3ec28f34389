import pytest

from clickbattle.services.game import stats as stats_module
from clickbattle.services.game.catalog import WINNING, Condition, ShopItem, StatBoost, get_shop_item
from clickbattle.services.game.models import Player, PurchasedItem, Team, TeamUpgrade
from clickbattle.services.game.stats import compute_stats

NOW = 10_000_000.0


def make_player(*item_ids, team=Team.TEAM_A, player_id='p1', bought_at=NOW):
    player = Player(id=player_id, name='Tester', team=team, joined_at=0, last_seen=NOW)
    player.purchased_items = [PurchasedItem(item_id=i, purchased_at=bought_at) for i in item_ids]
    return player


def scores(a=0.0, b=0.0):
    return {Team.TEAM_A: a, Team.TEAM_B: b}


def test_no_items_gives_base_stats():
    result = compute_stats(make_player(), [], scores(), NOW)
    assert result.click_multiplier == 1.0
    assert result.coin_multiplier == 1.0
    assert result.passive_income_rate == 0.0
    assert result.team_click_multiplier == 1.0


def test_highest_click_multiplier_wins_instead_of_stacking():
    result = compute_stats(make_player('starter-boost', 'mega-force'), [], scores(), NOW)
    assert result.individual_click_multiplier == pytest.approx(2.0)
    assert result.click_multiplier == pytest.approx(2.0)
    # coin multiplier is tracked separately
    assert result.coin_multiplier == 1.0


def test_coin_multiplier_highest_wins_independently():
    result = compute_stats(make_player('penny-saver', 'tycoon', 'starter-boost'), [], scores(), NOW)
    assert result.individual_coin_multiplier == pytest.approx(3.0)
    assert result.individual_click_multiplier == pytest.approx(1.2)


def test_passive_income_stacks_additively():
    result = compute_stats(make_player('interest-i', 'interest-ii', 'interest-iii'), [], scores(), NOW)
    assert result.passive_income_rate == pytest.approx(14.0)


def test_synergy_scales_only_the_bonus_portion():
    result = compute_stats(make_player('mega-force', 'penny-saver', 'synergy-boost'), [], scores(), NOW)
    assert result.synergy_active
    assert result.individual_click_multiplier == pytest.approx(2.2)
    assert result.individual_coin_multiplier == pytest.approx(1.6)


def test_synergy_without_multipliers_changes_nothing():
    result = compute_stats(make_player('synergy-boost'), [], scores(), NOW)
    assert result.click_multiplier == pytest.approx(1.0)


def test_compound_growth_multiplies_passive_income_per_full_minute():
    player = make_player('interest-i', 'compound-growth', bought_at=NOW)
    assert compute_stats(player, [], scores(), NOW + 59_999).passive_income_rate == pytest.approx(1.0)
    one_minute = compute_stats(player, [], scores(), NOW + 60_000)
    assert one_minute.compound_growth_stacks == 1
    assert one_minute.passive_income_rate == pytest.approx(1.5)
    assert compute_stats(player, [], scores(), NOW + 150_000).passive_income_rate == pytest.approx(2.25)


def test_losing_only_item_applies_past_threshold():
    player = make_player('underdog-bonus')
    behind = compute_stats(player, [], scores(40, 60), NOW)
    assert behind.losing_margin == pytest.approx(0.2)
    assert behind.click_multiplier == pytest.approx(2.0)
    assert behind.active_conditional_items == ['underdog-bonus']

    close = compute_stats(player, [], scores(45, 55), NOW)
    assert close.click_multiplier == pytest.approx(1.0)
    assert close.active_conditional_items == []


def test_losing_only_item_inactive_before_anyone_scores():
    result = compute_stats(make_player('desperation'), [], scores(0, 0), NOW)
    assert result.losing_margin == 0.0
    assert result.click_multiplier == 1.0


def test_losing_margin_is_relative_to_player_team():
    player = make_player('underdog-bonus', team=Team.TEAM_B)
    assert compute_stats(player, [], scores(60, 40), NOW).click_multiplier == pytest.approx(2.0)
    assert compute_stats(player, [], scores(40, 60), NOW).click_multiplier == pytest.approx(1.0)


def test_winning_only_items_never_contribute(monkeypatch):
    lead_item = ShopItem('front-runner', 'Front Runner', 'test', '*', 'special', 10,
                         StatBoost(click_multiplier=4.0), condition=Condition(WINNING, 0.1))

    def fake_lookup(item_id):
        return lead_item if item_id == 'front-runner' else get_shop_item(item_id)

    monkeypatch.setattr(stats_module, 'get_shop_item', fake_lookup)
    result = compute_stats(make_player('front-runner'), [], scores(90, 10), NOW)
    assert result.click_multiplier == pytest.approx(1.0)


def test_team_aura_buyer_gets_amplified_bonus():
    upgrades = [TeamUpgrade(item_id='rally-cry', purchased_at=NOW, purchased_by='buyer')]
    buyer = compute_stats(make_player(player_id='buyer'), upgrades, scores(), NOW)
    teammate = compute_stats(make_player(player_id='mate'), upgrades, scores(), NOW)
    assert buyer.team_click_multiplier == pytest.approx(1.125)
    assert teammate.team_click_multiplier == pytest.approx(1.10)
    assert teammate.team_coin_multiplier == 1.0


def test_team_auras_stack_additively():
    upgrades = [
        TeamUpgrade(item_id='rally-cry', purchased_at=NOW, purchased_by='buyer'),
        TeamUpgrade(item_id='war-drums', purchased_at=NOW, purchased_by='buyer'),
        TeamUpgrade(item_id='team-treasury', purchased_at=NOW, purchased_by='other'),
    ]
    buyer = compute_stats(make_player(player_id='buyer'), upgrades, scores(), NOW)
    assert buyer.team_click_multiplier == pytest.approx(1.375)
    assert buyer.team_coin_multiplier == pytest.approx(1.15)
    teammate = compute_stats(make_player(player_id='mate'), upgrades, scores(), NOW)
    assert teammate.team_click_multiplier == pytest.approx(1.30)


def test_individual_and_team_combine_multiplicatively():
    upgrades = [TeamUpgrade(item_id='rally-cry', purchased_at=NOW, purchased_by='someone-else')]
    result = compute_stats(make_player('mega-force'), upgrades, scores(), NOW)
    assert result.click_multiplier == pytest.approx(2.2)


def test_unknown_items_are_skipped():
    result = compute_stats(make_player('no-such-item', 'starter-boost'), [], scores(), NOW)
    assert result.click_multiplier == pytest.approx(1.2)


def test_to_dict_exposes_breakdown():
    data = compute_stats(make_player('starter-boost'), [], scores(), NOW).to_dict()
    assert data['totalClickMultiplier'] == pytest.approx(1.2)
    assert data['individualClickMultiplier'] == pytest.approx(1.2)
    assert data['teamClickMultiplier'] == 1.0
    assert data['passiveIncomeRate'] == 0.0
