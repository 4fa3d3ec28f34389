import logging
import math
import threading
import time
import uuid
from typing import Callable, List, Optional

from .catalog import (
    BUILD_PATHS,
    InstantDamage,
    InstantSteal,
    TeamAura,
    get_available_items,
    get_build_path,
    get_shop_item,
)
from .models import TEAMS, GameState, Phase, Player, PurchasedItem, Team, TeamUpgrade
from .results import ErrorCode, Result
from .stats import PlayerStats, compute_stats

logger = logging.getLogger(__name__)


def _now_ms() -> float:
    return time.time() * 1000.0


def _coins(value: float) -> float:
    return round(value, 1)


class GameService:
    """Owns the single game and every operation that touches it.

    Time-based effects (warmup ending, passive income, win detection, the
    abandoned-team watchdog) are applied lazily at the top of each public
    operation, using the injected millisecond clock. Public operations never
    raise for expected failures; they return a ``Result``.
    """

    def __init__(
        self,
        clock: Optional[Callable[[], float]] = None,
        warmup_duration_ms: int = 30000,
        win_points_per_player: int = 2000,
        idle_timeout_ms: int = 5000,
        empty_team_reset_ms: int = 15000,
        passive_income_interval_ms: int = 1000,
        max_name_length: int = 32,
    ):
        self._clock = clock or _now_ms
        self._lock = threading.RLock()
        self.warmup_duration_ms = warmup_duration_ms
        self.win_points_per_player = win_points_per_player
        self.idle_timeout_ms = idle_timeout_ms
        self.empty_team_reset_ms = empty_team_reset_ms
        self.passive_income_interval_ms = passive_income_interval_ms
        self.max_name_length = max_name_length
        self.state = self._fresh_state()

    @classmethod
    def from_config(cls, config, clock: Optional[Callable[[], float]] = None) -> 'GameService':
        return cls(
            clock=clock,
            warmup_duration_ms=int(config.get('WARMUP_DURATION_MS', 30000)),
            win_points_per_player=int(config.get('WIN_POINTS_PER_PLAYER', 2000)),
            idle_timeout_ms=int(config.get('IDLE_TIMEOUT_MS', 5000)),
            empty_team_reset_ms=int(config.get('EMPTY_TEAM_RESET_MS', 15000)),
            passive_income_interval_ms=int(config.get('PASSIVE_INCOME_INTERVAL_MS', 1000)),
            max_name_length=int(config.get('MAX_NAME_LENGTH', 32)),
        )

    def _fresh_state(self) -> GameState:
        return GameState(warmup_duration=self.warmup_duration_ms)

    # ---- time-based effects ----

    def _apply_pending(self, now: float) -> None:
        if self._run_watchdog(now):
            return
        self._maybe_start_active(now)
        self._accrue_passive_income(now)
        self._check_winner(now)

    def _active_players(self, team: Team, now: float) -> List[Player]:
        return [p for p in self.state.team_players(team) if now - p.last_seen < self.idle_timeout_ms]

    def _run_watchdog(self, now: float) -> bool:
        """Track teams that have players but nobody connected; reset when one stays empty too long."""
        state = self.state
        for team in TEAMS:
            if state.team_size(team) == 0 or self._active_players(team, now):
                if state.team_empty_since[team] is not None:
                    logger.info(f"[watchdog] team={team.value} back online, timer cleared")
                state.team_empty_since[team] = None
                continue
            since = state.team_empty_since[team]
            if since is None:
                # idle from the moment its most recent player timed out
                since = max(p.last_seen for p in state.team_players(team)) + self.idle_timeout_ms
                state.team_empty_since[team] = since
                logger.info(f"[watchdog] team={team.value} has no connected players, idle since={since:.0f}")
            if now - since >= self.empty_team_reset_ms:
                self._reset(f"team {team.value} abandoned for {int(now - since)}ms")
                return True
        return False

    def _maybe_start_active(self, now: float) -> None:
        state = self.state
        if state.phase != Phase.WARMUP or now - state.warmup_start_time < state.warmup_duration:
            return
        largest = max(state.team_size(team) for team in TEAMS)
        state.win_threshold = largest * self.win_points_per_player
        state.phase = Phase.ACTIVE
        state.started_at = now
        state.last_passive_income_update = now
        logger.info(f"[phase] warmup -> active threshold={state.win_threshold} largest_team={largest}")

    def _accrue_passive_income(self, now: float) -> None:
        state = self.state
        if state.phase != Phase.ACTIVE:
            return
        if state.last_passive_income_update is None:
            state.last_passive_income_update = now
            return
        elapsed = now - state.last_passive_income_update
        if elapsed < self.passive_income_interval_ms:
            return
        seconds = elapsed / 1000.0
        for player in state.players.values():
            rate = self._stats_for(player, now).passive_income_rate
            if rate > 0:
                player.coins += rate * seconds
        state.last_passive_income_update = now

    def _check_winner(self, now: float) -> None:
        state = self.state
        if state.phase != Phase.ACTIVE:
            return
        # teamA is checked first; a simultaneous crossing goes to teamA
        for team in TEAMS:
            if state.scores[team] >= state.win_threshold:
                state.phase = Phase.ENDED
                state.winner = team
                state.ended_at = now
                logger.info(
                    f"[win] winner={team.value} score={state.scores[team]:.1f} threshold={state.win_threshold}"
                )
                return

    def _reset(self, reason: str) -> None:
        logger.info(f"[reset] reason={reason} players={len(self.state.players)} phase={self.state.phase.value}")
        self.state = self._fresh_state()

    # ---- helpers ----

    def _stats_for(self, player: Player, now: float) -> PlayerStats:
        return compute_stats(player, self.state.team_upgrades[player.team], self.state.scores, now)

    def _warmup_remaining(self, now: float) -> Optional[int]:
        state = self.state
        if state.phase != Phase.WARMUP:
            return None
        remaining = state.warmup_duration - (now - state.warmup_start_time)
        return max(0, int(math.ceil(remaining / 1000.0)))

    def _reset_countdown(self, now: float) -> Optional[int]:
        countdowns = []
        for team in TEAMS:
            since = self.state.team_empty_since[team]
            if since is not None:
                remaining = self.empty_team_reset_ms - (now - since)
                countdowns.append(max(0, int(math.ceil(remaining / 1000.0))))
        return min(countdowns) if countdowns else None

    def _richest_enemy(self, player: Player) -> Optional[Player]:
        candidates = [p for p in self.state.team_players(player.team.enemy) if p.coins > 0]
        if not candidates:
            return None
        return max(candidates, key=lambda p: p.coins)

    def _scores_view(self):
        return {team.value: self.state.scores[team] for team in TEAMS}

    def _state_view(self, now: float):
        state = self.state
        return {
            'players': {team.value: [p.to_dict() for p in self._active_players(team, now)] for team in TEAMS},
            'teamSizes': {team.value: state.team_size(team) for team in TEAMS},
            'scores': self._scores_view(),
            'phase': state.phase.value,
            'winner': state.winner.value if state.winner else None,
            'winThreshold': state.win_threshold,
            'warmupTimeRemaining': self._warmup_remaining(now),
            'resetCountdown': self._reset_countdown(now),
            'teamUpgrades': {team.value: [u.item_id for u in state.team_upgrades[team]] for team in TEAMS},
            'startedAt': state.started_at,
            'endedAt': state.ended_at,
        }

    def _player_view(self, player: Player, now: float):
        return {
            'id': player.id,
            'name': player.name,
            'team': player.team.value,
            'joinedAt': player.joined_at,
            'clicks': player.clicks,
            'coins': _coins(player.coins),
            'stats': self._stats_for(player, now).to_dict(),
            'purchasedItems': [p.to_dict() for p in player.purchased_items],
            'selectedBuildPath': player.selected_build_path,
        }

    # ---- read operations ----

    def get_state(self) -> Result:
        with self._lock:
            now = self._clock()
            self._apply_pending(now)
            return Result.success(self._state_view(now))

    def get_scoreboard(self) -> Result:
        with self._lock:
            now = self._clock()
            self._apply_pending(now)
            state = self.state
            a = state.scores[Team.TEAM_A]
            b = state.scores[Team.TEAM_B]
            total = a + b
            bar = 0.0 if total <= 0 else max(-100.0, min(100.0, (a - b) / total * 100.0))
            return Result.success({
                'scores': self._scores_view(),
                'phase': state.phase.value,
                'winner': state.winner.value if state.winner else None,
                'winThreshold': state.win_threshold,
                'barPosition': bar,
            })

    def get_player(self, player_id) -> Result:
        with self._lock:
            now = self._clock()
            self._apply_pending(now)
            player = self.state.players.get(player_id)
            if player is None:
                return Result.failure(ErrorCode.PLAYER_NOT_FOUND, 'Player not found')
            return Result.success(self._player_view(player, now))

    def get_shop(self, player_id) -> Result:
        with self._lock:
            now = self._clock()
            self._apply_pending(now)
            state = self.state
            player = state.players.get(player_id)
            if player is None:
                return Result.failure(ErrorCode.PLAYER_NOT_FOUND, 'Player not found')
            items = []
            for item in get_available_items(player, state):
                data = item.to_dict()
                data['owned'] = player.owns(item.id)
                data['affordable'] = player.coins >= item.cost
                items.append(data)
            return Result.success({
                'items': items,
                'ownedTeamItems': [u.to_dict() for u in state.team_upgrades[player.team]],
                'buildPaths': [path.to_dict() for path in BUILD_PATHS],
                'coins': _coins(player.coins),
                'phase': state.phase.value,
                'canPurchase': state.phase == Phase.ACTIVE,
                'warmupTimeRemaining': self._warmup_remaining(now),
                'selectedBuildPath': player.selected_build_path,
            })

    # ---- mutating operations ----

    def join(self, name, team) -> Result:
        with self._lock:
            now = self._clock()
            self._apply_pending(now)
            state = self.state

            name = name.strip() if isinstance(name, str) else ''
            if not name:
                return Result.failure(ErrorCode.INVALID_NAME, 'Name is required')
            if len(name) > self.max_name_length:
                return Result.failure(
                    ErrorCode.INVALID_NAME, f'Name must be at most {self.max_name_length} characters'
                )
            team = Team.parse(team)
            if team is None:
                return Result.failure(ErrorCode.INVALID_TEAM, 'Team must be "teamA" or "teamB"')
            if state.phase in (Phase.ACTIVE, Phase.ENDED):
                logger.info(f"[join-blocked] name={name!r} phase={state.phase.value}")
                return Result.failure(ErrorCode.JOIN_BLOCKED, 'A game is already in progress, wait for the next one')

            player = Player(id=str(uuid.uuid4()), name=name, team=team, joined_at=now, last_seen=now)
            state.players[player.id] = player
            logger.info(f"[join] player={player.id} name={name!r} team={team.value} phase={state.phase.value}")

            if state.phase == Phase.WAITING and all(state.team_size(t) > 0 for t in TEAMS):
                state.phase = Phase.WARMUP
                state.warmup_start_time = now
                logger.info(f"[phase] waiting -> warmup duration={state.warmup_duration}ms")

            return Result.success({'playerId': player.id, 'gameState': self._state_view(now)})

    def register_click(self, player_id) -> Result:
        with self._lock:
            now = self._clock()
            self._apply_pending(now)
            state = self.state
            player = state.players.get(player_id)
            if player is None:
                return Result.failure(ErrorCode.PLAYER_NOT_FOUND, 'Player not found')

            stats = self._stats_for(player, now)
            player.clicks += 1
            player.coins += stats.coin_multiplier
            state.scores[player.team] += stats.click_multiplier
            player.last_seen = now
            self._check_winner(now)

            return Result.success({
                'scores': self._scores_view(),
                'coins': _coins(player.coins),
                'stats': stats.to_dict(),
            })

    def heartbeat(self, player_id) -> Result:
        with self._lock:
            now = self._clock()
            self._apply_pending(now)
            player = self.state.players.get(player_id)
            if player is None:
                return Result.failure(ErrorCode.PLAYER_NOT_FOUND, 'Player not found')
            player.last_seen = now
            return Result.success({'success': True})

    def select_build_path(self, player_id, path_id) -> Result:
        with self._lock:
            now = self._clock()
            self._apply_pending(now)
            player = self.state.players.get(player_id)
            if player is None:
                return Result.failure(ErrorCode.PLAYER_NOT_FOUND, 'Player not found')
            if get_build_path(path_id) is None:
                return Result.failure(ErrorCode.PATH_NOT_FOUND, 'Build path not found')
            player.selected_build_path = path_id
            return Result.success({'success': True})

    def purchase(self, player_id, item_id) -> Result:
        with self._lock:
            now = self._clock()
            self._apply_pending(now)
            state = self.state

            player = state.players.get(player_id)
            if player is None:
                return Result.failure(ErrorCode.PLAYER_NOT_FOUND, 'Player not found')
            if state.phase != Phase.ACTIVE:
                return Result.failure(ErrorCode.GAME_NOT_ACTIVE, 'The shop only sells while the game is active')
            item = get_shop_item(item_id)
            if item is None:
                return Result.failure(ErrorCode.ITEM_NOT_FOUND, 'Item not found')
            if item.is_team and state.team_owns(player.team, item.id):
                return Result.failure(ErrorCode.ALREADY_OWNED, 'Your team already owns this upgrade')
            if not item.is_team and not item.is_instant and player.owns(item.id):
                return Result.failure(ErrorCode.ALREADY_OWNED, 'You already own this item')
            if player.coins < item.cost:
                return Result.failure(
                    ErrorCode.INSUFFICIENT_FUNDS,
                    f'Not enough coins (need {item.cost:g}, have {player.coins:.1f})',
                )

            extra = {}
            effect = item.effect
            if isinstance(effect, TeamAura):
                player.coins -= item.cost
                state.team_upgrades[player.team].append(
                    TeamUpgrade(item_id=item.id, purchased_at=now, purchased_by=player.id)
                )
            elif isinstance(effect, InstantDamage):
                enemy = player.team.enemy
                before = state.scores[enemy]
                state.scores[enemy] = max(0.0, before - before * effect.fraction)
                player.coins -= item.cost
                player.instant_history.append(PurchasedItem(item_id=item.id, purchased_at=now))
                extra['damage'] = before - state.scores[enemy]
                logger.info(
                    f"[sabotage] player={player.id} item={item.id} enemy={enemy.value} "
                    f"score {before:.1f} -> {state.scores[enemy]:.1f}"
                )
            elif isinstance(effect, InstantSteal):
                victim = self._richest_enemy(player)
                if victim is None:
                    return Result.failure(ErrorCode.NO_VALID_TARGET, 'No enemy player has any coins to steal')
                stolen = min(effect.amount, victim.coins)
                player.coins -= item.cost
                victim.coins -= stolen
                player.coins += stolen
                player.instant_history.append(PurchasedItem(item_id=item.id, purchased_at=now))
                extra['stolen'] = _coins(stolen)
                extra['victimName'] = victim.name
                logger.info(f"[heist] player={player.id} victim={victim.id} stolen={stolen:.1f}")
            else:
                player.coins -= item.cost
                player.purchased_items.append(PurchasedItem(item_id=item.id, purchased_at=now))

            player.last_seen = now
            logger.info(
                f"[purchase] player={player.id} item={item.id} cost={item.cost:g} coins_left={player.coins:.1f}"
            )
            stats = self._stats_for(player, now)
            return Result.success(dict(
                extra,
                success=True,
                itemId=item.id,
                newCoins=_coins(player.coins),
                stats=stats.to_dict(),
            ))

    def reset(self, reason: str = 'manual request') -> Result:
        with self._lock:
            self._reset(reason)
            return Result.success({'message': 'Game reset successfully'})
