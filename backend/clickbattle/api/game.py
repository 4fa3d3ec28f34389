from flask import Blueprint, jsonify, request, current_app
from clickbattle.services.game import ErrorCode, GameService
from clickbattle.socketio_events import broadcast_state


game = Blueprint('game', __name__)


def _service() -> GameService:
    return current_app.extensions['game_service']


def _error(result, status=None):
    return jsonify({'error': result.message}), status or result.status_code


def _required_str(data, key):
    value = data.get(key)
    if not value or not isinstance(value, str):
        return None
    return value


@game.route('/game', methods=['GET'])
def get_game_state():
    return jsonify(_service().get_state().value)


@game.route('/scoreboard', methods=['GET'])
def get_scoreboard():
    return jsonify(_service().get_scoreboard().value)


@game.route('/join', methods=['POST'])
def join_game():
    data = request.get_json(silent=True) or {}
    service = _service()
    result = service.join(data.get('name'), data.get('team'))
    if not result.ok:
        current_app.logger.info(f"[join-rejected] reason={result.error.value}")
        return _error(result)
    broadcast_state(service)
    return jsonify(result.value)


@game.route('/player/<string:player_id>', methods=['GET'])
def get_player(player_id):
    result = _service().get_player(player_id)
    if not result.ok:
        return _error(result)
    return jsonify(result.value)


@game.route('/click', methods=['POST'])
def click():
    data = request.get_json(silent=True) or {}
    player_id = _required_str(data, 'playerId')
    if not player_id:
        return jsonify({'error': 'Player ID is required'}), 400
    service = _service()
    result = service.register_click(player_id)
    if not result.ok:
        return _error(result)
    broadcast_state(service)
    return jsonify(result.value)


@game.route('/heartbeat', methods=['POST'])
def heartbeat():
    data = request.get_json(silent=True) or {}
    player_id = _required_str(data, 'playerId')
    if not player_id:
        return jsonify({'error': 'Player ID is required'}), 400
    result = _service().heartbeat(player_id)
    if not result.ok:
        return _error(result)
    return jsonify(result.value)


@game.route('/shop', methods=['GET'])
def get_shop():
    player_id = request.args.get('playerId')
    if not player_id:
        return jsonify({'error': 'Player ID is required'}), 400
    result = _service().get_shop(player_id)
    if not result.ok:
        return _error(result)
    return jsonify(result.value)


@game.route('/shop/purchase', methods=['POST'])
def purchase():
    data = request.get_json(silent=True) or {}
    player_id = _required_str(data, 'playerId')
    item_id = _required_str(data, 'itemId')
    if not (player_id and item_id):
        return jsonify({'success': False, 'error': 'Player ID and item ID are required'}), 400
    service = _service()
    result = service.purchase(player_id, item_id)
    if not result.ok:
        current_app.logger.info(
            f"[purchase-rejected] player={player_id} item={item_id} reason={result.error.value}"
        )
        # Every purchase failure is reported as a 400 with a readable reason
        return jsonify({'success': False, 'error': result.message}), 400
    broadcast_state(service)
    return jsonify(result.value)


@game.route('/shop/select-path', methods=['POST'])
def select_build_path():
    data = request.get_json(silent=True) or {}
    player_id = _required_str(data, 'playerId')
    path_id = _required_str(data, 'pathId')
    if not (player_id and path_id):
        return jsonify({'error': 'Player ID and path ID are required'}), 400
    result = _service().select_build_path(player_id, path_id)
    if not result.ok:
        status = 400 if result.error == ErrorCode.PATH_NOT_FOUND else None
        return _error(result, status)
    return jsonify(result.value)


@game.route('/reset', methods=['POST'])
def reset_game():
    service = _service()
    result = service.reset('reset requested over HTTP')
    current_app.logger.info("[reset] requested over HTTP")
    broadcast_state(service)
    return jsonify(result.value)
