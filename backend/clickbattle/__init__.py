from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
import click
from config import Config

socketio = SocketIO(async_mode=None)


def create_app(config_class=Config, clock=None):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    allowed_origins = flask_app.config.get('CORS_ORIGINS') or '*'

    CORS(flask_app, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # One game per app; request handlers find it through app.extensions
    from clickbattle.services.game import GameService
    flask_app.extensions['game_service'] = GameService.from_config(flask_app.config, clock=clock)

    from clickbattle.main import main
    flask_app.register_blueprint(main)

    from clickbattle.api.game import game
    flask_app.register_blueprint(game, url_prefix='/api')

    # Register Socket.IO event handlers
    from clickbattle.socketio_events import register_socketio_handlers
    register_socketio_handlers()

    @click.command('shop-catalog')
    def shop_catalog_command():
        """Prints every shop item with its cost and prerequisites."""
        from clickbattle.services.game.catalog import SHOP_CATALOG
        for item in SHOP_CATALOG:
            prereqs = ', '.join(item.recommend_after) or '-'
            click.echo(f"{item.id:<16} {item.purchase_type:<10} {item.cost:>7g}  tier={item.tier}  after={prereqs}")

    @click.command('build-paths')
    def build_paths_command():
        """Prints the suggested build paths."""
        from clickbattle.services.game.catalog import BUILD_PATHS
        for path in BUILD_PATHS:
            click.echo(f"{path.id:<12} {path.name}: {' -> '.join(path.item_sequence)}")

    flask_app.cli.add_command(shop_catalog_command)
    flask_app.cli.add_command(build_paths_command)

    return flask_app
