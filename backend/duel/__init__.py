from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
import click
from config import Config

socketio = SocketIO(async_mode=None)

def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    allowed_origins = flask_app.config.get('CORS_ORIGINS', [])
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    from duel.broadcast import Broadcaster
    from duel.services.match import MatchRules, RoomRegistry, make_scheduler

    namespace = flask_app.config.get('SOCKETIO_NAMESPACE', '/ws')
    registry = RoomRegistry(
        Broadcaster(socketio, namespace),
        make_scheduler(flask_app.config.get('SCHEDULER_MODE', 'background'), socketio),
        MatchRules.from_config(flask_app.config),
    )
    flask_app.extensions['room_registry'] = registry

    from duel.main import main
    flask_app.register_blueprint(main)

    # Register Socket.IO event handlers against this app's registry
    from duel.socketio_events import register_socketio_handlers
    register_socketio_handlers(socketio, registry, namespace=namespace)

    @click.command('probe-latency')
    @click.option('--url', default='http://localhost:5000', show_default=True, help='Match server base URL.')
    @click.option('--samples', default=5, show_default=True, type=click.IntRange(1, 100))
    @click.option('--timeout', default=2.0, show_default=True, help='Seconds to wait for each pong.')
    def probe_latency_command(url, samples, timeout):
        """Measures round-trip time to a running match server."""
        from duel.client import MatchClient
        client = MatchClient(
            namespace=namespace,
            lag_buffer_ms=flask_app.config.get('CLIENT_LAG_BUFFER_MS', 100),
        )
        client.connect(url)
        try:
            rtts = []
            for i in range(samples):
                rtt = client.probe_latency(timeout=timeout)
                if rtt is None:
                    click.echo(f"probe {i + 1}: timeout")
                else:
                    rtts.append(rtt)
                    click.echo(f"probe {i + 1}: {rtt:.1f} ms")
            if rtts:
                click.echo(f"avg {sum(rtts) / len(rtts):.1f} ms over {len(rtts)} probes")
        finally:
            client.disconnect()

    flask_app.cli.add_command(probe_latency_command)

    return flask_app
