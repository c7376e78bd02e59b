import os
import logging
from datetime import datetime
from uuid import uuid4

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# --- Flask specific imports ---
from flask import Flask, request, g
from flask_cors import CORS

# --- Import our configuration and the Spotify adapter ---
from spotiproxy.config import Config
from spotiproxy.errors import register_error_handlers
from spotiproxy.middleware import init_token_refresh
from spotiproxy.settings import load_credentials
from spotiproxy.spotify_client import SpotifyClientAdapter
from spotiproxy.token_state import TokenStore
from spotiproxy.interfaces.http.routes import auth_bp, library_bp, health_bp
from spotiproxy.observability import configure_structured_logging, metrics_blueprint


logger = logging.getLogger(__name__)


def configure_logging(log_dir: str, enable_console: bool = False) -> str:
    """
    Configure root logging with:
      - FileHandler (INFO+) to a new file per run: log-YYYY-MM-DD-HH-MM-SS
      - StreamHandler (WARNING+) to console when enabled
      - Werkzeug/Flask loggers routed to root (no extra console spam)

    Returns the path to the created log file.
    """
    os.makedirs(log_dir, exist_ok=True)

    timestamp = datetime.now().strftime("%Y-%m-%d-%H-%M-%S")
    log_path = os.path.join(log_dir, f"log-{timestamp}")

    root = logging.getLogger()
    root.setLevel(logging.INFO)

    # Preserve structured handlers; remove existing FileHandlers to avoid duplicates
    root.handlers = [h for h in root.handlers if not isinstance(h, logging.FileHandler)]

    formatter = logging.Formatter(
        fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    file_handler = logging.FileHandler(log_path, encoding='utf-8')
    file_handler.setLevel(logging.INFO)
    file_handler.setFormatter(formatter)
    root.addHandler(file_handler)

    if enable_console:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.WARNING)
        console_handler.setFormatter(formatter)
        root.addHandler(console_handler)

    # Quiet Flask/Werkzeug own console handlers; let them propagate to root
    for name in ("werkzeug", "flask.app"):
        _l = logging.getLogger(name)
        _l.setLevel(logging.INFO)
        _l.handlers = []
        _l.propagate = True

    return log_path


def create_app(overrides=None, *, spotify_factory=None, http_session=None):
    """Build the Flask app.

    ``overrides`` is merged over :class:`spotiproxy.config.Config`; ``spotify_factory``
    and ``http_session`` replace the upstream collaborators (used by tests).
    Raises :class:`spotiproxy.errors.ConfigurationError` when the Spotify
    credentials are missing.
    """
    app = Flask(__name__)
    app.config.from_object(Config)
    if overrides:
        app.config.update(overrides)

    configure_structured_logging(app)

    # Fails fast: the proxy is useless without client credentials
    credentials = load_credentials(app.config)

    @app.before_request
    def _assign_request_id():
        g.request_id = request.headers.get('X-Request-ID') or uuid4().hex

    @app.after_request
    def _inject_request_id(response):
        if getattr(g, 'request_id', None):
            response.headers.setdefault('X-Request-ID', g.request_id)
        return response

    cache_control = app.config.get('CACHE_CONTROL')
    if cache_control:

        @app.after_request
        def _apply_cache_control(response):
            response.headers.setdefault('Cache-Control', cache_control)
            return response

    allowed_origins = [origin for origin in app.config.get('CORS_ALLOWED_ORIGINS') or [] if origin]
    if allowed_origins:
        CORS(
            app,
            resources={r"/*": {"origins": "*" if "*" in allowed_origins else allowed_origins}},
            expose_headers=["X-Request-ID"],
        )

    # Single token store shared by every request, exposed for routes via extensions
    token_store = TokenStore()
    app.extensions['token_store'] = token_store
    app.extensions['spotify_adapter'] = SpotifyClientAdapter(
        credentials,
        token_store,
        session=http_session,
        spotify_factory=spotify_factory,
        timeout=float(app.config['UPSTREAM_TIMEOUT_SECONDS']),
        album_search_strategy=app.config['ALBUM_SEARCH_STRATEGY'],
    )
    app.logger.info(
        "Spotify adapter ready: redirect_uri=%s, scopes=%d, album_search=%s",
        credentials.redirect_uri,
        len(credentials.scopes),
        app.config['ALBUM_SEARCH_STRATEGY'],
    )

    init_token_refresh(app)
    register_error_handlers(app)

    # --- Register Blueprints ---
    app.register_blueprint(health_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(library_bp)
    app.register_blueprint(metrics_blueprint)

    return app


def main() -> None:
    """Run the development server configured from the environment."""
    # Configure logging:
    # - In debug with reloader: only in the child process to avoid duplicate files
    # - In non-debug: always configure here
    debug_mode = bool(Config.DEBUG)
    if not debug_mode or os.environ.get('WERKZEUG_RUN_MAIN') == 'true':
        log_file_path = configure_logging(Config.LOG_DIR, enable_console=Config.ENABLE_CONSOLE_LOGS)
        logger.info("File logging initialized at %s", log_file_path)

    app = create_app()
    logger.info("API app start on port %s", Config.PORT)
    app.run(debug=debug_mode, host='0.0.0.0', port=Config.PORT, threaded=True)


if __name__ == '__main__':
    main()
