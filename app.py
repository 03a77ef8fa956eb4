"""
Live Trivia - Game Backend

Flask-SocketIO backend API for a live trivia night. The admin authors
questions and reveals answers; players join with the shared game code,
submit answers and follow the leaderboard as scores come in.

App.py is purely server setup and handler registration; game rules live
in game/, persistence in database/.
"""

import logging
from typing import Optional
from flask import Flask
from flask_socketio import SocketIO
from flask_cors import CORS
from werkzeug.middleware.proxy_fix import ProxyFix

from config import settings
from database import configure_database, init_database
from game import GameManager, AdminAuth
from handlers import register_socket_handlers, register_api_handlers, start_reconciliation

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

def create_app(database_url: Optional[str] = None,
               async_mode: Optional[str] = None,
               share_code: Optional[str] = None,
               admin_password: Optional[str] = None,
               reconcile: bool = True,
               testing: bool = False):
    """
    Application factory that creates and configures the Flask app.

    Args:
        database_url: Overrides settings.DATABASE_URL
        async_mode: Socket.IO async mode, defaults to settings.SOCKETIO_ASYNC_MODE
        share_code: Game code seeded on first start
        admin_password: Admin password seeded on first start
        reconcile: Start the periodic sync pass
        testing: Flask testing mode

    Returns:
        Configured Flask app with SocketIO
    """

    # Flask configuration
    app = Flask(__name__)
    app.config['SECRET_KEY'] = settings.SECRET_KEY
    app.config['TESTING'] = testing

    # CORS configuration for the frontend
    CORS(app, origins=settings.CORS_ORIGINS.split(','))

    # ProxyFix for deployment behind reverse proxy
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1)

    # SocketIO configuration
    socketio = SocketIO(
        app,
        cors_allowed_origins=settings.CORS_ORIGINS.split(','),
        async_mode=async_mode or settings.SOCKETIO_ASYNC_MODE,
        ping_timeout=60,
        ping_interval=25
    )

    # Initialize database
    logger.info("Initializing database...")
    configure_database(database_url)
    init_database(share_code=share_code, admin_password=admin_password)

    # Initialize business logic managers
    logger.info("Initializing game managers...")
    game_manager = GameManager()
    admin_auth = AdminAuth(session_hours=settings.ADMIN_SESSION_HOURS)

    # Register handlers (pure routing layer)
    logger.info("Registering handlers...")
    register_socket_handlers(socketio, game_manager)
    register_api_handlers(app, game_manager, admin_auth)

    if reconcile:
        start_reconciliation(socketio, game_manager.change_feed, settings.RECONCILE_INTERVAL_SECONDS)

    app.extensions['game_manager'] = game_manager
    logger.info("Application initialization complete")

    return app, socketio

def main():
    """Main entry point for development server."""

    # Create the application
    app, socketio = create_app()

    logger.info(f"Starting trivia server on port {settings.PORT}")
    logger.info(f"Debug mode: {settings.DEBUG}")
    logger.info(f"CORS origins: {settings.CORS_ORIGINS}")

    # Run the server
    socketio.run(app, debug=settings.DEBUG, port=settings.PORT, host='0.0.0.0')

if __name__ == '__main__':
    main()
