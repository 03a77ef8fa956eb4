"""
Socket.IO Event Handlers for the trivia backend.

Pushes change feed events to connected viewers. Clients subscribe to the
tables they show; the admin watches every answer while a player only
receives events about their own. A background reconciliation loop
re-publishes a sync event per table so that a viewer who missed a push
still converges.
"""

import logging
from flask import request
from flask_socketio import emit, join_room, leave_room

from game import ReconciliationLoop
from utils.constants import FEED_TABLES

logger = logging.getLogger(__name__)

LEADERBOARD_ROOM = 'leaderboard'

def _player_room(player_id: str) -> str:
    return f"answers:{player_id}"

def _rooms_for(data):
    """Work out which rooms a subscribe/unsubscribe request names."""
    data = data or {}
    tables = data.get('tables') or list(FEED_TABLES)
    player_id = data.get('player_id')

    rooms = []
    for table in tables:
        if table not in FEED_TABLES:
            continue
        if table == 'answers' and player_id:
            rooms.append(_player_room(player_id))
        else:
            rooms.append(table)
    if data.get('leaderboard'):
        rooms.append(LEADERBOARD_ROOM)
    return rooms

def register_socket_handlers(socketio, game_manager):
    """
    Register all Socket.IO event handlers and bridge the change feed.

    Args:
        socketio: SocketIO instance
        game_manager: Game coordination instance
    """
    change_feed = game_manager.change_feed

    @socketio.on('connect')
    def handle_connect():
        """Handle client connection."""
        logger.info(f"Client connected: {request.sid}")
        emit('connected', {'message': 'Connected to server successfully',
                           'sequence': change_feed.last_sequence})

    @socketio.on('disconnect')
    def handle_disconnect(*args):
        """Handle client disconnection."""
        logger.info(f"Client disconnected: {request.sid}")

    @socketio.on('subscribe')
    def handle_subscribe(data):
        """Join the rooms for the requested tables."""
        rooms = _rooms_for(data)
        for room in rooms:
            join_room(room)
        logger.debug(f"Client {request.sid} subscribed to {rooms}")
        emit('subscribed', {'rooms': rooms, 'sequence': change_feed.last_sequence})

    @socketio.on('unsubscribe')
    def handle_unsubscribe(data):
        """Leave the rooms for the requested tables."""
        rooms = _rooms_for(data)
        for room in rooms:
            leave_room(room)
        emit('unsubscribed', {'rooms': rooms})

    @socketio.on('request_leaderboard')
    def handle_request_leaderboard(data=None):
        """Send the current leaderboard to the asking client only."""
        try:
            emit('leaderboard_snapshot', game_manager.get_leaderboard())
        except Exception as e:
            logger.error(f"Error building leaderboard: {e}")
            emit('error', {'message': 'Failed to load leaderboard'})

    # Change feed bridge

    def forward(event):
        payload = event.to_dict()
        socketio.emit(f"{event.table}_changed", payload, room=event.table)
        if event.table == 'answers' and event.player_id:
            socketio.emit('answers_changed', payload, room=_player_room(event.player_id))
        if event.table in ('players', 'questions'):
            socketio.emit('leaderboard_snapshot', game_manager.get_leaderboard(), room=LEADERBOARD_ROOM)

    for table in FEED_TABLES:
        change_feed.subscribe(table, forward)

    logger.info("Socket handlers registered successfully")

def start_reconciliation(socketio, change_feed, interval_seconds: int) -> ReconciliationLoop:
    """Run the periodic sync pass on a Socket.IO background task."""
    loop = ReconciliationLoop(change_feed, interval_seconds)
    socketio.start_background_task(loop.run, socketio.sleep)
    return loop
