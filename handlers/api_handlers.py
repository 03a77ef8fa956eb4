"""
API Route Handlers for the trivia backend.

Pure routing layer that delegates to the game managers.
Contains no business logic - only request/response handling and the
admin session check.
"""

import logging
from functools import wraps
from flask import jsonify, request, session

from utils.exceptions import TriviaError, ValidationError
from .errors import error_response

logger = logging.getLogger(__name__)

ADMIN_SESSION_KEY = 'admin_issued_at'

def _json_body():
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data

def register_api_handlers(app, game_manager, admin_auth):
    """
    Register all API route handlers.

    Args:
        app: Flask application instance
        game_manager: Game coordination instance
        admin_auth: Admin password/session checker
    """
    questions = game_manager.question_manager
    answers = game_manager.answer_manager
    players = game_manager.player_manager
    scoring = game_manager.scoring

    def admin_required(view):
        """Reject the request unless a live admin session is present."""
        @wraps(view)
        def wrapper(*args, **kwargs):
            admin_session = admin_auth.restore_session(session.get(ADMIN_SESSION_KEY))
            if admin_session is None:
                session.pop(ADMIN_SESSION_KEY, None)
                return error_response(401, 'admin_session_required', 'Admin login required')
            return view(*args, **kwargs)
        return wrapper

    # ==========================================================================
    # PUBLIC ROUTES
    # ==========================================================================

    @app.route('/api/health')
    def health_check():
        """Health check endpoint."""
        health = game_manager.get_health()
        status = 200 if health.get('connected') else 503
        return jsonify(health), status

    @app.route('/api/players', methods=['POST'])
    def join_game():
        """Join with a display name and the shared game code."""
        data = _json_body()
        player = players.join_game(data.get('name'), data.get('share_code'))
        return jsonify({'player': player.to_dict(), 'message': f"Welcome, {player.name}!"}), 201

    @app.route('/api/players/rejoin', methods=['POST'])
    def rejoin_game():
        """Resume a session with a personal join code."""
        data = _json_body()
        player = players.rejoin_game(data.get('join_code'))
        return jsonify({'player': player.to_dict(), 'message': f"Welcome back, {player.name}!"})

    @app.route('/api/players/<player_id>/questions')
    def get_player_questions(player_id):
        """Active questions with this player's answers."""
        return jsonify(game_manager.get_player_sheet(player_id))

    @app.route('/api/players/<player_id>/answers/<question_id>', methods=['PUT'])
    def submit_answer(player_id, question_id):
        """Create or replace this player's answer to a question."""
        data = _json_body()
        answer = answers.submit_answer(player_id, question_id, data.get('answer_text'))
        return jsonify({'answer': answer.to_dict()})

    @app.route('/api/leaderboard')
    def get_leaderboard():
        """Players by score and the revealed questions."""
        return jsonify(game_manager.get_leaderboard())

    # ==========================================================================
    # ADMIN ROUTES
    # ==========================================================================

    @app.route('/api/admin/login', methods=['POST'])
    def admin_login():
        """Check the admin password and start a session."""
        data = _json_body()
        admin_session = admin_auth.authenticate(data.get('password'))
        session[ADMIN_SESSION_KEY] = admin_session.issued_at.isoformat()
        return jsonify({'session': admin_session.to_dict(), 'message': 'Welcome, Admin!'})

    @app.route('/api/admin/logout', methods=['POST'])
    def admin_logout():
        """End the admin session."""
        session.pop(ADMIN_SESSION_KEY, None)
        return jsonify({'message': 'Logged out'})

    @app.route('/api/admin/dashboard')
    @admin_required
    def admin_dashboard():
        """Questions, player count, revealed count and share code."""
        return jsonify(game_manager.get_dashboard())

    @app.route('/api/players')
    @admin_required
    def list_players():
        """All players, newest first."""
        all_players = players.list_players()
        return jsonify({'players': [p.to_dict() for p in all_players], 'count': len(all_players)})

    @app.route('/api/players/<player_id>', methods=['DELETE'])
    @admin_required
    def delete_player(player_id):
        """Delete a player and their answers."""
        players.delete_player(player_id)
        return jsonify({'message': 'Player deleted'})

    @app.route('/api/questions', methods=['POST'])
    @admin_required
    def create_question():
        """Add a question at the end of the list."""
        data = _json_body()
        question = questions.create_question(
            question_text=data.get('question_text'),
            question_type=data.get('question_type', 'freeform'),
            options=data.get('options'),
            points=data.get('points')
        )
        return jsonify({'question': question.to_dict()}), 201

    @app.route('/api/questions/order', methods=['PUT'])
    @admin_required
    def reorder_questions():
        """Store a new question order."""
        data = _json_body()
        ordered = questions.reorder(data.get('question_ids'))
        return jsonify({'questions': [q.to_dict() for q in ordered]})

    @app.route('/api/questions/<question_id>', methods=['PATCH'])
    @admin_required
    def edit_question(question_id):
        """Edit text, type, options, points or revealed state."""
        question = questions.edit_question(question_id, _json_body())
        return jsonify({'question': question.to_dict()})

    @app.route('/api/questions/<question_id>', methods=['DELETE'])
    @admin_required
    def delete_question(question_id):
        """Delete a question."""
        questions.delete_question(question_id)
        return jsonify({'message': 'Question deleted'})

    @app.route('/api/questions/<question_id>/reveal', methods=['POST'])
    @admin_required
    def reveal_question(question_id):
        """Publish the correct answer."""
        data = _json_body()
        question = scoring.reveal_question(question_id, data.get('correct_answer'))
        return jsonify({'question': question.to_dict()})

    @app.route('/api/questions/<question_id>/answers')
    @admin_required
    def get_question_answers(question_id):
        """Every answer to a question, with its player."""
        question_answers = answers.get_question_answers(question_id)
        return jsonify({'answers': [a.to_dict(include_player=True) for a in question_answers]})

    @app.route('/api/answers/<answer_id>/correct', methods=['POST'])
    @admin_required
    def mark_correct(answer_id):
        """Grade an answer correct and credit its player once."""
        data = _json_body()
        answer = scoring.mark_correct(answer_id, data.get('player_id'), data.get('points'))
        return jsonify({'answer': answer.to_dict()})

    @app.route('/api/answers/<answer_id>/incorrect', methods=['POST'])
    @admin_required
    def mark_incorrect(answer_id):
        """Grade an answer incorrect, taking back earned points."""
        data = _json_body()
        answer = scoring.mark_incorrect(answer_id, data.get('player_id'))
        return jsonify({'answer': answer.to_dict()})

    @app.route('/api/game/reset', methods=['POST'])
    @admin_required
    def reset_game():
        """Remove players and answers; delete or un-reveal questions."""
        data = _json_body()
        result = game_manager.reset_game(delete_questions=data.get('delete_questions') is True)
        return jsonify({'result': result, 'message': 'Game reset successfully!'})

    @app.route('/api/game/recompute-scores', methods=['POST'])
    @admin_required
    def recompute_scores():
        """Rebuild player totals from graded answers."""
        changed = scoring.recompute_scores()
        return jsonify({'changed': changed, 'message': f'Recomputed {len(changed)} player scores'})

    # Error handlers
    @app.errorhandler(TriviaError)
    def trivia_error(error):
        """Map game errors to their HTTP status."""
        logger.info(f"{request.method} {request.path} failed: {error.code}: {error.message}")
        return error_response(error.status_code, error.code, error.message, error.details)

    @app.errorhandler(404)
    def not_found(error):
        """Handle 404 errors."""
        return error_response(404, 'not_found', 'Not found')

    @app.errorhandler(405)
    def method_not_allowed(error):
        """Handle 405 errors."""
        return error_response(405, 'method_not_allowed', 'Method not allowed')

    @app.errorhandler(500)
    def internal_error(error):
        """Handle 500 errors."""
        logger.error(f"Internal error on {request.path}: {error}")
        return error_response(500, 'internal_error', 'Internal server error')

    logger.info("API handlers registered successfully")
