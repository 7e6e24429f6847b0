"""
FitTrack - Flask API per allenamenti e record personali
"""

from flask import Flask, jsonify, send_from_directory
from flask_cors import CORS
from datetime import datetime
from sqlalchemy import text
import logging

from config import Config
from fittrack.models import db, User
from fittrack.errors import NotFoundError, register_error_handlers
from fittrack.auth import token_required, register_user, authenticate_user
from fittrack.validation import get_json_body, validate_signup, validate_login, validate_workout
from fittrack import workouts

logger = logging.getLogger(__name__)


def create_app(config_class=Config):
    app = Flask(__name__, static_folder='../static', static_url_path='')
    app.config.from_object(config_class)

    # Init extensions
    db.init_app(app)
    CORS(app, origins=app.config['CORS_ORIGINS'])
    register_error_handlers(app, db)

    # Create tables
    with app.app_context():
        db.create_all()
        try:
            db.session.execute(text('SELECT 1'))
            logger.info('Database ready (%s)', db.engine.url.render_as_string(hide_password=True))
        except Exception:
            logger.exception('Database connection check failed')
            db.session.rollback()

    # ========== AUTH ROUTES ==========

    @app.route('/api/auth/signup', methods=['POST'])
    def signup():
        """Registra un nuovo utente e ritorna subito il token"""
        username, password = validate_signup(get_json_body())
        user, token = register_user(username, password)
        return jsonify({'token': token, 'user': user.to_public_dict()}), 201

    @app.route('/api/auth/login', methods=['POST'])
    def login():
        """Login e ottieni token JWT"""
        username, password = validate_login(get_json_body())
        user, token = authenticate_user(username, password)
        return jsonify({'token': token, 'user': user.to_public_dict()})

    @app.route('/api/auth/verify-token', methods=['GET'])
    @token_required
    def verify_token(current_user):
        """Conferma che il token sia valido e che l'utente esista ancora"""
        user = db.session.get(User, current_user['id'])
        if not user:
            raise NotFoundError('User associated with this token not found.')
        return jsonify(user.to_public_dict())

    # ========== WORKOUTS ==========

    @app.route('/api/workouts', methods=['POST'], strict_slashes=False)
    @token_required
    def log_workout(current_user):
        """Registra un workout e l'eventuale nuovo record"""
        fields = validate_workout(get_json_body())
        entry, record = workouts.log_workout(current_user['id'], fields)
        return jsonify({
            'message': 'Workout logged successfully',
            'workoutEntry': entry.to_dict(),
            'personalRecordUpdate': record.to_dict() if record else None
        }), 201

    @app.route('/api/workouts/history', methods=['GET'])
    @token_required
    def get_history(current_user):
        """Tutti i workout, dal piu' recente"""
        return jsonify([e.to_dict() for e in workouts.get_history(current_user['id'])])

    @app.route('/api/workouts/prs', methods=['GET'])
    @token_required
    def get_personal_records(current_user):
        """Record attuali per esercizio"""
        return jsonify([r.to_dict() for r in workouts.get_current_records(current_user['id'])])

    @app.route('/api/workouts/progress/<path:exercise_name>', methods=['GET'])
    @token_required
    def get_progress(current_user, exercise_name):
        """Andamento del peso per un esercizio"""
        return jsonify(workouts.get_progress(current_user['id'], exercise_name))

    # ========== HEALTH CHECK ==========

    @app.route('/api/health', methods=['GET'])
    def health_check():
        return jsonify({
            'status': 'ok',
            'timestamp': datetime.utcnow().isoformat()
        })

    @app.route('/', methods=['GET'])
    def index():
        """Client single-page"""
        return send_from_directory(app.static_folder, 'index.html')

    return app
