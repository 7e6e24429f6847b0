"""
Autenticazione: hash password, token JWT e decoratore per le route protette
"""

from flask import current_app, request
from werkzeug.security import generate_password_hash, check_password_hash
from sqlalchemy.exc import IntegrityError
from datetime import datetime, timedelta
from functools import wraps
import jwt
import logging

from fittrack.models import db, User
from fittrack.errors import ConflictError, UnauthorizedError, ForbiddenError

logger = logging.getLogger(__name__)

JWT_ALGORITHM = 'HS256'


def generate_token(user: User) -> str:
    """Firma un token con id e username dell'utente"""
    now = datetime.utcnow()
    payload = {
        'user': {
            'id': user.id,
            'username': user.username
        },
        'iat': now,
        'exp': now + timedelta(hours=current_app.config['JWT_EXPIRATION_HOURS'])
    }
    return jwt.encode(payload, current_app.config['SECRET_KEY'], algorithm=JWT_ALGORITHM)


def decode_token(token: str) -> dict:
    """Ritorna {id, username} dal token o solleva ForbiddenError"""
    try:
        data = jwt.decode(token, current_app.config['SECRET_KEY'], algorithms=[JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        logger.warning('Rejected expired token')
        raise ForbiddenError()
    except jwt.InvalidTokenError as e:
        logger.warning('Rejected invalid token: %s', e)
        raise ForbiddenError()

    identity = data.get('user')
    if not isinstance(identity, dict) or 'id' not in identity:
        logger.warning('Rejected token without user claim')
        raise ForbiddenError()
    return {'id': identity['id'], 'username': identity.get('username')}


def _bearer_token():
    header = request.headers.get('Authorization', '')
    scheme, _, token = header.partition(' ')
    if scheme.lower() != 'bearer' or not token.strip():
        return None
    return token.strip()


def token_required(f):
    """L'handler riceve come primo argomento l'utente del token ({id, username})"""
    @wraps(f)
    def decorated(*args, **kwargs):
        token = _bearer_token()
        if not token:
            raise UnauthorizedError()
        current_user = decode_token(token)
        return f(current_user, *args, **kwargs)
    return decorated


def register_user(username: str, password: str) -> tuple:
    """Crea l'utente e ritorna (user, token)"""
    if User.query.filter_by(username=username).first():
        raise ConflictError(errors={'username': 'User already exists'})

    user = User(
        username=username,
        password_hash=generate_password_hash(password)
    )
    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError:
        # Signup concorrente con lo stesso username
        db.session.rollback()
        raise ConflictError(errors={'username': 'User already exists'})

    logger.info('Registered user %s (id=%s)', user.username, user.id)
    return user, generate_token(user)


def authenticate_user(username: str, password: str) -> tuple:
    """Verifica le credenziali e ritorna (user, token)"""
    user = User.query.filter_by(username=username).first()
    if not user or not check_password_hash(user.password_hash, password):
        logger.warning('Failed login for username %r', username)
        raise UnauthorizedError('Invalid credentials')
    return user, generate_token(user)
