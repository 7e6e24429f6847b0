"""
Errori applicativi e relativa mappatura HTTP.

Ogni errore previsto dall'API e' una sottoclasse di ApiError: la route o il
servizio la solleva, l'handler registrato in create_app la trasforma in JSON.
"""

from flask import jsonify
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException
import logging

logger = logging.getLogger(__name__)


class ApiError(Exception):
    status_code = 500
    default_message = 'Internal server error'

    def __init__(self, message=None, errors=None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message
        self.errors = errors

    def to_dict(self) -> dict:
        body = {'error': self.message}
        if self.errors:
            body['errors'] = self.errors
        return body


class ValidationError(ApiError):
    status_code = 400
    default_message = 'Validation failed'


class ConflictError(ApiError):
    status_code = 400
    default_message = 'User already exists'


class UnauthorizedError(ApiError):
    status_code = 401
    default_message = 'Access token is missing or invalid'


class ForbiddenError(ApiError):
    status_code = 403
    default_message = 'Token is not valid'


class NotFoundError(ApiError):
    status_code = 404
    default_message = 'Not found'


def register_error_handlers(app, db):
    """Collega le eccezioni alle risposte JSON"""

    @app.errorhandler(ApiError)
    def handle_api_error(error):
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        # 404 di routing, 405, body non JSON...
        return jsonify({'error': error.description}), error.code

    @app.errorhandler(SQLAlchemyError)
    def handle_db_error(error):
        db.session.rollback()
        logger.exception('Database error')
        return jsonify({'error': 'Internal server error'}), 500

    @app.errorhandler(Exception)
    def handle_unexpected_error(error):
        db.session.rollback()
        logger.exception('Unhandled error')
        return jsonify({'error': 'Internal server error'}), 500
