"""Validazione dei payload JSON in ingresso"""

from datetime import datetime
import math

from flask import request

from fittrack.errors import ValidationError

MIN_USERNAME_LENGTH = 3
MIN_PASSWORD_LENGTH = 6

# Limiti delle colonne INTEGER e NUMERIC(10,2)
MAX_INTEGER = 2147483647
MAX_WEIGHT = 10 ** 8


def get_json_body() -> dict:
    """Body JSON della richiesta, sempre come dict"""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object')
    return data


def _is_int(value) -> bool:
    # bool e' sottoclasse di int, ma True non e' un numero di serie
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return isinstance(value, int) or math.isfinite(value)


def validate_signup(data: dict) -> tuple:
    errors = {}
    username = data.get('username')
    password = data.get('password')

    if not isinstance(username, str) or not username.strip():
        errors['username'] = 'Username is required.'
    elif len(username.strip()) < MIN_USERNAME_LENGTH:
        errors['username'] = f'Username must be at least {MIN_USERNAME_LENGTH} characters long.'

    if not isinstance(password, str) or len(password) < MIN_PASSWORD_LENGTH:
        errors['password'] = f'Password must be at least {MIN_PASSWORD_LENGTH} characters long.'

    if errors:
        raise ValidationError(errors=errors)
    return username.strip(), password


def validate_login(data: dict) -> tuple:
    errors = {}
    username = data.get('username')
    password = data.get('password')

    if not isinstance(username, str) or not username.strip():
        errors['username'] = 'Username is required.'
    if not isinstance(password, str) or not password:
        errors['password'] = 'Password is required.'

    if errors:
        raise ValidationError(errors=errors)
    return username.strip(), password


def validate_workout(data: dict) -> dict:
    """
    Controlla un nuovo workout e ritorna i campi normalizzati.

    date (YYYY-MM-DD), exercise_name, sets e reps sono obbligatori;
    weight e duration possono mancare o essere null.
    """
    errors = {}
    cleaned = {}

    date_str = data.get('date')
    try:
        cleaned['date'] = datetime.strptime(date_str, '%Y-%m-%d').date()
    except (TypeError, ValueError):
        errors['date'] = 'Date must be a valid calendar date (YYYY-MM-DD).'

    exercise_name = data.get('exercise_name')
    if not isinstance(exercise_name, str) or not exercise_name.strip():
        errors['exercise_name'] = 'Exercise name is required.'
    else:
        cleaned['exercise_name'] = exercise_name.strip()

    for field in ('sets', 'reps'):
        value = data.get(field)
        if not _is_int(value) or value < 0:
            errors[field] = f'{field.capitalize()} must be a non-negative integer.'
        elif value > MAX_INTEGER:
            errors[field] = f'{field.capitalize()} must be at most {MAX_INTEGER}.'
        else:
            cleaned[field] = value

    weight = data.get('weight')
    if weight is not None and (not _is_number(weight) or weight < 0):
        errors['weight'] = 'Weight must be a non-negative number.'
    elif weight is not None and round(weight, 2) >= MAX_WEIGHT:
        errors['weight'] = f'Weight must be less than {MAX_WEIGHT}.'
    else:
        cleaned['weight'] = round(float(weight), 2) if weight is not None else None

    # duration puo' essere frazionaria: si salva arrotondata al secondo
    duration = data.get('duration')
    if duration is not None and (not _is_number(duration) or duration < 0):
        errors['duration'] = 'Duration must be a non-negative number.'
    elif duration is not None and duration >= MAX_INTEGER + 0.5:
        errors['duration'] = f'Duration must be at most {MAX_INTEGER}.'
    else:
        cleaned['duration'] = math.floor(duration + 0.5) if duration is not None else None

    if errors:
        raise ValidationError(errors=errors)
    return cleaned
