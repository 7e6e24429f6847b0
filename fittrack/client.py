"""
Client HTTP per l'API FitTrack.

Nessuno stato globale di autenticazione: signup/login ritornano un AuthSession
che va passato esplicitamente a ogni chiamata protetta.
"""

from dataclasses import dataclass
from urllib.parse import quote

import requests

DEFAULT_BASE_URL = 'http://localhost:3001'


@dataclass(frozen=True)
class AuthSession:
    token: str
    user: dict

    @property
    def headers(self) -> dict:
        return {'Authorization': f'Bearer {self.token}'}


class ApiClientError(Exception):
    """Risposta non 2xx dall'API"""

    def __init__(self, status_code: int, body):
        self.status_code = status_code
        self.body = body
        message = body.get('error') if isinstance(body, dict) else body
        super().__init__(f'{status_code}: {message}')

    @property
    def field_errors(self) -> dict:
        if isinstance(self.body, dict):
            return self.body.get('errors') or {}
        return {}


class FitTrackClient:

    def __init__(self, base_url: str = DEFAULT_BASE_URL, http=None, timeout: float = 15):
        self.base_url = base_url.rstrip('/')
        self.http = http or requests.Session()
        self.timeout = timeout

    def _request(self, method: str, path: str, session: AuthSession = None, **kwargs):
        headers = session.headers if session else {}
        resp = self.http.request(
            method,
            f'{self.base_url}/api{path}',
            headers=headers,
            timeout=self.timeout,
            **kwargs
        )
        try:
            body = resp.json()
        except ValueError:
            body = resp.text
        if not resp.ok:
            raise ApiClientError(resp.status_code, body)
        return body

    # ── Auth ──

    def signup(self, username: str, password: str) -> AuthSession:
        data = self._request('POST', '/auth/signup', json={'username': username, 'password': password})
        return AuthSession(token=data['token'], user=data['user'])

    def login(self, username: str, password: str) -> AuthSession:
        data = self._request('POST', '/auth/login', json={'username': username, 'password': password})
        return AuthSession(token=data['token'], user=data['user'])

    def verify_token(self, session: AuthSession) -> dict:
        return self._request('GET', '/auth/verify-token', session)

    # ── Workouts ──

    def log_workout(self, session: AuthSession, date: str, exercise_name: str, sets: int, reps: int,
                    weight: float = None, duration: int = None) -> dict:
        payload = {'date': date, 'exercise_name': exercise_name, 'sets': sets, 'reps': reps}
        if weight is not None:
            payload['weight'] = weight
        if duration is not None:
            payload['duration'] = duration
        return self._request('POST', '/workouts', session, json=payload)

    def history(self, session: AuthSession) -> list:
        return self._request('GET', '/workouts/history', session)

    def personal_records(self, session: AuthSession) -> list:
        return self._request('GET', '/workouts/prs', session)

    def progress(self, session: AuthSession, exercise_name: str) -> list:
        return self._request('GET', f'/workouts/progress/{quote(exercise_name, safe="")}', session)
