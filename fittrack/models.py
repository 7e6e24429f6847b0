from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import event
from sqlalchemy.engine import Engine
from datetime import datetime
import sqlite3

db = SQLAlchemy()

RECORD_MAX_WEIGHT = 'max_weight'


@event.listens_for(Engine, 'connect')
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    """SQLite ignora le FK (e quindi i CASCADE) se non attivate per connessione"""
    if isinstance(dbapi_connection, sqlite3.Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute('PRAGMA foreign_keys=ON')
        cursor.close()


class User(db.Model):
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(255), unique=True, nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    # Relazioni (il DB fa il cascade, l'ORM non carica i figli per cancellarli)
    workout_entries = db.relationship('WorkoutEntry', backref='user', lazy='dynamic',
                                      cascade='all, delete-orphan', passive_deletes=True)
    personal_records = db.relationship('PersonalRecord', backref='user', lazy='dynamic',
                                       cascade='all, delete-orphan', passive_deletes=True)

    def to_public_dict(self) -> dict:
        return {'id': self.id, 'username': self.username}


class WorkoutEntry(db.Model):
    """Singolo esercizio registrato in una data"""
    __tablename__ = 'workout_entries'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'),
                        nullable=False, index=True)
    date = db.Column(db.Date, nullable=False, index=True)
    exercise_name = db.Column(db.String(255), nullable=False)

    sets = db.Column(db.Integer)
    reps = db.Column(db.Integer)
    weight = db.Column(db.Numeric(10, 2, asdecimal=False))  # kg o lbs, a scelta dell'utente
    duration = db.Column(db.Integer)  # secondi

    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'user_id': self.user_id,
            'date': self.date.isoformat(),
            'exercise_name': self.exercise_name,
            'sets': self.sets,
            'reps': self.reps,
            'weight': self.weight,
            'duration': self.duration,
            'created_at': self.created_at.isoformat() if self.created_at else None
        }

    def to_progress_point(self) -> dict:
        return {
            'date': self.date.isoformat(),
            'weight': self.weight,
            'reps': self.reps,
            'sets': self.sets
        }


class PersonalRecord(db.Model):
    """Storico dei record personali: si aggiunge una riga ogni volta che il record migliora"""
    __tablename__ = 'personal_records'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'),
                        nullable=False, index=True)
    exercise_name = db.Column(db.String(255), nullable=False, index=True)
    record_type = db.Column(db.String(50), nullable=False, index=True)  # max_weight
    value = db.Column(db.Numeric(10, 2, asdecimal=False), nullable=False)
    date = db.Column(db.Date, nullable=False)
    workout_entry_id = db.Column(db.Integer, db.ForeignKey('workout_entries.id', ondelete='SET NULL'))

    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'user_id': self.user_id,
            'exercise_name': self.exercise_name,
            'record_type': self.record_type,
            'value': self.value,
            'date': self.date.isoformat(),
            'workout_entry_id': self.workout_entry_id,
            'created_at': self.created_at.isoformat() if self.created_at else None
        }
