"""
Workout Service
Registra gli allenamenti, aggiorna i record personali e prepara storico e progressi
"""

from sqlalchemy import func
import logging

from fittrack.models import db, User, WorkoutEntry, PersonalRecord, RECORD_MAX_WEIGHT
from fittrack.errors import NotFoundError

logger = logging.getLogger(__name__)


def log_workout(user_id: int, fields: dict) -> tuple:
    """
    Salva un workout e controlla se stabilisce un nuovo record.

    Args:
        user_id: id preso dal token verificato
        fields: campi gia' validati (date, exercise_name, sets, reps, weight, duration)

    Returns:
        (WorkoutEntry, PersonalRecord o None)
    """
    # Lock sulla riga utente: i controlli PR dello stesso utente vengono serializzati
    locked = db.session.query(User.id).filter(User.id == user_id).with_for_update().one_or_none()
    if locked is None:
        raise NotFoundError('User associated with this token not found.')

    entry = WorkoutEntry(user_id=user_id, **fields)
    db.session.add(entry)
    db.session.flush()

    record = check_and_record_pr(user_id, entry)
    db.session.commit()

    logger.info('User %s logged %s (entry %s)', user_id, entry.exercise_name, entry.id)
    if record:
        logger.info('New %s record for user %s on %s: %s',
                    record.record_type, user_id, record.exercise_name, record.value)
    return entry, record


def get_best_record(user_id: int, exercise_name: str, record_type: str = RECORD_MAX_WEIGHT):
    """Record migliore attuale (valore piu' alto, a parita' il piu' recente)"""
    return PersonalRecord.query.filter(
        PersonalRecord.user_id == user_id,
        func.lower(PersonalRecord.exercise_name) == func.lower(exercise_name),
        PersonalRecord.record_type == record_type
    ).order_by(
        PersonalRecord.value.desc(),
        PersonalRecord.date.desc(),
        PersonalRecord.id.desc()
    ).first()


def check_and_record_pr(user_id: int, entry: WorkoutEntry):
    """
    Aggiunge un record max_weight se il peso supera strettamente il migliore.
    A parita' di peso il record esistente resta quello corrente.
    Non fa commit: gira dentro la transazione di log_workout.
    """
    if entry.weight is None or entry.weight <= 0:
        return None

    current = get_best_record(user_id, entry.exercise_name)
    if current is not None and entry.weight <= current.value:
        return None

    record = PersonalRecord(
        user_id=user_id,
        exercise_name=entry.exercise_name,
        record_type=RECORD_MAX_WEIGHT,
        value=entry.weight,
        date=entry.date,
        workout_entry_id=entry.id
    )
    db.session.add(record)
    db.session.flush()
    return record


def get_history(user_id: int) -> list:
    return WorkoutEntry.query.filter_by(user_id=user_id).order_by(
        WorkoutEntry.date.desc(),
        WorkoutEntry.created_at.desc(),
        WorkoutEntry.id.desc()
    ).all()


def get_current_records(user_id: int) -> list:
    """Un record per (esercizio, tipo): valore massimo, a parita' la data piu' recente"""
    ranked = db.session.query(
        PersonalRecord.id.label('id'),
        func.row_number().over(
            partition_by=(func.lower(PersonalRecord.exercise_name), PersonalRecord.record_type),
            order_by=(PersonalRecord.value.desc(), PersonalRecord.date.desc(), PersonalRecord.id.desc())
        ).label('position')
    ).filter(PersonalRecord.user_id == user_id).subquery()

    return PersonalRecord.query.join(
        ranked, PersonalRecord.id == ranked.c.id
    ).filter(
        ranked.c.position == 1
    ).order_by(
        func.lower(PersonalRecord.exercise_name),
        PersonalRecord.record_type
    ).all()


def get_progress(user_id: int, exercise_name: str) -> list:
    """Serie storica dei pesi di un esercizio, in ordine cronologico"""
    entries = WorkoutEntry.query.filter(
        WorkoutEntry.user_id == user_id,
        func.lower(WorkoutEntry.exercise_name) == func.lower(exercise_name),
        WorkoutEntry.weight.isnot(None)
    ).order_by(
        WorkoutEntry.date.asc(),
        WorkoutEntry.created_at.asc(),
        WorkoutEntry.id.asc()
    ).all()

    if not entries:
        raise NotFoundError(f'No progress data found for exercise: {exercise_name}')
    return [e.to_progress_point() for e in entries]
