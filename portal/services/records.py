"""
The per-patient medical record and its doctor-authored entries.

Every operation takes the acting user explicitly, checks it against the
access resolver first, then touches the record.  A successful write
notifies the patient.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Tuple

import bleach
from django.utils import timezone

from portal.exceptions import AccessDenied, NotFoundError
from portal.models import (
    Appointment,
    Comment,
    Diagnostic,
    Disease,
    MedicalRecord,
    Prescription,
    User,
)
from portal.services import notifications
from portal.services.access import (
    Actor,
    Mode,
    delegating_doctor_ids,
    require_access,
    resolve_appointment_doctor,
)
from portal.services.accounts import serialize_person

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EntryKind:
    name: str
    model: Any
    mode: Mode
    label: str
    # (model field, response key)
    fields: Tuple[Tuple[str, str], ...]
    text_fields: Tuple[str, ...]

    @property
    def title(self) -> str:
        return self.name.capitalize()


KINDS: Dict[str, EntryKind] = {
    'appointment': EntryKind(
        'appointment', Appointment, Mode.WRITE_APPOINTMENT, 'appointment',
        (('date', 'date'), ('reason', 'reason'), ('notes', 'notes')),
        ('reason', 'notes'),
    ),
    'prescription': EntryKind(
        'prescription', Prescription, Mode.WRITE_OTHER, 'prescription',
        (('medication', 'medication'), ('dosage', 'dosage'), ('duration', 'duration'),
         ('instructions', 'instructions')),
        ('medication', 'dosage', 'duration', 'instructions'),
    ),
    'disease': EntryKind(
        'disease', Disease, Mode.WRITE_OTHER, 'diagnosis',
        (('name', 'name'), ('diagnosed_date', 'diagnosedDate'), ('status', 'status'), ('notes', 'notes')),
        ('name', 'notes'),
    ),
    'diagnostic': EntryKind(
        'diagnostic', Diagnostic, Mode.WRITE_OTHER, 'diagnostic test',
        (('test_name', 'testName'), ('test_date', 'testDate'), ('results', 'results'), ('notes', 'notes')),
        ('test_name', 'results', 'notes'),
    ),
    'comment': EntryKind(
        'comment', Comment, Mode.WRITE_OTHER, 'comment',
        (('text', 'text'),),
        ('text',),
    ),
}


def get_kind(name: str) -> EntryKind:
    kind = KINDS.get(name)
    if kind is None:
        raise NotFoundError(f'Unknown record entry type: {name}')
    return kind


def _clean(value):
    if isinstance(value, str):
        return bleach.clean(value.strip(), strip=True)
    return value


def _get_patient(patient_id: int) -> User:
    patient = User.objects.filter(pk=patient_id, role=User.ROLE_PATIENT).first()
    if patient is None:
        raise NotFoundError('Patient not found')
    return patient


def serialize_entry(kind: EntryKind, entry) -> dict:
    data = {'id': entry.id, 'doctorId': entry.doctor_id}
    for field, key in kind.fields:
        value = getattr(entry, field)
        data[key] = value.isoformat() if hasattr(value, 'isoformat') else value
    data['doctorName'] = entry.doctor.display_name if entry.doctor_id else None
    data['createdAt'] = entry.created_at.isoformat()
    return data


def serialize_record(record: MedicalRecord) -> dict:
    data = {
        'id': record.id,
        'patientId': record.patient_id,
        'patient': serialize_person(record.patient),
    }
    for kind in KINDS.values():
        entries = kind.model.objects.filter(record=record).select_related('doctor')
        data[f'{kind.name}s'] = [serialize_entry(kind, e) for e in entries]
    data['createdAt'] = record.created_at.isoformat()
    data['updatedAt'] = record.updated_at.isoformat()
    return data


def ensure_record(patient_id: int) -> MedicalRecord:
    record, created = MedicalRecord.objects.get_or_create(patient_id=patient_id)
    if created:
        logger.info('Created medical record for patient %s', patient_id)
    return record


def _touch(record: MedicalRecord) -> None:
    MedicalRecord.objects.filter(pk=record.pk).update(updated_at=timezone.now())


def _notify(kind: EntryKind, action: str, patient_id: int, doctor: User) -> None:
    verbs = {'added': 'added a new', 'updated': 'updated a', 'deleted': 'removed a'}
    notifications.emit(
        patient_id,
        doctor.id,
        f'{kind.name}_{action}',
        'Medical Record Updated',
        f'Dr. {doctor.display_name} {verbs[action]} {kind.label} in your medical record',
        f'/dashboard/medical-record/{patient_id}',
    )


# ---------------------------------------------------------------------------
# Operations
# ---------------------------------------------------------------------------

def get_record(actor: Actor, patient_id: int) -> dict:
    require_access(actor, patient_id, Mode.READ)
    patient = _get_patient(patient_id)
    record = ensure_record(patient.id)
    record.patient = patient
    return serialize_record(record)


def add_entry(actor: Actor, patient_id: int, kind_name: str, data: dict) -> dict:
    kind = get_kind(kind_name)
    data = dict(data)
    via_doctor = data.pop('doctor_id', None)
    require_access(actor, patient_id, kind.mode)
    patient = _get_patient(patient_id)
    if kind.mode == Mode.WRITE_APPOINTMENT:
        doctor_id = resolve_appointment_doctor(actor, patient.id, via_doctor)
    else:
        doctor_id = actor.id

    values = {k: (_clean(v) if k in kind.text_fields else v) for k, v in data.items()}
    record = ensure_record(patient.id)
    entry = kind.model.objects.create(record=record, doctor_id=doctor_id, **values)
    _touch(record)
    entry = kind.model.objects.select_related('doctor').get(pk=entry.pk)
    logger.info('%s %s added to record of patient %s by user %s', kind.title, entry.pk, patient.id, actor.id)
    _notify(kind, 'added', patient.id, entry.doctor)
    return serialize_entry(kind, entry)


def _can_modify(actor: Actor, kind: EntryKind, entry) -> bool:
    if actor.is_doctor:
        return entry.doctor_id == actor.id
    if actor.is_reception_agent and kind.mode == Mode.WRITE_APPOINTMENT:
        return entry.doctor_id in set(delegating_doctor_ids(actor.id))
    return False


def _get_entry(actor: Actor, patient_id: int, kind: EntryKind, entry_id: int, verb: str):
    require_access(actor, patient_id, kind.mode)
    entry = (
        kind.model.objects.select_related('doctor', 'record')
        .filter(pk=entry_id, record__patient_id=patient_id)
        .first()
    )
    if entry is None:
        raise NotFoundError(f'{kind.label.capitalize()} not found')
    if not _can_modify(actor, kind, entry):
        if actor.is_reception_agent:
            raise AccessDenied(f'You can only {verb} appointments for your assigned doctors')
        raise AccessDenied(f'You can only {verb} your own {kind.label} entries')
    return entry


def update_entry(actor: Actor, patient_id: int, kind_name: str, entry_id: int, data: dict) -> dict:
    kind = get_kind(kind_name)
    entry = _get_entry(actor, patient_id, kind, entry_id, 'modify')
    data = dict(data)
    data.pop('doctor_id', None)
    if not data:
        return serialize_entry(kind, entry)
    for key, value in data.items():
        setattr(entry, key, _clean(value) if key in kind.text_fields else value)
    entry.save()
    _touch(entry.record)
    logger.info('%s %s updated on record of patient %s by user %s', kind.title, entry.pk, patient_id, actor.id)
    _notify(kind, 'updated', patient_id, entry.doctor)
    return serialize_entry(kind, entry)


def delete_entry(actor: Actor, patient_id: int, kind_name: str, entry_id: int) -> None:
    kind = get_kind(kind_name)
    entry = _get_entry(actor, patient_id, kind, entry_id, 'delete')
    doctor, record = entry.doctor, entry.record
    entry.delete()
    _touch(record)
    logger.info('%s %s deleted from record of patient %s by user %s', kind.title, entry_id, patient_id, actor.id)
    _notify(kind, 'deleted', patient_id, doctor)
