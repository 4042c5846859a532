"""
Patient record access resolution.

Decides whether an actor may read a patient's data or write entries into
the patient's medical record:

* a patient reads only their own record and never writes;
* a doctor reads and writes every kind of entry once the patient has
  accepted the doctor's access request;
* a reception agent reads and manages appointments for a patient when a
  doctor that has delegated to the agent also has accepted access to the
  patient ("two-hop" access) and never writes any other kind of entry;
* an admin has no access to patient records.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional

from portal.exceptions import AccessDenied, ValidationError
from portal.models import DoctorReceptionAgent, DoctorRequest, RelationshipStatus, User

ACCEPTED = RelationshipStatus.ACCEPTED


class Mode(str, enum.Enum):
    READ = 'read'
    WRITE_APPOINTMENT = 'write-appointment'
    WRITE_OTHER = 'write-other'


@dataclass(frozen=True)
class Actor:
    """The authenticated caller, passed explicitly into every core operation."""
    id: int
    role: str
    email: str = ''

    @classmethod
    def from_user(cls, user) -> 'Actor':
        return cls(id=user.id, role=user.role, email=user.email)

    @property
    def is_patient(self) -> bool:
        return self.role == User.ROLE_PATIENT

    @property
    def is_doctor(self) -> bool:
        return self.role == User.ROLE_DOCTOR

    @property
    def is_reception_agent(self) -> bool:
        return self.role == User.ROLE_RECEPTION_AGENT

    @property
    def is_admin(self) -> bool:
        return self.role == User.ROLE_ADMIN


def delegating_doctor_ids(agent_id: int):
    """Ids of the doctors with an accepted delegation to ``agent_id``."""
    return DoctorReceptionAgent.objects.filter(
        reception_agent_id=agent_id, status=ACCEPTED
    ).values_list('doctor_id', flat=True)


def doctor_has_access(doctor_id: int, patient_id: int) -> bool:
    return DoctorRequest.objects.filter(doctor_id=doctor_id, patient_id=patient_id, status=ACCEPTED).exists()


def agent_patient_ids(agent_id: int):
    """Ids of the patients reachable by an agent through its delegating doctors."""
    return DoctorRequest.objects.filter(
        doctor_id__in=delegating_doctor_ids(agent_id), status=ACCEPTED
    ).values_list('patient_id', flat=True).distinct()


def agent_doctors_for_patient(agent_id: int, patient_id: int):
    """Delegating doctors of the agent that have accepted access to the patient."""
    return DoctorRequest.objects.filter(
        doctor_id__in=delegating_doctor_ids(agent_id), patient_id=patient_id, status=ACCEPTED
    ).values_list('doctor_id', flat=True)


def agent_has_access(agent_id: int, patient_id: int, via_doctor_id: Optional[int] = None) -> bool:
    doctors = agent_doctors_for_patient(agent_id, patient_id)
    if via_doctor_id is not None:
        doctors = doctors.filter(doctor_id=via_doctor_id)
    return doctors.exists()


def can_access(actor: Actor, patient_id: int, mode: Mode, via_doctor_id: Optional[int] = None) -> bool:
    """True when ``actor`` may use ``patient_id``'s record in ``mode``.

    ``via_doctor_id`` narrows a reception agent's two-hop rule to one
    delegating doctor; it is the doctor an appointment written by the
    agent is attributed to.
    """
    mode = Mode(mode)
    if actor.is_patient:
        return mode == Mode.READ and actor.id == patient_id
    if actor.is_doctor:
        return doctor_has_access(actor.id, patient_id)
    if actor.is_reception_agent:
        if mode == Mode.WRITE_OTHER:
            return False
        return agent_has_access(actor.id, patient_id, via_doctor_id)
    return False


def denial_message(actor: Actor, mode: Mode) -> str:
    if actor.is_patient:
        if mode == Mode.READ:
            return 'You can only view your own medical record'
        return 'Patients cannot modify medical records'
    if actor.is_doctor:
        return 'You do not have access to this patient'
    if actor.is_reception_agent:
        if mode == Mode.WRITE_OTHER:
            return 'Reception agents can only manage appointments'
        return 'You do not have access to this patient through any of your doctors'
    return 'Access denied'


def require_access(actor: Actor, patient_id: int, mode: Mode, via_doctor_id: Optional[int] = None) -> None:
    """Raise ``AccessDenied`` unless ``can_access`` holds."""
    mode = Mode(mode)
    if not can_access(actor, patient_id, mode, via_doctor_id):
        raise AccessDenied(denial_message(actor, mode))


def resolve_appointment_doctor(actor: Actor, patient_id: int, doctor_id: Optional[int] = None) -> int:
    """Return the doctor an appointment written by ``actor`` is attributed to.

    Doctors author their own appointments.  A reception agent must name
    the delegating doctor with ``doctor_id``, and that doctor must have
    accepted access to the patient.
    """
    if actor.is_doctor:
        return actor.id
    if not actor.is_reception_agent:
        raise AccessDenied(denial_message(actor, Mode.WRITE_APPOINTMENT))
    if doctor_id is None:
        raise ValidationError('Doctor ID is required for reception agents')
    if not agent_has_access(actor.id, patient_id, via_doctor_id=doctor_id):
        raise AccessDenied('You do not have access to this patient through this doctor')
    return doctor_id
