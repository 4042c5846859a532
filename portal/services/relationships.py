"""
Directed relationship requests between users.

Three kinds of request share one life cycle::

    pending -> accepted
    pending -> rejected -> pending   (resent by the original initiator)

* a doctor asks a patient for access to their medical record;
* a doctor invites a reception agent to manage their appointments;
* a patient asks a doctor for an appointment.

``RelationshipWorkflow`` implements the transitions once.  Each instance
is parameterised with its model, the names of the initiator and target
foreign keys, whether a pair may hold at most one request, and a policy
that words the notifications and reacts to acceptance.

Transitions are conditional updates (``UPDATE ... WHERE status=...``) so
that two concurrent responses cannot both succeed; the uniqueness of the
first two kinds is a database constraint.  Notifications are emitted only
after the transition has been stored.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from django.db import IntegrityError, transaction
from django.utils import timezone

from portal.exceptions import ConflictError, NotFoundError, ValidationError
from portal.models import (
    Appointment,
    AppointmentInvitation,
    DoctorReceptionAgent,
    DoctorRequest,
    MedicalRecord,
    RelationshipStatus,
)
from portal.services import notifications

logger = logging.getLogger(__name__)

PENDING = RelationshipStatus.PENDING
ACCEPTED = RelationshipStatus.ACCEPTED
REJECTED = RelationshipStatus.REJECTED


@dataclass
class Note:
    type: str
    title: str
    message: str
    link: str = ''


class RelationshipPolicy:
    """Notification wording and acceptance side effects for one request kind."""
    label = 'Request'

    def created(self, rel) -> Optional[Note]:
        return None

    def resent(self, rel) -> Optional[Note]:
        return self.created(rel)

    def accepted(self, rel) -> Optional[Note]:
        return None

    def rejected(self, rel) -> Optional[Note]:
        return None

    def on_accept(self, rel) -> None:
        """Runs in the same transaction as the accepting update."""


class RelationshipWorkflow:
    def __init__(self, model, initiator_field: str, target_field: str, unique: bool,
                 policy: RelationshipPolicy):
        self.model = model
        self.initiator_field = initiator_field
        self.target_field = target_field
        self.unique = unique
        self.policy = policy

    # ------------------------------------------------------------------
    def _pair(self, initiator_id: int, target_id: int) -> dict:
        return {f'{self.initiator_field}_id': initiator_id, f'{self.target_field}_id': target_id}

    def initiator_id(self, rel) -> int:
        return getattr(rel, f'{self.initiator_field}_id')

    def target_id(self, rel) -> int:
        return getattr(rel, f'{self.target_field}_id')

    def _notify(self, note: Optional[Note], recipient_id: int, sender_id: int) -> None:
        if note is None:
            return
        notifications.emit(recipient_id, sender_id, note.type, note.title, note.message, note.link)

    # ------------------------------------------------------------------
    def create(self, initiator_id: int, target_id: int, **payload):
        """Open a request from ``initiator_id`` to ``target_id``.

        Returns ``(request, resent)``.  For unique kinds a rejected request
        is sent again instead of creating a second one, and a pending or
        accepted one is a conflict.
        """
        resent = False
        if self.unique:
            existing = self.model.objects.filter(**self._pair(initiator_id, target_id)).first()
            if existing is not None:
                if existing.status != REJECTED:
                    raise ConflictError(f'{self.policy.label} already {existing.status}')
                updated = self.model.objects.filter(pk=existing.pk, status=REJECTED).update(
                    status=PENDING, updated_at=timezone.now(), **payload
                )
                if not updated:
                    raise ConflictError(f'{self.policy.label} already processed')
                existing.refresh_from_db()
                rel, resent = existing, True

        if not resent:
            try:
                with transaction.atomic():
                    rel = self.model.objects.create(status=PENDING, **self._pair(initiator_id, target_id), **payload)
            except IntegrityError:
                raise ConflictError(f'{self.policy.label} already exists')

        logger.info("%s %s %s by user %s", self.model.__name__, rel.pk, "resent" if resent else "created", initiator_id)
        note = self.policy.resent(rel) if resent else self.policy.created(rel)
        self._notify(note, recipient_id=target_id, sender_id=initiator_id)
        return rel, resent

    def respond(self, request_id: int, responder_id: int, decision: str):
        """Accept or reject a pending request addressed to ``responder_id``."""
        if decision not in RelationshipStatus.DECISIONS:
            raise ValidationError('Invalid status')
        with transaction.atomic():
            updated = self.model.objects.filter(
                pk=request_id, status=PENDING, **{f'{self.target_field}_id': responder_id}
            ).update(status=decision, updated_at=timezone.now())
            if not updated:
                raise NotFoundError(f'{self.policy.label} not found or already processed')
            rel = self.model.objects.get(pk=request_id)
            if decision == ACCEPTED:
                self.policy.on_accept(rel)

        logger.info("%s %s %s by user %s", self.model.__name__, rel.pk, decision, responder_id)
        note = self.policy.accepted(rel) if decision == ACCEPTED else self.policy.rejected(rel)
        self._notify(note, recipient_id=self.initiator_id(rel), sender_id=responder_id)
        return rel

    def remove(self, initiator_id: int, target_id: int) -> None:
        """Delete the initiator's request to ``target_id`` whatever its status."""
        deleted, _ = self.model.objects.filter(**self._pair(initiator_id, target_id)).delete()
        if not deleted:
            raise NotFoundError(f'{self.policy.label} not found')

    # ------------------------------------------------------------------
    def sent_by(self, initiator_id: int, status: Optional[str] = None):
        qs = self.model.objects.filter(**{f'{self.initiator_field}_id': initiator_id})
        if status:
            qs = qs.filter(status=status)
        return qs.select_related(self.target_field).order_by('-created_at', '-id')

    def received_by(self, target_id: int, status: Optional[str] = None):
        qs = self.model.objects.filter(**{f'{self.target_field}_id': target_id})
        if status:
            qs = qs.filter(status=status)
        return qs.select_related(self.initiator_field).order_by('-created_at', '-id')


# ---------------------------------------------------------------------------
# Policies
# ---------------------------------------------------------------------------

class DoctorRequestPolicy(RelationshipPolicy):
    label = 'Request'

    def created(self, rel):
        return Note(
            'doctor_request',
            'New Doctor Access Request',
            f'Dr. {rel.doctor.display_name} has requested access to your medical records',
            '/dashboard/doctor-requests',
        )

    def accepted(self, rel):
        return Note(
            'request_accepted',
            'Access Request Accepted',
            f'{rel.patient.display_name} has accepted your access request',
            '/dashboard/doctor-patients',
        )

    def rejected(self, rel):
        return Note(
            'request_rejected',
            'Access Request Rejected',
            f'{rel.patient.display_name} has rejected your access request',
            '/dashboard/doctor-patients',
        )

    def on_accept(self, rel):
        MedicalRecord.objects.get_or_create(patient_id=rel.patient_id)


class AgentInvitationPolicy(RelationshipPolicy):
    label = 'Invitation'

    def created(self, rel):
        return Note(
            'agent_invitation',
            'New Doctor Invitation',
            f"Dr. {rel.doctor.display_name} has invited you to manage their patients' appointments",
            '/dashboard/doctor-invitations',
        )

    def accepted(self, rel):
        return Note(
            'invitation_accepted',
            'Invitation Accepted',
            f'{rel.reception_agent.display_name} has accepted your invitation',
            '/dashboard/reception-agents',
        )

    def rejected(self, rel):
        return Note(
            'invitation_rejected',
            'Invitation Rejected',
            f'{rel.reception_agent.display_name} has rejected your invitation',
            '/dashboard/reception-agents',
        )


class AppointmentInvitationPolicy(RelationshipPolicy):
    label = 'Invitation'

    def created(self, rel):
        return Note(
            'appointment_invitation',
            'New Appointment Invitation',
            f'{rel.patient.display_name} has sent you an appointment invitation '
            f'for {rel.appointment_date:%Y-%m-%d}',
            '/dashboard/appointment-invitations',
        )

    def accepted(self, rel):
        return Note(
            'appointment_accepted',
            'Appointment Invitation Accepted',
            f'Dr. {rel.doctor.display_name} has accepted your appointment invitation '
            f'for {rel.appointment_date:%Y-%m-%d}',
            '/dashboard/medical-record',
        )

    def rejected(self, rel):
        return Note(
            'appointment_rejected',
            'Appointment Invitation Declined',
            f'Dr. {rel.doctor.display_name} has declined your appointment invitation',
            '/dashboard/appointment-invitations',
        )

    def on_accept(self, rel):
        # An accepted appointment grants the doctor access to the patient.
        access, created = DoctorRequest.objects.get_or_create(
            doctor_id=rel.doctor_id, patient_id=rel.patient_id, defaults={'status': ACCEPTED}
        )
        if not created and access.status != ACCEPTED:
            DoctorRequest.objects.filter(pk=access.pk).update(status=ACCEPTED, updated_at=timezone.now())
        record, _ = MedicalRecord.objects.get_or_create(patient_id=rel.patient_id)
        Appointment.objects.create(
            record=record,
            doctor_id=rel.doctor_id,
            date=rel.appointment_date,
            reason=rel.reason,
        )


doctor_requests = RelationshipWorkflow(
    DoctorRequest, 'doctor', 'patient', unique=True, policy=DoctorRequestPolicy()
)
agent_invitations = RelationshipWorkflow(
    DoctorReceptionAgent, 'doctor', 'reception_agent', unique=True, policy=AgentInvitationPolicy()
)
appointment_invitations = RelationshipWorkflow(
    AppointmentInvitation, 'patient', 'doctor', unique=False, policy=AppointmentInvitationPolicy()
)
