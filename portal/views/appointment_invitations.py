"""
Patient → doctor appointment invitations.

Accepting an invitation grants the doctor access to the patient and
books the appointment into the patient's medical record.
"""
from __future__ import annotations

from django.db.models import Exists, OuterRef
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from portal.exceptions import NotFoundError
from portal.models import AppointmentInvitation, DoctorRequest, RelationshipStatus, User
from portal.permissions import IsDoctor, IsPatient
from portal.serializers.relationships import RespondSerializer, SendAppointmentInvitationSerializer
from portal.services.accounts import serialize_person
from portal.services.relationships import appointment_invitations


def _serialize(inv: AppointmentInvitation) -> dict:
    return {
        'id': inv.id,
        'patientId': inv.patient_id,
        'doctorId': inv.doctor_id,
        'patient': serialize_person(inv.patient),
        'doctor': serialize_person(inv.doctor),
        'appointmentDate': inv.appointment_date.isoformat(),
        'reason': inv.reason,
        'status': inv.status,
        'createdAt': inv.created_at.isoformat(),
        'updatedAt': inv.updated_at.isoformat(),
    }


def _load(pk: int) -> AppointmentInvitation:
    return AppointmentInvitation.objects.select_related('patient', 'doctor').get(pk=pk)


# ---------------------------------------------------------------------
# Patient side
# ---------------------------------------------------------------------
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsPatient])
def all_doctors(request):
    """Every doctor with the patient's latest invitation status and whether they are connected."""
    latest = {}
    for doctor_id, inv_status in (
        AppointmentInvitation.objects.filter(patient=request.user)
        .order_by('created_at', 'id')
        .values_list('doctor_id', 'status')
    ):
        latest[doctor_id] = inv_status
    connected = DoctorRequest.objects.filter(
        doctor=OuterRef('pk'), patient=request.user, status=RelationshipStatus.ACCEPTED
    )
    doctors = (
        User.objects.filter(role=User.ROLE_DOCTOR, is_verified=True)
        .annotate(is_connected=Exists(connected))
        .order_by('first_name', 'last_name', 'id')
    )
    items = [
        {**serialize_person(d), 'invitationStatus': latest.get(d.id, 'none'), 'isConnected': d.is_connected}
        for d in doctors
    ]
    return Response({'ok': True, 'doctors': items})


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsPatient])
def send_invitation(request):
    s = SendAppointmentInvitationSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    if not User.objects.filter(pk=vd['doctorId'], role=User.ROLE_DOCTOR).exists():
        raise NotFoundError('Doctor not found')
    inv, _ = appointment_invitations.create(
        request.user.id, vd['doctorId'], appointment_date=vd['appointmentDate'], reason=vd['reason']
    )
    return Response(
        {'ok': True, 'message': 'Appointment invitation sent successfully', 'invitation': _serialize(_load(inv.pk))},
        status=status.HTTP_201_CREATED,
    )


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsPatient])
def my_invitations(request):
    qs = appointment_invitations.sent_by(request.user.id).select_related('patient')
    return Response({'ok': True, 'invitations': [_serialize(i) for i in qs]})


# ---------------------------------------------------------------------
# Doctor side
# ---------------------------------------------------------------------
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsDoctor])
def pending_invitations(request):
    # Soonest appointment first.
    qs = (
        appointment_invitations.received_by(request.user.id, RelationshipStatus.PENDING)
        .select_related('doctor')
        .order_by('appointment_date', 'id')
    )
    return Response({'ok': True, 'invitations': [_serialize(i) for i in qs]})


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsDoctor])
def all_invitations(request):
    qs = appointment_invitations.received_by(request.user.id).select_related('doctor')
    return Response({'ok': True, 'invitations': [_serialize(i) for i in qs]})


@api_view(['PUT'])
@permission_classes([IsAuthenticated, IsDoctor])
def respond_invitation(request, invitation_id: int):
    s = RespondSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    decision = s.validated_data['status']
    inv = appointment_invitations.respond(invitation_id, request.user.id, decision)
    return Response({'ok': True, 'message': f'Invitation {decision}', 'invitation': _serialize(_load(inv.pk))})
