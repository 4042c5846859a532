"""
Doctor ↔ patient access requests.

Doctors browse patients and ask for access to their medical record;
patients list the requests they received and accept or reject them.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from portal.exceptions import NotFoundError
from portal.models import DoctorRequest, RelationshipStatus, User
from portal.permissions import IsDoctor, IsPatient
from portal.serializers.relationships import RespondSerializer, SendDoctorRequestSerializer
from portal.services.accounts import serialize_person
from portal.services.relationships import doctor_requests
from portal.services.statistics import doctor_statistics


def _serialize(r: DoctorRequest) -> dict:
    return {
        'id': r.id,
        'doctorId': r.doctor_id,
        'patientId': r.patient_id,
        'doctor': serialize_person(r.doctor),
        'patient': serialize_person(r.patient),
        'status': r.status,
        'createdAt': r.created_at.isoformat(),
        'updatedAt': r.updated_at.isoformat(),
    }


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsDoctor])
def statistics(request):
    return Response({'ok': True, **doctor_statistics(request.user.id)})


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsDoctor])
def all_patients(request):
    """Every patient, annotated with this doctor's request status (or ``none``)."""
    statuses = dict(
        DoctorRequest.objects.filter(doctor=request.user).values_list('patient_id', 'status')
    )
    patients = User.objects.filter(role=User.ROLE_PATIENT, is_verified=True).order_by('first_name', 'last_name', 'id')
    items = [{**serialize_person(p), 'requestStatus': statuses.get(p.id, 'none')} for p in patients]
    return Response({'ok': True, 'patients': items})


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsDoctor])
def send_request(request):
    s = SendDoctorRequestSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    patient_id = s.validated_data['patientId']
    if not User.objects.filter(pk=patient_id, role=User.ROLE_PATIENT).exists():
        raise NotFoundError('Patient not found')
    rel, resent = doctor_requests.create(request.user.id, patient_id)
    rel = DoctorRequest.objects.select_related('doctor', 'patient').get(pk=rel.pk)
    return Response(
        {
            'ok': True,
            'message': 'Request resent successfully' if resent else 'Request sent successfully',
            'request': _serialize(rel),
        },
        status=status.HTTP_200_OK if resent else status.HTTP_201_CREATED,
    )


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsDoctor])
def my_patients(request):
    accepted = doctor_requests.sent_by(request.user.id, RelationshipStatus.ACCEPTED)
    items = [{**serialize_person(r.patient), 'requestId': r.id, 'acceptedAt': r.updated_at.isoformat()} for r in accepted]
    return Response({'ok': True, 'patients': items})


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsPatient])
def pending_requests(request):
    qs = doctor_requests.received_by(request.user.id, RelationshipStatus.PENDING).select_related('patient')
    return Response({'ok': True, 'requests': [_serialize(r) for r in qs]})


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsPatient])
def all_requests(request):
    qs = doctor_requests.received_by(request.user.id).select_related('patient')
    return Response({'ok': True, 'requests': [_serialize(r) for r in qs]})


@api_view(['PUT'])
@permission_classes([IsAuthenticated, IsPatient])
def respond_request(request, request_id: int):
    s = RespondSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    decision = s.validated_data['status']
    rel = doctor_requests.respond(request_id, request.user.id, decision)
    rel = DoctorRequest.objects.select_related('doctor', 'patient').get(pk=rel.pk)
    return Response({'ok': True, 'message': f'Request {decision} successfully', 'request': _serialize(rel)})
