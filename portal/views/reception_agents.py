"""
Doctor → reception agent delegation.

A doctor invites reception agents to manage their appointments; an agent
accepts or rejects the invitation and then sees the patients of every
doctor it works for.
"""
from __future__ import annotations

from collections import defaultdict

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from portal.exceptions import NotFoundError
from portal.models import DoctorReceptionAgent, DoctorRequest, RelationshipStatus, User
from portal.permissions import IsDoctor, IsReceptionAgent
from portal.serializers.relationships import InviteAgentSerializer, RespondSerializer
from portal.services.access import delegating_doctor_ids
from portal.services.accounts import serialize_person
from portal.services.relationships import agent_invitations


def _serialize(inv: DoctorReceptionAgent) -> dict:
    return {
        'id': inv.id,
        'doctorId': inv.doctor_id,
        'receptionAgentId': inv.reception_agent_id,
        'doctor': serialize_person(inv.doctor),
        'receptionAgent': serialize_person(inv.reception_agent),
        'status': inv.status,
        'createdAt': inv.created_at.isoformat(),
        'updatedAt': inv.updated_at.isoformat(),
    }


# ---------------------------------------------------------------------
# Doctor side
# ---------------------------------------------------------------------
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsDoctor])
def all_agents(request):
    """Every reception agent, annotated with this doctor's invitation status (or ``none``)."""
    statuses = dict(
        DoctorReceptionAgent.objects.filter(doctor=request.user).values_list('reception_agent_id', 'status')
    )
    agents = User.objects.filter(role=User.ROLE_RECEPTION_AGENT, is_verified=True).order_by('first_name', 'last_name', 'id')
    items = [{**serialize_person(a), 'invitationStatus': statuses.get(a.id, 'none')} for a in agents]
    return Response({'ok': True, 'receptionAgents': items})


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsDoctor])
def invite(request):
    s = InviteAgentSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    agent_id = s.validated_data['receptionAgentId']
    if not User.objects.filter(pk=agent_id, role=User.ROLE_RECEPTION_AGENT).exists():
        raise NotFoundError('Reception Agent not found')
    inv, resent = agent_invitations.create(request.user.id, agent_id)
    inv = DoctorReceptionAgent.objects.select_related('doctor', 'reception_agent').get(pk=inv.pk)
    return Response(
        {
            'ok': True,
            'message': 'Invitation resent successfully' if resent else 'Invitation sent successfully',
            'invitation': _serialize(inv),
        },
        status=status.HTTP_200_OK if resent else status.HTTP_201_CREATED,
    )


@api_view(['DELETE'])
@permission_classes([IsAuthenticated, IsDoctor])
def remove_agent(request, agent_id: int):
    agent_invitations.remove(request.user.id, agent_id)
    return Response({'ok': True, 'message': 'Reception agent removed successfully'})


# ---------------------------------------------------------------------
# Reception agent side
# ---------------------------------------------------------------------
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsReceptionAgent])
def my_doctors(request):
    accepted = agent_invitations.received_by(request.user.id, RelationshipStatus.ACCEPTED)
    items = [{**serialize_person(inv.doctor), 'invitationId': inv.id, 'acceptedAt': inv.updated_at.isoformat()} for inv in accepted]
    return Response({'ok': True, 'doctors': items})


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsReceptionAgent])
def my_patients(request):
    """Patients of every doctor this agent works for, each with the doctors treating them."""
    links = (
        DoctorRequest.objects.filter(
            doctor_id__in=delegating_doctor_ids(request.user.id),
            status=RelationshipStatus.ACCEPTED,
        )
        .select_related('doctor', 'patient')
        .order_by('patient__first_name', 'patient__last_name', 'patient_id', 'doctor_id')
    )
    patients = {}
    doctors = defaultdict(list)
    for link in links:
        patients.setdefault(link.patient_id, link.patient)
        doctors[link.patient_id].append(serialize_person(link.doctor))
    items = [{**serialize_person(p), 'doctors': doctors[pid]} for pid, p in patients.items()]
    return Response({'ok': True, 'patients': items})


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsReceptionAgent])
def pending_invitations(request):
    qs = agent_invitations.received_by(request.user.id, RelationshipStatus.PENDING).select_related('reception_agent')
    return Response({'ok': True, 'invitations': [_serialize(i) for i in qs]})


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsReceptionAgent])
def all_invitations(request):
    qs = agent_invitations.received_by(request.user.id).select_related('reception_agent')
    return Response({'ok': True, 'invitations': [_serialize(i) for i in qs]})


@api_view(['PUT'])
@permission_classes([IsAuthenticated, IsReceptionAgent])
def respond_invitation(request, invitation_id: int):
    s = RespondSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    decision = s.validated_data['status']
    inv = agent_invitations.respond(invitation_id, request.user.id, decision)
    inv = DoctorReceptionAgent.objects.select_related('doctor', 'reception_agent').get(pk=inv.pk)
    return Response({'ok': True, 'message': f'Invitation {decision} successfully', 'invitation': _serialize(inv)})
