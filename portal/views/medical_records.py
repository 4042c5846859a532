"""
Medical record endpoints.

``<kind>`` is one of appointment, prescription, disease, diagnostic or
comment.  Authorisation is decided per patient by the access resolver.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from portal.serializers.records import ENTRY_SERIALIZERS
from portal.services import records
from portal.services.access import Actor


def _entry_serializer(kind: str, data, partial=False):
    records.get_kind(kind)
    s = ENTRY_SERIALIZERS[kind](data=data, partial=partial)
    s.is_valid(raise_exception=True)
    return s.validated_data


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def get_record(request, patient_id: int):
    record = records.get_record(Actor.from_user(request.user), patient_id)
    return Response({'ok': True, 'medicalRecord': record})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def add_entry(request, patient_id: int, kind: str):
    data = _entry_serializer(kind, request.data)
    entry = records.add_entry(Actor.from_user(request.user), patient_id, kind, data)
    return Response(
        {'ok': True, 'message': f'{kind.capitalize()} added successfully', kind: entry},
        status=status.HTTP_201_CREATED,
    )


@api_view(['PUT', 'DELETE'])
@permission_classes([IsAuthenticated])
def entry_detail(request, patient_id: int, kind: str, entry_id: int):
    actor = Actor.from_user(request.user)
    if request.method == 'DELETE':
        records.delete_entry(actor, patient_id, kind, entry_id)
        return Response({'ok': True, 'message': f'{kind.capitalize()} deleted successfully'})
    data = _entry_serializer(kind, request.data, partial=True)
    entry = records.update_entry(actor, patient_id, kind, entry_id, data)
    return Response({'ok': True, 'message': f'{kind.capitalize()} updated successfully', kind: entry})
