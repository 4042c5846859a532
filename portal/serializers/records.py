"""
Input serializers for medical record entries.

Response keys are camelCase; ``source`` maps them onto model field names
so that ``validated_data`` can be applied to the entry directly.  Updates
use ``partial=True``.
"""
from rest_framework import serializers

from portal.models import Disease


class AppointmentEntrySerializer(serializers.Serializer):
    date = serializers.DateTimeField()
    reason = serializers.CharField(max_length=2000)
    notes = serializers.CharField(required=False, allow_blank=True, max_length=5000)
    doctorId = serializers.IntegerField(required=False, source='doctor_id')


class PrescriptionEntrySerializer(serializers.Serializer):
    medication = serializers.CharField(max_length=255)
    dosage = serializers.CharField(max_length=255)
    duration = serializers.CharField(required=False, allow_blank=True, max_length=255)
    instructions = serializers.CharField(required=False, allow_blank=True, max_length=5000)


class DiseaseEntrySerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    diagnosedDate = serializers.DateTimeField(source='diagnosed_date')
    status = serializers.ChoiceField(choices=[c for c, _ in Disease.STATUS_CHOICES], required=False)
    notes = serializers.CharField(required=False, allow_blank=True, max_length=5000)


class DiagnosticEntrySerializer(serializers.Serializer):
    testName = serializers.CharField(max_length=255, source='test_name')
    testDate = serializers.DateTimeField(source='test_date')
    results = serializers.CharField(max_length=10000)
    notes = serializers.CharField(required=False, allow_blank=True, max_length=5000)


class CommentEntrySerializer(serializers.Serializer):
    text = serializers.CharField(max_length=10000)


ENTRY_SERIALIZERS = {
    'appointment': AppointmentEntrySerializer,
    'prescription': PrescriptionEntrySerializer,
    'disease': DiseaseEntrySerializer,
    'diagnostic': DiagnosticEntrySerializer,
    'comment': CommentEntrySerializer,
}
