import bleach
from rest_framework import serializers

from portal.models import RelationshipStatus


class SendDoctorRequestSerializer(serializers.Serializer):
    patientId = serializers.IntegerField()


class InviteAgentSerializer(serializers.Serializer):
    receptionAgentId = serializers.IntegerField()


class SendAppointmentInvitationSerializer(serializers.Serializer):
    doctorId = serializers.IntegerField()
    appointmentDate = serializers.DateTimeField()
    reason = serializers.CharField(max_length=2000)

    def validate_reason(self, v):
        v = bleach.clean((v or '').strip(), strip=True)
        if not v:
            raise serializers.ValidationError('Reason is required')
        return v


class RespondSerializer(serializers.Serializer):
    status = serializers.ChoiceField(
        choices=list(RelationshipStatus.DECISIONS),
        error_messages={'invalid_choice': 'Invalid status'},
    )
