from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from portal.permissions import IsPatient
from portal.serializers.assessment import HealthAssessmentSerializer
from portal.services import assessment as assessments
from portal.services.access import Actor


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def check(request):
    return Response({'ok': True, 'completed': assessments.has_completed(Actor.from_user(request.user))})


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsPatient])
def submit(request):
    actor = Actor.from_user(request.user)
    s = HealthAssessmentSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    a = assessments.submit(actor, s.validated_data)
    return Response(
        {
            'ok': True,
            'message': 'Health assessment completed successfully',
            'assessment': assessments.serialize_assessment(a),
            'predictions': a.predictions,
        },
        status=status.HTTP_201_CREATED,
    )


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsPatient])
def my_assessment(request):
    a = assessments.own_assessment(Actor.from_user(request.user))
    return Response({'ok': True, 'assessment': assessments.serialize_assessment(a)})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def patient_assessment(request, patient_id: int):
    a = assessments.patient_assessment(Actor.from_user(request.user), patient_id)
    return Response({'ok': True, 'assessment': assessments.serialize_assessment(a)})
