from rest_framework import serializers

from portal.models import HealthAssessment


def _choices(pairs):
    return [value for value, _ in pairs]


class HealthAssessmentSerializer(serializers.Serializer):
    age = serializers.IntegerField(min_value=1, max_value=120)
    gender = serializers.ChoiceField(choices=_choices(HealthAssessment.GENDER_CHOICES))
    height = serializers.FloatField(min_value=50, max_value=260)
    weight = serializers.FloatField(min_value=2, max_value=400)

    hasDiabetes = serializers.BooleanField(required=False, default=False, source='has_diabetes')
    hasHighBloodPressure = serializers.BooleanField(required=False, default=False, source='has_high_blood_pressure')
    hasHeartDisease = serializers.BooleanField(required=False, default=False, source='has_heart_disease')
    hadStroke = serializers.BooleanField(required=False, default=False, source='had_stroke')
    hasHighCholesterol = serializers.BooleanField(required=False, default=False, source='has_high_cholesterol')

    smokingStatus = serializers.ChoiceField(
        choices=_choices(HealthAssessment.SMOKING_CHOICES), source='smoking_status')
    exerciseFrequency = serializers.ChoiceField(
        choices=_choices(HealthAssessment.EXERCISE_CHOICES), source='exercise_frequency')
    alcoholConsumption = serializers.ChoiceField(
        choices=_choices(HealthAssessment.ALCOHOL_CHOICES), source='alcohol_consumption')

    familyHeartDisease = serializers.BooleanField(required=False, default=False, source='family_heart_disease')
    familyStroke = serializers.BooleanField(required=False, default=False, source='family_stroke')
    familyDiabetes = serializers.BooleanField(required=False, default=False, source='family_diabetes')

    chestPain = serializers.BooleanField(required=False, default=False, source='chest_pain')
    shortnessOfBreath = serializers.BooleanField(required=False, default=False, source='shortness_of_breath')
    dizziness = serializers.BooleanField(required=False, default=False)
    fatigue = serializers.BooleanField(required=False, default=False)
    numbness = serializers.BooleanField(required=False, default=False)
