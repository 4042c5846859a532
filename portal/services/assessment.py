"""
Patient health questionnaires and their stored risk predictions.
"""
from __future__ import annotations

import logging

from django.db import transaction

from portal.exceptions import AccessDenied, NotFoundError
from portal.models import HealthAssessment
from portal.services.access import Actor, Mode, require_access
from portal.services.risk import Questionnaire, calculate_all_risks

logger = logging.getLogger(__name__)

QUESTION_FIELDS = {
    'age': 'age',
    'gender': 'gender',
    'height': 'height',
    'weight': 'weight',
    'has_diabetes': 'hasDiabetes',
    'has_high_blood_pressure': 'hasHighBloodPressure',
    'has_heart_disease': 'hasHeartDisease',
    'had_stroke': 'hadStroke',
    'has_high_cholesterol': 'hasHighCholesterol',
    'smoking_status': 'smokingStatus',
    'exercise_frequency': 'exerciseFrequency',
    'alcohol_consumption': 'alcoholConsumption',
    'family_heart_disease': 'familyHeartDisease',
    'family_stroke': 'familyStroke',
    'family_diabetes': 'familyDiabetes',
    'chest_pain': 'chestPain',
    'shortness_of_breath': 'shortnessOfBreath',
    'dizziness': 'dizziness',
    'fatigue': 'fatigue',
    'numbness': 'numbness',
}


def serialize_assessment(a: HealthAssessment) -> dict:
    data = {'id': a.id, 'patientId': a.patient_id}
    for field, key in QUESTION_FIELDS.items():
        data[key] = getattr(a, field)
    data['predictions'] = a.predictions
    data['completedAt'] = a.completed_at.isoformat()
    data['updatedAt'] = a.updated_at.isoformat()
    return data


def has_completed(actor: Actor) -> bool:
    # Only patients fill in the questionnaire.
    if not actor.is_patient:
        return True
    return HealthAssessment.objects.filter(patient_id=actor.id).exists()


def submit(actor: Actor, answers: dict) -> HealthAssessment:
    """Store the actor's answers, replacing any previous submission."""
    if not actor.is_patient:
        raise AccessDenied('Only patients can submit assessments')
    values = {field: answers.get(field, False) for field in QUESTION_FIELDS}
    values['predictions'] = calculate_all_risks(Questionnaire(**values))
    with transaction.atomic():
        assessment, created = HealthAssessment.objects.update_or_create(patient_id=actor.id, defaults=values)
    logger.info('Health assessment %s for patient %s', 'created' if created else 'updated', actor.id)
    return assessment


def own_assessment(actor: Actor) -> HealthAssessment:
    if not actor.is_patient:
        raise AccessDenied('Only patients can view assessments')
    assessment = HealthAssessment.objects.filter(patient_id=actor.id).first()
    if assessment is None:
        raise NotFoundError('Assessment not found')
    return assessment


def patient_assessment(actor: Actor, patient_id: int) -> HealthAssessment:
    """A patient's assessment as seen by a doctor or reception agent caring for them."""
    if not (actor.is_doctor or actor.is_reception_agent):
        raise AccessDenied('Access denied')
    require_access(actor, patient_id, Mode.READ)
    assessment = HealthAssessment.objects.filter(patient_id=patient_id).first()
    if assessment is None:
        raise NotFoundError('Patient has not completed health assessment')
    return assessment
