"""
Rule-based health risk scoring.

Scores stroke, heart disease and diabetes risk from a health
questionnaire.  Every calculation is a pure function of its input: each
disease starts at zero, adds fixed weights for the risk factors found in
a fixed order, is capped at 100 and is then mapped onto a coarse risk
level.  The factor list explains, in scan order, why points were added.
"""
from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Dict, List

VERY_HIGH = 'Very High'
HIGH = 'High'
MODERATE = 'Moderate'
LOW = 'Low'

MAX_SCORE = 100

INACTIVE = ('Never', 'Rarely')


@dataclass(frozen=True)
class Questionnaire:
    """The answers the scoring rules look at."""
    age: int
    gender: str
    height: float
    weight: float
    has_diabetes: bool = False
    has_high_blood_pressure: bool = False
    has_heart_disease: bool = False
    had_stroke: bool = False
    has_high_cholesterol: bool = False
    smoking_status: str = 'Never'
    exercise_frequency: str = 'Regularly'
    alcohol_consumption: str = 'Never'
    family_heart_disease: bool = False
    family_stroke: bool = False
    family_diabetes: bool = False
    chest_pain: bool = False
    shortness_of_breath: bool = False
    dizziness: bool = False
    fatigue: bool = False
    numbness: bool = False

    @classmethod
    def from_object(cls, obj: Any) -> 'Questionnaire':
        """Build from a model instance or a mapping of field names."""
        if isinstance(obj, dict):
            return cls(**{f.name: obj[f.name] for f in fields(cls) if f.name in obj})
        return cls(**{f.name: getattr(obj, f.name) for f in fields(cls)})


def calculate_bmi(weight: float, height: float) -> float:
    """BMI from weight in kg and height in cm."""
    height_m = height / 100
    return weight / (height_m * height_m)


def risk_level(score: int) -> str:
    if score >= 70:
        return VERY_HIGH
    if score >= 50:
        return HIGH
    if score >= 30:
        return MODERATE
    return LOW


def _result(score: int, factors: List[str], placeholder: str) -> Dict[str, Any]:
    score = max(0, min(score, MAX_SCORE))
    return {
        'risk': risk_level(score),
        'score': score,
        'factors': factors or [placeholder],
    }


def calculate_stroke_risk(q: Questionnaire) -> Dict[str, Any]:
    score = 0
    factors: List[str] = []

    if q.age >= 75:
        score += 30
        factors.append('Age 75+ significantly increases stroke risk')
    elif q.age >= 65:
        score += 20
        factors.append('Age 65-74 increases stroke risk')
    elif q.age >= 55:
        score += 10
        factors.append('Age 55+ moderately increases stroke risk')

    if q.has_high_blood_pressure:
        score += 25
        factors.append('High blood pressure is a major stroke risk factor')
    if q.has_diabetes:
        score += 15
        factors.append('Diabetes increases stroke risk')
    if q.had_stroke:
        score += 35
        factors.append('Previous stroke significantly increases risk of recurrence')
    if q.has_heart_disease:
        score += 20
        factors.append('Heart disease increases stroke risk')
    if q.has_high_cholesterol:
        score += 10
        factors.append('High cholesterol contributes to stroke risk')

    if q.smoking_status == 'Current':
        score += 15
        factors.append('Current smoking doubles stroke risk')
    elif q.smoking_status == 'Former':
        score += 5
        factors.append('Former smoking slightly increases risk')

    if q.exercise_frequency in INACTIVE:
        score += 8
        factors.append('Lack of exercise increases stroke risk')

    bmi = calculate_bmi(q.weight, q.height)
    if bmi >= 30:
        score += 12
        factors.append('Obesity (BMI ≥30) increases stroke risk')
    elif bmi >= 25:
        score += 6
        factors.append('Overweight (BMI 25-30) moderately increases risk')

    if q.family_stroke:
        score += 10
        factors.append('Family history of stroke increases risk')

    if q.numbness or q.dizziness:
        score += 15
        factors.append('Current symptoms require immediate medical attention')

    return _result(score, factors, 'No major risk factors identified. Maintain healthy lifestyle.')


def calculate_heart_disease_risk(q: Questionnaire) -> Dict[str, Any]:
    score = 0
    factors: List[str] = []

    if q.age >= 65:
        score += 25
        factors.append('Age 65+ significantly increases heart disease risk')
    elif q.age >= 55:
        score += 15
        factors.append('Age 55+ increases heart disease risk')
    elif q.age >= 45:
        score += 8
        factors.append('Age 45+ moderately increases risk')

    if q.gender == 'Male' and q.age >= 45:
        score += 10
        factors.append('Men over 45 have higher heart disease risk')
    elif q.gender == 'Female' and q.age >= 55:
        score += 10
        factors.append('Women over 55 have increased heart disease risk')

    if q.has_heart_disease:
        score += 40
        factors.append('Existing heart disease requires ongoing management')
    if q.has_high_blood_pressure:
        score += 20
        factors.append('High blood pressure damages arteries over time')
    if q.has_high_cholesterol:
        score += 18
        factors.append('High cholesterol clogs arteries')
    if q.has_diabetes:
        score += 20
        factors.append('Diabetes significantly increases heart disease risk')

    if q.smoking_status == 'Current':
        score += 20
        factors.append('Smoking is a leading cause of heart disease')
    elif q.smoking_status == 'Former':
        score += 8
        factors.append('Former smoking still poses some risk')

    if q.exercise_frequency in INACTIVE:
        score += 10
        factors.append('Physical inactivity weakens the heart')

    if q.alcohol_consumption == 'Heavily':
        score += 12
        factors.append('Heavy alcohol use damages the heart')

    bmi = calculate_bmi(q.weight, q.height)
    if bmi >= 30:
        score += 15
        factors.append('Obesity strains the cardiovascular system')
    elif bmi >= 25:
        score += 8
        factors.append('Being overweight increases heart disease risk')

    if q.family_heart_disease:
        score += 12
        factors.append('Family history of heart disease increases risk')

    if q.chest_pain:
        score += 20
        factors.append('Chest pain requires immediate medical evaluation')
    if q.shortness_of_breath:
        score += 12
        factors.append('Shortness of breath may indicate heart problems')

    return _result(score, factors, 'No major risk factors identified. Keep up healthy habits.')


def calculate_diabetes_risk(q: Questionnaire) -> Dict[str, Any]:
    if q.has_diabetes:
        return {
            'risk': VERY_HIGH,
            'score': MAX_SCORE,
            'factors': ['Already diagnosed with diabetes. Continue treatment and monitoring.'],
        }

    score = 0
    factors: List[str] = []

    if q.age >= 45:
        score += 15
        factors.append('Age 45+ increases diabetes risk')

    bmi = calculate_bmi(q.weight, q.height)
    if bmi >= 35:
        score += 30
        factors.append('Severe obesity (BMI ≥35) greatly increases diabetes risk')
    elif bmi >= 30:
        score += 25
        factors.append('Obesity (BMI 30-35) significantly increases diabetes risk')
    elif bmi >= 25:
        score += 15
        factors.append('Being overweight (BMI 25-30) increases diabetes risk')

    if q.family_diabetes:
        score += 20
        factors.append('Family history of diabetes increases risk significantly')
    if q.exercise_frequency in INACTIVE:
        score += 12
        factors.append('Physical inactivity increases diabetes risk')
    if q.has_high_blood_pressure:
        score += 10
        factors.append('High blood pressure often accompanies diabetes')
    if q.has_high_cholesterol:
        score += 8
        factors.append('High cholesterol increases diabetes risk')
    if q.fatigue:
        score += 10
        factors.append('Chronic fatigue may indicate blood sugar issues')

    return _result(score, factors, 'Low risk. Maintain healthy weight and active lifestyle.')


def calculate_all_risks(assessment: Any) -> Dict[str, Dict[str, Any]]:
    """Score every disease for a questionnaire, model instance or mapping."""
    q = assessment if isinstance(assessment, Questionnaire) else Questionnaire.from_object(assessment)
    return {
        'stroke': calculate_stroke_risk(q),
        'heartDisease': calculate_heart_disease_risk(q),
        'diabetes': calculate_diabetes_risk(q),
    }
