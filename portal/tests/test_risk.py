import pytest

from portal.services.risk import (
    Questionnaire,
    calculate_all_risks,
    calculate_bmi,
    calculate_diabetes_risk,
    calculate_heart_disease_risk,
    calculate_stroke_risk,
    risk_level,
)


def answers(**overrides):
    base = dict(
        age=30,
        gender='Female',
        height=175,
        weight=70,
        smoking_status='Never',
        exercise_frequency='Regularly',
        alcohol_consumption='Never',
    )
    base.update(overrides)
    return Questionnaire(**base)


@pytest.mark.parametrize('score,level', [
    (100, 'Very High'),
    (70, 'Very High'),
    (69, 'High'),
    (50, 'High'),
    (49, 'Moderate'),
    (30, 'Moderate'),
    (29, 'Low'),
    (0, 'Low'),
])
def test_risk_level_thresholds(score, level):
    assert risk_level(score) == level


def test_bmi_uses_centimetres():
    assert calculate_bmi(70, 175) == pytest.approx(22.857, rel=1e-3)


def test_healthy_profile_reports_placeholder_factor():
    q = answers()
    stroke = calculate_stroke_risk(q)
    heart = calculate_heart_disease_risk(q)
    diabetes = calculate_diabetes_risk(q)
    assert stroke == {
        'risk': 'Low',
        'score': 0,
        'factors': ['No major risk factors identified. Maintain healthy lifestyle.'],
    }
    assert heart['score'] == 0
    assert heart['factors'] == ['No major risk factors identified. Keep up healthy habits.']
    assert diabetes['score'] == 0
    assert diabetes['factors'] == ['Low risk. Maintain healthy weight and active lifestyle.']


def test_stroke_score_adds_factors_in_order():
    # 20 (age) + 25 (blood pressure) + 15 (smoking) + 8 (inactivity) + 6 (overweight)
    q = answers(age=70, has_high_blood_pressure=True, smoking_status='Current',
                exercise_frequency='Never', weight=80, height=172)
    result = calculate_stroke_risk(q)
    assert result['score'] == 74
    assert result['risk'] == 'Very High'
    assert result['factors'] == [
        'Age 65-74 increases stroke risk',
        'High blood pressure is a major stroke risk factor',
        'Current smoking doubles stroke risk',
        'Lack of exercise increases stroke risk',
        'Overweight (BMI 25-30) moderately increases risk',
    ]


def test_stroke_score_for_an_overweight_older_smoker():
    q = answers(age=70, gender='Male', height=175, weight=90, has_high_blood_pressure=True,
                smoking_status='Current', exercise_frequency='Never', alcohol_consumption='Never')
    assert round(calculate_bmi(q.weight, q.height), 1) == 29.4
    result = calculate_stroke_risk(q)
    assert result['score'] == 74
    assert result['risk'] == 'Very High'
    assert result['factors'][-1] == 'Overweight (BMI 25-30) moderately increases risk'


def test_stroke_symptoms_count_once():
    both = calculate_stroke_risk(answers(numbness=True, dizziness=True))
    one = calculate_stroke_risk(answers(dizziness=True))
    assert both['score'] == one['score'] == 15
    assert both['factors'] == ['Current symptoms require immediate medical attention']


def test_scores_are_capped_at_100():
    q = answers(
        age=80, gender='Male', weight=120, height=170,
        has_diabetes=True, has_high_blood_pressure=True, has_heart_disease=True,
        had_stroke=True, has_high_cholesterol=True, smoking_status='Current',
        exercise_frequency='Never', alcohol_consumption='Heavily',
        family_heart_disease=True, family_stroke=True, chest_pain=True,
        shortness_of_breath=True, numbness=True,
    )
    assert calculate_stroke_risk(q)['score'] == 100
    assert calculate_heart_disease_risk(q)['score'] == 100
    assert calculate_heart_disease_risk(q)['risk'] == 'Very High'


def test_heart_gender_rule_depends_on_age():
    male = calculate_heart_disease_risk(answers(age=50, gender='Male'))
    female = calculate_heart_disease_risk(answers(age=50, gender='Female'))
    assert male['score'] == 18
    assert 'Men over 45 have higher heart disease risk' in male['factors']
    assert female['score'] == 8
    assert female['factors'] == ['Age 45+ moderately increases risk']


def test_diagnosed_diabetes_short_circuits():
    q = answers(has_diabetes=True, weight=40)
    assert calculate_diabetes_risk(q) == {
        'risk': 'Very High',
        'score': 100,
        'factors': ['Already diagnosed with diabetes. Continue treatment and monitoring.'],
    }


def test_diabetes_obesity_bands():
    assert calculate_diabetes_risk(answers(weight=110, height=175))['score'] == 30
    assert calculate_diabetes_risk(answers(weight=95, height=175))['score'] == 25
    assert calculate_diabetes_risk(answers(weight=80, height=175))['score'] == 15


def test_calculate_all_risks_accepts_mappings():
    result = calculate_all_risks({
        'age': 50, 'gender': 'Male', 'height': 180, 'weight': 75,
        'smoking_status': 'Former', 'exercise_frequency': 'Daily', 'alcohol_consumption': 'Never',
    })
    assert set(result) == {'stroke', 'heartDisease', 'diabetes'}
    assert result['stroke']['score'] == 5
    assert result['heartDisease']['score'] == 8 + 10 + 8
    assert result['diabetes']['score'] == 15
