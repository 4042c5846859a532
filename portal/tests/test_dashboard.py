import datetime

import pytest
from django.core.management import call_command
from django.urls import reverse
from django.utils import timezone

from portal.models import Appointment, DoctorRequest, MedicalRecord, Prescription, User

pytestmark = pytest.mark.django_db


def test_doctor_statistics(doctor, patient, make_user, connect, client_for):
    connect(doctor, patient=patient)
    waiting = make_user(User.ROLE_PATIENT)
    DoctorRequest.objects.create(doctor=doctor, patient=waiting)

    record = MedicalRecord.objects.create(patient=patient)
    now = timezone.now()
    Appointment.objects.create(record=record, doctor=doctor, date=now, reason='Today')
    Appointment.objects.create(record=record, doctor=doctor, date=now - datetime.timedelta(days=400),
                               reason='Long ago')
    Prescription.objects.create(record=record, doctor=doctor, medication='Aspirin', dosage='100mg')

    r = client_for(doctor).get(reverse('doctor-statistics'))
    assert r.status_code == 200
    assert r.data['totalPatients'] == 1
    assert r.data['pendingRequests'] == 1
    assert r.data['totalAppointments'] == 2
    assert r.data['totalPrescriptions'] == 1
    assert r.data['totalDiseases'] == 0
    assert len(r.data['recentAppointments']) == 2
    assert r.data['recentAppointments'][0]['patientId'] == patient.id

    monthly = r.data['monthlyData']
    assert len(monthly) == 6
    assert monthly[-1]['month'] == timezone.localdate().strftime('%b %Y')
    assert monthly[-1]['count'] == 1
    assert sum(m['count'] for m in monthly) == 1


def test_statistics_ignore_revoked_patients(doctor, patient, client_for):
    DoctorRequest.objects.create(doctor=doctor, patient=patient, status='rejected')
    record = MedicalRecord.objects.create(patient=patient)
    Appointment.objects.create(record=record, doctor=doctor, date=timezone.now(), reason='Old')
    r = client_for(doctor).get(reverse('doctor-statistics'))
    assert r.data['totalPatients'] == 0
    assert r.data['totalAppointments'] == 0


def test_healthz(client):
    r = client.get(reverse('healthz'))
    assert r.status_code == 200
    assert r.json() == {'ok': True, 'db': True}


def test_ensure_demo_users_is_idempotent():
    call_command('ensure_demo_users', '--password', 'Demo-Passw0rd!')
    call_command('ensure_demo_users', '--password', 'Demo-Passw0rd!')
    assert User.objects.count() == 4
    doctor = User.objects.get(email='doctor@medflow.local')
    assert doctor.role == User.ROLE_DOCTOR
    assert doctor.is_verified
    assert doctor.check_password('Demo-Passw0rd!')
