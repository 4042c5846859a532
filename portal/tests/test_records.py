import pytest
from django.urls import reverse

from portal.models import Appointment, MedicalRecord, Notification, Prescription, User

pytestmark = pytest.mark.django_db

WHEN = '2030-05-01T10:00:00Z'


def add(client, patient, kind, payload):
    return client.post(reverse('medical-record-add', args=[patient.id, kind]), payload, format='json')


def entry_url(patient, kind, entry_id):
    return reverse('medical-record-entry', args=[patient.id, kind, entry_id])


def test_doctor_writes_every_kind(doctor, patient, connect, client_for):
    connect(doctor, patient=patient)
    doc = client_for(doctor)
    payloads = {
        'appointment': {'date': WHEN, 'reason': 'Follow-up'},
        'prescription': {'medication': 'Aspirin', 'dosage': '100mg', 'duration': '30 days'},
        'disease': {'name': 'Hypertension', 'diagnosedDate': WHEN, 'status': 'chronic'},
        'diagnostic': {'testName': 'ECG', 'testDate': WHEN, 'results': 'Normal sinus rhythm'},
        'comment': {'text': 'Patient doing well'},
    }
    for kind, payload in payloads.items():
        r = add(doc, patient, kind, payload)
        assert r.status_code == 201, r.data
        assert r.data[kind]['doctorId'] == doctor.id

    record = client_for(patient).get(reverse('medical-record', args=[patient.id])).data['medicalRecord']
    assert record['patientId'] == patient.id
    assert record['prescriptions'][0]['medication'] == 'Aspirin'
    assert record['diseases'][0]['status'] == 'chronic'
    assert record['diagnostics'][0]['testName'] == 'ECG'
    assert len(record['appointments']) == len(record['comments']) == 1
    assert Notification.objects.filter(recipient=patient, type='prescription_added').exists()


def test_doctor_without_access_is_denied(doctor, patient, client_for):
    r = add(client_for(doctor), patient, 'comment', {'text': 'Hello'})
    assert r.status_code == 403
    assert not MedicalRecord.objects.exists()


def test_patient_reads_but_never_writes(patient, make_user, client_for):
    pat = client_for(patient)
    assert pat.get(reverse('medical-record', args=[patient.id])).status_code == 200
    other = make_user(User.ROLE_PATIENT)
    assert pat.get(reverse('medical-record', args=[other.id])).status_code == 403
    assert add(pat, patient, 'comment', {'text': 'Self note'}).status_code == 403


def test_text_is_sanitised(doctor, patient, connect, client_for):
    connect(doctor, patient=patient)
    r = add(client_for(doctor), patient, 'comment', {'text': '<script>alert(1)</script>Fine'})
    assert r.status_code == 201
    assert '<script>' not in r.data['comment']['text']


def test_unknown_kind_is_not_found(doctor, patient, connect, client_for):
    connect(doctor, patient=patient)
    r = add(client_for(doctor), patient, 'xray', {'text': 'x'})
    assert r.status_code == 404


def test_only_author_modifies_entries(doctor, patient, make_user, connect, client_for):
    colleague = make_user(User.ROLE_DOCTOR)
    connect(doctor, patient=patient)
    connect(colleague, patient=patient)
    r = add(client_for(doctor), patient, 'prescription', {'medication': 'Metformin', 'dosage': '500mg'})
    entry_id = r.data['prescription']['id']

    other = client_for(colleague)
    r = other.put(entry_url(patient, 'prescription', entry_id), {'dosage': '1000mg'}, format='json')
    assert r.status_code == 403
    assert r.data['message'] == 'You can only modify your own prescription entries'
    assert other.delete(entry_url(patient, 'prescription', entry_id)).status_code == 403

    author = client_for(doctor)
    r = author.put(entry_url(patient, 'prescription', entry_id), {'dosage': '1000mg'}, format='json')
    assert r.status_code == 200
    assert r.data['prescription']['dosage'] == '1000mg'
    assert r.data['prescription']['medication'] == 'Metformin'
    assert Notification.objects.filter(recipient=patient, type='prescription_updated').exists()

    assert author.delete(entry_url(patient, 'prescription', entry_id)).status_code == 200
    assert not Prescription.objects.exists()
    assert author.delete(entry_url(patient, 'prescription', entry_id)).status_code == 404


def test_empty_update_changes_nothing(doctor, patient, connect, client_for):
    connect(doctor, patient=patient)
    doc = client_for(doctor)
    r = add(doc, patient, 'prescription', {'medication': 'Aspirin', 'dosage': '100mg'})
    entry = Prescription.objects.get(pk=r.data['prescription']['id'])
    stamp = MedicalRecord.objects.get(patient=patient).updated_at

    r = doc.put(entry_url(patient, 'prescription', entry.id), {}, format='json')
    assert r.status_code == 200
    assert r.data['prescription']['dosage'] == '100mg'
    assert MedicalRecord.objects.get(patient=patient).updated_at == stamp
    assert not Notification.objects.filter(type='prescription_updated').exists()


def test_agent_manages_appointments_only(doctor, patient, agent, connect, client_for):
    connect(doctor, patient=patient, agent=agent)
    ag = client_for(agent)

    assert ag.get(reverse('medical-record', args=[patient.id])).status_code == 200

    r = add(ag, patient, 'appointment', {'date': WHEN, 'reason': 'Booked by desk'})
    assert r.status_code == 400
    assert r.data['message'] == 'Doctor ID is required for reception agents'

    r = add(ag, patient, 'appointment', {'date': WHEN, 'reason': 'Booked by desk', 'doctorId': doctor.id})
    assert r.status_code == 201
    appointment = Appointment.objects.get()
    assert appointment.doctor_id == doctor.id

    r = ag.put(entry_url(patient, 'appointment', appointment.id), {'notes': 'Moved'}, format='json')
    assert r.status_code == 200

    r = add(ag, patient, 'prescription', {'medication': 'Aspirin', 'dosage': '100mg'})
    assert r.status_code == 403
    assert r.data['message'] == 'Reception agents can only manage appointments'


def test_agent_cannot_touch_other_doctors_appointments(doctor, patient, agent, make_user, connect, client_for):
    outsider = make_user(User.ROLE_DOCTOR)
    connect(doctor, patient=patient, agent=agent)
    connect(outsider, patient=patient)
    r = add(client_for(outsider), patient, 'appointment', {'date': WHEN, 'reason': 'Private'})
    entry_id = r.data['appointment']['id']

    r = client_for(agent).delete(entry_url(patient, 'appointment', entry_id))
    assert r.status_code == 403
    assert r.data['message'] == 'You can only delete appointments for your assigned doctors'


def test_admin_has_no_record_access(admin_user, patient, client_for):
    r = client_for(admin_user).get(reverse('medical-record', args=[patient.id]))
    assert r.status_code == 403
