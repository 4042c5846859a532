import datetime

import pytest
from django.urls import reverse
from django.utils import timezone

from portal.exceptions import ConflictError, NotFoundError, ValidationError
from portal.models import (
    Appointment,
    AppointmentInvitation,
    DoctorReceptionAgent,
    DoctorRequest,
    MedicalRecord,
    Notification,
    RelationshipStatus,
)
from portal.services.relationships import agent_invitations, appointment_invitations, doctor_requests

pytestmark = pytest.mark.django_db


def test_doctor_request_lifecycle(doctor, patient):
    req, resent = doctor_requests.create(doctor.id, patient.id)
    assert not resent
    assert req.status == RelationshipStatus.PENDING
    assert Notification.objects.filter(recipient=patient, type='doctor_request').count() == 1

    with pytest.raises(ConflictError, match='Request already pending'):
        doctor_requests.create(doctor.id, patient.id)

    doctor_requests.respond(req.id, patient.id, RelationshipStatus.ACCEPTED)
    assert MedicalRecord.objects.filter(patient=patient).exists()
    assert Notification.objects.filter(recipient=doctor, type='request_accepted').count() == 1

    with pytest.raises(ConflictError, match='Request already accepted'):
        doctor_requests.create(doctor.id, patient.id)


def test_rejected_request_is_resent(doctor, patient):
    req, _ = doctor_requests.create(doctor.id, patient.id)
    doctor_requests.respond(req.id, patient.id, RelationshipStatus.REJECTED)
    assert not MedicalRecord.objects.filter(patient=patient).exists()

    again, resent = doctor_requests.create(doctor.id, patient.id)
    assert resent
    assert again.pk == req.pk
    assert again.status == RelationshipStatus.PENDING
    assert DoctorRequest.objects.count() == 1
    assert Notification.objects.filter(recipient=patient, type='doctor_request').count() == 2


def test_second_response_is_rejected(doctor, patient):
    req, _ = doctor_requests.create(doctor.id, patient.id)
    doctor_requests.respond(req.id, patient.id, RelationshipStatus.ACCEPTED)
    with pytest.raises(NotFoundError, match='not found or already processed'):
        doctor_requests.respond(req.id, patient.id, RelationshipStatus.ACCEPTED)
    assert MedicalRecord.objects.filter(patient=patient).count() == 1
    assert Notification.objects.filter(recipient=doctor, type='request_accepted').count() == 1


def test_only_target_may_respond(doctor, patient, make_user):
    req, _ = doctor_requests.create(doctor.id, patient.id)
    intruder = make_user()
    with pytest.raises(NotFoundError):
        doctor_requests.respond(req.id, intruder.id, RelationshipStatus.ACCEPTED)
    with pytest.raises(ValidationError, match='Invalid status'):
        doctor_requests.respond(req.id, patient.id, RelationshipStatus.PENDING)


def test_agent_invitation_remove(doctor, agent):
    inv, _ = agent_invitations.create(doctor.id, agent.id)
    agent_invitations.respond(inv.id, agent.id, RelationshipStatus.ACCEPTED)
    assert Notification.objects.filter(recipient=doctor, type='invitation_accepted').exists()
    agent_invitations.remove(doctor.id, agent.id)
    assert not DoctorReceptionAgent.objects.exists()
    with pytest.raises(NotFoundError):
        agent_invitations.remove(doctor.id, agent.id)


def test_accepted_appointment_invitation_grants_access(doctor, patient):
    when = timezone.now() + datetime.timedelta(days=3)
    inv, _ = appointment_invitations.create(patient.id, doctor.id, appointment_date=when, reason='Check-up')
    assert Notification.objects.filter(recipient=doctor, type='appointment_invitation').exists()

    appointment_invitations.respond(inv.id, doctor.id, RelationshipStatus.ACCEPTED)

    access = DoctorRequest.objects.get(doctor=doctor, patient=patient)
    assert access.status == RelationshipStatus.ACCEPTED
    appointment = Appointment.objects.get(record__patient=patient)
    assert appointment.doctor_id == doctor.id
    assert appointment.reason == 'Check-up'
    assert Notification.objects.filter(recipient=patient, type='appointment_accepted').exists()


def test_appointment_invitation_upgrades_rejected_request(doctor, patient):
    DoctorRequest.objects.create(doctor=doctor, patient=patient, status=RelationshipStatus.REJECTED)
    inv, _ = appointment_invitations.create(patient.id, doctor.id, appointment_date=timezone.now(), reason='Pain')
    appointment_invitations.respond(inv.id, doctor.id, RelationshipStatus.ACCEPTED)
    assert DoctorRequest.objects.get(doctor=doctor, patient=patient).status == RelationshipStatus.ACCEPTED


def test_appointment_invitations_may_repeat(doctor, patient):
    for _ in range(2):
        appointment_invitations.create(patient.id, doctor.id, appointment_date=timezone.now(), reason='Again')
    assert AppointmentInvitation.objects.count() == 2


# ---------------------------------------------------------------------------
# HTTP
# ---------------------------------------------------------------------------

def test_doctor_request_endpoints(doctor, patient, client_for):
    doc = client_for(doctor)
    r = doc.post(reverse('doctor-send-request'), {'patientId': patient.id}, format='json')
    assert r.status_code == 201
    request_id = r.data['request']['id']
    assert r.data['request']['doctor']['speciality'] == 'Cardiology'
    assert 'speciality' not in r.data['request']['patient']

    r = doc.post(reverse('doctor-send-request'), {'patientId': patient.id}, format='json')
    assert r.status_code == 400
    assert r.data['ok'] is False

    pat = client_for(patient)
    r = pat.get(reverse('doctor-requests-pending'))
    assert [x['id'] for x in r.data['requests']] == [request_id]

    r = pat.put(reverse('doctor-request-respond', args=[request_id]), {'status': 'accepted'}, format='json')
    assert r.status_code == 200
    assert r.data['message'] == 'Request accepted successfully'

    r = doc.get(reverse('doctor-my-patients'))
    assert [p['id'] for p in r.data['patients']] == [patient.id]

    r = doc.get(reverse('doctor-all-patients'))
    assert r.data['patients'][0]['requestStatus'] == 'accepted'


def test_doctor_request_to_unknown_patient(doctor, client_for):
    r = client_for(doctor).post(reverse('doctor-send-request'), {'patientId': 9999}, format='json')
    assert r.status_code == 404
    assert r.data['message'] == 'Patient not found'


def test_patients_cannot_send_doctor_requests(patient, client_for):
    r = client_for(patient).post(reverse('doctor-send-request'), {'patientId': patient.id}, format='json')
    assert r.status_code == 403


def test_reception_agent_endpoints(doctor, agent, client_for):
    doc = client_for(doctor)
    r = doc.post(reverse('agents-invite'), {'receptionAgentId': agent.id}, format='json')
    assert r.status_code == 201

    ag = client_for(agent)
    r = ag.get(reverse('agents-invitations-pending'))
    invitation_id = r.data['invitations'][0]['id']
    r = ag.put(reverse('agents-invitation-respond', args=[invitation_id]), {'status': 'accepted'}, format='json')
    assert r.status_code == 200

    r = ag.get(reverse('agents-my-doctors'))
    assert [d['id'] for d in r.data['doctors']] == [doctor.id]

    r = doc.delete(reverse('agents-remove', args=[agent.id]))
    assert r.status_code == 200
    assert client_for(agent).get(reverse('agents-my-doctors')).data['doctors'] == []


def test_agent_patient_list_groups_doctors(doctor, agent, patient, connect, client_for):
    connect(doctor, patient=patient, agent=agent)
    r = client_for(agent).get(reverse('agents-patients'))
    assert r.status_code == 200
    assert [p['id'] for p in r.data['patients']] == [patient.id]
    assert [d['id'] for d in r.data['patients'][0]['doctors']] == [doctor.id]


def test_appointment_invitation_endpoints(doctor, patient, client_for):
    pat = client_for(patient)
    when = (timezone.now() + datetime.timedelta(days=1)).isoformat()
    r = pat.post(reverse('appointments-send'),
                 {'doctorId': doctor.id, 'appointmentDate': when, 'reason': 'Headache'}, format='json')
    assert r.status_code == 201
    invitation_id = r.data['invitation']['id']

    doc = client_for(doctor)
    r = doc.get(reverse('appointments-pending'))
    assert [i['id'] for i in r.data['invitations']] == [invitation_id]

    r = doc.put(reverse('appointments-respond', args=[invitation_id]), {'status': 'accepted'}, format='json')
    assert r.status_code == 200
    assert r.data['message'] == 'Invitation accepted'

    r = doc.put(reverse('appointments-respond', args=[invitation_id]), {'status': 'rejected'}, format='json')
    assert r.status_code == 404

    r = pat.get(reverse('appointments-doctors-all'))
    listed = {d['id']: d for d in r.data['doctors']}
    assert listed[doctor.id]['isConnected'] is True


def test_respond_rejects_unknown_status(doctor, patient, client_for):
    req, _ = doctor_requests.create(doctor.id, patient.id)
    r = client_for(patient).put(reverse('doctor-request-respond', args=[req.id]), {'status': 'maybe'}, format='json')
    assert r.status_code == 400
    assert r.data['message'] == 'Invalid status'
