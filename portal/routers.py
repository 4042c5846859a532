"""
URL mappings for the Medflow backend API.

This module registers all API endpoints with their corresponding view
functions.  Paths mirror those used by the front-end; trailing slashes
are deliberately omitted.
"""
from django.urls import path, include

from .auth_views import (
    add_patient_view,
    change_password_view,
    delete_account_view,
    login_view,
    profile_view,
    register_view,
    resend_verification_view,
    verify_view,
)
from .views import admin_users
from .views import appointment_invitations
from .views import doctor
from .views import health
from .views import health_assessment
from .views import medical_records
from .views import notifications
from .views import reception_agents


urlpatterns = [
    path('', include('django_prometheus.urls')),
    path('healthz', health.healthz, name='healthz'),
    # Authentication
    path('api/auth/register', register_view, name='register'),
    path('api/auth/login', login_view, name='login'),
    path('api/auth/verify', verify_view, name='verify'),
    path('api/auth/resend-verification', resend_verification_view, name='resend-verification'),
    path('api/auth/profile', profile_view, name='profile'),
    path('api/auth/change-password', change_password_view, name='change-password'),
    path('api/auth/account', delete_account_view, name='delete-account'),
    path('api/auth/add-patient', add_patient_view, name='add-patient'),
    # Doctor access requests
    path('api/doctor/statistics', doctor.statistics, name='doctor-statistics'),
    path('api/doctor/patients/all', doctor.all_patients, name='doctor-all-patients'),
    path('api/doctor/request/send', doctor.send_request, name='doctor-send-request'),
    path('api/doctor/patients/my-patients', doctor.my_patients, name='doctor-my-patients'),
    path('api/doctor/requests/pending', doctor.pending_requests, name='doctor-requests-pending'),
    path('api/doctor/requests/all', doctor.all_requests, name='doctor-requests-all'),
    path('api/doctor/request/<int:request_id>', doctor.respond_request, name='doctor-request-respond'),
    # Reception agents
    path('api/reception-agents/all', reception_agents.all_agents, name='agents-all'),
    path('api/reception-agents/invite', reception_agents.invite, name='agents-invite'),
    path('api/reception-agents/my-doctors', reception_agents.my_doctors, name='agents-my-doctors'),
    path('api/reception-agents/patients', reception_agents.my_patients, name='agents-patients'),
    path('api/reception-agents/invitations/pending', reception_agents.pending_invitations,
         name='agents-invitations-pending'),
    path('api/reception-agents/invitations/all', reception_agents.all_invitations, name='agents-invitations-all'),
    path('api/reception-agents/invitation/<int:invitation_id>', reception_agents.respond_invitation,
         name='agents-invitation-respond'),
    path('api/reception-agents/<int:agent_id>', reception_agents.remove_agent, name='agents-remove'),
    # Appointment invitations
    path('api/appointment-invitations/doctors/all', appointment_invitations.all_doctors,
         name='appointments-doctors-all'),
    path('api/appointment-invitations/send', appointment_invitations.send_invitation, name='appointments-send'),
    path('api/appointment-invitations/my-invitations', appointment_invitations.my_invitations,
         name='appointments-my-invitations'),
    path('api/appointment-invitations/pending', appointment_invitations.pending_invitations,
         name='appointments-pending'),
    path('api/appointment-invitations/all', appointment_invitations.all_invitations, name='appointments-all'),
    path('api/appointment-invitations/<int:invitation_id>', appointment_invitations.respond_invitation,
         name='appointments-respond'),
    # Medical records
    path('api/medical-records/<int:patient_id>', medical_records.get_record, name='medical-record'),
    path('api/medical-records/<int:patient_id>/<str:kind>', medical_records.add_entry, name='medical-record-add'),
    path('api/medical-records/<int:patient_id>/<str:kind>/<int:entry_id>', medical_records.entry_detail,
         name='medical-record-entry'),
    # Health assessment
    path('api/health-assessment/check', health_assessment.check, name='assessment-check'),
    path('api/health-assessment/submit', health_assessment.submit, name='assessment-submit'),
    path('api/health-assessment/my-assessment', health_assessment.my_assessment, name='assessment-mine'),
    path('api/health-assessment/patient/<int:patient_id>', health_assessment.patient_assessment,
         name='assessment-patient'),
    # Admin
    path('api/admin/users', admin_users.list_users, name='admin-users'),
    path('api/admin/users/<int:user_id>', admin_users.user_detail, name='admin-user-detail'),
    path('api/admin/users/<int:user_id>/password', admin_users.user_password, name='admin-user-password'),
    path('api/admin/stats', admin_users.stats, name='admin-stats'),
    # Notifications
    path('api/notifications', notifications.inbox, name='notifications'),
    path('api/notifications/unread-count', notifications.unread_count, name='notifications-unread-count'),
    path('api/notifications/mark-all-read', notifications.mark_all_read, name='notifications-mark-all-read'),
    path('api/notifications/<int:notification_id>/read', notifications.mark_read, name='notifications-read'),
    path('api/notifications/<int:notification_id>', notifications.delete, name='notifications-delete'),
]
