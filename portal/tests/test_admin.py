"""
Admin user management tests.

Admins manage accounts of every role through ``/api/admin``; every other
role is refused.
"""
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient, APITestCase

from portal.authentication import issue_token
from portal.models import User

PASSWORD = 'Str0ng-Passw0rd!'


class AdminUserTests(APITestCase):
    def setUp(self) -> None:
        self.admin = User.objects.create_user(
            email='admin@medflow.test', password=PASSWORD, first_name='Ada', last_name='Admin',
            role=User.ROLE_ADMIN, is_verified=True,
        )
        self.patient = User.objects.create_user(
            email='paul@medflow.test', password=PASSWORD, first_name='Paul', last_name='Patient',
            role=User.ROLE_PATIENT, is_verified=True,
        )
        self.doctor = User.objects.create_user(
            email='derek@medflow.test', password=PASSWORD, first_name='Derek', last_name='Doctor',
            role=User.ROLE_DOCTOR, is_verified=True,
        )
        self.pending = User.objects.create_user(
            email='rita@medflow.test', password=PASSWORD, first_name='Rita', last_name='Reception',
            role=User.ROLE_RECEPTION_AGENT, is_verified=False,
        )

    def authenticate(self, user: User) -> APIClient:
        """Return an APIClient carrying a bearer token for the given user."""
        client = APIClient()
        client.credentials(HTTP_AUTHORIZATION=f'Bearer {issue_token(user)}')
        return client

    def test_only_admins_manage_users(self):
        response = self.authenticate(self.doctor).get(reverse('admin-users'))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        response = self.authenticate(self.patient).get(reverse('admin-stats'))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_list_and_filter_users(self):
        client = self.authenticate(self.admin)
        response = client.get(reverse('admin-users'))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        ids = {u['id'] for u in response.data['users']}
        self.assertEqual(ids, {self.admin.id, self.patient.id, self.doctor.id, self.pending.id})

        response = client.get(reverse('admin-users'), {'role': 'Doctor'})
        self.assertEqual([u['id'] for u in response.data['users']], [self.doctor.id])

        response = client.get(reverse('admin-users'), {'search': 'paul'})
        self.assertEqual([u['id'] for u in response.data['users']], [self.patient.id])

    def test_update_user(self):
        response = self.authenticate(self.admin).put(
            reverse('admin-user-detail', args=[self.pending.id]),
            {'isVerified': True, 'role': 'Doctor', 'speciality': 'Oncology'},
            format='json',
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.pending.refresh_from_db()
        self.assertTrue(self.pending.is_verified)
        self.assertEqual(self.pending.role, User.ROLE_DOCTOR)
        self.assertEqual(self.pending.speciality, 'Oncology')

    def test_update_rejects_taken_email(self):
        response = self.authenticate(self.admin).put(
            reverse('admin-user-detail', args=[self.doctor.id]),
            {'email': self.patient.email},
            format='json',
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'Email already in use')

    def test_reset_password(self):
        client = self.authenticate(self.admin)
        url = reverse('admin-user-password', args=[self.patient.id])
        self.assertEqual(client.put(url, {'newPassword': '123'}, format='json').status_code, 400)
        self.assertEqual(client.put(url, {'newPassword': 'Br4nd-New-Secret!'}, format='json').status_code, 200)
        self.patient.refresh_from_db()
        self.assertTrue(self.patient.check_password('Br4nd-New-Secret!'))

    def test_delete_user(self):
        client = self.authenticate(self.admin)
        response = client.delete(reverse('admin-user-detail', args=[self.admin.id]))
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'Cannot delete your own account')

        url = reverse('admin-user-detail', args=[self.patient.id])
        self.assertEqual(client.delete(url).status_code, status.HTTP_200_OK)
        self.assertEqual(client.delete(url).status_code, status.HTTP_404_NOT_FOUND)

    def test_stats(self):
        response = self.authenticate(self.admin).get(reverse('admin-stats'))
        self.assertEqual(response.data['totalUsers'], 4)
        self.assertEqual(response.data['verifiedUsers'], 3)
        self.assertEqual(response.data['unverifiedUsers'], 1)
        self.assertEqual(
            response.data['byRole'],
            {'Patient': 1, 'Doctor': 1, 'Reception Agent': 1, 'Admin': 1},
        )
