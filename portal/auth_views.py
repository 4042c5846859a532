"""
Authentication and account views.

This module defines the registration, verification and login endpoints
used by the front-end as well as the self-service profile endpoints.
By isolating these views from the authentication class (see
``portal.authentication``) we prevent circular imports when Django REST
framework initialises authentication classes.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from portal.authentication import issue_token
from portal.permissions import IsReceptionOrAdmin
from portal.serializers.auth import (
    AddPatientSerializer,
    ChangePasswordSerializer,
    DeleteAccountSerializer,
    LoginSerializer,
    ProfileUpdateSerializer,
    RegisterSerializer,
    ResendVerificationSerializer,
    VerifySerializer,
)
from portal.services import accounts
from portal.services.accounts import serialize_user

VERIFICATION_SENT = 'Verification code sent to your email. Please check your inbox.'


# ---------------------------------------------------------------------
# Registration & verification
# ---------------------------------------------------------------------
@api_view(['POST'])
@permission_classes([AllowAny])
def register_view(request):
    s = RegisterSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    created = accounts.register(
        name=vd['name'],
        family_name=vd['familyName'],
        email=vd['email'],
        password=vd['password'],
        role=vd['role'],
        speciality=vd.get('speciality', ''),
    )
    return Response(
        {'ok': True, 'message': VERIFICATION_SENT, 'email': vd['email'].lower()},
        status=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
    )


@api_view(['POST'])
@permission_classes([AllowAny])
def verify_view(request):
    s = VerifySerializer(data=request.data)
    s.is_valid(raise_exception=True)
    user = accounts.verify_email(s.validated_data['email'], s.validated_data['code'])
    return Response({
        'ok': True,
        'message': 'Email verified successfully',
        'token': issue_token(user),
        'user': serialize_user(user),
    })


@api_view(['POST'])
@permission_classes([AllowAny])
def resend_verification_view(request):
    s = ResendVerificationSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    accounts.resend_verification(s.validated_data['email'])
    return Response({'ok': True, 'message': 'Verification code sent to your email'})


# ---------------------------------------------------------------------
# Email/password login
# ---------------------------------------------------------------------
@api_view(['POST'])
@permission_classes([AllowAny])
def login_view(request):
    s = LoginSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    user = accounts.authenticate(s.validated_data['email'], s.validated_data['password'])
    return Response({
        'ok': True,
        'message': 'Login successful',
        'token': issue_token(user),
        'user': serialize_user(user),
    })


# DRF's ScopedRateThrottle reads throttle_scope from the generated view class
for _view in (login_view, register_view, verify_view, resend_verification_view):
    _view.cls.throttle_scope = 'login'


# ---------------------------------------------------------------------
# Profile
# ---------------------------------------------------------------------
@api_view(['GET', 'PUT'])
@permission_classes([IsAuthenticated])
def profile_view(request):
    if request.method == 'GET':
        return Response({'ok': True, 'user': serialize_user(request.user)})
    s = ProfileUpdateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    user = accounts.update_profile(request.user, s.validated_data)
    return Response({'ok': True, 'message': 'Profile updated successfully', 'user': serialize_user(user)})


@api_view(['PUT'])
@permission_classes([IsAuthenticated])
def change_password_view(request):
    s = ChangePasswordSerializer(data=request.data, context={'user': request.user})
    s.is_valid(raise_exception=True)
    accounts.change_password(request.user, s.validated_data['currentPassword'], s.validated_data['newPassword'])
    return Response({'ok': True, 'message': 'Password changed successfully'})


@api_view(['DELETE'])
@permission_classes([IsAuthenticated])
def delete_account_view(request):
    s = DeleteAccountSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    accounts.delete_account(request.user, s.validated_data['password'], s.validated_data['confirmDelete'])
    return Response({'ok': True, 'message': 'Account deleted successfully'})


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsReceptionOrAdmin])
def add_patient_view(request):
    s = AddPatientSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    patient = accounts.add_patient(
        name=vd['name'], family_name=vd['familyName'], email=vd['email'], password=vd['password']
    )
    return Response(
        {'ok': True, 'message': 'Patient added successfully', 'patient': serialize_user(patient)},
        status=status.HTTP_201_CREATED,
    )
