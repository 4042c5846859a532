"""
Account life cycle: registration, email verification, credentials,
profiles and admin user management.
"""
from __future__ import annotations

import logging
import secrets
from datetime import timedelta
from typing import Optional

from django.conf import settings
from django.db import IntegrityError, transaction
from django.db.models import Count, Q
from django.utils import timezone

from portal.exceptions import (
    AccessDenied,
    AuthError,
    ConflictError,
    InternalError,
    NotFoundError,
    ValidationError,
)
from portal.models import User
from portal.services import email as email_service
from portal.services.access import Actor

logger = logging.getLogger(__name__)

SELF_REGISTER_ROLES = (User.ROLE_PATIENT, User.ROLE_DOCTOR, User.ROLE_RECEPTION_AGENT)


def serialize_person(user: Optional[User]) -> Optional[dict]:
    """Short form of a user embedded in other payloads."""
    if user is None:
        return None
    data = {'id': user.id, 'name': user.first_name, 'familyName': user.last_name, 'email': user.email}
    if user.role == User.ROLE_DOCTOR:
        data['speciality'] = user.speciality or None
    return data


def serialize_user(user: User) -> dict:
    return {
        'id': user.id,
        'name': user.first_name,
        'familyName': user.last_name,
        'email': user.email,
        'role': user.role,
        'speciality': user.speciality or None,
        'isVerified': user.is_verified,
        'createdAt': user.date_joined.isoformat(),
    }


def _new_code() -> str:
    return str(100000 + secrets.randbelow(900000))


def _issue_code(user: User) -> str:
    code = _new_code()
    user.verification_code = code
    user.verification_code_expires = timezone.now() + timedelta(minutes=settings.VERIFICATION_CODE_TTL_MINUTES)
    user.save(update_fields=['verification_code', 'verification_code_expires'])
    return code


def _send_code(user: User, code: str) -> None:
    try:
        email_service.send_verification_email(user.email, code, user.first_name)
    except email_service.EmailDeliveryError as e:
        raise InternalError('Failed to send verification email') from e


# ---------------------------------------------------------------------------
# Self service
# ---------------------------------------------------------------------------

def register(*, name: str, family_name: str, email: str, password: str, role: str,
             speciality: str = '') -> bool:
    """Register an unverified account and email it a code.

    Returns True when a new account was created and False when an
    existing unverified account was sent a fresh code instead.
    """
    if role not in SELF_REGISTER_ROLES:
        raise ValidationError('Invalid role')
    email = User.objects.normalize_email(email).lower()
    existing = User.objects.filter(email__iexact=email).first()
    if existing is not None:
        if existing.is_verified:
            raise ConflictError('User already exists with this email')
        with transaction.atomic():
            _send_code(existing, _issue_code(existing))
        logger.info('Re-sent verification code to unverified user %s', existing.id)
        return False

    try:
        with transaction.atomic():
            user = User.objects.create_user(
                email=email,
                password=password,
                first_name=name,
                last_name=family_name,
                role=role,
                speciality=speciality if role == User.ROLE_DOCTOR else '',
                is_verified=False,
            )
            _send_code(user, _issue_code(user))
    except IntegrityError:
        raise ConflictError('User already exists with this email')
    logger.info('Registered %s user %s', role, user.id)
    return True


def verify_email(email: str, code: str) -> User:
    user = User.objects.filter(
        email__iexact=email,
        verification_code=code,
        verification_code_expires__gt=timezone.now(),
    ).first()
    if user is None:
        raise ValidationError('Invalid or expired verification code')
    user.is_verified = True
    user.verification_code = None
    user.verification_code_expires = None
    user.save(update_fields=['is_verified', 'verification_code', 'verification_code_expires'])
    logger.info('Verified user %s', user.id)
    return user


def resend_verification(email: str) -> None:
    user = User.objects.filter(email__iexact=email).first()
    if user is None:
        raise NotFoundError('User not found')
    if user.is_verified:
        raise ConflictError('User is already verified')
    with transaction.atomic():
        _send_code(user, _issue_code(user))


def authenticate(email: str, password: str) -> User:
    user = User.objects.filter(email__iexact=email).first()
    if user is None or not user.check_password(password) or not user.is_active:
        raise ValidationError('Invalid credentials')
    if not user.is_verified:
        raise AuthError(
            'Please verify your email before logging in. Check your inbox for the verification code.',
            extra={'requiresVerification': True, 'email': user.email},
        )
    return user


def update_profile(user: User, data: dict) -> User:
    fields = []
    if user.role == User.ROLE_PATIENT and (
        ('first_name' in data and data['first_name'] != user.first_name)
        or ('last_name' in data and data['last_name'] != user.last_name)
    ):
        raise AccessDenied(
            'Patients cannot change their name or family name. Please contact an administrator.'
        )
    if 'email' in data:
        new_email = data['email'].lower()
        if new_email != user.email.lower():
            if User.objects.filter(email__iexact=new_email).exclude(pk=user.pk).exists():
                raise ConflictError('Email already in use')
            user.email = new_email
            fields.append('email')
    for key in ('first_name', 'last_name'):
        if key in data and data[key] != getattr(user, key):
            setattr(user, key, data[key])
            fields.append(key)
    if 'speciality' in data and user.role == User.ROLE_DOCTOR:
        user.speciality = data['speciality']
        fields.append('speciality')
    if fields:
        user.save(update_fields=fields)
    return user


def change_password(user: User, current_password: str, new_password: str) -> None:
    if not user.check_password(current_password):
        raise ValidationError('Current password is incorrect')
    user.set_password(new_password)
    user.save(update_fields=['password'])
    logger.info('User %s changed password', user.id)


def delete_account(user: User, password: str, confirm: str) -> None:
    if confirm != 'DELETE':
        raise ValidationError('Password and confirmation "DELETE" are required to delete account')
    if not user.check_password(password):
        raise ValidationError('Password is incorrect')
    user_id = user.id
    user.delete()
    logger.info('User %s deleted their account', user_id)


def add_patient(*, name: str, family_name: str, email: str, password: str) -> User:
    """Create a verified patient on behalf of a reception agent or admin."""
    email = User.objects.normalize_email(email).lower()
    if User.objects.filter(email__iexact=email).exists():
        raise ConflictError('User already exists with this email')
    try:
        with transaction.atomic():
            user = User.objects.create_user(
                email=email,
                password=password,
                first_name=name,
                last_name=family_name,
                role=User.ROLE_PATIENT,
                is_verified=True,
            )
    except IntegrityError:
        raise ConflictError('User already exists with this email')
    return user


# ---------------------------------------------------------------------------
# Admin
# ---------------------------------------------------------------------------

def list_users(role: Optional[str] = None, search: Optional[str] = None):
    qs = User.objects.all()
    if role:
        qs = qs.filter(role=role)
    if search:
        qs = qs.filter(
            Q(first_name__icontains=search) | Q(last_name__icontains=search) | Q(email__icontains=search)
        )
    return qs.order_by('-date_joined', '-id')


def get_user(user_id: int) -> User:
    user = User.objects.filter(pk=user_id).first()
    if user is None:
        raise NotFoundError('User not found')
    return user


def admin_update_user(user_id: int, data: dict) -> User:
    user = get_user(user_id)
    fields = []
    if 'email' in data:
        new_email = data['email'].lower()
        if new_email != user.email.lower():
            if User.objects.filter(email__iexact=new_email).exclude(pk=user.pk).exists():
                raise ConflictError('Email already in use')
            user.email = new_email
            fields.append('email')
    for key in ('first_name', 'last_name', 'role', 'is_verified', 'speciality'):
        if key in data:
            setattr(user, key, data[key])
            fields.append(key)
    if fields:
        user.save(update_fields=fields)
    return user


def admin_set_password(user_id: int, password: str) -> None:
    user = get_user(user_id)
    user.set_password(password)
    user.save(update_fields=['password'])


def admin_delete_user(actor: Actor, user_id: int) -> None:
    user = get_user(user_id)
    if user.id == actor.id:
        raise ConflictError('Cannot delete your own account')
    user.delete()
    logger.info('Admin %s deleted user %s', actor.id, user_id)


def user_stats() -> dict:
    totals = User.objects.aggregate(
        total=Count('id'),
        verified=Count('id', filter=Q(is_verified=True)),
    )
    by_role = {role: 0 for role, _ in User.ROLE_CHOICES}
    for row in User.objects.values('role').annotate(n=Count('id')):
        by_role[row['role']] = row['n']
    return {
        'totalUsers': totals['total'],
        'verifiedUsers': totals['verified'],
        'unverifiedUsers': totals['total'] - totals['verified'],
        'byRole': by_role,
    }
