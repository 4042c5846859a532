"""
Bearer JWT authentication.

This module defines a subclass of simplejwt's ``JWTAuthentication``
that only admits verified accounts, and the helper that issues the
access tokens handed out by the login and verification endpoints.  By
keeping this logic separate from any view definitions we avoid circular
import issues when the REST framework imports authentication classes
during initialization.
"""
from __future__ import annotations

from rest_framework import exceptions
from rest_framework_simplejwt.authentication import JWTAuthentication
from rest_framework_simplejwt.tokens import AccessToken


def issue_token(user) -> str:
    """Return a signed access token carrying ``userId``, ``email`` and ``role``."""
    token = AccessToken.for_user(user)
    token['email'] = user.email
    token['role'] = user.role
    return str(token)


class BearerAuthentication(JWTAuthentication):
    """``Authorization: Bearer <jwt>`` authentication for verified users."""

    def get_user(self, validated_token):
        user = super().get_user(validated_token)
        if not user.is_verified:
            raise exceptions.AuthenticationFailed('Please verify your email first', code='auth_error')
        return user
