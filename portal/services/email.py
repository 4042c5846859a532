"""
Transactional email through the Resend HTTP API.
"""
from __future__ import annotations

import logging

import requests
from django.conf import settings
from django.utils.html import escape

logger = logging.getLogger(__name__)


class EmailDeliveryError(RuntimeError):
    pass


def _verification_html(code: str, name: str) -> str:
    return (
        '<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">'
        '<h1>Welcome to Medflow</h1>'
        f'<p>Hello {escape(name)},</p>'
        '<p>Use the code below to verify your email address:</p>'
        f'<p style="font-size: 24px; font-weight: bold; letter-spacing: 3px;">{escape(code)}</p>'
        f'<p>This code expires in {settings.VERIFICATION_CODE_TTL_MINUTES} minutes.</p>'
        '</div>'
    )


def send_email(to: str, subject: str, html: str) -> dict:
    """POST one message to Resend and return its JSON answer."""
    r = requests.post(
        settings.RESEND_API_URL,
        json={'from': settings.FROM_EMAIL, 'to': [to], 'subject': subject, 'html': html},
        headers={'Authorization': f'Bearer {settings.RESEND_API_KEY}'},
        timeout=settings.EMAIL_TIMEOUT,
    )
    r.raise_for_status()
    return r.json()


def send_verification_email(email: str, code: str, name: str) -> None:
    """Send the account verification code.

    Without an API key outside production the code is only logged, so
    that local accounts can still be verified.  Raises
    ``EmailDeliveryError`` when the message could not be handed over.
    """
    if not settings.RESEND_API_KEY:
        if settings.ENV != 'prod':
            logger.warning('RESEND_API_KEY not set; verification code for %s is %s', email, code)
            return
        raise EmailDeliveryError('Email delivery is not configured')
    try:
        send_email(email, 'Verify Your Email - Medflow', _verification_html(code, name))
    except (requests.RequestException, ValueError) as e:
        logger.error('Failed to send verification email to %s: %s', email, e)
        if settings.DEBUG:
            logger.info('Verification code for %s is %s', email, code)
        raise EmailDeliveryError(str(e)) from e
    logger.info('Verification email sent to %s', email)
