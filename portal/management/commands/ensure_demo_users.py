# portal/management/commands/ensure_demo_users.py
from django.core.management.base import BaseCommand

from portal.models import User

DEMO_SET = [
    ("admin@medflow.local", User.ROLE_ADMIN, "Ada", "Admin"),
    ("doctor@medflow.local", User.ROLE_DOCTOR, "Derek", "Doctor"),
    ("reception@medflow.local", User.ROLE_RECEPTION_AGENT, "Rita", "Reception"),
    ("patient@medflow.local", User.ROLE_PATIENT, "Paul", "Patient"),
]


class Command(BaseCommand):
    help = "Ensure one verified demo user per role exists with the given password (idempotent)."

    def add_arguments(self, parser):
        parser.add_argument("--password", default="medflow123", help="Password set on every demo user")

    def handle(self, *args, **opts):
        password = opts["password"]
        for email, role, name, family_name in DEMO_SET:
            u, created = User.objects.get_or_create(
                email=email,
                defaults={"role": role, "first_name": name, "last_name": family_name, "is_verified": True},
            )
            # Reset password, role and verification on every run.
            u.set_password(password)
            u.role = role
            u.is_active = True
            u.is_verified = True
            u.save(update_fields=["password", "role", "is_active", "is_verified"])
            self.stdout.write(self.style.SUCCESS(f"{'created' if created else 'ok'}: {email} ({role})"))
        self.stdout.write(self.style.SUCCESS("All demo users ensured."))
