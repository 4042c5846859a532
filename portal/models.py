"""
Database models for the Medflow backend.

These models capture the identities of the system (patients, doctors,
reception agents and admins), the three directed relationship requests
that grant or delegate access, the per-patient medical record with its
doctor-authored entries, the health questionnaire with its derived risk
predictions, and the notification inbox.
"""
from __future__ import annotations

from django.contrib.auth.models import AbstractUser, BaseUserManager
from django.db import models


class UserManager(BaseUserManager):
    """Manager for a user model that logs in with its email address."""

    use_in_migrations = True

    def _create_user(self, email, password, **extra_fields):
        if not email:
            raise ValueError('The email must be set')
        email = self.normalize_email(email)
        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_user(self, email, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', False)
        extra_fields.setdefault('is_superuser', False)
        return self._create_user(email, password, **extra_fields)

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        extra_fields.setdefault('role', User.ROLE_ADMIN)
        extra_fields.setdefault('is_verified', True)
        return self._create_user(email, password, **extra_fields)


class User(AbstractUser):
    """Custom user model with a fixed role and email verification state.

    ``first_name`` holds the given name and ``last_name`` the family
    name.  Accounts created through self-registration start unverified
    and carry a short-lived numeric verification code; accounts created
    by reception agents or admins are verified from the start.
    """
    ROLE_PATIENT = 'Patient'
    ROLE_DOCTOR = 'Doctor'
    ROLE_RECEPTION_AGENT = 'Reception Agent'
    ROLE_ADMIN = 'Admin'
    ROLE_CHOICES = [
        (ROLE_PATIENT, 'Patient'),
        (ROLE_DOCTOR, 'Doctor'),
        (ROLE_RECEPTION_AGENT, 'Reception Agent'),
        (ROLE_ADMIN, 'Admin'),
    ]

    username = None
    email = models.EmailField(unique=True)
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default=ROLE_PATIENT, db_index=True)
    speciality = models.CharField(max_length=120, blank=True)
    is_verified = models.BooleanField(default=False)
    verification_code = models.CharField(max_length=6, blank=True, null=True)
    verification_code_expires = models.DateTimeField(blank=True, null=True)

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS: list[str] = []

    objects = UserManager()

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip() or self.email

    def __str__(self) -> str:
        return f"{self.email} ({self.role})"


# ---------------------------------------------------------------------------
# Relationship requests
# ---------------------------------------------------------------------------

class RelationshipStatus:
    PENDING = 'pending'
    ACCEPTED = 'accepted'
    REJECTED = 'rejected'
    CHOICES = [
        (PENDING, 'Pending'),
        (ACCEPTED, 'Accepted'),
        (REJECTED, 'Rejected'),
    ]
    DECISIONS = (ACCEPTED, REJECTED)


class DoctorRequest(models.Model):
    """A doctor asking a patient for access to their medical record."""
    doctor = models.ForeignKey(User, on_delete=models.CASCADE, related_name='patient_requests')
    patient = models.ForeignKey(User, on_delete=models.CASCADE, related_name='doctor_requests')
    status = models.CharField(
        max_length=10, choices=RelationshipStatus.CHOICES, default=RelationshipStatus.PENDING, db_index=True
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=['doctor', 'patient'], name='unique_doctor_patient_request'),
        ]

    def __str__(self) -> str:
        return f"DoctorRequest d={self.doctor_id} p={self.patient_id} [{self.status}]"


class DoctorReceptionAgent(models.Model):
    """A doctor delegating appointment management to a reception agent."""
    doctor = models.ForeignKey(User, on_delete=models.CASCADE, related_name='agent_invitations')
    reception_agent = models.ForeignKey(User, on_delete=models.CASCADE, related_name='doctor_invitations')
    status = models.CharField(
        max_length=10, choices=RelationshipStatus.CHOICES, default=RelationshipStatus.PENDING, db_index=True
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=['doctor', 'reception_agent'], name='unique_doctor_reception_agent'),
        ]

    def __str__(self) -> str:
        return f"DoctorReceptionAgent d={self.doctor_id} a={self.reception_agent_id} [{self.status}]"


class AppointmentInvitation(models.Model):
    """A patient asking a doctor for an appointment.

    Unlike the other two requests there is no uniqueness per pair: a
    patient may send any number of invitations to the same doctor.
    """
    patient = models.ForeignKey(User, on_delete=models.CASCADE, related_name='sent_appointment_invitations')
    doctor = models.ForeignKey(User, on_delete=models.CASCADE, related_name='appointment_invitations')
    appointment_date = models.DateTimeField()
    reason = models.TextField()
    status = models.CharField(
        max_length=10, choices=RelationshipStatus.CHOICES, default=RelationshipStatus.PENDING
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=['doctor', 'status'], name='appt_inv_doctor_status_idx'),
            models.Index(fields=['patient', 'status'], name='appt_inv_patient_status_idx'),
        ]

    def __str__(self) -> str:
        return f"AppointmentInvitation p={self.patient_id} d={self.doctor_id} [{self.status}]"


# ---------------------------------------------------------------------------
# Medical record
# ---------------------------------------------------------------------------

class MedicalRecord(models.Model):
    """The single medical record of a patient."""
    patient = models.OneToOneField(User, on_delete=models.CASCADE, related_name='medical_record')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"MedicalRecord p={self.patient_id}"


class RecordEntry(models.Model):
    """Fields shared by every doctor-authored medical record entry."""
    record = models.ForeignKey(MedicalRecord, on_delete=models.CASCADE, related_name='%(class)ss')
    doctor = models.ForeignKey(User, on_delete=models.CASCADE, related_name='authored_%(class)ss')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        abstract = True
        ordering = ['created_at', 'id']


class Appointment(RecordEntry):
    date = models.DateTimeField()
    reason = models.TextField()
    notes = models.TextField(blank=True)

    class Meta(RecordEntry.Meta):
        pass


class Prescription(RecordEntry):
    medication = models.CharField(max_length=255)
    dosage = models.CharField(max_length=255)
    duration = models.CharField(max_length=255, blank=True)
    instructions = models.TextField(blank=True)

    class Meta(RecordEntry.Meta):
        pass


class Disease(RecordEntry):
    STATUS_CHOICES = [
        ('active', 'Active'),
        ('resolved', 'Resolved'),
        ('chronic', 'Chronic'),
    ]
    name = models.CharField(max_length=255)
    diagnosed_date = models.DateTimeField()
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default='active')
    notes = models.TextField(blank=True)

    class Meta(RecordEntry.Meta):
        pass


class Diagnostic(RecordEntry):
    test_name = models.CharField(max_length=255)
    test_date = models.DateTimeField()
    results = models.TextField()
    notes = models.TextField(blank=True)

    class Meta(RecordEntry.Meta):
        pass


class Comment(RecordEntry):
    text = models.TextField()

    class Meta(RecordEntry.Meta):
        pass


# ---------------------------------------------------------------------------
# Health assessment
# ---------------------------------------------------------------------------

class HealthAssessment(models.Model):
    """A patient's health questionnaire and the risk predictions derived from it.

    There is at most one assessment per patient; resubmitting replaces
    every answer and the predictions.
    """
    GENDER_CHOICES = [('Male', 'Male'), ('Female', 'Female'), ('Other', 'Other')]
    SMOKING_CHOICES = [('Never', 'Never'), ('Former', 'Former'), ('Current', 'Current')]
    EXERCISE_CHOICES = [
        ('Never', 'Never'),
        ('Rarely', 'Rarely'),
        ('Sometimes', 'Sometimes'),
        ('Regularly', 'Regularly'),
        ('Daily', 'Daily'),
    ]
    ALCOHOL_CHOICES = [
        ('Never', 'Never'),
        ('Occasionally', 'Occasionally'),
        ('Moderately', 'Moderately'),
        ('Heavily', 'Heavily'),
    ]

    patient = models.OneToOneField(User, on_delete=models.CASCADE, related_name='health_assessment')
    # Basic information
    age = models.PositiveSmallIntegerField()
    gender = models.CharField(max_length=10, choices=GENDER_CHOICES)
    height = models.FloatField(help_text="Height in cm")
    weight = models.FloatField(help_text="Weight in kg")
    # Medical history
    has_diabetes = models.BooleanField(default=False)
    has_high_blood_pressure = models.BooleanField(default=False)
    has_heart_disease = models.BooleanField(default=False)
    had_stroke = models.BooleanField(default=False)
    has_high_cholesterol = models.BooleanField(default=False)
    # Lifestyle
    smoking_status = models.CharField(max_length=10, choices=SMOKING_CHOICES)
    exercise_frequency = models.CharField(max_length=10, choices=EXERCISE_CHOICES)
    alcohol_consumption = models.CharField(max_length=12, choices=ALCOHOL_CHOICES)
    # Family history
    family_heart_disease = models.BooleanField(default=False)
    family_stroke = models.BooleanField(default=False)
    family_diabetes = models.BooleanField(default=False)
    # Current symptoms
    chest_pain = models.BooleanField(default=False)
    shortness_of_breath = models.BooleanField(default=False)
    dizziness = models.BooleanField(default=False)
    fatigue = models.BooleanField(default=False)
    numbness = models.BooleanField(default=False)

    predictions = models.JSONField(default=dict, blank=True)
    completed_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"HealthAssessment p={self.patient_id}"


# ---------------------------------------------------------------------------
# Notifications
# ---------------------------------------------------------------------------

class Notification(models.Model):
    recipient = models.ForeignKey(User, on_delete=models.CASCADE, related_name='notifications')
    sender = models.ForeignKey(User, null=True, blank=True, on_delete=models.SET_NULL, related_name='sent_notifications')
    type = models.CharField(max_length=40)
    title = models.CharField(max_length=255)
    message = models.TextField()
    link = models.CharField(max_length=255, blank=True)
    read = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=['recipient', 'read'], name='notif_recipient_read_idx'),
            models.Index(fields=['recipient', 'created_at'], name='notif_recipient_created_idx'),
        ]

    def __str__(self) -> str:
        return f"{self.type} -> {self.recipient_id}"
