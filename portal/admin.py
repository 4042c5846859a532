"""
Django admin registrations for the portal models.

This module hooks the portal models into Django's built-in admin
interface so that superusers can inspect and manage data via the
``/admin/`` URL.
"""

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.contrib.auth.forms import UserChangeForm, UserCreationForm

from .models import (
    Appointment,
    AppointmentInvitation,
    Comment,
    Diagnostic,
    Disease,
    DoctorReceptionAgent,
    DoctorRequest,
    HealthAssessment,
    MedicalRecord,
    Notification,
    Prescription,
    User,
)


class EmailUserCreationForm(UserCreationForm):
    class Meta(UserCreationForm.Meta):
        model = User
        fields = ('email', 'role')


class EmailUserChangeForm(UserChangeForm):
    class Meta(UserChangeForm.Meta):
        model = User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    add_form = EmailUserCreationForm
    form = EmailUserChangeForm
    ordering = ('email',)
    list_display = ('email', 'first_name', 'last_name', 'role', 'is_verified', 'is_staff')
    list_filter = ('role', 'is_verified', 'is_staff')
    search_fields = ('email', 'first_name', 'last_name')
    fieldsets = (
        (None, {'fields': ('email', 'password')}),
        ('Profile', {'fields': ('first_name', 'last_name', 'role', 'speciality')}),
        ('Verification', {'fields': ('is_verified', 'verification_code', 'verification_code_expires')}),
        ('Permissions', {'fields': ('is_active', 'is_staff', 'is_superuser', 'groups', 'user_permissions')}),
        ('Dates', {'fields': ('last_login', 'date_joined')}),
    )
    add_fieldsets = (
        (None, {'classes': ('wide',), 'fields': ('email', 'role', 'password1', 'password2')}),
    )


@admin.register(DoctorRequest)
class DoctorRequestAdmin(admin.ModelAdmin):
    list_display = ('id', 'doctor', 'patient', 'status', 'created_at', 'updated_at')
    list_filter = ('status',)
    search_fields = ('doctor__email', 'patient__email')


@admin.register(DoctorReceptionAgent)
class DoctorReceptionAgentAdmin(admin.ModelAdmin):
    list_display = ('id', 'doctor', 'reception_agent', 'status', 'created_at', 'updated_at')
    list_filter = ('status',)
    search_fields = ('doctor__email', 'reception_agent__email')


@admin.register(AppointmentInvitation)
class AppointmentInvitationAdmin(admin.ModelAdmin):
    list_display = ('id', 'patient', 'doctor', 'appointment_date', 'status', 'created_at')
    list_filter = ('status',)
    search_fields = ('patient__email', 'doctor__email', 'reason')


class AppointmentInline(admin.TabularInline):
    model = Appointment
    extra = 0


class PrescriptionInline(admin.TabularInline):
    model = Prescription
    extra = 0


class DiseaseInline(admin.TabularInline):
    model = Disease
    extra = 0


class DiagnosticInline(admin.TabularInline):
    model = Diagnostic
    extra = 0


class CommentInline(admin.TabularInline):
    model = Comment
    extra = 0


@admin.register(MedicalRecord)
class MedicalRecordAdmin(admin.ModelAdmin):
    list_display = ('id', 'patient', 'created_at', 'updated_at')
    search_fields = ('patient__email', 'patient__first_name', 'patient__last_name')
    inlines = [AppointmentInline, PrescriptionInline, DiseaseInline, DiagnosticInline, CommentInline]


@admin.register(HealthAssessment)
class HealthAssessmentAdmin(admin.ModelAdmin):
    list_display = ('id', 'patient', 'age', 'gender', 'completed_at', 'updated_at')
    search_fields = ('patient__email',)


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ('id', 'recipient', 'type', 'title', 'read', 'created_at')
    list_filter = ('type', 'read')
    search_fields = ('recipient__email', 'title')
