"""
Dashboard figures for a doctor.
"""
from __future__ import annotations

from collections import Counter
from datetime import date, datetime

from django.utils import timezone

from portal.models import Appointment, DoctorRequest, RelationshipStatus
from portal.services.records import KINDS

RECENT_APPOINTMENTS = 5
MONTHS = 6


def _last_months(today: date, n: int):
    """(year, month) pairs for the ``n`` calendar months ending with ``today``'s, oldest first."""
    months = []
    year, month = today.year, today.month
    for _ in range(n):
        months.append((year, month))
        month -= 1
        if month == 0:
            year, month = year - 1, 12
    return list(reversed(months))


def doctor_statistics(doctor_id: int) -> dict:
    requests = DoctorRequest.objects.filter(doctor_id=doctor_id)
    patient_ids = requests.filter(status=RelationshipStatus.ACCEPTED).values_list('patient_id', flat=True)

    totals = {}
    for kind in KINDS.values():
        totals[kind.name] = kind.model.objects.filter(
            doctor_id=doctor_id, record__patient_id__in=patient_ids
        ).count()

    appointments = Appointment.objects.filter(doctor_id=doctor_id, record__patient_id__in=patient_ids)
    recent = appointments.select_related('record__patient').order_by('-created_at', '-id')[:RECENT_APPOINTMENTS]

    months = _last_months(timezone.localdate(), MONTHS)
    first_year, first_month = months[0]
    window_start = timezone.make_aware(datetime(first_year, first_month, 1))
    by_month = Counter(
        (timezone.localtime(d).year, timezone.localtime(d).month)
        for d in appointments.filter(date__gte=window_start).values_list('date', flat=True)
    )

    return {
        'totalPatients': requests.filter(status=RelationshipStatus.ACCEPTED).count(),
        'pendingRequests': requests.filter(status=RelationshipStatus.PENDING).count(),
        'totalAppointments': totals['appointment'],
        'totalPrescriptions': totals['prescription'],
        'totalDiseases': totals['disease'],
        'totalDiagnostics': totals['diagnostic'],
        'totalComments': totals['comment'],
        'recentAppointments': [
            {
                'id': a.id,
                'date': a.date.isoformat(),
                'reason': a.reason,
                'patientId': a.record.patient_id,
                'patientName': a.record.patient.display_name,
                'createdAt': a.created_at.isoformat(),
            }
            for a in recent
        ],
        'monthlyData': [
            {'month': date(y, m, 1).strftime('%b %Y'), 'count': by_month.get((y, m), 0)}
            for y, m in months
        ],
    }
