from typing import Optional

from django.db.models import Q, QuerySet

from clinic.models import Doctor
from clinic.services.periods import iso


def search_doctors(*, q: Optional[str] = None, specialization: Optional[str] = None) -> QuerySet:
    qs = Doctor.objects.all()
    if q:
        qs = qs.filter(Q(name__icontains=q) | Q(specialization__icontains=q))
    if specialization:
        qs = qs.filter(specialization__iexact=specialization)
    return qs.order_by('name')


def format_doctor(d: Doctor) -> dict:
    return {
        'id': d.id,
        'name': d.name,
        'specialization': d.specialization,
        'schedule': iso(d.schedule),
        'createdAt': iso(d.created_at),
    }
