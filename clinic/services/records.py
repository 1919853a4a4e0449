import logging
import os

from django.core.files.storage import default_storage
from django.db import transaction
from rest_framework.exceptions import NotFound

from clinic.models import Appointment, MedicalRecord
from clinic.services.periods import iso

logger = logging.getLogger(__name__)


def _store(record: MedicalRecord, f) -> None:
    record.file.save(f.name, f, save=False)
    record.filename = os.path.basename(record.file.name)
    record.original_name = f.name
    record.storage_path = record.file.name
    record.file_url = record.file.url
    record.content_type = getattr(f, 'content_type', '') or ''
    record.size = f.size or 0


def get_record_or_404(pk) -> MedicalRecord:
    record = MedicalRecord.objects.select_related('appointment').filter(pk=pk).first()
    if not record:
        raise NotFound('Medical record not found')
    return record


def _discard_on_failure(path: str) -> None:
    if path and default_storage.exists(path):
        default_storage.delete(path)
        logger.warning('removed medical record file %s after a failed write', path)


def upload_record(appointment: Appointment, f) -> MedicalRecord:
    record = MedicalRecord(appointment=appointment)
    _store(record, f)
    try:
        with transaction.atomic():
            record.save()
            appointment.medical_record = record
            appointment.save(update_fields=['medical_record'])
    except Exception:
        _discard_on_failure(record.storage_path)
        raise
    logger.info('stored medical record %s for appointment %s at %s', record.id, appointment.id, record.storage_path)
    return record


def replace_file(record: MedicalRecord, f) -> MedicalRecord:
    old_path = record.storage_path
    _store(record, f)
    try:
        with transaction.atomic():
            record.save()
            if old_path and old_path != record.storage_path:
                transaction.on_commit(lambda: default_storage.delete(old_path))
    except Exception:
        _discard_on_failure(record.storage_path)
        raise
    logger.info('replaced medical record file %s', old_path)
    return record


@transaction.atomic
def delete_record(appointment: Appointment, record_id) -> None:
    record = MedicalRecord.objects.filter(pk=record_id).first()
    linked = record is not None and (
        appointment.medical_record_id == record.id or record.appointment_id == appointment.id
    )
    if not linked:
        raise NotFound('Medical record not found')
    path = record.storage_path
    if appointment.medical_record_id == record.id:
        appointment.medical_record = None
        appointment.save(update_fields=['medical_record'])
    record.delete()
    if path:
        # file goes only once the rows are gone
        transaction.on_commit(lambda: default_storage.delete(path))
    logger.info('deleted medical record %s of appointment %s', record_id, appointment.id)


def format_record(r: MedicalRecord) -> dict:
    return {
        'id': r.id,
        'appointmentId': r.appointment_id,
        'filename': r.filename,
        'originalName': r.original_name,
        'storagePath': r.storage_path,
        'fileUrl': r.file_url,
        'contentType': r.content_type,
        'size': r.size,
        'uploadedAt': iso(r.uploaded_at),
    }
