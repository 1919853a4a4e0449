"""
Django admin registrations for the clinic models.

Registered so staff can inspect and correct rows via ``/admin/`` during
development.
"""

from django.contrib import admin

from .models import Appointment, Doctor, MedicalRecord, Schedule, Service, User


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ('email', 'first_name', 'last_name', 'role', 'is_active', 'date_joined')
    list_filter = ('role', 'is_active')
    search_fields = ('email', 'first_name', 'last_name', 'phone_number')
    exclude = ('password', 'reset_code')


@admin.register(Doctor)
class DoctorAdmin(admin.ModelAdmin):
    list_display = ('id', 'name', 'specialization', 'created_at')
    search_fields = ('name', 'specialization')


@admin.register(Schedule)
class ScheduleAdmin(admin.ModelAdmin):
    list_display = ('id', 'doctor', 'start', 'end')
    list_filter = ('doctor',)
    date_hierarchy = 'start'


@admin.register(Service)
class ServiceAdmin(admin.ModelAdmin):
    list_display = ('name', 'price', 'status')
    list_filter = ('status',)
    search_fields = ('name',)


@admin.register(Appointment)
class AppointmentAdmin(admin.ModelAdmin):
    list_display = ('id', 'patient', 'doctor', 'schedule', 'status', 'is_archived', 'is_deleted')
    list_filter = ('status', 'is_archived', 'is_deleted')
    search_fields = ('patient__email', 'patient__first_name', 'patient__last_name', 'email')
    raw_id_fields = ('patient', 'doctor', 'medical_record')


@admin.register(MedicalRecord)
class MedicalRecordAdmin(admin.ModelAdmin):
    list_display = ('id', 'appointment', 'original_name', 'content_type', 'size', 'uploaded_at')
    search_fields = ('original_name', 'filename')
    raw_id_fields = ('appointment',)
