"""
URL mappings for the clinic API.

Paths mirror the ones the patient and staff front-ends call.  Trailing
slashes are omitted.  Literal segments are registered
before the ``<int:pk>`` catch-alls of the same prefix; collection roots
are registered without the trailing slash ``include`` would add.
"""
from django.urls import include, path, re_path

from .auth_views import (
    forgot_password_view,
    jwt_refresh_view,
    login_view,
    logout_view,
    reset_code_view,
    reset_password_view,
    signup_view,
)
from .views import appointments, doctors, health, medical_records, schedules, services, users

PERIOD = r'(?P<granularity>week|month|year)'

auth_patterns = [
    path('signup', signup_view),
    path('login', login_view),
    path('refresh', jwt_refresh_view),
    path('logout', logout_view),
    path('forgot-password', forgot_password_view),
    path('reset-code', reset_code_view),
    path('reset-password', reset_password_view),
]

user_patterns = [
    re_path(rf'^counts/{PERIOD}$', users.patient_counts),
    path('admins/create', users.create_admin),
    path('admins', users.list_admins),
    path('patients', users.list_patients),
    path('my-account', users.my_account),
    path('update', users.update_my_account),
    path('<int:pk>', users.user_detail),
]

appointment_patterns = [
    re_path(rf'^completed/{PERIOD}$', appointments.completed_histogram),
    path('counts/today', appointments.today_counts),
    re_path(rf'^counts/{PERIOD}$', appointments.appointment_counts),
    path('today/approved', appointments.today_approved),
    path('cancelled', appointments.cancelled),
    path('pending', appointments.pending),
    path('archive', appointments.archived),
    path('all', appointments.all_appointments),
    path('today', appointments.my_today),
    path('create', appointments.create_appointment),
    path('<int:pk>/archive', appointments.toggle_archive),
    path('<int:pk>/doctors-available', appointments.doctors_available),
    path('<int:pk>/doctor', appointments.assign_doctor),
    path('<int:pk>/<str:action>', appointments.change_status),
    path('<int:pk>', appointments.appointment_detail),
]

doctor_patterns = [
    path('add', doctors.add_doctor),
    path('<int:pk>', doctors.doctor_detail),
]

schedule_patterns = [
    path('today', schedules.today),
    path('<int:pk>', schedules.schedule_detail),
]

service_patterns = [
    path('reports/top', services.top_services),
    re_path(rf'^counts/{PERIOD}$', services.services_counts),
    path('add', services.add_service),
    path('<int:pk>', services.service_detail),
]

record_patterns = [
    path('upload', medical_records.upload),
    path('<int:record_id>/appointments/<int:appointment_id>', medical_records.delete_record),
    path('<int:pk>', medical_records.record_detail),
]

urlpatterns = [
    path('', include('django_prometheus.urls')),
    path('healthz', health.healthz),
    path('api/auth/', include(auth_patterns)),
    # collection roots, no trailing slash
    path('api/appointments', appointments.my_appointments),
    path('api/doctors', doctors.list_doctors),
    path('api/schedules', schedules.schedules),
    path('api/services', services.list_services),
    path('api/medical-records', medical_records.list_records),
    path('api/users/', include(user_patterns)),
    path('api/appointments/', include(appointment_patterns)),
    path('api/doctors/', include(doctor_patterns)),
    path('api/schedules/', include(schedule_patterns)),
    path('api/services/', include(service_patterns)),
    path('api/medical-records/', include(record_patterns)),
]
