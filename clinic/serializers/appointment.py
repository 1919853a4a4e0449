from rest_framework import serializers

from clinic.models import Appointment
from .common import PageQuerySerializer

ACTIONS = {
    'approve': Appointment.STATUS_APPROVED,
    'decline': Appointment.STATUS_DECLINED,
    'completed': Appointment.STATUS_COMPLETED,
    'noshow': Appointment.STATUS_NO_SHOW,
}


class DepartmentsField(serializers.ListField):
    child = serializers.CharField(max_length=255)

    def to_internal_value(self, data):
        # form posts send a single value
        if isinstance(data, str):
            data = [data]
        return super().to_internal_value(data)


class AppointmentCreateSerializer(serializers.Serializer):
    medicalDepartment = DepartmentsField(min_length=1, max_length=3)
    date = serializers.CharField()
    time = serializers.CharField()
    email = serializers.EmailField()
    phoneNumber = serializers.CharField(max_length=32)


class AppointmentEditSerializer(serializers.Serializer):
    medicalDepartment = DepartmentsField(min_length=1, max_length=3, required=False)
    date = serializers.CharField(required=False)
    time = serializers.CharField(required=False)
    email = serializers.EmailField(required=False)
    phoneNumber = serializers.CharField(max_length=32, required=False)
    status = serializers.ChoiceField(choices=[Appointment.STATUS_CANCELLED], required=False)

    def validate(self, attrs):
        if ('date' in attrs) != ('time' in attrs):
            raise serializers.ValidationError('date and time must be changed together')
        return attrs


class AppointmentListQuerySerializer(PageQuerySerializer):
    status = serializers.ChoiceField(choices=[c[0] for c in Appointment.STATUS_CHOICES], required=False)
    date = serializers.CharField(required=False)
    service = serializers.ListField(child=serializers.CharField(max_length=255), required=False)
    q = serializers.CharField(max_length=64, required=False, allow_blank=True)


class AssignDoctorSerializer(serializers.Serializer):
    doctorId = serializers.IntegerField(min_value=1, allow_null=True)
    force = serializers.BooleanField(required=False, default=False)
