from rest_framework import serializers

from .common import PageQuerySerializer


class ScheduleCreateSerializer(serializers.Serializer):
    doctorId = serializers.IntegerField(min_value=1)
    start = serializers.DateTimeField()
    end = serializers.DateTimeField()

    def validate(self, attrs):
        if attrs['end'] <= attrs['start']:
            raise serializers.ValidationError({'end': 'End time must be after start time.'})
        return attrs


class ScheduleUpdateSerializer(serializers.Serializer):
    doctorId = serializers.IntegerField(min_value=1, required=False)
    start = serializers.DateTimeField(required=False)
    end = serializers.DateTimeField(required=False)


class ScheduleListQuerySerializer(PageQuerySerializer):
    doctorId = serializers.IntegerField(min_value=1, required=False)
    startDate = serializers.CharField(required=False)
    endDate = serializers.CharField(required=False)


class TodayScheduleQuerySerializer(serializers.Serializer):
    doctorId = serializers.IntegerField(min_value=1, required=False)
