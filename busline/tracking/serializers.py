from rest_framework import serializers

from .models import DriveSession
from .schedule import adjusted_schedule


class DriveStartSerializer(serializers.Serializer):
    routeId = serializers.CharField()
    approachRadius = serializers.FloatField(required=False, allow_null=True, min_value=0)
    arrivalRadius = serializers.FloatField(required=False, allow_null=True, min_value=0)


class LocationSampleSerializer(serializers.Serializer):
    latitude = serializers.FloatField(min_value=-90, max_value=90)
    longitude = serializers.FloatField(min_value=-180, max_value=180)


class CheckpointSerializer(serializers.Serializer):
    pointName = serializers.CharField(source="point_name")
    scheduledTime = serializers.CharField(source="scheduled_time", allow_blank=True)
    status = serializers.CharField()
    arrivalTime = serializers.DateTimeField(source="arrival_time", allow_null=True)
    departureTime = serializers.DateTimeField(source="departure_time", allow_null=True)
    minDistance = serializers.FloatField(source="min_distance", allow_null=True)


class DriveSessionSerializer(serializers.ModelSerializer):
    routeId = serializers.CharField(source="route_ref")
    settings = serializers.SerializerMethodField()
    currentLocation = serializers.JSONField(source="current_location")
    prevLocation = serializers.JSONField(source="previous_location")
    startTime = serializers.DateTimeField(source="start_time")
    endTime = serializers.DateTimeField(source="end_time")
    checkpoints = serializers.SerializerMethodField()

    class Meta:
        model = DriveSession
        fields = [
            "id",
            "routeId",
            "status",
            "settings",
            "currentLocation",
            "prevLocation",
            "startTime",
            "endTime",
            "checkpoints",
        ]

    def get_settings(self, obj: DriveSession) -> dict:
        return {"approachRadius": obj.approach_radius, "arrivalRadius": obj.arrival_radius}

    def get_checkpoints(self, obj: DriveSession) -> list:
        checkpoints = obj.load_checkpoints()
        rows = CheckpointSerializer(checkpoints, many=True).data
        for row, adjusted in zip(rows, adjusted_schedule(checkpoints)):
            row["adjustedTime"] = adjusted
        return rows


class DriveSessionDetailSerializer(DriveSessionSerializer):
    route = serializers.JSONField(source="route_snapshot")

    class Meta(DriveSessionSerializer.Meta):
        fields = DriveSessionSerializer.Meta.fields + ["route"]
