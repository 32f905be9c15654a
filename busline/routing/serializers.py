from rest_framework import serializers

from .models import Route
from .services import validate_points


class RoutePointLocationSerializer(serializers.Serializer):
    type = serializers.ChoiceField(choices=["Point"], default="Point")
    coordinates = serializers.ListField(
        child=serializers.FloatField(),
        min_length=2,
        max_length=2,
        help_text="[longitude, latitude]",
    )


class RoutePointSerializer(serializers.Serializer):
    name = serializers.CharField()
    location = RoutePointLocationSerializer()
    type = serializers.ChoiceField(choices=Route.PointKind.choices)
    scheduledTime = serializers.CharField(allow_blank=True, required=False, default="")
    useAnnouncement = serializers.BooleanField(required=False, default=False)


class RouteSerializer(serializers.ModelSerializer):
    routeName = serializers.CharField(source="route_name")
    points = RoutePointSerializer(many=True)

    class Meta:
        model = Route
        fields = ["id", "routeName", "points", "created_at", "updated_at"]
        read_only_fields = ["id", "created_at", "updated_at"]

    def validate_points(self, value):
        if not value:
            raise serializers.ValidationError("A route needs at least one point.")
        try:
            return validate_points(value)
        except ValueError as exc:
            raise serializers.ValidationError(str(exc)) from exc

    def create(self, validated_data):
        # points are stored as a JSON document, not a related table
        return Route.objects.create(**validated_data)
