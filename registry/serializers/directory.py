from rest_framework import serializers

from registry.serializers import plain_text


class HospitalSerializer(serializers.Serializer):
    """Hospital create/update input.  Use ``partial=True`` for updates."""
    name = serializers.CharField(max_length=50)
    adminPassword = serializers.CharField(max_length=128, trim_whitespace=False)
    doctorPassword = serializers.CharField(max_length=128, trim_whitespace=False)
    receptionistPassword = serializers.CharField(max_length=128, trim_whitespace=False)
    coordinates = serializers.ListField(child=serializers.FloatField(), min_length=2, max_length=2)
    services = serializers.ListField(child=serializers.CharField(max_length=100), allow_empty=False)

    def validate_name(self, v):
        v = plain_text(v)
        if not v:
            raise serializers.ValidationError('Please add a hospital name')
        return v


class DepartmentSerializer(serializers.Serializer):
    """Department create/update input.  Use ``partial=True`` for updates."""
    name = serializers.CharField(max_length=50)
    description = serializers.CharField(max_length=500, required=False, allow_blank=True)

    def validate_name(self, v):
        v = plain_text(v)
        if not v:
            raise serializers.ValidationError('Please add a department name')
        return v

    def validate_description(self, v):
        return plain_text(v)
