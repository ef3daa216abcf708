from rest_framework import serializers


class LoginSerializer(serializers.Serializer):
    """Coerces login input to strings; presence is checked by the Authenticator."""
    email = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    password = serializers.CharField(required=False, allow_blank=True, allow_null=True, trim_whitespace=False)
    role = serializers.CharField(required=False, allow_blank=True, allow_null=True)
