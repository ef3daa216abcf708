"""
Input shapes for public registration.

The base serializer covers the fields every role needs; role-specific
serializers cover what only doctors or patients need.  Their validated
data feeds the per-role variants in :mod:`registry.services.registration`.
"""
import re

from rest_framework import serializers

from registry.models import EMAIL_PATTERN, Role
from registry.serializers import plain_text

_EMAIL_RE = re.compile(EMAIL_PATTERN)


class RegistrationSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=100)
    email = serializers.CharField(max_length=254)
    password = serializers.CharField(min_length=6, max_length=128, trim_whitespace=False)
    role = serializers.ChoiceField(choices=Role.choices)

    def validate_name(self, v):
        v = plain_text(v)
        if not v:
            raise serializers.ValidationError('Please provide a name')
        return v

    def validate_email(self, v):
        v = (v or '').strip()
        if not _EMAIL_RE.match(v):
            raise serializers.ValidationError('Please provide a valid email')
        return v


class DoctorFieldsSerializer(serializers.Serializer):
    specialty = serializers.CharField(max_length=100)
    workingdays = serializers.ListField(
        child=serializers.CharField(max_length=20), allow_empty=False
    )
    departmentId = serializers.IntegerField(min_value=1)
    description = serializers.CharField(required=False, allow_blank=True, default='')

    def validate_specialty(self, v):
        v = plain_text(v)
        if not v:
            raise serializers.ValidationError('Please provide a specialty')
        return v

    def validate_description(self, v):
        return plain_text(v)


class PatientFieldsSerializer(serializers.Serializer):
    age = serializers.IntegerField(min_value=0, max_value=150)
    contact = serializers.CharField(max_length=32)
    bloodtype = serializers.CharField(max_length=5, required=False, allow_blank=True, default='')

    def validate_contact(self, v):
        v = plain_text(v)
        if not v:
            raise serializers.ValidationError('Please provide a contact')
        return v
