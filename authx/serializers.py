from django.contrib.auth import authenticate, get_user_model
from django.contrib.auth import password_validation
from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.validators import validate_email
from rest_framework import serializers

from . import errors

User = get_user_model()


def _clean_email(value):
    email = (value or "").strip().lower()
    try:
        validate_email(email)
    except DjangoValidationError:
        raise errors.AuthError(errors.INVALID_EMAIL)
    return email


class RegisterSerializer(serializers.Serializer):
    """
    Creates the auth identity only. The profile is created by the view
    through users.services so it starts without a team.
    """
    email = serializers.CharField()
    password = serializers.CharField(write_only=True, trim_whitespace=False)
    full_name = serializers.CharField(max_length=255, required=False, allow_blank=True)

    def validate_email(self, value):
        email = _clean_email(value)
        if User.objects.filter(email__iexact=email).exists():
            raise errors.AuthError(errors.EMAIL_ALREADY_IN_USE)
        return email

    def validate_password(self, value):
        try:
            password_validation.validate_password(value)
        except DjangoValidationError:
            raise errors.AuthError(errors.WEAK_PASSWORD)
        return value

    def create(self, validated_data):
        email = validated_data['email']
        base = email.split('@')[0]
        username = base
        counter = 1
        while User.objects.filter(username=username).exists():
            username = f"{base}_{counter}"
            counter += 1

        return User.objects.create_user(
            username=username,
            email=email,
            password=validated_data['password'],
        )


class LoginSerializer(serializers.Serializer):
    email = serializers.CharField()
    password = serializers.CharField(write_only=True, trim_whitespace=False)

    def validate(self, attrs):
        email = _clean_email(attrs.get("email"))
        password = attrs.get("password")

        user = User.objects.filter(email__iexact=email).first()
        if user is None:
            raise errors.AuthError(errors.USER_NOT_FOUND)

        if not user.check_password(password):
            raise errors.AuthError(errors.WRONG_PASSWORD)

        # Django still authenticates by username; also rejects inactive users
        user = authenticate(username=user.username, password=password)
        if not user:
            raise errors.AuthError(errors.INVALID_CREDENTIAL)

        attrs["user"] = user
        return attrs
