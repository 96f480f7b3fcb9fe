# authx/errors.py
# Auth error taxonomy: stable codes + the message shown to the user

from rest_framework import status
from rest_framework.exceptions import APIException, Throttled

EMAIL_ALREADY_IN_USE = "auth/email-already-in-use"
INVALID_EMAIL = "auth/invalid-email"
WEAK_PASSWORD = "auth/weak-password"
USER_NOT_FOUND = "auth/user-not-found"
WRONG_PASSWORD = "auth/wrong-password"
INVALID_CREDENTIAL = "auth/invalid-credential"
TOO_MANY_REQUESTS = "auth/too-many-requests"

AUTH_ERROR_MESSAGES = {
    EMAIL_ALREADY_IN_USE: "This email is already registered",
    INVALID_EMAIL: "Invalid email address",
    WEAK_PASSWORD: "Password should be at least 6 characters",
    USER_NOT_FOUND: "No account found with this email",
    WRONG_PASSWORD: "Incorrect password",
    INVALID_CREDENTIAL: "Invalid email or password",
    TOO_MANY_REQUESTS: "Too many attempts. Please try again later",
}

DEFAULT_MESSAGE = "An error occurred. Please try again"


def get_auth_error_message(code):
    return AUTH_ERROR_MESSAGES.get(code, DEFAULT_MESSAGE)


class AuthError(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = DEFAULT_MESSAGE
    default_code = "auth/unknown"

    STATUS_BY_CODE = {
        EMAIL_ALREADY_IN_USE: status.HTTP_409_CONFLICT,
        USER_NOT_FOUND: status.HTTP_401_UNAUTHORIZED,
        WRONG_PASSWORD: status.HTTP_401_UNAUTHORIZED,
        INVALID_CREDENTIAL: status.HTTP_401_UNAUTHORIZED,
    }

    def __init__(self, code):
        super().__init__(detail=get_auth_error_message(code), code=code)
        self.status_code = self.STATUS_BY_CODE.get(code, status.HTTP_400_BAD_REQUEST)


class TooManyAttempts(Throttled):
    default_detail = AUTH_ERROR_MESSAGES[TOO_MANY_REQUESTS]
    default_code = TOO_MANY_REQUESTS
