from rest_framework.views import exception_handler as drf_exception_handler
from rest_framework.exceptions import APIException
from rest_framework.response import Response
from rest_framework import status
import logging

logger = logging.getLogger("teamup")


# -----------------------------
# Domain errors
# -----------------------------
class TeamFormationError(APIException):
    """
    Base class for every rule violation raised by the membership protocol.

    Subclasses are regular DRF exceptions, so a view can simply let them
    propagate and the handler below renders them.
    """
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Team formation rule violated."
    default_code = "team_formation_error"


class NotFound(TeamFormationError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found."
    default_code = "not_found"


class ProfileNotFound(NotFound):
    default_detail = "Profile not found."
    default_code = "profile_not_found"


class TeamNotFound(NotFound):
    default_detail = "Team not found."
    default_code = "team_not_found"


class InvitationNotFound(NotFound):
    default_detail = "Invitation not found."
    default_code = "invitation_not_found"


class InvitationAlreadyResolved(NotFound):
    """Raised when responding to an invitation that is no longer pending."""
    default_detail = "Invitation has already been answered."
    default_code = "invitation_already_resolved"


class AlreadyInTeam(TeamFormationError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "User is already in a team."
    default_code = "already_in_team"


class TeamFull(TeamFormationError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Team is full."
    default_code = "team_full"


class DuplicateRequest(TeamFormationError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Request already sent."
    default_code = "duplicate_request"


class Forbidden(TeamFormationError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "You are not allowed to do this."
    default_code = "forbidden"


class StoreUnavailable(APIException):
    """
    Raised by views when a guarded service returned its no-op default for
    a write, i.e. the database could not be reached.
    """
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = "Service temporarily unavailable, try again later."
    default_code = "store_unavailable"


# -----------------------------
# DRF exception handler
# -----------------------------
def custom_exception_handler(exc, context):
    """
    Wrap DRF + Django exceptions into a consistent response format.

    Success responses (2xx) are not touched.
    Only errors come through here.
    """
    response = drf_exception_handler(exc, context)

    # If DRF handled it, wrap it
    if response is not None:
        body = {
            "success": False,
            "status_code": response.status_code,
            "errors": response.data,
        }
        if isinstance(exc, APIException):
            codes = exc.get_codes()
            if isinstance(codes, str):
                body["code"] = codes
        # Keep auth challenge / throttle hints set by DRF
        headers = {
            name: value
            for name, value in response.items()
            if name in ("WWW-Authenticate", "Retry-After")
        }
        return Response(body, status=response.status_code, headers=headers)

    # Unhandled exceptions -> 500
    logger.exception("Unhandled API exception", exc_info=exc)

    return Response(
        {
            "success": False,
            "status_code": status.HTTP_500_INTERNAL_SERVER_ERROR,
            "errors": {"detail": "Internal server error."},
        },
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
