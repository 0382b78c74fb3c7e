import structlog
from django.conf import settings
from django.core.exceptions import ObjectDoesNotExist, ValidationError as DjangoValidationError
from django.db import IntegrityError
from rest_framework import status
from rest_framework.exceptions import APIException, NotAuthenticated, NotFound
from rest_framework.response import Response
from rest_framework.views import exception_handler, set_rollback

logger = structlog.get_logger(__name__)


def custom_exception_handler(exc, context):

    if isinstance(exc, (NotAuthenticated, NotFound, ObjectDoesNotExist)):
        pass
    elif isinstance(exc, (APIException, DjangoValidationError)):
        logger.warning("Request rejected", error=str(exc), exception=exc.__class__.__name__)
    else:
        logger.error(exc, exc_info=True)

    # Call REST framework's default exception handler first
    # to get the standard error response.
    response = exception_handler(exc, context)

    # response == None is an exception not handled by the DRF framework in the call above
    if response is None:
        if isinstance(exc, IntegrityError):
            response = Response({"detail": "Database conflict"}, status=status.HTTP_409_CONFLICT)
        elif isinstance(exc, ObjectDoesNotExist):
            response = Response({"detail": str(exc) or "Not found"}, status=status.HTTP_404_NOT_FOUND)
        elif isinstance(exc, DjangoValidationError):
            response = Response({"detail": exc.messages}, status=status.HTTP_400_BAD_REQUEST)
        else:
            response = Response({"detail": str(exc)}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
        set_rollback()

    if len(exc.args) > 0 and exc.args[0] == "Invalid token.":
        logger.warning("Detected an invalid token: deleting cookie")
        response.delete_cookie(
            key="access_token",
            path="/",
            samesite="Lax",
            domain=None if settings.DEBUG else settings.API_DOMAIN,
        )

    return response
