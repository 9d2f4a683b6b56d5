"""
Submission Responses

Turns a pipeline outcome into the single JSON response sent back to
the browser.
"""
from rest_framework import status
from rest_framework.response import Response

from .results import ErrorKind

SUCCESS_MESSAGE = "Your message has been sent successfully."
NOT_FOUND_MESSAGE = "Page not found."

STATUS_CODES = {
    ErrorKind.RATE_LIMITED: status.HTTP_429_TOO_MANY_REQUESTS,
    ErrorKind.SPAM_DETECTED: status.HTTP_403_FORBIDDEN,
    ErrorKind.INVALID_FILE_TYPE: status.HTTP_400_BAD_REQUEST,
    ErrorKind.FILE_TOO_LARGE: status.HTTP_400_BAD_REQUEST,
    ErrorKind.STORAGE_WRITE_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorKind.VALIDATION_FAILED: status.HTTP_400_BAD_REQUEST,
    ErrorKind.PERSISTENCE_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorKind.NOTIFICATION_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


class ResponseEncoder:
    """Maps Ok / Err outcomes to status codes and JSON bodies."""

    def encode(self, result):
        if result.ok:
            return Response({'message': SUCCESS_MESSAGE}, status=status.HTTP_200_OK)

        if result.kind is ErrorKind.VALIDATION_FAILED:
            body = {'errors': result.errors or {}}
        else:
            body = {'message': result.message}

        headers = None
        if result.retry_after is not None:
            headers = {'Retry-After': str(result.retry_after)}
        return Response(body, status=STATUS_CODES[result.kind], headers=headers)

    def not_found(self):
        return Response({'message': NOT_FOUND_MESSAGE}, status=status.HTTP_404_NOT_FOUND)
