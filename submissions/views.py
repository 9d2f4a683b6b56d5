"""
Form Submission Views

Public endpoints for the website contact and application forms.
"""
import json
import logging

from django.core.exceptions import RequestDataTooBig
from django.http import QueryDict
from rest_framework.exceptions import ParseError, UnsupportedMediaType
from rest_framework.permissions import AllowAny
from rest_framework.views import APIView

from .form_types import APPLICATION_FORM, CONTACT_FORM
from .pipeline import SubmissionPipeline
from .rate_limiting import RateLimiter, get_client_ip
from .responses import ResponseEncoder

logger = logging.getLogger(__name__)


class FormSubmitView(APIView):
    """
    Base view for public form submissions.

    POST only; every other method gets a 404 JSON response. Accepts JSON,
    urlencoded and multipart bodies. No authentication required; rate
    limited per session.
    """

    permission_classes = [AllowAny]
    authentication_classes = []
    form_type = None
    encoder = ResponseEncoder()

    def post(self, request):
        """Submit a form."""
        logger.info(f"{self.form_type.title} form submission from {get_client_ip(request)}")
        data, files = self.get_submission_data(request)
        result = self.get_pipeline(request).run(data, files, request)
        return self.encoder.encode(result)

    def get_pipeline(self, request):
        return SubmissionPipeline(self.form_type, rate_limiter=RateLimiter(request.session))

    def get_submission_data(self, request):
        """
        Returns:
            (dict of submitted values, mapping of uploaded files)

        Form bodies are used when present; otherwise the body is read as
        JSON. A body that cannot be parsed, or that is over
        DATA_UPLOAD_MAX_MEMORY_SIZE, counts as an empty submission.
        """
        try:
            data = request.data
            files = request.FILES
        except ParseError as exc:
            logger.info(f"Unparseable {self.form_type.slug} form body: {exc}")
            return {}, {}
        except RequestDataTooBig as exc:
            logger.warning(f"Oversized {self.form_type.slug} form body: {exc}")
            return {}, {}
        except UnsupportedMediaType:
            return self._decode_json_body(request), {}

        if isinstance(data, QueryDict):
            return {key: data.get(key) for key in data.keys() if key not in files}, files
        if isinstance(data, dict):
            return data, files
        return {}, files

    def _decode_json_body(self, request):
        try:
            data = json.loads(request.body or b'{}')
        except RequestDataTooBig as exc:
            logger.warning(f"Oversized {self.form_type.slug} form body: {exc}")
            return {}
        except ValueError:
            return {}
        return data if isinstance(data, dict) else {}

    def http_method_not_allowed(self, request, *args, **kwargs):
        return self.encoder.not_found()

    def options(self, request, *args, **kwargs):
        return self.encoder.not_found()


class ContactFormSubmitView(FormSubmitView):
    """
    POST /api/forms/contact
    """

    form_type = CONTACT_FORM


class ApplicationFormSubmitView(FormSubmitView):
    """
    POST /api/forms/application

    Multipart bodies may carry passport_image and signature_image files.
    """

    form_type = APPLICATION_FORM
