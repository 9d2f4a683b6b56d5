"""
Submission Pipeline

One pipeline for every public form, parameterized by a FormType:

    rate limit -> sanitize -> honeypot -> upload checks -> field validation
    -> upload storage -> insert -> admin + submitter emails -> start cooldown

Each stage returns Ok or Err; the first Err ends the run and nothing after
it happens. Once the record is saved it stays saved, even if the emails
then fail.
"""
import logging

from .notifications import Notifier
from .results import Ok
from .sanitizer import sanitize
from .store import SubmissionStore
from .uploads import UploadValidator
from .validators import FieldValidator, check_honeypot

logger = logging.getLogger(__name__)


class SubmissionPipeline:
    """
    Processes one submission of a given form type.

    Collaborators are injected so views and tests can swap them:

        pipeline = SubmissionPipeline(
            APPLICATION_FORM,
            rate_limiter=RateLimiter(request.session),
        )
        result = pipeline.run(data, request.FILES, request)
    """

    def __init__(self, form_type, rate_limiter, uploads=None, validator=None, store=None, notifier=None):
        self.form_type = form_type
        self.rate_limiter = rate_limiter
        self.uploads = uploads
        if self.uploads is None and form_type.upload_fields:
            self.uploads = UploadValidator()
        self.validator = validator or FieldValidator()
        self.store = store or SubmissionStore()
        self.notifier = notifier or Notifier()

    def run(self, data, files, request):
        """
        Args:
            data: dict of raw submitted values
            files: mapping of field name -> uploaded file
            request: current request, used to build public upload URLs

        Returns:
            Ok(record) on full success, otherwise the Err of the failed stage
        """
        form_type = self.form_type

        result = self.rate_limiter.check()
        if not result.ok:
            return self._stop(result)

        sanitized = sanitize(data)

        result = check_honeypot(sanitized.get(form_type.honeypot_field))
        if not result.ok:
            return self._stop(result)

        # Only the form's own fields go on; the honeypot is dropped here
        fields = form_type.extract(sanitized)

        accepted = []
        if form_type.upload_fields:
            result = self.uploads.check(files, form_type)
            if not result.ok:
                return self._stop(result)
            accepted = result.value

        result = self.validator.validate(fields, form_type)
        if not result.ok:
            return self._stop(result)

        assets = {}
        if accepted:
            result = self.uploads.store(accepted, request)
            if not result.ok:
                return self._stop(result)
            assets = result.value
        asset_urls = {name: asset.url for name, asset in assets.items()}

        result = self.store.insert(form_type, fields, asset_urls)
        if not result.ok:
            if assets:
                self.uploads.discard(assets)
            return self._stop(result)
        record = result.value

        result = self.notifier.send_both(form_type, fields, asset_urls)
        if not result.ok:
            logger.warning(
                f"{form_type.title} submission {record.pk} saved but emails failed"
            )
            return self._stop(result)

        self.rate_limiter.record()
        return Ok(record)

    def _stop(self, result):
        if result.kind.is_user_error:
            logger.info(f"{self.form_type.title} submission rejected: {result.kind.value}")
        return result
