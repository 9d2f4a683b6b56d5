"""
Submission Store

Writes one submission record per accepted form. The ORM issues a
parameterized INSERT with the form's fixed column order; submitted_at
is assigned server-side on insert.
"""
import logging

from django.db import DatabaseError, OperationalError, ProgrammingError, transaction

from .results import Err, ErrorKind, Ok

logger = logging.getLogger(__name__)

PREPARE_ERROR_MESSAGE = "Database error: could not prepare the submission record."
SAVE_ERROR_MESSAGE = "Error saving your message. Please try again later."


class SubmissionStore:
    """
    Persists sanitized submissions.

    Usage:
        result = SubmissionStore().insert(form_type, fields, asset_urls)
        if result.ok:
            record = result.value
    """

    def insert(self, form_type, fields, asset_urls=None):
        """
        Args:
            form_type: FormType descriptor
            fields: dict of sanitized field values
            asset_urls: dict of upload field name -> public URL

        Returns:
            Ok(record) or Err(PERSISTENCE_ERROR)
        """
        columns = form_type.columns(fields, asset_urls)
        try:
            with transaction.atomic():
                record = form_type.model.objects.create(**columns)
        except (ProgrammingError, OperationalError):
            logger.exception(f"Could not prepare {form_type.slug} submission insert")
            return Err(ErrorKind.PERSISTENCE_ERROR, PREPARE_ERROR_MESSAGE)
        except DatabaseError:
            logger.exception(f"Could not save {form_type.slug} submission")
            return Err(ErrorKind.PERSISTENCE_ERROR, SAVE_ERROR_MESSAGE)

        logger.info(f"Saved {form_type.slug} submission {record.pk}")
        return Ok(record)
