"""
Submission Validators

Pipeline stages wrapping the form serializers: the honeypot gate and the
per-form field checks.
"""
from .results import Err, ErrorKind, Ok
from .serializers import SPAM_MESSAGE, HoneypotSerializer


def check_honeypot(value):
    """
    Honeypot validation - the hidden field should be empty.

    Returns:
        Ok() or Err(SPAM_DETECTED)
    """
    serializer = HoneypotSerializer(data={'botField': '' if value is None else value})
    if not serializer.is_valid():
        return Err(ErrorKind.SPAM_DETECTED, SPAM_MESSAGE)
    return Ok()


class FieldValidator:
    """
    Required-field and email format checks for a sanitized submission,
    using the serializer of its form type.
    """

    def collect_errors(self, fields, form_type):
        """
        Args:
            fields: dict of sanitized field values
            form_type: FormType descriptor

        Returns:
            dict of field name -> message (empty when valid)
        """
        serializer = form_type.serializer_class(data=fields)
        if serializer.is_valid():
            return {}
        return serializer.flatten_errors(serializer.errors)

    def validate(self, fields, form_type):
        """
        Returns:
            Ok(fields) or Err(VALIDATION_FAILED, errors={...})
        """
        errors = self.collect_errors(fields, form_type)
        if errors:
            return Err(ErrorKind.VALIDATION_FAILED, errors=errors)
        return Ok(fields)
