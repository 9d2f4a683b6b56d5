"""
Input Sanitization

Normalizes raw form input before validation, storage and email rendering.
"""
import html
import logging
from collections.abc import Mapping

from django.core.exceptions import SuspiciousOperation
from django.utils.html import escape, strip_tags

logger = logging.getLogger(__name__)


def sanitize(value):
    """
    Recursively sanitize form input.

    Mappings and lists/tuples keep their structure and key order; every
    scalar becomes a string with markup removed, surrounding whitespace
    trimmed and HTML-significant characters (quotes included) escaped.
    None becomes an empty string.

    Existing entities are decoded before escaping, so the result is never
    double-escaped and sanitize(sanitize(x)) == sanitize(x).
    """
    if isinstance(value, Mapping):
        return {key: sanitize(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return type(value)(sanitize(item) for item in value)
    return _sanitize_scalar(value)


def _sanitize_scalar(value):
    if value is None:
        return ''
    text = str(value)
    try:
        text = strip_tags(text)
    except SuspiciousOperation:
        # Pathologically nested markup: keep the text, escaped as-is
        logger.warning("Markup too deeply nested to strip; escaping input instead")
    text = html.unescape(text).strip()
    return str(escape(text))
