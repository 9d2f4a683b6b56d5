"""
Rate Limiting Utilities for Form Submissions

Per-session cooldown between successful submissions.
"""
import math
import time

from django.conf import settings

from .results import Err, ErrorKind, Ok

# Shared by the contact and application forms: one cooldown per session
SESSION_KEY = 'last_contact_form_submission'

RATE_LIMIT_MESSAGE = "Please wait a bit before submitting again."


def get_client_ip(request):
    """Get client IP address from request."""
    x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
    if x_forwarded_for:
        ip = x_forwarded_for.split(',')[0]
    else:
        ip = request.META.get('REMOTE_ADDR')
    return ip


class RateLimiter:
    """
    Cooldown gate keyed by the time of the last successful submission
    stored in the session.

    Usage:
        limiter = RateLimiter(request.session)
        result = limiter.check()
        ...
        limiter.record()  # only after the record is saved and both emails went out
    """

    def __init__(self, session, cooldown_seconds=None, clock=time.time):
        self.session = session
        if cooldown_seconds is None:
            cooldown_seconds = getattr(settings, 'SUBMISSION_RATE_LIMIT_SECONDS', 60)
        self.cooldown_seconds = cooldown_seconds
        self.clock = clock

    @property
    def last_submission(self):
        return self.session.get(SESSION_KEY, 0)

    def retry_after(self):
        """Seconds left until the gate reopens (0 if already open)."""
        remaining = self.cooldown_seconds - (self.clock() - self.last_submission)
        return max(0, math.ceil(remaining))

    def check(self):
        """
        Returns:
            Ok() if a submission is allowed now, Err(RATE_LIMITED) otherwise
        """
        if self.clock() - self.last_submission < self.cooldown_seconds:
            return Err(ErrorKind.RATE_LIMITED, RATE_LIMIT_MESSAGE, retry_after=self.retry_after())
        return Ok()

    def record(self):
        """Start a new cooldown window from now."""
        self.session[SESSION_KEY] = int(self.clock())
