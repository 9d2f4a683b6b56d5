"""
Submission Email Notifications

Sends the two emails that follow a saved submission: a notification to
the site mailbox, then a confirmation to the submitter. Both go out over
one SMTP connection, in the request, after the record is saved.

A failed send is reported to the caller but never undoes the saved
record: submissions are persisted at most once and notified best-effort.
"""
import logging
import smtplib
from email.utils import formataddr

from django.conf import settings
from django.core.mail import BadHeaderError, EmailMultiAlternatives, get_connection
from django.template.loader import render_to_string
from django.utils.html import strip_tags

from .results import Err, ErrorKind, Ok

logger = logging.getLogger(__name__)

ADMIN_FAILURE = "Mailer Error: Could not send the notification to the site mailbox."
SUBMITTER_FAILURE = "Mailer Error: Could not send the confirmation email."


def header_value(value):
    """Collapse newlines and runs of whitespace so a value fits on one header line."""
    return ' '.join(str(value or '').split())


class Notifier:
    """
    Builds and sends the admin and submitter emails for a submission.

    Usage:
        result = Notifier().send_both(form_type, fields, asset_urls)
    """

    def __init__(self, connection=None, mailbox=None, bcc_email=None, site_name=None):
        self.connection = connection
        self.mailbox = mailbox or getattr(settings, 'SUBMISSIONS_ADMIN_EMAIL', '') or settings.EMAIL_HOST_USER
        self.bcc_email = bcc_email if bcc_email is not None else getattr(settings, 'APPLICATION_BCC_EMAIL', '')
        self.site_name = site_name or getattr(settings, 'SITE_NAME', '')

    def get_connection(self):
        return self.connection or get_connection(fail_silently=False)

    def build_context(self, form_type, fields, asset_urls=None):
        asset_urls = asset_urls or {}
        return {
            'site_name': self.site_name,
            'form_title': form_type.title,
            'fields': fields,
            'rows': [(f.label, fields.get(f.name, '')) for f in form_type.fields],
            'images': [
                (form_type.label_for(name), asset_urls.get(name, ''))
                for name, _ in form_type.upload_fields
            ],
        }

    def build_admin_message(self, form_type, context):
        return self._build_message(
            subject=form_type.admin_subject_for(self.site_name),
            template=form_type.admin_template,
            context=context,
            to=[self.mailbox],
            form_type=form_type,
        )

    def build_submitter_message(self, form_type, context):
        fields = context['fields']
        return self._build_message(
            subject=form_type.submitter_subject_for(self.site_name),
            template=form_type.submitter_template,
            context=context,
            to=[formataddr((header_value(fields.get('fullName')), header_value(fields.get('email'))))],
            form_type=form_type,
        )

    def _build_message(self, subject, template, context, to, form_type):
        html_content = render_to_string(template, context)
        message = EmailMultiAlternatives(
            subject=header_value(subject),
            body=strip_tags(html_content).strip(),
            from_email=formataddr((header_value(form_type.sender_name(self.site_name)), self.mailbox)),
            to=to,
            bcc=[self.bcc_email] if form_type.uses_bcc and self.bcc_email else None,
        )
        message.attach_alternative(html_content, "text/html")
        message.encoding = 'utf-8'
        return message

    def send_both(self, form_type, fields, asset_urls=None):
        """
        Send the admin email, then the submitter email.

        Args:
            form_type: FormType descriptor
            fields: dict of sanitized field values
            asset_urls: dict of upload field name -> public URL

        Returns:
            Ok(2) when both were sent, Err(NOTIFICATION_ERROR) otherwise
        """
        context = self.build_context(form_type, fields, asset_urls)
        jobs = [
            (ADMIN_FAILURE, self.build_admin_message(form_type, context)),
            (SUBMITTER_FAILURE, self.build_submitter_message(form_type, context)),
        ]

        connection = self.get_connection()
        failure = ADMIN_FAILURE
        try:
            connection.open()
            for failure, message in jobs:
                if not connection.send_messages([message]):
                    raise smtplib.SMTPException(f"Message to {message.to} was not accepted")
        except (smtplib.SMTPException, OSError, BadHeaderError) as exc:
            logger.error(f"{form_type.title} form email failed ({failure}): {exc}")
            return Err(ErrorKind.NOTIFICATION_ERROR, failure)
        finally:
            connection.close()

        logger.info(f"{form_type.title} form emails sent to {self.mailbox} and {fields.get('email')}")
        return Ok(len(jobs))
