"""
End-to-end tests for the public contact form endpoint.

Run with: pytest tests/integration/test_contact_form.py -v
"""
import json
import smtplib
import time
from unittest.mock import patch
from urllib.parse import urlencode

import pytest
from django.db import DatabaseError
from rest_framework import status
from rest_framework.test import APIClient

from submissions.models import ContactSubmission
from submissions.rate_limiting import SESSION_KEY

pytestmark = pytest.mark.django_db

CONTACT_URL = '/api/forms/contact'


def post_contact(client, payload):
    return client.post(CONTACT_URL, payload, format='json')


class TestContactFormSuccess:
    """Test valid contact submissions."""

    def test_valid_submission(self, api_client, contact_payload, mailoutbox):
        response = post_contact(api_client, contact_payload)

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {'message': "Your message has been sent successfully."}

        record = ContactSubmission.objects.get()
        assert record.fullname == 'Ada'
        assert record.email == 'ada@example.com'
        assert record.phone == '123'
        assert record.message == 'hi'

        assert len(mailoutbox) == 2
        assert mailoutbox[0].to == ['forms@chefmasterafrica.com']
        assert mailoutbox[0].subject.startswith('New Contact Form Submission')
        assert mailoutbox[1].to == ['Ada <ada@example.com>']

    def test_trailing_slash_accepted(self, api_client, contact_payload):
        response = api_client.post(f'{CONTACT_URL}/', contact_payload, format='json')
        assert response.status_code == status.HTTP_200_OK

    def test_urlencoded_body(self, api_client, contact_payload):
        response = api_client.post(
            CONTACT_URL,
            urlencode(contact_payload),
            content_type='application/x-www-form-urlencoded'
        )
        assert response.status_code == status.HTTP_200_OK
        assert ContactSubmission.objects.get().fullname == 'Ada'

    def test_json_body_without_json_content_type(self, api_client, contact_payload):
        response = api_client.post(CONTACT_URL, json.dumps(contact_payload), content_type='text/plain')
        assert response.status_code == status.HTTP_200_OK
        assert ContactSubmission.objects.count() == 1

    def test_markup_is_sanitized_before_storage(self, api_client, contact_payload, mailoutbox):
        contact_payload['fullName'] = '  <b>Ada</b> & Co  '
        contact_payload['message'] = '<script>alert("x")</script>Hello'

        response = post_contact(api_client, contact_payload)

        assert response.status_code == status.HTTP_200_OK
        record = ContactSubmission.objects.get()
        assert record.fullname == 'Ada &amp; Co'
        assert '<script>' not in record.message
        assert '<script>' not in mailoutbox[0].alternatives[0][0]

    def test_name_with_line_breaks(self, api_client, contact_payload, mailoutbox):
        contact_payload['fullName'] = 'Ada\nLovelace'

        response = post_contact(api_client, contact_payload)

        assert response.status_code == status.HTTP_200_OK
        assert ContactSubmission.objects.get().fullname == 'Ada\nLovelace'
        assert len(mailoutbox) == 2
        assert mailoutbox[1].to == ['Ada Lovelace <ada@example.com>']

    def test_unknown_fields_ignored(self, api_client, contact_payload):
        contact_payload['is_admin'] = 'true'
        response = post_contact(api_client, contact_payload)
        assert response.status_code == status.HTTP_200_OK


class TestContactFormRejections:
    """Test submissions that are turned away."""

    def test_missing_message(self, api_client, contact_payload, mailoutbox):
        contact_payload['message'] = ''

        response = post_contact(api_client, contact_payload)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json() == {'errors': {'message': "Message is required."}}
        assert ContactSubmission.objects.count() == 0
        assert mailoutbox == []

    def test_whitespace_only_fields_are_empty(self, api_client, contact_payload):
        contact_payload['fullName'] = '   '
        response = post_contact(api_client, contact_payload)
        assert response.json()['errors'] == {'fullName': "Full Name is required."}

    def test_invalid_email(self, api_client, contact_payload):
        contact_payload['email'] = 'ada-at-example'
        response = post_contact(api_client, contact_payload)
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()['errors'] == {'email': "Please provide a valid email address."}

    def test_honeypot_filled(self, api_client, contact_payload, mailoutbox):
        contact_payload['botField'] = 'I am a bot'

        response = post_contact(api_client, contact_payload)

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.json() == {'message': "Spam detected."}
        assert ContactSubmission.objects.count() == 0
        assert mailoutbox == []

    @pytest.mark.parametrize('overrides', [
        {'fullName': '', 'email': ''},
        {'email': 'not-an-email', 'message': ''},
        {'fullName': '', 'email': '', 'phone': '', 'message': ''},
    ])
    def test_honeypot_wins_over_invalid_fields(self, api_client, contact_payload, mailoutbox, overrides):
        payload = dict(contact_payload, botField='I am a bot', **overrides)

        response = post_contact(api_client, payload)

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.json() == {'message': "Spam detected."}
        assert ContactSubmission.objects.count() == 0
        assert mailoutbox == []

    def test_oversized_body_is_empty_submission(self, api_client, contact_payload, settings):
        settings.DATA_UPLOAD_MAX_MEMORY_SIZE = 1024
        contact_payload['message'] = 'x' * 4096

        response = api_client.post(CONTACT_URL, json.dumps(contact_payload), content_type='text/plain')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response['Content-Type'] == 'application/json'
        assert set(response.json()['errors']) == {'fullName', 'email', 'phone', 'message'}
        assert ContactSubmission.objects.count() == 0

    def test_oversized_multipart_field_is_empty_submission(self, api_client, contact_payload, settings):
        settings.DATA_UPLOAD_MAX_MEMORY_SIZE = 1024
        contact_payload['message'] = 'x' * 4096

        response = api_client.post(CONTACT_URL, contact_payload, format='multipart')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response['Content-Type'] == 'application/json'
        assert 'errors' in response.json()

    def test_malformed_json(self, api_client):
        response = api_client.post(CONTACT_URL, '{"fullName": ', content_type='application/json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        errors = response.json()['errors']
        assert set(errors) == {'fullName', 'email', 'phone', 'message'}
        assert errors['email'] == "Valid Email is required."

    @pytest.mark.parametrize('method', ['get', 'put', 'patch', 'delete', 'options'])
    def test_other_methods_not_found(self, api_client, method):
        response = getattr(api_client, method)(CONTACT_URL)

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json() == {'message': "Page not found."}

    def test_unknown_form_path(self, api_client, contact_payload):
        response = api_client.post('/api/forms/newsletter', contact_payload, format='json')
        assert response.status_code == status.HTTP_404_NOT_FOUND


class TestContactFormRateLimit:
    """Test the per-session cooldown."""

    def test_second_submission_rate_limited(self, api_client, contact_payload, mailoutbox):
        assert post_contact(api_client, contact_payload).status_code == status.HTTP_200_OK

        response = post_contact(api_client, contact_payload)

        assert response.status_code == status.HTTP_429_TOO_MANY_REQUESTS
        assert response.json() == {'message': "Please wait a bit before submitting again."}
        assert 0 < int(response['Retry-After']) <= 60
        assert ContactSubmission.objects.count() == 1
        assert len(mailoutbox) == 2

    def test_cooldown_expires(self, api_client, contact_payload):
        assert post_contact(api_client, contact_payload).status_code == status.HTTP_200_OK

        session = api_client.session
        session[SESSION_KEY] = int(time.time()) - 61
        session.save()

        response = post_contact(api_client, contact_payload)

        assert response.status_code == status.HTTP_200_OK
        assert ContactSubmission.objects.count() == 2

    def test_rejected_submission_does_not_start_cooldown(self, api_client, contact_payload):
        invalid = dict(contact_payload, message='')
        assert post_contact(api_client, invalid).status_code == status.HTTP_400_BAD_REQUEST

        response = post_contact(api_client, contact_payload)
        assert response.status_code == status.HTTP_200_OK

    def test_rate_limit_checked_before_honeypot(self, api_client, contact_payload):
        post_contact(api_client, contact_payload)

        spam = dict(contact_payload, botField='x')
        response = post_contact(api_client, spam)
        assert response.status_code == status.HTTP_429_TOO_MANY_REQUESTS

    def test_separate_sessions_not_limited(self, contact_payload):
        assert post_contact(APIClient(), contact_payload).status_code == status.HTTP_200_OK
        assert post_contact(APIClient(), contact_payload).status_code == status.HTTP_200_OK


class TestContactFormFailures:
    """Test infrastructure failures."""

    def test_mail_failure_keeps_record(self, api_client, contact_payload):
        with patch('django.core.mail.backends.locmem.EmailBackend.send_messages',
                   side_effect=smtplib.SMTPServerDisconnected('gone')):
            response = post_contact(api_client, contact_payload)

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.json()['message'].startswith('Mailer Error: ')
        assert ContactSubmission.objects.count() == 1

    def test_mail_failure_does_not_start_cooldown(self, api_client, contact_payload):
        with patch('django.core.mail.backends.locmem.EmailBackend.send_messages',
                   side_effect=smtplib.SMTPException('refused')):
            post_contact(api_client, contact_payload)

        response = post_contact(api_client, contact_payload)
        assert response.status_code == status.HTTP_200_OK

    def test_database_failure(self, api_client, contact_payload, mailoutbox):
        with patch.object(ContactSubmission.objects, 'create', side_effect=DatabaseError('disk full')):
            response = post_contact(api_client, contact_payload)

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.json() == {'message': "Error saving your message. Please try again later."}
        assert mailoutbox == []
