"""
End-to-end tests for the public application form endpoint, including
passport and signature image uploads.

Run with: pytest tests/integration/test_application_form.py -v
"""
import smtplib
from unittest.mock import patch

import pytest
from django.core.files.uploadedfile import SimpleUploadedFile
from django.db import DatabaseError
from rest_framework import status

from submissions.models import ApplicationSubmission

pytestmark = pytest.mark.django_db

APPLICATION_URL = '/api/forms/application'
MB = 1024 * 1024


def image(name='passport.jpg', content_type='image/jpeg', size=2048):
    return SimpleUploadedFile(name, b'\x89' * size, content_type=content_type)


def stored_files(upload_root):
    return sorted(path.name for path in upload_root.glob('*'))


class TestApplicationFormSuccess:
    """Test valid application submissions."""

    def test_json_application_without_images(self, api_client, application_payload, mailoutbox):
        response = api_client.post(APPLICATION_URL, application_payload, format='json')

        assert response.status_code == status.HTTP_200_OK
        record = ApplicationSubmission.objects.get()
        assert record.fullname == 'Ada Lovelace'
        assert record.fullname_emergency_contact == 'Charles Babbage'
        assert record.signature_dish == 'Jollof Rice'
        assert record.passport_image == ''
        assert record.signature_image == ''
        assert len(mailoutbox) == 2

    def test_multipart_with_images(self, api_client, application_payload, upload_root, settings, mailoutbox):
        application_payload['passport_image'] = image('me.jpg')
        application_payload['signature_image'] = image('sig.png', 'image/png')

        response = api_client.post(APPLICATION_URL, application_payload, format='multipart')

        assert response.status_code == status.HTTP_200_OK
        record = ApplicationSubmission.objects.get()
        prefix = f"http://testserver{settings.UPLOADS_BASE_PATH}/uploads/"
        assert record.passport_image.startswith(prefix + 'passport_image_')
        assert record.passport_image.endswith('.jpg')
        assert record.signature_image.startswith(prefix + 'signature_image_')
        assert record.signature_image.endswith('.png')

        files = stored_files(upload_root)
        assert len(files) == 2
        assert record.passport_image.rsplit('/', 1)[1] in files

        admin_html = mailoutbox[0].alternatives[0][0]
        assert record.passport_image in admin_html
        assert record.signature_image in admin_html

    def test_only_required_fields(self, api_client):
        payload = {'fullName': 'Ada', 'email': 'ada@example.com', 'phone': '123'}
        response = api_client.post(APPLICATION_URL, payload, format='multipart')

        assert response.status_code == status.HTTP_200_OK
        assert ApplicationSubmission.objects.get().occupation == ''

    def test_both_emails_blind_copied(self, api_client, application_payload, settings, mailoutbox):
        api_client.post(APPLICATION_URL, application_payload, format='json')

        admin, submitter = mailoutbox
        assert admin.subject == f"New Application Form Submission - {settings.SITE_NAME}"
        assert admin.bcc == [settings.APPLICATION_BCC_EMAIL]
        assert submitter.subject == f"Thanks for contacting {settings.SITE_NAME}!"
        assert submitter.bcc == [settings.APPLICATION_BCC_EMAIL]
        assert submitter.to == ['Ada Lovelace <ada@example.com>']

    def test_name_with_line_breaks(self, api_client, application_payload, mailoutbox):
        application_payload['fullName'] = 'Ada\r\nLovelace'

        response = api_client.post(APPLICATION_URL, application_payload, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert len(mailoutbox) == 2
        assert mailoutbox[1].to == ['Ada Lovelace <ada@example.com>']

    def test_multiline_values_keep_line_breaks(self, api_client, application_payload, mailoutbox):
        api_client.post(APPLICATION_URL, application_payload, format='json')

        html = mailoutbox[0].alternatives[0][0]
        assert 'Smoky party jollof.<br>Served with plantain.' in html


class TestApplicationFormUploads:
    """Test image upload rejections."""

    def test_gif_rejected(self, api_client, application_payload, upload_root, mailoutbox):
        application_payload['passport_image'] = image('me.gif', 'image/gif')

        response = api_client.post(APPLICATION_URL, application_payload, format='multipart')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json() == {'message': "Passport image must be a JPG or PNG image."}
        assert ApplicationSubmission.objects.count() == 0
        assert stored_files(upload_root) == []
        assert mailoutbox == []

    def test_oversized_image_rejected(self, api_client, application_payload, upload_root):
        application_payload['signature_image'] = image('sig.png', 'image/png', size=6 * MB)

        response = api_client.post(APPLICATION_URL, application_payload, format='multipart')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json() == {'message': "Signature image must not exceed 5MB."}
        assert ApplicationSubmission.objects.count() == 0
        assert stored_files(upload_root) == []

    def test_valid_passport_invalid_signature_stores_nothing(self, api_client, application_payload, upload_root):
        application_payload['passport_image'] = image()
        application_payload['signature_image'] = image('sig.bmp', 'image/bmp')

        response = api_client.post(APPLICATION_URL, application_payload, format='multipart')

        assert response.json()['message'] == "Signature image must be a JPG or PNG image."
        assert stored_files(upload_root) == []

    def test_invalid_fields_leave_no_uploads(self, api_client, application_payload, upload_root):
        application_payload['email'] = ''
        application_payload['passport_image'] = image()

        response = api_client.post(APPLICATION_URL, application_payload, format='multipart')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json() == {'errors': {'email': "Valid Email is required."}}
        assert stored_files(upload_root) == []

    def test_upload_error_reported_before_field_errors(self, api_client, upload_root):
        payload = {'passport_image': image('me.gif', 'image/gif')}

        response = api_client.post(APPLICATION_URL, payload, format='multipart')

        assert response.json() == {'message': "Passport image must be a JPG or PNG image."}

    def test_honeypot_wins_over_invalid_fields(self, api_client, upload_root, mailoutbox):
        payload = {'fullName': '', 'email': 'nope', 'phone': '', 'botField': 'http://spam.example'}

        response = api_client.post(APPLICATION_URL, payload, format='multipart')

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.json() == {'message': "Spam detected."}
        assert ApplicationSubmission.objects.count() == 0
        assert mailoutbox == []

    def test_honeypot_checked_before_uploads(self, api_client, application_payload, upload_root):
        application_payload['botField'] = 'bot'
        application_payload['passport_image'] = image('me.gif', 'image/gif')

        response = api_client.post(APPLICATION_URL, application_payload, format='multipart')

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert stored_files(upload_root) == []


class TestApplicationFormFailures:
    """Test infrastructure failures."""

    def test_database_failure_removes_uploads(self, api_client, application_payload, upload_root, mailoutbox):
        application_payload['passport_image'] = image()

        with patch.object(ApplicationSubmission.objects, 'create', side_effect=DatabaseError('disk full')):
            response = api_client.post(APPLICATION_URL, application_payload, format='multipart')

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.json() == {'message': "Error saving your message. Please try again later."}
        assert stored_files(upload_root) == []
        assert mailoutbox == []

    def test_storage_failure(self, api_client, application_payload):
        application_payload['passport_image'] = image()

        with patch('django.core.files.storage.FileSystemStorage.save', side_effect=OSError('read-only')):
            response = api_client.post(APPLICATION_URL, application_payload, format='multipart')

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.json() == {'message': "Failed to upload passport image"}
        assert ApplicationSubmission.objects.count() == 0

    def test_mail_failure_keeps_record_and_images(self, api_client, application_payload, upload_root):
        application_payload['passport_image'] = image()

        with patch('django.core.mail.backends.locmem.EmailBackend.send_messages',
                   side_effect=smtplib.SMTPException('refused')):
            response = api_client.post(APPLICATION_URL, application_payload, format='multipart')

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.json() == {
            'message': "Mailer Error: Could not send the notification to the site mailbox."
        }
        assert ApplicationSubmission.objects.count() == 1
        assert len(stored_files(upload_root)) == 1

    def test_get_not_found(self, api_client):
        response = api_client.get(APPLICATION_URL)
        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json() == {'message': "Page not found."}
