"""
Tests for the form submission pipeline components
"""
import smtplib
from unittest.mock import patch

import pytest
from django.core.files.uploadedfile import SimpleUploadedFile
from django.db import DatabaseError, ProgrammingError
from django.test import RequestFactory

from submissions.form_types import APPLICATION_FORM, CONTACT_FORM, upload_label
from submissions.models import ApplicationSubmission, ContactSubmission
from submissions.notifications import ADMIN_FAILURE, SUBMITTER_FAILURE, Notifier, header_value
from submissions.rate_limiting import SESSION_KEY, RateLimiter, get_client_ip
from submissions.responses import ResponseEncoder
from submissions.results import Err, ErrorKind, Ok
from submissions.sanitizer import sanitize
from submissions.serializers import (
    EMAIL_FORMAT_MESSAGE,
    EMAIL_REQUIRED_MESSAGE,
    ApplicationFormSubmitSerializer,
    ContactFormSubmitSerializer,
)
from submissions.store import PREPARE_ERROR_MESSAGE, SAVE_ERROR_MESSAGE, SubmissionStore
from submissions.uploads import UploadValidator
from submissions.validators import FieldValidator, check_honeypot


class FakeClock:
    def __init__(self, now=1_700_000_000):
        self.now = now

    def __call__(self):
        return self.now


def image(name='passport.jpg', content_type='image/jpeg', size=1024):
    return SimpleUploadedFile(name, b'\xff' * size, content_type=content_type)


class TestSanitizer:
    """Test recursive input sanitization."""

    def test_strips_tags_and_trims(self):
        assert sanitize('  <b>Ada</b> Lovelace  ') == 'Ada Lovelace'

    def test_escapes_html_significant_characters(self):
        assert sanitize('Tom & "Jerry" \'s') == 'Tom &amp; &quot;Jerry&quot; &#x27;s'

    def test_script_tags_removed(self):
        cleaned = sanitize('<script>alert(1)</script>hello')
        assert '<' not in cleaned
        assert 'hello' in cleaned

    def test_none_becomes_empty_string(self):
        assert sanitize(None) == ''

    def test_non_string_scalars_become_text(self):
        assert sanitize(42) == '42'

    def test_nested_structure_and_key_order_preserved(self):
        data = {'b': [' x ', {'c': '<i>y</i>'}], 'a': None}
        cleaned = sanitize(data)
        assert list(cleaned.keys()) == ['b', 'a']
        assert cleaned == {'b': ['x', {'c': 'y'}], 'a': ''}

    def test_inner_newlines_kept(self):
        assert sanitize('line one\nline two\n') == 'line one\nline two'

    @pytest.mark.parametrize('value', [
        'plain',
        '  <p>Hello &amp; welcome</p> ',
        'a < b > c',
        '&lt;script&gt;alert(1)&lt;/script&gt;',
        '&#32; padded',
        'O\'Reilly "quoted"',
        {'k': ['<b>1</b>', None, {'z': ' &amp;amp; '}]},
        ['x', ('y', ' z ')],
    ])
    def test_idempotent(self, value):
        once = sanitize(value)
        assert sanitize(once) == once


class TestRateLimiter:
    """Test the per-session submission cooldown."""

    def test_first_submission_allowed(self):
        limiter = RateLimiter({}, cooldown_seconds=60, clock=FakeClock())
        assert limiter.check().ok

    def test_second_submission_within_cooldown_rejected(self):
        clock = FakeClock()
        session = {}
        limiter = RateLimiter(session, cooldown_seconds=60, clock=clock)
        limiter.record()

        clock.now += 59
        result = limiter.check()

        assert not result.ok
        assert result.kind is ErrorKind.RATE_LIMITED
        assert result.message == "Please wait a bit before submitting again."
        assert result.retry_after == 1
        assert limiter.retry_after() == 1

    def test_retry_after_rounds_up(self):
        clock = FakeClock()
        limiter = RateLimiter({}, cooldown_seconds=60, clock=clock)
        limiter.record()

        clock.now += 30.5
        assert limiter.check().retry_after == 30

    def test_gate_reopens_after_cooldown(self):
        clock = FakeClock()
        session = {}
        limiter = RateLimiter(session, cooldown_seconds=60, clock=clock)
        limiter.record()

        clock.now += 60
        assert limiter.check().ok
        assert limiter.retry_after() == 0

    def test_record_writes_session_timestamp(self):
        session = {}
        RateLimiter(session, clock=FakeClock(1234)).record()
        assert session[SESSION_KEY] == 1234

    def test_cooldown_defaults_to_settings(self, settings):
        settings.SUBMISSION_RATE_LIMIT_SECONDS = 15
        assert RateLimiter({}).cooldown_seconds == 15

    def test_client_ip_prefers_forwarded_header(self):
        request = RequestFactory().post('/', HTTP_X_FORWARDED_FOR='10.0.0.1, 10.0.0.2')
        assert get_client_ip(request) == '10.0.0.1'


class TestHoneypot:
    """Test honeypot spam detection."""

    def test_empty_honeypot_passes(self):
        assert check_honeypot('').ok
        assert check_honeypot(None).ok

    def test_filled_honeypot_is_spam(self):
        result = check_honeypot('http://spam.example')
        assert result.kind is ErrorKind.SPAM_DETECTED
        assert result.message == "Spam detected."

    def test_non_text_honeypot_is_spam(self):
        result = check_honeypot(['http://spam.example'])
        assert result.kind is ErrorKind.SPAM_DETECTED
        assert result.message == "Spam detected."


class TestFieldValidator:
    """Test required-field and email checks."""

    def setup_method(self):
        self.validator = FieldValidator()
        self.contact = {
            'fullName': 'Ada', 'email': 'ada@example.com', 'phone': '123', 'message': 'hi',
        }

    def test_valid_contact(self):
        result = self.validator.validate(self.contact, CONTACT_FORM)
        assert result.ok
        assert result.value == self.contact

    def test_contact_requires_every_field(self):
        errors = self.validator.collect_errors({}, CONTACT_FORM)
        assert errors == {
            'fullName': "Full Name is required.",
            'email': EMAIL_REQUIRED_MESSAGE,
            'phone': "Phone number is required.",
            'message': "Message is required.",
        }

    def test_missing_message(self):
        self.contact['message'] = ''
        result = self.validator.validate(self.contact, CONTACT_FORM)
        assert result.kind is ErrorKind.VALIDATION_FAILED
        assert result.errors == {'message': "Message is required."}

    def test_email_failing_pattern_gets_format_message(self):
        self.contact['email'] = 'not-an-email'
        errors = self.validator.collect_errors(self.contact, CONTACT_FORM)
        assert errors == {'email': EMAIL_FORMAT_MESSAGE}

    def test_email_matching_pattern_but_malformed(self):
        self.contact['email'] = 'ada..lovelace@example.com'
        errors = self.validator.collect_errors(self.contact, CONTACT_FORM)
        assert errors == {'email': EMAIL_REQUIRED_MESSAGE}

    def test_application_only_requires_contact_details(self):
        fields = APPLICATION_FORM.extract({
            'fullName': 'Ada', 'email': 'ada@example.com', 'phone': '123',
        })
        assert self.validator.validate(fields, APPLICATION_FORM).ok

    def test_application_missing_phone(self):
        errors = self.validator.collect_errors({'fullName': 'Ada', 'email': 'ada@example.com'}, APPLICATION_FORM)
        assert errors == {'phone': "Phone number is required."}

    def test_overlong_value_rejected(self):
        self.contact['phone'] = '1' * 51
        errors = self.validator.collect_errors(self.contact, CONTACT_FORM)
        assert list(errors) == ['phone']


class TestSerializers:
    """Test the per-form serializers."""

    def test_contact_errors_flattened_to_messages(self):
        serializer = ContactFormSubmitSerializer(data={'fullName': '', 'email': 'x', 'phone': '1', 'message': ''})
        assert not serializer.is_valid()
        assert serializer.flatten_errors(serializer.errors) == {
            'fullName': "Full Name is required.",
            'email': EMAIL_FORMAT_MESSAGE,
            'message': "Message is required.",
        }

    def test_application_optional_fields_accept_blank(self):
        serializer = ApplicationFormSubmitSerializer(data={
            'fullName': 'Ada', 'email': 'ada@example.com', 'phone': '1', 'dob': '', 'degree': '',
        })
        assert serializer.is_valid(), serializer.errors

    def test_required_fields_follow_serializer(self):
        assert CONTACT_FORM.required_fields == ['fullName', 'email', 'phone', 'message']
        assert APPLICATION_FORM.required_fields == ['fullName', 'email', 'phone']


class TestFormTypes:
    """Test form descriptors."""

    def test_extract_drops_honeypot_and_unknown_fields(self):
        fields = CONTACT_FORM.extract({'fullName': 'Ada', 'botField': 'x', 'admin': 'yes'})
        assert fields == {'fullName': 'Ada', 'email': '', 'phone': '', 'message': ''}

    def test_extract_blanks_non_string_values(self):
        fields = CONTACT_FORM.extract({'fullName': ['Ada'], 'message': {'a': 'b'}})
        assert fields['fullName'] == ''
        assert fields['message'] == ''

    def test_application_columns_in_table_order(self):
        fields = APPLICATION_FORM.extract({'fullName': 'Ada', 'fullName_emergency_contact': 'Charles'})
        columns = APPLICATION_FORM.columns(fields, {'passport_image': 'http://x/p.jpg'})

        assert list(columns)[:3] == ['fullname', 'dob', 'gender']
        assert list(columns)[-2:] == ['passport_image', 'signature_image']
        assert len(columns) == 22
        assert columns['fullname_emergency_contact'] == 'Charles'
        assert columns['passport_image'] == 'http://x/p.jpg'
        assert columns['signature_image'] == ''

    def test_contact_columns(self):
        columns = CONTACT_FORM.columns({'fullName': 'Ada', 'email': 'a@b.co', 'phone': '1', 'message': 'm'})
        assert columns == {'fullname': 'Ada', 'email': 'a@b.co', 'phone': '1', 'message': 'm'}

    def test_upload_label(self):
        assert upload_label('passport_image') == 'Passport image'
        assert APPLICATION_FORM.label_for('signature_image') == 'Signature image'

    def test_subjects_and_sender(self):
        assert CONTACT_FORM.admin_subject_for('Chef Master Africa') == "New Contact Form Submission - Chef Master Africa"
        assert APPLICATION_FORM.admin_subject_for('CMA') == "New Application Form Submission - CMA"
        assert APPLICATION_FORM.submitter_subject_for('CMA') == "Thanks for contacting CMA!"
        assert APPLICATION_FORM.sender_name('CMA') == "CMA Application Form"


class TestUploadValidator:
    """Test image upload checks and storage."""

    def setup_method(self):
        self.request = RequestFactory().post('/api/forms/application')

    def test_no_files_is_fine(self):
        result = UploadValidator().check({}, APPLICATION_FORM)
        assert result.ok
        assert result.value == []

    def test_rejects_non_image_type(self):
        result = UploadValidator().check({'passport_image': image('p.gif', 'image/gif')}, APPLICATION_FORM)
        assert result.kind is ErrorKind.INVALID_FILE_TYPE
        assert result.message == "Passport image must be a JPG or PNG image."

    def test_rejects_oversized_image(self):
        files = {'signature_image': image('s.png', 'image/png', size=6 * 1024 * 1024)}
        result = UploadValidator().check(files, APPLICATION_FORM)
        assert result.kind is ErrorKind.FILE_TOO_LARGE
        assert result.message == "Signature image must not exceed 5MB."

    def test_exactly_five_megabytes_accepted(self):
        files = {'passport_image': image(size=5 * 1024 * 1024)}
        assert UploadValidator().check(files, APPLICATION_FORM).ok

    def test_type_checked_before_size(self):
        files = {'passport_image': image('p.gif', 'image/gif', size=6 * 1024 * 1024)}
        result = UploadValidator().check(files, APPLICATION_FORM)
        assert result.kind is ErrorKind.INVALID_FILE_TYPE

    def test_first_failing_field_aborts(self):
        files = {
            'passport_image': image('p.bmp', 'image/bmp'),
            'signature_image': image('s.gif', 'image/gif'),
        }
        result = UploadValidator().check(files, APPLICATION_FORM)
        assert result.message.startswith('Passport image')

    def test_store_writes_unique_file_and_builds_url(self, upload_root):
        accepted = [('passport_image', image('me.JPG'))]
        result = UploadValidator(base_path='/servers/chefmaster_db').store(accepted, self.request)

        assert result.ok
        asset = result.value['passport_image']
        assert asset.filename.startswith('passport_image_')
        assert asset.filename.endswith('.JPG')
        assert (upload_root / asset.filename).exists()
        assert asset.url == f"http://testserver/servers/chefmaster_db/uploads/{asset.filename}"

    def test_unique_filenames_differ(self):
        first = UploadValidator.unique_filename('passport_image', 'a.png')
        second = UploadValidator.unique_filename('passport_image', 'a.png')
        assert first != second

    def test_storage_failure(self):
        uploads = UploadValidator()
        with patch.object(uploads.storage, 'save', side_effect=OSError('read-only file system')):
            result = uploads.store([('signature_image', image())], self.request)
        assert result.kind is ErrorKind.STORAGE_WRITE_ERROR
        assert result.message == "Failed to upload signature image"

    def test_discard_removes_files(self, upload_root):
        uploads = UploadValidator()
        assets = uploads.store([('passport_image', image())], self.request).value
        uploads.discard(assets)
        assert list(upload_root.iterdir()) == []


@pytest.mark.django_db
class TestSubmissionStore:
    """Test record persistence."""

    def test_insert_contact(self):
        fields = {'fullName': 'Ada', 'email': 'ada@example.com', 'phone': '123', 'message': 'hi'}
        result = SubmissionStore().insert(CONTACT_FORM, fields)

        assert result.ok
        record = ContactSubmission.objects.get()
        assert record == result.value
        assert record.fullname == 'Ada'
        assert record.submitted_at is not None

    def test_insert_application_with_asset_urls(self):
        fields = APPLICATION_FORM.extract({'fullName': 'Ada', 'email': 'ada@example.com', 'phone': '1'})
        urls = {'passport_image': 'http://testserver/uploads/p.jpg'}
        result = SubmissionStore().insert(APPLICATION_FORM, fields, urls)

        record = ApplicationSubmission.objects.get(pk=result.value.pk)
        assert record.passport_image == 'http://testserver/uploads/p.jpg'
        assert record.signature_image == ''
        assert record.occupation == ''

    def test_execute_failure(self):
        with patch.object(ContactSubmission.objects, 'create', side_effect=DatabaseError('disk full')):
            result = SubmissionStore().insert(CONTACT_FORM, {'fullName': 'Ada'})
        assert result.kind is ErrorKind.PERSISTENCE_ERROR
        assert result.message == SAVE_ERROR_MESSAGE

    def test_prepare_failure(self):
        with patch.object(ContactSubmission.objects, 'create', side_effect=ProgrammingError('no such table')):
            result = SubmissionStore().insert(CONTACT_FORM, {'fullName': 'Ada'})
        assert result.message == PREPARE_ERROR_MESSAGE


class TestNotifier:
    """Test admin and submitter emails."""

    def setup_method(self):
        self.notifier = Notifier(
            mailbox='forms@chefmasterafrica.com',
            bcc_email='archive@example.com',
            site_name='Chef Master Africa',
        )
        self.contact = {
            'fullName': 'Ada', 'email': 'ada@example.com', 'phone': '123',
            'message': 'line one\nline two',
        }

    def test_contact_sends_admin_then_submitter(self, mailoutbox):
        result = self.notifier.send_both(CONTACT_FORM, self.contact)

        assert result.ok
        assert len(mailoutbox) == 2
        admin, submitter = mailoutbox
        assert admin.subject == "New Contact Form Submission - Chef Master Africa"
        assert admin.to == ['forms@chefmasterafrica.com']
        assert admin.from_email == 'Chef Master Africa Contact Form <forms@chefmasterafrica.com>'
        assert submitter.subject == "Thanks for contacting Chef Master Africa!"
        assert submitter.to == ['Ada <ada@example.com>']

    @pytest.mark.parametrize('form_type', [CONTACT_FORM, APPLICATION_FORM])
    def test_multiline_name_fits_on_one_header_line(self, form_type, mailoutbox):
        fields = form_type.extract(dict(self.contact, fullName='Ada\r\nLovelace\n  Byron'))

        result = self.notifier.send_both(form_type, fields)

        assert result.ok
        assert mailoutbox[1].to == ['Ada Lovelace Byron <ada@example.com>']
        assert 'Lovelace' in mailoutbox[1].message()['To']

    def test_header_value_collapses_whitespace(self):
        assert header_value(' Ada\n\tLovelace ') == 'Ada Lovelace'
        assert header_value(None) == ''

    def test_contact_has_no_bcc(self, mailoutbox):
        self.notifier.send_both(CONTACT_FORM, self.contact)
        assert all(message.bcc == [] for message in mailoutbox)

    def test_contact_body_keeps_line_breaks(self, mailoutbox):
        self.notifier.send_both(CONTACT_FORM, self.contact)
        html, mimetype = mailoutbox[0].alternatives[0]
        assert mimetype == 'text/html'
        assert 'line one<br>line two' in html

    def test_application_bcc_on_both_emails(self, mailoutbox):
        fields = APPLICATION_FORM.extract(self.contact)
        self.notifier.send_both(APPLICATION_FORM, fields, {'passport_image': 'http://testserver/p.jpg'})

        admin, submitter = mailoutbox
        assert admin.subject == "New Application Form Submission - Chef Master Africa"
        assert admin.bcc == ['archive@example.com']
        assert submitter.bcc == ['archive@example.com']
        html = admin.alternatives[0][0]
        assert 'Emergency Contact Name' in html
        assert 'http://testserver/p.jpg' in html

    def test_escaped_values_not_escaped_twice(self, mailoutbox):
        self.contact['message'] = sanitize('Fish & "chips"')
        self.notifier.send_both(CONTACT_FORM, self.contact)
        html = mailoutbox[0].alternatives[0][0]
        assert 'Fish &amp; &quot;chips&quot;' in html
        assert '&amp;amp;' not in html

    def test_admin_send_failure(self, mailoutbox):
        with patch('django.core.mail.backends.locmem.EmailBackend.send_messages',
                   side_effect=smtplib.SMTPException('connection refused')):
            result = self.notifier.send_both(CONTACT_FORM, self.contact)
        assert result.kind is ErrorKind.NOTIFICATION_ERROR
        assert result.message == ADMIN_FAILURE
        assert result.message.startswith('Mailer Error: ')

    def test_submitter_send_failure(self, mailoutbox):
        calls = []

        def send_messages(messages):
            calls.append(messages)
            if len(calls) == 2:
                raise smtplib.SMTPRecipientsRefused({'ada@example.com': (550, b'no such user')})
            return len(messages)

        with patch('django.core.mail.backends.locmem.EmailBackend.send_messages', side_effect=send_messages):
            result = self.notifier.send_both(CONTACT_FORM, self.contact)
        assert result.message == SUBMITTER_FAILURE


class TestResponseEncoder:
    """Test outcome -> HTTP response mapping."""

    def setup_method(self):
        self.encoder = ResponseEncoder()

    def test_success(self):
        response = self.encoder.encode(Ok())
        assert response.status_code == 200
        assert response.data == {'message': "Your message has been sent successfully."}

    def test_validation_errors(self):
        response = self.encoder.encode(Err(ErrorKind.VALIDATION_FAILED, errors={'email': 'x'}))
        assert response.status_code == 400
        assert response.data == {'errors': {'email': 'x'}}

    @pytest.mark.parametrize('kind, status_code', [
        (ErrorKind.RATE_LIMITED, 429),
        (ErrorKind.SPAM_DETECTED, 403),
        (ErrorKind.INVALID_FILE_TYPE, 400),
        (ErrorKind.FILE_TOO_LARGE, 400),
        (ErrorKind.STORAGE_WRITE_ERROR, 500),
        (ErrorKind.PERSISTENCE_ERROR, 500),
        (ErrorKind.NOTIFICATION_ERROR, 500),
    ])
    def test_message_errors(self, kind, status_code):
        response = self.encoder.encode(Err(kind, 'something'))
        assert response.status_code == status_code
        assert response.data == {'message': 'something'}

    def test_rate_limited_sends_retry_after(self):
        response = self.encoder.encode(Err(ErrorKind.RATE_LIMITED, 'wait', retry_after=42))
        assert response.status_code == 429
        assert response['Retry-After'] == '42'

    def test_no_retry_after_on_other_errors(self):
        response = self.encoder.encode(Err(ErrorKind.SPAM_DETECTED, 'spam'))
        assert not response.has_header('Retry-After')

    def test_user_errors_vs_faults(self):
        assert ErrorKind.RATE_LIMITED.is_user_error
        assert not ErrorKind.NOTIFICATION_ERROR.is_user_error

    def test_not_found(self):
        response = self.encoder.not_found()
        assert response.status_code == 404
        assert response.data == {'message': "Page not found."}
