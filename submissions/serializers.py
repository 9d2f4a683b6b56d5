"""
Form Submission Serializers

Field validation for the public forms. Input reaches these serializers
already sanitized; they only decide whether it is acceptable.
"""
import re

from django.core.validators import EmailValidator
from rest_framework import serializers

SPAM_MESSAGE = "Spam detected."

EMAIL_REGEX = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')

EMAIL_REQUIRED_MESSAGE = "Valid Email is required."
EMAIL_FORMAT_MESSAGE = "Please provide a valid email address."


def required(message):
    """error_messages for a field that must be present and non-blank."""
    return {'required': message, 'blank': message, 'null': message}


def optional_text(max_length=None):
    return serializers.CharField(required=False, allow_blank=True, max_length=max_length)


class HoneypotSerializer(serializers.Serializer):
    """
    Hidden field that only bots fill in.
    """

    botField = serializers.CharField(
        required=False,
        allow_blank=True,
        write_only=True,
        help_text="Honeypot field - should be empty"
    )

    def validate_botField(self, value):
        """Honeypot validation - should be empty."""
        if value:
            raise serializers.ValidationError(SPAM_MESSAGE)
        return value


class SubmissionSerializer(serializers.Serializer):
    """
    Fields shared by every public form: who is submitting and how to
    reach them.
    """

    fullName = serializers.CharField(
        max_length=255,
        error_messages=required("Full Name is required."),
        help_text="Name of the person submitting the form"
    )

    email = serializers.CharField(
        max_length=255,
        error_messages=required(EMAIL_REQUIRED_MESSAGE),
        help_text="Valid email address for follow-up"
    )

    phone = serializers.CharField(
        max_length=50,
        error_messages=required("Phone number is required."),
        help_text="Phone number"
    )

    def validate_email(self, value):
        """The address must match the simple pattern and be well formed."""
        if not EMAIL_REGEX.match(value):
            raise serializers.ValidationError(EMAIL_FORMAT_MESSAGE)
        EmailValidator(message=EMAIL_REQUIRED_MESSAGE)(value)
        return value

    @classmethod
    def flatten_errors(cls, errors):
        """{'email': [ErrorDetail(...)]} -> {'email': '...'}"""
        return {name: str(messages[0]) for name, messages in errors.items()}


class ContactFormSubmitSerializer(SubmissionSerializer):
    """
    Public contact form submission serializer.
    """

    message = serializers.CharField(
        error_messages=required("Message is required."),
        help_text="The actual message content"
    )


class ApplicationFormSubmitSerializer(SubmissionSerializer):
    """
    Public application form submission serializer.

    Only the contact details are required; everything else is accepted
    as submitted, empty included.
    """

    dob = optional_text(50)
    gender = optional_text(50)
    address = optional_text()
    occupation = optional_text(255)
    years_of_experience = optional_text(50)
    culinary_training = optional_text()
    degree = optional_text(255)
    graduation_year = optional_text(50)
    specialized_category = optional_text(255)
    food_allergies = optional_text()
    signature_dish = optional_text(255)
    signature_dish_description = optional_text()
    participation_reason = optional_text()
    fullName_emergency_contact = optional_text(255)
    relationship = optional_text(100)
    phone_emergency = optional_text(50)
    address_emergency = optional_text()
