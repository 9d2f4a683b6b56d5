"""
Form Submission Models

Database schema for contact and application form submissions.

Rows are written once by the submission pipeline and never updated
or deleted by it.
"""
from django.db import models


class ContactSubmission(models.Model):
    """
    Contact form submissions from the public website.
    """

    fullname = models.CharField(
        max_length=255,
        help_text="Name of the person contacting us"
    )

    email = models.CharField(
        max_length=255,
        help_text="Email address for follow-up"
    )

    phone = models.CharField(
        max_length=50,
        help_text="Phone number"
    )

    message = models.TextField(
        help_text="The actual message content"
    )

    submitted_at = models.DateTimeField(
        auto_now_add=True,
        db_index=True,
        help_text="When the message was submitted"
    )

    class Meta:
        db_table = 'contact_form'
        ordering = ['-submitted_at']
        verbose_name = 'Contact Submission'
        verbose_name_plural = 'Contact Submissions'

    def __str__(self):
        return f"{self.fullname} <{self.email}>"


class ApplicationSubmission(models.Model):
    """
    Application form submissions, including links to the uploaded
    passport and signature images.

    Only fullname, email and phone are required by the form; every other
    column is stored as submitted, even when empty.
    """

    # Applicant
    fullname = models.CharField(max_length=255)
    dob = models.CharField(max_length=50, blank=True, default='')
    gender = models.CharField(max_length=50, blank=True, default='')
    email = models.CharField(max_length=255)
    phone = models.CharField(max_length=50)
    address = models.TextField(blank=True, default='')

    # Background
    occupation = models.CharField(max_length=255, blank=True, default='')
    years_of_experience = models.CharField(max_length=50, blank=True, default='')
    culinary_training = models.TextField(blank=True, default='')
    degree = models.CharField(max_length=255, blank=True, default='')
    graduation_year = models.CharField(max_length=50, blank=True, default='')
    specialized_category = models.CharField(max_length=255, blank=True, default='')
    food_allergies = models.TextField(blank=True, default='')
    signature_dish = models.CharField(max_length=255, blank=True, default='')
    signature_dish_description = models.TextField(blank=True, default='')
    participation_reason = models.TextField(blank=True, default='')

    # Emergency contact
    fullname_emergency_contact = models.CharField(
        max_length=255,
        blank=True,
        default='',
        db_column='fullName_emergency_contact'
    )
    relationship = models.CharField(max_length=100, blank=True, default='')
    phone_emergency = models.CharField(max_length=50, blank=True, default='')
    address_emergency = models.TextField(blank=True, default='')

    # Public URLs of the uploaded images
    passport_image = models.CharField(max_length=500, blank=True, default='')
    signature_image = models.CharField(max_length=500, blank=True, default='')

    submitted_at = models.DateTimeField(
        auto_now_add=True,
        db_index=True,
        help_text="When the application was submitted"
    )

    class Meta:
        db_table = 'application_form'
        ordering = ['-submitted_at']
        verbose_name = 'Application Submission'
        verbose_name_plural = 'Application Submissions'

    def __str__(self):
        return f"{self.fullname} <{self.email}>"
