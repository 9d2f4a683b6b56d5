"""
Form Submissions Django Admin Configuration

Read-only: submissions are written by the public forms and never
edited or deleted from here.
"""
from django.contrib import admin
from django.utils.html import format_html
from .models import ApplicationSubmission, ContactSubmission


class ReadOnlySubmissionAdmin(admin.ModelAdmin):
    """Browse and search submissions without changing them."""

    date_hierarchy = 'submitted_at'

    def get_readonly_fields(self, request, obj=None):
        return [f.name for f in self.model._meta.fields]

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(ContactSubmission)
class ContactSubmissionAdmin(ReadOnlySubmissionAdmin):
    """Admin interface for contact form submissions."""

    list_display = ['fullname', 'email', 'phone', 'submitted_at']
    search_fields = ['fullname', 'email', 'phone', 'message']


@admin.register(ApplicationSubmission)
class ApplicationSubmissionAdmin(ReadOnlySubmissionAdmin):
    """Admin interface for application form submissions."""

    list_display = [
        'fullname', 'email', 'phone', 'specialized_category',
        'submitted_at', 'passport_link'
    ]
    list_filter = ['specialized_category', 'gender']
    search_fields = ['fullname', 'email', 'phone', 'signature_dish']

    fieldsets = (
        ('Applicant', {
            'fields': ('fullname', 'dob', 'gender', 'email', 'phone', 'address')
        }),
        ('Background', {
            'fields': (
                'occupation', 'years_of_experience', 'culinary_training',
                'degree', 'graduation_year', 'specialized_category',
                'food_allergies', 'signature_dish', 'signature_dish_description',
                'participation_reason',
            )
        }),
        ('Emergency Contact', {
            'fields': (
                'fullname_emergency_contact', 'relationship',
                'phone_emergency', 'address_emergency',
            ),
            'classes': ('collapse',)
        }),
        ('Uploads', {
            'fields': ('passport_image', 'signature_image')
        }),
        ('Metadata', {
            'fields': ('id', 'submitted_at'),
            'classes': ('collapse',)
        }),
    )

    def passport_link(self, obj):
        """Link to the uploaded passport image."""
        if obj.passport_image:
            return format_html('<a href="{}" target="_blank">View</a>', obj.passport_image)
        return '-'
    passport_link.short_description = 'Passport'
