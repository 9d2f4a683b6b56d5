"""
Form Type Descriptors

One generic pipeline serves every public form. Each form is described by
a FormType: its fields and labels, which of them are required, the model
and column each field is stored in, which fields carry image uploads, and
which templates and subjects its emails use.
"""
from dataclasses import dataclass, field
from typing import Tuple

from .models import ApplicationSubmission, ContactSubmission
from .serializers import ApplicationFormSubmitSerializer, ContactFormSubmitSerializer

HONEYPOT_FIELD = 'botField'


@dataclass(frozen=True)
class FormField:
    name: str
    column: str
    label: str


@dataclass(frozen=True)
class FormType:
    slug: str
    title: str
    model: type
    fields: Tuple[FormField, ...]
    # Serializer deciding which fields are required and well formed
    serializer_class: type
    admin_template: str
    submitter_template: str
    # (field name, column) pairs for uploaded images, in validation order
    upload_fields: Tuple[Tuple[str, str], ...] = ()
    # Blind-copy the configured address on both emails
    uses_bcc: bool = False
    honeypot_field: str = HONEYPOT_FIELD
    admin_subject: str = "New {title} Form Submission - {site_name}"
    submitter_subject: str = "Thanks for contacting {site_name}!"
    _labels: dict = field(default=None, init=False, repr=False, compare=False)

    def __post_init__(self):
        labels = {f.name: f.label for f in self.fields}
        for name, _ in self.upload_fields:
            labels.setdefault(name, upload_label(name))
        object.__setattr__(self, '_labels', labels)

    @property
    def required_fields(self):
        return [name for name, f in self.serializer_class().fields.items() if f.required]

    @property
    def field_names(self):
        return [f.name for f in self.fields]

    def label_for(self, name):
        return self._labels.get(name, upload_label(name))

    def extract(self, data):
        """
        Pick this form's fields out of sanitized input.

        Missing fields become '', and so do values that are not plain
        strings (nested lists/objects sent in a JSON body).
        """
        extracted = {}
        for name in self.field_names:
            value = data.get(name, '')
            extracted[name] = value if isinstance(value, str) else ''
        return extracted

    def columns(self, fields, asset_urls=None):
        """
        Map field values (and upload URLs) onto model columns, in the
        fixed column order of this form's table.
        """
        asset_urls = asset_urls or {}
        values = {f.column: fields.get(f.name, '') for f in self.fields}
        for name, column in self.upload_fields:
            values[column] = asset_urls.get(name, '')
        return values

    def sender_name(self, site_name):
        return f"{site_name} {self.title} Form"

    def admin_subject_for(self, site_name):
        return self.admin_subject.format(title=self.title, site_name=site_name)

    def submitter_subject_for(self, site_name):
        return self.submitter_subject.format(title=self.title, site_name=site_name)


def upload_label(name):
    """'passport_image' -> 'Passport image'"""
    text = name.replace('_', ' ')
    return text[:1].upper() + text[1:]


CONTACT_FORM = FormType(
    slug='contact',
    title='Contact',
    model=ContactSubmission,
    fields=(
        FormField('fullName', 'fullname', 'Name'),
        FormField('email', 'email', 'Email'),
        FormField('phone', 'phone', 'Phone'),
        FormField('message', 'message', 'Message'),
    ),
    serializer_class=ContactFormSubmitSerializer,
    admin_template='submissions/emails/contact_admin.html',
    submitter_template='submissions/emails/contact_submitter.html',
)


APPLICATION_FORM = FormType(
    slug='application',
    title='Application',
    model=ApplicationSubmission,
    fields=(
        FormField('fullName', 'fullname', 'Full Name'),
        FormField('dob', 'dob', 'Date of Birth'),
        FormField('gender', 'gender', 'Gender'),
        FormField('email', 'email', 'Email'),
        FormField('phone', 'phone', 'Phone'),
        FormField('address', 'address', 'Address'),
        FormField('occupation', 'occupation', 'Occupation'),
        FormField('years_of_experience', 'years_of_experience', 'Years of Experience'),
        FormField('culinary_training', 'culinary_training', 'Culinary Training'),
        FormField('degree', 'degree', 'Degree'),
        FormField('graduation_year', 'graduation_year', 'Graduation Year'),
        FormField('specialized_category', 'specialized_category', 'Specialized Category'),
        FormField('food_allergies', 'food_allergies', 'Food Allergies'),
        FormField('signature_dish', 'signature_dish', 'Signature Dish'),
        FormField('signature_dish_description', 'signature_dish_description', 'Signature Dish Description'),
        FormField('participation_reason', 'participation_reason', 'Reason for Participating'),
        FormField('fullName_emergency_contact', 'fullname_emergency_contact', 'Emergency Contact Name'),
        FormField('relationship', 'relationship', 'Relationship'),
        FormField('phone_emergency', 'phone_emergency', 'Emergency Contact Phone'),
        FormField('address_emergency', 'address_emergency', 'Emergency Contact Address'),
    ),
    serializer_class=ApplicationFormSubmitSerializer,
    upload_fields=(
        ('passport_image', 'passport_image'),
        ('signature_image', 'signature_image'),
    ),
    uses_bcc=True,
    admin_template='submissions/emails/application_admin.html',
    submitter_template='submissions/emails/application_submitter.html',
)


FORM_TYPES = {
    CONTACT_FORM.slug: CONTACT_FORM,
    APPLICATION_FORM.slug: APPLICATION_FORM,
}


def get_form_type(slug):
    return FORM_TYPES[slug]
