# Generated manually for the contact_form and application_form tables
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='ContactSubmission',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('fullname', models.CharField(help_text='Name of the person contacting us', max_length=255)),
                ('email', models.CharField(help_text='Email address for follow-up', max_length=255)),
                ('phone', models.CharField(help_text='Phone number', max_length=50)),
                ('message', models.TextField(help_text='The actual message content')),
                ('submitted_at', models.DateTimeField(auto_now_add=True, db_index=True, help_text='When the message was submitted')),
            ],
            options={
                'verbose_name': 'Contact Submission',
                'verbose_name_plural': 'Contact Submissions',
                'db_table': 'contact_form',
                'ordering': ['-submitted_at'],
            },
        ),
        migrations.CreateModel(
            name='ApplicationSubmission',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('fullname', models.CharField(max_length=255)),
                ('dob', models.CharField(blank=True, default='', max_length=50)),
                ('gender', models.CharField(blank=True, default='', max_length=50)),
                ('email', models.CharField(max_length=255)),
                ('phone', models.CharField(max_length=50)),
                ('address', models.TextField(blank=True, default='')),
                ('occupation', models.CharField(blank=True, default='', max_length=255)),
                ('years_of_experience', models.CharField(blank=True, default='', max_length=50)),
                ('culinary_training', models.TextField(blank=True, default='')),
                ('degree', models.CharField(blank=True, default='', max_length=255)),
                ('graduation_year', models.CharField(blank=True, default='', max_length=50)),
                ('specialized_category', models.CharField(blank=True, default='', max_length=255)),
                ('food_allergies', models.TextField(blank=True, default='')),
                ('signature_dish', models.CharField(blank=True, default='', max_length=255)),
                ('signature_dish_description', models.TextField(blank=True, default='')),
                ('participation_reason', models.TextField(blank=True, default='')),
                ('fullname_emergency_contact', models.CharField(blank=True, db_column='fullName_emergency_contact', default='', max_length=255)),
                ('relationship', models.CharField(blank=True, default='', max_length=100)),
                ('phone_emergency', models.CharField(blank=True, default='', max_length=50)),
                ('address_emergency', models.TextField(blank=True, default='')),
                ('passport_image', models.CharField(blank=True, default='', max_length=500)),
                ('signature_image', models.CharField(blank=True, default='', max_length=500)),
                ('submitted_at', models.DateTimeField(auto_now_add=True, db_index=True, help_text='When the application was submitted')),
            ],
            options={
                'verbose_name': 'Application Submission',
                'verbose_name_plural': 'Application Submissions',
                'db_table': 'application_form',
                'ordering': ['-submitted_at'],
            },
        ),
    ]
