"""
Form Submission URL Configuration
"""
from django.urls import re_path
from .views import ApplicationFormSubmitView, ContactFormSubmitView

app_name = 'submissions'

# Public URLs (no auth required)
urlpatterns = [
    re_path(r'^contact/?$', ContactFormSubmitView.as_view(), name='contact'),
    re_path(r'^application/?$', ApplicationFormSubmitView.as_view(), name='application'),
]
