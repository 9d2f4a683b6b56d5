"""
Shared pytest fixtures for form submission tests.
"""
import pytest
from rest_framework.test import APIClient


@pytest.fixture
def api_client():
    """API client for making requests (keeps its session cookie)."""
    return APIClient()


@pytest.fixture(autouse=True)
def upload_root(settings, tmp_path):
    """Write uploaded images to a per-test directory."""
    root = tmp_path / 'uploads'
    settings.UPLOADS_ROOT = root
    return root


@pytest.fixture
def contact_payload():
    return {
        'fullName': 'Ada',
        'email': 'ada@example.com',
        'phone': '123',
        'message': 'hi',
        'botField': '',
    }


@pytest.fixture
def application_payload():
    return {
        'fullName': 'Ada Lovelace',
        'dob': '1990-12-10',
        'gender': 'Female',
        'email': 'ada@example.com',
        'phone': '+2348012345678',
        'address': '12 Marina Road, Lagos',
        'occupation': 'Chef',
        'years_of_experience': '6',
        'culinary_training': 'Le Cordon Bleu',
        'degree': 'BSc Hospitality',
        'graduation_year': '2012',
        'specialized_category': 'Pastry',
        'food_allergies': 'None',
        'signature_dish': 'Jollof Rice',
        'signature_dish_description': 'Smoky party jollof.\nServed with plantain.',
        'participation_reason': 'To compete with the best.',
        'fullName_emergency_contact': 'Charles Babbage',
        'relationship': 'Friend',
        'phone_emergency': '+2348098765432',
        'address_emergency': '4 Broad Street, Lagos',
        'botField': '',
    }
