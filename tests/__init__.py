"""
Test suite for the form submissions backend.

Test Organization:
- integration/ - end-to-end API tests of the contact and application forms
- Component tests remain in their app directory (submissions/tests.py)
"""
