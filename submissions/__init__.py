"""
Form Submissions App

Handles public website form submissions:
- Contact form
- Application form (with passport and signature image uploads)

Features:
- Input sanitization and validation
- Honeypot spam check and per-session submission cooldown
- Persistence of every accepted submission
- Admin notification and submitter confirmation emails
"""
