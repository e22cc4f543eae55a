"""Front-desk application for the clinic.

This package contains the patient record store (models, serializers,
views), the fingerprint sensor client and identifier normaliser, and
the registration and lookup flows used by the front-desk operator.
"""
