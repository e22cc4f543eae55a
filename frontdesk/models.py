"""
Database models for the front-desk record store.

A :class:`Patient` is created once at registration and is read-only
afterwards.  Lookup by fingerprint is an exact string match on
``fingerprint_data``; ``fingerprint_digest`` only narrows the query so
that long templates can be searched through an index.
"""
from __future__ import annotations

import hashlib
import time

from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from .choices import AGE_MAX, AGE_MIN, BLOOD_GROUPS, GENDERS


def fingerprint_digest(identifier: str) -> str:
    """Return the SHA-256 hex digest used to index an identifier."""
    return hashlib.sha256(identifier.encode('utf-8')).hexdigest()


def document_upload_path(instance, filename: str) -> str:
    """Store uploads as ``uploads/<epoch-ms>-<original name>``."""
    return f"uploads/{int(time.time() * 1000)}-{filename}"


class Patient(models.Model):
    """A patient registered at the front desk with a biometric identifier.

    Identifier uniqueness is not enforced: two registrations may carry
    the same ``fingerprint_data`` and lookups then return the oldest.
    """
    GENDER_CHOICES = [(g, g) for g in GENDERS]
    BLOOD_GROUP_CHOICES = [(b, b) for b in BLOOD_GROUPS]

    name = models.CharField(max_length=255)
    age = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(AGE_MIN), MaxValueValidator(AGE_MAX)],
    )
    gender = models.CharField(max_length=10, choices=GENDER_CHOICES)
    blood_group = models.CharField(max_length=3, choices=BLOOD_GROUP_CHOICES)
    medical_document = models.FileField(upload_to=document_upload_path, blank=True)
    fingerprint_data = models.TextField()
    fingerprint_digest = models.CharField(max_length=64, db_index=True, editable=False)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        ordering = ['-created_at', '-id']

    def save(self, *args, **kwargs):
        self.fingerprint_digest = fingerprint_digest(self.fingerprint_data or '')
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.name} (#{self.pk})"


class AuditEvent(models.Model):
    """Append-only record of registrations and fingerprint scans.

    ``detail`` never holds the raw identifier, only a digest prefix.
    """
    ACTION_CHOICES = [
        ('patient.register', 'Patient registered'),
        ('patient.scan.hit', 'Scan matched a patient'),
        ('patient.scan.miss', 'Scan matched no patient'),
    ]
    action = models.CharField(max_length=32, choices=ACTION_CHOICES, db_index=True)
    patient = models.ForeignKey(
        Patient, null=True, blank=True, on_delete=models.SET_NULL, related_name='audit_events'
    )
    detail = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at', '-id']

    def __str__(self) -> str:
        return f"{self.action} @ {self.created_at:%Y-%m-%d %H:%M:%S}"
