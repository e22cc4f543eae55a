import logging
from typing import Optional

from django.db import transaction

from frontdesk.models import Patient, fingerprint_digest
from frontdesk.services.audit import identifier_tag, log_action

logger = logging.getLogger(__name__)


def register_patient(*, name, age, gender, blood_group, fingerprint_data, medical_document=None) -> Patient:
    with transaction.atomic():
        patient = Patient(
            name=name,
            age=age,
            gender=gender,
            blood_group=blood_group,
            fingerprint_data=fingerprint_data,
        )
        if medical_document:
            patient.medical_document = medical_document
        patient.save()
        log_action(action='patient.register', patient=patient, detail={'fp': identifier_tag(fingerprint_data)})
    logger.info('registered patient #%s (fp %s)', patient.pk, identifier_tag(fingerprint_data))
    return patient


def find_by_fingerprint(identifier: str) -> Optional[Patient]:
    """Exact-match lookup; the oldest registration wins when identifiers repeat."""
    patient = (
        Patient.objects
        .filter(fingerprint_digest=fingerprint_digest(identifier), fingerprint_data=identifier)
        .order_by('created_at', 'id')
        .first()
    )
    tag = identifier_tag(identifier)
    if patient:
        log_action(action='patient.scan.hit', patient=patient, detail={'fp': tag})
        logger.info('scan matched patient #%s (fp %s)', patient.pk, tag)
    else:
        log_action(action='patient.scan.miss', detail={'fp': tag})
        logger.info('scan matched no patient (fp %s)', tag)
    return patient


def recent_patients(limit: Optional[int] = None):
    qs = Patient.objects.order_by('-created_at', '-id')
    return qs[:limit] if limit else qs


def get_patient(pk) -> Optional[Patient]:
    return Patient.objects.filter(pk=pk).first()
