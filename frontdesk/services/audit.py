from typing import Optional, Any, Dict
from frontdesk.models import AuditEvent, Patient, fingerprint_digest


def identifier_tag(identifier: str) -> str:
    """Short digest prefix safe to keep in logs and audit detail."""
    return fingerprint_digest(identifier)[:12]


def log_action(*, action: str, patient: Optional[Patient]=None, detail: Optional[Dict[str, Any]]=None) -> AuditEvent:
    return AuditEvent.objects.create(action=action, patient=patient, detail=detail or {})
