"""
HTTP client for the patient record store (``/api/patients``).

The registration and lookup flows talk to the store through this client
only.  A missing record is a normal ``None`` result; transport failures
and server errors raise :class:`~frontdesk.exceptions.StoreError`
carrying the server-reported message when there is one.
"""
from __future__ import annotations

import logging
import os
from typing import Any, Dict, List, NoReturn, Optional, Tuple

import requests

from frontdesk.exceptions import StoreError

logger = logging.getLogger(__name__)


class RecordStoreClient:
    def __init__(self, base_url: str = 'http://127.0.0.1:8000', *, timeout: float = 10.0,
                 session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_settings(cls, **overrides) -> 'RecordStoreClient':
        from django.conf import settings

        options = {'timeout': settings.FRONTDESK_API_TIMEOUT}
        options.update(overrides)
        return cls(settings.FRONTDESK_API_URL, **options)

    def _request(self, method: str, path: str, **kwargs) -> Tuple[int, Dict[str, Any]]:
        url = f"{self.base_url}{path}"
        try:
            r = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as exc:
            logger.error('%s %s failed: %s', method, path, exc)
            raise StoreError('Could not reach the patient record store') from exc
        try:
            data = r.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {}
        return r.status_code, data

    @staticmethod
    def _raise(status: int, data: Dict[str, Any], fallback: str) -> NoReturn:
        raise StoreError(data.get('message') or f"{fallback} (HTTP {status})", status)

    def create_patient(self, *, name: str, age, gender: str, blood_group: str,
                       fingerprint_data: str, document: Optional[str] = None) -> Dict[str, Any]:
        """Submit one registration as a multipart form; returns the stored patient."""
        form = {
            'name': name,
            'age': str(age),
            'gender': gender,
            'bloodGroup': blood_group,
            'fingerprintData': fingerprint_data,
        }
        if document:
            with open(document, 'rb') as fh:
                files = {'medicalDocument': (os.path.basename(document), fh)}
                status, data = self._request('POST', '/api/patients', data=form, files=files)
        else:
            status, data = self._request('POST', '/api/patients', data=form)
        if status in (200, 201) and data.get('success'):
            return data['patient']
        self._raise(status, data, 'Error registering patient')

    def scan(self, fingerprint_data: str) -> Optional[Dict[str, Any]]:
        """Exact-match lookup; ``None`` when no patient carries the identifier."""
        status, data = self._request('POST', '/api/patients/scan', json={'fingerprintData': fingerprint_data})
        if status == 404:
            return None
        if status == 200 and data.get('success'):
            return data.get('patient')
        self._raise(status, data, 'Error scanning patient')

    def list_patients(self) -> List[Dict[str, Any]]:
        """All patients, newest first."""
        status, data = self._request('GET', '/api/patients')
        if status == 200 and data.get('success'):
            return list(data.get('patients') or [])
        self._raise(status, data, 'Error fetching patients')

    def get_patient(self, patient_id) -> Optional[Dict[str, Any]]:
        status, data = self._request('GET', f'/api/patients/{patient_id}')
        if status == 404:
            return None
        if status == 200 and data.get('success'):
            return data.get('patient')
        self._raise(status, data, 'Error fetching patient')
