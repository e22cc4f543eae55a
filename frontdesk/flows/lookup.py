"""
Patient lookup by fingerprint.

Exactly one of three views is showing at any time: the scan prompt, the
found patient, or "no patient found".  A record can also be opened from
the recently registered list without scanning.
"""
from __future__ import annotations

import enum
import logging
from typing import Any, Dict, List, Optional

from frontdesk.exceptions import StoreError
from frontdesk.flows.base import ERROR, INFO, SUCCESS, Flow
from frontdesk.sensor.events import CaptureEvent

logger = logging.getLogger(__name__)


class LookupState(enum.Enum):
    PROMPT = 'prompt'
    FOUND = 'found'
    NOT_FOUND = 'not_found'


class LookupFlow(Flow):

    def __init__(self, sensor, store, on_notify=None, recent_limit: int = 6, active: bool = True):
        super().__init__(sensor, store, on_notify, active)
        self.recent_limit = recent_limit
        self.state = LookupState.PROMPT
        self.current_patient: Optional[Dict[str, Any]] = None
        self.recent_patients: List[Dict[str, Any]] = []
        self.scanning = False

    def scan(self) -> Optional[CaptureEvent]:
        """Capture a fingerprint; the lookup runs when the capture is published."""
        if self.scanning:
            return None
        self.scanning = True
        try:
            return self.sensor.capture()
        finally:
            self.scanning = False

    def on_capture_event(self, event: CaptureEvent) -> None:
        if event.ok:
            self.search(event.identifier)
        else:
            self.notify(f'Fingerprint scan failed: {event.message}', ERROR)

    def search(self, identifier: str) -> Optional[Dict[str, Any]]:
        self.notify('Searching for patient...', INFO)
        try:
            patient = self.store.scan(identifier)
        except StoreError as exc:
            logger.error('patient search failed: %s', exc.message)
            self.notify('Error searching for patient. Please try again.', ERROR)
            self.show_prompt()
            return None
        if patient:
            self.display(patient)
            self.notify('Patient found!', SUCCESS)
        else:
            self.current_patient = None
            self.state = LookupState.NOT_FOUND
            self.notify('Patient not found in database.', ERROR)
        return patient

    def select(self, patient_id) -> Optional[Dict[str, Any]]:
        """Open a record from the recent list, bypassing the sensor."""
        try:
            patient = self.store.get_patient(patient_id)
        except StoreError as exc:
            logger.error('patient selection failed: %s', exc.message)
            self.notify('Error selecting patient.', ERROR)
            return None
        if patient:
            self.display(patient)
            self.notify('Patient selected from recent list.', INFO)
        else:
            self.notify('Patient not found in database.', ERROR)
        return patient

    def load_recent(self) -> List[Dict[str, Any]]:
        try:
            patients = self.store.list_patients()
        except StoreError as exc:
            logger.error('error loading recent patients: %s', exc.message)
            return self.recent_patients
        self.recent_patients = patients[:self.recent_limit]
        return self.recent_patients

    def display(self, patient: Dict[str, Any]) -> None:
        self.current_patient = patient
        self.state = LookupState.FOUND

    def show_prompt(self) -> None:
        self.current_patient = None
        self.state = LookupState.PROMPT

    def clear(self) -> None:
        self.sensor.clear()
        self.show_prompt()
