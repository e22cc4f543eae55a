"""
Patient registration at the front desk.

Submission is gated: every required field must validate on its own and
a fingerprint must have been captured in this session.  A successful
submission clears the form and the captured identifier; a failed one
keeps the form as entered so the operator can correct it.
"""
from __future__ import annotations

from typing import Any, Dict, Optional

from frontdesk.choices import AGE_MAX, AGE_MIN, BLOOD_GROUPS, GENDERS, NAME_MIN_LENGTH
from frontdesk.exceptions import StoreError
from frontdesk.flows.base import ERROR, SUCCESS, Flow
from frontdesk.sensor.events import CaptureEvent

REQUIRED_FIELDS = ('name', 'age', 'gender', 'blood_group')


def parse_age(value: Any) -> Optional[int]:
    """Return ``value`` as an int when it is a whole number, else None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    try:
        number = float(str(value).strip())
    except ValueError:
        return None
    return int(number) if number.is_integer() else None


def validate_field(field: str, value: Any) -> Optional[str]:
    """Return the inline error message for one field, or None when valid."""
    text = '' if value is None else str(value).strip()
    if field == 'name':
        if not text:
            return 'Name is required'
        if len(text) < NAME_MIN_LENGTH:
            return f'Name must be at least {NAME_MIN_LENGTH} characters'
    elif field == 'age':
        if not text:
            return 'Age is required'
        age = parse_age(value)
        if age is None or not AGE_MIN <= age <= AGE_MAX:
            return f'Age must be between {AGE_MIN} and {AGE_MAX}'
    elif field == 'gender':
        if not text:
            return 'Gender is required'
        if text not in GENDERS:
            return 'Select a valid gender'
    elif field == 'blood_group':
        if not text:
            return 'Blood group is required'
        if text not in BLOOD_GROUPS:
            return 'Select a valid blood group'
    else:
        raise KeyError(field)
    return None


class RegistrationFlow(Flow):

    def __init__(self, sensor, store, on_notify=None, active: bool = True):
        super().__init__(sensor, store, on_notify, active)
        self.fields: Dict[str, Any] = dict.fromkeys(REQUIRED_FIELDS, '')
        self.document: Optional[str] = None
        self.identifier: Optional[str] = None
        self.errors: Dict[str, str] = {}
        self.capturing = False
        self.submitting = False

    # form ---------------------------------------------------------------
    def set_field(self, field: str, value: Any) -> Optional[str]:
        if field not in self.fields:
            raise KeyError(field)
        self.fields[field] = value
        self.validate()
        return self.errors.get(field)

    def fill(self, **values) -> bool:
        for field, value in values.items():
            if field not in self.fields:
                raise KeyError(field)
            self.fields[field] = value
        return self.validate()

    def attach_document(self, path: Optional[str]) -> None:
        self.document = path or None

    def _field_errors(self) -> Dict[str, str]:
        errors = {}
        for field in REQUIRED_FIELDS:
            message = validate_field(field, self.fields[field])
            if message:
                errors[field] = message
        return errors

    def validate(self) -> bool:
        """Refresh :attr:`errors`; True when the form may be submitted."""
        self.errors = self._field_errors()
        return not self.errors and bool(self.identifier)

    @property
    def can_submit(self) -> bool:
        return not self.submitting and bool(self.identifier) and not self._field_errors()

    # capture ------------------------------------------------------------
    def capture(self) -> Optional[CaptureEvent]:
        """Ask the sensor for a sample; ignored while a capture is running.

        The outcome reaches this flow through :meth:`on_capture_event`.
        """
        if self.capturing:
            return None
        self.capturing = True
        try:
            return self.sensor.capture()
        finally:
            self.capturing = False

    def clear_capture(self) -> None:
        self.sensor.clear()
        self.identifier = None
        self.validate()

    def on_capture_event(self, event: CaptureEvent) -> None:
        if event.ok:
            self.identifier = event.identifier
            self.validate()
            self.notify('Fingerprint captured successfully!', SUCCESS)
        else:
            self.identifier = None
            self.validate()
            self.notify(f'Fingerprint capture failed: {event.message}', ERROR)

    # submit -------------------------------------------------------------
    def submit(self) -> Optional[Dict[str, Any]]:
        """Send the registration; returns the stored patient or None."""
        if self.submitting:
            return None
        if not self.validate():
            self.notify('Please fill all required fields and capture fingerprint.', ERROR)
            return None
        self.submitting = True
        try:
            patient = self.store.create_patient(
                name=str(self.fields['name']).strip(),
                age=parse_age(self.fields['age']),
                gender=str(self.fields['gender']).strip(),
                blood_group=str(self.fields['blood_group']).strip(),
                fingerprint_data=self.identifier,
                document=self.document,
            )
        except StoreError as exc:
            self.notify(f'Registration failed: {exc.message}', ERROR)
            return None
        except OSError as exc:
            self.notify(f'Registration failed: cannot read document ({exc.strerror or exc})', ERROR)
            return None
        finally:
            self.submitting = False
        self.notify('Patient registered successfully!', SUCCESS)
        self.reset()
        return patient

    def reset(self) -> None:
        self.fields = dict.fromkeys(REQUIRED_FIELDS, '')
        self.document = None
        self.clear_capture()
        self.errors = {}
