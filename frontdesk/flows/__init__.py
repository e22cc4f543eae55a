from .base import Flow, Notification
from .lookup import LookupFlow, LookupState
from .registration import RegistrationFlow, validate_field

__all__ = ['Flow', 'Notification', 'LookupFlow', 'LookupState', 'RegistrationFlow', 'validate_field']
