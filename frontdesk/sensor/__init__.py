from .client import SensorClient, SensorState, generate_simulated_sample
from .events import CAPTURE_FAILED, CAPTURED, CaptureEvent, CaptureNotifier
from .normalize import normalize_capture

__all__ = [
    'SensorClient', 'SensorState', 'generate_simulated_sample',
    'CAPTURED', 'CAPTURE_FAILED', 'CaptureEvent', 'CaptureNotifier',
    'normalize_capture',
]
