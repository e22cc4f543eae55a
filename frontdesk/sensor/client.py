"""
Client for the local fingerprint capture service (vendor RD service).

The service speaks JSON over HTTP on the desk PC::

    GET  /status                                   -> 200 when reachable
    POST /connect    {deviceType, baudRate}        -> {success}
    POST /capture    {deviceType, timeout, quality} -> {success, fingerprintData, message?}
    POST /disconnect                               -> ignored

When the service cannot be reached the client falls back to a simulated
sample after a fixed delay so the desk keeps working.  When the service
answers with an error ("no finger detected" and similar) the capture
fails and nothing is simulated.  Every outcome is published to the
subscribers of :attr:`SensorClient.notifier`.
"""
from __future__ import annotations

import enum
import logging
import secrets
import time
from typing import Any, Callable, Optional

import requests

from ..exceptions import CaptureFailed, SensorUnavailable
from .events import CAPTURE_FAILED, CAPTURED, CaptureEvent, CaptureNotifier, Listener
from .normalize import normalize_capture

logger = logging.getLogger(__name__)

SIMULATION_ALPHABET = 'ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/'
SIMULATED_SAMPLE_LENGTH = 64


class SensorState(enum.Enum):
    DISCONNECTED = 'disconnected'
    CONNECTING = 'connecting'
    CONNECTED = 'connected'
    CAPTURING = 'capturing'
    CAPTURED = 'captured'
    FAILED = 'failed'


def generate_simulated_sample() -> str:
    return ''.join(secrets.choice(SIMULATION_ALPHABET) for _ in range(SIMULATED_SAMPLE_LENGTH))


class SensorClient:
    """One fingerprint sensor, shared by the registration and lookup flows.

    Construct it once per front-desk session and pass it to each flow.
    ``sleep`` and ``clock_ms`` are injectable so tests do not wait for the
    simulated capture delay.
    """

    def __init__(
        self,
        base_url: str = 'http://localhost:8080',
        *,
        device_type: str = 'MFS110',
        baud_rate: int = 9600,
        quality: str = 'high',
        capture_timeout_ms: int = 10000,
        simulated_delay_ms: int = 2000,
        http_timeout: float = 5.0,
        session: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep,
        clock_ms: Optional[Callable[[], int]] = None,
    ):
        self.base_url = base_url.rstrip('/')
        self.device_type = device_type
        self.baud_rate = baud_rate
        self.quality = quality
        self.capture_timeout_ms = capture_timeout_ms
        self.simulated_delay_ms = simulated_delay_ms
        self.http_timeout = http_timeout
        self.session = session or requests.Session()
        self._sleep = sleep
        self._clock_ms = clock_ms or (lambda: int(time.time() * 1000))

        self.notifier = CaptureNotifier()
        self.state = SensorState.DISCONNECTED
        self.connected = False
        self.degraded = False
        self.identifier: Optional[str] = None

    @classmethod
    def from_settings(cls, **overrides) -> 'SensorClient':
        from django.conf import settings

        options = dict(
            device_type=settings.FINGERPRINT_DEVICE_TYPE,
            baud_rate=settings.FINGERPRINT_BAUD_RATE,
            quality=settings.FINGERPRINT_QUALITY,
            capture_timeout_ms=settings.FINGERPRINT_CAPTURE_TIMEOUT_MS,
            simulated_delay_ms=settings.FINGERPRINT_SIMULATED_DELAY_MS,
            http_timeout=settings.FINGERPRINT_HTTP_TIMEOUT,
        )
        options.update(overrides)
        return cls(settings.FINGERPRINT_SERVICE_URL, **options)

    # ------------------------------------------------------------------
    # subscriptions
    # ------------------------------------------------------------------
    def subscribe(self, listener: Listener) -> Callable[[], None]:
        return self.notifier.subscribe(listener)

    @property
    def is_capturing(self) -> bool:
        return self.state is SensorState.CAPTURING

    # ------------------------------------------------------------------
    # transport
    # ------------------------------------------------------------------
    def _call(self, method: str, path: str, *, json: Any = None, timeout: Optional[float] = None) -> dict:
        url = f"{self.base_url}{path}"
        try:
            r = self.session.request(method, url, json=json, timeout=timeout or self.http_timeout)
        except requests.RequestException as exc:
            raise SensorUnavailable(f"capture service unreachable: {exc}") from exc
        if not r.ok:
            raise SensorUnavailable(f"Failed to communicate with capture service (HTTP {r.status_code})")
        try:
            data = r.json()
        except ValueError as exc:
            raise CaptureFailed('Invalid response from capture service') from exc
        if not isinstance(data, dict):
            raise CaptureFailed('Invalid response from capture service')
        return data

    def check_status(self) -> bool:
        """Probe ``GET /status``; True when the service answers 2xx."""
        try:
            r = self.session.request('GET', f"{self.base_url}/status", timeout=self.http_timeout)
        except requests.RequestException:
            return False
        return r.ok

    def _handshake(self) -> None:
        self.state = SensorState.CONNECTING
        try:
            result = self._call('POST', '/connect', json={
                'deviceType': self.device_type,
                'baudRate': self.baud_rate,
            })
        except SensorUnavailable:
            self.connected = False
            self.degraded = True
            self.state = SensorState.DISCONNECTED
            raise
        if not result.get('success'):
            self.connected = False
            self.state = SensorState.DISCONNECTED
            raise CaptureFailed(result.get('message') or f"Failed to connect to {self.device_type}")
        self.connected = True
        self.degraded = False
        self.state = SensorState.CONNECTED
        logger.info('connected to %s at %s', self.device_type, self.base_url)

    def connect(self) -> bool:
        """Handshake with the capture service.

        Never raises: on failure the client stays disconnected and later
        captures use simulation when the service is unreachable.
        """
        try:
            self._handshake()
        except SensorUnavailable as exc:
            logger.warning('capture service not available, using simulation mode: %s', exc)
            return False
        except CaptureFailed as exc:
            logger.error('capture service refused connection: %s', exc)
            return False
        return True

    # ------------------------------------------------------------------
    # capture
    # ------------------------------------------------------------------
    def capture(self, timeout_ms: Optional[int] = None) -> CaptureEvent:
        """Take one sample and publish the outcome.

        Returns the published event.  A call made while another capture is
        in flight is rejected with a failed event that is not published.
        """
        if self.is_capturing:
            return CaptureEvent(CAPTURE_FAILED, message='Capture already in progress')
        timeout_ms = timeout_ms or self.capture_timeout_ms

        if not self.connected:
            try:
                self._handshake()
            except SensorUnavailable as exc:
                logger.warning('capture service not available, using simulation mode: %s', exc)
                return self._simulate()
            except CaptureFailed as exc:
                return self._fail(str(exc))

        self.state = SensorState.CAPTURING
        try:
            return self._request_sample(timeout_ms)
        except Exception as exc:
            logger.exception('unexpected error during fingerprint capture')
            return self._fail(str(exc) or type(exc).__name__)

    def _request_sample(self, timeout_ms: int) -> CaptureEvent:
        try:
            result = self._call('POST', '/capture', json={
                'deviceType': self.device_type,
                'timeout': timeout_ms,
                'quality': self.quality,
            }, timeout=timeout_ms / 1000 + self.http_timeout)
        except SensorUnavailable as exc:
            logger.warning('capture request failed, trying simulation: %s', exc)
            return self._simulate()
        except CaptureFailed as exc:
            return self._fail(str(exc))

        if not (result.get('success') and result.get('fingerprintData')):
            return self._fail(result.get('message') or 'Failed to capture fingerprint')
        return self._captured(result['fingerprintData'], simulated=False)

    def _simulate(self) -> CaptureEvent:
        self.state = SensorState.CAPTURING
        self._sleep(self.simulated_delay_ms / 1000)
        return self._captured(generate_simulated_sample(), simulated=True)

    def _captured(self, payload: Any, *, simulated: bool) -> CaptureEvent:
        try:
            identifier = normalize_capture(payload, now_ms=self._clock_ms())
        except ValueError as exc:
            return self._fail(str(exc))
        self.identifier = identifier
        self.state = SensorState.CAPTURED
        event = CaptureEvent(CAPTURED, identifier=identifier,
                             message='Fingerprint captured successfully', simulated=simulated)
        logger.info('fingerprint captured (%s)', 'simulated' if simulated else self.device_type)
        self.notifier.publish(event)
        return event

    def _fail(self, reason: str) -> CaptureEvent:
        self.identifier = None
        self.state = SensorState.FAILED
        event = CaptureEvent(CAPTURE_FAILED, message=f"Failed to capture fingerprint: {reason}")
        logger.error('fingerprint capture failed: %s', reason)
        self.notifier.publish(event)
        return event

    # ------------------------------------------------------------------
    # reset / teardown
    # ------------------------------------------------------------------
    def clear(self) -> None:
        """Drop the held identifier and get ready for the next capture."""
        self.identifier = None
        self.state = SensorState.CONNECTED if self.connected else SensorState.DISCONNECTED

    def disconnect(self) -> None:
        if self.connected:
            try:
                self._call('POST', '/disconnect')
            except (SensorUnavailable, CaptureFailed) as exc:
                logger.warning('error disconnecting from capture service: %s', exc)
        self.connected = False
        self.state = SensorState.DISCONNECTED
