import pytest
import requests

from frontdesk.sensor import CAPTURE_FAILED, CAPTURED, SensorClient, SensorState
from frontdesk.sensor.client import SIMULATION_ALPHABET, generate_simulated_sample

from .fakes import FakeResponse, FakeSession

NOW = 1_700_000_000_000


def make_client(routes=None, **kwargs):
    session = FakeSession(routes)
    sleeps = []
    client = SensorClient(
        'http://sensor.test/',
        session=session,
        sleep=sleeps.append,
        clock_ms=lambda: NOW,
        **kwargs,
    )
    return client, session, sleeps


def healthy(capture_payload):
    return {
        ('POST', '/connect'): FakeResponse(200, {'success': True}),
        ('POST', '/capture'): FakeResponse(200, capture_payload),
        ('POST', '/disconnect'): FakeResponse(200, {'success': True}),
        ('GET', '/status'): FakeResponse(200, {'status': 'ok'}),
    }


def collect(client):
    events = []
    client.subscribe(events.append)
    return events


def test_capture_with_service_returns_identifier_verbatim():
    client, session, sleeps = make_client(healthy({'success': True, 'fingerprintData': 'Rk1SACAyMAA='}))
    events = collect(client)

    event = client.capture()

    assert event.kind == CAPTURED
    assert event.identifier == 'Rk1SACAyMAA='
    assert event.simulated is False
    assert client.identifier == 'Rk1SACAyMAA='
    assert client.state is SensorState.CAPTURED
    assert client.connected is True
    assert events == [event]
    assert sleeps == []


def test_capture_sends_device_parameters():
    client, session, _ = make_client(healthy({'success': True, 'fingerprintData': 'X'}))
    client.capture(timeout_ms=3000)

    connect = next(kw for m, p, kw in session.calls if p == '/connect')
    capture = next(kw for m, p, kw in session.calls if p == '/capture')
    assert connect['json'] == {'deviceType': 'MFS110', 'baudRate': 9600}
    assert capture['json'] == {'deviceType': 'MFS110', 'timeout': 3000, 'quality': 'high'}
    assert capture['timeout'] == pytest.approx(3 + 5.0)


def test_structured_payload_uses_template_field():
    client, _, _ = make_client(healthy({'success': True, 'fingerprintData': {'template': 'TPL', 'data': 'D'}}))
    assert client.capture().identifier == 'TPL'


def test_connection_is_reused_between_captures():
    client, session, _ = make_client(healthy({'success': True, 'fingerprintData': 'X'}))
    client.capture()
    client.capture()
    assert session.paths().count(('POST', '/connect')) == 1
    assert session.paths().count(('POST', '/capture')) == 2


def test_unreachable_service_falls_back_to_simulation():
    client, session, sleeps = make_client({})
    events = collect(client)

    event = client.capture()

    assert event.kind == CAPTURED
    assert event.simulated is True
    assert len(event.identifier) == 64
    assert set(event.identifier) <= set(SIMULATION_ALPHABET)
    assert client.identifier == event.identifier
    assert client.degraded is True
    assert sleeps == [2.0]
    assert events == [event]
    assert ('POST', '/capture') not in session.paths()


def test_timeout_during_capture_falls_back_to_simulation():
    routes = healthy(None)
    routes[('POST', '/capture')] = requests.Timeout('read timed out')
    client, _, sleeps = make_client(routes, simulated_delay_ms=500)

    event = client.capture()

    assert event.ok and event.simulated
    assert sleeps == [0.5]


def test_http_error_status_is_treated_as_unreachable():
    routes = healthy(None)
    routes[('POST', '/capture')] = FakeResponse(503, text='busy')
    client, _, _ = make_client(routes)

    event = client.capture()

    assert event.ok and event.simulated


def test_service_reported_error_fails_without_simulation():
    client, _, sleeps = make_client(healthy({'success': False, 'message': 'No finger detected'}))
    events = collect(client)

    event = client.capture()

    assert event.kind == CAPTURE_FAILED
    assert event.message == 'Failed to capture fingerprint: No finger detected'
    assert event.identifier is None
    assert client.identifier is None
    assert client.state is SensorState.FAILED
    assert sleeps == []
    assert events == [event]


def test_missing_fingerprint_data_is_a_failure():
    client, _, _ = make_client(healthy({'success': True}))
    event = client.capture()
    assert event.kind == CAPTURE_FAILED
    assert event.message == 'Failed to capture fingerprint: Failed to capture fingerprint'


def test_refused_connection_fails_without_simulation():
    routes = healthy({'success': True, 'fingerprintData': 'X'})
    routes[('POST', '/connect')] = FakeResponse(200, {'success': False})
    client, session, sleeps = make_client(routes)

    event = client.capture()

    assert event.kind == CAPTURE_FAILED
    assert 'Failed to connect to MFS110' in event.message
    assert sleeps == []
    assert ('POST', '/capture') not in session.paths()


def test_failed_capture_clears_previous_identifier():
    client, session, _ = make_client(healthy({'success': True, 'fingerprintData': 'FIRST'}))
    client.capture()
    session.routes[('POST', '/capture')] = FakeResponse(200, {'success': False, 'message': 'Low quality'})

    client.capture()

    assert client.identifier is None


def test_connect_never_raises_when_unreachable():
    client, _, _ = make_client({})
    assert client.connect() is False
    assert client.degraded is True
    assert client.state is SensorState.DISCONNECTED


def test_connect_success():
    client, _, _ = make_client(healthy(None))
    assert client.connect() is True
    assert client.state is SensorState.CONNECTED


def test_capture_in_progress_is_rejected_and_not_published():
    client, session, _ = make_client(healthy({'success': True, 'fingerprintData': 'X'}))
    events = collect(client)
    client.state = SensorState.CAPTURING

    event = client.capture()

    assert event.kind == CAPTURE_FAILED
    assert event.message == 'Capture already in progress'
    assert events == []
    assert session.calls == []


def test_clear_is_idempotent():
    client, _, _ = make_client(healthy({'success': True, 'fingerprintData': 'X'}))
    client.capture()
    client.clear()
    client.clear()
    assert client.identifier is None
    assert client.state is SensorState.CONNECTED


def test_disconnect_is_best_effort():
    routes = healthy({'success': True, 'fingerprintData': 'X'})
    routes[('POST', '/disconnect')] = requests.ConnectionError('gone')
    client, _, _ = make_client(routes)
    client.connect()

    client.disconnect()

    assert client.connected is False
    assert client.state is SensorState.DISCONNECTED


def test_disconnect_without_connection_makes_no_call():
    client, session, _ = make_client({})
    client.disconnect()
    assert session.calls == []


def test_check_status():
    client, _, _ = make_client(healthy(None))
    assert client.check_status() is True
    assert make_client({})[0].check_status() is False


def test_listener_errors_do_not_stop_other_listeners():
    client, _, _ = make_client(healthy({'success': True, 'fingerprintData': 'X'}))
    seen = []

    def broken(event):
        raise RuntimeError('boom')

    client.subscribe(lambda e: seen.append('first'))
    client.subscribe(broken)
    client.subscribe(lambda e: seen.append('third'))

    client.capture()

    assert seen == ['first', 'third']


def test_unsubscribe_stops_delivery():
    client, _, _ = make_client(healthy({'success': True, 'fingerprintData': 'X'}))
    events = []
    unsubscribe = client.subscribe(events.append)
    unsubscribe()
    client.capture()
    assert events == []


def test_from_settings(settings):
    settings.FINGERPRINT_SERVICE_URL = 'http://desk-pc:9090'
    settings.FINGERPRINT_SIMULATED_DELAY_MS = 10
    client = SensorClient.from_settings(quality='medium')
    assert client.base_url == 'http://desk-pc:9090'
    assert client.simulated_delay_ms == 10
    assert client.quality == 'medium'


def test_simulated_samples_differ():
    assert generate_simulated_sample() != generate_simulated_sample()


@pytest.mark.parametrize('body', [['unexpected'], 'text', 42])
def test_malformed_capture_reply_fails_and_recovers(body):
    routes = healthy(body)
    client, session, sleeps = make_client(routes)
    events = collect(client)

    event = client.capture()

    assert event.kind == CAPTURE_FAILED
    assert event.message == 'Failed to capture fingerprint: Invalid response from capture service'
    assert client.state is SensorState.FAILED
    assert events == [event]
    assert sleeps == []

    session.routes[('POST', '/capture')] = FakeResponse(200, {'success': True, 'fingerprintData': 'NEXT'})
    assert client.capture().identifier == 'NEXT'


def test_malformed_connect_reply_fails():
    routes = healthy({'success': True, 'fingerprintData': 'X'})
    routes[('POST', '/connect')] = FakeResponse(200, ['ok'])
    client, _, _ = make_client(routes)

    event = client.capture()

    assert event.kind == CAPTURE_FAILED
    assert client.state is SensorState.FAILED


def test_unexpected_error_during_capture_leaves_sensor_usable(monkeypatch):
    client, _, _ = make_client(healthy({'success': True, 'fingerprintData': 'X'}))
    events = collect(client)

    def explode(payload, now_ms=None):
        raise RuntimeError('decoder crashed')

    monkeypatch.setattr('frontdesk.sensor.client.normalize_capture', explode)
    event = client.capture()

    assert event.kind == CAPTURE_FAILED
    assert event.message == 'Failed to capture fingerprint: decoder crashed'
    assert client.state is SensorState.FAILED
    assert events == [event]

    monkeypatch.undo()
    assert client.capture().ok
