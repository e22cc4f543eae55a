import pytest

from frontdesk.exceptions import StoreError
from frontdesk.flows import LookupFlow, LookupState, RegistrationFlow, validate_field
from frontdesk.flows.base import ERROR, INFO, SUCCESS
from frontdesk.sensor import SensorClient

from .fakes import FakeSensor, FakeSession

VALID = dict(name='Asha Rao', age='34', gender='Female', blood_group='B+')


# --- field validation -------------------------------------------------------

@pytest.mark.parametrize('age', ['1', '120', 1, 120, '45'])
def test_age_within_bounds_is_accepted(age):
    assert validate_field('age', age) is None


@pytest.mark.parametrize('age', ['0', '121', 0, 121, '-3', '12.5', 'abc', True])
def test_age_out_of_bounds_is_rejected(age):
    assert validate_field('age', age) == 'Age must be between 1 and 120'


def test_required_field_messages():
    assert validate_field('name', '  ') == 'Name is required'
    assert validate_field('name', 'A') == 'Name must be at least 2 characters'
    assert validate_field('age', '') == 'Age is required'
    assert validate_field('gender', None) == 'Gender is required'
    assert validate_field('gender', 'Unknown') == 'Select a valid gender'
    assert validate_field('blood_group', 'C+') == 'Select a valid blood group'


def test_unknown_field_raises():
    with pytest.raises(KeyError):
        validate_field('email', 'x@example.com')


# --- registration -----------------------------------------------------------

def test_submit_is_gated_on_missing_field(fake_sensor, fake_store):
    flow = RegistrationFlow(fake_sensor, fake_store)
    flow.fill(**dict(VALID, blood_group=''))
    flow.capture()

    assert flow.can_submit is False
    assert flow.submit() is None
    assert fake_store.created == []
    assert flow.errors == {'blood_group': 'Blood group is required'}
    assert flow.last_notification.message == 'Please fill all required fields and capture fingerprint.'


def test_submit_is_gated_on_missing_capture(fake_sensor, fake_store):
    flow = RegistrationFlow(fake_sensor, fake_store)
    flow.fill(**VALID)

    assert flow.can_submit is False
    assert flow.submit() is None
    assert fake_store.created == []


def test_successful_registration_resets_form(fake_sensor, fake_store):
    flow = RegistrationFlow(fake_sensor, fake_store)
    flow.fill(**VALID)
    flow.capture()
    assert flow.identifier == 'FP-1'
    assert flow.can_submit is True

    patient = flow.submit()

    assert patient['fingerprintData'] == 'FP-1'
    assert fake_store.created == [dict(
        name='Asha Rao', age=34, gender='Female', blood_group='B+',
        fingerprint_data='FP-1', document=None,
    )]
    assert flow.fields == dict.fromkeys(VALID, '')
    assert flow.identifier is None
    assert fake_sensor.identifier is None
    assert flow.last_notification.level == SUCCESS


def test_failed_registration_keeps_form(fake_sensor, fake_store):
    fake_store.fail_with = StoreError('Error registering patient', status=500)
    flow = RegistrationFlow(fake_sensor, fake_store)
    flow.fill(**VALID)
    flow.attach_document('/tmp/report.pdf')
    flow.capture()

    assert flow.submit() is None

    assert flow.fields == VALID
    assert flow.document == '/tmp/report.pdf'
    assert flow.identifier == 'FP-1'
    assert flow.last_notification.message == 'Registration failed: Error registering patient'
    assert flow.last_notification.level == ERROR


def test_failed_capture_blocks_submission(fake_store):
    sensor = FakeSensor(fail_message='No finger detected')
    flow = RegistrationFlow(sensor, fake_store)
    flow.fill(**VALID)

    flow.capture()

    assert flow.identifier is None
    assert flow.can_submit is False
    assert flow.last_notification.message == (
        'Fingerprint capture failed: Failed to capture fingerprint: No finger detected')


def test_capture_is_ignored_while_running(fake_sensor, fake_store):
    flow = RegistrationFlow(fake_sensor, fake_store)
    flow.capturing = True
    assert flow.capture() is None
    assert fake_sensor.captures == 0


def test_clear_capture(fake_sensor, fake_store):
    flow = RegistrationFlow(fake_sensor, fake_store)
    flow.capture()
    flow.clear_capture()
    assert flow.identifier is None
    assert fake_sensor.cleared == 1


def test_simulated_capture_identifier_is_what_gets_stored(fake_store):
    sensor = SensorClient('http://sensor.test', session=FakeSession(), sleep=lambda s: None)
    flow = RegistrationFlow(sensor, fake_store)
    flow.fill(**VALID)

    flow.capture()
    stored_identifier = sensor.identifier
    flow.submit()

    assert fake_store.created[0]['fingerprint_data'] == stored_identifier


# --- lookup -----------------------------------------------------------------

@pytest.fixture
def registered(fake_store):
    fake_store.create_patient(name='Asha Rao', age=34, gender='Female', blood_group='B+',
                              fingerprint_data='FP-1', document=None)
    fake_store.create_patient(name='Ravi Kumar', age=51, gender='Male', blood_group='O-',
                              fingerprint_data='FP-2', document=None)
    return fake_store


def test_lookup_found(registered):
    flow = LookupFlow(FakeSensor(identifier='FP-2'), registered)

    flow.scan()

    assert flow.state is LookupState.FOUND
    assert flow.current_patient['name'] == 'Ravi Kumar'
    assert [n.message for n in flow.notifications] == ['Searching for patient...', 'Patient found!']


def test_lookup_not_found(registered):
    flow = LookupFlow(FakeSensor(identifier='FP-9'), registered)

    flow.scan()

    assert flow.state is LookupState.NOT_FOUND
    assert flow.current_patient is None
    assert flow.last_notification.message == 'Patient not found in database.'


def test_lookup_store_error_returns_to_prompt(registered, store_down):
    flow = LookupFlow(FakeSensor(identifier='FP-1'), registered)
    flow.display(registered.patients[0])
    registered.fail_with = store_down

    flow.scan()

    assert flow.state is LookupState.PROMPT
    assert flow.current_patient is None
    assert flow.last_notification.message == 'Error searching for patient. Please try again.'


def test_failed_scan_leaves_view_unchanged(fake_store):
    flow = LookupFlow(FakeSensor(fail_message='Timeout'), fake_store)

    flow.scan()

    assert flow.state is LookupState.PROMPT
    assert flow.last_notification.message.startswith('Fingerprint scan failed:')


def test_select_from_recent(registered):
    flow = LookupFlow(FakeSensor(), registered)

    patient = flow.select(1)

    assert patient['name'] == 'Asha Rao'
    assert flow.state is LookupState.FOUND
    assert flow.last_notification.message == 'Patient selected from recent list.'
    assert flow.last_notification.level == INFO


def test_select_error(registered, store_down):
    registered.fail_with = store_down
    flow = LookupFlow(FakeSensor(), registered)
    assert flow.select(1) is None
    assert flow.last_notification.message == 'Error selecting patient.'


def test_load_recent_is_limited(registered):
    for i in range(8):
        registered.create_patient(name=f'Patient {i}', age=30, gender='Other', blood_group='A+',
                                  fingerprint_data=f'X-{i}', document=None)
    flow = LookupFlow(FakeSensor(), registered, recent_limit=6)

    recent = flow.load_recent()

    assert len(recent) == 6
    assert recent[0]['name'] == 'Patient 7'


def test_load_recent_keeps_previous_list_on_error(registered, store_down):
    flow = LookupFlow(FakeSensor(), registered)
    before = flow.load_recent()
    registered.fail_with = store_down
    assert flow.load_recent() == before


def test_clear_returns_to_prompt(registered):
    sensor = FakeSensor(identifier='FP-1')
    flow = LookupFlow(sensor, registered)
    flow.scan()

    flow.clear()

    assert flow.state is LookupState.PROMPT
    assert flow.current_patient is None
    assert sensor.cleared == 1


# --- activation -------------------------------------------------------------

def test_inactive_flow_ignores_captures(registered):
    sensor = FakeSensor(identifier='FP-1')
    registration = RegistrationFlow(sensor, registered)
    lookup = LookupFlow(sensor, registered, active=False)

    registration.capture()

    assert registration.identifier == 'FP-1'
    assert lookup.notifications == []
    assert lookup.state is LookupState.PROMPT


def test_on_notify_callback(fake_sensor, fake_store):
    seen = []
    flow = RegistrationFlow(fake_sensor, fake_store, on_notify=seen.append)
    flow.capture()
    assert [n.message for n in seen] == ['Fingerprint captured successfully!']


def test_can_submit_does_not_touch_errors(fake_sensor, fake_store):
    flow = RegistrationFlow(fake_sensor, fake_store)
    flow.fill(**VALID)
    flow.capture()
    flow.fields['age'] = '0'

    assert flow.can_submit is False
    assert flow.errors == {}

    flow.errors = {'name': 'shown to the operator'}
    flow.fields['age'] = '40'
    assert flow.can_submit is True
    assert flow.errors == {'name': 'shown to the operator'}
