from django.core.management.base import BaseCommand, CommandError

from frontdesk.choices import BLOOD_GROUPS, GENDERS
from frontdesk.session import build_session

from ._output import format_patient, notification_writer


class Command(BaseCommand):
    help = "Capture a fingerprint and register a new patient through the front-desk API."

    def add_arguments(self, parser):
        parser.add_argument('--name', required=True)
        parser.add_argument('--age', required=True)
        parser.add_argument('--gender', required=True, choices=GENDERS)
        parser.add_argument('--blood-group', required=True, choices=BLOOD_GROUPS)
        parser.add_argument('--document', help="Path of an optional medical document to upload")
        parser.add_argument('--relay', action='store_true', help="Forward capture events to websocket screens")

    def handle(self, *args, **opts):
        session = build_session(on_notify=notification_writer(self), relay=opts['relay'])
        flow = session.use(session.registration)
        try:
            flow.fill(name=opts['name'], age=opts['age'], gender=opts['gender'], blood_group=opts['blood_group'])
            flow.attach_document(opts.get('document'))
            if flow.errors:
                raise CommandError('; '.join(flow.errors.values()))
            flow.capture()
            if not flow.can_submit:
                raise CommandError('Registration blocked: fingerprint not captured')
            patient = flow.submit()
            if patient is None:
                raise CommandError(flow.last_notification.message)
            self.stdout.write(format_patient(patient))
        finally:
            session.close()
