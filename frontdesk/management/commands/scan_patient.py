from django.core.management.base import BaseCommand, CommandError

from frontdesk.flows.base import ERROR
from frontdesk.flows.lookup import LookupState
from frontdesk.session import build_session

from ._output import format_patient, notification_writer


class Command(BaseCommand):
    help = "Identify a patient by fingerprint, or open one from the recently registered list."

    def add_arguments(self, parser):
        parser.add_argument('--select', metavar='ID', help="Show this patient instead of scanning")
        parser.add_argument('--recent', action='store_true', help="List recently registered patients")
        parser.add_argument('--relay', action='store_true', help="Forward capture events to websocket screens")

    def handle(self, *args, **opts):
        session = build_session(on_notify=notification_writer(self), relay=opts['relay'])
        flow = session.use(session.lookup)
        try:
            if opts['recent']:
                recent = flow.load_recent()
                if not recent:
                    self.stdout.write('No patients registered yet.')
                for patient in recent:
                    self.stdout.write(format_patient(patient))
                return
            if opts['select']:
                flow.select(opts['select'])
            else:
                flow.scan()
            if flow.state is LookupState.FOUND:
                self.stdout.write(format_patient(flow.current_patient))
            elif flow.state is LookupState.PROMPT and flow.last_notification and flow.last_notification.level == ERROR:
                raise CommandError(flow.last_notification.message)
        finally:
            session.close()
