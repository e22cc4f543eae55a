from frontdesk.flows.base import ERROR, SUCCESS


def notification_writer(command):
    """Print flow notifications with the management command's styles."""
    def write(note):
        if note.level == ERROR:
            command.stderr.write(command.style.ERROR(note.message))
        elif note.level == SUCCESS:
            command.stdout.write(command.style.SUCCESS(note.message))
        else:
            command.stdout.write(note.message)
    return write


def format_patient(patient: dict) -> str:
    return (
        f"#{patient.get('id')} {patient.get('name')} | Age: {patient.get('age')} | "
        f"Gender: {patient.get('gender')} | Blood Group: {patient.get('bloodGroup')} | "
        f"Registered: {patient.get('createdAt')}"
    )
