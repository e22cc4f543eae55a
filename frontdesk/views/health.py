import requests
from django.db import connections
from django.http import JsonResponse

from frontdesk.sensor import SensorClient


def _sensor_reachable() -> bool:
    with requests.Session() as session:
        return SensorClient.from_settings(session=session).check_status()


def healthz(request):
    sensor = _sensor_reachable()
    try:
        with connections['default'].cursor() as c:
            c.execute('SELECT 1')
            row = c.fetchone()
        return JsonResponse({'success': True, 'db': bool(row and row[0] == 1), 'sensor': sensor})
    except Exception as e:
        return JsonResponse({'success': False, 'message': str(e), 'sensor': sensor}, status=500)
