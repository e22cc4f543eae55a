"""
URL mappings for the front-desk API.

Paths carry no trailing slash.  ``scan`` is declared before the detail
route so that it is not swallowed by ``<pk>``.
"""
from django.urls import path, include

from .views import health
from .views.patients import patients, scan_patient, patient_detail


urlpatterns = [
    path('metrics', include('django_prometheus.urls')),
    path('healthz', health.healthz, name='healthz'),
    # Patients
    path('api/patients', patients, name='patients'),
    path('api/patients/scan', scan_patient, name='scan_patient'),
    path('api/patients/<str:pk>', patient_detail, name='patient_detail'),
]
