"""
Patient record store endpoints.

``/api/patients`` registers (multipart, optional medical document) and
lists newest-first; ``/api/patients/scan`` performs the exact-match
fingerprint lookup; ``/api/patients/<id>`` returns one record.  Every
response carries a ``success`` flag; a scan without a match is a 404
with ``success: false`` rather than an error.
"""
from __future__ import annotations

import logging

from django.db import DatabaseError
from rest_framework import status
from rest_framework.decorators import api_view, throttle_classes
from rest_framework.response import Response
from rest_framework.throttling import AnonRateThrottle

from frontdesk.serializers.patient import PatientCreateSerializer, PatientScanSerializer, PatientSerializer
from frontdesk.services.patients import find_by_fingerprint, get_patient, recent_patients, register_patient

logger = logging.getLogger(__name__)


class PatientWriteThrottle(AnonRateThrottle):
    """Throttle registrations only; listing stays on the default rate."""
    scope = 'patient_write'

    def allow_request(self, request, view):
        if request.method != 'POST':
            return True
        return super().allow_request(request, view)


def _error(message: str, code: int) -> Response:
    return Response({'success': False, 'message': message}, status=code)


@api_view(['GET', 'POST'])
@throttle_classes([AnonRateThrottle, PatientWriteThrottle])
def patients(request):
    """GET lists every patient newest-first; POST registers a new one."""
    if request.method == 'POST':
        return _create_patient(request)
    try:
        data = PatientSerializer(recent_patients(), many=True, context={'request': request}).data
    except DatabaseError:
        logger.exception('error fetching patients')
        return _error('Error fetching patients', status.HTTP_500_INTERNAL_SERVER_ERROR)
    return Response({'success': True, 'patients': data})


def _create_patient(request):
    data = PatientCreateSerializer(data=request.data)
    data.is_valid(raise_exception=True)
    v = data.validated_data
    try:
        patient = register_patient(
            name=v['name'],
            age=v['age'],
            gender=v['gender'],
            blood_group=v['bloodGroup'],
            fingerprint_data=v['fingerprintData'],
            medical_document=v.get('medicalDocument'),
        )
    except (DatabaseError, OSError):
        logger.exception('error registering patient')
        return _error('Error registering patient', status.HTTP_500_INTERNAL_SERVER_ERROR)
    return Response({
        'success': True,
        'message': 'Patient registered successfully',
        'patient': PatientSerializer(patient, context={'request': request}).data,
    }, status=status.HTTP_201_CREATED)


@api_view(['POST'])
def scan_patient(request):
    """Find the patient whose stored identifier equals ``fingerprintData``."""
    data = PatientScanSerializer(data=request.data)
    data.is_valid(raise_exception=True)
    try:
        patient = find_by_fingerprint(data.validated_data['fingerprintData'])
    except DatabaseError:
        logger.exception('error scanning patient')
        return _error('Error scanning patient', status.HTTP_500_INTERNAL_SERVER_ERROR)
    if not patient:
        return _error('Patient not found', status.HTTP_404_NOT_FOUND)
    return Response({'success': True, 'patient': PatientSerializer(patient, context={'request': request}).data})


@api_view(['GET'])
def patient_detail(request, pk: str):
    if not str(pk).isdigit():
        return _error('Patient not found', status.HTTP_404_NOT_FOUND)
    try:
        patient = get_patient(int(pk))
    except DatabaseError:
        logger.exception('error fetching patient %s', pk)
        return _error('Error fetching patient', status.HTTP_500_INTERNAL_SERVER_ERROR)
    if not patient:
        return _error('Patient not found', status.HTTP_404_NOT_FOUND)
    return Response({'success': True, 'patient': PatientSerializer(patient, context={'request': request}).data})
