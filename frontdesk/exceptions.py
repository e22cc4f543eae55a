"""
Error types for the front desk and the unified API error envelope.

Every REST endpoint answers failures as ``{"success": false, "message": ...}``;
validation failures also carry ``errors`` keyed by field.
"""
from __future__ import annotations

import logging
from typing import Optional

from rest_framework import exceptions as drf_exceptions
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger(__name__)


class SensorUnavailable(Exception):
    """The capture service could not be reached (connection, timeout or non-2xx)."""


class CaptureFailed(Exception):
    """The capture service answered but reported a failure."""


class StoreError(Exception):
    """The record store could not be reached or answered with an error."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status = status


def _first_message(data) -> str:
    if isinstance(data, dict):
        for field, value in data.items():
            msg = _first_message(value)
            if field in ('detail', 'non_field_errors'):
                return msg
            return f"{field}: {msg}"
        return ''
    if isinstance(data, (list, tuple)):
        return _first_message(data[0]) if data else ''
    return str(data)


def api_exception_handler(exc, context):
    resp = drf_exception_handler(exc, context)
    if resp is None:
        logger.exception('unhandled API error in %s', context.get('view'), exc_info=exc)
        return Response({'success': False, 'message': 'Internal server error'}, status=500)
    if isinstance(exc, drf_exceptions.ValidationError):
        return Response(
            {'success': False, 'message': _first_message(resp.data), 'errors': resp.data},
            status=resp.status_code,
        )
    detail = resp.data.get('detail') if isinstance(resp.data, dict) else resp.data
    out = Response({'success': False, 'message': str(detail)}, status=resp.status_code)
    # keep throttling hints
    if resp.has_header('Retry-After'):
        out['Retry-After'] = resp['Retry-After']
    return out
