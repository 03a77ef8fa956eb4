"""
Error payloads for the JSON API.

Every failed request answers with the same shape:
{"code", "message", "details", "error"}.
"""

from typing import Any, Dict

from flask import jsonify

def build_error_payload(code: str, message: str, details: Any = None) -> Dict[str, Any]:
    """Build the JSON body for an error response."""
    payload = {
        'code': str(code).strip() or 'unknown_error',
        'message': str(message).strip() or 'Unknown error.',
        'details': details if details is not None else {},
    }
    # Clients written against the older API read "error"
    payload['error'] = payload['message']
    return payload

def error_response(status: int, code: str, message: str, details: Any = None):
    """Return a (response, status) pair for Flask."""
    return jsonify(build_error_payload(code=code, message=message, details=details)), int(status)
