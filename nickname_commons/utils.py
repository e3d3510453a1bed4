"""
Lambda request/response helpers for the nickname service
"""
import json
from datetime import datetime, timezone
from typing import Dict, Any, Optional


def parse_event_body(event: dict) -> Dict[str, Any]:
    """
    Extract request parameters from a direct invocation or API Gateway event

    Raises:
        ValueError: Body is not valid JSON or not an object
    """
    if not isinstance(event, dict):
        raise ValueError("Event must be a JSON object")

    if 'body' not in event:
        return event

    body = event['body']
    if body is None:
        return {}
    if isinstance(body, str):
        try:
            body = json.loads(body)
        except json.JSONDecodeError:
            raise ValueError("Invalid JSON in request body")
    if not isinstance(body, dict):
        raise ValueError("Request body must be a JSON object")
    return body


def get_caller_id(event: dict) -> Optional[str]:
    """Authenticated caller from API Gateway authorizer claims, if any"""
    claims = (event.get('requestContext') or {}).get('authorizer', {}).get('claims') or {}
    return claims.get('sub')


def create_success_response(data: Any, metadata: Optional[Dict[str, Any]] = None, function_name: Optional[str] = None) -> Dict[str, Any]:
    """
    Create protocol-agnostic success response for internal Lambda communication

    Args:
        data: The actual response data
        metadata: Optional metadata dict
        function_name: Name of the function generating the response

    Returns:
        Protocol-agnostic success response
    """
    response = {
        "success": True,
        "data": data
    }

    response_metadata = {
        "timestamp": datetime.now(timezone.utc).isoformat()
    }

    if function_name:
        response_metadata["function_name"] = function_name

    if metadata:
        response_metadata.update(metadata)

    response["metadata"] = response_metadata

    return response


def create_failure_response(error_code: str, message: str, details: Optional[Dict[str, Any]] = None, function_name: Optional[str] = None) -> Dict[str, Any]:
    """
    Create protocol-agnostic failure response for internal Lambda communication

    Args:
        error_code: Error code (e.g., 'VALIDATION_ERROR', 'RATE_LIMIT_EXCEEDED', 'INTERNAL_ERROR')
        message: Human-readable error message
        details: Optional error details dict
        function_name: Name of the function generating the response

    Returns:
        Protocol-agnostic failure response
    """
    response = {
        "success": False,
        "error": {
            "code": error_code,
            "message": message
        }
    }

    if details:
        response["error"]["details"] = details

    response_metadata = {
        "timestamp": datetime.now(timezone.utc).isoformat()
    }

    if function_name:
        response_metadata["function_name"] = function_name

    response["metadata"] = response_metadata

    return response
