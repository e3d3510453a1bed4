"""
JSON line logging for the nickname Lambda and its services

Every record is one JSON object on stdout, which Lambda forwards to
CloudWatch. Records carry the emitting component so availability, cache
and rate-limit chatter can be filtered apart.
"""
import json
import traceback
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from .config import config


# Request fields that identify the caller or authenticate them
PRIVATE_FIELDS = frozenset({'caller_id', 'authorization', 'cookie', 'token', 'password', 'secret', 'x-api-key'})

REDACTED = '[REDACTED]'


def describe_request(event: Any) -> Dict[str, Any]:
    """
    Summarize a nickname-check invocation without leaking who asked

    API Gateway events are reduced to method, path and the names of the
    body fields; direct invocations to their scalar parameters. Caller
    identity and credentials are always redacted.
    """
    if not isinstance(event, dict):
        return {'source': 'unknown', 'event_type': type(event).__name__}

    if 'requestContext' not in event:
        return {'source': 'direct', 'params': _scrub(event)}

    summary = {
        'source': 'api_gateway',
        'http_method': event.get('httpMethod'),
        'path': event.get('path'),
        'authenticated': bool((event['requestContext'] or {}).get('authorizer')),
    }
    body = event.get('body')
    if isinstance(body, str):
        try:
            body = json.loads(body)
        except ValueError:
            summary['body'] = 'unparseable'
            return summary
    if isinstance(body, dict):
        summary['params'] = _scrub(body)
    return summary


def _scrub(params: Dict[str, Any]) -> Dict[str, Any]:
    scrubbed = {}
    for key, value in params.items():
        if str(key).lower() in PRIVATE_FIELDS:
            scrubbed[key] = REDACTED
        elif value is None or isinstance(value, (str, int, float, bool)):
            scrubbed[key] = value
        else:
            scrubbed[key] = type(value).__name__
    return scrubbed


class CommonsLogger:
    """
    Structured logger bound to one component of the nickname service

    Debug records are dropped unless ENABLE_DEBUG_LOGGING is set.
    """

    def __init__(self, service_name: str = "nickname-service"):
        self.service_name = service_name
        self.environment = config.environment
        self.debug_enabled = config.enable_debug_logging

    def _log(self, level: str, message: str, **fields):
        record = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'level': level.upper(),
            'service': self.service_name,
            'environment': self.environment,
            'message': message,
        }
        record.update(fields)
        print(json.dumps(record, default=str))

    def debug(self, message: str, **fields):
        if self.debug_enabled:
            self._log('debug', message, **fields)

    def info(self, message: str, **fields):
        self._log('info', message, **fields)

    def warning(self, message: str, **fields):
        self._log('warning', message, **fields)

    def error(self, message: str, error: Optional[BaseException] = None, **fields):
        """Log at error level, attaching type, text and traceback of error"""
        if error is not None:
            fields['error_type'] = type(error).__name__
            fields['error_message'] = str(error)
            if error.__traceback__ is not None:
                fields['traceback'] = ''.join(traceback.format_exception(type(error), error, error.__traceback__))
        self._log('error', message, **fields)

    def log_lambda_start(self, function_name: str, event: Any, context=None):
        """Record an incoming nickname request with private fields redacted"""
        request_id = getattr(context, 'aws_request_id', None) or 'unknown'
        self._log('info', f"{function_name} invoked", function_name=function_name,
                  request_id=request_id, request=describe_request(event))

    def log_lambda_end(self, function_name: str, success: bool = True, duration_ms: Optional[float] = None,
                       **fields):
        """Record how an invocation ended; failures are logged at error level"""
        if duration_ms is not None:
            fields['duration_ms'] = round(duration_ms, 2)
        outcome = 'completed' if success else 'failed'
        self._log('info' if success else 'error', f"{function_name} {outcome}",
                  function_name=function_name, success=success, **fields)

    def log_service_operation(self, operation: str, entity_type: Optional[str] = None,
                              entity_id: Optional[str] = None, **fields):
        """Audit a state change made by a service, such as a nickname update"""
        if entity_type:
            fields['entity_type'] = entity_type
        if entity_id:
            fields['entity_id'] = entity_id
        self._log('info', f"{operation} applied", operation=operation, **fields)

    def log_database_operation(self, table_name: str, operation: str, success: bool = True, **fields):
        """Record a DynamoDB write against the profile or claim tables"""
        self._log('info' if success else 'error',
                  f"{operation} on {table_name} {'succeeded' if success else 'failed'}",
                  table_name=table_name, operation=operation, success=success, **fields)


logger = CommonsLogger("nickname-service")
nickname_logger = CommonsLogger("nickname-validation")
availability_logger = CommonsLogger("nickname-availability")
cache_logger = CommonsLogger("nickname-cache")
rate_limit_logger = CommonsLogger("nickname-rate-limit")
