"""
Nickname Check Lambda Function
Validates a nickname and reports whether it can be taken
"""
import asyncio
from typing import Dict, Any

from nickname_commons.decorators import direct_lambda_handler
from nickname_commons.services.nickname_check import check_nickname
from nickname_commons.services.service_container import get_service
from nickname_commons.utils import create_success_response, get_caller_id, parse_event_body
from nickname_commons.validation_utils import validate_required_fields
from nickname_commons.validators.nickname import nickname_validator
from nickname_commons.logger import availability_logger as logger


FUNCTION_NAME = 'nickname-check'


def validate_input(event: dict) -> Dict[str, Any]:
    """Validate input parameters"""
    body = parse_event_body(event)

    if body.get('get_rules'):
        return {'get_rules': True}

    missing_fields = validate_required_fields(body, ['nickname'])
    if missing_fields:
        raise ValueError(f"Missing required fields: {', '.join(missing_fields)}")

    nickname = body['nickname']
    if not isinstance(nickname, str):
        raise ValueError("nickname must be a string")

    current_nickname = body.get('current_nickname')
    if current_nickname is not None and not isinstance(current_nickname, str):
        raise ValueError("current_nickname must be a string")

    return {
        'nickname': nickname,
        'current_nickname': current_nickname,
        'caller_id': get_caller_id(event) or body.get('caller_id'),
    }


@direct_lambda_handler(function_name=FUNCTION_NAME)
def lambda_handler(event, context):
    """
    Nickname check handler supporting two operation modes

    Mode 1 - Check a nickname:
    {"nickname": "jane_doe", "current_nickname": "jane", "caller_id": "user-123"}

    Mode 2 - Get validation rules:
    {"get_rules": true}
    """
    params = validate_input(event)

    if params.get('get_rules'):
        return create_success_response(
            nickname_validator.get_validation_rules(),
            {"operation_mode": "get_rules"},
            FUNCTION_NAME
        )

    service = get_service('availability_service')
    result = asyncio.run(check_nickname(
        service,
        params['nickname'],
        params['current_nickname'],
        params['caller_id']
    ))

    logger.info("Nickname check completed", status=result.status.value)

    response_data = {'nickname': params['nickname'], **result.to_dict()}
    return create_success_response(response_data, {"operation_mode": "check_availability"}, FUNCTION_NAME)
