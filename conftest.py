"""
Pytest configuration and fixtures for the nickname service tests
Provides AWS mocking, a controllable clock and an in-memory profile store
"""
import asyncio
import os
from dataclasses import dataclass
from typing import Dict, List, Optional
from unittest.mock import MagicMock

import boto3
import pytest
from moto import mock_aws


# Set test environment variables before the package reads its configuration
os.environ.update({
    'AWS_DEFAULT_REGION': 'us-east-1',
    'AWS_ACCESS_KEY_ID': 'testing',
    'AWS_SECRET_ACCESS_KEY': 'testing',
    'AWS_SECURITY_TOKEN': 'testing',
    'AWS_SESSION_TOKEN': 'testing',
    'ENVIRONMENT': 'test',
    'PARAMETER_STORE_ENABLED': 'false',
    'PROFILE_TABLE_NAME': 'Profiles-test',
    'NICKNAME_CLAIM_TABLE_NAME': 'NicknameClaims-test',
})

from nickname_commons.contracts.profile_store import UniqueConstraintViolation  # noqa: E402
from nickname_commons.exceptions import NotFoundError  # noqa: E402
from nickname_commons.services.availability_service import NicknameAvailabilityService  # noqa: E402
from nickname_commons.services.service_container import clear_services  # noqa: E402


class FakeClock:
    """Monotonic clock that only moves when told to"""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@dataclass
class FakeProfile:
    profile_id: str
    nickname: Optional[str] = None


class InMemoryProfileStore:
    """
    Profile store double recording every call

    find_failures / update_failures hold exceptions raised by the next
    calls, in order. A gate blocks lookups for one canonical nickname
    until it is set. With snapshot_reads, a lookup reads the owner before
    waiting and answers with that read, like a query whose response is
    still on the wire.
    """

    def __init__(self):
        self.profiles: Dict[str, FakeProfile] = {}
        self.find_calls: List[str] = []
        self.update_calls: List[tuple] = []
        self.find_failures: List[Exception] = []
        self.update_failures: List[Exception] = []
        self.gates: Dict[str, asyncio.Event] = {}
        self.lookup_delay = 0.0
        self.snapshot_reads = False

    def add_profile(self, profile_id: str, nickname: Optional[str] = None) -> FakeProfile:
        profile = FakeProfile(profile_id, nickname)
        self.profiles[profile_id] = profile
        return profile

    def gate(self, nickname: str) -> asyncio.Event:
        event = asyncio.Event()
        self.gates[nickname.lower()] = event
        return event

    def _owner(self, canonical: str) -> Optional[FakeProfile]:
        for profile in self.profiles.values():
            if profile.nickname and profile.nickname.lower() == canonical:
                return profile
        return None

    async def find_by_nickname_case_insensitive(self, nickname: str) -> Optional[FakeProfile]:
        canonical = nickname.lower()
        self.find_calls.append(canonical)
        snapshot = self._owner(canonical)
        gate = self.gates.get(canonical)
        if gate is not None:
            await gate.wait()
        if self.lookup_delay:
            await asyncio.sleep(self.lookup_delay)
        if self.find_failures:
            raise self.find_failures.pop(0)
        return snapshot if self.snapshot_reads else self._owner(canonical)

    async def update_nickname(self, profile_id: str, nickname: str) -> Optional[str]:
        self.update_calls.append((profile_id, nickname))
        if self.update_failures:
            raise self.update_failures.pop(0)

        canonical = nickname.lower()
        owner = self._owner(canonical)
        if owner is not None and owner.profile_id != profile_id:
            raise UniqueConstraintViolation(canonical, owner.profile_id)

        profile = self.profiles.get(profile_id)
        if profile is None:
            raise NotFoundError(entity_type='profile', entity_id=profile_id)

        previous, profile.nickname = profile.nickname, canonical
        return previous


class MockConfig:
    """Pipeline settings with fast retries and short timeouts"""

    def __init__(self, **overrides):
        self.environment = 'test'
        self.profile_table_name = 'Profiles-test'
        self.nickname_claim_table_name = 'NicknameClaims-test'
        self.availability_cache_ttl = 30.0
        self.availability_cache_max_size = 200
        self.profile_cache_ttl = 300.0
        self.profile_cache_max_size = 100
        self.availability_rate_limit = 5
        self.availability_rate_window = 1.0
        self.caller_rate_limit = 20
        self.caller_rate_window = 60.0
        self.profile_search_rate_limit = 10
        self.profile_search_rate_window = 1.0
        self.update_rate_limit = 10
        self.update_rate_window = 60.0
        self.query_timeout = 0.5
        self.max_retries = 2
        self.retry_delay = 0.001
        self.exponential_backoff = True
        self.debounce_delay = 0.02
        self.cleanup_interval = 300.0
        self.slow_operation_threshold = 0.2
        self.enable_debug_logging = False
        for key, value in overrides.items():
            setattr(self, key, value)


@pytest.fixture
def aws_credentials():
    """Mocked AWS Credentials for moto"""
    os.environ.update({
        'AWS_ACCESS_KEY_ID': 'testing',
        'AWS_SECRET_ACCESS_KEY': 'testing',
        'AWS_SECURITY_TOKEN': 'testing',
        'AWS_SESSION_TOKEN': 'testing'
    })


@pytest.fixture
def mock_config():
    """Mock configuration for tests"""
    return MockConfig()


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def fake_store():
    return InMemoryProfileStore()


@pytest.fixture
def availability_service(fake_store, mock_config, fake_clock):
    """Availability service over the in-memory store with a frozen clock"""
    return NicknameAvailabilityService(fake_store, settings=mock_config, clock=fake_clock)


@pytest.fixture
def mock_aws_services(aws_credentials, mock_config):
    """DynamoDB tables backing the profile store, under moto"""
    with mock_aws():
        dynamodb = create_test_tables(mock_config)
        yield {
            'dynamodb': dynamodb,
            'ssm': boto3.client('ssm', region_name='us-east-1')
        }


def create_test_tables(config):
    """Create DynamoDB test tables"""
    dynamodb = boto3.resource('dynamodb', region_name='us-east-1')

    profile_table = dynamodb.create_table(
        TableName=config.profile_table_name,
        KeySchema=[
            {'AttributeName': 'profile_id', 'KeyType': 'HASH'}
        ],
        AttributeDefinitions=[
            {'AttributeName': 'profile_id', 'AttributeType': 'S'}
        ],
        BillingMode='PAY_PER_REQUEST'
    )

    claim_table = dynamodb.create_table(
        TableName=config.nickname_claim_table_name,
        KeySchema=[
            {'AttributeName': 'nickname', 'KeyType': 'HASH'}
        ],
        AttributeDefinitions=[
            {'AttributeName': 'nickname', 'AttributeType': 'S'}
        ],
        BillingMode='PAY_PER_REQUEST'
    )

    profile_table.meta.client.get_waiter('table_exists').wait(TableName=config.profile_table_name)
    claim_table.meta.client.get_waiter('table_exists').wait(TableName=config.nickname_claim_table_name)
    return dynamodb


@pytest.fixture
def reset_service_container():
    """Drop lazily built services before and after a test"""
    clear_services()
    yield
    clear_services()


@pytest.fixture
def lambda_context():
    """Mock Lambda context"""
    context = MagicMock()
    context.function_name = 'nickname-check'
    context.function_version = '$LATEST'
    context.invoked_function_arn = 'arn:aws:lambda:us-east-1:123456789012:function:nickname-check'
    context.memory_limit_in_mb = 256
    context.aws_request_id = 'test-request-id'
    return context


@pytest.fixture
def api_gateway_event():
    """Standard API Gateway event for testing"""
    return {
        'httpMethod': 'POST',
        'path': '/nicknames/check',
        'headers': {
            'Content-Type': 'application/json'
        },
        'body': None,
        'requestContext': {
            'requestId': 'test-request-id',
            'authorizer': {
                'claims': {
                    'sub': 'user-123',
                    'email': 'test@example.com'
                }
            }
        }
    }
