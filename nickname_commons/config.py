"""
Configuration management for the nickname service
Supports environment variables, SSM Parameter Store, and local .env files
"""
import os
from typing import Optional, Any
from functools import lru_cache
import boto3
from botocore.exceptions import ClientError, BotoCoreError
from dotenv import load_dotenv


# Local development values; real environment variables always win
load_dotenv(override=False)


class Config:
    """
    Configuration manager with hybrid approach:
    1. Environment Variables (highest priority)
    2. AWS Parameter Store (environment-specific)
    3. Local defaults (development fallback)
    """

    def __init__(self):
        self.environment = os.environ.get('ENVIRONMENT', 'dev')
        self.parameter_store_prefix = os.environ.get(
            'PARAMETER_STORE_PREFIX',
            f'/profiles/{self.environment}/nickname-service'
        )
        self.parameter_store_enabled = os.environ.get(
            'PARAMETER_STORE_ENABLED', 'true'
        ).lower() in ('true', '1', 'yes', 'on')
        self._ssm_client = None

    @property
    def ssm_client(self):
        """Lazy initialization of SSM client"""
        if self._ssm_client is None and self.parameter_store_enabled:
            try:
                self._ssm_client = boto3.client('ssm', region_name=self.aws_region)
            except BotoCoreError as e:
                # No credentials or region locally, fall back to env/defaults
                print(f"SSM client unavailable, using local configuration: {e}")
                self.parameter_store_enabled = False
        return self._ssm_client

    def get_parameter(self, key: str, default: Any = None) -> Any:
        """
        Get configuration parameter with fallback hierarchy:
        1. Environment variable
        2. SSM Parameter Store
        3. Default value
        """
        # Service-prefixed variable first
        env_key = f"COMMONS_SERVICE_{key.upper().replace('-', '_')}"
        env_value = os.environ.get(env_key)
        if env_value is not None:
            return env_value

        env_value = os.environ.get(key.upper().replace('-', '_'))
        if env_value is not None:
            return env_value

        ssm_value = self.get_ssm_parameter(key)
        if ssm_value is not None:
            return ssm_value

        return default

    @lru_cache(maxsize=128)
    def get_ssm_parameter(self, key: str) -> Optional[str]:
        """
        Get parameter from AWS SSM Parameter Store with caching
        """
        if not self.ssm_client:
            return None

        parameter_name = f"{self.parameter_store_prefix}/{key}"

        try:
            response = self.ssm_client.get_parameter(Name=parameter_name)
            return response['Parameter']['Value']
        except ClientError as e:
            if e.response['Error']['Code'] != 'ParameterNotFound':
                print(f"Error getting SSM parameter {parameter_name}: {e}")
            return None
        except BotoCoreError as e:
            print(f"Unexpected error getting SSM parameter {parameter_name}: {e}")
            return None

    def get_int_parameter(self, key: str, default: int = 0) -> int:
        """Get integer parameter"""
        value = self.get_parameter(key, default)
        try:
            return int(value)
        except (ValueError, TypeError):
            return default

    def get_float_parameter(self, key: str, default: float = 0.0) -> float:
        """Get float parameter"""
        value = self.get_parameter(key, default)
        try:
            return float(value)
        except (ValueError, TypeError):
            return default

    def get_bool_parameter(self, key: str, default: bool = False) -> bool:
        """Get boolean parameter"""
        value = self.get_parameter(key, default)
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            return value.lower() in ('true', '1', 'yes', 'on')
        return default

    def get_list_parameter(self, key: str, default: list = None, separator: str = ',') -> list:
        """Get list parameter (comma-separated string)"""
        value = self.get_parameter(key)
        if value is None:
            return default or []

        if isinstance(value, list):
            return value

        if isinstance(value, str):
            return [item.strip() for item in value.split(separator) if item.strip()]

        return default or []

    @property
    def aws_region(self) -> str:
        """AWS region for DynamoDB and SSM"""
        return os.environ.get('AWS_REGION', os.environ.get('AWS_DEFAULT_REGION', 'us-east-1'))

    @property
    def profile_table_name(self) -> str:
        """Get profile table name"""
        return self.get_parameter('profile-table-name', f'Profiles-{self.environment}')

    @property
    def nickname_claim_table_name(self) -> str:
        """Get nickname claim (uniqueness) table name"""
        return self.get_parameter('nickname-claim-table-name', f'NicknameClaims-{self.environment}')

    # Availability pipeline tuning
    @property
    def availability_cache_ttl(self) -> float:
        """Seconds an availability answer stays cached"""
        return self.get_float_parameter('availability-cache-ttl', 30.0)

    @property
    def availability_cache_max_size(self) -> int:
        return self.get_int_parameter('availability-cache-max-size', 200)

    @property
    def profile_cache_ttl(self) -> float:
        """Seconds a profile lookup stays cached"""
        return self.get_float_parameter('profile-cache-ttl', 300.0)

    @property
    def profile_cache_max_size(self) -> int:
        return self.get_int_parameter('profile-cache-max-size', 100)

    @property
    def availability_rate_limit(self) -> int:
        """Availability checks allowed per key inside one window"""
        return self.get_int_parameter('availability-rate-limit', 5)

    @property
    def availability_rate_window(self) -> float:
        return self.get_float_parameter('availability-rate-window', 1.0)

    @property
    def caller_rate_limit(self) -> int:
        """Availability checks allowed per caller identity inside one window"""
        return self.get_int_parameter('caller-rate-limit', 20)

    @property
    def caller_rate_window(self) -> float:
        return self.get_float_parameter('caller-rate-window', 60.0)

    @property
    def profile_search_rate_limit(self) -> int:
        return self.get_int_parameter('profile-search-rate-limit', 10)

    @property
    def profile_search_rate_window(self) -> float:
        return self.get_float_parameter('profile-search-rate-window', 1.0)

    @property
    def update_rate_limit(self) -> int:
        return self.get_int_parameter('update-rate-limit', 10)

    @property
    def update_rate_window(self) -> float:
        return self.get_float_parameter('update-rate-window', 60.0)

    @property
    def query_timeout(self) -> float:
        """Seconds before a store call is abandoned"""
        return self.get_float_parameter('query-timeout', 5.0)

    @property
    def max_retries(self) -> int:
        return self.get_int_parameter('max-retries', 2)

    @property
    def retry_delay(self) -> float:
        """Base delay in seconds between store retries"""
        return self.get_float_parameter('retry-delay', 1.0)

    @property
    def exponential_backoff(self) -> bool:
        return self.get_bool_parameter('exponential-backoff', True)

    @property
    def debounce_delay(self) -> float:
        """Quiet period in seconds before a typed nickname is checked"""
        return self.get_float_parameter('debounce-delay', 0.5)

    @property
    def cleanup_interval(self) -> float:
        """Seconds between cache/rate-limiter sweeps"""
        return self.get_float_parameter('cleanup-interval', 300.0)

    @property
    def slow_operation_threshold(self) -> float:
        """Seconds after which a store lookup is reported as slow"""
        return self.get_float_parameter('slow-operation-threshold', 0.2)

    @property
    def enable_debug_logging(self) -> bool:
        """Get debug logging flag"""
        return self.get_bool_parameter('enable-debug-logging', False)


# Global configuration instance
config = Config()
