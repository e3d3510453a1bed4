"""
Service container for dependency injection
"""
from typing import Dict, Any
from .availability_service import NicknameAvailabilityService
from .profile_store import DynamoProfileStore


class ServiceContainer:
    """
    Simple service container for dependency injection
    Provides lazy loading so caches and rate limiters live as long as the
    process (one warm Lambda container) and no longer
    """

    def __init__(self):
        self._services: Dict[str, Any] = {}

    def get_service(self, service_name: str):
        """
        Get service instance with lazy initialization

        Args:
            service_name: Name of the service to retrieve

        Returns:
            Service instance

        Raises:
            ValueError: If service is unknown
        """
        if service_name not in self._services:
            self._services[service_name] = self._create_service(service_name)

        return self._services[service_name]

    def _create_service(self, service_name: str):
        if service_name == 'profile_store':
            return DynamoProfileStore()
        elif service_name == 'availability_service':
            return NicknameAvailabilityService(self.get_service('profile_store'))
        else:
            raise ValueError(f"Unknown service: {service_name}")

    def register_service(self, service_name: str, service_instance):
        """
        Register a service instance

        Args:
            service_name: Name of the service
            service_instance: Service instance to register
        """
        self._services[service_name] = service_instance

    def clear_services(self):
        """Clear all cached services (useful for testing)"""
        self._services.clear()


# Global service container instance
_service_container = ServiceContainer()


def get_service(service_name: str):
    """Get service from global container"""
    return _service_container.get_service(service_name)


def register_service(service_name: str, service_instance):
    """Register service in global container"""
    _service_container.register_service(service_name, service_instance)


def clear_services():
    """Clear all services (useful for testing)"""
    _service_container.clear_services()
