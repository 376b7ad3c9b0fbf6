from typing import TypeVar, Type, Dict, Any, Callable

T = TypeVar('T')


class DependencyContainer:
    """Simple dependency injection container"""

    def __init__(self):
        self._services: Dict[str, Any] = {}
        self._factories: Dict[str, Callable] = {}

    def register_singleton(self, service_class: Type[T], instance: T) -> None:
        """Register a singleton instance"""
        key = self._get_service_key(service_class)
        self._services[key] = instance

    def register_factory(self, service_class: Type[T], factory: Callable[[], T]) -> None:
        """Register a factory; its first result is cached as the singleton"""
        key = self._get_service_key(service_class)
        self._factories[key] = factory

    def get(self, service_class: Type[T]) -> T:
        key = self._get_service_key(service_class)

        if key in self._services:
            return self._services[key]

        if key in self._factories:
            instance = self._factories[key]()
            self._services[key] = instance
            return instance

        raise ValueError(f"Service {service_class.__name__} not registered")

    def is_registered(self, service_class: Type[T]) -> bool:
        key = self._get_service_key(service_class)
        return key in self._services or key in self._factories

    def reset(self) -> None:
        """Drop every registration (used between tests)"""
        self._services.clear()
        self._factories.clear()

    def _get_service_key(self, service_class: Type[T]) -> str:
        return f"{service_class.__module__}.{service_class.__qualname__}"


# Global container instance
container = DependencyContainer()


def get_container():
    """Get dependency container"""
    return container
