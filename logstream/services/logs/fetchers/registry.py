"""
Registry mapping source types to fetcher factories.

One registry instance is owned by the stream service and handed around
explicitly; new providers can be registered at runtime.
"""

from typing import Callable, Dict, List, Set, Union

from logstream.core.exceptions import UnsupportedSourceError
from ..base import LogSourceType
from .base import Fetcher


FetcherFactory = Callable[[], Fetcher]


def _key(source_type: Union[LogSourceType, str]) -> str:
    return source_type.value if isinstance(source_type, LogSourceType) else str(source_type)


class FetcherRegistry:
    """Runtime map from source type to fetcher factory"""

    def __init__(self):
        self._factories: Dict[str, FetcherFactory] = {}

    @classmethod
    def with_defaults(cls, **fetcher_kwargs) -> "FetcherRegistry":
        """
        Registry pre-populated with every built-in provider.

        Args:
            **fetcher_kwargs: Passed to each fetcher constructor (e.g. a shared ``client``)
        """
        # Import here to avoid circular imports
        from . import DEFAULT_FETCHERS

        registry = cls()
        for fetcher_class in DEFAULT_FETCHERS:
            registry.register_fetcher(
                fetcher_class.source_type,
                lambda fetcher_class=fetcher_class: fetcher_class(**fetcher_kwargs)
            )
        return registry

    def register_fetcher(self, source_type: Union[LogSourceType, str], factory: FetcherFactory) -> None:
        """Register (or replace) the factory for a source type."""
        self._factories[_key(source_type)] = factory

    def unregister_fetcher(self, source_type: Union[LogSourceType, str]) -> None:
        self._factories.pop(_key(source_type), None)

    def create_fetcher(self, source_type: Union[LogSourceType, str]) -> Fetcher:
        """
        Build a fetcher for a source type.

        Raises:
            UnsupportedSourceError: If no factory is registered for the type
        """
        factory = self._factories.get(_key(source_type))
        if factory is None:
            raise UnsupportedSourceError(_key(source_type), self._factories.keys())
        return factory()

    def has_fetcher(self, source_type: Union[LogSourceType, str]) -> bool:
        return _key(source_type) in self._factories

    def list_supported(self) -> Set[str]:
        return set(self._factories)

    def available_sources(self) -> List[str]:
        """Registered source types in registration order"""
        return list(self._factories)
