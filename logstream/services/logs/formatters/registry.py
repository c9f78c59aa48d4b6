"""
Registry mapping source types to formatter factories.
"""

from typing import Callable, Dict, List, Set, Union

from logstream.core.exceptions import UnsupportedSourceError
from ..base import LogSourceType
from .base import Formatter


FormatterFactory = Callable[[], Formatter]


def _key(source_type: Union[LogSourceType, str]) -> str:
    return source_type.value if isinstance(source_type, LogSourceType) else str(source_type)


class FormatterRegistry:
    """Runtime map from source type to formatter factory"""

    def __init__(self):
        self._factories: Dict[str, FormatterFactory] = {}

    @classmethod
    def with_defaults(cls) -> "FormatterRegistry":
        """Registry pre-populated with every built-in formatter."""
        # Import here to avoid circular imports
        from . import DEFAULT_FORMATTERS

        registry = cls()
        for formatter_class in DEFAULT_FORMATTERS:
            registry.register_formatter(formatter_class.source_type, formatter_class)
        return registry

    def register_formatter(self, source_type: Union[LogSourceType, str], factory: FormatterFactory) -> None:
        self._factories[_key(source_type)] = factory

    def unregister_formatter(self, source_type: Union[LogSourceType, str]) -> None:
        self._factories.pop(_key(source_type), None)

    def create_formatter(self, source_type: Union[LogSourceType, str]) -> Formatter:
        """
        Build a formatter for a source type.

        Raises:
            UnsupportedSourceError: If no factory is registered for the type
        """
        factory = self._factories.get(_key(source_type))
        if factory is None:
            raise UnsupportedSourceError(_key(source_type), self._factories.keys())
        return factory()

    def has_formatter(self, source_type: Union[LogSourceType, str]) -> bool:
        return _key(source_type) in self._factories

    def list_supported(self) -> Set[str]:
        return set(self._factories)

    def available_sources(self) -> List[str]:
        return list(self._factories)
