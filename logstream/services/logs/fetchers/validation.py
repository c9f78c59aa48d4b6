"""
Configuration validation helpers for provider fetchers.
"""

import json
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union
from urllib.parse import urlparse

from ..base import SourceDescriptor


SourceLike = Union[SourceDescriptor, Mapping[str, Any], None]


def resolve_config(source: SourceLike) -> Dict[str, Any]:
    """
    Extract the provider config mapping from a descriptor.

    Accepts a SourceDescriptor, a descriptor-shaped mapping (with ``slug``
    and ``config`` keys) or a bare config mapping.
    """
    if source is None:
        return {}
    if isinstance(source, SourceDescriptor):
        config = source.config
    elif isinstance(source, Mapping):
        if "config" in source and isinstance(source.get("config"), Mapping):
            config = source["config"]
        else:
            config = source
    else:
        return {}
    return dict(config) if isinstance(config, Mapping) else {}


def validate_required_fields(config: Mapping[str, Any], required_fields: Iterable[str]) -> List[str]:
    """Return the required fields that are absent or blank."""
    missing = []
    for field in required_fields:
        value = config.get(field)
        if value is None or (isinstance(value, str) and not value.strip()):
            missing.append(field)
        elif isinstance(value, (dict, list)) and not value:
            missing.append(field)
    return missing


def get_config_value(config: Mapping[str, Any], key: str, default: Any = None) -> Any:
    value = config.get(key)
    return default if value is None else value


def is_http_url(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    parsed = urlparse(value.strip())
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def parse_json_object(value: Any) -> Optional[Dict[str, Any]]:
    """Parse a JSON object given as a string or mapping; None when it is not one."""
    if isinstance(value, Mapping):
        return dict(value)
    if isinstance(value, str):
        try:
            parsed = json.loads(value)
        except ValueError:
            return None
        return parsed if isinstance(parsed, dict) else None
    return None


def clamp_limit(requested: Optional[int], default: int, maximum: int) -> int:
    """Clamp a requested line/limit count to the provider's documented range."""
    try:
        value = int(requested) if requested else default
    except (TypeError, ValueError):
        value = default
    return max(1, min(value, maximum))
