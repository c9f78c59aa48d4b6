"""
Provider formatters normalizing raw payloads into UnifiedLogRecords.
"""

from .base import Formatter
from .cloudwatch import CloudWatchFormatter
from .coolify import CoolifyFormatter
from .gcp import GcpFormatter
from .newrelic import NewRelicFormatter
from .registry import FormatterRegistry
from .sentry import SentryFormatter
from .stripe import StripeFormatter
from .vercel import VercelFormatter

DEFAULT_FORMATTERS = (
    CoolifyFormatter,
    SentryFormatter,
    StripeFormatter,
    CloudWatchFormatter,
    GcpFormatter,
    NewRelicFormatter,
    VercelFormatter,
)

__all__ = [
    'Formatter',
    'FormatterRegistry',
    'CoolifyFormatter',
    'SentryFormatter',
    'StripeFormatter',
    'CloudWatchFormatter',
    'GcpFormatter',
    'NewRelicFormatter',
    'VercelFormatter',
    'DEFAULT_FORMATTERS'
]
