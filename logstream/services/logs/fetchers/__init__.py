"""
Provider fetcher implementations.

Each fetcher validates its provider configuration and performs the
authenticated retrieval, returning a FetchResult instead of raising.
"""

from .base import Fetcher
from .cloudwatch import CloudWatchFetcher
from .coolify import CoolifyFetcher
from .gcp import GcpFetcher
from .newrelic import NewRelicFetcher
from .registry import FetcherRegistry
from .sentry import SentryFetcher
from .stripe import StripeFetcher
from .vercel import VercelFetcher

DEFAULT_FETCHERS = (
    CoolifyFetcher,
    SentryFetcher,
    StripeFetcher,
    CloudWatchFetcher,
    GcpFetcher,
    NewRelicFetcher,
    VercelFetcher,
)

__all__ = [
    'Fetcher',
    'FetcherRegistry',
    'CoolifyFetcher',
    'SentryFetcher',
    'StripeFetcher',
    'CloudWatchFetcher',
    'GcpFetcher',
    'NewRelicFetcher',
    'VercelFetcher',
    'DEFAULT_FETCHERS'
]
