"""
logstream - unified log aggregation across third-party telemetry providers.
"""

__version__ = "0.1.0"
