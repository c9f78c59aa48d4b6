"""
Stream service composing fetchers and formatters.

Resolves a source to its fetcher, retrieves the raw provider payload and
hands it back in the representation the caller asked for.
"""

from typing import Any, Dict, List, Optional, Union

from logstream.core.exceptions import UnsupportedSourceError
from logstream.core.logging import logger
from .base import OutputFormat, SourceDescriptor, StreamResult, UnifiedLogRecord, utc_now_iso
from .fetchers import FetcherRegistry
from .fetchers.validation import SourceLike
from .formatters import FormatterRegistry


def source_slug(source: SourceLike) -> str:
    if isinstance(source, SourceDescriptor):
        return source.slug
    if isinstance(source, dict):
        return str(source.get("slug") or "")
    return ""


class StreamLogsService:
    """
    Fetch-then-normalize entry point for one-shot reads.

    Both registries are owned by the service instance; pass custom ones to
    add providers or to inject fetchers with a mocked HTTP client.
    """

    def __init__(
        self,
        fetchers: Optional[FetcherRegistry] = None,
        formatters: Optional[FormatterRegistry] = None
    ):
        self.fetchers = fetchers or FetcherRegistry.with_defaults()
        self.formatters = formatters or FormatterRegistry.with_defaults()

    def supported_sources(self) -> List[str]:
        return self.fetchers.available_sources()

    def is_source_supported(self, slug: str) -> bool:
        return self.fetchers.has_fetcher(slug)

    def _unsupported(self, slug: str) -> StreamResult:
        logger.warning(f"Unsupported source requested: {slug!r}")
        return StreamResult.fail(
            f"Unsupported source: {slug}",
            {"availableSources": self.supported_sources()}
        )

    def _format_records(self, slug: str, raw: Any) -> List[UnifiedLogRecord]:
        try:
            formatter = self.formatters.create_formatter(slug)
            return formatter.format(raw)
        except UnsupportedSourceError:
            logger.warning(f"No formatter registered for {slug}")
            return []
        except Exception as e:
            logger.error(f"Formatter for {slug} failed: {e}", exc_info=True)
            return []

    async def stream_logs(
        self,
        source: SourceLike,
        line: Optional[int] = None,
        format: Union[OutputFormat, str] = OutputFormat.TEXT,
        additional_params: Optional[Dict[str, Any]] = None
    ) -> StreamResult:
        """
        Fetch logs for a source and return them in the requested format.

        Args:
            source: Source descriptor (``slug`` selects the provider)
            line: Requested number of entries
            format: ``text``, ``json`` or ``unified``
            additional_params: Provider-specific query options

        Returns:
            StreamResult; fetch failures are passed through unchanged
        """
        slug = source_slug(source)
        if not self.fetchers.has_fetcher(slug):
            return self._unsupported(slug)

        try:
            output_format = OutputFormat(format)
        except ValueError:
            fmt = format.value if isinstance(format, OutputFormat) else format
            return StreamResult.fail(
                f"Unsupported output format: {fmt}",
                {"supportedFormats": [f.value for f in OutputFormat]}
            )

        fetcher = self.fetchers.create_fetcher(slug)
        fetch_result = await fetcher.fetch_data(source, line=line, additional_params=additional_params)
        if not fetch_result.success:
            logger.warning(f"Fetch failed for {slug}: {fetch_result.error}")
            return StreamResult.fail(fetch_result.error, fetch_result.metadata)

        records = self._format_records(slug, fetch_result.data)
        if output_format == OutputFormat.TEXT:
            data: Any = "\n".join(str(record) for record in records)
        elif output_format == OutputFormat.JSON:
            data = [record.to_dict() for record in records]
        else:
            data = records

        logger.debug(f"Streamed {len(records)} {slug} records as {output_format.value}")
        return StreamResult.ok(
            data,
            {
                **fetch_result.metadata,
                "outputFormat": output_format.value,
                "processedAt": utc_now_iso(),
            }
        )

    def validate_source_configuration(self, source: SourceLike) -> bool:
        slug = source_slug(source)
        if not self.fetchers.has_fetcher(slug):
            return False
        return self.fetchers.create_fetcher(slug).validate_config(source)

    def test_connection(self, source: SourceLike) -> StreamResult:
        """
        Check that a source is configured well enough to fetch from.

        Only the configuration is inspected; no request is made.
        """
        slug = source_slug(source)
        if not self.fetchers.has_fetcher(slug):
            return self._unsupported(slug)

        fetcher = self.fetchers.create_fetcher(slug)
        if fetcher.validate_config(source):
            return StreamResult.ok(
                f"{fetcher.display_name} configuration is valid",
                {"source": slug, "valid": True}
            )
        invalid = fetcher.invalid_config_result(source)
        return StreamResult.fail(invalid.error, {**invalid.metadata, "valid": False})
