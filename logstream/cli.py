"""Command line interface for logstream"""

import asyncio
import json
from typing import Any, Dict, List, Optional

import click
import yaml
from tabulate import tabulate

from logstream.core.config import settings
from logstream.services.logs import (
    ActivityTracker, LogPollingCoordinator, OutputFormat, SourceDescriptor, StreamLogsService
)
from logstream.services.logs.poll_coordinator import LOGS_CHANGED, select_new_records


def load_descriptors(file_path: str) -> List[SourceDescriptor]:
    """
    Load source descriptors from a JSON or YAML file.

    The file may hold a single descriptor, a list of them, or a mapping
    with a ``sources`` list.
    """
    with open(file_path, 'r') as f:
        if file_path.endswith('.json'):
            data = json.load(f)
        else:
            data = yaml.safe_load(f)

    if isinstance(data, dict) and 'sources' in data:
        data = data['sources']
    if isinstance(data, dict):
        data = [data]
    if not isinstance(data, list) or not all(isinstance(item, dict) for item in data):
        raise click.ClickException(f"{file_path} does not contain source descriptors")
    return [SourceDescriptor.from_dict(item) for item in data]


def pick_descriptor(descriptors: List[SourceDescriptor], source_id: Optional[str]) -> SourceDescriptor:
    if not descriptors:
        raise click.ClickException("No sources defined")
    if source_id is None:
        return descriptors[0]
    for descriptor in descriptors:
        if descriptor.id == source_id:
            return descriptor
    raise click.ClickException(f"Source {source_id} not found")


def render(data: Any, output: str, headers: Optional[List[str]] = None,
           fields: Optional[List[str]] = None) -> str:
    """Render rows as a table, JSON or YAML"""
    if output == 'json':
        return json.dumps(data, indent=2, default=str)
    if output == 'yaml':
        return yaml.dump(data, default_flow_style=False)

    rows = data if isinstance(data, list) else [data]
    if not rows:
        return "No records found"
    fields = fields or list(rows[0].keys())
    table = [[row.get(field, '-') for field in fields] for row in rows]
    return tabulate(table, headers=headers or [f.upper() for f in fields], tablefmt='simple')


@click.group()
@click.option('--output', '-o', type=click.Choice(['table', 'json', 'yaml']),
              default='table', help='Output format')
@click.pass_context
def cli(ctx, output):
    """Logstream - unified logs from third-party providers"""
    ctx.obj = {'output_format': output, 'service': StreamLogsService()}


@cli.command()
@click.option('--host', default='127.0.0.1', help='Bind address')
@click.option('--port', default=8000, type=int, help='Bind port')
@click.option('--reload', is_flag=True, help='Reload on code changes')
def serve(host: str, port: int, reload: bool):
    """Run the HTTP/WebSocket API"""
    import uvicorn
    uvicorn.run("logstream.main:app", host=host, port=port, reload=reload,
                log_level=settings.log_level.lower())


@cli.command()
@click.pass_context
def sources(ctx):
    """List supported source types"""
    service: StreamLogsService = ctx.obj['service']
    rows = [{'source': slug} for slug in service.supported_sources()]
    click.echo(render(rows, ctx.obj['output_format']))


@cli.command()
@click.argument('descriptor_file', type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def validate(ctx, descriptor_file: str):
    """Validate the configuration of every source in a file"""
    service: StreamLogsService = ctx.obj['service']
    rows = []
    all_valid = True
    for descriptor in load_descriptors(descriptor_file):
        result = service.test_connection(descriptor)
        all_valid = all_valid and result.success
        errors = result.metadata.get('configErrors') or []
        rows.append({
            'id': descriptor.id,
            'source': descriptor.slug,
            'valid': result.success,
            'message': result.data if result.success else result.error,
            'errors': ', '.join(str(error.get('field')) for error in errors) or '-',
        })

    click.echo(render(rows, ctx.obj['output_format']))
    if not all_valid:
        ctx.exit(1)


@cli.command()
@click.argument('descriptor_file', type=click.Path(exists=True, dir_okay=False))
@click.option('--source', 'source_id', help='Source id when the file defines several')
@click.option('--format', 'output_format', type=click.Choice([f.value for f in OutputFormat]),
              default=OutputFormat.TEXT.value, help='Representation of the fetched logs')
@click.option('--line', type=int, help='Number of entries to fetch')
@click.pass_context
def fetch(ctx, descriptor_file: str, source_id: Optional[str], output_format: str, line: Optional[int]):
    """Fetch logs from a source once"""
    service: StreamLogsService = ctx.obj['service']
    descriptor = pick_descriptor(load_descriptors(descriptor_file), source_id)
    result = asyncio.run(service.stream_logs(descriptor, line=line, format=output_format))

    if not result.success:
        click.echo(f"Error: {result.error}", err=True)
        if result.metadata:
            click.echo(json.dumps(result.metadata, indent=2, default=str), err=True)
        ctx.exit(1)

    if output_format == OutputFormat.TEXT.value:
        click.echo(result.data)
    elif output_format == OutputFormat.JSON.value:
        click.echo(json.dumps(result.data, indent=2, default=str))
    else:
        rows = [record.to_dict() for record in result.data]
        click.echo(render(rows, ctx.obj['output_format'],
                          fields=['timestamp', 'level', 'source', 'message']))


async def _watch(service: StreamLogsService, descriptors: List[SourceDescriptor],
                 interval: float, ticks: int, emit) -> Dict[str, Any]:
    coordinator = LogPollingCoordinator(
        service,
        activity_tracker=ActivityTracker(),
        poll_interval=interval,
        throttle_window=0
    )
    await coordinator.update_sources(descriptors)
    last_printed: Dict[str, Optional[str]] = {}

    def print_new(source_id: str):
        fresh = select_new_records(coordinator.get_logs(source_id), last_printed.get(source_id))
        for record in reversed(fresh):
            emit(str(record))
        if fresh:
            last_printed[source_id] = fresh[0].id

    def on_change(event: str, source_id: str):
        if event == LOGS_CHANGED:
            print_new(source_id)

    for descriptor in descriptors:
        await coordinator.register_source(descriptor.id)
        print_new(descriptor.id)

    coordinator.add_listener(on_change)
    count = 0
    try:
        while ticks <= 0 or count < ticks:
            await asyncio.sleep(interval)
            await coordinator.poll_once()
            count += 1
    finally:
        status = coordinator.get_status()
        await coordinator.stop()
    return status


@cli.command()
@click.argument('descriptor_file', type=click.Path(exists=True, dir_okay=False))
@click.option('--interval', type=float, default=settings.poll_interval_ms / 1000,
              help='Seconds between polls')
@click.option('--ticks', type=int, default=0, help='Stop after this many polls (0 = forever)')
@click.pass_context
def watch(ctx, descriptor_file: str, interval: float, ticks: int):
    """Poll every source in a file and print new records as they arrive"""
    service: StreamLogsService = ctx.obj['service']
    descriptors = load_descriptors(descriptor_file)
    try:
        status = asyncio.run(_watch(service, descriptors, interval, ticks, click.echo))
    except KeyboardInterrupt:
        return

    failing = {source_id: info['last_error'] for source_id, info in status.items() if info['last_error']}
    for source_id, error in failing.items():
        click.echo(f"Warning: {source_id}: {error}", err=True)


if __name__ == '__main__':
    cli()
