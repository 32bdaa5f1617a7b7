"""
CLI interface for Flowline Core
"""
import json
import os
import sys
import time

import click
import uvicorn
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich import box

from config import Config
from src.core.bootstrap import get_container
from src.core.execution.node_registry import list_node_types
from src.core.execution.runner import WorkflowRunner
from src.core.workflow import WorkflowFormatError, load_workflow

console = Console()

STATUS_STYLES = {
    'success': 'bold green',
    'failed': 'bold red',
    'running': 'bold yellow',
}


def _status(status: str) -> str:
    style = STATUS_STYLES.get(status, 'white')
    return f"[{style}]{status}[/{style}]"


@click.group()
def cli():
    """Flowline Core - workflow execution engine"""
    pass


@cli.command()
@click.option('--port', default=None, type=int, help='Port to run the API server on')
@click.option('--mode', type=click.Choice(['solo', 'prod']), default=None, help='Mode: solo or prod')
@click.option('--host', default=None, help='Host to bind to')
def serve(port, mode, host):
    """Run the API server"""
    if mode:
        os.environ['FLOWLINE_CORE_MODE'] = mode
        Config.MODE = mode

    if not Config.validate():
        click.echo("❌ Configuration validation failed. Please check your environment variables.")
        sys.exit(1)

    host = host or Config.API_HOST
    port = port or Config.API_PORT

    click.echo(f"🚀 Starting Flowline Core API server in {Config.MODE} mode...")
    click.echo(f"   Host: {host}")
    click.echo(f"   Port: {port}")

    from src.api.server import app
    uvicorn.run(app, host=host, port=port)


@cli.command()
@click.argument('workflow_file', type=click.Path(exists=True, dir_okay=False))
@click.option('--trigger-data', default=None, help='JSON payload handed to the trigger node')
@click.option('--triggered-by', type=click.Choice(['manual', 'webhook', 'schedule']), default='manual',
              help='Trigger reason recorded on the execution')
@click.option('--save/--no-save', default=False, help='Also save the workflow definition to storage')
@click.option('--mode', type=click.Choice(['solo', 'prod']), default=None, help='Mode: solo or prod')
def run(workflow_file, trigger_data, triggered_by, save, mode):
    """Execute a workflow JSON file once"""
    try:
        workflow = load_workflow(workflow_file)
    except (OSError, WorkflowFormatError) as e:
        click.echo(f"❌ Could not load workflow: {e}")
        sys.exit(1)

    payload = None
    if trigger_data:
        try:
            payload = json.loads(trigger_data)
        except json.JSONDecodeError as e:
            click.echo(f"❌ --trigger-data is not valid JSON: {e}")
            sys.exit(1)

    container = get_container(mode=mode)
    if save:
        container.storage.save_workflow(workflow)

    runner = WorkflowRunner(container.storage, container=container)
    with console.status(f"[bold cyan]Running {workflow['name']}...", spinner="dots"):
        execution = runner.run_sync(workflow, triggered_by=triggered_by, trigger_data=payload)

    table = Table(box=box.SIMPLE_HEAVY)
    table.add_column("Node", style="bold")
    table.add_column("Status")
    table.add_column("Duration", justify="right")
    table.add_column("Error", style="red")
    for result in execution['node_results']:
        table.add_row(
            result['node_name'],
            _status(result['status']),
            f"{result.get('duration', 0)}ms",
            result.get('error', ''),
        )

    summary = (
        f"Execution [bold]{execution['id']}[/bold]\n"
        f"Status: {_status(execution['status'])}   Duration: {execution.get('duration', 0)}ms"
    )
    if execution.get('error'):
        summary += f"\nError: [red]{execution['error']}[/red]"

    console.print(Panel(summary, title=f"[bold cyan]{workflow['name']}[/bold cyan]", box=box.ROUNDED))
    console.print(table)

    if execution['status'] != 'success':
        sys.exit(1)


@cli.command()
@click.argument('workflow_file', type=click.Path(exists=True, dir_okay=False))
@click.option('--interval', default=60.0, show_default=True, help='Seconds between runs')
@click.option('--count', default=0, help='Stop after this many runs (0 runs until interrupted)')
@click.option('--mode', type=click.Choice(['solo', 'prod']), default=None, help='Mode: solo or prod')
def schedule(workflow_file, interval, count, mode):
    """Run a workflow repeatedly as a scheduled trigger"""
    try:
        workflow = load_workflow(workflow_file)
    except (OSError, WorkflowFormatError) as e:
        click.echo(f"❌ Could not load workflow: {e}")
        sys.exit(1)

    container = get_container(mode=mode)
    runner = WorkflowRunner(container.storage, container=container)

    click.echo(f"⏱  Scheduling {workflow['name']} every {interval:g}s (Ctrl+C to stop)")
    runs = 0
    try:
        while True:
            execution = runner.run_sync(workflow, triggered_by='schedule')
            runs += 1
            console.print(
                f"#{runs} {execution['id']} {_status(execution['status'])} "
                f"({execution.get('duration', 0)}ms)"
            )
            if count and runs >= count:
                break
            time.sleep(interval)
    except KeyboardInterrupt:
        click.echo("Stopped.")


@cli.command()
@click.option('--workflow-id', default=None, help='Only show executions of this workflow')
@click.option('--limit', default=20, show_default=True, help='Maximum number of executions')
@click.option('--mode', type=click.Choice(['solo', 'prod']), default=None, help='Mode: solo or prod')
def executions(workflow_id, limit, mode):
    """List recent executions"""
    storage = get_container(mode=mode).storage
    records = storage.list_executions(workflow_id=workflow_id, limit=limit)

    if not records:
        click.echo("ℹ️  No executions found.")
        return

    table = Table(box=box.SIMPLE_HEAVY)
    table.add_column("ID")
    table.add_column("Workflow", style="bold")
    table.add_column("Status")
    table.add_column("Trigger")
    table.add_column("Started")
    table.add_column("Duration", justify="right")
    for record in records:
        table.add_row(
            record['id'],
            record.get('workflow_name', record.get('workflow_id', '')),
            _status(record.get('status', '')),
            record.get('triggered_by', ''),
            record.get('start_time', ''),
            f"{record.get('duration') or 0}ms",
        )
    console.print(table)


@cli.command('node-types')
def node_types():
    """List registered node types"""
    table = Table(box=box.SIMPLE_HEAVY)
    table.add_column("Type", style="bold cyan")
    table.add_column("Class")
    table.add_column("Trigger")
    table.add_column("Description", style="dim")
    for definition in list_node_types():
        table.add_row(
            definition['type'],
            definition['name'],
            "yes" if definition['is_trigger'] else "",
            definition.get('description', ''),
        )
    console.print(table)


@cli.command()
def config():
    """Show current configuration"""
    click.echo("Configuration:")
    click.echo(f"   Mode: {Config.MODE}")
    click.echo(f"   Storage Path: {Config.STORAGE_PATH}")
    click.echo(f"   API Host: {Config.API_HOST}")
    click.echo(f"   API Port: {Config.API_PORT}")
    click.echo(f"   Wait cap: {Config.WAIT_MAX_SECONDS:g}s")
    click.echo(f"   Max node visits: {Config.MAX_NODE_VISITS or 'unlimited'}")
    click.echo(f"   HTTP timeout: {Config.HTTP_TIMEOUT:g}s")

    if Config.MODE == 'prod':
        click.echo(f"   Supabase URL: {Config.SUPABASE_URL[:50]}..." if Config.SUPABASE_URL else "   Supabase URL: Not set")
        click.echo(f"   Supabase Key: {'Set' if Config.SUPABASE_KEY else 'Not set'}")


if __name__ == '__main__':
    cli()
