"""
Command-line interface for version-alerts.

Provides commands to initialize the database, serve the API, check
dependencies and run alert triggers by hand.

Usage:
    version-alerts init-db            # Create tables
    version-alerts serve              # Run the API server
    version-alerts health             # Check service health
    version-alerts trigger-template   # Alert services of a template
    version-alerts trigger-plugin     # Alert installations of a plugin
"""

import asyncio
import sys

import click

from src.config.settings import get_settings
from src.observability.logging import bind_context, get_logger, setup_logging
from src.observability.metrics import get_metrics


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
def main(debug: bool) -> None:
    """Version Alerts - outdated template and plugin version tracking."""
    if debug:
        import os
        os.environ["LOG_LEVEL"] = "DEBUG"
        get_settings.cache_clear()

    setup_logging()


@main.command("init-db")
def init_db() -> None:
    """Initialize the database schema."""
    from src.services.alert_runtime import AlertRuntime

    async def run():
        runtime = AlertRuntime()
        await runtime.database.connect()
        try:
            await runtime.init_schema()
        finally:
            await runtime.database.close()

        click.echo("Database initialized successfully")

    asyncio.run(run())


@main.command()
def health() -> None:
    """Check health of all dependencies."""
    logger = get_logger(__name__)

    async def check():
        results: dict[str, bool] = {}

        # Check Redis
        try:
            from src.notifications.producer import TechDebtProducer
            producer = TechDebtProducer()
            await producer.connect()
            results["redis"] = bool(await producer.redis.ping())
            await producer.close()
        except Exception as e:
            results["redis"] = False
            logger.error("Redis health check failed", error=str(e))

        # Check PostgreSQL
        try:
            from src.storage.database import Database
            db = Database()
            await db.connect()
            results["postgres"] = await db.health_check()
            await db.close()
        except Exception as e:
            results["postgres"] = False
            logger.error("Postgres health check failed", error=str(e))

        click.echo("\nHealth Check Results:")
        click.echo("-" * 40)

        for name, status in results.items():
            icon = "✓" if status else "✗"
            color = "green" if status else "red"
            click.echo(click.style(f"  {icon} {name}: {status}", fg=color))

        click.echo("-" * 40)

        if all(results.values()):
            click.echo(click.style("All core services healthy!", fg="green"))
            sys.exit(0)
        else:
            click.echo(click.style("Some services unhealthy!", fg="red"))
            sys.exit(1)

    asyncio.run(check())


@main.command()
@click.option("--host", default=None, help="API server host")
@click.option("--port", default=None, type=int, help="API server port")
@click.option("--reload", is_flag=True, help="Enable auto-reload (dev only)")
@click.option("--metrics-port", default=None, type=int, help="Metrics server port")
def serve(host: str | None, port: int | None, reload: bool, metrics_port: int | None) -> None:
    """Start the version alerts API server."""
    import uvicorn

    settings = get_settings()
    host = host or settings.api_host
    port = port or settings.api_port
    metrics_port = metrics_port or settings.metrics_port

    # Start metrics server on separate port
    get_metrics().start_server(port=metrics_port)

    click.echo(f"Starting API server on {host}:{port}")
    click.echo(f"Metrics available on http://localhost:{metrics_port}/metrics")
    click.echo(f"API docs available on http://localhost:{port}/docs")

    uvicorn.run(
        "src.api.app:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        log_level="info",
    )


def _echo_alerts(alerts) -> None:
    click.echo(f"Created {len(alerts)} alert(s)")
    for alert in alerts:
        click.echo(
            f"  {alert.id}  {alert.resource_id}  {alert.type}  "
            f"{alert.outdated_version} -> {alert.latest_version}"
        )


@main.command("trigger-template")
@click.argument("template_resource_id")
@click.option("--outdated-version", default=None, help="Previous template version")
@click.option("--latest-version", required=True, help="New template version")
@click.option("--user-id", required=True, help="Acting user id")
def trigger_template(
    template_resource_id: str,
    outdated_version: str | None,
    latest_version: str,
    user_id: str,
) -> None:
    """Create TemplateVersion alerts for services of a template."""
    from src.outdated_alerts.errors import AlertValidationError
    from src.services.alert_runtime import AlertRuntime

    bind_context(template_resource_id=template_resource_id, user_id=user_id)

    async def run():
        async with AlertRuntime() as runtime:
            return await runtime.alert_service.trigger_alerts_for_template_version(
                template_resource_id, outdated_version, latest_version, user_id,
            )

    try:
        alerts = asyncio.run(run())
    except AlertValidationError as e:
        raise click.ClickException(str(e))

    _echo_alerts(alerts)


@main.command("trigger-plugin")
@click.argument("project_id")
@click.argument("plugin_id")
@click.option("--new-version", required=True, help="New plugin version")
@click.option("--user-id", required=True, help="Acting user id")
def trigger_plugin(
    project_id: str,
    plugin_id: str,
    new_version: str,
    user_id: str,
) -> None:
    """Create PluginVersion alerts for installations of a plugin."""
    from src.outdated_alerts.errors import AlertValidationError
    from src.services.alert_runtime import AlertRuntime

    bind_context(project_id=project_id, plugin_id=plugin_id, user_id=user_id)

    async def run():
        async with AlertRuntime() as runtime:
            return await runtime.alert_service.trigger_alerts_for_new_plugin_version(
                project_id, plugin_id, new_version, user_id,
            )

    try:
        alerts = asyncio.run(run())
    except AlertValidationError as e:
        raise click.ClickException(str(e))

    _echo_alerts(alerts)


if __name__ == "__main__":
    main()
