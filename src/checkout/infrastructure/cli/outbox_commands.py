"""CLI commands for the outbox relay."""

from __future__ import annotations

import click

from checkout.application.relay_outbox import OutboxRelay
from checkout.domain.exceptions import DomainException
from checkout.infrastructure.bootstrap import relay_worker, settings, unit_of_work
from checkout.infrastructure.messaging.pika_broker import PikaMessageBroker


@click.command("relay")
@click.option("--once", is_flag=True, help="Run a single cycle and exit.")
def outbox_relay(once: bool) -> None:
    """Publish unpublished outbox events to RabbitMQ."""
    if not once:
        worker = relay_worker()
        click.echo("Relaying outbox events; press Ctrl+C to stop.")
        try:
            worker.run()
        except KeyboardInterrupt:
            worker.stop()
        except DomainException as exc:
            raise click.ClickException(str(exc))
        return

    config = settings()
    try:
        with PikaMessageBroker(config.rabbitmq_url, config.events_exchange) as broker:
            relay = OutboxRelay(unit_of_work(), broker, batch_size=config.outbox_batch_size)
            published = relay.run_once()
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Published {published} event(s).")
