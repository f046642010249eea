"""Management commands for the clinic scheduling backend."""

from __future__ import annotations

import logging
from typing import Optional

import click

from clinic.controllers.payload_helpers import (
    parse_appointment_payload,
    parse_doctor_payload,
)
from clinic.core.clock import fixed_clock
from clinic.core.exceptions import InvalidStatusTransition, StoreError
from clinic.db.session import create_tables
from clinic.main import build_services

logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")


def _echo_result(result) -> None:
    click.echo(result.message)
    if not result.success:
        raise SystemExit(1)


class ClinicGroup(click.Group):
    """Command group that turns store failures into exit status 2."""

    def invoke(self, ctx: click.Context):
        try:
            return super().invoke(ctx)
        except StoreError as e:
            logging.error("Store failure: %s", e.message)
            ctx.exit(2)


@click.group(cls=ClinicGroup)
def cli() -> None:
    """Entry point for management commands."""


@cli.command("init-db")
def init_db() -> None:
    """Create the doctors and appointments tables if missing."""
    create_tables()
    logging.info("Database tables ensured.")


@cli.command("add-doctor")
@click.option("--first-name", required=True)
@click.option("--last-name", required=True)
@click.option("--specialty", required=True)
@click.option("--phone", "phone_number", required=True)
@click.option("--email", required=True)
@click.option("--shift-start", required=True, help="HH:MM or HH:MM:SS")
@click.option("--shift-end", required=True, help="HH:MM or HH:MM:SS")
def add_doctor(**options) -> None:
    """Admit a doctor, printing the success or failure message."""
    request, parsed = parse_doctor_payload(options)
    if request is None:
        raise click.ClickException("; ".join(parsed.errors))
    _echo_result(_services().doctors.admit_doctor(request))


@cli.command("schedule")
@click.option("--patient", "patient_name", required=True)
@click.option("--doctor-id", required=True, type=int)
@click.option("--at", "appointment_time", required=True, help="ISO 8601 date-time")
@click.option("--reason", "reason_for_visit", required=True)
@click.option("--duration", "duration_minutes", default=30, show_default=True, type=int)
@click.option("--room", "clinic_room", default=None)
def schedule(**options) -> None:
    """Schedule an appointment, printing the success or failure message."""
    request, parsed = parse_appointment_payload(options)
    if request is None:
        raise click.ClickException("; ".join(parsed.errors))
    _echo_result(_services().scheduler.schedule_appointment(request))


@cli.command("complete")
@click.argument("appointment_id", type=int)
def complete(appointment_id: int) -> None:
    """Mark a Scheduled appointment as Completed."""
    _transition(appointment_id, complete=True)


@cli.command("cancel")
@click.argument("appointment_id", type=int)
def cancel(appointment_id: int) -> None:
    """Mark a Scheduled appointment as Cancelled."""
    _transition(appointment_id, complete=False)


@cli.command("weekly-report")
@click.option("--specialty", required=True)
def weekly_report(specialty: str) -> None:
    """Print this week's scheduled minutes and outcome counts for a specialty."""
    reports = _services().reports
    now = fixed_clock(reports.clock())
    week_start, week_end = reports.current_week(now)
    minutes = reports.weekly_specialty_utilization(specialty, now=now)
    completed, cancelled = reports.weekly_specialty_performance(specialty, now=now)
    click.echo(f"{specialty} {week_start:%Y-%m-%d} to {week_end:%Y-%m-%d}")
    click.echo(f"  scheduled minutes: {minutes}")
    click.echo(f"  completed: {completed}  cancelled: {cancelled}")


_cached_services: Optional[object] = None


def _services():
    global _cached_services
    if _cached_services is None:
        create_tables()
        _cached_services = build_services()
    return _cached_services


def _transition(appointment_id: int, complete: bool) -> None:
    scheduler = _services().scheduler
    try:
        if complete:
            changed = scheduler.complete_appointment(appointment_id)
        else:
            changed = scheduler.cancel_appointment(appointment_id)
    except InvalidStatusTransition as e:
        raise click.ClickException(str(e))
    if not changed:
        raise click.ClickException(f"Appointment {appointment_id} not found")
    click.echo(f"Appointment {appointment_id} updated")


if __name__ == "__main__":
    cli()
