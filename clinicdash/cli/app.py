"""
Main CLI application using Typer.
"""

import asyncio
import logging
from pathlib import Path
from typing import Annotated, Optional

import pendulum
import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..adapters.memory_store import InMemoryClinicStore
from ..config import AppConfig, load_config
from ..domain.aggregation import DashboardAggregator
from ..domain.availability import AvailabilityResolver
from ..domain.exceptions import ClinicDashError
from ..domain.models import AnalyticsQuery, DashboardSnapshot, format_currency
from ..services.dashboard import DashboardService
from ..services.doctors import DoctorService

app = typer.Typer(
    name="clinicdash",
    help="Clinic dashboard analytics and doctor availability",
    add_completion=False
)

console = Console()

ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml"),
]
DataOption = Annotated[
    Optional[Path],
    typer.Option("--data", help="JSON data file. Defaults to the configured or bundled sample data."),
]
ClinicOption = Annotated[
    Optional[str],
    typer.Option("--clinic", help="Clinic id. Defaults to default_clinic_id from the config."),
]


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging.")] = False,
):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _load(config_file: Optional[Path], data_file: Optional[Path]):
    """Load configuration and the store it points to."""
    config = load_config(config_file)
    store = InMemoryClinicStore.load_from_json(
        data_file or config.get_data_file(),
        timezone=config.timezone,
    )
    return config, store


def _determine_reporting_range(
    *,
    config: AppConfig,
    start_option: Optional[str],
    end_option: Optional[str]
):
    """
    Resolve the reporting window from explicit dates or the default range.
    Returns (start_date, end_date).
    """
    tz = config.timezone

    if start_option:
        try:
            start_date = pendulum.from_format(start_option, "YYYY-MM-DD", tz=tz).start_of("day")
        except ValueError as e:
            console.print(f"[red]Erro ao interpretar a data inicial: {e}[/red]")
            raise typer.Exit(1)
    else:
        start_date = pendulum.now(tz).start_of("day")

    if end_option:
        try:
            end_date = pendulum.from_format(end_option, "YYYY-MM-DD", tz=tz).end_of("day")
        except ValueError as e:
            console.print(f"[red]Erro ao interpretar a data final: {e}[/red]")
            raise typer.Exit(1)
    else:
        end_date = start_date.add(days=config.dashboard.default_range_days).end_of("day")

    if end_date < start_date:
        console.print("[red]Erro: a data final deve ser posterior à data inicial.[/red]")
        raise typer.Exit(1)

    return start_date, end_date


def _render_dashboard(snapshot: DashboardSnapshot) -> None:
    console.print(Panel.fit(
        f"[bold]Faturamento:[/bold] {snapshot.format_total_revenue()}\n"
        f"[bold]Agendamentos:[/bold] {snapshot.total_appointments}\n"
        f"[bold]Pacientes:[/bold] {snapshot.total_patients}\n"
        f"[bold]Médicos:[/bold] {snapshot.total_doctors}",
        title=f"Dashboard {snapshot.clinic_id} ({snapshot.reporting_window})"
    ))

    doctors_table = Table(title="Top médicos", show_header=True, header_style="bold cyan")
    doctors_table.add_column("Médico", style="bold yellow")
    doctors_table.add_column("Especialidade", style="dim")
    doctors_table.add_column("Agendamentos", justify="right")
    for ranking in snapshot.top_doctors:
        doctors_table.add_row(ranking.name, ranking.specialty, str(ranking.appointment_count))
    console.print(doctors_table)

    specialties_table = Table(title="Top especialidades", show_header=True, header_style="bold cyan")
    specialties_table.add_column("Especialidade", style="bold yellow")
    specialties_table.add_column("Agendamentos", justify="right")
    for ranking in snapshot.top_specialties:
        specialties_table.add_row(ranking.specialty, str(ranking.appointment_count))
    console.print(specialties_table)

    series_table = Table(
        title=f"Agendamentos por dia ({snapshot.rolling_window})",
        show_header=True,
        header_style="bold cyan"
    )
    series_table.add_column("Data")
    series_table.add_column("Agendamentos", justify="right")
    series_table.add_column("Faturamento", justify="right")
    for point in snapshot.daily_series:
        series_table.add_row(
            point.date.strftime("%d/%m/%Y"),
            str(point.appointment_count),
            format_currency(point.revenue_in_cents),
        )
    console.print(series_table)


@app.command()
def dashboard(
    clinic: ClinicOption = None,
    start: Annotated[Optional[str], typer.Option("--from", help="Start date (YYYY-MM-DD)")] = None,
    end: Annotated[Optional[str], typer.Option("--to", help="End date (YYYY-MM-DD)")] = None,
    config_file: ConfigOption = None,
    data_file: DataOption = None,
):
    """
    Show revenue, volume and rankings for a clinic.

    Examples:

        clinicdash dashboard --clinic clinic-centro

        clinicdash dashboard --clinic clinic-centro --from 2024-01-01 --to 2024-01-31
    """
    try:
        config, store = _load(config_file, data_file)
        clinic_id = config.resolve_clinic_id(clinic)

        date_from, date_to = _determine_reporting_range(
            config=config,
            start_option=start,
            end_option=end
        )

        service = DashboardService(
            appointment_store=store,
            doctor_store=store,
            patient_store=store,
            aggregator=DashboardAggregator(top_doctors_limit=config.dashboard.top_doctors_limit),
            timezone=config.timezone,
            rolling_window_days=config.dashboard.rolling_window_days,
        )
        snapshot = asyncio.run(service.compute_dashboard(
            AnalyticsQuery(clinic_id=clinic_id, date_from=date_from, date_to=date_to)
        ))

        console.print()
        _render_dashboard(snapshot)
        console.print()

    except (FileNotFoundError, ValueError, ClinicDashError) as e:
        console.print(f"[bold red]Erro:[/bold red] Dashboard indisponível: {e}")
        raise typer.Exit(1)


@app.command()
def doctors(
    clinic: ClinicOption = None,
    config_file: ConfigOption = None,
    data_file: DataOption = None,
):
    """
    List a clinic's doctors with their availability and price.
    """
    try:
        config, store = _load(config_file, data_file)
        clinic_id = config.resolve_clinic_id(clinic)
        resolver = AvailabilityResolver(config.timezone)
        service = DoctorService(store, resolver=resolver)

        roster = asyncio.run(service.list_by_clinic(clinic_id))

        if not roster:
            console.print("[yellow]Nenhum médico cadastrado nesta clínica.[/yellow]")
            return

        table = Table(
            title="Médicos",
            show_header=True,
            header_style="bold cyan"
        )
        table.add_column("ID", style="dim")
        table.add_column("Nome", style="bold yellow")
        table.add_column("Especialidade")
        table.add_column("Dias")
        table.add_column("Horário")
        table.add_column("Consulta", justify="right")

        for doctor in roster:
            window = resolver.resolve(doctor.availability)
            table.add_row(
                doctor.id,
                doctor.name,
                doctor.specialty,
                window.format_days(),
                window.format_hours(),
                doctor.format_price(),
            )

        console.print()
        console.print(table)
        console.print()

    except (FileNotFoundError, ValueError, ClinicDashError) as e:
        console.print(f"[bold red]Erro:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def availability(
    doctor_id: Annotated[str, typer.Argument(help="Doctor id")],
    clinic: ClinicOption = None,
    config_file: ConfigOption = None,
    data_file: DataOption = None,
):
    """
    Show the next occurrence of a doctor's weekly availability.
    """
    try:
        config, store = _load(config_file, data_file)
        clinic_id = config.resolve_clinic_id(clinic)
        service = DoctorService(store, resolver=AvailabilityResolver(config.timezone))

        doctor = asyncio.run(service.get(clinic_id, doctor_id))
        window = asyncio.run(service.availability(clinic_id, doctor_id))

        console.print(Panel.fit(
            f"[bold]{doctor.name}[/bold] ({doctor.specialty})\n\n"
            f"[bold]Dias:[/bold] {window.format_days()}\n"
            f"[bold]Horário:[/bold] {window.format_hours()}\n"
            f"[bold]Janela atual ou próxima:[/bold] "
            f"{window.start.format('DD/MM/YYYY HH:mm')} - {window.end.format('DD/MM/YYYY HH:mm')}\n"
            f"[bold]Consulta:[/bold] {doctor.format_price()}",
            title="Disponibilidade"
        ))

    except (FileNotFoundError, ValueError, ClinicDashError) as e:
        console.print(f"[bold red]Erro:[/bold red] Disponibilidade indisponível: {e}")
        raise typer.Exit(1)


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]clinicdash[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
