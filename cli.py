import typer
from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from typing import Optional
from pathlib import Path
import base64
import mimetypes

from weekly_reminders.config import settings
from weekly_reminders.database import SessionLocal, init_db
from weekly_reminders.logging_config import setup_logging
from weekly_reminders import crud
from weekly_reminders.crud.settings import KNOWLEDGE_SHEET_KEY, SCRAPING_PASSWORD_KEY
from weekly_reminders.dates import ScheduleCalculator, parse_db_date, format_display_date, format_week_range, relative_day
from weekly_reminders.pdf_extract import extract_text_from_base64
from weekly_reminders.pipeline import current_time, generate_for_all_groups, generate_for_group, run_scrape
from weekly_reminders.recorder import IngestionRecorder
from weekly_reminders.schemas import DocumentCreate, WEEKLY_MAILING, KNOWLEDGE_SHEET
from weekly_reminders.seed import reset_prompt as reset_prompt_template, seed_defaults
from weekly_reminders.storage import LocalBlobStore
from weekly_reminders.timetable_parser import TimetableParser

app = typer.Typer(help="Weekly Reminders CLI - scrape school mailings and generate daily reminders")
console = Console()

PRIORITY_STYLES = {"high": "bold red", "medium": "yellow", "low": "green"}


def _parse_week(week: Optional[str]):
    if not week:
        return None
    return ScheduleCalculator.monday_of(parse_db_date(week))


def _require_group(db, ref: str):
    group = crud.resolve_year_group(db, ref)
    if not group:
        console.print(f"[red]✗[/red] Year group '{ref}' not found")
        raise typer.Exit(code=1)
    return group


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging")):
    setup_logging("DEBUG" if verbose else settings.log_level)


@app.command()
def init():
    """Initialize database tables"""
    init_db()
    console.print("[green]✓[/green] Database initialized successfully!")


@app.command()
def reset_db():
    """Delete all data and reinitialize database (WARNING: irreversible!)"""
    confirm = typer.confirm("⚠️  This will DELETE ALL DATA. Are you sure?")
    if not confirm:
        console.print("[yellow]Cancelled.[/yellow]")
        return

    from weekly_reminders.database import engine, Base
    import weekly_reminders.models  # noqa: F401
    console.print("[yellow]Dropping all tables...[/yellow]")
    Base.metadata.drop_all(bind=engine)
    console.print("[yellow]Recreating tables...[/yellow]")
    Base.metadata.create_all(bind=engine)
    console.print("[green]✓[/green] Database reset complete! All data deleted.")


@app.command()
def seed():
    """Create default year groups and settings"""
    init_db()
    db = SessionLocal()
    try:
        seed_defaults(db)
        groups = crud.list_year_groups(db)
        console.print(f"[green]✓[/green] Seeded {len(groups)} year groups: {', '.join(g.name for g in groups)}")
    finally:
        db.close()


@app.command()
def scrape():
    """Log into the school site and download this week's mailings"""
    db = SessionLocal()
    try:
        console.print("[yellow]Scraping weekly mailings (this takes a little while)...[/yellow]")
        result = run_scrape(db, blob_store=LocalBlobStore())

        if result.success:
            console.print(f"[green]✓[/green] Scraping completed. {result.documents_processed} of {result.documents_found} documents processed.")
        else:
            console.print(f"[red]✗[/red] Scraping failed: {result.error}")
            raise typer.Exit(code=1)
    finally:
        db.close()


@app.command()
def generate(
    group: Optional[str] = typer.Option(None, "--group", "-g", help="Year group name or ID"),
    all_groups: bool = typer.Option(False, "--all", help="Generate for every year group"),
    week: Optional[str] = typer.Option(None, help="Week start date (YYYY-MM-DD). Default: current mailing week")
):
    """Generate reminders and weekly overview from the mailings"""
    if not group and not all_groups:
        console.print("[red]✗[/red] Pass --group or --all")
        raise typer.Exit(code=1)

    db = SessionLocal()
    try:
        week_start = _parse_week(week)
        if all_groups:
            responses = generate_for_all_groups(db, week_start)
        else:
            responses = [generate_for_group(db, _require_group(db, group).id, week_start)]

        failed = False
        for response in responses:
            if response.success:
                artifact = response.artifact
                console.print(
                    f"[green]✓[/green] {response.year_group_name}: {len(artifact.daily_reminders)} reminders "
                    f"for week of {response.week_start_date} (via {artifact.provider})"
                )
            else:
                failed = True
                console.print(f"[red]✗[/red] {response.year_group_name or group}: {response.error}")
        if failed:
            raise typer.Exit(code=1)
    finally:
        db.close()


@app.command()
def upload(
    file_path: Path = typer.Option(..., "--file", exists=True, dir_okay=False, help="PDF to upload"),
    doc_type: str = typer.Option(WEEKLY_MAILING, "--type", help="weekly_mailing or knowledge_sheet"),
    group: Optional[str] = typer.Option(None, "--group", "-g", help="Year group (omit for school-wide)"),
    week: Optional[str] = typer.Option(None, help="Week start date (YYYY-MM-DD). Default: current mailing week")
):
    """Upload a document manually"""
    if doc_type not in (WEEKLY_MAILING, KNOWLEDGE_SHEET):
        console.print("[red]✗[/red] Invalid type. Use 'weekly_mailing' or 'knowledge_sheet'")
        raise typer.Exit(code=1)

    db = SessionLocal()
    try:
        group_id = _require_group(db, group).id if group else None
        week_start = _parse_week(week) or ScheduleCalculator.week_start(current_time(), publish_day=settings.publish_day)
        content = file_path.read_bytes()
        mime_type = mimetypes.guess_type(file_path.name)[0] or "application/octet-stream"

        recorder = IngestionRecorder(db, LocalBlobStore())
        document = recorder.persist_document(DocumentCreate(
            type=doc_type,
            year_group_id=group_id,
            week_start_date=week_start,
            filename=file_path.name,
            mime_type=mime_type,
            file_size=len(content),
            content_base64=base64.b64encode(content).decode("ascii")
        ))
        console.print(f"[green]✓[/green] Uploaded {document.filename} (ID: {document.id}, version {document.version})")
    finally:
        db.close()


@app.command()
def set_timetable(
    group: str = typer.Option(..., "--group", "-g", prompt="Year group"),
    file_path: Path = typer.Option(..., "--file", exists=True, dir_okay=False, prompt="Timetable file (.csv, .xlsx or .json)")
):
    """Store a year group's timetable"""
    db = SessionLocal()
    try:
        year_group = _require_group(db, group)
        timetable_json = TimetableParser.auto_parse(str(file_path))
        crud.set_timetable(db, year_group.id, timetable_json)
        console.print(f"[green]✓[/green] Timetable saved for {year_group.name}")
    except ValueError as e:
        console.print(f"[red]✗[/red] Error: {e}")
        raise typer.Exit(code=1)
    finally:
        db.close()


@app.command()
def documents(
    doc_type: Optional[str] = typer.Option(None, "--type", help="weekly_mailing or knowledge_sheet"),
    group: Optional[str] = typer.Option(None, "--group", "-g"),
    week: Optional[str] = typer.Option(None, help="Week start date (YYYY-MM-DD)")
):
    """List active documents"""
    db = SessionLocal()
    try:
        group_id = _require_group(db, group).id if group else None
        docs = crud.list_documents(db, doc_type=doc_type, year_group_id=group_id, week_start_date=_parse_week(week))
        if not docs:
            console.print("[yellow]No documents found[/yellow]")
            return

        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("ID", style="dim")
        table.add_column("Type", style="cyan")
        table.add_column("Filename", style="green")
        table.add_column("Week", style="yellow")
        table.add_column("Size", justify="right")
        table.add_column("Version", justify="right")

        for doc in docs:
            table.add_row(
                doc.id,
                doc.type,
                doc.filename,
                str(doc.week_start_date or ""),
                f"{doc.file_size or 0:,}",
                str(doc.version)
            )
        console.print(table)
    finally:
        db.close()


@app.command()
def deactivate_document(document_id: str):
    """Hide a document (documents are never hard-deleted)"""
    db = SessionLocal()
    try:
        document = IngestionRecorder(db).deactivate_document(document_id)
        if document:
            console.print(f"[green]✓[/green] Deactivated {document.filename}")
        else:
            console.print(f"[red]✗[/red] Document {document_id} not found")
            raise typer.Exit(code=1)
    finally:
        db.close()


@app.command()
def extract_text(document_id: str):
    """Print the plain text a text-only provider would see for a document"""
    db = SessionLocal()
    try:
        document = crud.get_document(db, document_id)
        if not document or not document.content_base64:
            console.print(f"[red]✗[/red] Document {document_id} not found or has no content")
            raise typer.Exit(code=1)

        text = document.extracted_text
        if text is None:
            text = extract_text_from_base64(document.content_base64)
            crud.cache_extracted_text(db, document.id, text)
        console.print(text or "[yellow](no extractable text)[/yellow]")
    finally:
        db.close()


@app.command()
def reminders(
    group: str = typer.Option(..., "--group", "-g", prompt="Year group"),
    week: Optional[str] = typer.Option(None, help="Show the whole week starting on this date (YYYY-MM-DD)")
):
    """Show the reminders a parent would see right now (or a whole week)"""
    db = SessionLocal()
    try:
        year_group = _require_group(db, group)
        now = current_time()

        if week:
            week_start = _parse_week(week)
            items = sorted(
                crud.get_reminders_for_week(db, year_group.id, week_start),
                key=lambda r: (r.reminder_date, r.position)
            )
            title = f"{year_group.name} - {format_week_range(week_start)}"
        else:
            display = ScheduleCalculator.display_date(now, publish_day=settings.publish_day, cutoff_hour=settings.cutoff_hour)
            items = crud.get_reminders_for_date(db, year_group.id, display)
            title = f"{year_group.name} - {relative_day(display, now.date())} ({format_display_date(display)})"

        console.print(f"\n[bold]{title}[/bold]\n")
        if not items:
            console.print("[yellow]No reminders found[/yellow]")
            return

        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("Date", style="cyan", width=12)
        table.add_column("Priority")
        table.add_column("Category", style="blue")
        table.add_column("Reminder", style="green")

        for item in items:
            style = PRIORITY_STYLES.get(item.priority, "")
            table.add_row(
                str(item.reminder_date),
                f"[{style}]{item.priority}[/{style}]" if style else item.priority,
                item.category or "",
                f"[bold]{item.title}[/bold]\n{item.description or ''}"
            )
        console.print(table)
    finally:
        db.close()


@app.command()
def overview(
    group: str = typer.Option(..., "--group", "-g", prompt="Year group"),
    week: Optional[str] = typer.Option(None, help="Week start date (YYYY-MM-DD). Default: current mailing week")
):
    """Show the weekly overview for a year group"""
    db = SessionLocal()
    try:
        year_group = _require_group(db, group)
        week_start = _parse_week(week) or ScheduleCalculator.week_start(current_time(), publish_day=settings.publish_day)
        data = crud.get_weekly_overview(db, year_group.id, week_start)
        if not data:
            console.print(f"[yellow]No overview for {year_group.name}, week of {week_start}[/yellow]")
            return

        console.print(Panel(data.summary or "", title=f"{year_group.name} - {format_week_range(week_start)}"))

        if data.key_highlights:
            console.print("\n[bold]Key highlights:[/bold]")
            for highlight in data.key_highlights:
                console.print(f"  - {highlight}")

        if data.important_dates:
            console.print("\n[bold]Important dates:[/bold]")
            for item in data.important_dates:
                console.print(f"  - {item.get('date')}: {item.get('event')}")

        mailing = data.weekly_mailing_summary or {}
        for label, key in (("Main topics", "mainTopics"), ("Action items", "actionItems"), ("Upcoming events", "upcomingEvents")):
            if mailing.get(key):
                console.print(f"\n[bold]{label}:[/bold]")
                for entry in mailing[key]:
                    console.print(f"  - {entry}")

        suggestions = data.knowledge_sheet_suggestions or {}
        if suggestions.get("additions") or suggestions.get("removals"):
            console.print("\n[bold]Knowledge sheet suggestions:[/bold]")
            for entry in suggestions.get("additions", []):
                console.print(f"  [green]+[/green] {entry}")
            for entry in suggestions.get("removals", []):
                console.print(f"  [red]-[/red] {entry}")
    finally:
        db.close()


@app.command()
def scrape_logs(limit: int = typer.Option(20, help="Number of runs to show")):
    """Show recent scrape runs"""
    db = SessionLocal()
    try:
        runs = crud.list_scrape_runs(db, limit)
        if not runs:
            console.print("[yellow]No scrape runs yet[/yellow]")
            return

        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("Started", style="cyan")
        table.add_column("Status")
        table.add_column("Found", justify="right")
        table.add_column("Processed", justify="right")
        table.add_column("Error", style="red")

        status_styles = {"completed": "green", "failed": "red", "running": "yellow"}
        for run in runs:
            style = status_styles.get(run.status, "")
            table.add_row(
                run.started_at.strftime("%Y-%m-%d %H:%M"),
                f"[{style}]{run.status}[/{style}]",
                str(run.documents_found or 0),
                str(run.documents_processed or 0),
                (run.error_message or "")[:60]
            )
        console.print(table)

        latest = runs[0]
        if latest.log_details:
            console.print("\n[bold]Latest run log:[/bold]")
            for entry in latest.log_details:
                console.print(f"  [dim]{entry['timestamp']}[/dim] [Step {entry['step']}] {entry['message']}")
    finally:
        db.close()


@app.command(name="settings")
def show_settings():
    """Show runtime settings"""
    db = SessionLocal()
    try:
        values = crud.get_settings_map(db)
        for key, value in sorted(values.items()):
            if key == SCRAPING_PASSWORD_KEY and value:
                value = "********"
            elif key in ("llm_prompt_template", KNOWLEDGE_SHEET_KEY) and len(value) > 80:
                value = value[:80].replace("\n", " ") + "..."
            console.print(f"  [cyan]{key}[/cyan]: {value}")
    finally:
        db.close()


@app.command()
def set_setting(
    key: str,
    value: Optional[str] = typer.Argument(None, help="New value"),
    from_file: Optional[Path] = typer.Option(None, "--from-file", exists=True, dir_okay=False, help="Read the value from a file")
):
    """Set a runtime setting (e.g. scraping_url)"""
    if value is None and from_file is None:
        console.print("[red]✗[/red] Pass a value or --from-file")
        raise typer.Exit(code=1)

    db = SessionLocal()
    try:
        crud.set_setting(db, key, from_file.read_text(encoding="utf-8") if from_file else value)
        console.print(f"[green]✓[/green] {key} updated")
    finally:
        db.close()


@app.command()
def reset_prompt():
    """Restore the default LLM prompt template"""
    db = SessionLocal()
    try:
        reset_prompt_template(db)
        console.print("[green]✓[/green] Prompt template reset to default")
    finally:
        db.close()


@app.command()
def week_info():
    """Show the current mailing week and which day parents are shown"""
    now = current_time()
    week_start = ScheduleCalculator.week_start(now, publish_day=settings.publish_day)
    display = ScheduleCalculator.display_date(now, publish_day=settings.publish_day, cutoff_hour=settings.cutoff_hour)
    console.print(f"  Now: {now.strftime('%A %Y-%m-%d %H:%M')} ({settings.timezone})")
    console.print(f"  Mailing week: {format_week_range(week_start)}")
    console.print(f"  Showing reminders for: {format_display_date(display)} ({relative_day(display, now.date())})")


if __name__ == "__main__":
    app()
