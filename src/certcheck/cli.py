"""Command-line interface for certcheck."""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from certcheck import __version__
from certcheck.core.config import Config
from certcheck.core.exceptions import CertCheckError
from certcheck.core.pipeline import Pipeline
from certcheck.export.report import ValidationSummary, export_report_json
from certcheck.models.certificate import CertificateRecord
from certcheck.models.requirements import ComparisonOperator, LogicalOperator, Rule, RuleSet
from certcheck.storage.audit import AuditAction, AuditEntity, log_audit_event
from certcheck.storage.db import CertCheckDB
from certcheck.utils.logging import setup_logging
from certcheck.validation.chain import AdvisoryChain
from certcheck.validation.fields import FieldCategory, iter_fields, lookup_value, resolve
from certcheck.validation.results import ValidationResult, ValidationStatus

app = typer.Typer(
    name="certcheck",
    help="Insurance certificate extraction and requirement validation.",
    add_completion=False,
)
ruleset_app = typer.Typer(help="Manage requirement sets.", add_completion=False)
app.add_typer(ruleset_app, name="ruleset")
document_app = typer.Typer(help="Manage stored documents.", add_completion=False)
app.add_typer(document_app, name="document")

console = Console()

STATUS_COLORS = {
    ValidationStatus.PASS: "green",
    ValidationStatus.FAIL: "red",
    ValidationStatus.MISSING: "yellow",
}


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output"),
    user: Optional[str] = typer.Option(None, "--user", "-u", help="User id that owns the data"),
    config_file: Optional[Path] = typer.Option(
        None, "--config", "-c", help="JSON file with configuration overrides"
    ),
):
    """certcheck: Validate insurance certificates against requirement sets."""
    if config_file is not None and not config_file.exists():
        _fail(f"Config file not found: {config_file}")
    try:
        config = Config.load(config_file)
    except ValueError as e:
        _fail(f"Invalid config file {config_file}: {e}")
    setup_logging(level="DEBUG" if verbose else config.log_level, log_file=config.log_file)
    ctx.obj = {"config": config, "user": user or config.user_id}


def _config(ctx: typer.Context) -> Config:
    return ctx.obj["config"]


def _user(ctx: typer.Context) -> str:
    return ctx.obj["user"]


def _open_db(ctx: typer.Context) -> CertCheckDB:
    return CertCheckDB(_config(ctx).db_path)


def _fail(message: str) -> None:
    console.print(f"[red]Error: {message}[/red]")
    raise typer.Exit(1)


@app.command()
def version():
    """Show version information."""
    console.print(f"certcheck version {__version__}")


@app.command()
def fields(
    category: Optional[FieldCategory] = typer.Option(None, "--category", "-c", help="Only list one category"),
):
    """List the certificate fields rules can reference."""
    table = Table(title="Certificate Fields")
    table.add_column("Key", style="cyan")
    table.add_column("Label", style="white")
    table.add_column("Category", style="green")
    table.add_column("Kind", style="dim")

    for descriptor in iter_fields(category):
        table.add_row(
            descriptor.key,
            descriptor.label,
            descriptor.category.label,
            descriptor.kind.value,
        )

    console.print(table)


@app.command()
def operators():
    """List comparison and logical operators."""
    table = Table(title="Comparison Operators")
    table.add_column("Operator", style="cyan")
    table.add_column("Label", style="white")
    for op in ComparisonOperator:
        table.add_row(op.value, op.label)
    console.print(table)

    console.print(
        "\n[bold]Logical operators:[/bold] "
        + ", ".join(op.value for op in LogicalOperator)
    )


@app.command()
def extract(
    ctx: typer.Context,
    file_path: Path = typer.Argument(..., help="Path to certificate PDF"),
    provider: Optional[str] = typer.Option(None, "--provider", "-p", help="LLM provider: openai, anthropic"),
    model: Optional[str] = typer.Option(None, "--model", "-m", help="LLM model name"),
    mock_llm: bool = typer.Option(False, "--mock-llm", help="Use mock LLM for testing"),
):
    """Extract a certificate and store it as a document."""
    if not file_path.exists():
        _fail(f"File not found: {file_path}")

    config = _config(ctx)
    if provider:
        config.llm.provider = provider
    if model:
        config.llm.model = model

    try:
        with _open_db(ctx) as db:
            pipeline = Pipeline(db=db, config=config, use_mock_llm=mock_llm)
            with console.status("[bold blue]Extracting certificate..."):
                document = pipeline.ingest(file_path, owner_id=_user(ctx))
    except Exception as e:
        _fail(str(e))

    _display_record(document.record)
    console.print(f"\n[green]Stored as document {document.id}[/green]")


@app.command()
def validate(
    ctx: typer.Context,
    document_id: str = typer.Argument(..., help="Stored document id"),
    ruleset: str = typer.Argument(..., help="Requirement set id or name"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write JSON report to file"),
):
    """Validate a stored document against a requirement set."""
    try:
        with _open_db(ctx) as db:
            pipeline = Pipeline(db=db, config=_config(ctx))
            run = pipeline.validate(document_id, ruleset, owner_id=_user(ctx))
    except (CertCheckError, ValueError) as e:
        _fail(str(e))

    _display_results(run.rule_set, run.results)

    if output:
        export_report_json(
            run.results, output, document_id=run.document_id, rule_set_name=run.rule_set.name
        )
        console.print(f"\n[green]Saved to: {output}[/green]")


@app.command()
def audit(
    ctx: typer.Context,
    limit: int = typer.Option(20, "--limit", "-n", help="Number of events to show"),
    entity: Optional[AuditEntity] = typer.Option(None, "--entity", "-e", help="Filter by entity type"),
):
    """Show recent audit log events."""
    with _open_db(ctx) as db:
        events = db.list_audit_events(
            _user(ctx), limit=limit, entity_type=entity.value if entity else None
        )

    table = Table(title="Audit Log")
    table.add_column("Time", style="dim")
    table.add_column("Action", style="cyan")
    table.add_column("Entity", style="white")
    table.add_column("Entity ID", style="white")
    table.add_column("Details", style="dim")
    for event in events:
        details = ", ".join(f"{k}={v}" for k, v in (event.details or {}).items())
        table.add_row(
            event.created_at,
            event.action_type,
            event.entity_type,
            event.entity_id or "",
            details,
        )
    console.print(table)


# --- Documents ---


@document_app.command("list")
def document_list(ctx: typer.Context):
    """List stored documents."""
    with _open_db(ctx) as db:
        stored = db.list_documents(_user(ctx))

    if not stored:
        console.print("[dim]No documents.[/dim]")
        return

    table = Table(title="Documents")
    table.add_column("ID", style="cyan")
    table.add_column("File", style="white")
    table.add_column("Named Insured", style="green")
    table.add_column("Uploaded", style="dim")
    for doc in stored:
        insured = (doc.named_insured or "").split("\n")[0]
        table.add_row(doc.id, doc.file_name, insured, doc.uploaded_at)
    console.print(table)


@document_app.command("show")
def document_show(
    ctx: typer.Context,
    document_id: str = typer.Argument(..., help="Stored document id"),
):
    """Show the extracted values of a document."""
    try:
        with _open_db(ctx) as db:
            document = db.get_document(_user(ctx), document_id)
    except CertCheckError as e:
        _fail(str(e))

    console.print(f"[bold]{document.file_name}[/bold] [dim]({document.id})[/dim]")
    _display_record(document.record)


@document_app.command("set-field")
def document_set_field(
    ctx: typer.Context,
    document_id: str = typer.Argument(..., help="Stored document id"),
    field_key: str = typer.Argument(..., help="Certificate field key (see 'certcheck fields')"),
    value: str = typer.Argument(..., help="Corrected value; an empty string clears the field"),
):
    """Correct one extracted value of a document."""
    try:
        with _open_db(ctx) as db:
            pipeline = Pipeline(db=db, config=_config(ctx))
            pipeline.update_field(document_id, field_key, value, owner_id=_user(ctx))
    except CertCheckError as e:
        _fail(str(e))

    console.print(f"[green]Updated {resolve(field_key).label} on document {document_id}[/green]")


@document_app.command("delete")
def document_delete(
    ctx: typer.Context,
    document_id: str = typer.Argument(..., help="Stored document id"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Delete without asking"),
):
    """Delete a document and its extracted values."""
    if not yes:
        typer.confirm(f"Permanently delete document {document_id}?", abort=True)

    try:
        with _open_db(ctx) as db:
            pipeline = Pipeline(db=db, config=_config(ctx))
            document = pipeline.delete_document(document_id, owner_id=_user(ctx))
    except CertCheckError as e:
        _fail(str(e))

    console.print(f"[green]Deleted document {document.file_name!r}[/green]")


# --- Requirement sets ---


@ruleset_app.command("create")
def ruleset_create(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Requirement set name"),
    description: str = typer.Option("", "--description", "-d", help="Description"),
):
    """Create an empty requirement set."""
    rule_set = RuleSet(name=name, description=description)
    with _open_db(ctx) as db:
        db.save_rule_set(_user(ctx), rule_set)
        log_audit_event(
            db, _user(ctx), AuditAction.CREATE, AuditEntity.REQUIREMENT_SET,
            rule_set.id, {"name": name},
        )
    console.print(f"[green]Created requirement set {name!r} ({rule_set.id})[/green]")


@ruleset_app.command("list")
def ruleset_list(ctx: typer.Context):
    """List requirement sets."""
    with _open_db(ctx) as db:
        rule_sets = db.list_rule_sets(_user(ctx))

    if not rule_sets:
        console.print("[dim]No requirement sets.[/dim]")
        return

    table = Table(title="Requirement Sets")
    table.add_column("ID", style="cyan")
    table.add_column("Name", style="white")
    table.add_column("Rules", justify="right")
    table.add_column("Description", style="dim")
    for rule_set in rule_sets:
        table.add_row(rule_set.id, rule_set.name, str(len(rule_set.rules)), rule_set.description)
    console.print(table)


@ruleset_app.command("show")
def ruleset_show(
    ctx: typer.Context,
    ref: str = typer.Argument(..., help="Requirement set id or name"),
):
    """Show the rules of a requirement set."""
    try:
        with _open_db(ctx) as db:
            rule_set = db.find_rule_set(_user(ctx), ref)
    except CertCheckError as e:
        _fail(str(e))

    console.print(f"[bold]{rule_set.name}[/bold] [dim]({rule_set.id})[/dim]")
    if rule_set.description:
        console.print(rule_set.description)
    _display_rules(rule_set)


@ruleset_app.command("delete")
def ruleset_delete(
    ctx: typer.Context,
    ref: str = typer.Argument(..., help="Requirement set id or name"),
):
    """Delete a requirement set."""
    try:
        with _open_db(ctx) as db:
            rule_set = db.find_rule_set(_user(ctx), ref)
            db.delete_rule_set(_user(ctx), rule_set.id)
            log_audit_event(
                db, _user(ctx), AuditAction.DELETE, AuditEntity.REQUIREMENT_SET,
                rule_set.id, {"name": rule_set.name},
            )
    except CertCheckError as e:
        _fail(str(e))

    console.print(f"[green]Deleted requirement set {rule_set.name!r}[/green]")


@ruleset_app.command("add-rule")
def ruleset_add_rule(
    ctx: typer.Context,
    ref: str = typer.Argument(..., help="Requirement set id or name"),
    field_key: str = typer.Argument(..., help="Certificate field key (see 'certcheck fields')"),
    operator: ComparisonOperator = typer.Argument(..., help="Comparison operator"),
    expected: str = typer.Argument("", help="Expected value"),
    logic: LogicalOperator = typer.Option(LogicalOperator.AND, "--logic", "-l", help="Connector to the next rule"),
):
    """Append a rule to a requirement set."""
    try:
        resolve(field_key)
        with _open_db(ctx) as db:
            rule_set = db.find_rule_set(_user(ctx), ref)
            rule = Rule(
                field_key=field_key,
                operator=operator,
                expected_value=expected,
                logical_operator=logic,
            )
            rule_set.rules.append(rule)
            db.save_rule_set(_user(ctx), rule_set)
            log_audit_event(
                db, _user(ctx), AuditAction.UPDATE, AuditEntity.REQUIREMENT_SET,
                rule_set.id, {"added_rule": rule.describe()},
            )
    except CertCheckError as e:
        _fail(str(e))

    console.print(f"[green]Added rule: {rule.describe()}[/green]")


@ruleset_app.command("remove-rule")
def ruleset_remove_rule(
    ctx: typer.Context,
    ref: str = typer.Argument(..., help="Requirement set id or name"),
    index: int = typer.Argument(..., help="1-based rule number (see 'ruleset show')"),
):
    """Remove a rule from a requirement set."""
    try:
        with _open_db(ctx) as db:
            rule_set = db.find_rule_set(_user(ctx), ref)
            if not rule_set.rules:
                _fail(f"Requirement set {rule_set.name!r} has no rules")
            if index < 1 or index > len(rule_set.rules):
                _fail(f"Rule number must be between 1 and {len(rule_set.rules)}")
            rule = rule_set.rules.pop(index - 1)
            db.save_rule_set(_user(ctx), rule_set)
            log_audit_event(
                db, _user(ctx), AuditAction.UPDATE, AuditEntity.REQUIREMENT_SET,
                rule_set.id, {"removed_rule": rule.describe()},
            )
    except CertCheckError as e:
        _fail(str(e))

    console.print(f"[green]Removed rule: {rule.describe()}[/green]")


def _display_record(record: CertificateRecord) -> None:
    """Display extracted certificate values in a formatted table."""
    table = Table(title="Extracted Certificate", show_header=True)
    table.add_column("Field", style="cyan", width=30)
    table.add_column("Value", style="white")

    for descriptor in iter_fields():
        value = lookup_value(record, descriptor.key)
        if value:
            table.add_row(descriptor.label, value)

    console.print(table)


def _display_rules(rule_set: RuleSet) -> None:
    """Display rules with the connector that links each to the next."""
    if not rule_set.rules:
        console.print("[dim]No rules.[/dim]")
        return

    chain = AdvisoryChain()
    table = Table(show_header=True)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Field", style="cyan")
    table.add_column("Operator", style="white")
    table.add_column("Expected", style="green")
    table.add_column("Then", style="magenta")
    for i, (rule, connector) in enumerate(zip(rule_set.rules, chain.connectors(rule_set)), start=1):
        table.add_row(
            str(i),
            rule.field_key,
            rule.operator.label,
            rule.expected_value,
            connector.label if connector else "",
        )
    console.print(table)


def _display_results(rule_set: RuleSet, results: dict[str, ValidationResult]) -> None:
    """Display validation results with a status badge per field."""
    table = Table(title=f"Validation: {rule_set.name}", show_header=True)
    table.add_column("Field", style="cyan", width=30)
    table.add_column("Value", style="white")
    table.add_column("Status")
    table.add_column("Message", style="dim")

    for field_key, result in results.items():
        color = STATUS_COLORS[result.status]
        table.add_row(
            resolve(field_key).label,
            (result.actual_value or "").split("\n")[0],
            f"[{color}]{result.status.value}[/{color}]",
            result.message or "",
        )
    console.print(table)

    if rule_set.rules:
        console.print(f"[dim]Rules: {AdvisoryChain().describe(rule_set)}[/dim]")

    summary = ValidationSummary.from_results(results)
    console.print(
        f"[green]{summary.passed} pass[/green], "
        f"[red]{summary.failed} fail[/red], "
        f"[yellow]{summary.missing} missing[/yellow]"
    )


if __name__ == "__main__":
    app()
