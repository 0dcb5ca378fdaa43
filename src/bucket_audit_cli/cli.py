# src/bucket_audit_cli/cli.py
"""
CLI implementation using click and rich.
Supports both interactive prompts and flag-based automation.
"""

import os
import sys
from typing import Optional

import click
import questionary
from botocore.exceptions import BotoCoreError, ClientError
from rich.progress import Progress, SpinnerColumn, TextColumn, BarColumn, TaskProgressColumn
from rich.markup import escape
from rich.table import Table

from .adapters.aws.aws_provider import AWSProvider
from .config import AWS_PROFILE, DEFAULT_REGION, LOG_LEVEL, MAX_WORKERS
from .core.audits import AuditSet
from .core.exceptions import UnknownAuditError
from .core.models import AUDIT_ALIASES, Audit, AuditRun
from .core.orchestrator import AUDIT_FETCH_KIND
from .utils.console import configure_logging, console, err_console
from .utils.formatters import CsvReportWriter, format_as_text

EXIT_FAILURES = 1
EXIT_CANCELLED = 130


def parse_audits(ctx, param, values) -> Optional[list[Audit]]:
    """click callback: accepts repeated and comma separated check names."""
    if not values:
        return None
    try:
        return [Audit.parse(name) for value in values for name in value.split(",") if name.strip()]
    except UnknownAuditError as e:
        raise click.BadParameter(f"{e}. Run 'bucket-audit list-checks' for valid names.")


def use_colour(no_color: bool) -> bool:
    return not no_color and "NO_COLOR" not in os.environ and console.is_terminal


def write_output(run: AuditRun, fmt: str, output: Optional[str], coloured: bool) -> None:
    if fmt == "csv":
        if output:
            with open(output, "w", newline="", encoding="utf-8") as f:
                CsvReportWriter(f).write_all(run.reports)
        else:
            CsvReportWriter(click.get_text_stream("stdout")).write_all(run.reports)
    elif output:
        with open(output, "w", encoding="utf-8") as f:
            f.write(format_as_text(run.reports) + "\n")
    elif coloured:
        console.print(format_as_text(run.reports, coloured=True), highlight=False)
    else:
        click.echo(format_as_text(run.reports))

    if output:
        err_console.print(f"[success]Report saved to {output}[/]")


def run_interactive_prompts(provider: AWSProvider, audits: AuditSet, fmt: str):
    """Wraps questionary prompts for interactive mode."""
    bucket_names = provider.list_buckets()
    if not bucket_names:
        return [], audits, fmt

    buckets = questionary.checkbox(
        "Select buckets to audit:",
        choices=[questionary.Choice(name, checked=True) for name in bucket_names],
    ).ask() or []

    selected = questionary.checkbox(
        "Select checks to run:",
        choices=[
            questionary.Choice(a.value, value=a, checked=a in audits)
            for a in Audit.concrete()
        ],
    ).ask() or []

    fmt = questionary.select("Output format?", choices=["text", "csv"], default=fmt).ask() or fmt

    return buckets, AuditSet(selected), fmt


@click.group()
@click.version_option(package_name="bucket-audit-cli")
def cli():
    """Bucket Audit CLI - audit Amazon S3 buckets against recommended practices."""
    pass


@cli.command()
@click.option("--bucket", "-b", "buckets", multiple=True, help="Bucket to audit. Repeatable. Default: every bucket.")
@click.option("--enable-check", "-e", "enable_checks", multiple=True, callback=parse_audits,
              help="Check to enable (applied after --disable-check). Repeatable or comma separated.")
@click.option("--disable-check", "-d", "disable_checks", multiple=True, callback=parse_audits,
              help="Check to disable. 'all' disables every check. Repeatable or comma separated.")
@click.option("--format", "fmt", type=click.Choice(["text", "csv"], case_sensitive=False), default="text",
              help="Output format.")
@click.option("--output", "-o", type=click.Path(dir_okay=False, writable=True), help="Save report to this file.")
@click.option("--profile", "-p", default=AWS_PROFILE, help="AWS named profile.")
@click.option("--region", "-r", default=DEFAULT_REGION, show_default=True,
              help="Region used for bucket discovery.")
@click.option("--no-color", is_flag=True, help="Disable coloured text output.")
@click.option("--max-workers", type=click.IntRange(min=1), default=MAX_WORKERS, show_default=True,
              help="Buckets audited concurrently.")
@click.option("--log-level", type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
              default=LOG_LEVEL, show_default=True)
@click.option("--interactive", "-i", is_flag=True, help="Pick buckets, checks and format interactively.")
def audit(buckets, enable_checks, disable_checks, fmt, output, profile, region, no_color, max_workers,
          log_level, interactive):
    """Audit S3 bucket configuration."""
    configure_logging(log_level)
    fmt = fmt.lower()

    # Disable first, then enable: "-d all -e acl" leaves only the ACL check.
    audits = AuditSet().disable(disable_checks).enable(enable_checks)

    try:
        provider = AWSProvider(profile=profile, region=region, max_workers=max_workers)
    except BotoCoreError as e:
        err_console.print(f"[error]Error:[/] {e}")
        sys.exit(EXIT_FAILURES)

    if not provider.validate_credentials():
        err_console.print("[error]Error:[/] Invalid or missing AWS credentials.")
        err_console.print("[dim]Set AWS_PROFILE, pass --profile, or configure the default credential chain.[/]")
        sys.exit(EXIT_FAILURES)

    try:
        if interactive:
            buckets, audits, fmt = run_interactive_prompts(provider, audits, fmt)
            if not buckets:
                err_console.print("[warning]No buckets selected.[/]")
                return

        if not audits:
            err_console.print("[warning]No checks enabled; nothing to audit.[/]")

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            console=err_console,
            transient=True,
            disable=not err_console.is_terminal,
        ) as progress:
            task = progress.add_task("Auditing buckets", total=None)

            def progress_update(bucket, done, total):
                progress.update(task, completed=done, total=total, description=f"Audited {bucket}")

            run = provider.run_audit(buckets, audits, progress_callback=progress_update)
    except ClientError as e:
        err_console.print(f"[error]Error:[/] {e}")
        sys.exit(EXIT_FAILURES)

    write_output(run, fmt, output, use_colour(no_color))

    if fmt == "text" and run.account_id:
        err_console.print(
            f"[bold white]Audit complete for account:[/] [bold cyan]{run.account_id}[/] "
            f"[dim]({len(run.reports)} bucket(s))[/]"
        )

    for failure in run.failures:
        err_console.print(f"[error]✖ {escape(str(failure))}[/]")

    if run.cancelled:
        err_console.print("[warning]Audit cancelled; unfinished buckets were not reported.[/]")
        sys.exit(EXIT_CANCELLED)
    if run.failures:
        sys.exit(EXIT_FAILURES)


@cli.command("list-checks")
def list_checks():
    """List the checks that can be enabled or disabled."""
    table = Table(title="Available checks", box=None, padding=(0, 2))
    table.add_column("Check", style="cyan", no_wrap=True)
    table.add_column("Aliases")
    table.add_column("Fetches")

    for audit in Audit:
        aliases = ", ".join(AUDIT_ALIASES[audit][1:])
        fetch = AUDIT_FETCH_KIND[audit].value if audit in AUDIT_FETCH_KIND else "every check"
        table.add_row(audit.value, aliases, fetch)

    console.print(table)


def main():
    cli()


if __name__ == "__main__":
    main()
