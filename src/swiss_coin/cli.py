"""CLI for Swiss Coin using Typer."""

import logging
import sys
from datetime import datetime
from decimal import Decimal
from uuid import UUID

import typer
from rich.console import Console
from rich.table import Table

from .config import load_settings
from .db import Database
from .exceptions import SwissCoinError, TransactionNotFoundError
from .models import Payer, Person, Split, SplitDraft, SplitMethod, Transaction
from .money import format_money, parse_amount
from .people import PeopleService
from .service import TransactionService
from .ui import confirm, prompt_raw_inputs, select_participants_interactive

app = typer.Typer(
    name="swiss-coin",
    help="Record shared expenses and split them between people",
)
person_app = typer.Typer(help="Manage the people you split with")
app.add_typer(person_app, name="person")

console = Console()


def setup_logging(verbose: bool = False):
    """Setup logging configuration."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


def _open() -> tuple[Database, TransactionService, PeopleService]:
    settings = load_settings()
    db = Database(settings.database_path)
    return db, TransactionService(settings, db), PeopleService(db)


def _fail(e: Exception, verbose: bool = False):
    if isinstance(e, SwissCoinError):
        console.print(f"\n[bold yellow]⚠️  {e}[/bold yellow]\n")
    else:
        console.print(f"\n[bold red]Error:[/bold red] {e}")
        if verbose:
            raise e
    sys.exit(1)


def _parse_assignments(
    values: list[str], people: PeopleService, option: str
) -> dict[UUID, str]:
    """Parse repeated NAME=VALUE options into a map keyed by person id."""
    parsed: dict[UUID, str] = {}
    for value in values:
        name, sep, raw = value.partition("=")
        if not sep:
            raise typer.BadParameter(f"Expected NAME=VALUE, got '{value}'", param_hint=option)
        parsed[people.find_person(name.strip()).id] = raw.strip()
    return parsed


def _resolve_transaction(service: TransactionService, ref: str) -> Transaction:
    """Find a transaction by full id or unique id prefix."""
    matches = [t for t in service.list_transactions() if str(t.id).startswith(ref.lower())]
    if len(matches) != 1:
        raise TransactionNotFoundError(ref)
    return matches[0]


def display_splits(
    transaction: Transaction,
    splits: list[Split],
    payers: list[Payer],
    names: dict[UUID, str],
):
    """Display a transaction and its splits in a table."""
    currency = transaction.currency

    console.print(f"\n[bold]{transaction.title}[/bold]  [dim]{str(transaction.id)[:8]}[/dim]")
    console.print(f"  Date: {transaction.date}")
    console.print(f"  Total: {format_money(transaction.amount, currency)}")
    console.print(f"  Method: {transaction.split_method.value}")
    paid_by = ", ".join(
        f"{names.get(p.person_id, '?')} {format_money(p.amount, currency)}" for p in payers
    )
    console.print(f"  Paid by: {paid_by or '[dim]nobody[/dim]'}")
    console.print()

    table = Table(title="Splits", show_header=True, header_style="bold magenta")
    table.add_column("Person", style="cyan", width=24)
    table.add_column("Input", justify="right", style="dim", width=10)
    table.add_column("Owes", justify="right", width=14)

    for split in splits:
        raw = "" if split.raw_amount is None else str(split.raw_amount)
        table.add_row(
            names.get(split.owed_by_id, str(split.owed_by_id)[:8]),
            raw,
            format_money(split.amount, currency),
        )

    console.print(table)

    computed_total = sum((s.amount for s in splits), Decimal("0"))
    if computed_total == transaction.amount:
        console.print("  [green]✓ Splits add up to the total[/green]")
    else:
        console.print(
            f"  [red]✗ Total mismatch: splits {computed_total}, "
            f"expected {transaction.amount}[/red]"
        )


def _names(people: PeopleService) -> dict[UUID, str]:
    return {p.id: p.name for p in people.list_people()}


# ============================================================================
# People
# ============================================================================


@person_app.command("add")
def person_add(
    name: str = typer.Argument(..., help="Display name"),
    phone: str | None = typer.Option(None, "--phone", help="Phone number"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """Add a person to split with."""
    setup_logging(verbose)

    try:
        db, _service, people = _open()
        person = people.add_person(name, phone_number=phone)
        console.print(f"[green]✓ Added {person.name}[/green] [dim]{person.id}[/dim]")
    except Exception as e:
        _fail(e, verbose)
    finally:
        if "db" in locals():
            db.close()


@person_app.command("list")
def person_list(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """List people and what they owe you."""
    setup_logging(verbose)

    try:
        db, service, people = _open()
        me = service.identity.get_or_create()

        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("Name", style="cyan")
        table.add_column("Phone", style="dim")
        table.add_column("Balance", justify="right")

        for person in people.list_people():
            if person.id == me.id:
                continue
            balance = service.balance_with(person.id)
            table.add_row(person.name, person.phone_number or "", format_money(balance))

        console.print(table)
    except Exception as e:
        _fail(e, verbose)
    finally:
        if "db" in locals():
            db.close()


# ============================================================================
# Transactions
# ============================================================================


@app.command()
def add(
    title: str = typer.Option(..., "--title", "-t", help="What the expense was for"),
    amount: str = typer.Option(..., "--amount", "-a", help="Total amount"),
    with_: list[str] = typer.Option([], "--with", "-w", help="Participant name (repeatable)"),
    method: SplitMethod = typer.Option(SplitMethod.EQUAL, "--method", "-m", help="Split method"),
    inputs: list[str] = typer.Option(
        [], "--input", "-i", help="Raw split input NAME=VALUE (repeatable)"
    ),
    paid_by: list[str] = typer.Option(
        [], "--paid-by", "-p", help="Payer NAME=AMOUNT (repeatable); default: you"
    ),
    without_me: bool = typer.Option(False, "--without-me", help="Do not include yourself"),
    on: datetime | None = typer.Option(None, "--date", formats=["%Y-%m-%d"], help="Date"),
    note: str | None = typer.Option(None, "--note", help="Optional note"),
    interactive: bool = typer.Option(
        False, "--interactive", help="Pick participants and inputs interactively"
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="Preview without saving"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """
    Record a new transaction and split it.

    Example:
      swiss-coin add -t Dinner -a 90 -w Alice -w Bob -m shares -i Alice=2
    """
    setup_logging(verbose)

    try:
        db, service, people = _open()
        me = service.identity.get_or_create()

        if interactive:
            participant_ids = select_participants_interactive(people.list_people())
        else:
            participant_ids = [people.find_person(name).id for name in with_]
        if not without_me and me.id not in participant_ids:
            participant_ids.insert(0, me.id)

        draft = SplitDraft(
            title=title,
            amount=str(parse_amount(amount)),
            currency=service.settings.default_currency,
            note=note,
        )
        if on is not None:
            draft.transaction_date = on.date()
        draft.set_participants(participant_ids)
        draft.change_method(method)

        if interactive:
            participants = [p for pid in draft.participants if (p := people.get_person(pid))]
            draft.raw_inputs = prompt_raw_inputs(
                participants,
                method,
                draft.raw_inputs,
                max_shares=service.settings.max_shares,
            )
        else:
            draft.raw_inputs.update(_parse_assignments(inputs, people, "--input"))
        draft.payer_inputs = _parse_assignments(paid_by, people, "--paid-by")

        names = _names(people)
        if dry_run:
            owed = service.preview(draft)
            table = Table(title="Preview", show_header=True, header_style="bold magenta")
            table.add_column("Person", style="cyan")
            table.add_column("Owes", justify="right")
            for pid, value in owed.items():
                table.add_row(names.get(pid, str(pid)[:8]), format_money(value, draft.currency))
            console.print(table)
            return

        transaction = service.commit(draft)
        display_splits(
            transaction,
            service.get_splits(transaction.id),
            service.get_payers(transaction.id),
            names,
        )
        console.print("\n[bold green]✓ Transaction saved![/bold green]\n")

    except typer.BadParameter:
        raise
    except Exception as e:
        _fail(e, verbose)
    finally:
        if "db" in locals():
            db.close()


@app.command("list")
def list_transactions(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """List recorded transactions, newest first."""
    setup_logging(verbose)

    try:
        db, service, _people = _open()
        transactions = service.list_transactions()
        if not transactions:
            console.print("[yellow]No transactions yet.[/yellow]")
            return

        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("ID", style="dim", width=10)
        table.add_column("Date")
        table.add_column("Title", style="cyan")
        table.add_column("Method", style="dim")
        table.add_column("Amount", justify="right")

        for t in transactions:
            table.add_row(
                str(t.id)[:8],
                str(t.date),
                t.title,
                t.split_method.value,
                format_money(t.amount, t.currency),
            )

        console.print(table)
    except Exception as e:
        _fail(e, verbose)
    finally:
        if "db" in locals():
            db.close()


@app.command()
def show(
    transaction_ref: str = typer.Argument(..., help="Transaction id or id prefix"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """Show a transaction and its splits."""
    setup_logging(verbose)

    try:
        db, service, people = _open()
        transaction = _resolve_transaction(service, transaction_ref)
        display_splits(
            transaction,
            service.get_splits(transaction.id),
            service.get_payers(transaction.id),
            _names(people),
        )
    except Exception as e:
        _fail(e, verbose)
    finally:
        if "db" in locals():
            db.close()


@app.command("set-amount")
def set_amount(
    transaction_ref: str = typer.Argument(..., help="Transaction id or id prefix"),
    amount: str = typer.Argument(..., help="New total"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """Change a transaction's total, rescaling its existing splits."""
    setup_logging(verbose)

    try:
        db, service, people = _open()
        transaction = _resolve_transaction(service, transaction_ref)
        updated = service.update_amount(transaction.id, parse_amount(amount))
        display_splits(
            updated,
            service.get_splits(updated.id),
            service.get_payers(updated.id),
            _names(people),
        )
        console.print("\n[bold green]✓ Amount updated![/bold green]\n")
    except Exception as e:
        _fail(e, verbose)
    finally:
        if "db" in locals():
            db.close()


@app.command()
def delete(
    transaction_ref: str = typer.Argument(..., help="Transaction id or id prefix"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation prompt"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """Delete a transaction and all of its splits."""
    setup_logging(verbose)

    try:
        db, service, _people = _open()
        transaction = _resolve_transaction(service, transaction_ref)

        if not yes and not confirm(
            f"Delete '{transaction.title}' ({format_money(transaction.amount)})?"
        ):
            console.print("[yellow]Cancelled.[/yellow]")
            return

        service.delete(transaction.id)
        console.print(f"[green]✓ Deleted '{transaction.title}'[/green]")
    except Exception as e:
        _fail(e, verbose)
    finally:
        if "db" in locals():
            db.close()


@app.command()
def balance(
    name: str = typer.Argument(..., help="Person name or id"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """Show the net balance between you and a person."""
    setup_logging(verbose)

    try:
        db, service, people = _open()
        person: Person = people.find_person(name)
        amount = service.balance_with(person.id)

        if amount > 0:
            console.print(f"{person.name} owes you {format_money(amount)}")
        elif amount < 0:
            console.print(f"You owe {person.name} {format_money(-amount)}")
        else:
            console.print(f"[green]You and {person.name} are settled up[/green]")
    except Exception as e:
        _fail(e, verbose)
    finally:
        if "db" in locals():
            db.close()


if __name__ == "__main__":
    app()
