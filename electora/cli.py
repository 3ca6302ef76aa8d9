import click
from flask import current_app
from flask.cli import AppGroup
from sqlalchemy.exc import IntegrityError
from werkzeug.security import generate_password_hash

from electora.extensions import db
from electora.models import User
from electora.services.errors import Unauthorized
from electora.services.ledger import ElectionLedger
from electora.services.tally import recount_votes

election_cli = AppGroup("election", help="Manage the election ledger.")


def _load_ledger():
    ledger = ElectionLedger.load()
    if ledger is None:
        raise click.ClickException("No election has been initialised.")
    return ledger


@election_cli.command("init")
@click.argument("organiser", required=False)
@click.option("--title", default=None, help="Display title of the election.")
def init_election(organiser, title):
    """Create the election with ORGANISER as its permanent organiser.

    ORGANISER defaults to the ORGANISER_IDENTITY setting.
    """
    organiser = organiser or current_app.config.get("ORGANISER_IDENTITY") or ""
    title = title or current_app.config.get("ELECTION_TITLE")
    try:
        ledger = ElectionLedger.initialise(organiser.strip(), title)
    except (Unauthorized, ValueError) as err:
        raise click.ClickException(str(err)) from err

    election = ledger.election
    click.echo(f"Election {election.title!r} organised by {election.organiser}.")


@election_cli.command("create-organiser")
@click.argument("username")
@click.argument("email")
@click.password_option(help="Password for the organiser account.")
def create_organiser(username, email, password):
    """Create the login account that acts for the election organiser."""
    ledger = _load_ledger()
    if len(password) < 8:
        raise click.ClickException("Password must be at least 8 characters long.")

    user = User(
        username=username.strip(),
        email=email.strip().lower(),
        identity=ledger.organiser,
        is_organiser=True,
        password_hash=generate_password_hash(password, method="pbkdf2:sha256"),
    )
    try:
        db.session.add(user)
        db.session.commit()
    except IntegrityError as err:
        db.session.rollback()
        raise click.ClickException(
            "Username, email or the organiser identity is already in use."
        ) from err

    current_app.logger.info("Organiser account %s created", user.username)
    click.echo(f"Organiser account {user.username!r} created for {ledger.organiser}.")


@election_cli.command("audit")
def audit_election():
    """Recount every ballot and compare it with the stored tallies."""
    ledger = _load_ledger()

    report = recount_votes(ledger.list_candidates(), ledger.list_voters())
    click.echo(
        f"Recorded votes: {report['recorded_total']}, "
        f"voters who voted: {report['voters_voted']}"
    )
    for row in report["discrepancies"]:
        click.echo(
            f"  {row['candidate']}: recorded {row['recorded']}, "
            f"recounted {row['recounted']}"
        )
    for identity in report["invalid_ballots"]:
        click.echo(f"  invalid ballot state for voter {identity}")

    if not report["ok"]:
        raise click.exceptions.Exit(1)
    click.echo("Tally is consistent.")


def register_cli(app):
    app.cli.add_command(election_cli)
