import click
from flask.cli import with_appcontext

from droneops.extensions import db
from droneops.services.auth_service import register_user
from droneops.utils.exceptions import ServiceError


@click.command("create-admin")
@click.option("--email", prompt=True)
@click.option("--name", "full_name", prompt=True)
@click.password_option()
@with_appcontext
def create_admin(email, full_name, password):
    """Create an admin account (admins cannot self-register)."""
    try:
        user = register_user(email, password, full_name, role="admin")
        click.echo(f"Admin {user.email} created ({user.id}).")
    except ServiceError as e:
        db.session.rollback()
        click.echo(f"Could not create admin: {e.message}")


@click.command("init-db")
@with_appcontext
def init_db():
    """Create tables directly, for local setups without migrations."""
    db.create_all()
    click.echo("Database tables created.")


def register_commands(app):
    app.cli.add_command(create_admin)
    app.cli.add_command(init_db)
