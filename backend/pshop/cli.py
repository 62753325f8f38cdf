# backend/pshop/cli.py
"""
Operator commands, run with `flask --app wsgi <group> <command>`.

These bypass the admin code: whoever has shell access to the server
already controls PSHOP_ADMIN_CODE.
"""

import click
from flask.cli import with_appcontext

from .errors import ApiError
from .services import session_service, user_service
from .services.auth_service import hash_password, validate_password, validate_username


@click.group('users')
def users_group():
    """User inspection and bootstrap commands."""


@users_group.command('list')
@with_appcontext
def list_users():
    """List all accounts, oldest first."""
    users = user_service.list_users()

    if not users:
        click.echo("No users found.")
        return

    click.echo("\n" + "=" * 90)
    click.echo(f"{'ID':<40} {'Username':<25} {'Created'}")
    click.echo("=" * 90)
    for user in users:
        click.echo(f"{user.id:<40} {user.username:<25} {user.created_at.isoformat()}")
    click.echo("=" * 90 + "\n")


@users_group.command('create')
@click.option('--username', prompt=True, help='Username')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password')
@click.option('--display-name', default=None, help='Display name (defaults to the username)')
@with_appcontext
def create_user_cli(username, password, display_name):
    """Create an account without the admin code."""
    username = username.strip()
    try:
        validate_username(username)
        validate_password(password)
        user = user_service.create_user(
            username=username,
            password_hash=hash_password(password),
            display_name=display_name or username,
        )
    except ApiError as e:
        raise click.ClickException(e.message)

    click.echo(f"PASS Created user: {user.username} (ID: {user.id})")


@users_group.command('reset-password')
@click.option('--username', prompt=True, help='Username')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='New password')
@with_appcontext
def reset_password_cli(username, password):
    """Set a new password and sign the user out everywhere."""
    try:
        validate_password(password)
    except ApiError as e:
        raise click.ClickException(e.message)

    user = user_service.find_user_by_username(username)
    if user is None:
        raise click.ClickException(f"User '{username}' not found")

    user_service.update_password(user.id, hash_password(password))
    revoked = session_service.delete_sessions_for_user(user.id)
    click.echo(f"PASS Password reset for {user.username}; {revoked} session(s) revoked")


@click.group('sessions')
def sessions_group():
    """Session maintenance commands."""


@sessions_group.command('purge')
@with_appcontext
def purge_sessions():
    """Delete every expired session now instead of waiting for the next lookup."""
    deleted = session_service.purge_expired_sessions()
    click.echo(f"PASS Purged {deleted} expired session(s)")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(users_group)
    app.cli.add_command(sessions_group)
