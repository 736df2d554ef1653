# Overview: Flask CLI command groups for bootstrap, inspection, and maintenance.

# backend/smart_enterprise/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init --email admin@example.com --password "Adm1n@pass" --name "Super Admin" --phone 0712345678
#   Create tables and the default ROLE_SUPER_ADMIN account if none exists. Idempotent.
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Employee inspection:
# - python -m flask employees list [--all]
#   List active employees (--all includes inactive).

import click
from flask.cli import with_appcontext

from .errors import AppError
from .extensions import db
from .services import employee_service


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init')
@click.option('--email', envvar='SUPER_ADMIN_EMAIL', required=True, help='Super admin e-mail')
@click.option('--password', envvar='SUPER_ADMIN_PASSWORD', required=True, help='Super admin password')
@click.option('--name', envvar='SUPER_ADMIN_NAME', default='Super Admin', show_default=True)
@click.option('--phone', envvar='SUPER_ADMIN_PHONE', required=True, help='Super admin phone')
@with_appcontext
def init_system(email, password, name, phone):
    """
    Create tables and the default super admin.

    Skips account creation when any ROLE_SUPER_ADMIN already exists.
    """
    click.echo("START Initializing Smart Enterprise...")
    db.create_all()
    click.echo("PASS Tables ready")

    try:
        employee, created = employee_service.ensure_super_admin(
            email=email, password=password, name=name, phone=phone
        )
    except AppError as err:
        details = "; ".join(e["message"] for e in (err.errors or []))
        raise click.ClickException(f"{err.message}{': ' + details if details else ''}")

    if created:
        click.echo(f"PASS Created super admin {employee.employee_id} ({employee.employee_email})")
    else:
        click.echo(f"WARN Super admin already exists: {employee.employee_id}, skipping...")
    click.echo("DONE")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """
    DANGER: Drop all tables and recreate schema.

    This will DELETE ALL DATA!
    """
    if not yes:
        click.confirm("WARN This will DELETE ALL DATA. Are you sure?", abort=True)

    click.echo("DELETE  Dropping all tables...")
    db.drop_all()
    click.echo("BUILD  Creating all tables...")
    db.create_all()
    click.echo("DONE Database reset")


@click.group('employees')
def employees_group():
    """Employee inspection commands."""


@employees_group.command('list')
@click.option('--all', 'include_inactive', is_flag=True, help='Include inactive employees')
@with_appcontext
def list_employees(include_inactive):
    """List employees with role and status."""
    employees = employee_service.list_all(include_inactive=include_inactive)

    if not employees:
        click.echo("No employees found.")
        return

    click.echo("\n" + "=" * 100)
    click.echo(f"{'Employee ID':<16} {'Name':<25} {'Email':<32} {'Role':<18} {'Status'}")
    click.echo("=" * 100)
    for e in employees:
        click.echo(f"{e.employee_id:<16} {e.employee_name:<25} {e.employee_email:<32} {e.role:<18} {e.status}")
    click.echo("=" * 100 + "\n")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(employees_group)
