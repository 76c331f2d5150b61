# Overview: Flask CLI command groups for bootstrap, user setup, and attendance maintenance.

# backend/backoffice/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init [--company "Corner Shop"]
#   Idempotent bootstrap: creates tables, company settings and a default admin.
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# User inspection/bootstrap:
# - python -m flask users list
#   List all users with role and active status.
# - python -m flask users create --username anna --email anna@shop.local --password "Password123" --full-name "Anna Nowak" --role USER
#   Create a user (prompts if options are omitted).
#
# Attendance maintenance:
# - python -m flask attendance auto-close [--date 2024-01-15]
#   Close every open session for the date at 23:59:00 (defaults to today).

import click
from flask.cli import with_appcontext

from .errors import BackofficeError
from .extensions import db
from .models import User
from .services import attendance_service
from .services.auth_service import create_user, ensure_company_settings, PasswordValidationError
from backoffice.time_utils import parse_iso_date


DEFAULT_ADMIN_USERNAME = "admin"
DEFAULT_ADMIN_EMAIL = "admin@backoffice.local"
DEFAULT_ADMIN_PASSWORD = "Password123"


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init')
@click.option('--company', 'company_name', default='POS Back Office', help='Company name printed on receipts')
@with_appcontext
def init_system(company_name):
    """
    Initialize the back office: schema, company settings and a default admin.

    Creates:
    - All tables (if missing)
    - Company settings row (if missing)
    - User: admin/admin@backoffice.local with password "Password123"

    SECURITY: Change the admin password immediately in production!
    """
    click.echo("START Initializing back office...")

    db.create_all()
    click.echo("PASS Tables ready")

    settings = ensure_company_settings(company_name)
    click.echo(f"PASS Company settings: {settings.company_name}")

    existing = db.session.query(User).filter_by(username=DEFAULT_ADMIN_USERNAME).first()
    if existing:
        click.echo(f"PASS Admin user already exists (ID: {existing.id})")
    else:
        admin = create_user(
            username=DEFAULT_ADMIN_USERNAME,
            email=DEFAULT_ADMIN_EMAIL,
            password=DEFAULT_ADMIN_PASSWORD,
            full_name="Administrator",
            role="ADMIN",
        )
        click.echo(f"PASS Created admin user (ID: {admin.id})")

    click.echo("DONE Back office initialized.")


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

    click.echo("PASS Database reset complete. Run 'python -m flask system init' to initialize.")


@click.group('users')
def users_group():
    """User inspection and bootstrap commands."""


@users_group.command('create')
@click.option('--username', prompt=True, help='Username')
@click.option('--email', prompt=True, help='Email address')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password')
@click.option('--full-name', prompt=True, help='Full name')
@click.option('--role', type=click.Choice(['ADMIN', 'USER'], case_sensitive=False), default='USER', help='Role')
@click.option('--hourly-rate', default=None, help='Hourly pay rate')
@with_appcontext
def create_user_cli(username, email, password, full_name, role, hourly_rate):
    """
    Create a new user.

    Password must meet strength requirements:
    - Minimum 8 characters
    - At least one uppercase letter
    - At least one lowercase letter
    - At least one digit
    """
    try:
        user = create_user(
            username=username,
            email=email,
            password=password,
            full_name=full_name,
            role=role,
            hourly_rate=hourly_rate,
        )
        click.echo(f"PASS Created user: {user.username} ({user.email}) with role '{user.role}'")
        click.echo("SECURITY Password securely hashed with bcrypt")

    except PasswordValidationError as e:
        click.echo(f"FAIL Password validation failed: {str(e)}")
        click.echo("Requirements: 8+ chars, uppercase, lowercase, digit")
    except BackofficeError as e:
        click.echo(f"FAIL Failed to create user: {str(e)}")


@users_group.command('list')
@with_appcontext
def list_users():
    """List all users with their role."""
    users = db.session.query(User).order_by(User.id.asc()).all()

    if not users:
        click.echo("No users found.")
        return

    click.echo("\n" + "="*90)
    click.echo(f"{'ID':<5} {'Username':<20} {'Full name':<25} {'Email':<30} {'Role':<6} {'Active'}")
    click.echo("="*90)

    for user in users:
        active_str = "Yes" if user.is_active else "No"
        click.echo(
            f"{user.id:<5} {user.username:<20} {user.full_name:<25} {user.email:<30} {user.role:<6} {active_str}"
        )

    click.echo("="*90 + "\n")


@click.group('attendance')
def attendance_group():
    """Attendance maintenance commands."""


@attendance_group.command('auto-close')
@click.option('--date', 'day', default=None, help='Attendance date (YYYY-MM-DD), defaults to today')
@with_appcontext
def auto_close(day):
    """Close every open attendance session for the date at 23:59:00."""
    try:
        target = parse_iso_date(day) if day else None
    except ValueError:
        raise click.BadParameter("must be YYYY-MM-DD", param_hint="--date")

    closed = attendance_service.auto_time_out_at_end_of_day(target)
    click.echo(f"PASS Closed {closed} open attendance session(s)")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
    app.cli.add_command(attendance_group)
