# Overview: Flask CLI command groups for bootstrap, demo data, and inspection.

# backend/salesdash/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py.
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap:
# - python -m flask system init --email admin@salesdash.local --password "Password123!"
#   Create tables (dev databases without migrations) and the first admin account.
# - python -m flask system seed-demo
#   Add sample employees, products and price history.
#
# Users:
# - python -m flask users create --email clerk@salesdash.local --password "Password123!" --role customer
# - python -m flask users list
#
# Permissions:
# - python -m flask perms list [--category SALES]

from datetime import date

import click
from flask.cli import with_appcontext

from .extensions import db
from .models import Profile, Employee, Product, PriceHistory
from .models.auth import VALID_ROLES, ROLE_ADMIN
from .permissions import PERMISSION_DEFINITIONS, get_permissions_by_category
from .services import auth_service
from .validation import ValidationError, ConflictError


@click.group('system')
def system_group():
    """System bootstrap commands."""


@system_group.command('init')
@click.option('--email', default='admin@salesdash.local', show_default=True, help='Admin email')
@click.option('--password', default='Password123!', show_default=True, help='Admin password')
@with_appcontext
def init_system(email, password):
    """
    Create tables and the first admin account (idempotent).

    SECURITY: Change the default password immediately in production!
    """
    click.echo("START Initializing SalesDash...")

    db.create_all()
    click.echo("PASS Tables created")

    admin = db.session.query(Profile).filter_by(role=ROLE_ADMIN).first()
    if admin:
        click.echo(f"PASS Using existing admin: {admin.email}")
        return

    try:
        admin = auth_service.create_user(email, password, first_name="System", last_name="Admin", role=ROLE_ADMIN)
    except (ValidationError, ConflictError) as e:
        click.echo(f"FAIL Could not create admin: {e}")
        return
    click.echo(f"PASS Created admin: {admin.email}")


DEMO_EMPLOYEES = [
    ("E001", "Maria", "Santos"),
    ("E002", "Jose", "Reyes"),
    ("E003", "Ana", "Cruz"),
]

DEMO_PRODUCTS = [
    ("AK0001", "Apple Kiwi Juice", "bottle", [(date(2024, 1, 1), 4500), (date(2024, 6, 1), 4900)]),
    ("PC0001", "Pen Cap Blue", "box", [(date(2024, 1, 1), 12000)]),
    ("NB0001", "Notebook A5", "pc", [(date(2024, 1, 1), 3500), (date(2024, 3, 15), 3800)]),
]


@system_group.command('seed-demo')
@with_appcontext
def seed_demo():
    """Add sample employees, products and price history (skips existing rows)."""
    created = 0

    for empno, first, last in DEMO_EMPLOYEES:
        if db.session.get(Employee, empno) is None:
            db.session.add(Employee(empno=empno, firstname=first, lastname=last))
            created += 1

    for prodcode, description, unit, prices in DEMO_PRODUCTS:
        if db.session.get(Product, prodcode) is None:
            db.session.add(Product(prodcode=prodcode, description=description, unit=unit))
            created += 1
        for effdate, cents in prices:
            if db.session.get(PriceHistory, (prodcode, effdate)) is None:
                db.session.add(PriceHistory(prodcode=prodcode, effdate=effdate, unitprice_cents=cents))
                created += 1

    db.session.commit()
    click.echo(f"PASS Seeded {created} demo rows")


@click.group('users')
def users_group():
    """User inspection and bootstrap commands."""


@users_group.command('create')
@click.option('--email', prompt=True, help='Email address')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password')
@click.option('--role', type=click.Choice(list(VALID_ROLES)), default='customer', show_default=True)
@click.option('--first-name', default=None)
@click.option('--last-name', default=None)
@with_appcontext
def create_user_cli(email, password, role, first_name, last_name):
    """
    Create a user.

    Password must meet strength requirements:
    8+ chars, uppercase, lowercase, digit, special char.
    """
    try:
        user = auth_service.create_user(email, password, first_name=first_name, last_name=last_name, role=role)
    except auth_service.PasswordValidationError as e:
        click.echo(f"FAIL Password validation failed: {e}")
        return
    except (ValidationError, ConflictError) as e:
        click.echo(f"FAIL Failed to create user: {e}")
        return

    click.echo(f"PASS Created user: {user.email} with role '{user.role}'")


@users_group.command('list')
@with_appcontext
def list_users_cli():
    users = db.session.query(Profile).order_by(Profile.id.asc()).all()
    click.echo(f"{'ID':<5} {'Email':<35} {'Role':<10} {'Active'}")
    click.echo("-" * 60)
    for user in users:
        click.echo(f"{user.id:<5} {user.email:<35} {user.role:<10} {user.is_active}")
    click.echo(f"\n Total: {len(users)} users\n")


@click.group('perms')
def perms_group():
    """Permission inspection commands."""


@perms_group.command('list')
@click.option('--category', help='Filter by category')
@with_appcontext
def list_permissions_cli(category):
    """List permission codes grouped by category, with the flag that grants each."""
    perms = get_permissions_by_category(category) if category else PERMISSION_DEFINITIONS

    current_category = None
    for code, name, _description, perm_category, flag in perms:
        if perm_category != current_category:
            if current_category:
                click.echo("")
            click.echo(f"CATEGORY {perm_category}")
            click.echo("-" * 80)
            current_category = perm_category
        click.echo(f"  {code:<24} {name:<22} {flag or '(admin only)'}")

    click.echo(f"\n Total: {len(perms)} permissions\n")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
    app.cli.add_command(perms_group)
