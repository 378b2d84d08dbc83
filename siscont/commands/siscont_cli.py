"""
SISCONT CLI commands

Usage:
    flask siscont create-admin --username admin
    flask siscont import-file inventario.xlsx --anio 2024
    flask siscont export --tipo formato71 --anio 2024 --output reporte.xlsx
"""

import click
from flask.cli import with_appcontext

from siscont.errors import SiscontError
from siscont.extensions import db
from siscont.models import User, UserRole
from siscont.services.pdf_export import report_to_pdf_bytes
from siscont.services.report_engine import build_report, parse_year
from siscont.services.spreadsheet_import import distribute, open_local_file
from siscont.services.xlsx_export import report_to_xlsx_bytes


@click.group()
def siscont():
    """Fixed-asset register commands."""
    pass


@siscont.command('create-admin')
@click.option('--username', default='admin', show_default=True, help='Login name')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password')
@click.option('--nombre', default='Administrador Principal', show_default=True)
@click.option('--email', default='admin@localhost', show_default=True)
@with_appcontext
def create_admin(username, password, nombre, email):
    """Create the initial admin user (no-op when the username exists)."""
    if User.query.filter_by(username=username).first():
        click.secho(f"El usuario '{username}' ya existe", fg='yellow')
        return

    user = User(username=username, role=UserRole.ADMIN, nombre=nombre, email=email)
    user.set_password(password)
    db.session.add(user)
    db.session.commit()
    click.secho(f"✓ Usuario administrador '{username}' creado (id={user.id})", fg='green')


@siscont.command('import-file')
@click.argument('path', type=click.Path(exists=True, dir_okay=False))
@click.option('--anio', default=None, help='Year of the seeded depreciation rows (default: current year)')
@click.option('--preview-only', is_flag=True, help='Parse and register the file without distributing it')
@with_appcontext
def import_file(path, anio, preview_only):
    """Upload a workbook from disk and distribute it into the registry."""
    try:
        import_session, sheet = open_local_file(path)
        click.echo(f"Importación {import_session.token}: {len(sheet.rows)} filas, {len(sheet.headers)} columnas")
        if preview_only:
            return
        result = distribute(import_session, year=parse_year(anio))
    except SiscontError as e:
        click.secho(f"✗ {e.message}", fg='red')
        raise SystemExit(1)

    click.secho(
        f"✓ creados={result.created} actualizados={result.updated} omitidos={result.skipped} "
        f"depreciaciones={result.depreciacion_created}",
        fg='green',
    )
    if result.placeholder_dates:
        click.secho(
            f"! {result.placeholder_dates} activos nuevos con fechas provisionales: revise fecha de adquisición y uso",
            fg='yellow',
        )


@siscont.command('export')
@click.option('--tipo', default='formato71', show_default=True, help='formato71 | resumen | movimientos')
@click.option('--anio', default='todos', show_default=True, help='Year or "todos"')
@click.option('--formato', type=click.Choice(['xlsx', 'pdf']), default='xlsx', show_default=True)
@click.option('--output', type=click.Path(dir_okay=False, writable=True), default=None)
@with_appcontext
def export(tipo, anio, formato, output):
    """Write a report to disk."""
    try:
        report = build_report(anio, tipo)
    except SiscontError as e:
        click.secho(f"✗ {e.message}", fg='red')
        raise SystemExit(1)

    content = report_to_xlsx_bytes(report) if formato == 'xlsx' else report_to_pdf_bytes(report)
    output = output or f"reporte-{tipo}-{anio}.{formato}"
    with open(output, 'wb') as f:
        f.write(content)
    click.secho(f"✓ {len(report.rows)} filas -> {output}", fg='green')
