"""create fixed-asset register tables

Revision ID: 20261019_create_siscont_tables
Revises:
Create Date: 2026-10-19

"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '20261019_create_siscont_tables'
down_revision = None
branch_labels = None
depends_on = None


def _ledger_columns():
    return [
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('activo_id', sa.Integer(), nullable=False),
        sa.Column('anio', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['activo_id'], ['sisevo_activos.id']),
    ]


def _money(name):
    return sa.Column(name, sa.String(length=32), nullable=False, server_default='0')


def upgrade():
    op.create_table(
        'sisevo_empresa',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('ruc', sa.String(length=20), nullable=False),
        sa.Column('razon_social', sa.String(length=255), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.UniqueConstraint('ruc', name='uq_sisevo_empresa_ruc'),
    )

    op.create_table(
        'sisevo_users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('username', sa.String(length=80), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=True),
        sa.Column('role', sa.String(length=32), nullable=False, server_default='asistente'),
        sa.Column('nombre', sa.String(length=160), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('empresa_id', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.Column('last_login_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['empresa_id'], ['sisevo_empresa.id'], ondelete='SET NULL'),
    )

    op.create_table(
        'sisevo_activos',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('codigo_activo', sa.String(length=64), nullable=False),
        sa.Column('cuenta_contable', sa.String(length=32), nullable=True),
        sa.Column('descripcion', sa.String(length=255), nullable=False),
        sa.Column('marca', sa.String(length=120), nullable=True),
        sa.Column('modelo', sa.String(length=120), nullable=True),
        sa.Column('numero_serie', sa.String(length=120), nullable=True),
        sa.Column('documento_autorizacion', sa.String(length=120), nullable=True),
        sa.Column('fecha_adquisicion', sa.DateTime(), nullable=True),
        sa.Column('fecha_uso', sa.DateTime(), nullable=True),
        sa.Column('metodo_aplicado', sa.String(length=32), nullable=True),
        sa.Column('estado', sa.String(length=32), nullable=True),
        sa.Column('empresa_id', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['empresa_id'], ['sisevo_empresa.id'], ondelete='SET NULL'),
    )

    op.create_table(
        'sisevo_movimientos',
        *_ledger_columns(),
        _money('saldo_inicial'),
        _money('adquisiciones'),
        _money('mejoras'),
        _money('retiros'),
        _money('otros_ajustes'),
    )

    op.create_table(
        'sisevo_valoracion',
        *_ledger_columns(),
        _money('valor_historico'),
        _money('ajuste_por_inflacion'),
        _money('valor_ajustado'),
    )

    op.create_table(
        'sisevo_depreciacion',
        *_ledger_columns(),
        _money('porcentaje_depreciacion'),
        _money('depreciacion_acumulada_anterior'),
        _money('depreciacion_ejercicio'),
        _money('depreciacion_retiros'),
        _money('depreciacion_otros_ajustes'),
        _money('depreciacion_acumulada_historica'),
        _money('ajuste_por_inflacion_depreciacion'),
        _money('depreciacion_acumulada_ajustada'),
    )

    op.create_table(
        'sisevo_importaciones',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('token', sa.String(length=32), nullable=False),
        sa.Column('storage_path', sa.String(length=512), nullable=False),
        sa.Column('original_filename', sa.String(length=255), nullable=True),
        sa.Column('size_bytes', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('sha256', sa.String(length=64), nullable=True),
        sa.Column('headers_json', sa.JSON(), nullable=False),
        sa.Column('row_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('status', sa.String(length=16), nullable=False, server_default='uploaded'),
        sa.Column('created_rows', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('updated_rows', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('skipped_rows', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('error', sa.Text(), nullable=True),
        sa.Column('user_id', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('distributed_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['sisevo_users.id'], ondelete='SET NULL'),
    )

    # indexes
    op.create_index('ix_sisevo_users_username', 'sisevo_users', ['username'], unique=True)
    op.create_index('ix_sisevo_activos_codigo_activo', 'sisevo_activos', ['codigo_activo'])
    for table in ('sisevo_movimientos', 'sisevo_valoracion', 'sisevo_depreciacion'):
        op.create_index(f'ix_{table}_activo_id', table, ['activo_id'])
        op.create_index(f'ix_{table}_anio', table, ['anio'])
    op.create_index('ix_sisevo_importaciones_token', 'sisevo_importaciones', ['token'], unique=True)


def downgrade():
    op.drop_index('ix_sisevo_importaciones_token', table_name='sisevo_importaciones')
    for table in ('sisevo_movimientos', 'sisevo_valoracion', 'sisevo_depreciacion'):
        op.drop_index(f'ix_{table}_anio', table_name=table)
        op.drop_index(f'ix_{table}_activo_id', table_name=table)
    op.drop_index('ix_sisevo_activos_codigo_activo', table_name='sisevo_activos')
    op.drop_index('ix_sisevo_users_username', table_name='sisevo_users')

    op.drop_table('sisevo_importaciones')
    op.drop_table('sisevo_depreciacion')
    op.drop_table('sisevo_valoracion')
    op.drop_table('sisevo_movimientos')
    op.drop_table('sisevo_activos')
    op.drop_table('sisevo_users')
    op.drop_table('sisevo_empresa')
