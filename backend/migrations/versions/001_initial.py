"""Initial migration - create the students table

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-19

Creates the students table holding raw academic metrics and the derived
dropout probability / risk level, with range checks on every metric and
indexes for the default listing order (created_at) and report order
(dropout_probability).
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = '001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'students',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('attendance', sa.Integer(), nullable=False),
        sa.Column('cgpa', sa.Float(), nullable=False),
        sa.Column('assignment_completion', sa.Integer(), nullable=False),
        sa.Column('dropout_probability', sa.Integer(), nullable=False),
        sa.Column('risk_level', sa.String(10), nullable=False, server_default='Low'),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint('attendance >= 0 AND attendance <= 100', name='ck_students_attendance'),
        sa.CheckConstraint('cgpa >= 0 AND cgpa <= 10', name='ck_students_cgpa'),
        sa.CheckConstraint('assignment_completion >= 0 AND assignment_completion <= 100',
                           name='ck_students_assignment_completion'),
        sa.CheckConstraint('dropout_probability >= 0 AND dropout_probability <= 100',
                           name='ck_students_dropout_probability'),
        sa.CheckConstraint("risk_level IN ('Low', 'Medium', 'High')", name='ck_students_risk_level'),
    )

    op.create_index('idx_students_created_at', 'students', ['created_at'])
    op.create_index('idx_students_dropout_probability', 'students', ['dropout_probability'])


def downgrade() -> None:
    op.drop_index('idx_students_dropout_probability', table_name='students')
    op.drop_index('idx_students_created_at', table_name='students')
    op.drop_table('students')
