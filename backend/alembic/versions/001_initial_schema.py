"""Initial schema baseline

This migration creates the complete database schema for the Intern Data
Reconciliation Service.

Tables:
    - interns: Trainees keyed by intern code
    - auth_users: Access accounts provisioned for imported interns
    - teams: Teams keyed by name, with an optional leader
    - team_members: Intern <-> team membership
    - projects: Projects keyed by name, with an optional manager
    - project_teams: Project <-> team assignment
    - modules: Units of work, unique per project
    - functions: Functions, unique per module

Revision ID: 001
Revises: None
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # ==========================================================================
    # INTERNS
    # ==========================================================================
    op.create_table(
        'interns',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        sa.Column('intern_code', sa.String(), nullable=False, unique=True, index=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('email', sa.String(), nullable=True, index=True),
        sa.Column('institute', sa.String(), nullable=True),
        sa.Column('training_start_date', sa.Date(), nullable=True),
        sa.Column('training_end_date', sa.Date(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    )

    # ==========================================================================
    # AUTH USERS
    # ==========================================================================
    op.create_table(
        'auth_users',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        sa.Column('email', sa.String(), nullable=False, unique=True, index=True),
        sa.Column('password', sa.String(), nullable=False, server_default=''),
        sa.Column('role', sa.Enum('ADMIN', 'INTERN', name='accountrole'), nullable=False, server_default='INTERN'),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('trainee_id', sa.String(), nullable=True, index=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )

    # ==========================================================================
    # TEAMS
    # ==========================================================================
    op.create_table(
        'teams',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        sa.Column('team_name', sa.String(), nullable=False, unique=True, index=True),
        sa.Column('leader_id', sa.Integer(), sa.ForeignKey('interns.id'), nullable=True, index=True),
        sa.Column('leader_account_id', sa.Integer(), sa.ForeignKey('auth_users.id'), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    )

    op.create_table(
        'team_members',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        sa.Column('team_id', sa.Integer(), sa.ForeignKey('teams.id'), nullable=False, index=True),
        sa.Column('intern_id', sa.Integer(), sa.ForeignKey('interns.id'), nullable=False, index=True),
        sa.Column('joined_at', sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint('team_id', 'intern_id', name='uq_team_member'),
    )

    # ==========================================================================
    # PROJECTS
    # ==========================================================================
    op.create_table(
        'projects',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        sa.Column('project_name', sa.String(), nullable=False, unique=True, index=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('start_date', sa.Date(), nullable=True),
        sa.Column('target_date', sa.Date(), nullable=True),
        sa.Column('status', sa.Enum('PLANNED', 'IN_PROGRESS', 'COMPLETED', 'ON_HOLD', name='projectstatus'), nullable=False, server_default='PLANNED'),
        sa.Column('manager_id', sa.Integer(), sa.ForeignKey('interns.id'), nullable=True, index=True),
        sa.Column('manager_account_id', sa.Integer(), sa.ForeignKey('auth_users.id'), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    )

    op.create_table(
        'project_teams',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        sa.Column('project_id', sa.Integer(), sa.ForeignKey('projects.id'), nullable=False, index=True),
        sa.Column('team_id', sa.Integer(), sa.ForeignKey('teams.id'), nullable=False, index=True),
        sa.Column('assigned_at', sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint('project_id', 'team_id', name='uq_project_team'),
    )

    # ==========================================================================
    # MODULES & FUNCTIONS
    # ==========================================================================
    op.create_table(
        'modules',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        sa.Column('module_name', sa.String(), nullable=False, index=True),
        sa.Column('project_id', sa.Integer(), sa.ForeignKey('projects.id'), nullable=False, index=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('owner_id', sa.Integer(), sa.ForeignKey('interns.id'), nullable=True, index=True),
        sa.Column('status', sa.Enum('NOT_STARTED', 'IN_PROGRESS', 'COMPLETED', name='modulestatus'), nullable=False, server_default='NOT_STARTED'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint('module_name', 'project_id', name='uq_module_project'),
    )

    op.create_table(
        'functions',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        sa.Column('function_name', sa.String(), nullable=False, index=True),
        sa.Column('module_id', sa.Integer(), sa.ForeignKey('modules.id'), nullable=False, index=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('developer_id', sa.Integer(), sa.ForeignKey('interns.id'), nullable=True, index=True),
        sa.Column('status', sa.Enum('PENDING', 'IN_DEVELOPMENT', 'COMPLETED', name='functionstatus'), nullable=False, server_default='PENDING'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint('function_name', 'module_id', name='uq_function_module'),
    )


def downgrade() -> None:
    op.drop_table('functions')
    op.drop_table('modules')
    op.drop_table('project_teams')
    op.drop_table('projects')
    op.drop_table('team_members')
    op.drop_table('teams')
    op.drop_table('auth_users')
    op.drop_table('interns')

    # Drop enums
    op.execute('DROP TYPE IF EXISTS functionstatus')
    op.execute('DROP TYPE IF EXISTS modulestatus')
    op.execute('DROP TYPE IF EXISTS projectstatus')
    op.execute('DROP TYPE IF EXISTS accountrole')
