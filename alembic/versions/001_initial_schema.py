"""Initial schema

Revision ID: 001
Revises: 
Create Date: 2026-10-19

"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ACTIVE_STATUS_CLAUSE = "status IN ('pending', 'accepted')"


def upgrade() -> None:
    op.create_table(
        'categories',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(100), nullable=False, unique=True),
    )
    op.create_index('ix_categories_id', 'categories', ['id'])

    op.create_table(
        'subcategories',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('category_id', sa.Integer(), sa.ForeignKey('categories.id'), nullable=False),
    )
    op.create_index('ix_subcategories_id', 'subcategories', ['id'])
    op.create_index('ix_subcategories_category_id', 'subcategories', ['category_id'])

    op.create_table(
        'skills',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('category_id', sa.Integer(), sa.ForeignKey('categories.id'), nullable=False),
        sa.Column('subcategory_id', sa.Integer(), sa.ForeignKey('subcategories.id'), nullable=True),
    )
    op.create_index('ix_skills_id', 'skills', ['id'])
    op.create_index('ix_skills_category_id', 'skills', ['category_id'])
    op.create_index('ix_skills_subcategory_id', 'skills', ['subcategory_id'])

    op.create_table(
        'users',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('username', sa.String(100), nullable=True),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('skills_selected', sa.Boolean(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    op.create_table(
        'user_skills',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.String(36), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('skill_id', sa.Integer(), sa.ForeignKey('skills.id'), nullable=False),
        sa.UniqueConstraint('user_id', 'skill_id', name='uq_user_skills_user_skill'),
    )
    op.create_index('ix_user_skills_user_id', 'user_skills', ['user_id'])

    op.create_table(
        'barters',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('owner_id', sa.String(36), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('title', sa.String(100), nullable=False),
        sa.Column('description', sa.String(150), nullable=False),
        sa.Column('mode', sa.String(20), nullable=False, server_default='online'),
        sa.Column('teach_skill_id', sa.Integer(), sa.ForeignKey('skills.id'), nullable=False),
        sa.Column('learn_skill_id', sa.Integer(), sa.ForeignKey('skills.id'), nullable=False),
        sa.Column('skill_rating', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_barters_id', 'barters', ['id'])
    op.create_index('ix_barters_owner_id', 'barters', ['owner_id'])
    op.create_index('ix_barters_created_at', 'barters', ['created_at'])

    op.create_table(
        'bookmarks',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.String(36), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('barter_id', sa.Integer(), sa.ForeignKey('barters.id'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint('user_id', 'barter_id', name='uq_bookmarks_user_barter'),
    )
    op.create_index('ix_bookmarks_user_id', 'bookmarks', ['user_id'])

    op.create_table(
        'barter_requests',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('barter_id', sa.Integer(), sa.ForeignKey('barters.id'), nullable=False),
        sa.Column('requester_id', sa.String(36), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('owner_id', sa.String(36), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_barter_requests_id', 'barter_requests', ['id'])
    op.create_index('ix_barter_requests_requester_id', 'barter_requests', ['requester_id'])
    op.create_index('ix_barter_requests_owner_id', 'barter_requests', ['owner_id'])
    op.create_index('ix_barter_requests_created_at', 'barter_requests', ['created_at'])
    op.create_index('ix_barter_requests_barter_requester', 'barter_requests', ['barter_id', 'requester_id'])
    op.create_index(
        'uq_barter_requests_active',
        'barter_requests',
        ['barter_id', 'requester_id'],
        unique=True,
        postgresql_where=sa.text(ACTIVE_STATUS_CLAUSE),
        sqlite_where=sa.text(ACTIVE_STATUS_CLAUSE),
    )


def downgrade() -> None:
    op.drop_table('barter_requests')
    op.drop_table('bookmarks')
    op.drop_table('barters')
    op.drop_table('user_skills')
    op.drop_table('users')
    op.drop_table('skills')
    op.drop_table('subcategories')
    op.drop_table('categories')
