"""initial_schema

Revision ID: 3c9a1e7d52b4
Revises: 
Create Date: 2026-10-19 09:12:31.204518

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '3c9a1e7d52b4'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list:
    return [
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.text('now()')),
    ]


def upgrade() -> None:
    # Create users table
    op.create_table('users',
        sa.Column('id', sa.Integer(), sa.Identity(), nullable=False),
        sa.Column('email', sa.Text(), nullable=False),
        sa.Column('password', sa.Text(), nullable=False),
        sa.Column('role', sa.SmallInteger(), nullable=False, server_default=sa.text('2')),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email', name='users_email_key'),
        sa.CheckConstraint('role IN (0, 1, 2)', name='users_role_check')
    )

    # Create auth_tokens table
    op.create_table('auth_tokens',
        sa.Column('token_hash', sa.LargeBinary(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('token_type', sa.Text(), nullable=False),
        sa.Column('expires_at', sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.Column('last_used', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('token_hash'),
        sa.CheckConstraint("token_type IN ('access', 'refresh')", name='auth_tokens_type_check')
    )

    # Create directors table
    op.create_table('directors',
        sa.Column('id', sa.Integer(), sa.Identity(), nullable=False),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('dob', sa.Date(), nullable=False),
        sa.Column('nationality', sa.Text(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id')
    )

    # Create genres table
    op.create_table('genres',
        sa.Column('id', sa.Integer(), sa.Identity(), nullable=False),
        sa.Column('name', sa.Text(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name', name='genres_name_key')
    )

    # Create movie_details table
    op.create_table('movie_details',
        sa.Column('id', sa.Integer(), sa.Identity(), nullable=False),
        sa.Column('detail', sa.Text(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )

    # Create movies table
    op.create_table('movies',
        sa.Column('id', sa.Integer(), sa.Identity(), nullable=False),
        sa.Column('title', sa.Text(), nullable=False),
        sa.Column('detail_id', sa.Integer(), nullable=False),
        sa.Column('director_id', sa.Integer(), nullable=False),
        sa.Column('creator_id', sa.Integer(), nullable=True),
        sa.Column('movie_file_path', sa.Text(), nullable=False),
        sa.Column('like_count', sa.Integer(), nullable=False, server_default=sa.text('0')),
        sa.Column('dislike_count', sa.Integer(), nullable=False, server_default=sa.text('0')),
        *_timestamps(),
        sa.ForeignKeyConstraint(['detail_id'], ['movie_details.id']),
        sa.ForeignKeyConstraint(['director_id'], ['directors.id']),
        sa.ForeignKeyConstraint(['creator_id'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('title', name='movies_title_key'),
        sa.UniqueConstraint('detail_id', name='movies_detail_id_key')
    )

    # Create movie_genres join table
    op.create_table('movie_genres',
        sa.Column('movie_id', sa.Integer(), nullable=False),
        sa.Column('genre_id', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['movie_id'], ['movies.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['genre_id'], ['genres.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('movie_id', 'genre_id')
    )

    # Create movie_user_likes table
    op.create_table('movie_user_likes',
        sa.Column('movie_id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('is_like', sa.Boolean(), nullable=False),
        sa.ForeignKeyConstraint(['movie_id'], ['movies.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('movie_id', 'user_id')
    )

    # Indexes backing the default keyset orders
    op.create_index(
        'movies_created_desc',
        'movies',
        ['created_at', 'id'],
        unique=False,
        postgresql_ops={'created_at': 'DESC', 'id': 'DESC'}
    )
    op.create_index(
        'movies_like_count_desc',
        'movies',
        ['like_count', 'id'],
        unique=False,
        postgresql_ops={'like_count': 'DESC', 'id': 'DESC'}
    )
    op.create_index('auth_tokens_user_id', 'auth_tokens', ['user_id'], unique=False)


def downgrade() -> None:
    # Drop indexes first
    op.drop_index('auth_tokens_user_id', table_name='auth_tokens')
    op.drop_index('movies_like_count_desc', table_name='movies')
    op.drop_index('movies_created_desc', table_name='movies')

    # Drop tables in reverse order due to foreign key constraints
    op.drop_table('movie_user_likes')
    op.drop_table('movie_genres')
    op.drop_table('movies')
    op.drop_table('movie_details')
    op.drop_table('genres')
    op.drop_table('directors')
    op.drop_table('auth_tokens')
    op.drop_table('users')
