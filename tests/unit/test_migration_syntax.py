"""Tests for migration file syntax and structure."""

import importlib.util
from pathlib import Path

import pytest


MIGRATIONS_DIR = Path(__file__).parent.parent.parent / "migrations"


@pytest.fixture
def initial_migration() -> Path:
    migration_files = list((MIGRATIONS_DIR / "versions").glob("*_initial_schema.py"))

    assert len(migration_files) == 1, "Should have exactly one initial schema migration"
    return migration_files[0]


class TestMigrationSyntax:
    """Test that migration files are syntactically correct."""

    def test_initial_migration_imports(self, initial_migration):
        spec = importlib.util.spec_from_file_location("migration", initial_migration)
        migration_module = importlib.util.module_from_spec(spec)

        # This will raise an exception if there are syntax errors
        spec.loader.exec_module(migration_module)

        assert callable(migration_module.upgrade)
        assert callable(migration_module.downgrade)
        assert isinstance(migration_module.revision, str)
        assert migration_module.down_revision is None

    def test_alembic_env_syntax(self):
        env_file = MIGRATIONS_DIR / "env.py"
        assert env_file.exists(), "env.py should exist in migrations directory"

        content = env_file.read_text()

        assert 'from alembic import context' in content
        assert 'from sqlalchemy import' in content
        assert 'def run_migrations_offline()' in content
        assert 'def run_migrations_online()' in content
        assert 'get_settings().database_url' in content

    def test_migration_creates_all_required_tables(self, initial_migration):
        content = initial_migration.read_text()

        required_tables = [
            'users', 'auth_tokens', 'directors', 'genres',
            'movie_details', 'movies', 'movie_genres', 'movie_user_likes'
        ]
        for table in required_tables:
            assert f"create_table('{table}'" in content, f"Migration should create {table} table"

        # Indexes backing the common sort orders
        assert 'movies_created_desc' in content
        assert 'movies_like_count_desc' in content

        assert 'drop_table(' in content
        assert 'drop_index(' in content

    def test_pyproject_includes_needed_packages(self):
        content = (MIGRATIONS_DIR.parent / "pyproject.toml").read_text()

        for package in ['alembic', 'asyncpg', 'sqlalchemy', 'psycopg2-binary']:
            assert package in content
