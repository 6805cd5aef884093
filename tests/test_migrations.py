from pathlib import Path

import pytest
from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, inspect
from sqlalchemy.orm import Session

from app.db.base import Base
from scripts.seed_admin import seed_admin

import app.models  # noqa: F401

ROOT = Path(__file__).parent.parent


@pytest.fixture
def database_url(tmp_path) -> str:
    return f"sqlite:///{tmp_path / 'migrations.db'}"


@pytest.fixture
def alembic_config(database_url) -> Config:
    config = Config()
    config.set_main_option("script_location", str(ROOT / "alembic"))
    config.set_main_option("sqlalchemy.url", database_url)
    return config


@pytest.fixture
def migrated_engine(alembic_config, database_url):
    command.upgrade(alembic_config, "head")
    engine = create_engine(database_url)
    yield engine
    engine.dispose()


class TestMigrations:
    """Tests for the Alembic revisions"""

    def test_upgrade_creates_model_tables(self, migrated_engine):
        inspector = inspect(migrated_engine)

        assert set(inspector.get_table_names()) - {"alembic_version"} == set(Base.metadata.tables)

    @pytest.mark.parametrize("table", ["users", "farmers", "admin_users"])
    def test_columns_match_models(self, migrated_engine, table):
        columns = {column["name"] for column in inspect(migrated_engine).get_columns(table)}

        assert columns == set(Base.metadata.tables[table].columns.keys())

    @pytest.mark.parametrize("table", ["users", "farmers", "admin_users"])
    def test_wallet_address_is_unique(self, migrated_engine, table):
        indexes = inspect(migrated_engine).get_indexes(table)

        wallet_indexes = [index for index in indexes if index["column_names"] == ["wallet_address"]]
        assert len(wallet_indexes) == 1
        assert bool(wallet_indexes[0]["unique"])

    def test_migrated_schema_accepts_admin(self, migrated_engine):
        with Session(migrated_engine) as db:
            admin = seed_admin(db, "0xAbCdEf0123456789AbCdEf0123456789AbCdEf01")

            assert admin.is_active is True
            assert admin.wallet_address == "0xabcdef0123456789abcdef0123456789abcdef01"

    def test_downgrade_drops_tables(self, alembic_config, migrated_engine):
        command.downgrade(alembic_config, "base")

        assert set(inspect(migrated_engine).get_table_names()) <= {"alembic_version"}
