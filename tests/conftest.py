import os
from datetime import datetime

import pytest

from licenseptium.config import Settings
from licenseptium.db import Base, build_engine, build_sessionmaker, create_tables
from licenseptium.models import Activation, License
from licenseptium.services.license import create_license

CHECKSUM_MATERIAL = "build-2024.1"


@pytest.fixture
def settings(tmp_path) -> Settings:
    database_url = os.environ.get("TEST_DATABASE_URL") or f"sqlite:///{tmp_path / 'licenses.db'}"
    return Settings(DATABASE_URL=database_url, REQUIRE_CHECKSUM=True, DATABASE_TIMEOUT_SECONDS=30)


@pytest.fixture
def engine(settings):
    engine = build_engine(settings)
    create_tables(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_sessionmaker(engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def make_license(session_factory):
    def factory(
        ip_limit: int = 1,
        expires_at: datetime | None = None,
        checksum_material: str | None = CHECKSUM_MATERIAL,
        comment: str = "test license",
    ) -> License:
        with session_factory() as session:
            return create_license(
                session,
                comment=comment,
                ip_limit=ip_limit,
                expires_at=expires_at,
                checksum_material=checksum_material,
            )

    return factory


@pytest.fixture
def ledger(session_factory):
    def addresses(license_id: int) -> list[str]:
        with session_factory() as session:
            rows = session.query(Activation.address).filter(Activation.license_id == license_id).all()
            return sorted(row.address for row in rows)

    return addresses
