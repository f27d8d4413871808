"""Activation ledger queries used by the validation engine.

All three functions must run inside the transaction that holds the license
row lock, so the membership test, the count and the insert agree with each
other.
"""
from datetime import datetime

from sqlalchemy import func, literal, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

from licenseptium.models import Activation, License

_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def is_activated(db: Session, license_id: int, address: str) -> bool:
    found = db.execute(
        select(Activation.address).where(
            Activation.license_id == license_id,
            Activation.address == address,
        )
    ).first()
    return found is not None


def count_addresses(db: Session, license_id: int) -> int:
    return db.execute(
        select(func.count(func.distinct(Activation.address))).where(Activation.license_id == license_id)
    ).scalar_one()


def admit(db: Session, license: License, address: str, now: datetime) -> bool:
    """Insert the (address, license) activation if the key still has room.

    The limit check and the insert are a single statement, and a duplicate
    pair is absorbed by ON CONFLICT DO NOTHING. Returns True when a row was
    written.
    """
    insert = _INSERTS[db.get_bind().dialect.name]

    columns = Activation.__table__.c
    used = (
        select(func.count(func.distinct(Activation.address)))
        .where(Activation.license_id == license.id)
        .correlate(None)
        .scalar_subquery()
    )
    candidate = select(
        literal(address, columns.address.type),
        literal(license.id, columns.license_id.type),
        literal(now, columns.activated_at.type),
    ).where(used < license.ip_limit)

    statement = (
        insert(Activation)
        .from_select(["address", "license_id", "activated_at"], candidate)
        .on_conflict_do_nothing(index_elements=["address", "license_id"])
    )
    result = db.execute(statement)
    return result.rowcount == 1
