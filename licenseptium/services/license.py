import binascii
import hashlib
import uuid
from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.orm import Session, selectinload

from licenseptium.models import Activation, License


class LicenseError(Exception):
    pass


class InvalidLicenseInput(LicenseError):
    pass


class LicenseNotFound(LicenseError):
    pass


def parse_key(value: str) -> uuid.UUID | None:
    try:
        return uuid.UUID(value.strip())
    except (AttributeError, ValueError):
        return None


def parse_checksum(value: str) -> bytes | None:
    try:
        return binascii.unhexlify(value)
    except (binascii.Error, TypeError, ValueError):
        return None


def derive_checksum(material: str) -> bytes:
    """Digest stored at issuance; validators send its hex form."""
    return hashlib.sha512(material.encode("utf-8")).digest()


def create_license(
    db: Session,
    comment: str,
    ip_limit: int = 1,
    expires_at: datetime | None = None,
    checksum_material: str | None = None,
) -> License:
    comment = comment.strip()
    if not comment:
        raise InvalidLicenseInput("Comment cannot be empty")
    if ip_limit < 1:
        raise InvalidLicenseInput("IP limit must be a positive number")
    if checksum_material is not None and not checksum_material:
        raise InvalidLicenseInput("Checksum cannot be empty")

    license_entry = License(
        key=uuid.uuid4(),
        comment=comment,
        ip_limit=ip_limit,
        expires_at=expires_at,
        checksum=derive_checksum(checksum_material) if checksum_material is not None else None,
    )
    db.add(license_entry)
    db.commit()
    return license_entry


def get_license(db: Session, key: uuid.UUID) -> License:
    license_entry = db.execute(
        select(License).options(selectinload(License.activations)).where(License.key == key)
    ).scalar_one_or_none()
    if not license_entry:
        raise LicenseNotFound(f"License {key} not found")
    return license_entry


def list_licenses(db: Session) -> list[tuple[License, int]]:
    activation_count = (
        select(func.count(Activation.address))
        .where(Activation.license_id == License.id)
        .correlate(License)
        .scalar_subquery()
    )
    rows = db.execute(select(License, activation_count).order_by(License.created_at.asc(), License.id.asc()))
    return [(row[0], row[1]) for row in rows]


def delete_license(db: Session, key: uuid.UUID) -> None:
    """Revoke a license. Its activations go with it."""
    license_entry = get_license(db, key)
    db.delete(license_entry)
    db.commit()
