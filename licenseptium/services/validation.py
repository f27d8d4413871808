"""License validation and activation admission."""
import enum
import hmac
import ipaddress
import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.exc import DBAPIError
from sqlalchemy.exc import TimeoutError as PoolTimeout
from sqlalchemy.orm import Session

from licenseptium.models import License
from licenseptium.services.activation import admit, count_addresses, is_activated
from licenseptium.services.license import parse_checksum, parse_key
from licenseptium.utils.time import as_utc, utcnow

logger = logging.getLogger(__name__)


class ErrorCategory(str, enum.Enum):
    client_input = "client_input"
    denial = "denial"
    unavailable = "unavailable"


class ValidationError(str, enum.Enum):
    address_not_found = "AddressNotFound"
    unsupported_address_family = "UnsupportedAddressFamily"
    malformed_key = "MalformedKey"
    malformed_checksum = "MalformedChecksum"
    invalid_key = "InvalidKey"
    expired_key = "ExpiredKey"
    invalid_checksum = "InvalidChecksum"
    activation_limit_reached = "ActivationLimitReached"
    store_unavailable = "StoreUnavailable"

    @property
    def category(self) -> ErrorCategory:
        return _CATEGORIES[self]

    @property
    def message(self) -> str:
        return _MESSAGES[self]


_CATEGORIES = {
    ValidationError.address_not_found: ErrorCategory.client_input,
    ValidationError.unsupported_address_family: ErrorCategory.client_input,
    ValidationError.malformed_key: ErrorCategory.client_input,
    ValidationError.malformed_checksum: ErrorCategory.client_input,
    ValidationError.invalid_key: ErrorCategory.denial,
    ValidationError.expired_key: ErrorCategory.denial,
    ValidationError.invalid_checksum: ErrorCategory.denial,
    ValidationError.activation_limit_reached: ErrorCategory.denial,
    ValidationError.store_unavailable: ErrorCategory.unavailable,
}

_MESSAGES = {
    ValidationError.address_not_found: "IP address of the validator was not found",
    ValidationError.unsupported_address_family: "IP address of the validator is not IPv4",
    ValidationError.malformed_key: "Key sent by the validator is not UUID",
    ValidationError.malformed_checksum: "Checksum sent by the validator is not hexadecimal",
    ValidationError.invalid_key: "This license key is invalid",
    ValidationError.expired_key: "This license key has expired",
    ValidationError.invalid_checksum: "Checksum does not match this license key",
    ValidationError.activation_limit_reached: "This license key reached its activation limit",
    ValidationError.store_unavailable: "Cannot access the database",
}


@dataclass(frozen=True)
class ValidationOutcome:
    key: str
    checksum: str | None
    error: ValidationError | None = None
    activated: bool = False

    @property
    def admitted(self) -> bool:
        return self.error is None


def parse_ipv4(address: str) -> str | None:
    """Return the canonical dotted-quad form, or None for anything but IPv4."""
    try:
        parsed = ipaddress.ip_address(address)
    except ValueError:
        return None
    if parsed.version != 4:
        return None
    return str(parsed)


def validate(
    db: Session,
    key: str,
    checksum: str | None,
    address: str | None,
    *,
    require_checksum: bool = True,
    now: datetime | None = None,
) -> ValidationOutcome:
    """Decide whether ``address`` may activate ``key`` and record the activation.

    Every failure comes back as an outcome carrying a ValidationError; nothing
    is raised to the caller. At most one activation row is written per call,
    inside a transaction that holds the license row lock, so concurrent calls
    for the same key cannot admit more than ``ip_limit`` addresses.

    ``db`` must not have a transaction in progress.
    """
    def deny(error: ValidationError) -> ValidationOutcome:
        return ValidationOutcome(key=key, checksum=checksum, error=error)

    if not address:
        return deny(ValidationError.address_not_found)
    ipv4 = parse_ipv4(address)
    if ipv4 is None:
        return deny(ValidationError.unsupported_address_family)

    license_key = parse_key(key)
    if license_key is None:
        return deny(ValidationError.malformed_key)

    now = as_utc(now) if now else utcnow()
    try:
        with db.begin():
            error, activated = _admit(db, license_key, checksum, ipv4, require_checksum, now)
    except (DBAPIError, PoolTimeout):
        logger.exception("Validation of %s from %s failed on the store", key, ipv4)
        return deny(ValidationError.store_unavailable)

    if error:
        logger.warning("Denied %s for %s: %s", key, ipv4, error.value)
        return deny(error)

    if activated:
        logger.info("Activated %s for %s", key, ipv4)
    return ValidationOutcome(key=key, checksum=checksum, activated=activated)


def _admit(
    db: Session,
    license_key,
    checksum: str | None,
    address: str,
    require_checksum: bool,
    now: datetime,
) -> tuple[ValidationError | None, bool]:
    license_entry = db.execute(
        select(License).where(License.key == license_key).with_for_update()
    ).scalar_one_or_none()
    if not license_entry:
        return ValidationError.invalid_key, False

    if license_entry.expires_at is not None and now >= as_utc(license_entry.expires_at):
        return ValidationError.expired_key, False

    if require_checksum:
        decoded = parse_checksum(checksum) if checksum is not None else None
        if decoded is None:
            return ValidationError.malformed_checksum, False
        if license_entry.checksum is None or not hmac.compare_digest(decoded, license_entry.checksum):
            return ValidationError.invalid_checksum, False

    if is_activated(db, license_entry.id, address):
        return None, False

    if admit(db, license_entry, address, now):
        return None, True

    # Nothing inserted: either the pair landed concurrently or the key is full.
    if is_activated(db, license_entry.id, address):
        return None, False

    if logger.isEnabledFor(logging.DEBUG):
        logger.debug(
            "License %s holds %d of %d activations",
            license_entry.key,
            count_addresses(db, license_entry.id),
            license_entry.ip_limit,
        )
    return ValidationError.activation_limit_reached, False
