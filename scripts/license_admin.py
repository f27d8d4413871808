import argparse
from datetime import date, datetime, time, timezone

from licenseptium.config import get_settings
from licenseptium.db import build_engine, build_sessionmaker, create_tables
from licenseptium.models import License
from licenseptium.services.license import (
    LicenseError,
    create_license,
    delete_license,
    get_license,
    list_licenses,
    parse_key,
)


def parse_expiry(value: str) -> datetime | None:
    """Accept 'infinity', a Unix timestamp, an ISO date or an ISO datetime."""
    value = value.strip()
    if not value or value.lower() == "infinity":
        return None
    try:
        timestamp = float(value)
    except ValueError:
        pass
    else:
        try:
            return datetime.fromtimestamp(timestamp, tz=timezone.utc)
        except (OverflowError, OSError) as exc:
            raise ValueError(f"Timestamp out of range: {value}") from exc
    if "T" not in value:
        parsed_date = date.fromisoformat(value)
        parsed = datetime.combine(parsed_date, time(23, 59, 59))
    else:
        parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_expiry(license_entry: License) -> str:
    return license_entry.expires_at.isoformat() if license_entry.expires_at else "infinity"


def print_license(license_entry: License) -> None:
    print(f"key: {license_entry.key}")
    print(f"comment: {license_entry.comment}")
    print(f"ip_limit: {license_entry.ip_limit}")
    print(f"expires_at: {format_expiry(license_entry)}")
    print(f"checksum: {'set' if license_entry.checksum else '-'}")
    print(f"created_at: {license_entry.created_at.isoformat()}")


def confirm(prompt: str) -> bool:
    answer = input(f"{prompt} (n) ").strip().lower()
    return answer == "y" or "yes" in answer


def cmd_create(db, args) -> int:
    try:
        expires_at = parse_expiry(args.expires_at)
    except ValueError:
        print("Expiration date must be a Unix time, an ISO date or 'infinity'")
        return 1
    license_entry = create_license(
        db,
        comment=args.comment,
        ip_limit=args.ip_limit,
        expires_at=expires_at,
        checksum_material=args.checksum,
    )
    print("New license successfully created!")
    print(f"License key: {license_entry.key}")
    return 0


def cmd_delete(db, args) -> int:
    key = parse_key(args.key)
    if key is None:
        print("Key format must be UUID")
        return 1
    if not args.yes:
        print("Deleting a license is irreversible!")
        if not confirm("Are you sure?"):
            print("Terminating delete process")
            return 1
    delete_license(db, key)
    print("License deleted successfully!")
    return 0


def cmd_list(db, args) -> int:
    rows = list_licenses(db)
    if not rows:
        print("No licenses found")
        return 0
    for license_entry, activations in rows:
        print(
            f"{license_entry.key}\t{activations}/{license_entry.ip_limit}\t"
            f"{format_expiry(license_entry)}\t{license_entry.comment}"
        )
    return 0


def cmd_show(db, args) -> int:
    key = parse_key(args.key)
    if key is None:
        print("Key format must be UUID")
        return 1
    license_entry = get_license(db, key)
    print_license(license_entry)
    if not license_entry.activations:
        print("No activations")
        return 0
    for activation in sorted(license_entry.activations, key=lambda item: item.activated_at):
        print(f"{activation.address}\t{activation.activated_at.isoformat()}")
    return 0


COMMANDS = {
    "create-license": cmd_create,
    "delete-license": cmd_delete,
    "list-licenses": cmd_list,
    "show-license": cmd_show,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Admin console for license keys")
    subparsers = parser.add_subparsers(dest="command", required=True)

    create_parser = subparsers.add_parser("create-license")
    create_parser.add_argument("--comment", required=True, help="Describes the license owner, no effect")
    create_parser.add_argument("--ip-limit", type=int, default=1)
    create_parser.add_argument("--expires-at", default="infinity", help="Unix time, ISO date or 'infinity'")
    create_parser.add_argument("--checksum", default=None, help="Material hashed into the checksum (case sensitive)")

    delete_parser = subparsers.add_parser("delete-license")
    delete_parser.add_argument("--key", required=True)
    delete_parser.add_argument("--yes", action="store_true")

    subparsers.add_parser("list-licenses")

    show_parser = subparsers.add_parser("show-license")
    show_parser.add_argument("--key", required=True)

    return parser


def run(db, args) -> int:
    try:
        return COMMANDS[args.command](db, args)
    except LicenseError as exc:
        print(exc)
        return 1


def main() -> int:
    parser = build_parser()
    args = parser.parse_args()

    engine = build_engine(get_settings())
    create_tables(engine)
    db = build_sessionmaker(engine)()
    try:
        return run(db, args)
    finally:
        db.close()
        engine.dispose()


if __name__ == "__main__":
    raise SystemExit(main())
