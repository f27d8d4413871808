"""Concurrent admission tests.

These run against SQLite by default, where BEGIN IMMEDIATE serializes every
writer. Set TEST_DATABASE_URL to a PostgreSQL database to exercise the
license row lock instead; `pytest -m postgres` then runs the tests that only
make sense there.
"""
import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from licenseptium.services.validation import ValidationError, validate


def validate_concurrently(session_factory, key: str, addresses: list[str]):
    barrier = threading.Barrier(len(addresses))

    def attempt(address: str):
        db = session_factory()
        try:
            barrier.wait()
            return validate(db, key, None, address, require_checksum=False)
        finally:
            db.close()

    with ThreadPoolExecutor(max_workers=len(addresses)) as pool:
        return list(pool.map(attempt, addresses))


@pytest.mark.parametrize("ip_limit", [1, 3, 5])
def test_concurrent_new_addresses_never_exceed_limit(session_factory, make_license, ledger, ip_limit):
    license_entry = make_license(ip_limit=ip_limit, checksum_material=None)
    addresses = [f"10.1.0.{index}" for index in range(1, ip_limit + 2)]

    outcomes = validate_concurrently(session_factory, str(license_entry.key), addresses)

    admitted = [outcome for outcome in outcomes if outcome.admitted]
    denied = [outcome for outcome in outcomes if not outcome.admitted]
    assert len(admitted) == ip_limit
    assert [outcome.error for outcome in denied] == [ValidationError.activation_limit_reached]
    assert len(ledger(license_entry.id)) == ip_limit


def test_concurrent_burst_well_over_limit(session_factory, make_license, ledger):
    license_entry = make_license(ip_limit=4, checksum_material=None)
    addresses = [f"10.2.0.{index}" for index in range(1, 13)]

    outcomes = validate_concurrently(session_factory, str(license_entry.key), addresses)

    assert sum(outcome.admitted for outcome in outcomes) == 4
    assert sum(outcome.error is ValidationError.activation_limit_reached for outcome in outcomes) == 8
    admitted_addresses = sorted(
        address for address, outcome in zip(addresses, outcomes) if outcome.admitted
    )
    assert ledger(license_entry.id) == admitted_addresses


def test_concurrent_same_address_is_admitted_once(session_factory, make_license, ledger):
    license_entry = make_license(ip_limit=1, checksum_material=None)
    addresses = ["10.3.0.1"] * 6

    outcomes = validate_concurrently(session_factory, str(license_entry.key), addresses)

    assert all(outcome.admitted for outcome in outcomes)
    assert sum(outcome.activated for outcome in outcomes) == 1
    assert ledger(license_entry.id) == ["10.3.0.1"]


def test_concurrent_keys_are_independent(session_factory, make_license, ledger):
    first = make_license(ip_limit=2, checksum_material=None)
    second = make_license(ip_limit=2, checksum_material=None)
    barrier = threading.Barrier(6)
    requests = [
        (str(license_entry.key), f"10.4.0.{index}")
        for license_entry in (first, second)
        for index in range(1, 4)
    ]

    def attempt(request):
        key, address = request
        db = session_factory()
        try:
            barrier.wait()
            return key, validate(db, key, None, address, require_checksum=False)
        finally:
            db.close()

    with ThreadPoolExecutor(max_workers=len(requests)) as pool:
        results = list(pool.map(attempt, requests))

    for license_entry in (first, second):
        outcomes = [outcome for key, outcome in results if key == str(license_entry.key)]
        assert sum(outcome.admitted for outcome in outcomes) == 2
        assert len(ledger(license_entry.id)) == 2


@pytest.mark.postgres
def test_row_lock_serializes_same_key_on_postgresql(engine, session_factory, make_license, ledger):
    if engine.dialect.name != "postgresql":
        pytest.skip("TEST_DATABASE_URL does not point at PostgreSQL")
    license_entry = make_license(ip_limit=2, checksum_material=None)
    addresses = [f"10.5.0.{index}" for index in range(1, 13)]

    outcomes = validate_concurrently(session_factory, str(license_entry.key), addresses)

    assert sum(outcome.admitted for outcome in outcomes) == 2
    assert sum(outcome.error is ValidationError.activation_limit_reached for outcome in outcomes) == 10
    assert len(ledger(license_entry.id)) == 2
