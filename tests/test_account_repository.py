"""
Smoke tests for AccountRepository against a temporary SQLite database.
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.exc import IntegrityError

from ecoride.core.errors import BadRequestError
from ecoride.repositories.account_repository import _unique_violation


def test_find_by_credentials_requires_matching_role(repo, make_account):
    account = make_account(email="a@x.com", role="rider")
    assert repo.find_by_credentials("a@x.com", "rider").id == account.id
    assert repo.find_by_credentials("a@x.com", "customer") is None
    assert repo.find_by_credentials("A@x.com", "rider") is None


def test_email_unique_constraint_maps_to_bad_request(repo, make_account):
    make_account(email="dup@x.com")
    with pytest.raises(BadRequestError) as info:
        make_account(email="dup@x.com", role="rider")
    assert info.value.message == "Email already in use"


def test_phone_unique_when_set(repo, make_account):
    make_account(email="one@x.com", phone="555-0100")
    make_account(email="two@x.com")
    make_account(email="three@x.com")
    with pytest.raises(BadRequestError) as info:
        make_account(email="four@x.com", phone="555-0100")
    assert info.value.message == "Phone number already in use"


@pytest.mark.parametrize(
    "driver_message,expected",
    [
        ("UNIQUE constraint failed: accounts.phone", "Phone number already in use"),
        ("UNIQUE constraint failed: accounts.email", "Email already in use"),
        (
            'duplicate key value violates unique constraint "accounts_phone_key"\n'
            "DETAIL:  Key (phone)=(0917-555) already exists.",
            "Phone number already in use",
        ),
        (
            'duplicate key value violates unique constraint "accounts_email_key"\n'
            "DETAIL:  Key (email)=(phone.fan@x.com) already exists.",
            "Email already in use",
        ),
    ],
)
def test_unique_violation_reads_the_constraint_not_the_value(driver_message, expected):
    exc = IntegrityError("INSERT INTO accounts ...", {}, Exception(driver_message))
    assert _unique_violation(exc).message == expected


def test_email_containing_phone_is_still_an_email_conflict(repo, make_account):
    make_account(email="phone.fan@x.com")
    with pytest.raises(BadRequestError) as info:
        make_account(email="phone.fan@x.com", role="rider")
    assert info.value.message == "Email already in use"


def test_find_by_email_can_exclude_an_id(repo, make_account):
    account = make_account(email="me@x.com")
    assert repo.find_by_email("me@x.com").id == account.id
    assert repo.find_by_email("me@x.com", exclude_id=account.id) is None


def test_save_persists_changes(repo, make_account):
    account = make_account(email="save@x.com")
    account.first_name = "Ana"
    repo.save(account)
    assert repo.get_by_id(account.id).first_name == "Ana"


def test_search_excludes_admins_and_sorts_newest_first(repo, make_account):
    first = make_account(email="first@x.com", role="customer")
    make_account(email="boss@x.com", role="admin")
    second = make_account(email="second@x.com", role="rider")

    results = repo.search()
    assert [a.id for a in results] == [second.id, first.id]
    assert repo.search(role="admin") == []
    assert [a.id for a in repo.search(role="rider")] == [second.id]


def test_search_text_is_case_insensitive_across_fields(repo, make_account):
    by_name = make_account(email="n@x.com", first_name="Maria")
    by_last = make_account(email="l@x.com", last_name="SOUZA")
    by_phone = make_account(email="p@x.com", phone="0917-777")
    make_account(email="other@x.com", first_name="Joao")

    assert [a.id for a in repo.search(text="mar")] == [by_name.id]
    assert [a.id for a in repo.search(text="souza")] == [by_last.id]
    assert [a.id for a in repo.search(text="777")] == [by_phone.id]
    assert {a.id for a in repo.search(text="@X.COM")} >= {by_name.id, by_last.id, by_phone.id}


def test_search_treats_wildcards_literally(repo, make_account):
    make_account(email="plain@x.com")
    assert repo.search(text="%") == []
    assert repo.search(text="_") == []


def test_search_by_legacy_approved_flag(repo, make_account):
    flagged = make_account(email="flag@x.com", approved=True)
    make_account(email="noflag@x.com")
    assert [a.id for a in repo.search(approved=True)] == [flagged.id]
    assert all(not a.approved for a in repo.search(approved=False))


def test_delete_removes_account_and_refresh_tokens(repo, make_account):
    account = make_account(email="gone@x.com")
    repo.add_refresh_token("jti-1", account.id, datetime.now(timezone.utc) + timedelta(hours=1))

    assert repo.delete(account.id) is True
    assert repo.get_by_id(account.id) is None
    assert repo.get_refresh_token("jti-1") is None
    assert repo.delete(account.id) is False


def test_revoke_refresh_token_only_once(repo, make_account):
    account = make_account(email="rt@x.com")
    repo.add_refresh_token("jti-2", account.id, datetime.now(timezone.utc) + timedelta(hours=1))
    assert repo.revoke_refresh_token("jti-2") is True
    assert repo.revoke_refresh_token("jti-2") is False
    assert repo.revoke_refresh_token("unknown") is False
