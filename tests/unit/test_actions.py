from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from leadscrub.db.row_store import StoreResult
from leadscrub.models.enrichment import EnrichmentNeed, EnrichmentPlan
from leadscrub.models.row import CellFlag
from leadscrub.providers.base import EmailVerification, InferredContact, VerificationStatus
from leadscrub.services import actions
from leadscrub.services.columns import resolve_columns


@pytest.fixture()
def stored(memory_store):
    record = memory_store.create_list(
        "contacts",
        ["first_name", "last_name", "email", "website"],
        [{"first_name": "", "last_name": "", "email": "", "website": "acme.com"}],
    )
    row = memory_store.list_rows(record.id)[0]
    return memory_store, row, resolve_columns(record.columns)


def _plan(row, **kwargs) -> EnrichmentPlan:
    return EnrichmentPlan(row_id=row.id, need=EnrichmentNeed.SCRAPE_AND_FIND, existing_data=dict(row.data), **kwargs)


def test_append_source():
    assert actions.append_source("", "website") == "website"
    assert actions.append_source("website", "icypeas") == "website+icypeas"
    assert actions.append_source("website+icypeas", "website") == "website+icypeas"


def test_scrape_contact_writes_names_title_and_source(stored, stubs):
    store, row, columns = stored
    result = actions.scrape_contact(store, _plan(row, website_url="acme.com"), columns, stubs.Extractor(), stubs.Inferrer())

    assert result.success
    assert (result.first_name, result.last_name, result.title) == ("Jane", "Doe", "Owner")
    saved = store.get_row(row.id)
    assert saved.data["first_name"] == "Jane"
    assert saved.data["Title"] == "Owner"
    assert saved.data["enrichment_source"] == "website"
    assert saved.flags["first_name"] is CellFlag.ENRICHED
    assert saved.flags["Title"] is CellFlag.ENRICHED


def test_scrape_contact_extract_error(stored, stubs):
    store, row, columns = stored
    result = actions.scrape_contact(
        store, _plan(row, website_url="acme.com"), columns, stubs.Extractor(error="Failed to fetch"), stubs.Inferrer()
    )
    assert not result.success
    assert result.error == "Failed to fetch"
    assert store.get_row(row.id).flags == {}


def test_scrape_contact_no_contact(stored, stubs):
    store, row, columns = stored
    inferrer = stubs.Inferrer(InferredContact(confidence=0))
    result = actions.scrape_contact(store, _plan(row, website_url="acme.com"), columns, stubs.Extractor(), inferrer)
    assert not result.success
    assert result.error == "No contact identified"


def test_find_email_writes_email(stored, stubs):
    store, row, columns = stored
    plan = _plan(row, first_name="Jane", last_name="Doe", domain="acme.com")
    result = actions.find_email(store, plan, columns, stubs.Finder({"acme.com": "jane@acme.com"}))
    assert result.success and result.email == "jane@acme.com"
    saved = store.get_row(row.id)
    assert saved.data["email"] == "jane@acme.com"
    assert saved.flags["email"] is CellFlag.ENRICHED
    assert saved.data["enrichment_source"] == "icypeas"


def test_find_email_miss_has_no_error(stored, stubs):
    store, row, columns = stored
    plan = _plan(row, first_name="Jane", last_name="Doe", domain="acme.com")
    result = actions.find_email(store, plan, columns, stubs.Finder())
    assert not result.success
    assert result.error is None


def test_find_email_writes_to_fallback_column_without_email_column(memory_store, stubs):
    record = memory_store.create_list("l", ["website"], [{"website": "acme.com"}])
    row = memory_store.list_rows(record.id)[0]
    plan = _plan(row, first_name="Jane", last_name="Doe", domain="acme.com")
    actions.find_email(memory_store, plan, resolve_columns(record.columns), stubs.Finder({"acme.com": "j@acme.com"}))
    assert memory_store.get_row(row.id).data["email"] == "j@acme.com"


def test_apply_pattern_email_source(stored):
    store, row, columns = stored
    store.update_row(row.id, data={"enrichment_source": "website"})
    result = actions.apply_pattern_email(store, _plan(row), columns, "jane@acme.com")
    assert result.success
    saved = store.get_row(row.id)
    assert saved.data["email"] == "jane@acme.com"
    assert saved.data["enrichment_source"] == "website+pattern"
    assert saved.flags["enrichment_source"] is CellFlag.ENRICHED


@pytest.mark.parametrize(
    "status,role,flag",
    [
        ("valid", False, CellFlag.VALID),
        ("invalid", False, CellFlag.INVALID),
        ("risky", False, CellFlag.RISKY),
        ("unknown", False, CellFlag.UNKNOWN),
        ("valid", True, CellFlag.ROLE_ACCOUNT),
    ],
)
def test_verify_email_writes_status_flag(stored, status, role, flag):
    store, row, columns = stored
    verifier = MagicMock()
    verifier.verify.return_value = EmailVerification(status=VerificationStatus(status), is_role_account=role)
    result = actions.verify_email(store, _plan(row, email="jane@acme.com"), columns, verifier)
    assert result.success
    assert result.status is VerificationStatus(status)
    assert store.get_row(row.id).flags["email"] is flag


def test_verify_email_error_leaves_row_untouched(stored, stubs):
    store, row, columns = stored
    result = actions.verify_email(
        store, _plan(row, email="info@acme.com"), columns, stubs.Verifier(error="MillionVerifier API key not configured")
    )
    assert not result.success
    assert result.is_role_account is True
    assert "email" not in store.get_row(row.id).flags


def test_write_back_failure_is_reported(stubs):
    store = MagicMock()
    store.get_row.return_value = None
    plan = EnrichmentPlan(row_id="gone", need=EnrichmentNeed.FIND_EMAIL, existing_data={},
                          first_name="Jane", last_name="Doe", domain="acme.com")
    result = actions.find_email(store, plan, resolve_columns(["email"]), stubs.Finder({"acme.com": "j@acme.com"}))
    assert not result.success
    assert result.error == "row not found: gone"
    store.update_row.assert_not_called()


def test_rejected_update_is_reported(stubs, make_row):
    store = MagicMock()
    store.get_row.return_value = make_row({"email": ""})
    store.update_row.return_value = StoreResult(ok=False, error="write rejected")
    plan = EnrichmentPlan(row_id="row-0", need=EnrichmentNeed.FIND_EMAIL, existing_data={},
                          first_name="Jane", last_name="Doe", domain="acme.com")
    result = actions.find_email(store, plan, resolve_columns(["email"]), stubs.Finder({"acme.com": "j@acme.com"}))
    assert not result.success
    assert result.error == "write rejected"
