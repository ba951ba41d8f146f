"""
Tenant allowlist and wiring helpers.
"""
from __future__ import annotations

import pytest

from backend.accounts import RequestTable, Tenant, UnknownTenant
from backend.accounts.domain import email_tail, parse_request_table, parse_tenant


def test_tenants_map_to_table_names():
    assert parse_tenant("Students") is Tenant.STUDENTS
    assert parse_tenant("Philanthropists") is Tenant.PHILANTHROPISTS
    assert parse_tenant(Tenant.STUDENTS) is Tenant.STUDENTS


@pytest.mark.parametrize("raw", ["STUDENTS", "Students ", "Student_Requests", 'Students"; --'])
def test_parse_tenant_rejects_everything_else(raw: str):
    with pytest.raises(UnknownTenant):
        parse_tenant(raw)


def test_request_tables_are_separate_allowlist():
    assert parse_request_table("Student_Requests") is RequestTable.STUDENT_REQUESTS
    with pytest.raises(UnknownTenant):
        parse_request_table("Students")


def test_email_tail_masks_local_part():
    assert email_tail("celal.evrenuz@gmail.com") == "il.com"
    assert email_tail("") == ""


def test_wire_service_memory_backend(monkeypatch: pytest.MonkeyPatch):
    from backend.accounts.repo_memory import InMemoryAccountRepo
    from backend.web import main
    from backend.web.routes import accounts as accounts_routes

    monkeypatch.setenv("STUDENTDESK_ACCOUNTS_BACKEND", "memory")
    main.wire_service_if_configured()
    assert isinstance(accounts_routes.SERVICE.repo, InMemoryAccountRepo)


def test_wire_service_without_dsn_leaves_routes_unwired():
    from backend.web import main
    from backend.web.routes import accounts as accounts_routes

    accounts_routes.set_service(None)
    main.wire_service_if_configured()
    assert accounts_routes.SERVICE is None
