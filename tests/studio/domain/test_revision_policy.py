"""Tests for revision policy precedence.

Pre-delivery is always unlimited; after delivery a customer override beats
the tenant limit, which beats no limit at all.
"""

import pytest

from studio.order.revision_policy import (
    CUSTOMER_OVERRIDE,
    CUSTOMER_UNLIMITED,
    NO_LIMIT,
    PRE_DELIVERY,
    TENANT_LIMIT,
    evaluate,
)


class TestBeforeDelivery:
    def test_unlimited_regardless_of_limits(self):
        allowance = evaluate(
            used_rounds=9,
            job_delivered=False,
            customer_override="1",
            tenant_limit_enabled=True,
            tenant_limit=1,
        )
        assert allowance.allowed
        assert allowance.unlimited
        assert allowance.basis == PRE_DELIVERY


class TestCustomerOverride:
    def test_unlimited_override_beats_tenant_limit(self):
        allowance = evaluate(
            used_rounds=5,
            job_delivered=True,
            customer_override="unlimited",
            tenant_limit_enabled=True,
            tenant_limit=2,
        )
        assert allowance.allowed
        assert allowance.basis == CUSTOMER_UNLIMITED

    def test_numeric_override_beats_tenant_limit(self):
        allowance = evaluate(
            used_rounds=3,
            job_delivered=True,
            customer_override="5",
            tenant_limit_enabled=True,
            tenant_limit=2,
        )
        assert allowance.allowed
        assert allowance.max_rounds == 5
        assert allowance.remaining_rounds == 2
        assert allowance.basis == CUSTOMER_OVERRIDE

    def test_numeric_override_exhausted(self):
        allowance = evaluate(used_rounds=1, job_delivered=True, customer_override="1")
        assert not allowance.allowed
        assert allowance.remaining_rounds == 0

    def test_zero_override_blocks_all_rounds(self):
        allowance = evaluate(used_rounds=0, job_delivered=True, customer_override="0")
        assert not allowance.allowed


class TestTenantLimit:
    @pytest.mark.parametrize(
        "used, allowed",
        [(0, True), (1, True), (2, False), (3, False)],
    )
    def test_limit_of_two(self, used, allowed):
        allowance = evaluate(
            used_rounds=used,
            job_delivered=True,
            tenant_limit_enabled=True,
            tenant_limit=2,
        )
        assert allowance.allowed is allowed
        assert allowance.basis == TENANT_LIMIT

    def test_disabled_limit_is_ignored(self):
        allowance = evaluate(
            used_rounds=10,
            job_delivered=True,
            tenant_limit_enabled=False,
            tenant_limit=2,
        )
        assert allowance.allowed
        assert allowance.basis == NO_LIMIT


class TestAllowanceReport:
    def test_unlimited_reports_as_string(self):
        report = evaluate(used_rounds=0, job_delivered=False).to_dict()
        assert report["max_rounds"] == "unlimited"
        assert report["remaining_rounds"] is None

    def test_limited_report(self):
        report = evaluate(used_rounds=1, job_delivered=True, tenant_limit_enabled=True, tenant_limit=3).to_dict()
        assert report == {
            "allowed": True,
            "max_rounds": 3,
            "used_rounds": 1,
            "remaining_rounds": 2,
            "basis": TENANT_LIMIT,
        }
