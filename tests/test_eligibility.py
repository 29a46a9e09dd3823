"""
Testes para as regras de elegibilidade.
"""

import pytest

from library_holds.models.enums import LoanStatus
from library_holds.schemas.remote import LoanRecord
from library_holds.services.eligibility import (
    MSG_ACTIVE_LOAN,
    MSG_DUPLICATE_HOLD,
    MSG_DUPLICATE_RESERVATION,
    MSG_ITEM_AVAILABLE,
    MSG_ITEM_CHECKED_OUT,
)


class TestHoldEligibility:
    """Testes para validate_hold_request."""

    @pytest.mark.anyio
    async def test_checked_out_item_is_eligible(self, eligibility, fake_sync):
        fake_sync.availability["BK-1"] = "checked-out"

        result = await eligibility.validate_hold_request("user_1", "BK-1")

        assert result.valid
        assert not result.degraded

    @pytest.mark.anyio
    async def test_available_item_points_to_reservation(self, eligibility, fake_sync):
        """Item disponível: hold recusado indicando reserva."""
        fake_sync.availability["available-item"] = "available"

        result = await eligibility.validate_hold_request("user_1", "available-item")

        assert not result.valid
        assert result.reason == MSG_ITEM_AVAILABLE
        assert "reserva" in result.reason
        assert not result.duplicate

    @pytest.mark.anyio
    async def test_duplicate_hold(self, eligibility, fake_sync, hold_service):
        fake_sync.availability["BK-1"] = "checked-out"
        await hold_service.place_hold("user_1", "BK-1")

        result = await eligibility.validate_hold_request("user_1", "BK-1")

        assert not result.valid
        assert result.duplicate
        assert result.reason == MSG_DUPLICATE_HOLD

    @pytest.mark.anyio
    async def test_active_loan_blocks_hold(self, eligibility, fake_sync):
        fake_sync.availability["BK-1"] = "checked-out"
        fake_sync.loans["user_1"] = [LoanRecord(item_id="BK-1", status=LoanStatus.BORROWED)]

        result = await eligibility.validate_hold_request("user_1", "BK-1")

        assert not result.valid
        assert result.reason == MSG_ACTIVE_LOAN

    @pytest.mark.anyio
    async def test_returned_loan_does_not_block(self, eligibility, fake_sync):
        fake_sync.availability["BK-1"] = "checked-out"
        fake_sync.loans["user_1"] = [LoanRecord(item_id="BK-1", status=LoanStatus.RETURNED)]

        result = await eligibility.validate_hold_request("user_1", "BK-1")

        assert result.valid

    @pytest.mark.anyio
    async def test_unknown_availability_is_permissive(self, eligibility, caplog):
        """Catálogo fora: pedido segue, com warning e degraded=True."""
        result = await eligibility.validate_hold_request("user_1", "BK-unknown")

        assert result.valid
        assert result.degraded
        assert "indeterminada" in caplog.text

    @pytest.mark.anyio
    async def test_loans_unavailable_skips_loan_check(self, eligibility, fake_sync):
        fake_sync.availability["BK-1"] = "checked-out"
        fake_sync.loans_available = False

        result = await eligibility.validate_hold_request("user_1", "BK-1")

        assert result.valid


class TestReservationEligibility:
    """Testes para validate_reservation_request."""

    @pytest.mark.anyio
    async def test_available_item_is_eligible(self, eligibility, fake_sync):
        fake_sync.availability["BK-1"] = "available"

        result = await eligibility.validate_reservation_request("user_1", "BK-1")

        assert result.valid

    @pytest.mark.anyio
    async def test_checked_out_item_points_to_hold(self, eligibility, fake_sync):
        fake_sync.availability["BK-1"] = "checked-out"

        result = await eligibility.validate_reservation_request("user_1", "BK-1")

        assert not result.valid
        assert result.reason == MSG_ITEM_CHECKED_OUT

    @pytest.mark.anyio
    async def test_duplicate_active_reservation(self, eligibility, fake_sync, reservation_repo, clock):
        fake_sync.availability["BK-1"] = "available"
        reservation_repo.add(clock, user_id="user_1", item_id="BK-1")

        result = await eligibility.validate_reservation_request("user_1", "BK-1")

        assert not result.valid
        assert result.duplicate
        assert result.reason == MSG_DUPLICATE_RESERVATION

    @pytest.mark.anyio
    async def test_unknown_availability_is_permissive(self, eligibility):
        result = await eligibility.validate_reservation_request("user_1", "BK-unknown")

        assert result.valid
        assert result.degraded
