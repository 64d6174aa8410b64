"""
Unit tests for the ride request state machine and its derived timestamps.
"""
from datetime import datetime, timezone

import pytest

from carpool.models.ride_request import Decision, RequestStatus, RideRequest
from carpool.services.requests import VALID_TRANSITIONS, is_valid_transition

PENDING, APPROVED, REJECTED = RequestStatus.pending, RequestStatus.approved, RequestStatus.rejected


class TestRequestStateMachine:
    def test_pending_to_approved(self):
        assert is_valid_transition(PENDING, APPROVED)

    def test_pending_to_rejected(self):
        assert is_valid_transition(PENDING, REJECTED)

    def test_approved_to_rejected(self):
        assert is_valid_transition(APPROVED, REJECTED)

    def test_rejected_cannot_be_reapproved(self):
        assert not is_valid_transition(REJECTED, APPROVED)

    def test_nothing_returns_to_pending(self):
        for state in RequestStatus:
            assert not is_valid_transition(state, PENDING)

    def test_rejected_is_terminal(self):
        assert VALID_TRANSITIONS[REJECTED] == set()

    def test_self_transitions_are_invalid(self):
        for state in RequestStatus:
            assert not is_valid_transition(state, state)


class TestDecisionTimestamps:
    at = datetime(2025, 2, 15, 9, 0, tzinfo=timezone.utc)

    def _request(self, status, decided_at=None):
        return RideRequest(
            ride_id=1, rider_id=2, status=status,
            requested_at=datetime(2025, 2, 14, tzinfo=timezone.utc), decided_at=decided_at,
        )

    def test_pending_has_no_decision(self):
        request = self._request(PENDING)
        assert request.decision is None
        assert request.approved_at is None
        assert request.rejected_at is None

    def test_approved_exposes_only_approved_at(self):
        request = self._request(APPROVED, self.at)
        assert request.approved_at == self.at
        assert request.rejected_at is None
        assert request.decision == Decision(APPROVED, self.at)

    def test_rejected_exposes_only_rejected_at(self):
        request = self._request(REJECTED, self.at)
        assert request.rejected_at == self.at
        assert request.approved_at is None
        assert request.decision == Decision(REJECTED, self.at)

    @pytest.mark.parametrize("status", list(RequestStatus))
    def test_never_both_timestamps(self, status):
        request = self._request(status, self.at)
        assert request.approved_at is None or request.rejected_at is None
