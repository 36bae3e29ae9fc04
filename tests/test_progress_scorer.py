"""
Tests for the onboarding progress score.
"""

import pytest

from onboarding.models.enums import DocumentStatus, FeeStatus, HostelStatus
from onboarding.services.progress.progress_scorer import DocumentState, compute_progress


def score(documents=(), fee=FeeStatus.PENDING, hostel=HostelStatus.NOT_APPLIED,
          lms=False, required=("10th_marksheet", "12th_marksheet")):
    return compute_progress(list(documents), fee, hostel, lms, required)


class TestComputeProgress:

    def test_fresh_profile_scores_zero(self):
        assert score() == 0

    def test_everything_done_scores_hundred(self):
        documents = [
            DocumentState("10th_marksheet", DocumentStatus.APPROVED),
            DocumentState("12th_marksheet", DocumentStatus.APPROVED),
        ]
        assert score(documents, FeeStatus.PAID, HostelStatus.APPROVED, True) == 100

    def test_documents_earn_their_share(self):
        documents = [DocumentState("10th_marksheet", DocumentStatus.APPROVED)]
        # 40 * 1/2
        assert score(documents) == 20

    def test_only_approved_documents_count(self):
        documents = [
            DocumentState("10th_marksheet", DocumentStatus.SUBMITTED),
            DocumentState("12th_marksheet", DocumentStatus.REJECTED),
        ]
        assert score(documents) == 0

    def test_documents_outside_required_list_are_ignored(self):
        documents = [DocumentState("Aadhaar Card", DocumentStatus.APPROVED)]
        assert score(documents) == 0

    def test_fee_counts_only_when_paid(self):
        assert score(fee=FeeStatus.PAID) == 30
        assert score(fee=FeeStatus.PENDING) == 0

    @pytest.mark.parametrize("status", [
        HostelStatus.PENDING, HostelStatus.APPROVED, HostelStatus.REJECTED,
    ])
    def test_any_hostel_application_counts(self, status):
        assert score(hostel=status) == 15

    def test_learning_platform_counts(self):
        assert score(lms=True) == 15

    def test_no_required_documents_renormalizes(self):
        result = compute_progress([], FeeStatus.PAID, HostelStatus.PENDING, True, ())
        assert result == 100

    def test_no_required_documents_partial(self):
        # 30 of 60 available points
        result = compute_progress([], FeeStatus.PAID, HostelStatus.NOT_APPLIED, False, ())
        assert result == 50

    def test_rounds_half_up(self):
        required = ("a", "b", "c")
        documents = [DocumentState("a", DocumentStatus.APPROVED)]
        # 40 / 3 = 13.33...
        assert compute_progress(documents, FeeStatus.PENDING, HostelStatus.NOT_APPLIED,
                                False, required) == 13

        documents = [DocumentState(k, DocumentStatus.APPROVED) for k in ("a", "b")]
        # 80 / 3 = 26.67
        assert compute_progress(documents, FeeStatus.PENDING, HostelStatus.NOT_APPLIED,
                                False, required) == 27

    def test_result_stays_in_range(self):
        documents = [DocumentState("a", DocumentStatus.APPROVED)] * 5
        result = compute_progress(documents, FeeStatus.PAID, HostelStatus.APPROVED, True, ("a",))
        assert 0 <= result <= 100
        assert result == 100
