# tests/test_balances.py

from decimal import Decimal

import pytest

from fees.balances import (
    compute_fee_total,
    compute_balance,
    validate_fee_structure,
    summarize_collections,
    INVALID_FEE_TOTAL,
    DUPLICATE_FEE_STRUCTURE,
)
from fees.utils import get_balance_status_label, get_balance_status_color


STRUCTURE = {'tuition_fee': 250000, 'exam_fee': 30000, 'other_fee': 20000, 'total_fee': 300000}


class TestComputeBalance:

    def test_partial_payment(self):
        result = compute_balance(STRUCTURE, [100000, 50000])
        assert result['total_paid'] == Decimal('150000')
        assert result['balance'] == Decimal('150000')
        assert result['is_settled'] is False
        assert result['status'] == 'PARTIAL'

    def test_overpayment_gives_negative_balance(self):
        result = compute_balance(STRUCTURE, [{'amount_paid': 320000}])
        assert result['balance'] == Decimal('-20000')
        assert result['is_settled'] is True
        assert result['status'] == 'SETTLED'

    def test_exact_payment_is_settled(self):
        result = compute_balance(STRUCTURE, [{'amount_paid': 300000}])
        assert result['balance'] == 0
        assert result['is_settled'] is True

    def test_no_payments(self):
        result = compute_balance(STRUCTURE, [])
        assert result['total_paid'] == 0
        assert result['balance'] == Decimal('300000')
        assert result['status'] == 'UNPAID'

    def test_no_structure_is_flagged(self):
        result = compute_balance(None, [{'amount_paid': 5000}])
        assert result['total_fee'] == 0
        assert result['balance'] == Decimal('-5000')
        assert result['has_structure'] is False
        assert result['status'] == 'NO_STRUCTURE'

    def test_balance_identity(self):
        payments = [12500, '7500.50', Decimal('100')]
        result = compute_balance(STRUCTURE, payments)
        assert result['balance'] == result['total_fee'] - result['total_paid']
        assert result['is_settled'] == (result['balance'] <= 0)

    def test_total_derived_from_components_when_missing(self):
        structure = {'tuition_fee': 50000, 'exam_fee': 10000, 'other_fee': 5000}
        assert compute_balance(structure, [])['total_fee'] == Decimal('65000')


class TestValidateFeeStructure:

    def test_total_is_sum_of_components(self):
        result = validate_fee_structure(50000, 10000, 5000)
        assert result['valid'] is True
        assert result['error_code'] is None
        assert result['fee_structure']['total_fee'] == Decimal('65000')
        assert result['fee_structure']['amount'] == result['fee_structure']['total_fee']

    def test_missing_components_count_as_zero(self):
        result = validate_fee_structure(40000, None, '')
        assert result['valid'] is True
        assert result['fee_structure']['total_fee'] == Decimal('40000')

    def test_zero_total_rejected(self):
        result = validate_fee_structure(0, 0, 0)
        assert result['valid'] is False
        assert result['error_code'] == INVALID_FEE_TOTAL
        assert result['fee_structure'] is None

    @pytest.mark.parametrize("tuition", [-100, "lots", float('nan')])
    def test_bad_component_rejected(self, tuition):
        result = validate_fee_structure(tuition, 10000, 0)
        assert result['valid'] is False
        assert result['error_code'] == INVALID_FEE_TOTAL

    def test_duplicate_active_structure_rejected(self):
        existing = {'is_active': True, 'total_fee': 65000}
        result = validate_fee_structure(50000, 10000, 5000, existing_active=existing)
        assert result['valid'] is False
        assert result['error_code'] == DUPLICATE_FEE_STRUCTURE

    def test_inactive_existing_structure_is_not_a_duplicate(self):
        existing = {'is_active': False, 'total_fee': 65000}
        result = validate_fee_structure(50000, 10000, 5000, existing_active=existing)
        assert result['valid'] is True

    def test_total_checked_before_duplicate(self):
        result = validate_fee_structure(0, 0, 0, existing_active={'is_active': True})
        assert result['error_code'] == INVALID_FEE_TOTAL

    def test_zero_tuition_warns(self):
        result = validate_fee_structure(0, 10000, 0)
        assert result['valid'] is True
        assert result['warnings']

    def test_compute_fee_total(self):
        assert compute_fee_total(50000, 10000, 5000) == Decimal('65000')
        assert compute_fee_total(None, '2500.50', 0) == Decimal('2500.50')


class TestSummarizeCollections:

    def test_outstanding_clamped_at_zero(self):
        structures = [{'total_fee': 100000, 'is_active': True}]
        payments = [{'amount_paid': 80000, 'status': 'paid'}, {'amount_paid': 50000, 'status': 'paid'}]
        summary = summarize_collections(structures, payments)
        assert summary['total_collected'] == Decimal('130000')
        assert summary['outstanding'] == 0

    def test_expected_ignores_inactive_structures(self):
        structures = [
            {'total_fee': 100000, 'is_active': True},
            {'total_fee': 90000, 'is_active': False},
        ]
        payments = [
            {'amount_paid': 25000, 'status': 'paid'},
            {'amount_paid': 25000, 'status': 'pending'},
        ]
        summary = summarize_collections(structures, payments)
        assert summary['total_expected'] == Decimal('100000')
        assert summary['outstanding'] == Decimal('50000')
        assert summary['status_counts'] == {'paid': 1, 'pending': 1}
        assert summary['paid_percentage'] == 50
        assert summary['collection_rate'] == 50

    def test_empty(self):
        summary = summarize_collections([], [])
        assert summary['total_expected'] == 0
        assert summary['payment_count'] == 0
        assert summary['paid_percentage'] == 0
        assert summary['collection_rate'] == 0


class TestStatusDisplay:

    def test_labels(self):
        assert get_balance_status_label(compute_balance(STRUCTURE, [320000])) == "Settled (credit)"
        assert get_balance_status_label(compute_balance(STRUCTURE, [300000])) == "Settled"
        assert get_balance_status_label(compute_balance(STRUCTURE, [1000])) == "Part paid"
        assert get_balance_status_label(compute_balance(STRUCTURE, [])) == "Unpaid"
        assert get_balance_status_label(compute_balance(None, [])) == "No fee structure"

    def test_colors(self):
        assert get_balance_status_color('SETTLED') == 'success'
        assert get_balance_status_color('UNPAID') == 'danger'
        assert get_balance_status_color('unknown') == 'secondary'
