# tests/test_fee_services.py

from decimal import Decimal

import pytest
from django.core.exceptions import ValidationError
from django.utils import timezone

from fees.models import FeeStructure, FeePayment
from fees.services import FeeStructureService, PaymentService
from fees.stats import get_finance_summary, get_class_balance_report, get_payment_method_breakdown

pytestmark = pytest.mark.django_db


@pytest.fixture
def jss1_fees(jss1, academic_year):
    return FeeStructureService.create_fee_structure(
        jss1, academic_year, tuition_fee=250000, exam_fee=30000, other_fee=20000
    )


@pytest.fixture
def pupil(jss1, make_student):
    return make_student("Kadiatu Jalloh", jss1)


class TestFeeStructureService:

    def test_total_derived_from_components(self, jss1, academic_year):
        structure = FeeStructureService.create_fee_structure(
            jss1, academic_year, tuition_fee=50000, exam_fee=10000, other_fee=5000
        )
        assert structure.total_fee == Decimal('65000')
        assert structure.amount == structure.total_fee
        assert structure.is_active

    def test_duplicate_rejected(self, jss1_fees, jss1, academic_year):
        with pytest.raises(ValidationError) as exc:
            FeeStructureService.create_fee_structure(jss1, academic_year, tuition_fee=100000)
        assert exc.value.code == 'DuplicateFeeStructure'
        assert FeeStructure.objects.filter(school_class=jss1).count() == 1

    def test_zero_total_rejected(self, jss1, academic_year):
        with pytest.raises(ValidationError) as exc:
            FeeStructureService.create_fee_structure(jss1, academic_year, 0, 0, 0)
        assert exc.value.code == 'InvalidFeeTotal'
        assert not FeeStructure.objects.exists()

    def test_same_class_other_year_allowed(self, jss1_fees, jss1, other_year):
        structure = FeeStructureService.create_fee_structure(jss1, other_year, tuition_fee=200000)
        assert structure.academic_year == other_year

    def test_replacement_after_deactivation(self, jss1_fees, jss1, academic_year):
        FeeStructureService.deactivate_fee_structure(jss1_fees, reason="Fees revised")
        replacement = FeeStructureService.create_fee_structure(jss1, academic_year, tuition_fee=320000)

        assert FeeStructureService.get_active_structure(jss1, academic_year) == replacement
        jss1_fees.refresh_from_db()
        assert not jss1_fees.is_active
        assert jss1_fees.change_reason == "Fees revised"

    def test_update_recomputes_total(self, jss1_fees):
        structure = FeeStructureService.update_fee_structure(jss1_fees, exam_fee=40000)
        structure.refresh_from_db()
        assert structure.total_fee == Decimal('310000')

    def test_update_cannot_zero_the_total(self, jss1_fees):
        with pytest.raises(ValidationError) as exc:
            FeeStructureService.update_fee_structure(jss1_fees, tuition_fee=0, exam_fee=0, other_fee=0)
        assert exc.value.code == 'InvalidFeeTotal'


class TestPaymentService:

    def test_balance_after_part_payments(self, jss1_fees, pupil, academic_year):
        PaymentService.record_payment(pupil, 100000, academic_year, payment_method='cash')
        PaymentService.record_payment(pupil, Decimal('50000'), academic_year, payment_method='mobile_money')

        balance = PaymentService.get_student_balance(pupil, academic_year)
        assert balance['total_fee'] == Decimal('300000')
        assert balance['total_paid'] == Decimal('150000')
        assert balance['balance'] == Decimal('150000')
        assert balance['status'] == 'PARTIAL'
        assert balance['fee_structure'] == jss1_fees

    def test_overpayment_shows_as_credit(self, jss1_fees, pupil, academic_year):
        PaymentService.record_payment(pupil, 320000, academic_year)

        balance = PaymentService.get_student_balance(pupil, academic_year)
        assert balance['balance'] == Decimal('-20000')
        assert balance['is_settled'] is True

    def test_receipt_numbers_are_sequential(self, jss1_fees, pupil, academic_year):
        first = PaymentService.record_payment(pupil, 1000, academic_year)
        second = PaymentService.record_payment(pupil, 1000, academic_year)

        year = timezone.now().year
        assert first.receipt_number == f"RCT-{year}-0001"
        assert second.receipt_number == f"RCT-{year}-0002"

    def test_receipt_number_cannot_be_reused(self, jss1_fees, pupil, make_student, jss1, academic_year):
        PaymentService.record_payment(pupil, 1000, academic_year, receipt_number="R-1")
        sibling = make_student("Fatmata Jalloh", jss1)

        with pytest.raises(ValidationError) as exc:
            PaymentService.record_payment(sibling, 1000, academic_year, receipt_number=" R-1 ")
        assert exc.value.code == 'duplicate_receipt'
        assert FeePayment.objects.filter(receipt_number="R-1").count() == 1

    def test_payment_refused_without_structure(self, pupil, academic_year):
        with pytest.raises(ValidationError) as exc:
            PaymentService.record_payment(pupil, 5000, academic_year)
        assert exc.value.code == 'MissingFeeStructure'
        assert not FeePayment.objects.exists()

    @pytest.mark.parametrize("amount", [0, -500])
    def test_non_positive_amount_refused(self, jss1_fees, pupil, academic_year, amount):
        with pytest.raises(ValidationError) as exc:
            PaymentService.record_payment(pupil, amount, academic_year)
        assert exc.value.code == 'invalid_payment'

    def test_unknown_payment_method_refused(self, jss1_fees, pupil, academic_year):
        with pytest.raises(ValidationError):
            PaymentService.record_payment(pupil, 5000, academic_year, payment_method='barter')

    def test_student_without_class_has_no_structure(self, make_student, academic_year):
        student = make_student("Unplaced Pupil", None)
        balance = PaymentService.get_student_balance(student, academic_year)
        assert balance['has_structure'] is False
        assert balance['status'] == 'NO_STRUCTURE'
        assert balance['fee_structure'] is None

    def test_payments_from_other_years_are_ignored(self, jss1_fees, pupil, academic_year, other_year, jss1):
        FeeStructureService.create_fee_structure(jss1, other_year, tuition_fee=100000)
        PaymentService.record_payment(pupil, 100000, other_year)

        balance = PaymentService.get_student_balance(pupil, academic_year)
        assert balance['total_paid'] == 0
        assert balance['status'] == 'UNPAID'


class TestFeeStats:

    def test_finance_summary(self, jss1_fees, jss2, pupil, academic_year, make_student):
        FeeStructureService.create_fee_structure(jss2, academic_year, tuition_fee=200000)
        PaymentService.record_payment(pupil, 150000, academic_year, payment_method='cash')

        summary = get_finance_summary(academic_year)

        assert summary['total_expected'] == Decimal('500000')
        assert summary['total_collected'] == Decimal('150000')
        assert summary['outstanding'] == Decimal('350000')
        assert summary['payment_count'] == 1
        assert summary['status_counts'] == {'paid': 1}
        assert [row['class_name'] for row in summary['by_class']] == ["JSS 1", "JSS 2"]
        assert summary['by_class'][0]['collected'] == Decimal('150000')
        assert summary['by_class'][1]['collected'] == 0

    def test_outstanding_never_negative(self, jss1_fees, pupil, academic_year):
        PaymentService.record_payment(pupil, 400000, academic_year)
        summary = get_finance_summary(academic_year)
        assert summary['outstanding'] == 0

    def test_summary_for_one_class(self, jss1_fees, jss1, academic_year):
        summary = get_finance_summary(academic_year, jss1)
        assert summary['total_expected'] == Decimal('300000')
        assert 'by_class' not in summary

    def test_class_balance_report(self, jss1_fees, jss1, pupil, academic_year, make_student):
        settled = make_student("Abdul Kanu", jss1)
        make_student("Mariama Turay", jss1)
        PaymentService.record_payment(pupil, 100000, academic_year)
        PaymentService.record_payment(settled, 300000, academic_year)

        report = get_class_balance_report(jss1, academic_year)

        assert report['fee_structure'] == jss1_fees
        assert [row['student_name'] for row in report['rows']] == [
            "Abdul Kanu", "Kadiatu Jalloh", "Mariama Turay"
        ]
        assert report['counts'] == {'SETTLED': 1, 'PARTIAL': 1, 'UNPAID': 1}

    def test_class_without_structure(self, jss2, academic_year, make_student):
        make_student("Foday Mansaray", jss2)
        report = get_class_balance_report(jss2, academic_year)
        assert report['fee_structure'] is None
        assert report['counts'] == {'NO_STRUCTURE': 1}

    def test_payment_method_breakdown(self, jss1_fees, pupil, academic_year):
        PaymentService.record_payment(pupil, 1000, academic_year, payment_method='cash')
        PaymentService.record_payment(pupil, 2000, academic_year, payment_method='cash')
        PaymentService.record_payment(pupil, 500, academic_year)

        breakdown = {row['payment_method']: row for row in get_payment_method_breakdown(academic_year)}
        assert breakdown['cash']['count'] == 2
        assert breakdown['cash']['total'] == Decimal('3000')
        assert breakdown['unspecified']['count'] == 1
