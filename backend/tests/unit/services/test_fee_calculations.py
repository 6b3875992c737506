"""
Unit Tests for installment plans, payment allocation and fee status
"""
from datetime import date, datetime

from app.models.fee import FeeCategory, FeeItem, PlanFrequency
from app.services.fee_service import (
    allocate_payment,
    build_schedule,
    payment_status,
    split_installments,
)


def fee_item(item_id, amount, due, paid=0.0, category=FeeCategory.TUITION):
    return FeeItem(
        id=item_id,
        category=category,
        amount=amount,
        amount_paid=paid,
        due_date=due,
        created_at=datetime(2026, 6, 1),
    )


class TestInstallments:
    def test_last_installment_absorbs_remainder(self):
        assert split_installments(1000.0, 3) == [333.33, 333.33, 333.34]

    def test_even_split(self):
        assert split_installments(1200.0, 4) == [300.0, 300.0, 300.0, 300.0]

    def test_quarterly_schedule_clamps_month_end(self):
        schedule = build_schedule(1200.0, 4, PlanFrequency.QUARTERLY, date(2026, 1, 31))

        assert [row["due_date"] for row in schedule] == ["2026-01-31", "2026-04-30", "2026-07-31", "2026-10-31"]
        assert [row["installment_number"] for row in schedule] == [1, 2, 3, 4]
        assert all(row["status"] == "pending" for row in schedule)

    def test_monthly_schedule(self):
        schedule = build_schedule(500.0, 2, PlanFrequency.MONTHLY, date(2026, 11, 15))

        assert [row["due_date"] for row in schedule] == ["2026-11-15", "2026-12-15"]


class TestAllocatePayment:
    def test_oldest_due_first(self):
        later = fee_item("later", 300.0, date(2026, 12, 1), category=FeeCategory.TRANSPORTATION)
        earlier = fee_item("earlier", 500.0, date(2026, 9, 1))

        allocations = allocate_payment([later, earlier], 600.0)

        assert allocations == [
            {"fee_item_id": "earlier", "category": "tuition", "amount": 500.0},
            {"fee_item_id": "later", "category": "transportation", "amount": 100.0},
        ]
        assert earlier.amount_paid == 500.0
        assert later.amount_paid == 100.0
        assert later.outstanding == 200.0

    def test_skips_settled_items(self):
        settled = fee_item("settled", 200.0, date(2026, 8, 1), paid=200.0)
        open_item = fee_item("open", 200.0, date(2026, 9, 1), paid=50.0)

        allocations = allocate_payment([settled, open_item], 150.0)

        assert allocations == [{"fee_item_id": "open", "category": "tuition", "amount": 150.0}]
        assert open_item.outstanding == 0.0


class TestPaymentStatus:
    def test_statuses(self):
        assert payment_status(1000.0, 1000.0, 0.0, 0.0) == "paid"
        assert payment_status(1000.0, 200.0, 800.0, 300.0) == "overdue"
        assert payment_status(1000.0, 200.0, 800.0, 0.0) == "partial"
        assert payment_status(1000.0, 0.0, 1000.0, 0.0) == "unpaid"

    def test_rounding_tolerance_counts_as_paid(self):
        assert payment_status(100.0, 99.999, 0.001, 0.0) == "paid"
