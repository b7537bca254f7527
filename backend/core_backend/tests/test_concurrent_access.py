"""
Concurrent Access Tests

Tests for races on the guarded balances:
- Two redemptions against one gift card must not overspend it
- Simultaneous coupon redemptions must not pass the usage limit

These tests use threading to simulate simultaneous requests. SQLite has no
row-level locks, so they only run against PostgreSQL (DB_ENGINE=postgres).
"""
import pytest
from decimal import Decimal
from threading import Barrier, Thread

from django.db import connection

from coupons.models import Coupon, CouponUsage
from coupons.services import CouponService
from giftcards.models import GiftCard, GiftCardTransaction
from giftcards.services import GiftCardService

pytestmark = [
    pytest.mark.concurrency,
    pytest.mark.skipif(connection.vendor == "sqlite", reason="needs row-level locking"),
]


def run_concurrently(target, count):
    """Start ``count`` threads on ``target(i)`` at the same moment and wait for them."""
    barrier = Barrier(count)
    errors = []

    def worker(i):
        from django.db import connection as thread_connection

        try:
            barrier.wait()
            target(i)
        except Exception as e:
            errors.append(f"thread_{i}_unexpected: {e}")
        finally:
            thread_connection.close()

    threads = [Thread(target=worker, args=(i,)) for i in range(count)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    return errors


@pytest.mark.django_db(transaction=True)
class TestConcurrentGiftCardUse:
    def test_simultaneous_redemptions_do_not_overspend(self, restaurant_settings):
        """
        Card holds 50.00 and three requests each spend 20.00 at once.
        Exactly two succeed; the third sees the reduced balance.
        """
        GiftCard.objects.create(
            code="RACE-0001",
            original_balance=Decimal("50.00"),
            current_balance=Decimal("50.00"),
        )
        results = []

        def spend(i):
            results.append(GiftCardService.use_gift_card("RACE-0001", "20.00"))

        errors = run_concurrently(spend, 3)

        assert errors == []
        assert sum(1 for r in results if r.success) == 2
        assert [r.error for r in results if not r.success] == ["Insufficient balance"]

        card = GiftCard.objects.get(code="RACE-0001")
        assert card.current_balance == Decimal("10.00")
        entries = GiftCardTransaction.objects.filter(gift_card=card)
        assert entries.count() == 2
        assert sum(e.amount for e in entries) == Decimal("-40.00")


@pytest.mark.django_db(transaction=True)
class TestConcurrentCouponUsage:
    def test_usage_limit_holds_under_simultaneous_redemptions(
        self, pickup_order, guest_order, delivery_order
    ):
        coupon = Coupon.objects.create(
            code="LASTONE",
            name="Last one",
            type=Coupon.CouponType.FIXED,
            discount_value=Decimal("5.00"),
            usage_limit=1,
        )
        orders = [pickup_order, guest_order, delivery_order]
        results = []

        def redeem(i):
            stale = Coupon.objects.get(pk=coupon.pk)
            results.append(CouponService.record_usage(stale, orders[i], discount_amount="5.00"))

        errors = run_concurrently(redeem, 3)

        assert errors == []
        assert sum(1 for r in results if r.success) == 1

        coupon.refresh_from_db()
        assert coupon.usage_count == 1
        assert coupon.status == Coupon.CouponStatus.INACTIVE
        assert CouponUsage.objects.filter(coupon=coupon).count() == 1
