"""
Gift Card Service Tests

Tests for the gift card ledger:
- Issuing cards (code format, hashed PIN)
- Validation (status, expiry, balance, PIN)
- Spending, including the no-partial-charge rule
- Refunds capped at the original balance
- Ledger entries that always sum to the balance change
- Balance lookup and transaction history
"""
import pytest
from datetime import timedelta
from decimal import Decimal

from django.utils import timezone

from core_backend.exceptions import NotFoundError, ValidationError
from giftcards.models import GiftCard, GiftCardTransaction
from giftcards.services import CODE_ALPHABET, GiftCardService


@pytest.mark.django_db
class TestIssueGiftCard:
    def test_code_format(self):
        code = GiftCardService.generate_code()

        groups = code.split("-")
        assert [len(group) for group in groups] == [4, 4, 4]
        assert all(char in CODE_ALPHABET for char in "".join(groups))

    def test_pin_is_hashed(self, restaurant_settings):
        card, pin = GiftCardService.create_gift_card("25.00")

        assert len(pin) == 4 and pin.isdigit()
        assert card.pin != pin
        assert card.has_pin
        assert card.original_balance == card.current_balance == Decimal("25.00")
        assert card.status == GiftCard.GiftCardStatus.ACTIVE

    def test_without_pin(self, restaurant_settings):
        card, pin = GiftCardService.create_gift_card(Decimal("10"), with_pin=False)

        assert pin is None
        assert not card.has_pin

    def test_amount_must_be_positive(self, restaurant_settings):
        with pytest.raises(ValidationError, match="greater than zero"):
            GiftCardService.create_gift_card("0")


@pytest.mark.django_db
class TestValidateGiftCard:
    def test_valid_card(self, gift_card):
        result = GiftCardService.validate_gift_card("gift-0001")

        assert result.valid
        assert result.balance == Decimal("50.00")

    def test_unknown_card(self, db):
        result = GiftCardService.validate_gift_card("NOPE")

        assert not result.valid
        assert result.error == "Gift card not found"

    def test_pin_required(self, small_gift_card):
        assert GiftCardService.validate_gift_card("GIFT-0002").error == "PIN required"
        assert GiftCardService.validate_gift_card("GIFT-0002", pin="9999").error == "Invalid PIN"
        assert GiftCardService.validate_gift_card("GIFT-0002", pin="1234").valid

    def test_expired_card_is_flipped(self, gift_card):
        gift_card.expires_at = timezone.now() - timedelta(days=1)
        gift_card.save()

        result = GiftCardService.validate_gift_card("GIFT-0001")

        assert result.error == "Gift card has expired"
        gift_card.refresh_from_db()
        assert gift_card.status == GiftCard.GiftCardStatus.EXPIRED

    def test_used_card(self, gift_card):
        gift_card.status = GiftCard.GiftCardStatus.USED
        gift_card.save()

        assert GiftCardService.validate_gift_card("GIFT-0001").error == "Gift card is not active"


@pytest.mark.django_db
class TestUseGiftCard:
    def test_partial_use(self, gift_card, pickup_order):
        result = GiftCardService.use_gift_card("GIFT-0001", "12.50", order=pickup_order)

        assert result.success
        assert result.amount == Decimal("12.50")
        assert result.remaining_balance == Decimal("37.50")
        assert result.transaction.amount == Decimal("-12.50")
        assert result.transaction.balance_after == Decimal("37.50")
        assert result.transaction.order == pickup_order

        gift_card.refresh_from_db()
        assert gift_card.current_balance == Decimal("37.50")
        assert gift_card.last_used_at is not None

    def test_exact_balance_marks_used(self, gift_card):
        result = GiftCardService.use_gift_card("GIFT-0001", "50.00")

        assert result.success
        gift_card.refresh_from_db()
        assert gift_card.status == GiftCard.GiftCardStatus.USED
        assert gift_card.current_balance == Decimal("0.00")

    def test_overspend_is_rejected(self, gift_card):
        result = GiftCardService.use_gift_card("GIFT-0001", "50.01")

        assert not result.success
        assert result.error == "Insufficient balance"
        assert result.remaining_balance == Decimal("50.00")
        assert not GiftCardTransaction.objects.exists()

    def test_non_positive_amount(self, gift_card):
        result = GiftCardService.use_gift_card("GIFT-0001", "-1")

        assert not result.success
        assert result.error == "Amount must be greater than zero"

    def test_wrong_pin(self, small_gift_card):
        result = GiftCardService.use_gift_card("GIFT-0002", "5.00", pin="0000")

        assert result.error == "Invalid PIN"
        small_gift_card.refresh_from_db()
        assert small_gift_card.current_balance == Decimal("10.00")

    def test_pin_check_can_be_skipped(self, small_gift_card):
        result = GiftCardService.use_gift_card("GIFT-0002", "5.00", check_pin=False)

        assert result.success


@pytest.mark.django_db
class TestRefundGiftCard:
    def test_refund_restores_balance(self, gift_card):
        GiftCardService.use_gift_card("GIFT-0001", "20.00")

        result = GiftCardService.refund_gift_card("GIFT-0001", "15.00")

        assert result.success
        assert result.remaining_balance == Decimal("45.00")
        assert result.transaction.type == GiftCardTransaction.TransactionType.REFUND

    def test_refund_capped_at_original_balance(self, gift_card):
        GiftCardService.use_gift_card("GIFT-0001", "20.00")

        result = GiftCardService.refund_gift_card("GIFT-0001", "100.00")

        assert result.amount == Decimal("20.00")
        assert result.remaining_balance == Decimal("50.00")

    def test_full_card_cannot_be_refunded(self, gift_card):
        result = GiftCardService.refund_gift_card("GIFT-0001", "5.00")

        assert not result.success
        assert result.error == "Gift card balance is already full"

    def test_used_card_reactivated_only_when_full(self, gift_card):
        GiftCardService.use_gift_card("GIFT-0001", "50.00")

        GiftCardService.refund_gift_card("GIFT-0001", "10.00")
        gift_card.refresh_from_db()
        assert gift_card.status == GiftCard.GiftCardStatus.USED

        GiftCardService.refund_gift_card("GIFT-0001", "40.00")
        gift_card.refresh_from_db()
        assert gift_card.status == GiftCard.GiftCardStatus.ACTIVE

    def test_use_then_refund_restores_active_card(self, gift_card):
        GiftCardService.use_gift_card("GIFT-0001", "12.50")
        GiftCardService.refund_gift_card("GIFT-0001", "12.50")

        gift_card.refresh_from_db()
        assert gift_card.current_balance == Decimal("50.00")
        assert gift_card.status == GiftCard.GiftCardStatus.ACTIVE


@pytest.mark.django_db
class TestLedgerInvariant:
    """The transaction ledger always explains the balance"""

    def test_ledger_matches_balance_after_mixed_activity(self, gift_card, pickup_order):
        GiftCardService.use_gift_card("GIFT-0001", "20.00", order=pickup_order)
        GiftCardService.refund_gift_card("GIFT-0001", "7.25", order=pickup_order)
        GiftCardService.use_gift_card("GIFT-0001", "30.00")
        GiftCardService.use_gift_card("GIFT-0001", "100.00")  # rejected, writes nothing
        GiftCardService.refund_gift_card("GIFT-0001", "2.10")

        gift_card.refresh_from_db()
        total = sum(t.amount for t in gift_card.transactions.all())
        assert gift_card.current_balance == Decimal("9.35")
        assert total == -(gift_card.original_balance - gift_card.current_balance)
        assert gift_card.transactions.count() == 4


@pytest.mark.django_db
class TestBalanceAndHistory:
    def test_check_balance(self, gift_card):
        balance = GiftCardService.check_balance(" gift-0001 ")

        assert balance["code"] == "GIFT-0001"
        assert balance["balance"] == Decimal("50.00")
        assert balance["status"] == GiftCard.GiftCardStatus.ACTIVE

    def test_check_balance_unknown(self, db):
        with pytest.raises(NotFoundError):
            GiftCardService.check_balance("NOPE")

    def test_transactions(self, gift_card):
        GiftCardService.use_gift_card("GIFT-0001", "5.00")
        GiftCardService.use_gift_card("GIFT-0001", "5.00")

        assert GiftCardService.get_transactions(gift_card).count() == 2
