from dataclasses import dataclass
from decimal import Decimal
from typing import Optional
import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError, transaction
from django.db.models import F, Q
from django.utils import timezone

from core_backend.exceptions import BusinessRuleViolation, NotFoundError, ValidationError
from payments.money import ZERO, format_money, to_decimal
from settings.config import app_settings

from .factories import CouponStrategyFactory
from .models import Coupon, CouponUsage
from .strategies import finalize_discount

logger = logging.getLogger(__name__)


@dataclass
class CouponValidation:
    valid: bool
    coupon: Optional[Coupon] = None
    error: Optional[str] = None


@dataclass
class CouponApplication:
    success: bool
    coupon: Optional[Coupon] = None
    discount: Decimal = ZERO
    supported: bool = True
    error: Optional[str] = None


@dataclass
class CouponUsageResult:
    success: bool
    usage: Optional[CouponUsage] = None
    error: Optional[str] = None


def normalize_code(code) -> str:
    return (code or "").strip().upper()


class CouponService:
    """
    Coupon ledger: eligibility checks, discount calculation and usage
    recording. Usage counts are only ever changed through record_usage.
    """

    EDITABLE_FIELDS = {
        "name",
        "description",
        "discount_value",
        "max_discount_amount",
        "min_order_amount",
        "valid_from",
        "valid_until",
        "usage_limit",
        "usage_limit_per_user",
        "status",
    }

    @staticmethod
    def _check_discount_value(type: str, discount_value) -> Decimal:
        discount_value = to_decimal(discount_value)
        if discount_value < 0:
            raise ValidationError("Discount value cannot be negative")
        if type == Coupon.CouponType.PERCENTAGE and discount_value > 100:
            raise ValidationError("Percentage discount cannot exceed 100%")
        return discount_value

    @staticmethod
    def create_coupon(code: str, type: str, discount_value=ZERO, **fields) -> Coupon:
        code = normalize_code(code)
        if not code:
            raise ValidationError("Coupon code is required")
        if type not in Coupon.CouponType.values:
            raise ValidationError(f"Invalid coupon type: {type}")
        discount_value = CouponService._check_discount_value(type, discount_value)

        unknown = set(fields) - CouponService.EDITABLE_FIELDS
        if unknown:
            raise ValidationError(f"Unknown coupon fields: {', '.join(sorted(unknown))}")

        try:
            with transaction.atomic():
                coupon = Coupon.objects.create(
                    code=code, type=type, discount_value=discount_value, **fields
                )
        except IntegrityError:
            raise BusinessRuleViolation(f"Coupon code {code} already exists")

        logger.info(f"Coupon {coupon.code} created ({coupon.type})")
        return coupon

    @staticmethod
    def update_coupon(coupon: Coupon, **fields) -> Coupon:
        unknown = set(fields) - CouponService.EDITABLE_FIELDS
        if unknown:
            raise ValidationError(f"Unknown coupon fields: {', '.join(sorted(unknown))}")
        if "discount_value" in fields:
            fields["discount_value"] = CouponService._check_discount_value(coupon.type, fields["discount_value"])
        if "status" in fields and fields["status"] not in Coupon.CouponStatus.values:
            raise ValidationError(f"Invalid coupon status: {fields['status']}")
        limit = fields.get("usage_limit")
        if limit is not None and limit < coupon.usage_count:
            raise ValidationError(f"Usage limit cannot be lower than the {coupon.usage_count} uses already recorded")

        for name, value in fields.items():
            setattr(coupon, name, value)
        coupon.save(update_fields=list(fields) + ["updated_at"])
        return coupon

    @staticmethod
    def deactivate_coupon(coupon: Coupon) -> Coupon:
        """Coupons are never deleted; they are switched to INACTIVE."""
        coupon.status = Coupon.CouponStatus.INACTIVE
        coupon.save(update_fields=["status", "updated_at"])
        logger.info(f"Coupon {coupon.code} deactivated")
        return coupon

    @staticmethod
    def get_coupon(coupon_id) -> Coupon:
        try:
            return Coupon.objects.get(pk=coupon_id)
        except (Coupon.DoesNotExist, DjangoValidationError, ValueError):
            raise NotFoundError("Coupon not found")

    @staticmethod
    def list_coupons(status: Optional[str] = None, active_only: bool = False):
        """Back-office listing. ``active_only`` keeps ACTIVE coupons inside their validity window."""
        coupons = Coupon.objects.all()
        if status:
            coupons = coupons.filter(status=status)
        if active_only:
            now = timezone.now()
            coupons = coupons.filter(status=Coupon.CouponStatus.ACTIVE, valid_from__lte=now).filter(
                Q(valid_until__isnull=True) | Q(valid_until__gte=now)
            )
        return coupons

    @staticmethod
    def get_by_code(code: str) -> Coupon:
        try:
            return Coupon.objects.get(code=normalize_code(code))
        except Coupon.DoesNotExist:
            raise NotFoundError("Coupon not found")

    @staticmethod
    def validate_coupon(code: str, user_id=None, order_subtotal=ZERO) -> CouponValidation:
        """
        Run the eligibility checks in order and stop at the first failure.
        An ACTIVE coupon past its end date is flipped to EXPIRED on the way.
        """
        try:
            coupon = Coupon.objects.get(code=normalize_code(code))
        except Coupon.DoesNotExist:
            return CouponValidation(valid=False, error="Coupon not found")

        if coupon.status != Coupon.CouponStatus.ACTIVE:
            return CouponValidation(valid=False, coupon=coupon, error="Coupon is not active")

        now = timezone.now()
        if coupon.valid_from and now < coupon.valid_from:
            return CouponValidation(valid=False, coupon=coupon, error="Coupon is not yet valid")

        if coupon.valid_until and now > coupon.valid_until:
            # Conditional update: concurrent validations write at most once
            flipped = Coupon.objects.filter(
                pk=coupon.pk, status=Coupon.CouponStatus.ACTIVE
            ).update(status=Coupon.CouponStatus.EXPIRED, updated_at=now)
            if flipped:
                logger.info(f"Coupon {coupon.code} expired")
            coupon.status = Coupon.CouponStatus.EXPIRED
            return CouponValidation(valid=False, coupon=coupon, error="Coupon has expired")

        if coupon.usage_limit is not None and coupon.usage_count >= coupon.usage_limit:
            return CouponValidation(valid=False, coupon=coupon, error="Coupon usage limit reached")

        if user_id and coupon.usage_limit_per_user is not None:
            used = CouponUsage.objects.filter(coupon=coupon, user_id=str(user_id)).count()
            if used >= coupon.usage_limit_per_user:
                return CouponValidation(
                    valid=False,
                    coupon=coupon,
                    error="You have reached the usage limit for this coupon",
                )

        subtotal = to_decimal(order_subtotal)
        if coupon.min_order_amount is not None and subtotal < coupon.min_order_amount:
            amount = format_money(app_settings.currency, coupon.min_order_amount)
            return CouponValidation(
                valid=False,
                coupon=coupon,
                error=f"Minimum order amount of {amount} required",
            )

        return CouponValidation(valid=True, coupon=coupon)

    @staticmethod
    def calculate_discount(coupon: Coupon, subtotal, delivery_fee=ZERO) -> Decimal:
        strategy = CouponStrategyFactory.get_strategy(coupon)
        amount = strategy.calculate(coupon, to_decimal(subtotal), to_decimal(delivery_fee))
        return finalize_discount(app_settings.currency, amount)

    @staticmethod
    def apply_coupon(code: str, user_id=None, subtotal=ZERO, delivery_fee=ZERO) -> CouponApplication:
        """
        Validate a code and price it against a cart without recording usage.
        """
        validation = CouponService.validate_coupon(code, user_id=user_id, order_subtotal=subtotal)
        if not validation.valid:
            return CouponApplication(success=False, coupon=validation.coupon, error=validation.error)

        coupon = validation.coupon
        strategy = CouponStrategyFactory.get_strategy(coupon)
        discount = CouponService.calculate_discount(coupon, subtotal, delivery_fee)
        return CouponApplication(
            success=True,
            coupon=coupon,
            discount=discount,
            supported=strategy.supported,
        )

    @staticmethod
    @transaction.atomic
    def record_usage(coupon: Coupon, order, user_id=None, discount_amount=ZERO) -> CouponUsageResult:
        """
        Count one redemption of ``coupon`` against ``order``.

        The increment is guarded in the UPDATE itself so usage_count can never
        pass usage_limit, and the coupon is deactivated in the same
        transaction once the limit is reached.
        """
        locked = Coupon.objects.select_for_update().get(pk=coupon.pk)

        if locked.status != Coupon.CouponStatus.ACTIVE:
            return CouponUsageResult(success=False, error="Coupon is not active")

        if user_id and locked.usage_limit_per_user is not None:
            used = CouponUsage.objects.filter(coupon=locked, user_id=str(user_id)).count()
            if used >= locked.usage_limit_per_user:
                return CouponUsageResult(
                    success=False, error="You have reached the usage limit for this coupon"
                )

        incremented = (
            Coupon.objects.filter(pk=locked.pk, status=Coupon.CouponStatus.ACTIVE)
            .filter(Q(usage_limit__isnull=True) | Q(usage_count__lt=F("usage_limit")))
            .update(usage_count=F("usage_count") + 1, updated_at=timezone.now())
        )
        if not incremented:
            return CouponUsageResult(success=False, error="Coupon usage limit reached")

        usage = CouponUsage.objects.create(
            coupon=locked,
            order=order,
            user_id=str(user_id) if user_id else None,
            discount_amount=to_decimal(discount_amount),
        )

        exhausted = Coupon.objects.filter(
            pk=locked.pk,
            usage_limit__isnull=False,
            usage_count__gte=F("usage_limit"),
        ).update(status=Coupon.CouponStatus.INACTIVE)
        if exhausted:
            logger.info(f"Coupon {locked.code} reached its usage limit and was deactivated")

        coupon.refresh_from_db(fields=["usage_count", "status", "updated_at"])
        return CouponUsageResult(success=True, usage=usage)
