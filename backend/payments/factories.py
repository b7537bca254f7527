from core_backend.exceptions import ValidationError

from .models import Payment
from .strategies import (
    CardPaymentStrategy,
    CashPaymentStrategy,
    PaymentStrategy,
    UnsupportedPaymentStrategy,
)


class PaymentStrategyFactory:
    """
    A factory for creating payment strategy instances.
    """

    _strategies = {
        Payment.PaymentMethod.CASH: CashPaymentStrategy,
        Payment.PaymentMethod.CARD: CardPaymentStrategy,
    }

    @staticmethod
    def get_strategy(method: str) -> PaymentStrategy:
        """
        Returns an instance of the appropriate payment strategy for the
        payment method string. Known methods without an integration get an
        UnsupportedPaymentStrategy; anything else is malformed input.
        """
        if method not in Payment.PaymentMethod.values:
            raise ValidationError(f"Unknown payment method: {method}")

        strategy_class = PaymentStrategyFactory._strategies.get(method)
        if strategy_class is None:
            return UnsupportedPaymentStrategy(method)
        return strategy_class()
