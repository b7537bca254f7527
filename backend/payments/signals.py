from django.dispatch import Signal

# Custom payment signals

# Sent on commit, once, when a payment first reaches COMPLETED.
# Sent with: payment, order
payment_completed = Signal()

# Sent on commit when a card payment is refused.
# Sent with: payment, order
payment_failed = Signal()
