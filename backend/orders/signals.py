from django.dispatch import Signal

# Custom signals that other apps can listen to.
# Both are sent from transaction.on_commit, so receivers only ever see
# committed state.

# Sent with: order
order_created = Signal()

# Sent with: order, old_status, new_status
order_status_changed = Signal()
