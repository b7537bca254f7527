from django.dispatch import Signal

# Sent on commit, so receivers only ever see committed state.

# Sent with: delivery, driver_id, previous_driver_id
delivery_assigned = Signal()

# Sent with: delivery, old_status, new_status
delivery_status_changed = Signal()
