"""
Reminder dispatch service layer.

Reminder logic is:
- service-layer only
- date-based
- one summary e-mail per module and period
- configuration passed in explicitly (see reminders.config)
"""
