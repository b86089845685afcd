"""ORM Models — SQLAlchemy declarative models.

All models imported here so Base.metadata is complete before create_all or
Alembic autogenerate runs.
"""

from nudge.models.notification_event import NotificationEventLog  # noqa: F401
