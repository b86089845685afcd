"""Database metadata — SQLAlchemy Base shared by ORM models and Alembic."""
