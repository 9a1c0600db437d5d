"""Database Infrastructure: SQLAlchemy declarative Base shared by all ORM models.

Invariants:
    - All sessions are async (AsyncSession)
"""
