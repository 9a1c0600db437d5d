"""ORM Models: SQLAlchemy declarative models for the five entity collections plus sessions.

Invariants:
    - All models inherit from Base (db/base.py)
    - No ON DELETE CASCADE on foreign keys: dependent rows are removed by the
      cascade orchestrator in dependency order, never implicitly by the database

Design Decisions:
    - One file per entity
    - All models imported here so Base.metadata is complete for create_all and
      Alembic autogenerate
"""

from statusboard.models.user import User  # noqa: F401
from statusboard.models.project import Project, ProjectMember  # noqa: F401
from statusboard.models.update import Update  # noqa: F401
from statusboard.models.thanks import Thanks  # noqa: F401
from statusboard.models.eyes_wanted import EyesWanted  # noqa: F401
from statusboard.models.user_session import UserSession  # noqa: F401
