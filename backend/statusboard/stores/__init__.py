"""SQL Stores: async SQLAlchemy implementations of the core store protocols.

Invariants:
    - One store set per AsyncSession; all stores in a set share one asyncio.Lock
"""

import asyncio

from sqlalchemy.ext.asyncio import AsyncSession

from statusboard.core.repository_protocols import StoreSet
from statusboard.stores.user_store import SqlUserStore
from statusboard.stores.project_store import SqlProjectStore
from statusboard.stores.update_store import SqlUpdateStore
from statusboard.stores.reaction_stores import SqlThanksStore, SqlEyesWantedStore
from statusboard.stores.session_store import SqlSessionStore


def build_sql_stores(db: AsyncSession, autocommit: bool = True) -> StoreSet:
    """Build the full store set over one session."""
    lock = asyncio.Lock()
    return StoreSet(
        users=SqlUserStore(db, lock, autocommit),
        projects=SqlProjectStore(db, lock, autocommit),
        updates=SqlUpdateStore(db, lock, autocommit),
        thanks=SqlThanksStore(db, lock, autocommit),
        eyes_wanted=SqlEyesWantedStore(db, lock, autocommit),
        sessions=SqlSessionStore(db, lock, autocommit),
    )
