"""Version history for revwatch.

Holds the in-memory sequence of distinct file contents observed during a
watching session.  Nothing is persisted; the history ends with the session.

Submodules:
    store -- VersionStore: append-only history plus browsing cursor.
"""

from revwatch.history.store import VersionStore

__all__ = ["VersionStore"]
