"""Change feed package for revwatch.

Submodules
----------
base          -- ChangeFeed contract and the read_text helper.
watchdog_feed -- WatchdogChangeFeed: native or polling watchdog observer,
                 event classification, optional debounce.
"""

from revwatch.feed.base import ChangeFeed, EventSink, read_text
from revwatch.feed.watchdog_feed import WatchdogChangeFeed, classify

__all__ = ["ChangeFeed", "EventSink", "WatchdogChangeFeed", "classify", "read_text"]
