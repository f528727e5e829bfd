"""Lock file model and persistence.

Update strategies live in ``uptix.lock.update``, which depends on the
dependency variants and is therefore not imported here.
"""

from uptix.lock.models import DependencyMetadata, LockEntry
from uptix.lock.store import LockFile

__all__ = ["DependencyMetadata", "LockEntry", "LockFile"]
