import logging
from pathlib import Path

from newsdesk.config import settings

logger = logging.getLogger(__name__)


class AssetStore:
    """Stored binary assets (cover images) that belong to content items."""

    def __init__(self, root: str | Path | None = None):
        self.root = Path(root or settings.media_root).resolve()

    def path_for(self, name: str) -> Path | None:
        """Resolve *name* inside the store; None if it would escape the root."""
        path = (self.root / name).resolve()
        if self.root not in path.parents:
            return None
        return path

    def delete(self, name: str | None) -> bool:
        """
        Remove a stored asset. Best-effort: failures are logged, never raised.
        """
        if not name:
            return False
        path = self.path_for(name)
        if path is None:
            logger.warning("Refusing to delete asset outside media root: %s", name)
            return False
        try:
            path.unlink()
        except FileNotFoundError:
            logger.info("Asset %s already gone", name)
            return False
        except OSError as e:
            logger.warning("Error deleting asset %s: %s", name, e)
            return False
        logger.info("Deleted asset %s", name)
        return True


asset_store = AssetStore()


def get_asset_store() -> AssetStore:
    """FastAPI dependency for the asset store."""
    return asset_store
