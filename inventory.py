from dataclasses import dataclass, field

from pymongo.errors import PyMongoError

from errors import ScanError
from progress import StatusLine
from utils import gather_or_cancel, is_copyable, logger


@dataclass(frozen=True)
class CollectionDescriptor:
    name: str
    document_count: int = 0


@dataclass
class Inventory:
    """What the source holds, counted before any copy starts."""
    collections: list = field(default_factory=list)
    total: int = 0

    @property
    def names(self):
        return [c.name for c in self.collections]


async def scan(source, status=None):
    """
    List the source collections and count their documents.

    Counts run concurrently; 'system.indexes' is skipped entirely.

    Parameters:
        source (DatabaseHandle): Source database.
        status (StatusLine): Transient line showing the collection being counted.

    Returns:
        Inventory: Eligible collections, in listing order, and the summed total.
    """
    status = status or StatusLine()

    async def count(name):
        document_count = await source.db[name].count_documents({})
        status.update(f"🔻 Fetching: {name}")
        logger.debug(f"{name}: {document_count} documents")
        return CollectionDescriptor(name=name, document_count=document_count)

    try:
        names = await source.db.list_collection_names()
        skipped = [name for name in names if not is_copyable(name)]
        if skipped:
            logger.info(f"Skipping collections: {skipped}")
        collections = await gather_or_cancel([count(name) for name in names if is_copyable(name)])
    except PyMongoError as e:
        logger.error(f"Scanning {source.name} failed: {e}")
        raise ScanError(f"Failed to scan source database '{source.name}': {e}",
                        {"database": source.name}) from e
    else:
        status.update("🔻 Fetching: DONE")
    finally:
        status.finish()

    inventory = Inventory(collections=collections,
                          total=sum(c.document_count for c in collections))
    logger.info(f"Found {len(collections)} collections and {inventory.total} documents in {source.name}")
    return inventory
