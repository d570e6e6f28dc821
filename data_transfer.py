from dataclasses import dataclass
from typing import Any

from pymongo.errors import DuplicateKeyError, PyMongoError

from errors import CopyError, InsertConflictError, InsertError
from utils import CLONE_BATCH_SIZE, gather_or_cancel, logger


@dataclass
class CopyTask:
    collection_name: str
    source: Any
    target: Any


async def insert_document(task, tracker, doc):
    name = task.collection_name
    try:
        await task.target.db[name].insert_one(doc)
    except DuplicateKeyError as e:
        logger.error(f"Duplicate key inserting {doc.get('_id')!r} into {name}: {e}")
        raise InsertConflictError(name, doc.get('_id')) from e
    except PyMongoError as e:
        logger.error(f"Insert into {name} failed: {e}")
        raise InsertError(name, str(e), {"document_id": doc.get('_id')}) from e

    tracker.report(name)


async def copy_collection(task, tracker, batch_size=CLONE_BATCH_SIZE):
    """
    Copies every document of one collection from source to target.

    Parameters:
        task (CopyTask): Collection name plus source and target handles.
        tracker (ProgressTracker): Receives one report per inserted document.
        batch_size (int): Documents buffered before they are inserted.
            0 or less buffers the whole collection first.

    Returns:
        int: Number of documents inserted.
    """
    name = task.collection_name
    inserted = 0

    async def flush(batch):
        # Documents of a batch go in concurrently; the first failure cancels the rest
        await gather_or_cancel([insert_document(task, tracker, doc) for doc in batch])
        return len(batch)

    logger.info(f"Transferring collection: {name}")
    batch = []
    try:
        docs = task.source.db[name].find(batch_size=max(batch_size, 0))
        async for doc in docs:
            batch.append(doc)
            if 0 < batch_size <= len(batch):
                inserted += await flush(batch)
                batch = []
    except PyMongoError as e:
        logger.error(f"Reading {name} from source failed: {e}")
        raise CopyError(name, f"failed to read source documents: {e}") from e

    # Insert remaining docs
    if batch:
        inserted += await flush(batch)

    logger.info(f"Finished transferring {name}: {inserted} documents")
    return inserted
