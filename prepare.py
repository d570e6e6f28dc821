from pymongo.errors import PyMongoError

from errors import PrepareError
from utils import YELLOW, logger, print_status


async def prepare_target(target, force_drop):
    """
    Drop the whole target database when force_drop is set.

    Must finish before the first copy starts. Returns True when a drop happened.
    """
    if not force_drop:
        logger.debug(f"Keeping existing data in {target.name}")
        return False

    print_status(f"🗑  Drop target database: {target.name}", YELLOW)
    logger.warning(f"Dropping target database {target.name}")
    try:
        await target.client.drop_database(target.name)
    except PyMongoError as e:
        logger.error(f"Dropping {target.name} failed: {e}")
        raise PrepareError(f"Failed to drop target database '{target.name}': {e}",
                           {"database": target.name}) from e

    return True
