from dataclasses import dataclass
from typing import Any

from pymongo import AsyncMongoClient
from pymongo.errors import PyMongoError

from errors import ConnectError
from utils import SERVER_SELECTION_TIMEOUT_MS, get_db_name_from_url, logger, redact_url


@dataclass
class DatabaseHandle:
    """A connected client plus the database the connection string names."""
    name: str
    client: Any

    @property
    def db(self):
        return self.client[self.name]


async def connect(url, timeout_ms=SERVER_SELECTION_TIMEOUT_MS):
    """
    Open a client for a connection string and check it can talk to the server.

    Parameters:
        url (str): 'mongodb://[user:pass@]host:port/databaseName'
        timeout_ms (int): Server selection timeout handed to the driver.

    Returns:
        DatabaseHandle: Handle for the database named by the URL's last path segment.
    """
    safe_url = redact_url(url)
    db_name = get_db_name_from_url(url)
    if not db_name:
        raise ConnectError(safe_url, "connection string does not name a database")

    client = None
    try:
        client = AsyncMongoClient(url, serverSelectionTimeoutMS=timeout_ms)
        # Forces server selection and authentication
        await client.admin.command('ping')
    # Malformed URIs (e.g. an unescaped @ in the password) raise a bare ValueError
    except (PyMongoError, ValueError) as e:
        logger.error(f"Connection to {safe_url} failed: {e}")
        if client is not None:
            await client.close()
        raise ConnectError(safe_url, str(e)) from e

    logger.info(f"Connected to {safe_url} (database: {db_name})")
    return DatabaseHandle(name=db_name, client=client)


async def close(handle):
    if handle is None:
        return
    await handle.client.close()
    logger.debug(f"Closed connection to database {handle.name}")
