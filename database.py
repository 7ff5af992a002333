"""
MongoDB access for Mangrove Watch

One client is built per process from DATABASE_URL / DATABASE_NAME and the
resulting handle is shared. Code that runs outside a request (the leaderboard
job) takes the handle as an argument instead of reaching for the global.
"""

import logging
import os
from typing import Optional, Union

from dotenv import load_dotenv
from pydantic import BaseModel
from pymongo import MongoClient
from pymongo.database import Database

load_dotenv()

logger = logging.getLogger(__name__)

DATABASE_URL = os.getenv("DATABASE_URL")
DATABASE_NAME = os.getenv("DATABASE_NAME", "mangrove_watch")

REPORTS = "reports"
LEADERBOARDS = "leaderboards"


def connect(url: Optional[str] = None, name: Optional[str] = None) -> Optional[Database]:
    url = url or DATABASE_URL
    if not url:
        logger.warning("DATABASE_URL not set; database features are disabled")
        return None
    client = MongoClient(url, serverSelectionTimeoutMS=5000, tz_aware=True)
    return client[name or DATABASE_NAME]


db = connect()


def create_document(collection_name: str, data: Union[BaseModel, dict], database: Optional[Database] = None) -> str:
    """Insert one document and return its id as a string."""
    database = database if database is not None else db
    if database is None:
        raise RuntimeError("Database not configured")
    doc = data.model_dump() if isinstance(data, BaseModel) else dict(data)
    result = database[collection_name].insert_one(doc)
    return str(result.inserted_id)


def get_documents(collection_name: str, filter_dict: Optional[dict] = None, limit: Optional[int] = None,
                  database: Optional[Database] = None):
    database = database if database is not None else db
    if database is None:
        raise RuntimeError("Database not configured")
    cursor = database[collection_name].find(filter_dict or {})
    if limit:
        cursor = cursor.limit(limit)
    return list(cursor)
