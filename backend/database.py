import uuid
import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from config import MONGO_URL, DB_NAME, COMMENT_COLLECTION

logger = logging.getLogger(__name__)

client = AsyncIOMotorClient(MONGO_URL)
db = client[DB_NAME]

# Never hand Mongo's internal ObjectId back to callers
_PROJECTION = {"_id": 0}


class MongoGateway:
    """Document database gateway over a motor database.

    Queries are plain MongoDB filter documents. ``sort`` is a list of
    ``(field, direction)`` pairs and ``limit=0`` means no limit.
    """

    def __init__(self, database: AsyncIOMotorDatabase):
        self.database = database

    async def insert(self, collection: str, record: Dict[str, Any]) -> str:
        """Persist a record, assigning its ``id`` when it has none."""
        record = dict(record)
        if not record.get("id"):
            record["id"] = uuid.uuid4().hex
        await self.database[collection].insert_one(record)
        return record["id"]

    async def find_by_id(self, collection: str, record_id: Optional[str]) -> Optional[Dict[str, Any]]:
        if record_id is None:
            return None
        return await self.database[collection].find_one({"id": record_id}, _PROJECTION)

    async def find(
        self,
        collection: str,
        query: Dict[str, Any],
        sort: Optional[Sequence[Tuple[str, int]]] = None,
        skip: int = 0,
        limit: int = 0,
    ) -> List[Dict[str, Any]]:
        cursor = self.database[collection].find(query, _PROJECTION)
        if sort:
            cursor = cursor.sort(list(sort))
        if skip:
            cursor = cursor.skip(skip)
        if limit:
            cursor = cursor.limit(limit)
        return await cursor.to_list(length=None)

    async def count(self, collection: str, query: Dict[str, Any]) -> int:
        return await self.database[collection].count_documents(query)

    async def update_first(self, collection: str, query: Dict[str, Any], update: Dict[str, Any]) -> int:
        """Apply ``update`` to the first match. Returns the matched count."""
        result = await self.database[collection].update_one(query, update)
        return result.matched_count

    async def remove(self, collection: str, query: Dict[str, Any]) -> int:
        result = await self.database[collection].delete_many(query)
        return result.deleted_count

    async def estimated_count(self, collection: str) -> int:
        """Fast count from collection metadata; may lag behind reality."""
        return await self.database[collection].estimated_document_count()


async def create_indexes():
    """Create database indexes on startup."""
    try:
        await db[COMMENT_COLLECTION].create_index("id", unique=True)
        await db[COMMENT_COLLECTION].create_index([("doc_id", 1), ("created_at", -1)])
        await db[COMMENT_COLLECTION].create_index([("created_at", -1)])
        await db.users.create_index("id", unique=True)
        logger.info("Database indexes created successfully")
    except Exception as e:
        logger.error(f"Error creating indexes: {e}")


async def close_connection():
    """Close the MongoDB connection."""
    client.close()
