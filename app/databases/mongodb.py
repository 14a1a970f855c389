from typing import List, Optional, Type
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from beanie import init_beanie, Document
from pymongo.errors import PyMongoError, ServerSelectionTimeoutError

from app.configs.settings import settings
from app.utils.logging import get_logger

logger = get_logger(__name__)


class MongoDB:
    """Process-wide MongoDB connection, Beanie is bound to it on connect"""

    def __init__(self):
        self.client: Optional[AsyncIOMotorClient] = None
        self.database: Optional[AsyncIOMotorDatabase] = None

    async def connect(self, document_models: List[Type[Document]]):
        """Connect, verify the server answers, then initialize Beanie (creates indexes)"""
        try:
            self.client = AsyncIOMotorClient(
                settings.MONGO_URL,
                serverSelectionTimeoutMS=8000,
                connectTimeoutMS=8000,
                socketTimeoutMS=10000,
                maxPoolSize=50,
                minPoolSize=0,
                tz_aware=False,
            )

            await self.client.admin.command('ping')
            self.database = self.client[settings.MONGO_DB]

            await init_beanie(
                database=self.database,
                document_models=document_models
            )
            logger.info(
                f"Connected to MongoDB database '{settings.MONGO_DB}', "
                f"Beanie initialized with {len(document_models)} document models")
            return True

        except ServerSelectionTimeoutError as e:
            logger.error(
                f"Failed to connect to MongoDB (timeout) at {settings.MONGO_HOST or 'localhost'}:{settings.MONGO_PORT}: {e}")
            raise ConnectionError("Cannot connect to MongoDB server") from e
        except Exception as e:
            logger.error(f"Failed to connect to MongoDB: {str(e)}")
            raise

    async def ping(self) -> bool:
        if not self.client:
            return False
        try:
            await self.client.admin.command('ping')
            return True
        except PyMongoError as e:
            logger.warning(f"MongoDB ping failed: {e}")
            return False

    async def disconnect(self):
        if self.client:
            self.client.close()
            self.client = None
            self.database = None
            logger.info("Disconnected from MongoDB")


mongodb = MongoDB()
