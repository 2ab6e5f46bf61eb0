"""
MongoDB access for the development server.

DATABASE_URL and DATABASE_NAME select the server and database. The client
connects on first use, so importing this module never touches the network.
"""
import os
from datetime import datetime, timezone

from pymongo import MongoClient
from pymongo.database import Database

DATABASE_URL = os.getenv("DATABASE_URL", "mongodb://localhost:27017")
DATABASE_NAME = os.getenv("DATABASE_NAME", "admin_console")

client = MongoClient(DATABASE_URL, connect=False)
db: Database = client[DATABASE_NAME]


def create_document(collection_name: str, data: dict) -> str:
    doc = dict(data)
    now = datetime.now(timezone.utc)
    doc.setdefault("createdAt", now)
    doc.setdefault("updatedAt", now)
    return str(db[collection_name].insert_one(doc).inserted_id)
