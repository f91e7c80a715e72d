"""
Document store module.
Provides a small document-database interface with an in-process implementation
(used for tests and local runs) and a MongoDB implementation (pymongo).
"""

# Deep copies keep callers from mutating stored documents in place
import copy  # document isolation
# Wraps driver calls so their errors map onto the error taxonomy
from contextlib import contextmanager  # error translation
# Lock guards the in-memory collections against the scheduler thread
import threading  # shared-state protection
# Typing hints for clarity of public API
from typing import Any, Dict, List, Optional  # type hints

# Console logging
from loguru import logger  # console logger

# Import project configuration for backend selection
from . import config  # environment-driven settings
from .errors import InternalError  # driver failures

# Collection names used across the project
MOVIES = 'movies'
PERSONS = 'persons'
REVIEWS = 'reviews'
USERS = 'users'
REMINDERS = 'reminders'


class DocumentStore:
	"""
	Minimal document-database contract.
	Documents are dicts keyed by '_id'; all() returns them in natural (insertion) order.
	"""

	def get(self, collection: str, doc_id: str) -> Optional[Dict]:
		raise NotImplementedError

	def all(self, collection: str) -> List[Dict]:
		raise NotImplementedError

	def find(self, collection: str, **equals: Any) -> List[Dict]:
		"""Return documents whose fields equal every given value."""
		raise NotImplementedError

	def insert(self, collection: str, doc: Dict) -> Dict:
		raise NotImplementedError

	def replace(self, collection: str, doc: Dict) -> bool:
		"""Overwrite an existing document; returns False when no document matched."""
		raise NotImplementedError

	def update_fields(self, collection: str, doc_id: str, fields: Dict) -> bool:
		"""Set selected fields on one document; returns False when it does not exist."""
		raise NotImplementedError

	def delete(self, collection: str, doc_id: str) -> bool:
		raise NotImplementedError

	def close(self):
		"""Release connections; a no-op for stores without any."""


class InMemoryStore(DocumentStore):
	"""
	Thread-safe, process-local store.
	Each collection is an insertion-ordered dict of id -> document.
	"""

	def __init__(self):
		self._collections: Dict[str, Dict[str, Dict]] = {}  # name -> {id: doc}
		self._lock = threading.RLock()  # one lock for all collections
		logger.info("[Store] Initialized in-memory document store")

	def _collection(self, name: str) -> Dict[str, Dict]:
		return self._collections.setdefault(name, {})

	def get(self, collection: str, doc_id: str) -> Optional[Dict]:
		with self._lock:
			doc = self._collection(collection).get(doc_id)
			return copy.deepcopy(doc) if doc is not None else None

	def all(self, collection: str) -> List[Dict]:
		with self._lock:
			return [copy.deepcopy(d) for d in self._collection(collection).values()]

	def find(self, collection: str, **equals: Any) -> List[Dict]:
		with self._lock:
			return [
				copy.deepcopy(d)
				for d in self._collection(collection).values()
				if all(d.get(k) == v for k, v in equals.items())
			]

	def insert(self, collection: str, doc: Dict) -> Dict:
		if '_id' not in doc:
			raise ValueError("Document must carry an '_id'")
		with self._lock:
			col = self._collection(collection)
			if doc['_id'] in col:
				raise ValueError(f"Duplicate _id {doc['_id']} in {collection}")
			col[doc['_id']] = copy.deepcopy(doc)
		logger.debug(f"[Store] Inserted {collection}/{doc['_id']}")
		return doc

	def replace(self, collection: str, doc: Dict) -> bool:
		with self._lock:
			col = self._collection(collection)
			if doc['_id'] not in col:
				return False
			col[doc['_id']] = copy.deepcopy(doc)  # keeps its insertion position
		return True

	def update_fields(self, collection: str, doc_id: str, fields: Dict) -> bool:
		with self._lock:
			doc = self._collection(collection).get(doc_id)
			if doc is None:
				return False
			doc.update(copy.deepcopy(fields))
		return True

	def delete(self, collection: str, doc_id: str) -> bool:
		with self._lock:
			return self._collection(collection).pop(doc_id, None) is not None


class MongoStore(DocumentStore):
	"""
	MongoDB-backed store.
	The client connects lazily, so constructing the store never blocks on the network.
	Driver failures surface as InternalError so callers see one error type.
	"""

	def __init__(self, uri: str = None, database: str = None, client=None):
		# Import pymongo only when a Mongo store is actually requested
		from pymongo import MongoClient  # official MongoDB driver
		from pymongo.errors import PyMongoError  # base of every driver error

		self.uri = uri or config.MONGO_URI  # connection string
		self.database_name = database or config.MONGO_DATABASE  # database to use
		self._client = client or MongoClient(self.uri)  # thread-safe connection pool
		self._db = self._client[self.database_name]  # database handle
		self._driver_error = PyMongoError
		logger.info(f"[Store] MongoDB store configured | database={self.database_name}")

	@contextmanager
	def _guard(self, action: str, collection: str):
		try:
			yield
		except self._driver_error as e:
			logger.error(f"[Store] MongoDB {action} on {collection} failed: {e}")
			raise InternalError("Database operation failed") from e

	def get(self, collection: str, doc_id: str) -> Optional[Dict]:
		with self._guard('get', collection):
			return self._db[collection].find_one({'_id': doc_id})

	def all(self, collection: str) -> List[Dict]:
		with self._guard('scan', collection):
			return list(self._db[collection].find())

	def find(self, collection: str, **equals: Any) -> List[Dict]:
		with self._guard('find', collection):
			return list(self._db[collection].find(equals))

	def insert(self, collection: str, doc: Dict) -> Dict:
		with self._guard('insert', collection):
			self._db[collection].insert_one(dict(doc))
		logger.debug(f"[Store] Inserted {collection}/{doc['_id']}")
		return doc

	def replace(self, collection: str, doc: Dict) -> bool:
		with self._guard('replace', collection):
			result = self._db[collection].replace_one({'_id': doc['_id']}, doc)
		return result.matched_count > 0

	def update_fields(self, collection: str, doc_id: str, fields: Dict) -> bool:
		with self._guard('update', collection):
			result = self._db[collection].update_one({'_id': doc_id}, {'$set': fields})
		return result.matched_count > 0

	def delete(self, collection: str, doc_id: str) -> bool:
		with self._guard('delete', collection):
			result = self._db[collection].delete_one({'_id': doc_id})
		return result.deleted_count > 0

	def close(self):
		self._client.close()
		logger.info("[Store] MongoDB client closed")


def build_store(backend: str = None) -> DocumentStore:
	"""Create the store selected by configuration ('memory' or 'mongo')."""
	backend = (backend or config.STORE_BACKEND).lower()
	if backend == 'memory':
		return InMemoryStore()
	if backend == 'mongo':
		return MongoStore()
	raise ValueError(f"Unknown store backend: {backend}")
