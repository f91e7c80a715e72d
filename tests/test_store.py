"""
Tests for the in-memory document store and the catalog repository on top of it.
Run: python tests/test_store.py  (or: pytest tests/test_store.py)
"""

from datetime import date

import pytest
from pymongo.errors import PyMongoError

from builders import add_movie, add_user, make_catalog
from cinebase.errors import InternalError, NotFoundError
from cinebase.models import Reminder, new_id
from cinebase.store import InMemoryStore, MongoStore, build_store


def test_insert_get_and_isolation():
	store = InMemoryStore()
	doc = {"_id": "a", "tags": ["x"]}
	store.insert("things", doc)
	doc["tags"].append("mutated")

	stored = store.get("things", "a")
	assert stored == {"_id": "a", "tags": ["x"]}
	stored["tags"].append("again")
	assert store.get("things", "a")["tags"] == ["x"]
	assert store.get("things", "missing") is None


def test_duplicate_and_missing_id_rejected():
	store = InMemoryStore()
	store.insert("things", {"_id": "a"})
	with pytest.raises(ValueError):
		store.insert("things", {"_id": "a"})
	with pytest.raises(ValueError):
		store.insert("things", {"name": "no id"})


def test_order_find_replace_update_delete():
	store = InMemoryStore()
	for i, kind in enumerate(["a", "b", "a"]):
		store.insert("things", {"_id": str(i), "kind": kind, "n": i})

	assert [d["_id"] for d in store.all("things")] == ["0", "1", "2"]
	assert [d["_id"] for d in store.find("things", kind="a")] == ["0", "2"]
	assert store.find("things", kind="a", n=2)[0]["_id"] == "2"

	assert store.replace("things", {"_id": "0", "kind": "c"})
	assert [d["_id"] for d in store.all("things")] == ["0", "1", "2"]  # position kept
	assert not store.replace("things", {"_id": "zz"})

	assert store.update_fields("things", "1", {"n": 10})
	assert store.get("things", "1") == {"_id": "1", "kind": "b", "n": 10}
	assert not store.update_fields("things", "zz", {"n": 1})

	assert store.delete("things", "1")
	assert not store.delete("things", "1")
	assert [d["_id"] for d in store.all("things")] == ["0", "2"]


def test_build_store_memory_and_unknown():
	assert isinstance(build_store("memory"), InMemoryStore)
	with pytest.raises(ValueError):
		build_store("sqlite")


class BrokenClient:
	"""Stands in for MongoClient; client, database and collection alike fail on every call."""

	def __getitem__(self, name):
		return self

	def __getattr__(self, name):
		def fail(*args, **kwargs):
			raise PyMongoError("connection refused")
		return fail

	def close(self):
		pass


def test_mongo_driver_errors_become_internal_errors():
	store = MongoStore(database="test", client=BrokenClient())
	with pytest.raises(InternalError) as exc:
		store.get("movies", "m1")
	assert exc.value.status_code == 500
	with pytest.raises(InternalError):
		store.insert("movies", {"_id": "m1"})


def test_catalog_round_trip_and_not_found():
	catalog = make_catalog()
	movie = add_movie(catalog, "Heat", genre=["Crime"], release_date=date(1995, 12, 15))

	loaded = catalog.find_movie_by_id(movie.id)
	assert loaded.release_date == date(1995, 12, 15)
	assert loaded.genre == ["Crime"]

	with pytest.raises(NotFoundError):
		catalog.find_movie_by_id("missing")
	with pytest.raises(NotFoundError):
		catalog.find_user_by_id("missing")
	assert catalog.find_user_by_email("nobody@example.com") is None


def test_due_reminders_and_mark_sent():
	catalog = make_catalog()
	user = add_user(catalog)
	movie = add_movie(catalog, "Future", release_date=date(2030, 7, 1))
	due = catalog.insert_reminder(Reminder(id=new_id(), user=user.id, movie=movie.id, reminder_date=date(2030, 6, 30)))
	catalog.insert_reminder(Reminder(id=new_id(), user=user.id, movie=movie.id, reminder_date=date(2030, 6, 29)))

	assert [r.id for r in catalog.find_due_reminders(date(2030, 6, 30))] == [due.id]
	catalog.mark_sent(due.id)
	assert catalog.find_due_reminders(date(2030, 6, 30)) == []
	assert catalog.find_reminder_by_id(due.id).sent is True

	with pytest.raises(NotFoundError):
		catalog.mark_sent("missing")


def main():
	# Runs every test in this module, fixtures and parametrized cases included
	raise SystemExit(pytest.main([__file__, "-q"]))


if __name__ == '__main__':
	main()
