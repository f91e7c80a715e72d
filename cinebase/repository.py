"""
Typed catalog access on top of a DocumentStore.
Lookups that miss raise NotFoundError so callers can surface them directly.
"""

from datetime import date
from typing import Dict, Iterable, List, Optional

from loguru import logger

from .errors import NotFoundError
from .models import Movie, Person, Reminder, Review, User
from .store import DocumentStore, MOVIES, PERSONS, REMINDERS, REVIEWS, USERS


class Catalog:
	"""Repository for movies, people, reviews, users and reminders."""

	def __init__(self, store: DocumentStore):
		self.store = store

	# Movies

	def find_movie_by_id(self, movie_id: str) -> Movie:
		doc = self.store.get(MOVIES, movie_id)
		if doc is None:
			raise NotFoundError("Movie not found")
		return Movie.from_document(doc)

	def find_all_movies(self) -> List[Movie]:
		return [Movie.from_document(d) for d in self.store.all(MOVIES)]

	def find_movies_by_ids(self, movie_ids: Iterable[str]) -> List[Movie]:
		"""Resolve ids in order; ids with no stored movie are skipped."""
		movies = []
		for mid in movie_ids:
			doc = self.store.get(MOVIES, mid)
			if doc is not None:
				movies.append(Movie.from_document(doc))
		return movies

	def insert_movie(self, movie: Movie) -> Movie:
		self.store.insert(MOVIES, movie.to_document())
		return movie

	def save_movie(self, movie: Movie) -> Movie:
		if not self.store.replace(MOVIES, movie.to_document()):
			raise NotFoundError("Movie not found")
		return movie

	def delete_movie(self, movie_id: str):
		# Reviews pointing at the movie are left in place.
		if not self.store.delete(MOVIES, movie_id):
			raise NotFoundError("Movie not found")
		logger.info(f"[Catalog] Deleted movie {movie_id}")

	# People

	def find_person_by_id(self, person_id: str) -> Person:
		doc = self.store.get(PERSONS, person_id)
		if doc is None:
			raise NotFoundError("Person not found")
		return Person.from_document(doc)

	def find_persons_by_ids(self, person_ids: Iterable[str]) -> Dict[str, Person]:
		"""Resolve many ids at once; unknown ids are silently absent from the result."""
		found = {}
		for pid in person_ids:
			if pid in found or pid is None:
				continue
			doc = self.store.get(PERSONS, pid)
			if doc is not None:
				found[pid] = Person.from_document(doc)
		return found

	def find_all_persons(self) -> List[Person]:
		return [Person.from_document(d) for d in self.store.all(PERSONS)]

	def insert_person(self, person: Person) -> Person:
		self.store.insert(PERSONS, person.to_document())
		return person

	def save_person(self, person: Person) -> Person:
		if not self.store.replace(PERSONS, person.to_document()):
			raise NotFoundError("Person not found")
		return person

	# Reviews

	def insert_review(self, review: Review) -> Review:
		self.store.insert(REVIEWS, review.to_document())
		return review

	def find_review_by_id(self, review_id: str) -> Review:
		doc = self.store.get(REVIEWS, review_id)
		if doc is None:
			raise NotFoundError("Review not found")
		return Review.from_document(doc)

	def find_reviews_for_movie(self, movie_id: str) -> List[Review]:
		return [Review.from_document(d) for d in self.store.find(REVIEWS, movie=movie_id)]

	def find_all_reviews(self) -> List[Review]:
		return [Review.from_document(d) for d in self.store.all(REVIEWS)]

	def save_review(self, review: Review) -> Review:
		if not self.store.replace(REVIEWS, review.to_document()):
			raise NotFoundError("Review not found")
		return review

	# Users

	def find_user_by_id(self, user_id: str) -> User:
		doc = self.store.get(USERS, user_id)
		if doc is None:
			raise NotFoundError("User not found")
		return User.from_document(doc)

	def find_user_by_email(self, email: str) -> Optional[User]:
		docs = self.store.find(USERS, email=email)
		return User.from_document(docs[0]) if docs else None

	def find_user_by_username(self, username: str) -> Optional[User]:
		docs = self.store.find(USERS, username=username)
		return User.from_document(docs[0]) if docs else None

	def insert_user(self, user: User) -> User:
		self.store.insert(USERS, user.to_document())
		return user

	def save_user(self, user: User) -> User:
		if not self.store.replace(USERS, user.to_document()):
			raise NotFoundError("User not found")
		return user

	# Reminders

	def insert_reminder(self, reminder: Reminder) -> Reminder:
		self.store.insert(REMINDERS, reminder.to_document())
		return reminder

	def find_reminder_by_id(self, reminder_id: str) -> Reminder:
		doc = self.store.get(REMINDERS, reminder_id)
		if doc is None:
			raise NotFoundError("Reminder not found")
		return Reminder.from_document(doc)

	def find_reminders_for_user(self, user_id: str) -> List[Reminder]:
		return [Reminder.from_document(d) for d in self.store.find(REMINDERS, user=user_id)]

	def find_due_reminders(self, as_of_date: date) -> List[Reminder]:
		"""Unsent reminders whose reminder_date is exactly as_of_date."""
		docs = self.store.find(REMINDERS, reminder_date=as_of_date.isoformat(), sent=False)
		return [Reminder.from_document(d) for d in docs]

	def save_reminder(self, reminder: Reminder) -> Reminder:
		if not self.store.replace(REMINDERS, reminder.to_document()):
			raise NotFoundError("Reminder not found")
		return reminder

	def mark_sent(self, reminder_id: str):
		if not self.store.update_fields(REMINDERS, reminder_id, {'sent': True}):
			raise NotFoundError("Reminder not found")

	def delete_reminder(self, reminder_id: str):
		if not self.store.delete(REMINDERS, reminder_id):
			raise NotFoundError("Reminder not found")
