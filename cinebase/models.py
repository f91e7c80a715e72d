"""
Data models for the cinebase backend.
Defines the core records stored in the document database and how they map to documents.
"""

# Import dataclass to define simple "record-like" classes without boilerplate
from dataclasses import dataclass, field  # auto-generates __init__, __repr__, etc.
# Dates are stored as ISO strings inside documents and as date objects in memory
from datetime import date, datetime  # calendar values
# Import typing helpers for precise and self-documenting types
from typing import Dict, List, Optional, Set  # containers and optional values
# Identities are opaque hex strings so both stores can use them as _id
import uuid  # random identifiers


def new_id() -> str:
	"""Generate a fresh document identity."""
	return uuid.uuid4().hex


def _to_iso(value: Optional[date]) -> Optional[str]:
	return value.isoformat() if value else None


def parse_date(value) -> Optional[date]:
	"""Accept a date, a datetime, or an ISO string and return a date."""
	if value is None or value == '':
		return None
	if isinstance(value, datetime):
		return value.date()
	if isinstance(value, date):
		return value
	return date.fromisoformat(str(value)[:10])


@dataclass
class Person:
	"""An actor, director or crew member."""
	id: str
	name: str
	biography: str = ''
	filmography: List[str] = field(default_factory=list)  # movie ids

	def to_document(self) -> Dict:
		return {
			'_id': self.id,
			'name': self.name,
			'biography': self.biography,
			'filmography': list(self.filmography),
		}

	@classmethod
	def from_document(cls, doc: Dict) -> 'Person':
		return cls(
			id=doc['_id'],
			name=doc.get('name', ''),
			biography=doc.get('biography', ''),
			filmography=list(doc.get('filmography') or []),
		)


@dataclass
class Movie:
	"""
	A catalog entry.
	average_rating, reviews and similar_titles are derived fields: they are only
	written by the rating aggregator and the similarity engine.
	"""
	id: str  # unique identifier
	title: str  # display title
	genre: List[str]  # genre labels (treated as a set when matching)
	imdb_rating: Optional[float]  # external rating on a 0-10 scale
	release_date: Optional[date]  # theatrical release date
	director: Optional[str] = None  # Person id
	cast: List[str] = field(default_factory=list)  # ordered Person ids
	average_rating: float = 0.0  # mean of review ratings (derived)
	reviews: List[str] = field(default_factory=list)  # Review ids (derived)
	similar_titles: List[str] = field(default_factory=list)  # Movie ids (derived cache)
	keywords: List[str] = field(default_factory=list)  # free-form filter keywords
	runtime: Optional[int] = None  # minutes
	synopsis: str = ''  # short description
	cover_photo: Optional[str] = None  # poster URL
	language: Optional[str] = None
	country_of_origin: Optional[str] = None

	def to_document(self) -> Dict:
		return {
			'_id': self.id,
			'title': self.title,
			'genre': list(self.genre),
			'imdb_rating': self.imdb_rating,
			'release_date': _to_iso(self.release_date),
			'director': self.director,
			'cast': list(self.cast),
			'average_rating': self.average_rating,
			'reviews': list(self.reviews),
			'similar_titles': list(self.similar_titles),
			'keywords': list(self.keywords),
			'runtime': self.runtime,
			'synopsis': self.synopsis,
			'cover_photo': self.cover_photo,
			'language': self.language,
			'country_of_origin': self.country_of_origin,
		}

	@classmethod
	def from_document(cls, doc: Dict) -> 'Movie':
		imdb = doc.get('imdb_rating')
		return cls(
			id=doc['_id'],
			title=doc.get('title', ''),
			genre=list(doc.get('genre') or []),
			imdb_rating=float(imdb) if imdb is not None else None,
			release_date=parse_date(doc.get('release_date')),
			director=doc.get('director'),
			cast=list(doc.get('cast') or []),
			average_rating=float(doc.get('average_rating') or 0.0),
			reviews=list(doc.get('reviews') or []),
			similar_titles=list(doc.get('similar_titles') or []),
			keywords=list(doc.get('keywords') or []),
			runtime=doc.get('runtime'),
			synopsis=doc.get('synopsis', ''),
			cover_photo=doc.get('cover_photo'),
			language=doc.get('language'),
			country_of_origin=doc.get('country_of_origin'),
		)


@dataclass
class Review:
	"""A user's rating (1-5) and optional text for one movie."""
	id: str
	user: str  # User id
	movie: str  # Movie id
	rating_value: int
	review_text: str = ''
	liked_by: Set[str] = field(default_factory=set)  # User ids
	like_count: int = 0  # len(liked_by), derived
	created_at: datetime = field(default_factory=datetime.now)

	def to_document(self) -> Dict:
		return {
			'_id': self.id,
			'user': self.user,
			'movie': self.movie,
			'rating_value': self.rating_value,
			'review_text': self.review_text,
			'liked_by': sorted(self.liked_by),
			'like_count': self.like_count,
			'created_at': self.created_at.isoformat(),
		}

	@classmethod
	def from_document(cls, doc: Dict) -> 'Review':
		created = doc.get('created_at')
		return cls(
			id=doc['_id'],
			user=doc['user'],
			movie=doc['movie'],
			rating_value=int(doc['rating_value']),
			review_text=doc.get('review_text') or '',
			liked_by=set(doc.get('liked_by') or []),
			like_count=int(doc.get('like_count') or 0),
			created_at=datetime.fromisoformat(created) if isinstance(created, str) else (created or datetime.now()),
		)


@dataclass
class MoviePreferences:
	"""Free-form affinity tags declared by a user; not validated against the catalog."""
	genre: List[str] = field(default_factory=list)
	director: List[str] = field(default_factory=list)
	actor: List[str] = field(default_factory=list)

	def is_empty(self) -> bool:
		return not (self.genre or self.director or self.actor)

	def to_document(self) -> Dict:
		return {'genre': list(self.genre), 'director': list(self.director), 'actor': list(self.actor)}

	@classmethod
	def from_document(cls, doc: Optional[Dict]) -> 'MoviePreferences':
		doc = doc or {}
		return cls(
			genre=list(doc.get('genre') or []),
			director=list(doc.get('director') or []),
			actor=list(doc.get('actor') or []),
		)


@dataclass
class User:
	id: str
	username: str
	email: str
	password_hash: str
	role: str = 'user'  # 'user' or 'admin'
	profile_photo: Optional[str] = None
	movie_preferences: MoviePreferences = field(default_factory=MoviePreferences)
	personal_wishlist: List[str] = field(default_factory=list)  # Movie ids
	created_at: datetime = field(default_factory=datetime.now)

	@property
	def is_admin(self) -> bool:
		return self.role == 'admin'

	def to_document(self) -> Dict:
		return {
			'_id': self.id,
			'username': self.username,
			'email': self.email,
			'password_hash': self.password_hash,
			'role': self.role,
			'profile_photo': self.profile_photo,
			'movie_preferences': self.movie_preferences.to_document(),
			'personal_wishlist': list(self.personal_wishlist),
			'created_at': self.created_at.isoformat(),
		}

	@classmethod
	def from_document(cls, doc: Dict) -> 'User':
		created = doc.get('created_at')
		return cls(
			id=doc['_id'],
			username=doc['username'],
			email=doc['email'],
			password_hash=doc.get('password_hash', ''),
			role=doc.get('role', 'user'),
			profile_photo=doc.get('profile_photo'),
			movie_preferences=MoviePreferences.from_document(doc.get('movie_preferences')),
			personal_wishlist=list(doc.get('personal_wishlist') or []),
			created_at=datetime.fromisoformat(created) if isinstance(created, str) else (created or datetime.now()),
		)


@dataclass
class Reminder:
	"""
	A request to be notified the day before a movie releases.
	Lifecycle: pending (sent=False) -> sent (terminal), or deleted by its owner.
	"""
	id: str
	user: str  # User id
	movie: str  # Movie id
	reminder_date: date  # release_date - 1 day
	sent: bool = False
	notification_type: str = 'email'  # 'email' or 'dashboard'
	created_at: datetime = field(default_factory=datetime.now)

	def to_document(self) -> Dict:
		return {
			'_id': self.id,
			'user': self.user,
			'movie': self.movie,
			'reminder_date': self.reminder_date.isoformat(),
			'sent': self.sent,
			'notification_type': self.notification_type,
			'created_at': self.created_at.isoformat(),
		}

	@classmethod
	def from_document(cls, doc: Dict) -> 'Reminder':
		created = doc.get('created_at')
		return cls(
			id=doc['_id'],
			user=doc['user'],
			movie=doc['movie'],
			reminder_date=parse_date(doc['reminder_date']),
			sent=bool(doc.get('sent', False)),
			notification_type=doc.get('notification_type', 'email'),
			created_at=datetime.fromisoformat(created) if isinstance(created, str) else (created or datetime.now()),
		)


@dataclass
class NotificationPayload:
	"""What the dispatcher sends for one due reminder."""
	to: str  # recipient email
	subject: str
	body: str
	channel: str = 'email'
	reminder_id: Optional[str] = None
