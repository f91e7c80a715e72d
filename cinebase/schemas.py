"""
Pydantic request and response models for the HTTP API, plus converters from core records.
Success bodies use the envelope {message, data}; errors use {message, errors?}.
"""

from datetime import date, datetime  # field types
from typing import Dict, Generic, List, Optional, TypeVar  # precise typing for clarity

from pydantic import BaseModel, ConfigDict, Field  # schema definitions

from .analytics import ReviewHighlight
from .models import MoviePreferences, Person, Reminder, Review, User
from .movies import MovieView
from .recommendation import ScoredMovie

T = TypeVar('T')


class Envelope(BaseModel, Generic[T]):
	message: str  # human-readable outcome
	data: Optional[T] = None  # payload


class ErrorOut(BaseModel):
	message: str
	errors: Optional[Dict[str, str]] = None  # field -> problem, for validation errors


# People and movies

class PersonIn(BaseModel):
	name: str
	biography: str = ''


class PersonOut(BaseModel):
	id: str
	name: str
	biography: str
	filmography: List[str]


class MovieIn(BaseModel):
	model_config = ConfigDict(extra='forbid')

	title: str
	genre: List[str] = Field(default_factory=list)
	director: Optional[str] = None  # Person id
	cast: List[str] = Field(default_factory=list)  # Person ids
	imdb_rating: Optional[float] = Field(default=None, ge=0, le=10)
	release_date: Optional[date] = None
	average_rating: Optional[float] = Field(default=None, ge=0, le=5)  # seed value, replaced by the first review
	runtime: Optional[int] = Field(default=None, ge=0)
	synopsis: str = ''
	cover_photo: Optional[str] = None
	keywords: List[str] = Field(default_factory=list)
	language: Optional[str] = None
	country_of_origin: Optional[str] = None


class MovieUpdate(BaseModel):
	"""Allow-listed partial update; only fields the client sends are applied."""
	model_config = ConfigDict(extra='forbid')

	title: Optional[str] = None
	genre: Optional[List[str]] = None
	director: Optional[str] = None
	cast: Optional[List[str]] = None
	imdb_rating: Optional[float] = Field(default=None, ge=0, le=10)
	release_date: Optional[date] = None
	runtime: Optional[int] = Field(default=None, ge=0)
	synopsis: Optional[str] = None
	cover_photo: Optional[str] = None
	keywords: Optional[List[str]] = None
	language: Optional[str] = None
	country_of_origin: Optional[str] = None


class MovieOut(BaseModel):
	id: str  # unique id
	title: str  # display title
	genre: List[str]  # genre labels
	director: Optional[str] = None  # Person id
	director_name: Optional[str] = None  # populated name
	cast: List[str]  # Person ids
	cast_names: List[str]  # populated names
	imdb_rating: Optional[float] = None
	release_date: Optional[date] = None
	average_rating: float  # mean of review ratings
	review_count: int
	similar_titles: List[str]
	keywords: List[str]
	runtime: Optional[int] = None
	synopsis: str = ''
	cover_photo: Optional[str] = None
	language: Optional[str] = None
	country_of_origin: Optional[str] = None


class RecommendationOut(BaseModel):
	movie: MovieOut  # movie metadata
	score: int  # preference hits


# Reviews

class ReviewIn(BaseModel):
	rating_value: int  # range is checked by the rating aggregator
	review_text: Optional[str] = None


class ReviewOut(BaseModel):
	id: str
	user: str
	movie: str
	rating_value: int
	review_text: str
	like_count: int
	created_at: datetime


class ReviewHighlightOut(BaseModel):
	review: ReviewOut
	username: Optional[str] = None
	movie_title: Optional[str] = None


# Users

class PreferencesModel(BaseModel):
	genre: List[str] = Field(default_factory=list)
	director: List[str] = Field(default_factory=list)
	actor: List[str] = Field(default_factory=list)


class RegisterIn(BaseModel):
	email: str
	username: str
	password: str = Field(min_length=6)
	profile_photo: Optional[str] = None
	movie_preferences: Optional[PreferencesModel] = None
	personal_wishlist: List[str] = Field(default_factory=list)


class LoginIn(BaseModel):
	email: str
	password: str


class UserUpdate(BaseModel):
	model_config = ConfigDict(extra='forbid')

	email: Optional[str] = None
	username: Optional[str] = None
	profile_photo: Optional[str] = None
	movie_preferences: Optional[PreferencesModel] = None
	personal_wishlist: Optional[List[str]] = None


class UserOut(BaseModel):
	id: str
	username: str
	email: str
	role: str
	profile_photo: Optional[str] = None
	movie_preferences: PreferencesModel
	personal_wishlist: List[str]


class AuthOut(BaseModel):
	user: UserOut
	token: str


# Reminders

class ReminderIn(BaseModel):
	movie_id: str
	notification_type: str = 'email'


class ReminderUpdate(BaseModel):
	model_config = ConfigDict(extra='forbid')

	movie_id: Optional[str] = None
	notification_type: Optional[str] = None


class ReminderOut(BaseModel):
	id: str
	user: str
	movie: str
	reminder_date: date
	sent: bool
	notification_type: str


class ReminderRunOut(BaseModel):
	run_date: date
	sent: List[str]
	failed: List[str]


# Converters

def person_out(person: Person) -> PersonOut:
	return PersonOut(id=person.id, name=person.name, biography=person.biography, filmography=person.filmography)


def movie_out(view: MovieView) -> MovieOut:
	m = view.movie
	return MovieOut(
		id=m.id,
		title=m.title,
		genre=m.genre,
		director=m.director,
		director_name=view.director_name,
		cast=m.cast,
		cast_names=view.cast_names,
		imdb_rating=m.imdb_rating,
		release_date=m.release_date,
		average_rating=round(m.average_rating, 3),
		review_count=len(m.reviews),
		similar_titles=m.similar_titles,
		keywords=m.keywords,
		runtime=m.runtime,
		synopsis=m.synopsis,
		cover_photo=m.cover_photo,
		language=m.language,
		country_of_origin=m.country_of_origin,
	)


def recommendation_out(scored: ScoredMovie) -> RecommendationOut:
	view = MovieView(movie=scored.movie, director_name=scored.director_name, cast_names=scored.cast_names)
	return RecommendationOut(movie=movie_out(view), score=scored.score)


def review_out(review: Review) -> ReviewOut:
	return ReviewOut(
		id=review.id,
		user=review.user,
		movie=review.movie,
		rating_value=review.rating_value,
		review_text=review.review_text,
		like_count=review.like_count,
		created_at=review.created_at,
	)


def highlight_out(highlight: ReviewHighlight) -> ReviewHighlightOut:
	return ReviewHighlightOut(
		review=review_out(highlight.review),
		username=highlight.username,
		movie_title=highlight.movie_title,
	)


def preferences_from(model: Optional[PreferencesModel]) -> Optional[MoviePreferences]:
	if model is None:
		return None
	return MoviePreferences(genre=list(model.genre), director=list(model.director), actor=list(model.actor))


def user_out(user: User) -> UserOut:
	# password_hash never leaves the service
	prefs = user.movie_preferences
	return UserOut(
		id=user.id,
		username=user.username,
		email=user.email,
		role=user.role,
		profile_photo=user.profile_photo,
		movie_preferences=PreferencesModel(genre=prefs.genre, director=prefs.director, actor=prefs.actor),
		personal_wishlist=user.personal_wishlist,
	)


def reminder_out(reminder: Reminder) -> ReminderOut:
	return ReminderOut(
		id=reminder.id,
		user=reminder.user,
		movie=reminder.movie,
		reminder_date=reminder.reminder_date,
		sent=reminder.sent,
		notification_type=reminder.notification_type,
	)
