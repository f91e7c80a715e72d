"""
Movie catalog management.
Creation, allow-listed partial updates, deletion, name population and fuzzy title search.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from rapidfuzz import fuzz, process  # fuzzy title matching

from loguru import logger

from . import config
from .errors import NotFoundError, ValidationError
from .models import Movie, Person, new_id
from .repository import Catalog

# Client-writable movie fields; derived fields (average_rating, reviews, similar_titles) are absent on purpose
MOVIE_UPDATABLE_FIELDS = (
	'title', 'genre', 'director', 'cast', 'imdb_rating', 'release_date', 'runtime',
	'synopsis', 'cover_photo', 'keywords', 'language', 'country_of_origin',
)


@dataclass
class MovieView:
	"""A movie with its director and cast resolved to names."""
	movie: Movie
	director_name: Optional[str] = None
	cast_names: List[str] = field(default_factory=list)


class MovieService:

	def __init__(self, catalog: Catalog):
		self.catalog = catalog

	def create_movie(self, fields: Dict) -> Movie:
		"""Insert a movie; average_rating may be seeded and is replaced by the first review."""
		if not fields.get('title'):
			raise ValidationError(errors={'title': "Title is required"})
		self._check_people(fields.get('director'), fields.get('cast') or [])

		movie = Movie(
			id=new_id(),
			title=fields['title'],
			genre=list(fields.get('genre') or []),
			imdb_rating=fields.get('imdb_rating'),
			release_date=fields.get('release_date'),
			director=fields.get('director'),
			cast=list(fields.get('cast') or []),
			average_rating=float(fields.get('average_rating') or 0.0),
			keywords=list(fields.get('keywords') or []),
			runtime=fields.get('runtime'),
			synopsis=fields.get('synopsis') or '',
			cover_photo=fields.get('cover_photo'),
			language=fields.get('language'),
			country_of_origin=fields.get('country_of_origin'),
		)
		self.catalog.insert_movie(movie)
		self._link_filmography(movie)
		logger.info(f"[Movies] Added '{movie.title}' ({movie.id})")
		return movie

	def update_movie(self, movie_id: str, changes: Dict) -> Movie:
		unknown = [k for k in changes if k not in MOVIE_UPDATABLE_FIELDS]
		if unknown:
			raise ValidationError(errors={k: "Field cannot be updated" for k in unknown})
		if 'title' in changes and not changes['title']:
			raise ValidationError(errors={'title': "Title cannot be empty"})

		movie = self.catalog.find_movie_by_id(movie_id)
		self._check_people(changes.get('director'), changes.get('cast') or [])
		previously_credited = set(self._credited(movie))
		for key, value in changes.items():
			if key in ('genre', 'cast', 'keywords'):
				value = list(value or [])
			setattr(movie, key, value)
		self.catalog.save_movie(movie)
		self._link_filmography(movie)
		self._unlink_filmography(movie.id, previously_credited - set(self._credited(movie)))
		logger.info(f"[Movies] Updated {movie.id}: {', '.join(sorted(changes))}")
		return movie

	def delete_movie(self, movie_id: str):
		self.catalog.delete_movie(movie_id)

	def list_movies(self) -> List[Movie]:
		return self.catalog.find_all_movies()

	def get_movie(self, movie_id: str) -> MovieView:
		return self.populate([self.catalog.find_movie_by_id(movie_id)])[0]

	def populate(self, movies: List[Movie]) -> List[MovieView]:
		"""Resolve director and cast ids to names; unknown ids are dropped."""
		ids = []
		for m in movies:
			if m.director:
				ids.append(m.director)
			ids.extend(m.cast)
		people = self.catalog.find_persons_by_ids(ids)
		views = []
		for m in movies:
			director = people.get(m.director)
			views.append(MovieView(
				movie=m,
				director_name=director.name if director else None,
				cast_names=[people[pid].name for pid in m.cast if pid in people],
			))
		return views

	def search_titles(self, query: str, limit: int = 10, score_cutoff: float = None) -> List[Movie]:
		"""Fuzzy title search, best match first."""
		if not query or not query.strip():
			raise ValidationError(errors={'q': "Query cannot be empty"})
		cutoff = config.SEARCH_SCORE_CUTOFF if score_cutoff is None else score_cutoff
		movies = self.catalog.find_all_movies()
		choices = {m.id: m.title.lower() for m in movies}
		matches = process.extract(query.strip().lower(), choices, scorer=fuzz.WRatio, limit=limit, score_cutoff=cutoff)
		by_id = {m.id: m for m in movies}
		logger.debug(f"[Movies] Title search '{query}' -> {len(matches)} matches")
		# With a dict of choices each match is (title, score, key)
		return [by_id[key] for _, _, key in matches]

	# People

	def create_person(self, name: str, biography: str = '') -> Person:
		if not name or not name.strip():
			raise ValidationError(errors={'name': "Name is required"})
		person = Person(id=new_id(), name=name.strip(), biography=biography or '')
		self.catalog.insert_person(person)
		logger.info(f"[Movies] Added person '{person.name}' ({person.id})")
		return person

	def get_person(self, person_id: str) -> Person:
		return self.catalog.find_person_by_id(person_id)

	def _check_people(self, director: Optional[str], cast: List[str]):
		errors = {}
		if director is not None:
			try:
				self.catalog.find_person_by_id(director)
			except NotFoundError:
				errors['director'] = f"Unknown person {director}"
		missing = [pid for pid in cast if pid not in self.catalog.find_persons_by_ids(cast)]
		if missing:
			errors['cast'] = f"Unknown people: {', '.join(missing)}"
		if errors:
			raise ValidationError(errors=errors)

	def _credited(self, movie: Movie) -> List[str]:
		return ([movie.director] if movie.director else []) + list(movie.cast)

	def _link_filmography(self, movie: Movie):
		"""Make sure the director and every cast member list this movie."""
		for person in self.catalog.find_persons_by_ids(self._credited(movie)).values():
			if movie.id not in person.filmography:
				person.filmography.append(movie.id)
				self.catalog.save_person(person)

	def _unlink_filmography(self, movie_id: str, person_ids):
		"""Drop the movie from people who are no longer credited on it."""
		for person in self.catalog.find_persons_by_ids(person_ids).values():
			if movie_id in person.filmography:
				person.filmography.remove(movie_id)
				self.catalog.save_person(person)
