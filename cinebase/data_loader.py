"""
Catalog seeding module.
Loads people and movies from JSON Lines files, normalizes them, and writes them to the catalog.
"""

# Standard libs for JSON parsing, typing, and paths
import json  # read JSON lines
from typing import Dict, Iterator, List, Optional  # type hints
from pathlib import Path  # filesystem-safe paths

# Console logging
from loguru import logger  # console logger

# Import our data classes and catalog used across the project
from .models import Movie, Person, parse_date, new_id  # structured records
from .repository import Catalog  # persistence


class DataLoader:
	"""
	Handles loading and preprocessing of seed data.
	Movies reference people by name; names are resolved to Person ids, creating people as needed.
	"""

	# Genre synonym mapping: common phrasings → single standard name
	GENRE_SYNONYMS = {
		'sci-fi': 'Science Fiction',  # map hyphenated to canonical
		'sci fi': 'Science Fiction',  # map spaced form
		'science-fiction': 'Science Fiction',  # map with dash
		'science fiction': 'Science Fiction',  # map with space
		'scifi': 'Science Fiction',  # common variant
		'horror': 'Horror',
		'thriller': 'Thriller',
		'comedy': 'Comedy',
		'drama': 'Drama',
		'action': 'Action',
		'adventure': 'Adventure',
		'romance': 'Romance',
		'romantic': 'Romance',
		'fantasy': 'Fantasy',
		'mystery': 'Mystery',
		'crime': 'Crime',
		'war': 'War',
		'western': 'Western',
		'animation': 'Animation',
		'animated': 'Animation',
		'documentary': 'Documentary',
		'family': 'Family',
		'musical': 'Musical',
		'biography': 'Biography',
		'biographical': 'Biography',
		'sport': 'Sport',
		'sports': 'Sport',
	}

	def __init__(self, catalog: Catalog):
		"""Keep the target catalog and a name -> Person index for resolving references."""
		self.catalog = catalog  # destination
		self.genre_synonyms = self.GENRE_SYNONYMS  # store mapping for reuse
		self._people_by_name: Dict[str, Person] = {p.name.lower(): p for p in catalog.find_all_persons()}

	def read_jsonl(self, filepath) -> Iterator[Dict]:
		"""
		Yield one dict per valid line of a JSON Lines file.
		Malformed lines are skipped with a warning.
		"""
		filepath = Path(filepath)  # normalize path

		# Validate the file presence early to give clear error messages
		if not filepath.exists():
			raise FileNotFoundError(f"Seed data file not found: {filepath}")

		logger.info(f"[DataLoader] Reading {filepath}...")  # log action
		with open(filepath, 'r', encoding='utf-8') as f:
			for line_num, line in enumerate(f, 1):  # keep track of line number for diagnostics
				if not line.strip():
					continue  # blank line
				try:
					yield json.loads(line.strip())  # parse JSON object per line
				except json.JSONDecodeError as e:
					logger.warning(f"[DataLoader] Skipping invalid JSON at line {line_num}: {e}")  # malformed line

	def load_people_from_jsonl(self, filepath) -> List[Person]:
		"""Insert every person in the file; returns the people created."""
		created = []
		for data in self.read_jsonl(filepath):
			name = (data.get('name') or '').strip()
			if not name:
				logger.warning("[DataLoader] Skipping person without a name")
				continue
			created.append(self._person_named(name, biography=data.get('biography') or ''))
		logger.info(f"[DataLoader] Loaded {len(created)} people.")  # summary
		return created

	def load_movies_from_jsonl(self, filepath) -> List[Movie]:
		"""
		Insert every movie in the file.
		Returns the list of Movie objects written to the catalog.
		"""
		movies = []  # accumulator for inserted movies
		for line_num, data in enumerate(self.read_jsonl(filepath), 1):
			# Re-seeding keeps the stored copy of a movie whose id already exists
			seed_id = data.get('id')
			if seed_id and self.catalog.find_movies_by_ids([str(seed_id)]):
				logger.warning(f"[DataLoader] Skipping movie record {line_num}: id {seed_id} already exists")
				continue
			try:
				movie = self._parse_movie_data(data)  # convert dict -> Movie
			except (KeyError, TypeError, ValueError) as e:
				logger.warning(f"[DataLoader] Error parsing movie record {line_num}: {e}")  # unexpected issue
				continue  # move on
			self.catalog.insert_movie(movie)
			self._link_people(movie)
			movies.append(movie)  # collect

		logger.info(f"[DataLoader] Successfully loaded {len(movies)} movies.")  # summary
		return movies  # return list

	def _parse_movie_data(self, data: Dict) -> Movie:
		"""
		Convert a raw dictionary (from file) into a strongly-typed Movie object.
		Performs normalization and safe defaults.
		"""
		title = (data.get('title') or '').strip()
		if not title:
			raise ValueError("movie without a title")

		# Fields that may arrive as comma-separated strings or lists
		genres = [self._normalize_genre(g) for g in self._parse_comma_separated(data.get('genre', data.get('genres')))]
		cast_names = self._parse_comma_separated(data.get('cast', data.get('actors')))
		keywords = self._parse_comma_separated(data.get('keywords'))

		# Parse numeric fields first so a bad record creates no people
		imdb = data.get('imdb_rating', data.get('rating'))
		imdb_rating = float(imdb) if imdb not in (None, '') else None
		runtime = data.get('runtime')
		runtime = int(runtime) if runtime not in (None, '') else None
		release_date = parse_date(data.get('release_date'))

		director_name = (data.get('director') or '').strip()
		director = self._person_named(director_name) if director_name else None
		cast = [self._person_named(name).id for name in cast_names]

		return Movie(
			id=str(data.get('id') or new_id()),  # keep seed ids when given
			title=title,
			genre=[g for g in genres if g],
			imdb_rating=imdb_rating,
			release_date=release_date,
			director=director.id if director else None,
			cast=cast,
			average_rating=float(data.get('average_rating') or 0.0),  # placeholder until reviews exist
			keywords=keywords,
			runtime=runtime,
			synopsis=data.get('synopsis') or data.get('overview') or '',
			cover_photo=data.get('cover_photo') or data.get('poster_url'),
			language=data.get('language'),
			country_of_origin=data.get('country_of_origin'),
		)

	def _person_named(self, name: str, biography: str = '') -> Person:
		"""Return the existing person with this name (case-insensitive) or create one."""
		key = name.strip().lower()
		person = self._people_by_name.get(key)
		if person is None:
			person = Person(id=new_id(), name=name.strip(), biography=biography)
			self.catalog.insert_person(person)
			self._people_by_name[key] = person
		return person

	def _link_people(self, movie: Movie):
		ids = ([movie.director] if movie.director else []) + movie.cast
		for pid in dict.fromkeys(ids):  # de-duplicate, keep order
			person = self.catalog.find_person_by_id(pid)
			if movie.id not in person.filmography:
				person.filmography.append(movie.id)
				self.catalog.save_person(person)
				self._people_by_name[person.name.lower()] = person

	def _parse_comma_separated(self, value) -> List[str]:
		"""
		Normalize a value that may be None, a list, or a comma-separated string
		into a list of clean strings.
		"""
		if value is None:  # missing field
			return []  # treat as empty list
		if isinstance(value, list):  # already a list
			return [str(item).strip() for item in value if item]  # clean each
		if isinstance(value, str):  # comma-separated string
			return [item.strip() for item in value.split(',') if item.strip()]  # split/trim
		return []  # any other type becomes empty

	def _normalize_genre(self, genre: str) -> Optional[str]:
		"""
		Map a raw genre to its canonical form using synonyms; fall back to Title Case.
		"""
		if not genre:  # missing genre
			return None

		genre_lower = genre.strip().lower()  # prepare for lookup

		# If present in synonyms, return canonical value
		if genre_lower in self.genre_synonyms:
			return self.genre_synonyms[genre_lower]

		# Otherwise title-case the input to standardize (e.g., "war drama" → "War Drama")
		return genre.strip().title()

	def get_all_genres(self) -> List[str]:
		"""Return a sorted list of all unique genres in the catalog."""
		genres = set()  # unique genres
		for movie in self.catalog.find_all_movies():  # iterate
			genres.update(movie.genre)
		return sorted(genres)  # sorted output
