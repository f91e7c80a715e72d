"""
Similar-title discovery.
A movie is similar to the target when it shares a genre, shares the director,
or has an IMDb rating within a fixed tolerance of the target's.
"""

from typing import List

from loguru import logger

from . import config
from .models import Movie
from .repository import Catalog

# Absorbs binary floating point noise, e.g. 8.4 - 8.0 == 0.40000000000000036
_FLOAT_EPSILON = 1e-9


class SimilarityEngine:
	"""
	Computes and caches Movie.similar_titles.
	Scans the whole catalog on every refresh, so cost grows linearly with catalog size.
	"""

	def __init__(self, catalog: Catalog, rating_tolerance: float = None):
		self.catalog = catalog
		self.rating_tolerance = config.SIMILAR_RATING_TOLERANCE if rating_tolerance is None else rating_tolerance

	def is_similar(self, target: Movie, other: Movie) -> bool:
		"""True when any of the genre, director or rating criteria holds."""
		# 1) Shared genre
		if set(target.genre) & set(other.genre):
			return True
		# 2) Same director (an unset director matches nothing)
		if target.director is not None and other.director == target.director:
			return True
		# 3) Close IMDb rating
		if target.imdb_rating is not None and other.imdb_rating is not None:
			if abs(other.imdb_rating - target.imdb_rating) <= self.rating_tolerance + _FLOAT_EPSILON:
				return True
		return False

	def compute_similar_titles(self, target: Movie, movies: List[Movie]) -> List[str]:
		"""Ids of similar movies in catalog order, never including the target."""
		return [m.id for m in movies if m.id != target.id and self.is_similar(target, m)]

	def refresh_similar_titles(self, movie_id: str) -> List[str]:
		"""Recompute the target's similar titles, persist them, and return them."""
		target = self.catalog.find_movie_by_id(movie_id)
		movies = self.catalog.find_all_movies()
		target.similar_titles = self.compute_similar_titles(target, movies)
		self.catalog.save_movie(target)
		logger.info(
			f"[Similarity] Refreshed '{target.title}' ({target.id}) | "
			f"{len(target.similar_titles)} similar of {len(movies) - 1} scanned"
		)
		return target.similar_titles

	def refresh_all(self) -> int:
		"""Refresh every movie's cache; returns how many movies were processed."""
		movies = self.catalog.find_all_movies()
		for target in movies:
			target.similar_titles = self.compute_similar_titles(target, movies)
			self.catalog.save_movie(target)
		logger.info(f"[Similarity] Refreshed similar titles for {len(movies)} movies")
		return len(movies)

	def similar_movies(self, movie_id: str) -> List[Movie]:
		"""Return the cached similar titles as Movie records, skipping ids deleted since."""
		target = self.catalog.find_movie_by_id(movie_id)
		return self.catalog.find_movies_by_ids(target.similar_titles)
