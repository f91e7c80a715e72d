"""
Admin analytics: leaderboards over reviews and movies.
"""

from dataclasses import dataclass
from typing import List, Optional

from loguru import logger

from . import config
from .errors import NotFoundError
from .models import Movie, Review
from .repository import Catalog


@dataclass
class ReviewHighlight:
	review: Review
	username: Optional[str]  # None when the author no longer exists
	movie_title: Optional[str]  # None when the movie was deleted


class AnalyticsService:

	def __init__(self, catalog: Catalog, top_n: int = None):
		self.catalog = catalog
		self.top_n = config.ANALYTICS_TOP_N if top_n is None else top_n

	def most_liked_reviews(self) -> List[ReviewHighlight]:
		reviews = sorted(self.catalog.find_all_reviews(), key=lambda r: r.like_count, reverse=True)[:self.top_n]
		highlights = []
		for review in reviews:
			highlights.append(ReviewHighlight(
				review=review,
				username=self._username(review.user),
				movie_title=self._title(review.movie),
			))
		logger.debug(f"[Analytics] most liked reviews: {len(highlights)}")
		return highlights

	def most_popular_movies(self) -> List[Movie]:
		"""Top movies by IMDb rating; unrated movies sort last."""
		movies = self.catalog.find_all_movies()
		movies.sort(key=lambda m: m.imdb_rating if m.imdb_rating is not None else float('-inf'), reverse=True)
		return movies[:self.top_n]

	def highest_rated_movies(self) -> List[Movie]:
		"""Top movies by user average, only counting movies that have reviews."""
		movies = [m for m in self.catalog.find_all_movies() if m.reviews]
		movies.sort(key=lambda m: m.average_rating, reverse=True)
		return movies[:self.top_n]

	def _username(self, user_id: str) -> Optional[str]:
		try:
			return self.catalog.find_user_by_id(user_id).username
		except NotFoundError:
			return None

	def _title(self, movie_id: str) -> Optional[str]:
		try:
			return self.catalog.find_movie_by_id(movie_id).title
		except NotFoundError:
			return None
