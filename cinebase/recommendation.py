"""
Recommendation module.
Scores the full catalog against a user's declared preferences and returns the best matches.
"""

from dataclasses import dataclass, field  # lightweight containers for results
from typing import List, Optional  # type annotations for clarity

from loguru import logger  # simple structured logger

from . import config  # result limit
from .errors import PreconditionFailedError  # unset preferences
from .models import Movie, MoviePreferences  # core data classes
from .movies import MovieService  # director/cast name population
from .repository import Catalog  # catalog access


@dataclass
class ScoredMovie:
	movie: Movie  # matched movie
	score: int  # number of preference hits
	director_name: Optional[str] = None  # populated for display
	cast_names: List[str] = field(default_factory=list)  # populated for display


class PreferenceScorer:
	"""
	Counts preference hits for one movie:
	- one point per genre shared with the preferred genres
	- one point when the director's name is a preferred director
	- one point per cast member whose name is a preferred actor
	"""

	def score(
		self,
		movie: Movie,
		prefs: MoviePreferences,
		director_name: Optional[str],
		cast_names: List[str],
	) -> int:
		genre_hits = len(set(movie.genre) & set(prefs.genre))

		preferred_directors = set(prefs.director)
		director_hit = 1 if director_name is not None and director_name in preferred_directors else 0

		# Cast is a sequence; each listed actor counts on its own
		preferred_actors = set(prefs.actor)
		actor_hits = sum(1 for name in cast_names if name in preferred_actors)

		return genre_hits + director_hit + actor_hits


class RecommendationEngine:
	"""
	Content-based recommender over the whole catalog.
	Every call is a full scan, so cost grows linearly with catalog size.
	"""

	def __init__(self, catalog: Catalog, limit: int = None):
		self.catalog = catalog  # catalog access
		self.limit = config.RECOMMENDATION_LIMIT if limit is None else limit  # max results
		self.scorer = PreferenceScorer()  # scoring rules
		self.movies = MovieService(catalog)  # name population

	def get_personalized_recommendations(self, user_id: str) -> List[ScoredMovie]:
		"""Return up to `limit` movies with a positive score, best first."""
		user = self.catalog.find_user_by_id(user_id)  # NotFoundError if absent
		prefs = user.movie_preferences
		if prefs.is_empty():
			raise PreconditionFailedError("Movie preferences not set")
		return self.recommend_for_preferences(prefs)

	def recommend_for_preferences(self, prefs: MoviePreferences) -> List[ScoredMovie]:
		views = self.movies.populate(self.catalog.find_all_movies())  # catalog scan order, names resolved
		logger.debug(
			f"[Recommend] Scoring {len(views)} movies | genres={prefs.genre[:5]} "
			f"directors={prefs.director[:5]} actors={prefs.actor[:5]}"
		)

		results: List[ScoredMovie] = []  # accumulator
		for view in views:
			score = self.scorer.score(view.movie, prefs, view.director_name, view.cast_names)
			if score == 0:
				continue  # no preference hit at all
			results.append(ScoredMovie(
				movie=view.movie, score=score, director_name=view.director_name, cast_names=view.cast_names,
			))

		# list.sort is stable: equal scores keep catalog order
		results.sort(key=lambda r: r.score, reverse=True)
		logger.info(f"[Recommend] Returning top {min(self.limit, len(results))} of {len(results)} matching movies")
		return results[:self.limit]

