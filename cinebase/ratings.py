"""
Rating aggregation module.
Creates reviews, keeps each movie's average rating current, and maintains review like counts.
"""

from typing import List, Optional

from loguru import logger

from .errors import ValidationError
from .models import Movie, Review, new_id
from .repository import Catalog

MIN_RATING = 1
MAX_RATING = 5


def incremental_average(old_average: float, count: int, rating_value: float) -> float:
	"""
	Fold one new rating into a running mean.
	count is the number of ratings *including* the new one; with count == 1 the
	old average is discarded and the result is the new rating.
	"""
	if count < 1:
		raise ValueError("count must include the new rating")
	return (old_average * (count - 1) + rating_value) / count


def validate_rating(rating_value) -> int:
	# bool is an int subclass; True must not pass as a rating of 1
	if isinstance(rating_value, bool) or not isinstance(rating_value, int):
		raise ValidationError(errors={'rating_value': "Rating must be an integer"})
	if not (MIN_RATING <= rating_value <= MAX_RATING):
		raise ValidationError(errors={'rating_value': f"Rating must be between {MIN_RATING} and {MAX_RATING}"})
	return rating_value


class RatingAggregator:
	"""
	Owns writes to Movie.average_rating, Movie.reviews and Review.like_count.
	Multiple reviews by the same user for the same movie are accepted and each counts.
	"""

	def __init__(self, catalog: Catalog):
		self.catalog = catalog

	def add_review(self, user_id: str, movie_id: str, rating_value: int, review_text: Optional[str] = None) -> Review:
		"""Create a review and fold its rating into the movie's average."""
		rating_value = validate_rating(rating_value)  # reject before touching storage
		self.catalog.find_user_by_id(user_id)  # author must exist
		movie = self.catalog.find_movie_by_id(movie_id)  # NotFoundError if absent

		review = Review(
			id=new_id(),
			user=user_id,
			movie=movie_id,
			rating_value=rating_value,
			review_text=review_text or '',
		)
		self.catalog.insert_review(review)

		# N is read after the push so the formula sees the post-insert count
		movie.reviews.append(review.id)
		old_average = movie.average_rating
		movie.average_rating = incremental_average(old_average, len(movie.reviews), rating_value)
		self.catalog.save_movie(movie)

		logger.info(
			f"[Ratings] Review {review.id} on '{movie.title}' ({movie.id}) | rating={rating_value} | "
			f"average {old_average:.3f} -> {movie.average_rating:.3f} over {len(movie.reviews)} reviews"
		)
		return review

	def recompute_average(self, movie_id: str) -> Movie:
		"""Rebuild average_rating from the stored reviews (batch mean)."""
		movie = self.catalog.find_movie_by_id(movie_id)
		ratings = []
		for review_id in movie.reviews:
			ratings.append(self.catalog.find_review_by_id(review_id).rating_value)
		if ratings:
			movie.average_rating = sum(ratings) / len(ratings)
		self.catalog.save_movie(movie)
		logger.info(f"[Ratings] Recomputed average for {movie.id}: {movie.average_rating:.3f} ({len(ratings)} reviews)")
		return movie

	def reviews_for_movie(self, movie_id: str) -> List[Review]:
		self.catalog.find_movie_by_id(movie_id)
		return self.catalog.find_reviews_for_movie(movie_id)

	def like_review(self, review_id: str, user_id: str) -> Review:
		"""Add user_id to the review's likers; liking twice changes nothing."""
		review = self.catalog.find_review_by_id(review_id)
		review.liked_by.add(user_id)
		review.like_count = len(review.liked_by)
		self.catalog.save_review(review)
		logger.debug(f"[Ratings] Review {review_id} liked by {user_id} | likes={review.like_count}")
		return review

	def unlike_review(self, review_id: str, user_id: str) -> Review:
		review = self.catalog.find_review_by_id(review_id)
		review.liked_by.discard(user_id)
		review.like_count = len(review.liked_by)
		self.catalog.save_review(review)
		logger.debug(f"[Ratings] Review {review_id} unliked by {user_id} | likes={review.like_count}")
		return review
