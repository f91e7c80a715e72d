"""
Tests for movie management, fuzzy title search and admin analytics.
Run: python tests/test_movies.py  (or: pytest tests/test_movies.py)
"""

from datetime import date

import pytest

from builders import add_movie, add_person, add_user, make_catalog
from cinebase.analytics import AnalyticsService
from cinebase.errors import NotFoundError, ValidationError
from cinebase.movies import MovieService
from cinebase.ratings import RatingAggregator


def test_create_links_filmography_and_populates_names():
	catalog = make_catalog()
	service = MovieService(catalog)
	director = service.create_person("Michael Mann")
	actor = service.create_person("Al Pacino", biography="Actor")

	movie = service.create_movie({
		"title": "Heat",
		"genre": ["Crime"],
		"director": director.id,
		"cast": [actor.id],
		"release_date": date(1995, 12, 15),
		"average_rating": 4.0,
	})

	assert service.get_person(director.id).filmography == [movie.id]
	assert service.get_person(actor.id).filmography == [movie.id]
	view = service.get_movie(movie.id)
	assert view.director_name == "Michael Mann"
	assert view.cast_names == ["Al Pacino"]
	assert view.movie.average_rating == 4.0


def test_update_recredits_filmography():
	catalog = make_catalog()
	service = MovieService(catalog)
	mann = service.create_person("Michael Mann")
	scott = service.create_person("Ridley Scott")
	pacino = service.create_person("Al Pacino")
	de_niro = service.create_person("Robert De Niro")
	movie = service.create_movie({"title": "Heat", "director": mann.id, "cast": [pacino.id, de_niro.id]})

	service.update_movie(movie.id, {"director": scott.id, "cast": [de_niro.id]})

	assert service.get_person(mann.id).filmography == []
	assert service.get_person(pacino.id).filmography == []
	assert service.get_person(scott.id).filmography == [movie.id]
	assert service.get_person(de_niro.id).filmography == [movie.id]


def test_create_rejects_unknown_people_and_missing_title():
	service = MovieService(make_catalog())
	with pytest.raises(ValidationError) as exc:
		service.create_movie({"title": "X", "director": "ghost", "cast": ["nobody"]})
	assert set(exc.value.errors) == {"director", "cast"}
	with pytest.raises(ValidationError):
		service.create_movie({"genre": ["Drama"]})
	assert service.list_movies() == []


def test_update_is_allow_listed():
	catalog = make_catalog()
	movie = add_movie(catalog, "Heat", average_rating=3.0)
	service = MovieService(catalog)

	updated = service.update_movie(movie.id, {"title": "Heat (1995)", "genre": ["Crime", "Drama"]})
	assert updated.title == "Heat (1995)"
	assert updated.genre == ["Crime", "Drama"]

	with pytest.raises(ValidationError) as exc:
		service.update_movie(movie.id, {"average_rating": 5.0})
	assert "average_rating" in exc.value.errors
	assert catalog.find_movie_by_id(movie.id).average_rating == 3.0

	with pytest.raises(NotFoundError):
		service.update_movie("missing", {"title": "X"})

	service.delete_movie(movie.id)
	with pytest.raises(NotFoundError):
		service.get_movie(movie.id)


def test_fuzzy_title_search():
	catalog = make_catalog()
	interstellar = add_movie(catalog, "Interstellar")
	add_movie(catalog, "Superbad")
	inception = add_movie(catalog, "Inception")
	service = MovieService(catalog)

	results = service.search_titles("intersteller")
	assert results[0].id == interstellar.id
	assert inception.id in [m.id for m in service.search_titles("incepton")]
	assert service.search_titles("zzzzqqq") == []

	with pytest.raises(ValidationError):
		service.search_titles("   ")


def test_analytics_leaderboards():
	catalog = make_catalog()
	author = add_user(catalog, "author")
	fans = [add_user(catalog, f"fan{i}") for i in range(3)]
	top = add_movie(catalog, "Top", imdb_rating=9.1)
	mid = add_movie(catalog, "Mid", imdb_rating=7.0)
	unrated = add_movie(catalog, "Unrated")
	agg = RatingAggregator(catalog)

	r1 = agg.add_review(author.id, mid.id, 5)
	r2 = agg.add_review(author.id, top.id, 2)
	for fan in fans:
		agg.like_review(r2.id, fan.id)
	agg.like_review(r1.id, fans[0].id)

	analytics = AnalyticsService(catalog, top_n=5)

	liked = analytics.most_liked_reviews()
	assert [h.review.id for h in liked] == [r2.id, r1.id]
	assert liked[0].username == "author"
	assert liked[0].movie_title == "Top"

	assert [m.id for m in analytics.most_popular_movies()] == [top.id, mid.id, unrated.id]
	assert [m.id for m in analytics.highest_rated_movies()] == [mid.id, top.id]

	catalog.delete_movie(top.id)
	assert analytics.most_liked_reviews()[0].movie_title is None


def main():
	# Runs every test in this module, fixtures and parametrized cases included
	raise SystemExit(pytest.main([__file__, "-q"]))


if __name__ == '__main__':
	main()
