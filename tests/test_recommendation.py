"""
Tests for preference-based recommendations.
Run: python tests/test_recommendation.py
"""

import pytest

from builders import add_movie, add_person, add_user, make_catalog
from cinebase.errors import NotFoundError, PreconditionFailedError
from cinebase.models import MoviePreferences
from cinebase.recommendation import PreferenceScorer, RecommendationEngine


def test_scores_genre_director_and_cast_hits():
	catalog = make_catalog()
	x = add_person(catalog, "X")
	y = add_person(catalog, "Y")
	lead = add_person(catalog, "Lead")

	a = add_movie(catalog, "A", genre=["Action", "Drama"], director=x)
	b = add_movie(catalog, "B", genre=["Action"], director=y)
	add_movie(catalog, "C", genre=["Drama"], director=y)
	d = add_movie(catalog, "D", genre=["Comedy"], cast=[lead])
	user = add_user(catalog, genre=["Action"], director=["X"], actor=["Lead"])

	results = RecommendationEngine(catalog).get_personalized_recommendations(user.id)

	assert [(r.movie.id, r.score) for r in results] == [(a.id, 2), (b.id, 1), (d.id, 1)]
	assert results[0].director_name == "X"
	assert results[2].cast_names == ["Lead"]


def test_each_matching_actor_counts():
	catalog = make_catalog()
	p1 = add_person(catalog, "P1")
	p2 = add_person(catalog, "P2")
	movie = add_movie(catalog, "Duo", cast=[p1, p2])
	prefs = MoviePreferences(actor=["P1", "P2"])

	results = RecommendationEngine(catalog).recommend_for_preferences(prefs)
	assert len(results) == 1
	assert results[0].movie.id == movie.id
	assert results[0].score == 2


def test_limit_sorted_positive_and_stable():
	catalog = make_catalog()
	ids = [add_movie(catalog, f"M{i}", genre=["Drama"]).id for i in range(15)]
	best = add_movie(catalog, "Best", genre=["Drama", "War"])
	add_movie(catalog, "Nope", genre=["Horror"])
	user = add_user(catalog, genre=["Drama", "War"])

	results = RecommendationEngine(catalog).get_personalized_recommendations(user.id)

	assert len(results) == 10
	assert results[0].movie.id == best.id
	assert all(r.score > 0 for r in results)
	scores = [r.score for r in results]
	assert scores == sorted(scores, reverse=True)
	# Ties keep catalog order
	assert [r.movie.id for r in results[1:]] == ids[:9]


def test_custom_limit():
	catalog = make_catalog()
	for i in range(5):
		add_movie(catalog, f"M{i}", genre=["Drama"])
	user = add_user(catalog, genre=["Drama"])
	assert len(RecommendationEngine(catalog, limit=3).get_personalized_recommendations(user.id)) == 3


def test_no_matches_returns_empty_list():
	catalog = make_catalog()
	add_movie(catalog, "A", genre=["Horror"])
	user = add_user(catalog, genre=["Musical"])
	assert RecommendationEngine(catalog).get_personalized_recommendations(user.id) == []


def test_empty_preferences_fail_precondition():
	catalog = make_catalog()
	add_movie(catalog, "A", genre=["Drama"])
	user = add_user(catalog)
	with pytest.raises(PreconditionFailedError) as exc:
		RecommendationEngine(catalog).get_personalized_recommendations(user.id)
	assert exc.value.status_code == 412


def test_unknown_user():
	with pytest.raises(NotFoundError):
		RecommendationEngine(make_catalog()).get_personalized_recommendations("ghost")


def test_scorer_ignores_missing_director():
	catalog = make_catalog()
	movie = add_movie(catalog, "A")
	prefs = MoviePreferences(director=["Someone"])
	assert PreferenceScorer().score(movie, prefs, None, []) == 0


def main():
	# Runs every test in this module, fixtures and parametrized cases included
	raise SystemExit(pytest.main([__file__, "-q"]))


if __name__ == '__main__':
	main()
