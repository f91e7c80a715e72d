"""
Tests for JSON Lines catalog seeding.
Run: python tests/test_data_loader.py  (or: pytest tests/test_data_loader.py)
"""

import json
from datetime import date
from pathlib import Path

import pytest

from builders import make_catalog
from cinebase.data_loader import DataLoader

SEED_DIR = Path(__file__).resolve().parents[1] / "data"


def write_jsonl(path, records, extra_lines=()):
	lines = [json.dumps(r) for r in records] + list(extra_lines)
	path.write_text("\n".join(lines) + "\n", encoding="utf-8")
	return path


def test_movies_resolve_people_and_normalize(tmp_path):
	catalog = make_catalog()
	loader = DataLoader(catalog)
	people = write_jsonl(tmp_path / "people.jsonl", [{"name": "Ridley Scott", "biography": "Director"}])
	movies = write_jsonl(tmp_path / "movies.jsonl", [
		{
			"title": "Alien",
			"genre": "sci-fi, Horror",
			"director": "ridley scott",
			"cast": ["Sigourney Weaver", "Tom Skerritt"],
			"imdb_rating": "8.5",
			"release_date": "1979-05-25",
			"runtime": 117,
		},
		{
			"title": "Blade Runner",
			"genres": ["science fiction"],
			"director": "Ridley Scott",
			"actors": "Harrison Ford",
		},
	])

	assert len(loader.load_people_from_jsonl(people)) == 1
	loaded = loader.load_movies_from_jsonl(movies)

	alien, blade = loaded
	assert alien.genre == ["Science Fiction", "Horror"]
	assert alien.imdb_rating == 8.5
	assert alien.release_date == date(1979, 5, 25)
	assert alien.director == blade.director  # case-insensitive name match

	scott = catalog.find_person_by_id(alien.director)
	assert scott.biography == "Director"
	assert scott.filmography == [alien.id, blade.id]
	assert len(catalog.find_all_persons()) == 4
	assert loader.get_all_genres() == ["Horror", "Science Fiction"]


def test_bad_lines_and_records_are_skipped(tmp_path):
	catalog = make_catalog()
	path = write_jsonl(
		tmp_path / "movies.jsonl",
		[{"title": "Good", "director": "A"}, {"title": ""}, {"title": "Bad", "director": "B", "imdb_rating": "abc"}],
		extra_lines=["{not json", ""],
	)

	loaded = DataLoader(catalog).load_movies_from_jsonl(path)

	assert [m.title for m in loaded] == ["Good"]
	# The unparseable record created no orphan director
	assert [p.name for p in catalog.find_all_persons()] == ["A"]


def test_reloading_same_file_skips_existing_ids(tmp_path):
	catalog = make_catalog()
	path = write_jsonl(tmp_path / "movies.jsonl", [
		{"id": "m1", "title": "Heat", "director": "Michael Mann"},
		{"id": "m1", "title": "Heat again"},
		{"id": "m2", "title": "Thief", "director": "Michael Mann"},
	])

	first = DataLoader(catalog).load_movies_from_jsonl(path)
	second = DataLoader(catalog).load_movies_from_jsonl(path)

	assert [m.id for m in first] == ["m1", "m2"]
	assert second == []
	assert catalog.find_movie_by_id("m1").title == "Heat"
	assert len(catalog.find_all_movies()) == 2
	mann = catalog.find_all_persons()
	assert len(mann) == 1
	assert mann[0].filmography == ["m1", "m2"]


def test_missing_file(tmp_path):
	with pytest.raises(FileNotFoundError):
		DataLoader(make_catalog()).load_movies_from_jsonl(tmp_path / "nope.jsonl")


def test_bundled_seed_data_loads():
	catalog = make_catalog()
	loader = DataLoader(catalog)
	loader.load_people_from_jsonl(SEED_DIR / "people.jsonl")
	movies = loader.load_movies_from_jsonl(SEED_DIR / "movies.jsonl")
	assert movies
	assert all(m.title for m in movies)


def main():
	# Runs every test in this module, fixtures and parametrized cases included
	raise SystemExit(pytest.main([__file__, "-q"]))


if __name__ == '__main__':
	main()
