"""
HTTP tests for the cinebase API using FastAPI's TestClient.
Run: python tests/test_api.py  (or: pytest tests/test_api.py)
"""

from datetime import datetime

import pytest
from fastapi.testclient import TestClient

from api import API_PREFIX, create_app
from cinebase.auth import AuthService
from cinebase.notifications import NotificationDispatcher
from cinebase.store import InMemoryStore

NOW = datetime(2030, 6, 1, 12, 0)


class FakeDispatcher(NotificationDispatcher):
	def __init__(self):
		self.sent = []

	def send(self, payload):
		self.sent.append(payload)
		return True


@pytest.fixture
def dispatcher():
	return FakeDispatcher()


@pytest.fixture
def app(dispatcher):
	return create_app(
		store=InMemoryStore(),
		dispatcher=dispatcher,
		clock=lambda: NOW,
		auth=AuthService(secret="test-secret", rounds=4),
		start_scheduler=False,
	)


@pytest.fixture
def client(app):
	return TestClient(app)


def url(path):
	return API_PREFIX + path


def register(client, name, **extra):
	body = {"email": f"{name}@example.com", "username": name, "password": "secret123"}
	body.update(extra)
	resp = client.post(url("/users/register"), json=body)
	assert resp.status_code == 201, resp.text
	data = resp.json()["data"]
	return data["user"], {"Authorization": f"Bearer {data['token']}"}


def admin_headers(app, client):
	user, headers = register(client, "admin")
	catalog = app.state.services.catalog
	record = catalog.find_user_by_id(user["id"])
	record.role = "admin"
	catalog.save_user(record)
	return headers


def seed_movie(client, headers, **fields):
	body = {"title": "Heat", "genre": ["Crime"]}
	body.update(fields)
	resp = client.post(url("/movies"), json=body, headers=headers)
	assert resp.status_code == 201, resp.text
	return resp.json()["data"]


def test_health(client):
	resp = client.get("/health")
	assert resp.status_code == 200
	assert resp.json()["status"] == "ok"
	assert resp.json()["scheduler_running"] is False


def test_register_login_and_me(client):
	user, headers = register(client, "ann")
	assert "password_hash" not in user

	resp = client.post(url("/users/login"), json={"email": "ann@example.com", "password": "secret123"})
	assert resp.status_code == 200
	assert resp.json()["data"]["user"]["id"] == user["id"]

	bad = client.post(url("/users/login"), json={"email": "ann@example.com", "password": "wrong"})
	assert bad.status_code == 401
	assert bad.json()["message"] == "Invalid credentials"

	me = client.get(url("/users/me"), headers=headers)
	assert me.json()["data"]["username"] == "ann"
	assert client.get(url("/users/me")).status_code == 401

	dup = client.post(url("/users/register"), json={"email": "ann@example.com", "username": "x", "password": "secret123"})
	assert dup.status_code == 400
	assert "email" in dup.json()["errors"]


def test_profile_update_rejects_role(client):
	_, headers = register(client, "ann")
	resp = client.patch(url("/users/me"), json={"role": "admin"}, headers=headers)
	assert resp.status_code == 400
	assert resp.json()["message"] == "Validation error"

	ok = client.patch(url("/users/me"), json={"movie_preferences": {"genre": ["Crime"]}}, headers=headers)
	assert ok.status_code == 200
	assert ok.json()["data"]["movie_preferences"]["genre"] == ["Crime"]


@pytest.mark.parametrize("field", ["email", "username", "personal_wishlist"])
def test_profile_update_rejects_null_required_fields(client, field):
	_, headers = register(client, "ann")
	resp = client.patch(url("/users/me"), json={field: None}, headers=headers)
	assert resp.status_code == 400
	assert field in resp.json()["errors"]

	# The account is untouched and still usable
	me = client.get(url("/users/me"), headers=headers)
	assert me.status_code == 200
	assert me.json()["data"]["email"] == "ann@example.com"
	login = client.post(url("/users/login"), json={"email": "ann@example.com", "password": "secret123"})
	assert login.status_code == 200


def test_movie_admin_only(app, client):
	_, user_headers = register(client, "ann")
	resp = client.post(url("/movies"), json={"title": "Heat"}, headers=user_headers)
	assert resp.status_code == 403
	assert resp.json()["message"] == "Access denied: Admins only"

	headers = admin_headers(app, client)
	movie = seed_movie(client, headers, average_rating=4.5)
	assert movie["average_rating"] == 4.5
	assert movie["review_count"] == 0

	patch = client.patch(url(f"/movies/{movie['id']}"), json={"average_rating": 1}, headers=headers)
	assert patch.status_code == 400

	assert client.delete(url(f"/movies/{movie['id']}"), headers=headers).status_code == 200
	missing = client.get(url(f"/movies/{movie['id']}"))
	assert missing.status_code == 404
	assert missing.json()["message"] == "Movie not found"


def test_reviews_update_average(app, client):
	headers = admin_headers(app, client)
	movie = seed_movie(client, headers, average_rating=4.9)
	_, ann = register(client, "ann")

	for rating in (5, 2):
		resp = client.post(url(f"/movies/{movie['id']}/reviews"), json={"rating_value": rating}, headers=ann)
		assert resp.status_code == 201

	bad = client.post(url(f"/movies/{movie['id']}/reviews"), json={"rating_value": 9}, headers=ann)
	assert bad.status_code == 400
	assert "rating_value" in bad.json()["errors"]
	assert client.post(url(f"/movies/{movie['id']}/reviews"), json={"rating_value": 3}).status_code == 401

	fetched = client.get(url(f"/movies/{movie['id']}")).json()["data"]
	assert fetched["average_rating"] == 3.5
	assert fetched["review_count"] == 2

	reviews = client.get(url(f"/movies/{movie['id']}/reviews")).json()["data"]
	liked = client.post(url(f"/reviews/{reviews[0]['id']}/like"), headers=ann)
	assert liked.json()["data"]["like_count"] == 1


def test_similar_and_recommendations(app, client):
	headers = admin_headers(app, client)
	heat = seed_movie(client, headers, title="Heat", genre=["Crime"])
	thief = seed_movie(client, headers, title="Thief", genre=["Crime"])
	seed_movie(client, headers, title="Elf", genre=["Comedy"])

	refreshed = client.post(url(f"/movies/{heat['id']}/similar/refresh"), headers=headers)
	assert refreshed.json()["data"] == [thief["id"]]
	similar = client.get(url(f"/movies/{heat['id']}/similar")).json()["data"]
	assert [m["title"] for m in similar] == ["Thief"]

	_, empty = register(client, "nopref")
	assert client.get(url("/users/me/recommendations"), headers=empty).status_code == 412

	_, fan = register(client, "fan", movie_preferences={"genre": ["Crime"]})
	recs = client.get(url("/users/me/recommendations"), headers=fan).json()["data"]
	assert [r["movie"]["title"] for r in recs] == ["Heat", "Thief"]
	assert all(r["score"] == 1 for r in recs)


def test_search(app, client):
	headers = admin_headers(app, client)
	seed_movie(client, headers, title="Interstellar")
	resp = client.get(url("/movies/search"), params={"q": "intersteller"})
	assert resp.status_code == 200
	assert resp.json()["data"][0]["title"] == "Interstellar"


def test_reminder_flow(app, client, dispatcher):
	headers = admin_headers(app, client)
	future = seed_movie(client, headers, title="Future", release_date="2030-07-01")
	past = seed_movie(client, headers, title="Past", release_date="2020-01-01")
	_, ann = register(client, "ann")
	_, bob = register(client, "bob")

	rejected = client.post(url("/reminders"), json={"movie_id": past["id"]}, headers=ann)
	assert rejected.status_code == 400
	assert rejected.json()["message"] == "Movie has already been released."

	created = client.post(url("/reminders"), json={"movie_id": future["id"]}, headers=ann)
	assert created.status_code == 201
	reminder = created.json()["data"]
	assert reminder["reminder_date"] == "2030-06-30"
	assert reminder["sent"] is False

	assert client.delete(url(f"/reminders/{reminder['id']}"), headers=bob).status_code == 403

	scheduler = app.state.services.scheduler
	report = scheduler.run_once(datetime(2030, 6, 30).date())
	assert report.sent == [reminder["id"]]
	assert dispatcher.sent[0].to == "ann@example.com"

	listed = client.get(url("/reminders"), headers=ann).json()["data"]
	assert listed[0]["sent"] is True


def test_admin_analytics_and_manual_run(app, client):
	headers = admin_headers(app, client)
	_, ann = register(client, "ann")
	assert client.get(url("/admin/most-popular-movies"), headers=ann).status_code == 403

	seed_movie(client, headers, title="Low", imdb_rating=5.0)
	seed_movie(client, headers, title="High", imdb_rating=9.0)
	popular = client.get(url("/admin/most-popular-movies"), headers=headers).json()["data"]
	assert [m["title"] for m in popular] == ["High", "Low"]

	assert client.get(url("/admin/highest-rated-movies"), headers=headers).json()["data"] == []
	assert client.get(url("/admin/most-liked-reviews"), headers=headers).json()["data"] == []

	run = client.post(url("/admin/reminders/run"), headers=headers)
	assert run.status_code == 200
	assert run.json()["data"]["run_date"] == "2030-06-01"


def main():
	# Runs every test in this module, fixtures and parametrized cases included
	raise SystemExit(pytest.main([__file__, "-q"]))


if __name__ == '__main__':
	main()
