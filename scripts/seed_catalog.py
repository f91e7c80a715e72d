"""
Seed the catalog store.

This script:
1) Loads people from data/people.jsonl (optional)
2) Loads movies from data/movies.jsonl, resolving director/cast names to people
3) Refreshes every movie's similar-titles cache
4) Optionally creates an admin account

Usage:
    python -m scripts.seed_catalog
    CINEBASE_ADMIN_EMAIL=admin@example.com CINEBASE_ADMIN_PASSWORD=secret python -m scripts.seed_catalog
"""

import os  # admin credentials from the environment
import time  # measure step timings

from loguru import logger  # console logging

from cinebase import config  # seed paths and store backend
from cinebase.accounts import AccountService  # admin bootstrap
from cinebase.auth import AuthService  # password hashing
from cinebase.data_loader import DataLoader  # data ingestion
from cinebase.repository import Catalog  # typed persistence
from cinebase.similarity import SimilarityEngine  # similar-titles cache
from cinebase.store import build_store  # configured document store


def main():
	# Headline banner for visibility in console
	logger.info("=" * 60)
	logger.info("Seed cinebase catalog")
	logger.info("=" * 60)

	store = build_store()  # memory or mongo, per CINEBASE_STORE
	catalog = Catalog(store)
	loader = DataLoader(catalog)
	people_path = config.SEED_DIR / 'people.jsonl'
	movies_path = config.SEED_DIR / 'movies.jsonl'

	# 1) People
	logger.info("[1/4] Loading people...")
	if people_path.exists():
		people = loader.load_people_from_jsonl(people_path)
		logger.info(f"[OK] Loaded {len(people)} people")
	else:
		logger.info(f"[SKIP] {people_path} not found; people will come from movie credits")

	# 2) Movies
	logger.info("[2/4] Loading movies...")
	t0 = time.time()  # start timer
	movies = loader.load_movies_from_jsonl(movies_path)
	logger.info(f"[OK] Loaded {len(movies)} movies in {time.time() - t0:.2f}s")

	# 3) Similar titles
	logger.info("[3/4] Refreshing similar titles...")
	refreshed = SimilarityEngine(catalog).refresh_all()
	logger.info(f"[OK] Refreshed {refreshed} movies")

	# 4) Admin account
	logger.info("[4/4] Admin account...")
	email = os.environ.get("CINEBASE_ADMIN_EMAIL")
	password = os.environ.get("CINEBASE_ADMIN_PASSWORD")
	if email and password and catalog.find_user_by_email(email) is None:
		AccountService(catalog, AuthService()).register(email=email, username="admin", password=password, role="admin")
		logger.info(f"[OK] Created admin {email}")
	else:
		logger.info("[SKIP] No new admin requested")

	store.close()
	logger.info("All done!")
	logger.info("=" * 60)


if __name__ == '__main__':
	main()  # invoke seeder
