"""
FastAPI server exposing the cinebase REST API.
Endpoints live under /api/v1 (users, movies, people, reviews, reminders, admin);
GET /health reports readiness.

Startup starts the daily reminder scheduler when enabled; shutdown stops it.
Run: uvicorn api:app --reload
"""

# Import standard libraries for timing and clocks
import time  # measure startup latency
from datetime import datetime  # scheduler clock
from typing import Callable, List, Optional  # precise typing for clarity

# Import FastAPI for building the web API
from fastapi import Depends, FastAPI, Header, Query, Request  # FastAPI primitives
from fastapi.exceptions import RequestValidationError  # body/query validation failures
from fastapi.responses import JSONResponse  # error envelopes

# Import loguru for simple, structured console logging
from loguru import logger  # convenient console logger

# Import our internal modules
from cinebase import config  # environment-driven settings
from cinebase.accounts import AccountService  # registration and login
from cinebase.analytics import AnalyticsService  # admin leaderboards
from cinebase.auth import AuthService  # hashing and tokens
from cinebase.errors import CinebaseError, ForbiddenError, UnauthorizedError  # error taxonomy
from cinebase.models import User  # authenticated principal
from cinebase.movies import MovieService  # catalog management
from cinebase.notifications import NotificationDispatcher, build_default_dispatcher  # delivery
from cinebase.ratings import RatingAggregator  # reviews and averages
from cinebase.recommendation import RecommendationEngine  # personalized picks
from cinebase.reminders import ReminderScheduler, ReminderService  # release reminders
from cinebase.repository import Catalog  # typed persistence
from cinebase.similarity import SimilarityEngine  # similar titles
from cinebase.store import DocumentStore, build_store  # document database
from cinebase import schemas as s  # request/response models

API_PREFIX = "/api/v1"


class Services:
	"""Everything a request handler needs, built once per application."""

	def __init__(
		self,
		store: DocumentStore,
		dispatcher: NotificationDispatcher,
		clock: Callable[[], datetime] = datetime.now,
		auth: Optional[AuthService] = None,
	):
		self.store = store
		self.catalog = Catalog(store)
		self.auth = auth or AuthService()
		self.accounts = AccountService(self.catalog, self.auth)
		self.movies = MovieService(self.catalog)
		self.ratings = RatingAggregator(self.catalog)
		self.similarity = SimilarityEngine(self.catalog)
		self.recommendations = RecommendationEngine(self.catalog)
		self.reminders = ReminderService(self.catalog, clock=clock)
		self.scheduler = ReminderScheduler(self.catalog, dispatcher, clock=clock)
		self.analytics = AnalyticsService(self.catalog)


def get_services(request: Request) -> Services:
	return request.app.state.services


def current_user(
	authorization: Optional[str] = Header(default=None),
	services: Services = Depends(get_services),
) -> User:
	"""Resolve the bearer token (with or without the 'Bearer ' prefix) to a user."""
	if not authorization:
		raise UnauthorizedError("Not authorized")
	token = authorization[7:] if authorization.lower().startswith("bearer ") else authorization
	return services.accounts.authenticate(token.strip())


def admin_user(user: User = Depends(current_user)) -> User:
	if not user.is_admin:
		raise ForbiddenError("Access denied: Admins only")
	return user


def _field_name(loc) -> str:
	# Drop the leading 'body'/'query'/'path' segment from pydantic locations
	parts = [str(p) for p in loc]
	if parts and parts[0] in ("body", "query", "path", "header"):
		parts = parts[1:]
	return ".".join(parts) or "body"


def register_error_handlers(app: FastAPI):

	@app.exception_handler(CinebaseError)
	async def cinebase_error_handler(request: Request, exc: CinebaseError):
		body = {"message": exc.message}
		if getattr(exc, "errors", None):
			body["errors"] = exc.errors
		if exc.status_code >= 500:
			logger.error(f"[API] {request.method} {request.url.path} failed: {exc.message}")
		else:
			logger.debug(f"[API] {request.method} {request.url.path} -> {exc.status_code} {exc.message}")
		return JSONResponse(status_code=exc.status_code, content=body)

	@app.exception_handler(RequestValidationError)
	async def request_validation_handler(request: Request, exc: RequestValidationError):
		errors = {_field_name(e.get("loc", ())): e.get("msg", "Invalid value") for e in exc.errors()}
		return JSONResponse(status_code=400, content={"message": "Validation error", "errors": errors})

	@app.exception_handler(Exception)
	async def unexpected_error_handler(request: Request, exc: Exception):
		logger.opt(exception=exc).error(f"[API] Unhandled error on {request.method} {request.url.path}")
		return JSONResponse(status_code=500, content={"message": "Internal server error"})


def create_app(
	store: Optional[DocumentStore] = None,
	dispatcher: Optional[NotificationDispatcher] = None,
	clock: Callable[[], datetime] = datetime.now,
	auth: Optional[AuthService] = None,
	start_scheduler: Optional[bool] = None,
) -> FastAPI:
	"""Build the application; tests inject an in-memory store, a fake dispatcher and a fixed clock."""
	# Instantiate the FastAPI application with metadata
	app = FastAPI(title="cinebase API", version="1.0.0")  # web app
	app.state.services = Services(
		store=store if store is not None else build_store(),
		dispatcher=dispatcher if dispatcher is not None else build_default_dispatcher(),
		clock=clock,
		auth=auth,
	)
	app.state.startup_seconds = 0.0  # measured on startup
	run_scheduler = config.REMINDER_SCHEDULER_ENABLED if start_scheduler is None else start_scheduler
	register_error_handlers(app)

	# FastAPI startup hook to launch the background scheduler once
	@app.on_event("startup")
	async def startup_event():
		"""Start the daily reminder job and log how long startup took."""
		start = time.time()  # start timer for startup latency
		logger.info("[API] Startup: wiring services...")  # log intent
		if run_scheduler:
			app.state.services.scheduler.start()  # runs detached from request handling
		else:
			logger.info("[API] Reminder scheduler disabled")
		app.state.startup_seconds = time.time() - start  # elapsed seconds
		logger.info(f"[API] Startup complete in {app.state.startup_seconds:.2f}s.")  # summary log

	@app.on_event("shutdown")
	async def shutdown_event():
		services = app.state.services
		if services.scheduler.running:
			services.scheduler.stop()
		services.store.close()

	# Simple health endpoint for readiness checks
	@app.get("/health")
	async def health():
		"""Return minimal health info for liveness/readiness probes."""
		return {
			"status": "ok",  # constant indicator
			"scheduler_running": app.state.services.scheduler.running,  # True if reminder job is alive
			"startup_seconds": round(app.state.startup_seconds, 2),  # startup latency
		}

	register_user_routes(app)
	register_movie_routes(app)
	register_reminder_routes(app)
	register_admin_routes(app)
	return app


def register_user_routes(app: FastAPI):

	@app.post(API_PREFIX + "/users/register", status_code=201, response_model=s.Envelope[s.AuthOut])
	def register(body: s.RegisterIn, services: Services = Depends(get_services)):
		user, token = services.accounts.register(
			email=body.email,
			username=body.username,
			password=body.password,
			movie_preferences=s.preferences_from(body.movie_preferences),
			personal_wishlist=body.personal_wishlist,
			profile_photo=body.profile_photo,
		)
		return s.Envelope(message="User registered successfully", data=s.AuthOut(user=s.user_out(user), token=token))

	@app.post(API_PREFIX + "/users/login", response_model=s.Envelope[s.AuthOut])
	def login(body: s.LoginIn, services: Services = Depends(get_services)):
		user, token = services.accounts.login(body.email, body.password)
		return s.Envelope(message="Logged in", data=s.AuthOut(user=s.user_out(user), token=token))

	@app.get(API_PREFIX + "/users/me", response_model=s.Envelope[s.UserOut])
	def me(user: User = Depends(current_user)):
		return s.Envelope(message="User fetched", data=s.user_out(user))

	@app.patch(API_PREFIX + "/users/me", response_model=s.Envelope[s.UserOut])
	def update_me(body: s.UserUpdate, user: User = Depends(current_user), services: Services = Depends(get_services)):
		changes = body.model_dump(exclude_unset=True)
		if "movie_preferences" in changes:
			changes["movie_preferences"] = s.preferences_from(body.movie_preferences)
		updated = services.accounts.update_user(user.id, changes)
		return s.Envelope(message="User updated successfully", data=s.user_out(updated))

	@app.get(API_PREFIX + "/users/me/recommendations", response_model=s.Envelope[List[s.RecommendationOut]])
	def recommendations(user: User = Depends(current_user), services: Services = Depends(get_services)):
		start = time.time()  # time the full scan
		results = services.recommendations.get_personalized_recommendations(user.id)
		logger.info(f"[API] recommendations for {user.id}: {len(results)} in {(time.time() - start) * 1000:.2f} ms")
		return s.Envelope(message="Recommendations fetched", data=[s.recommendation_out(r) for r in results])


def register_movie_routes(app: FastAPI):

	@app.get(API_PREFIX + "/movies", response_model=s.Envelope[List[s.MovieOut]])
	def list_movies(services: Services = Depends(get_services)):
		views = services.movies.populate(services.movies.list_movies())
		return s.Envelope(message="Movies fetched", data=[s.movie_out(v) for v in views])

	# Declared before /movies/{movie_id} so 'search' is not taken for an id
	@app.get(API_PREFIX + "/movies/search", response_model=s.Envelope[List[s.MovieOut]])
	def search_movies(
		q: str = Query(..., description="Title to look for (typos tolerated)"),
		limit: int = Query(10, ge=1, le=50),
		services: Services = Depends(get_services),
	):
		logger.debug(f"[API] /movies/search q='{q}' limit={limit}")  # debug log of input
		views = services.movies.populate(services.movies.search_titles(q, limit=limit))
		return s.Envelope(message=f"{len(views)} movies matched", data=[s.movie_out(v) for v in views])

	@app.get(API_PREFIX + "/movies/{movie_id}", response_model=s.Envelope[s.MovieOut])
	def get_movie(movie_id: str, services: Services = Depends(get_services)):
		return s.Envelope(message="Movie fetched", data=s.movie_out(services.movies.get_movie(movie_id)))

	@app.post(API_PREFIX + "/movies", status_code=201, response_model=s.Envelope[s.MovieOut])
	def add_movie(body: s.MovieIn, _: User = Depends(admin_user), services: Services = Depends(get_services)):
		movie = services.movies.create_movie(body.model_dump())
		return s.Envelope(message="Movie added successfully", data=s.movie_out(services.movies.get_movie(movie.id)))

	@app.patch(API_PREFIX + "/movies/{movie_id}", response_model=s.Envelope[s.MovieOut])
	def update_movie(
		movie_id: str,
		body: s.MovieUpdate,
		_: User = Depends(admin_user),
		services: Services = Depends(get_services),
	):
		services.movies.update_movie(movie_id, body.model_dump(exclude_unset=True))
		return s.Envelope(message="Movie updated successfully", data=s.movie_out(services.movies.get_movie(movie_id)))

	@app.delete(API_PREFIX + "/movies/{movie_id}", response_model=s.Envelope[None])
	def delete_movie(movie_id: str, _: User = Depends(admin_user), services: Services = Depends(get_services)):
		services.movies.delete_movie(movie_id)
		return s.Envelope(message="Movie deleted successfully")

	@app.get(API_PREFIX + "/movies/{movie_id}/reviews", response_model=s.Envelope[List[s.ReviewOut]])
	def list_reviews(movie_id: str, services: Services = Depends(get_services)):
		reviews = services.ratings.reviews_for_movie(movie_id)
		return s.Envelope(message="Reviews fetched", data=[s.review_out(r) for r in reviews])

	@app.post(API_PREFIX + "/movies/{movie_id}/reviews", status_code=201, response_model=s.Envelope[s.ReviewOut])
	def add_review(
		movie_id: str,
		body: s.ReviewIn,
		user: User = Depends(current_user),
		services: Services = Depends(get_services),
	):
		review = services.ratings.add_review(user.id, movie_id, body.rating_value, body.review_text)
		return s.Envelope(message="Review added successfully", data=s.review_out(review))

	@app.post(API_PREFIX + "/reviews/{review_id}/like", response_model=s.Envelope[s.ReviewOut])
	def like_review(review_id: str, user: User = Depends(current_user), services: Services = Depends(get_services)):
		return s.Envelope(message="Review liked", data=s.review_out(services.ratings.like_review(review_id, user.id)))

	@app.delete(API_PREFIX + "/reviews/{review_id}/like", response_model=s.Envelope[s.ReviewOut])
	def unlike_review(review_id: str, user: User = Depends(current_user), services: Services = Depends(get_services)):
		return s.Envelope(message="Review unliked", data=s.review_out(services.ratings.unlike_review(review_id, user.id)))

	@app.get(API_PREFIX + "/movies/{movie_id}/similar", response_model=s.Envelope[List[s.MovieOut]])
	def similar_titles(movie_id: str, services: Services = Depends(get_services)):
		views = services.movies.populate(services.similarity.similar_movies(movie_id))
		return s.Envelope(message="Similar titles fetched", data=[s.movie_out(v) for v in views])

	@app.post(API_PREFIX + "/movies/{movie_id}/similar/refresh", response_model=s.Envelope[List[str]])
	def refresh_similar(movie_id: str, _: User = Depends(current_user), services: Services = Depends(get_services)):
		ids = services.similarity.refresh_similar_titles(movie_id)
		return s.Envelope(message="Similar titles refreshed", data=ids)

	@app.post(API_PREFIX + "/people", status_code=201, response_model=s.Envelope[s.PersonOut])
	def add_person(body: s.PersonIn, _: User = Depends(admin_user), services: Services = Depends(get_services)):
		person = services.movies.create_person(body.name, body.biography)
		return s.Envelope(message="Person added successfully", data=s.person_out(person))

	@app.get(API_PREFIX + "/people/{person_id}", response_model=s.Envelope[s.PersonOut])
	def get_person(person_id: str, services: Services = Depends(get_services)):
		return s.Envelope(message="Person fetched", data=s.person_out(services.movies.get_person(person_id)))


def register_reminder_routes(app: FastAPI):

	@app.get(API_PREFIX + "/reminders", response_model=s.Envelope[List[s.ReminderOut]])
	def list_reminders(user: User = Depends(current_user), services: Services = Depends(get_services)):
		reminders = services.reminders.reminders_for_user(user.id)
		return s.Envelope(message="Reminders fetched", data=[s.reminder_out(r) for r in reminders])

	@app.post(API_PREFIX + "/reminders", status_code=201, response_model=s.Envelope[s.ReminderOut])
	def create_reminder(body: s.ReminderIn, user: User = Depends(current_user), services: Services = Depends(get_services)):
		reminder = services.reminders.create_reminder(user.id, body.movie_id, body.notification_type)
		return s.Envelope(message="Reminder created successfully", data=s.reminder_out(reminder))

	@app.patch(API_PREFIX + "/reminders/{reminder_id}", response_model=s.Envelope[s.ReminderOut])
	def update_reminder(
		reminder_id: str,
		body: s.ReminderUpdate,
		user: User = Depends(current_user),
		services: Services = Depends(get_services),
	):
		reminder = services.reminders.update_reminder(reminder_id, user.id, body.movie_id, body.notification_type)
		return s.Envelope(message="Reminder updated successfully", data=s.reminder_out(reminder))

	@app.delete(API_PREFIX + "/reminders/{reminder_id}", response_model=s.Envelope[None])
	def delete_reminder(reminder_id: str, user: User = Depends(current_user), services: Services = Depends(get_services)):
		services.reminders.delete_reminder(reminder_id, user.id)
		return s.Envelope(message="Reminder deleted successfully")


def register_admin_routes(app: FastAPI):

	@app.get(API_PREFIX + "/admin/most-liked-reviews", response_model=s.Envelope[List[s.ReviewHighlightOut]])
	def most_liked_reviews(_: User = Depends(admin_user), services: Services = Depends(get_services)):
		data = [s.highlight_out(h) for h in services.analytics.most_liked_reviews()]
		return s.Envelope(message="Successfully fetched the most liked reviews", data=data)

	@app.get(API_PREFIX + "/admin/most-popular-movies", response_model=s.Envelope[List[s.MovieOut]])
	def most_popular_movies(_: User = Depends(admin_user), services: Services = Depends(get_services)):
		views = services.movies.populate(services.analytics.most_popular_movies())
		return s.Envelope(message="Successfully fetched the most popular movies", data=[s.movie_out(v) for v in views])

	@app.get(API_PREFIX + "/admin/highest-rated-movies", response_model=s.Envelope[List[s.MovieOut]])
	def highest_rated_movies(_: User = Depends(admin_user), services: Services = Depends(get_services)):
		views = services.movies.populate(services.analytics.highest_rated_movies())
		return s.Envelope(message="Successfully fetched the highest rated movies", data=[s.movie_out(v) for v in views])

	@app.post(API_PREFIX + "/admin/reminders/run", response_model=s.Envelope[s.ReminderRunOut])
	def run_reminders(_: User = Depends(admin_user), services: Services = Depends(get_services)):
		report = services.scheduler.run_once()
		data = s.ReminderRunOut(run_date=report.run_date, sent=report.sent, failed=report.failed)
		return s.Envelope(message=f"Processed {report.due} due reminders", data=data)


# Module-level application used by `uvicorn api:app`
app = create_app()
