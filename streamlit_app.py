"""
Streamlit admin dashboard for cinebase.
Calls the FastAPI server's admin endpoints (default http://localhost:8000) with an admin token.

Run API:  uvicorn api:app --reload
Run UI:   streamlit run streamlit_app.py
"""

# HTTP client to call the API
import requests  # make web requests to the FastAPI server
# Streamlit framework to build a simple interactive UI
import streamlit as st  # UI primitives
# Typing to make function signatures clearer
from typing import Dict, List, Optional  # indicates values can be None

# Default URL where the FastAPI server is expected to run locally
DEFAULT_API_URL = "http://localhost:8000"  # default API base URL

# Leaderboards offered in the dashboard: label -> admin endpoint
BOARDS = {
	"Most popular movies (IMDb)": "/api/v1/admin/most-popular-movies",
	"Highest rated movies (users)": "/api/v1/admin/highest-rated-movies",
	"Most liked reviews": "/api/v1/admin/most-liked-reviews",
}

# Configure Streamlit page (title and layout width)
st.set_page_config(page_title="cinebase admin", layout="wide")  # wide layout

# Main page title
st.title("🎬 cinebase – Admin Analytics")  # friendly header


def fetch(api_url: str, path: str, token: str, method: str = "get") -> Dict:
	"""Call an admin endpoint and return the decoded envelope."""
	resp = requests.request(method, f"{api_url}{path}", headers={"Authorization": f"Bearer {token}"}, timeout=30)
	resp.raise_for_status()  # raise error if server responded with an error code
	return resp.json()  # {message, data}


def login(api_url: str, email: str, password: str) -> Optional[str]:
	resp = requests.post(f"{api_url}/api/v1/users/login", json={"email": email, "password": password}, timeout=30)
	if not resp.ok:
		st.sidebar.error(resp.json().get("message", "Login failed"))
		return None
	return resp.json()["data"]["token"]


def render_movies(movies: List[Dict]):
	for i, movie in enumerate(movies, start=1):
		c1, c2 = st.columns([1, 4])  # small image column + large text column
		with c1:
			if movie.get("cover_photo"):
				st.image(movie["cover_photo"], width='stretch')  # poster
		with c2:
			year = (movie.get("release_date") or "")[:4]
			st.subheader(f"{i}. {movie['title']} ({year})")  # title + year
			st.caption(
				f"IMDb: {movie.get('imdb_rating')} | Users: {movie['average_rating']:.2f} "
				f"over {movie['review_count']} reviews"
			)
			st.write(f"Genres: {', '.join(movie['genre'])}")  # genres
			if movie.get("director_name"):
				st.write(f"Director: {movie['director_name']}")  # director
			if movie.get("cast_names"):
				st.write(f"Cast: {', '.join(movie['cast_names'][:5])}")  # cast
		st.divider()  # separator


def render_reviews(highlights: List[Dict]):
	rows = []
	for h in highlights:
		rows.append({
			"Likes": h["review"]["like_count"],
			"Rating": h["review"]["rating_value"],
			"User": h.get("username") or "(deleted)",
			"Movie": h.get("movie_title") or "(deleted)",
			"Review": h["review"]["review_text"][:120],
		})
	st.dataframe(rows, width='stretch')


# Sidebar contains connection and login controls
with st.sidebar:
	st.header("Settings")  # section label
	api_url = st.text_input("API URL", DEFAULT_API_URL)  # where the API lives
	email = st.text_input("Admin email")
	password = st.text_input("Password", type="password")
	if st.button("Log in"):
		st.session_state["token"] = login(api_url, email, password)

# Check quickly whether the API is reachable
try:
	h = requests.get(f"{api_url}/health", timeout=3)  # ping API health endpoint
	health = h.json() if h.ok else None
except requests.RequestException:
	health = None
if health is None:
	st.sidebar.error("API not reachable.")  # inform user
else:
	st.sidebar.success(f"API ok | scheduler running: {health.get('scheduler_running')}")

token = st.session_state.get("token")
if not token:
	st.info("Log in with an admin account to load analytics.")
	st.stop()

board = st.selectbox("Leaderboard", list(BOARDS))
try:
	payload = fetch(api_url, BOARDS[board], token)
	st.success(payload["message"])
	if board == "Most liked reviews":
		render_reviews(payload["data"])
	else:
		render_movies(payload["data"])
except requests.RequestException as e:  # network/API errors
	st.error(f"API request failed: {e}")  # show human-friendly message

st.sidebar.markdown("---")  # separator
if st.sidebar.button("Run reminder check now"):
	try:
		report = fetch(api_url, "/api/v1/admin/reminders/run", token, method="post")
		st.sidebar.info(report["message"])
	except requests.RequestException as e:
		st.sidebar.error(f"Reminder run failed: {e}")
