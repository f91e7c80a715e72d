"""
User accounts: registration, login and allow-listed profile updates.
"""

from typing import Dict, List, Optional, Tuple

from loguru import logger

from .auth import AuthService
from .errors import UnauthorizedError, ValidationError
from .models import MoviePreferences, User, new_id
from .repository import Catalog

# Profile fields a user may change; everything else is server-owned
USER_UPDATABLE_FIELDS = ('email', 'username', 'profile_photo', 'movie_preferences', 'personal_wishlist')
# Optional to send, but never cleared to null
USER_REQUIRED_FIELDS = ('email', 'username', 'personal_wishlist')


class AccountService:

	def __init__(self, catalog: Catalog, auth: AuthService):
		self.catalog = catalog
		self.auth = auth

	def register(
		self,
		email: str,
		username: str,
		password: str,
		movie_preferences: Optional[MoviePreferences] = None,
		personal_wishlist: Optional[List[str]] = None,
		profile_photo: Optional[str] = None,
		role: str = 'user',
	) -> Tuple[User, str]:
		"""Create a user and return it with a fresh token."""
		errors = {}
		if self.catalog.find_user_by_email(email):
			errors['email'] = "Email already registered"
		if self.catalog.find_user_by_username(username):
			errors['username'] = "Username already taken"
		if errors:
			raise ValidationError("User already exists", errors)

		user = User(
			id=new_id(),
			username=username,
			email=email,
			password_hash=self.auth.hash_password(password),
			role=role,
			profile_photo=profile_photo,
			movie_preferences=movie_preferences or MoviePreferences(),
			personal_wishlist=list(personal_wishlist or []),
		)
		self.catalog.insert_user(user)
		logger.info(f"[Accounts] Registered {user.username} ({user.id})")
		return user, self.auth.issue_token(user.id)

	def login(self, email: str, password: str) -> Tuple[User, str]:
		user = self.catalog.find_user_by_email(email)
		if user is None or not self.auth.compare_password(password, user.password_hash):
			raise UnauthorizedError("Invalid credentials")
		logger.debug(f"[Accounts] Login for {user.username}")
		return user, self.auth.issue_token(user.id)

	def authenticate(self, token: str) -> User:
		user_id = self.auth.verify_token(token)
		return self.catalog.find_user_by_id(user_id)

	def update_user(self, user_id: str, changes: Dict) -> User:
		"""Apply the allow-listed fields present in `changes`; unknown keys are rejected."""
		unknown = [k for k in changes if k not in USER_UPDATABLE_FIELDS]
		if unknown:
			raise ValidationError(errors={k: "Field cannot be updated" for k in unknown})
		cleared = [k for k in USER_REQUIRED_FIELDS if k in changes and changes[k] is None]
		if cleared:
			raise ValidationError(errors={k: "Field cannot be null" for k in cleared})

		user = self.catalog.find_user_by_id(user_id)
		if 'email' in changes and changes['email'] != user.email:
			other = self.catalog.find_user_by_email(changes['email'])
			if other and other.id != user.id:
				raise ValidationError(errors={'email': "Email already registered"})
		if 'username' in changes and changes['username'] != user.username:
			other = self.catalog.find_user_by_username(changes['username'])
			if other and other.id != user.id:
				raise ValidationError(errors={'username': "Username already taken"})

		for key, value in changes.items():
			if key == 'movie_preferences':
				value = value if isinstance(value, MoviePreferences) else MoviePreferences.from_document(value)
			setattr(user, key, value)
		self.catalog.save_user(user)
		logger.info(f"[Accounts] Updated {user.id}: {', '.join(sorted(changes))}")
		return user
