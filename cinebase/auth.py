"""
Authentication helpers: password hashing (bcrypt) and bearer tokens (JWT via python-jose).
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt  # password hashing
from jose import JWTError, jwt  # token signing and verification

from . import config
from .errors import UnauthorizedError


class AuthService:
	"""Hashes and checks passwords, issues and verifies signed tokens."""

	def __init__(
		self,
		secret: str = None,
		algorithm: str = None,
		expires_minutes: int = None,
		rounds: int = None,
	):
		self.secret = secret or config.JWT_SECRET
		self.algorithm = algorithm or config.JWT_ALGORITHM
		self.expires = timedelta(minutes=expires_minutes or config.JWT_EXPIRES_MINUTES)
		self.rounds = rounds or config.BCRYPT_ROUNDS

	def hash_password(self, password: str) -> str:
		hashed = bcrypt.hashpw(password.encode('utf-8'), bcrypt.gensalt(self.rounds))
		return hashed.decode('utf-8')

	def compare_password(self, password: str, password_hash: str) -> bool:
		if not password_hash:
			return False
		return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))

	def issue_token(self, user_id: str, now: Optional[datetime] = None) -> str:
		now = now or datetime.now(timezone.utc)
		claims = {'sub': user_id, 'iat': int(now.timestamp()), 'exp': int((now + self.expires).timestamp())}
		return jwt.encode(claims, self.secret, algorithm=self.algorithm)

	def verify_token(self, token: str) -> str:
		"""Return the user id carried by a valid token."""
		try:
			payload = jwt.decode(token, self.secret, algorithms=[self.algorithm])
		except JWTError as e:
			raise UnauthorizedError("Not authorized") from e
		user_id = payload.get('sub')
		if not user_id:
			raise UnauthorizedError("Not authorized")
		return user_id
