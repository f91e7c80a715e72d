"""
Error taxonomy shared by the core components and the HTTP layer.
Each error carries the HTTP status it maps to and a human-readable message.
"""

from typing import Dict, Optional


class CinebaseError(Exception):
	"""Base class for every error the service reports to callers."""
	status_code = 500

	def __init__(self, message: str):
		super().__init__(message)
		self.message = message


class NotFoundError(CinebaseError):
	status_code = 404


class ValidationError(CinebaseError):
	"""Missing or out-of-range input; `errors` maps field name -> problem."""
	status_code = 400

	def __init__(self, message: str = "Validation error", errors: Optional[Dict[str, str]] = None):
		super().__init__(message)
		self.errors = errors or {}


class UnauthorizedError(CinebaseError):
	status_code = 401


class ForbiddenError(CinebaseError):
	status_code = 403


class PreconditionFailedError(CinebaseError):
	"""The request is well formed but the current state does not allow it."""
	status_code = 412

	def __init__(self, message: str, status_code: Optional[int] = None):
		super().__init__(message)
		if status_code is not None:
			self.status_code = status_code


class InternalError(CinebaseError):
	status_code = 500
