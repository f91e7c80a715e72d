"""
Notification dispatch.
Dispatchers deliver a NotificationPayload and report success as a bool; they may also raise.
"""

import smtplib  # email transport
from email.message import EmailMessage  # MIME message construction
from typing import Dict, List, Optional

from loguru import logger

from . import config
from .models import NotificationPayload


class NotificationDispatcher:
	"""Delivery contract used by the reminder scheduler."""

	def send(self, payload: NotificationPayload) -> bool:
		raise NotImplementedError


class EmailDispatcher(NotificationDispatcher):
	"""Sends payloads as plain-text email over SMTP with STARTTLS."""

	def __init__(
		self,
		host: str = None,
		port: int = None,
		username: str = None,
		password: str = None,
		sender: str = None,
		timeout: float = None,
	):
		self.host = host or config.SMTP_HOST
		self.port = port or config.SMTP_PORT
		self.username = config.SMTP_USER if username is None else username
		self.password = config.SMTP_PASSWORD if password is None else password
		self.sender = sender or config.EMAIL_FROM
		self.timeout = timeout or config.SMTP_TIMEOUT

	def build_message(self, payload: NotificationPayload) -> EmailMessage:
		message = EmailMessage()
		message['From'] = self.sender
		message['To'] = payload.to
		message['Subject'] = payload.subject
		message.set_content(payload.body)
		return message

	def send(self, payload: NotificationPayload) -> bool:
		message = self.build_message(payload)
		with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
			smtp.starttls()
			if self.username:
				smtp.login(self.username, self.password)
			smtp.send_message(message)
		logger.info(f"[Notify] Email sent to {payload.to} | subject='{payload.subject}'")
		return True


class DashboardDispatcher(NotificationDispatcher):
	"""
	Records in-app dashboard notifications.
	Events are kept in memory per recipient and logged; there is no push transport.
	"""

	def __init__(self):
		self.events: Dict[str, List[NotificationPayload]] = {}

	def send(self, payload: NotificationPayload) -> bool:
		self.events.setdefault(payload.to, []).append(payload)
		logger.info(f"[Notify] Dashboard notification for {payload.to}: {payload.subject}")
		return True

	def events_for(self, recipient: str) -> List[NotificationPayload]:
		return list(self.events.get(recipient, []))


class RoutingDispatcher(NotificationDispatcher):
	"""Chooses a dispatcher by payload.channel; unknown channels fall back to `default`."""

	def __init__(self, routes: Dict[str, NotificationDispatcher], default: Optional[str] = 'email'):
		self.routes = dict(routes)
		self.default = default

	def send(self, payload: NotificationPayload) -> bool:
		dispatcher = self.routes.get(payload.channel) or self.routes.get(self.default)
		if dispatcher is None:
			logger.warning(f"[Notify] No dispatcher for channel '{payload.channel}'")
			return False
		return dispatcher.send(payload)


def build_default_dispatcher() -> RoutingDispatcher:
	return RoutingDispatcher({'email': EmailDispatcher(), 'dashboard': DashboardDispatcher()})
