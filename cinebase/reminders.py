"""
Release reminders.

ReminderService validates and stores reminders for unreleased movies.
ReminderScheduler runs once a day, notifies users whose reminder is due,
and marks each delivered reminder as sent.
"""

import threading  # background daily loop
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import Callable, List, Optional

from loguru import logger

from . import config
from .errors import ForbiddenError, PreconditionFailedError, ValidationError
from .models import Movie, NotificationPayload, Reminder, User, new_id
from .notifications import NotificationDispatcher
from .repository import Catalog

NOTIFICATION_TYPES = ('email', 'dashboard')

Clock = Callable[[], datetime]


def reminder_date_for(movie: Movie) -> date:
	"""One day before the movie's release date."""
	return movie.release_date - timedelta(days=1)


def build_payload(reminder: Reminder, user: User, movie: Movie) -> NotificationPayload:
	subject = f"{movie.title} is releasing tomorrow!"
	body = (
		f"Hello {user.username},\n\n"
		f"This is a friendly reminder that the movie \"{movie.title}\" is releasing tomorrow "
		f"({movie.release_date.isoformat()}). Don't miss it!\n\n"
		f"Best regards,\nThe cinebase team"
	)
	return NotificationPayload(
		to=user.email,
		subject=subject,
		body=body,
		channel=reminder.notification_type,
		reminder_id=reminder.id,
	)


class ReminderService:
	"""Create, re-target, delete and list a user's release reminders."""

	def __init__(self, catalog: Catalog, clock: Clock = datetime.now):
		self.catalog = catalog
		self.clock = clock

	def _ensure_unreleased(self, movie: Movie):
		if movie.release_date is None:
			raise ValidationError(errors={'movie_id': "Movie has no release date"})
		# release_date is compared at midnight, so a movie releasing today counts as released
		if datetime.combine(movie.release_date, time.min) < self.clock():
			raise PreconditionFailedError("Movie has already been released.", status_code=400)

	def _check_type(self, notification_type: str):
		if notification_type not in NOTIFICATION_TYPES:
			raise ValidationError(errors={'notification_type': f"Must be one of {', '.join(NOTIFICATION_TYPES)}"})

	def create_reminder(self, user_id: str, movie_id: str, notification_type: str = 'email') -> Reminder:
		self._check_type(notification_type)
		self.catalog.find_user_by_id(user_id)
		movie = self.catalog.find_movie_by_id(movie_id)
		self._ensure_unreleased(movie)

		reminder = Reminder(
			id=new_id(),
			user=user_id,
			movie=movie_id,
			reminder_date=reminder_date_for(movie),
			notification_type=notification_type,
		)
		self.catalog.insert_reminder(reminder)
		logger.info(f"[Reminders] Created {reminder.id} for '{movie.title}' on {reminder.reminder_date}")
		return reminder

	def update_reminder(
		self,
		reminder_id: str,
		user_id: str,
		movie_id: Optional[str] = None,
		notification_type: Optional[str] = None,
	) -> Reminder:
		"""Re-target a reminder; the date is recomputed and the reminder becomes pending again."""
		reminder = self._owned(reminder_id, user_id)
		if notification_type is not None:
			self._check_type(notification_type)
			reminder.notification_type = notification_type

		movie = self.catalog.find_movie_by_id(movie_id or reminder.movie)
		self._ensure_unreleased(movie)
		reminder.movie = movie.id
		reminder.reminder_date = reminder_date_for(movie)
		reminder.sent = False
		self.catalog.save_reminder(reminder)
		logger.info(f"[Reminders] Updated {reminder.id} -> '{movie.title}' on {reminder.reminder_date}")
		return reminder

	def delete_reminder(self, reminder_id: str, user_id: str):
		self._owned(reminder_id, user_id)
		self.catalog.delete_reminder(reminder_id)
		logger.info(f"[Reminders] Deleted {reminder_id}")

	def reminders_for_user(self, user_id: str) -> List[Reminder]:
		return self.catalog.find_reminders_for_user(user_id)

	def _owned(self, reminder_id: str, user_id: str) -> Reminder:
		reminder = self.catalog.find_reminder_by_id(reminder_id)
		if reminder.user != user_id:
			raise ForbiddenError("You can only change your own reminders")
		return reminder


@dataclass
class ReminderRunReport:
	run_date: date
	sent: List[str] = field(default_factory=list)  # reminder ids
	failed: List[str] = field(default_factory=list)  # reminder ids

	@property
	def due(self) -> int:
		return len(self.sent) + len(self.failed)


class ReminderScheduler:
	"""
	Daily reminder job.
	start() launches a daemon thread that sleeps until the configured wall-clock
	time and then calls run_once(); stop() wakes and joins it. run_once() can be
	called directly with any date, which is how tests drive it.
	"""

	def __init__(
		self,
		catalog: Catalog,
		dispatcher: NotificationDispatcher,
		clock: Clock = datetime.now,
		run_hour: int = None,
		run_minute: int = None,
	):
		self.catalog = catalog
		self.dispatcher = dispatcher
		self.clock = clock
		self.run_at = time(
			config.REMINDER_RUN_HOUR if run_hour is None else run_hour,
			config.REMINDER_RUN_MINUTE if run_minute is None else run_minute,
		)
		self._stop = threading.Event()
		self._thread: Optional[threading.Thread] = None

	def run_once(self, today: Optional[date] = None) -> ReminderRunReport:
		"""Dispatch every due reminder; one failure never stops the rest of the batch."""
		today = today or self.clock().date()
		report = ReminderRunReport(run_date=today)
		reminders = self.catalog.find_due_reminders(today)
		logger.info(f"[Reminders] Daily check for {today}: {len(reminders)} due")

		for reminder in reminders:
			try:
				user = self.catalog.find_user_by_id(reminder.user)
				movie = self.catalog.find_movie_by_id(reminder.movie)
				payload = build_payload(reminder, user, movie)
				delivered = self.dispatcher.send(payload)
			except Exception:
				logger.exception(f"[Reminders] Dispatch failed for reminder {reminder.id}")
				report.failed.append(reminder.id)
				continue

			if not delivered:
				logger.warning(f"[Reminders] Dispatcher reported failure for reminder {reminder.id}")
				report.failed.append(reminder.id)
				continue

			try:
				self.catalog.mark_sent(reminder.id)
			except Exception:
				# Delivered but not recorded; a later run may notify again
				logger.exception(f"[Reminders] Could not mark reminder {reminder.id} as sent")
				report.failed.append(reminder.id)
				continue
			report.sent.append(reminder.id)
			logger.info(f"[Reminders] Sent reminder {reminder.id} to {user.email} for '{movie.title}'")

		logger.info(f"[Reminders] Daily check complete: {len(report.sent)} sent, {len(report.failed)} failed")
		return report

	def seconds_until_next_run(self, now: Optional[datetime] = None) -> float:
		now = now or self.clock()
		next_run = datetime.combine(now.date(), self.run_at)
		if next_run <= now:
			next_run += timedelta(days=1)
		return (next_run - now).total_seconds()

	def _loop(self):
		while not self._stop.wait(self.seconds_until_next_run()):
			try:
				self.run_once()
			except Exception:
				# A failed query must not kill the thread; tomorrow's run still happens
				logger.exception("[Reminders] Daily reminder check failed")

	def start(self):
		if self._thread is not None and self._thread.is_alive():
			return
		self._stop.clear()
		self._thread = threading.Thread(target=self._loop, name='reminder-scheduler', daemon=True)
		self._thread.start()
		logger.info(f"[Reminders] Scheduler started; runs daily at {self.run_at.strftime('%H:%M')}")

	def stop(self, timeout: float = 5.0):
		self._stop.set()
		if self._thread is not None:
			self._thread.join(timeout)
			self._thread = None
		logger.info("[Reminders] Scheduler stopped")

	@property
	def running(self) -> bool:
		return self._thread is not None and self._thread.is_alive()
