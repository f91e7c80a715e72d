import os
import sys
from pathlib import Path

# Tests never talk to MongoDB or start the daily thread
os.environ.setdefault("CINEBASE_STORE", "memory")
os.environ.setdefault("REMINDER_SCHEDULER_ENABLED", "false")

# Ensure the project root (api.py, cinebase/) is importable without installation
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
	sys.path.insert(0, str(ROOT))
