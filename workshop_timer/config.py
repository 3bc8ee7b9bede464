import os
from dotenv import load_dotenv

load_dotenv(dotenv_path=".env")

# Remote JSON store (Firebase Realtime Database style REST endpoint)
TIMER_STORE_URL = os.getenv("TIMER_STORE_URL")
TIMER_STORE_TIMEOUT = float(os.getenv("TIMER_STORE_TIMEOUT", "5.0"))
TIMERS_PATH = "timers"

# Polling cadence
POLL_INTERVAL_SECONDS = float(os.getenv("POLL_INTERVAL_SECONDS", "1.0"))
TICK_INTERVAL_SECONDS = float(os.getenv("TICK_INTERVAL_SECONDS", "0.1"))

# Sharing
PUBLIC_BASE_URL = os.getenv("PUBLIC_BASE_URL")
QR_SERVICE_URL = os.getenv("QR_SERVICE_URL", "https://api.qrserver.com/v1/create-qr-code/")
QR_DEFAULT_SIZE = int(os.getenv("QR_DEFAULT_SIZE", "200"))
QR_ADMIN_SIZE = 180
ROOM_ID_LENGTH = 6

# Timer defaults
DEFAULT_TITLE = "Attività"
MIN_MINUTES = 1

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
