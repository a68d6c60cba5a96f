import os

# Database Configuration
# Uses default credentials for local Docker Compose setup
DB_URL = os.getenv("DATABASE_URL", "postgres://user:password@db:5432/cafe_db")

# Application Metadata
PROJECT_NAME = "Cafe Order Backend"
VERSION = "1.0.0"

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# Outbox Poller Configuration (delivers notifications after commit)
POLLING_INTERVAL = int(os.getenv("POLLING_INTERVAL", 1)) # Poller checks for new events every N seconds
MAX_ATTEMPTS = int(os.getenv("MAX_ATTEMPTS", 5)) # Max retries for an event
BATCH_SIZE = int(os.getenv("BATCH_SIZE", 50)) # How many events to fetch per poll

# Comma separated list of notifier channels, e.g. "log,line,onesignal"
NOTIFICATION_CHANNELS = [
    c.strip() for c in os.getenv("NOTIFICATION_CHANNELS", "log").split(",") if c.strip()
]
