"""Configuration for the counseling platform client.

All settings come from the environment (or a local .env file) so the same
code runs against local, staging and production backends.
"""
import os
from dotenv import load_dotenv

load_dotenv()

# Backend API
API_BASE_URL = os.getenv("COUNSEL_API_BASE_URL", "http://localhost:8080/api/")
API_TOKEN = os.getenv("COUNSEL_API_TOKEN")

# HTTP resilience
REQUEST_TIMEOUT = float(os.getenv("COUNSEL_API_TIMEOUT", "15"))
MAX_RETRIES = int(os.getenv("COUNSEL_API_MAX_RETRIES", "3"))
BACKOFF_MULTIPLIER = float(os.getenv("COUNSEL_API_BACKOFF_MULTIPLIER", "1.0"))
RETRY_STATUS_CODES = [502, 503, 504]

# Circuit breaker
CIRCUIT_FAILURE_THRESHOLD = int(os.getenv("COUNSEL_CIRCUIT_FAILURE_THRESHOLD", "5"))
CIRCUIT_RESET_TIMEOUT = float(os.getenv("COUNSEL_CIRCUIT_RESET_TIMEOUT", "60"))

# Logging
LOG_LEVEL = os.getenv("COUNSEL_LOG_LEVEL", "INFO")

# Display defaults for records the backend leaves blank
DEFAULT_TEXT = "Not updated"
DEFAULT_SPECIALTY = "Psychological counseling"
DEFAULT_RATING = 5.0
DEFAULT_READ_TIME = "5 min read"
DEFAULT_VIEWS = "0 views"
