"""Configuration for the NextDNS dashboard proxy.

All settings are startup-only and configured via environment variables.
"""

import os

# Server settings (startup-only)
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "8080"))

# Debug mode (enables auto-reload in development)
DEBUG = os.getenv("DEBUG", "false").lower() in ("true", "1", "yes")

# Root log level (DEBUG, INFO, WARNING, ERROR)
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Upstream NextDNS API
# The API key never leaves the server; a missing key is logged at startup and
# upstream calls fail lazily with whatever NextDNS answers for an empty key.
NEXTDNS_API_KEY = os.getenv("NEXTDNS_API_KEY")
NEXTDNS_API_BASE = os.getenv("NEXTDNS_API_BASE", "https://api.nextdns.io")
NEXTDNS_TIMEOUT = float(os.getenv("NEXTDNS_TIMEOUT", "10"))

# CORS settings
# Comma-separated list of allowed origins (e.g., "https://dash.example.com,https://admin.example.com")
CORS_ORIGINS = os.getenv("CORS_ORIGINS", "")

# Allow all origins (development mode) - credentials will be DISABLED in this mode
CORS_ALLOW_ALL = os.getenv("CORS_ALLOW_ALL", "false").lower() in ("true", "1", "yes")

# Allow credentials (cookies, authorization headers) - only works with specific origins
CORS_ALLOW_CREDENTIALS = os.getenv("CORS_ALLOW_CREDENTIALS", "true").lower() in ("true", "1", "yes")
