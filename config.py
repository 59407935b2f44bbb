import os
import yaml

ROOT_PATH = os.path.dirname(__file__)
CONFIG_FILE_PATH = os.path.join(ROOT_PATH, "env.yaml")

if os.path.exists(CONFIG_FILE_PATH):
    with open(CONFIG_FILE_PATH, "r") as r_file:
        data = yaml.safe_load(r_file) or dict()
else:
    data = dict()


class ApplicationConfig:
    DB_URI = data.get("DB_URI", "sqlite+aiosqlite:///./rental.db")
    API_PREFIX = data.get("API_PREFIX", "/api")
    API_PORT = data.get("API_PORT", 8000)
    API_HOST = data.get("API_HOST", "0.0.0.0")
    CORS_ORIGINS = data.get("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = data.get("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")
    AUTH_DISABLED = bool(data.get("AUTH_DISABLED", False))
    JWT_SECRET = data.get("JWT_SECRET", "change-me")
    JWT_ALGORITHM = data.get("JWT_ALGORITHM", "HS256")
    ENABLE_LOGGING_MIDDLEWARE = bool(data.get("ENABLE_LOGGING_MIDDLEWARE", 1))
    ENABLE_SENTRY = data.get("ENABLE_SENTRY", 0)
    DSN_SENTRY = data.get("DSN_SENTRY", "")
    SENTRY_ENVIRONMENT = data.get("SENTRY_ENVIRONMENT", "dev")

    # Payment processor
    STRIPE_SECRET_KEY = data.get("STRIPE_SECRET_KEY", "")
    DEFAULT_CURRENCY = data.get("DEFAULT_CURRENCY", "usd")

    # E-signature providers
    DOCUSIGN_INTEGRATION_KEY = data.get("DOCUSIGN_INTEGRATION_KEY", "")
    DOCUSIGN_USER_ID = data.get("DOCUSIGN_USER_ID", "")
    DOCUSIGN_PRIVATE_KEY = data.get("DOCUSIGN_PRIVATE_KEY", "")
    DOCUSIGN_BASE_URL = data.get("DOCUSIGN_BASE_URL", "https://demo.docusign.net/restapi")
    BOLDSIGN_API_KEY = data.get("BOLDSIGN_API_KEY", "")
    BOLDSIGN_BASE_URL = data.get("BOLDSIGN_BASE_URL", "https://api.boldsign.com")

    # Identity verification
    VERIFF_API_KEY = data.get("VERIFF_API_KEY", "")
    VERIFF_API_SECRET = data.get("VERIFF_API_SECRET", "")
    VERIFF_BASE_URL = data.get("VERIFF_BASE_URL", "https://stationapi.veriff.com")

    # Document storage: "s3" in deployed environments, "local" for development and tests
    DOCUMENT_STORAGE_BACKEND = data.get("DOCUMENT_STORAGE_BACKEND", "s3")
    S3_BUCKET_NAME = data.get("S3_BUCKET_NAME", "")
    S3_PUBLIC_BASE_URL = data.get("S3_PUBLIC_BASE_URL", "")
    AWS_REGION = data.get("AWS_REGION", "")
    AWS_ACCESS_KEY_ID = data.get("AWS_ACCESS_KEY_ID", "")
    AWS_SECRET_ACCESS_KEY = data.get("AWS_SECRET_ACCESS_KEY", "")
    DOCUMENT_STORAGE_DIR = data.get("DOCUMENT_STORAGE_DIR", os.path.join(ROOT_PATH, "storage"))
    DOCUMENT_PUBLIC_BASE_URL = data.get("DOCUMENT_PUBLIC_BASE_URL", "http://localhost:8000/files")

    # Dashboard
    DASHBOARD_CACHE_TTL_SECONDS = data.get("DASHBOARD_CACHE_TTL_SECONDS", 60)
    DEFAULT_TIMEZONE = data.get("DEFAULT_TIMEZONE", "Europe/London")

    # Notifications
    NOTIFICATION_WEBHOOK_URL = data.get("NOTIFICATION_WEBHOOK_URL", None)

    # Installment processing
    INSTALLMENT_PROCESSING_ENABLED = bool(data.get("INSTALLMENT_PROCESSING_ENABLED", True))
    INSTALLMENT_PROCESSING_INTERVAL_SECONDS = data.get("INSTALLMENT_PROCESSING_INTERVAL_SECONDS", 3600)

    # Allocation reconciliation
    RECONCILIATION_ENABLED = bool(data.get("RECONCILIATION_ENABLED", True))
    RECONCILIATION_INTERVAL_SECONDS = data.get("RECONCILIATION_INTERVAL_SECONDS", 86400)  # Daily

    # Invoice PDF header
    COMPANY_NAME = data.get("COMPANY_NAME", "Drive Rentals")
    COMPANY_ADDRESS = data.get("COMPANY_ADDRESS", "1 Fleet Street, London")
