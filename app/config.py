import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

ENVIRONMENT = os.getenv("ENVIRONMENT", "development")

# Storage Configuration
# "csv" keeps one flat file per form type, "sql" uses DATABASE_URL
DATA_DIR = Path(os.getenv("DATA_DIR", str(Path(__file__).resolve().parent.parent / "data")))
STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "csv").lower()
DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///{DATA_DIR / 'submissions.db'}")

# Admin credentials - CRITICAL: No default password in production
ADMIN_USERNAME = os.getenv("ADMIN_USERNAME", "admin")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD")
if not ADMIN_PASSWORD:
    import warnings

    warnings.warn(
        "ADMIN_PASSWORD not set! Using insecure default - DO NOT USE IN PRODUCTION",
        RuntimeWarning,
        stacklevel=2,
    )
    ADMIN_PASSWORD = "changeme123"  # noqa: S105 - Dev fallback only

# Google reCAPTCHA Configuration
RECAPTCHA_SECRET_KEY = os.getenv("RECAPTCHA_SECRET_KEY")
RECAPTCHA_VERIFY_URL = os.getenv(
    "RECAPTCHA_VERIFY_URL", "https://www.google.com/recaptcha/api/siteverify"
)
CAPTCHA_TIMEOUT = float(os.getenv("CAPTCHA_TIMEOUT", "10"))

# SMTP Configuration (port 465 = implicit TLS, anything else = STARTTLS when enabled)
SMTP_HOST = os.getenv("SMTP_HOST")
SMTP_PORT = int(os.getenv("SMTP_PORT", "465"))
SMTP_USE_TLS = os.getenv("SMTP_USE_TLS", "true").lower() == "true"
SMTP_TIMEOUT = float(os.getenv("SMTP_TIMEOUT", "30"))
EMAIL_USER = os.getenv("EMAIL_USER")
EMAIL_PASS = os.getenv("EMAIL_PASS")
NOTIFY_EMAIL_TO = os.getenv("NOTIFY_EMAIL_TO", "clinic@gohealthalbania.com")

# Resend Email Configuration (fallback)
RESEND_API_KEY = os.getenv("RESEND_API_KEY")
EMAIL_FROM_ADDRESS = os.getenv("EMAIL_FROM_ADDRESS", "Website Form <noreply@gohealthalbania.com>")

# Appointment dates/times with an offset are shown in the clinic's local time
CLINIC_TIMEZONE = os.getenv("CLINIC_TIMEZONE", "Europe/Tirane")

# Returned for genuine and honeypot submissions alike
SUCCESS_MESSAGE = os.getenv("SUCCESS_MESSAGE", "Email inviata con successo!")

# CORS Configuration
ALLOWED_ORIGINS = os.getenv(
    "ALLOWED_ORIGINS", "https://lp.gohealthalbania.com,http://localhost:3000"
).split(",")

# Submission rate limiting (per client IP)
SUBMISSION_RATE_LIMIT = int(os.getenv("SUBMISSION_RATE_LIMIT", "10"))
SUBMISSION_RATE_WINDOW = int(os.getenv("SUBMISSION_RATE_WINDOW", "3600"))
REDIS_URL = os.getenv("REDIS_URL")
