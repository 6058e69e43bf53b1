import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./hello_miami.db")

# Clerk Configuration
# Issuer is the Frontend API URL shown in the Clerk dashboard (e.g. https://clerk.hellomiami.community)
CLERK_ISSUER = os.getenv("CLERK_ISSUER")
CLERK_JWKS_URL = os.getenv(
    "CLERK_JWKS_URL", f"{CLERK_ISSUER}/.well-known/jwks.json" if CLERK_ISSUER else None
)

# Public site URL used for dashboard links in emails
APP_URL = os.getenv("APP_URL", "https://hellomiami.community")

# Resend Email Configuration
RESEND_API_KEY = os.getenv("RESEND_API_KEY")
EMAIL_FROM_ADDRESS = os.getenv("EMAIL_FROM_ADDRESS", "hello_miami <noreply@hellomiami.community>")

# Comma-separated organizer addresses that receive new demo booking alerts
APP_ADMIN_EMAILS = os.getenv("APP_ADMIN_EMAILS", "")

ALLOWED_ORIGINS = os.getenv(
    "ALLOWED_ORIGINS",
    "https://hellomiami.community,https://www.hellomiami.community,http://localhost:5173",
).split(",")
