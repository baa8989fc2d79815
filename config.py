"""
Configuration for the Staffing & Assessment API
"""
import os
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Base directory
BASE_DIR = Path(__file__).parent

# Environment
APP_ENV = os.getenv("APP_ENV", "development")

# Database configuration
DATABASE_PATH = os.getenv("DATABASE_PATH", str(BASE_DIR / "data" / "staffing.db"))

# API configuration
API_HOST = os.getenv("API_HOST", "0.0.0.0")
API_PORT = int(os.getenv("API_PORT", "5000"))
API_RELOAD = os.getenv("API_RELOAD", "True").lower() == "true"

# CORS configuration
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "http://localhost:3000").split(",")

# Auth
JWT_SECRET = os.getenv("JWT_SECRET", "")
JWT_EXPIRE_HOURS = int(os.getenv("JWT_EXPIRE_HOURS", "24"))

# Listing endpoints
DEFAULT_PAGE_SIZE = int(os.getenv("DEFAULT_PAGE_SIZE", "10"))

# Match explanations (LLM rephrasing is optional)
ENABLE_LLM = os.getenv("ENABLE_LLM", "False").lower() == "true"  # Disabled by default

# LLM Provider settings
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY", "")
OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-3.5-turbo")
OPENAI_BASE_URL = os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1")

# Local LLM settings (for Ollama, LocalAI, etc.)
LOCAL_LLM_ENDPOINT = os.getenv("LOCAL_LLM_ENDPOINT", "http://localhost:11434/v1")
LOCAL_LLM_MODEL = os.getenv("LOCAL_LLM_MODEL", "llama2")

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Used only when APP_ENV is development and JWT_SECRET is unset
DEV_JWT_SECRET = "dev-only-secret-change-me"


def get_jwt_secret() -> str:
    """Return the signing secret, falling back to the dev secret locally"""
    if JWT_SECRET:
        return JWT_SECRET
    return DEV_JWT_SECRET


def validate_config():
    """Validate configuration"""
    if APP_ENV != "development" and not JWT_SECRET:
        raise ValueError(
            "JWT_SECRET is required outside development. "
            "Set it in environment variable or .env file"
        )
    if JWT_EXPIRE_HOURS <= 0:
        raise ValueError(f"Invalid JWT_EXPIRE_HOURS: {JWT_EXPIRE_HOURS}. Must be positive")

    return True
