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
    DB_URI = data.get("DB_URI", "sqlite+aiosqlite:///./rentx.db")
    API_PREFIX = data.get("API_PREFIX", "")
    API_PORT = data.get("API_PORT", 8000)
    API_HOST = data.get("API_HOST", "0.0.0.0")
    CORS_ORIGINS = data.get("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = data.get("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")
    OTP_WEBHOOK_URL = data.get("OTP_WEBHOOK_URL", "")
    OTP_WEBHOOK_TIMEOUT = float(data.get("OTP_WEBHOOK_TIMEOUT", 10))
    SESSION_STORE_PATH = data.get("SESSION_STORE_PATH", os.path.join(ROOT_PATH, ".rentx_storage.json"))
    SESSION_KEY = data.get("SESSION_KEY", "rentx_user_session")
    CREDENTIAL_SCHEME = data.get("CREDENTIAL_SCHEME", "bcrypt")
