from dotenv import load_dotenv
import os

load_dotenv()


def _env(*names: str, default: str = "") -> str:
    """First variable that is set, in order"""
    for name in names:
        value = os.getenv(name)
        if value is not None:
            return value
    return default


def _flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Settings:
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./truthline.db")
    SECRET_KEY = os.getenv("SECRET_KEY", "your-secret-key-change-this-in-production")
    ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "30"))
    ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "http://localhost:3000,http://localhost:5173")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Credential for the trust-score backend function
    SERVICE_ROLE_KEY = _env("TRUTHLINE_SERVICE_ROLE_KEY", "SERVICE_ROLE_KEY")

    ENFORCE_FINALIZATION_GUARD = _flag("ENFORCE_FINALIZATION_GUARD", True)
    REJECT_DUPLICATE_VERIFICATIONS = _flag("REJECT_DUPLICATE_VERIFICATIONS", False)
    REJECT_SELF_VERIFICATION = _flag("REJECT_SELF_VERIFICATION", False)
    TRUST_UPDATE_MAX_RETRIES = int(os.getenv("TRUST_UPDATE_MAX_RETRIES", "3"))

    @property
    def origins(self):
        return [o.strip() for o in self.ALLOWED_ORIGINS.split(",") if o.strip()]


settings = Settings()
