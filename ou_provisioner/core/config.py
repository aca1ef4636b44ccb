import os
from typing import Optional
from datetime import timedelta


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes")


class Settings:
    """Application settings loaded from environment variables."""

    # App settings
    app_name: str = os.getenv("APP_NAME", "ou-provisioner")
    debug: bool = _env_bool("DEBUG", "true")

    # LDAP/AD Configuration (optional for testing)
    ldap_server: Optional[str] = os.getenv("LDAP_SERVER")
    ldap_port: int = int(os.getenv("LDAP_PORT", "389"))
    ldap_use_ssl: bool = _env_bool("LDAP_USE_SSL", "false")
    ldap_bind_dn: Optional[str] = os.getenv("LDAP_BIND_DN")
    ldap_bind_password: Optional[str] = os.getenv("LDAP_BIND_PASSWORD")
    # Empty means: ask the server for its defaultNamingContext
    ldap_search_base: Optional[str] = os.getenv("LDAP_SEARCH_BASE")
    ldap_connect_timeout: int = int(os.getenv("LDAP_CONNECT_TIMEOUT", "10"))
    ldap_receive_timeout: int = int(os.getenv("LDAP_RECEIVE_TIMEOUT", "30"))

    # JWT Configuration
    jwt_secret_key: str = os.getenv(
        "JWT_SECRET_KEY", "your-secret-key-change-in-production"
    )
    jwt_algorithm: str = os.getenv("JWT_ALGORITHM", "HS256")
    jwt_expiration_hours: int = int(os.getenv("JWT_EXPIRATION_HOURS", "24"))

    # Local API credentials for /auth/login
    local_auth_username: str = os.getenv("LOCAL_AUTH_USERNAME", "admin")
    local_auth_password: str = os.getenv("LOCAL_AUTH_PASSWORD", "admin")

    # Audit Logging
    audit_log_path: str = os.getenv("AUDIT_LOG_PATH", "logs/audit.jsonl")

    @classmethod
    def get_jwt_expiration(cls) -> timedelta:
        """Get JWT token expiration time."""
        return timedelta(hours=cls.jwt_expiration_hours)


settings = Settings()
