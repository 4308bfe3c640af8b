"""
Configuration Management for the Profile Harvester

This module provides centralized configuration management with:
- Environment variable loading
- Type validation
- Sensible defaults
- Configuration documentation
"""

import os
from pathlib import Path
from typing import List, Optional
from dotenv import load_dotenv


FALSY = {"0", "false", "False", "no"}


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default) not in FALSY


def _env_list(name: str) -> List[str]:
    raw = os.getenv(name, "")
    return [item.strip() for item in raw.split(",") if item.strip()]


class Config:
    """
    Application configuration loaded from environment variables.

    All configuration is read from configs/.env file or environment variables.
    See configs/.env.example for documentation of all settings.
    """

    def __init__(self, env_path: Optional[Path] = None):
        """
        Initialize configuration from environment.

        Args:
            env_path: Path to .env file (default: configs/.env)
        """
        if env_path is None:
            env_path = Path("configs/.env")

        # Load environment variables
        load_dotenv(dotenv_path=env_path, override=True)

        # === Authentication Configuration ===
        self.li_at: str = os.getenv("LINKEDIN_LI_AT", "").strip()

        # === Rate-Limit Ledger Configuration ===
        self.ledger_file: Path = Path(os.getenv("LEDGER_FILE", "data/rate_limit.json"))
        self.daily_limit: int = int(os.getenv("DAILY_LIMIT", "40"))
        self.backoff_base_minutes: float = float(os.getenv("BACKOFF_BASE_MINUTES", "30"))
        self.backoff_multiplier: float = float(os.getenv("BACKOFF_MULTIPLIER", "2.0"))
        self.min_delay_ms: int = int(os.getenv("MIN_DELAY_MS", "3000"))
        self.max_delay_ms: int = int(os.getenv("MAX_DELAY_MS", "8000"))
        self.company_delay_factor: float = float(os.getenv("COMPANY_DELAY_FACTOR", "2.0"))

        # === Browser Configuration ===
        self.browser_profile_dir: Path = Path(os.getenv("BROWSER_PROFILE_DIR", "data/browser-profile"))
        self.headless: bool = _env_bool("HEADLESS", "1")
        self.viewport_width: int = int(os.getenv("VIEWPORT_WIDTH", "1920"))
        self.viewport_height: int = int(os.getenv("VIEWPORT_HEIGHT", "1080"))
        self.nav_timeout_ms: int = int(os.getenv("NAV_TIMEOUT_MS", "45000"))
        self.detour_every: int = int(os.getenv("DETOUR_EVERY", "5"))
        self.detour_url: str = os.getenv("DETOUR_URL", "https://www.linkedin.com/feed/")
        self.validation_url: str = os.getenv("VALIDATION_URL", "https://www.linkedin.com/feed/")

        # === Proxy Configuration ===
        self.proxy_enabled: bool = os.getenv("PROXY_ENABLED", "0") in {"1", "true", "True"}
        self.proxy_type: str = os.getenv("PROXY_TYPE", "custom").lower()
        self.proxy_host: Optional[str] = os.getenv("PROXY_HOST")
        self.proxy_port: Optional[str] = os.getenv("PROXY_PORT")
        self.proxy_username: Optional[str] = os.getenv("PROXY_USERNAME")
        self.proxy_password: Optional[str] = os.getenv("PROXY_PASSWORD")
        self.proxy_country: str = os.getenv("PROXY_COUNTRY", "")
        self.proxy_sticky_session: bool = _env_bool("PROXY_STICKY_SESSION", "1")
        self.custom_proxy_url: Optional[str] = os.getenv("CUSTOM_PROXY_URL")

        # === Filtering Configuration ===
        self.company_match_ratio: float = float(os.getenv("COMPANY_MATCH_RATIO", "0.5"))
        self.role_match_ratio: float = float(os.getenv("ROLE_MATCH_RATIO", "0.5"))
        self.location_gate_enabled: bool = os.getenv("LOCATION_GATE_ENABLED", "0") in {"1", "true", "True"}
        self.location_gate_strict: bool = _env_bool("LOCATION_GATE_STRICT", "1")
        self.location_keywords: List[str] = _env_list("LOCATION_KEYWORDS")

        # === Extraction Configuration ===
        self.extraction_merge: bool = os.getenv("EXTRACTION_MERGE", "0") in {"1", "true", "True"}

        # === Sources and Sinks ===
        self.companies_file: Path = Path(os.getenv("COMPANIES_FILE", "configs/companies.txt"))
        self.roles_file: Path = Path(os.getenv("ROLES_FILE", "configs/roles.txt"))
        self.checkpoint_file: Path = Path(os.getenv("CHECKPOINT_FILE", "data/checkpoints.json"))
        self.stale_after_months: int = int(os.getenv("STALE_AFTER_MONTHS", "3"))
        self.candidate_sink: str = os.getenv("CANDIDATE_SINK", "jsonl").lower()
        self.candidates_file: Path = Path(os.getenv("CANDIDATES_FILE", "out/candidates.jsonl"))

        # === Supabase Configuration ===
        self.supabase_enabled: bool = _env_bool("SUPABASE_ENABLED", "1")
        self.supabase_url: Optional[str] = os.getenv("SUPABASE_URL")
        self.supabase_service_role_key: Optional[str] = os.getenv("SUPABASE_SERVICE_ROLE_KEY")
        self.supabase_candidates_table: str = os.getenv("SUPABASE_CANDIDATES_TABLE", "candidates")
        self.error_log_table: str = os.getenv("ERROR_LOG_TABLE", "error_logs")

        # === Logging Configuration ===
        self.log_level: str = os.getenv("LOG_LEVEL", "INFO")
        self.log_dir: Path = Path(os.getenv("LOG_DIR", "logs"))

    @property
    def min_delay_s(self) -> float:
        return self.min_delay_ms / 1000.0

    @property
    def max_delay_s(self) -> float:
        return self.max_delay_ms / 1000.0

    def validate(self) -> None:
        """
        Validate required configuration is present.

        Raises:
            ValueError: If required configuration is missing or invalid
        """
        errors = []

        # Check required credential
        if not self.li_at:
            errors.append("LINKEDIN_LI_AT is required")
        elif len(self.li_at) < 10:
            errors.append("LINKEDIN_LI_AT looks invalid (too short)")

        # Validate numeric ranges
        if self.daily_limit < 1 or self.daily_limit > 100:
            errors.append(f"DAILY_LIMIT must be between 1 and 100, got {self.daily_limit}")

        if self.min_delay_ms < 1000:
            errors.append(f"MIN_DELAY_MS must be at least 1000, got {self.min_delay_ms}")

        if self.max_delay_ms < self.min_delay_ms:
            errors.append(f"MAX_DELAY_MS ({self.max_delay_ms}) cannot be less than MIN_DELAY_MS ({self.min_delay_ms})")

        if self.backoff_base_minutes <= 0:
            errors.append(f"BACKOFF_BASE_MINUTES must be positive, got {self.backoff_base_minutes}")

        if self.backoff_multiplier < 1:
            errors.append(f"BACKOFF_MULTIPLIER must be at least 1, got {self.backoff_multiplier}")

        if self.nav_timeout_ms <= 0:
            errors.append(f"NAV_TIMEOUT_MS must be positive, got {self.nav_timeout_ms}")

        if self.detour_every < 1:
            errors.append(f"DETOUR_EVERY must be at least 1, got {self.detour_every}")

        for name in ("company_match_ratio", "role_match_ratio"):
            value = getattr(self, name)
            if not 0 < value <= 1:
                errors.append(f"{name.upper()} must be in (0, 1], got {value}")

        if self.candidate_sink not in {"jsonl", "supabase"}:
            errors.append(f"CANDIDATE_SINK must be 'jsonl' or 'supabase', got {self.candidate_sink}")

        # Check Supabase config if it is the chosen sink
        if self.candidate_sink == "supabase":
            if not self.supabase_url:
                errors.append("SUPABASE_URL is required when CANDIDATE_SINK=supabase")
            if not self.supabase_service_role_key:
                errors.append("SUPABASE_SERVICE_ROLE_KEY is required when CANDIDATE_SINK=supabase")

        if self.proxy_enabled:
            if self.proxy_type not in {"custom", "brightdata", "oxylabs"}:
                errors.append(f"PROXY_TYPE must be custom, brightdata or oxylabs, got {self.proxy_type}")
            elif self.proxy_type == "custom" and not self.custom_proxy_url:
                errors.append("CUSTOM_PROXY_URL is required when PROXY_TYPE=custom")

        if errors:
            raise ValueError(f"Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors))

    def __repr__(self) -> str:
        """Return string representation of config (without secrets)."""
        return (
            f"Config(\n"
            f"  li_at={'***' if self.li_at else 'NOT SET'},\n"
            f"  daily_limit={self.daily_limit},\n"
            f"  delay_ms=({self.min_delay_ms}, {self.max_delay_ms}),\n"
            f"  headless={self.headless},\n"
            f"  proxy_enabled={self.proxy_enabled},\n"
            f"  candidate_sink={self.candidate_sink},\n"
            f"  supabase_url={self.supabase_url or 'NOT SET'},\n"
            f"  log_level={self.log_level}\n"
            f")"
        )


# Global configuration instance (lazy-loaded)
_config: Optional[Config] = None


def get_config(env_path: Optional[Path] = None) -> Config:
    """
    Get the global configuration instance.

    Args:
        env_path: Optional path to .env file (only used on first call)

    Returns:
        Global Config instance

    Example:
        >>> config = get_config()
        >>> print(config.daily_limit)
    """
    global _config
    if _config is None:
        _config = Config(env_path=env_path)
    return _config


def validate_config(env_path: Optional[Path] = None) -> None:
    """
    Validate configuration and raise error if invalid.

    This should be called at application startup to fail fast
    if configuration is incorrect.

    Args:
        env_path: Optional path to .env file

    Raises:
        ValueError: If configuration is invalid
    """
    config = get_config(env_path=env_path)
    config.validate()
