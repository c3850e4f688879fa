"""Project configuration and paths.

Loads settings from config/settings.yaml and environment variables.
"""

from __future__ import annotations

import os
from decimal import Decimal
from pathlib import Path

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field

# === Paths ===
PROJECT_ROOT = Path(__file__).parent.parent.parent
CONFIG_DIR = PROJECT_ROOT / "config"
DATA_DIR = PROJECT_ROOT / "data"

# Load .env from project root
load_dotenv(PROJECT_ROOT / ".env")


class FeeSchedule(BaseModel):
    """Fee rates applied by the pricing calculator (EUR)."""
    service_fee_per_line: Decimal = Decimal("1.50")
    quality_inspection_per_unit: Decimal = Decimal("6.99")
    package_consolidation_flat: Decimal = Decimal("5.00")
    default_item_weight_kg: Decimal = Decimal("0.5")
    free_weight_kg: Decimal = Decimal("1")


class StoreSettings(BaseModel):
    """Local persisted-state settings."""
    database_path: str = str(DATA_DIR / "storefront_state.db")

    @property
    def database_abs_path(self) -> Path:
        """Resolve database path relative to project root."""
        p = Path(self.database_path)
        if p.is_absolute():
            return p
        return PROJECT_ROOT / p


class SupportSettings(BaseModel):
    """Remote support backend (Supabase) settings."""
    supabase_url: str = ""
    supabase_key: str = ""
    realtime_enabled: bool = True


class PriceAlertSettings(BaseModel):
    """Price-alert feed settings."""
    check_interval_seconds: float = 300.0
    random_walk_step: Decimal = Decimal("10")
    price_floor: Decimal = Decimal("1")
    suggested_target_ratio: Decimal = Decimal("0.9")


class Settings(BaseModel):
    """Top-level application settings."""
    fees: FeeSchedule = Field(default_factory=FeeSchedule)
    store: StoreSettings = Field(default_factory=StoreSettings)
    support: SupportSettings = Field(default_factory=SupportSettings)
    price_alerts: PriceAlertSettings = Field(default_factory=PriceAlertSettings)
    currency_symbol: str = "€"
    log_level: str = "INFO"

    @classmethod
    def load(cls, settings_path: Path | None = None) -> Settings:
        """Load config/settings.yaml, falling back to defaults, then apply env overrides."""
        settings_path = settings_path or CONFIG_DIR / "settings.yaml"
        data: dict = {}
        if settings_path.exists():
            with open(settings_path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        settings = cls(**data)
        settings.apply_env()
        return settings

    def apply_env(self) -> None:
        """Override file values from the environment."""
        if path := os.getenv("DATABASE_PATH"):
            self.store.database_path = path
        if url := os.getenv("SUPABASE_URL") or os.getenv("VITE_SUPABASE_URL"):
            self.support.supabase_url = url
        if key := os.getenv("SUPABASE_ANON_KEY") or os.getenv("VITE_SUPABASE_ANON_KEY"):
            self.support.supabase_key = key
        if interval := os.getenv("PRICE_CHECK_INTERVAL_SECONDS"):
            self.price_alerts.check_interval_seconds = float(interval)
        if level := os.getenv("LOG_LEVEL"):
            self.log_level = level.upper()


# Singleton settings instance
settings = Settings.load()
