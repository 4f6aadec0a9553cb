from pydantic import BaseModel, Field


class StudioRules(BaseModel):
    name: str = "Studio"
    timezone: str = "America/New_York"
    amc_target: int | None = Field(default=None, ge=0)


class LifecycleRules(BaseModel):
    week_window_days: int = Field(default=7, ge=0)


class LedgerRules(BaseModel):
    auto_churn_prefix: str = "Auto: Churn"
    churn_id_prefix_length: int = Field(default=8, ge=1, le=36)
    default_author: str = "System"


class StorageRules(BaseModel):
    db_path: str = "studio.db"
    migrations_dir: str = "migrations"


class LoggingRules(BaseModel):
    level: str = "INFO"


class Rules(BaseModel):
    studio: StudioRules
    lifecycle: LifecycleRules = LifecycleRules()
    ledger: LedgerRules = LedgerRules()
    storage: StorageRules = StorageRules()
    logging: LoggingRules = LoggingRules()
