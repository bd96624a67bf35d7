from functools import lru_cache

from pydantic import BaseModel, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class SegmentationConfig(BaseModel):
    conflict_lookahead_slices: int = 20
    timeout_sec: int = 60  # No boss activity for this long = silent wipe
    min_timeout_fight_sec: int = 30
    min_participant_slices: int = 5
    min_add_slices: int = 10  # Second chance for disappearing bosses
    wipe_scan_sec: int = 180
    wipe_gap_sec: int = 35
    add_rescan_sec: int = 60
    sync_window_sec: int = 60
    sync_settle_sec: int = 5
    sync_min_active_units: int = 3
    sync_gap_sec: int = 15
    sync_gap_window_sec: int = 30
    sync_activity_threshold: int = 1000


class TrashConfig(BaseModel):
    min_duration_sec: int = 120
    busy_slice_units: int = 10  # A slice touching more units than this is "busy"
    min_busy_slices: int = 10
    min_damage: int = 100000


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
    )

    debug: bool = False
    log_level: str = "INFO"
    save_trash: bool = False
    segmentation: SegmentationConfig = SegmentationConfig()
    trash: TrashConfig = TrashConfig()

    @model_validator(mode="after")
    def _check_windows(self):
        if self.segmentation.conflict_lookahead_slices < 1:
            raise ValueError(
                "SEGMENTATION__CONFLICT_LOOKAHEAD_SLICES must be >= 1"
            )
        if self.segmentation.timeout_sec < 1:
            raise ValueError("SEGMENTATION__TIMEOUT_SEC must be >= 1")
        if self.segmentation.sync_window_sec < 1:
            raise ValueError("SEGMENTATION__SYNC_WINDOW_SEC must be >= 1")
        return self


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
