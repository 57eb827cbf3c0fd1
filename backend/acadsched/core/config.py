from functools import lru_cache
import json
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


BACKEND_ENV_FILE = Path(__file__).resolve().parents[2] / ".env"

DEFAULT_LAB_ROOMS = [
    "COMP LAB 101",
    "COMP LAB 601",
    "COMP LAB 602",
    "COMP LAB 603",
    "COMP LAB 604",
    "COMP LAB 605",
    "COMP LAB 606",
    "COMP LAB 607",
    "COMP LAB 609",
]

DEFAULT_LECTURE_ROOMS = [
    "ROOM 102",
    "ROOM 103",
    "ROOM 104",
    *[f"ROOM {number}" for number in range(301, 313)],
    "ROOM 401",
    "ROOM 402",
    "ROOM 403",
    "ROOM 404",
    "ROOM 405",
    "ROOM 406",
    "ROOM 407",
    "ROOM 408",
    "ROOM 409-A",
    "ROOM 409-B",
    "ROOM 410",
    *[f"ROOM {number}" for number in range(501, 513)],
    *[f"ROOM {number}" for number in range(801, 806)],
    "ROOM 901",
    "ROOM 904",
    "ROOM 906",
]


def _split_list(value: str | list[str]) -> list[str]:
    if isinstance(value, str):
        stripped = value.strip()
        if stripped.startswith("["):
            try:
                parsed = json.loads(stripped)
                if isinstance(parsed, list):
                    return [str(item).strip() for item in parsed if str(item).strip()]
            except json.JSONDecodeError:
                pass
        return [item.strip() for item in value.split(",") if item.strip()]
    return value


class Settings(BaseSettings):
    # Resolve to backend/.env so `uvicorn --app-dir backend` works from any cwd.
    model_config = SettingsConfigDict(env_file=str(BACKEND_ENV_FILE), env_file_encoding="utf-8")

    project_name: str = "Academic Scheduling API"
    api_prefix: str = "/api"
    log_level: str = "INFO"
    max_request_size_bytes: int = 1_048_576

    database_url: str = "sqlite+pysqlite:///./acadsched.db"

    room_pool: list[str] = DEFAULT_LAB_ROOMS + DEFAULT_LECTURE_ROOMS
    pe_rooms: list[str] = ["COURT", "PENTHOUSE"]
    lab_room_marker: str = "LAB"

    default_subject_slots: int = 4
    required_consultation_hours: float = 6.0
    required_admin_hours: float = 10.0

    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]

    @field_validator("cors_origins", "room_pool", "pe_rooms", mode="before")
    @classmethod
    def split_list_values(cls, value: str | list[str]) -> list[str]:
        return _split_list(value)


@lru_cache
def get_settings() -> Settings:
    return Settings()
