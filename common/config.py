from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Tuple

from dotenv import load_dotenv


def _default_env_file() -> str:
    return str(Path.cwd() / ".env")


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    interval_seconds: int
    dump_folder: str
    listen: str
    forward_urls: Tuple[str, ...]
    debug: bool

    api_file: str
    api_key: str
    api_server: str
    auth_key: str

    metrics_geo: bool

    build_version: str
    build_time: str
    build_branch: str
    build_revision: str

    @property
    def listen_host(self) -> str:
        host, _, _ = self.listen.rpartition(":")
        return host or "0.0.0.0"

    @property
    def listen_port(self) -> int:
        _, _, port = self.listen.rpartition(":")
        return int(port)

    def resolve_api_key(self) -> str:
        """APIKEY tiene prioridad; si no, primera línea de APIFILE."""
        if self.api_key:
            return self.api_key
        path = Path(self.api_file) if self.api_file else None
        if path is not None and path.is_file():
            with path.open("r", encoding="utf-8") as fh:
                return fh.readline().strip()
        return ""


def get_settings() -> Settings:
    # Load env file (if present) but still allow overriding via real environment variables.
    env_file = os.getenv("LORA_ENV_FILE", _default_env_file())
    if env_file and Path(env_file).exists():
        load_dotenv(env_file, override=False)

    interval = int(os.getenv("INTERVAL", "300"))
    if interval <= 0:
        raise ValueError(f"INTERVAL must be positive, got {interval}")

    forward = os.getenv("FORWARD", "")
    forward_urls = tuple(u.strip() for u in forward.split(",") if u.strip())

    return Settings(
        interval_seconds=interval,
        dump_folder=os.getenv("DUMP_FOLDER", "") or "dumps",
        listen=os.getenv("LISTEN", "0.0.0.0:5672"),
        forward_urls=forward_urls,
        debug=_env_bool("DEBUG"),
        api_file=os.getenv("APIFILE", "apikey.txt"),
        api_key=os.getenv("APIKEY", ""),
        api_server=os.getenv("APISERVER", "").rstrip("/"),
        auth_key=os.getenv("AUTHKEY", ""),
        metrics_geo=_env_bool("METRICS_GEO"),
        build_version=os.getenv("BUILD_VERSION", ""),
        build_time=os.getenv("BUILD_TIME", ""),
        build_branch=os.getenv("BUILD_BRANCH", ""),
        build_revision=os.getenv("BUILD_REVISION", ""),
    )
