"""Runtime settings read from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

DEFAULT_TEMPLATE = Path(__file__).resolve().parent / "templates" / "Antrag-auf-Mietzuschuss.pdf"


def _int(env: Mapping[str, str], key: str, default: int) -> int:
    raw = env.get(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{key} must be an integer, got {raw!r}") from exc


@dataclass(frozen=True)
class Settings:
    template_path: Optional[Path] = None
    output_dir: Path = Path("output")
    s3_bucket: Optional[str] = None
    s3_prefix: str = "wohngeld-prefill/"
    max_income_entries: int = 4
    font_size: int = 11  # 0 disables the PyMuPDF font pass
    analysis_cache_ttl: int = 600
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if env is None else env
        template = env.get("PREFILL_TEMPLATE_PATH")
        return cls(
            template_path=Path(template) if template else None,
            output_dir=Path(env.get("PREFILL_OUTPUT_DIR") or "output"),
            s3_bucket=env.get("PREFILL_S3_BUCKET") or None,
            s3_prefix=env.get("PREFILL_S3_PREFIX", "wohngeld-prefill/"),
            max_income_entries=_int(env, "PREFILL_MAX_INCOME_ENTRIES", 4),
            font_size=_int(env, "PREFILL_FONT_SIZE", 11),
            analysis_cache_ttl=_int(env, "PREFILL_ANALYSIS_CACHE_TTL", 600),
            log_level=(env.get("LOG_LEVEL") or "INFO").upper(),
        )
