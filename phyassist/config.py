import os, re
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from phyassist.tutor import FeedbackModel

DEFAULT_MODEL = "gpt-4o-mini"  # vision-capable
DEFAULT_ORIGIN = "https://phyassist.netlify.app"


def strip_ws(s: str) -> str:
    return re.sub(r"\s+", "", s or "")


def _float_env(name: str, default: float) -> float:
    return float(os.getenv(name, "") or default)


def _int_env(name: str, default: int) -> int:
    return int(os.getenv(name, "") or default)


# ---------- SERVICE ----------
@dataclass(frozen=True)
class ServiceConfig:
    """Built once at startup and handed to ``api.create_app``.

    ``model`` is None when no credential was configured; the service still
    starts and answers every feedback request with a generic 500.
    """
    model: Optional[FeedbackModel]
    allowed_origin: str = DEFAULT_ORIGIN
    max_content_mb: int = 10
    port: int = 8080

    @classmethod
    def from_env(cls) -> "ServiceConfig":
        load_dotenv()
        api_key = strip_ws(os.getenv("OPENAI_API_KEY", ""))
        model = None
        if api_key:
            model = FeedbackModel(
                api_key=api_key,
                model=os.getenv("OPENAI_MODEL", "") or DEFAULT_MODEL,
                timeout=_float_env("PHYASSIST_MODEL_TIMEOUT", 60.0),
            )
        return cls(
            model=model,
            allowed_origin=(os.getenv("PHYASSIST_ALLOWED_ORIGIN", "") or DEFAULT_ORIGIN).rstrip("/"),
            max_content_mb=_int_env("PHYASSIST_MAX_CONTENT_MB", 10),
            port=_int_env("PORT", 8080),
        )


# ---------- CLIENT ----------
@dataclass(frozen=True)
class ClientConfig:
    api_url: str = ""
    timeout: float = 90.0
    # base64 grows the image by a third on its way to the proxy (10 MB body limit)
    max_upload_mb: float = 7.5
    port: int = 3000

    @classmethod
    def from_env(cls) -> "ClientConfig":
        load_dotenv()
        return cls(
            api_url=(os.getenv("PHYASSIST_API_URL", "") or "").strip().rstrip("/"),
            timeout=_float_env("PHYASSIST_CLIENT_TIMEOUT", 90.0),
            max_upload_mb=_float_env("PHYASSIST_MAX_UPLOAD_MB", 7.5),
            port=_int_env("PORT", 3000),
        )
