# very_httpx/core/config.py

from dotenv import load_dotenv
from typing import Any, Dict, Optional
import os

from very_httpx.core.messages import SUPPORTED_LANGS

load_dotenv()

# Config httpx par défaut (timeout en secondes : 20000 ms)
DEFAULT_TRANSPORT_CONFIG: Dict[str, Any] = {
    "timeout": 20.0,
    "response_type": "json",
    "headers": {
        "content-type": "application/json",
    },
}

FORM_CONTENT_TYPE = "multipart/form-data;charset=UTF-8"


def get_default_lang() -> str:
    lang = os.getenv("VERY_HTTPX_LANG", "zh-cn").strip().lower()
    if lang not in SUPPORTED_LANGS:
        raise RuntimeError(
            f"VERY_HTTPX_LANG invalide : {lang!r}. Valeurs possibles : {', '.join(SUPPORTED_LANGS)}."
        )
    return lang


def merge_transport_config(user_config: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    Fusion superficielle (clé par clé) de la config utilisateur sur les valeurs par défaut.
    Un `headers` fourni remplace entièrement les headers par défaut.
    """
    merged = dict(DEFAULT_TRANSPORT_CONFIG)
    merged["headers"] = dict(DEFAULT_TRANSPORT_CONFIG["headers"])
    merged.update(user_config or {})
    return merged
