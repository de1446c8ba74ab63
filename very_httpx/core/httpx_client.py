import httpx
from typing import Any, Awaitable, Callable, Dict
from .logger import get_logger

logger = get_logger(__name__)

# Clés de la config qui ne sont pas des arguments de httpx.AsyncClient
NON_HTTPX_KEYS = ("response_type",)


def build_async_client(config: Dict[str, Any],
                       on_request: Callable[[httpx.Request], Awaitable[None]]) -> httpx.AsyncClient:
    """
    Crée l'unique httpx.AsyncClient à partir de la config fusionnée.
    `on_request` est ajouté à la suite des hooks 'request' éventuellement fournis.
    """
    kwargs = {key: value for key, value in config.items() if key not in NON_HTTPX_KEYS}

    hooks = dict(kwargs.pop("event_hooks", None) or {})
    hooks["request"] = [*hooks.get("request", []), on_request]
    hooks.setdefault("response", [])

    logger.debug("Création du client httpx | base_url=%s timeout=%s",
                 kwargs.get("base_url", ""), kwargs.get("timeout"))
    return httpx.AsyncClient(event_hooks=hooks, **kwargs)
