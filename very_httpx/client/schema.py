from collections.abc import Mapping
from typing import Any, Callable, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_validator

from very_httpx.core.config import get_default_lang
from very_httpx.core.connectivity import always_online
from very_httpx.core.messages import SUPPORTED_LANGS


# --- Accesseurs par défaut sur le corps de réponse ---

def _body_field(name: str) -> Callable[[Any], Any]:
    def getter(body: Any) -> Any:
        if isinstance(body, Mapping):
            return body.get(name)
        return None
    getter.__name__ = f"get_{name}"
    return getter


class ClientOptions(BaseModel):
    """Options de comportement du RequestClient (tips, handlers, langue, loading, accesseurs)."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    tip: bool                                   = Field(True, description="Afficher un tip en cas d'erreur")
    tip_fn: Optional[Callable[[str], Any]]      = Field(None, description="Affiche un tip à partir du message")
    error_handlers: Dict[str, Callable[[], Any]] = Field(
        default_factory=dict, description="Handler par code de statut (métier ou HTTP)")
    lang: str                                   = Field(default_factory=get_default_lang,
                                                        description="Langue du catalogue ('zh-cn' ou 'en')")
    loading_handler: Optional[Callable[[], Any]]        = Field(None, description="Début de chargement")
    loading_cancel_handler: Optional[Callable[[], Any]] = Field(None, description="Fin de chargement")
    get_response_status: Callable[[Any], Any]   = Field(default_factory=lambda: _body_field("errno"))
    get_response_message: Callable[[Any], Any]  = Field(default_factory=lambda: _body_field("errmsg"))
    get_response_data: Callable[[Any], Any]     = Field(default_factory=lambda: _body_field("data"))
    connectivity_probe: Callable[[], Any]       = Field(always_online,
                                                        description="Retourne (ou résout) False hors ligne")

    @field_validator("error_handlers", mode="before")
    @classmethod
    def _stringify_status_keys(cls, value: Any) -> Any:
        # 401 et "401" désignent le même handler
        if isinstance(value, Mapping):
            return {str(key): handler for key, handler in value.items()}
        return value

    @field_validator("lang")
    @classmethod
    def _check_lang(cls, value: str) -> str:
        value = value.strip().lower()
        if value not in SUPPORTED_LANGS:
            raise ValueError(f"Langue non supportée : {value!r} (attendu : {', '.join(SUPPORTED_LANGS)}).")
        return value


class RequestOptions(BaseModel):
    """Options propres à un appel, transportées dans request.extensions."""

    model_config = ConfigDict(extra="allow")

    loading: bool = Field(False, description="Déclenche les callbacks de chargement")

    _loading_started: bool = PrivateAttr(False)
    _loading_stopped: bool = PrivateAttr(False)
