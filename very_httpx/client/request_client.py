# very_httpx/client/request_client.py

import inspect
import logging
import os
from collections.abc import Mapping
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple, Union

import httpx

from very_httpx.client.schema import ClientOptions, RequestOptions
from very_httpx.core.config import FORM_CONTENT_TYPE, merge_transport_config
from very_httpx.core.exceptions import BusinessError
from very_httpx.core.httpx_client import build_async_client
from very_httpx.core.logger import get_logger
from very_httpx.core.messages import get_message

logger = get_logger(__name__)

# Clé de request.extensions qui transporte les RequestOptions de l'appel
OPTIONS_EXTENSION = "very_httpx"

# Erreurs httpx levées avant que la requête ne parte
SETUP_ERRORS = (httpx.UnsupportedProtocol, httpx.InvalidURL)


async def _maybe_await(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


def _status_text(status: Any) -> str:
    # 0.0 (JSON) doit valoir "0"
    if isinstance(status, float) and status.is_integer():
        status = int(status)
    return str(status)


def _multipart_parts(form_data: Optional[Dict[str, Any]], files: Any) -> Tuple[Any, Any]:
    """
    Sans fichier, httpx encoderait `data` en x-www-form-urlencoded :
    on passe alors les champs comme parts sans filename pour forcer le multipart.
    """
    if files:
        return form_data, files

    parts = []
    for name, value in (form_data or {}).items():
        values = value if isinstance(value, (list, tuple)) else [value]
        for item in values:
            parts.append((name, (None, item if isinstance(item, bytes) else str(item))))
    return None, parts


class RequestClient:
    """
    Client HTTP asynchrone (httpx) pour des backends qui répondent avec une enveloppe métier.

    - Fusionne la config transport avec les valeurs par défaut (timeout 20s, JSON).
    - Intercepteur de requête : callback de début de chargement si `loading`.
    - Traitement de la réponse : callback de fin de chargement, lecture du statut métier,
      message localisé, tip et handler par code de statut.
    - Méthodes GET / POST / PUT / DELETE / FORMDATA.

    Usage:
        async with RequestClient({"lang": "en", "tip_fn": notify}, {"base_url": URL}) as api:
            user = await api.GET("/user", {"id": 1}, {"loading": True})
    """

    def __init__(self,
                 options: Union[ClientOptions, Dict[str, Any], None] = None,
                 transport_config: Optional[Dict[str, Any]] = None):
        if options is None:
            options = ClientOptions()
        elif not isinstance(options, ClientOptions):
            options = ClientOptions.model_validate(options)
        self.options = options

        # Le tip n'est actif que si le flag est vrai ET tip_fn est appelable (calculé une fois)
        self.tip = bool(options.tip and callable(options.tip_fn))
        self.tip_fn = options.tip_fn
        self.error_handlers = options.error_handlers
        self.lang = options.lang
        self.loading_handler = options.loading_handler
        self.loading_cancel_handler = options.loading_cancel_handler
        self.get_response_status = options.get_response_status
        self.get_response_message = options.get_response_message
        self.get_response_data = options.get_response_data
        self.connectivity_probe = options.connectivity_probe

        self.config = merge_transport_config(transport_config)
        self.response_type = self.config.get("response_type", "json")
        self.http = build_async_client(self.config, on_request=self._on_request)

    # ---------------- Intercepteurs ----------------
    async def _on_request(self, request: httpx.Request) -> None:
        options = request.extensions.get(OPTIONS_EXTENSION)
        if options is None or not options.loading or options._loading_started:
            return
        # les redirections réutilisent les mêmes extensions : un seul déclenchement
        options._loading_started = True
        if self.loading_handler is not None:
            await _maybe_await(self.loading_handler())

    async def _stop_loading(self, options: RequestOptions) -> None:
        # appelé sur chaque chemin de sortie de _perform : un seul déclenchement
        if not options.loading or options._loading_stopped:
            return
        options._loading_stopped = True
        if self.loading_cancel_handler is not None:
            await _maybe_await(self.loading_cancel_handler())

    async def _on_response(self, response: httpx.Response, options: RequestOptions) -> Any:
        """Réponse 2xx : renvoie la donnée métier ou lève BusinessError."""
        await self._stop_loading(options)

        body = self._read_body(response)
        # corps vide ou falsy (0, false, ""), hors {} et []
        if body is None or (not body and not isinstance(body, (Mapping, list))):
            return None

        status = self.get_response_status(body)
        message = self.get_response_message(body) or get_message(self.lang, "DEFAULT")
        data = self.get_response_data(body)

        # statut différent de '0' => erreur métier
        if _status_text(status) != "0":
            logger.warning("Erreur métier %s sur %s %s : %s",
                           status, response.request.method, response.request.url, message)
            if self.tip:
                await _maybe_await(self.tip_fn(message))
            await self._run_error_handler(status)
            raise BusinessError(message, status=status, data=data, response=response)

        return data

    async def _on_response_error(self, error: Exception, options: RequestOptions) -> None:
        """Échec transport : fin de chargement, handler du code HTTP, tip. L'erreur est ensuite relevée."""
        await self._stop_loading(options)

        message = await self.resolve_error_message(error)
        if isinstance(error, httpx.HTTPStatusError):
            logger.error("HTTP %s sur %s : %s",
                         error.response.status_code, error.request.url, message)
            await self._run_error_handler(error.response.status_code)
        elif isinstance(error, SETUP_ERRORS):
            logger.error("Requête non envoyée : %s", message)
        else:
            logger.error("Aucune réponse reçue (%s) : %s", type(error).__name__, message)

        if self.tip:
            await _maybe_await(self.tip_fn(message))

    async def resolve_error_message(self, error: Exception) -> str:
        """
        Message lisible pour une erreur de transport :
          - réponse serveur : OFFLINE si hors ligne, sinon le message du code HTTP,
            sinon le message brut de l'erreur ;
          - pas de réponse / requête non envoyée : message brut de l'erreur.
        """
        if isinstance(error, httpx.HTTPStatusError):
            if not await _maybe_await(self.connectivity_probe()):
                return get_message(self.lang, "OFFLINE")
            return get_message(self.lang, error.response.status_code, default=str(error))
        # certaines erreurs httpx (timeouts) ont un message vide
        return str(error) or get_message(self.lang, "DEFAULT")

    async def _run_error_handler(self, status: Any) -> None:
        handler = self.error_handlers.get(_status_text(status))
        if handler is None:
            return
        try:
            await _maybe_await(handler())
        except Exception:
            # un handler défaillant ne doit pas bloquer le tip ni le rejet
            logger.exception("Le handler du statut %s a échoué", status)

    def _read_body(self, response: httpx.Response) -> Any:
        if not response.content:
            return None
        if self.response_type == "bytes":
            return response.content
        if self.response_type == "json":
            try:
                return response.json()
            except ValueError:
                logger.debug("Corps non JSON sur %s, lecture en texte", response.request.url)
        return response.text

    # ---------------- Dispatch ----------------
    async def _perform(self, send: Callable[[], Awaitable[httpx.Response]], options: RequestOptions) -> Any:
        try:
            try:
                response = await send()
                if logger.isEnabledFor(logging.DEBUG):
                    logger.debug("⬅️ Response %s: %s", response.status_code, response.text[:300])
                response.raise_for_status()
            except (httpx.HTTPError, httpx.InvalidURL) as error:
                await self._on_response_error(error, options)
                raise

            return await self._on_response(response, options)
        finally:
            # annulation, exception hors httpx, callback défaillant
            await self._stop_loading(options)

    @staticmethod
    def _request_options(options: Union[RequestOptions, Dict[str, Any], None]) -> RequestOptions:
        # toujours une instance neuve par appel
        if options is None:
            return RequestOptions()
        if isinstance(options, RequestOptions):
            return options.model_copy()
        return RequestOptions.model_validate(options)

    async def fetch(self, method: str, path: str, params: Any = None,
                    options: Union[RequestOptions, Dict[str, Any], None] = None) -> Any:
        """
        Méthode d'envoi commune aux verbes.
        :param method: verbe HTTP (get, post, put, delete)
        :param path: chemin (relatif à base_url si configuré)
        :param params: query string pour GET, corps JSON pour les autres verbes
        :param options: options de l'appel (ex: {"loading": True})
        :return: la donnée métier extraite par get_response_data
        """
        method = method.upper()
        request_options = self._request_options(options)
        params = {} if params is None else params

        kwargs: Dict[str, Any] = {"extensions": {OPTIONS_EXTENSION: request_options}}
        if method == "GET":
            kwargs["params"] = params
        else:
            kwargs["json"] = params

        logger.debug(f"➡️ {method} {path} | params={params}")
        return await self._perform(lambda: self.http.request(method, path, **kwargs), request_options)

    async def GET(self, path: str, params: Optional[Dict[str, Any]] = None, options=None) -> Any:
        return await self.fetch("get", path, params, options)

    async def POST(self, path: str, params: Any = None, options=None) -> Any:
        return await self.fetch("post", path, params, options)

    async def PUT(self, path: str, params: Any = None, options=None) -> Any:
        return await self.fetch("put", path, params, options)

    async def DELETE(self, path: str, params: Any = None, options=None) -> Any:
        return await self.fetch("delete", path, params, options)

    async def FORMDATA(self, path: str, form_data: Optional[Dict[str, Any]] = None, files: Any = None) -> Any:
        """
        Envoi d'un formulaire multipart (POST), sans passer par fetch().
        Le content-type commence par 'multipart/form-data;charset=UTF-8', httpx y ajoute le boundary.
        """
        request_options = RequestOptions()
        data, files = _multipart_parts(form_data, files)
        # httpx lit le boundary dans le content-type fourni
        boundary = os.urandom(16).hex()
        headers = {"content-type": f"{FORM_CONTENT_TYPE}; boundary={boundary}"}

        def send() -> Awaitable[httpx.Response]:
            request = self.http.build_request(
                "POST", path, data=data, files=files, headers=headers,
                extensions={OPTIONS_EXTENSION: request_options},
            )
            return self.http.send(request)

        logger.debug(f"➡️ POST (form) {path} | fields={list((form_data or {}).keys())}")
        return await self._perform(send, request_options)

    # ---------------- Cycle de vie ----------------
    async def aclose(self) -> None:
        await self.http.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()
