# very_httpx/core/messages.py
from types import MappingProxyType
from typing import Mapping, Optional, Union

# --- Catalogue des messages d'erreur, par langue ---

ERROR_MESSAGE_MAPS: Mapping[str, Mapping[Union[str, int], str]] = MappingProxyType({
    "zh-cn": MappingProxyType({
        "DEFAULT": "接口请求失败",
        "OFFLINE": "网络连接断开",
        400: "请求错误",
        401: "未授权，请确认是否登录",
        403: "无权限，禁止访问",
        404: "接口或资源不存在",
        405: "请求方式不允许",
        413: "资源过大",
        414: "URI过长",
        500: "服务器内部错误",
        502: "网关错误",
        504: "网关超时",
    }),
    "en": MappingProxyType({
        "DEFAULT": "Request Failed",
        "OFFLINE": "Network is Offline",
        400: "Bad Request",
        401: "Unauthorized",
        403: "Forbidden",
        404: "Not Found",
        405: "Method Not Allowed",
        413: "Payload Too Large",
        414: "URI Too Long",
        500: "Internal Server Error",
        502: "Bad Gateway",
        504: "Gateway Timeout",
    }),
})

SUPPORTED_LANGS = tuple(ERROR_MESSAGE_MAPS.keys())


def get_message(lang: str, key: Union[str, int], default: Optional[str] = None) -> Optional[str]:
    """
    Retourne le message du catalogue pour (lang, key).
    Une clé '404' (str) est résolue vers l'entrée entière 404.
    """
    if lang not in ERROR_MESSAGE_MAPS:
        raise ValueError(f"Langue non supportée : {lang!r} (attendu : {', '.join(SUPPORTED_LANGS)}).")
    messages = ERROR_MESSAGE_MAPS[lang]

    if isinstance(key, str) and key.isdigit():
        key = int(key)
    return messages.get(key, default)
