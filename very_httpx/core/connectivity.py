# very_httpx/core/connectivity.py
import asyncio
from typing import Awaitable, Callable, Union

from very_httpx.core.logger import get_logger

logger = get_logger(__name__)

# Retourne (ou résout) True si le poste est en ligne ; ne doit pas bloquer la boucle
ConnectivityProbe = Callable[[], Union[bool, Awaitable[bool]]]


def always_online() -> bool:
    return True


def socket_probe(host: str = "8.8.8.8", port: int = 53, timeout: float = 1.5) -> ConnectivityProbe:
    """
    Construit une sonde asynchrone qui tente d'ouvrir une connexion TCP vers host:port.
    Les autres requêtes continuent pendant l'attente (asyncio.open_connection).
    """

    async def probe() -> bool:
        try:
            _, writer = await asyncio.wait_for(asyncio.open_connection(host, port), timeout)
        except (OSError, asyncio.TimeoutError) as e:
            logger.debug("Sonde réseau %s:%s KO : %s", host, port, e)
            return False

        writer.close()
        try:
            await writer.wait_closed()
        except OSError as e:
            logger.debug("Fermeture de la sonde %s:%s : %s", host, port, e)
        return True

    return probe
