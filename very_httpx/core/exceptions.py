# very_httpx/core/exceptions.py
from typing import Any, Optional

import httpx


class APIError(Exception):
    """Erreur lors de l'appel d'une API externe"""
    pass


class BusinessError(APIError):
    """Le transport a réussi (2xx) mais le statut métier du corps signale un échec."""

    def __init__(self, message: str, status: Any = None, data: Any = None,
                 response: Optional[httpx.Response] = None):
        super().__init__(message)
        self.message = message
        self.status = status
        self.data = data
        self.response = response
