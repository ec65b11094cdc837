"""writefreely-py - Cliente asíncrono para el API de WriteFreely / Write.as.

Capas:
- core: dominio, contratos, configuración y servicios (cliente, decoder, errores)
- adapters: I/O concreto (httpx, exportación JSON)
- cli: interfaz de línea de comandos (Typer + Rich)
"""

from writefreely.core.domain.errors import RequestMethodMismatch, Result, WFError, WriteFreelyError
from writefreely.core.domain.models import Collection, Post, User
from writefreely.core.services.client import WriteFreelyClient

__version__ = "0.1.0"
__all__ = [
    "Collection",
    "Post",
    "RequestMethodMismatch",
    "Result",
    "User",
    "WFError",
    "WriteFreelyClient",
    "WriteFreelyError",
]
