"""Cliente del API de WriteFreely.

Superficie pública: un método asíncrono por operación del API. Cada método
construye la request, resuelve el token y delega en `VerbHelpers`, el decoder de
envolturas y el traductor de errores. Todos devuelven un `Result`.

Estado:
- `request_url`: URL de la instancia + `api/` (fija).
- `user`: sesión actual; solo la escriben `login` y `logout`. El cliente está
  pensado para usarse desde un único event loop.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from typing import Any, TypeVar
from urllib.parse import quote, urlencode, urljoin

from pydantic import AnyHttpUrl, TypeAdapter

from writefreely.adapters.http_client import HttpxTransport
from writefreely.core.config import AppSettings
from writefreely.core.domain.errors import Result, WFError
from writefreely.core.domain.http import JSON_CONTENT_TYPE, TransportRequest
from writefreely.core.domain.models import Collection, Post, User, format_iso8601
from writefreely.core.interfaces.transport import Transport
from writefreely.core.services.envelope import (
    EnvelopeDecodeError,
    EnvelopeShape,
    decode_envelope,
    decode_login,
)
from writefreely.core.services.verbs import VerbHelpers

logger = logging.getLogger(__name__)

T = TypeVar("T")

_INSTANCE_URL = TypeAdapter(AnyHttpUrl)

_MISSING = object()


class WriteFreelyClient:
    """Cliente asíncrono para una instancia WriteFreely.

    Example:
        client = WriteFreelyClient("https://write.as")
        user = (await client.login("matt", "secret")).unwrap()
        post = (await client.create_post(Post(body="Hola!", title="Borrador"))).unwrap()
        await client.logout()

    """

    def __init__(
        self,
        instance_url: str,
        transport: Transport | None = None,
        *,
        settings: AppSettings | None = None,
        user: User | None = None,
    ) -> None:
        """
        Args:
            instance_url: URL de la instancia, con protocolo (p.ej. `https://write.as`).
            transport: Transporte a usar; por defecto `HttpxTransport`.
            settings: Configuración para el transporte por defecto.
            user: Sesión previa (p.ej. reconstruida desde un token guardado).

        Raises:
            ValueError: si `instance_url` no es una URL HTTP(S) válida.
        """

        base = str(_INSTANCE_URL.validate_python(instance_url))
        self.request_url = urljoin(base, "api/")
        self.transport: Transport = transport or HttpxTransport(settings)
        self.user = user
        self._verbs = VerbHelpers(self.transport)

    @classmethod
    def from_token(cls, instance_url: str, token: str, transport: Transport | None = None) -> "WriteFreelyClient":
        """Crea el cliente con una sesión a partir de un token ya guardado."""

        return cls(instance_url, transport, user=User(token=token))

    # =========================================================================
    # Collections
    # =========================================================================

    async def create_collection(
        self,
        title: str,
        alias: str | None = None,
        *,
        token: str | None = None,
    ) -> Result[Collection]:
        """Crea un blog. Sin `alias`, el servidor genera uno (guárdalo)."""

        auth = self._resolve_token(token)
        if auth is None:
            return _missing_credentials()

        body: dict[str, Any] = {"title": title}
        if alias is not None:
            body["alias"] = alias

        request = self._request("POST", "collections", token=auth, body=body)
        result = await self._verbs.post(request, expected=201)
        return _decode(result, lambda data: decode_envelope(data, Collection))

    async def get_collection(self, alias: str, *, token: str | None = None) -> Result[Collection]:
        """Metadatos de un blog. Los blogs públicos no requieren token."""

        request = self._request("GET", f"collections/{_segment(alias)}", token=self._resolve_token(token))
        result = await self._verbs.get(request)
        return _decode(result, lambda data: decode_envelope(data, Collection))

    async def delete_collection(self, alias: str, *, token: str | None = None) -> Result[bool]:
        """Borra un blog. Sus posts no se borran: quedan sin blog."""

        auth = self._resolve_token(token)
        if auth is None:
            return _missing_credentials()

        path = f"collections/{_segment(alias)}"
        request = self._request("DELETE", path, token=auth)

        async def confirm() -> Result[bytes]:
            return await self._verbs.get(self._request("GET", path, token=auth))

        result = await self._verbs.delete(
            request,
            confirm=confirm,
            confirm_accepts=(WFError.NOT_FOUND, WFError.UNAUTHORIZED),
        )
        return _as_true(result)

    async def get_user_collections(self, *, token: str | None = None) -> Result[list[Collection]]:
        auth = self._resolve_token(token)
        if auth is None:
            return _missing_credentials()

        result = await self._verbs.get(self._request("GET", "me/collections", token=auth))
        return _decode(result, lambda data: decode_envelope(data, list[Collection]))

    # =========================================================================
    # Posts
    # =========================================================================

    async def get_posts(
        self,
        collection_alias: str | None = None,
        *,
        token: str | None = None,
    ) -> Result[list[Post]]:
        """Posts de un blog (`collection_alias`) o, si se omite, del usuario.

        La respuesta del blog viene anidada (`data.posts`); la del usuario no.
        """

        auth = self._resolve_token(token)
        if collection_alias is None:
            if auth is None:
                return _missing_credentials()
            path = "me/posts"
            shape = EnvelopeShape.DATA
        else:
            path = f"collections/{_segment(collection_alias)}/posts"
            shape = EnvelopeShape.NESTED_POSTS

        result = await self._verbs.get(self._request("GET", path, token=auth))
        return _decode(result, lambda data: decode_envelope(data, list[Post], shape=shape))

    async def create_post(
        self,
        post: Post,
        collection_alias: str | None = None,
        *,
        token: str | None = None,
    ) -> Result[Post]:
        """Publica en `collection_alias` o, sin él, como borrador del usuario."""

        auth = self._resolve_token(token)
        if auth is None:
            return _missing_credentials()

        path = "posts" if collection_alias is None else f"collections/{_segment(collection_alias)}/posts"
        body = _post_body(post)
        if post.created is not None:
            body["created"] = format_iso8601(post.created)

        result = await self._verbs.post(self._request("POST", path, token=auth, body=body), expected=201)
        return _decode(result, lambda data: decode_envelope(data, Post))

    async def get_post(self, post_id: str, *, token: str | None = None) -> Result[Post]:
        auth = self._resolve_token(token)
        if auth is None:
            return _missing_credentials()

        result = await self._verbs.get(self._request("GET", f"posts/{_segment(post_id)}", token=auth))
        return _decode(result, lambda data: decode_envelope(data, Post))

    async def get_post_by_slug(
        self,
        slug: str,
        collection_alias: str,
        *,
        token: str | None = None,
    ) -> Result[Post]:
        """Post de un blog por slug. Los blogs públicos no requieren token."""

        path = f"collections/{_segment(collection_alias)}/posts/{_segment(slug)}"
        result = await self._verbs.get(self._request("GET", path, token=self._resolve_token(token)))
        return _decode(result, lambda data: decode_envelope(data, Post))

    async def update_post(
        self,
        post_id: str,
        post: Post,
        modify_token: str | None = None,
        *,
        token: str | None = None,
    ) -> Result[Post]:
        """Actualiza un post. Si `post.title` es `None`, el título existente se borra.

        Con `modify_token` no hace falta sesión (posts anónimos).
        """

        auth = self._resolve_token(token)
        if auth is None and modify_token is None:
            return _missing_credentials()

        body = _post_body(post)
        if modify_token is not None:
            body["token"] = modify_token

        request = self._request("POST", f"posts/{_segment(post_id)}", token=auth, body=body)
        result = await self._verbs.post(request, expected=200)
        return _decode(result, lambda data: decode_envelope(data, Post))

    async def delete_post(
        self,
        post_id: str,
        modify_token: str | None = None,
        *,
        token: str | None = None,
    ) -> Result[bool]:
        auth = self._resolve_token(token)
        if auth is None and modify_token is None:
            return _missing_credentials()

        path = f"posts/{_segment(post_id)}"
        query = {"token": modify_token} if modify_token is not None else None
        request = self._request("DELETE", path, token=auth, query=query)

        async def confirm() -> Result[bytes]:
            return await self._verbs.get(self._request("GET", path, token=auth))

        # Pedir un post inexistente puede devolver 500 en vez de 404.
        result = await self._verbs.delete(
            request,
            confirm=confirm,
            confirm_accepts=(WFError.NOT_FOUND, WFError.UNAUTHORIZED, WFError.INTERNAL_SERVER_ERROR),
        )
        return _as_true(result)

    async def move_post(
        self,
        post_id: str,
        collection_alias: str | None,
        modify_token: str | None = None,
        *,
        token: str | None = None,
    ) -> Result[bool]:
        """Mueve un post a `collection_alias`; con `None` lo saca de cualquier blog."""

        auth = self._resolve_token(token)
        if auth is None:
            return _missing_credentials()

        if collection_alias is None and modify_token is not None:
            return Result.failure(WFError.BAD_REQUEST, detail="modify token not accepted when dispersing a post")

        body: list[Any]
        if modify_token is not None:
            body = [{"id": post_id, "token": modify_token}]
        elif collection_alias is None:
            body = [post_id]
        else:
            body = [{"id": post_id}]

        path = "posts/disperse" if collection_alias is None else f"collections/{_segment(collection_alias)}/collect"
        result = await self._verbs.post(self._request("POST", path, token=auth, body=body), expected=200)
        return _as_true(result)

    async def pin_post(
        self,
        post_id: str,
        collection_alias: str,
        position: int | None = None,
        *,
        token: str | None = None,
    ) -> Result[bool]:
        """Fija un post como item de navegación del blog (al final si no hay `position`)."""

        auth = self._resolve_token(token)
        if auth is None:
            return _missing_credentials()

        item: dict[str, Any] = {"id": post_id}
        if position is not None:
            item["position"] = position

        path = f"collections/{_segment(collection_alias)}/pin"
        result = await self._verbs.post(self._request("POST", path, token=auth, body=[item]), expected=200)
        return _as_true(result)

    async def unpin_post(self, post_id: str, collection_alias: str, *, token: str | None = None) -> Result[bool]:
        auth = self._resolve_token(token)
        if auth is None:
            return _missing_credentials()

        path = f"collections/{_segment(collection_alias)}/unpin"
        request = self._request("POST", path, token=auth, body=[{"id": post_id}])
        result = await self._verbs.post(request, expected=200)
        return _as_true(result)

    # =========================================================================
    # User
    # =========================================================================

    async def login(self, username: str, password: str) -> Result[User]:
        """Inicia sesión; en éxito, `self.user` pasa a ser el usuario devuelto."""

        request = self._request("POST", "auth/login", body={"alias": username, "pass": password})
        result = _decode(await self._verbs.post(request, expected=200), decode_login)
        if result.ok:
            self.user = result.value
            logger.debug("logged in as %s", self.user.username if self.user else None)
        return result

    async def logout(self, token: str | None = None) -> Result[bool]:
        """Invalida el token (el explícito o el de la sesión)."""

        auth = self._resolve_token(token)
        if auth is None:
            return _missing_credentials()

        async def confirm() -> Result[bytes]:
            return await self._verbs.get(self._request("GET", "me", token=auth))

        result = await self._verbs.delete(
            self._request("DELETE", "auth/me", token=auth),
            confirm=confirm,
            confirm_accepts=(WFError.NOT_FOUND, WFError.UNAUTHORIZED),
        )
        if result.ok and self.user is not None and self.user.token == auth:
            self.user = None
        return _as_true(result)

    async def get_user_data(self, *, token: str | None = None) -> Result[bytes]:
        """Datos básicos del usuario, sin decodificar (JSON crudo)."""

        auth = self._resolve_token(token)
        if auth is None:
            return _missing_credentials()
        return await self._verbs.get(self._request("GET", "me", token=auth))

    # =========================================================================
    # Internals
    # =========================================================================

    def _resolve_token(self, token: str | None) -> str | None:
        if token is not None:
            return token
        return self.user.token if self.user is not None else None

    def _request(
        self,
        method: str,
        path: str,
        *,
        token: str | None = None,
        body: Any = _MISSING,
        query: dict[str, str] | None = None,
    ) -> TransportRequest:
        url = urljoin(self.request_url, path)
        if query:
            url = f"{url}?{urlencode(query)}"

        headers = {"Content-Type": JSON_CONTENT_TYPE}
        if token is not None:
            headers["Authorization"] = token

        payload = None if body is _MISSING else json.dumps(body).encode("utf-8")
        return TransportRequest(method=method, url=url, headers=headers, body=payload)


def _segment(value: str) -> str:
    return quote(value, safe="")


def _post_body(post: Post) -> dict[str, Any]:
    return {
        "body": post.body,
        "title": post.title or "",
        "font": post.appearance or "",
        "lang": post.language or "",
        "rtl": bool(post.rtl),
    }


def _missing_credentials() -> Result[Any]:
    logger.debug("no explicit token and no session; request not sent")
    return Result.failure(WFError.MISSING_CREDENTIALS)


def _decode(result: Result[bytes], decode: Callable[[bytes], T]) -> Result[T]:
    if result.error is not None:
        return Result.failure(result.error, result.detail)
    try:
        return Result.success(decode(result.value or b""))
    except EnvelopeDecodeError as exc:
        logger.warning("could not decode server response: %s", exc)
        return Result.failure(WFError.INVALID_DATA, detail=exc)


def _as_true(result: Result[bytes]) -> Result[bool]:
    if result.error is not None:
        return Result.failure(result.error, result.detail)
    return Result.success(True)
