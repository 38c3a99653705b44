# =======================================================================================
# campus_access/client/gateway.py - HTTP Client Gateway
# =======================================================================================
"""
Async client for the campus access API.

Every failure is raised as an ``ApiError`` subclass carrying ``status`` (0 when
the server was never reached), ``data`` (the parsed body, if any) and a
human-readable ``message``.
"""
import logging
import re
from datetime import date
from typing import Any, Dict, Optional, Type, TypeVar
from urllib.parse import quote

import httpx
from pydantic import BaseModel, ValidationError as PydanticValidationError

from ..config import config
from ..models.enums import EVENT_KINDS, ROLES
from ..models.schemas import EMAIL_PATTERN, AccessLogPage, LoginResponse, UserOut
from ..utils.exceptions import (
    ApiError, NotFoundError, ServerError, TransportError, ValidationError,
)
from .session import SessionStore

logger = logging.getLogger("campus_access.client.gateway")

M = TypeVar("M", bound=BaseModel)


def _normalize_base_url(base_url: str) -> str:
    cleaned = (base_url or "").strip()
    if not cleaned:
        raise ValueError("API base URL must not be empty")
    return cleaned.rstrip("/")


def _extract_error_message(payload: object, default: str) -> str:
    if isinstance(payload, dict):
        for key in ("error", "message", "detail"):
            value = payload.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()
    return default


def _parse(model: Type[M], payload: Any) -> M:
    """Validate a success body; a malformed one is the server's fault."""
    try:
        return model.model_validate(payload)
    except PydanticValidationError as exc:
        raise ServerError("Invalid server response.", status=200, data=payload) from exc


def _error_for_status(status: int, message: str, data: Any) -> ApiError:
    if status == 404:
        return NotFoundError(message, status=status, data=data)
    if status in (400, 422):
        return ValidationError(message, status=status, data=data)
    if status >= 500:
        return ServerError(message, status=status, data=data)
    return ApiError(message, status=status, data=data)


class ApiGateway:
    """JSON requests against the backend with normalized errors."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        session: Optional[SessionStore] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.base_url = _normalize_base_url(base_url or config.API_BASE_URL)
        self.session = session
        self._client = client or httpx.AsyncClient()
        self._owns_client = client is None

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "ApiGateway":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------
    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        token = self.session.token() if self.session else None
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    async def request(
        self,
        method: str,
        endpoint: str,
        *,
        json: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        if not endpoint.startswith("/"):
            endpoint = "/" + endpoint
        url = f"{self.base_url}{endpoint}"

        try:
            response = await self._client.request(
                method, url, json=json, params=params, headers=self._headers()
            )
        except httpx.RequestError as exc:
            logger.warning("%s %s failed: %s", method, url, exc)
            raise TransportError(str(exc) or "Network error or request failed", status=0) from exc

        try:
            data = response.json()
        except ValueError:
            if response.is_error:
                raise TransportError(
                    response.reason_phrase or "Server error without JSON body",
                    status=response.status_code,
                )
            data = {}

        if response.is_error:
            message = _extract_error_message(data, f"Error {response.status_code}")
            logger.debug("%s %s -> %s %s", method, url, response.status_code, message)
            raise _error_for_status(response.status_code, message, data)

        return data if isinstance(data, dict) else {"data": data}

    async def get(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return await self.request("GET", endpoint, params=params)

    async def post(self, endpoint: str, data: Dict[str, Any]) -> Dict[str, Any]:
        return await self.request("POST", endpoint, json=data)

    # ------------------------------------------------------------------
    # Endpoints
    # ------------------------------------------------------------------
    async def get_user_by_code(self, code: str) -> UserOut:
        """Resolve a barcode; raises NotFoundError for unknown codes."""
        code = (code or "").strip()
        if not code:
            raise ValidationError("User code is required.", status=400)

        payload = await self.get(f"/users/bycode/{quote(code, safe='')}")
        usuario = payload.get("usuario")
        if not usuario:
            raise NotFoundError(f"User with code {code} not found.", status=404, data=payload)
        return _parse(UserOut, usuario)

    async def record_access(self, code: str, kind: str) -> Dict[str, Any]:
        code = (code or "").strip()
        if not code or not kind:
            raise ValidationError("User code and event type are required.", status=400)
        if kind not in EVENT_KINDS:
            raise ValidationError("Invalid event type. Must be 'entry' or 'exit'.", status=400)

        payload = await self.post("/accesslogs/record", {"user_code": code, "event_type": kind})
        if not payload.get("success"):
            message = _extract_error_message(payload, "Unknown error while recording access.")
            raise ServerError(message, status=200, data=payload)
        return payload

    async def register(
        self,
        nombre: str,
        correo: str,
        codigo_barra: str,
        carrera: str,
        rol: str,
        contrasena: str,
    ) -> UserOut:
        fields = {
            "nombre": nombre.strip(),
            "correo": correo.strip(),
            "codigo_barra": codigo_barra.strip(),
            "carrera": carrera.strip(),
            "rol": rol,
        }
        if not all(fields.values()) or not contrasena:
            raise ValidationError("Please fill in all fields.", status=400)
        if len(contrasena) < 8:
            raise ValidationError("The password must be at least 8 characters long.", status=400)
        if not re.match(EMAIL_PATTERN, fields["correo"]):
            raise ValidationError("Enter a valid email address.", status=400)
        if rol not in ROLES:
            raise ValidationError(f"Role must be one of: {', '.join(ROLES)}.", status=400)

        payload = await self.post("/registro", {**fields, "contrasena": contrasena})
        if not payload.get("success"):
            raise ServerError(
                _extract_error_message(payload, "Registration failed. Try again."),
                status=200,
                data=payload,
            )
        return UserOut(**fields)

    async def login(self, correo: str, contrasena: str) -> LoginResponse:
        correo = (correo or "").strip()
        if not correo or not contrasena:
            raise ValidationError("Email and password are required.", status=400)

        payload = await self.post("/login", {"correo": correo, "contrasena": contrasena})
        if not payload.get("usuario"):
            raise ServerError(
                _extract_error_message(payload, "Invalid server response."),
                status=200,
                data=payload,
            )
        return _parse(LoginResponse, payload)

    async def list_access_logs(
        self,
        page: int = 1,
        limit: int = 10,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        kind: str = "all",
        user_code: Optional[str] = None,
    ) -> AccessLogPage:
        params: Dict[str, Any] = {"page": page, "limit": limit, "type": kind}
        if start_date:
            params["start_date"] = start_date.isoformat()
        if end_date:
            params["end_date"] = end_date.isoformat()
        if user_code:
            params["user_code"] = user_code
        payload = await self.get("/accesslogs", params)
        return _parse(AccessLogPage, payload)
