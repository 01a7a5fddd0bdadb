"""Server-side dispatch for the sandbox manager RPC service."""

from __future__ import annotations

from typing import Any, Callable

from wasmbundle.messages import (
    ConnectRequest,
    CreateRequest,
    DecodeError,
    DeleteRequest,
    Message,
)
from wasmbundle.responses import ConnectResponse, CreateResponse, DeleteResponse

__all__ = ["RpcError", "Manager", "create_manager", "SERVICE_NAME"]

SERVICE_NAME = "runwasi.services.sandbox.v1.Manager"

Handler = Callable[[Any, bytes], bytes]


class RpcError(Exception):
    """An RPC failure carrying a gRPC status code and a message."""

    INVALID_ARGUMENT = 3
    NOT_FOUND = 5

    def __init__(self, code: int, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message

    def __repr__(self) -> str:
        return f"RpcError(code={self.code}, message={self.message!r})"


def _method_path(method: str) -> str:
    return f"/{SERVICE_NAME}/{method}"


def _unsupported(method: str) -> RpcError:
    return RpcError(RpcError.NOT_FOUND, f"{_method_path(method)} is not supported")


def _expect(req: Any, request_type: type[Message], method: str) -> None:
    if not isinstance(req, request_type):
        raise TypeError(
            f"{_method_path(method)} expects {request_type.__name__}, "
            f"got {type(req).__name__}"
        )


class Manager:
    """Sandbox manager service; each method is unsupported until overridden."""

    def create(self, ctx: Any, req: CreateRequest) -> CreateResponse:
        """Create a sandbox; the base service rejects the call as unsupported."""
        _expect(req, CreateRequest, "Create")
        raise _unsupported("Create")

    def connect(self, ctx: Any, req: ConnectRequest) -> ConnectResponse:
        """Connect to a sandbox; the base service rejects the call as unsupported."""
        _expect(req, ConnectRequest, "Connect")
        raise _unsupported("Connect")

    def delete(self, ctx: Any, req: DeleteRequest) -> DeleteResponse:
        """Delete a sandbox; the base service rejects the call as unsupported."""
        _expect(req, DeleteRequest, "Delete")
        raise _unsupported("Delete")


def _make_handler(
    service: Manager, attribute: str, request_type: type[Message]
) -> Handler:
    def handle(ctx: Any, payload: bytes) -> bytes:
        try:
            request = request_type.from_bytes(payload)
        except DecodeError as exc:
            raise RpcError(
                RpcError.INVALID_ARGUMENT,
                f"failed to decode {request_type.full_name()}: {exc}",
            ) from exc
        response = getattr(service, attribute)(ctx, request)
        return response.to_bytes()

    return handle


def create_manager(service: Manager) -> dict[str, Handler]:
    """Map each method path of the service to a handler taking (ctx, payload bytes)."""
    return {
        _method_path("Create"): _make_handler(service, "create", CreateRequest),
        _method_path("Connect"): _make_handler(service, "connect", ConnectRequest),
        _method_path("Delete"): _make_handler(service, "delete", DeleteRequest),
    }