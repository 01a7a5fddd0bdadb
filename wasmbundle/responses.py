"""Reply messages of the sandbox manager service."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

from wasmbundle.messages import Message, proto_field

__all__ = ["CreateResponse", "ConnectResponse", "DeleteResponse"]


@dataclass
class CreateResponse(Message):
    """Reply to a create request: where the new sandbox listens."""

    NAME: ClassVar[str] = "CreateResponse"

    socket_path: str = proto_field(1)


@dataclass
class ConnectResponse(Message):
    """Reply to a connect request: where the existing sandbox listens."""

    NAME: ClassVar[str] = "ConnectResponse"

    socket_path: str = proto_field(1)


@dataclass
class DeleteResponse(Message):
    """Reply to a delete request; it carries no fields of its own."""

    NAME: ClassVar[str] = "DeleteResponse"