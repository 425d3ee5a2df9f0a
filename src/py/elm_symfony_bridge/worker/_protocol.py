"""Wire protocol spoken with the transpilation worker.

Frames are JSON documents. An outbound frame carries a correlation ``id`` and
exactly one of ``routing`` / ``translation``; the worker answers every frame with
one inbound frame carrying the same ``id`` and a ``type`` tag.
"""

from typing import ClassVar, Union

import msgspec

__all__ = (
    "GeneratedFile",
    "InboundEnvelope",
    "RoutingRequest",
    "RoutingResponse",
    "TranslationRequest",
    "TranslationResponse",
    "WorkerMessage",
    "WorkerRequest",
    "WorkerResponse",
    "decode_envelope",
    "decode_response",
    "encode_message",
)


class RoutingRequest(msgspec.Struct, frozen=True, kw_only=True, rename="camel"):
    """Transpile the Symfony routing table into ``Routing.elm``."""

    kind: ClassVar[str] = "routing"

    content: str
    version: "str | None"
    env_variables: "dict[str, str | None]" = msgspec.field(default_factory=dict)
    url_prefix: str = ""


class TranslationRequest(msgspec.Struct, frozen=True, kw_only=True, rename="camel"):
    """Transpile one translation catalog into an Elm module."""

    kind: ClassVar[str] = "translation"

    name: str
    content: str
    version: "str | None"
    env_variables: "dict[str, str | None]" = msgspec.field(default_factory=dict)


WorkerRequest = Union[RoutingRequest, TranslationRequest]


class WorkerMessage(msgspec.Struct, omit_defaults=True):
    """Outbound frame: a request plus its correlation id."""

    id: str
    routing: "RoutingRequest | None" = None
    translation: "TranslationRequest | None" = None

    @classmethod
    def for_request(cls, request_id: str, request: WorkerRequest) -> "WorkerMessage":
        if isinstance(request, RoutingRequest):
            return cls(id=request_id, routing=request)
        return cls(id=request_id, translation=request)


class GeneratedFile(msgspec.Struct, frozen=True):
    name: str
    content: str


class RoutingResponse(msgspec.Struct, frozen=True, tag="routing", tag_field="type"):
    kind: ClassVar[str] = "routing"

    id: str
    succeeded: bool
    content: "str | None" = None
    error: "str | None" = None


class TranslationResponse(msgspec.Struct, frozen=True, tag="translation", tag_field="type"):
    kind: ClassVar[str] = "translation"

    id: str
    succeeded: bool
    file: "GeneratedFile | None" = None
    error: "str | None" = None


WorkerResponse = Union[RoutingResponse, TranslationResponse]


class InboundEnvelope(msgspec.Struct):
    """Only the correlation id of an inbound frame, used to route it before full decoding."""

    id: str


_encoder = msgspec.json.Encoder()
_envelope_decoder = msgspec.json.Decoder(InboundEnvelope)
_response_decoder = msgspec.json.Decoder(WorkerResponse)


def encode_message(request_id: str, request: WorkerRequest) -> bytes:
    """Serialize ``request`` into an outbound frame.

    Returns:
        The JSON frame, without trailing newline.
    """
    return _encoder.encode(WorkerMessage.for_request(request_id, request))


def decode_envelope(frame: "bytes | str") -> InboundEnvelope:
    """Decode the correlation id of an inbound frame.

    Raises:
        msgspec.DecodeError: If the frame is not a JSON object with a string ``id``.

    Returns:
        The envelope.
    """
    return _envelope_decoder.decode(frame)


def decode_response(frame: "bytes | str") -> WorkerResponse:
    """Decode a full inbound frame.

    Raises:
        msgspec.DecodeError: If the frame does not match any response type.

    Returns:
        The typed response.
    """
    return _response_decoder.decode(frame)
