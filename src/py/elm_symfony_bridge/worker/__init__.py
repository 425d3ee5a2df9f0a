"""Transpilation worker protocol, transports and client."""

from elm_symfony_bridge.worker._channel import (
    MAX_FRAME_SIZE,
    MemoryChannel,
    ProcessChannel,
    WorkerChannel,
    memory_channel_pair,
)
from elm_symfony_bridge.worker._client import WorkerClient, open_worker
from elm_symfony_bridge.worker._protocol import (
    GeneratedFile,
    RoutingRequest,
    RoutingResponse,
    TranslationRequest,
    TranslationResponse,
    WorkerMessage,
    WorkerRequest,
    WorkerResponse,
    decode_envelope,
    decode_response,
    encode_message,
)

__all__ = (
    "MAX_FRAME_SIZE",
    "GeneratedFile",
    "MemoryChannel",
    "ProcessChannel",
    "RoutingRequest",
    "RoutingResponse",
    "TranslationRequest",
    "TranslationResponse",
    "WorkerChannel",
    "WorkerClient",
    "WorkerMessage",
    "WorkerRequest",
    "WorkerResponse",
    "decode_envelope",
    "decode_response",
    "encode_message",
    "memory_channel_pair",
    "open_worker",
)
