from __future__ import annotations

import struct
import urllib.parse
from typing import Any

import aiohttp
import cbor2

from sapphire_relay.domain.errors import GatewayError

CONTENT_TYPE = "application/grpc-web+proto"
FLAG_DATA = 0x00
FLAG_TRAILERS = 0x80
HEADER_SIZE = 5


def encode_frame(payload: bytes, flag: int = FLAG_DATA) -> bytes:
    return struct.pack(">BI", flag, len(payload)) + payload


def decode_frames(body: bytes) -> tuple[list[bytes], dict[str, str]]:
    """Split a grpc-web response body into data frames and trailers."""
    messages: list[bytes] = []
    trailers: dict[str, str] = {}
    pos = 0
    while pos < len(body):
        if len(body) - pos < HEADER_SIZE:
            raise ValueError(f"truncated grpc-web frame header at offset {pos}")
        flag, size = struct.unpack(">BI", body[pos:pos + HEADER_SIZE])
        pos += HEADER_SIZE
        if len(body) - pos < size:
            raise ValueError(f"truncated grpc-web frame at offset {pos}")
        chunk = body[pos:pos + size]
        pos += size
        if flag & FLAG_TRAILERS:
            trailers.update(parse_trailers(chunk))
        else:
            messages.append(chunk)
    return messages, trailers


def parse_trailers(chunk: bytes) -> dict[str, str]:
    out: dict[str, str] = {}
    for line in chunk.decode("utf-8", errors="replace").split("\r\n"):
        if ":" not in line:
            continue
        key, value = line.split(":", 1)
        out[key.strip().lower()] = value.strip()
    return out


class GrpcWebClient:
    """Unary gRPC-web calls with CBOR payloads over one aiohttp session."""

    def __init__(self, base_url: str, *, timeout: float = 15.0, user_agent: str = "sapphire-relay/0.1"):
        self.base_url = base_url.rstrip("/")
        self._timeout = max(1.0, float(timeout))
        self._user_agent = user_agent
        self._session: aiohttp.ClientSession | None = None

    async def close(self) -> None:
        if self._session is not None and not self._session.closed:
            await self._session.close()

    async def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                headers={
                    "User-Agent": self._user_agent,
                    "Content-Type": CONTENT_TYPE,
                    "Accept": CONTENT_TYPE,
                    "X-Grpc-Web": "1",
                },
            )
        return self._session

    async def call(self, method: str, request: Any) -> Any:
        session = await self._ensure_session()
        url = f"{self.base_url}/{urllib.parse.quote(method)}"
        payload = encode_frame(cbor2.dumps(request, canonical=True))
        async with session.post(
            url,
            data=payload,
            timeout=aiohttp.ClientTimeout(total=self._timeout),
        ) as r:
            body = await r.read()
            if r.status != 200:
                raise GatewayError(method, r.status, f"http {r.status}: {body[:200]!r}")
            header_status = r.headers.get("grpc-status")
            header_message = r.headers.get("grpc-message", "")
        messages, trailers = decode_frames(body)
        status = trailers.get("grpc-status", header_status)
        if status is not None and int(status) != 0:
            message = urllib.parse.unquote(trailers.get("grpc-message", header_message))
            raise GatewayError(method, int(status), message)
        if not messages or not messages[0]:
            return None
        return cbor2.loads(messages[0])
