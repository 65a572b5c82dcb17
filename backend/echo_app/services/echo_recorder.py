"""Builds echo records from incoming requests and logs them to the console."""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Dict, Iterable, Optional, Tuple

from fastapi import Request

from ..schemas.echo import EchoRecord, HeaderValue

logger = logging.getLogger(__name__)

RawHeaders = Iterable[Tuple[bytes, bytes]]


def format_timestamp(moment: datetime) -> str:
    """Render ``moment`` as ISO-8601 UTC with millisecond precision, e.g. ``2024-05-01T12:00:00.123Z``."""

    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def reconstruct_target(raw_path: bytes, query_string: bytes) -> str:
    # ASGI splits the request target; put it back together without normalizing.
    target = raw_path.split(b"?", 1)[0].decode("latin-1")
    if query_string:
        target += "?" + query_string.decode("latin-1")
    return target


def group_headers(raw_headers: RawHeaders) -> Dict[str, HeaderValue]:
    grouped: Dict[str, HeaderValue] = {}
    for raw_name, raw_value in raw_headers:
        name = raw_name.decode("latin-1").lower()
        value = raw_value.decode("latin-1")
        existing = grouped.get(name)
        if existing is None:
            grouped[name] = value
        elif isinstance(existing, list):
            existing.append(value)
        else:
            grouped[name] = [existing, value]
    return grouped


def build_echo_record(
    method: str,
    raw_path: bytes,
    query_string: bytes,
    raw_headers: RawHeaders,
    body: bytes,
    now: Optional[datetime] = None,
) -> EchoRecord:
    """Assemble an :class:`EchoRecord` from the pieces of a request.

    ``now`` defaults to the current UTC time and should be taken after the
    body has been fully received.
    """

    moment = now if now is not None else datetime.now(timezone.utc)
    return EchoRecord(
        method=method,
        url=reconstruct_target(raw_path, query_string),
        headers=group_headers(raw_headers),
        body=body.decode("utf-8", errors="replace"),
        time=format_timestamp(moment),
    )


class EchoRecorder:
    """Reads a full request and turns it into a logged echo record."""

    def __init__(self, log: Optional[logging.Logger] = None) -> None:
        self._logger = log or logger

    async def record(self, request: Request) -> EchoRecord:
        body_bytes = await request.body()
        scope = request.scope
        raw_path = scope.get("raw_path") or scope.get("path", "/").encode("utf-8")
        record = build_echo_record(
            method=request.method,
            raw_path=raw_path,
            query_string=scope.get("query_string", b""),
            raw_headers=request.headers.raw,
            body=body_bytes,
        )
        self._logger.info("--- request ---\n%s", self.render(record))
        return record

    @staticmethod
    def render(record: EchoRecord) -> str:
        return record.model_dump_json(indent=2)


def create_echo_recorder() -> EchoRecorder:
    """Factory function to create an EchoRecorder instance."""

    return EchoRecorder()
