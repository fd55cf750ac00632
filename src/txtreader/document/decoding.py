"""Charset fallback decoding and the shared line splitting convention."""

from __future__ import annotations

import codecs
from dataclasses import dataclass
import logging
from pathlib import Path

from charset_normalizer import from_bytes


UTF8 = "utf-8"
LEGACY_ENCODING = "gb18030"
PERMISSIVE_FALLBACK = "utf-8"
DEFAULT_SAMPLE_BYTES = 1024 * 1024
LINE_FEED = b"\n"

_BOM = codecs.BOM_UTF8

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class TextEncoding:
    """Codec name plus error policy chosen for one document."""

    name: str
    errors: str = "strict"
    has_bom: bool = False

    @property
    def is_permissive(self) -> bool:
        return self.errors != "strict"

    def decode(self, raw: bytes, *, at_start: bool = False) -> str:
        """Decode ``raw``; a byte order mark is dropped only at file offset 0."""

        if at_start and self.has_bom and raw.startswith(_BOM):
            raw = raw[len(_BOM) :]
        return raw.decode(self.name, errors=self.errors)


@dataclass(frozen=True, slots=True)
class DecodedText:
    text: str
    encoding: TextEncoding


def _is_line_feed_compatible(name: str) -> bool:
    try:
        return codecs.encode("\n", name) == LINE_FEED
    except LookupError:
        return False


def _guess_permissive_encoding(sample: bytes) -> TextEncoding:
    best = from_bytes(sample).best()
    if best and best.encoding and _is_line_feed_compatible(best.encoding):
        return TextEncoding(best.encoding, errors="replace")
    return TextEncoding(PERMISSIVE_FALLBACK, errors="replace")


def _strict_encoding(encoding: str, raw_head: bytes) -> TextEncoding:
    return TextEncoding(encoding, has_bom=encoding == UTF8 and raw_head.startswith(_BOM))


def decode_bytes(raw: bytes) -> DecodedText:
    """Decode a full payload: strict UTF-8, then GB18030, then a permissive guess."""

    for encoding in (UTF8, LEGACY_ENCODING):
        chosen = _strict_encoding(encoding, raw)
        try:
            return DecodedText(text=chosen.decode(raw, at_start=True), encoding=chosen)
        except UnicodeDecodeError:
            continue

    fallback = _guess_permissive_encoding(raw[:DEFAULT_SAMPLE_BYTES])
    logger.info("Strict decoding failed, using permissive %s", fallback.name)
    return DecodedText(text=fallback.decode(raw), encoding=fallback)


def split_lines(text: str) -> list[str]:
    """Split on line feeds only; a final line feed does not open an extra line."""

    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return lines


def decode_lines(raw: bytes) -> list[str]:
    return split_lines(decode_bytes(raw).text)


def detect_stream_encoding(
    path: str | Path,
    *,
    chunk_bytes: int,
    sample_bytes: int = DEFAULT_SAMPLE_BYTES,
) -> TextEncoding:
    """Pick the document encoding in one streamed pass without materializing it."""

    source = Path(path)
    candidates = {
        encoding: codecs.getincrementaldecoder(encoding)("strict")
        for encoding in (UTF8, LEGACY_ENCODING)
    }
    head = b""

    with source.open("rb") as handle:
        while candidates:
            chunk = handle.read(chunk_bytes)
            if len(head) < len(_BOM):
                head = (head + chunk)[: len(_BOM)]
            for encoding, decoder in list(candidates.items()):
                try:
                    decoder.decode(chunk, final=not chunk)
                except UnicodeDecodeError:
                    del candidates[encoding]
            if not chunk:
                break

    for encoding in (UTF8, LEGACY_ENCODING):
        if encoding in candidates:
            return _strict_encoding(encoding, head)

    with source.open("rb") as handle:
        sample = handle.read(sample_bytes)
    fallback = _guess_permissive_encoding(sample)
    logger.info("Strict decoding failed for %s, using permissive %s", source, fallback.name)
    return fallback
