"""Byte-level text codec for Whisper token symbols.

Whisper's BPE vocabulary stores every byte as a printable character: bytes
in the printable ranges map to the character with the same code point, the
remaining bytes are shifted to code points 256 and up. Decoding reverses
that mapping and interprets the bytes as UTF-8.
"""

from typing import Dict, Iterable, List

BYTE_SIZE = 256


def _printable_bytes() -> List[int]:
    return (
        list(range(ord("!"), ord("~") + 1))
        + list(range(ord("¡"), ord("¬") + 1))
        + list(range(ord("®"), ord("ÿ") + 1))
    )


def _build_byte_to_char() -> Dict[int, str]:
    byte_values = _printable_bytes()
    code_points = list(byte_values)
    shifted = 0
    for b in range(BYTE_SIZE):
        if b not in byte_values:
            byte_values.append(b)
            code_points.append(BYTE_SIZE + shifted)
            shifted += 1
    return {b: chr(c) for b, c in zip(byte_values, code_points)}


class ByteLevelTextCodec:
    """Reversible mapping between raw bytes and token characters.

    Example:
        >>> codec = ByteLevelTextCodec()
        >>> codec.decode(["Hello", "Ġworld"])
        'Hello world'
    """

    BYTE_TO_CHAR: Dict[int, str] = _build_byte_to_char()
    CHAR_TO_BYTE: Dict[str, int] = {c: b for b, c in BYTE_TO_CHAR.items()}

    def decode(self, token_symbols: Iterable[str]) -> str:
        """Turn raw token symbols back into text.

        Characters that are not part of the byte table decode to a zero
        byte instead of failing. Byte sequences that are not valid UTF-8
        decode to U+FFFD.

        Args:
            token_symbols: Raw symbols in emission order

        Returns:
            The decoded text
        """
        joined = "".join(token_symbols)
        raw = bytes(self.CHAR_TO_BYTE.get(c, 0) for c in joined)
        return raw.decode("utf-8", errors="replace")

    def encode(self, text: str) -> str:
        """Map UTF-8 text to its byte-level character form."""
        return "".join(self.BYTE_TO_CHAR[b] for b in text.encode("utf-8"))
