"""
UHRP Commitment Wire Format

A commitment token is a flat sequence of fields, each written as a single
length byte followed by that many content bytes:

    | L0 | field0 ... | L1 | field1 ... | ... | L7 | field7 ... |

Fields carry no type information; meaning comes from position only.
"""

from typing import List, Sequence, Union

from .errors import FieldTooLongError, MalformedScriptError

MAX_FIELD_LENGTH = 255

FieldLike = Union[bytes, bytearray, str]

BYTES_LIKE = (bytes, bytearray, memoryview)


def decode_fields(buffer: bytes) -> List[bytes]:
    """
    Split a raw script into its length-prefixed fields.

    Field count and content are not checked here.

    Raises:
        MalformedScriptError: if buffer is not bytes-like, or a length prefix
            claims more bytes than remain
    """
    if not isinstance(buffer, BYTES_LIKE):
        raise MalformedScriptError(f"Script must be bytes, got {type(buffer).__name__}")

    data = bytes(buffer)
    fields = []
    i = 0

    while i < len(data):
        length = data[i]
        start = i + 1
        end = start + length
        if end > len(data):
            raise MalformedScriptError(
                f"Field {len(fields)} at offset {i} claims {length} bytes, "
                f"only {len(data) - start} remain",
                offset=i,
            )
        fields.append(data[start:end])
        i = end

    return fields


def as_bytes(field: FieldLike) -> bytes:
    if isinstance(field, str):
        return field.encode('utf-8')
    return bytes(field)


def encode_fields(fields: Sequence[FieldLike]) -> bytes:
    """
    Encode fields with single-byte length prefixes.

    Strings are encoded as UTF-8.

    Raises:
        FieldTooLongError: if any field exceeds 255 bytes
    """
    out = bytearray()
    for index, field in enumerate(fields):
        content = as_bytes(field)
        if len(content) > MAX_FIELD_LENGTH:
            raise FieldTooLongError(index, len(content))
        out.append(len(content))
        out += content
    return bytes(out)
