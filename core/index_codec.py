# core/index_codec.py

"""Reading and writing the fixed-offset fields of .index/.index2 files."""
import struct
from pathlib import Path
from typing import BinaryIO, Iterable, Iterator, NamedTuple, Optional

from core.errors import IndexReadError

ENTRY_COUNT_OFFSET = 1036
SHARD_COUNT_OFFSET = 1104
ENTRY_TABLE_OFFSET = 2048


class RecordLayout(NamedTuple):
    """Size of one entry record and where its packed offset field sits."""
    name: str
    size: int
    offset_position: int


PRIMARY = RecordLayout('index', 16, 12)
SECONDARY = RecordLayout('index2', 8, 4)


def decode_shard(offset_field: int) -> int:
    """Shard index stored in the low bits of a packed offset field."""
    return (offset_field & 0xF) // 2


def decode_real_offset(offset_field: int) -> int:
    """Byte offset inside the shard."""
    return (offset_field >> 4) * 8


def encode_offset_field(real_offset: int, shard: int) -> int:
    """Inverse of decode_shard/decode_real_offset."""
    return ((real_offset // 8) << 4) | (shard * 2)


def _read_exact(buffer: BinaryIO, path: Path, offset: int, size: int) -> bytes:
    try:
        buffer.seek(offset)
    except (OSError, ValueError) as e:
        raise IndexReadError(path, offset, size) from e
    data = buffer.read(size)
    if len(data) != size:
        raise IndexReadError(path, offset, size, len(data))
    return data


def read_shard_count(path: Path) -> int:
    """Number of shards the client will open, as stored in the header."""
    with Path(path).open('rb') as buffer:
        return struct.unpack('<H', _read_exact(buffer, path, SHARD_COUNT_OFFSET, 2))[0]


def write_shard_count(path: Path, value: int):
    """Writes the shard-count byte in place, leaving the rest of the file alone."""
    if not 0 <= value <= 0xFF:
        raise ValueError(f"Shard count {value} does not fit in one byte")
    with Path(path).open('r+b') as buffer:
        buffer.seek(SHARD_COUNT_OFFSET)
        buffer.write(struct.pack('<B', value))


def read_entry_count(path: Path) -> int:
    with Path(path).open('rb') as buffer:
        return struct.unpack('<L', _read_exact(buffer, path, ENTRY_COUNT_OFFSET, 4))[0]


def records_in_table(entry_count: int, layout: RecordLayout, count_is_byte_length: bool = False) -> int:
    """Converts the header's entry count into a number of records.

    The shipping client stores the table's byte length in this field, so
    ``count_is_byte_length`` divides it by the record size.
    """
    if count_is_byte_length:
        return entry_count // layout.size
    return entry_count


def iterate_entries(path: Path, layout: RecordLayout, count: Optional[int] = None,
                    count_is_byte_length: bool = False) -> Iterator[int]:
    """Yields the packed offset field of every record in the entry table.

    Each call opens the file again and seeks to the start of the table, so
    the sequence can be restarted. ``count`` overrides the header value.
    """
    path = Path(path)
    with path.open('rb') as buffer:
        if count is None:
            raw = struct.unpack('<L', _read_exact(buffer, path, ENTRY_COUNT_OFFSET, 4))[0]
            count = records_in_table(raw, layout, count_is_byte_length)

        for i in range(count):
            record_start = ENTRY_TABLE_OFFSET + i * layout.size
            data = _read_exact(buffer, path, record_start + layout.offset_position, 4)
            yield struct.unpack('<L', data)[0]


def build_index_bytes(offset_fields: Iterable[int], layout: RecordLayout, shard_count: int,
                      count_is_byte_length: bool = False) -> bytes:
    """Assembles a minimal index blob holding the given packed offset fields."""
    fields = list(offset_fields)
    header = bytearray(ENTRY_TABLE_OFFSET)
    count = len(fields) * layout.size if count_is_byte_length else len(fields)
    struct.pack_into('<L', header, ENTRY_COUNT_OFFSET, count)
    struct.pack_into('<H', header, SHARD_COUNT_OFFSET, shard_count)

    table = bytearray(len(fields) * layout.size)
    for i, field in enumerate(fields):
        # Fill the hash part so records are not all-zero apart from the offset.
        struct.pack_into('<L', table, i * layout.size, (i * 2654435761) & 0xFFFFFFFF)
        struct.pack_into('<L', table, i * layout.size + layout.offset_position, field)
    return bytes(header) + bytes(table)


def write_index_file(path: Path, offset_fields: Iterable[int], layout: RecordLayout, shard_count: int,
                     count_is_byte_length: bool = False):
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(build_index_bytes(offset_fields, layout, shard_count, count_is_byte_length))
