'''
# GUID Partition Table

The partitioning scheme of UEFI: the header is at LBA 1 (with a backup copy at
the last LBA of the disk) and points to an array of partition entries.

The reference is the UEFI specification, chapter 5 "GUID Partition Table (GPT)
Disk Layout" at <https://uefi.org/specifications>. All the integers are little
endian.
'''
import logging
import uuid

from ..core import Struct
from .. import fields
from ..exceptions import PackException, UnpackException
from ..streams import Stream


logger = logging.getLogger(__name__)

GPT_SIGNATURE = b'EFI PART'
GPT_REVISION_1_0 = 0x00010000
SECTOR_SIZE = 512

# bits of PartitionEntry.attributes
ATTRIBUTE_REQUIRED             = 0
ATTRIBUTE_NO_BLOCK_IO_PROTOCOL = 1
ATTRIBUTE_LEGACY_BIOS_BOOTABLE = 2

PARTITION_NAME_SIZE = 72


def _decode_name(buffer, offset, little_endian):
    raw = bytes(buffer[offset:offset + PARTITION_NAME_SIZE])
    name = raw.decode('utf-16-le', errors='replace')
    end = name.find('\x00')

    return name if end == -1 else name[:end]


def _encode_name(buffer, offset, value, little_endian):
    if not isinstance(value, str):
        raise PackException([], f'the partition name must be a str, not {type(value).__name__}')

    raw = value.encode('utf-16-le')[:PARTITION_NAME_SIZE]
    buffer[offset:offset + PARTITION_NAME_SIZE] = raw.ljust(PARTITION_NAME_SIZE, b'\x00')


class GPTHeader(Struct):
    signature            = fields.Bytes(8)
    revision             = fields.UInt32()
    header_size          = fields.UInt32()
    crc32                = fields.UInt32()
    reserved             = fields.UInt32()
    current_lba          = fields.UInt64()
    backup_lba           = fields.UInt64()
    first_usable_lba     = fields.UInt64()
    last_usable_lba      = fields.UInt64()
    disk_guid            = fields.Bytes(16)
    part_entry_start_lba = fields.UInt64()
    num_part_entries     = fields.UInt32()
    part_entry_size      = fields.UInt32()
    crc32_part_entries   = fields.UInt32()

    class Meta:
        little_endian = True


class PartitionEntry(Struct):
    '''An all zeros partition type GUID marks an unused entry.'''
    partition_type_guid = fields.Bytes(16)
    unique_guid         = fields.Bytes(16)
    first_lba           = fields.UInt64()
    last_lba            = fields.UInt64()
    attributes          = fields.Bits(8)
    name                = fields.Custom(PARTITION_NAME_SIZE, _decode_name, _encode_name)

    class Meta:
        little_endian = True

    def is_used(self):
        return any(self['partition_type_guid'])

    def has_attribute(self, bit):
        attributes = self['attributes']
        return attributes[attributes.len - 1 - bit]


def format_guid(raw):
    '''GUIDs are stored with the first three groups little endian.'''
    return str(uuid.UUID(bytes_le=bytes(raw))).upper()


def read_gpt(source, sector_size=SECTOR_SIZE):
    '''Return the primary header and the list of the partition entries found
    in a disk image.'''
    with Stream(source) as stream:
        return _read_gpt(stream, sector_size)


def _read_gpt(stream, sector_size):
    header = GPTHeader.unpack_from(stream, offset=sector_size)

    if bytes(header.signature) != GPT_SIGNATURE:
        raise UnpackException(['GPTHeader', 'signature'], f'wrong signature {bytes(header.signature)!r}')

    if header.part_entry_size < PartitionEntry._meta.size:
        raise UnpackException(
            ['GPTHeader', 'part_entry_size'],
            f'partition entries of {header.part_entry_size} bytes are too small')

    start = header.part_entry_start_lba * sector_size
    logger.debug('reading %d partition entries at offset 0x%x', header.num_part_entries, start)

    entries = []
    for idx in range(header.num_part_entries):
        entries.append(PartitionEntry.unpack_from(stream, offset=start + idx * header.part_entry_size))

    return header, entries
