import struct

import pytest

from fixedstruct.exceptions import UnpackException
from fixedstruct.formats.gpt import (
    ATTRIBUTE_LEGACY_BIOS_BOOTABLE,
    ATTRIBUTE_REQUIRED,
    GPT_REVISION_1_0,
    GPT_SIGNATURE,
    GPTHeader,
    PartitionEntry,
    format_guid,
    read_gpt,
)


EFI_SYSTEM_PARTITION = bytes.fromhex('28732ac11ff8d211ba4b00a0c93ec93b')

HEADER = {
    'signature': GPT_SIGNATURE,
    'revision': GPT_REVISION_1_0,
    'header_size': 92,
    'crc32': 0x12345678,
    'reserved': 0,
    'current_lba': 1,
    'backup_lba': 1000000,
    'first_usable_lba': 34,
    'last_usable_lba': 999967,
    'disk_guid': b'\xaa' * 16,
    'part_entry_start_lba': 2,
    'num_part_entries': 4,
    'part_entry_size': 128,
    'crc32_part_entries': 0x87654321,
}


def make_image():
    image = bytearray(512 * 3)
    image[512:512 + GPTHeader._meta.size] = GPTHeader.pack(HEADER)

    entry = PartitionEntry.pack({
        'partition_type_guid': EFI_SYSTEM_PARTITION,
        'unique_guid': bytes(range(16)),
        'first_lba': 2048,
        'last_lba': 206847,
        'attributes': (1 << ATTRIBUTE_REQUIRED) | (1 << 60),
        'name': 'EFI system partition',
    })
    image[1024:1024 + len(entry)] = entry

    return bytes(image)


def test_header_layout():
    assert GPTHeader._meta.size == 92
    assert PartitionEntry._meta.size == 128
    assert GPTHeader._meta.field_offsets['current_lba'] == 24
    assert GPTHeader._meta.field_offsets['disk_guid'] == 56


def test_header():
    buffer = GPTHeader.pack(HEADER)

    assert len(buffer) == 92
    assert struct.unpack_from('<I', buffer, 8)[0] == GPT_REVISION_1_0
    assert struct.unpack_from('<Q', buffer, 24)[0] == 1

    header = GPTHeader.unpack(buffer)

    assert header == HEADER
    assert header.signature == b'EFI PART'
    assert header.first_usable_lba == 34


def test_partition_entry():
    entry = PartitionEntry.unpack(make_image(), 1024)

    assert entry.is_used()
    assert entry.first_lba == 2048
    assert entry.name == 'EFI system partition'
    assert entry.has_attribute(ATTRIBUTE_REQUIRED)
    assert not entry.has_attribute(ATTRIBUTE_LEGACY_BIOS_BOOTABLE)
    assert entry.has_attribute(60)
    assert entry.attributes.uint == (1 << ATTRIBUTE_REQUIRED) | (1 << 60)
    assert format_guid(entry.partition_type_guid) == 'C12A7328-F81F-11D2-BA4B-00A0C93EC93B'


def test_partition_entry_clone():
    entry = PartitionEntry.unpack(make_image(), 1024)

    cloned = entry.clone()
    cloned.attributes[0] = True
    cloned.unique_guid[0] = 0xff

    assert entry.attributes.uint == (1 << ATTRIBUTE_REQUIRED) | (1 << 60)
    assert entry.unique_guid[0] == 0
    assert cloned.to_buffer() != entry.to_buffer()


def test_partition_name_truncation():
    entry = PartitionEntry.unpack(make_image(), 1024)
    entry.name = 'x' * 40

    entry = PartitionEntry.unpack(entry.to_buffer())
    assert entry.name == 'x' * 36


def test_read_gpt(tmp_path):
    path = tmp_path / 'disk.img'
    path.write_bytes(make_image())

    header, entries = read_gpt(str(path))

    assert header.num_part_entries == 4
    assert len(entries) == 4
    assert [_.is_used() for _ in entries] == [True, False, False, False]
    assert entries[0].last_lba == 206847


def test_read_gpt_wrong_signature():
    image = bytearray(make_image())
    image[512] = 0

    with pytest.raises(UnpackException) as excinfo:
        read_gpt(bytes(image))

    assert excinfo.value.chain == ['GPTHeader', 'signature']
