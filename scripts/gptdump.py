#!/usr/bin/env python3
import sys
import os
import logging

from fixedstruct.exceptions import FixedStructException
from fixedstruct.formats.gpt import (
    read_gpt,
    format_guid,
    SECTOR_SIZE,
    ATTRIBUTE_REQUIRED,
    ATTRIBUTE_NO_BLOCK_IO_PROTOCOL,
    ATTRIBUTE_LEGACY_BIOS_BOOTABLE,
)


logging.basicConfig(level=logging.DEBUG if 'DEBUG' in os.environ else logging.INFO)
logger = logging.getLogger(__name__)


def usage(progname):
    print('usage: %s <disk image> [sector size]' % progname)
    sys.exit(1)


def dump_header(hdr):
    print(f'''GPT Header:
  Signature:                         {bytes(hdr.signature).decode('latin1')}
  Revision:                          {hdr.revision >> 16}.{hdr.revision & 0xffff}
  Header size:                       {hdr.header_size} (bytes)
  CRC32:                             0x{hdr.crc32:08x}
  Current LBA:                       {hdr.current_lba}
  Backup LBA:                        {hdr.backup_lba}
  First usable LBA:                  {hdr.first_usable_lba}
  Last usable LBA:                   {hdr.last_usable_lba}
  Disk GUID:                         {format_guid(hdr.disk_guid)}
  Partition entries start LBA:       {hdr.part_entry_start_lba}
  Number of partition entries:       {hdr.num_part_entries}
  Size of partition entry:           {hdr.part_entry_size} (bytes)
  Partition entries CRC32:           0x{hdr.crc32_part_entries:08x}''')


def dump_entries(entries):
    print('''Partition Entries:
  [Nr] Name                 First LBA    Last LBA     Flg Type GUID                            Unique GUID''')
    for idx, entry in enumerate(entries):
        if not entry.is_used():
            continue
        flags = ''.join([
            'R' if entry.has_attribute(ATTRIBUTE_REQUIRED) else '-',
            'N' if entry.has_attribute(ATTRIBUTE_NO_BLOCK_IO_PROTOCOL) else '-',
            'B' if entry.has_attribute(ATTRIBUTE_LEGACY_BIOS_BOOTABLE) else '-',
        ])
        print(f'''  [{idx: >2d}] {entry.name:<20} {entry.first_lba:<12} {entry.last_lba:<12} {flags} {format_guid(entry.partition_type_guid)} {format_guid(entry.unique_guid)}''')


if __name__ == '__main__':
    if len(sys.argv) < 2:
        usage(sys.argv[0])

    path = sys.argv[1]
    sector_size = int(sys.argv[2]) if len(sys.argv) > 2 else SECTOR_SIZE

    try:
        header, entries = read_gpt(path, sector_size=sector_size)
    except FixedStructException as e:
        logger.error(f'failed to read the GPT of \'{path}\': {e}')
        sys.exit(2)

    dump_header(header)
    dump_entries(entries)
