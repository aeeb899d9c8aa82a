"""
# fixedstruct: binary layouts for humans.

A lot of file formats and wire protocols are made of records with a fixed
layout: a header of a disk, the entry of a table in a firmware, the packet of
a serial protocol. Each record is a sequence of fields, each field has a size
known before reading any data and the fields follow one another without any
padding.

Describing the record as an ordered list of named fields is enough to derive
the offset of every field and the total size, so that the conversion in both
directions can be done without writing any offset arithmetic:

 1. unpack(): read the binary data and build a record, i.e. a dict mapping the
    name of each field to its value. The record remembers the definition it
    comes from.

 2. pack(): encode the values of a record into a new buffer of exactly the size
    of the struct.

A definition can be built from a mapping

    Header = define_struct('Header', {
        'magic':   fields.Bytes(4),
        'version': fields.UInt16(),
        'flags':   fields.UInt8(),
        'count':   fields.UInt32(),
    }, little_endian=True)

or declared as a class

    class Header(Struct):
        magic   = fields.Bytes(4)
        version = fields.UInt16()
        flags   = fields.UInt8()
        count   = fields.UInt32()

        class Meta:
            little_endian = True

and then

    header = Header.unpack(data)
    header.version = 2
    data = header.to_buffer()

"""
from . import fields
from .core import StructDefinition, Record, Struct, define_struct
from .exceptions import (
    FixedStructException,
    DefinitionException,
    UnpackException,
    PackException,
    MissingFieldException,
)
