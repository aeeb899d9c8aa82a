"""
A Field is the "fundamental" datatype from the format point of view: something
with a size fixed at construction time that knows how to decode its value from
a buffer and how to encode it back.

Fields don't hold any data, the same instance can be shared by any number of
struct definitions. The struct passes to them the buffer, the absolute offset
and the endianess at every call.
"""
import logging
import struct

import bitstring

from .meta import FieldBase, Endianess
from .exceptions import PackException


class Field(FieldBase):
    """Base class to subclass from"""

    def __init__(self, size=None):
        super().__init__()
        self.logger = logging.getLogger(__name__)
        self._size = size

    def __repr__(self):
        return '<%s(%s)>' % (self.__class__.__name__, self.size)

    def _get_size(self):
        if self._size is None:
            raise NotImplementedError(f"method {self.__class__.__name__}._get_size() not implemented")

        return self._size

    size = property(
        fget=lambda self: self._get_size(),
    )

    def decode(self, buffer, offset, little_endian=False):
        '''Read exactly "size" bytes from the buffer starting at offset.'''
        raise NotImplementedError(f"method {self.__class__.__name__}.decode() not implemented")

    def encode(self, buffer, offset, value, little_endian=False):
        '''Write exactly "size" bytes into the (writable) buffer starting at offset.'''
        raise NotImplementedError(f"method {self.__class__.__name__}.encode() not implemented")

    def copy(self, value):
        '''Return a value equal to the one passed but not sharing anything mutable with it.'''
        return value


class Bytes(Field):
    """Represent a contiguous chunk of bytes.

    The decoded value is a bytearray copied out of the buffer. When encoding,
    a value shorter than the field is padded with zeros, a longer one is cut.
    """

    def __init__(self, n):
        super().__init__(size=n)

    def decode(self, buffer, offset, little_endian=False):
        return bytearray(buffer[offset:offset + self.size])

    def encode(self, buffer, offset, value, little_endian=False):
        if isinstance(value, (str, int)):
            raise PackException([], f'{self.__class__.__name__} needs a bytes-like value, not {type(value).__name__}')

        try:
            raw = bytes(value)[:self.size]
        except (TypeError, ValueError) as e:
            raise PackException([], str(e))

        buffer[offset:offset + self.size] = raw.ljust(self.size, b'\x00')

    def copy(self, value):
        return bytearray(value)


class StructField(Field):
    """
    Simplest of the fields: mimic the behaviour of the struct module packing/unpacking
    integers to/from bytes.

    It's possible to indicate via the "enum" argument some subclass of enum.Enum so
    to have directly a representation of the integer value of the field itself.
    """

    def __init__(self, format, enum=None):
        self.format = format
        self.enum = enum
        super().__init__(size=struct.calcsize('<%s' % format))

    def __repr__(self):
        if not self.enum:
            return '<%s(%r)>' % (self.__class__.__name__, self.format)

        return f'<{self.__class__.__name__}({self.format!r}, enum={self.enum.__name__})>'

    def get_format(self, little_endian):
        return '%s%s' % (Endianess.from_flag(little_endian).prefix, self.format)

    def _unpack_enum(self, value):
        try:
            return self.enum(value)
        except ValueError:
            self.logger.warning(f'enum {self.enum!r} doesn\'t have element with value 0x{value:x} in it')

        return value

    def decode(self, buffer, offset, little_endian=False):
        value = struct.unpack_from(self.get_format(little_endian), buffer, offset)[0]
        if self.enum:
            value = self._unpack_enum(value)

        return value

    def encode(self, buffer, offset, value, little_endian=False):
        if self.enum and isinstance(value, self.enum):
            value = value.value

        try:
            struct.pack_into(self.get_format(little_endian), buffer, offset, value)
        except struct.error as e:
            raise PackException([], str(e))


class UInt8(StructField):
    def __init__(self, **kwargs):
        super().__init__('B', **kwargs)


class Int8(StructField):
    def __init__(self, **kwargs):
        super().__init__('b', **kwargs)


class UInt16(StructField):
    def __init__(self, **kwargs):
        super().__init__('H', **kwargs)


class Int16(StructField):
    def __init__(self, **kwargs):
        super().__init__('h', **kwargs)


class UInt32(StructField):
    def __init__(self, **kwargs):
        super().__init__('I', **kwargs)


class Int32(StructField):
    def __init__(self, **kwargs):
        super().__init__('i', **kwargs)


class UInt64(StructField):
    def __init__(self, **kwargs):
        super().__init__('Q', **kwargs)


class Int64(StructField):
    def __init__(self, **kwargs):
        super().__init__('q', **kwargs)


class TextField(Field):
    """Common logic of the fields holding text.

    A text that doesn't fit the field is truncated at the byte budget; pass
    strict=True to have a PackException instead.
    """

    def __init__(self, n, encoding='utf-8', strict=False):
        super().__init__(size=n)
        self.encoding = encoding
        self.strict = strict

    def _encode_text(self, value, budget):
        if not isinstance(value, str):
            raise PackException([], f'{self.__class__.__name__} needs a str, not {type(value).__name__}')

        raw = value.encode(self.encoding)
        if len(raw) > budget:
            if self.strict:
                raise PackException([], f'text of {len(raw)} bytes doesn\'t fit in {budget} bytes')
            self.logger.debug('truncating text %r to %d bytes', value, budget)

        return raw[:budget]


class String(TextField):
    """Fixed length text padded with zeros.

    The decoded value keeps the padding, so "XYZ" packed in a String(4)
    comes back as "XYZ\\0".
    """

    def decode(self, buffer, offset, little_endian=False):
        return bytes(buffer[offset:offset + self.size]).decode(self.encoding, errors='replace')

    def encode(self, buffer, offset, value, little_endian=False):
        raw = self._encode_text(value, self.size)
        buffer[offset:offset + self.size] = raw.ljust(self.size, b'\x00')


class CString(TextField):
    """Null terminated text.

    The terminator is a zero code unit of the encoding: one byte for utf-8,
    two for utf-16, four for utf-32. The text has at most n minus the size of
    the terminator meaningful bytes.
    """

    def __init__(self, n, encoding='utf-8', strict=False):
        super().__init__(n, encoding=encoding, strict=strict)
        # the difference cancels out a byte order mark
        self.unit = len('\x00\x00'.encode(encoding)) - len('\x00'.encode(encoding))
        if isinstance(n, int) and 0 < n < self.unit:
            raise ValueError(f'{self.__class__.__name__} of {n} bytes has no room for the terminator of {encoding}')

    def decode(self, buffer, offset, little_endian=False):
        raw = bytes(buffer[offset:offset + self.size])
        terminator = b'\x00' * self.unit
        for end in range(0, len(raw) - self.unit + 1, self.unit):
            if raw[end:end + self.unit] == terminator:
                raw = raw[:end]
                break

        return raw.decode(self.encoding, errors='replace')

    def encode(self, buffer, offset, value, little_endian=False):
        budget = self.size - self.unit
        budget -= budget % self.unit
        raw = self._encode_text(value, budget) + b'\x00' * self.unit
        buffer[offset:offset + len(raw)] = raw


class Bits(Field):
    """Expose n bytes as a bitstring.BitArray of n * 8 bits.

    The bits are ordered from the most significant, for a little endian
    struct the bytes are reversed first so that the array reads like the
    integer they represent, i.e. the least significant bit is the last one.
    """

    def __init__(self, n):
        super().__init__(size=n)

    def decode(self, buffer, offset, little_endian=False):
        raw = bytes(buffer[offset:offset + self.size])
        if little_endian:
            raw = raw[::-1]

        return bitstring.BitArray(raw)

    def encode(self, buffer, offset, value, little_endian=False):
        length = self.size * 8
        if isinstance(value, int):
            try:
                value = bitstring.Bits(value.to_bytes(self.size, 'big'))
            except OverflowError as e:
                raise PackException([], str(e))

        if not isinstance(value, bitstring.Bits) or len(value) != length:
            raise PackException([], f'{self.__class__.__name__} needs {length} bits or an integer')

        raw = value.tobytes()
        if little_endian:
            raw = raw[::-1]

        buffer[offset:offset + self.size] = raw

    def copy(self, value):
        return bitstring.BitArray(value)


class Custom(Field):
    """Escape hatch for encodings not covered by the other fields.

    The decode and encode callables have the same signatures of
    Field.decode() and Field.encode(); pass copy when the decoded value is
    mutable.
    """

    def __init__(self, size, decode, encode, copy=None):
        super().__init__(size=size)
        self._decode = decode
        self._encode = encode
        self._copy = copy

    def decode(self, buffer, offset, little_endian=False):
        return self._decode(buffer, offset, little_endian)

    def encode(self, buffer, offset, value, little_endian=False):
        self._encode(buffer, offset, value, little_endian)

    def copy(self, value):
        if self._copy is None:
            return value

        return self._copy(value)
