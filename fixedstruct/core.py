"""
Core module: compile a list of fields into a struct definition and convert
between buffers and records.

"""
import logging
import struct
from types import MappingProxyType
from typing import Dict, Mapping, Tuple

from .meta import MetaStruct
from .exceptions import (
    DefinitionException,
    FixedStructException,
    MissingFieldException,
    PackException,
    UnpackException,
)


logger = logging.getLogger(__name__)


def _as_bytes_view(buffer):
    try:
        view = memoryview(buffer)
    except TypeError:
        raise UnpackException([], f'\'{buffer.__class__.__name__}\' doesn\'t support the buffer protocol')

    return view.cast('B') if view.format != 'B' or view.ndim != 1 else view


class StructDefinition(object):
    """
    The layout of a struct: the fields are placed one after the other in the
    order they are given, without any padding, so the offset of a field is the
    sum of the sizes of the fields preceding it.

    A definition is immutable and can be shared freely, the records it
    produces keep a reference to it.
    """

    def __init__(self, name, fields, little_endian=False, record_class=None):
        self.logger = logging.getLogger(__name__)
        self._name = name
        self._little_endian = bool(little_endian)
        self._record_class = record_class if record_class is not None else Record

        offsets: Dict[str, int] = {}
        size = 0
        for field_name, field in fields.items():
            field_size = field.size
            if isinstance(field_size, bool) or not isinstance(field_size, int) or field_size <= 0:
                raise DefinitionException(
                    [name, field_name],
                    f'the size of {field!r} must be a positive integer, not {field_size!r}')

            self.logger.debug('field %s.%s at offset 0x%x (%d bytes)', name, field_name, size, field_size)
            offsets[field_name] = size
            size += field_size

        self._fields = MappingProxyType(dict(fields))
        self._offsets = MappingProxyType(offsets)
        self._size = size

    def __repr__(self):
        return '<%s(%s, size=%d)>' % (self.__class__.__name__, self._name, self._size)

    def __reduce__(self):
        # a definition declared as a class is reached through the class itself
        if getattr(self._record_class, '_meta', None) is self:
            return (getattr, (self._record_class, '_meta'))

        return (self.__class__, (self._name, dict(self._fields), self._little_endian, self._record_class))

    name = property(fget=lambda self: self._name)
    fields = property(fget=lambda self: self._fields)
    field_offsets = property(fget=lambda self: self._offsets)
    size = property(fget=lambda self: self._size)
    little_endian = property(fget=lambda self: self._little_endian)
    record_class = property(fget=lambda self: self._record_class)

    @property
    def layout(self) -> Dict[str, Tuple[int, int]]:
        return {name: (self._offsets[name], field.size) for name, field in self._fields.items()}

    def unpack(self, buffer, offset=0):
        '''Build a record decoding every field from the buffer, starting at offset.

        The whole struct must fit the buffer: this is checked before any field
        is touched so that no partially decoded record can exist.
        '''
        view = _as_bytes_view(buffer)

        if offset < 0 or offset + self._size > len(view):
            raise UnpackException(
                [self._name],
                f'{self._size} bytes at offset {offset} exceed the buffer of {len(view)} bytes')

        self.logger.debug('unpacking \'%s\' at offset 0x%x', self._name, offset)

        values = {}
        for field_name, field in self._fields.items():
            field_offset = offset + self._offsets[field_name]
            values[field_name] = field.decode(view, field_offset, self._little_endian)
            self.logger.debug('unpacked %s.%s=%r', self._name, field_name, values[field_name])

        return self._record_class(values, struct=self)

    def unpack_from(self, source, offset=0):
        '''Like unpack() but reading the bytes from a path, a bytes-like object or a binary file.'''
        from .streams import Stream

        with Stream(source) as stream:
            data = stream.read_at(offset, self._size)

        return self.unpack(data)

    def pack(self, values: Mapping) -> bytes:
        '''Encode the values in a new buffer of exactly "size" bytes.

        All the fields are mandatory, keys not belonging to the definition are ignored.
        '''
        missing = [_ for _ in self._fields if _ not in values]
        if missing:
            raise MissingFieldException([self._name, missing[0]], 'missing value for field(s) %s' % ', '.join(missing))

        buffer = bytearray(self._size)

        for field_name, field in self._fields.items():
            field_offset = self._offsets[field_name]
            self.logger.debug('packing %s.%s at offset 0x%x', self._name, field_name, field_offset)

            try:
                field.encode(buffer, field_offset, values[field_name], self._little_endian)
            except FixedStructException as e:
                e.chain[:0] = [self._name, field_name]
                raise
            except (struct.error, TypeError, ValueError, OverflowError, IndexError) as e:
                raise PackException([self._name, field_name], str(e)) from e

            if len(buffer) != self._size:
                raise PackException([self._name, field_name], 'the encoding changed the size of the buffer')

        return bytes(buffer)


class Record(dict, metaclass=MetaStruct):
    """
    The values of a struct, indexed by field name, together with the
    definition they come from (the attribute "struct").

    The values can be accessed also as attributes, as long as the name of the
    field doesn't clash with a method of the record.
    """

    __slots__ = ('_struct',)

    def __init__(self, values, struct=None):
        struct = struct if struct is not None else self._meta
        if struct is None:
            raise TypeError(f'a {self.__class__.__name__} needs the definition of the struct it belongs to')

        super().__init__(values)
        object.__setattr__(self, '_struct', struct)

    def __reduce__(self):
        return (self.__class__, (dict(self), self._struct))

    @property
    def struct(self):
        return self._struct

    def __getattr__(self, name):
        try:
            return self[name]
        except KeyError:
            raise AttributeError(f'\'{self.__class__.__name__}\' has no attribute or field \'{name}\'') from None

    def __setattr__(self, name, value):
        if name in self._struct.fields:
            self[name] = value
        else:
            object.__setattr__(self, name, value)

    def __repr__(self):
        msg = []
        for field_name, value in self.items():
            msg.append('%s=%r' % (field_name, value))
        return '<%s(%s)>' % (self._struct.name, ', '.join(msg))

    def __str__(self):
        msg = ''
        for field_name, value in self.items():
            msg += '%s: %r\n' % (field_name, value)
        return msg

    def __copy__(self):
        return self.__class__(self, struct=self._struct)

    def __deepcopy__(self, memo):
        return self.clone()

    def to_buffer(self) -> bytes:
        return self._struct.pack(self)

    def clone(self):
        '''Copy the record, the mutable values (like the byte arrays) are copied too.'''
        fields = self._struct.fields
        values = {}
        for name, value in self.items():
            values[name] = fields[name].copy(value) if name in fields else value

        return self.__class__(values, struct=self._struct)


class Struct(Record):
    """Base class for the definitions written as a class, like

        class Header(Struct):
            magic = fields.Bytes(4)
            count = fields.UInt32()

            class Meta:
                little_endian = True

        header = Header.unpack(data)
    """

    __slots__ = ()

    @classmethod
    def _get_definition(cls):
        if cls._meta is None:
            raise TypeError(f'\'{cls.__name__}\' doesn\'t define any field')

        return cls._meta

    @classmethod
    def unpack(cls, buffer, offset=0):
        return cls._get_definition().unpack(buffer, offset=offset)

    @classmethod
    def unpack_from(cls, source, offset=0):
        return cls._get_definition().unpack_from(source, offset=offset)

    @classmethod
    def pack(cls, values):
        return cls._get_definition().pack(values)


def define_struct(name, fields, little_endian=False) -> StructDefinition:
    '''Build the definition of a struct named "name" from the ordered mapping
    field name -> field.'''
    logger.debug('defining struct \'%s\' with fields %s', name, ', '.join(fields))
    return StructDefinition(name, fields, little_endian=little_endian)
