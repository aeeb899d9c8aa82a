import logging
from enum import Enum, auto


logger = logging.getLogger(__name__)


class Endianess(Enum):
    LITTLE_ENDIAN = auto()
    BIG_ENDIAN    = auto()

    @classmethod
    def from_flag(cls, little_endian):
        return cls.LITTLE_ENDIAN if little_endian else cls.BIG_ENDIAN

    @property
    def prefix(self):
        '''The byte order character understood by the struct module.'''
        return '<' if self == Endianess.LITTLE_ENDIAN else '>'


class FieldBase(object):

    def contribute_to_struct(self, fields, name):
        if name in fields:
            raise AttributeError(f'field {name} is already present')

        fields[name] = self


class MetaStruct(type):
    """Build a StructDefinition out of the fields declared in a class body.

        class Header(Struct):
            magic   = fields.Bytes(4)
            version = fields.UInt16()

            class Meta:
                little_endian = True

    The fields are removed from the class namespace (they live in the
    definition stored at Header._meta) so that attribute access on a record
    reaches its values.
    """

    def __new__(cls, names, bases, attrs):
        from .core import StructDefinition

        options = attrs.pop('Meta', None)

        declared = [(name, value) for name, value in attrs.items() if hasattr(value, 'contribute_to_struct')]
        for name, _ in declared:
            del attrs[name]

        new_cls = super(MetaStruct, cls).__new__(cls, names, bases, attrs)

        # handle inheritance
        parents = [_ for _ in bases if isinstance(_, MetaStruct) and _._meta is not None]

        if not parents and not declared:
            new_cls._meta = None
            return new_cls

        struct_fields = {}
        little_endian = False
        for parent in parents:
            for obj_name, obj in parent._meta.fields.items():
                obj.contribute_to_struct(struct_fields, obj_name)
        if parents:
            little_endian = parents[0]._meta.little_endian

        for obj_name, obj in declared:
            logger.debug('contribute_to_struct() found for field \'%s\'' % obj_name)
            obj.contribute_to_struct(struct_fields, obj_name)

        little_endian = getattr(options, 'little_endian', little_endian)
        name = getattr(options, 'name', names)

        new_cls._meta = StructDefinition(name, struct_fields, little_endian=little_endian, record_class=new_cls)

        return new_cls
