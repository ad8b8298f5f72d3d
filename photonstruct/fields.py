"""
A Field is "fundamental" datatype from the format point of view, something directly
packable/unpackable without need for relayouting.
"""
import logging
import struct
from enum import Enum

from .enum import Compliant
from .meta import FieldBase, Endianess
from .properties import ChunkPhase, Dependency, resolve
from .exceptions import (
    PhotonStructException,
    UnpackException,
    TruncatedException,
)


class Field(FieldBase):
    """Base class to subclass from"""

    def __init__(self, *args, name=None, father=None, default=None, offset=None,
                 endianess=Endianess.LITTLE_ENDIAN, compliant=Compliant.INHERIT):
        super().__init__()
        self._phase = ChunkPhase.INIT
        self.logger = logging.getLogger(__name__)
        self.name = name
        self.father = father
        self.default = default
        self.placement = offset  # where the field must be, int or Dependency
        self.offset = offset if isinstance(offset, int) else None  # where the field is
        self.endianess = endianess
        self.compliant = compliant

        self.init()

    def init(self):
        self.value = self.value_from_default()

    def value_from_default(self):
        return self.default

    def __str__(self):
        return str(self.value)

    def get_placement(self):
        '''Returns the absolute offset this field is declared at, if any.'''
        return resolve(self.placement, self)

    def is_compliant(self, level):
        '''Walk up the hierarchy while the compliant is inherited.'''
        instance = self
        while instance is not None:
            if instance.compliant & level:
                return True
            if not instance.compliant & Compliant.INHERIT:
                break

            instance = instance.father

        return False

    def _get_value(self):
        return self._value

    def _set_value(self, value):
        self._value = value

    value = property(
        fget=lambda self: self._get_value(),
        fset=lambda self, value: self._set_value(value))

    def _get_size(self):
        raise NotImplementedError(f"method {self.__class__.__name__}._get_size() not implemented")

    size = property(
        fget=lambda self: self._get_size(),
    )

    def _get_raw(self) -> bytes:
        raise NotImplementedError(f"method {self.__class__.__name__}._get_raw() not implemented")

    raw = property(
        fget=lambda self: self._get_raw(),
    )

    def relayout(self, offset=0):
        self.logger.debug("relayouting %s", self.__class__.__name__)
        old_phase = self._phase
        self._phase = ChunkPhase.RELAYOUTING
        self.offset = offset
        self._phase = old_phase

        return self.size

    def pack(self, stream, relayout=True):
        stream.write(self.raw)

    def unpack(self, stream):
        raise NotImplementedError('you need to implement this in the subclass')


class StructField(Field):
    """
    Simplest of the fields: mimic the behaviour of the struct module packing/unpacking
    numbers to/from bytes.

    The main advantage is the possibility to indicate via the "enum" argument some subclass
    of enum.Enum so to have directly a representation of the integer value of the field itself.
    A value not present in the enum is kept as the plain integer unless Compliant.ENUM is requested.
    """

    def __init__(self, format, default=0, enum=None, **kw):
        self.format = format
        self.enum = enum
        super().__init__(default=default, **kw)

    def __repr__(self):
        return '<%s(%r)>' % (self.__class__.__name__, self.value)

    def __str__(self):
        if isinstance(self.value, Enum):
            return self.value.name
        if isinstance(self.value, int):
            width = self.size * 2
            formatter = '0x%%0%dx' % width
            return formatter % (self.value,)

        return str(self.value)

    def value_from_default(self):
        if not self.enum or isinstance(self.default, self.enum):
            return super().value_from_default()

        return self._unpack_enum(self.default)

    def get_format(self):
        return '%s%s' % (self.endianess.prefix, self.format)

    def _get_size(self):
        return struct.calcsize(self.get_format())

    def _get_raw(self) -> bytes:
        value = self.value.value if isinstance(self.value, Enum) else self.value
        return struct.pack(self.get_format(), value)

    def _unpack_enum(self, value: int):
        try:
            return self.enum(value)
        except ValueError:
            if self.is_compliant(Compliant.ENUM):
                raise UnpackException(f'{self.enum.__name__} has no element with value 0x{value:x}')

            self.logger.warning(f'enum {self.enum.__name__} doesn\'t have element with value 0x{value:x} in it')

        return value

    def _unpack(self, raw: bytes):
        value = struct.unpack(self.get_format(), raw)[0]
        if self.enum:
            value = self._unpack_enum(value)

        return value

    def unpack(self, stream):
        self.value = self._unpack(stream.read_exact(self.size))


class StringField(Field):
    """Represent a contiguous chunk of bytes."""

    def __init__(self, n=None, **kw):
        if n is None and 'default' not in kw:
            raise ValueError("StringField must have 'n' or 'default' indicated!")

        self.length = n if n is not None else len(kw['default'])

        super().__init__(**kw)

    def __repr__(self):
        return '<%s(%s)>' % (self.__class__.__name__, repr(self.value))

    def __len__(self):
        return self.length

    def value_from_default(self):
        return b'\x00' * self.length if not self.default else self.default

    def _get_size(self):
        return self.length

    def _set_value(self, value) -> None:
        if len(value) != self.length:
            raise ValueError(f'you are trying to set a value with the wrong size (that is {self.length} bytes)')

        super()._set_value(bytes(value))

    def _get_raw(self):
        return self.value

    def unpack(self, stream):
        self.value = stream.read_exact(self.length)


class ArrayField(Field):
    '''Un/Pack an array of fields.

    The number of elements is indicated via the parameter named "n", an int or
    a Dependency resolved at unpacking time. All the elements are copies of the
    field passed as first argument, so they must have a fixed size.

    This class behaves like a read-only list.
    '''

    def __init__(self, field_cls, n=0, **kw):
        if not isinstance(n, (int, Dependency)):
            raise ValueError('n is \'%s\' must be of the right type' % n.__class__.__name__)

        self.field_cls = field_cls
        self._n = n

        super().__init__(**kw)

    def __repr__(self):
        return f'<{self.__class__.__name__}({self.value!r})>'

    def __getitem__(self, item):
        return self.value[item]

    def __iter__(self):
        return iter(self.value)

    def __len__(self):
        return len(self.value)

    def value_from_default(self):
        n = self._n if isinstance(self._n, int) else 0
        return [self.instance_element() for _ in range(n)]

    @property
    def n(self):
        return resolve(self._n, self)

    def _get_raw(self):
        return b''.join(element.raw for element in self.value)

    def _get_size(self):
        size = 0
        for element in self.value:
            size += element.size

        return size

    def relayout(self, offset=0):
        super().relayout(offset=offset)
        size = 0
        for field in self.value:
            size += field.relayout(offset=offset + size)

        return size

    def instance_element(self):
        return self.field_cls.create(father=self)  # pass the father so that we don't lose the hierarchy

    def unpack(self, stream):
        n = self.n
        if n < 0:
            raise UnpackException(f'negative number of elements ({n})')

        # check before allocating anything: a bogus count must not become a huge list
        needed = n * self.field_cls.size
        if needed > stream.remaining():
            raise TruncatedException(
                f'{n} elements need {needed} bytes at offset {stream.tell()}, {stream.remaining()} available')

        self.logger.debug('unpacking %d elements of %s' % (n, self.field_cls.__class__.__name__))

        elements = []
        for idx in range(n):
            element = self.instance_element()
            element.offset = stream.tell()
            try:
                element.unpack(stream)
            except PhotonStructException as e:
                e.chain.append(idx)
                raise
            elements.append(element)

        self.value = elements

    def pack(self, stream, relayout=True):
        for element in self.value:
            stream.seek(element.offset)
            element.pack(stream, relayout=False)
