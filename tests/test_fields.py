import struct
from enum import Enum, auto

import pytest

from photonstruct.enum import Compliant
from photonstruct.exceptions import UnpackException, TruncatedException
from photonstruct.fields import StructField, StringField, ArrayField
from photonstruct.meta import Endianess
from photonstruct.streams import Stream


def test_structfield_conversion_raw_value():
    """Check that the attributes "value" and "raw" are the analogous
    of the integers and bytes representation for a field."""
    field = StructField('I')

    assert field.size == 4
    assert field.raw == b'\x00\x00\x00\x00'
    assert field.value == 0

    field.value = 0xcafe

    assert field.value == 0xcafe
    assert field.raw == b'\xfe\xca\x00\x00'
    assert str(field) == '0x0000cafe'


def test_structfield_unpack():
    field = StructField('I')
    field.unpack(Stream(b'\x01\x02\x03\x04'))

    assert field.value == 0x04030201

    field = StructField('I', endianess=Endianess.BIG_ENDIAN)
    field.unpack(Stream(b'\x01\x02\x03\x04'))

    assert field.value == 0x01020304


def test_structfield_float_and_signed():
    stream = Stream(struct.pack('<fi', 1.5, -7))

    height = StructField('f')
    height.unpack(stream)
    count = StructField('i')
    count.unpack(stream)

    assert height.value == 1.5
    assert count.value == -7
    assert height.raw + count.raw == struct.pack('<fi', 1.5, -7)


def test_structfield_truncated():
    field = StructField('I')

    with pytest.raises(TruncatedException):
        field.unpack(Stream(b'\x01\x02'))


def test_structfield_enum():
    class DummyEnum(Enum):
        NONE = 0
        FIRST = auto()
        SECOND = auto()

    field = StructField('I', enum=DummyEnum)

    assert field.value == DummyEnum.NONE

    field.value = DummyEnum.SECOND

    assert field.value == DummyEnum.SECOND
    assert field.raw == b'\x02\x00\x00\x00'
    assert str(field) == 'SECOND'

    # by default an unknown value slips through as integer
    field.unpack(Stream(b'\x04\x00\x00\x00'))
    assert field.value == 4

    field = StructField('I', enum=DummyEnum, compliant=Compliant.ENUM)

    with pytest.raises(UnpackException):
        field.unpack(Stream(b'\x04\x00\x00\x00'))


def test_stringfield():
    field = StringField(0x10)

    assert field.size == 0x10
    assert len(field.raw) == field.size
    assert field.raw == b'\x00' * field.size

    with pytest.raises(ValueError):
        field.value = b'kebab'

    data = b''.join([bytes([_]) for _ in range(0x10)])

    field.value = data

    assert field.value == data
    assert field.raw == data


def test_stringfield_unpack():
    field = StringField(4)
    stream = Stream(b'ABCDEFGH')

    field.unpack(stream)

    assert field.value == b'ABCD'
    assert stream.tell() == 4

    with pytest.raises(TruncatedException):
        StringField(8).unpack(stream)


def test_arrayfield():
    length = 10
    array = ArrayField(StructField('I'), n=length)
    array.relayout()

    # check some basic property
    assert isinstance(array.value, list)
    assert len(array.value) == length
    assert len(array) == length

    # check that the elements are not duplicated
    assert array[0] is not array[1]
    assert array[0].father is array

    # check the offsets make sense
    assert array[0].offset == 0
    assert array[1].offset == 4
    assert array[9].offset == 36

    # check the value are all zero
    for field in array:
        assert field.value == 0

    # set one and check is actually changed
    array[3].value = 0xcafebabe
    assert [_.value for _ in array] == [
        0, 0, 0, 0xcafebabe, 0, 0, 0, 0, 0, 0,
    ]
    assert array.size == 40


def test_arrayfield_unpack():
    array = ArrayField(StructField('H'), n=3)
    stream = Stream(b'\xff\xff\x01\x00\x02\x00\x03\x00')
    stream.seek(2)

    array.unpack(stream)

    assert [_.value for _ in array] == [1, 2, 3]
    assert [_.offset for _ in array] == [2, 4, 6]


def test_arrayfield_checks_count_before_reading():
    array = ArrayField(StructField('I'), n=100)
    stream = Stream(b'\x00' * 8)

    with pytest.raises(TruncatedException):
        array.unpack(stream)

    assert stream.tell() == 0


def test_arrayfield_negative_count():
    array = ArrayField(StructField('I'), n=-1)

    with pytest.raises(UnpackException):
        array.unpack(Stream(b'\x00' * 8))


def test_arrayfield_wrong_count_type():
    with pytest.raises(ValueError):
        ArrayField(StructField('I'), n='3')
