"""
Core module for the abstraction of a file format

"""
from typing import Tuple, List, Dict

from .fields import Field
from .enum import Compliant
from .meta import MetaChunk
from .streams import Stream
from .exceptions import (
    PhotonStructException,
    MagicException,
)
from .properties import (
    get_root_from_chunk,
    ChunkPhase,
)


class Chunk(Field, metaclass=MetaChunk):
    """
    Together with Field is the main class that defines a format: its main attributes
    are offset and size that identify a Chunk.

    A Chunk can contain sub-chunks; the fields are unpacked in the order they are
    declared in the class body. A field declared with an explicit offset is read
    after seeking there, all the others are read where the previous one ended.

    The first argument can be a path, raw bytes, an open binary file or a Stream:
    in that case the chunk is unpacked immediately.
    """

    def __init__(self, filepath=None, **kwargs):
        super().__init__(**kwargs)

        if filepath is None:
            self.relayout()
            return

        if isinstance(filepath, Stream):
            self.unpack(filepath)
            return

        with Stream(filepath) as stream:
            self.logger.debug('unpacking \'%s\' from %s' % (self.__class__.__name__, stream))
            self.unpack(stream)

    def init(self):
        for _, field in self.get_fields():
            field.init()

    def get_ordered_fields_name(self) -> List[str]:
        return self._meta.fields

    def get_fields(self) -> List[Tuple[str, Field]]:
        '''It returns a list of couples (name, instance) for each field.'''
        return [(_, getattr(self, _)) for _ in self.get_ordered_fields_name()]

    def __repr__(self):
        msg = []
        for field_name, field in self.get_fields():
            msg.append('%s=%s' % (field_name, repr(field)))
        return '<%s(%s)>' % (self.__class__.__name__, ','.join(msg))

    def __str__(self):
        msg = ''
        for field_name, field in self.get_fields():
            msg += '%s: %s\n' % (field_name, field)
        return msg

    def _get_value(self) -> Dict:
        return {name: field.value for name, field in self.get_fields()}

    def _set_value(self, value: Dict) -> None:
        for name, field_value in value.items():
            getattr(self, name).value = field_value

    @property
    def root(self):
        '''Obtain the final father of this chunk'''
        return get_root_from_chunk(self)

    def _get_size(self):
        '''the size parameter MUST not be set but MUST be derived from the subchunks'''
        size = 0
        for _, field in self.get_fields():
            size += field.size

        return size

    def _get_raw(self):
        return b''.join(field.raw for _, field in self.get_fields())

    @property
    def layout(self) -> Dict[str, Tuple[int, int]]:
        result = {}
        for name, field in self.get_fields():
            result[name] = (field.offset, field.size)

        return result

    def relayout(self, offset=0):
        '''This method triggers the chunk's children to reset the offsets
        in order to pack correctly; a field with a declared offset keeps it.'''
        phase_old = self._phase
        self._phase = ChunkPhase.RELAYOUTING
        self.offset = offset

        end = offset
        for field_name, field_instance in self.get_fields():
            self.logger.debug('relayouting %s.%s' % (self.__class__.__name__, field_name))
            placement = field_instance.get_placement()
            field_offset = placement if placement is not None else end
            end = field_offset + field_instance.relayout(offset=field_offset)

        self._phase = phase_old

        return end - offset

    def pack(self, stream=None, relayout=True):
        '''Encode the fields into a stream: it returns the bytes written when called
        on the root chunk without a stream.'''
        self._phase = ChunkPhase.PACKING
        if relayout:
            self.relayout()

        own_stream = stream is None
        stream = Stream(b'', flags='w') if own_stream else stream

        for field_name, field_instance in self.get_fields():
            self.logger.debug('packing %s.%s at offset 0x%08x' % (
                self.__class__.__name__, field_name, field_instance.offset))

            stream.seek(field_instance.offset)
            field_instance.pack(stream, relayout=False)

        self._phase = ChunkPhase.DONE

        return stream.getvalue() if own_stream else stream

    def unpack(self, stream):
        '''This is one of the main APIs to take care of: its aim is to take a binary
        data and transform in the representation given by the class this method
        is implemented.

        Passing a stream is mandatory since is possible that the different
        sub-chunks can have offsets not contiguous so we need to jump back and
        forth.

        Any exception raised by a sub-field is re-raised with the name of the field
        appended to its chain.
        '''
        self._phase = ChunkPhase.UNPACKING
        for field_name, field in self.get_fields():
            self.logger.debug('unpacking %s.%s' % (self.__class__.__name__, field_name))

            try:
                placement = field.get_placement()
                if placement is not None:
                    stream.seek(placement)

                offset = stream.tell()
                self.logger.debug('offset at %d' % offset)

                field.unpack(stream)
            except PhotonStructException as e:
                e.chain.append(field_name)
                raise

            field.offset = offset

        if hasattr(self, 'validate') and not self.validate():
            self.logger.warning(f'validation for \'{self.__class__.__name__}\' failed')
            if self.is_compliant(Compliant.MAGIC):
                raise MagicException(f'{self.__class__.__name__} has not a valid magic')

        self._phase = ChunkPhase.DONE
