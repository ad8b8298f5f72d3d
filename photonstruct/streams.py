import io
import logging
import os

from .exceptions import SeekOutOfRangeException, TruncatedException


logger = logging.getLogger(__name__)


class Stream(object):
    '''This is a simple wrapper around bytes/file objects to
    uniform their properties: mainly we need a seek() that refuses
    offsets outside the data and a read_exact() that never returns
    less than asked.

    Every offset is absolute, i.e. counted from the start of the source.'''
    def __init__(self, obj, flags='r'):
        '''Here we normalize the object in order to be accessed as a normal file object'''
        self.flags = flags
        self.obj = obj
        self.owned = False

        init_method_name = 'init_%s' % self.obj.__class__.__name__

        init_method = getattr(self, init_method_name, self.init_fileobj)

        init_method()

    def __getattr__(self, name):
        if name == 'obj':
            raise AttributeError(name)
        return getattr(self.obj, name)

    def __repr__(self):
        return f'<{self.__class__.__name__}({self.obj!r})>'

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def init_str(self):
        '''We think this is a path'''
        logger.debug('opening path \'%s\'' % self.obj)
        self.obj = open(self.obj, 'rb' if self.flags == 'r' else 'w+b')
        self.owned = True

    def init_PosixPath(self):
        self.obj = os.fspath(self.obj)
        self.init_str()

    init_WindowsPath = init_PosixPath

    def init_bytes(self):
        '''We think these are raw bytes'''
        self.obj = io.BytesIO(self.obj)
        self.owned = True

    init_bytearray = init_bytes

    def init_fileobj(self):
        '''Something already opened by the caller, we only check it is seekable'''
        if not (hasattr(self.obj, 'seek') and hasattr(self.obj, 'read')):
            raise ValueError('\'%s\' cannot be used as a stream' % self.obj.__class__.__name__)

    @property
    def is_readonly(self):
        return self.flags == 'r'

    @property
    def size(self):
        position = self.obj.tell()
        size = self.obj.seek(0, io.SEEK_END)
        self.obj.seek(position)

        return size

    def remaining(self):
        return self.size - self.obj.tell()

    def tell(self):
        return self.obj.tell()

    def seek(self, offset):
        if not isinstance(offset, int):
            raise ValueError('\'%s\' is the wrong kind of offset to use' % offset.__class__.__name__)

        if self.is_readonly and not 0 <= offset <= self.size:
            raise SeekOutOfRangeException(
                f'offset {offset} outside of the stream (size {self.size})')

        logger.debug('seek at 0x%08x' % offset)
        self.obj.seek(offset)

        return self

    def read(self, size=-1):
        return self.obj.read(size)

    def read_exact(self, size):
        '''It reads exactly "size" bytes or fails with TruncatedException.'''
        if size < 0:
            raise TruncatedException(f'cannot read a negative amount of bytes ({size})')

        position = self.obj.tell()
        data = self.obj.read(size)

        if len(data) != size:
            raise TruncatedException(
                f'expected {size} bytes at offset {position}, {len(data)} available')

        return data

    def read_all(self):
        '''Returns everything from the actual position to the end.'''
        return self.obj.read()

    def write(self, data):
        return self.obj.write(data)

    def getvalue(self):
        position = self.obj.tell()
        self.obj.seek(0)
        value = self.obj.read()
        self.obj.seek(position)

        return value

    def close(self):
        if self.owned and not self.obj.closed:
            logger.debug('closing %r' % self.obj)
            self.obj.close()

