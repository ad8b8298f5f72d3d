class PhotonStructException(Exception):
    '''Base class to extend in order to throw exception in photonstruct.

    It takes a single argument that represents the chain of the fields that
    caused the exception, innermost first; every Chunk the exception crosses
    while unpacking appends its own field name.
    '''

    def __init__(self, message='', chain=None):
        self.message = message
        self.chain = chain if chain is not None else []
        super().__init__(message)

    @property
    def path(self):
        return '.'.join(str(_) for _ in reversed(self.chain))

    def __str__(self):
        if not self.chain:
            return self.message

        return f'{self.path}: {self.message}'


class UnpackException(PhotonStructException):
    pass


class TruncatedException(UnpackException):
    '''Fewer bytes are available than a fixed-layout read requires.'''
    pass


class SeekOutOfRangeException(UnpackException):
    '''An absolute offset lies outside the extent of the stream.'''
    pass


class MagicException(PhotonStructException):
    pass


class MalformedLayerException(PhotonStructException):
    '''The decoded pixel count doesn't match the declared screen geometry.'''
    pass


class LayerIndexException(PhotonStructException, IndexError):
    pass
