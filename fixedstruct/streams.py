import io
import logging

from .exceptions import UnpackException


logger = logging.getLogger(__name__)


class Stream(object):
    '''This is a simple wrapper around bytes/file objects to uniform their
    properties: what we need is to read a given amount of bytes at a given offset.

    A path is opened (and closed when leaving the context), raw bytes are wrapped
    in a BytesIO, anything having read() and seek() is used as it is and left open.'''
    def __init__(self, obj):
        self._owned = False
        self.obj = obj

        init_method_name = 'init_%s' % self.obj.__class__.__name__

        init_method = getattr(self, init_method_name, self.init_fileobj)

        init_method()

    def __getattr__(self, name):
        return getattr(self.obj, name)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()

    def close(self):
        if self._owned:
            self.obj.close()

    def init_str(self):
        '''We think this is a path'''
        logger.debug('opening path \'%s\'' % self.obj)
        self.obj = open(self.obj, 'rb')
        self._owned = True

    def init_PosixPath(self):
        self.obj = str(self.obj)
        self.init_str()

    init_WindowsPath = init_PosixPath

    def init_bytes(self):
        '''We think these are raw bytes'''
        self.obj = io.BytesIO(self.obj)
        self._owned = True

    init_bytearray = init_bytes
    init_memoryview = init_bytes

    def init_fileobj(self):
        if not (hasattr(self.obj, 'read') and hasattr(self.obj, 'seek')):
            raise ValueError('\'%s\' is the wrong kind of object to read from' % self.obj.__class__.__name__)

    def seek(self, offset):
        if not isinstance(offset, int) or offset < 0:
            raise ValueError('\'%s\' is the wrong kind of offset to use' % offset)

        self.obj.seek(offset)

    def read_at(self, offset, size):
        '''Read exactly size bytes starting at offset.'''
        if isinstance(offset, int) and offset < 0:
            raise UnpackException([], f'negative offset {offset}')

        self.seek(offset)
        data = self.obj.read(size)

        if len(data) != size:
            raise UnpackException([], f'short read: {len(data)} bytes out of {size} at offset {offset}')

        return data
