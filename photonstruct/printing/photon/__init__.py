'''
# Anycubic Photon

Slice file produced for the Photon family of resin printers: a fixed header
with the print parameters, a directory of layer definitions and, for each
layer, a run-length encoded bitmap of the screen.

  .---------------------------------.  0x00
  | header (108 bytes)              |
  | previews (high and low res)     |  header.preview_*_offset
  | layer definition 0              |  header.layer_defs_offset
  | layer definition 1              |
    ...
  | layer definition N-1            |
  | RLE data of each layer          |  layer_def.data_offset
  '---------------------------------'

All the numbers are little-endian and all the offsets are absolute, i.e.
counted from the start of the file. The previews are not decoded.

'''
import logging
from enum import Enum
from multiprocessing.pool import ThreadPool

from photonstruct.core import Chunk
from photonstruct import fields
from photonstruct.enum import Compliant
from photonstruct.exceptions import (
    PhotonStructException,
    MalformedLayerException,
    LayerIndexException,
)
from photonstruct.properties import Dependency, get_root_from_chunk, resolve
from . import rle


logger = logging.getLogger(__name__)

PHOTON_MAGIC = b'\x19\x00\xfd\x12'


class ProjectionType(Enum):
    '''LightCuring/Projection type'''
    CAST         = 0x00
    LCD_X_MIRROR = 0x01


class PhotonHeader(Chunk):
    '''
    The magic is not checked unless Compliant.MAGIC is requested: the first
    4 bytes are the signature, the following 4 bytes the version of the format.

    The three offsets point to the two previews and to the array of layer definitions.
    '''
    magic                   = fields.StringField(8, default=PHOTON_MAGIC + b'\x01\x00\x00\x00')
    size_x                  = fields.StructField('f')  # mm
    size_y                  = fields.StructField('f')
    size_z                  = fields.StructField('f')
    padding0                = fields.StringField(3 * 4)
    layer_height            = fields.StructField('f')  # mm
    exposure_time           = fields.StructField('f')  # s
    exposure_time_bottom    = fields.StructField('f')
    off_time                = fields.StructField('f')
    bottom_layers           = fields.StructField('i')
    screen_width            = fields.StructField('i')  # pixels
    screen_height           = fields.StructField('i')
    preview_high_res_offset = fields.StructField('i')
    layer_defs_offset       = fields.StructField('i')
    num_layers              = fields.StructField('i')
    preview_low_res_offset  = fields.StructField('i')
    unknown6                = fields.StructField('i')
    projection_type         = fields.StructField('i', enum=ProjectionType, default=ProjectionType.CAST)
    padding1                = fields.StringField(6 * 4)

    def validate(self):
        return self.magic.value.startswith(PHOTON_MAGIC)

    @property
    def resolution(self):
        return self.screen_width.value, self.screen_height.value

    @property
    def pixels(self):
        return self.screen_width.value * self.screen_height.value


class LayerDef(Chunk):
    '''The exposure and off times are usually the ones from the header.'''
    layer_height  = fields.StructField('f')
    exposure_time = fields.StructField('f')
    off_time      = fields.StructField('f')
    data_offset   = fields.StructField('i')
    data_length   = fields.StructField('i')
    padding       = fields.StringField(4 * 4)


class LayerImage(object):
    '''Decoded layer: a flat array with one byte for each pixel, 0 or 255.

    The number of pixels is whatever the runs produced, it is not adjusted
    to the geometry of the screen.'''

    def __init__(self, index, data, pixels, width, height):
        self.index = index
        self.data = data
        self.pixels = pixels
        self.width = width
        self.height = height

    def __repr__(self):
        return '<%s(index=%d, %dx%d, pixels=%d)>' % (
            self.__class__.__name__,
            self.index,
            self.width,
            self.height,
            len(self.pixels),
        )

    def __len__(self):
        return len(self.pixels)

    @property
    def expected_size(self):
        return self.width * self.height

    @property
    def is_malformed(self):
        return len(self.pixels) != self.expected_size

    def as_array(self):
        '''The pixels as a (height, width) matrix.'''
        if self.is_malformed:
            raise MalformedLayerException(
                f'{len(self.pixels)} pixels cannot fill a {self.width}x{self.height} screen', chain=[self.index])

        return self.pixels.reshape(self.height, self.width)


class LayersField(fields.Field):
    '''Reads and decodes the data of each layer definition.

    Each layer is read seeking to the absolute data_offset of its definition.
    The stream has a single cursor so the reading is always sequential; with
    more than one worker (see PhotonFile) only the decoding is done in parallel.
    '''

    def __init__(self, layer_defs, width, height, **kw):
        self._layer_defs = layer_defs
        self._width = width
        self._height = height
        super().__init__(**kw)

    def __getitem__(self, item):
        return self.value[item]

    def __iter__(self):
        return iter(self.value)

    def __len__(self):
        return len(self.value)

    def value_from_default(self):
        return []

    def _get_size(self):
        return sum(len(layer.data) for layer in self.value)

    def iter_data(self, stream, layer_defs):
        for index, layer_def in enumerate(layer_defs):
            try:
                stream.seek(layer_def.data_offset.value)
                data = stream.read_exact(layer_def.data_length.value)
            except PhotonStructException as e:
                e.chain.append(index)
                raise

            yield data

    def unpack(self, stream):
        layer_defs = resolve(self._layer_defs, self)
        width = resolve(self._width, self)
        height = resolve(self._height, self)

        root = get_root_from_chunk(self)
        progress = getattr(root, 'progress', None)
        workers = getattr(root, 'workers', 1)

        spans = self.iter_data(stream, layer_defs)

        if workers > 1:
            spans = list(spans)
            self.logger.debug('decoding %d layers with %d workers' % (len(spans), workers))
            with ThreadPool(workers) as pool:
                decoded = zip(spans, pool.imap(rle.decode, spans))
                self.value = self.build(decoded, width, height, len(layer_defs), progress)
        else:
            decoded = ((data, rle.decode(data)) for data in spans)
            self.value = self.build(decoded, width, height, len(layer_defs), progress)

    def build(self, decoded, width, height, total, progress=None):
        layers = []
        for index, (data, pixels) in enumerate(decoded):
            layer = LayerImage(index, data, pixels, width, height)

            if layer.is_malformed:
                self.logger.warning('layer %d decoded into %d pixels, expected %dx%d' % (
                    index, len(pixels), width, height))
                if self.is_compliant(Compliant.GEOMETRY):
                    raise MalformedLayerException(
                        f'{len(pixels)} pixels decoded, expected {width}x{height}', chain=[index])

            layers.append(layer)

            self.logger.debug('layer: %d/%d' % (index + 1, total))
            if progress:
                progress(index + 1, total)

        return layers


class PhotonFile(Chunk):
    '''The whole file: it is unpacked in the order header, layer definitions and layers,
    any failure aborts the reading.

    The layer definitions are read at header.layer_defs_offset, not where the header ends.

    Optional keyword arguments:

     - progress: callable receiving (layer number, total) after each layer is decoded
     - workers: number of threads used to decode the layers
     - compliant: Compliant.MAGIC and/or Compliant.GEOMETRY to fail instead of logging
    '''
    header     = PhotonHeader(offset=0)
    layer_defs = fields.ArrayField(
        LayerDef(),
        n=Dependency('header.num_layers'),
        offset=Dependency('header.layer_defs_offset'))
    layers     = LayersField(
        Dependency('layer_defs'),
        width=Dependency('header.screen_width'),
        height=Dependency('header.screen_height'))

    def __init__(self, filepath=None, progress=None, workers=None, **kwargs):
        self.progress = progress
        self.workers = workers or 1
        super().__init__(filepath, **kwargs)

    def __len__(self):
        return len(self.layers)

    def layer(self, index) -> LayerImage:
        if not 0 <= index < len(self):
            raise LayerIndexException(f'layer {index} requested but the file has {len(self)} layers')

        return self.layers[index]


def load(source, progress=None, workers=None, compliant=Compliant.INHERIT) -> PhotonFile:
    '''Reads a Photon file from a path, bytes or an open binary file.

    Errors opening the path (FileNotFoundError, PermissionError) propagate as they are.'''
    logger.debug('loading photon file from %r' % (source,))

    photon = PhotonFile(source, progress=progress, workers=workers, compliant=compliant)

    logger.debug('loaded %d layers (%dx%d)' % ((len(photon),) + photon.header.resolution))

    return photon
