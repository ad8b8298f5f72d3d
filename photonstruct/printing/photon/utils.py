import logging

from PIL import Image

from photonstruct.exceptions import MalformedLayerException


logger = logging.getLogger(__name__)


def layer_to_image(layer) -> Image.Image:
    '''8-bit grayscale image with the size of the screen.'''
    if layer.width <= 0 or layer.height <= 0:
        raise MalformedLayerException(
            f'layer {layer.index} has no valid size: {layer.width}x{layer.height}',
            chain=[layer.index])

    if layer.is_malformed:
        raise MalformedLayerException(
            f'layer {layer.index} has {len(layer)} pixels instead of {layer.width}x{layer.height}',
            chain=[layer.index])

    return Image.frombytes('L', (layer.width, layer.height), layer.pixels.tobytes())


def export_layer(photon, index, path):
    '''Save the layer with the given index as PNG: an index out of range
    raises LayerIndexException.'''
    layer = photon.layer(index)

    logger.info(f'exporting layer {index} ({layer.width}x{layer.height}) to \'{path}\'')

    image = layer_to_image(layer)
    image.save(path, format='PNG')

    return image
