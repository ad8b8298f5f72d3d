'''
Run-length encoding of the layers.

Each byte is a run: the most significant bit selects the color (0 black,
1 white) and the remaining 7 bits are the number of pixels (0-127) of that
color. The runs are concatenated in the order they are encoded.
'''
import logging

import numpy as np


logger = logging.getLogger(__name__)

COLOR_SHIFT = 7
LENGTH_MASK = 0x7f
MAX_RUN_LENGTH = LENGTH_MASK
WHITE = 255


def runs(data):
    '''Yields the couples (color, length) encoded in data.'''
    for b in data:
        yield b >> COLOR_SHIFT, b & LENGTH_MASK


def decode(data) -> np.ndarray:
    '''Expands the runs into a flat array of pixels, one byte per pixel.

    No padding nor truncation is done: the length of the result is the sum
    of the run lengths.'''
    encoded = np.frombuffer(bytes(data), dtype=np.uint8)

    colors = (encoded >> COLOR_SHIFT).astype(np.uint8) * np.uint8(WHITE)
    lengths = encoded & LENGTH_MASK

    pixels = np.repeat(colors, lengths)

    logger.debug('decoded %d runs into %d pixels' % (len(encoded), len(pixels)))

    return pixels
