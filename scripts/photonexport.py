#!/usr/bin/env python3
'''
Dump the header and the layer definitions of a Photon file and export one
layer as a grayscale PNG.

 $ photonexport.py model.photon 42 layer42.png
'''
import logging
import sys
import os

from photonstruct.exceptions import PhotonStructException
from photonstruct.printing.photon import load
from photonstruct.printing.photon.utils import export_layer


logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)
logger.setLevel(level=logging.INFO if 'DEBUG' not in os.environ else logging.DEBUG)

if 'DEBUG' in os.environ:
    logging.getLogger('photonstruct').setLevel(logging.DEBUG)


def usage(progname):
    print(f'usage: {progname} <photon file> <layer index> [<output png>]', file=sys.stderr)
    return 1


def dump_header(hdr):
    magic = hdr.magic.value.hex()
    print(f'''Photon Header:
  Magic:                             {magic}
  Print volume (mm):                 {hdr.size_x.value:.2f} x {hdr.size_y.value:.2f} x {hdr.size_z.value:.2f}
  Layer height (mm):                 {hdr.layer_height.value:.3f}
  Exposure time (s):                 {hdr.exposure_time.value:.2f}
  Exposure time bottom (s):          {hdr.exposure_time_bottom.value:.2f}
  Off time (s):                      {hdr.off_time.value:.2f}
  Bottom layers:                     {hdr.bottom_layers.value}
  Resolution:                        {hdr.screen_width.value}x{hdr.screen_height.value}
  Preview high res:                  {hdr.preview_high_res_offset.value} (bytes into file)
  Preview low res:                   {hdr.preview_low_res_offset.value} (bytes into file)
  Layer definitions:                 {hdr.layer_defs_offset.value} (bytes into file)
  Number of layers:                  {hdr.num_layers.value}
  Projection type:                   {hdr.projection_type}''')


def dump_layer_defs(layer_defs):
    print(''' Nr     Height  Exposure  Off time    Offset    Length''')
    for idx, layer_def in enumerate(layer_defs):
        print(f''' {idx:<6d} {layer_def.layer_height.value:6.3f} {layer_def.exposure_time.value:9.2f} {layer_def.off_time.value:9.2f} 0x{layer_def.data_offset.value:08x} {layer_def.data_length.value:9d}''')


def progress(index, total):
    logger.info(f'layer: {index}/{total}')


def main(argv):
    if len(argv) < 3:
        return usage(argv[0])

    path = argv[1]

    try:
        index = int(argv[2])
    except ValueError:
        return usage(argv[0])

    output = argv[3] if len(argv) > 3 else 'layer.png'

    try:
        photon = load(path, progress=progress)

        dump_header(photon.header)
        dump_layer_defs(photon.layer_defs)

        export_layer(photon, index, output)
    except (OSError, PhotonStructException) as e:
        print(f'error: {e}', file=sys.stderr)
        return 1

    return 0


if __name__ == '__main__':
    sys.exit(main(sys.argv))
