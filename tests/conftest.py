import struct

import pytest


HEADER_FORMAT = '<8s3f12s4f9i24s'
HEADER_SIZE = struct.calcsize(HEADER_FORMAT)
LAYER_DEF_FORMAT = '<3f2i16s'
LAYER_DEF_SIZE = struct.calcsize(LAYER_DEF_FORMAT)

MAGIC = b'\x19\x00\xfd\x12\x01\x00\x00\x00'


def encode_runs(runs):
    '''The inverse of the decoding: (color, length) couples to bytes.'''
    return bytes((color << 7) | length for color, length in runs)


def build_header(width=2, height=1, layer_defs_offset=HEADER_SIZE, num_layers=1,
                 magic=MAGIC, projection_type=0):
    return struct.pack(
        HEADER_FORMAT,
        magic,
        68.0, 120.0, 150.0,
        b'\x00' * 12,
        0.05, 8.0, 60.0, 6.5,
        6,
        width, height,
        0x7000,
        layer_defs_offset,
        num_layers,
        0x9000,
        0,
        projection_type,
        b'\x00' * 24,
    )


def build_layer_def(data_offset, data_length, layer_height=0.05):
    return struct.pack(LAYER_DEF_FORMAT, layer_height, 8.0, 6.5, data_offset, data_length, b'\x00' * 16)


def build_photon(width=2, height=1, layers=(b'\x82',), layer_defs_offset=HEADER_SIZE,
                 num_layers=None, spans=None, **kwargs):
    '''Header, layer definitions at layer_defs_offset and then the data of the layers.

    With "spans" the (data_offset, data_length) of each definition are given explicitly.'''
    num_layers = len(layers) if num_layers is None else num_layers

    data_start = layer_defs_offset + len(layers) * LAYER_DEF_SIZE
    if spans is None:
        spans = []
        offset = data_start
        for data in layers:
            spans.append((offset, len(data)))
            offset += len(data)

    layer_defs = b''.join(
        build_layer_def(offset, length, layer_height=0.05 * (idx + 1))
        for idx, (offset, length) in enumerate(spans))

    header = build_header(
        width=width,
        height=height,
        layer_defs_offset=layer_defs_offset,
        num_layers=num_layers,
        **kwargs)

    return header + b'\x00' * (layer_defs_offset - HEADER_SIZE) + layer_defs + b''.join(layers)


@pytest.fixture
def photon_factory():
    return build_photon


@pytest.fixture
def checkerboard():
    '''A 4x2 screen with 3 layers, each one with a different pattern.'''
    layers = [
        encode_runs([(1, 1), (0, 1), (1, 1), (0, 1), (0, 1), (1, 1), (0, 1), (1, 1)]),
        encode_runs([(1, 8)]),
        encode_runs([(0, 0), (0, 4), (1, 4)]),
    ]
    return build_photon(width=4, height=2, layers=layers)


@pytest.fixture
def photon_path(tmp_path, checkerboard):
    path = tmp_path / 'checkerboard.photon'
    path.write_bytes(checkerboard)

    return path
