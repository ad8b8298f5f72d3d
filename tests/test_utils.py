import pytest
from PIL import Image

from photonstruct.exceptions import LayerIndexException, MalformedLayerException
from photonstruct.printing.photon import load
from photonstruct.printing.photon.utils import export_layer, layer_to_image


def test_layer_to_image(checkerboard):
    photon = load(checkerboard)

    image = layer_to_image(photon.layer(0))

    assert image.mode == 'L'
    assert image.size == (4, 2)
    assert image.getpixel((0, 0)) == 255
    assert image.getpixel((1, 0)) == 0
    assert image.getpixel((0, 1)) == 0


def test_export_requested_layer(tmp_path, checkerboard):
    """The exported layer is the one requested, not always the first."""
    photon = load(checkerboard)
    path = tmp_path / 'layer.png'

    export_layer(photon, 2, path)

    with Image.open(path) as image:
        assert image.format == 'PNG'
        assert image.size == (4, 2)
        assert image.tobytes() == bytes([0] * 4 + [255] * 4)


def test_export_out_of_range(tmp_path, checkerboard):
    photon = load(checkerboard)
    path = tmp_path / 'layer.png'

    with pytest.raises(LayerIndexException):
        export_layer(photon, 3, path)

    assert not path.exists()


def test_export_malformed(tmp_path, photon_factory):
    photon = load(photon_factory(width=2, height=1, layers=[b'\x81']))
    path = tmp_path / 'layer.png'

    with pytest.raises(MalformedLayerException):
        export_layer(photon, 0, path)

    assert not path.exists()


def test_export_empty_screen(tmp_path, photon_factory):
    photon = load(photon_factory(width=0, height=0, layers=[b'\x00']))
    path = tmp_path / 'layer.png'

    assert not photon.layer(0).is_malformed

    with pytest.raises(MalformedLayerException) as excinfo:
        export_layer(photon, 0, path)

    assert '0x0' in str(excinfo.value)
    assert not path.exists()
