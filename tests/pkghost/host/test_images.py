# tests/pkghost/host/test_images.py
from PIL import Image

from pkghost.host import PillowImageDecoder


def test_decodes_png(tmp_path):
    path = tmp_path / "icon.png"
    Image.new("RGBA", (16, 8), (255, 0, 0, 255)).save(path)
    handle = PillowImageDecoder().fromPath(path)
    assert not handle.isEmpty
    assert handle.size == (16, 8)
    assert handle.path == path


def test_missing_or_garbage_file_gives_empty_handle(tmp_path):
    garbage = tmp_path / "icon.png"
    garbage.write_bytes(b"definitely not a png")
    decoder = PillowImageDecoder()
    assert decoder.fromPath(garbage).isEmpty
    assert decoder.fromPath(tmp_path / "missing.png").isEmpty
    assert decoder.fromPath(tmp_path / "missing.png").size == (0, 0)
