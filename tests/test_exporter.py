import zipfile
from io import BytesIO

from carousel.services.exporter import build_archive, entry_name, save_archive, save_images


def test_entry_names():
    assert entry_name(1) == "carousel_1.png"
    assert entry_name(12) == "carousel_12.png"


def test_archive_entries_in_order():
    data = build_archive([b"one", b"two", b"three"])
    with zipfile.ZipFile(BytesIO(data)) as archive:
        assert archive.namelist() == ["carousel_1.png", "carousel_2.png", "carousel_3.png"]
        assert archive.read("carousel_2.png") == b"two"


def test_archive_skips_missing_images():
    data = build_archive([b"one", None, b"three"])
    with zipfile.ZipFile(BytesIO(data)) as archive:
        assert archive.namelist() == ["carousel_1.png", "carousel_2.png"]
        assert archive.read("carousel_2.png") == b"three"


def test_save_archive_creates_parent(tmp_path):
    path = save_archive([b"x"], tmp_path / "out" / "bundle.zip")
    assert path.exists()
    assert zipfile.is_zipfile(path)


def test_save_images(tmp_path):
    paths = save_images([b"a", None, b"c"], tmp_path / "pngs")
    assert [p.name for p in paths] == ["carousel_1.png", "carousel_2.png"]
    assert paths[1].read_bytes() == b"c"
