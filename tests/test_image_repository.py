from __future__ import annotations

import threading
from pathlib import Path

import numpy as np
import pytest
from PIL import Image as PILImage

from hdrtools.exceptions import ImageCodecError, ImageDecodeError, ImageEncodeError
from hdrtools.models.codec_engine import CodecEngine
from hdrtools.models.image import ImageBuffer
from hdrtools.repositories.image_repository import ImageRepository
from hdrtools.services.image_service import ImageService
from tests.helpers import hdr, ldr, write_hdr, write_png


def test_engine_is_a_singleton_and_initialises_once(fresh_engine: CodecEngine) -> None:
    assert CodecEngine() is fresh_engine
    assert not fresh_engine.initialized
    assert fresh_engine.initialize() is fresh_engine
    assert fresh_engine.initialized
    fresh_engine.ldr_to_hdr_gamma = 1.0
    fresh_engine.initialize()
    assert fresh_engine.ldr_to_hdr_gamma == 1.0


def test_engine_reads_overrides_from_env(fresh_engine: CodecEngine, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LDR_TO_HDR_GAMMA", "1.8")
    monkeypatch.setenv("CODEC_NUM_THREADS", "1")
    fresh_engine.initialize()
    assert fresh_engine.ldr_to_hdr_gamma == 1.8
    assert fresh_engine.num_threads == 1


def test_uninitialised_engine_is_refused(fresh_engine: CodecEngine, tmp_path: Path) -> None:
    path = write_png(tmp_path / "a.png", [[(1, 2, 3, 4)]])
    repo = ImageRepository(fresh_engine)
    with pytest.raises(ImageCodecError):
        repo.load_bytes(path)
    with pytest.raises(ImageCodecError):
        repo.save(ldr([(0, 0, 0, 0)]), tmp_path / "b.png")


def test_png_rgba_round_trip(engine: CodecEngine, tmp_path: Path) -> None:
    repo = ImageRepository(engine)
    img = ImageBuffer(np.random.default_rng(3).integers(0, 256, (4, 6, 4), dtype=np.uint8))
    saved = repo.save(img, tmp_path / "layer.png")
    loaded = repo.load_bytes(saved)
    assert np.array_equal(loaded.pixels, img.pixels)
    assert loaded.path == tmp_path / "layer.png"


def test_save_uses_image_path(engine: CodecEngine, tmp_path: Path) -> None:
    repo = ImageRepository(engine)
    img = ldr([(10, 20, 30, 40)]).with_path(tmp_path / "own.png")
    assert repo.save(img) == tmp_path / "own.png"
    assert (tmp_path / "own.png").is_file()


def test_rgb_png_gets_opaque_alpha(engine: CodecEngine, tmp_path: Path) -> None:
    path = tmp_path / "rgb.png"
    PILImage.fromarray(np.array([[(10, 20, 30)]], dtype=np.uint8)).save(path)
    assert ImageRepository(engine).load_bytes(path).pixel(0, 0) == (10, 20, 30, 255)


def test_grayscale_png_is_replicated(engine: CodecEngine, tmp_path: Path) -> None:
    path = tmp_path / "gray.png"
    PILImage.fromarray(np.array([[77, 200]], dtype=np.uint8)).save(path)
    img = ImageRepository(engine).load_bytes(path)
    assert img.pixel(0, 0) == (77, 77, 77, 255)
    assert img.pixel(0, 1) == (200, 200, 200, 255)


def test_sixteen_bit_png_keeps_high_byte(engine: CodecEngine, tmp_path: Path) -> None:
    path = tmp_path / "deep.png"
    PILImage.fromarray(np.array([[0x1234, 0xFF00]], dtype=np.uint16)).save(path)
    img = ImageRepository(engine).load_bytes(path)
    assert img.pixel(0, 0)[0] == 0x12
    assert img.pixel(0, 1)[0] == 0xFF


def test_byte_file_loaded_as_float_is_linearised(engine: CodecEngine, tmp_path: Path) -> None:
    path = write_png(tmp_path / "a.png", [[(255, 128, 0, 128)]])
    img = ImageRepository(engine).load_float(path)
    assert img.is_hdr
    r, g, b, a = img.pixel(0, 0)
    assert r == pytest.approx(1.0)
    assert g == pytest.approx((128 / 255) ** 2.2, rel=1e-5)
    assert b == 0.0
    assert a == pytest.approx(128 / 255, rel=1e-6)


def test_radiance_round_trip(engine: CodecEngine, tmp_path: Path) -> None:
    repo = ImageRepository(engine)
    img = hdr([(1.0, 0.5, 0.25, 0.3), (8.0, 2.0, 0.0, 1.0)])
    repo.save(img, tmp_path / "scene.hdr")
    loaded = repo.load_float(tmp_path / "scene.hdr")
    assert loaded.size == (2, 1)
    assert loaded.pixel(0, 0)[:3] == pytest.approx((1.0, 0.5, 0.25), rel=1e-2)
    assert loaded.pixel(0, 1)[:3] == pytest.approx((8.0, 2.0, 0.0), rel=1e-2, abs=1e-3)
    # Radiance stores no alpha
    assert loaded.pixel(0, 0)[3] == 1.0


def test_radiance_loaded_as_bytes_is_gamma_encoded(engine: CodecEngine, tmp_path: Path) -> None:
    path = write_hdr(tmp_path / "scene.hdr", [[(1.0, 0.5, 0.25), (4.0, 0.0, 0.0)]])
    img = ImageRepository(engine).load_bytes(path)
    r, g, b, a = img.pixel(0, 0)
    assert r == 255
    assert g == pytest.approx(int(0.5 ** (1 / 2.2) * 255 + 0.5), abs=1)
    assert b == pytest.approx(int(0.25 ** (1 / 2.2) * 255 + 0.5), abs=1)
    assert a == 255
    assert img.pixel(0, 1) == (255, 0, 0, 255)


def test_missing_file(engine: CodecEngine, tmp_path: Path) -> None:
    repo = ImageRepository(engine)
    with pytest.raises(FileNotFoundError):
        repo.load_bytes(tmp_path / "nope.png")
    with pytest.raises(FileNotFoundError):
        repo.load_float(tmp_path / "nope.hdr")


def test_malformed_file(engine: CodecEngine, tmp_path: Path) -> None:
    path = tmp_path / "broken.png"
    path.write_bytes(b"definitely not a png")
    with pytest.raises(ImageDecodeError):
        ImageRepository(engine).load_bytes(path)


def test_empty_image_cannot_be_saved(engine: CodecEngine, tmp_path: Path) -> None:
    with pytest.raises(ImageEncodeError):
        ImageRepository(engine).save(ImageBuffer.empty(), tmp_path / "empty.png")


def test_save_without_path(engine: CodecEngine) -> None:
    with pytest.raises(ImageEncodeError):
        ImageRepository(engine).save(ldr([(0, 0, 0, 0)]))


def test_hdr_requires_radiance_suffix(engine: CodecEngine, tmp_path: Path) -> None:
    with pytest.raises(ImageEncodeError):
        ImageRepository(engine).save(hdr([(1.0, 1.0, 1.0, 1.0)]), tmp_path / "scene.png")


def test_unknown_ldr_format(engine: CodecEngine, tmp_path: Path) -> None:
    with pytest.raises(ImageEncodeError):
        ImageRepository(engine).save(ldr([(0, 0, 0, 0)]), tmp_path / "layer.unknownext")


def test_write_into_missing_directory(engine: CodecEngine, tmp_path: Path) -> None:
    with pytest.raises(ImageEncodeError):
        ImageRepository(engine).save(ldr([(0, 0, 0, 0)]), tmp_path / "no" / "such" / "dir.png")


def test_image_service_loads_layers_in_order(engine: CodecEngine, tmp_path: Path) -> None:
    paths = [write_png(tmp_path / f"{i}.png", [[(i, i, i, 255)]]) for i in range(3)]
    layers = ImageService(engine).load_layers(paths)
    assert [layer.pixel(0, 0)[0] for layer in layers] == [0, 1, 2]


def test_image_service_create_image(engine: CodecEngine) -> None:
    img = ImageService(engine).create_image(np.zeros((1, 1, 4), dtype=np.uint8), "x.png")
    assert img.path == Path("x.png")


def test_load_from_worker_thread(engine: CodecEngine, tmp_path: Path) -> None:
    path = write_png(tmp_path / "a.png", [[(1, 2, 3, 4)]])
    repo = ImageRepository(engine)
    results: list = []

    def _load() -> None:
        results.append(repo.load_bytes(path).pixel(0, 0))

    worker = threading.Thread(target=_load)
    worker.start()
    worker.join()
    assert results == [(1, 2, 3, 4)]
