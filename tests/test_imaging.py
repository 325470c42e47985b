import numpy as np
import pytest

from orbfeatures.imaging import fast, gaussian_blur, reflect101_border, resize_linear


def _gradient(rows=6, cols=8):
    return (np.arange(rows * cols, dtype=np.uint8) * 3).reshape(rows, cols)


def test_reflect_keeps_centre_and_shape():
    img = _gradient()
    padded = reflect101_border(img, 2, True)
    assert padded.shape == (img.shape[0] + 4, img.shape[1] + 4)
    assert np.array_equal(padded[2:-2, 2:-2], img)


def test_reflect_mirrors_without_repeating_edge():
    img = _gradient()
    padded = reflect101_border(img, 1, False)
    assert np.array_equal(padded[0, 1:-1], img[1])
    assert np.array_equal(padded[-1, 1:-1], img[-2])
    assert np.array_equal(padded[1:-1, 0], img[:, 1])
    assert np.array_equal(padded[1:-1, -1], img[:, -2])


def test_reflect_isolated_flag_gives_same_result():
    img = _gradient()
    assert np.array_equal(reflect101_border(img, 3, True), reflect101_border(img, 3, False))


def test_reflect_rejects_negative_pad():
    with pytest.raises(ValueError):
        reflect101_border(_gradient(), -1, True)


def test_reflect_rejects_non_2d():
    with pytest.raises(ValueError):
        reflect101_border(np.zeros((2, 2, 3), dtype=np.uint8), 1, True)


def test_resize_same_size_is_identity():
    img = _gradient()
    out = resize_linear(img, img.shape[1], img.shape[0])
    assert np.array_equal(out, img)


def test_resize_constant_image_stays_constant():
    img = np.full((20, 30), 77, dtype=np.uint8)
    out = resize_linear(img, 25, 17)
    assert out.shape == (17, 25)
    assert np.all(out == 77)


def test_resize_exact_half_averages_blocks():
    img = np.kron(np.array([[10, 50], [90, 130]], dtype=np.uint8), np.ones((2, 2), dtype=np.uint8))
    out = resize_linear(img, 2, 2)
    assert np.array_equal(out, np.array([[10, 50], [90, 130]], dtype=np.uint8))


def test_resize_output_within_input_range():
    rng = np.random.default_rng(3)
    img = rng.integers(40, 200, size=(31, 47), dtype=np.uint8)
    out = resize_linear(img, 39, 26)
    assert out.min() >= 40
    assert out.max() <= 200


def test_resize_rejects_bad_size():
    with pytest.raises(ValueError):
        resize_linear(_gradient(), 0, 4)


def test_resize_rejects_non_uint8():
    with pytest.raises(ValueError):
        resize_linear(np.zeros((4, 4), dtype=np.float32), 2, 2)


def test_blur_constant_image_unchanged():
    img = np.full((15, 15), 123, dtype=np.uint8)
    assert np.array_equal(gaussian_blur(img, 7, 2), img)


def test_blur_preserves_symmetry():
    img = np.zeros((21, 21), dtype=np.uint8)
    img[10, 10] = 255
    out = gaussian_blur(img, 7, 2)
    assert np.array_equal(out, out[::-1, :])
    assert np.array_equal(out, out[:, ::-1])
    assert out[10, 10] == out.max()
    assert out[10, 10] < 255


def test_blur_rejects_even_kernel():
    with pytest.raises(ValueError):
        gaussian_blur(np.zeros((9, 9), dtype=np.uint8), 4, 1.0)


def test_fast_uniform_image_has_no_corners():
    assert fast(np.full((30, 30), 90, dtype=np.uint8), 20, True) == []


def test_fast_single_bright_pixel():
    img = np.zeros((21, 21), dtype=np.uint8)
    img[9, 12] = 200
    keys = fast(img, 20, True)
    assert [(k.x, k.y) for k in keys] == [(12.0, 9.0)]
    assert keys[0].response == 199.0


def test_fast_threshold_is_strict_contrast():
    img = np.full((21, 21), 100, dtype=np.uint8)
    img[10, 10] = 150
    assert fast(img, 60, True) == []
    assert len(fast(img, 40, True)) == 1


def test_fast_ignores_border_pixels():
    img = np.zeros((21, 21), dtype=np.uint8)
    img[10, 2] = 200
    assert fast(img, 20, False) == []


def test_fast_small_image_returns_nothing():
    assert fast(np.zeros((6, 40), dtype=np.uint8), 10, True) == []


def test_fast_nonmax_suppression_keeps_strongest():
    img = np.zeros((21, 21), dtype=np.uint8)
    img[10, 10] = 200
    img[10, 11] = 150
    raw = fast(img, 20, False)
    assert sorted((k.x, k.y) for k in raw) == [(10.0, 10.0), (11.0, 10.0)]
    kept = fast(img, 20, True)
    assert [(k.x, k.y) for k in kept] == [(10.0, 10.0)]


def test_fast_results_in_row_major_order():
    img = np.zeros((30, 30), dtype=np.uint8)
    for y, x in ((20, 5), (8, 22), (8, 10), (20, 15)):
        img[y, x] = 180
    keys = fast(img, 20, True)
    positions = [(k.y, k.x) for k in keys]
    assert positions == sorted(positions)
    assert len(positions) == 4