import io

import pytest

from bmp_image import BMPImage, Pixel, PixelBuffer, fixed_size, write

SIZES = [(1, 1), (5, 10), (4, 3), (7, 2), (3, 5)]


def paint(image, step=5):
    value = 0
    for pixel in image:
        pixel.rgb = (value % 256,) * 3
        value += step
    return image


@pytest.mark.parametrize("width, height", [(0, 1), (1, 0), (-3, 2)])
def test_construction_rejects_bad_geometry(width, height):
    with pytest.raises(ValueError):
        BMPImage(width, height)


def test_geometry_is_read_only():
    image = BMPImage(5, 10)
    with pytest.raises(AttributeError):
        image.width = 6
    assert len(image) == 50


@pytest.mark.parametrize("width, height", SIZES)
def test_stepping_from_begin_reaches_end(width, height):
    image = BMPImage(width, height)
    it = image.begin()
    for _ in range(width * height):
        assert it != image.end()
        it.increment()
    assert it == image.end()


@pytest.mark.parametrize("width, height", SIZES)
def test_stepping_back_from_end_reaches_begin(width, height):
    image = BMPImage(width, height)
    it = image.end()
    for k in range(1, width * height + 1):
        it.decrement()
        assert it == image.begin() + (width * height - k)
    assert it == image.begin()


@pytest.mark.parametrize("width, height", SIZES)
def test_advance_matches_repeated_steps(width, height):
    image = BMPImage(width, height)
    stepped = image.begin()
    for n in range(width * height + 1):
        assert image.begin() + n == stepped
        assert (image.end() - (width * height - n)) == stepped
        stepped.increment()


def test_advance_across_row_boundary_skips_padding():
    image = BMPImage(5, 10)
    it = image.begin()
    it += 4
    assert it.offset == 12
    it += 1
    assert it.offset == 16
    it -= 2
    assert it.offset == 9
    assert it.retreat(3).offset == 0
    assert image.begin().advance(-1) == image.begin().decrement()


def test_iteration_visits_every_pixel_in_physical_order():
    image = BMPImage(5, 10)
    offsets = [pixel.offset for pixel in image]
    assert len(offsets) == 50
    assert offsets[0] == 0
    assert offsets[4:6] == [12, 16]
    assert offsets[-1] == 156


def test_cursor_arithmetic_and_ordering():
    image = BMPImage(5, 10)
    begin, end = image.begin(), image.end()
    assert end - begin == 160
    assert begin.difference(end) == -160
    assert image.cell(9, 1) - begin == 3
    assert 2 + begin == begin + 2
    assert begin < end and end > begin
    assert begin <= begin.copy() and begin >= begin.copy()
    assert (begin + 7).index == 7
    assert begin[5].offset == 16


def test_cursors_of_different_images():
    a = BMPImage(2, 2)
    b = BMPImage(2, 2)
    assert a.begin() != b.begin()
    with pytest.raises(ValueError):
        a.begin() < b.begin()
    with pytest.raises(ValueError):
        a.end() - b.begin()


def test_dereference_outside_buffer_fails():
    image = BMPImage(5, 10)
    with pytest.raises(IndexError):
        image.end().pixel()
    with pytest.raises(IndexError):
        (image.begin() - 1).pixel()
    with pytest.raises(IndexError):
        image.begin()[50]


def test_cell_maps_top_row_to_last_stored_row():
    image = BMPImage(5, 10)
    stride = image.layout.row_stride
    assert image.cell(0, 0).offset == 9 * stride
    assert image.cell(9, 0).offset == 0
    assert image.cell(9, 4).offset == 12
    assert image.cell(0, 0).offset // stride != image.cell(9, 0).offset // stride
    for row in range(10):
        for column in range(5):
            assert image.cell(row, column).offset == (9 - row) * stride + column * 3


@pytest.mark.parametrize("row, column", [(-1, 0), (10, 0), (0, -1), (0, 5)])
def test_cell_out_of_range(row, column):
    image = BMPImage(5, 10)
    with pytest.raises(IndexError):
        image.cell(row, column)


def test_row_proxy_indexing():
    image = BMPImage(5, 10)
    image[2][3].red = 200
    assert image.cell(2, 3).pixel().red == 200
    assert image[2, 3].red == 200
    with pytest.raises(IndexError):
        image[10]
    with pytest.raises(IndexError):
        image[0][5]


def test_channel_round_trip_is_independent():
    image = BMPImage(3, 2)
    pixel = image[1, 2]
    pixel.red = 10
    pixel.green = 20
    pixel.blue = 30
    assert (pixel.red, pixel.green, pixel.blue) == (10, 20, 30)
    pixel.green = 255
    assert pixel.rgb == (10, 255, 30)
    # neighbours untouched
    assert image[1, 1].rgb == (0, 0, 0)
    assert image[0, 2].rgb == (0, 0, 0)


def test_writes_are_visible_through_other_accessors():
    image = BMPImage(2, 2)
    first = image.begin().pixel()
    second = image.cell(1, 0).pixel()
    first.blue = 77
    assert second.blue == 77


def test_channels_are_stored_bgr():
    image = BMPImage(1, 1)
    image[0, 0].rgb = (1, 2, 3)
    assert image.to_bytes()[54:57] == bytes([3, 2, 1])


def test_channel_value_out_of_byte_range():
    image = BMPImage(1, 1)
    with pytest.raises(ValueError):
        image[0, 0].red = 256
    assert image[0, 0].red == 0


def test_pixel_buffer_bounds():
    buffer = PixelBuffer(4)
    buffer.write(3, 9)
    assert buffer.read(3) == 9
    assert bytes(buffer) == b'\x00\x00\x00\x09'
    with pytest.raises(IndexError):
        buffer.read(4)
    with pytest.raises(IndexError):
        buffer.write(-1, 0)
    assert Pixel(buffer, 1).red == 9


@pytest.mark.parametrize("width, height", SIZES)
def test_serialized_length(width, height):
    image = BMPImage(width, height)
    stride = image.layout.row_stride
    data = image.to_bytes()
    assert len(data) == 54 + stride * height
    assert int.from_bytes(data[2:6], 'little') == len(data)


def test_gradient_scenario():
    image = paint(BMPImage(5, 10))
    data = image.to_bytes()
    assert len(data) == 54 + 16 * 10
    assert data[0:2] == b'BM'
    assert int.from_bytes(data[18:22], 'little', signed=True) == 5
    assert int.from_bytes(data[22:26], 'little', signed=True) == 10
    assert data[54:57] == bytes([0, 0, 0])
    assert data[57:60] == bytes([5, 5, 5])
    # padding byte, then the first pixel of the next stored row
    assert data[69] == 0
    assert data[70:73] == bytes([25, 25, 25])
    # logical index 49 is the last stored pixel
    assert data[54 + 156:54 + 159] == bytes([245, 245, 245])
    # top-left as the caller sees it is logical index 45
    assert image[0, 0].rgb == (225, 225, 225)


def test_new_image_is_black():
    data = BMPImage(3, 3).to_bytes()
    assert data[54:] == b'\x00' * 36


def test_write_returns_byte_count_and_is_idempotent():
    image = paint(BMPImage(4, 3))
    first, second = io.BytesIO(), io.BytesIO()
    assert write(image, first) == 54 + 36
    assert image.write(second) == 54 + 36
    assert first.getvalue() == second.getvalue() == image.to_bytes()


def test_write_propagates_sink_errors():
    class BrokenSink:
        def write(self, data):
            raise OSError("disk full")

    with pytest.raises(OSError, match="disk full"):
        BMPImage(2, 2).write(BrokenSink())


def test_save(tmp_path):
    path = tmp_path / "gradient.bmp"
    image = paint(BMPImage(5, 10))
    assert image.save(path) == 214
    assert path.read_bytes() == image.to_bytes()


def test_save_to_missing_directory(tmp_path):
    with pytest.raises(OSError):
        BMPImage(1, 1).save(tmp_path / "missing" / "out.bmp")


def test_fixed_size_images():
    cls = fixed_size(5, 10)
    assert cls is fixed_size(5, 10)
    assert (cls.WIDTH, cls.HEIGHT) == (5, 10)
    image = cls()
    assert isinstance(image, BMPImage)
    assert (image.width, image.height) == (5, 10)
    assert len(image.to_bytes()) == 214
    with pytest.raises(ValueError):
        fixed_size(0, 10)


def test_backward_step_from_row_start_skips_padding():
    image = BMPImage(5, 10)
    it = image.begin() + 5
    assert it.offset == 16
    assert it.decrement().offset == 12


def test_cursors_are_not_hashable():
    image = BMPImage(2, 2)
    with pytest.raises(TypeError):
        {image.begin()}


@pytest.mark.parametrize("row, column", [(0.5, 0), (0, 1.0), ("0", 0), (True, 0)])
def test_cell_rejects_non_integer_indices(row, column):
    image = BMPImage(5, 10)
    with pytest.raises(TypeError):
        image.cell(row, column)
    with pytest.raises(TypeError):
        image[row, column]


def test_item_access_rejects_bad_keys():
    image = BMPImage(5, 10)
    with pytest.raises(TypeError):
        image[0.5]
    with pytest.raises(TypeError):
        image[1, 2, 3]
    with pytest.raises(TypeError):
        image[2][1.5]
