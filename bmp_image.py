import io
import logging
from functools import lru_cache

from bmp_header import PIXEL_ARRAY_OFFSET, encode_headers
from bmp_layout import BYTES_PER_PIXEL, Layout

logger = logging.getLogger(__name__)


class PixelBuffer:
    """Zero-initialised, padded pixel array of a 24-bit bitmap."""

    __slots__ = ("_data",)

    def __init__(self, size):
        self._data = bytearray(size)

    def __len__(self):
        return len(self._data)

    def __bytes__(self):
        return bytes(self._data)

    def _check(self, offset):
        if not 0 <= offset < len(self._data):
            raise IndexError(
                f"Byte offset {offset} outside pixel buffer of {len(self._data)} bytes")

    def read(self, offset):
        self._check(offset)
        return self._data[offset]

    def write(self, offset, value):
        self._check(offset)
        self._data[offset] = value


class Pixel:
    """Channel accessor for the pixel starting at a physical byte offset.

    Channels are stored blue, green, red. Writes go straight to the buffer,
    so every accessor over the same offset sees them immediately.
    """

    __slots__ = ("_buffer", "_offset")

    def __init__(self, buffer, offset):
        self._buffer = buffer
        self._offset = offset

    @property
    def offset(self):
        return self._offset

    @property
    def red(self):
        return self._buffer.read(self._offset + 2)

    @red.setter
    def red(self, value):
        self._buffer.write(self._offset + 2, value)

    @property
    def green(self):
        return self._buffer.read(self._offset + 1)

    @green.setter
    def green(self, value):
        self._buffer.write(self._offset + 1, value)

    @property
    def blue(self):
        return self._buffer.read(self._offset)

    @blue.setter
    def blue(self, value):
        self._buffer.write(self._offset, value)

    @property
    def rgb(self):
        return (self.red, self.green, self.blue)

    @rgb.setter
    def rgb(self, value):
        self.red, self.green, self.blue = value

    def __repr__(self):
        return f"Pixel(offset={self._offset}, rgb={self.rgb})"


class PixelCursor:
    """Random-access position in an image's pixel array.

    Moves in whole pixels and steps over row padding. The position is the
    physical byte offset, so row boundaries are always recomputed from the
    image layout rather than from a stored start pointer.
    """

    __slots__ = ("_image", "_offset")

    def __init__(self, image, offset=0):
        self._image = image
        self._offset = offset

    @property
    def image(self):
        return self._image

    @property
    def offset(self):
        return self._offset

    @property
    def index(self):
        return self._image.layout.index_of(self._offset)

    def copy(self):
        return PixelCursor(self._image, self._offset)

    def pixel(self):
        if not 0 <= self._offset < self._image.layout.buffer_size:
            raise IndexError(f"Cannot dereference cursor at byte offset {self._offset}")
        return Pixel(self._image._buffer, self._offset)

    # Single steps follow the padding rules directly
    def increment(self):
        layout = self._image.layout
        if layout.end_of_row(self._offset):
            self._offset += layout.row_pad_bytes + BYTES_PER_PIXEL
        else:
            self._offset += BYTES_PER_PIXEL
        return self

    def decrement(self):
        layout = self._image.layout
        if layout.start_of_row(self._offset):
            self._offset -= layout.row_pad_bytes + BYTES_PER_PIXEL
        else:
            self._offset -= BYTES_PER_PIXEL
        return self

    # Same result as n single steps, computed in one go
    def advance(self, n):
        layout = self._image.layout
        self._offset = layout.offset_of(layout.index_of(self._offset) + n)
        return self

    def retreat(self, n):
        return self.advance(-n)

    def difference(self, other):
        self._check_same_image(other)
        return self._offset - other._offset

    def _check_same_image(self, other):
        if other._image is not self._image:
            raise ValueError("Cursors belong to different images")

    def __add__(self, n):
        if not isinstance(n, int):
            return NotImplemented
        return self.copy().advance(n)

    __radd__ = __add__

    def __iadd__(self, n):
        if not isinstance(n, int):
            return NotImplemented
        return self.advance(n)

    def __sub__(self, other):
        if isinstance(other, PixelCursor):
            return self.difference(other)
        if not isinstance(other, int):
            return NotImplemented
        return self.copy().retreat(other)

    def __isub__(self, n):
        if not isinstance(n, int):
            return NotImplemented
        return self.retreat(n)

    def __getitem__(self, n):
        return (self + n).pixel()

    def __eq__(self, other):
        if not isinstance(other, PixelCursor):
            return NotImplemented
        return other._image is self._image and other._offset == self._offset

    # Cursors move in place, so they cannot be dict keys
    __hash__ = None

    def __lt__(self, other):
        if not isinstance(other, PixelCursor):
            return NotImplemented
        self._check_same_image(other)
        return self._offset < other._offset

    def __le__(self, other):
        if not isinstance(other, PixelCursor):
            return NotImplemented
        self._check_same_image(other)
        return self._offset <= other._offset

    def __gt__(self, other):
        if not isinstance(other, PixelCursor):
            return NotImplemented
        self._check_same_image(other)
        return self._offset > other._offset

    def __ge__(self, other):
        if not isinstance(other, PixelCursor):
            return NotImplemented
        self._check_same_image(other)
        return self._offset >= other._offset

    def __repr__(self):
        return f"PixelCursor(offset={self._offset})"


def _check_index(name, value):
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} index must be an integer, got {value!r}")


class _RowProxy:
    # Second half of image[row][column]

    __slots__ = ("_image", "_row")

    def __init__(self, image, row):
        self._image = image
        self._row = row

    def __getitem__(self, column):
        return self._image.cell(self._row, column).pixel()


class BMPImage:
    """Fixed-size 24-bit RGB image that serializes to an uncompressed BMP.

    Row 0 is the top row as the caller sees it; it is stored last in the
    pixel array, because BMP rows run bottom to top.
    """

    def __init__(self, width, height):
        self._layout = Layout(width, height)
        self._buffer = PixelBuffer(self._layout.buffer_size)
        logger.debug("Allocated %dx%d image (%d byte pixel array)",
                     width, height, self._layout.buffer_size)

    @property
    def width(self):
        return self._layout.width

    @property
    def height(self):
        return self._layout.height

    @property
    def layout(self):
        return self._layout

    def __len__(self):
        return self.width * self.height

    def __repr__(self):
        return f"{type(self).__name__}(width={self.width}, height={self.height})"

    def begin(self):
        return PixelCursor(self, 0)

    def end(self):
        return PixelCursor(self, self._layout.buffer_size)

    def cell(self, row, column):
        _check_index("Row", row)
        _check_index("Column", column)
        if not 0 <= row < self.height:
            raise IndexError(f"Row {row} out of range for image height {self.height}")
        if not 0 <= column < self.width:
            raise IndexError(f"Column {column} out of range for image width {self.width}")
        return self.begin().advance((self.height - 1 - row) * self.width + column)

    def __getitem__(self, key):
        if isinstance(key, tuple):
            if len(key) != 2:
                raise TypeError(f"Expected image[row, column], got {len(key)} indices")
            row, column = key
            return self.cell(row, column).pixel()
        _check_index("Row", key)
        if not 0 <= key < self.height:
            raise IndexError(f"Row {key} out of range for image height {self.height}")
        return _RowProxy(self, key)

    def __iter__(self):
        it = self.begin()
        end = self.end()
        while it != end:
            yield it.pixel()
            it.increment()

    def write(self, sink):
        return write(self, sink)

    def to_bytes(self):
        sink = io.BytesIO()
        write(self, sink)
        return sink.getvalue()

    def save(self, path):
        with open(path, "wb") as f:
            return write(self, f)


def write(image, sink):
    """Write image as a BMP file to a binary sink and return the bytes written.

    Errors raised by the sink propagate unchanged; whatever was already
    written stays written.
    """
    layout = image.layout
    header = encode_headers(layout.width, layout.height, layout.buffer_size)
    sink.write(header)
    sink.write(bytes(image._buffer))
    total = PIXEL_ARRAY_OFFSET + layout.buffer_size
    logger.debug("Wrote %d bytes for %dx%d image", total, layout.width, layout.height)
    return total


def fixed_size(width, height):
    """Return a BMPImage subclass whose constructor takes no arguments."""
    # Validate before the cache so bad geometry never gets a class
    Layout(width, height)
    return _fixed_size(width, height)


@lru_cache(maxsize=None)
def _fixed_size(width, height):
    def __init__(self):
        BMPImage.__init__(self, width, height)

    return type(f"BMPImage{width}x{height}", (BMPImage,), {
        "__init__": __init__,
        "WIDTH": width,
        "HEIGHT": height,
    })
