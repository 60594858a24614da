BYTES_PER_PIXEL = 3

# Largest value a signed 32-bit header field can hold
MAX_DIMENSION = 2**31 - 1

# File header plus info header, ahead of the pixel array
HEADERS_SIZE = 14 + 40
# The file size field is an unsigned 32-bit value
MAX_FILE_SIZE = 2**32 - 1


def row_stride(width):
    # Each row is padded to a multiple of 4 bytes
    return ((width * BYTES_PER_PIXEL + 3) // 4) * 4


def row_padding(width):
    return row_stride(width) - width * BYTES_PER_PIXEL


def buffer_size(width, height):
    return row_stride(width) * height


def _check_dimension(name, value):
    # bool is an int subclass, but True is not a width
    if not isinstance(value, int) or isinstance(value, bool):
        raise ValueError(f"{name} must be an integer, got {value!r}")
    if value < 1:
        raise ValueError(f"{name} must be at least 1, got {value}")
    if value > MAX_DIMENSION:
        raise ValueError(f"{name} must not exceed {MAX_DIMENSION}, got {value}")


class Layout:
    """Stride and padding arithmetic for a 24-bit pixel array.

    Pixels are addressed either by physical byte offset into the padded
    buffer or by logical index, which counts pixels in physical traversal
    order (bottom row first, left to right) and skips the padding.
    """

    __slots__ = ("width", "height", "unpadded_row_bytes", "row_stride",
                 "row_pad_bytes", "buffer_size")

    def __init__(self, width, height):
        _check_dimension("width", width)
        _check_dimension("height", height)
        self.width = width
        self.height = height
        self.unpadded_row_bytes = width * BYTES_PER_PIXEL
        self.row_stride = row_stride(width)
        self.row_pad_bytes = self.row_stride - self.unpadded_row_bytes
        self.buffer_size = self.row_stride * height
        if HEADERS_SIZE + self.buffer_size > MAX_FILE_SIZE:
            raise ValueError(
                f"{width}x{height} image needs {HEADERS_SIZE + self.buffer_size} bytes, "
                f"more than a BMP file can declare ({MAX_FILE_SIZE})")

    def __eq__(self, other):
        if not isinstance(other, Layout):
            return NotImplemented
        return (self.width, self.height) == (other.width, other.height)

    def __hash__(self):
        return hash((self.width, self.height))

    def __repr__(self):
        return (f"Layout(width={self.width}, height={self.height}, "
                f"row_stride={self.row_stride}, buffer_size={self.buffer_size})")

    def end_of_row(self, byte_index):
        # byte_index must address the first byte of a pixel
        return (byte_index % self.row_stride) // BYTES_PER_PIXEL == self.width - 1

    def start_of_row(self, byte_index):
        return byte_index % self.row_stride == 0

    def offset_of(self, index):
        # Floor division keeps negative indexes consistent with stepping
        # backwards one pixel at a time from offset 0
        row, column = divmod(index, self.width)
        return row * self.row_stride + column * BYTES_PER_PIXEL

    def index_of(self, offset):
        row, remainder = divmod(offset, self.row_stride)
        return row * self.width + remainder // BYTES_PER_PIXEL
