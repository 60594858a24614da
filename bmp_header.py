from bmp_layout import buffer_size as _buffer_size

FILE_HEADER_SIZE = 14
INFO_HEADER_SIZE = 40
# Pixel array starts right after both headers
PIXEL_ARRAY_OFFSET = FILE_HEADER_SIZE + INFO_HEADER_SIZE

# 72 ppi * 39.37 inches per meter, rounded
PIXELS_PER_METER = 2835

BI_RGB = 0


def _u16(value):
    return value.to_bytes(2, 'little')


def _u32(value):
    return value.to_bytes(4, 'little')


def _i32(value):
    return value.to_bytes(4, 'little', signed=True)


class FileHeader:
    """BITMAPFILEHEADER: signature, total size and pixel array offset."""

    def __init__(self, file_size, byte_offset=PIXEL_ARRAY_OFFSET):
        self.signature = b'BM'
        self.file_size = file_size
        # these two values are reserved
        self.reserved1 = 0
        self.reserved2 = 0
        self.byte_offset = byte_offset

    def fields(self):
        return {
            'signature': self.signature,
            'file_size': self.file_size,
            'reserved1': self.reserved1,
            'reserved2': self.reserved2,
            'byte_offset': self.byte_offset,
        }

    def to_bytes(self):
        return b''.join((
            self.signature,
            _u32(self.file_size),
            _u16(self.reserved1),
            _u16(self.reserved2),
            _u32(self.byte_offset),
        ))


class InfoHeader:
    """BITMAPINFOHEADER for an uncompressed 24-bit image."""

    def __init__(self, width, height):
        self.header_size = INFO_HEADER_SIZE
        # positive height means rows are stored bottom to top
        self.width = width
        self.height = height
        # must be 1
        self.colour_planes = 1
        self.bits_per_pixel = 24
        self.compression_type = BI_RGB
        # may be 0 for BI_RGB bitmaps
        self.image_size = 0
        self.horizontal_ppm = PIXELS_PER_METER
        self.vertical_ppm = PIXELS_PER_METER
        # 0 means every colour allowed by bits_per_pixel
        self.colours_used = 0
        self.colours_required = 0

    def fields(self):
        return {
            'header_size': self.header_size,
            'width': self.width,
            'height': self.height,
            'colour_planes': self.colour_planes,
            'bits_per_pixel': self.bits_per_pixel,
            'compression_type': self.compression_type,
            'image_size': self.image_size,
            'horizontal_ppm': self.horizontal_ppm,
            'vertical_ppm': self.vertical_ppm,
            'colours_used': self.colours_used,
            'colours_required': self.colours_required,
        }

    def to_bytes(self):
        return b''.join((
            _u32(self.header_size),
            _i32(self.width),
            _i32(self.height),
            _u16(self.colour_planes),
            _u16(self.bits_per_pixel),
            _u32(self.compression_type),
            _u32(self.image_size),
            _i32(self.horizontal_ppm),
            _i32(self.vertical_ppm),
            _u32(self.colours_used),
            _u32(self.colours_required),
        ))


def file_header(width, height):
    return FileHeader(PIXEL_ARRAY_OFFSET + _buffer_size(width, height))


def info_header(width, height):
    return InfoHeader(width, height)


def encode_headers(width, height, buffer_size):
    """Return the 54 header bytes that precede a pixel array of buffer_size bytes."""
    header = FileHeader(PIXEL_ARRAY_OFFSET + buffer_size)
    return header.to_bytes() + InfoHeader(width, height).to_bytes()


def describe(width, height):
    # Flat view of both headers, file header first
    fields = {}
    fields.update(file_header(width, height).fields())
    fields.update(info_header(width, height).fields())
    return fields
