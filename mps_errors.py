class MpsError(Exception):
    """Base class for everything that can go wrong reading or converting slides"""


class AllocationFailure(MpsError, MemoryError):
    pass


class MalformedHeader(MpsError, ValueError):
    """Record count is zero or missing"""


class TruncatedRead(MpsError, ValueError):
    """Fewer bytes available than the header says there should be"""


class DecompressionOverflow(MpsError, ValueError):
    """RLE stream decodes to more pixels than the raster holds"""


class InvalidIndex(MpsError, IndexError):
    pass


class InvalidArgument(MpsError, ValueError):
    pass


class IOFailure(MpsError, OSError):
    pass


class OpenFailure(IOFailure):
    pass


class WriteFailure(IOFailure):
    pass
