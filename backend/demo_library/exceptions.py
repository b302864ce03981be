class DemoLibraryError(Exception):
    """Base exception for demo library errors"""
    pass

class InvalidDemoFile(DemoLibraryError):
    """Exception for files that do not carry a valid demo header"""
    def __init__(self, path: str, message: str):
        self.path = path
        super().__init__(f"Invalid demo file {path}: {message}")

class OutOfBoundsRead(DemoLibraryError, EOFError):
    """Exception for reads past the end of a byte buffer"""
    def __init__(self, requested: int, offset: int, length: int):
        self.requested = requested
        self.offset = offset
        self.length = length
        super().__init__(
            f"Read of {requested} bytes at offset {offset} "
            f"would exceed buffer length {length}"
        )

class InvalidDemoName(DemoLibraryError, ValueError):
    """Exception for rename targets that are not safe file names"""
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Invalid demo name: {name!r}")
