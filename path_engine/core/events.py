import struct
from typing import Iterator, Tuple

# Event Types
EVT_PROGRESS = 0x01
EVT_DONE = 0x02

MAGIC = b"PATHLOG"

# 1 byte type + 8 byte count + 8 byte elapsed seconds
RECORD = struct.Struct(">BQd")


class ProgressLog:
    """
    Binary log of search progress events.
    Instances are callable so they can be handed to a search as `on_progress`.
    """
    def __init__(self, filename: str, width: int, height: int):
        self.filename = filename
        self.file = open(filename, "wb")
        self.events_written = 0
        self.write_header(width, height)

    def write_header(self, width: int, height: int):
        # Header: Magic "PATHLOG" + Width (4b) + Height (4b)
        self.file.write(MAGIC)
        self.file.write(struct.pack(">II", width, height))

    def log_progress(self, count: int, elapsed: float):
        self.file.write(RECORD.pack(EVT_PROGRESS, count, elapsed))
        self.events_written += 1

    def log_done(self, count: int, elapsed: float):
        self.file.write(RECORD.pack(EVT_DONE, count, elapsed))
        self.events_written += 1

    def __call__(self, count: int, elapsed: float):
        self.log_progress(count, elapsed)

    def close(self):
        if self.file:
            self.file.close()
            self.file = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


class ProgressLogReader:
    def __init__(self, filename: str):
        self.filename = filename
        self.file = open(filename, "rb")
        self.width = 0
        self.height = 0

    def read_header(self) -> Tuple[int, int]:
        magic = self.file.read(len(MAGIC))
        if magic != MAGIC:
            raise ValueError("Invalid progress log file")
        data = self.file.read(8)
        if len(data) != 8:
            raise ValueError("Truncated progress log header")
        self.width, self.height = struct.unpack(">II", data)
        return self.width, self.height

    def stream_events(self) -> Iterator[Tuple[int, Tuple[int, float]]]:
        while True:
            data = self.file.read(RECORD.size)
            if not data:
                break
            if len(data) != RECORD.size:
                raise ValueError("Truncated progress log record")

            type_code, count, elapsed = RECORD.unpack(data)
            if type_code not in (EVT_PROGRESS, EVT_DONE):
                raise ValueError(f"Unknown event type 0x{type_code:02x}")
            yield (type_code, (count, elapsed))

    def close(self):
        if self.file:
            self.file.close()
            self.file = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
