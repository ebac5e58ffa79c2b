import os
import tempfile

import numpy as np
import pytest

# keep rotating log files out of the working tree
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="motion-logs-"))


class FakeSink:
    def __init__(self, filename, fps, frame_size):
        self.filename = filename
        self.fps = fps
        self.frame_size = frame_size
        self.frames = []
        self.released = False

    def write(self, frame):
        assert not self.released, "write after release"
        self.frames.append(frame)

    def release(self):
        self.released = True


class SinkFactory:
    """Records every sink it opens; optionally fails the first N opens."""

    def __init__(self, fail=0):
        self.fail = fail
        self.sinks = []

    def __call__(self, filename, fps, frame_size):
        if self.fail:
            self.fail -= 1
            raise OSError("disk full")
        sink = FakeSink(filename, fps, frame_size)
        self.sinks.append(sink)
        return sink


class FakeCapture:
    """Replays (frame, timestamp) pairs; timestamps drive the shared clock."""

    def __init__(self, frames, clock):
        self.frames = list(frames)
        self.clock = clock
        self.released = False

    def read(self):
        if not self.frames:
            return False, None
        frame, ts = self.frames.pop(0)
        self.clock.t = ts
        return frame is not None, frame

    def release(self):
        self.released = True


class Clock:
    def __init__(self, t=0.0):
        self.t = t

    def __call__(self):
        return self.t


def blank_frame(h=240, w=320):
    return np.zeros((h, w, 3), dtype=np.uint8)


def frame_with_box(x, y, size, h=240, w=320):
    frame = blank_frame(h, w)
    frame[y:y + size, x:x + size] = 255
    return frame


@pytest.fixture
def sink_factory():
    return SinkFactory()
