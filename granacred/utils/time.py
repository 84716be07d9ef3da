import time


def elapsed_ms(t0: float) -> int:
    """Milliseconds since a `time.monotonic()` reading, clamped to >= 0."""
    return max(0, int((time.monotonic() - t0) * 1000))
