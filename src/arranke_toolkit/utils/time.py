import time


def get_current_timestamp() -> int:
    """Current time as integer milliseconds since the epoch."""
    return int(time.time() * 1000)
