from ksr.core.time.abc import Time
from ksr.core.time.real import RealTime

__all__ = [
    "RealTime",
    "Time",
]
