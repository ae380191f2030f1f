"""
Conversions of :mod:`datetime` arguments to the integer forms used by
expiry options (``EX``/``PX`` durations and ``EXAT``/``PXAT`` timestamps).
Plain integers are passed through unchanged.
"""

from __future__ import annotations

import datetime


def normalized_seconds(value: int | datetime.timedelta) -> int:
    if isinstance(value, datetime.timedelta):
        return int(value.total_seconds())
    return value


def normalized_milliseconds(value: int | datetime.timedelta) -> int:
    if isinstance(value, datetime.timedelta):
        return value // datetime.timedelta(milliseconds=1)
    return value


def normalized_time_seconds(value: int | datetime.datetime) -> int:
    if isinstance(value, datetime.datetime):
        return int(value.timestamp())
    return value


def normalized_time_milliseconds(value: int | datetime.datetime) -> int:
    if isinstance(value, datetime.datetime):
        return int(value.timestamp() * 1000)
    return value
