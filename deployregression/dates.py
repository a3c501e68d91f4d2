"""
Date utilities functions.

Deployment timestamps are integers, in milliseconds since the epoch.
"""

import datetime


def to_datetime(timestamp):
    """
    transform a millisecond timestamp to a naive UTC datetime instance.
    If the parameter is already a datetime, it is returned without
    modification.
    """
    if isinstance(timestamp, datetime.datetime):
        return timestamp
    return datetime.datetime(1970, 1, 1) + datetime.timedelta(milliseconds=timestamp)


def format_timestamp(timestamp):
    return to_datetime(timestamp).strftime("%Y-%m-%d %H:%M:%S")
