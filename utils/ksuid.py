"""
K-sortable identifiers for frames, sessions and error records.

20 raw bytes (4 bytes of seconds since the KSUID epoch, 16 random bytes)
rendered as a fixed-width 27 character base62 string, so ids sort by
creation second.
"""

import os
import struct
import time

KSUID_EPOCH = 1400000000
KSUID_LENGTH = 27
BASE62 = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz"


def _encode_base62(n):
    chars = []
    while n > 0:
        n, remainder = divmod(n, 62)
        chars.append(BASE62[remainder])
    return "".join(reversed(chars)).rjust(KSUID_LENGTH, "0")


def generate_ksuid():
    """Generate a 27-character sortable unique ID."""
    seconds = int(time.time()) - KSUID_EPOCH
    raw = struct.pack(">I", seconds) + os.urandom(16)
    return _encode_base62(int.from_bytes(raw, byteorder="big"))


def new_run_id(kind):
    """Prefixed id for a simulation session or search run, e.g. ``sess_2Ab...``."""
    return f"{kind}_{generate_ksuid()}"
