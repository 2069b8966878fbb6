"""Process-level helpers: seeding and elapsed-time formatting."""

from __future__ import annotations

import random
import time

import numpy as np
import torch


def seed_everything(seed: int) -> int:
    """
    Seed python, numpy and torch RNGs and return the seed actually used.

    Non-positive seeds fall back to the wall clock so repeated runs differ.
    """
    if seed <= 0:
        seed = int(time.time() * 1000) % (2**31 - 1)
    random.seed(seed)
    np.random.seed(seed)
    torch.manual_seed(seed)
    if torch.cuda.is_available():
        torch.cuda.manual_seed_all(seed)
    return seed


def format_duration(milliseconds: float) -> str:
    """Render a duration as ``<n> ms`` below one second, else ``HH:MM:SS``."""
    milliseconds = int(milliseconds)
    if milliseconds < 1000:
        return f"{milliseconds} ms"
    seconds = milliseconds // 1000
    hours, remainder = divmod(seconds, 3600)
    minutes, seconds = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"
