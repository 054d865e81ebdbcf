from __future__ import annotations
import threading

from tqdm import tqdm as _tqdm


def progress(iterable, total=None, desc=None):
    return _tqdm(iterable, total=total, desc=desc, unit='relay')


_print_lock = threading.Lock()


def log(msg: str) -> None:
    with _print_lock:
        print(msg, flush=True)
