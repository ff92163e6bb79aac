# cancel.py — 協調的キャンセル
import threading

from errors import Cancelled


class CancelToken:
    """
    I/O の直前に check() を呼ぶ。実行中の書き込みは中断しない。
    """

    def __init__(self):
        self._event = threading.Event()

    def cancel(self):
        self._event.set()

    def check(self):
        if self._event.is_set():
            raise Cancelled("operation cancelled")


def check(token):
    if token is not None:
        token.check()
