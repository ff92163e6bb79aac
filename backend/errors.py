# errors.py — 例外の分類


class TrendError(Exception):
    pass


class ParseError(TrendError, ValueError):
    """日時表現が解釈できない"""


class RecordLookupError(TrendError, LookupError):
    """ストア読み出しの失敗"""


class WriteError(TrendError):
    """INSERT / UPDATE / DELETE の失敗"""


class ValidationError(TrendError, ValueError):
    pass


class Cancelled(TrendError):
    pass
