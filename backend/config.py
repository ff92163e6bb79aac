# config.py — 環境変数から読む定数
import os
from datetime import datetime, timedelta, timezone

# ===========================
# 定数・設定
# ===========================
DB_PATH = os.getenv("DB_PATH", os.path.abspath("trend.db"))

GITHUB_TOKEN = os.getenv("GITHUB_TOKEN", "")
GITHUB_API = os.getenv("GITHUB_API", "https://api.github.com")
TRENDING_URL = os.getenv("TRENDING_URL", "https://github.com/trending")

USER_AGENT = "trend-rank-bot/1.0 (+https://example.com)"
HTTP_TIMEOUT = float(os.getenv("HTTP_TIMEOUT", "15"))
SLEEP_SEC = float(os.getenv("SLEEP_SEC", "0.25"))  # マナー

TZ = timezone(timedelta(hours=int(os.getenv("TZ_OFFSET_HOURS", "9"))))

DATETIME_FMT = "%Y-%m-%d %H:%M:%S"
DATE_FMT = "%Y-%m-%d"


def now() -> datetime:
    return datetime.now(TZ)
