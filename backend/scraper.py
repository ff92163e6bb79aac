# scraper.py — GitHub trending ページ → "owner/name" の順位付きリスト
import re
from typing import List, Optional
from urllib.parse import quote

import requests

from config import HTTP_TIMEOUT, TRENDING_URL, USER_AGENT

# <h2 class="h3 lh-condensed"> <a ... href="/owner/name">
TREND_LINK_RE = re.compile(
    r'<h2[^>]*class="[^"]*\bh3 lh-condensed\b[^"]*"[^>]*>\s*<a\b[^>]*?\bhref="/([^"/?#]+/[^"/?#]+)"',
    re.S | re.I,
)


def _log(*s):
    print("[scraper]", *s)


def parse_trending_page(html: str) -> List[str]:
    """ページ上の並び順のまま返す（先頭 = 1 位）"""
    return [m.group(1).strip() for m in TREND_LINK_RE.finditer(html)]


class TrendingPageSource:
    def __init__(self, url: str = TRENDING_URL, session: Optional[requests.Session] = None):
        self.url = url.rstrip("/")
        self.http = session or requests.Session()

    def page_url(self, language: Optional[str]) -> str:
        lang = (language or "").strip()
        if lang:
            return f"{self.url}/{quote(lang, safe='')}?since=daily"
        return self.url

    def fetch(self, language: Optional[str] = None) -> List[str]:
        """
        1 回呼ぶごとに新しく取得する。取得に失敗したら空リスト
        （空のスナップショットは何も書き換えない）。
        """
        url = self.page_url(language)
        try:
            r = self.http.get(url, headers={"User-Agent": USER_AGENT}, timeout=HTTP_TIMEOUT)
        except requests.RequestException as e:
            _log(f"EXC url={url} -> {e}")
            return []
        if r.status_code != 200:
            _log(f"url={url} -> HTTP {r.status_code}")
            return []

        repos = parse_trending_page(r.text)
        _log(f"url={url} items={len(repos)}")
        return repos
