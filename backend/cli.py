# cli.py — バッチ実行（cron から呼ぶ想定）
#
#   python cli.py init-db
#   python cli.py scrape --language "" --language go --language python
#   python cli.py sync --end=-2d --limit=500

import argparse
import signal
import sys
from typing import List, Optional

from cancel import CancelToken
from config import DB_PATH, GITHUB_TOKEN
from db import Store
from errors import TrendError
from github_client import GitHubClient
from models import init_db
from reconcile import ScrapeHandler
from repositories import RepositoryRepo
from scraper import TrendingPageSource
from sync import SyncHandler
from timewindow import build_window
from trending import TrendingRepo


def _log(*s):
    print("[cli]", *s)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="GitHub trending の取得と同期")
    parser.add_argument("--db", default=DB_PATH, help="SQLite ファイルのパス")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("init-db", help="テーブルを作成")

    scrape = sub.add_parser("scrape", help="trending ページを取得して順位を保存")
    scrape.add_argument(
        "--language", action="append", default=None,
        help="言語（繰り返し可）。空文字は全言語。省略時は全言語のみ",
    )

    sync = sub.add_parser("sync", help="保存済みリポジトリを GitHub API から取り直す")
    sync.add_argument("-s", "--start", default="", help='--start "2023-01-06 14:35:00"')
    sync.add_argument("-e", "--end", default="", help='--end "2023-10-06 14:35:00", --end=-2d, --end=2h')
    sync.add_argument("-l", "--limit", type=int, default=0, help="--limit=100（0 は上限なし）")
    return parser


def _install_signal_handlers(token: CancelToken):
    def _handler(signum, frame):
        _log(f"signal {signum} -> cancel")
        token.cancel()

    signal.signal(signal.SIGINT, _handler)
    signal.signal(signal.SIGTERM, _handler)


def run(args: argparse.Namespace, token: CancelToken) -> dict:
    if args.command == "init-db":
        init_db(args.db)
        return {"ok": True}

    # 期間指定の誤りは DB を開く前に弾く
    window = build_window(args.start, args.end, args.limit) if args.command == "sync" else None

    with Store.open(args.db) as store:
        repository_repo = RepositoryRepo(store)
        github = GitHubClient(GITHUB_TOKEN)

        if args.command == "scrape":
            handler = ScrapeHandler(TrendingRepo(store), repository_repo, TrendingPageSource(), github)
            return handler.handle(args.language or [""], cancel=token)

        return SyncHandler(repository_repo, github).handle(window, cancel=token)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    token = CancelToken()
    _install_signal_handlers(token)
    try:
        result = run(args, token)
    except (TrendError, OSError) as e:
        _log(f"{args.command} failed: {e}")
        return 1
    _log(f"{args.command} -> {result}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
