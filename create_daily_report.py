#!/usr/bin/env python3
"""
create_daily_report.py — 日報の自動作成・アーカイブスクリプト

launchd / cron から毎朝実行する想定。
  1. Template.txt が無ければ自動生成
  2. 昨日以前の日報 (YYYYMMDD.txt) を Archive/<YYYY>/<MM>/ に移動
  3. 今日の日報が無ければ Template.txt をコピーして作成

手動実行:
  python3 create_daily_report.py               # 今日の日付で実行
  python3 create_daily_report.py 2020-08-28    # 指定日を「今日」として実行
  python3 create_daily_report.py list          # 日報一覧を表示

設定 (.env または環境変数):
  WORK_REPORT_DIR      日報を置くディレクトリ（未指定ならカレントディレクトリ）
  WORK_REPORT_MANAGED  設定されていればログファイルに書かず stdout のみ
  WORK_REPORT_LOG      ログファイルのパス（未指定ならスクリプトと同じ場所の logs/work_report.log）

.env はカレントディレクトリ、次にスクリプトと同じディレクトリの順に探す（先に見つかった値が優先）。
pip install して create-daily-report コマンドで使う場合は、カレントディレクトリの .env か
環境変数で WORK_REPORT_LOG を指定すること（未指定だとインストール先に logs/ を作る）。
"""
import os
import sys
from datetime import date, datetime
from pathlib import Path

_HERE = Path(__file__).parent
sys.path.insert(0, str(_HERE))

from report_template import TEMPLATE_NAME
from work_report import list_reports, run


# ===== 設定（.envから読み込み、なければ環境変数・デフォルト値を使用）=====
def _load_env():
    """標準ライブラリのみで .env を読み込む（python-dotenv不要）"""
    for env_path in (Path.cwd() / '.env', _HERE / '.env'):
        if not env_path.is_file():
            continue
        for line in env_path.read_text(encoding='utf-8').splitlines():
            line = line.strip()
            if line and not line.startswith('#') and '=' in line:
                key, _, val = line.partition('=')
                os.environ.setdefault(key.strip(), val.strip())

_load_env()

LOG_FILE      = Path(os.environ.get('WORK_REPORT_LOG') or _HERE / 'logs' / 'work_report.log').expanduser()
MAX_LOG_LINES = 500   # ログが肥大化しないよう上限管理


def _working_dir() -> Path:
    configured = os.environ.get('WORK_REPORT_DIR')
    return Path(configured).expanduser() if configured else Path.cwd()


def _trim_log(path: Path) -> None:
    if not path.exists():
        return
    # 壊れたバイトがあってもログ出力は止めない
    lines = path.read_text(encoding='utf-8', errors='replace').splitlines(keepends=True)
    if len(lines) >= MAX_LOG_LINES:
        path.write_text(''.join(lines[-(MAX_LOG_LINES - 1):]), encoding='utf-8')


def _log(msg: str) -> None:
    ts   = datetime.now().strftime('%Y-%m-%d %H:%M:%S')
    line = f'[{ts}] {msg}'
    # launchd / cron 管理下では stdout がそのままログに流れるため print のみ
    print(line, flush=True)
    if not os.environ.get('WORK_REPORT_MANAGED'):
        try:
            LOG_FILE.parent.mkdir(parents=True, exist_ok=True)
            _trim_log(LOG_FILE)
            with open(LOG_FILE, 'a', encoding='utf-8') as f:
                f.write(line + '\n')
        except OSError:
            pass


def parse_date_arg(arg: str) -> date | None:
    """'2020-08-28' または '20200828' → date"""
    for fmt in ('%Y-%m-%d', '%Y%m%d'):
        try:
            return datetime.strptime(arg, fmt).date()
        except ValueError:
            continue
    return None


def print_summary(summary: dict) -> None:
    template = summary['template']
    if not template['ok']:
        _log(f'[ERROR] {template["error"]} ({template["path"]})')
        return
    if template['created']:
        _log(f'{TEMPLATE_NAME} was not found, so it is generated automatically: {template["path"]}')

    archive = summary['archive']
    for r in archive['archived']:
        _log(f'    Archived: {r["filename"]} -> {r["path"]}')
    for r in archive['conflicts']:
        same = 'same content' if r['identical'] else 'different content'
        _log(f'[WARN] Conflict: {r["path"]} already exists ({same}), {r["filename"]} was left in place.')
    for r in archive['errors']:
        _log(f'[WARN] {r["error"]}')
    if archive['ok'] and archive['eligible'] == 0:
        _log('No reports to archive.')
    elif archive['ok']:
        _log(f'Archived {len(archive["archived"])} of {archive["eligible"]} report(s).')

    today = summary['today']
    if not today['ok']:
        _log(f'[ERROR] {today["error"]} ({today.get("path", "")})')
    elif today['status'] == 'exists':
        _log("Today's work report already exists.")
    else:
        _log(f'    Created: {today["path"]}')


def print_reports(working_dir: Path, today: date) -> None:
    reports = list_reports(working_dir, today)
    if not reports:
        print(f'No reports in {working_dir}')
        return
    print(f'Reports in {working_dir}:')
    for r in reports:
        print(f'  {r["date"]} | {r["status"]:8} | {r["modified"]} | {r["path"]}')


def main(args: list[str] | None = None) -> int:
    if args is None:
        args = sys.argv[1:]
    working_dir = _working_dir()
    today = date.today()

    if len(args) == 1 and args[0] == 'list':
        print_reports(working_dir, today)
        return 0
    if len(args) == 1:
        today = parse_date_arg(args[0])
        if today is None:
            print(f'エラー: 日付の形式が正しくありません（例: 2020-08-28）: {args[0]}')
            return 1
    elif len(args) > 1:
        print('使い方: python3 create_daily_report.py [YYYY-MM-DD | list]')
        return 1

    summary = run(working_dir, today)
    print_summary(summary)
    return 0 if summary['ok'] else 1


if __name__ == '__main__':
    sys.exit(main())
