#!/usr/bin/env python3
"""
work_report.py — 日報 (YYYYMMDD.txt) の作成・アーカイブライブラリ

作業ディレクトリ直下の日報テキストを管理する。
  - 今日より前の日付の日報を Archive/<YYYY>/<MM>/ に移動する
  - 今日の日報が無ければ Template.txt をコピーして作成する

create_daily_report.py から import して使う。
作業ディレクトリと「今日」の日付は必ず引数で受け取る（時計・カレントディレクトリは読まない）。

単体テスト:
  python3 work_report.py
"""
import hashlib
import re
import shutil
from datetime import date, datetime
from pathlib import Path

from report_template import TEMPLATE_NAME, ensure_template, template_path

# ===== 命名規則 =====
REPORT_EXT       = '.txt'
ARCHIVE_DIR_NAME = 'Archive'
DATE_FORMAT      = '%Y%m%d'

# "YYYYmmdd.txt" のパターンにマッチするファイルのみを日報とみなす
REPORT_NAME_RE = re.compile(r'^(\d{4})(\d{2})(\d{2})' + re.escape(REPORT_EXT) + r'$')


# ===== ファイル名ユーティリティ =====

def parse_report_date(filename: str) -> date | None:
    """ファイル名から日付を取り出す。例: '20200826.txt' → date(2020, 8, 26)

    パターンに合わない、または実在しない日付 (13月など) は None。
    """
    m = REPORT_NAME_RE.match(filename)
    if not m:
        return None
    try:
        return date(int(m.group(1)), int(m.group(2)), int(m.group(3)))
    except ValueError:
        return None


def report_filename(day: date) -> str:
    """date(2020, 8, 26) → '20200826.txt'"""
    return day.strftime(DATE_FORMAT) + REPORT_EXT


def archive_dir_for(filename: str) -> Path | None:
    """アーカイブ先の相対パスを返す。例: '20200826.txt' → Path('Archive/2020/08')"""
    d = parse_report_date(filename)
    if d is None:
        return None
    return Path(ARCHIVE_DIR_NAME) / f'{d.year:04d}' / f'{d.month:02d}'


def _file_digest(path: Path) -> str:
    h = hashlib.md5()
    with open(path, 'rb') as f:
        for chunk in iter(lambda: f.read(65536), b''):
            h.update(chunk)
    return h.hexdigest()


def _same_content(path1: Path, path2: Path) -> bool:
    """ハッシュ値を比較して同じ内容かどうかを判定する"""
    try:
        return _file_digest(path1) == _file_digest(path2)
    except OSError:
        return False


# ===== ファイル一覧 =====

def _report_entry(f: Path, location: str, today: date) -> dict:
    d = parse_report_date(f.name)
    if location == 'archive':
        status = 'archived'
    elif d == today:
        status = 'today'
    elif d < today:
        status = 'pending'
    else:
        status = 'future'
    st = f.stat()
    return {
        'filename': f.name,
        'date':     d.isoformat(),
        'location': location,
        'status':   status,
        'path':     str(f),
        'size':     st.st_size,
        'modified': datetime.fromtimestamp(st.st_mtime).strftime('%Y-%m-%d %H:%M'),
    }


def list_reports(working_dir, today: date) -> list[dict]:
    """作業ディレクトリとアーカイブ内の日報一覧を返す（日付順）"""
    root = Path(working_dir)
    if not root.is_dir():
        return []

    reports = []
    for f in sorted(root.iterdir()):
        if f.is_file() and parse_report_date(f.name):
            reports.append(_report_entry(f, 'working', today))

    archive_root = root / ARCHIVE_DIR_NAME
    if archive_root.is_dir():
        for f in sorted(archive_root.glob(f'*/*/*{REPORT_EXT}')):
            # 年・月のディレクトリがファイル名の日付と一致するものだけ
            if f.is_file() and archive_dir_for(f.name) == f.parent.relative_to(root):
                reports.append(_report_entry(f, 'archive', today))

    reports.sort(key=lambda r: (r['date'], r['location']))
    return reports


# ===== アーカイブ =====

def archive_report(working_dir, src_path) -> dict:
    """
    日報1件を Archive/<YYYY>/<MM>/ に移動する。

    例: ./20200826.txt → ./Archive/2020/08/20200826.txt

    移動先に同名ファイルがある場合は上書きせずスキップする（元ファイルはそのまま）。
    戻り値:
      {"ok": True,  "status": "archived", "filename": "...", "path": "..."}
      {"ok": False, "status": "conflict", "error_kind": "archive_conflict", "identical": bool, ...}
      {"ok": False, "status": "failed",   "error_kind": "archive_failed" | "invalid_date", ...}
    """
    root = Path(working_dir)
    src = Path(src_path)
    if not src.is_absolute() and src.parent == Path('.'):
        src = root / src
    name = src.name

    rel_dir = archive_dir_for(name)
    if rel_dir is None:
        return {
            'ok':         False,
            'status':     'failed',
            'filename':   name,
            'src':        str(src),
            'error_kind': 'invalid_date',
            'error':      f'日報のファイル名ではありません: {name}',
        }

    dst_dir = root / rel_dir
    dst = dst_dir / name
    if dst.exists():
        return {
            'ok':         False,
            'status':     'conflict',
            'filename':   name,
            'src':        str(src),
            'path':       str(dst),
            'error_kind': 'archive_conflict',
            'identical':  _same_content(src, dst),
            'error':      f'アーカイブ先に同名ファイルが既に存在します: {dst}',
        }

    try:
        dst_dir.mkdir(parents=True, exist_ok=True)
        shutil.move(str(src), str(dst))
    except OSError as e:
        return {
            'ok':         False,
            'status':     'failed',
            'filename':   name,
            'src':        str(src),
            'path':       str(dst),
            'error_kind': 'archive_failed',
            'error':      f'{name} をアーカイブできません: {e}',
        }
    return {'ok': True, 'status': 'archived', 'filename': name, 'src': str(src), 'path': str(dst)}


def archive_all(working_dir, today: date) -> dict:
    """
    今日より前の日付の日報をすべてアーカイブする。
    1件の失敗・衝突で中断せず、残りのファイルの処理を続ける。

    戻り値: {"ok": True, "eligible": N, "archived": [...], "conflicts": [...], "errors": [...]}
    """
    root = Path(working_dir)
    try:
        entries = sorted(root.iterdir())
    except OSError as e:
        # 一覧が取れない場合はアーカイブを諦め、今日の日報作成へ進む
        return {
            'ok':        False,
            'eligible':  0,
            'archived':  [],
            'conflicts': [],
            'errors':    [{
                'ok':         False,
                'status':     'failed',
                'path':       str(root),
                'error_kind': 'archive_failed',
                'error':      f'{root} の一覧を取得できません: {e}',
            }],
        }

    targets = []
    for f in entries:
        if not f.is_file():
            continue
        d = parse_report_date(f.name)
        # 今日・未来の日付はアーカイブしない
        if d is None or d >= today:
            continue
        targets.append(f)

    archived, conflicts, errors = [], [], []
    for f in targets:
        result = archive_report(root, f)
        if result['ok']:
            archived.append(result)
        elif result['status'] == 'conflict':
            conflicts.append(result)
        else:
            errors.append(result)

    return {
        'ok':        True,
        'eligible':  len(targets),
        'archived':  archived,
        'conflicts': conflicts,
        'errors':    errors,
    }


# ===== 日報作成 =====

def create_report(working_dir, date_str: str) -> dict:
    """
    指定日 (YYYYMMDD) の日報を Template.txt のコピーとして作成する。
    `cp Template.txt YYYYMMDD.txt` と同等（既存ファイルは上書きしない）。

    戻り値:
      {"ok": True, "status": "created" | "exists", "path": "..."}
      {"ok": False, "error_kind": "invalid_date" | "template_unreadable" | "directory_unwritable", ...}
    """
    root = Path(working_dir)
    filename = f'{date_str}{REPORT_EXT}'
    if parse_report_date(filename) is None:
        return {
            'ok':         False,
            'status':     'failed',
            'error_kind': 'invalid_date',
            'error':      f'日付の形式が正しくありません（例: 20200101）: {date_str}',
        }

    dst = root / filename
    if dst.exists():
        return {'ok': True, 'status': 'exists', 'path': str(dst)}

    src = template_path(root)
    try:
        content = src.read_bytes()
    except OSError as e:
        return {
            'ok':         False,
            'status':     'failed',
            'path':       str(src),
            'error_kind': 'template_unreadable',
            'error':      f'{TEMPLATE_NAME} を読み込めません: {e}',
        }

    try:
        f = open(dst, 'xb')
    except FileExistsError:
        return {'ok': True, 'status': 'exists', 'path': str(dst)}
    except OSError as e:
        return {
            'ok':         False,
            'status':     'failed',
            'path':       str(dst),
            'error_kind': 'directory_unwritable',
            'error':      f'{filename} を作成できません: {e}',
        }

    try:
        with f:
            f.write(content)
    except OSError as e:
        # 書きかけのファイルを残さない（再実行で作り直せるように）
        dst.unlink(missing_ok=True)
        return {
            'ok':         False,
            'status':     'failed',
            'path':       str(dst),
            'error_kind': 'directory_unwritable',
            'error':      f'{filename} を書き込めません: {e}',
        }
    return {'ok': True, 'status': 'created', 'path': str(dst)}


def create_for_today(working_dir, today: date) -> dict:
    return create_report(working_dir, today.strftime(DATE_FORMAT))


# ===== 一括実行 =====

def run(working_dir, today: date) -> dict:
    """
    テンプレート確認 → アーカイブ → 今日の日報作成 の順に実行する。
    テンプレートが用意できない場合はアーカイブ・作成を行わずに終了する。

    戻り値 (RunSummary):
      {"ok": bool, "date": "YYYY-MM-DD", "template": {...}, "archive": {...}, "today": {...}}
    """
    summary = {
        'ok':       False,
        'date':     today.isoformat(),
        'template': None,
        'archive':  None,
        'today':    None,
    }

    template = ensure_template(working_dir)
    summary['template'] = template
    if not template['ok']:
        summary['error'] = template['error']
        return summary

    summary['archive'] = archive_all(working_dir, today)

    result = create_for_today(working_dir, today)
    summary['today'] = result
    summary['ok'] = result['ok']
    if not result['ok']:
        summary['error'] = result['error']
    return summary


# ===== 単体テスト =====

if __name__ == '__main__':
    cwd = Path.cwd()
    today = date.today()
    print(f'=== list_reports ({cwd}) ===')
    for r in list_reports(cwd, today):
        print(f"  {r['date']} | {r['status']:8} | {r['location']:7} | {r['filename']}")
    print(f"\n=== archive_dir_for('{report_filename(today)}') ===")
    print(f'  {archive_dir_for(report_filename(today))}')
