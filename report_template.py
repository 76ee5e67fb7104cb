#!/usr/bin/env python3
"""
report_template.py — 日報テンプレート (Template.txt) の自動生成

作業ディレクトリに Template.txt が無ければ既定の内容で生成する。
既に存在する場合は何もしない（何度呼んでも書き込みは最初の1回だけ）。

単体実行:
  python3 report_template.py            # カレントディレクトリに生成
  python3 report_template.py ./reports  # 指定ディレクトリに生成
"""
import os
import sys
from pathlib import Path

TEMPLATE_NAME = 'Template.txt'

# 自動生成される Template.txt の中身
DEFAULT_TEMPLATE = (
    "<Today's task>\n"
    '-\n'
    '-\n'
    '\n'
    '<TODO>\n'
    '-\n'
    '-\n'
    '\n'
)


def default_template_content() -> str:
    return DEFAULT_TEMPLATE


def template_path(working_dir) -> Path:
    return Path(working_dir) / TEMPLATE_NAME


def ensure_template(working_dir) -> dict:
    """
    Template.txt が無ければ生成する。

    戻り値:
      {"ok": True, "path": "...", "created": True}   新規生成した
      {"ok": True, "path": "...", "created": False}  既に存在した（書き込みなし）
      {"ok": False, "path": "...", "error_kind": "directory_unwritable", "error": "..."}
    """
    path = template_path(working_dir)
    if path.is_file():
        return {'ok': True, 'path': str(path), 'created': False}

    try:
        with open(path, 'x', encoding='utf-8', newline='\n') as f:
            f.write(DEFAULT_TEMPLATE)
            f.flush()
            os.fsync(f.fileno())
    except FileExistsError:
        # 判定と生成の間に作られた場合は既存扱い
        return {'ok': True, 'path': str(path), 'created': False}
    except OSError as e:
        return {
            'ok':         False,
            'path':       str(path),
            'error_kind': 'directory_unwritable',
            'error':      f'{TEMPLATE_NAME} を作成できません: {e}',
        }
    return {'ok': True, 'path': str(path), 'created': True}


if __name__ == '__main__':
    target = Path(sys.argv[1]) if len(sys.argv) > 1 else Path.cwd()
    result = ensure_template(target)
    if not result['ok']:
        print(f'[ERROR] {result["error"]}')
        sys.exit(1)
    if result['created']:
        print(f'{TEMPLATE_NAME} was not found, so it is generated automatically.')
        print(f'    Created: {result["path"]}')
    else:
        print(f'{TEMPLATE_NAME} already exists: {result["path"]}')
