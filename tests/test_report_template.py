from __future__ import annotations

from pathlib import Path

import pytest

import report_template


def test_generates_template_when_missing(tmp_path: Path):
    result = report_template.ensure_template(tmp_path)

    path = tmp_path / 'Template.txt'
    assert result == {'ok': True, 'path': str(path), 'created': True}
    assert path.read_text(encoding='utf-8') == report_template.default_template_content()
    assert "<Today's task>" in path.read_text(encoding='utf-8')


def test_existing_template_is_left_alone(tmp_path: Path):
    path = tmp_path / 'Template.txt'
    path.write_bytes(b'my own template\r\n')

    result = report_template.ensure_template(tmp_path)

    assert result['ok'] and not result['created']
    assert path.read_bytes() == b'my own template\r\n'


def test_second_call_does_not_write(tmp_path: Path):
    report_template.ensure_template(tmp_path)
    path = tmp_path / 'Template.txt'
    path.write_text('edited', encoding='utf-8')

    result = report_template.ensure_template(tmp_path)

    assert result['created'] is False
    assert path.read_text(encoding='utf-8') == 'edited'


def test_missing_directory_is_reported(tmp_path: Path):
    result = report_template.ensure_template(tmp_path / 'does-not-exist')

    assert result['ok'] is False
    assert result['error_kind'] == 'directory_unwritable'
    assert result['path'].endswith('Template.txt')


def test_generated_template_is_synced(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    synced = []
    monkeypatch.setattr(report_template.os, 'fsync', synced.append)

    report_template.ensure_template(tmp_path)

    assert len(synced) == 1
