from pathlib import Path

from adaptscrape.utils.files import (
    get_debug_html_path,
    get_logs_path,
    get_project_root,
    get_state_dir,
    init_state_dir,
)


def test_get_project_root(monkeypatch, tmp_path):
    # Create a dummy project structure
    project_root = tmp_path / 'project'
    project_root.mkdir()
    (project_root / 'pyproject.toml').touch()

    sub_dir = project_root / 'src' / 'deep' / 'dir'
    sub_dir.mkdir(parents=True)

    monkeypatch.setattr(Path, 'cwd', lambda: sub_dir)

    assert get_project_root() == project_root


def test_get_project_root_finds_state_dir(monkeypatch, tmp_path):
    (tmp_path / '.adaptscrape').mkdir()
    nested = tmp_path / 'notebooks'
    nested.mkdir()
    monkeypatch.setattr(Path, 'cwd', lambda: nested)

    assert get_project_root() == tmp_path


def test_get_project_root_default(monkeypatch, tmp_path):
    # Falls back to CWD if no markers found
    monkeypatch.setattr(Path, 'cwd', lambda: tmp_path)

    assert get_project_root() == tmp_path


def test_state_paths(monkeypatch, tmp_path):
    monkeypatch.setattr('adaptscrape.utils.files.get_project_root', lambda: tmp_path)

    assert get_state_dir() == tmp_path / '.adaptscrape'
    assert get_logs_path() == tmp_path / '.adaptscrape' / 'logs'
    assert get_debug_html_path() == tmp_path / '.adaptscrape' / 'debug_html'


def test_init_state_dir(monkeypatch, tmp_path):
    project_root = tmp_path / 'project'
    project_root.mkdir()
    monkeypatch.setattr('adaptscrape.utils.files.get_project_root', lambda: project_root)

    state_dir = init_state_dir()

    assert state_dir == project_root / '.adaptscrape'
    assert (state_dir / 'logs').is_dir()
    assert (state_dir / 'debug_html').is_dir()
    assert (state_dir / '.gitignore').read_text() == '# Automatically created by adaptscrape\n*\n'


def test_init_state_dir_keeps_existing_gitignore(monkeypatch, tmp_path):
    monkeypatch.setattr('adaptscrape.utils.files.get_project_root', lambda: tmp_path)
    state_dir = tmp_path / '.adaptscrape'
    state_dir.mkdir()
    (state_dir / '.gitignore').write_text('custom\n')

    init_state_dir()

    assert (state_dir / '.gitignore').read_text() == 'custom\n'
