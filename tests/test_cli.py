"""
CLI tests for the mg command.

Each test gets a fake home directory with MGCONFIG pointing inside it;
git is mocked wherever a command would run it.
"""

import json

import pytest
from click.testing import CliRunner
from unittest.mock import MagicMock, patch

from mgrepos.cli import cli
from mgrepos.infra.git_client import GitClient, GitError, GitRepository, NotARepositoryError, PullResult
from mgrepos.services.sync_service import SyncService


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def home(tmp_path, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setenv("MGCONFIG", str(tmp_path / "mgconfig"))
    monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
    return tmp_path


def write_config(home, paths):
    data = {
        'Repos': [{'Path': p, 'Remote': f"https://example.com/{i}.git"} for i, p in enumerate(paths)],
        'Aliases': {},
    }
    (home / "mgconfig").write_text(json.dumps(data))


def read_config(home):
    return json.loads((home / "mgconfig").read_text())


@pytest.fixture
def fake_sync(home):
    """Patch the sync command to use a git mock: r0/r1 exist, r4 cannot be cloned."""
    existing = {str(home / "r0"), str(home / "r1")}
    git = MagicMock(spec=GitClient)

    def open_repo(path, search_parent=False):
        if path not in existing:
            raise NotARepositoryError("missing", path)
        return GitRepository(path=path, git_dir=path + "/.git")

    def clone(url, path):
        if path.endswith("r4"):
            raise GitError("fatal: repository not found", path)

    git.open.side_effect = open_repo
    git.clone.side_effect = clone
    git.worktree.side_effect = lambda repo: repo.path
    git.pull.return_value = PullResult.UP_TO_DATE

    write_config(home, [str(home / f"r{i}") for i in range(5)])
    with patch('mgrepos.commands.sync.SyncService', side_effect=lambda: SyncService(git_client=git)):
        yield git


class TestTopLevel:

    def test_help_lists_commands(self, runner):
        result = runner.invoke(cli, ['--help'])
        assert result.exit_code == 0
        for name in ('register', 'unregister', 'import', 'list', 'clone', 'pull'):
            assert name in result.output

    def test_version(self, runner):
        result = runner.invoke(cli, ['--version'])
        assert result.exit_code == 0
        assert "version" in result.output


class TestList:

    def test_list(self, runner, home):
        write_config(home, ["$HOME/src/a", "/opt/b"])

        result = runner.invoke(cli, ['list'])

        assert result.exit_code == 0
        assert result.output.splitlines() == [str(home / "src" / "a"), "/opt/b"]

    def test_list_json(self, runner, home):
        write_config(home, ["/opt/b"])

        result = runner.invoke(cli, ['list', '--json'])

        assert json.loads(result.output) == {'path': '/opt/b', 'remote': 'https://example.com/0.git'}

    def test_list_legacy(self, runner, home):
        (home / ".mrconfig").write_text("[src/x]\ncheckout = git clone 'u' 'x'\n")

        result = runner.invoke(cli, ['list', '--legacy'])

        assert result.exit_code == 0
        assert result.output.strip() == str(home / "src" / "x")
        assert not (home / "mgconfig").exists()

    def test_list_migrates(self, runner, home):
        (home / ".mrconfig").write_text("[src/x]\ncheckout = git clone 'u' 'x'\n")

        result = runner.invoke(cli, ['list'])

        assert result.exit_code == 0
        assert read_config(home)['Repos'] == [{'Path': '$HOME/src/x', 'Remote': 'u'}]

    def test_list_without_any_config(self, runner, home):
        result = runner.invoke(cli, ['list'])
        assert result.exit_code == 66
        assert "Error:" in result.output

    def test_list_legacy_syntax_error(self, runner, home):
        (home / ".mrconfig").write_text("[x]\nfoo = bar\n")

        result = runner.invoke(cli, ['list', '--legacy'])

        assert result.exit_code == 66
        assert "unexpected argument on line 1: foo = bar" in result.output


class TestRegister:

    @pytest.fixture
    def git(self):
        client = MagicMock(spec=GitClient)
        client.open.return_value = GitRepository(path="/src/tool", git_dir="/src/tool/.git")
        client.first_remote_url.return_value = "git@host:me/tool.git"
        with patch('mgrepos.services.registry_service.GitClient', return_value=client):
            yield client

    def test_register(self, runner, home, git):
        write_config(home, [])

        result = runner.invoke(cli, ['register', '/src/tool'])

        assert result.exit_code == 0
        assert "registered /src/tool (git@host:me/tool.git)" in result.output
        assert read_config(home)['Repos'] == [{'Path': '/src/tool', 'Remote': 'git@host:me/tool.git'}]

    def test_register_twice(self, runner, home, git):
        write_config(home, [])
        runner.invoke(cli, ['register', '/src/tool'])

        result = runner.invoke(cli, ['register', '/src/tool', '--json'])

        assert result.exit_code == 0
        assert json.loads(result.output)['added'] is False
        assert len(read_config(home)['Repos']) == 1

    def test_register_outside_repository(self, runner, home, git):
        write_config(home, [])
        git.open.side_effect = NotARepositoryError("fatal: not a git repository")

        result = runner.invoke(cli, ['register', '/tmp'])

        assert result.exit_code == 1
        assert "not a git repository" in result.output

    def test_unregister(self, runner, home, git):
        write_config(home, ["/src/tool", "/src/other"])

        result = runner.invoke(cli, ['unregister', '/src/tool'])

        assert result.exit_code == 0
        assert "unregistered /src/tool" in result.output
        assert [r['Path'] for r in read_config(home)['Repos']] == ["/src/other"]

    def test_unregister_unknown(self, runner, home, git):
        write_config(home, ["/src/other"])

        result = runner.invoke(cli, ['unregister', '/src/tool'])

        assert result.exit_code == 1
        assert "not registered" in result.output


class TestImport:

    def test_import_file(self, runner, home, tmp_path):
        write_config(home, ["/a"])
        other = tmp_path / "other.json"
        other.write_text(json.dumps({'Repos': [
            {'Path': '/a', 'Remote': 'x'},
            {'Path': '$HOME/b', 'Remote': 'y'},
        ]}))

        result = runner.invoke(cli, ['import', str(other)])

        assert result.exit_code == 0
        assert f"Added repo {home / 'b'}" in result.output
        assert "Added 1 new repos" in result.output
        assert "Skipped 1 duplicate repos" in result.output
        assert [r['Path'] for r in read_config(home)['Repos']] == ["/a", "$HOME/b"]

    def test_import_stdin(self, runner, home):
        write_config(home, [])
        doc = json.dumps({'Repos': [{'Path': '/c', 'Remote': 'z'}]})

        result = runner.invoke(cli, ['import', '-', '--json'], input=doc)

        assert result.exit_code == 0
        assert json.loads(result.output)['new_paths'] == ['/c']

    def test_import_yaml(self, runner, home, tmp_path):
        write_config(home, [])
        other = tmp_path / "other.yaml"
        other.write_text("Repos:\n  - Path: /y\n    Remote: r\n")

        result = runner.invoke(cli, ['import', str(other)])

        assert result.exit_code == 0
        assert read_config(home)['Repos'] == [{'Path': '/y', 'Remote': 'r'}]

    def test_import_twice_adds_nothing(self, runner, home, tmp_path):
        write_config(home, [])
        other = tmp_path / "other.json"
        other.write_text(json.dumps({'Repos': [{'Path': '/c', 'Remote': 'z'}]}))

        runner.invoke(cli, ['import', str(other)])
        result = runner.invoke(cli, ['import', str(other)])

        assert "Added 0 new repos" in result.output
        assert "Skipped 1 duplicate repos" in result.output

    def test_import_bad_document(self, runner, home):
        write_config(home, [])

        result = runner.invoke(cli, ['import', '-'], input='{"Repos": [')

        assert result.exit_code == 66
        assert read_config(home)['Repos'] == []

    def test_import_missing_file(self, runner, home, tmp_path):
        write_config(home, [])
        result = runner.invoke(cli, ['import', str(tmp_path / "nope.json")])
        assert result.exit_code == 66

    def test_import_rejects_paths_equal_after_expansion(self, runner, home, tmp_path):
        write_config(home, [])
        other = tmp_path / "other.json"
        other.write_text(json.dumps({'Repos': [
            {'Path': '$HOME/b', 'Remote': 'y'},
            {'Path': str(home / 'b'), 'Remote': 'y'},
        ]}))

        result = runner.invoke(cli, ['import', str(other)])

        assert result.exit_code == 66
        assert read_config(home)['Repos'] == []


class TestSync:

    def test_clone(self, runner, home, fake_sync):
        result = runner.invoke(cli, ['clone', '-j', '3'])

        assert result.exit_code == 0
        assert "successfully cloned 2/5 repos" in result.output
        assert "2 repos already cloned" in result.output
        assert "failed to clone 1/5 repos" in result.output

    def test_clone_json(self, runner, home, fake_sync):
        result = runner.invoke(cli, ['clone', '--json'])

        records = [json.loads(line) for line in result.output.splitlines()]
        assert len(records) == 6
        summary = records[-1]
        assert summary['type'] == 'summary'
        assert summary['failures'] == [{'path': str(home / "r4"), 'error': 'fatal: repository not found'}]

    def test_clone_pretty(self, runner, home, fake_sync):
        result = runner.invoke(cli, ['clone', '--pretty'])

        assert result.exit_code == 0
        assert "Clone Summary" in result.output

    def test_pull(self, runner, home, fake_sync):
        result = runner.invoke(cli, ['pull', '--jobs', '2'])

        assert result.exit_code == 0
        assert "successfully pulled 0/5 repos" in result.output
        assert "2 repos already up to date" in result.output
        assert "failed to pull 3/5 repos" in result.output
        fake_sync.clone.assert_not_called()

    @pytest.mark.parametrize("jobs", ['0', '-1'])
    def test_bad_jobs(self, runner, home, fake_sync, jobs):
        result = runner.invoke(cli, ['clone', '-j', jobs])

        assert result.exit_code == 66
        assert "jobs must be greater than 0" in result.output
        fake_sync.open.assert_not_called()

    def test_non_integer_jobs(self, runner, home, fake_sync):
        result = runner.invoke(cli, ['pull', '-j', 'many'])
        assert result.exit_code == 2
