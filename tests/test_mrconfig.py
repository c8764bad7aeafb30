"""
Tests for the legacy ~/.mrconfig importer.
"""

import pytest

from mgrepos.exit_codes import CONFIG_ERROR, ConfigError
from mgrepos.mrconfig import (
    LegacyDocument,
    LegacyRepo,
    MrConfigSyntaxError,
    extract_clone_url,
    get_mrconfig_path,
    load_mrconfig,
    parse_mrconfig,
)


HOME = "/home/alice"

SAMPLE = """\
[DEFAULT]
unregister = mr -c ~/.mrconfig unregister
git_gc = git gc "$@"

[src/mine]
checkout = git clone 'git@host:me/mine.git' 'mine'

[/opt/theirs]
checkout = git clone 'https://example.com/theirs.git' 'theirs'
"""


class TestParse:
    """Tests for parse_mrconfig."""

    def test_sample_document(self):
        doc = parse_mrconfig(SAMPLE, home=HOME)

        assert doc.get_repo_paths() == ["/home/alice/src/mine", "/opt/theirs"]
        assert doc.repos[0].checkout == "git clone 'git@host:me/mine.git' 'mine'"
        assert doc.aliases == {
            "unregister": "mr -c ~/.mrconfig unregister",
            "gc": 'git gc "$@"',
        }

    def test_comments_and_blank_lines_ignored(self):
        text = "# header\n\n   \n[a]\n# inner\ncheckout = x\n"
        doc = parse_mrconfig(text, home=HOME)
        assert doc.repos == [LegacyRepo(path="/home/alice/a", checkout="x")]

    def test_two_blocks(self):
        text = (
            "[foo]\n"
            "checkout = git clone 'https://a/foo.git' 'foo'\n"
            "[bar]\n"
            "checkout = git clone 'https://a/bar.git' 'bar'\n"
        )
        doc = parse_mrconfig(text, home=HOME)
        assert doc.get_repo_paths() == ["/home/alice/foo", "/home/alice/bar"]

    def test_relative_path_normalized(self):
        doc = parse_mrconfig("[src/./x/../y]\n", home=HOME)
        assert doc.get_repo_paths() == ["/home/alice/src/y"]

    def test_section_without_checkout(self):
        doc = parse_mrconfig("[a]\n", home=HOME)
        assert doc.repos == [LegacyRepo(path="/home/alice/a", checkout="")]

    def test_empty_text(self):
        doc = parse_mrconfig("", home=HOME)
        assert doc == LegacyDocument()

    def test_default_section_can_return(self):
        text = "[a]\ncheckout = x\n[DEFAULT]\ngit_gc = git gc\n"
        doc = parse_mrconfig(text, home=HOME)
        assert doc.aliases == {"gc": "git gc"}
        assert len(doc.repos) == 1

    def test_unknown_key_in_repo_section(self):
        with pytest.raises(MrConfigSyntaxError) as exc_info:
            parse_mrconfig("[x]\nfoo = bar\n", home=HOME)

        assert exc_info.value.lineno == 1
        assert exc_info.value.line == "foo = bar"
        assert str(exc_info.value) == "unexpected argument on line 1: foo = bar"

    def test_unknown_key_in_default(self):
        with pytest.raises(MrConfigSyntaxError) as exc_info:
            parse_mrconfig("[DEFAULT]\nlib = true\n", home=HOME)
        assert exc_info.value.lineno == 1

    def test_key_before_any_section_is_default(self):
        with pytest.raises(MrConfigSyntaxError) as exc_info:
            parse_mrconfig("checkout = x\n", home=HOME)
        assert exc_info.value.lineno == 0

    def test_line_without_separator(self):
        with pytest.raises(MrConfigSyntaxError) as exc_info:
            parse_mrconfig("[a]\n\ncheckout=x\n", home=HOME)
        assert exc_info.value.lineno == 2

    def test_first_error_wins(self):
        with pytest.raises(MrConfigSyntaxError) as exc_info:
            parse_mrconfig("[a]\nbad = 1\nworse\n", home=HOME)
        assert exc_info.value.lineno == 1

    def test_syntax_error_is_config_error(self):
        with pytest.raises(ConfigError) as exc_info:
            parse_mrconfig("nonsense\n", home=HOME)
        assert exc_info.value.exit_code == CONFIG_ERROR


class TestConversion:
    """Tests for turning a legacy document into a Registry."""

    def test_extract_clone_url(self):
        assert extract_clone_url("git clone 'git@host:me/x.git' 'x'") == "git@host:me/x.git"

    def test_extract_clone_url_other_command(self):
        assert extract_clone_url("svn co http://x") == "svn co http://x"

    def test_to_registry(self):
        registry = parse_mrconfig(SAMPLE, home=HOME).to_registry()

        assert registry.get_repo_paths() == ["/home/alice/src/mine", "/opt/theirs"]
        assert registry.get_repo("/opt/theirs").remote == "https://example.com/theirs.git"
        assert registry.aliases["gc"] == 'git gc "$@"'

    def test_two_blocks_keep_opaque_checkout(self):
        text = (
            "[proj1]\n"
            "checkout = git clone 'git@host:u/proj1.git' 'proj1'\n"
            "[proj2]\n"
            "checkout = custom-command\n"
        )
        registry = parse_mrconfig(text, home=HOME).to_registry()

        assert [repo.remote for repo in registry] == ["git@host:u/proj1.git", "custom-command"]

    def test_to_registry_skips_repeated_section(self):
        doc = parse_mrconfig("[a]\ncheckout = one\n[a]\ncheckout = two\n", home=HOME)

        registry = doc.to_registry()

        assert registry.get_repo_paths() == ["/home/alice/a"]
        assert registry.get_repo("/home/alice/a").remote == "one"


class TestLoad:
    """Tests for reading ~/.mrconfig from disk."""

    def test_path(self, tmp_path):
        assert get_mrconfig_path(tmp_path) == tmp_path / ".mrconfig"

    def test_load(self, tmp_path):
        (tmp_path / ".mrconfig").write_text("[src/a]\ncheckout = git clone 'u' 'a'\n")

        doc = load_mrconfig(tmp_path)

        assert doc.get_repo_paths() == [str(tmp_path / "src" / "a")]

    def test_load_uses_home_environment(self, tmp_path, monkeypatch):
        monkeypatch.setenv("HOME", str(tmp_path))
        (tmp_path / ".mrconfig").write_text("[a]\n")

        assert load_mrconfig().get_repo_paths() == [str(tmp_path / "a")]

    def test_load_missing(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_mrconfig(tmp_path)

    def test_load_directory(self, tmp_path):
        (tmp_path / ".mrconfig").mkdir()
        with pytest.raises(ConfigError, match="directory"):
            load_mrconfig(tmp_path)
