"""Test configuration loading"""

from pathlib import Path

import pytest

from promo_site.core.config import DEFAULT_STATIC_DOCUMENTS, load_config
from promo_site.core.exceptions import ConfigError


def write_config(directory: Path, text: str) -> Path:
    path = directory / "config.yaml"
    path.write_text(text, encoding="utf-8")
    return path


class TestLoadConfig:
    """Test load_config parsing and defaults"""

    def test_minimal_config(self, tmp_path):
        config = load_config(write_config(tmp_path, "site:\n  content_root: https://example.com/content/\n"))

        assert config.site.content_root == "https://example.com/content"
        assert config.site.initial_section == "home"
        assert config.site.skeleton is None
        assert config.content.index_path == "albums/index.json"
        assert config.content.static_documents == DEFAULT_STATIC_DOCUMENTS
        assert config.fetch.threads == 4
        assert config.fetch.timeout == 15.0
        assert config.logging.directory is None

    def test_full_config(self, tmp_path):
        skeleton = tmp_path / "page.html"
        skeleton.write_text("<html><body></body></html>", encoding="utf-8")
        path = write_config(tmp_path, f"""
site:
  content_root: ./content
  skeleton: {skeleton}
  initial_section: music
content:
  albums_dir: /discography/
  static_documents:
    home: start
fetch:
  timeout: 5
  threads: 8
  user_agent: tests/1.0
logging:
  directory: {tmp_path / "logs"}
""")
        config = load_config(path)

        assert Path(config.site.content_root).is_absolute()
        assert config.site.skeleton == skeleton.resolve()
        assert config.site.initial_section == "music"
        assert config.content.albums_dir == "discography"
        assert config.content.static_documents == {"home": "start"}
        assert config.fetch.timeout == 5.0
        assert config.fetch.threads == 8
        assert config.fetch.user_agent == "tests/1.0"
        assert config.logging.directory == (tmp_path / "logs").resolve()

    def test_config_is_frozen(self, tmp_path):
        config = load_config(write_config(tmp_path, "site:\n  content_root: ./content\n"))
        with pytest.raises(AttributeError):
            config.site = None

    def test_missing_explicit_file(self, tmp_path):
        with pytest.raises(ConfigError) as exc_info:
            load_config(tmp_path / "nope.yaml")
        assert "not found" in exc_info.value.message

    def test_missing_default_file(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        with pytest.raises(ConfigError):
            load_config()

    def test_content_root_without_file(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        config = load_config(content_root="https://example.com/content")
        assert config.site.content_root == "https://example.com/content"

    def test_content_root_overrides_file(self, tmp_path):
        path = write_config(tmp_path, "site:\n  content_root: ./content\n  initial_section: news\n")
        config = load_config(path, content_root="https://cdn.example.com")
        assert config.site.content_root == "https://cdn.example.com"
        assert config.site.initial_section == "news"

    def test_invalid_yaml(self, tmp_path):
        with pytest.raises(ConfigError):
            load_config(write_config(tmp_path, "site: [unclosed"))

    @pytest.mark.parametrize("text", [
        "fetch:\n  threads: 2\n",
        "site: just-a-string\n",
        "site:\n  content_root: ''\n",
        "site:\n  content_root: ./c\nfetch:\n  threads: 0\n",
        "site:\n  content_root: ./c\nfetch:\n  threads: true\n",
        "site:\n  content_root: ./c\nfetch:\n  timeout: -1\n",
        "site:\n  content_root: ./c\ncontent:\n  static_documents: [home]\n",
        "site:\n  content_root: ./c\n  skeleton: /does/not/exist.html\n",
        "- a\n- b\n",
    ])
    def test_invalid_values(self, tmp_path, text):
        with pytest.raises(ConfigError):
            load_config(write_config(tmp_path, text))
