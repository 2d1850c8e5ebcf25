import pytest

from chat_previews.config import Prefetch, load_raw_config


def test_defaults(monkeypatch):
    for var in ("PREFETCH", "PREFETCH_STORAGE", "PREFETCH_TIMEOUT", "PREFETCH_MAX_IMAGE_KB"):
        monkeypatch.delenv(var, raising=False)

    cfg = Prefetch()
    assert cfg.ENABLED is True
    assert cfg.STORAGE is False
    assert cfg.TIMEOUT == 5.0
    assert cfg.MAX_REDIRECTS == 5
    assert cfg.MAX_IMAGE_BYTES == 2048 * 1024
    assert cfg.MAX_DOCUMENT_BYTES == 512 * 1024


def test_environment_fallback(monkeypatch):
    monkeypatch.setenv("PREFETCH_STORAGE", "yes")
    monkeypatch.setenv("PREFETCH_TIMEOUT", "1.5")
    monkeypatch.setenv("PREFETCH_CONCURRENCY", "2")

    cfg = Prefetch()
    assert cfg.STORAGE is True
    assert cfg.TIMEOUT == 1.5
    assert cfg.CONCURRENCY == 2


def test_file_values_beat_environment(monkeypatch):
    monkeypatch.setenv("PREFETCH_TIMEOUT", "9")
    assert Prefetch.from_values(timeout=3).TIMEOUT == 3.0


@pytest.mark.parametrize(
    "values",
    [{"timeout": 0}, {"concurrency": -1}, {"max_redirects": -1}, {"enabled": "maybe"}],
)
def test_invalid_values_raise(values):
    with pytest.raises(ValueError):
        Prefetch.from_values(**values)


def test_load_raw_config(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text(
        "[chat_previews.prefetch]\nstorage = true\nmax_links = 3\n", encoding="utf-8"
    )

    cfg = Prefetch(load_raw_config(path))
    assert cfg.STORAGE is True
    assert cfg.MAX_LINKS == 3


def test_load_raw_config_missing_file(tmp_path):
    assert load_raw_config(tmp_path / "nope.toml") == {}


def test_links_are_uncapped_by_default(monkeypatch):
    monkeypatch.delenv("PREFETCH_MAX_LINKS", raising=False)
    assert Prefetch().MAX_LINKS == 0


def test_load_raw_config_env_override(tmp_path, monkeypatch):
    path = tmp_path / "elsewhere.toml"
    path.write_text("[chat_previews.prefetch]\ntimeout = 7\n", encoding="utf-8")
    monkeypatch.setenv("CHAT_PREVIEWS_CONFIG", str(path))

    assert Prefetch(load_raw_config()).TIMEOUT == 7.0


@pytest.mark.parametrize(
    "body",
    ["chat_previews = 1\n", "[chat_previews]\nprefetch = \"fast\"\n"],
)
def test_load_raw_config_rejects_non_table_sections(tmp_path, body):
    path = tmp_path / "config.toml"
    path.write_text(body, encoding="utf-8")

    with pytest.raises(ValueError, match="must be a table"):
        load_raw_config(path)
