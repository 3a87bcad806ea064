from __future__ import annotations


def test_defaults(monkeypatch):
    from gostubber import config

    for name in ("GOSTUBBER_GO", "GOSTUBBER_FORMATTER", "GOSTUBBER_BUILD_TAG"):
        monkeypatch.delenv(name, raising=False)
    assert config.go_binary() == "go"
    assert config.default_formatter_name() == "gofmt"
    assert config.default_build_tag() == "nostubs"


def test_build_tag_env(monkeypatch):
    from gostubber import config
    from gostubber.generate import GenerateOptions

    monkeypatch.setenv("GOSTUBBER_BUILD_TAG", " fakes ")
    assert config.default_build_tag() == "fakes"
    assert GenerateOptions().build_tag == "fakes"

    monkeypatch.setenv("GOSTUBBER_BUILD_TAG", "")
    assert config.default_build_tag() is None
