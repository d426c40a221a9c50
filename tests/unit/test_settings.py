from magic_code.config import load_config
from magic_code.settings import Settings, get_settings


def test_get_settings_is_cached():
    get_settings.cache_clear()
    s1 = get_settings()
    s2 = get_settings()
    assert s1 is s2  # lru_cache returns the same instance


def test_env_overrides_and_cache_clear(monkeypatch):
    monkeypatch.setenv("CODE_LENGTH", "8")
    get_settings.cache_clear()
    s = get_settings()
    assert s.code_length == 8

    monkeypatch.delenv("CODE_LENGTH", raising=False)
    get_settings.cache_clear()
    s2 = get_settings()
    assert s2.code_length != 8  # back to default or another env value


def test_magic_code_args_build_a_valid_config():
    settings = Settings(magic_code_secret="0123456789abcdef", code_length=5)
    cfg = load_config(settings.magic_code_args())
    assert cfg.code_length == 5
    assert cfg.user_key_field_name == settings.user_key_field_name
