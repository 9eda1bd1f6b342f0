import pytest

import tephra
from tephra import ClientRegistry, Options
from tephra.settings import SETTINGS_KEY, Settings
from tests.test_registry import CountingFactory


@pytest.fixture
def factory():
    return CountingFactory()


@pytest.fixture
def api(factory):
    return tephra.Tephra(registry=ClientRegistry(client_factory=factory))


def test_configure_supplies_defaults(api, factory):
    api.configure(url="redis://configured:6379/1", dial_timeout=3)
    api.get_client()
    endpoint, options, _ = factory.calls[0]
    assert endpoint.host_port == "configured:6379"
    assert endpoint.db == 1
    assert options.dial_timeout == 3


def test_keyword_arguments_win(api, factory):
    api.configure(url="redis://configured:6379/1")
    api.get_client(url="redis://explicit:6379/2")
    endpoint, _, _ = factory.calls[0]
    assert endpoint.host_port == "explicit:6379"


def test_environment_fallback(api, factory, monkeypatch):
    monkeypatch.setenv("REDIS_URL", "rediss://from-env:6380/4")
    monkeypatch.setenv("REDIS_CA_FILE", "")
    api.get_client()
    assert Settings.settings[SETTINGS_KEY]
    endpoint, options, _ = factory.calls[0]
    assert endpoint.host_port == "from-env:6380"
    assert endpoint.use_tls
    assert options.ca_file is None


def test_configured_values_beat_the_environment(api, factory, monkeypatch):
    monkeypatch.setenv("REDIS_URL", "redis://from-env:6379")
    api.configure(url="redis://configured:6379")
    api.get_client()
    endpoint, _, _ = factory.calls[0]
    assert endpoint.host_port == "configured:6379"


def test_unconfigured_without_url(api, monkeypatch):
    monkeypatch.delenv("REDIS_URL", raising=False)
    with pytest.raises(ValueError):
        api.get_client()


def test_options_and_kwargs_are_exclusive(api):
    with pytest.raises(ValueError):
        api.get_client(Options(url="redis://host"), pool_size=4)


def test_options_object(api, factory):
    options = Options(url="redis://host:6379", pool_size=4)
    api.get_client(options)
    _, defaulted, _ = factory.calls[0]
    assert defaulted.pool_size == 4


def test_reset():
    Settings().configure(url="redis://host")
    Settings().reset()
    assert Settings().defaults() == {}
    assert not Settings.settings[SETTINGS_KEY]
