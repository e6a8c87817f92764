import pytest

from flappy.assets import ASSETS, OFFLINE_FALLBACK, AssetCache, AssetUnavailable
from flappy.config import CACHE_VERSION


class FakeNetwork:
    def __init__(self, files: dict[str, bytes]) -> None:
        self.files = dict(files)
        self.calls: list[str] = []
        self.online = True

    def __call__(self, name: str) -> bytes:
        self.calls.append(name)
        if not self.online or name not in self.files:
            raise OSError(f"cannot reach {name}")
        return self.files[name]


@pytest.fixture(autouse=True)
def no_asset_url(monkeypatch) -> None:
    monkeypatch.delenv("FLAPPY_ASSET_URL", raising=False)


@pytest.fixture
def network() -> FakeNetwork:
    return FakeNetwork({name: name.encode() for name in ASSETS})


def test_install_stores_every_asset(tmp_path, network) -> None:
    cache = AssetCache(tmp_path, network)
    cache.install()
    for name in ASSETS:
        assert (tmp_path / CACHE_VERSION / name).read_bytes() == name.encode()


def test_install_is_all_or_nothing(tmp_path, network) -> None:
    del network.files[ASSETS[-1]]
    cache = AssetCache(tmp_path, network)
    with pytest.raises(AssetUnavailable):
        cache.install()
    assert not cache.directory.exists()


def test_install_without_network_source(tmp_path) -> None:
    with pytest.raises(AssetUnavailable):
        AssetCache(tmp_path).install()


def test_fetch_prefers_cache(tmp_path, network) -> None:
    cache = AssetCache(tmp_path, network)
    cache.install()
    network.calls.clear()
    assert cache.fetch(ASSETS[0]) == ASSETS[0].encode()
    assert network.calls == []


def test_fetch_miss_repopulates_cache(tmp_path, network) -> None:
    cache = AssetCache(tmp_path, network)
    assert cache.fetch("icon-512.png") == b"icon-512.png"
    network.online = False
    assert cache.fetch("icon-512.png") == b"icon-512.png"
    assert network.calls == ["icon-512.png"]


def test_fetch_falls_back_to_offline_asset(tmp_path, network) -> None:
    cache = AssetCache(tmp_path, network)
    cache.fetch(OFFLINE_FALLBACK)
    network.online = False
    assert cache.fetch("icon-192.png") == OFFLINE_FALLBACK.encode()


def test_fetch_fails_when_nothing_available(tmp_path, network) -> None:
    network.online = False
    with pytest.raises(AssetUnavailable):
        AssetCache(tmp_path, network).fetch("icon-192.png")


def test_activate_drops_other_versions(tmp_path, network) -> None:
    (tmp_path / "flappy-assets-v1").mkdir()
    (tmp_path / "flappy-assets-v1" / "old.png").write_bytes(b"x")
    cache = AssetCache(tmp_path, network)
    cache.install()
    assert cache.activate() == ["flappy-assets-v1"]
    assert [p.name for p in tmp_path.iterdir()] == [CACHE_VERSION]


def test_activate_without_cache_root(tmp_path) -> None:
    assert AssetCache(tmp_path / "missing").activate() == []


def test_install_rolls_back_when_a_write_fails(tmp_path, network) -> None:
    cache = AssetCache(tmp_path, network)
    # a directory squatting on the last asset's file name makes its write fail
    (cache.directory / ASSETS[-1]).mkdir(parents=True)
    with pytest.raises(AssetUnavailable):
        cache.install()
    for name in ASSETS[:-1]:
        assert not (cache.directory / name).exists()


def test_install_keeps_previously_cached_files_on_failure(tmp_path, network) -> None:
    cache = AssetCache(tmp_path, network)
    cache.fetch(ASSETS[0])
    (cache.directory / ASSETS[-1]).mkdir()
    with pytest.raises(AssetUnavailable):
        cache.install()
    assert (cache.directory / ASSETS[0]).read_bytes() == ASSETS[0].encode()
