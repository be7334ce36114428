from restyle_device.nvs_store import NvsState, NvsStore


def test_defaults_returned_when_empty():
    s = NvsStore().load()
    assert s.style_idx == 0
    assert s.volume_x10 == 6
    assert s.style_id == "jesus"


def test_save_and_reload_round_trip():
    store = NvsStore()
    assert store.save(NvsState(style_idx=3, style_id="pirate", volume_x10=8))
    got = store.load()
    assert got.style_idx == 3
    assert got.style_id == "pirate"
    assert got.volume_x10 == 8


def test_rate_limit_suppresses_rapid_writes():
    store = NvsStore()
    store.set_clock(lambda: 1000)
    s = NvsState(style_id="a", volume_x10=5)
    assert store.save(s) is True
    s.volume_x10 = 6
    assert store.save(s) is False
    assert store.load().volume_x10 == 5
    store.set_clock(lambda: 2100)
    assert store.save(s) is True
    assert store.load().volume_x10 == 6


def test_rate_limit_expires_with_time():
    now = {"ms": 5000}
    store = NvsStore(clock=lambda: now["ms"])
    assert store.save(NvsState(volume_x10=1))
    now["ms"] = 5999
    assert store.save(NvsState(volume_x10=2)) is False
    now["ms"] = 6000
    assert store.save(NvsState(volume_x10=3)) is True
    assert store.load().volume_x10 == 3


def test_shared_backend_persists_between_stores():
    backend = {}
    NvsStore(backend).save(NvsState(style_idx=2, style_id="pirate", volume_x10=9))
    assert NvsStore(backend).load() == NvsState(style_idx=2, style_id="pirate", volume_x10=9)


def test_style_id_limited_to_32_chars():
    store = NvsStore()
    store.save(NvsState(style_id="x" * 40))
    assert store.load().style_id == "x" * 32