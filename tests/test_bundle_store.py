"""Session bundle hand-off store."""

from __future__ import annotations

import json

import pytest

from conftest import make_phases, make_urls
from sentient.playback.bundle import (
    ENTRY_ID_KEY,
    MEDITATION_KEY,
    TTS_URLS_KEY,
    InMemoryBundleStore,
)


def test_put_then_get_returns_the_same_bundle():
    store = InMemoryBundleStore()
    bundle = store.put("entry-1", make_phases(), make_urls())

    assert store.get() == bundle
    assert json.loads(store.get_item(TTS_URLS_KEY)) == make_urls()
    assert store.get_item(ENTRY_ID_KEY) == "entry-1"


def test_put_rejects_partial_bundles():
    store = InMemoryBundleStore()

    with pytest.raises(ValueError):
        store.put("entry-1", make_phases(), make_urls(count=5))
    with pytest.raises(ValueError):
        store.put("entry-1", make_phases()[:5], make_urls(count=5))
    assert store.get() is None


@pytest.mark.parametrize(
    "key, value",
    [
        (MEDITATION_KEY, "{not json"),
        (MEDITATION_KEY, json.dumps([{"phase": "only one", "text": "hi"}])),
        (TTS_URLS_KEY, json.dumps({"urls": []})),
        (TTS_URLS_KEY, json.dumps(["https://a", 3, "https://c", "d", "e", "f"])),
        (TTS_URLS_KEY, json.dumps(make_urls(count=4))),
    ],
)
def test_malformed_contents_read_as_missing(key, value):
    store = InMemoryBundleStore()
    store.put("entry-1", make_phases(), make_urls())
    store.set_item(key, value)

    assert store.get() is None


def test_script_stays_readable_when_urls_are_broken():
    store = InMemoryBundleStore()
    store.put("entry-1", make_phases(), make_urls())
    store.set_item(TTS_URLS_KEY, "oops")

    assert len(store.read_script("entry-1")) == 6
    assert store.read_script("entry-2") is None


def test_clear_empties_the_slot():
    store = InMemoryBundleStore()
    store.put("entry-1", make_phases(), make_urls())
    store.clear()

    assert store.get() is None
    assert store.read_script("entry-1") is None


@pytest.mark.parametrize("stored", ["abc", "45", 0, None, True])
def test_stored_durations_follow_the_phase_duration_rule(stored):
    store = InMemoryBundleStore()
    store.put("entry-1", make_phases((45, 20, 30, 30, 30, 30)), make_urls())
    phases = json.loads(store.get_item(MEDITATION_KEY))
    phases[0]["theme"]["duration"] = stored
    store.set_item(MEDITATION_KEY, json.dumps(phases))

    bundle = store.get()

    assert bundle is not None
    assert bundle.phases[0].theme.duration == 30
    assert bundle.phases[1].theme.duration == 20
