from types import SimpleNamespace

import pytest

from barista_log import Bean, Brewer, EntityStore, Grinder, Preferences


@pytest.fixture
def store():
    return EntityStore("sqlite://")


@pytest.fixture
def preferences(tmp_path):
    return Preferences(tmp_path / "preferences.json")


@pytest.fixture
def gear(store):
    """One bean, grinder and brewer already saved in ``store``."""
    return SimpleNamespace(
        bean=store.create(Bean(name="Ethiopia Guji", roaster="Onyx")),
        grinder=store.create(Grinder(name="Niche Zero", burr_type="conical")),
        brewer=store.create(Brewer(name="Linea Mini", brew_type="espresso")),
    )
