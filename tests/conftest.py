"""Shared fixtures for vault tests."""

import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from yieldvault.engine.asset import InMemoryAsset
from yieldvault.engine.clock import ManualClock
from yieldvault.logging_config import reset_logging
from yieldvault.vault import Vault

OWNER = "owner"
VAULT_ADDRESS = "vault"
START = 1_000


@pytest.fixture
def clock():
    return ManualClock(START)


@pytest.fixture
def asset():
    return InMemoryAsset("USDV")


@pytest.fixture
def vault(asset, clock):
    """Vault with zero growth; tests set a rate when they need one."""
    return Vault(asset=asset, owner=OWNER, rate_per_second=0, clock=clock, address=VAULT_ADDRESS)


@pytest.fixture
def fund(asset, vault):
    """Mint asset to a holder and approve the vault to pull it."""
    def _fund(holder, amount):
        asset.mint(holder, amount)
        asset.approve(holder, vault.address, asset.allowance(holder, vault.address) + amount)
    return _fund


@pytest.fixture(autouse=True)
def _clean_logging():
    yield
    reset_logging()
