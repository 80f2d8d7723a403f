"""
Pytest configuration and fixtures for casbin-rule-adapter tests
"""
import sys
from pathlib import Path

import pytest

# Ensure the `src/` directory is available for imports when the package
# is not installed.
ROOT_DIR = Path(__file__).parent.parent
SRC_DIR = ROOT_DIR / "src"

if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from casbin.model import Model

from casbin_rule_adapter import PolicyAdapter
from casbin_rule_adapter.config import Settings

FIXTURES_DIR = Path(__file__).parent / "fixtures"
RBAC_MODEL_PATH = FIXTURES_DIR / "rbac_model.conf"
RBAC_POLICY_PATH = FIXTURES_DIR / "rbac_policy.csv"

SEED_POLICIES = [
    ["alice", "data1", "read"],
    ["bob", "data2", "write"],
    ["data2_admin", "data2", "read"],
    ["data2_admin", "data2", "write"],
]
SEED_GROUPINGS = [["alice", "data2_admin"]]


def new_model() -> Model:
    """Empty RBAC model with no policy loaded"""
    model = Model()
    model.load_model(str(RBAC_MODEL_PATH))
    return model


def policies(model: Model, sec: str = "p", ptype: str = None) -> list:
    """Rules of one policy type, sorted for order-insensitive comparison"""
    return sorted(model.model[sec][ptype or sec].policy)


def stored_rules(adapter: PolicyAdapter) -> list:
    """All stored rules as (ptype, fields) pairs, sorted"""
    from casbin_rule_adapter.codec import decode_rule

    with adapter.store.session_scope() as store:
        records = store.find()
    return sorted((ptype, fields) for ptype, fields in map(decode_rule, records))


@pytest.fixture
def test_settings(tmp_path):
    """Settings pointing at a throwaway SQLite file"""
    return Settings(
        database_url=f"sqlite:///{tmp_path / 'casbin.db'}",
        sqlite_journal_mode="DELETE",
    )


@pytest.fixture
def adapter(test_settings):
    """Adapter on an empty rule table"""
    adapter = PolicyAdapter(settings=test_settings)
    yield adapter
    adapter.close()


@pytest.fixture
def seed_model():
    """RBAC model holding the seed policy"""
    model = new_model()
    model.model["p"]["p"].policy.extend([list(rule) for rule in SEED_POLICIES])
    model.model["g"]["g"].policy.extend([list(rule) for rule in SEED_GROUPINGS])
    return model


@pytest.fixture
def seeded_adapter(adapter, seed_model):
    """Adapter whose table holds the seed policy"""
    adapter.save_policy(seed_model)
    return adapter


# Test configuration
def pytest_configure(config):
    """Configure pytest"""
    config.addinivalue_line(
        "markers", "integration: mark test as integration test (drives a casbin Enforcer)"
    )
    config.addinivalue_line(
        "markers", "unit: mark test as unit test"
    )
