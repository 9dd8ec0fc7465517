import importlib.util
from pathlib import Path

import contracting
import pytest
from contracting.client import ContractingClient

PROJECT_ROOT = Path(__file__).resolve().parents[1]
AUTOBOND_PATH = PROJECT_ROOT / "con_autobond.py"
CURVE_PATH = PROJECT_ROOT / "con_linear_curve.py"
RESERVE_PATH = PROJECT_ROOT / "con_reserve_token.py"
ADMINS_PATH = PROJECT_ROOT / "con_bond_admins.py"
REFUSING_RESERVE_PATH = Path(__file__).resolve().parent / "contracts" / "con_refusing_reserve.py"
HELPER_PATH = PROJECT_ROOT / "client_helper.py"
SUBMISSION_PATH = (
    Path(contracting.__file__).resolve().parent / "contracts" / "submission.s.py"
)

NETWORK_FEE_BASIS_POINTS = 200
TREASURY = "treasury"
STARTING_RESERVE = 10**12


@pytest.fixture(scope="session")
def helper_module():
    spec = importlib.util.spec_from_file_location("client_helper_tests", HELPER_PATH)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture
def client():
    client = ContractingClient(signer="operator", metering=False)
    client.flush()
    client.set_submission_contract(str(SUBMISSION_PATH))
    return client


def submit(client, path, name, constructor_args=None):
    client.submit(path.read_text(), name=name, owner=None, constructor_args=constructor_args or {})
    return client.get_contract(name)


@pytest.fixture
def reserve(client):
    return submit(client, RESERVE_PATH, "con_reserve_token")


@pytest.fixture
def curve(client):
    return submit(client, CURVE_PATH, "con_linear_curve")


@pytest.fixture
def admins(client):
    return submit(client, ADMINS_PATH, "con_bond_admins")


@pytest.fixture
def deploy_autobond(client, curve, admins):
    def deploy(reserve_name, network_fee_basis_points=NETWORK_FEE_BASIS_POINTS, **overrides):
        args = {
            "network_fee_basis_points": network_fee_basis_points,
            "reserve_token": reserve_name,
            "curve": "con_linear_curve",
            "treasury": TREASURY,
            "authority": "con_bond_admins",
        }
        args.update(overrides)
        return submit(client, AUTOBOND_PATH, "con_autobond", constructor_args=args)

    return deploy


@pytest.fixture
def autobond(reserve, deploy_autobond):
    return deploy_autobond("con_reserve_token")


@pytest.fixture
def fund(reserve):
    """Give `account` reserve tokens and approve the bond contract to pull them."""
    def fund(account, amount=STARTING_RESERVE):
        reserve.transfer(amount=amount, to=account)
        reserve.approve(amount=amount, to="con_autobond", signer=account)

    return fund


@pytest.fixture
def refusing_reserve(client):
    return submit(client, REFUSING_RESERVE_PATH, "con_refusing_reserve")
