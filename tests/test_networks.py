import pytest

from curation_deploy.networks import (
    explorer_api_key_envvar,
    is_fork_network,
    is_test_network,
    network_id,
)

KEY_ENVVARS = {
    "ethereum": "ETHERSCAN_API_KEY",
    "polygon": "POLYGONSCAN_API_KEY",
}


def test_network_id():
    assert network_id("ethereum", "sepolia") == "sepolia"
    assert network_id("polygon", "amoy") == "polygon-amoy"


@pytest.mark.parametrize("network", ["kovan-fork", "mainnet_fork", "polygon-amoy-fork"])
def test_fork_networks(network):
    assert is_fork_network(network)
    assert is_test_network(network)


@pytest.mark.parametrize("network", ["mainnet", "sepolia", "polygon-mainnet", "forked"])
def test_production_networks(network):
    assert not is_fork_network(network)
    assert not is_test_network(network)


def test_test_networks():
    assert is_test_network("dev")
    assert is_test_network("local")
    assert is_test_network("staging", test_networks=("staging",))
    assert not is_test_network("dev", test_networks=("local",))


@pytest.mark.parametrize("ecosystem, envvar", KEY_ENVVARS.items())
def test_explorer_api_key_per_ecosystem(ecosystem, envvar):
    assert explorer_api_key_envvar(ecosystem, KEY_ENVVARS) == envvar


def test_explorer_api_key_unknown_ecosystem():
    with pytest.raises(ValueError, match="arbitrum"):
        explorer_api_key_envvar("arbitrum", KEY_ENVVARS)
