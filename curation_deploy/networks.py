from typing import Iterable, Mapping

from curation_deploy.constants import DEFAULT_ECOSYSTEM, FORK_NETWORK_SUFFIXES, TEST_NETWORKS


def network_id(ecosystem: str, network: str) -> str:
    """
    Returns the identifier used to scope artifacts for a network.
    Networks of the default ecosystem keep their bare name (e.g. "sepolia"),
    others are prefixed with the ecosystem (e.g. "polygon-amoy").
    """
    if ecosystem == DEFAULT_ECOSYSTEM:
        return network
    return f"{ecosystem}-{network}"


def is_fork_network(network: str) -> bool:
    return network.endswith(FORK_NETWORK_SUFFIXES)


def is_test_network(network: str, test_networks: Iterable[str] = TEST_NETWORKS) -> bool:
    """Returns True if test-only capabilities (e.g. impersonation) are allowed on the network."""
    return network in set(test_networks) or is_fork_network(network)


def explorer_api_key_envvar(ecosystem: str, key_envvars: Mapping[str, str]) -> str:
    """Returns the environment variable that holds the explorer API key of an ecosystem."""
    try:
        return key_envvars[ecosystem]
    except KeyError:
        raise ValueError(f"No block explorer API key is known for the '{ecosystem}' ecosystem.")
