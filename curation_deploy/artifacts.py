import json
import os
import tempfile
import time
from enum import Enum
from pathlib import Path
from typing import List, NamedTuple, Optional

from eth_typing import ChecksumAddress
from eth_utils import to_checksum_address

from curation_deploy.constants import ARTIFACTS_DIRNAME
from curation_deploy.errors import ArtifactExists, InvalidArtifact, NotFound

NetworkId = str
ContractName = str


STANDARD_ARTIFACT_JSON_FORMAT = {"indent": 4, "separators": (",", ": ")}
ARTIFACT_SUFFIX = ".json"


class ContractRecord(NamedTuple):
    """Represents the persisted address of a single contract on a single network."""

    name: ContractName
    network: NetworkId
    address: ChecksumAddress
    deployed_at: int
    tx_hash: Optional[str] = None
    implementation: Optional[ChecksumAddress] = None
    deployer: Optional[ChecksumAddress] = None


class OverwritePolicy(Enum):
    OVERWRITE = "overwrite"
    FAIL = "fail"


def default_artifacts_dir() -> Path:
    return Path.cwd() / ARTIFACTS_DIRNAME


def artifact_filepath(directory: Path, contract_name: ContractName, network: NetworkId) -> Path:
    """Returns the location of the artifact for a contract on a network."""
    return Path(directory) / f"{contract_name}.{network}{ARTIFACT_SUFFIX}"


def _to_json(record: ContractRecord) -> dict:
    data = {
        "address": record.address,
        "name": record.name,
        "network": record.network,
        "deployed_at": int(record.deployed_at),
    }
    # optional fields are omitted rather than written as null
    if record.tx_hash:
        data["tx_hash"] = record.tx_hash
    if record.implementation:
        data["implementation"] = record.implementation
    if record.deployer:
        data["deployer"] = record.deployer
    return data


def _from_json(
    data: dict, contract_name: ContractName, network: NetworkId, filepath: Path
) -> ContractRecord:
    if not isinstance(data, dict) or not data.get("address"):
        raise InvalidArtifact(
            f"Artifact at {filepath} has no address", network=network, contract_name=contract_name
        )
    try:
        address = to_checksum_address(data["address"])
        implementation = data.get("implementation")
        if implementation:
            implementation = to_checksum_address(implementation)
    except ValueError as error:
        raise InvalidArtifact(
            f"Artifact at {filepath} contains an invalid address: {error}",
            network=network,
            contract_name=contract_name,
        ) from error

    # minimal records carry nothing but the address
    return ContractRecord(
        name=data.get("name", contract_name),
        network=data.get("network", network),
        address=address,
        deployed_at=int(data.get("deployed_at", 0)),
        tx_hash=data.get("tx_hash"),
        implementation=implementation,
        deployer=data.get("deployer"),
    )


class ArtifactStore:
    """
    Persists contract addresses as one JSON file per (contract name, network) pair.

    Files are written to a temporary sibling first and moved into place, so a reader
    either sees the previous record or the complete new one.
    """

    def __init__(
        self,
        directory: Optional[Path] = None,
        overwrite: OverwritePolicy = OverwritePolicy.OVERWRITE,
    ):
        self.directory = Path(directory) if directory else default_artifacts_dir()
        self.overwrite = overwrite

    def filepath(self, network: NetworkId, contract_name: ContractName) -> Path:
        return artifact_filepath(self.directory, contract_name=contract_name, network=network)

    def exists(self, network: NetworkId, contract_name: ContractName) -> bool:
        return self.filepath(network, contract_name).exists()

    def read(self, network: NetworkId, contract_name: ContractName) -> ContractRecord:
        filepath = self.filepath(network, contract_name)
        try:
            with open(filepath, "r") as file:
                data = json.load(file)
        except FileNotFoundError:
            raise NotFound(
                f"No artifact for {contract_name} at {filepath}",
                network=network,
                contract_name=contract_name,
            )
        except json.JSONDecodeError as error:
            raise InvalidArtifact(
                f"Artifact at {filepath} is not valid JSON: {error}",
                network=network,
                contract_name=contract_name,
            ) from error
        return _from_json(data, contract_name=contract_name, network=network, filepath=filepath)

    def check_writable(self, network: NetworkId, contract_name: ContractName) -> None:
        """Raises ArtifactExists if a record would be overwritten against the overwrite policy."""
        filepath = self.filepath(network, contract_name)
        if self.overwrite == OverwritePolicy.FAIL and filepath.exists():
            raise ArtifactExists(
                f"Artifact already exists at {filepath}",
                network=network,
                contract_name=contract_name,
            )

    def write(
        self,
        network: NetworkId,
        contract_name: ContractName,
        address: str,
        tx_hash: Optional[str] = None,
        implementation: Optional[str] = None,
        deployer: Optional[str] = None,
        deployed_at: Optional[int] = None,
    ) -> ContractRecord:
        self.check_writable(network, contract_name)
        record = ContractRecord(
            name=contract_name,
            network=network,
            address=to_checksum_address(address),
            deployed_at=int(time.time()) if deployed_at is None else deployed_at,
            tx_hash=tx_hash,
            implementation=to_checksum_address(implementation) if implementation else None,
            deployer=to_checksum_address(deployer) if deployer else None,
        )
        self._replace(self.filepath(network, contract_name), _to_json(record))
        return record

    def records(self, network: NetworkId) -> List[ContractRecord]:
        """Returns every record stored for a network, sorted by contract name."""
        if not self.directory.exists():
            return []
        suffix = f".{network}{ARTIFACT_SUFFIX}"
        records = list()
        for filepath in sorted(self.directory.glob(f"*{suffix}")):
            contract_name = filepath.name[: -len(suffix)]
            if not contract_name or "." in contract_name:
                continue  # e.g. a record for network "kovan.dev" when listing "dev"
            records.append(self.read(network, contract_name))
        return records

    def _replace(self, filepath: Path, data: dict) -> None:
        filepath.parent.mkdir(parents=True, exist_ok=True)
        fd, temp_name = tempfile.mkstemp(
            dir=filepath.parent, prefix=f".{filepath.name}.", suffix=".tmp"
        )
        temp_filepath = Path(temp_name)
        try:
            with os.fdopen(fd, "w") as file:
                json.dump(data, file, **STANDARD_ARTIFACT_JSON_FORMAT)
                file.write("\n")
                file.flush()
                os.fsync(file.fileno())
            temp_filepath.replace(filepath)
        except BaseException:
            temp_filepath.unlink(missing_ok=True)
            raise
