import json

import pytest

from curation_deploy.artifacts import ArtifactStore, OverwritePolicy, artifact_filepath
from curation_deploy.errors import ArtifactExists, InvalidArtifact, NotFound

ADDRESS = "0x5FbDB2315678afecb367f032d93F642f64180aa3"
OTHER_ADDRESS = "0xe7f1725E7734CE288F8367e1Bb143E90bb3F0512"


def test_write_then_read(store):
    written = store.write("dev", "AccessControl", ADDRESS.lower(), tx_hash="0xabc")
    record = store.read("dev", "AccessControl")

    assert record == written
    assert record.address == ADDRESS
    assert record.name == "AccessControl"
    assert record.network == "dev"
    assert record.tx_hash == "0xabc"
    assert record.deployed_at > 0


def test_read_missing_record(store):
    with pytest.raises(NotFound) as error:
        store.read("dev", "AccessControl")
    assert error.value.network == "dev"
    assert error.value.contract_name == "AccessControl"


def test_records_are_scoped_by_network(store):
    store.write("dev", "CANFTMarket", ADDRESS)
    store.write("kovan-fork", "CANFTMarket", OTHER_ADDRESS)

    assert store.read("dev", "CANFTMarket").address == ADDRESS
    assert store.read("kovan-fork", "CANFTMarket").address == OTHER_ADDRESS
    with pytest.raises(NotFound):
        store.read("mainnet", "CANFTMarket")


def test_artifact_layout(store, artifacts_dir):
    store.write("dev", "Box", ADDRESS, implementation=OTHER_ADDRESS, deployed_at=1700000000)

    filepath = artifacts_dir / "Box.dev.json"
    assert store.filepath("dev", "Box") == filepath
    assert artifact_filepath(artifacts_dir, "Box", "dev") == filepath
    with open(filepath) as file:
        data = json.load(file)
    assert data == {
        "address": ADDRESS,
        "name": "Box",
        "network": "dev",
        "deployed_at": 1700000000,
        "implementation": OTHER_ADDRESS,
    }


def test_minimal_artifact_is_readable(store, artifacts_dir):
    # minimal records carry nothing but the address
    artifacts_dir.mkdir(parents=True)
    (artifacts_dir / "KnownOriginDigitalAssetV2.dev.json").write_text(
        json.dumps({"address": ADDRESS.lower()})
    )

    record = store.read("dev", "KnownOriginDigitalAssetV2")
    assert record.address == ADDRESS
    assert record.name == "KnownOriginDigitalAssetV2"
    assert record.deployed_at == 0


@pytest.mark.parametrize(
    "content",
    ['{"address": "0x5FbDB2', "{}", '{"address": "not-an-address"}', "[]"],
)
def test_unusable_artifact(store, artifacts_dir, content):
    artifacts_dir.mkdir(parents=True)
    (artifacts_dir / "AccessControl.dev.json").write_text(content)

    with pytest.raises(InvalidArtifact):
        store.read("dev", "AccessControl")


def test_overwrite_replaces_record(store):
    store.write("dev", "AccessControl", ADDRESS)
    store.write("dev", "AccessControl", OTHER_ADDRESS)

    assert store.read("dev", "AccessControl").address == OTHER_ADDRESS


def test_overwrite_disabled(artifacts_dir):
    store = ArtifactStore(directory=artifacts_dir, overwrite=OverwritePolicy.FAIL)
    store.write("dev", "AccessControl", ADDRESS)

    with pytest.raises(ArtifactExists):
        store.write("dev", "AccessControl", OTHER_ADDRESS)
    assert store.read("dev", "AccessControl").address == ADDRESS


def test_failed_write_keeps_previous_record(store, artifacts_dir):
    store.write("dev", "AccessControl", ADDRESS)

    class Unserializable:
        pass

    with pytest.raises(TypeError):
        store._replace(store.filepath("dev", "AccessControl"), {"address": Unserializable()})

    assert store.read("dev", "AccessControl").address == ADDRESS
    assert [p.name for p in artifacts_dir.iterdir()] == ["AccessControl.dev.json"]


def test_records_for_network(store):
    store.write("dev", "Market", OTHER_ADDRESS)
    store.write("dev", "AccessControl", ADDRESS)
    store.write("kovan.dev", "AccessControl", ADDRESS)
    store.write("mainnet", "AccessControl", ADDRESS)

    records = store.records("dev")
    assert [r.name for r in records] == ["AccessControl", "Market"]


def test_records_without_directory(tmp_path):
    assert ArtifactStore(directory=tmp_path / "missing").records("dev") == []


def test_check_writable(store, artifacts_dir):
    store.check_writable("dev", "AccessControl")
    store.write("dev", "AccessControl", ADDRESS)
    store.check_writable("dev", "AccessControl")

    refusing = ArtifactStore(directory=artifacts_dir, overwrite=OverwritePolicy.FAIL)
    refusing.check_writable("dev", "Market")
    with pytest.raises(ArtifactExists) as error:
        refusing.check_writable("dev", "AccessControl")
    assert error.value.contract_name == "AccessControl"
    assert error.value.network == "dev"


def test_default_layout(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)

    ArtifactStore().write("dev", "AccessControl", ADDRESS)

    assert json.loads((tmp_path / "abis" / "AccessControl.dev.json").read_text())["address"] == ADDRESS
