"""Tests for node bootstrap."""

import io

import pytest

from relaynode.bootstrap import (
    NODE_ID_FILE,
    SEED_FINGERPRINT_FILE,
    check_seed_fingerprint,
    resolve_seed,
    start_node,
)
from relaynode.domain.value_objects import SeedMaterial
from relaynode.exceptions import ConfigurationError, NodeStartupError, SeedMismatchError

from tests.conftest import TEST_SEED_HEX, FakeNode


class RecordingFactory:
    """Node factory that remembers the seed it was handed."""

    def __init__(self, out: io.StringIO | None = None):
        self.out = out
        self.seeds: list[SeedMaterial] = []
        self.output_at_build: str | None = None

    def __call__(self, settings, seed):
        self.seeds.append(seed)
        if self.out is not None:
            self.output_at_build = self.out.getvalue()
        return FakeNode(seed)


class TestResolveSeed:
    def test_configured_seed_prints_nothing(self, test_settings):
        settings = test_settings.model_copy(update={"seed_hex": TEST_SEED_HEX})
        out = io.StringIO()

        seed = resolve_seed(settings, out)

        assert seed.hex() == TEST_SEED_HEX
        assert out.getvalue() == ""

    def test_generated_seed_is_printed_once(self, test_settings):
        out = io.StringIO()

        seed = resolve_seed(test_settings, out)

        assert out.getvalue() == f"no seed provided, generated new seed: {seed.hex()}\n"

    def test_initialised_data_dir_requires_seed(self, test_settings):
        check_seed_fingerprint(test_settings.data_dir, SeedMaterial.generate())
        out = io.StringIO()

        with pytest.raises(ConfigurationError, match="seed is required") as exc_info:
            resolve_seed(test_settings, out)

        assert exc_info.value.setting == "seed_hex"
        assert out.getvalue() == ""


class TestSeedFingerprint:
    def test_first_run_records(self, tmp_path):
        seed = SeedMaterial.generate()

        check_seed_fingerprint(tmp_path / "data", seed)

        recorded = (tmp_path / "data" / SEED_FINGERPRINT_FILE).read_text().strip()
        assert recorded == seed.fingerprint
        assert seed.hex() not in recorded

    def test_same_seed_accepted(self, tmp_path):
        seed = SeedMaterial.from_hex(TEST_SEED_HEX)
        check_seed_fingerprint(tmp_path, seed)

        check_seed_fingerprint(tmp_path, seed)

    def test_other_seed_rejected(self, tmp_path):
        check_seed_fingerprint(tmp_path, SeedMaterial.from_hex(TEST_SEED_HEX))

        with pytest.raises(SeedMismatchError) as exc_info:
            check_seed_fingerprint(tmp_path, SeedMaterial.generate())
        assert exc_info.value.context["data_dir"] == str(tmp_path)


class TestStartNode:
    def test_seed_printed_before_node_built(self, test_settings):
        out = io.StringIO()
        factory = RecordingFactory(out)

        node = start_node(test_settings, node_factory=factory, out=out)

        [seed] = factory.seeds
        assert factory.output_at_build == f"no seed provided, generated new seed: {seed.hex()}\n"
        assert node.started
        assert out.getvalue().splitlines()[-1] == f"node id: {node.node_id().hex()}"

    def test_same_seed_same_identity(self, test_settings, tmp_path):
        ids = []
        for name in ("a", "b"):
            settings = test_settings.model_copy(
                update={"seed_hex": TEST_SEED_HEX, "data_dir": tmp_path / name}
            )
            ids.append(start_node(settings, node_factory=RecordingFactory(), out=io.StringIO()))

        assert ids[0].node_id() == ids[1].node_id()

    def test_without_seed_each_start_is_a_new_identity(self, test_settings, tmp_path):
        nodes = [
            start_node(
                test_settings.model_copy(update={"data_dir": tmp_path / name}),
                node_factory=RecordingFactory(),
                out=io.StringIO(),
            )
            for name in ("first", "second")
        ]

        assert nodes[0].node_id() != nodes[1].node_id()

    def test_restart_without_seed_prints_nothing(self, test_settings):
        start_node(test_settings, node_factory=RecordingFactory(), out=io.StringIO())
        out = io.StringIO()
        factory = RecordingFactory()

        with pytest.raises(ConfigurationError):
            start_node(test_settings, node_factory=factory, out=out)

        assert out.getvalue() == ""
        assert factory.seeds == []

    def test_node_id_written_to_data_dir(self, test_settings):
        node = start_node(test_settings, node_factory=RecordingFactory(), out=io.StringIO())

        written = (test_settings.data_dir / NODE_ID_FILE).read_text().strip()
        assert written == node.node_id().hex()

    def test_mismatched_seed_never_builds(self, test_settings):
        check_seed_fingerprint(test_settings.data_dir, SeedMaterial.generate())
        factory = RecordingFactory()
        settings = test_settings.model_copy(update={"seed_hex": TEST_SEED_HEX})

        with pytest.raises(SeedMismatchError):
            start_node(settings, node_factory=factory, out=io.StringIO())
        assert factory.seeds == []

    def test_build_failure(self, test_settings):
        def broken_factory(settings, seed):
            raise OSError("permission denied")

        with pytest.raises(NodeStartupError, match="Failed to build node: permission denied"):
            start_node(test_settings, node_factory=broken_factory, out=io.StringIO())

    def test_start_failure(self, test_settings):
        def factory(settings, seed):
            node = FakeNode(seed)
            node.failures["start"] = RuntimeError("port in use")
            return node

        with pytest.raises(NodeStartupError) as exc_info:
            start_node(test_settings, node_factory=factory, out=io.StringIO())
        assert isinstance(exc_info.value.original_error, RuntimeError)
