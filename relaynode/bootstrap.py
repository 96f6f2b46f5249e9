"""Node bootstrap: seed material, identity guard, build and start.

Everything here runs before the control plane opens its listener. Any
failure is fatal and surfaces as a ``RelayNodeError``.
"""

import sys
from collections.abc import Callable
from pathlib import Path
from typing import TextIO

from relaynode.domain.value_objects import SeedMaterial
from relaynode.exceptions import ConfigurationError, NodeStartupError, SeedMismatchError
from relaynode.infrastructure.ldk_client import build_ldk_node
from relaynode.infrastructure.node_handle import NodeHandle
from relaynode.utils.config import Settings
from relaynode.utils.logging import get_logger

logger = get_logger(__name__)

SEED_FINGERPRINT_FILE = "seed.fingerprint"
NODE_ID_FILE = "node_id"

NodeFactory = Callable[[Settings, SeedMaterial], NodeHandle]


def resolve_seed(settings: Settings, out: TextIO = sys.stdout) -> SeedMaterial:
    """Return the configured seed, or generate one and show it to the operator.

    A generated seed is printed exactly once. It is the only copy outside the
    node's storage. A data directory that already holds a node never gets a
    generated seed.
    """
    seed = settings.seed
    if seed is not None:
        logger.info("seed_loaded", source="configuration")
        return seed

    fingerprint_path = settings.data_dir / SEED_FINGERPRINT_FILE
    if fingerprint_path.exists():
        raise ConfigurationError(
            "Data directory already belongs to a node; its seed is required to start it",
            setting="seed_hex",
            context={"data_dir": str(settings.data_dir)},
        )

    seed = SeedMaterial.generate()
    print(f"no seed provided, generated new seed: {seed.hex()}", file=out, flush=True)
    logger.warning("seed_generated", hint="store the printed seed, it is not shown again")
    return seed


def check_seed_fingerprint(data_dir: Path, seed: SeedMaterial) -> None:
    """Refuse to run a seed against storage created with a different one.

    The first start records the seed's fingerprint in the data directory.

    Raises:
        SeedMismatchError: If the directory belongs to another seed
    """
    path = data_dir / SEED_FINGERPRINT_FILE
    if path.exists():
        recorded = path.read_text(encoding="utf-8").strip()
        if recorded != seed.fingerprint:
            raise SeedMismatchError(
                "Seed does not match the one this data directory was created with",
                setting="seed_hex",
                context={"data_dir": str(data_dir)},
            )
        return

    data_dir.mkdir(parents=True, exist_ok=True)
    path.write_text(seed.fingerprint + "\n", encoding="utf-8")
    logger.info("seed_fingerprint_recorded", path=str(path))


def start_node(
    settings: Settings,
    *,
    node_factory: NodeFactory = build_ldk_node,
    out: TextIO = sys.stdout,
) -> NodeHandle:
    """Build and start the node described by ``settings``.

    Args:
        settings: Process configuration
        node_factory: Builds an unstarted node from settings and seed
        out: Where operator-facing lines (seed, node id) are printed

    Returns:
        The started node

    Raises:
        ConfigurationError: No seed given for an already initialised data directory
        SeedMismatchError: Seed does not belong to the data directory
        NodeStartupError: Node failed to build or start
    """
    seed = resolve_seed(settings, out)
    check_seed_fingerprint(settings.data_dir, seed)

    try:
        node = node_factory(settings, seed)
    except NodeStartupError:
        raise
    except Exception as e:
        raise NodeStartupError(f"Failed to build node: {e}", original_error=e) from e

    node_id = node.node_id().hex()
    print(f"node id: {node_id}", file=out, flush=True)
    (settings.data_dir / NODE_ID_FILE).write_text(node_id + "\n", encoding="utf-8")

    try:
        node.start()
    except NodeStartupError:
        raise
    except Exception as e:
        raise NodeStartupError(f"Failed to start node: {e}", original_error=e) from e

    logger.info("node_started", node_id=node_id, network=str(settings.network))
    return node
