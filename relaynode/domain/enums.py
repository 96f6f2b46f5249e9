"""Domain enums for the control plane."""

from enum import Enum


class PaymentStatus(str, Enum):
    """Payment status as observed from the node engine.

    Lifecycle:
        PENDING → SUCCEEDED
        PENDING → FAILED

    Terminal once resolved. Transitions happen inside the engine.
    """

    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

    def __str__(self) -> str:
        return self.value


class Network(str, Enum):
    """Bitcoin network the node runs on."""

    BITCOIN = "bitcoin"
    TESTNET = "testnet"
    SIGNET = "signet"
    REGTEST = "regtest"

    def __str__(self) -> str:
        return self.value
