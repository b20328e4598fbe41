import os
from dataclasses import dataclass

import pytest

from provider_registry.config import ACCOUNT_CREATED_TOPIC, RegistryConfig
from provider_registry.provider import ProviderRecord
from provider_registry.receipts import LogEntry, Receipt

SIGNER_ADDRESS = "0x1111111111111111111111111111111111111111"
MINTED_ADDRESS = "0x2222222222222222222222222222222222222222"
PROVIDER_WALLET = "0x3333333333333333333333333333333333333333"
OTHER_TOPIC = "0x" + "ab" * 32


@dataclass
class Submission:
    payload: bytes
    target: str
    signer: str
    value: int
    gas_hint: int | None


class FakeAdapter:
    """Records submissions and replays scripted receipts or errors in order."""

    def __init__(self, signer: str | None = SIGNER_ADDRESS):
        self._signer = signer
        self.submissions: list[Submission] = []
        self.awaited: list[str] = []
        self.receipts: list = []
        self.submit_errors: dict[int, Exception] = {}

    @property
    def signer_address(self) -> str | None:
        return self._signer

    def submit(self, payload, target, signer, value=0, gas_hint=None) -> str:
        self.submissions.append(Submission(payload, target, signer, value, gas_hint))
        index = len(self.submissions) - 1
        if index in self.submit_errors:
            raise self.submit_errors[index]
        return f"0x{index + 1:064x}"

    def await_receipt(self, tx_hash: str) -> Receipt:
        self.awaited.append(tx_hash)
        item = self.receipts.pop(0) if self.receipts else Receipt(success=True)
        if isinstance(item, Exception):
            raise item
        return item


class ImmediateExecutor:
    """Runs submitted work on the calling thread."""

    def submit(self, fn, /, *args, **kwargs):
        fn(*args, **kwargs)

    def shutdown(self, wait: bool = True) -> None:
        pass


class ManualExecutor:
    """Queues submitted work until the test runs it."""

    def __init__(self):
        self.pending: list = []

    def submit(self, fn, /, *args, **kwargs):
        self.pending.append((fn, args, kwargs))

    def run_next(self) -> None:
        fn, args, kwargs = self.pending.pop(0)
        fn(*args, **kwargs)

    def run_all(self) -> None:
        while self.pending:
            self.run_next()

    def shutdown(self, wait: bool = True) -> None:
        self.pending.clear()


class RecordingScheduler:
    def __init__(self):
        self.scheduled: list = []

    def __call__(self, delay, callback):
        self.scheduled.append((delay, callback))

    def run_all(self) -> None:
        pending, self.scheduled = self.scheduled, []
        for _, callback in pending:
            callback()


def build_created_log(
    account: str = MINTED_ADDRESS,
    topic: str = ACCOUNT_CREATED_TOPIC,
    data: bytes | None = None,
    emitter: str = "0x000000006551c19487814612e58FE06813775758",
) -> LogEntry:
    if data is None:
        data = (
            bytes(12)
            + bytes.fromhex(account[2:])
            + bytes(32)
            + (8453).to_bytes(32, "big")
        )
    return LogEntry(address=emitter, topics=(topic, "0x" + "00" * 32), data=data)


@pytest.fixture
def config():
    return RegistryConfig()


@pytest.fixture
def adapter():
    return FakeAdapter()


@pytest.fixture
def executor():
    return ImmediateExecutor()


@pytest.fixture
def manual_executor():
    return ManualExecutor()


@pytest.fixture
def scheduler():
    return RecordingScheduler()


@pytest.fixture
def created_log():
    """Factory for ERC-6551 account-created log entries."""
    return build_created_log


@pytest.fixture
def provider_record():
    return ProviderRecord(
        name="weather-api",
        id="weather-api-001",
        wallet=PROVIDER_WALLET,
        description="Hourly weather forecasts",
        instructions="Pass ?city=<name>",
        price="0.01",
    )


@pytest.fixture
def signer_address():
    return SIGNER_ADDRESS


@pytest.fixture
def minted_address():
    return MINTED_ADDRESS


@pytest.fixture
def other_topic():
    return OTHER_TOPIC


@pytest.fixture(autouse=True)
def isolate_environment(monkeypatch):
    """Keep PROVIDER_REGISTRY_* settings from the developer shell out of tests."""
    for key in list(os.environ):
        if key.startswith("PROVIDER_REGISTRY_"):
            monkeypatch.delenv(key, raising=False)
    yield


@pytest.fixture
def make_adapter():
    return FakeAdapter
