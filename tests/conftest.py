import pytest

from opcorr.telemetry import (
    ContextVarOperationContextStore,
    InMemoryChannel,
    OperationCorrelationTelemetryInitializer,
    TelemetryClient,
    TelemetryConfiguration,
    default_context_store,
)


@pytest.fixture(autouse=True)
def reset_default_store():
    default_context_store.save(None)
    yield
    default_context_store.save(None)


@pytest.fixture
def context_store():
    store = ContextVarOperationContextStore("test")
    yield store
    store.clear()


@pytest.fixture
def channel():
    return InMemoryChannel()


@pytest.fixture
def telemetry_client(context_store, channel):
    configuration = TelemetryConfiguration(
        instrumentation_key="test-ikey",
        channel=channel,
        telemetry_initializers=[OperationCorrelationTelemetryInitializer(context_store)],
        context_store=context_store,
    )
    return TelemetryClient(configuration)
