"""Operations across await points and concurrent tasks."""

import asyncio

import pytest

from opcorr.telemetry import DependencyTelemetry, RequestTelemetry


async def _call_dependency(client, name: str):
    async with client.start_operation(DependencyTelemetry, name) as operation:
        await asyncio.sleep(0.001)
        return operation.telemetry


@pytest.mark.asyncio
async def test_context_survives_await(telemetry_client, context_store):
    async with telemetry_client.start_operation(RequestTelemetry, "Request") as request:
        await asyncio.sleep(0.001)
        assert context_store.get() is request.context

        dependency = await _call_dependency(telemetry_client, "db")

        assert dependency.context.operation.parent_id == request.telemetry.id
        assert context_store.get() is request.context

    assert context_store.get() is None


@pytest.mark.asyncio
async def test_concurrent_requests_do_not_observe_each_other(telemetry_client, channel, context_store):
    async def handle(name: str, delay: float):
        async with telemetry_client.start_operation(RequestTelemetry, name) as request:
            await asyncio.sleep(delay)
            dependency = await _call_dependency(telemetry_client, f"{name}-db")
            assert context_store.get() is request.context
            return request.telemetry, dependency

    results = await asyncio.gather(handle("a", 0.01), handle("b", 0.0), handle("c", 0.005))

    for request, dependency in results:
        assert dependency.context.operation.parent_id == request.id
        assert dependency.context.operation.root_id == request.id
        assert dependency.context.operation.root_name == request.name

    assert len(channel.items) == 6
    assert context_store.get() is None


@pytest.mark.asyncio
async def test_child_task_inherits_operation(telemetry_client, context_store):
    async with telemetry_client.start_operation(RequestTelemetry, "Request") as request:
        task = asyncio.create_task(_call_dependency(telemetry_client, "background"))
        dependency = await task

        assert dependency.context.operation.parent_id == request.telemetry.id
        assert dependency.context.operation.root_name == "Request"
        assert context_store.get() is request.context


@pytest.mark.asyncio
async def test_operation_started_in_child_task_stays_there(telemetry_client, context_store):
    async def start_only():
        telemetry_client.start_operation(DependencyTelemetry, "leaked")
        return context_store.get()

    child_context = await asyncio.create_task(start_only())

    assert child_context is not None
    assert context_store.get() is None


@pytest.mark.asyncio
async def test_stop_in_same_task_after_awaits(telemetry_client, channel, context_store):
    operation = telemetry_client.start_operation(DependencyTelemetry, "slow")
    await asyncio.sleep(0.001)
    telemetry_client.stop_operation(operation)

    assert context_store.get() is None
    assert channel.items == [operation.telemetry]
