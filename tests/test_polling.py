import asyncio

import pytest

from mediagen.errors import PollTransportError
from mediagen.models import CanonicalStatus, FailureKind, MediaKind, PollPolicy
from mediagen.polling import poll
from mediagen.providers import hailuo, kie_flux, kie_jobs
from tests.conftest import StubStatusClient, make_task
from tests.payloads import FAMILY_PAYLOADS

FLUX = FAMILY_PAYLOADS["flux-style"]


@pytest.mark.asyncio
@pytest.mark.parametrize("n", [1, 2, 5])
async def test_succeeds_after_exactly_n_cycles(n, no_sleep):
    client = StubStatusClient([FLUX["pending"]] * (n - 1) + [FLUX["success"]])
    task = make_task()

    result = await poll(task, kie_flux.ADAPTER, client, PollPolicy(interval=2, max_attempts=10), sleep=no_sleep)

    assert result is task
    assert task.canonical_status is CanonicalStatus.SUCCEEDED
    assert task.attempts == n
    assert task.result_url == FLUX["success_url"]
    assert len(client.calls) == n
    assert no_sleep.delays == [2] * n


@pytest.mark.asyncio
async def test_times_out_without_exceeding_budget(no_sleep):
    client = StubStatusClient([FLUX["pending"]] * 10)
    task = make_task()

    await poll(task, kie_flux.ADAPTER, client, PollPolicy(interval=0, max_attempts=4), sleep=no_sleep)

    assert task.canonical_status is CanonicalStatus.TIMED_OUT
    assert task.failure_kind is FailureKind.TIMEOUT
    assert task.error_detail == "exceeded 4 attempts"
    assert task.attempts == 4
    assert len(client.calls) == 4
    assert task.result_url is None


@pytest.mark.asyncio
async def test_provider_failure_stops_immediately(no_sleep):
    client = StubStatusClient([FLUX["pending"], FLUX["failure"], FLUX["success"]])
    task = make_task()

    await poll(task, kie_flux.ADAPTER, client, PollPolicy(interval=1, max_attempts=10), sleep=no_sleep)

    assert task.canonical_status is CanonicalStatus.FAILED
    assert task.failure_kind is FailureKind.PROVIDER
    assert task.error_detail == "content policy"
    assert task.attempts == 2
    assert len(client.responses) == 1


@pytest.mark.asyncio
async def test_failure_without_detail_gets_generic_message(no_sleep):
    client = StubStatusClient([{"data": {"successFlag": 2}}])
    task = make_task()

    await poll(task, kie_flux.ADAPTER, client, PollPolicy(interval=0, max_attempts=3), sleep=no_sleep)

    assert task.error_detail == "flux-style reported failure"


@pytest.mark.asyncio
async def test_success_without_url_is_result_url_missing(no_sleep):
    client = StubStatusClient([{"data": {"successFlag": 1}}, FLUX["success"]])
    task = make_task()

    await poll(task, kie_flux.ADAPTER, client, PollPolicy(interval=0, max_attempts=5), sleep=no_sleep)

    assert task.canonical_status is CanonicalStatus.FAILED
    assert task.failure_kind is FailureKind.RESULT_URL_MISSING
    assert task.result_url is None
    assert task.attempts == 1
    assert len(client.calls) == 1


@pytest.mark.asyncio
async def test_transient_errors_count_toward_attempts(no_sleep):
    client = StubStatusClient([
        PollTransportError("HTTP 502", status_code=502),
        FLUX["pending"],
        PollTransportError("ConnectError: refused"),
        FLUX["success"],
    ])
    task = make_task()
    events = []

    await poll(
        task, kie_flux.ADAPTER, client, PollPolicy(interval=0, max_attempts=10),
        on_event=events.append, sleep=no_sleep,
    )

    assert task.is_success
    assert task.attempts == 4
    assert [e.transient_error for e in events] == ["HTTP 502", None, "ConnectError: refused", None]


@pytest.mark.asyncio
async def test_transient_errors_alone_time_out(no_sleep):
    client = StubStatusClient([PollTransportError("HTTP 500", status_code=500)] * 3)
    task = make_task()

    await poll(task, kie_flux.ADAPTER, client, PollPolicy(interval=0, max_attempts=3), sleep=no_sleep)

    assert task.canonical_status is CanonicalStatus.TIMED_OUT
    assert task.attempts == 3


@pytest.mark.asyncio
async def test_one_event_per_cycle(no_sleep):
    jobs = FAMILY_PAYLOADS["jobs-generic"]
    client = StubStatusClient([jobs["pending"], jobs["pending"], jobs["success"]])
    task = make_task(MediaKind.IMAGE, "jobs-generic", "google/nano-banana", "rid-9")
    events = []

    await poll(
        task, kie_jobs.ADAPTER, client, PollPolicy(interval=0, max_attempts=5),
        on_event=events.append, sleep=no_sleep,
    )

    assert [e.attempt for e in events] == [1, 2, 3]
    assert [e.canonical_status for e in events] == [
        CanonicalStatus.RUNNING,
        CanonicalStatus.RUNNING,
        CanonicalStatus.SUCCEEDED,
    ]
    assert {(e.task_id, e.family, e.remote_task_id, e.max_attempts) for e in events} == {
        ("task-1", "jobs-generic", "rid-9", 5)
    }


@pytest.mark.asyncio
async def test_last_cycle_timeout_event_is_terminal(no_sleep):
    client = StubStatusClient([FLUX["pending"]] * 2)
    events = []

    await poll(
        make_task(), kie_flux.ADAPTER, client, PollPolicy(interval=0, max_attempts=2),
        on_event=events.append, sleep=no_sleep,
    )

    assert events[-1].canonical_status is CanonicalStatus.TIMED_OUT


@pytest.mark.asyncio
async def test_hailuo_polls_by_task_id(no_sleep):
    payloads = FAMILY_PAYLOADS["hailuo-style"]
    client = StubStatusClient([payloads["pending"], payloads["success"]])
    task = make_task(MediaKind.VIDEO, "hailuo-style", "MiniMax-Hailuo-02", "106916112212032")

    await poll(task, hailuo.ADAPTER, client, PollPolicy(interval=0, max_attempts=5), sleep=no_sleep)

    assert task.result_url == payloads["success_url"]
    assert client.calls == [("hailuo-style", "106916112212032")] * 2


@pytest.mark.asyncio
async def test_requires_remote_id(no_sleep):
    with pytest.raises(ValueError):
        await poll(
            make_task(remote_task_id=None), kie_flux.ADAPTER, StubStatusClient([]),
            PollPolicy(interval=0, max_attempts=1), sleep=no_sleep,
        )


@pytest.mark.asyncio
async def test_cancellation_propagates():
    client = StubStatusClient([FLUX["pending"]] * 100)
    task = make_task()
    poller = asyncio.create_task(
        poll(task, kie_flux.ADAPTER, client, PollPolicy(interval=0.01, max_attempts=100))
    )
    await asyncio.sleep(0.03)
    poller.cancel()

    with pytest.raises(asyncio.CancelledError):
        await poller
    assert not task.is_terminal


@pytest.mark.asyncio
async def test_many_tasks_poll_concurrently():
    policy = PollPolicy(interval=0.01, max_attempts=10)
    clients = [StubStatusClient([FLUX["pending"]] * i + [FLUX["success"]]) for i in range(5)]
    tasks = [make_task() for _ in clients]

    await asyncio.gather(*(poll(t, kie_flux.ADAPTER, c, policy) for t, c in zip(tasks, clients)))

    assert [t.attempts for t in tasks] == [1, 2, 3, 4, 5]
    assert all(t.is_success for t in tasks)


def test_default_sleep_is_asyncio_sleep():
    assert poll.__kwdefaults__["sleep"] is asyncio.sleep
