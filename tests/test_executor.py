import asyncio

import pytest

from app.workers.executor import JobExecutor


@pytest.mark.asyncio
async def test_submit_runs_and_forgets():
    executor = JobExecutor()
    finished = []
    executor.on_complete(lambda job_id, task: finished.append((job_id, task.result())))
    
    async def job(value):
        await asyncio.sleep(0)
        return value
    
    executor.submit(1, job("a"))
    executor.submit(2, job("b"))
    assert executor.running_count == 2
    
    await executor.drain()
    
    assert executor.running_count == 0
    assert sorted(finished) == [(1, "a"), (2, "b")]


@pytest.mark.asyncio
async def test_duplicate_job_id_rejected():
    executor = JobExecutor()
    gate = asyncio.Event()
    executor.submit(1, gate.wait())
    
    coro = gate.wait()
    with pytest.raises(ValueError):
        executor.submit(1, coro)
    coro.close()
    
    gate.set()
    await executor.drain()


@pytest.mark.asyncio
async def test_cancel():
    executor = JobExecutor()
    task = executor.submit(7, asyncio.Event().wait())
    await asyncio.sleep(0)
    
    assert executor.is_running(7)
    assert executor.cancel(7) is True
    await executor.drain()
    
    assert task.cancelled()
    assert not executor.is_running(7)
    assert executor.cancel(7) is False
    assert executor.cancel(999) is False


@pytest.mark.asyncio
async def test_crashing_job_does_not_propagate(caplog):
    executor = JobExecutor()
    
    async def boom():
        raise RuntimeError("kaput")
    
    executor.submit(3, boom())
    await executor.drain()
    
    assert executor.running_count == 0
    assert "kaput" in caplog.text


@pytest.mark.asyncio
async def test_failing_hook_does_not_stop_other_hooks():
    executor = JobExecutor()
    seen = []
    
    def bad_hook(job_id, task):
        raise RuntimeError("hook failed")
    
    executor.on_complete(bad_hook)
    executor.on_complete(lambda job_id, task: seen.append(job_id))
    
    executor.submit(5, asyncio.sleep(0))
    await executor.drain()
    
    assert seen == [5]


@pytest.mark.asyncio
async def test_shutdown_cancels_everything():
    executor = JobExecutor()
    tasks = [executor.submit(i, asyncio.Event().wait()) for i in range(3)]
    await asyncio.sleep(0)
    
    await executor.shutdown()
    
    assert all(t.cancelled() for t in tasks)
    assert executor.running_count == 0


@pytest.mark.asyncio
async def test_cancel_handler_runs_when_job_never_started():
    executor = JobExecutor()
    started, handled = [], []
    
    async def job():
        started.append(True)
    
    async def handler():
        handled.append(3)
    
    task = executor.submit(3, job(), on_cancel=handler)
    assert executor.cancel(3) is True
    await executor.drain()
    
    assert task.cancelled()
    assert started == []
    assert handled == [3]


@pytest.mark.asyncio
async def test_shutdown_waits_for_cancel_handlers():
    executor = JobExecutor()
    handled = []
    
    async def handler(job_id):
        await asyncio.sleep(0)
        handled.append(job_id)
    
    for i in range(2):
        executor.submit(i, asyncio.Event().wait(), on_cancel=lambda i=i: handler(i))
    
    await executor.shutdown()
    
    assert sorted(handled) == [0, 1]
