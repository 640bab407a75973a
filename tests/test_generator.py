"""Generation state machine: pending -> processing -> completed | error."""

import asyncio

import pytest

from app.schemas.generation import GenerationCreate, GenerationStatus, MovieGenerateRequest
from app.schemas.project import ProjectCreate, ProjectPatch, ProjectStatus, ProjectType
from app.services.generations import GenerationService
from app.services.store import MemoryStore
from app.workers.base import ModelInvocationError
from app.workers.executor import JobExecutor
from app.workers.generator import CANCELLED_MESSAGE, GenerationRunner, parse_result
from app.workers.profiles import build_profiles
from tests.conftest import make_settings
from tests.fakes import FakeLLM

USER = "standalone-user"

INPUTS = {
    ProjectType.MOVIE: {"script": "A heist at dawn", "genre": "thriller", "quality": "4k",
                        "duration": "60", "audio_enhancement": ["dolby"]},
    ProjectType.MUSIC: {"lyrics": "la la la", "genre": "pop", "style": "upbeat", "duration": "120"},
    ProjectType.VOICE: {"text": "Hello there", "voice": "warm", "style": "calm", "speed": 1.25},
    ProjectType.ANALYSIS: {"content": "Some essay", "analysis_type": "sentiment"},
}


def _runner(store, broadcaster, llm, strict=False):
    profiles = build_profiles(make_settings().PROGRESS_CHECKPOINTS)
    return GenerationRunner(store, broadcaster, llm, profiles, strict_parsing=strict)


def _open_job(store, kind=ProjectType.MOVIE):
    project = store.create_project(ProjectCreate(title="Demo", type=kind), user_id=USER)
    generation = store.create_generation(
        GenerationCreate(
            project_id=project.id, user_id=USER, type=kind,
            prompt="prompt", model="fake-model",
        )
    )
    return project, generation


@pytest.mark.asyncio
async def test_successful_run_updates_generation_and_project(memory_store, broadcaster, observer):
    llm = FakeLLM(content='{"scenes": [{"id": "scene_1"}], "metadata": {"genre": "thriller"}}')
    project, generation = _open_job(memory_store)
    
    final = await _runner(memory_store, broadcaster, llm).run(generation.id, INPUTS[ProjectType.MOVIE])
    
    assert final.status == GenerationStatus.COMPLETED
    assert final.progress == 100
    assert final.result["metadata"] == {"genre": "thriller"}
    assert final.completed_at is not None
    
    project = memory_store.get_project(project.id)
    assert project.status == ProjectStatus.COMPLETED
    assert project.progress == 100
    assert project.content == final.result
    
    assert observer.kinds == ["generation_progress", "generation_progress", "generation_completed"]
    assert [e["data"]["progress"] for e in observer.sent] == [10, 80, 100]
    assert observer.sent[0]["data"]["status"] == "processing"
    assert all(e["data"]["id"] == generation.id for e in observer.sent)
    assert observer.sent[-1]["data"]["completedAt"] is not None


@pytest.mark.asyncio
@pytest.mark.parametrize("kind,checkpoints", [
    (ProjectType.MOVIE, [10, 80]),
    (ProjectType.MUSIC, [15, 85]),
    (ProjectType.VOICE, [20, 90]),
    (ProjectType.ANALYSIS, [25, 95]),
])
async def test_progress_checkpoints_per_type(memory_store, broadcaster, observer, kind, checkpoints):
    _, generation = _open_job(memory_store, kind)
    await _runner(memory_store, broadcaster, FakeLLM(content="{}")).run(generation.id, INPUTS[kind])
    progress = [e["data"]["progress"] for e in observer.sent if e["type"] == "generation_progress"]
    assert progress == checkpoints


@pytest.mark.asyncio
async def test_model_failure_ends_in_error(memory_store, broadcaster, observer):
    llm = FakeLLM(error=ModelInvocationError("provider unavailable"))
    project, generation = _open_job(memory_store)
    
    final = await _runner(memory_store, broadcaster, llm).run(generation.id, INPUTS[ProjectType.MOVIE])
    
    assert final.status == GenerationStatus.ERROR
    assert final.error == "provider unavailable"
    assert final.completed_at is None
    assert final.progress == 10
    
    project = memory_store.get_project(project.id)
    assert project.status == ProjectStatus.ERROR
    assert project.progress == 0
    
    assert observer.kinds == ["generation_progress", "generation_error"]
    assert observer.sent[-1]["data"]["error"] == "provider unavailable"


@pytest.mark.asyncio
async def test_failure_keeps_a_project_that_is_already_complete(memory_store, broadcaster, observer):
    project, generation = _open_job(memory_store)
    memory_store.update_project(
        project.id, ProjectPatch(status=ProjectStatus.COMPLETED, progress=100)
    )
    llm = FakeLLM(error=ModelInvocationError("provider unavailable"))
    
    final = await _runner(memory_store, broadcaster, llm).run(generation.id, INPUTS[ProjectType.MOVIE])
    
    assert final.status == GenerationStatus.ERROR
    project = memory_store.get_project(project.id)
    assert (project.status, project.progress) == (ProjectStatus.COMPLETED, 100)
    assert observer.kinds[-1] == "generation_error"


@pytest.mark.asyncio
async def test_unexpected_exception_is_recorded(memory_store, broadcaster, observer):
    _, generation = _open_job(memory_store)
    final = await _runner(memory_store, broadcaster, FakeLLM(error=RuntimeError())).run(
        generation.id, INPUTS[ProjectType.MOVIE]
    )
    assert final.status == GenerationStatus.ERROR
    assert final.error == "RuntimeError"


@pytest.mark.asyncio
async def test_missing_prompt_field_fails_without_model_call(memory_store, broadcaster, observer):
    llm = FakeLLM()
    _, generation = _open_job(memory_store)
    final = await _runner(memory_store, broadcaster, llm).run(generation.id, {"script": ""})
    assert final.status == GenerationStatus.ERROR
    assert "script" in final.error
    assert llm.calls == []


@pytest.mark.asyncio
async def test_malformed_json_completes_with_empty_result(memory_store, broadcaster, observer):
    _, generation = _open_job(memory_store)
    final = await _runner(memory_store, broadcaster, FakeLLM(content="not json {")).run(
        generation.id, INPUTS[ProjectType.MOVIE]
    )
    assert final.status == GenerationStatus.COMPLETED
    assert final.result == {}
    assert observer.kinds[-1] == "generation_completed"


@pytest.mark.asyncio
async def test_malformed_json_fails_in_strict_mode(memory_store, broadcaster, observer):
    project, generation = _open_job(memory_store)
    final = await _runner(memory_store, broadcaster, FakeLLM(content="not json {"), strict=True).run(
        generation.id, INPUTS[ProjectType.MOVIE]
    )
    assert final.status == GenerationStatus.ERROR
    assert "invalid JSON" in final.error
    assert memory_store.get_project(project.id).status == ProjectStatus.ERROR
    assert observer.kinds == ["generation_progress", "generation_progress", "generation_error"]


@pytest.mark.asyncio
async def test_error_stamps_completed_at_when_configured(clock, broadcaster):
    store = MemoryStore(clock=clock, stamp_completed_on_error=True)
    _, generation = _open_job(store)
    final = await _runner(store, broadcaster, FakeLLM(error=ModelInvocationError("x"))).run(
        generation.id, INPUTS[ProjectType.MOVIE]
    )
    assert final.completed_at is not None


@pytest.mark.asyncio
async def test_deleted_project_does_not_block_completion(memory_store, broadcaster, observer):
    project, generation = _open_job(memory_store)
    memory_store.delete_project(project.id)
    final = await _runner(memory_store, broadcaster, FakeLLM()).run(
        generation.id, INPUTS[ProjectType.MOVIE]
    )
    assert final.status == GenerationStatus.COMPLETED
    assert memory_store.get_project(project.id) is None


@pytest.mark.asyncio
async def test_unknown_generation_is_a_no_op(memory_store, broadcaster, observer):
    assert await _runner(memory_store, broadcaster, FakeLLM()).run(404, {}) is None
    assert observer.sent == []


@pytest.mark.asyncio
async def test_cancellation_ends_in_single_error_event(memory_store, broadcaster, observer):
    gate = asyncio.Event()
    llm = FakeLLM(gate=gate)
    project, generation = _open_job(memory_store)
    executor = JobExecutor()
    
    task = executor.submit(
        generation.id,
        _runner(memory_store, broadcaster, llm).run(generation.id, INPUTS[ProjectType.MOVIE]),
    )
    while not llm.calls:
        await asyncio.sleep(0)
    
    assert executor.cancel(generation.id) is True
    await executor.drain()
    
    assert task.cancelled()
    final = memory_store.get_generation(generation.id)
    assert final.status == GenerationStatus.ERROR
    assert final.error == CANCELLED_MESSAGE
    assert memory_store.get_project(project.id).status == ProjectStatus.ERROR
    assert observer.kinds == ["generation_progress", "generation_error"]


def _service(store, broadcaster, executor):
    runner = _runner(store, broadcaster, FakeLLM(content='{"ok": true}'))
    return GenerationService(store, broadcaster, executor, runner, model_name="fake-model")


@pytest.mark.asyncio
async def test_cancel_before_first_step_still_fails_job(store, broadcaster, observer):
    project = store.create_project(ProjectCreate(title="Demo", type=ProjectType.MOVIE), user_id=USER)
    executor = JobExecutor()
    service = _service(store, broadcaster, executor)
    
    generation = await service.start(
        ProjectType.MOVIE, MovieGenerateRequest(project_id=project.id, script="A heist"), USER
    )
    assert service.cancel(generation.id) is True
    await executor.drain()
    
    final = store.get_generation(generation.id)
    assert final.status == GenerationStatus.ERROR
    assert final.error == CANCELLED_MESSAGE
    assert store.get_project(project.id).status == ProjectStatus.ERROR
    assert observer.kinds == ["generation_started", "generation_error"]


@pytest.mark.asyncio
async def test_shutdown_right_after_start_leaves_no_pending_job(store, broadcaster, observer):
    project = store.create_project(ProjectCreate(title="Demo", type=ProjectType.MOVIE), user_id=USER)
    executor = JobExecutor()
    service = _service(store, broadcaster, executor)
    
    generation = await service.start(
        ProjectType.MOVIE, MovieGenerateRequest(project_id=project.id, script="A heist"), USER
    )
    await executor.shutdown()
    
    assert store.get_generation(generation.id).status == GenerationStatus.ERROR
    assert store.get_active_generations(USER) == []
    assert observer.kinds.count("generation_error") == 1


@pytest.mark.asyncio
async def test_concurrent_jobs_only_touch_their_own_records(memory_store, broadcaster, observer):
    runner = _runner(memory_store, broadcaster, FakeLLM(content='{"ok": true}'))
    failing = _runner(memory_store, broadcaster, FakeLLM(error=ModelInvocationError("nope")))
    good_project, good = _open_job(memory_store)
    bad_project, bad = _open_job(memory_store, ProjectType.MUSIC)
    
    await asyncio.gather(
        runner.run(good.id, INPUTS[ProjectType.MOVIE]),
        failing.run(bad.id, INPUTS[ProjectType.MUSIC]),
    )
    
    assert memory_store.get_generation(good.id).status == GenerationStatus.COMPLETED
    assert memory_store.get_generation(bad.id).status == GenerationStatus.ERROR
    assert memory_store.get_project(good_project.id).status == ProjectStatus.COMPLETED
    assert memory_store.get_project(bad_project.id).status == ProjectStatus.ERROR
    
    for job_id in (good.id, bad.id):
        kinds = [e["type"] for e in observer.sent if e["data"]["id"] == job_id]
        assert kinds[-1] in ("generation_completed", "generation_error")
        assert all(k == "generation_progress" for k in kinds[:-1])


class TestParseResult:
    def test_valid_object(self):
        assert parse_result('{"a": [1, 2]}') == {"a": [1, 2]}
    
    @pytest.mark.parametrize("content", [None, "", "   ", "{oops"])
    def test_lenient_fallback(self, content):
        assert parse_result(content) == {}
    
    @pytest.mark.parametrize("content", [None, "{oops", "[1, 2]"])
    def test_strict_rejects(self, content):
        from app.workers.base import ResultParseError
        with pytest.raises(ResultParseError):
            parse_result(content, strict=True)
