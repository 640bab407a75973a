import pytest
from pydantic import ValidationError

from tests.conftest import make_settings


def test_defaults():
    settings = make_settings()
    assert settings.STORAGE_BACKEND == "memory"
    assert settings.DEFAULT_USER_ID == "standalone-user"
    assert settings.PROGRESS_CHECKPOINTS["movie"] == (10, 80)
    assert settings.PROGRESS_CHECKPOINTS["analysis"] == (25, 95)
    assert settings.STAMP_COMPLETED_AT_ON_ERROR is False
    assert settings.STRICT_RESULT_PARSING is False


def test_api_key_is_stripped():
    assert make_settings(GROQ_API_KEY="  gsk_abc\n").GROQ_API_KEY == "gsk_abc"


def test_backend_is_normalised():
    assert make_settings(STORAGE_BACKEND="SQL").STORAGE_BACKEND == "sql"


def test_unknown_backend_rejected():
    with pytest.raises(ValidationError):
        make_settings(STORAGE_BACKEND="mongo")


@pytest.mark.parametrize("checkpoint", [(50, 10), (10, 100), (-1, 50)])
def test_bad_checkpoints_rejected(checkpoint):
    with pytest.raises(ValidationError):
        make_settings(PROGRESS_CHECKPOINTS={**make_settings().PROGRESS_CHECKPOINTS, "movie": checkpoint})


def test_all_types_need_checkpoints():
    with pytest.raises(ValidationError, match="music"):
        make_settings(PROGRESS_CHECKPOINTS={"movie": (1, 2), "voice": (1, 2), "analysis": (1, 2)})
