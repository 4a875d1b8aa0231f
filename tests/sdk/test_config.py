import pytest

from arbor_sdk import create_chat_service
from arbor_sdk.config import DEFAULT_MODEL, Settings, load_settings
from tests.helpers import ScriptedCompletion


def test_defaults_from_empty_environment():
    settings = load_settings({})
    assert settings == Settings()
    assert settings.provider == "anthropic"
    assert settings.model_id == DEFAULT_MODEL
    assert settings.max_tokens == 5000
    assert settings.labels is True


def test_values_are_parsed():
    settings = load_settings(
        {
            "ARBOR_PROVIDER": "openai",
            "ARBOR_MODEL": "gpt-4o-mini",
            "ARBOR_MAX_TOKENS": "256",
            "ARBOR_TEMPERATURE": "0.2",
            "ARBOR_LABELS": "off",
            "ARBOR_LOG_LEVEL": "debug",
        }
    )
    assert settings.provider == "openai"
    assert settings.max_tokens == 256
    assert settings.temperature == 0.2
    assert settings.labels is False
    assert settings.log_level == "DEBUG"


@pytest.mark.parametrize(
    "env",
    [{"ARBOR_MAX_TOKENS": "many"}, {"ARBOR_TIMEOUT": "soon"}, {"ARBOR_LABELS": "maybe"}],
)
def test_invalid_values_name_the_variable(env):
    name = next(iter(env))
    with pytest.raises(ValueError, match=name):
        load_settings(env)


def test_dotenv_file_does_not_override(tmp_path, monkeypatch):
    env_file = tmp_path / ".env"
    env_file.write_text("ARBOR_MODEL=from-file\nARBOR_MAX_TOKENS=42\n", encoding="utf-8")
    monkeypatch.setenv("ARBOR_MODEL", "from-env")
    monkeypatch.delenv("ARBOR_MAX_TOKENS", raising=False)

    settings = load_settings(dotenv_path=env_file)
    assert settings.model_id == "from-env"
    assert settings.max_tokens == 42


@pytest.mark.asyncio
async def test_create_chat_service_with_injected_completion():
    service = create_chat_service(Settings(labels=False), complete_fn=ScriptedCompletion(["hi"]))
    session_id = service.store.create_session()
    reply = await service.chat(session_id, "hello")
    assert reply.response == "hi"
