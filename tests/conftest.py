import pytest

from log_sentinel import config, models

CHAT_COMPLETIONS_URL = "https://generativelanguage.googleapis.com/v1beta/openai/chat/completions"

SAMPLE_FILES = [
    ("app.log", "2024-05-01 12:00:01 ERROR NullPointerException at Foo.java:42"),
    ("settings.yaml", "server:\n  port: 8080\n"),
    ("gc.log", "[GC (Allocation Failure) 512K->128K(1024K), 0.0012 secs]"),
]


class StubAnalysisClient:
    """Records every analyze() call and answers with a canned reply."""

    def __init__(self, reply: str = "DIAGNOSIS: CONFIGURATION"):
        self.reply = reply
        self.calls: list[dict] = []

    async def analyze(self, current_message, history, files, repo_context) -> str:
        self.calls.append({
            "current_message": current_message,
            "history": list(history),
            "files": list(files),
            "repo_context": repo_context,
        })
        return self.reply


def completion_payload(content: str | None) -> dict:
    return {
        "id": "chatcmpl-test",
        "object": "chat.completion",
        "created": 0,
        "model": "gemini-3-pro-preview",
        "choices": [
            {
                "index": 0,
                "finish_reason": "stop",
                "message": {"role": "assistant", "content": content},
            }
        ],
    }


@pytest.fixture(autouse=True)
def api_key_env(monkeypatch):
    monkeypatch.setenv("API_KEY", "test-key")
    config.get_config.cache_clear()
    yield
    config.get_config.cache_clear()


@pytest.fixture
def sample_files():
    return [
        models.LogFile(name=name, content=content, kind="config" if name.endswith(".yaml") else "log")
        for name, content in SAMPLE_FILES
    ]


@pytest.fixture
def repo_context():
    return models.RepoContext(
        repo_url="https://bitbucket.org/acme/node-agent",
        branch="release/2.3",
        build_version="v2.3.1-9f8e7d",
        has_access=True,
        custom_snippet="public void handle() { foo.bar(); }",
    )


@pytest.fixture
def stub_client():
    return StubAnalysisClient()
