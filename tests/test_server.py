import uvicorn

from app.api import server


def test_main_serves_app_with_env_bind(monkeypatch):
    calls = []
    monkeypatch.setattr(uvicorn, "run", lambda *args, **kwargs: calls.append((args, kwargs)))
    monkeypatch.setenv("HOST", "0.0.0.0")
    monkeypatch.setenv("PORT", "9001")
    monkeypatch.setenv("LOG_LEVEL", "WARNING")

    server.main()

    [(args, kwargs)] = calls
    assert args == ("app.api.app:app",)
    assert kwargs == {"host": "0.0.0.0", "port": 9001, "log_level": "warning"}
