import pytest

from squirrelgraph.config import Settings, load_settings


class TestSettings:

    def test_defaults(self):
        assert load_settings(environ={}) == Settings()

    def test_environment_overrides(self):
        settings = load_settings(environ={
            "SQUIRRELGRAPH_LOG_LEVEL": "debug",
            "SQUIRRELGRAPH_OUT_DIR": "mods/out",
            "SQUIRRELGRAPH_STRICT": "yes",
            "SQUIRRELGRAPH_EMBED_PROJECT": "1",
            "SQUIRRELGRAPH_HOST": "0.0.0.0",
            "SQUIRRELGRAPH_PORT": "8080",
        })
        assert settings == Settings(
            log_level="DEBUG", out_dir="mods/out", strict=True,
            embed_project=True, host="0.0.0.0", port=8080,
        )

    def test_false_flags(self):
        settings = load_settings(environ={"SQUIRRELGRAPH_STRICT": "off"})
        assert settings.strict is False

    def test_bad_port(self):
        with pytest.raises(ValueError, match="SQUIRRELGRAPH_PORT"):
            load_settings(environ={"SQUIRRELGRAPH_PORT": "http"})
