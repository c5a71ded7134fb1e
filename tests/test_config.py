"""config.py 테스트"""

import os
import sys
from pathlib import Path
from unittest.mock import patch

sys.path.insert(0, str(Path(__file__).parent.parent))

from landed_cost.core import config as config_module
from landed_cost.core.config import DEFAULT_CONFIG, EngineConfig, get_settings, reload_settings


class TestEngineConfigDefaults:
    """기본값 테스트"""

    def test_defaults(self):
        config = EngineConfig()
        assert config.tariff_api_url is None
        assert config.carrier_api_url is None
        assert config.tier_timeout_seconds == 5.0
        assert config.http_timeout_seconds == 10.0
        assert config.duty_cache_ttl_seconds == 86400
        assert config.log_level == "INFO"

    def test_default_config_is_valid(self):
        assert DEFAULT_CONFIG.validate() == []


class TestEngineConfigValidate:
    """validate() 테스트"""

    def test_non_positive_timeout(self):
        errors = EngineConfig(tier_timeout_seconds=0).validate()
        assert any("tier_timeout_seconds" in e for e in errors)

    def test_negative_ttl(self):
        errors = EngineConfig(duty_cache_ttl_seconds=-1).validate()
        assert any("duty_cache_ttl_seconds" in e for e in errors)

    def test_non_http_url(self):
        errors = EngineConfig(tariff_api_url="ftp://tariffs.example.com").validate()
        assert errors == ["tariff_api_url must be an http(s) URL"]

    def test_multiple_problems(self):
        config = EngineConfig(http_timeout_seconds=-1, carrier_api_url="carrier.local")
        assert len(config.validate()) == 2


class TestFromEnv:
    """환경변수 로드 테스트"""

    def test_reads_environment(self, tmp_path):
        env = {
            "LANDED_COST_TARIFF_API_URL": "https://tariffs.example.com",
            "LANDED_COST_API_KEY": "secret",
            "LANDED_COST_TIER_TIMEOUT": "2.5",
            "LANDED_COST_DUTY_CACHE_TTL": "60",
            "LOG_LEVEL": "DEBUG",
        }
        with patch.dict(os.environ, env, clear=True):
            config = EngineConfig.from_env(dotenv_path=str(tmp_path / "missing.env"))

        assert config.tariff_api_url == "https://tariffs.example.com"
        assert config.carrier_api_url is None
        assert config.api_key == "secret"
        assert config.tier_timeout_seconds == 2.5
        assert config.http_timeout_seconds == 10.0
        assert config.duty_cache_ttl_seconds == 60
        assert config.log_level == "DEBUG"

    def test_reads_dotenv_file(self, tmp_path):
        """.env 파일 로드"""
        dotenv = tmp_path / ".env"
        dotenv.write_text(
            "LANDED_COST_CARRIER_API_URL=https://carrier.example.com\n"
            "LANDED_COST_HTTP_TIMEOUT=3\n",
            encoding="utf-8",
        )
        with patch.dict(os.environ, {}, clear=True):
            config = EngineConfig.from_env(dotenv_path=str(dotenv))

        assert config.carrier_api_url == "https://carrier.example.com"
        assert config.http_timeout_seconds == 3.0

    def test_empty_url_treated_as_unset(self, tmp_path):
        with patch.dict(os.environ, {"LANDED_COST_TARIFF_API_URL": ""}, clear=True):
            config = EngineConfig.from_env(dotenv_path=str(tmp_path / "missing.env"))
        assert config.tariff_api_url is None


class TestSettingsInstance:
    """get_settings / reload_settings 테스트"""

    def teardown_method(self):
        config_module._settings = None

    def test_reload_and_reuse(self):
        with patch.dict(os.environ, {"LANDED_COST_TIER_TIMEOUT": "7"}, clear=True), \
                patch("landed_cost.core.config.load_dotenv"):
            first = reload_settings()
            assert get_settings() is first
            assert first.tier_timeout_seconds == 7.0
