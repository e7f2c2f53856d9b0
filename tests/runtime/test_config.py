"""Tests for RuntimeConfig validation and environment loading."""

import pytest
from beartype.roar import BeartypeCallHintParamViolation

from taskfx import ConfigError, Runtime, RuntimeConfig


class TestRuntimeConfig:
    def test_defaults(self) -> None:
        config = RuntimeConfig()

        assert config.clock == "real"
        assert config.start_time == 0.0
        assert config.max_steps is None
        assert config.warn_unjoined is True

    def test_unknown_clock_is_rejected_at_construction(self) -> None:
        with pytest.raises(BeartypeCallHintParamViolation):
            RuntimeConfig(clock="simulated")  # type: ignore[arg-type]

    def test_wrong_field_type_is_rejected(self) -> None:
        with pytest.raises(BeartypeCallHintParamViolation):
            RuntimeConfig(max_steps="10")  # type: ignore[arg-type]

    def test_non_positive_max_steps_is_rejected(self) -> None:
        with pytest.raises(ConfigError):
            RuntimeConfig(max_steps=0)

    def test_replace_returns_new_config(self) -> None:
        config = RuntimeConfig()

        virtual = config.replace(clock="virtual", start_time=10)

        assert virtual.clock == "virtual"
        assert virtual.start_time == 10
        assert config.clock == "real"

    def test_runtime_accepts_overrides(self) -> None:
        runtime = Runtime(RuntimeConfig(max_steps=5), clock="virtual")

        assert runtime.config == RuntimeConfig(clock="virtual", max_steps=5)


class TestFromEnv:
    def test_reads_taskfx_variables(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TASKFX_CLOCK", "Virtual")
        monkeypatch.setenv("TASKFX_START_TIME", "12.5")
        monkeypatch.setenv("TASKFX_MAX_STEPS", "100")
        monkeypatch.setenv("TASKFX_WARN_UNJOINED", "off")

        config = RuntimeConfig.from_env()

        assert config == RuntimeConfig(
            clock="virtual", start_time=12.5, max_steps=100, warn_unjoined=False
        )

    def test_empty_environment_gives_defaults(self) -> None:
        assert RuntimeConfig.from_env({}) == RuntimeConfig()

    def test_overrides_win_over_environment(self) -> None:
        config = RuntimeConfig.from_env({"TASKFX_CLOCK": "virtual"}, clock="real")

        assert config.clock == "real"

    def test_zero_max_steps_means_unbounded(self) -> None:
        assert RuntimeConfig.from_env({"TASKFX_MAX_STEPS": "0"}).max_steps is None

    @pytest.mark.parametrize(
        ("name", "value"),
        [
            ("TASKFX_CLOCK", "sundial"),
            ("TASKFX_START_TIME", "soon"),
            ("TASKFX_MAX_STEPS", "many"),
            ("TASKFX_MAX_STEPS", "-3"),
            ("TASKFX_WARN_UNJOINED", "maybe"),
        ],
    )
    def test_invalid_values_raise_config_error(self, name: str, value: str) -> None:
        with pytest.raises(ConfigError, match=name):
            RuntimeConfig.from_env({name: value})

    def test_config_error_is_a_value_error(self) -> None:
        with pytest.raises(ValueError):
            RuntimeConfig.from_env({"TASKFX_CLOCK": "sundial"})
