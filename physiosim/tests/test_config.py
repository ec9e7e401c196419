from physiosim.config import EngineConfig, ServiceConfig


def test_defaults_without_environment() -> None:
    config = EngineConfig.from_env({})

    assert config == EngineConfig()
    assert config.serum_backend == "discrete"
    assert config.default_goal == "balanced"


def test_environment_overrides() -> None:
    config = EngineConfig.from_env(
        {
            "PHYSIOSIM_SERUM_STEP_HOURS": "2",
            "PHYSIOSIM_SERUM_BACKEND": "SciPy",
            "PHYSIOSIM_EVIDENCE_BLEND": "1.7",
            "PHYSIOSIM_DEFAULT_GOAL": " Strength ",
            "PHYSIOSIM_MAX_ACCUMULATION_RATIO": "4",
        }
    )

    assert config.serum_step_hours == 2.0
    assert config.serum_backend == "scipy"
    assert config.evidence_blend == 1.0
    assert config.default_goal == "strength"
    assert config.max_accumulation_ratio == 4.0


def test_custom_prefix() -> None:
    config = EngineConfig.from_env({"SIM_SERUM_MIN_DAYS": "14"}, prefix="SIM_")

    assert config.serum_min_days == 14.0


def test_malformed_values_keep_defaults() -> None:
    config = EngineConfig.from_env(
        {
            "PHYSIOSIM_SERUM_STEP_HOURS": "fast",
            "PHYSIOSIM_SERUM_HALF_LIFE_MULTIPLE": "0.5",
            "PHYSIOSIM_MAX_ACCUMULATION_RATIO": "nan",
            "PHYSIOSIM_EVIDENCE_BLEND": "abc",
            "PHYSIOSIM_SERUM_BACKEND": "rk4",
        }
    )

    assert config.serum_step_hours == 4.0
    assert config.serum_half_life_multiple == 6.0
    assert config.max_accumulation_ratio == 6.0
    assert config.evidence_blend == 0.4
    assert config.serum_backend == "discrete"


def test_reversed_window_is_swapped() -> None:
    config = EngineConfig.from_env({"PHYSIOSIM_SERUM_MIN_DAYS": "200", "PHYSIOSIM_SERUM_MAX_DAYS": "50"})

    assert (config.serum_min_days, config.serum_max_days) == (50.0, 200.0)


def test_negative_blend_clamps_to_zero() -> None:
    assert EngineConfig.from_env({"PHYSIOSIM_EVIDENCE_BLEND": "-0.3"}).evidence_blend == 0.0


def test_cors_origins() -> None:
    assert ServiceConfig.from_env({}).cors_origins == ("*",)
    assert ServiceConfig.from_env({"CORS_ORIGINS": " , "}).cors_origins == ("*",)
    assert ServiceConfig.from_env({"CORS_ORIGINS": "http://a.test, http://b.test ,"}).cors_origins == (
        "http://a.test",
        "http://b.test",
    )
