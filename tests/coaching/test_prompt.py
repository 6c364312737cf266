"""Tests for coaching prompt construction."""

from barista_log import Bean, Extraction, build_prompt


def _shot(bean=None, **values):
    return Extraction(bean=Bean(name=bean) if bean else None, **values)


def test_prompt_describes_target():
    target = _shot("Kenya AA", grind_setting="12", dose_in=18, yield_out=36, time_seconds=28.7, notes="bright")

    assert build_prompt(target) == (
        "Analyze this shot:\n"
        "Bean: Kenya AA\n"
        "Grind: 12\n"
        "Dose: 18.0g\n"
        "Yield: 36.0g\n"
        "Ratio: 1:2.0\n"
        "Time: 28s\n"
        "Notes: bright\n"
    )


def test_prompt_omits_missing_measurements():
    prompt = build_prompt(_shot(grind_setting="12", dose_in=0, yield_out=36))

    assert "Bean: Unknown\n" in prompt
    assert "Dose: 0.0g\n" in prompt
    assert "Ratio" not in prompt
    assert "Time" not in prompt
    assert "Notes" not in prompt


def test_prompt_includes_two_same_bean_shots():
    """Only the first two history entries with the target's bean are used."""
    target = _shot("X", grind_setting="12", dose_in=18, yield_out=36)
    history = [
        _shot("X", grind_setting="11", time_seconds=31),
        _shot("Y", grind_setting="99", time_seconds=40),
        _shot("X", grind_setting="10"),
        _shot("X", grind_setting="9", time_seconds=22),
    ]

    prompt = build_prompt(target, history)

    assert "Ratio: 1:2.0" in prompt
    assert prompt.endswith("\nRecent shots with same bean: Grind 11 / 31s; Grind 10; ")
    assert "Grind 99" not in prompt
    assert "Grind 9;" not in prompt


def test_prompt_without_matching_history():
    target = _shot("X", grind_setting="12")

    prompt = build_prompt(target, [_shot("Y", grind_setting="8")])

    assert "Recent shots" not in prompt


def test_prompt_matches_unknown_bean_history():
    prompt = build_prompt(_shot(grind_setting="12"), [_shot(grind_setting="14", time_seconds=25)])

    assert prompt.endswith("Recent shots with same bean: Grind 14 / 25s; ")


def test_prompt_filters_history_by_bean():
    target = _shot("X", grind_setting="15", dose_in=18.0, yield_out=36.0, time_seconds=28.0)
    history = [
        _shot("X", grind_setting="14", time_seconds=25),
        _shot("Y", grind_setting="20", time_seconds=33),
        _shot("X", grind_setting="16", time_seconds=30),
    ]

    prompt = build_prompt(target, history)

    assert "Ratio: 1:2.0" in prompt
    assert "Grind 14 / 25s; " in prompt
    assert "Grind 16 / 30s; " in prompt
    assert "Grind 20" not in prompt
