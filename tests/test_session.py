"""Session state machine and the pi / primes / bench / help flows."""

import json

import pytest

from gensuite.config import Config
from gensuite.models import Intent, Outcome, WorkloadKind
from gensuite.session import FALLBACK_RESPONSES, State, group_primes, parse_primes

from conftest import FakeEngine, ScriptedPrompter

PI = WorkloadKind.PI
PRIMES = WorkloadKind.PRIMES


def test_parse_primes_skips_garbage():
    assert parse_primes("2, 3, x, 5,, 7") == [2, 3, 5, 7]


def test_group_primes():
    assert group_primes([2, 3, 5, 7, 11], 2) == [[2, 3], [5, 7], [11]]


# --- pi flow ---

def test_pi_one_probe_one_full_call(make_session, output):
    engine = FakeEngine({PI: 1000.0})
    prompter = ScriptedPrompter("start", 20000, "no")
    make_session(engine, prompter).pi_flow()

    assert engine.calls == [(PI, 30), (PI, 20000)]
    text = output()
    assert "3." + "1" * 20000 in text
    assert "Estimate: 20.0s (~1000.0 digits/sec)" in text
    assert "Completed in 20.0s (1000.0 digits/sec)" in text


def test_pi_never_shows_cap_dialog(make_session):
    # 20000 digits at 1 digit/sec would be hours; pi is still not capped
    engine = FakeEngine({PI: 1.0})
    prompter = ScriptedPrompter("start", 20000, "no")
    make_session(engine, prompter).pi_flow()

    assert "Adjust request?" not in prompter.asked
    assert engine.calls == [(PI, 30), (PI, 20000)]


def test_pi_back_does_nothing(make_session):
    engine = FakeEngine()
    make_session(engine, ScriptedPrompter("back")).pi_flow()
    assert engine.calls == []


def test_pi_out_of_range_reasks(make_session):
    engine = FakeEngine({PI: 1000.0})
    prompter = ScriptedPrompter("start", 0, 2_000_001, 50, "no")
    make_session(engine, prompter).pi_flow()
    assert prompter.rejected == [0, 2_000_001]
    assert engine.calls == [(PI, 30), (PI, 50)]


def test_pi_export_then_home(make_session, output, tmp_path):
    engine = FakeEngine({PI: 1000.0})
    prompter = ScriptedPrompter("start", 5, "yes", "pi")
    make_session(engine, prompter).pi_flow()

    assert (tmp_path / "pi.txt").read_text(encoding="utf-8") == "Pi digits (5)\n3.11111\n"
    assert "v1.0.0" in output()


# --- primes flow ---

def test_primes_under_budget(make_session, output):
    engine = FakeEngine({PRIMES: 100.0})
    prompter = ScriptedPrompter("start", 12, 5, "no")
    make_session(engine, prompter).primes_flow()

    assert engine.calls == [(PRIMES, 10), (PRIMES, 12)]
    assert "Adjust request?" not in prompter.asked
    text = output()
    assert "2, 3, 5, 7, 11\n13, 17, 19, 23, 29\n31, 37\n" in text


def test_primes_cap_runs_once_at_capped_magnitude(make_session):
    engine = FakeEngine({PRIMES: 100.0})  # 30s budget → 3000
    prompter = ScriptedPrompter("start", 5000, 5, Outcome.CAPPED, "no")
    make_session(engine, prompter).primes_flow()

    assert engine.calls == [(PRIMES, 10), (PRIMES, 3000)]
    assert (PRIMES, 5000) not in engine.calls


def test_primes_cancel_makes_no_full_call(make_session, output):
    engine = FakeEngine({PRIMES: 100.0})
    prompter = ScriptedPrompter("start", 5000, 5, Outcome.CANCELLED)
    make_session(engine, prompter).primes_flow()

    assert engine.calls == [(PRIMES, 10)]
    assert "Cancelled." in output()


def test_primes_retry_reprobes_and_regroups(make_session, output):
    engine = FakeEngine({PRIMES: 100.0})
    prompter = ScriptedPrompter("start", 5000, 5, Outcome.RETRY, 20, 10, "no")
    make_session(engine, prompter).primes_flow()

    assert engine.calls == [(PRIMES, 10), (PRIMES, 10), (PRIMES, 20)]
    assert "2, 3, 5, 7, 11, 13, 17, 19, 23, 29\n" in output()


def test_primes_export_text(make_session, tmp_path):
    engine = FakeEngine({PRIMES: 100.0})
    prompter = ScriptedPrompter("start", 4, 2, "yes", "p.txt")
    make_session(engine, prompter).primes_flow()
    assert (tmp_path / "p.txt").read_text(encoding="utf-8") == "Prime numbers (4)\n2, 3\n5, 7\n"


# --- bench flow ---

def test_bench_runs_selected_suites_without_calibration(make_session, output):
    engine = FakeEngine()
    prompter = ScriptedPrompter("start", 45, [WorkloadKind.BENCH_SIEVE, WorkloadKind.BENCH_MATMUL])
    make_session(engine, prompter).bench_flow()

    assert engine.calls == [(WorkloadKind.BENCH_SIEVE, 45), (WorkloadKind.BENCH_MATMUL, 45)]
    text = output()
    assert "System info" in text
    assert "SIEVE" in text and "MATMUL" in text
    assert "Elapsed: 0.00s" in text


# --- help / settings ---

def test_help_toggle_animations_persists(make_session, output, config_path):
    session = make_session(FakeEngine(), ScriptedPrompter("toggle"))
    session.help_flow()

    assert session.config.animations is True
    assert json.loads(config_path.read_text(encoding="utf-8"))["animations"] is True
    assert "Animations enabled." in output()
    assert "run primes" in output()


def test_help_change_scheme(make_session, output, config_path):
    session = make_session(FakeEngine(), ScriptedPrompter("colors", "sunset"))
    session.help_flow()

    assert session.config.color_scheme == "sunset"
    assert Config.load(config_path).color_scheme == "sunset"
    assert "Color scheme updated." in output()


def test_help_back_changes_nothing(make_session, config_path):
    session = make_session(FakeEngine(), ScriptedPrompter("back"))
    session.help_flow()
    assert not config_path.exists()


def test_help_toggle_with_unwritable_config_keeps_change(make_session, output, tmp_path):
    session = make_session(FakeEngine(), ScriptedPrompter("toggle"))
    session.config_path = tmp_path / "nodir" / "c.json"
    session.help_flow()

    assert session.config.animations is True
    assert "Could not save settings:" in output()
    assert "Animations enabled." in output()


# --- state machine ---

def test_empty_input_stands_by(make_session, output):
    engine = FakeEngine()
    session = make_session(engine, ScriptedPrompter())
    session.state = State.AWAITING_INPUT

    assert session.handle("   ") is None
    assert session.state is State.AWAITING_INPUT
    assert engine.calls == []
    assert "No input received. Standing by." in output()


def test_unknown_input_gets_flavor_response(make_session, output):
    session = make_session(FakeEngine(), ScriptedPrompter())
    session.state = State.AWAITING_INPUT

    assert session.handle("what time is it") is Intent.UNKNOWN
    assert session.state is State.AWAITING_INPUT
    assert any(r in output() for r in FALLBACK_RESPONSES)


def test_interactive_loop_until_exit(make_session, output):
    engine = FakeEngine()
    prompter = ScriptedPrompter("", "what time is it", "quit")
    session = make_session(engine, prompter)
    session.run_interactive()

    assert session.state is State.EXITING
    assert engine.calls == []
    assert prompter.asked.count("What would you like to run?") == 3
    assert "Later!" in output()


def test_interactive_dispatches_flows(make_session):
    engine = FakeEngine({PRIMES: 100.0})
    prompter = ScriptedPrompter("run primes", "start", 5, 5, "no", "exit")
    session = make_session(engine, prompter)
    session.run_interactive()

    assert engine.calls == [(PRIMES, 5), (PRIMES, 5)]
    assert session.state is State.EXITING


def test_failed_export_returns_to_prompt(make_session, output, tmp_path):
    engine = FakeEngine({PI: 1000.0})
    prompter = ScriptedPrompter("pi", "start", 5, "yes", "out", "exit")
    session = make_session(engine, prompter)
    session.save_dir = tmp_path / "does-not-exist"
    session.run_interactive()

    assert session.state is State.EXITING
    assert engine.calls == [(PI, 5), (PI, 5)]
    assert "Could not save:" in output()
    assert "Later!" in output()


def test_interactive_eof_exits_cleanly(make_session, output):
    session = make_session(FakeEngine(), ScriptedPrompter())
    session.run_interactive()
    assert session.state is State.EXITING
    assert "Later!" in output()


def test_one_shot_intent_does_not_loop(make_session):
    prompter = ScriptedPrompter("back")
    make_session(FakeEngine(), prompter).run(Intent.PI)
    assert "What would you like to run?" not in prompter.asked


def test_unknown_cli_intent_enters_loop(make_session):
    prompter = ScriptedPrompter("exit")
    session = make_session(FakeEngine(), prompter)
    session.run(Intent.UNKNOWN)
    assert prompter.asked == ["What would you like to run?"]
    assert session.state is State.EXITING


@pytest.mark.parametrize("seed", [0, 1, 2])
def test_flavor_response_is_from_fixed_set(make_session, output, seed):
    session = make_session(FakeEngine(), ScriptedPrompter(), seed=seed)
    session.dispatch(Intent.UNKNOWN)
    printed = output().strip()
    assert printed in FALLBACK_RESPONSES
