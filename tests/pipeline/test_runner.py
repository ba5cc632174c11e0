from __future__ import annotations

import json
from pathlib import Path

import pytest
from site_bundler.pipeline import BuildContext, PipelineRunner


def _ok(ctx: BuildContext):
    return {"value": 1, "_warnings": ["heads up"], "_metrics": {"n": 2}}


def _boom(ctx: BuildContext):
    raise RuntimeError("boom")


def test_non_fatal_failure_continues(tmp_path: Path, make_settings, logger) -> None:
    seen: list[str] = []

    def _last(ctx: BuildContext):
        seen.append(ctx.build_id)
        return None

    runner = PipelineRunner(
        stages=[
            PipelineRunner.fn("first", _ok),
            PipelineRunner.fn("optional", _boom, fatal=False),
            PipelineRunner.fn("last", _last),
        ],
        logger=logger,
    )
    out = runner.run(
        settings=make_settings(tmp_path),
        command="dev",
        production=False,
        build_id="run1",
    )

    assert out.exit_code == 0
    assert seen == ["run1"]
    assert [(s.stage, s.status) for s in out.report.stages] == [
        ("first", "success"),
        ("optional", "failed"),
        ("last", "success"),
    ]
    first = out.report.stages[0]
    assert first.outputs == {"value": 1}
    assert first.warnings == ["heads up"]
    assert first.metrics == {"n": 2}
    assert out.report.stages[1].error.message == "boom"

    report = json.loads(out.report_path.read_text(encoding="utf-8"))
    assert report["status"] == "success"
    assert report["environment"] == "development"

    events = [
        json.loads(line)
        for line in (tmp_path / ".runs" / "run1" / "events.jsonl")
        .read_text(encoding="utf-8")
        .splitlines()
    ]
    types = [e["type"] for e in events]
    assert types[0] == "run.env"
    assert types[1] == "run.start"
    assert types[-1] == "run.finish"
    assert "stage.failed" in types and "stage.warn" in types


def test_fatal_failure_stops(tmp_path: Path, make_settings, logger) -> None:
    def _never(ctx: BuildContext):
        raise AssertionError("must not run")

    runner = PipelineRunner(
        stages=[
            PipelineRunner.fn("first", _ok),
            PipelineRunner.fn("breaks", _boom),
            PipelineRunner.fn("never", _never),
        ],
        logger=logger,
    )
    out = runner.run(settings=make_settings(tmp_path), command="prod", production=True)

    assert out.exit_code == 1
    assert out.report.status == "failed"
    assert [s.stage for s in out.report.stages] == ["first", "breaks"]
    assert out.report.fatal_failure is not None
    assert out.report.fatal_failure.error.exc_type == "RuntimeError"


def test_non_dict_output_fails_the_stage(tmp_path: Path, make_settings, logger) -> None:
    runner = PipelineRunner(
        stages=[PipelineRunner.fn("bad", lambda ctx: ["nope"])], logger=logger
    )
    out = runner.run(settings=make_settings(tmp_path), command="dev", production=False)
    assert out.exit_code == 1
    assert out.report.stages[0].error.exc_type == "TypeError"


def test_duplicate_stage_ids_rejected(logger) -> None:
    with pytest.raises(ValueError, match="Duplicate"):
        PipelineRunner(
            stages=[PipelineRunner.fn("a", _ok), PipelineRunner.fn("a", _ok)],
            logger=logger,
        )
