import csv

import pytest

import experiments


def test_generators_are_reproducible():
    for name in experiments.GENERATOR_REGISTRY:
        a = experiments.generate_dataset(name, 512, seed=1)
        assert len(a) == 512
        assert a == experiments.generate_dataset(name, 512, seed=1)


def test_unknown_generator():
    with pytest.raises(ValueError):
        experiments.generate_dataset("nope", 10, seed=0)


def test_run_one_metrics():
    row = experiments.run_one(b"hello")
    assert row.correctness_ok == 1
    assert row.unique_symbols == 4
    assert row.compressed_bytes == 2
    assert row.pad_bits == 6
    assert row.bits_per_symbol == pytest.approx(2.0)
    assert row.max_code_length == 2


def test_run_one_single_symbol():
    row = experiments.run_one(b"A" * 100)
    assert row.correctness_ok == 1
    assert row.bits_per_symbol == pytest.approx(1.0)


def test_main_writes_csv_and_charts(tmp_path):
    outdir = tmp_path / "results"
    rc = experiments.main([
        "--outdir", str(outdir), "--runs", "2", "--size_kb", "1",
        "--generators", "uniform16,single_symbol",
        "--min_kb", "1", "--max_kb", "2", "--scaling_generators", "english_like",
    ])
    assert rc == 0

    with (outdir / "metrics.csv").open(encoding="utf-8") as f:
        rows = list(csv.DictReader(f))
    assert {r["exp_name"] for r in rows} == {"distribution", "size_scaling"}
    assert all(r["correctness_ok"] == "1" for r in rows)

    with (outdir / "summary.csv").open(encoding="utf-8") as f:
        summary = list(csv.DictReader(f))
    assert all(s["correctness_ok_rate"] == "1.0" for s in summary)

    assert (outdir / "distribution_compression_ratio.png").exists()
    assert (outdir / "scaling_time_english_like.png").exists()
