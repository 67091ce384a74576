"""
Benchmark: Huffman compression across data distributions and sizes

Runs the full pipeline (count -> tree -> code table -> encode -> decode) on
synthetic byte datasets, with repeated runs, and records timing and size.

Outputs (in --outdir):
  - metrics.csv     (raw row per run)
  - summary.csv     (grouped mean/stdev)
  - *.png           (charts)

How to run:
  python experiments.py --outdir results --runs 5
  python experiments.py --outdir results --runs 3 --size_kb 256 --max_kb 4096
  python experiments.py --outdir results --generators uniform256,zipf128,english_like --no_scaling
"""

from __future__ import annotations

import argparse
import csv
import io
import random
import statistics
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

import matplotlib
matplotlib.use("Agg") # charts go to files only
import matplotlib.pyplot as plt

import huffman as huff
from codec import compress_bytes, decompress_bytes


def now_ns() -> int:
    return time.perf_counter_ns()

def ns_to_ms(ns: int) -> float:
    return ns / 1_000_000.0


# Synthetic dataset generators

def _sample_cdf(rng: random.Random, cdf: List[float]) -> int:
    r = rng.random()
    lo, hi = 0, len(cdf) - 1
    while lo < hi:
        mid = (lo + hi) // 2
        if r <= cdf[mid]:
            hi = mid
        else:
            lo = mid + 1
    return lo

def _cdf(weights: List[float]) -> List[float]:
    total = sum(weights)
    cdf = []
    acc = 0.0
    for w in weights:
        acc += w / total
        cdf.append(acc)
    return cdf

def gen_uniform(size: int, alphabet: int = 256, seed: int = 0) -> bytes:
    rng = random.Random(seed)
    return bytes(rng.randrange(0, alphabet) for _ in range(size))

def gen_repetitive(size: int, dominant: int = ord('A'), dom_frac: float = 0.90, seed: int = 0) -> bytes:
    rng = random.Random(seed)
    others = [i for i in range(256) if i != dominant]
    return bytes(dominant if rng.random() < dom_frac else rng.choice(others) for _ in range(size))

def gen_zipf_like(size: int, alphabet: int = 128, s: float = 1.2, seed: int = 0) -> bytes:
    rng = random.Random(seed)
    cdf = _cdf([1.0 / ((i + 1) ** s) for i in range(alphabet)])
    return bytes(_sample_cdf(rng, cdf) for _ in range(size))

def gen_english_like(size: int, seed: int = 0) -> bytes:
    rng = random.Random(seed)
    chars = " etaoinshrdlcumwfgypbvkjxqETAOINSHRDLCUMWFGYPBVKJXQ\n"
    weights = []
    for ch in chars:
        if ch == ' ':
            weights.append(13.0)
        elif ch == '\n':
            weights.append(1.5)
        elif ch.lower() in "etaoinshrdlu":
            weights.append(6.0)
        elif ch.lower() in "cmfwgypbvk":
            weights.append(2.5)
        else:
            weights.append(1.2)
    cdf = _cdf(weights)
    return bytes(ord(chars[_sample_cdf(rng, cdf)]) for _ in range(size))

def gen_single_symbol(size: int, seed: int = 0) -> bytes:
    return b"A" * size

GENERATOR_REGISTRY: Dict[str, Callable[[int, int], bytes]] = {
    "uniform256": lambda size, seed: gen_uniform(size, alphabet=256, seed=seed),
    "uniform16": lambda size, seed: gen_uniform(size, alphabet=16, seed=seed),
    "zipf128": lambda size, seed: gen_zipf_like(size, alphabet=128, s=1.2, seed=seed),
    "repetitive90": lambda size, seed: gen_repetitive(size, dom_frac=0.90, seed=seed),
    "repetitive99": lambda size, seed: gen_repetitive(size, dom_frac=0.99, seed=seed),
    "english_like": lambda size, seed: gen_english_like(size, seed=seed),
    "single_symbol": lambda size, seed: gen_single_symbol(size, seed=seed),
}

def generate_dataset(name: str, size_bytes: int, seed: int) -> bytes:
    fn = GENERATOR_REGISTRY.get(name)
    if fn is None:
        raise ValueError(f"unknown generator {name!r} (known: {', '.join(sorted(GENERATOR_REGISTRY))})")
    return fn(size_bytes, seed)


# Experiment runner

@dataclass
class MetricRow:
    exp_name: str
    dataset_name: str
    file_size_bytes: int
    run_id: int
    unique_symbols: int

    count_ms: float
    build_tree_ms: float
    code_table_ms: float
    encode_ms: float
    decode_ms: float
    total_ms: float

    compressed_bytes: int
    pad_bits: int
    compression_ratio: float
    bits_per_symbol: float
    max_code_length: int
    correctness_ok: int # 1 or 0


def run_one(data: bytes) -> MetricRow:
    t0 = now_ns()
    ft = huff.count_frequencies(io.BytesIO(data))
    t1 = now_ns()
    root = huff.build_tree(ft)
    t2 = now_ns()
    code_table = huff.build_code_table(root)
    t3 = now_ns()
    packed = compress_bytes(code_table, data)
    t4 = now_ns()
    decoded = decompress_bytes(packed, root)
    t5 = now_ns()

    payload_bits = huff.encoded_bit_length(ft, code_table)
    return MetricRow(
        exp_name="",
        dataset_name="",
        file_size_bytes=len(data),
        run_id=0,
        unique_symbols=len(ft),
        count_ms=ns_to_ms(t1 - t0),
        build_tree_ms=ns_to_ms(t2 - t1),
        code_table_ms=ns_to_ms(t3 - t2),
        encode_ms=ns_to_ms(t4 - t3),
        decode_ms=ns_to_ms(t5 - t4),
        total_ms=ns_to_ms(t5 - t0),
        compressed_bytes=len(packed),
        pad_bits=len(packed) * 8 - payload_bits,
        compression_ratio=len(packed) / max(1, len(data)),
        bits_per_symbol=payload_bits / max(1, len(data)),
        max_code_length=huff.tree_depth(root),
        correctness_ok=1 if decoded == data else 0,
    )


def write_csv(path: Path, rows: List[MetricRow]) -> None:
    fields = list(MetricRow.__dataclass_fields__.keys())
    with path.open("w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=fields)
        w.writeheader()
        for r in rows:
            w.writerow({k: getattr(r, k) for k in fields})


SUMMARY_METRICS = ("compression_ratio", "bits_per_symbol", "encode_ms", "decode_ms", "build_tree_ms", "total_ms")

def mean_stdev(vals: List[float]) -> Tuple[float, float]:
    if len(vals) == 1:
        return vals[0], 0.0
    return statistics.mean(vals), statistics.stdev(vals)

def group_summary(rows: List[MetricRow], out_path: Path) -> None:
    """
    Group by exp_name, dataset_name, file_size_bytes and compute mean/stdev
    """
    key_to: Dict[Tuple[str, str, int], List[MetricRow]] = {}
    for r in rows:
        key_to.setdefault((r.exp_name, r.dataset_name, r.file_size_bytes), []).append(r)

    summary_fields = ["exp_name", "dataset_name", "file_size_bytes", "n_runs"]
    for m in SUMMARY_METRICS:
        summary_fields += [f"{m}_mean", f"{m}_stdev"]
    summary_fields.append("correctness_ok_rate")

    with out_path.open("w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=summary_fields)
        w.writeheader()
        for (exp_name, dataset_name, size_b), items in sorted(key_to.items()):
            row = {
                "exp_name": exp_name,
                "dataset_name": dataset_name,
                "file_size_bytes": size_b,
                "n_runs": len(items),
                "correctness_ok_rate": sum(x.correctness_ok for x in items) / len(items),
            }
            for m in SUMMARY_METRICS:
                row[f"{m}_mean"], row[f"{m}_stdev"] = mean_stdev([getattr(x, m) for x in items])
            w.writerow(row)


# Plotting

def _bar_chart(labels: List[str], values: List[float], ylabel: str, title: str, path: Path) -> None:
    x = list(range(len(labels)))
    plt.figure()
    plt.bar(x, values)
    plt.xticks(x, labels, rotation=20, ha="right")
    plt.ylabel(ylabel)
    plt.title(title)
    plt.tight_layout()
    plt.savefig(path, dpi=200)
    plt.close()

def plot_distribution(rows: List[MetricRow], outdir: Path) -> None:
    exp_rows = [r for r in rows if r.exp_name == "distribution"]
    if not exp_rows:
        return
    datasets = sorted(set(r.dataset_name for r in exp_rows))

    def mean_for(dataset: str, field: str) -> float:
        return statistics.mean(getattr(r, field) for r in exp_rows if r.dataset_name == dataset)

    _bar_chart(datasets, [mean_for(d, "compression_ratio") for d in datasets],
               "Compressed Bytes / Original Bytes", "Compression Ratio by Distribution",
               outdir / "distribution_compression_ratio.png")
    _bar_chart(datasets, [mean_for(d, "bits_per_symbol") for d in datasets],
               "Average Code Length (bits/symbol)", "Code Length by Distribution",
               outdir / "distribution_bits_per_symbol.png")

    x = list(range(len(datasets)))
    plt.figure()
    for field, label in (("encode_ms", "encode"), ("decode_ms", "decode"), ("total_ms", "total")):
        plt.plot(x, [mean_for(d, field) for d in datasets], marker="o", label=label)
    plt.xticks(x, datasets, rotation=20, ha="right")
    plt.ylabel("Time (ms)")
    plt.title("Runtime by Distribution")
    plt.legend()
    plt.tight_layout()
    plt.savefig(outdir / "distribution_time.png", dpi=200)
    plt.close()

def plot_scaling(rows: List[MetricRow], outdir: Path) -> None:
    exp_rows = [r for r in rows if r.exp_name == "size_scaling"]
    if not exp_rows:
        return

    for dist in sorted(set(r.dataset_name for r in exp_rows)):
        dist_rows = [r for r in exp_rows if r.dataset_name == dist]
        sizes = sorted(set(r.file_size_bytes for r in dist_rows))

        def mean_size(size: int, field: str) -> float:
            return statistics.mean(getattr(r, field) for r in dist_rows if r.file_size_bytes == size)

        plt.figure()
        for field, label in (("encode_ms", "encode"), ("decode_ms", "decode")):
            plt.plot(sizes, [mean_size(s, field) for s in sizes], marker="o", label=label)
        plt.xscale("log", base=2)
        plt.xlabel("File Size (bytes)")
        plt.ylabel("Time (ms)")
        plt.title(f"Runtime vs Size ({dist})")
        plt.legend()
        plt.tight_layout()
        plt.savefig(outdir / f"scaling_time_{dist}.png", dpi=200)
        plt.close()

        plt.figure()
        plt.plot(sizes, [mean_size(s, "compression_ratio") for s in sizes], marker="o")
        plt.xscale("log", base=2)
        plt.xlabel("File Size (bytes)")
        plt.ylabel("Compressed Bytes / Original Bytes")
        plt.title(f"Compression Ratio vs Size ({dist})")
        plt.tight_layout()
        plt.savefig(outdir / f"scaling_compression_ratio_{dist}.png", dpi=200)
        plt.close()


# Main

def parse_csv_list(s: str) -> List[str]:
    return [x.strip() for x in s.split(",") if x.strip()]

def run_experiments(args: argparse.Namespace) -> List[MetricRow]:
    rows: List[MetricRow] = []

    # distributions at a fixed size
    if not args.no_distribution:
        size_b = max(1, args.size_kb) * 1024
        for name in parse_csv_list(args.generators):
            for run_id in range(1, args.runs + 1):
                row = run_one(generate_dataset(name, size_b, args.seed + run_id))
                row.exp_name = "distribution"
                row.dataset_name = name
                row.run_id = run_id
                rows.append(row)

    # size scaling, powers of two from min_kb to max_kb
    if not args.no_scaling:
        sizes: List[int] = []
        s = max(1, args.min_kb) * 1024
        while s <= max(1, args.max_kb) * 1024:
            sizes.append(s)
            s *= 2
        for name in parse_csv_list(args.scaling_generators):
            for size_b in sizes:
                for run_id in range(1, args.runs + 1):
                    row = run_one(generate_dataset(name, size_b, args.seed + 10_000 + size_b + run_id))
                    row.exp_name = "size_scaling"
                    row.dataset_name = name
                    row.run_id = run_id
                    rows.append(row)
    return rows

def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Huffman compression benchmark")
    ap.add_argument("--outdir", type=str, default="results", help="Output directory for CSV and plots")
    ap.add_argument("--runs", type=int, default=5, help="Repetitions per configuration")
    ap.add_argument("--seed", type=int, default=123, help="Base random seed")

    ap.add_argument("--no_distribution", action="store_true", help="Skip the distribution experiment")
    ap.add_argument("--size_kb", type=int, default=256, help="Dataset size in KB for the distribution experiment")
    ap.add_argument("--generators", type=str, default="uniform256,zipf128,repetitive90,english_like,single_symbol",
                    help="Comma-separated generator names for the distribution experiment")

    ap.add_argument("--no_scaling", action="store_true", help="Skip the size scaling experiment")
    ap.add_argument("--min_kb", type=int, default=4, help="Smallest size in KB for size scaling")
    ap.add_argument("--max_kb", type=int, default=2048, help="Largest size in KB for size scaling")
    ap.add_argument("--scaling_generators", type=str, default="uniform256,english_like",
                    help="Comma-separated generator names for size scaling")
    return ap

def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    outdir = Path(args.outdir)
    outdir.mkdir(parents=True, exist_ok=True)

    rows = run_experiments(args)

    metrics_csv = outdir / "metrics.csv"
    summary_csv = outdir / "summary.csv"
    write_csv(metrics_csv, rows)
    group_summary(rows, summary_csv)
    plot_distribution(rows, outdir)
    plot_scaling(rows, outdir)

    ok_rate = sum(r.correctness_ok for r in rows) / max(1, len(rows))
    print(f"Wrote {len(rows)} rows to {metrics_csv}")
    print(f"Wrote grouped summary to {summary_csv}")
    print(f"Correctness rate across all runs: {ok_rate:.3f}")
    print("Charts saved in:", outdir.resolve())
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
