import argparse
import logging
import sys

from . import bench, report
from .config import get_settings, parse_bit_lengths
from .drbg import MECHANISMS, mechanism_class, new_drbg, new_seed


def _hex_seed(text):
    try:
        return bytes.fromhex(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a hex string: {text!r}") from None


def _mechanism(name):
    try:
        return mechanism_class(name).NAME
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from None


def _settings(args):
    return get_settings(
        bit_lengths=getattr(args, "bits", None) or None,
        output_dir=getattr(args, "out", None),
        seed_size=getattr(args, "seed_size", None),
        reseed_interval=getattr(args, "reseed_interval", None),
        log_level=args.log_level,
    )


def _progress(name, bits, current, total):
    print(f"\r  [{current}/{total}] {name:>12} | {bits:>10} bits", end="", flush=True)


def _mechanisms(names):
    if not names:
        return [cls.NAME for cls in MECHANISMS]
    return names


def cmd_bench(args):
    s = _settings(args)
    seed = args.seed if args.seed is not None else new_seed(s.seed_size)
    drbgs = [new_drbg(name, seed) for name in _mechanisms(args.mechanism)]
    print(f"Seed: {len(seed)} bytes{' (fixed)' if args.seed is not None else ' from system entropy'}\n")

    print("Internal state sizes:")
    for d in drbgs:
        print(f"   * {d.name():>12}: {d.state_size()} bytes")

    print("\nRunning benchmarks...")
    results = bench.run_suite(drbgs, s.bit_lengths, seed, progress=_progress)
    print("\n\nBenchmarks completed.\n")
    print(report.format_table(results))

    print("\nSummary:")
    for summ in bench.summarize(results):
        print(f"  {summ['drbg']}:")
        print(f"   * State size:     {summ['state_size']} bytes")
        print(f"   * Total time:     {summ['total_time_ms']:.2f} ms")
        print(f"   * Avg bias:       {summ['avg_bias_pct']:.6f} %")
        print(f"   * Max throughput: {summ['max_throughput']:.2f} bits/us")
        print(f"   * Time for {summ['largest_bits']} bits: {summ['largest_time_ms']:.2f} ms")

    print("\nExporting results...")
    print(f"   CSV:  {bench.export_csv(results, s.csv_path)}")
    print(f"   HTML: {report.write_html(results, s.html_path)}")
    if args.plot:
        from .plot import plot_results
        plot_results(s.csv_path, s.png_path, s.svg_path)
        print(f"   Plot: {s.png_path}, {s.svg_path}")


def cmd_generate(args):
    s = _settings(args)
    seed = args.seed if args.seed is not None else new_seed(s.seed_size)
    drbg = new_drbg(args.mechanism, seed, reseed_interval=s.reseed_interval)
    for _ in range(args.count):
        print(drbg.generate(args.num_bits).hex())


def cmd_info(args):
    for cls in MECHANISMS:
        d = cls(b"")
        print(f"{d.name():<10} state={d.state_size()} bytes  {cls.__doc__.splitlines()[0]}")


def cmd_selftest(args):
    from .selftest import run_selftest
    checks = run_selftest()
    for name, ok in checks:
        print(f"[{'+' if ok else '!'}] {name}: {'ok' if ok else 'FAILED'}")
    return 0 if all(ok for _, ok in checks) else 1


def cmd_plot(args):
    from .plot import plot_results
    plot_results(args.csv, args.png, args.svg, show=args.show)
    print(f"Plot saved to {args.png}" + (f" and {args.svg}" if args.svg else ""))


def cmd_serve(args):
    import uvicorn
    uvicorn.run("drbgbench.api:app", host=args.host, port=args.port, log_level=args.log_level.lower())


def build_parser():
    ap = argparse.ArgumentParser(prog="drbgbench", description="Compare CTR-, Hash- and HMAC-DRBG")
    ap.add_argument("--log-level", default="WARNING", help="logging level (default: WARNING)")
    sub = ap.add_subparsers(dest="cmd", required=True)

    ap_b = sub.add_parser("bench", help="Benchmark the generators over a range of lengths")
    ap_b.add_argument("--bits", type=parse_bit_lengths, help="comma list of bit lengths (default: 10..1e7 or DRBG_BIT_LENGTHS)")
    ap_b.add_argument("--mechanism", "-m", action="append", type=_mechanism, help="mechanism to include (repeatable)")
    ap_b.add_argument("--seed", type=_hex_seed, help="hex seed shared by all generators (default: random)")
    ap_b.add_argument("--seed-size", type=int, help="random seed size in bytes (default: 48)")
    ap_b.add_argument("--out", help="output directory for CSV/HTML/plots")
    ap_b.add_argument("--plot", action="store_true", help="also write PNG/SVG plots (needs pandas, matplotlib)")
    ap_b.set_defaults(func=cmd_bench)

    ap_g = sub.add_parser("generate", help="Print DRBG output as hex")
    ap_g.add_argument("--mechanism", "-m", type=_mechanism, default="hmac")
    ap_g.add_argument("--seed", type=_hex_seed, help="hex seed (default: random)")
    ap_g.add_argument("--seed-size", type=int)
    ap_g.add_argument("--num-bits", "-n", type=int, default=256)
    ap_g.add_argument("--count", "-c", type=int, default=1, help="number of generate calls")
    ap_g.add_argument("--reseed-interval", type=int)
    ap_g.set_defaults(func=cmd_generate)

    ap_i = sub.add_parser("info", help="List mechanisms and state sizes")
    ap_i.set_defaults(func=cmd_info)

    ap_t = sub.add_parser("selftest", help="Run known-answer tests")
    ap_t.set_defaults(func=cmd_selftest)

    ap_p = sub.add_parser("plot", help="Plot an existing benchmark CSV")
    ap_p.add_argument("csv")
    ap_p.add_argument("--png", default="drbg_comparison.png")
    ap_p.add_argument("--svg")
    ap_p.add_argument("--show", action="store_true")
    ap_p.set_defaults(func=cmd_plot)

    ap_s = sub.add_parser("serve", help="Run the HTTP API")
    ap_s.add_argument("--host", default="127.0.0.1")
    ap_s.add_argument("--port", type=int, default=8000)
    ap_s.set_defaults(func=cmd_serve)
    return ap


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.INFO))
    return args.func(args) or 0


if __name__ == "__main__":
    sys.exit(main())
