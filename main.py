import argparse
import datetime
import json
import logging
import sys

from metricsbench.benchmark import GenerationBenchmark
from metricsbench.config import Config
from metricsbench.provider import MetricsTableDataProvider


def cmd_schema(args):
    with MetricsTableDataProvider(row_count=0) as provider:
        print(provider.create_table_sql())


def cmd_sample(args):
    with MetricsTableDataProvider(row_count=args.rows, service_num_per_app=args.services, seed=args.seed) as provider:
        names = provider.table_schema().column_names()
        for row in provider.rows():
            print(json.dumps(dict(zip(names, row))))


def cmd_bench(args):
    print(f"Generating {args.rows} rows per worker with {args.concurrency} threads...")
    bench = GenerationBenchmark(
        concurrency=args.concurrency,
        rows_per_worker=args.rows,
        service_num_per_app=args.services,
        chunk_size=args.chunk_size,
        seed=args.seed,
    )
    total = args.rows * args.concurrency

    def report(generated, elapsed):
        rate = generated / elapsed if elapsed > 0 else 0
        remaining_sec = (total - generated) / rate if rate > 0 else 0
        eta = str(datetime.timedelta(seconds=int(remaining_sec)))
        print(f"Generated {generated}/{total} rows ({rate:.0f} rows/s) - ETA: {eta}", end='\r')

    summary = bench.run(on_progress=report)

    status = "failed" if summary['errors'] else "complete"
    print(f"\nGeneration {status}. {summary['rows']} rows in {summary['wall_time']:.2f}s")
    print(f"\nResults:")
    print(f"Workers: {summary['workers']}")
    print(f"Rows/s: {summary['rows_per_sec']:.0f}")
    print(f"\nChunk latency (ms, {args.chunk_size} rows) p50 / p95 / p99:")
    print(f"  {summary['p50_ms']:.2f} / {summary['p95_ms']:.2f} / {summary['p99_ms']:.2f}")

    if summary['errors']:
        print(f"\nErrors: {summary['errors']} of {summary['workers']} workers failed")
        return 1
    return 0


def build_parser():
    parser = argparse.ArgumentParser(description="Metrics table row generator")
    subparsers = parser.add_subparsers(dest='command')

    subparsers.add_parser('schema', help='Print the CREATE TABLE statement')

    p_sample = subparsers.add_parser('sample', help='Print rows as JSON lines')
    p_sample.add_argument('--rows', type=int, default=20)
    p_sample.add_argument('--services', type=int, default=Config.SERVICE_NUM_PER_APP, help='Services per app')
    p_sample.add_argument('--seed', type=int, default=Config.SEED)

    p_bench = subparsers.add_parser('bench', help='Measure generation throughput')
    p_bench.add_argument('--rows', type=int, default=1_000_000, help='Rows per worker')
    p_bench.add_argument('--services', type=int, default=Config.SERVICE_NUM_PER_APP, help='Services per app')
    p_bench.add_argument('--concurrency', type=int, default=Config.CONCURRENCY, help='Number of generator threads')
    p_bench.add_argument('--chunk-size', type=int, default=10_000)
    p_bench.add_argument('--seed', type=int, default=Config.SEED)
    return parser


def main(argv=None):
    logging.basicConfig(level=Config.LOG_LEVEL,
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == 'schema':
        cmd_schema(args)
    elif args.command == 'sample':
        cmd_sample(args)
    elif args.command == 'bench':
        return cmd_bench(args)
    else:
        parser.print_help()
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
