#!/usr/bin/env python3
"""Benchmark library upload: throughput (files/s) and latency.

Usage:
  Against a running server:
    export API_URL=http://localhost:8000
    python scripts/bench_upload.py [--num-files 100] [--content-size 500] [--batch-size 1]

Every file gets a unique name and content, so each upload takes the NEW path.
A second pass re-uploads the first batch to measure the idempotent path.
"""
from __future__ import annotations

import argparse
import os
import statistics
import sys
import time
import uuid

import httpx


def _percentiles(latencies: list[float]) -> tuple[float, float, float]:
    n = len(latencies)
    ordered = sorted(latencies)
    p50 = statistics.median(latencies) * 1000
    p95 = ordered[int(n * 0.95) - 1] * 1000 if n >= 20 else p50
    p99 = ordered[int(n * 0.99) - 1] * 1000 if n >= 100 else p95
    return p50, p95, p99


def _upload(client: httpx.Client, api_url: str, files: list[tuple[str, bytes]], folder_id: str | None):
    data = {"folder_id": folder_id} if folder_id else {}
    return client.post(
        f"{api_url}/v1/library/upload",
        files=[("files", (name, body, "text/plain")) for name, body in files],
        data=data,
    )


def main() -> int:
    parser = argparse.ArgumentParser(description="Benchmark library upload")
    parser.add_argument("--num-files", type=int, default=50, help="Number of files to upload")
    parser.add_argument("--content-size", type=int, default=200, help="Approximate bytes per file")
    parser.add_argument("--batch-size", type=int, default=1, help="Files per upload request")
    parser.add_argument("--output", type=str, default="results/bench_upload.txt", help="Output file path")
    args = parser.parse_args()

    api_url = os.environ.get("API_URL", "http://localhost:8000").rstrip("/")
    run_id = uuid.uuid4().hex[:8]

    # A dedicated folder keeps benchmark files apart from real ones.
    with httpx.Client(timeout=60.0) as client:
        r = client.post(f"{api_url}/v1/library/folders", json={"name": f"bench-{run_id}"})
        r.raise_for_status()
        folder_id = r.json()["folder"]["id"]

    filler = "x" * args.content_size
    files = [
        (f"bench_{run_id}_{i}.txt", f"{filler} {run_id} doc_{i}\n".encode())
        for i in range(args.num_files)
    ]
    batches = [files[i : i + args.batch_size] for i in range(0, len(files), args.batch_size)]
    latencies: list[float] = []
    errors = 0

    print(f"Uploading {args.num_files} files in {len(batches)} request(s) (~{args.content_size} bytes each)...")
    start_total = time.perf_counter()
    with httpx.Client(timeout=120.0) as client:
        for batch in batches:
            t0 = time.perf_counter()
            r = _upload(client, api_url, batch, folder_id)
            elapsed = time.perf_counter() - t0
            if r.status_code == 201:
                latencies.append(elapsed)
            else:
                errors += 1
        total_elapsed = time.perf_counter() - start_total

        t0 = time.perf_counter()
        r = _upload(client, api_url, batches[0], folder_id) if batches else None
        repeat_ms = (time.perf_counter() - t0) * 1000
        repeat_ok = r is not None and r.status_code == 201 and all(
            item["decision"] == "attachable" for item in r.json()["items"]
        )

    n = len(latencies)
    if n == 0:
        print("No successful uploads.")
        return 1

    uploaded = n * args.batch_size
    files_per_sec = uploaded / total_elapsed
    mb_per_sec = (uploaded * args.content_size / 1_000_000) / total_elapsed if total_elapsed else 0
    p50, p95, p99 = _percentiles(latencies)

    summary = (
        f"Upload benchmark (requests={n}, errors={errors}, batch={args.batch_size})\n"
        f"  Throughput: {files_per_sec:.2f} files/s, ~{mb_per_sec:.4f} MB/s\n"
        f"  Latency: p50={p50:.1f} ms, p95={p95:.1f} ms, p99={p99:.1f} ms\n"
        f"  Re-upload of first batch: {repeat_ms:.1f} ms, idempotent={repeat_ok}\n"
        f"  Total time: {total_elapsed:.2f} s\n"
    )
    print(summary)

    os.makedirs(os.path.dirname(args.output) or ".", exist_ok=True)
    with open(args.output, "w", encoding="utf-8") as f:
        f.write(summary)
    print(f"Wrote {args.output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
