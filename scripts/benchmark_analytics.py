#!/usr/bin/env python3
"""
Benchmark Script for PingPanel category analytics

Usage:
    python scripts/benchmark_analytics.py <api-key> <category>

Measures latency of the dashboard queries against a running server.
"""

import sys
import time
import requests
import statistics


def benchmark_queries(base_url: str, api_key: str, category: str):
    """Benchmark analytics queries"""
    print(f"\n{'=' * 60}")
    print(f"BENCHMARK: Query Performance")
    print(f"{'=' * 60}")

    headers = {"Authorization": f"Bearer {api_key}"}
    queries = [
        ("Categories overview", f"{base_url}/categories"),
        ("Events today", f"{base_url}/categories/{category}/events?time_range=today"),
        ("Events this week", f"{base_url}/categories/{category}/events?time_range=week"),
        ("Events this month", f"{base_url}/categories/{category}/events?time_range=month"),
        ("Events month p5", f"{base_url}/categories/{category}/events?time_range=month&page=5&limit=50"),
        ("Poll", f"{base_url}/categories/{category}/poll"),
    ]

    results = []

    for name, url in queries:
        times = []

        # Run each query 5 times
        for _ in range(5):
            start = time.time()
            try:
                response = requests.get(url, headers=headers, timeout=30)
                elapsed = (time.time() - start) * 1000  # Convert to ms

                if response.status_code == 200:
                    times.append(elapsed)
                else:
                    print(f"Error in {name}: Status {response.status_code}")
            except requests.RequestException as e:
                print(f"Error in {name}: {e}")

        if times:
            results.append({
                "name": name,
                "p50": statistics.median(times),
                "p95": sorted(times)[int(len(times) * 0.95)] if len(times) > 1 else times[0],
                "avg": statistics.mean(times),
                "min": min(times),
                "max": max(times)
            })

    print(f"\n{'Query':<25} {'P50':>10} {'P95':>10} {'Avg':>10} {'Max':>10}")
    print(f"{'-' * 70}")
    for r in results:
        print(f"{r['name']:<25} {r['p50']:>9.0f}ms {r['p95']:>9.0f}ms "
              f"{r['avg']:>9.0f}ms {r['max']:>9.0f}ms")

    print(f"{'=' * 60}\n")

    return results


def main():
    if len(sys.argv) != 3:
        print("Usage: python scripts/benchmark_analytics.py <api-key> <category>")
        sys.exit(1)

    api_key, category = sys.argv[1:3]
    base_url = "http://localhost:8000"

    print("\n" + "=" * 60)
    print("PINGPANEL ANALYTICS - BENCHMARK")
    print("=" * 60)
    print(f"Target: {base_url}")
    print("=" * 60)

    # Test connection
    try:
        response = requests.get(f"{base_url}/health", timeout=5)
        if response.status_code != 200:
            print("Error: API is not healthy")
            sys.exit(1)
    except requests.RequestException as e:
        print(f"Error: Cannot connect to API: {e}")
        sys.exit(1)

    benchmark_queries(base_url, api_key, category)

    print("\n" + "=" * 60)
    print("BENCHMARK COMPLETE")
    print("=" * 60)


if __name__ == "__main__":
    main()
