#!/usr/bin/env python3
"""Benchmark translation reads and writes for a translatable model.

Usage:
    python scripts/benchmark_translations.py --model myapp.models:Article --count 100
"""

import argparse
import importlib
import os
import sys
import time

# Add parent directory to path to import app modules
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from translatable import create_app, db
from translatable.locale import get_current_locale
from translatable.services.query import (
    has_translation,
    where_translation_like,
    with_translations,
)


def load_model(path: str):
    """Import ``package.module:ClassName``."""
    module_name, _, class_name = path.partition(':')
    if not class_name:
        raise ValueError(f"Expected 'module:ClassName', got '{path}'")
    module = importlib.import_module(module_name)
    return getattr(module, class_name)


def _elapsed_ms(start):
    return (time.perf_counter() - start) * 1000


def run_benchmark(model, count: int) -> dict:
    """Time the common translation operations. Returns {operation: ms}."""
    results = {}
    locale = get_current_locale()

    print("1️⃣ Testing single item fetch...")
    item = model.query.order_by(model.id).first()
    if item:
        start = time.perf_counter()
        for _ in range(100):
            item.translations.get_translation('title')
        results['single_item'] = round(_elapsed_ms(start) / 100, 2)
        print(f"   [OK] Single item: {results['single_item']}ms (average of 100 calls)")
    else:
        print("   [WARN] No items found in database")

    print("2️⃣ Testing bulk fetch with eager loading...")
    start = time.perf_counter()
    items = with_translations(model.query.limit(count).all(), [locale])
    results['bulk_fetch'] = round(_elapsed_ms(start), 2)

    start = time.perf_counter()
    for entity in items:
        entity.translations.get_translation('title')
        entity.translations.get_translation('slug')
    results['bulk_access'] = round(_elapsed_ms(start), 2)
    print(f"   [OK] Fetch {count} items: {results['bulk_fetch']}ms")
    print(f"   [OK] Access all fields: {results['bulk_access']}ms")
    print(f"   [OK] Total: {round(results['bulk_fetch'] + results['bulk_access'], 2)}ms")

    print("3️⃣ Testing search query...")
    title = item.translations.get_translation('title') if item else None
    if title:
        start = time.perf_counter()
        found = where_translation_like(model.query, model, 'title', title[:5], locale).limit(50).all()
        with_translations(found, [locale])
        results['search'] = round(_elapsed_ms(start), 2)
        print(f"   [OK] Search (found {len(found)}): {results['search']}ms")
    else:
        print("   [WARN] Cannot test search - no items found")

    print("4️⃣ Testing view query performance...")
    start = time.perf_counter()
    rows = has_translation(model.query, model, locale).limit(count).all()
    results['view_query'] = round(_elapsed_ms(start), 2)
    print(f"   [OK] View query ({len(rows)} items): {results['view_query']}ms")

    print("5️⃣ Testing translation save...")
    if item:
        stamp = int(time.time())
        start = time.perf_counter()
        item.translations.translate_to({
            'title': f'Benchmark Test {stamp}',
            'slug': f'benchmark-test-{stamp}',
        })
        db.session.commit()
        results['save'] = round(_elapsed_ms(start), 2)
        print(f"   [OK] Save translation: {results['save']}ms")
    else:
        print("   [WARN] Cannot test save - no items found")

    return results


def print_summary(results: dict, count: int):
    labels = [
        ('single_item', 'Single Item Fetch'),
        ('bulk_fetch', f'Bulk Fetch ({count} items)'),
        ('bulk_access', 'Bulk Access'),
        ('search', 'Search Query'),
        ('view_query', f'View Query ({count} items)'),
        ('save', 'Save Translation'),
    ]

    print("\n📊 Performance Summary:")
    print(f"   {'Operation':<28} {'Time (ms)':>10}")
    for key, label in labels:
        print(f"   {label:<28} {str(results.get(key, 'N/A')):>10}")

    timings = [value for value in results.values() if value]
    if not timings:
        return

    average = round(sum(timings) / len(timings), 2)
    print()
    if average < 50:
        print(f"[EXCELLENT] Performance! Average: {average}ms")
    elif average < 100:
        print(f"[GOOD] Performance! Average: {average}ms")
    else:
        print(f"[SLOW] Performance could be improved. Average: {average}ms")
        print("   Tip: Try enabling cache or using eager loading")


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description='Benchmark translation performance')
    parser.add_argument('--count', type=int, default=100, help='Number of items to test')
    parser.add_argument('--model', required=True, help='Model to test, as module:ClassName')
    args = parser.parse_args(argv)

    app = create_app()
    with app.app_context():
        try:
            model = load_model(args.model)
        except (ImportError, AttributeError, ValueError) as e:
            print(f"❌ Model {args.model} not found: {e}")
            return 1

        if not hasattr(model, 'translation_stats'):
            print(f"❌ Model {args.model} must use TranslatableMixin")
            return 1

        print("Running Translation Performance Benchmark")
        print(f"Model: {args.model}")
        print(f"Count: {args.count}\n")

        results = run_benchmark(model, args.count)
        print_summary(results, args.count)
    return 0


if __name__ == '__main__':
    sys.exit(main())
