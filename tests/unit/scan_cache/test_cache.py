"""Tests for the budgeted single-flight scan cache.

Uses the in-memory filesystem so listing order, latency and failures are
deterministic.
"""

from __future__ import annotations

import asyncio
import errno
import time
import unittest

from quickopener.scan_cache import MemoryFileSystem, ScanCache


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def _example_tree() -> dict:
    return {"a": {"b": {"d.txt": None}, "c.txt": None}}


class ScanCacheScanTests(unittest.IsolatedAsyncioTestCase):
    async def test_scan_records_children_and_for_each_merges_descendants(self) -> None:
        cache = ScanCache(filesystem=MemoryFileSystem(_example_tree()))

        record = await cache.scan("/a/", 1.0)

        self.assertEqual(record.path, "/a/")
        self.assertEqual(record.child_dirs, ["/a/b/"])
        self.assertEqual(record.child_files, ["/a/c.txt"])
        self.assertFalse(record.errored)
        self.assertIsNone(record.in_flight)
        self.assertEqual(cache.to_list(record), ["/a/b/", "/a/c.txt", "/a/b/d.txt"])

        visited: list[tuple[str, bool]] = []
        count = cache.for_each("/a", lambda path, is_dir: visited.append((path, is_dir)))
        self.assertEqual(count, 3)
        self.assertEqual(visited, [("/a/b/", True), ("/a/c.txt", False), ("/a/b/d.txt", False)])

    async def test_scan_normalizes_path_and_keeps_listing_order(self) -> None:
        fs = MemoryFileSystem({"r": {"zeta.txt": None, "alpha": {}, "beta.txt": None, "Gamma": {}}})
        cache = ScanCache(filesystem=fs)

        record = await cache.scan("/r", 1.0)

        self.assertEqual(record.path, "/r/")
        self.assertIs(cache.get_record("/r"), record)
        self.assertEqual(record.child_dirs, ["/r/alpha/", "/r/Gamma/"])
        self.assertEqual(record.child_files, ["/r/zeta.txt", "/r/beta.txt"])

    async def test_excluded_names_never_appear_at_any_depth(self) -> None:
        fs = MemoryFileSystem(
            {
                "r": {
                    ".git": {"HEAD": None},
                    "node_modules": {"dep": {}},
                    "src": {".DS_Store": None, "main.py": None, "inner": {".git": {}, "keep.txt": None}},
                }
            }
        )
        cache = ScanCache(filesystem=fs)

        await cache.scan("/r", 1.0)

        listed = cache.to_list("/r")
        self.assertEqual(listed, ["/r/src/", "/r/src/inner/", "/r/src/main.py", "/r/src/inner/keep.txt"])
        self.assertNotIn("/r/.git", fs.list_calls)
        self.assertNotIn("/r/node_modules", fs.list_calls)

    async def test_custom_exclusions_replace_defaults(self) -> None:
        fs = MemoryFileSystem({"r": {".git": {}, "build": {}, "a.txt": None}})
        cache = ScanCache(filesystem=fs, exclude=("build",))

        record = await cache.scan("/r", 1.0)

        self.assertEqual(record.child_dirs, ["/r/.git/"])
        self.assertEqual(record.child_files, ["/r/a.txt"])

    async def test_concurrent_scans_share_one_listing(self) -> None:
        fs = MemoryFileSystem({"p": {"x": {"y.txt": None}, "f.txt": None}})
        fs.delays["/p"] = 0.05
        cache = ScanCache(filesystem=fs)

        first, second = await asyncio.gather(cache.scan("/p", 1.0), cache.scan("/p/", 1.0))

        self.assertEqual(fs.list_calls["/p"], 1)
        self.assertEqual(fs.list_calls["/p/x"], 1)
        self.assertIs(first, second)
        self.assertEqual(first.child_dirs, ["/p/x/"])
        self.assertEqual(first.child_files, ["/p/f.txt"])

    async def test_fresh_scanned_record_is_returned_without_listing_again(self) -> None:
        fs = MemoryFileSystem(_example_tree())
        cache = ScanCache(filesystem=fs)

        first = await cache.scan("/a", 1.0)
        second = await cache.scan("/a", 1.0)

        self.assertIs(first, second)
        self.assertEqual(fs.list_calls["/a"], 1)

    async def test_record_expires_after_ttl(self) -> None:
        clock = FakeClock()
        fs = MemoryFileSystem(_example_tree())
        cache = ScanCache(filesystem=fs, ttl=10.0, clock=clock)

        await cache.scan("/a", 1.0)
        scanned_at = clock.now

        clock.now = scanned_at + 10.0 - 0.001
        self.assertIsNotNone(cache.get_record("/a"))
        await cache.scan("/a", 1.0)
        self.assertEqual(fs.list_calls["/a"], 1)

        clock.now = scanned_at + 10.0 + 0.001
        self.assertIsNone(cache.get_record("/a/b"))
        self.assertEqual(cache.to_list("/a"), [])
        record = await cache.scan("/a", 1.0)
        self.assertEqual(fs.list_calls["/a"], 2)
        self.assertEqual(fs.list_calls["/a/b"], 2)
        self.assertEqual(record.created_at, clock.now)

    async def test_unreadable_subdirectory_is_isolated(self) -> None:
        fs = MemoryFileSystem(
            {"r": {"open": {"a.txt": None, "deeper": {"b.txt": None}}, "locked": {"secret": None}, "top.txt": None}}
        )
        fs.failures["/r/locked"] = PermissionError(errno.EACCES, "Permission denied", "/r/locked")
        cache = ScanCache(filesystem=fs)

        record = await cache.scan("/r", 1.0)

        self.assertFalse(record.errored)
        self.assertEqual(record.child_dirs, ["/r/open/", "/r/locked/"])
        locked = cache.get_record("/r/locked")
        self.assertIsNotNone(locked)
        self.assertTrue(locked.errored)
        self.assertIsInstance(locked.error, PermissionError)
        self.assertEqual(locked.child_dirs, [])
        self.assertEqual(locked.child_files, [])
        self.assertEqual(
            cache.to_list(record),
            ["/r/open/", "/r/locked/", "/r/top.txt", "/r/open/deeper/", "/r/open/a.txt", "/r/open/deeper/b.txt"],
        )

    async def test_errored_record_is_cached_until_expiry(self) -> None:
        fs = MemoryFileSystem({})
        cache = ScanCache(filesystem=fs)

        first = await cache.scan("/missing", 1.0)
        second = await cache.scan("/missing", 1.0)

        self.assertTrue(first.errored)
        self.assertIsInstance(first.error, FileNotFoundError)
        self.assertIs(first, second)
        self.assertEqual(fs.list_calls["/missing"], 1)

    async def test_scanning_a_file_marks_record_errored(self) -> None:
        cache = ScanCache(filesystem=MemoryFileSystem(_example_tree()))

        record = await cache.scan("/a/c.txt", 1.0)

        self.assertTrue(record.errored)
        self.assertIsInstance(record.error, NotADirectoryError)

    async def test_unexpected_failure_propagates_and_leaves_no_record(self) -> None:
        fs = MemoryFileSystem(_example_tree())
        fs.failures["/a"] = RuntimeError("boom")
        cache = ScanCache(filesystem=fs)

        with self.assertRaises(RuntimeError):
            await cache.scan("/a", 1.0)
        self.assertIsNone(cache.get_record("/a"))

        del fs.failures["/a"]
        record = await cache.scan("/a", 1.0)
        self.assertFalse(record.errored)
        self.assertEqual(record.child_files, ["/a/c.txt"])

    async def test_unexpected_failure_in_child_does_not_fail_parent(self) -> None:
        fs = MemoryFileSystem(_example_tree())
        fs.failures["/a/b"] = RuntimeError("child boom")
        cache = ScanCache(filesystem=fs)

        with self.assertLogs("quickopener.scan_cache.cache", level="ERROR"):
            record = await cache.scan("/a", 1.0)
            await asyncio.sleep(0)

        self.assertFalse(record.errored)
        self.assertEqual(record.child_dirs, ["/a/b/"])
        self.assertIsNone(cache.get_record("/a/b"))

    async def test_zero_budget_scans_only_the_requested_directory(self) -> None:
        fs = MemoryFileSystem(_example_tree())
        cache = ScanCache(filesystem=fs)

        record = await cache.scan("/a", 0)

        self.assertEqual(record.child_dirs, ["/a/b/"])
        self.assertEqual(fs.list_calls["/a/b"], 0)
        self.assertEqual(cache.to_list(record), ["/a/b/", "/a/c.txt"])


class ScanCacheBudgetTests(unittest.IsolatedAsyncioTestCase):
    async def test_scan_returns_near_budget_while_children_keep_populating(self) -> None:
        tree = {"w": {f"d{idx}": {f"f{idx}.txt": None, "nested": {"n.txt": None}} for idx in range(5)}}
        fs = MemoryFileSystem(tree)
        for idx in range(5):
            fs.delays[f"/w/d{idx}"] = 0.3
        cache = ScanCache(filesystem=fs)

        start = time.perf_counter()
        record = await cache.scan("/w", 0.1)
        elapsed = time.perf_counter() - start

        self.assertLess(elapsed, 0.25)
        first_pass = cache.to_list(record)
        self.assertEqual(first_pass, [f"/w/d{idx}/" for idx in range(5)])
        self.assertIsNotNone(cache.get_record("/w/d0").in_flight)

        await asyncio.sleep(0.4)
        second = await cache.scan("/w", 0.1)
        second_pass = cache.to_list(second)
        self.assertIs(second, record)
        self.assertGreater(len(second_pass), len(first_pass))
        self.assertIn("/w/d3/f3.txt", second_pass)
        self.assertIsNone(cache.get_record("/w/d0").in_flight)

    async def test_deep_tree_shares_one_deadline(self) -> None:
        tree: dict = {}
        node = tree
        for depth in range(12):
            child: dict = {"leaf.txt": None}
            node[f"l{depth}"] = child
            node = child
        fs = MemoryFileSystem(tree, latency=0.03)
        cache = ScanCache(filesystem=fs)

        start = time.perf_counter()
        await cache.scan("/l0", 0.1)
        elapsed = time.perf_counter() - start

        self.assertLess(elapsed, 0.25)
        self.assertEqual(fs.list_calls["/l0/l1/l2/l3/l4/l5/l6/l7/l8/l9"], 0)


class ScanCacheLookupTests(unittest.IsolatedAsyncioTestCase):
    async def test_for_each_stops_at_max_items(self) -> None:
        cache = ScanCache(filesystem=MemoryFileSystem(_example_tree()))
        record = await cache.scan("/a", 1.0)

        self.assertEqual(cache.to_list(record, max_items=2), ["/a/b/", "/a/c.txt"])
        self.assertEqual(cache.for_each(record, lambda _path, _is_dir: None, max_items=1), 1)

    async def test_for_each_uses_instance_max_items_by_default(self) -> None:
        cache = ScanCache(filesystem=MemoryFileSystem(_example_tree()), max_items=1)
        record = await cache.scan("/a", 1.0)

        self.assertEqual(cache.to_list(record), ["/a/b/"])
        self.assertEqual(len(cache.to_list(record, max_items=10)), 3)

    def test_for_each_on_unknown_path_visits_nothing(self) -> None:
        cache = ScanCache(filesystem=MemoryFileSystem(_example_tree()))

        self.assertEqual(cache.for_each("/a", lambda _path, _is_dir: self.fail("unexpected visit")), 0)

    async def test_is_directory_uses_cache_before_stat(self) -> None:
        fs = MemoryFileSystem(_example_tree())
        cache = ScanCache(filesystem=fs)
        await cache.scan("/a", 1.0)

        self.assertTrue(await cache.is_directory("/a"))
        self.assertTrue(await cache.is_directory("/a/b/"))
        self.assertEqual(fs.stat_calls["/a"], 0)
        self.assertEqual(fs.stat_calls["/a/b"], 0)

    async def test_is_directory_inserts_unscanned_record(self) -> None:
        fs = MemoryFileSystem(_example_tree())
        cache = ScanCache(filesystem=fs)

        self.assertTrue(await cache.is_directory("/a/b"))
        checked = cache.get_record("/a/b")
        self.assertIsNotNone(checked)
        self.assertIsNone(checked.child_dirs)
        self.assertIsNone(checked.child_files)

        self.assertTrue(await cache.is_directory("/a/b"))
        self.assertEqual(fs.stat_calls["/a/b"], 1)

        record = await cache.scan("/a/b", 1.0)
        self.assertIs(record, checked)
        self.assertEqual(record.child_files, ["/a/b/d.txt"])
        self.assertEqual(fs.list_calls["/a/b"], 1)

    async def test_is_directory_does_not_cache_negative_results(self) -> None:
        fs = MemoryFileSystem(_example_tree())
        cache = ScanCache(filesystem=fs)

        self.assertFalse(await cache.is_directory("/a/c.txt"))
        self.assertFalse(await cache.is_directory("/nope"))
        self.assertFalse(await cache.is_directory("/nope"))

        self.assertEqual(cache.records, {})
        self.assertEqual(fs.stat_calls["/nope"], 2)

    async def test_is_directory_is_false_for_errored_record(self) -> None:
        cache = ScanCache(filesystem=MemoryFileSystem({}))
        await cache.scan("/gone", 1.0)

        self.assertFalse(await cache.is_directory("/gone"))

    async def test_flush_entry_forces_rescan(self) -> None:
        fs = MemoryFileSystem(_example_tree())
        cache = ScanCache(filesystem=fs)
        await cache.scan("/a", 1.0)

        fs.tree["a"]["e.txt"] = None
        self.assertTrue(cache.flush_entry("/a"))
        self.assertFalse(cache.flush_entry("/a/"))

        record = await cache.scan("/a", 1.0)
        self.assertEqual(record.child_files, ["/a/c.txt", "/a/e.txt"])
        self.assertEqual(fs.list_calls["/a"], 2)
        self.assertEqual(fs.list_calls["/a/b"], 1)

    async def test_clear_drops_every_record(self) -> None:
        cache = ScanCache(filesystem=MemoryFileSystem(_example_tree()))
        await cache.scan("/a", 1.0)

        cache.clear()

        self.assertEqual(cache.records, {})


if __name__ == "__main__":
    unittest.main()
