import argparse
import asyncio
import time
from chat_revisions import EventKind, TimelineSnapshot, resolve_latest

async def benchmark(num_messages: int, edits_per_message: int):
    print(f"Benchmarking with {num_messages} messages, {edits_per_message} edits each...")

    async def timeline():
        # Originals first, then edit chains, then a redaction for every other message.
        ts = 0
        for m in range(num_messages):
            ts += 1
            yield {"event_id": f"m{m}", "type": "m.room.message", "sender": "@bench:example.org",
                   "timestamp": ts, "content": {"body": f"message {m}"}}
        for m in range(num_messages):
            previous = f"m{m}"
            for e in range(edits_per_message):
                ts += 1
                edit_id = f"m{m}-e{e}"
                yield {"event_id": edit_id, "type": "m.room.message", "sender": "@bench:example.org",
                       "timestamp": ts, "content": {"body": f"edit {e}",
                       "m.relates_to": {"rel_type": "m.replace", "event_id": previous}}}
                previous = edit_id
            if m % 2 == 0:
                ts += 1
                yield {"event_id": f"r{m}", "type": "m.room.redaction", "sender": "@mod:example.org",
                       "timestamp": ts, "content": {"redacts": previous, "reason": "bench"}}

    # --- Snapshot benchmark ---
    start_load = time.perf_counter()
    snapshot = await TimelineSnapshot.from_stream(timeline())
    load_time = time.perf_counter() - start_load

    original_ids = [f"m{m}" for m in range(num_messages)]

    # --- Scanning resolver ---
    start_scan = time.perf_counter()
    scanned = [resolve_latest(i, snapshot.events) for i in original_ids]
    scan_time = time.perf_counter() - start_scan

    # --- Indexed resolver ---
    start_index = time.perf_counter()
    indexed = [snapshot.resolve_latest(i) for i in original_ids]
    index_time = time.perf_counter() - start_index

    assert scanned == indexed
    redacted = sum(1 for e in indexed if e is not None and e.kind == EventKind.REDACTION)

    print(f"\n--- Results for {len(snapshot)} events ---")
    print(f"Snapshot load: {load_time:.4f}s ({len(snapshot) / load_time if load_time > 0 else 0:,.0f} events/s)")
    print(f"Scanning resolve: {scan_time:.4f}s ({num_messages / scan_time if scan_time > 0 else 0:,.0f} chains/s)")
    print(f"Indexed resolve:  {index_time:.4f}s ({num_messages / index_time if index_time > 0 else 0:,.0f} chains/s)")
    print(f"{redacted} of {num_messages} messages resolve to a redaction")

async def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--num-messages", type=int, default=200)
    parser.add_argument("--edits", type=int, default=3)
    args = parser.parse_args()
    await benchmark(args.num_messages, args.edits)

if __name__ == "__main__":
    asyncio.run(main())
