"""CSV / JSON export tests."""

import json

import pandas as pd
import pytest

from yoki_drops.config import ZERO_ADDRESS
from yoki_drops.events import TransferEvent
from yoki_drops.exporter import (
    build_reward_items,
    chunk_items,
    load_batch_file,
    read_address_list,
    write_address_list,
    write_batch_files,
    write_holders_csv,
)
from yoki_drops.ledger import replay_transfers


def test_read_address_list_filters_blanks_and_comments(tmp_path):
    print("=== read_address_list ===")
    path = tmp_path / "users.csv"
    path.write_text("0xAAA\n\n// season 9 export\n  0xbbb  \n\n")
    assert read_address_list(str(path)) == ["0xAAA", "0xbbb"]
    print("  comments and blanks dropped: OK")


def test_write_address_list_creates_dirs(tmp_path):
    path = tmp_path / "nested" / "out.csv"
    write_address_list(str(path), ["0xb", "0xa"], sort=True)
    assert path.read_text() == "0xa\n0xb"


def test_build_reward_items_from_pool():
    print("=== Reward items ===")
    items = build_reward_items(["0x1", "0x2", "0x3"], defi_id=21, description="Yoki2 season 7", pool_amount=10)
    assert items[0] == {"userAddress": "0x1", "defiId": 21, "acsAmount": 3, "description": "Yoki2 season 7"}
    assert {item["acsAmount"] for item in items} == {3}
    print("  pool split rounded down: OK")


def test_build_reward_items_fixed_amount():
    items = build_reward_items(["0x1"], defi_id=21, description="d", acs_amount=500)
    assert items[0]["acsAmount"] == 500
    with pytest.raises(ValueError):
        build_reward_items(["0x1"], defi_id=21, description="d")


def test_chunk_items():
    assert [len(c) for c in chunk_items(range(4000), 1900)] == [1900, 1900, 200]
    assert chunk_items([], 1900) == []


def test_write_batch_files_single(tmp_path):
    path = str(tmp_path / "season7users.json")
    items = build_reward_items(["0x1", "0x2"], 21, "d", acs_amount=1)
    assert write_batch_files(items, path) == [path]
    assert load_batch_file(path) == items


def test_write_batch_files_splits_above_threshold(tmp_path):
    print("=== Batch split ===")
    items = build_reward_items([f"0x{i:040x}" for i in range(4000)], 21, "d", acs_amount=1)
    paths = write_batch_files(items, str(tmp_path / "season8users.json"), max_records=1900)
    assert [p.rsplit("/", 1)[-1] for p in paths] == [
        "season8users_part1.json", "season8users_part2.json", "season8users_part3.json",
    ]
    sizes = [len(load_batch_file(p)) for p in paths]
    assert sizes == [1900, 1900, 200]
    print(f"  {sizes}: OK")


def test_load_batch_file_rejects_objects(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text(json.dumps({"userAddress": "0x1"}))
    with pytest.raises(ValueError):
        load_batch_file(str(path))


def test_write_holders_csv(tmp_path):
    ledger = replay_transfers([
        TransferEvent.create(ZERO_ADDRESS, "0xa", 100, 1, 1),
        TransferEvent.create(ZERO_ADDRESS, "0xb", 100, 1, 1),
        TransferEvent.create(ZERO_ADDRESS, "0xb", 200, 1, 1),
    ])
    path = tmp_path / "holders.csv"
    assert write_holders_csv(str(path), ledger, ("100", "200")) == 2
    df = pd.read_csv(path, dtype=str)
    assert list(df["address"]) == ["0xb", "0xa"]
    assert list(df["token_ids"]) == ["100;200", "100"]
