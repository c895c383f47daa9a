import pytest

from bgm_overlap import paginator
from bgm_overlap.exceptions import FormatError, TransportError

from conftest import FakeSource, raw_entry


def test_page_offsets() -> None:
    assert paginator.page_offsets(120, 50) == [0, 50, 100]
    assert paginator.page_offsets(100, 50) == [0, 50]
    assert paginator.page_offsets(1, 50) == [0]
    assert paginator.page_offsets(0, 50) == [0]


def test_batched_preserves_order() -> None:
    offsets = [i * 50 for i in range(19)]
    groups = paginator.batched(offsets, 8)
    assert [len(group) for group in groups] == [8, 8, 3]
    assert [offset for group in groups for offset in group] == offsets
    assert paginator.batched([0, 50, 100], 8) == [[0, 50, 100]]


def test_batched_rejects_zero_size() -> None:
    with pytest.raises(ValueError):
        paginator.batched([0], 0)


@pytest.mark.asyncio
async def test_fetch_all_entries_requests_each_offset_once() -> None:
    entries = [raw_entry(i) for i in range(120)]
    source = FakeSource({"alice": entries})

    result = await paginator.fetch_all_entries(source, "alice", batch_size=8)

    assert source.offsets_for("alice") == [0, 50, 100]
    assert [e["subject"]["id"] for e in result] == list(range(120))


@pytest.mark.asyncio
async def test_fetch_all_entries_caps_in_flight_requests() -> None:
    entries = [raw_entry(i) for i in range(1000)]
    source = FakeSource({"alice": entries})

    result = await paginator.fetch_all_entries(source, "alice", batch_size=8)

    assert len(result) == 1000
    assert source.max_in_flight == 8
    assert sorted(source.offsets_for("alice")) == [i * 50 for i in range(20)]
    assert source.offsets_for("alice").count(0) == 1


@pytest.mark.asyncio
async def test_fetch_all_entries_empty_collection() -> None:
    source = FakeSource({"nobody": []})
    assert await paginator.fetch_all_entries(source, "nobody") == []
    assert source.calls == [("nobody", 0)]


@pytest.mark.asyncio
async def test_fetch_all_entries_accepts_short_result() -> None:
    source = FakeSource({"alice": [raw_entry(i) for i in range(60)]}, totals={"alice": 75})

    result = await paginator.fetch_all_entries(source, "alice")

    assert len(result) == 60
    assert source.offsets_for("alice") == [0, 50]


@pytest.mark.asyncio
async def test_fetch_all_entries_aborts_on_failed_page() -> None:
    source = FakeSource({"alice": [raw_entry(i) for i in range(250)]})
    source.fail("alice", 50, TransportError("boom"))

    with pytest.raises(TransportError):
        await paginator.fetch_all_entries(source, "alice", batch_size=2)

    # Later batches are never started
    assert 100 not in source.offsets_for("alice")
    assert 200 not in source.offsets_for("alice")


@pytest.mark.asyncio
async def test_fetch_all_entries_first_page_failure() -> None:
    source = FakeSource({"alice": [raw_entry(1)]})
    source.fail("alice", 0, FormatError("bad page"))

    with pytest.raises(FormatError):
        await paginator.fetch_all_entries(source, "alice")
    assert source.calls == [("alice", 0)]


@pytest.mark.asyncio
async def test_fetch_all_entries_steps_by_source_page_size() -> None:
    source = FakeSource({"alice": [raw_entry(i) for i in range(120)]}, limit=20)

    result = await paginator.fetch_all_entries(source, "alice")

    assert source.offsets_for("alice") == [0, 20, 40, 60, 80, 100]
    assert [e["subject"]["id"] for e in result] == list(range(120))
