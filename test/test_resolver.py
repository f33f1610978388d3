import pytest

from chat_revisions import (
    EventKind,
    RelationIndex,
    TimelineEvent,
    find_latest_redaction,
    resolve_latest,
)


def message(event_id, ts=1000, replaces=None, sender="@u1:example.org"):
    content = {"body": f"body of {event_id}"}
    if replaces is not None:
        content["m.relates_to"] = {"rel_type": "m.replace", "event_id": replaces}
    return TimelineEvent(event_id=event_id, kind=EventKind.MESSAGE, sender=sender, timestamp=ts, content=content)


def redaction(event_id, target, ts=2000, reason=None, nested=False, sender="@mod:example.org"):
    content = {"redacts": {"event_id": target} if nested else target}
    if reason is not None:
        content["reason"] = reason
    return TimelineEvent(event_id=event_id, kind=EventKind.REDACTION, sender=sender, timestamp=ts, content=content)


def encrypted_edit(event_id, replaces, ts=1500, decrypted_kind=EventKind.MESSAGE):
    return TimelineEvent(
        event_id=event_id,
        kind=EventKind.ENCRYPTED,
        timestamp=ts,
        content={"ciphertext": "opaque"},
        decrypted={"body": "secret", "m.relates_to": {"rel_type": "m.replace", "event_id": replaces}},
        decrypted_kind=decrypted_kind,
    )


@pytest.fixture(params=["scan", "index"])
def resolve(request):
    """Runs each resolution test against both the scanning and the indexed resolver."""
    if request.param == "scan":
        return resolve_latest
    return lambda original_id, events: RelationIndex(events).resolve_latest(original_id)


@pytest.fixture(params=["scan", "index"])
def latest_redaction(request):
    if request.param == "scan":
        return find_latest_redaction
    return lambda target_id, events: RelationIndex(events).find_latest_redaction(target_id)


# --- Chain resolution ---

def test_unrelated_message_resolves_to_itself(resolve):
    events = [message("M1"), message("M2")]
    assert resolve("M1", events).event_id == "M1"


def test_linear_edit_chain(resolve):
    events = [message("M1", 1000), message("M2", 1100, replaces="M1"), message("M3", 1200, replaces="M2")]
    assert resolve("M1", events).event_id == "M3"


def test_chain_is_independent_of_snapshot_order(resolve):
    events = [message("M3", 1200, replaces="M2"), message("M1", 1000), message("M2", 1100, replaces="M1")]
    assert resolve("M1", events).event_id == "M3"


def test_resolving_from_middle_of_chain(resolve):
    events = [message("M1"), message("M2", replaces="M1"), message("M3", replaces="M2")]
    assert resolve("M2", events).event_id == "M3"


def test_redaction_terminates_chain(resolve):
    events = [message("M1"), redaction("R1", "M1")]
    latest = resolve("M1", events)
    assert latest.event_id == "R1"
    assert latest.kind == EventKind.REDACTION


def test_redaction_after_edit(resolve):
    events = [message("M1"), message("M2", replaces="M1"), redaction("R1", "M2")]
    assert resolve("M1", events).event_id == "R1"


def test_nested_redaction_target_matches(resolve):
    events = [message("M1"), redaction("R1", "M1", nested=True)]
    assert resolve("M1", events).event_id == "R1"


def test_encrypted_edit_is_honored(resolve):
    events = [message("M1"), encrypted_edit("E1", "M1")]
    assert resolve("M1", events).event_id == "E1"


def test_encrypted_event_without_decrypted_message_is_ignored(resolve):
    events = [message("M1"), encrypted_edit("E1", "M1", decrypted_kind=EventKind.OTHER)]
    assert resolve("M1", events).event_id == "M1"


def test_encrypted_outer_content_is_not_inspected(resolve):
    wrapper = TimelineEvent(
        event_id="E1",
        kind=EventKind.ENCRYPTED,
        content={"m.relates_to": {"rel_type": "m.replace", "event_id": "M1"}},
    )
    assert resolve("M1", [message("M1"), wrapper]).event_id == "M1"


def test_non_replace_relation_is_ignored(resolve):
    reply = TimelineEvent(
        event_id="M2",
        kind=EventKind.MESSAGE,
        content={"m.relates_to": {"rel_type": "m.thread", "event_id": "M1"}},
    )
    assert resolve("M1", [message("M1"), reply]).event_id == "M1"


def test_other_kinds_never_relate(resolve):
    reaction = TimelineEvent(
        event_id="X1",
        kind=EventKind.OTHER,
        content={"redacts": "M1", "m.relates_to": {"rel_type": "m.replace", "event_id": "M1"}},
    )
    assert resolve("M1", [message("M1"), reaction]).event_id == "M1"


def test_malformed_relation_fields_end_the_chain(resolve):
    events = [
        message("M1"),
        TimelineEvent(event_id="R1", kind=EventKind.REDACTION, content={"redacts": "   "}),
        TimelineEvent(event_id="R2", kind=EventKind.REDACTION, content={"redacts": {"event_id": ""}}),
        TimelineEvent(event_id="R3", kind=EventKind.REDACTION, content=None),
        TimelineEvent(event_id="M2", kind=EventKind.MESSAGE, content={"m.relates_to": "M1"}),
    ]
    assert resolve("M1", events).event_id == "M1"


def test_missing_original_resolves_to_nothing(resolve):
    assert resolve("M1", [message("M2")]) is None


def test_empty_snapshot_resolves_to_nothing(resolve):
    assert resolve("M1", []) is None


def test_cycle_falls_back_to_original(resolve):
    # A is edited by B and B is edited by A.
    events = [message("A", replaces="B"), message("B", replaces="A")]
    assert resolve("A", events).event_id == "A"


def test_self_referencing_edit_falls_back_to_original(resolve):
    events = [message("A", replaces="A")]
    assert resolve("A", events).event_id == "A"


def test_long_cycle_terminates(resolve):
    n = 50
    events = [message(f"M{i}", replaces=f"M{(i - 1) % n}") for i in range(n)]
    assert resolve("M0", events).event_id == "M0"


def test_first_related_event_in_snapshot_order_wins(resolve):
    events = [message("M1"), message("M3", 3000, replaces="M1"), message("M2", 2000, replaces="M1")]
    assert resolve("M1", events).event_id == "M3"


def test_resolver_does_not_mutate_snapshot(resolve):
    events = [message("M1"), message("M2", replaces="M1"), redaction("R1", "M2")]
    before = list(events)
    resolve("M1", events)
    assert events == before


def test_generator_input_is_accepted(resolve):
    events = (e for e in [message("M1"), message("M2", replaces="M1")])
    assert resolve("M1", events).event_id == "M2"


def test_non_event_items_raise_type_error(resolve):
    with pytest.raises(TypeError):
        resolve("M1", [message("M1"), {"event_id": "M2"}])


# --- Redaction selection ---

def test_latest_redaction_wins(latest_redaction):
    events = [message("M1"), redaction("R1", "M1", ts=100), redaction("R2", "M1", ts=200)]
    assert latest_redaction("M1", events).event_id == "R2"


def test_latest_redaction_ignores_snapshot_order(latest_redaction):
    events = [redaction("R2", "M1", ts=200), message("M1"), redaction("R1", "M1", ts=100)]
    assert latest_redaction("M1", events).event_id == "R2"


def test_latest_redaction_ignores_other_targets(latest_redaction):
    events = [
        redaction("R1", "M1", ts=2000, reason="First reason"),
        redaction("R2", "M1", ts=3000, reason="Second reason"),
        redaction("R3", "M1", ts=4000, reason="Latest reason", nested=True),
        redaction("R-other", "M2", ts=3500, reason="Other reason"),
    ]
    latest = latest_redaction("M1", events)
    assert latest.event_id == "R3"
    assert latest.content["reason"] == "Latest reason"
    assert latest.timestamp == 4000


def test_latest_redaction_tie_keeps_snapshot_order(latest_redaction):
    events = [redaction("R1", "M1", ts=500), redaction("R2", "M1", ts=500)]
    assert latest_redaction("M1", events).event_id == "R1"


def test_no_redaction_found(latest_redaction):
    assert latest_redaction("M1", [message("M1")]) is None


def test_edits_are_not_redactions(latest_redaction):
    assert latest_redaction("M1", [message("M1"), message("M2", replaces="M1")]) is None


# --- Index specifics ---

def test_index_lookups():
    events = [message("M1"), message("M2", replaces="M1"), redaction("R1", "M1"), redaction("R2", "M1")]
    index = RelationIndex(events)
    assert len(index) == 4
    assert index.get("M2").event_id == "M2"
    assert index.get("missing") is None
    assert [e.event_id for e in index.related_to("M1")] == ["M2", "R1", "R2"]
    assert [e.event_id for e in index.redactions_for("M1")] == ["R1", "R2"]
    assert index.related_to("M2") == []


def test_index_keeps_first_of_duplicate_ids():
    first = message("M1", ts=1)
    second = message("M1", ts=2)
    assert RelationIndex([first, second]).get("M1") is first
    assert resolve_latest("M1", [first, second]) is first
