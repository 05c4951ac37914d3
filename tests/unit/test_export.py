from __future__ import annotations

import orjson
import pytest

from typedproof.core.errors import ProofFormatError
from typedproof.core.events import Checkpoint, StoredEvent
from typedproof.core.export import (
    PROOF_FORMAT_VERSION,
    build_multi_file_document,
    build_proof_document,
    dumps_document,
    is_multi_file,
    is_version_supported,
    load_document,
    parse_proof,
    parse_version,
)


def _document(**overrides) -> dict:
    event = StoredEvent(
        sequence=0,
        timestamp=1.0,
        type="contentChange",
        input_type="insertText",
        data="a",
        previous_hash="g" * 64,
        hash="h" * 64,
        description="typed",
    )
    kwargs = dict(
        typing_proof_hash="t" * 64,
        typing_proof_data={"finalContentHash": "c"},
        signature={"totalEvents": 1, "finalHash": "h" * 64, "events": [event.to_dict()]},
        fingerprint_hash="fp",
        fingerprint_components={"os": "linux"},
        user_agent="agent",
        is_pure_typing=True,
        checkpoints=[Checkpoint(0, "h" * 64, 1.0, "x")],
        content="a",
        language="python",
    )
    kwargs.update(overrides)
    return build_proof_document(**kwargs)


def test_version_parsing_and_support() -> None:
    assert parse_version("1.2") == (1, 2, 0)
    with pytest.raises(ProofFormatError):
        parse_version("one.two")
    assert is_version_supported(PROOF_FORMAT_VERSION)
    assert is_version_supported("1.4.0")
    assert not is_version_supported("0.9.0")
    assert not is_version_supported("2.0.0")
    assert not is_version_supported(None)
    assert not is_version_supported("garbage")


def test_build_document_layout() -> None:
    doc = _document()
    assert doc["version"] == PROOF_FORMAT_VERSION
    assert doc["fingerprint"] == {"hash": "fp", "components": {"os": "linux"}}
    assert doc["metadata"]["isPureTyping"] is True
    assert doc["metadata"]["timestamp"].endswith("Z")
    assert doc["checkpoints"][0]["eventIndex"] == 0
    assert doc["content"] == "a"
    assert doc["language"] == "python"


def test_optional_content_and_language_omitted() -> None:
    doc = _document(content=None, language=None)
    assert "content" not in doc
    assert "language" not in doc


def test_dump_load_and_parse() -> None:
    raw = dumps_document(_document())
    parsed = parse_proof(load_document(raw))
    assert parsed.version == PROOF_FORMAT_VERSION
    assert parsed.events[0].description == "typed"
    assert parsed.events[0].previous_hash == "g" * 64
    assert parsed.checkpoints[0].hash == "h" * 64
    assert parsed.signature == {"totalEvents": 1, "finalHash": "h" * 64}
    assert parsed.content == "a"


def test_load_rejects_non_object() -> None:
    with pytest.raises(ProofFormatError):
        load_document(b"[1, 2]")


@pytest.mark.parametrize(
    "mutate",
    [
        lambda d: d.pop("proof"),
        lambda d: d["proof"].pop("events"),
        lambda d: d.__setitem__("checkpoints", {"a": 1}),
        lambda d: d["proof"]["events"][0].pop("sequence"),
        lambda d: d["checkpoints"][0].pop("eventIndex"),
    ],
)
def test_parse_rejects_structural_damage(mutate) -> None:
    doc = orjson.loads(dumps_document(_document()))
    mutate(doc)
    with pytest.raises(ProofFormatError):
        parse_proof(doc)


def test_multi_file_document() -> None:
    pure = _document()
    impure = _document(is_pure_typing=False, checkpoints=[])
    doc = build_multi_file_document(
        {"a.py": pure, "b.py": impure},
        fingerprint_hash="fp",
        fingerprint_components=None,
        tab_switches=[{"from": "a.py", "to": "b.py", "timestamp": 3.0}],
        user_agent="agent",
    )
    assert is_multi_file(doc)
    assert not is_multi_file(pure)
    assert doc["metadata"]["totalFiles"] == 2
    assert doc["metadata"]["overallPureTyping"] is False
    assert "checkpoints" in doc["files"]["a.py"]
    assert "checkpoints" not in doc["files"]["b.py"]
    assert doc["tabSwitches"][0]["to"] == "b.py"
