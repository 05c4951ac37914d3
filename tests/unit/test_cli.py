"""
Unit tests for the CLI verifier.
"""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import orjson
import pytest

from typedproof.cli.main import EXIT_INVALID, EXIT_USAGE, EXIT_VALID, cli_main, main
from typedproof.core.export import dumps_document


def _write(tmp_path: Path, document: dict, name: str = "proof.json") -> Path:
    path = tmp_path / name
    path.write_bytes(dumps_document(document))
    return path


@pytest.mark.asyncio
async def test_valid_proof_text_output(tmp_path, make_proof_document, capsys) -> None:
    path = _write(tmp_path, await make_proof_document("abc"))
    assert await main(["verify", str(path)]) == EXIT_VALID
    out = capsys.readouterr().out
    assert "proof.json: PASSED" in out
    assert "chain:       valid" in out
    assert "pure typing: yes" in out
    assert "3 iterations per event" in out


@pytest.mark.asyncio
async def test_tampered_proof_reports_divergent_event(
    tmp_path, make_proof_document, capsys
) -> None:
    document = await make_proof_document("abcdef")
    document["proof"]["events"][3]["data"] = "X"
    path = _write(tmp_path, document)
    assert await main(["verify", str(path)]) == EXIT_INVALID
    out = capsys.readouterr().out
    assert "FAILED" in out
    assert "first divergent event: #3" in out
    assert "POSW_VERIFICATION_FAILED" in out


@pytest.mark.asyncio
async def test_json_output(tmp_path, make_proof_document, capsys) -> None:
    path = _write(tmp_path, await make_proof_document("xy"))
    assert await main(["verify", str(path), "--format", "json"]) == EXIT_VALID
    report = orjson.loads(capsys.readouterr().out)
    assert report["valid"] is True
    assert report["eventCount"] == 2
    assert report["multiFile"] is False
    assert report["path"] == str(path)


@pytest.mark.asyncio
async def test_sampled_mode_with_seed(tmp_path, make_proof_document, capsys) -> None:
    path = _write(tmp_path, await make_proof_document("a" * 40))
    code = await main(["verify", str(path), "--sampled", "1", "--seed", "3", "--format", "json"])
    assert code == EXIT_VALID
    report = orjson.loads(capsys.readouterr().out)
    assert report["sampledResult"]["totalSegments"] == 2


@pytest.mark.asyncio
async def test_quiet_prints_nothing(tmp_path, make_proof_document, capsys) -> None:
    document = await make_proof_document("q")
    document["content"] = "changed"
    path = _write(tmp_path, document)
    assert await main(["verify", str(path), "--quiet"]) == EXIT_INVALID
    captured = capsys.readouterr()
    assert captured.out == ""
    assert captured.err == ""


@pytest.mark.asyncio
async def test_missing_file_is_an_error(tmp_path, capsys) -> None:
    assert await main(["verify", str(tmp_path / "absent.json")]) == EXIT_INVALID
    assert "Error:" in capsys.readouterr().err


@pytest.mark.asyncio
async def test_invalid_json_is_an_error(tmp_path, capsys) -> None:
    path = tmp_path / "bad.json"
    path.write_text("{not json")
    assert await main(["verify", str(path)]) == EXIT_INVALID
    assert "SERIALIZATION" in capsys.readouterr().err


@pytest.mark.asyncio
async def test_unsupported_version_is_invalid(tmp_path, make_proof_document, capsys) -> None:
    document = await make_proof_document("v")
    document["version"] = "9.0.0"
    path = _write(tmp_path, document)
    assert await main(["verify", str(path)]) == EXIT_INVALID
    assert "INVALID_PROOF_FORMAT" in capsys.readouterr().out


@pytest.mark.asyncio
async def test_usage_errors(tmp_path, capsys) -> None:
    assert await main([]) == EXIT_USAGE
    assert await main(["verify", str(tmp_path / "p.json"), "--sampled", "0"]) == EXIT_USAGE
    assert await main(["verify", str(tmp_path / "p.json"), "--format", "xml"]) == EXIT_USAGE


@pytest.mark.asyncio
async def test_verbose_enables_diagnostics(tmp_path, make_proof_document) -> None:
    from typedproof.core import diagnostics

    path = _write(tmp_path, await make_proof_document("v"))
    with patch.object(diagnostics, "set_enabled") as mock_enable:
        await main(["verify", str(path), "--verbose", "--quiet"])
    mock_enable.assert_called_once_with(True)


@pytest.mark.asyncio
async def test_tampered_metadata_counter_gives_verdict(
    tmp_path, make_proof_document, capsys
) -> None:
    document = await make_proof_document("abc")
    document["typingProofData"]["metadata"]["pasteEvents"] = "zero"
    path = _write(tmp_path, document)
    assert await main(["verify", str(path)]) == EXIT_INVALID
    out = capsys.readouterr().out
    assert "proof.json: FAILED" in out
    assert "metadata:    INVALID" in out
    assert "VERIFICATION_FAILED" in out


@pytest.mark.asyncio
async def test_non_object_metadata_gives_json_verdict(
    tmp_path, make_proof_document, capsys
) -> None:
    document = await make_proof_document("abc")
    document["typingProofData"]["metadata"] = ["not", "an", "object"]
    path = _write(tmp_path, document)
    assert await main(["verify", str(path), "--format", "json"]) == EXIT_INVALID
    report = orjson.loads(capsys.readouterr().out)
    assert report["valid"] is False
    assert report["metadataValid"] is False


@pytest.mark.asyncio
async def test_text_output_shows_posw_stats_and_attestations(
    tmp_path, fast_settings, capsys
) -> None:
    from typedproof.session import TypingProof

    attestation = {
        "verified": True,
        "score": 0.9,
        "action": "create",
        "timestamp": "2026-01-01T00:00:00Z",
        "hostname": "typed.example",
        "signature": "sig",
    }
    session = TypingProof(settings=fast_settings)
    await session.initialize("fp-test", {"platform": "pytest"})
    try:
        await session.record_human_attestation(attestation)
        await session.record_pre_export_attestation({**attestation, "action": "export"})
        document = await session.export_proof("")
    finally:
        await session.close()
    path = _write(tmp_path, document)

    assert await main(["verify", str(path)]) == EXIT_VALID
    out = capsys.readouterr().out
    assert "attestation: create verified (score 0.90, action create" in out
    assert "attestation: export verified (score 0.90, action export" in out
    assert "total " in out and "max " in out


def test_cli_main_runs_event_loop() -> None:
    with patch("typedproof.cli.main.asyncio.run") as mock_run:
        mock_run.return_value = 0
        assert cli_main(["verify", "x.json"]) == 0
        mock_run.assert_called_once()
        mock_run.call_args.args[0].close()
