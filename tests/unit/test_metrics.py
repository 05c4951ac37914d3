from __future__ import annotations

import pytest

from typedproof.metrics import MetricsCollector


@pytest.mark.asyncio
async def test_disabled_metrics_still_count_in_memory() -> None:
    mc = MetricsCollector(enabled=False)
    await mc.record_event_recorded(event_type="contentChange")
    await mc.record_event_failed()
    await mc.record_posw_computed(duration_seconds=0.01)
    await mc.record_verification(valid=True, duration_seconds=0.5)
    await mc.record_verification(valid=False)

    snap = await mc.snapshot()
    assert snap.events_recorded == 1
    assert snap.events_failed == 1
    assert snap.posw_computed == 1
    assert snap.verifications_passed == 1
    assert snap.verifications_failed == 1
    assert mc.is_enabled is False
    assert mc.registry is None


@pytest.mark.asyncio
async def test_enabled_exports_prometheus_samples() -> None:
    mc = MetricsCollector(enabled=True)
    await mc.record_event_recorded(event_type="contentChange")
    await mc.record_event_recorded()
    await mc.record_event_failed()
    await mc.record_posw_computed(duration_seconds=0.002)
    await mc.record_verification(valid=False, duration_seconds=0.3)

    reg = mc.registry
    assert reg is not None
    assert reg.get_sample_value(
        "typedproof_events_recorded_total", {"event_type": "contentChange"}
    ) == 1.0
    assert reg.get_sample_value(
        "typedproof_events_recorded_total", {"event_type": "unknown"}
    ) == 1.0
    assert reg.get_sample_value("typedproof_event_failures_total") == 1.0
    assert reg.get_sample_value("typedproof_posw_compute_seconds_count") == 1.0
    assert reg.get_sample_value(
        "typedproof_verifications_total", {"outcome": "invalid"}
    ) == 1.0
    assert reg.get_sample_value("typedproof_verification_seconds_sum") == pytest.approx(0.3)


def test_registries_are_isolated() -> None:
    assert MetricsCollector(enabled=True).registry is not MetricsCollector(enabled=True).registry
