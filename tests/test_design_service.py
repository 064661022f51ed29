from __future__ import annotations

from ensemble.catalog import CEILING_CAN, DEFAULT_CATALOG, FixtureCatalog
from ensemble.service import LightingDesignService, ServiceResponse
from ensemble.errors import NotFoundError
from ensemble.schema import Design


class _StaticDetector:
    def analyze(self, image):
        return {
            "summary": {"total_rooms": 1},
            "rooms": [
                {
                    "id": "k1",
                    "name": "Kitchen",
                    "type": "kitchen",
                    "boundary": [0, 0, 400, 300],
                    "area": "120 sq ft",
                    "objects": [{"type": "kitchen_island", "position": [200, 150], "dimensions": "6x3 ft"}],
                }
            ],
        }


def _service_with_design(room_id: str = "room_1"):
    svc = LightingDesignService()
    sid = svc.upload(b"png-bytes").data["sessionId"]
    res = svc.generate_design(sid, room_id)
    assert res.ok
    return svc, sid


def test_upload_without_detector_uses_demo() -> None:
    svc = LightingDesignService()
    res = svc.upload(b"png-bytes")
    assert res.ok
    assert res.message == "Found 6 rooms"
    assert res.data["source"] == "demo"
    assert len(res.data["rooms"]) == 6
    assert res.warnings == ["Room detector unavailable; showing demo rooms"]
    d = res.to_dict()
    assert d["success"] is True
    assert d["sessionId"] == res.data["sessionId"]
    assert d["warnings"]


def test_upload_missing_file_is_malformed() -> None:
    res = LightingDesignService().upload(None)
    assert not res.ok
    assert res.error == "malformed_input"
    assert res.to_dict() == {"success": False, "message": "No file uploaded", "error": "malformed_input"}


def test_upload_with_detector() -> None:
    svc = LightingDesignService(detector=_StaticDetector())
    res = svc.upload(b"png-bytes", image_meta={"width": 400, "height": 300})
    assert res.ok
    assert res.data["source"] == "detector"
    assert res.warnings == []
    sid = res.data["sessionId"]
    design = svc.generate_design(sid, "k1")
    assert design.ok
    assert [f["id"] for f in design.data["fixtures"]][:2] == ["pendant_0", "pendant_1"]


def test_reupload_resets_designs() -> None:
    svc, sid = _service_with_design()
    assert svc.get_design(sid, "room_1").ok
    again = svc.upload(b"other", session_id=sid)
    assert again.data["sessionId"] == sid
    res = svc.get_design(sid, "room_1")
    assert not res.ok
    assert res.error == "not_found"


def test_generate_design_payload() -> None:
    svc, sid = _service_with_design()
    res = svc.get_design(sid, "room_1")
    assert res.ok
    assert res.data["cost"] == 2450
    assert len(res.data["fixtures"]) == 24
    assert res.data["metrics"]["totalWatts"] == 330.0
    assert res.data["metrics"]["wattsPerSqFt"] == 1.03
    assert res.data["design"]["roomType"] == "kitchen"
    assert res.data["reasoning"][0]["kind"] == "overall"


def test_unknown_session_and_room() -> None:
    svc = LightingDesignService()
    res = svc.generate_design("nope", "room_1")
    assert not res.ok
    assert res.error == "not_found"
    sid = svc.upload(b"x").data["sessionId"]
    res = svc.generate_design(sid, "room_42")
    assert res.error == "not_found"
    assert "room_42" in res.message
    res = svc.chat(sid, "room_1", "add a pendant")
    assert res.error == "not_found"


def test_chat_updates_stored_design() -> None:
    svc, sid = _service_with_design()
    res = svc.chat(sid, "room_1", "add a pendant")
    assert res.ok
    assert res.data["intent"] == "add:Pendant"
    assert res.data["designUpdate"]["totalCost"] == 2600
    assert len(res.data["fixtures"]) == 25
    assert svc.get_design(sid, "room_1").data["cost"] == 2600


def test_chat_query_does_not_change_design() -> None:
    svc, sid = _service_with_design()
    res = svc.chat(sid, "room_1", "how much does it cost")
    assert res.ok
    assert res.data == {"intent": "cost"}
    assert res.message.startswith("The current design costs $2450.")


def test_chat_rejects_empty_message() -> None:
    svc, sid = _service_with_design()
    res = svc.chat(sid, "room_1", "  ")
    assert not res.ok
    assert res.error == "malformed_input"
    assert svc.get_design(sid, "room_1").data["cost"] == 2450


def test_chat_batch_applies_in_order() -> None:
    svc, sid = _service_with_design()
    res = svc.chat_batch(sid, "room_1", ["add a pendant", "add a pendant", "remove one", "cost?"])
    assert res.ok
    assert res.message == "Processed 4 messages"
    intents = [r.get("intent") for r in res.data["responses"]]
    assert intents == ["add:Pendant", "add:Pendant", "remove", "cost"]
    # 24 + 2 pendants, then one can removed
    assert len(res.data["fixtures"]) == 25
    assert res.data["cost"] == 2450 + 300 - 75
    assert res.data["responses"][3]["message"].startswith(f"The current design costs ${res.data['cost']}.")


def test_chat_batch_is_rejected_as_a_whole() -> None:
    svc, sid = _service_with_design()
    res = svc.chat_batch(sid, "room_1", ["add a pendant", ""])
    assert not res.ok
    assert res.error == "malformed_input"
    assert svc.get_design(sid, "room_1").data["cost"] == 2450
    assert svc.chat_batch(sid, "room_1", "add a pendant").error == "malformed_input"


def test_history_records_actions() -> None:
    svc, sid = _service_with_design()
    svc.chat(sid, "room_1", "add a pendant")
    svc.chat(sid, "room_1", "why?")
    actions = [h["action"] for h in svc.history(sid).data["history"]]
    assert actions == ["floorplan.analyze", "design.generate", "design.add"]


def test_listeners_receive_updates_and_failures_become_warnings() -> None:
    svc, sid = _service_with_design()
    events: list = []
    svc.subscribe(sid, events.append)

    def broken(event) -> None:
        raise RuntimeError("gone")

    svc.subscribe(sid, broken)
    res = svc.chat(sid, "room_1", "add more cans")
    assert res.ok
    assert len(events) == 1
    assert events[0]["event"] == "design-updated"
    assert events[0]["roomId"] == "room_1"
    assert events[0]["design"]["totalCost"] == 2525
    assert res.warnings and "gone" in res.warnings[0]


def test_evict_session() -> None:
    svc, sid = _service_with_design()
    handle = svc.subscribe(sid, lambda e: None)
    assert svc.evict(sid).message == "Session evicted"
    assert svc.broadcaster.listener_count(sid) == 0
    assert svc.unsubscribe(handle) is False
    assert svc.get_design(sid, "room_1").error == "not_found"
    assert svc.evict(sid).message == "Session not present"


def test_failure_response_from_error() -> None:
    res = ServiceResponse.failure(NotFoundError("Room not found: x"))
    assert res.to_dict() == {"success": False, "message": "Room not found: x", "error": "not_found"}


def test_history_diffs_track_fixture_changes() -> None:
    svc, sid = _service_with_design("room_6")
    svc.chat(sid, "room_6", "add a pendant")
    history = svc.history(sid).data["history"]
    edit = history[-1]
    assert edit["room_id"] == "room_6"
    assert edit["metadata"] == {"intent": "add:Pendant"}
    assert edit["diffs"] == [
        {"added": ["user_pendant_1"], "removed": [], "cost_before": 540, "cost_after": 690}
    ]


class _GarbledDetector:
    def analyze(self, image):
        return {
            "rooms": [
                {
                    "type": "kitchen",
                    "boundary": [0, 0, "wide", 300],
                    "objects": [{"type": "sink", "position": {"x": None}}],
                }
            ]
        }


def test_upload_with_unreadable_numbers_falls_back_to_demo() -> None:
    svc = LightingDesignService(detector=_GarbledDetector())
    res = svc.upload(b"png-bytes")
    assert res.ok
    assert res.data["source"] == "demo"
    assert len(res.data["rooms"]) == 6
    assert "wide" in res.warnings[0]
    assert res.warnings[0].endswith("showing demo rooms")


def _cans_only_service() -> LightingDesignService:
    return LightingDesignService(catalog=FixtureCatalog({CEILING_CAN: DEFAULT_CATALOG[CEILING_CAN]}))


def test_partial_catalog_reports_mismatch_instead_of_raising() -> None:
    svc = _cans_only_service()
    sid = svc.upload(b"png-bytes").data["sessionId"]
    res = svc.generate_design(sid, "room_4")
    assert not res.ok
    assert res.error == "catalog_mismatch"
    assert "Linear Cove" in res.message
    assert svc.get_design(sid, "room_4").error == "not_found"


def test_partial_catalog_chat_add_is_rejected() -> None:
    svc = _cans_only_service()
    sid = svc.upload(b"png-bytes").data["sessionId"]
    session = svc.store.require(sid)
    room = session.analysis.rooms[0]
    session.designs[room.id] = Design.empty(room)
    res = svc.chat(sid, room.id, "add a pendant")
    assert res.error == "catalog_mismatch"
    ok = svc.chat(sid, room.id, "add more cans")
    assert ok.ok
    batch = svc.chat_batch(sid, room.id, ["add more cans", "add a pendant"])
    assert batch.error == "catalog_mismatch"
    assert len(svc.get_design(sid, room.id).data["fixtures"]) == 1


def test_unexpected_exception_becomes_internal_error(monkeypatch) -> None:
    svc, sid = _service_with_design()

    def explode(*args, **kwargs):
        raise ZeroDivisionError("bad area")

    monkeypatch.setattr("ensemble.service.synthesize", explode)
    res = svc.generate_design(sid, "room_1")
    assert not res.ok
    assert res.error == "internal_error"
    assert "bad area" in res.message
    assert res.to_dict()["success"] is False
