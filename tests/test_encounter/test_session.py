"""Tests for EncounterSession: seeding, change protocol, save and completion."""

import pytest

from medicore.core.exceptions import ChangeRejected, SessionStateError
from medicore.encounter import EncounterSession, EncounterStatus, SliceId
from medicore.models import Diagnosis, VitalSigns


def _complete_record(session):
    session.editor(SliceId.DIAGNOSIS).add("偏头痛", reasoning="反复发作性单侧头痛")


class TestStart:
    def test_empty_session(self, session):
        assert session.status == EncounterStatus.EMPTY
        assert session.patient is None
        assert session.record is None
        assert session.dirty is False

    def test_seeds_complaint_and_vitals(self, active_session, sample_patient):
        record = active_session.record

        assert record.history.present_illness == "头痛三天"
        assert record.examination.vital_signs == sample_patient.vital_signs
        assert active_session.status == EncounterStatus.SEEDED
        assert active_session.dirty is False

    def test_patient_without_vitals_gets_empty_vitals(self, session, second_patient):
        session.start(second_patient)

        assert session.record.examination.vital_signs == VitalSigns()
        assert session.record.history.present_illness == ""

    def test_start_none_is_noop(self, active_session, sample_patient):
        active_session.start(None)

        assert active_session.patient == sample_patient

    def test_switch_discards_without_persisting(self, active_session, second_patient, sink):
        active_session.apply_change("history", "past_history", "高血压病史5年")
        active_session.start(second_patient)

        assert active_session.patient == second_patient
        assert active_session.record.history.past_history == ""
        assert active_session.dirty is False
        assert sink.writes == []


class TestApplyChange:
    def test_change_marks_dirty(self, active_session):
        active_session.apply_change("examination", "general_examination", "神志清楚")

        assert active_session.dirty is True
        assert active_session.status == EncounterStatus.DIRTY
        assert active_session.record.examination.general_examination == "神志清楚"

    def test_vitals_round_trip(self, active_session):
        vitals = VitalSigns(temperature=37.2, blood_pressure="120/80", heart_rate=72, respiratory_rate=18)
        active_session.apply_change(SliceId.EXAMINATION, "vital_signs", vitals)

        assert active_session.record.examination.vital_signs == vitals
        assert active_session.dirty is True

    def test_unknown_slice_rejected(self, active_session):
        before = active_session.record
        with pytest.raises(ChangeRejected):
            active_session.apply_change("billing", "total", 1)
        assert active_session.record is before
        assert active_session.dirty is False

    def test_unknown_field_rejected(self, active_session):
        with pytest.raises(ChangeRejected) as exc:
            active_session.apply_change("history", "mood", "good")
        assert exc.value.field == "mood"

    def test_invalid_value_rejected(self, active_session):
        before = active_session.record
        with pytest.raises(ChangeRejected):
            active_session.apply_change("examination", "vital_signs", {"temperature": 60})
        assert active_session.record == before

    def test_changes_require_active_encounter(self, session):
        with pytest.raises(SessionStateError):
            session.apply_change("history", "present_illness", "x")


class TestChiefComplaint:
    def test_updates_patient_and_present_illness(self, active_session):
        active_session.update_chief_complaint("头痛伴恶心")

        assert active_session.patient.chief_complaint == "头痛伴恶心"
        assert active_session.record.history.present_illness == "头痛伴恶心"
        assert active_session.dirty is True


class TestSave:
    def test_save_twice_persists_once(self, active_session, sink):
        active_session.apply_change("history", "past_history", "无")

        assert active_session.save() is True
        assert active_session.save() is False
        assert len(sink.writes) == 1
        assert active_session.dirty is False
        assert active_session.status == EncounterStatus.SAVED

    def test_clean_session_does_not_write(self, active_session, sink):
        assert active_session.save() is False
        assert sink.writes == []

    def test_snapshot_contents(self, active_session, sink, doctor, clock):
        active_session.apply_change("history", "past_history", "无")
        active_session.save()

        snapshot = sink.writes[0]
        assert snapshot.encounter_id == active_session.encounter_id
        assert snapshot.operator == doctor
        assert snapshot.saved_at == clock()
        assert snapshot.completed_at is None

    def test_sink_failure_keeps_dirty(self, doctor, sample_patient):
        class FailingSink:
            def persist(self, encounter):
                raise IOError("disk full")

        session = EncounterSession(FailingSink(), doctor)
        session.start(sample_patient)
        session.apply_change("history", "past_history", "无")

        with pytest.raises(IOError):
            session.save()
        assert session.dirty is True


class TestComplete:
    def test_empty_present_illness_blocks(self, session, second_patient, sink):
        session.start(second_patient)
        result = session.complete()

        assert result.ok is False
        assert result.failure.target == SliceId.HISTORY
        assert session.patient == second_patient
        assert sink.writes == []

    def test_cleared_present_illness_blocks_despite_diagnosis(self, active_session, sink):
        _complete_record(active_session)
        active_session.apply_change("history", "present_illness", "")

        result = active_session.complete()

        assert result.ok is False
        assert result.failure.rule == "present_illness_required"
        assert active_session.active
        assert sink.writes == []

    def test_missing_diagnosis_blocks(self, active_session, sink):
        result = active_session.complete()

        assert result.ok is False
        assert result.failure.rule == "diagnosis_required"
        assert result.failure.target == SliceId.DIAGNOSIS
        assert active_session.status == EncounterStatus.SEEDED

    def test_success_persists_and_tears_down(self, active_session, sink, clock):
        _complete_record(active_session)
        encounter_id = active_session.encounter_id

        result = active_session.complete()

        assert result.ok is True
        assert result.persisted.completed_at == clock()
        assert sink.latest(encounter_id).is_final
        assert active_session.patient is None
        assert active_session.record is None
        assert active_session.status == EncounterStatus.COMPLETED

    def test_completed_session_rejects_changes(self, active_session):
        _complete_record(active_session)
        active_session.complete()

        with pytest.raises(SessionStateError):
            active_session.save()

    def test_can_start_after_completion(self, active_session, second_patient):
        _complete_record(active_session)
        active_session.complete()
        active_session.start(second_patient)

        assert active_session.status == EncounterStatus.SEEDED

    def test_sink_failure_leaves_session_open(self, doctor, sample_patient):
        class FailingSink:
            def persist(self, encounter):
                raise IOError("unavailable")

        session = EncounterSession(FailingSink(), doctor)
        session.start(sample_patient)
        _complete_record(session)

        with pytest.raises(IOError):
            session.complete()
        assert session.patient == sample_patient
        assert session.status == EncounterStatus.DIRTY


class TestEditorsAndAdvisories:
    def test_editor_sees_live_slice(self, active_session):
        editor = active_session.editor("history")
        active_session.apply_change("history", "present_illness", "更新后")

        assert editor.current.present_illness == "更新后"

    def test_editor_writes_through_session(self, active_session):
        active_session.editor(SliceId.DIAGNOSIS).add("高血压")

        assert isinstance(active_session.record.diagnosis.diagnoses[0], Diagnosis)
        assert active_session.dirty is True

    def test_advisories(self, active_session):
        active_session.editor(SliceId.DIAGNOSIS).add("头痛待查", type="secondary")
        codes = {a.code for a in active_session.advisories()}

        assert "diagnosis_reasoning_missing" in codes
        assert "primary_diagnosis_missing" in codes
        assert "vital_signs_incomplete" not in codes

    def test_editor_bound_to_its_encounter(self, active_session, second_patient):
        editor = active_session.editor(SliceId.HISTORY)
        active_session.start(second_patient)

        with pytest.raises(SessionStateError):
            editor.set_past_history("旧患者的既往史")
        with pytest.raises(SessionStateError):
            editor.current
        assert active_session.record.history.past_history == ""
        assert active_session.dirty is False

    def test_editor_rejects_writes_after_completion(self, active_session):
        editor = active_session.editor(SliceId.FOLLOWUP)
        _complete_record(active_session)
        assert active_session.complete().ok

        with pytest.raises(SessionStateError):
            editor.set_plan("两周后复诊")
