"""Tests for the investigations editor: lifecycle, results and attachments."""

import pytest

from medicore.attachments import DataUriAttachmentUploader, UploadFile
from medicore.core.exceptions import AttachmentRejected, AttachmentUploadError, InvalidTransitionError
from medicore.editors import InvestigationPanel, PanelItem
from medicore.editors.investigations import can_transition
from medicore.encounter import SliceId
from medicore.models.consultation import (
    InvestigationResult,
    InvestigationStatus,
    InvestigationType,
    Priority,
    ResultStatus,
    ResultValue,
)

S = InvestigationStatus


@pytest.fixture
def editor(active_session):
    return active_session.editor(SliceId.INVESTIGATIONS)


@pytest.fixture
def blood_test(editor):
    return editor.order("血常规", priority=Priority.URGENT, department="检验科")


def _walk(editor, inv_id, *statuses):
    for status in statuses:
        editor.advance(inv_id, status)


class TestOrdering:
    def test_new_investigation_is_ordered(self, blood_test, doctor, clock):
        assert blood_test.status == S.ORDERED
        assert blood_test.ordered_by == doctor.id
        assert blood_test.ordered_at == clock()

    def test_status_argument_ignored(self, editor):
        inv = editor.order("尿常规", status="completed")
        assert inv.status == S.ORDERED

    def test_apply_panel(self, editor):
        panel = InvestigationPanel(
            name="头痛筛查",
            category="神经",
            items=[PanelItem("头颅MRI", InvestigationType.IMAGING, code="MRI01"), PanelItem("血常规")],
        )

        added = editor.apply_panel(panel)

        assert [i.name for i in added] == ["头颅MRI", "血常规"]
        assert all(i.status == S.ORDERED and i.category == "神经" for i in added)
        assert len(editor.current.investigations) == 2

    def test_remove(self, editor, blood_test):
        editor.remove(blood_test.id)
        assert editor.current.investigations == []


class TestLifecycle:
    @pytest.mark.parametrize(
        "current,target,allowed",
        [
            (S.ORDERED, S.SCHEDULED, True),
            (S.SCHEDULED, S.IN_PROGRESS, True),
            (S.IN_PROGRESS, S.COMPLETED, True),
            (S.COMPLETED, S.REPORTED, True),
            (S.ORDERED, S.COMPLETED, False),
            (S.REPORTED, S.ORDERED, False),
            (S.COMPLETED, S.CANCELLED, False),
            (S.CANCELLED, S.SCHEDULED, False),
        ],
    )
    def test_transition_table(self, current, target, allowed):
        assert can_transition(current, target) is allowed

    @pytest.mark.parametrize("path", [[], [S.SCHEDULED], [S.SCHEDULED, S.IN_PROGRESS]])
    def test_cancel_before_completion(self, editor, blood_test, path):
        _walk(editor, blood_test.id, *path)
        assert editor.cancel(blood_test.id).status == S.CANCELLED

    def test_full_walk_sets_timestamps(self, editor, blood_test, clock):
        _walk(editor, blood_test.id, S.SCHEDULED, S.IN_PROGRESS, S.COMPLETED)
        inv = editor.current.investigations[0]

        assert inv.status == S.COMPLETED
        assert inv.scheduled_at == clock()
        assert inv.completed_at == clock()

    def test_by_status(self, editor, blood_test):
        ct = editor.order("头颅CT", type=InvestigationType.IMAGING)
        editor.advance(ct.id, S.SCHEDULED)

        assert [inv.id for inv in editor.by_status(S.ORDERED)] == [blood_test.id]
        assert [inv.id for inv in editor.by_status(S.SCHEDULED)] == [ct.id]
        assert editor.by_status(S.REPORTED) == []

    def test_skipping_raises(self, editor, blood_test, active_session):
        before = active_session.record
        with pytest.raises(InvalidTransitionError):
            editor.advance(blood_test.id, S.COMPLETED)
        assert active_session.record == before


class TestResults:
    def test_result_requires_completion(self, editor, blood_test):
        with pytest.raises(InvalidTransitionError):
            editor.record_result(blood_test.id, {"status": "normal", "summary": "正常"})

    def test_result_reports_completed_investigation(self, editor, blood_test, doctor):
        _walk(editor, blood_test.id, S.SCHEDULED, S.IN_PROGRESS, S.COMPLETED)
        result = InvestigationResult(
            status=ResultStatus.ABNORMAL,
            summary="白细胞升高",
            values=[ResultValue(parameter="WBC", value="12.5", unit="10^9/L", reference_range="4-10", status="high")],
        )

        inv = editor.record_result(blood_test.id, result)

        assert inv.status == S.REPORTED
        assert inv.result.values[0].parameter == "WBC"
        assert inv.result.reported_by == doctor.id

    async def test_attach_result_file(self, editor, blood_test):
        pdf = UploadFile(filename="report.pdf", content_type="application/pdf", data=b"%PDF-1.4")

        attachment = await editor.attach_result_file(blood_test.id, pdf, DataUriAttachmentUploader())

        inv = editor.current.investigations[0]
        assert attachment.type == "pdf"
        assert attachment.url.startswith("data:application/pdf;base64,")
        assert inv.result.attachments == [attachment]

    async def test_attachment_survives_later_result(self, editor, blood_test):
        png = UploadFile(filename="film.png", content_type="image/png", data=b"png")
        await editor.attach_result_file(blood_test.id, png, DataUriAttachmentUploader())
        _walk(editor, blood_test.id, S.SCHEDULED, S.IN_PROGRESS, S.COMPLETED)

        inv = editor.record_result(blood_test.id, {"status": "normal", "summary": "未见异常"})

        assert len(inv.result.attachments) == 1

    async def test_oversized_result_file_rejected_before_upload(self, editor, blood_test, active_session):
        before = active_session.record
        scan = UploadFile(filename="mri.dcm", content_type="application/dicom", data=b"0" * 65)

        with pytest.raises(AttachmentRejected, match="exceeds"):
            await editor.attach_result_file(blood_test.id, scan, DataUriAttachmentUploader(), max_bytes=64)

        assert active_session.record == before

    async def test_empty_result_file_rejected(self, editor, blood_test):
        with pytest.raises(AttachmentRejected, match="empty"):
            await editor.attach_result_file(
                blood_test.id, UploadFile("a.pdf", "application/pdf", b""), DataUriAttachmentUploader()
            )

    async def test_failed_upload_changes_nothing(self, editor, blood_test, active_session):
        class Failing(DataUriAttachmentUploader):
            async def upload(self, file):
                raise AttachmentUploadError("offline")

        before = active_session.record
        with pytest.raises(AttachmentUploadError):
            await editor.attach_result_file(
                blood_test.id, UploadFile("a.png", "image/png", b"x"), Failing()
            )
        assert active_session.record == before
