"""
Integration tests for the AyurCare application.

These tests verify the interaction between components: records stored through the
`RecordService` flow into the summary composer, the summary feeds the analysis
dispatcher, and the export helpers read back what the service persisted.
"""
import io
import json

import pandas as pd

from ayurcare.analysis import AnalysisDispatcher, AnalysisRequest
from ayurcare.config import AppConfig
from ayurcare.models import AssessmentRecord, DoshaScores, TimelineEntry, TreatmentRecord
from ayurcare.records import RecordService
from ayurcare.summary import compose_patient_summary
import gui as gui_module

from conftest import FakeResponse


def _record_visit(service, patient):
    assessment = service.create_assessment(AssessmentRecord(
        patient_id=patient.id,
        prakriti=DoshaScores(4, 3, 2),
        vikriti=DoshaScores(7, 3, 1),
        nadi_pariksha="Sarpa gati",
        notes="Complains of insomnia",
    ))
    treatment = service.create_treatment(TreatmentRecord(
        patient_id=patient.id,
        assessment_id=assessment.id,
        primary_ayurvedic_diagnosis="Anidra",
        status="active",
    ))
    service.create_timeline_entry(TimelineEntry(
        patient_id=patient.id, entry_type="assessment", title="Initial assessment", reference_id=assessment.id,
    ))
    return assessment, treatment


def test_stored_records_flow_into_summary(service, stored_patient):
    """
    Tests that records saved through the service appear in the composed summary.
    """
    _record_visit(service, stored_patient)

    summary = compose_patient_summary(
        service.get_patient(stored_patient.id),
        service.get_patient_assessments(stored_patient.id),
        service.get_patient_treatments(stored_patient.id),
        service.get_patient_timeline(stored_patient.id),
    )
    assert "PATIENT SUMMARY: Jane Doe" in summary
    assert "Vikriti: Vata: 7, Pitta: 3, Kapha: 1" in summary
    assert "Anidra" in summary
    assert "[Assessment] Initial assessment" in summary
    assert "Total treatments: 1 (1 active)" in summary


def test_summary_feeds_external_provider(service, stored_patient, fake_http):
    """
    Tests that the dispatcher sends the composed summary inside the prompt.
    """
    _record_visit(service, stored_patient)
    summary = compose_patient_summary(
        stored_patient,
        service.get_patient_assessments(stored_patient.id),
        service.get_patient_treatments(stored_patient.id),
    )
    fake_http.response = FakeResponse({"choices": [{"message": {"content": "## Plan\nWarm oil massage."}}]})
    dispatcher = AnalysisDispatcher(AppConfig(ai_service="openai", openai_api_key="sk-test"), http=fake_http)

    result = dispatcher.analyze(AnalysisRequest(patient_summary=summary, patient_name=stored_patient.name))

    assert result.ok
    assert result.analysis.startswith("## Plan")
    assert len(fake_http.calls) == 1
    prompt = fake_http.calls[0]["json"]["messages"][1]["content"]
    assert summary in prompt
    assert "Therapeutic Approaches" in prompt


def test_data_persistence_across_service_instances(service, stored_patient, data_file, encryptor):
    """
    Tests that clinical records written by one service are visible to a new instance.
    """
    assessment, treatment = _record_visit(service, stored_patient)
    service.update_treatment_status(treatment.id, "completed")

    reloaded = RecordService(data_file=str(data_file), encryptor=encryptor)
    assert [a.id for a in reloaded.get_patient_assessments(stored_patient.id)] == [assessment.id]
    assert reloaded.get_patient_treatments(stored_patient.id)[0].status == "completed"
    assert reloaded.get_patient_treatments(stored_patient.id)[0].assessment_id == assessment.id
    assert reloaded.get_patient_timeline(stored_patient.id)[0].reference_id == assessment.id


def test_export_helpers_read_service_data(service, stored_patient):
    _record_visit(service, stored_patient)

    patients_df = gui_module.build_patients_frame(service)
    assert list(patients_df["name"]) == ["Jane Doe"]
    assert patients_df.loc[0, "address"] == "12 Elm, Pune, Maharashtra, 411001, India"
    assert patients_df.loc[0, "family_history"] == "Diabetes; Hypertension"

    assessments_df = gui_module.build_assessments_frame(service)
    assert assessments_df.loc[0, "vikriti_vata"] == 7
    round_trip = pd.read_csv(io.StringIO(assessments_df.to_csv(index=False)))
    assert list(round_trip.columns)[:2] == ["created_at", "patient_id"]

    report = gui_module.build_summary_report(service)
    assert "AyurCare Patient Report" in report
    assert "PATIENT SUMMARY: Jane Doe" in report

    exported = json.loads(json.dumps(service.get_dataset()))
    assert exported["patients"][0]["name"] == "Jane Doe"


def test_assessments_frame_empty_store(service):
    assert gui_module.build_assessments_frame(service).empty
