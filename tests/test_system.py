"""
System-level tests for the AyurCare application.

These tests simulate end-to-end clinic workflows that involve every component: key
management, the encrypted record store, the summary composer, configuration and the
analysis dispatcher. They verify the state of the system after a series of operations.
"""
from ayurcare.analysis import AnalysisDispatcher, AnalysisRequest
from ayurcare.config import load_config
from ayurcare.encryption import load_or_create_encryptor
from ayurcare.models import AssessmentRecord, DoshaScores, PatientRecord, TimelineEntry, TreatmentRecord
from ayurcare.records import RecordService
from ayurcare.summary import compose_patient_summary


def test_end_to_end_clinic_workflow(tmp_path):
    """
    Tests a full workflow from first start to AI analysis.

    Covers: key generation, patient registration, assessment, treatment, timeline,
    restart with the same key, dosha analysis, summary and mock analysis.
    """
    config = load_config(
        secrets={},
        environ={
            "DATA_FILE": str(tmp_path / "records.json"),
            "KEY_FILE": str(tmp_path / "secret.key"),
            "MOCK_DELAY_SECONDS": "0",
        },
    )
    service = RecordService(data_file=config.data_file, encryptor=load_or_create_encryptor(config.key_file))

    patient = service.create_patient(PatientRecord(name="Kiran Patel", dob="1990-08-01", address="Ahmedabad"))
    other = service.create_patient(PatientRecord(name="Lata Shah"))
    assessment = service.create_assessment(AssessmentRecord(
        patient_id=patient.id, prakriti=DoshaScores(2, 5, 3), vikriti=DoshaScores(2, 9, 3),
    ))
    treatment = service.create_treatment(TreatmentRecord(
        patient_id=patient.id, assessment_id=assessment.id, primary_ayurvedic_diagnosis="Amlapitta",
    ))
    service.update_treatment_status(treatment.id, "active")
    service.create_timeline_entry(TimelineEntry(patient_id=patient.id, entry_type="followup", title="Week 2 review"))

    # Restart: a new service with the same key file sees everything.
    restarted = RecordService(data_file=config.data_file, encryptor=load_or_create_encryptor(config.key_file))
    assert {p.name for p in restarted.get_all_patients()} == {"Kiran Patel", "Lata Shah"}
    assert restarted.get_patient_stats(other.id)["stats"] == {"assessments": 0, "treatments": 0, "timeline_entries": 0}

    analysis = restarted.get_patient_dosha_analysis(patient.id)
    assert analysis.primary_imbalance == "pitta"
    assert analysis.imbalance == {"vata": 0, "pitta": 4, "kapha": 0}

    summary = compose_patient_summary(
        restarted.get_patient(patient.id),
        restarted.get_patient_assessments(patient.id),
        restarted.get_patient_treatments(patient.id),
        restarted.get_patient_timeline(patient.id),
    )
    assert "Address: Ahmedabad" in summary
    assert "Amlapitta" in summary
    assert "[Follow-up] Week 2 review" in summary

    dispatcher = AnalysisDispatcher(config)
    result = dispatcher.analyze(AnalysisRequest(patient_summary=summary, patient_name="Kiran Patel"))
    assert result.to_dict() == {"analysis": result.analysis}
    assert "Kiran Patel" in result.analysis


def test_system_missing_credentials_never_reach_network(tmp_path, fake_http):
    """
    Tests that selecting an external backend without a key yields an error result and
    sends nothing.
    """
    config = load_config(secrets={"AI_SERVICE": "claude"}, environ={})
    dispatcher = AnalysisDispatcher(config, http=fake_http)
    summary = compose_patient_summary(PatientRecord(name="Nobody"))

    result = dispatcher.analyze(AnalysisRequest(patient_summary=summary, patient_name="Nobody"))

    assert result.analysis == ""
    assert "ANTHROPIC_API_KEY" in result.error
    assert fake_http.calls == []
    assert dispatcher.is_in_flight("Nobody") is False
