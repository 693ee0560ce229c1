"""
This module defines the graphical user interface (GUI) for the AyurCare application using Streamlit.

It includes functions for rendering every page of the clinic front-end: the patient
dashboard, patient registration, the patient profile with its assessment, treatment and
timeline tabs, the summary and AI analysis panel, the dosha overview, the herb and disease
catalog, and data export.

The main entry point for the UI is `show_main_app`, which routes to the selected page
based on the session state.
"""
# ayurcare/gui.py

import datetime
import json
import re
import time

import pandas as pd
import streamlit as st

from ayurcare.analysis import AnalysisRequest
from ayurcare.models import (
    ENTRY_TYPES,
    GENDERS,
    MARITAL_STATUSES,
    OCCUPATION_TYPES,
    TREATMENT_STATUSES,
    Address,
    AssessmentRecord,
    DietPlan,
    DoshaScores,
    EmergencyContact,
    FollowupSchedule,
    LifestyleRecommendations,
    PatientRecord,
    RasayanaPlan,
    ShamanaTherapy,
    ShodhanaTherapy,
    TimelineEntry,
    TreatmentRecord,
)
from ayurcare.summary import (
    calculate_age,
    compose_patient_card,
    compose_patient_summary,
    format_address,
    format_dosha_scores,
    format_emergency_contact,
)

MENU_ITEMS = [
    ("Patient Dashboard", "dashboard", "Browse and search registered patients and open their records."),
    ("New Patient", "new_patient", "Register a new patient with contact, identifier and insurance details."),
    ("Dosha Overview", "dosha_overview", "Compare the latest prakriti and vikriti of every assessed patient."),
    ("Herb & Disease Catalog", "catalog", "Search the materia medica and ICD-11 disease mappings."),
    ("Data Export", "export", "Download the clinic records as JSON, CSV or a text report."),
]


def _format_timestamp(timestamp_str):
    """Converts an ISO 8601 timestamp string into a human-readable local time format.

    Args:
        timestamp_str (str): The ISO-formatted timestamp string.

    Returns:
        str: A formatted string (e.g., "Jan 01, 2023 • 14:30") or the original
             string if conversion fails.
    """
    if not timestamp_str:
        return "Unknown time"
    try:
        clean_value = timestamp_str.replace('Z', '+00:00')
        timestamp = datetime.datetime.fromisoformat(clean_value)
        # Naive timestamps were written by this app in local time.
        if timestamp.tzinfo is not None:
            timestamp = timestamp.astimezone()
        return timestamp.strftime("%b %d, %Y • %H:%M")
    except ValueError:
        return timestamp_str


def _split_items(text):
    """Splits a comma- or newline-separated text field into a list of items."""
    return [item.strip() for item in re.split(r'[\n,]', text or '') if item.strip()]


def _open_patient(patient_id):
    st.session_state.selected_patient_id = patient_id
    st.session_state.page = "patient_profile"


def show_main_app(service, dispatcher):
    """
    The main application router that displays the selected page.

    Args:
        service: The `RecordService` instance.
        dispatcher: The `AnalysisDispatcher` instance.
    """
    if 'page' not in st.session_state:
        st.session_state.page = None

    menu_placeholder = st.empty()

    def _show_main_menu():
        with menu_placeholder.container():
            st.markdown("## AyurCare Patient Records")
            metrics = service.get_dashboard_metrics()
            c1, c2, c3 = st.columns(3)
            c1.metric("Total Patients", metrics['total_patients'])
            c2.metric("New This Month", metrics['new_this_month'])
            c3.metric("Active Records", metrics['active_records'])
            st.divider()
            for idx, (label, value, description) in enumerate(MENU_ITEMS):
                if st.button(label, key=f"menu_btn_{idx}", use_container_width=True):
                    st.session_state.page = value
                    st.rerun()
                st.caption(description)
                st.divider()

    def _show_back_button():
        if st.button("← Back to Main Menu"):
            st.session_state.page = None
            st.session_state.selected_patient_id = None
            st.rerun()

    if st.session_state.page is None:
        _show_main_menu()
        return
    menu_placeholder.empty()

    _show_back_button()
    if st.session_state.page == "dashboard":
        _render_dashboard_page(service)
    elif st.session_state.page == "new_patient":
        _render_new_patient_page(service)
    elif st.session_state.page == "patient_profile":
        _render_patient_profile_page(service, dispatcher, st.session_state.get('selected_patient_id'))
    elif st.session_state.page == "dosha_overview":
        _render_dosha_overview_page(service)
    elif st.session_state.page == "catalog":
        _render_catalog_page(service)
    elif st.session_state.page == "export":
        _render_export_page(service)
    else:
        st.session_state.page = None
        st.rerun()


def _render_dashboard_page(service):
    """Renders the patient list with search."""
    st.markdown("<h2 style='text-align: center;'>All Patients</h2>", unsafe_allow_html=True)
    search_term = st.text_input("Search patients by name, UHID or national ID")
    patients = service.search_patients(search_term) if search_term else service.get_all_patients()

    if not patients:
        st.info("No patients found. Create your first patient to get started.")
        return

    for patient in patients:
        with st.container(border=True):
            st.markdown(f"**{patient.name}**")
            st.caption(compose_patient_card(patient))
            st.write(f"Born: {patient.dob or 'N/A'}")
            st.write(patient.mobile or "No contact information")
            if st.button("View Profile", key=f"view_{patient.id}"):
                _open_patient(patient.id)
                st.rerun()


def _render_new_patient_page(service):
    """Renders the patient registration form."""
    st.markdown("<h2 style='text-align: center;'>Register a New Patient</h2>", unsafe_allow_html=True)
    with st.form("new_patient_form"):
        st.subheader("Personal Information")
        name = st.text_input("Full Name")
        dob = st.date_input("Date of Birth", value=None, min_value=datetime.date(1900, 1, 1),
                            max_value=datetime.date.today())
        gender = st.selectbox("Gender", [""] + list(GENDERS))
        marital_status = st.selectbox("Marital Status", [""] + list(MARITAL_STATUSES))
        occupation = st.text_input("Occupation")
        occupation_type = st.selectbox("Occupation Type", [""] + list(OCCUPATION_TYPES))

        st.subheader("Contact Information")
        mobile = st.text_input("Mobile")
        email = st.text_input("Email")
        street = st.text_input("Street")
        city = st.text_input("City")
        state = st.text_input("State")
        postal_code = st.text_input("Postal Code")
        country = st.text_input("Country")

        st.subheader("Medical Identifiers")
        uhid = st.text_input("UHID")
        aadhaar_number = st.text_input("Aadhaar Number")
        abha_id = st.text_input("ABHA ID")

        st.subheader("Insurance")
        insurance_status = st.checkbox("Insured")
        insurance_provider = st.text_input("Insurance Provider")

        st.subheader("Emergency Contact")
        ec_name = st.text_input("Contact Name")
        ec_relationship = st.text_input("Relationship")
        ec_phone = st.text_input("Contact Phone")
        ec_email = st.text_input("Contact Email")

        st.subheader("Family History")
        family_history = st.text_area("One condition per line")

        submitted = st.form_submit_button("Create Patient")

    if submitted:
        if not name.strip():
            st.error("Patient name is required.")
            return
        emergency_contact = EmergencyContact(ec_name, ec_relationship, ec_phone, ec_email)
        address = Address(street, city, state, postal_code, country)
        patient = PatientRecord(
            name=name,
            dob=dob.isoformat() if dob else '',
            gender=gender,
            marital_status=marital_status,
            mobile=mobile,
            email=email,
            address=None if address.is_empty() else address,
            uhid=uhid,
            aadhaar_number=aadhaar_number,
            abha_id=abha_id,
            occupation=occupation,
            occupation_type=occupation_type,
            insurance_status=insurance_status,
            insurance_provider=insurance_provider if insurance_status else '',
            emergency_contact=None if emergency_contact.is_empty() else emergency_contact,
            family_history=[line.strip() for line in family_history.splitlines() if line.strip()],
        )
        with st.spinner("Saving patient..."):
            service.create_patient(patient)
        st.success(f"Patient {patient.name} created successfully!")
        _open_patient(patient.id)
        time.sleep(1)
        st.rerun()


def _display_patient_details(patient):
    """Displays the patient's demographic, contact, identifier and insurance details."""
    st.markdown(f"## {patient.name}")
    st.caption(f"{patient.gender or 'N/A'}, {calculate_age(patient.dob)} years"
               + (f" • Born {patient.dob}" if patient.dob else ""))
    c1, c2 = st.columns(2)
    with c1:
        st.markdown("**Contact Information**")
        st.write(f"Phone: {patient.mobile or 'N/A'}")
        st.write(f"Email: {patient.email or 'N/A'}")
        st.write(f"Address: {format_address(patient.address, full=True)}")
        st.write(f"Emergency Contact: {format_emergency_contact(patient.emergency_contact, full=True)}")
    with c2:
        st.markdown("**Medical Information**")
        st.write(f"UHID: {patient.uhid or 'N/A'}")
        st.write(f"Aadhaar Number: {patient.aadhaar_number or 'N/A'}")
        st.write(f"ABHA ID: {patient.abha_id or 'N/A'}")
        st.write("Insurance: " + ("Insured" if patient.insurance_status else "Not Insured")
                 + (f" ({patient.insurance_provider})" if patient.insurance_status and patient.insurance_provider else ""))
    if patient.family_history:
        st.markdown("**Family History**")
        for condition in patient.family_history:
            st.write(f"- {condition}")


def _render_patient_profile_page(service, dispatcher, patient_id):
    """Renders a patient's profile with clinical tabs and the summary panel.

    Args:
        service: The `RecordService` instance.
        dispatcher: The `AnalysisDispatcher` instance.
        patient_id (str): The patient to show.
    """
    patient = service.get_patient(patient_id) if patient_id else None
    if not patient:
        st.error("Patient Not Found")
        return

    _display_patient_details(patient)
    st.divider()

    assessments = service.get_patient_assessments(patient.id)
    treatments = service.get_patient_treatments(patient.id)
    timeline = service.get_patient_timeline(patient.id)

    tab_assess, tab_treat, tab_timeline, tab_summary = st.tabs(
        ["Assessments", "Treatments", "Timeline", "Summary & AI Analysis"]
    )
    with tab_assess:
        _render_assessments_tab(service, patient, assessments)
    with tab_treat:
        _render_treatments_tab(service, patient, assessments, treatments)
    with tab_timeline:
        _render_timeline_tab(service, patient, timeline)
    with tab_summary:
        _render_summary_tab(dispatcher, patient, assessments, treatments, timeline)


def _render_assessments_tab(service, patient, assessments):
    if not assessments:
        st.info("No assessments recorded.")
    for assessment in assessments:
        with st.expander(f"Assessment from {_format_timestamp(assessment.created_at)}"):
            st.write(f"**Prakriti:** {format_dosha_scores(assessment.prakriti)}")
            st.write(f"**Vikriti:** {format_dosha_scores(assessment.vikriti)}")
            st.write(f"**Nadi Pariksha:** {assessment.nadi_pariksha or 'N/A'}")
            st.write(f"**Jihva Pariksha:** {assessment.jihva_pariksha or 'N/A'}")
            st.write(f"**Akriti Pariksha:** {assessment.akriti_pariksha or 'N/A'}")
            if assessment.icd11_codes:
                st.write(f"**ICD-11:** {', '.join(assessment.icd11_codes)}")
            st.write(assessment.notes or "_No notes provided._")

    analysis = service.get_patient_dosha_analysis(patient.id)
    if analysis:
        st.markdown("**Latest dosha imbalance (vikriti minus prakriti)**")
        st.dataframe(pd.DataFrame([analysis.prakriti, analysis.vikriti, analysis.imbalance],
                                  index=["Prakriti", "Vikriti", "Imbalance"]))
        st.caption(f"Primary imbalance: {analysis.primary_imbalance.capitalize()}")

    st.divider()
    with st.form(f"assessment_form_{patient.id}"):
        st.subheader("New Dosha Assessment")
        st.markdown("**Prakriti (constitution)**")
        p1, p2, p3 = st.columns(3)
        p_vata = p1.number_input("Vata", min_value=0, step=1, key="prakriti_vata")
        p_pitta = p2.number_input("Pitta", min_value=0, step=1, key="prakriti_pitta")
        p_kapha = p3.number_input("Kapha", min_value=0, step=1, key="prakriti_kapha")
        st.markdown("**Vikriti (current state)**")
        v1, v2, v3 = st.columns(3)
        v_vata = v1.number_input("Vata", min_value=0, step=1, key="vikriti_vata")
        v_pitta = v2.number_input("Pitta", min_value=0, step=1, key="vikriti_pitta")
        v_kapha = v3.number_input("Kapha", min_value=0, step=1, key="vikriti_kapha")
        nadi = st.text_area("Nadi Pariksha (pulse)")
        jihva = st.text_area("Jihva Pariksha (tongue)")
        akriti = st.text_area("Akriti Pariksha (physical)")
        icd11 = st.text_input("ICD-11 codes (comma separated)")
        notes = st.text_area("Notes")
        submitted = st.form_submit_button("Save Assessment")

    if submitted:
        assessment = AssessmentRecord(
            patient_id=patient.id,
            prakriti=DoshaScores.clamped(p_vata, p_pitta, p_kapha),
            vikriti=DoshaScores.clamped(v_vata, v_pitta, v_kapha),
            nadi_pariksha=nadi,
            jihva_pariksha=jihva,
            akriti_pariksha=akriti,
            icd11_codes=_split_items(icd11),
            notes=notes,
        )
        try:
            service.create_assessment(assessment)
        except (KeyError, ValueError) as e:
            st.error(f"Failed to create assessment: {e}")
            return
        st.success("Assessment created successfully!")
        st.rerun()


def _render_treatments_tab(service, patient, assessments, treatments):
    if not treatments:
        st.info("No treatments recorded.")
    for treatment in treatments:
        title = treatment.primary_ayurvedic_diagnosis or "Treatment plan"
        with st.expander(f"{title} ({treatment.status}) | {_format_timestamp(treatment.created_at)}"):
            st.write(f"**Secondary diagnoses:** {', '.join(treatment.secondary_ayurvedic_diagnoses) or 'None'}")
            st.write(f"**Shamana medicines:** {', '.join(treatment.shamana_therapy.internal_medicines) or 'None'}")
            st.write(f"**Rasayana herbs:** {', '.join(treatment.rasayana_plan.herbs) or 'None'}")
            st.write(f"**Diet include:** {', '.join(treatment.diet_plan.foods_to_include) or 'None'}")
            st.write(f"**Diet avoid:** {', '.join(treatment.diet_plan.foods_to_avoid) or 'None'}")
            st.write(f"**Follow-up:** {treatment.followup_schedule.frequency or 'N/A'}")
            new_status = st.selectbox("Status", TREATMENT_STATUSES,
                                      index=TREATMENT_STATUSES.index(treatment.status),
                                      key=f"status_{treatment.id}")
            if new_status != treatment.status and st.button("Update Status", key=f"update_{treatment.id}"):
                service.update_treatment_status(treatment.id, new_status)
                st.success("Treatment status updated.")
                st.rerun()

    st.divider()
    assessment_options = {"None": None}
    for assessment in assessments:
        assessment_options[f"Assessment from {_format_timestamp(assessment.created_at)}"] = assessment.id

    with st.form(f"treatment_form_{patient.id}"):
        st.subheader("New Treatment Plan")
        linked = st.selectbox("Based on assessment", list(assessment_options))
        primary = st.text_input("Primary Ayurvedic Diagnosis")
        secondary = st.text_input("Secondary Diagnoses (comma separated)")
        icd11 = st.text_input("ICD-11 Diagnoses (comma separated)")

        st.markdown("**Shamana (palliative)**")
        medicines = st.text_area("Internal medicines (one per line)")
        external = st.text_area("External therapies (one per line)")
        dosage = st.text_input("Dosage instructions")
        duration = st.text_input("Duration")

        st.markdown("**Shodhana (purification)**")
        vamana = st.text_input("Vamana")
        virechana = st.text_input("Virechana")
        basti = st.text_input("Basti")
        nasya = st.text_input("Nasya")
        raktamokshana = st.text_input("Raktamokshana")

        st.markdown("**Rasayana (rejuvenation)**")
        rasayana_herbs = st.text_area("Herbs (one per line)")
        rasayana_duration = st.text_input("Rasayana duration")

        st.markdown("**Diet**")
        include = st.text_area("Foods to include")
        avoid = st.text_area("Foods to avoid")
        meal_timing = st.text_input("Meal timing")

        st.markdown("**Lifestyle**")
        daily_routine = st.text_input("Daily routine")
        exercise = st.text_input("Exercise")
        stress = st.text_input("Stress management")
        sleep = st.text_input("Sleep hygiene")

        st.markdown("**Follow-up**")
        frequency = st.text_input("Frequency")
        next_visit = st.text_input("Next visit")

        status = st.selectbox("Status", TREATMENT_STATUSES)
        submitted = st.form_submit_button("Save Treatment")

    if submitted:
        treatment = TreatmentRecord(
            patient_id=patient.id,
            assessment_id=assessment_options[linked],
            primary_ayurvedic_diagnosis=primary,
            secondary_ayurvedic_diagnoses=_split_items(secondary),
            icd11_diagnoses=_split_items(icd11),
            shamana_therapy=ShamanaTherapy(_split_items(medicines), _split_items(external), dosage, duration),
            shodhana_therapy=ShodhanaTherapy(vamana, virechana, basti, nasya, raktamokshana),
            rasayana_plan=RasayanaPlan(_split_items(rasayana_herbs), rasayana_duration),
            diet_plan=DietPlan(_split_items(include), _split_items(avoid), meal_timing),
            lifestyle_recommendations=LifestyleRecommendations(daily_routine, exercise, stress, sleep),
            followup_schedule=FollowupSchedule(frequency, next_visit),
            status=status,
        )
        try:
            service.create_treatment(treatment)
        except (KeyError, ValueError) as e:
            st.error(f"Failed to create treatment: {e}")
            return
        st.success("Treatment created successfully!")
        st.rerun()


def _render_timeline_tab(service, patient, timeline):
    if not timeline:
        st.info("No timeline entries recorded.")
    for entry in timeline:
        label = ENTRY_TYPES.get(entry.entry_type, entry.entry_type)
        with st.expander(f"[{label}] {entry.title or 'Untitled'} | {_format_timestamp(entry.created_at)}"):
            st.write(entry.notes or "_No notes provided._")
            if entry.details:
                st.write(entry.details)

    st.divider()
    with st.form(f"timeline_form_{patient.id}"):
        st.subheader("New Timeline Entry")
        entry_type = st.selectbox("Entry Type", list(ENTRY_TYPES), format_func=ENTRY_TYPES.get)
        title = st.text_input("Title")
        notes = st.text_input("Notes")
        details = st.text_area("Details")
        submitted = st.form_submit_button("Save Entry")

    if submitted:
        if not title.strip():
            st.error("Title is required.")
            return
        service.create_timeline_entry(
            TimelineEntry(patient_id=patient.id, entry_type=entry_type, title=title, notes=notes, details=details)
        )
        st.success("Timeline entry created successfully!")
        st.rerun()


def _render_summary_tab(dispatcher, patient, assessments, treatments, timeline):
    """Shows the patient summary and runs the AI analysis on request."""
    summary = compose_patient_summary(patient, assessments, treatments, timeline)
    st.code(summary, language=None)
    st.download_button(
        "Download Summary (.txt)", summary.encode('utf-8'),
        f"ayurcare_summary_{patient.id}_{datetime.date.today()}.txt", "text/plain",
        key=f"download_summary_{patient.id}",
    )

    analysis_key = f"analysis_{patient.id}"
    busy = dispatcher.is_in_flight(patient.id)
    if st.button("Generate AI Analysis", key=f"analyze_{patient.id}", disabled=busy):
        with st.spinner("Generating Ayurvedic analysis..."):
            result = dispatcher.analyze(
                AnalysisRequest(patient_summary=summary, patient_name=patient.name, patient_id=patient.id)
            )
        if result.error:
            st.error(f"AI analysis failed: {result.error}")
        else:
            st.session_state[analysis_key] = result.analysis

    analysis = st.session_state.get(analysis_key)
    if analysis:
        st.divider()
        st.markdown("**AI Generated Analysis**")
        st.markdown(analysis)
        st.download_button(
            "Download Analysis (.md)", analysis.encode('utf-8'),
            f"ayurcare_analysis_{patient.id}.md", "text/markdown",
            key=f"download_analysis_{patient.id}",
        )


def _render_dosha_overview_page(service):
    """Renders the latest dosha imbalance of every assessed patient."""
    st.markdown("<h2 style='text-align: center;'>Dosha Imbalances</h2>", unsafe_allow_html=True)
    analyses = service.get_dosha_imbalances()
    if not analyses:
        st.info("No assessments recorded yet.")
        return
    rows = []
    for analysis in analyses:
        rows.append({
            'patient': analysis.patient_name,
            'vata_imbalance': analysis.imbalance['vata'],
            'pitta_imbalance': analysis.imbalance['pitta'],
            'kapha_imbalance': analysis.imbalance['kapha'],
            'primary_imbalance': analysis.primary_imbalance,
            'assessment_date': analysis.assessment_date[:10],
        })
    st.dataframe(pd.DataFrame(rows), use_container_width=True)


def _render_catalog_page(service):
    """Renders herb and disease-mapping search."""
    st.markdown("<h2 style='text-align: center;'>Herb & Disease Catalog</h2>", unsafe_allow_html=True)
    herb_query = st.text_input("Search herbs by name or indication")
    if herb_query:
        herbs = service.search_herbs(herb_query)
        if not herbs:
            st.info("No herbs found.")
        for herb in herbs:
            with st.expander(f"{herb.sanskrit_name} ({herb.common_name or herb.latin_name or 'N/A'})"):
                st.write(f"**Primary dosha effect:** {herb.primary_dosha_effect or 'N/A'}")
                st.write(f"**Indications:** {', '.join(herb.indications) or 'None'}")
                st.write(f"**Contraindications:** {', '.join(herb.contraindications) or 'None'}")
                st.write(f"**Standard dosage:** {herb.standard_dosage or 'N/A'}")

    st.divider()
    disease_query = st.text_input("Search diseases by ICD-11 or Ayurvedic name")
    if disease_query:
        diseases = service.search_disease_mappings(disease_query)
        if not diseases:
            st.info("No disease mappings found.")
        for disease in diseases:
            with st.expander(f"{disease.icd11_code} {disease.icd11_name} → {disease.ayurvedic_name}"):
                st.write(f"**Synonyms:** {', '.join(disease.ayurvedic_synonyms) or 'None'}")
                st.write(f"**Dosha involvement:** {format_dosha_scores(disease.dosha_involvement)}")
                st.write(f"**Primary dosha:** {disease.primary_dosha or 'N/A'}")


def build_patients_frame(service):
    """Flattens patients into a DataFrame for CSV export."""
    rows = []
    for patient in service.get_all_patients():
        rows.append({
            'id': patient.id,
            'created_at': patient.created_at,
            'name': patient.name,
            'dob': patient.dob,
            'gender': patient.gender,
            'mobile': patient.mobile,
            'email': patient.email,
            'address': format_address(patient.address, full=True),
            'uhid': patient.uhid,
            'insurance_status': patient.insurance_status,
            'insurance_provider': patient.insurance_provider,
            'emergency_contact': format_emergency_contact(patient.emergency_contact, full=True),
            'family_history': '; '.join(patient.family_history),
        })
    return pd.DataFrame(rows)


def build_assessments_frame(service):
    """Flattens assessments (one column per dosha score) into a DataFrame."""
    records = service.get_dataset().get('assessments', [])
    if not records:
        return pd.DataFrame()
    frame = pd.json_normalize(records, sep='_')
    desired_columns = ['created_at', 'patient_id', 'prakriti_vata', 'prakriti_pitta', 'prakriti_kapha',
                       'vikriti_vata', 'vikriti_pitta', 'vikriti_kapha', 'notes']
    for col in desired_columns:
        if col not in frame.columns:
            frame[col] = None
    return frame[desired_columns]


def build_summary_report(service):
    """Concatenates every patient's summary into one text report."""
    report = [f"AyurCare Patient Report - Generated on {datetime.datetime.now().strftime('%Y-%m-%d %H:%M:%S')}\n",
              "=" * 80 + "\n"]
    for patient in service.get_all_patients():
        report.append(compose_patient_summary(
            patient,
            service.get_patient_assessments(patient.id),
            service.get_patient_treatments(patient.id),
            service.get_patient_timeline(patient.id),
        ))
        report.append("\n" + "=" * 80 + "\n")
    return "\n".join(report)


def _render_export_page(service):
    """Renders the data export downloads."""
    st.header("Data Export")
    dataset = service.get_dataset()

    st.subheader("1. Export as Raw JSON")
    st.download_button(
        "Download Clinic Data (JSON)", json.dumps(dataset, indent=4),
        f"ayurcare_export_{datetime.date.today()}.json", "application/json"
    )
    st.divider()

    st.subheader("2. Export as CSV")
    col1, col2 = st.columns(2)
    with col1:
        patients_df = build_patients_frame(service)
        if not patients_df.empty:
            st.download_button(
                "Download Patients (CSV)", patients_df.to_csv(index=False).encode('utf-8'),
                f"ayurcare_patients_{datetime.date.today()}.csv", "text/csv"
            )
    with col2:
        assessments_df = build_assessments_frame(service)
        if not assessments_df.empty:
            st.download_button(
                "Download Assessments (CSV)", assessments_df.to_csv(index=False).encode('utf-8'),
                f"ayurcare_assessments_{datetime.date.today()}.csv", "text/csv"
            )
    st.divider()

    st.subheader("3. Export as Human-Readable Report")
    if not dataset.get('patients'):
        st.info("There are no patients to export in this report.")
        return
    st.download_button(
        label="Download Patient Report (.txt)", data=build_summary_report(service).encode('utf-8'),
        file_name=f"ayurcare_report_{datetime.date.today()}.txt", mime="text/plain"
    )
