"""
This module renders a patient's records into a single plain-text summary.

The summary serves two readers: the clinician (copy to clipboard, text download) and the
AI analysis prompt. Both rely on a stable document shape, so every section header is
always emitted and empty clinical categories render an explicit "No ... recorded" line
instead of disappearing.

Everything here is a pure function of its inputs plus "today" (used for the age).
Missing optional fields are rendered as placeholders; nothing in this module raises for
absent data.
"""
# ayurcare/summary.py

from datetime import date, datetime
from typing import Iterable, List, Optional, Sequence, Union

from ayurcare.models import (
    ENTRY_TYPES,
    Address,
    AssessmentRecord,
    DoshaScores,
    EmergencyContact,
    PatientRecord,
    TimelineEntry,
    TreatmentRecord,
)

NOT_PROVIDED = "Not provided"
ADDRESS_NOT_PROVIDED = "Address not provided"
NOT_ASSESSED = "Not assessed"
TIMELINE_LIMIT = 5

SECTION_HEADERS = (
    "PATIENT PROFILE",
    "CONTACT INFORMATION",
    "MEDICAL IDENTIFIERS",
    "INSURANCE STATUS",
    "FAMILY HISTORY",
    "CLINICAL DATA",
    "Assessments",
    "Treatments",
    "Timeline",
    "STATISTICS",
)


def _parse_date(value) -> Optional[date]:
    if not value:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.fromisoformat(str(value).replace('Z', '+00:00')).date()
    except ValueError:
        return None


def calculate_age(dob, today: Optional[date] = None) -> Union[int, str]:
    """Calculates a patient's age in whole years.

    The age is the calendar-year difference, minus one when this year's birthday has
    not happened yet.

    Args:
        dob: Date of birth as a `date` or ISO string.
        today: The reference date. Defaults to the current date.

    Returns:
        int or str: The age, or "N/A" if the date of birth is missing, unreadable or
            in the future.
    """
    birth = _parse_date(dob)
    if birth is None:
        return "N/A"
    today = today or date.today()
    age = today.year - birth.year
    if (today.month, today.day) < (birth.month, birth.day):
        age -= 1
    if age < 0:
        return "N/A"
    return age


def format_address(address, full: bool = False) -> str:
    """Normalizes a flat or structured address into one display line.

    Args:
        address: A string, an `Address`, or None.
        full: Include postal code and country.

    Returns:
        str: The address text, or "Address not provided".
    """
    if isinstance(address, Address):
        full_address = str(address.full_address or "").strip()
        if full_address:
            return full_address
        parts = [address.street, address.city, address.state]
        if full:
            parts += [address.postal_code, address.country]
        text = ", ".join(str(p).strip() for p in parts if p is not None and str(p).strip())
        return text or ADDRESS_NOT_PROVIDED
    if isinstance(address, str) and address.strip():
        return address.strip()
    return ADDRESS_NOT_PROVIDED


def format_emergency_contact(contact, full: bool = False) -> str:
    """Normalizes a flat or structured emergency contact into display text.

    The short form is "{name} ({relationship})"; the long form appends
    " - {phone}" and ", {email}" when an email is present.
    """
    if isinstance(contact, EmergencyContact):
        if contact.is_empty():
            return NOT_PROVIDED
        text = str(contact.name or "")
        if contact.relationship:
            text = f"{text} ({contact.relationship})"
        if full:
            if contact.phone:
                text = f"{text} - {contact.phone}"
            if contact.email:
                text = f"{text}, {contact.email}"
        return text.strip() or NOT_PROVIDED
    if isinstance(contact, str) and contact.strip():
        return contact.strip()
    return NOT_PROVIDED


def format_dosha_scores(scores: Optional[DoshaScores]) -> str:
    if scores is None:
        return NOT_ASSESSED
    return f"Vata: {scores.vata}, Pitta: {scores.pitta}, Kapha: {scores.kapha}"


def _value(text) -> str:
    if text is None:
        return NOT_PROVIDED
    text = str(text).strip()
    return text or NOT_PROVIDED


def _join(values: Iterable[str]) -> str:
    return ", ".join(v for v in values if v) or "None"


def _format_timestamp(value) -> str:
    parsed = _parse_date(value)
    return parsed.isoformat() if parsed else "Unknown date"


def _assessment_lines(assessments: Sequence[AssessmentRecord]) -> List[str]:
    lines = ["Assessments:"]
    if not assessments:
        lines.append("  No assessments recorded")
        return lines
    latest = assessments[0]
    lines += [
        f"  Latest assessment ({_format_timestamp(latest.created_at)}):",
        f"  - Prakriti: {format_dosha_scores(latest.prakriti)}",
        f"  - Vikriti: {format_dosha_scores(latest.vikriti)}",
        f"  - Pulse (Nadi): {_value(latest.nadi_pariksha)}",
        f"  - Tongue (Jihva): {_value(latest.jihva_pariksha)}",
        f"  - Physical (Akriti): {_value(latest.akriti_pariksha)}",
        f"  - Diagnosis codes: {_join(latest.icd11_codes)}",
    ]
    for name, result in sorted(latest.lab_results.items()):
        lines.append(f"  - Lab {name.replace('_', ' ')}: {result}")
    lines.append(f"  - Notes: {_value(latest.notes)}")
    return lines


def _treatment_lines(treatments: Sequence[TreatmentRecord]) -> List[str]:
    lines = ["Treatments:"]
    if not treatments:
        lines.append("  No treatments recorded")
        return lines
    active = [t for t in treatments if t.status == 'active']
    if not active:
        lines.append("  No active treatments")
        return lines
    for treatment in active:
        shodhana = treatment.shodhana_therapy
        purification = [
            f"{label}: {text}" for label, text in (
                ("Vamana", shodhana.vamana),
                ("Virechana", shodhana.virechana),
                ("Basti", shodhana.basti),
                ("Nasya", shodhana.nasya),
                ("Raktamokshana", shodhana.raktamokshana),
            ) if text
        ]
        lifestyle = treatment.lifestyle_recommendations
        routine = [
            text for text in (
                lifestyle.daily_routine,
                lifestyle.exercise,
                lifestyle.stress_management,
                lifestyle.sleep_hygiene,
            ) if text
        ]
        followup = treatment.followup_schedule
        lines += [
            f"  Active treatment ({_format_timestamp(treatment.created_at)}):",
            f"  - Primary diagnosis: {_value(treatment.primary_ayurvedic_diagnosis)}",
            f"  - Secondary diagnoses: {_join(treatment.secondary_ayurvedic_diagnoses)}",
            f"  - Shamana medicines: {_join(treatment.shamana_therapy.internal_medicines)}",
            f"  - Shodhana: {_join(purification)}",
            f"  - Rasayana herbs: {_join(treatment.rasayana_plan.herbs)}",
            f"  - Diet include: {_join(treatment.diet_plan.foods_to_include)}",
            f"  - Diet avoid: {_join(treatment.diet_plan.foods_to_avoid)}",
            f"  - Lifestyle: {'; '.join(routine) or 'None'}",
            f"  - Follow-up: {_value(followup.frequency)}"
            + (f" (next visit {followup.next_visit})" if followup.next_visit else ""),
        ]
    return lines


def _timeline_lines(timeline: Sequence[TimelineEntry]) -> List[str]:
    lines = ["Timeline:"]
    if not timeline:
        lines.append("  No timeline entries recorded")
        return lines
    for entry in timeline[:TIMELINE_LIMIT]:
        label = ENTRY_TYPES.get(entry.entry_type, entry.entry_type)
        title = entry.title or "Untitled"
        line = f"  - {_format_timestamp(entry.created_at)} [{label}] {title}"
        if entry.notes:
            line = f"{line}: {entry.notes}"
        lines.append(line)
    return lines


def compose_patient_summary(
    patient: PatientRecord,
    assessments: Optional[Sequence[AssessmentRecord]] = None,
    treatments: Optional[Sequence[TreatmentRecord]] = None,
    timeline: Optional[Sequence[TimelineEntry]] = None,
    today: Optional[date] = None,
) -> str:
    """Renders a patient's records into one summary document.

    All lists are expected newest-first. Only the newest assessment, the active
    treatments and the five most recent timeline entries are expanded.

    Args:
        patient: The patient to summarize.
        assessments: The patient's assessments, newest first.
        treatments: The patient's treatment plans, newest first.
        timeline: The patient's timeline entries, newest first.
        today: Reference date for the age. Defaults to the current date.

    Returns:
        str: The summary text. Never empty.
    """
    assessments = list(assessments or [])
    treatments = list(treatments or [])
    timeline = list(timeline or [])

    insurance = "Insured" if patient.insurance_status else "Not insured"
    if patient.insurance_status and patient.insurance_provider:
        insurance = f"{insurance} ({patient.insurance_provider})"

    lines = [
        f"PATIENT SUMMARY: {_value(patient.name)}",
        "",
        "PATIENT PROFILE",
        f"Name: {_value(patient.name)}",
        f"Age: {calculate_age(patient.dob, today)}",
        f"Date of Birth: {_value(patient.dob)}",
        f"Gender: {_value(patient.gender)}",
        f"Marital Status: {_value(patient.marital_status)}",
        f"Occupation: {_value(patient.occupation)}"
        + (f" ({patient.occupation_type})" if patient.occupation_type else ""),
        "",
        "CONTACT INFORMATION",
        f"Phone: {_value(patient.mobile)}",
        f"Email: {_value(patient.email)}",
        f"Address: {format_address(patient.address, full=True)}",
        f"Emergency Contact: {format_emergency_contact(patient.emergency_contact, full=True)}",
        "",
        "MEDICAL IDENTIFIERS",
        f"UHID: {_value(patient.uhid)}",
        f"National ID: {_value(patient.aadhaar_number)}",
        f"Health Account ID: {_value(patient.abha_id)}",
        "",
        "INSURANCE STATUS",
        insurance,
        "",
        "FAMILY HISTORY",
    ]
    if patient.family_history:
        lines += [f"- {condition}" for condition in patient.family_history]
    else:
        lines.append("No family history recorded")

    lines += ["", "CLINICAL DATA"]
    lines += _assessment_lines(assessments)
    lines += _treatment_lines(treatments)
    lines += _timeline_lines(timeline)

    active_count = sum(1 for t in treatments if t.status == 'active')
    lines += [
        "",
        "STATISTICS",
        f"Total assessments: {len(assessments)}",
        f"Total treatments: {len(treatments)} ({active_count} active)",
        f"Timeline entries: {len(timeline)}",
    ]
    return "\n".join(lines)


def compose_patient_card(patient: PatientRecord, today: Optional[date] = None) -> str:
    """Renders the short one-line form used on dashboard cards."""
    gender = patient.gender or "N/A"
    return (
        f"{patient.name} | {gender}, {calculate_age(patient.dob, today)} yrs | "
        f"{format_address(patient.address)} | "
        f"Emergency: {format_emergency_contact(patient.emergency_contact)}"
    )
