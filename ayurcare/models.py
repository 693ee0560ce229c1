"""
This module defines the primary data models for the AyurCare application.

These classes are used to structure the records that are managed by the `RecordService`
and rendered by the summary composer. Patients, assessments, treatments and timeline
entries are created once through the forms and then only read.

Addresses and emergency contacts can arrive either as a flat string (older records) or
as a structured object. Both shapes are kept as-is on the `PatientRecord`; the summary
module owns the single normalization into display text.
"""
# ayurcare/models.py

from __future__ import annotations

import uuid
from dataclasses import asdict, dataclass, field, fields
from datetime import datetime
from typing import Dict, List, Optional, Union

GENDERS = ('male', 'female', 'other', 'unknown')
MARITAL_STATUSES = ('single', 'married', 'divorced', 'widowed', 'separated')
OCCUPATION_TYPES = ('sedentary', 'moderate', 'heavy')
TREATMENT_STATUSES = ('draft', 'active', 'completed', 'cancelled')
DOSHAS = ('vata', 'pitta', 'kapha')

# Timeline entry types with their display labels.
ENTRY_TYPES = {
    'assessment': 'Assessment',
    'treatment': 'Treatment',
    'observation': 'Observation',
    'lab_result': 'Lab Result',
    'symptom_update': 'Symptom Update',
    'therapy_session': 'Therapy Session',
    'followup': 'Follow-up',
    'note': 'General Note',
}


def _new_id() -> str:
    return str(uuid.uuid4())


def _now() -> str:
    return datetime.now().isoformat()


def _known_fields(cls, data: dict) -> dict:
    """Drops keys that the dataclass does not declare."""
    names = {f.name for f in fields(cls)}
    return {k: v for k, v in (data or {}).items() if k in names}


def _string_list(values) -> List[str]:
    """Normalizes a list-like value into a list of non-empty strings."""
    if not values:
        return []
    if isinstance(values, str):
        values = values.split(',')
    return [str(v).strip() for v in values if str(v).strip()]


@dataclass
class Address:
    """A structured postal address.

    Attributes:
        street (str): Street and house number.
        city (str): City or town.
        state (str): State or province.
        postal_code (str): PIN / postal code.
        country (str): Country name.
        full_address (str): Optional pre-formatted address that overrides the parts.
    """
    street: str = ''
    city: str = ''
    state: str = ''
    postal_code: str = ''
    country: str = ''
    full_address: str = ''

    @classmethod
    def from_dict(cls, data: dict) -> 'Address':
        return cls(**{k: '' if v is None else str(v) for k, v in _known_fields(cls, data).items()})

    def is_empty(self) -> bool:
        return not any(str(v).strip() for v in asdict(self).values())


@dataclass
class EmergencyContact:
    """A structured emergency contact.

    Attributes:
        name (str): Contact's full name.
        relationship (str): Relationship to the patient.
        phone (str): Contact phone number.
        email (str): Optional contact email.
    """
    name: str = ''
    relationship: str = ''
    phone: str = ''
    email: str = ''

    @classmethod
    def from_dict(cls, data: dict) -> 'EmergencyContact':
        return cls(**{k: '' if v is None else str(v) for k, v in _known_fields(cls, data).items()})

    def is_empty(self) -> bool:
        return not any(str(v).strip() for v in asdict(self).values())


AddressValue = Union[str, Address, None]
EmergencyContactValue = Union[str, EmergencyContact, None]


def _address_from(value) -> AddressValue:
    if isinstance(value, dict):
        return Address.from_dict(value)
    return value or None


def _contact_from(value) -> EmergencyContactValue:
    if isinstance(value, dict):
        return EmergencyContact.from_dict(value)
    return value or None


@dataclass
class DoshaScores:
    """Vata, pitta and kapha scores for one assessment axis.

    Scores are non-negative integers. Constructing a triple with a negative score is
    rejected; the assessment form clamps decrements at zero via `clamped`.
    """
    vata: int = 0
    pitta: int = 0
    kapha: int = 0

    def __post_init__(self):
        for dosha in DOSHAS:
            value = getattr(self, dosha)
            if isinstance(value, bool) or int(value) != value:
                raise ValueError(f"{dosha} score must be an integer, got {value!r}")
            if value < 0:
                raise ValueError(f"{dosha} score must be non-negative, got {value}")
            setattr(self, dosha, int(value))

    @classmethod
    def clamped(cls, vata: int, pitta: int, kapha: int) -> 'DoshaScores':
        """Builds a triple with every score clamped at zero."""
        return cls(max(0, int(vata)), max(0, int(pitta)), max(0, int(kapha)))

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> Optional['DoshaScores']:
        if data is None:
            return None
        return cls(**{k: int(v or 0) for k, v in _known_fields(cls, data).items()})

    def as_tuple(self):
        return self.vata, self.pitta, self.kapha


@dataclass
class PatientRecord:
    """Represents a registered patient.

    Attributes:
        name (str): The patient's full name.
        dob (str): Date of birth in ISO format (YYYY-MM-DD), or empty.
        gender (str): One of GENDERS, or empty.
        marital_status (str): One of MARITAL_STATUSES, or empty.
        mobile (str): Primary phone number.
        email (str): Email address.
        address (str | Address): Flat or structured address.
        uhid (str): Clinic-assigned unique health identifier.
        aadhaar_number (str): National ID number.
        abha_id (str): Health-account ID.
        occupation (str): Free-text occupation.
        occupation_type (str): One of OCCUPATION_TYPES, or empty.
        insurance_status (bool): Whether the patient is insured.
        insurance_provider (str): Insurer name when insured.
        preferred_physician (str): Preferred physician's name.
        emergency_contact (str | EmergencyContact): Flat or structured contact.
        family_history (list[str]): Ordered list of family conditions.
        id (str): Unique identifier, generated when not provided.
        created_at (str): ISO timestamp, generated when not provided.
    """
    name: str
    dob: str = ''
    gender: str = ''
    marital_status: str = ''
    mobile: str = ''
    email: str = ''
    address: AddressValue = None
    uhid: str = ''
    aadhaar_number: str = ''
    abha_id: str = ''
    occupation: str = ''
    occupation_type: str = ''
    insurance_status: bool = False
    insurance_provider: str = ''
    preferred_physician: str = ''
    emergency_contact: EmergencyContactValue = None
    family_history: List[str] = field(default_factory=list)
    id: str = field(default_factory=_new_id)
    created_at: str = field(default_factory=_now)

    @classmethod
    def from_dict(cls, data: dict) -> 'PatientRecord':
        values = _known_fields(cls, data)
        # Older records stored the phone number under 'contact'.
        if not values.get('mobile') and data.get('contact'):
            values['mobile'] = data['contact']
        values['address'] = _address_from(values.get('address'))
        values['emergency_contact'] = _contact_from(values.get('emergency_contact'))
        values['family_history'] = _string_list(values.get('family_history'))
        values['insurance_status'] = bool(values.get('insurance_status'))
        for key in ('id', 'created_at'):
            if not values.get(key):
                values.pop(key, None)
        return cls(**values)

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class AssessmentRecord:
    """A constitutional assessment of a patient.

    `prakriti` is the constitutional baseline and `vikriti` the current state; the
    three examination findings are free text.
    """
    patient_id: str
    prakriti: DoshaScores = field(default_factory=DoshaScores)
    vikriti: DoshaScores = field(default_factory=DoshaScores)
    nadi_pariksha: str = ''
    jihva_pariksha: str = ''
    akriti_pariksha: str = ''
    icd11_codes: List[str] = field(default_factory=list)
    lab_results: Dict[str, str] = field(default_factory=dict)
    notes: str = ''
    id: str = field(default_factory=_new_id)
    created_at: str = field(default_factory=_now)

    @classmethod
    def from_dict(cls, data: dict) -> 'AssessmentRecord':
        values = _known_fields(cls, data)
        values['prakriti'] = DoshaScores.from_dict(values.get('prakriti')) or DoshaScores()
        values['vikriti'] = DoshaScores.from_dict(values.get('vikriti')) or DoshaScores()
        values['icd11_codes'] = _string_list(values.get('icd11_codes'))
        values['lab_results'] = {k: str(v) for k, v in (values.get('lab_results') or {}).items() if v}
        for key in ('id', 'created_at'):
            if not values.get(key):
                values.pop(key, None)
        return cls(**values)

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class ShamanaTherapy:
    """Palliative therapy: internal medicines and external therapies."""
    internal_medicines: List[str] = field(default_factory=list)
    external_therapies: List[str] = field(default_factory=list)
    dosage_instructions: str = ''
    duration: str = ''


@dataclass
class ShodhanaTherapy:
    """Purification (panchakarma) protocol."""
    vamana: str = ''
    virechana: str = ''
    basti: str = ''
    nasya: str = ''
    raktamokshana: str = ''
    preparation_phase: str = ''
    main_phase: str = ''
    post_phase: str = ''


@dataclass
class RasayanaPlan:
    """Rejuvenation plan."""
    herbs: List[str] = field(default_factory=list)
    duration: str = ''
    seasonal_considerations: str = ''
    contraindications: List[str] = field(default_factory=list)


@dataclass
class DietPlan:
    foods_to_include: List[str] = field(default_factory=list)
    foods_to_avoid: List[str] = field(default_factory=list)
    meal_timing: str = ''
    cooking_methods: List[str] = field(default_factory=list)
    special_instructions: str = ''


@dataclass
class LifestyleRecommendations:
    daily_routine: str = ''
    exercise: str = ''
    stress_management: str = ''
    sleep_hygiene: str = ''
    seasonal_adaptations: str = ''


@dataclass
class FollowupSchedule:
    frequency: str = ''
    next_visit: str = ''
    assessments_required: List[str] = field(default_factory=list)
    lab_tests: List[str] = field(default_factory=list)


def _plan_from(cls, data):
    """Builds a nested plan dataclass, normalizing its list fields."""
    values = _known_fields(cls, data)
    for f in fields(cls):
        if f.name not in values:
            continue
        if f.type.startswith('List'):
            values[f.name] = _string_list(values[f.name])
        else:
            values[f.name] = values[f.name] or ''
    return cls(**values)


@dataclass
class TreatmentRecord:
    """A multi-part treatment plan prescribed for a patient.

    Attributes:
        patient_id (str): The patient this plan belongs to.
        assessment_id (str): Optional assessment the plan was derived from.
        primary_ayurvedic_diagnosis (str): Primary diagnosis.
        secondary_ayurvedic_diagnoses (list[str]): Secondary diagnoses.
        icd11_diagnoses (list[str]): ICD-11 codes.
        shamana_therapy (ShamanaTherapy): Palliative medicines.
        shodhana_therapy (ShodhanaTherapy): Purification protocol.
        rasayana_plan (RasayanaPlan): Rejuvenation herbs.
        diet_plan (DietPlan): Diet inclusions and exclusions.
        lifestyle_recommendations (LifestyleRecommendations): Routine advice.
        followup_schedule (FollowupSchedule): Follow-up schedule.
        status (str): One of TREATMENT_STATUSES.
    """
    patient_id: str
    assessment_id: Optional[str] = None
    primary_ayurvedic_diagnosis: str = ''
    secondary_ayurvedic_diagnoses: List[str] = field(default_factory=list)
    icd11_diagnoses: List[str] = field(default_factory=list)
    shamana_therapy: ShamanaTherapy = field(default_factory=ShamanaTherapy)
    shodhana_therapy: ShodhanaTherapy = field(default_factory=ShodhanaTherapy)
    rasayana_plan: RasayanaPlan = field(default_factory=RasayanaPlan)
    diet_plan: DietPlan = field(default_factory=DietPlan)
    lifestyle_recommendations: LifestyleRecommendations = field(default_factory=LifestyleRecommendations)
    followup_schedule: FollowupSchedule = field(default_factory=FollowupSchedule)
    status: str = 'draft'
    id: str = field(default_factory=_new_id)
    created_at: str = field(default_factory=_now)

    def __post_init__(self):
        if self.status not in TREATMENT_STATUSES:
            raise ValueError(f"Unknown treatment status: {self.status!r}")

    @classmethod
    def from_dict(cls, data: dict) -> 'TreatmentRecord':
        values = _known_fields(cls, data)
        values['secondary_ayurvedic_diagnoses'] = _string_list(values.get('secondary_ayurvedic_diagnoses'))
        values['icd11_diagnoses'] = _string_list(values.get('icd11_diagnoses'))
        values['shamana_therapy'] = _plan_from(ShamanaTherapy, values.get('shamana_therapy'))
        values['shodhana_therapy'] = _plan_from(ShodhanaTherapy, values.get('shodhana_therapy'))
        values['rasayana_plan'] = _plan_from(RasayanaPlan, values.get('rasayana_plan'))
        values['diet_plan'] = _plan_from(DietPlan, values.get('diet_plan'))
        values['lifestyle_recommendations'] = _plan_from(LifestyleRecommendations, values.get('lifestyle_recommendations'))
        values['followup_schedule'] = _plan_from(FollowupSchedule, values.get('followup_schedule'))
        values['status'] = values.get('status') or 'draft'
        values['assessment_id'] = values.get('assessment_id') or None
        for key in ('id', 'created_at'):
            if not values.get(key):
                values.pop(key, None)
        return cls(**values)

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class TimelineEntry:
    """A typed note on the patient's clinical timeline.

    Attributes:
        patient_id (str): The patient this entry belongs to.
        entry_type (str): One of the ENTRY_TYPES keys.
        title (str): Short title.
        notes (str): Short notes.
        details (str): Long-form details.
        reference_id (str): Optional id of a related assessment or treatment.
    """
    patient_id: str
    entry_type: str = 'note'
    title: str = ''
    notes: str = ''
    details: str = ''
    reference_id: Optional[str] = None
    id: str = field(default_factory=_new_id)
    created_at: str = field(default_factory=_now)

    def __post_init__(self):
        if self.entry_type not in ENTRY_TYPES:
            raise ValueError(f"Unknown timeline entry type: {self.entry_type!r}")

    @classmethod
    def from_dict(cls, data: dict) -> 'TimelineEntry':
        values = _known_fields(cls, data)
        values['entry_type'] = values.get('entry_type') or 'note'
        for key in ('id', 'created_at'):
            if not values.get(key):
                values.pop(key, None)
        return cls(**values)

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class AyurvedicHerb:
    """A herb in the clinic's materia medica catalog."""
    sanskrit_name: str
    hindi_name: str = ''
    common_name: str = ''
    latin_name: str = ''
    primary_dosha_effect: str = ''
    indications: List[str] = field(default_factory=list)
    contraindications: List[str] = field(default_factory=list)
    standard_dosage: str = ''
    id: str = field(default_factory=_new_id)

    @classmethod
    def from_dict(cls, data: dict) -> 'AyurvedicHerb':
        values = _known_fields(cls, data)
        values['indications'] = _string_list(values.get('indications'))
        values['contraindications'] = _string_list(values.get('contraindications'))
        if not values.get('id'):
            values.pop('id', None)
        return cls(**values)

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class DiseaseMapping:
    """Maps an ICD-11 disease to its Ayurvedic counterpart."""
    icd11_code: str
    icd11_name: str
    ayurvedic_name: str
    ayurvedic_synonyms: List[str] = field(default_factory=list)
    dosha_involvement: DoshaScores = field(default_factory=DoshaScores)
    primary_dosha: str = ''
    id: str = field(default_factory=_new_id)

    @classmethod
    def from_dict(cls, data: dict) -> 'DiseaseMapping':
        values = _known_fields(cls, data)
        values['ayurvedic_synonyms'] = _string_list(values.get('ayurvedic_synonyms'))
        values['dosha_involvement'] = DoshaScores.from_dict(values.get('dosha_involvement')) or DoshaScores()
        if not values.get('id'):
            values.pop('id', None)
        return cls(**values)

    def to_dict(self) -> dict:
        return asdict(self)
