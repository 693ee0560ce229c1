"""
This module provides the record store and query surface for the AyurCare application.

It defines the `RecordService` class, which is responsible for:
- Loading and saving all records to an encrypted JSON file (`records.json`).
- Creating patients, assessments, treatment plans and timeline entries.
- Listing a patient's records newest-first, which is the order the summary expects.
- Patient search, pagination and per-patient statistics for the dashboard.
- Dosha imbalance analysis (vikriti compared to prakriti) for the latest assessment.
- The herb and disease-mapping catalogs and their text search.

Records are created and read, never edited, with the single exception of a treatment
plan's status.
"""
# ayurcare/records.py

import json
import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Dict, List, Optional

from cryptography.fernet import InvalidToken

from ayurcare.models import (
    DOSHAS,
    TREATMENT_STATUSES,
    AssessmentRecord,
    AyurvedicHerb,
    DiseaseMapping,
    PatientRecord,
    TimelineEntry,
    TreatmentRecord,
)

logger = logging.getLogger(__name__)

DATA_FILE = 'records.json'
COLLECTIONS = ('patients', 'assessments', 'treatments', 'timeline', 'herbs', 'diseases')
SEARCH_LIMIT = 20


@dataclass
class PaginatedPatients:
    """One page of the patient list."""
    data: List[PatientRecord]
    total: int
    page: int
    limit: int
    has_more: bool


@dataclass
class DoshaAnalysis:
    """The latest assessment's vikriti compared to prakriti.

    Each imbalance is vikriti minus prakriti; `primary_imbalance` is the dosha with the
    largest absolute imbalance.
    """
    patient_id: str
    patient_name: str
    prakriti: Dict[str, int]
    vikriti: Dict[str, int]
    imbalance: Dict[str, int]
    primary_imbalance: str
    assessment_date: str


def _newest_first(records: List[dict]) -> List[dict]:
    return sorted(records, key=lambda r: r.get('created_at', ''), reverse=True)


def _matches(query: str, *values) -> bool:
    query = query.lower()
    for value in values:
        if isinstance(value, (list, tuple)):
            if any(query in str(v).lower() for v in value):
                return True
        elif value and query in str(value).lower():
            return True
    return False


class RecordService:
    """Manages all patient records for the AyurCare application."""

    def __init__(self, data_file: str = DATA_FILE, encryptor=None):
        """Initializes the service and loads the record store.

        Args:
            data_file (str): Path of the encrypted JSON file.
            encryptor: Object with `encrypt(bytes)` / `decrypt(bytes)`, usually a `Fernet`.
        """
        if encryptor is None:
            from ayurcare.encryption import load_or_create_encryptor
            encryptor = load_or_create_encryptor()
        self.data_file = data_file
        self.encryptor = encryptor
        self._data = self._load_data()

    def _empty_dataset(self) -> dict:
        return {name: [] for name in COLLECTIONS}

    def _load_data(self) -> dict:
        """Loads and decrypts the record store.

        Returns:
            dict: The loaded data, or a fresh dataset if the file is missing or unreadable.
        """
        try:
            with open(self.data_file, 'r') as f:
                encrypted_data = f.read()
            if not encrypted_data:
                return self._empty_dataset()
            decrypted_data = self.encryptor.decrypt(encrypted_data.encode()).decode()
            data = json.loads(decrypted_data)
        except FileNotFoundError:
            logger.info("No record store at %s, starting with a new dataset", self.data_file)
            return self._empty_dataset()
        except (InvalidToken, json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.warning("Could not load record store %s (%s). Starting with a new dataset.",
                           self.data_file, e.__class__.__name__)
            return self._empty_dataset()
        for name in COLLECTIONS:
            data.setdefault(name, [])
        return data

    def _save_data(self):
        """Encrypts and saves the current data to the JSON file."""
        with open(self.data_file, 'w') as f:
            data_to_encrypt = json.dumps(self._data, indent=4)
            encrypted_data = self.encryptor.encrypt(data_to_encrypt.encode())
            f.write(encrypted_data.decode())

    def _require_patient(self, patient_id: str):
        if not self._find('patients', patient_id):
            raise KeyError(f"Unknown patient: {patient_id}")

    def _find(self, collection: str, record_id: str) -> Optional[dict]:
        for record in self._data[collection]:
            if record.get('id') == record_id:
                return record
        return None

    def _for_patient(self, collection: str, patient_id: str) -> List[dict]:
        return _newest_first([r for r in self._data[collection] if r.get('patient_id') == patient_id])

    # Patients

    def create_patient(self, patient: PatientRecord) -> PatientRecord:
        """Stores a new patient.

        Raises:
            ValueError: If the patient has no name.
        """
        if not patient.name or not patient.name.strip():
            raise ValueError("Patient name is required")
        patient.name = patient.name.strip()
        self._data['patients'].append(patient.to_dict())
        self._save_data()
        logger.info("Created patient %s", patient.id)
        return patient

    def bulk_create_patients(self, patients: List[PatientRecord]) -> List[PatientRecord]:
        for patient in patients:
            if not patient.name or not patient.name.strip():
                raise ValueError("Patient name is required")
        self._data['patients'].extend(p.to_dict() for p in patients)
        self._save_data()
        return patients

    def get_patient(self, patient_id: str) -> Optional[PatientRecord]:
        record = self._find('patients', patient_id)
        return PatientRecord.from_dict(record) if record else None

    def get_all_patients(self) -> List[PatientRecord]:
        return [PatientRecord.from_dict(r) for r in _newest_first(self._data['patients'])]

    def get_patients(self, page: int = 1, limit: int = 10) -> PaginatedPatients:
        """Returns one page of patients, newest first.

        Args:
            page (int): 1-based page number.
            limit (int): Page size.
        """
        page = max(1, page)
        limit = max(1, limit)
        records = _newest_first(self._data['patients'])
        start = (page - 1) * limit
        end = start + limit
        return PaginatedPatients(
            data=[PatientRecord.from_dict(r) for r in records[start:end]],
            total=len(records),
            page=page,
            limit=limit,
            has_more=len(records) > end,
        )

    def search_patients(self, query: str) -> List[PatientRecord]:
        """Searches patients by name, UHID or national ID (case-insensitive)."""
        if not query or not query.strip():
            return self.get_all_patients()[:SEARCH_LIMIT]
        query = query.strip()
        matches = [
            r for r in _newest_first(self._data['patients'])
            if _matches(query, r.get('name'), r.get('uhid'), r.get('aadhaar_number'))
        ]
        return [PatientRecord.from_dict(r) for r in matches[:SEARCH_LIMIT]]

    def get_patient_stats(self, patient_id: str) -> Optional[dict]:
        """Returns the patient with counts of their assessments, treatments and timeline entries."""
        patient = self.get_patient(patient_id)
        if not patient:
            return None
        return {
            'patient': patient,
            'stats': {
                'assessments': len(self._for_patient('assessments', patient_id)),
                'treatments': len(self._for_patient('treatments', patient_id)),
                'timeline_entries': len(self._for_patient('timeline', patient_id)),
            },
        }

    def get_dashboard_metrics(self, today: Optional[date] = None) -> dict:
        """Returns the dashboard counters: total, new this month and active records."""
        today = today or date.today()
        new_this_month = 0
        for record in self._data['patients']:
            try:
                created = datetime.fromisoformat(record.get('created_at', ''))
            except ValueError:
                continue
            if created.year == today.year and created.month == today.month:
                new_this_month += 1
        total = len(self._data['patients'])
        return {'total_patients': total, 'new_this_month': new_this_month, 'active_records': total}

    # Assessments

    def create_assessment(self, assessment: AssessmentRecord) -> AssessmentRecord:
        self._require_patient(assessment.patient_id)
        self._data['assessments'].append(assessment.to_dict())
        self._save_data()
        logger.info("Created assessment %s for patient %s", assessment.id, assessment.patient_id)
        return assessment

    def bulk_create_assessments(self, assessments: List[AssessmentRecord]) -> List[AssessmentRecord]:
        for assessment in assessments:
            self._require_patient(assessment.patient_id)
        self._data['assessments'].extend(a.to_dict() for a in assessments)
        self._save_data()
        return assessments

    def get_patient_assessments(self, patient_id: str) -> List[AssessmentRecord]:
        return [AssessmentRecord.from_dict(r) for r in self._for_patient('assessments', patient_id)]

    def get_patient_dosha_analysis(self, patient_id: str) -> Optional[DoshaAnalysis]:
        """Compares the latest assessment's vikriti with its prakriti.

        Returns:
            DoshaAnalysis or None: None if the patient has no assessment.
        """
        patient = self.get_patient(patient_id)
        assessments = self.get_patient_assessments(patient_id)
        if not patient or not assessments:
            return None
        latest = assessments[0]
        prakriti = dict(zip(DOSHAS, latest.prakriti.as_tuple()))
        vikriti = dict(zip(DOSHAS, latest.vikriti.as_tuple()))
        imbalance = {d: vikriti[d] - prakriti[d] for d in DOSHAS}
        # max() keeps the first of equal values, so ties resolve in vata, pitta, kapha order.
        primary = max(DOSHAS, key=lambda d: abs(imbalance[d]))
        return DoshaAnalysis(
            patient_id=patient.id,
            patient_name=patient.name,
            prakriti=prakriti,
            vikriti=vikriti,
            imbalance=imbalance,
            primary_imbalance=primary,
            assessment_date=latest.created_at,
        )

    def get_dosha_imbalances(self) -> List[DoshaAnalysis]:
        """Returns the dosha analysis of every assessed patient, newest assessment first."""
        analyses = []
        for record in self._data['patients']:
            analysis = self.get_patient_dosha_analysis(record['id'])
            if analysis:
                analyses.append(analysis)
        return sorted(analyses, key=lambda a: a.assessment_date, reverse=True)

    # Treatments

    def create_treatment(self, treatment: TreatmentRecord) -> TreatmentRecord:
        self._require_patient(treatment.patient_id)
        if treatment.assessment_id and not self._find('assessments', treatment.assessment_id):
            raise KeyError(f"Unknown assessment: {treatment.assessment_id}")
        self._data['treatments'].append(treatment.to_dict())
        self._save_data()
        logger.info("Created %s treatment %s for patient %s", treatment.status, treatment.id, treatment.patient_id)
        return treatment

    def get_patient_treatments(self, patient_id: str) -> List[TreatmentRecord]:
        return [TreatmentRecord.from_dict(r) for r in self._for_patient('treatments', patient_id)]

    def update_treatment_status(self, treatment_id: str, status: str) -> Optional[TreatmentRecord]:
        """Changes a treatment plan's status.

        Returns:
            TreatmentRecord or None: The updated plan, or None if it does not exist.

        Raises:
            ValueError: If `status` is not a known treatment status.
        """
        if status not in TREATMENT_STATUSES:
            raise ValueError(f"Unknown treatment status: {status!r}")
        record = self._find('treatments', treatment_id)
        if not record:
            return None
        record['status'] = status
        self._save_data()
        return TreatmentRecord.from_dict(record)

    # Timeline

    def create_timeline_entry(self, entry: TimelineEntry) -> TimelineEntry:
        self._require_patient(entry.patient_id)
        self._data['timeline'].append(entry.to_dict())
        self._save_data()
        return entry

    def get_patient_timeline(self, patient_id: str) -> List[TimelineEntry]:
        return [TimelineEntry.from_dict(r) for r in self._for_patient('timeline', patient_id)]

    # Catalog

    def add_herb(self, herb: AyurvedicHerb) -> AyurvedicHerb:
        self._data['herbs'].append(herb.to_dict())
        self._save_data()
        return herb

    def search_herbs(self, query: str) -> List[AyurvedicHerb]:
        """Searches herbs by Sanskrit, Hindi or common name, and by indication."""
        herbs = sorted(self._data['herbs'], key=lambda h: h.get('sanskrit_name', ''))
        matches = [
            h for h in herbs
            if _matches(query, h.get('sanskrit_name'), h.get('hindi_name'), h.get('common_name'), h.get('indications', []))
        ]
        return [AyurvedicHerb.from_dict(h) for h in matches[:SEARCH_LIMIT]]

    def get_herbs_by_dosha(self, dosha: str) -> List[AyurvedicHerb]:
        herbs = sorted(self._data['herbs'], key=lambda h: h.get('sanskrit_name', ''))
        return [AyurvedicHerb.from_dict(h) for h in herbs if h.get('primary_dosha_effect') == dosha]

    def add_disease_mapping(self, mapping: DiseaseMapping) -> DiseaseMapping:
        self._data['diseases'].append(mapping.to_dict())
        self._save_data()
        return mapping

    def search_disease_mappings(self, query: str) -> List[DiseaseMapping]:
        """Searches disease mappings by ICD-11 name, Ayurvedic name or synonym."""
        diseases = sorted(self._data['diseases'], key=lambda d: d.get('icd11_name', ''))
        matches = [
            d for d in diseases
            if _matches(query, d.get('icd11_name'), d.get('ayurvedic_name'), d.get('ayurvedic_synonyms', []))
        ]
        return [DiseaseMapping.from_dict(d) for d in matches[:SEARCH_LIMIT]]

    def get_disease_by_icd11(self, icd11_code: str) -> Optional[DiseaseMapping]:
        for record in self._data['diseases']:
            if record.get('icd11_code') == icd11_code:
                return DiseaseMapping.from_dict(record)
        return None

    # Export

    def get_dataset(self) -> dict:
        """Returns the raw dataset for export."""
        return self._data
