"""
This module provides the AI-generated Ayurvedic analysis of a patient.

It is responsible for:
- Building the fixed analysis prompt from a patient summary.
- Calling one of the interchangeable text-generation backends (OpenAI chat completions,
  Anthropic messages, or a local mock used for demos).
- Normalizing every outcome into an `AnalysisResult`, so callers only need to check
  `result.error` and never handle exceptions.

The backend is chosen from `AppConfig.ai_service` through the `PROVIDERS` table each time
`AnalysisDispatcher.analyze` is called.
"""
# ayurcare/analysis.py

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Type

import requests

from ayurcare.config import AppConfig

logger = logging.getLogger(__name__)

OPENAI_URL = 'https://api.openai.com/v1/chat/completions'
ANTHROPIC_URL = 'https://api.anthropic.com/v1/messages'
ANTHROPIC_VERSION = '2023-06-01'
MAX_TOKENS = 2000
TEMPERATURE = 0.7
NO_ANALYSIS = 'No analysis generated'

SYSTEM_PROMPT = (
    'You are an expert Ayurvedic practitioner with deep knowledge of doshas, herbs, '
    'and traditional healing methods. Provide detailed, practical advice.'
)

PROMPT_TEMPLATE = """
Please analyze this patient from an Ayurvedic perspective:

{patient_summary}

Please provide a comprehensive Ayurvedic analysis including:

1. **Prakriti Assessment** (Constitutional Analysis):
   - Vata, Pitta, Kapha balance
   - Primary and secondary dosha identification
   - Physical and mental characteristics

2. **Vikriti Assessment** (Current Imbalance):
   - Current dosha imbalances
   - Symptoms and signs
   - Seasonal and lifestyle factors

3. **Dietary Recommendations**:
   - Foods to favor and avoid
   - Meal timing and preparation
   - Spices and herbs beneficial

4. **Lifestyle Recommendations**:
   - Daily routine (Dinacharya)
   - Exercise and yoga suggestions
   - Sleep and stress management

5. **Herbal Recommendations**:
   - Specific herbs for balance
   - Formulations to consider
   - Precautions and contraindications

6. **Therapeutic Approaches**:
   - Panchakarma recommendations
   - Massage and bodywork
   - Meditation and breathing techniques

Please provide practical, actionable advice based on Ayurvedic principles. Format the response in markdown.
"""

MOCK_ANALYSIS_TEMPLATE = """
## Ayurvedic Analysis for {patient_name}

### Prakriti Assessment (Constitutional Analysis)
Based on the patient's profile, this appears to be a **Vata-Pitta** constitution.

**Primary Dosha: Vata**
- Quick thinking and creative mind
- Variable appetite and digestion
- Light, thin build with dry skin

**Secondary Dosha: Pitta**
- Strong metabolism and sharp intellect
- Sensitive to heat and spicy foods

### Vikriti Assessment (Current Imbalance)
- **Vata aggravation**: stress, irregular routine, dry skin
- **Pitta aggravation**: work-related stress, digestive complaints

### Dietary Recommendations
**Foods to Favor:** warm cooked meals, ghee, sesame oil, root vegetables, soaked nuts.
**Foods to Avoid:** cold and raw foods, carbonated drinks, excess caffeine, very spicy food.
**Meal Timing:** regular meals (7-8 AM, 12-1 PM, 6-7 PM) with a light dinner.

### Lifestyle Recommendations
- Wake before 6 AM and keep a fixed daily routine (Dinacharya)
- Abhyanga (self-massage) with warm sesame oil
- Gentle yoga, walking and pranayama
- 7-8 hours of sleep

### Herbal Recommendations
- **Ashwagandha** for stress and energy
- **Brahmi** for mental clarity
- **Triphala** for digestion
- Review contraindications with the treating physician before starting any herb.

### Therapeutic Approaches
- Abhyanga, Shirodhara and Nasya
- Daily meditation (20-30 minutes) and deep breathing

*Note: This is a demonstration analysis generated without contacting an AI provider.*
"""


@dataclass
class AnalysisRequest:
    """The input of one analysis call.

    Attributes:
        patient_summary (str): Summary text from `compose_patient_summary`.
        patient_name (str): The patient's display name.
        patient_id (str): Optional record id; the in-flight guard uses it over the name.
    """
    patient_summary: str
    patient_name: str
    patient_id: Optional[str] = None


@dataclass
class AnalysisResult:
    """The normalized outcome of one analysis call.

    Exactly one of these holds: `analysis` is non-empty and `error` is None, or
    `analysis` is empty and `error` carries a human-readable message.
    """
    analysis: str = ''
    error: Optional[str] = None

    @classmethod
    def success(cls, analysis: str) -> 'AnalysisResult':
        return cls(analysis=analysis)

    @classmethod
    def failure(cls, message: str) -> 'AnalysisResult':
        return cls(analysis='', error=message or 'Failed to analyze with AI')

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict:
        if self.error is None:
            return {'analysis': self.analysis}
        return {'analysis': '', 'error': self.error}


class ProviderError(Exception):
    """Raised inside a provider when a call cannot produce an analysis."""


def build_prompt(patient_summary: str) -> str:
    return PROMPT_TEMPLATE.format(patient_summary=patient_summary)


def _completion_text(content, label: str) -> str:
    if content is None:
        return ''
    if not isinstance(content, str):
        raise ProviderError(f"{label} API returned an unreadable completion")
    return content


class AnalysisProvider:
    """Base class for analysis backends.

    Subclasses implement `_generate`, raising `ProviderError` on failure. `analyze`
    turns every failure into an error result.
    """
    name = 'provider'
    label = 'AI'

    def __init__(self, config: AppConfig, http=None, sleep: Callable[[float], None] = time.sleep):
        self.config = config
        self.http = http or requests
        self.sleep = sleep

    def analyze(self, request: AnalysisRequest) -> AnalysisResult:
        try:
            text = self._generate(request)
        except ProviderError as e:
            logger.error("%s analysis failed for %s: %s", self.label, request.patient_name, e)
            return AnalysisResult.failure(str(e))
        except requests.RequestException as e:
            logger.error("%s request failed for %s: %s", self.label, request.patient_name, e)
            return AnalysisResult.failure(str(e) or f"Failed to analyze with {self.label}")
        if not isinstance(text, str) or not text.strip():
            logger.warning("%s returned an empty completion for %s", self.label, request.patient_name)
            return AnalysisResult.failure(NO_ANALYSIS)
        return AnalysisResult.success(text)

    def _generate(self, request: AnalysisRequest) -> str:
        raise NotImplementedError

    def _post_json(self, url: str, headers: Dict[str, str], body: dict):
        """Sends one POST request and returns the decoded JSON body."""
        response = self.http.post(url, headers=headers, json=body, timeout=self.config.request_timeout_seconds)
        if not response.ok:
            raise ProviderError(f"{self.label} API error: {response.status_code} {response.reason}")
        try:
            return response.json()
        except ValueError as e:
            raise ProviderError(f"{self.label} API returned an unreadable response") from e


class OpenAIProvider(AnalysisProvider):
    name = 'openai'
    label = 'OpenAI'

    def _generate(self, request: AnalysisRequest) -> str:
        api_key = self.config.openai_api_key
        if not api_key:
            raise ProviderError('OpenAI API key not found. Please add OPENAI_API_KEY to your secrets or environment')
        data = self._post_json(
            OPENAI_URL,
            headers={
                'Content-Type': 'application/json',
                'Authorization': f'Bearer {api_key}',
            },
            body={
                'model': self.config.openai_model,
                'messages': [
                    {'role': 'system', 'content': SYSTEM_PROMPT},
                    {'role': 'user', 'content': build_prompt(request.patient_summary)},
                ],
                'max_tokens': MAX_TOKENS,
                'temperature': TEMPERATURE,
            },
        )
        try:
            content = data['choices'][0]['message']['content']
        except (KeyError, IndexError, TypeError):
            return ''
        return _completion_text(content, self.label)


class ClaudeProvider(AnalysisProvider):
    name = 'claude'
    label = 'Claude'

    def _generate(self, request: AnalysisRequest) -> str:
        api_key = self.config.anthropic_api_key
        if not api_key:
            raise ProviderError('Anthropic API key not found. Please add ANTHROPIC_API_KEY to your secrets or environment')
        data = self._post_json(
            ANTHROPIC_URL,
            headers={
                'Content-Type': 'application/json',
                'x-api-key': api_key,
                'anthropic-version': ANTHROPIC_VERSION,
            },
            body={
                'model': self.config.anthropic_model,
                'max_tokens': MAX_TOKENS,
                'messages': [
                    {'role': 'user', 'content': build_prompt(request.patient_summary)},
                ],
            },
        )
        try:
            content = data['content'][0]['text']
        except (KeyError, IndexError, TypeError):
            return ''
        return _completion_text(content, self.label)


class MockProvider(AnalysisProvider):
    """Offline backend for demos: waits, then returns a fixed markdown analysis."""
    name = 'mock'
    label = 'Mock AI'

    def _generate(self, request: AnalysisRequest) -> str:
        self.sleep(self.config.mock_delay_seconds)
        return MOCK_ANALYSIS_TEMPLATE.format(patient_name=request.patient_name)


PROVIDERS: Dict[str, Type[AnalysisProvider]] = {
    'openai': OpenAIProvider,
    'claude': ClaudeProvider,
    'mock': MockProvider,
}


class AnalysisDispatcher:
    """Routes analysis requests to the configured backend.

    A dispatcher is shared by every Streamlit session, so it keeps a small guard that
    rejects a second request for a patient whose analysis is still running.
    """

    def __init__(self, config: AppConfig, http=None, sleep: Callable[[float], None] = time.sleep):
        """Initializes the dispatcher.

        Args:
            config: Application settings; `ai_service` selects the backend.
            http: Object exposing `post(url, headers=, json=, timeout=)`. Defaults to `requests`.
            sleep: Delay function used by the mock backend.
        """
        self.config = config
        self._http = http
        self._sleep = sleep
        self._in_flight = set()
        self._lock = threading.Lock()

    def provider(self) -> AnalysisProvider:
        provider_cls = PROVIDERS.get(self.config.ai_service, MockProvider)
        return provider_cls(self.config, http=self._http, sleep=self._sleep)

    def analyze(self, request: AnalysisRequest) -> AnalysisResult:
        """Generates an Ayurvedic analysis for one patient.

        Args:
            request: The patient summary and name.

        Returns:
            AnalysisResult: The analysis on success, or an error message on failure.
        """
        if not request.patient_summary or not request.patient_summary.strip():
            return AnalysisResult.failure('Patient summary is empty')

        key = request.patient_id or request.patient_name
        with self._lock:
            if key in self._in_flight:
                return AnalysisResult.failure(f"Analysis already in progress for {request.patient_name}")
            self._in_flight.add(key)
        try:
            provider = self.provider()
            logger.info("Requesting %s analysis for %s", provider.name, key)
            return provider.analyze(request)
        finally:
            with self._lock:
                self._in_flight.discard(key)

    def is_in_flight(self, key: str) -> bool:
        """Checks a patient id (or, for requests without one, a patient name)."""
        with self._lock:
            return key in self._in_flight


def analyze_patient_with_ai(config: AppConfig, patient_summary: str, patient_name: str) -> dict:
    """Convenience wrapper returning the `{analysis, error}` dictionary shape."""
    dispatcher = AnalysisDispatcher(config)
    return dispatcher.analyze(AnalysisRequest(patient_summary, patient_name)).to_dict()
