"""
Document classifier collaborator.

Given a file, the classifier guesses which document it is and how sure
it is (0-100). Anything else it returns is treated as a failure.
"""

from dataclasses import dataclass
from typing import Optional, Protocol

import httpx

from onboarding.core.logging import get_logger
from onboarding.services.common.errors import ClassifierError

logger = get_logger(__name__)


@dataclass(frozen=True)
class ClassifierResult:
    label: str
    confidence: float


class DocumentClassifier(Protocol):
    def classify(self, file_name: str, content: bytes, content_type: str) -> ClassifierResult:
        ...


def parse_classifier_payload(payload) -> ClassifierResult:
    """Accept ``{label|document_type, confidence}`` and reject anything malformed."""
    if not isinstance(payload, dict):
        raise ClassifierError("Classifier response is not an object")

    label = payload.get("label", payload.get("document_type"))
    if not isinstance(label, str) or not label.strip():
        raise ClassifierError("Classifier response has no label")

    confidence = payload.get("confidence")
    if isinstance(confidence, bool) or not isinstance(confidence, (int, float)):
        raise ClassifierError("Classifier response has no numeric confidence")
    if not 0 <= confidence <= 100:
        raise ClassifierError(f"Classifier confidence {confidence} is outside 0-100")

    return ClassifierResult(label=label.strip(), confidence=float(confidence))


class HttpDocumentClassifier:
    """Posts the file as multipart form data to a classification endpoint."""

    def __init__(
        self,
        url: str,
        api_key: Optional[str] = None,
        timeout: float = 30.0,
        client: Optional[httpx.Client] = None,
    ):
        if not url:
            raise ClassifierError("Classifier URL is not configured")
        self.url = url
        self.api_key = api_key
        self.client = client or httpx.Client(timeout=timeout)

    def classify(self, file_name: str, content: bytes, content_type: str) -> ClassifierResult:
        headers = {}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        try:
            response = self.client.post(
                self.url,
                files={"file": (file_name, content, content_type)},
                headers=headers,
            )
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as e:
            logger.warning(f"Classifier request failed: {e}", extra={"file_name": file_name})
            raise ClassifierError(str(e), details={"file_name": file_name}) from e
        except ValueError as e:
            raise ClassifierError("Classifier returned invalid JSON") from e

        return parse_classifier_payload(payload)

    def close(self) -> None:
        self.client.close()
