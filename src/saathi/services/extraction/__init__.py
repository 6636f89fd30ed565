"""Multi-modal signal extraction services."""

from saathi.services.extraction.extraction_service import ModalityExtractionService
from saathi.services.extraction.facial_extractor import FacialSignalExtractor
from saathi.services.extraction.text_extractor import TextSignalExtractor
from saathi.services.extraction.voice_extractor import VoiceSignalExtractor

__all__ = [
    "FacialSignalExtractor",
    "ModalityExtractionService",
    "TextSignalExtractor",
    "VoiceSignalExtractor",
]
